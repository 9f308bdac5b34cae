# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

from barefoot.bfc.bfc import main

COUNTER = """'use client'
export function Counter() {
  const [count, setCount] = createSignal(0)
  return <button onClick={() => setCount(count() + 1)}>{count()}</button>
}
"""


def _write(tmp_path: Path, name: str, text: str) -> Path:
	path = tmp_path / name
	path.write_text(text, encoding="utf-8")
	return path


def test_writes_outputs_next_to_the_source(tmp_path: Path) -> None:
	src = _write(tmp_path, "Counter.tsx", COUNTER)
	assert main([str(src)]) == 0
	assert (tmp_path / "Counter.hono.tsx").exists()
	assert "initCounter" in (tmp_path / "Counter.client.js").read_text(encoding="utf-8")


def test_output_directory_backend_and_ir(tmp_path: Path) -> None:
	src = _write(tmp_path, "Counter.tsx", COUNTER)
	out = tmp_path / "dist"
	assert main([str(src), "--backend", "jinja", "--emit-ir", "-o", str(out)]) == 0
	assert sorted(p.name for p in out.iterdir()) == ["Counter.client.js", "Counter.ir.json", "Counter.jinja"]


def test_json_diagnostics_and_exit_code(tmp_path: Path, capsys) -> None:
	src = _write(tmp_path, "Counter.tsx", COUNTER.replace("'use client'\n", ""))
	assert main([str(src), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	(diag,) = [d for d in payload["diagnostics"] if d["severity"] == "error"]
	assert diag["code"] == "BF001"
	assert diag["file"] == str(src)
	assert not (tmp_path / "Counter.hono.tsx").exists()


def test_human_diagnostics_go_to_stderr(tmp_path: Path, capsys) -> None:
	src = _write(tmp_path, "Counter.tsx", COUNTER.replace("'use client'\n", ""))
	assert main([str(src)]) == 1
	err = capsys.readouterr().err
	assert "ERROR[BF001]" in err
	assert f"--> {src}:" in err
	assert "= help: Add 'use client' at the top of the file" in err


def test_missing_file_is_an_error(tmp_path: Path, capsys) -> None:
	assert main([str(tmp_path / "Nope.tsx"), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["diagnostics"][0]["file"] == str(tmp_path / "Nope.tsx")


def test_verbose_log_file(tmp_path: Path) -> None:
	src = _write(tmp_path, "Counter.tsx", COUNTER)
	log = tmp_path / "bfc.log"
	assert main([str(src), "-v", "--log-file", str(log)]) == 0
	assert "compile" in log.read_text(encoding="utf-8")
