# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json

import pytest

from barefoot.bfc import CompileOptions, compile

COUNTER = """'use client'
export function Counter() {
  const [count, setCount] = createSignal(0)
  return (
    <div>
      <p>{count()}</p>
      <button onClick={() => setCount(n => n + 1)}>+1</button>
    </div>
  )
}
"""

BADGE = "export function Badge({ label }: { label: string }) {\n  return <span>{label}</span>\n}\n"


def test_interactive_component_gets_template_and_script() -> None:
	result = compile(COUNTER, "Counter.tsx")
	assert result.ok and result.component == "Counter"
	assert [(f.type, f.suffix) for f in result.files] == [("template", ".hono.tsx"), ("script", ".client.js")]
	assert "initCounter" in result.file("script").content


def test_static_component_gets_only_a_template() -> None:
	result = compile(BADGE, "Badge.tsx", CompileOptions(backend="jinja"))
	assert [(f.type, f.suffix) for f in result.files] == [("template", ".jinja")]
	assert result.file("script") is None


def test_emit_ir_adds_a_json_dump() -> None:
	result = compile(COUNTER, "Counter.tsx", CompileOptions(emit_ir=True))
	dump = json.loads(result.file("ir").content)
	assert dump["name"] == "Counter" and dump["interactive"]
	assert sorted(dump["slots"]) == ["0", "1"]


def test_errors_suppress_every_file() -> None:
	result = compile(COUNTER.replace("'use client'\n", ""), "Counter.tsx")
	assert not result.ok
	assert result.files == []
	assert [e.code for e in result.errors if e.is_error] == ["BF001"]
	assert result.errors[0].span.file == "Counter.tsx"


def test_warnings_still_produce_output() -> None:
	src = """'use client'
export function Names() {
  const [names, setNames] = createSignal(['a'])
  return <ul>{names().map((n) => <li>{n}</li>)}</ul>
}
"""
	result = compile(src, "Names.tsx")
	assert result.ok
	assert [(e.code, e.severity) for e in result.errors] == [("BF023", "warning")]
	assert result.file("script") is not None


def test_syntax_error_is_reported_not_raised() -> None:
	result = compile("export function Broken() {\n  return <div><span></div>\n}\n", "Broken.tsx")
	assert result.files == []
	assert result.errors[0].code == "BF020"
	assert result.errors[0].span.line is not None


def test_component_selection() -> None:
	src = BADGE + "export function Other() {\n  return <b>x</b>\n}\n"
	assert compile(src, "Both.tsx").component == "Badge"
	result = compile(src, "Both.tsx", CompileOptions(component="Other"))
	assert result.component == "Other"
	missing = compile(src, "Both.tsx", CompileOptions(component="Nope"))
	assert [e.code for e in missing.errors] == ["BF040"]


def test_runtime_module_is_configurable() -> None:
	result = compile(COUNTER, "Counter.tsx", CompileOptions(runtime_module="/static/barefoot.js"))
	assert "from '/static/barefoot.js'" in result.file("script").content


def test_unknown_backend_is_rejected() -> None:
	with pytest.raises(ValueError):
		CompileOptions(backend="vue")
