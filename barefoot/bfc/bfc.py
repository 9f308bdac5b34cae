# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line driver for the component compiler.

  python -m barefoot.bfc FILE... [--backend hono|jinja] [--component NAME]
      [--emit-ir] [-o DIR] [--json] [-v] [--log-file PATH]

Each FILE is compiled independently; outputs are written next to the source
(or into `-o DIR`) as `{stem}.hono.tsx` / `{stem}.jinja`, `{stem}.client.js`
and, with `--emit-ir`, `{stem}.ir.json`. The exit code is 1 if any file
reported an error.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from barefoot.logging import configure_logging, get_logger

from .compiler import BACKENDS, CompileOptions, compile
from .core.diagnostics import CompilerError, ErrorCode, format_error, make_error
from .core.span import Span

logger = get_logger("bfc.cli")


def _output_dir(source: Path, out_dir: Path | None) -> Path:
	return out_dir if out_dir is not None else source.parent


def main(argv: list[str] | None = None) -> int:
	"""
	Compile each source file and write its outputs.

	With --json, prints `{"exit_code", "diagnostics"}` on stdout; otherwise
	diagnostics are rendered with code frames on stderr.
	"""
	parser = argparse.ArgumentParser(description="barefoot component compiler")
	parser.add_argument("source", type=Path, nargs="+", help="Path(s) to component source file(s)")
	parser.add_argument("--backend", choices=BACKENDS, default="hono", help="Server template backend (default: hono)")
	parser.add_argument("--component", type=str, default=None, help="Component to compile (default: the default export)")
	parser.add_argument("--emit-ir", action="store_true", help="Also write the component IR as JSON")
	parser.add_argument("--runtime-module", type=str, default=None, help="Module the client script imports the runtime from")
	parser.add_argument("-o", "--out-dir", type=Path, default=None, help="Directory for generated files (default: next to each source)")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (code/phase/message/severity/file/line/column)",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline decisions at DEBUG")
	parser.add_argument("--log-file", type=Path, default=None, help="Also write DEBUG logs to this file")
	args = parser.parse_args(argv)

	configure_logging(verbose=args.verbose, log_file=args.log_file)
	options = CompileOptions(backend=args.backend, emit_ir=args.emit_ir, component=args.component)
	if args.runtime_module:
		options.runtime_module = args.runtime_module

	diagnostics: List[CompilerError] = []
	sources: dict[str, str] = {}
	for source_path in args.source:
		try:
			source = source_path.read_text(encoding="utf-8")
		except OSError as err:
			diagnostics.append(
				make_error(ErrorCode.COMPONENT_NOT_FOUND, Span(file=str(source_path)), f"cannot read source: {err.strerror}", phase="driver")
			)
			continue
		sources[str(source_path)] = source
		result = compile(source, str(source_path), options)
		diagnostics.extend(result.errors)
		if not result.ok:
			continue
		target_dir = _output_dir(source_path, args.out_dir)
		target_dir.mkdir(parents=True, exist_ok=True)
		stem = source_path.name.split(".")[0]
		for out in result.files:
			target = target_dir / f"{stem}{out.suffix}"
			target.write_text(out.content, encoding="utf-8")
			logger.debug("wrote %s (%s)", target, out.type)

	exit_code = 1 if any(d.is_error for d in diagnostics) else 0
	if args.json:
		print(json.dumps({"exit_code": exit_code, "diagnostics": [d.to_json() for d in diagnostics]}))
	else:
		for diag in diagnostics:
			print(format_error(diag, sources.get(diag.span.file or "")), file=sys.stderr)
	return exit_code


__all__ = ["main"]
