# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Programmatic compile entry point.

Pipeline placement:
  source → analyze → build_ir → backend template (+ client script) → CompileResult

`compile` never raises for problems in the source: parse, analysis, IR and
codegen problems come back as `CompilerError`s. Any error-severity
diagnostic suppresses every output file; warnings ride along with the
output.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import List, Optional

from lark.exceptions import UnexpectedInput

from barefoot.logging import get_logger

from .analysis import SemanticError, analyze
from .analysis.analyzer import parse_error_diagnostic
from .codegen import generate_client, generate_hono, generate_jinja
from .codegen.hono import RUNTIME_MODULES
from .core.diagnostics import CompilerError, has_errors
from .core.span import Span
from .ir import build_ir, component_to_json
from .parser import ParseError

logger = get_logger("bfc.compiler")

BACKENDS = ("hono", "jinja")
TEMPLATE_SUFFIXES = {"hono": ".hono.tsx", "jinja": ".jinja"}
SCRIPT_SUFFIX = ".client.js"
IR_SUFFIX = ".ir.json"


@dataclass
class CompileOptions:
	backend: str = "hono"
	emit_ir: bool = False
	# Component to compile; None picks the default export, then the first exported one.
	component: Optional[str] = None
	runtime_module: str = RUNTIME_MODULES[0]

	def __post_init__(self) -> None:
		if self.backend not in BACKENDS:
			raise ValueError(f"unknown backend '{self.backend}' (expected one of: {', '.join(BACKENDS)})")


@dataclass
class FileOutput:
	"""One generated file: `type` is "template", "script" or "ir"."""

	type: str
	content: str
	# File name suffix appended to the source stem (".hono.tsx", ".client.js", ...).
	suffix: str = ""


@dataclass
class CompileResult:
	files: List[FileOutput] = field(default_factory=list)
	# Errors and warnings, in the order the stages reported them.
	errors: List[CompilerError] = field(default_factory=list)
	component: Optional[str] = None

	@property
	def ok(self) -> bool:
		return not has_errors(self.errors)

	def file(self, kind: str) -> Optional[FileOutput]:
		for out in self.files:
			if out.type == kind:
				return out
		return None


def compile(source: str, path: Optional[str] = None, options: Optional[CompileOptions] = None) -> CompileResult:
	"""Compile one component from `source` (see `CompileOptions.component`)."""
	options = options or CompileOptions()
	analysis = analyze(source, path, options.component)
	result = CompileResult(errors=list(analysis.diagnostics))
	meta = analysis.metadata
	if meta is None or has_errors(result.errors):
		logger.debug("compile %s: analysis failed (%d diagnostics)", path, len(result.errors))
		return result
	result.component = meta.name

	files: List[FileOutput] = []
	try:
		ir = build_ir(meta)
		result.errors.extend(ir.diagnostics)
		if options.backend == "jinja":
			template, notes = generate_jinja(ir, meta)
		else:
			template, notes = generate_hono(ir, meta, options.runtime_module)
		result.errors.extend(notes)
		files.append(FileOutput("template", template, TEMPLATE_SUFFIXES[options.backend]))
		if ir.interactive:
			script, notes = generate_client(ir, meta, options.runtime_module)
			result.errors.extend(notes)
			files.append(FileOutput("script", script, SCRIPT_SUFFIX))
		if options.emit_ir:
			files.append(FileOutput("ir", json.dumps(component_to_json(ir), indent=2) + "\n", IR_SUFFIX))
	except (UnexpectedInput, ParseError, SemanticError) as err:
		result.errors.append(parse_error_diagnostic(err, path))

	for diag in result.errors:
		if diag.span.file is None and path is not None:
			diag.span = Span.from_loc(diag.span, path)
	if has_errors(result.errors):
		logger.debug("compile %s: %s produced errors, no output", path, meta.name)
		return result
	result.files = files
	logger.debug(
		"compile %s: %s → %s (%d warnings)",
		path,
		meta.name,
		", ".join(f.type for f in files),
		len(result.errors),
	)
	return result


__all__ = [
	"BACKENDS",
	"CompileOptions",
	"CompileResult",
	"FileOutput",
	"IR_SUFFIX",
	"SCRIPT_SUFFIX",
	"TEMPLATE_SUFFIXES",
	"compile",
]
