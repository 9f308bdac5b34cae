# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler diagnostics: the `CompilerError` record, the error code table and
human-readable rendering (code frames).

Every stage reports problems by appending `CompilerError`s to a list; only
the pipeline boundary (`compile`) decides whether output is produced. An
error-severity diagnostic suppresses all files for the compile call,
warnings never do.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .span import Span


class ErrorCode:
	"""Stable diagnostic codes, grouped by decade."""

	# Directives
	MISSING_USE_CLIENT = "BF001"
	INVALID_DIRECTIVE_POSITION = "BF002"
	CLIENT_IMPORTING_SERVER = "BF003"
	# Signals / memos
	UNKNOWN_SIGNAL = "BF010"
	SIGNAL_OUTSIDE_COMPONENT = "BF011"
	INVALID_SIGNAL_USAGE = "BF012"
	# Markup
	INVALID_JSX_EXPRESSION = "BF020"
	UNSUPPORTED_JSX_PATTERN = "BF021"
	INVALID_JSX_ATTRIBUTE = "BF022"
	MISSING_KEY_IN_LIST = "BF023"
	# Types
	TYPE_INFERENCE_FAILED = "BF030"
	PROPS_TYPE_MISMATCH = "BF031"
	# Components
	COMPONENT_NOT_FOUND = "BF040"
	CIRCULAR_DEPENDENCY = "BF041"
	INVALID_COMPONENT_NAME = "BF042"
	PROPS_DESTRUCTURING = "BF043"
	SIGNAL_GETTER_NOT_CALLED = "BF044"
	# Attributes
	CLASS_ATTRIBUTE = "BF050"


DEFAULT_MESSAGES: dict[str, str] = {
	ErrorCode.MISSING_USE_CLIENT: "'use client' directive required for components with createSignal or event handlers",
	ErrorCode.INVALID_DIRECTIVE_POSITION: "'use client' directive must be at the top of the file",
	ErrorCode.CLIENT_IMPORTING_SERVER: "Client component cannot import server component",
	ErrorCode.UNKNOWN_SIGNAL: "Unknown signal reference",
	ErrorCode.SIGNAL_OUTSIDE_COMPONENT: "Signal must be used inside a component function",
	ErrorCode.INVALID_SIGNAL_USAGE: "Invalid signal usage",
	ErrorCode.INVALID_JSX_EXPRESSION: "Invalid JSX expression",
	ErrorCode.UNSUPPORTED_JSX_PATTERN: "Unsupported JSX pattern",
	ErrorCode.INVALID_JSX_ATTRIBUTE: "Invalid JSX attribute",
	ErrorCode.MISSING_KEY_IN_LIST: "Missing key attribute in list rendering. Add a key prop for efficient updates",
	ErrorCode.TYPE_INFERENCE_FAILED: "Failed to infer type",
	ErrorCode.PROPS_TYPE_MISMATCH: "Props type mismatch",
	ErrorCode.COMPONENT_NOT_FOUND: "Component not found",
	ErrorCode.CIRCULAR_DEPENDENCY: "Circular dependency detected",
	ErrorCode.INVALID_COMPONENT_NAME: "Component name must start with uppercase letter",
	ErrorCode.PROPS_DESTRUCTURING: "Destructuring props in a stateful component loses reactivity of parent-driven props",
	ErrorCode.SIGNAL_GETTER_NOT_CALLED: "Signal getter used without calling it",
	ErrorCode.CLASS_ATTRIBUTE: "Use 'class' instead of 'className'",
}


@dataclass
class Suggestion:
	message: str
	replacement: Optional[str] = None


@dataclass
class CompilerError:
	"""Represents a compiler diagnostic (error or warning) with a source span."""

	message: str
	code: Optional[str] = None
	# Stage that produced the diagnostic (parser, analysis, ir, codegen).
	phase: Optional[str] = None
	severity: str = "error"
	span: Span = field(default_factory=Span)
	suggestion: Optional[Suggestion] = None
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_error(self) -> bool:
		return self.severity == "error"

	def to_json(self) -> dict:
		"""Render to a structured JSON-friendly dict."""
		span = self.span
		return {
			"code": self.code,
			"phase": self.phase,
			"message": self.message,
			"severity": self.severity,
			"file": span.file,
			"line": span.line,
			"column": span.column,
			"end_line": span.end_line,
			"end_column": span.end_column,
			"suggestion": self.suggestion.message if self.suggestion else None,
			"notes": list(self.notes),
		}


def make_error(
	code: str,
	span: Optional[Span] = None,
	message: Optional[str] = None,
	*,
	phase: Optional[str] = None,
	severity: str = "error",
	suggestion: Optional[str] = None,
	replacement: Optional[str] = None,
) -> CompilerError:
	return CompilerError(
		message=message or DEFAULT_MESSAGES.get(code, code),
		code=code,
		phase=phase,
		severity=severity,
		span=span or Span(),
		suggestion=Suggestion(suggestion, replacement) if suggestion else None,
	)


def make_warning(code: str, span: Optional[Span] = None, message: Optional[str] = None, **kwargs) -> CompilerError:
	return make_error(code, span, message, severity="warning", **kwargs)


def has_errors(diagnostics: list[CompilerError]) -> bool:
	return any(d.is_error for d in diagnostics)


def code_frame(source: str, span: Span, context_lines: int = 2) -> str:
	"""
	Render the lines around `span` with a `>` gutter on the offending lines
	and a `^` underline under the reported columns.
	"""
	if span.line is None:
		return ""
	lines = source.split("\n")
	start_line = span.line
	end_line = span.end_line or start_line
	first = max(0, start_line - 1 - context_lines)
	last = min(len(lines), end_line + context_lines)
	width = len(str(last))
	out: list[str] = []
	for idx in range(first, last):
		number = idx + 1
		in_span = start_line <= number <= end_line
		out.append(f"{'>' if in_span else ' '} {str(number).rjust(width)} | {lines[idx]}")
		if in_span:
			start_col = (span.column or 1) - 1 if number == start_line else 0
			if number == end_line and span.end_column is not None:
				end_col = span.end_column - 1
			else:
				end_col = len(lines[idx])
			out.append(" " * (width + 4 + start_col) + "^" * max(1, end_col - start_col))
	return "\n".join(out)


def format_error(error: CompilerError, source: Optional[str] = None) -> str:
	span = error.span
	lines = [f"{error.severity.upper()}[{error.code or '-'}]: {error.message}", ""]
	lines.append(f"  --> {span.file or '<unknown>'}:{span.line or '?'}:{span.column or '?'}")
	if source is not None and span.line is not None:
		lines.append("   |")
		lines.extend(f"   {row}" for row in code_frame(source, span).split("\n"))
		lines.append("   |")
	if error.suggestion is not None:
		lines.append(f"   = help: {error.suggestion.message}")
		if error.suggestion.replacement:
			lines.append("")
			lines.append(f"   {error.suggestion.replacement}")
	for note in error.notes:
		lines.append(f"   = note: {note}")
	return "\n".join(lines)


__all__ = [
	"CompilerError",
	"DEFAULT_MESSAGES",
	"ErrorCode",
	"Suggestion",
	"code_frame",
	"format_error",
	"has_errors",
	"make_error",
	"make_warning",
]
