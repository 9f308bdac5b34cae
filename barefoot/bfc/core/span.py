# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span representation used by diagnostics and the parsed module.

Lines and columns are 1-based, as lark reports them. Offsets (`start`/`end`)
index into the source string and are what the analyzer slices with when it
needs verbatim text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus offsets)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	start: Optional[int] = None
	end: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a parser location object (lark Token or Meta).

		If `loc` is already a Span it is returned with `file` filled in when
		missing.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			if loc.file is None and file is not None:
				return cls(file, loc.line, loc.column, loc.end_line, loc.end_column, loc.start, loc.end)
			return loc
		return cls(
			file=file or getattr(loc, "file", None),
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			start=getattr(loc, "start_pos", None),
			end=getattr(loc, "end_pos", None),
		)

	def join(self, other: "Span") -> "Span":
		"""Span covering `self` through `other`."""
		return Span(
			file=self.file or other.file,
			line=self.line,
			column=self.column,
			end_line=other.end_line,
			end_column=other.end_column,
			start=self.start,
			end=other.end,
		)


__all__ = ["Span"]
