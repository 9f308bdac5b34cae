# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parsed component source.

Script code is kept as a flat list of `Item`s (tokens and bracket groups);
markup is fully structured. The analyzer works on item lists and slices the
original source text through the spans when it needs code verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..core.span import Span


class Item:
	"""Base class for every element of a parsed item list."""

	span: Span


@dataclass
class Tok(Item):
	"""
	A single script token.

	`kind` is one of: name, number, string, template, regex, op, kw.
	"""

	kind: str
	text: str
	span: Span = field(default_factory=Span)


_CLOSERS = {"(": ")", "[": "]", "{": "}"}


@dataclass
class Group(Item):
	"""A bracketed run of items: `(...)`, `[...]` or `{...}`."""

	open: str
	items: List[Item]
	span: Span = field(default_factory=Span)

	@property
	def close(self) -> str:
		return _CLOSERS[self.open]


@dataclass
class JsxText(Item):
	text: str
	span: Span = field(default_factory=Span)


@dataclass
class JsxExpr(Item):
	"""`{ ... }` in children or attribute-value position. `items` may be empty."""

	items: List[Item]
	span: Span = field(default_factory=Span)


@dataclass
class JsxAttr(Item):
	name: str
	# None for a bare attribute, str for a quoted literal (quotes removed),
	# JsxExpr for `{...}`.
	value: Union[None, str, JsxExpr]
	span: Span = field(default_factory=Span)


@dataclass
class JsxSpread(Item):
	"""`{...expr}` in attribute position; `items` excludes the `...`."""

	items: List[Item]
	span: Span = field(default_factory=Span)


JsxChild = Union["JsxElement", "JsxFragment", JsxText, JsxExpr]


@dataclass
class JsxElement(Item):
	tag: str
	attrs: List[Union[JsxAttr, JsxSpread]]
	children: List[JsxChild]
	self_closing: bool = False
	span: Span = field(default_factory=Span)

	def attr(self, name: str) -> Optional[JsxAttr]:
		for a in self.attrs:
			if isinstance(a, JsxAttr) and a.name == name:
				return a
		return None


@dataclass
class JsxFragment(Item):
	children: List[JsxChild]
	span: Span = field(default_factory=Span)


JsxNode = Union[JsxElement, JsxFragment]


@dataclass
class Module:
	"""One parsed source file."""

	source: str
	items: List[Item]
	path: Optional[str] = None

	def text(self, items: List[Item]) -> str:
		"""Verbatim source covering `items` (first start through last end)."""
		return source_text(self.source, items)

	def slice(self, span: Span) -> str:
		if span.start is None or span.end is None:
			return ""
		return self.source[span.start : span.end]


def source_text(source: str, items: List[Item]) -> str:
	if not items:
		return ""
	start = items[0].span.start
	end = items[-1].span.end
	if start is None or end is None:
		return ""
	return source[start:end]


__all__ = [
	"Group",
	"Item",
	"JsxAttr",
	"JsxChild",
	"JsxElement",
	"JsxExpr",
	"JsxFragment",
	"JsxNode",
	"JsxSpread",
	"JsxText",
	"Module",
	"Tok",
	"source_text",
]
