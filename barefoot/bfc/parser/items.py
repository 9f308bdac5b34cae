# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Helpers over flat item lists: token tests, top-level splitting, statement
splitting and name scanning.

Script code is never turned into a full expression tree; the analyzer and
code generators recognise the few shapes they care about (declarations,
calls, `.map`, ternaries) with these helpers and otherwise copy source text
through unchanged.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from .ast import Group, Item, JsxAttr, JsxElement, JsxExpr, JsxFragment, JsxSpread, Tok
from .parser import parse_items

# Keywords that continue the previous statement when they start a line.
_CONTINUATION_WORDS = {"else", "catch", "finally"}


def is_op(item: Optional[Item], *texts: str) -> bool:
	return isinstance(item, Tok) and item.kind == "op" and (not texts or item.text in texts)


def is_name(item: Optional[Item], *texts: str) -> bool:
	return isinstance(item, Tok) and item.kind == "name" and (not texts or item.text in texts)


def is_kw(item: Optional[Item], *texts: str) -> bool:
	return isinstance(item, Tok) and item.kind == "kw" and (not texts or item.text in texts)


def is_group(item: Optional[Item], open: str) -> bool:
	return isinstance(item, Group) and item.open == open


def at(items: Sequence[Item], idx: int) -> Optional[Item]:
	return items[idx] if 0 <= idx < len(items) else None


def find_op(items: Sequence[Item], *ops: str, start: int = 0) -> int:
	for idx in range(start, len(items)):
		if is_op(items[idx], *ops):
			return idx
	return -1


def split_top(items: Sequence[Item], sep: str = ",") -> List[List[Item]]:
	"""Split on a top-level operator; empty trailing parts are dropped."""
	parts: List[List[Item]] = [[]]
	for item in items:
		if is_op(item, sep):
			parts.append([])
		else:
			parts[-1].append(item)
	if not parts[-1]:
		parts.pop()
	return parts


def unwrap_parens(items: List[Item]) -> List[Item]:
	while len(items) == 1 and is_group(items[0], "("):
		items = items[0].items  # type: ignore[attr-defined]
	return items


def _ends_operand(item: Item) -> bool:
	if isinstance(item, Tok):
		if item.kind == "kw":
			# `() => void` closes a type annotation
			return item.text == "void"
		return item.kind != "op" or item.text in ("++", "--")
	return True


def _continues(item: Item) -> bool:
	if isinstance(item, Tok):
		if item.kind == "op":
			return item.text != "@"
		if item.kind == "kw":
			return item.text in _CONTINUATION_WORDS or item.text in ("in", "of", "instanceof")
		return item.kind == "name" and item.text in _CONTINUATION_WORDS
	return isinstance(item, Group)


def split_statements(items: Sequence[Item]) -> List[List[Item]]:
	"""
	Split a statement list on `;` and on line breaks that end a statement.

	A line break ends a statement when the previous item can end an operand
	and the next item cannot continue the expression (operators, brackets and
	`else`/`catch`/`finally` continue it). `function` and `class` declarations
	end at their body brace.
	"""
	out: List[List[Item]] = [[]]
	for item in items:
		if is_op(item, ";"):
			out.append([])
			continue
		cur = out[-1]
		if cur:
			prev = cur[-1]
			new_line = (prev.span.end_line or 0) < (item.span.line or 0)
			if new_line and _ends_operand(prev) and not _continues(item):
				out.append([])
			elif _declaration_closed(cur) and not _continues(item):
				out.append([])
		out[-1].append(item)
	return [stmt for stmt in out if stmt]


def _declaration_closed(stmt: List[Item]) -> bool:
	"""`function f() {}` or `class C {}` with its body already consumed."""
	if not is_group(stmt[-1], "{"):
		return False
	lead = [t for t in stmt if not (is_name(t, "export", "default", "async"))]
	return bool(lead) and (is_name(lead[0], "function", "class"))


def iter_items(items: Sequence[Item]) -> Iterator[Item]:
	"""Depth-first walk into groups and markup expression containers."""
	for item in items:
		yield item
		if isinstance(item, Group):
			yield from iter_items(item.items)
		elif isinstance(item, (JsxElement, JsxFragment)):
			yield from iter_items(markup_items(item))


def markup_items(node: JsxElement | JsxFragment) -> List[Item]:
	"""All script items nested inside a markup tree (attribute values, children)."""
	out: List[Item] = []
	if isinstance(node, JsxElement):
		for attr in node.attrs:
			if isinstance(attr, JsxSpread):
				out.extend(attr.items)
			elif isinstance(attr, JsxAttr) and isinstance(attr.value, JsxExpr):
				out.extend(attr.value.items)
	for child in node.children:
		if isinstance(child, JsxExpr):
			out.extend(child.items)
		elif isinstance(child, (JsxElement, JsxFragment)):
			out.append(child)
	return out


def referenced_names(items: Sequence[Item]) -> set[str]:
	"""
	Free-ish identifier references in `items`.

	Member names after `.`/`?.` are skipped; names inside template literal holes
	and component tags are included. Binding occurrences are not excluded, so
	the result over-approximates.
	"""
	names: set[str] = set()
	_collect_names(items, names)
	return names


def _collect_names(items: Sequence[Item], names: set[str]) -> None:
	prev: Optional[Item] = None
	for item in items:
		if isinstance(item, Tok):
			if item.kind == "name" and not is_op(prev, ".", "?."):
				names.add(item.text)
			elif item.kind == "template":
				for hole in template_holes(item.text):
					_collect_names(parse_items(hole), names)
		elif isinstance(item, Group):
			_collect_names(item.items, names)
		elif isinstance(item, JsxElement):
			if item.tag[:1].isupper():
				names.add(item.tag.split(".")[0])
			_collect_names(markup_items(item), names)
		elif isinstance(item, JsxFragment):
			_collect_names(markup_items(item), names)
		prev = item


def called_names(items: Sequence[Item]) -> set[str]:
	"""Names appearing directly as `name(...)` (not as member calls)."""
	names: set[str] = set()
	_collect_calls(items, names)
	return names


def _collect_calls(items: Sequence[Item], names: set[str]) -> None:
	for idx, item in enumerate(items):
		if isinstance(item, Tok):
			if (
				item.kind == "name"
				and is_group(at(items, idx + 1), "(")
				and not is_op(at(items, idx - 1), ".", "?.")
			):
				names.add(item.text)
			elif item.kind == "template":
				for hole in template_holes(item.text):
					_collect_calls(parse_items(hole), names)
		elif isinstance(item, Group):
			_collect_calls(item.items, names)
		elif isinstance(item, (JsxElement, JsxFragment)):
			_collect_calls(markup_items(item), names)


def template_holes(text: str) -> List[str]:
	"""Source of each `${...}` hole in a template literal token."""
	return [text[start:end] for start, end in template_hole_ranges(text)]


def template_hole_ranges(text: str) -> List[tuple[int, int]]:
	ranges: List[tuple[int, int]] = []
	idx = 1
	while idx < len(text) - 1:
		ch = text[idx]
		if ch == "\\":
			idx += 2
			continue
		if ch == "$" and text[idx + 1 : idx + 2] == "{":
			start = idx + 2
			end = _match_brace(text, start)
			ranges.append((start, end))
			idx = end + 1
			continue
		idx += 1
	return ranges


def _match_brace(text: str, idx: int) -> int:
	depth = 0
	quote: Optional[str] = None
	while idx < len(text):
		ch = text[idx]
		if quote:
			if ch == "\\":
				idx += 1
			elif ch == quote:
				quote = None
		elif ch in "'\"`":
			quote = ch
		elif ch == "{":
			depth += 1
		elif ch == "}":
			if depth == 0:
				return idx
			depth -= 1
		idx += 1
	return idx


def strip_string(text: str) -> str:
	"""Unquote a string token (escapes are kept as written)."""
	return text[1:-1]


__all__ = [
	"at",
	"called_names",
	"find_op",
	"is_group",
	"is_kw",
	"is_name",
	"is_op",
	"iter_items",
	"markup_items",
	"referenced_names",
	"split_statements",
	"split_top",
	"strip_string",
	"template_hole_ranges",
	"template_holes",
	"unwrap_parens",
]
