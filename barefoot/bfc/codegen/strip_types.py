# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Remove TypeScript-only syntax from code copied into the client script.

Pipeline placement:
  verbatim helper / handler source → strip_types → client JS

Handled forms: parameter and return annotations, `const x: T` annotations,
`as T` / `as const` casts, non-null assertions (`x!`) and explicit type
arguments on calls (`createSignal<number>(0)`). Deletions are collected as
source ranges over the parsed items and applied in one pass, so everything
else stays byte for byte as written.

Code that does not parse is returned unchanged.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from lark.exceptions import LarkError

from barefoot.logging import get_logger

from ..parser import ParseError, parse_items
from ..parser.ast import Group, Item, Tok
from ..parser.items import at, is_group, is_kw, is_name, is_op, split_statements

logger = get_logger("bfc.codegen")

# Operators that may appear inside a type expression.
_TYPE_OPS = {".", "|", "&", "<", ">", ">>", ",", "?", "=>", "-"}


def strip_types(code: str) -> str:
	"""Return `code` with TypeScript annotations removed."""
	if not code.strip():
		return code
	try:
		items = parse_items(code)
	except (LarkError, ParseError) as exc:
		logger.debug("strip_types: leaving unparsed code as written (%s)", exc)
		return code
	ranges: List[Tuple[int, int]] = []
	_scan(items, ranges, statements=True)
	return _apply(code, ranges)


def _apply(code: str, ranges: List[Tuple[int, int]]) -> str:
	out: List[str] = []
	cursor = 0
	for start, end in sorted(ranges):
		if start < cursor:
			start = cursor
		if end <= start:
			continue
		out.append(code[cursor:start])
		cursor = end
	out.append(code[cursor:])
	return "".join(out)


def _start(item: Item) -> int:
	return item.span.start or 0


def _end(item: Item) -> int:
	return item.span.end or 0


def _is_type_atom(item: Optional[Item]) -> bool:
	if isinstance(item, Group):
		return True
	if isinstance(item, Tok):
		if item.kind in ("name", "string", "number"):
			return True
		if item.kind == "kw":
			return item.text in ("typeof", "void", "in", "of")
		return item.text in _TYPE_OPS
	return False


def _scan(items: Sequence[Item], ranges: List[Tuple[int, int]], statements: bool) -> None:
	if statements:
		for stmt in split_statements(items):
			_declaration_annotation(stmt, ranges)
	for idx, item in enumerate(items):
		if isinstance(item, Group):
			if item.open == "(" and _is_params(items, idx):
				_params(item, ranges)
				_return_type(items, idx, ranges)
			_scan(item.items, ranges, statements=item.open == "{")
		elif is_name(item, "as") and idx > 0:
			end = _type_end(items, idx + 1)
			if end > idx + 1:
				ranges.append((_end(items[idx - 1]), _end(items[end - 1])))
		elif is_op(item, "!") and idx > 0 and _non_null(items, idx):
			ranges.append((_start(item), _end(item)))
		elif is_op(item, "<") and _generic_call(items, idx):
			close = _generic_close(items, idx)
			ranges.append((_start(item), _end(items[close])))


def _is_params(items: Sequence[Item], idx: int) -> bool:
	"""`(…) =>`, `(…): T =>`, `function f(…)` or a method `name(…) {`."""
	nxt = at(items, idx + 1)
	if is_op(nxt, "=>"):
		return True
	if is_op(nxt, ":"):
		return _arrow_after_type(items, idx + 2) is not None or _function_head(items, idx)
	return _function_head(items, idx)


def _function_head(items: Sequence[Item], idx: int) -> bool:
	pos = idx - 1
	if is_op(at(items, pos), ">"):
		# function f<T>(…)
		while pos >= 0 and not is_op(items[pos], "<"):
			pos -= 1
		pos -= 1
	if is_name(at(items, pos), "function"):
		return True
	return is_name(at(items, pos)) and is_name(at(items, pos - 1), "function")


def _arrow_after_type(items: Sequence[Item], idx: int) -> Optional[int]:
	"""Index of the `=>` ending a return type that starts at `idx`."""
	pos = idx
	while pos < len(items):
		item = items[pos]
		if is_op(item, "=>"):
			# `(): () => void => …`: the first arrow belongs to the type
			if is_group(at(items, pos - 1), "(") and pos - 1 == idx:
				pos += 1
				continue
			return pos
		if not _is_type_atom(item):
			return None
		pos += 1
	return None


def _params(group: Group, ranges: List[Tuple[int, int]]) -> None:
	items = group.items
	pos = 0
	while pos < len(items):
		if is_op(items[pos], "..."):
			pos += 1
		# the binding name or pattern
		pos += 1
		start = pos
		if is_op(at(items, pos), "?"):
			pos += 1
		if is_op(at(items, pos), ":"):
			pos = max(_type_end(items, pos + 1), pos + 1)
		if pos > start:
			ranges.append((_start(items[start]), _end(items[pos - 1])))
		while pos < len(items) and not is_op(items[pos], ","):
			pos += 1
		pos += 1


def _return_type(items: Sequence[Item], idx: int, ranges: List[Tuple[int, int]]) -> None:
	colon = at(items, idx + 1)
	if not is_op(colon, ":"):
		return
	arrow = _arrow_after_type(items, idx + 2)
	if arrow is not None:
		ranges.append((_start(colon), _end(items[arrow - 1])))
		return
	# function f(): T { … }
	pos = idx + 2
	while pos < len(items) and not (is_group(items[pos], "{") and pos > idx + 2 and not is_op(items[pos - 1], ":", "|", "&")):
		pos += 1
	if pos < len(items):
		ranges.append((_start(colon), _end(items[pos - 1])))


def _type_end(items: Sequence[Item], idx: int) -> int:
	"""Index just past the type expression starting at `idx`."""
	pos = idx
	if is_name(at(items, pos), "const"):
		return pos + 1
	while pos < len(items):
		item = items[pos]
		if is_kw(item, "typeof") or is_name(item, "keyof"):
			pos += 1
			continue
		if (
			is_name(item)
			or is_kw(item, "void")
			or (isinstance(item, Tok) and item.kind in ("string", "number"))
			or is_group(item, "{")
			or is_group(item, "[")
		):
			pos += 1
		elif is_group(item, "("):
			pos += 1
			if is_op(at(items, pos), "=>"):
				pos += 1
				continue
		else:
			break
		while True:
			if is_op(at(items, pos), ".") and is_name(at(items, pos + 1)):
				pos += 2
			elif is_op(at(items, pos), "<"):
				pos = _generic_close(items, pos) + 1
			elif is_group(at(items, pos), "[") and not at(items, pos).items:  # type: ignore[union-attr]
				pos += 1
			else:
				break
		if is_op(at(items, pos), "|", "&"):
			pos += 1
			continue
		break
	return pos


def _generic_close(items: Sequence[Item], idx: int) -> int:
	depth = 0
	for pos in range(idx, len(items)):
		item = items[pos]
		if is_op(item, "<"):
			depth += 1
		elif is_op(item, ">"):
			depth -= 1
		elif is_op(item, ">>"):
			depth -= 2
		elif not _is_type_atom(item):
			return len(items) - 1
		if depth <= 0:
			return pos
	return len(items) - 1


def _generic_call(items: Sequence[Item], idx: int) -> bool:
	"""`name<T>(…)`: type arguments on a call or a generic function head."""
	if not is_name(at(items, idx - 1)):
		return False
	close = _generic_close(items, idx)
	if close <= idx or not is_op(items[close], ">", ">>"):
		return False
	for item in items[idx + 1 : close]:
		if not _is_type_atom(item) or is_group(item, "(") and item.items:  # type: ignore[union-attr]
			return False
	return is_group(at(items, close + 1), "(")


def _non_null(items: Sequence[Item], idx: int) -> bool:
	prev = items[idx - 1]
	if not (is_name(prev) or is_group(prev, "(") or is_group(prev, "[")):
		return False
	if _end(prev) != _start(items[idx]):
		return False
	nxt = at(items, idx + 1)
	return nxt is None or is_op(nxt, ".", "?.", ",", ")", ";") or is_group(nxt, "[") or is_group(nxt, "(")


def _declaration_annotation(stmt: List[Item], ranges: List[Tuple[int, int]]) -> None:
	"""`const x: T = …` and `let x: T` (one or more declarators)."""
	pos = 0
	while is_name(at(stmt, pos), "export"):
		pos += 1
	if not is_name(at(stmt, pos), "const", "let", "var"):
		return
	pos += 1
	while pos < len(stmt):
		target = stmt[pos]
		if not (is_name(target) or is_group(target, "{") or is_group(target, "[")):
			return
		pos += 1
		if is_op(at(stmt, pos), ":"):
			end = _type_end(stmt, pos + 1)
			if end > pos + 1:
				ranges.append((_start(stmt[pos]), _end(stmt[end - 1])))
			pos = end
		while pos < len(stmt) and not is_op(stmt[pos], ","):
			pos += 1
		pos += 1


__all__ = ["strip_types"]
