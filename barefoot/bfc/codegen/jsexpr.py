# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JavaScript expression → Jinja expression translation.

Pipeline placement:
  IR expression source (items) → JinjaExpression (this module) → jinja backend

A small Pratt parser over the flat item lists the parser produces. Only the
subset of JavaScript that has a direct Jinja spelling is accepted: literals,
names and member access, indexing, arithmetic, comparison, logical
operators, the conditional operator, template literals, array and object
literals, signal/memo getter calls and a handful of well-known methods
(`.length`, `.toUpperCase()`, `.join()`, `.includes()`, ...). Anything else
raises `UnsupportedExpression`; the backend turns that into a warning.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.span import Span
from ..parser import parse_items
from ..parser.ast import Group, Item, Tok
from ..parser.items import is_group, is_name, is_op, split_top, template_hole_ranges


class UnsupportedExpression(ValueError):
	"""The expression has no Jinja equivalent."""

	def __init__(self, message: str, *, loc: Optional[Span] = None) -> None:
		super().__init__(message)
		self.loc = loc


@dataclass
class _Val:
	text: str
	# Known to evaluate to a string: `+` becomes Jinja's `~`.
	string: bool = False


# Left binding powers of the infix operators.
_INFIX_BP: Dict[str, int] = {
	"?": 2,
	"??": 3,
	"||": 4,
	"&&": 5,
	"===": 6,
	"!==": 6,
	"==": 6,
	"!=": 6,
	"<": 7,
	">": 7,
	"<=": 7,
	">=": 7,
	"+": 8,
	"-": 8,
	"*": 9,
	"/": 9,
	"%": 9,
}
_PREFIX_BP = 10
_POSTFIX_BP = 11

_COMPARISONS = {"===": "==", "==": "==", "!==": "!=", "!=": "!=", "<": "<", ">": ">", "<=": "<=", ">=": ">="}
_LITERAL_NAMES = {"true": "true", "false": "false", "null": "none", "undefined": "none"}
_STRING_FILTERS = {"toUpperCase": "upper", "toLowerCase": "lower", "trim": "trim", "toString": "string"}
_PY_METHODS = {"startsWith": "startswith", "endsWith": "endswith"}
_MATH_FILTERS = {
	"Math.round": "round|int",
	"Math.floor": "round(0, 'floor')|int",
	"Math.ceil": "round(0, 'ceil')|int",
	"Math.abs": "abs",
}
_JS_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}
_SIMPLE = re.compile(r"^[\w.\[\]']+$|^\(.*\)$|^'[^']*'$|^\[.*\]$")


def jinja_string(value: str) -> str:
	"""Quote `value` as a Jinja string literal."""
	return "'" + value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n") + "'"


def _unescape(chunk: str) -> str:
	return re.sub(r"\\(.)", lambda m: _JS_ESCAPES.get(m.group(1), m.group(1)), chunk, flags=re.S)


def _atom(text: str) -> str:
	return text if _SIMPLE.match(text) else f"({text})"


class JinjaExpression:
	"""
	Translator for one expression.

	`getters` are names whose zero-argument call `name()` reads a value
	(signal getters, memos); the call is rendered as the bare name. `renames`
	maps JavaScript names to the Jinja variable holding the same value.
	"""

	def __init__(self, getters: Iterable[str] = (), renames: Optional[Dict[str, str]] = None) -> None:
		self.getters = set(getters)
		self.renames = dict(renames or {})
		self._items: List[Item] = []
		self._pos = 0

	def translate(self, items: Sequence[Item]) -> str:
		return self.value(items).text

	def value(self, items: Sequence[Item]) -> _Val:
		if not items:
			raise UnsupportedExpression("empty expression")
		saved = self._items, self._pos
		self._items, self._pos = list(items), 0
		try:
			value = self._parse(0)
			if self._pos < len(self._items):
				extra = self._items[self._pos]
				raise UnsupportedExpression(f"unexpected {self._describe(extra)}", loc=extra.span)
		finally:
			self._items, self._pos = saved
		return value

	def _peek(self, offset: int = 0) -> Optional[Item]:
		idx = self._pos + offset
		return self._items[idx] if idx < len(self._items) else None

	def _advance(self) -> Item:
		item = self._items[self._pos]
		self._pos += 1
		return item

	@staticmethod
	def _describe(item: Item) -> str:
		if isinstance(item, Tok):
			return f"'{item.text}'"
		if isinstance(item, Group):
			return f"'{item.open}'"
		return "markup"

	def _parse(self, rbp: int) -> _Val:
		if self._peek() is None:
			raise UnsupportedExpression("unexpected end of expression")
		left = self._nud(self._advance())
		while True:
			item = self._peek()
			if item is None:
				return left
			bp = self._lbp(item)
			if bp <= rbp:
				return left
			self._advance()
			left = self._led(left, item)

	def _lbp(self, item: Item) -> int:
		if isinstance(item, Group) and item.open in "([":
			return _POSTFIX_BP
		if is_op(item, ".", "?."):
			return _POSTFIX_BP
		if isinstance(item, Tok) and item.kind == "op":
			return _INFIX_BP.get(item.text, 0)
		return 0

	# -- prefix position

	def _nud(self, item: Item) -> _Val:
		if isinstance(item, Group):
			return self._group(item)
		if not isinstance(item, Tok):
			raise UnsupportedExpression("markup inside an expression", loc=item.span)
		if item.kind == "number":
			if item.text.endswith("n"):
				raise UnsupportedExpression("BigInt literal", loc=item.span)
			return _Val(item.text.replace("_", ""))
		if item.kind == "string":
			return _Val(jinja_string(_unescape(item.text[1:-1])), string=True)
		if item.kind == "template":
			return self._template(item)
		if item.kind == "name":
			return self._name(item)
		if is_op(item, "!"):
			return _Val(f"not {_atom(self._parse(_PREFIX_BP).text)}")
		if is_op(item, "-"):
			return _Val(f"-{_atom(self._parse(_PREFIX_BP).text)}")
		if is_op(item, "+"):
			return _Val(f"{_atom(self._parse(_PREFIX_BP).text)}|float")
		raise UnsupportedExpression(f"unsupported {self._describe(item)}", loc=item.span)

	def _name(self, item: Tok) -> _Val:
		name = item.text
		if name in _LITERAL_NAMES:
			return _Val(_LITERAL_NAMES[name])
		nxt = self._peek()
		if is_op(nxt, "=>"):
			raise UnsupportedExpression("arrow function", loc=item.span)
		if name in self.getters and is_group(nxt, "(") and not nxt.items:  # type: ignore[union-attr]
			self._advance()
			return _Val(self.renames.get(name, name))
		if name in ("String", "Number") and is_group(nxt, "("):
			(arg,) = self._args(self._advance())  # type: ignore[arg-type]
			return _Val(f"{_atom(arg.text)}|{'string' if name == 'String' else 'float'}", string=name == "String")
		return _Val(self.renames.get(name, name))

	def _group(self, group: Group) -> _Val:
		if group.open == "(":
			if is_op(self._peek(), "=>"):
				raise UnsupportedExpression("arrow function", loc=group.span)
			inner = JinjaExpression(self.getters, self.renames).value(group.items)
			text = inner.text
			return _Val(text if text.startswith("(") and text.endswith(")") else f"({text})", string=inner.string)
		if group.open == "[":
			parts = [self._sub(part) for part in split_top(group.items)]
			return _Val("[" + ", ".join(parts) + "]")
		entries = []
		for part in split_top(group.items):
			if is_op(part[0], "..."):
				raise UnsupportedExpression("object spread", loc=part[0].span)
			if len(part) == 1 and is_name(part[0]):
				key = part[0].text  # type: ignore[attr-defined]
				entries.append(f"{jinja_string(key)}: {self.renames.get(key, key)}")
				continue
			if len(part) < 3 or not is_op(part[1], ":"):
				raise UnsupportedExpression("computed or method object member", loc=part[0].span)
			head = part[0]
			if isinstance(head, Tok) and head.kind == "string":
				key = _unescape(head.text[1:-1])
			elif isinstance(head, Tok) and head.kind in ("name", "number"):
				key = head.text
			else:
				raise UnsupportedExpression("computed object key", loc=head.span)
			entries.append(f"{jinja_string(key)}: {self._sub(part[2:])}")
		return _Val("{" + ", ".join(entries) + "}")

	def _template(self, item: Tok) -> _Val:
		text = item.text
		pieces: List[str] = []
		cursor = 1
		for start, end in template_hole_ranges(text):
			chunk = text[cursor : start - 2]
			if chunk:
				pieces.append(jinja_string(_unescape(chunk)))
			pieces.append(_atom(self._sub(parse_items(text[start:end]))))
			cursor = end + 1
		tail = text[cursor:-1]
		if tail:
			pieces.append(jinja_string(_unescape(tail)))
		if not pieces:
			return _Val("''", string=True)
		if len(pieces) == 1 and pieces[0].startswith("'"):
			return _Val(pieces[0], string=True)
		return _Val("(" + " ~ ".join(pieces) + ")", string=True)

	def _sub(self, items: Sequence[Item]) -> str:
		return JinjaExpression(self.getters, self.renames).translate(items)

	def _args(self, group: Group) -> List[_Val]:
		out = []
		for part in split_top(group.items):
			if is_op(part[0], "..."):
				raise UnsupportedExpression("spread argument", loc=part[0].span)
			out.append(JinjaExpression(self.getters, self.renames).value(part))
		return out

	# -- infix / postfix position

	def _led(self, left: _Val, item: Item) -> _Val:
		if isinstance(item, Group):
			if item.open == "[":
				return _Val(f"{_atom(left.text)}[{self._sub(item.items)}]")
			return self._call(left, item)
		assert isinstance(item, Tok)
		op = item.text
		if op in (".", "?."):
			member = self._advance() if self._peek() is not None else None
			if not is_name(member):
				raise UnsupportedExpression("computed member access", loc=item.span)
			return self._member(left, member.text)  # type: ignore[union-attr]
		if op == "?":
			when_true = self._parse(0)
			colon = self._peek()
			if not is_op(colon, ":"):
				raise UnsupportedExpression("malformed conditional", loc=item.span)
			self._advance()
			when_false = self._parse(1)
			return _Val(
				f"({when_true.text} if {left.text} else {when_false.text})",
				string=when_true.string and when_false.string,
			)
		right = self._parse(_INFIX_BP[op])
		if op == "??":
			return _Val(f"({left.text} if {left.text} is not none else {right.text})", string=left.string and right.string)
		if op == "||":
			return _Val(f"({left.text} or {right.text})", string=left.string and right.string)
		if op == "&&":
			return _Val(f"({left.text} and {right.text})")
		if op in _COMPARISONS:
			return _Val(f"({left.text} {_COMPARISONS[op]} {right.text})")
		if op == "+" and (left.string or right.string):
			return _Val(f"({left.text} ~ {right.text})", string=True)
		return _Val(f"({left.text} {op} {right.text})")

	def _member(self, left: _Val, name: str) -> _Val:
		call = self._peek()
		if not is_group(call, "("):
			if name == "length":
				return _Val(f"({left.text} or [])|length")
			# subscript: Jinja tries the item before the attribute, so dict keys
			# such as `items` or `keys` are not shadowed by dict methods
			return _Val(f"{_atom(left.text)}[{jinja_string(name)}]")
		self._advance()
		args = self._args(call)  # type: ignore[arg-type]
		target = _atom(left.text)
		if name in _STRING_FILTERS and not args:
			return _Val(f"{target}|{_STRING_FILTERS[name]}", string=True)
		if name == "join" and len(args) <= 1:
			sep = args[0].text if args else "','"
			return _Val(f"{target}|join({sep})", string=True)
		if name == "includes" and len(args) == 1:
			return _Val(f"({args[0].text} in {target})")
		if name in _PY_METHODS and len(args) == 1:
			return _Val(f"{target}.{_PY_METHODS[name]}({args[0].text})")
		if name == "slice" and 1 <= len(args) <= 2:
			return _Val(f"{target}[{':'.join(a.text for a in args)}]" if len(args) == 2 else f"{target}[{args[0].text}:]")
		if name == "toFixed" and len(args) == 1 and args[0].text.isdigit():
			return _Val(f"'%.{args[0].text}f'|format({left.text})", string=True)
		if name == "stringify" and left.text == "JSON" and len(args) == 1:
			return _Val(f"{_atom(args[0].text)}|tojson", string=True)
		qualified = f"{left.text}.{name}"
		if qualified in _MATH_FILTERS and len(args) == 1:
			return _Val(f"{_atom(args[0].text)}|{_MATH_FILTERS[qualified]}")
		if qualified in ("Math.max", "Math.min") and args:
			return _Val("[" + ", ".join(a.text for a in args) + f"]|{name}")
		raise UnsupportedExpression(f"method call .{name}()", loc=call.span)  # type: ignore[union-attr]

	def _call(self, left: _Val, group: Group) -> _Val:
		raise UnsupportedExpression(f"call of {left.text}", loc=group.span)


def translate_expression(
	items: Sequence[Item],
	getters: Iterable[str] = (),
	renames: Optional[Dict[str, str]] = None,
) -> str:
	return JinjaExpression(getters, renames).translate(items)


def translate_source(
	source: str,
	getters: Iterable[str] = (),
	renames: Optional[Dict[str, str]] = None,
) -> str:
	"""Parse `source` as a standalone expression and translate it."""
	return translate_expression(parse_items(source), getters, renames)


__all__ = [
	"JinjaExpression",
	"UnsupportedExpression",
	"jinja_string",
	"translate_expression",
	"translate_source",
]
