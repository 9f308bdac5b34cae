# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lark front end: component source text → `Module`.

Pipeline placement:
  source (TSX) → parse_module → analysis

The grammar (grammar.lark) keeps script code as a flat token stream and only
structures markup, so most syntax errors in script code surface later as
analysis problems rather than here. Markup errors (unbalanced tags,
mismatched closing names, stray braces) are reported by lark as
`UnexpectedInput`, or by the tree builder as `ParseError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from ..core.span import Span
from .ast import (
	Group,
	Item,
	JsxAttr,
	JsxChild,
	JsxElement,
	JsxExpr,
	JsxFragment,
	JsxSpread,
	JsxText,
	Module,
	Tok,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
	keep_all_tokens=True,
)

_TOKEN_KINDS = {
	"NAME": "name",
	"NUMBER": "number",
	"STRING": "string",
	"TEMPLATE": "template",
	"REGEX": "regex",
	"KW": "kw",
	"OP": "op",
	"LT": "op",
	"GT": "op",
	"EQ": "op",
	"SLASH": "op",
}

_GROUPS = {"paren": "(", "bracket": "[", "brace": "{"}


class ParseError(ValueError):
	"""
	Markup error detected while building the module from the lark tree.

	Carries `loc` (a `Span`) so the pipeline can report it as a pinned
	diagnostic instead of a raw exception.
	"""

	def __init__(self, message: str, *, loc: Optional[Span] = None) -> None:
		super().__init__(message)
		self.loc = loc


def parse_module(source: str, path: Optional[str] = None) -> Module:
	tree = _PARSER.parse(source)
	builder = _ModuleBuilder(path)
	return Module(source=source, items=builder.seq(tree.children[0]), path=path)


def parse_items(source: str) -> List[Item]:
	"""
	Parse a standalone expression or statement fragment.

	Used for template-literal holes; spans are relative to `source`.
	"""
	return parse_module(source).items


class _ModuleBuilder:
	def __init__(self, path: Optional[str]) -> None:
		self.path = path

	def span(self, node: Tree | Token) -> Span:
		if isinstance(node, Token):
			return Span.from_loc(node, self.path)
		return Span.from_loc(node.meta, self.path)

	def seq(self, tree: Tree) -> List[Item]:
		return [self.item(child) for child in tree.children]

	def item(self, node: Tree | Token) -> Item:
		if isinstance(node, Token):
			return Tok(_TOKEN_KINDS[node.type], str(node), self.span(node))
		if node.data in _GROUPS:
			return Group(_GROUPS[node.data], self.seq(node.children[1]), self.span(node))
		if node.data in ("element", "child_element"):
			return self.element(node)
		if node.data in ("fragment", "child_fragment"):
			return self.fragment(node)
		raise NotImplementedError(f"unexpected parse node {node.data!r}")

	def element(self, tree: Tree) -> JsxElement:
		children = tree.children
		tag = str(children[1])
		attrs: list = []
		idx = 2
		while isinstance(children[idx], Tree):
			attrs.append(self.attr(children[idx]))
			idx += 1
		if str(children[idx]) == "/>":
			return JsxElement(tag, attrs, [], True, self.span(tree))
		idx += 1
		kids = self.children(children, idx)
		closing = children[-2]
		if str(closing) != tag:
			raise ParseError(
				f"expected closing tag </{tag}> but found </{closing}>",
				loc=self.span(closing),
			)
		return JsxElement(tag, attrs, kids, False, self.span(tree))

	def fragment(self, tree: Tree) -> JsxFragment:
		return JsxFragment(self.children(tree.children, 2), self.span(tree))

	def children(self, nodes: list, idx: int) -> List[JsxChild]:
		out: List[JsxChild] = []
		while not (isinstance(nodes[idx], Token) and str(nodes[idx]) == "</"):
			node = nodes[idx]
			idx += 1
			if isinstance(node, Token):
				out.append(JsxText(str(node), self.span(node)))
			elif node.data == "child_expr":
				out.append(JsxExpr(self.seq(node.children[1]), self.span(node)))
			else:
				out.append(self.item(node))  # type: ignore[arg-type]
		return out

	def attr(self, tree: Tree) -> JsxAttr | JsxSpread:
		if tree.data == "spread_attr":
			items = self.seq(tree.children[1])
			if not items or not (isinstance(items[0], Tok) and items[0].text == "..."):
				raise ParseError("expected `...` in attribute braces", loc=self.span(tree))
			return JsxSpread(items[1:], self.span(tree))
		name = str(tree.children[0])
		if len(tree.children) == 1:
			return JsxAttr(name, None, self.span(tree))
		value = tree.children[2]
		if isinstance(value, Token):
			return JsxAttr(name, str(value)[1:-1], self.span(tree))
		return JsxAttr(name, JsxExpr(self.seq(value.children[1]), self.span(value)), self.span(tree))


__all__ = ["ParseError", "parse_items", "parse_module"]
