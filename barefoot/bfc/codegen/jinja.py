# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Jinja server template backend.

Pipeline placement:
  ComponentIR → JinjaEmitter (this module) → `{Name}.jinja`

Each component becomes one macro named after it; child components are
imported from `{Child}.jinja` with `{% from %}` and called like functions
(`{% call %}` when they receive children, which the child renders through
`caller()`). Expressions are translated by `jsexpr`; an expression with no
Jinja spelling renders empty (`none` in conditions) and is reported as a
BF021 warning. Templates are meant for an environment with
`autoescape=True`: expression output is escaped by Jinja, static text is
written as already-valid HTML.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from barefoot.logging import get_logger

from ..core.diagnostics import CompilerError
from ..core.span import Span
from ..ir.nodes import (
	IRAttribute,
	IRComponent,
	IRConditional,
	IRElement,
	IRExpression,
	IRLoop,
	IRText,
)
from ..parser import parse_items
from ..parser.ast import Item
from ..parser.items import find_op, is_group, is_kw, is_name, is_op, split_statements, split_top
from .emitter import (
	BOOLEAN_ATTRS,
	PROPS_ATTR,
	SCOPE_ATTR,
	Marker,
	TemplateEmitter,
	cond_end,
	cond_start,
	serializable_props,
)
from .jsexpr import UnsupportedExpression, jinja_string, translate_expression

logger = get_logger("bfc.codegen")

_CALLBACK_PROP = re.compile(r"^on[A-Z]")
_JINJA_SYNTAX = ("{{", "{%", "{#")


def _html_attr(value: str) -> str:
	return value.replace("&", "&amp;").replace('"', "&quot;")


class JinjaEmitter(TemplateEmitter):
	backend = "jinja"

	def __init__(self, ir, meta) -> None:
		super().__init__(ir, meta)
		self.getters = meta.signal_getters | meta.memo_names
		self._props = serializable_props(meta) if ir.interactive else []
		self._children_exprs = {"children"}
		if meta.props_object:
			self._children_exprs.add(f"{meta.props_object}.children")
		# key expression and span of the element whose open tag is being rendered
		self._key: Optional[str] = None
		self._span = Span()

	# --- expressions ---

	def expr(self, items: Sequence[Item], span: Span, what: str = "expression") -> Optional[str]:
		try:
			return translate_expression(items, self.getters)
		except UnsupportedExpression as exc:
			self.warn(span, f"{what} has no Jinja equivalent ({exc}); it renders empty")
			return None

	def _literal(self, text: str) -> str:
		if any(s in text for s in _JINJA_SYNTAX):
			return "{{ " + jinja_string(text) + " }}"
		return text

	# --- markers and attributes ---

	def render_marker(self, marker: Marker) -> str:
		if marker.name == SCOPE_ATTR:
			return f' {SCOPE_ATTR}="{{{{ __scope_id }}}}"'
		if marker.dynamic:
			value = self._key
			return f' {marker.name}="{{{{ {value} }}}}"' if value is not None else ""
		return f' {marker.name}="{marker.value}"'

	def render_attr(self, attr: IRAttribute) -> str:
		if attr.spread:
			value = self.expr(attr.items, self._span, "spread attribute")
			return f"{{{{ {value}|xmlattr }}}}" if value is not None else ""
		if attr.expr is not None:
			value = self.expr(attr.items, self._span, f"attribute '{attr.name}'")
			if value is None:
				return ""
			if attr.name in BOOLEAN_ATTRS:
				return f"{{% if {value} %}} {attr.name}{{% endif %}}"
			return f' {attr.name}="{{{{ {value} }}}}"'
		if attr.value is not None:
			return f' {attr.name}="{self._literal(_html_attr(attr.value))}"'
		return f" {attr.name}"

	# --- nodes ---

	def emit_element(self, node: IRElement) -> str:
		self._key = None
		self._span = node.span
		if node.key is not None:
			if node.key_items:
				self._key = self.expr(node.key_items, node.span, "list key")
			else:
				self._key = node.key
		head = self.open_tag(node)
		inner = self.emit_children(node.children)
		if node.is_root and self._props:
			inner += self._props_script()
		return f"{head}{inner}{self.close_tag(node)}"

	def emit_text(self, node: IRText) -> str:
		return self._literal(node.text)

	def emit_expression(self, node: IRExpression) -> str:
		if node.expr.strip() in self._children_exprs:
			inner = "{% if caller is defined %}{{ caller() }}{% endif %}"
		else:
			value = self.expr(node.items, node.span)
			inner = f"{{{{ {value} }}}}" if value is not None else ""
		if node.wrapped:
			return f'<span data-bf="{node.slot_id}">{inner}</span>'
		return inner

	def _condition(self, items: Sequence[Item], span: Span) -> str:
		value = self.expr(items, span, "condition")
		return value if value is not None else "none"

	def emit_conditional(self, node: IRConditional) -> str:
		out = f"{{% if {self._condition(node.cond_items, node.span)} %}}{self.emit(node.when_true)}"
		if node.when_false is not None:
			out += f"{{% else %}}{self.emit(node.when_false)}"
		out += "{% endif %}"
		if node.cond_id is not None and node.mode == "fragment":
			return cond_start(node.cond_id) + out + cond_end(node.cond_id)
		return out

	def _loop_target(self, node: IRLoop) -> Tuple[str, List[str]]:
		"""Jinja loop target plus `{% set %}` lines unpacking an object pattern."""
		pattern = node.param.strip()
		if pattern.startswith("["):
			return ", ".join(node.param_names), []
		if not pattern.startswith("{"):
			return pattern, []
		sets: List[str] = []
		(group,) = parse_items(pattern)
		for part in split_top(group.items):  # type: ignore[attr-defined]
			if not is_name(part[0]):
				self.warn(node.span, f"list item pattern '{pattern}' is not supported")
				continue
			source = part[0].text  # type: ignore[attr-defined]
			target = source
			if len(part) > 2 and is_op(part[1], ":") and is_name(part[2]):
				target = part[2].text  # type: ignore[attr-defined]
			sets.append(f"{{% set {target} = __item[{jinja_string(source)}] %}}")
		return "__item", sets

	def emit_loop(self, node: IRLoop) -> str:
		array = self.expr(node.array_items, node.span, "list source")
		target, sets = self._loop_target(node)
		if node.index:
			sets.append(f"{{% set {node.index} = loop.index0 %}}")
		body = self.emit(node.body)
		source = f"({array} or [])" if array is not None else "[]"
		out = f"{{% for {target} in {source} %}}{''.join(sets)}{body}{{% endfor %}}"
		if node.wrapped:
			return f'<span data-bf="{node.slot_id}">{out}</span>'
		return out

	def emit_component(self, node: IRComponent) -> str:
		args: List[str] = []
		spreads: List[str] = []
		for prop in node.props:
			if _CALLBACK_PROP.match(prop.name):
				# wired up by the client script
				continue
			if prop.spread:
				value = self.expr(prop.items, node.span, "spread prop")
				if value is not None:
					spreads.append(f"**{value}")
			elif prop.expr is not None:
				value = "true" if prop.expr == "true" and not prop.items else self.expr(prop.items, node.span, f"prop '{prop.name}'")
				if value is not None:
					args.append(f"{prop.name}={value}")
			else:
				args.append(f"{prop.name}={jinja_string(prop.value or '')}")
		call = f"{node.name}({', '.join(args + spreads)})"
		if not node.children:
			return f"{{{{ {call} }}}}"
		return f"{{% call {call} %}}{self.emit_children(node.children)}{{% endcall %}}"

	def _props_script(self) -> str:
		fields = ", ".join(f"{jinja_string(p.name)}: {p.name}" for p in self._props)
		return f'<script type="application/json" {PROPS_ATTR}="{{{{ __scope_id }}}}">{{{{ {{{fields}}}|tojson }}}}</script>'

	# --- document ---

	def _source_expr(self, source: str, what: str) -> Optional[str]:
		try:
			return translate_expression(parse_items(source), self.getters)
		except UnsupportedExpression as exc:
			self.warn(self.meta.span, f"{what} has no Jinja equivalent ({exc})")
			return None

	def _params(self) -> List[str]:
		params = []
		for prop in self.meta.props:
			if prop.name == "children":
				continue
			default = self._source_expr(prop.default, f"default of '{prop.name}'") if prop.default else None
			params.append(f"{prop.name}={default or 'none'}")
		params.append("__bf_scope=none")
		return params

	def _memo_body(self, computation: str) -> List[Item]:
		items = parse_items(computation)
		arrow = find_op(items, "=>")
		body = items[arrow + 1 :]
		if len(body) == 1 and is_group(body[0], "{"):
			for stmt in split_statements(body[0].items):  # type: ignore[attr-defined]
				if is_kw(stmt[0], "return"):
					return stmt[1:]
			return []
		return body

	def _const(self, text: str) -> Optional[Tuple[str, List[Item]]]:
		"""`const name = expr` / `let name: T = expr` → (name, expr items)."""
		items = parse_items(text)
		if len(items) < 4 or not is_name(items[0], "const", "let", "var") or not is_name(items[1]):
			return None
		eq = find_op(items, "=")
		if eq < 0:
			return None
		return items[1].text, items[eq + 1 :]  # type: ignore[attr-defined]

	def _sets(self) -> List[str]:
		meta = self.meta
		entries: List[Tuple[int, str]] = []
		for signal in meta.signals:
			value = self._source_expr(signal.initial, f"initial value of '{signal.getter}'")
			entries.append((signal.order, f"{{% set {signal.getter} = {value or 'none'} -%}}"))
		for memo in meta.memos:
			try:
				value = translate_expression(self._memo_body(memo.computation), self.getters)
			except UnsupportedExpression as exc:
				self.warn(memo.span, f"memo '{memo.name}' has no Jinja equivalent ({exc})")
				value = "none"
			entries.append((memo.order, f"{{% set {memo.name} = {value} -%}}"))
		for helper in meta.local_helpers:
			const = None if helper.is_function else self._const(helper.text)
			if const is None:
				continue
			name, items = const
			value = self._value_of(name, items)
			if value is not None:
				entries.append((helper.order, f"{{% set {name} = {value} -%}}"))
		lines = []
		for helper in meta.module_helpers:
			const = None if helper.is_function else self._const(helper.text)
			if const is not None:
				value = self._value_of(*const)
				if value is not None:
					lines.append(f"{{% set {const[0]} = {value} -%}}")
		if meta.props_object:
			fields = ", ".join(f"{p.name}={p.name}" for p in meta.props)
			lines.append(f"{{% set {meta.props_object} = dict(kwargs{', ' + fields if fields else ''}) -%}}")
		elif meta.rest_props:
			lines.append(f"{{% set {meta.rest_props} = kwargs -%}}")
		lines.extend(line for _, line in sorted(entries, key=lambda e: e[0]))
		return lines

	def _value_of(self, name: str, items: List[Item]) -> Optional[str]:
		try:
			return translate_expression(items, self.getters)
		except UnsupportedExpression as exc:
			self.warn(self.meta.span, f"local '{name}' has no Jinja equivalent ({exc})")
			return None

	def emit_document(self) -> str:
		meta = self.meta
		head = [f'{{% from "{child}.jinja" import {child} %}}' for child in meta.child_components]
		scope = (
			f'{{% set __scope_id = __bf_scope or ("{meta.name}_%06x"|format(range(16777216)|random)) -%}}'
		)
		body = ""
		for idx, guard in enumerate(self.ir.guarded):
			keyword = "if" if idx == 0 else "elif"
			body += f"{{% {keyword} {self._condition(guard.cond_items, meta.span)} %}}{self.emit(guard.root)}"
		main = self.emit(self.ir.root)
		body = body + f"{{% else %}}{main}{{% endif %}}" if self.ir.guarded else main
		lines = head + [
			f"{{% macro {meta.name}({', '.join(self._params())}) -%}}",
			scope,
			*self._sets(),
			body,
			"{%- endmacro %}",
			"",
		]
		logger.debug("jinja: %s rendered with %d warnings", meta.name, len(self.diagnostics))
		return "\n".join(lines)


def generate_jinja(ir, meta) -> Tuple[str, List[CompilerError]]:
	emitter = JinjaEmitter(ir, meta)
	return emitter.emit_document(), emitter.diagnostics


__all__ = ["JinjaEmitter", "generate_jinja"]
