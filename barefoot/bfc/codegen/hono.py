# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Hono server template backend.

Pipeline placement:
  ComponentIR → HonoEmitter (this module) → `{Name}.hono.tsx`

The output is a TSX function component for Hono's JSX renderer. It keeps the
source's imports, type definitions and helpers verbatim, replaces signals
with constant getters holding the initial value and setters with no-ops,
and renders the IR with hydration markers. Client-only constructs (event
handlers, refs, effects) are dropped. Interactive components also render a
`<script type="application/json" data-bf-props>` block with their
serializable props as the last child of the root element.
"""

from __future__ import annotations

import json
from typing import List, Tuple

from barefoot.logging import get_logger

from ..core.diagnostics import CompilerError
from ..ir.nodes import (
	IRAttribute,
	IRComponent,
	IRConditional,
	IRElement,
	IRExpression,
	IRFragment,
	IRLoop,
	IRNode,
	IRText,
)
from .emitter import (
	PROPS_ATTR,
	SCOPE_ATTR,
	Marker,
	TemplateEmitter,
	cond_end,
	cond_start,
	serializable_props,
)

logger = get_logger("bfc.codegen")

RUNTIME_MODULES = ("@barefootjs/dom",)
_INDENT = "  "


def _jsx_string(value: str) -> str:
	if '"' in value:
		return "{" + json.dumps(value) + "}"
	return f'"{value}"'


class HonoEmitter(TemplateEmitter):
	backend = "hono"

	def __init__(self, ir, meta, runtime_module: str = RUNTIME_MODULES[0]) -> None:
		super().__init__(ir, meta)
		self.runtime_modules = {runtime_module, *RUNTIME_MODULES}
		self._uses_raw = False
		self._props = serializable_props(meta) if ir.interactive else []

	# --- markers and attributes ---

	def render_marker(self, marker: Marker) -> str:
		if marker.name == SCOPE_ATTR:
			return f" {SCOPE_ATTR}={{__scopeId}}"
		if marker.dynamic:
			return f" {marker.name}={{{marker.value}}}"
		return f' {marker.name}="{marker.value}"'

	def render_attr(self, attr: IRAttribute) -> str:
		if attr.spread:
			return f" {{...{attr.expr}}}"
		if attr.expr is not None:
			return f" {attr.name}={{{attr.expr}}}"
		if attr.value is not None:
			return f" {attr.name}={_jsx_string(attr.value)}"
		return f" {attr.name}"

	# --- nodes ---

	def emit_element(self, node: IRElement) -> str:
		inner = self.emit_children(node.children)
		if node.is_root and self._props:
			inner += self._props_script()
		if not inner and not node.is_root:
			return self.open_tag(node)[:-1] + " />"
		return f"{self.open_tag(node)}{inner}</{node.tag}>"

	def emit_text(self, node: IRText) -> str:
		return node.text

	def emit_expression(self, node: IRExpression) -> str:
		inner = "{" + node.expr + "}"
		if node.wrapped:
			return f'<span data-bf="{node.slot_id}">{inner}</span>'
		return inner

	def _branch(self, node) -> str:
		if node is None:
			return "null"
		if isinstance(node, IRElement):
			return self.emit(node)
		return f"<>{self.emit(node)}</>"

	def emit_conditional(self, node: IRConditional) -> str:
		body = "{" + f"({node.condition}) ? {self._branch(node.when_true)} : {self._branch(node.when_false)}" + "}"
		if node.cond_id is not None and node.mode == "fragment":
			self._uses_raw = True
			return (
				f"{{raw('{cond_start(node.cond_id)}')}}"
				+ body
				+ f"{{raw('{cond_end(node.cond_id)}')}}"
			)
		return body

	def emit_loop(self, node: IRLoop) -> str:
		params = node.param if not node.index else f"{node.param}, {node.index}"
		body = self._branch(node.body)
		out = "{" + f"{node.array}.map(({params}) => {body})" + "}"
		if node.wrapped:
			return f'<span data-bf="{node.slot_id}">{out}</span>'
		return out

	def emit_component(self, node: IRComponent) -> str:
		parts = []
		for prop in node.props:
			if prop.spread:
				parts.append(f" {{...{prop.expr}}}")
			elif prop.expr is not None:
				parts.append(f" {prop.name}={{{prop.expr}}}")
			else:
				parts.append(f" {prop.name}={_jsx_string(prop.value or '')}")
		attrs = "".join(parts)
		if not node.children:
			return f"<{node.name}{attrs} />"
		return f"<{node.name}{attrs}>{self.emit_children(node.children)}</{node.name}>"

	def emit_fragment(self, node: IRFragment) -> str:
		return self.emit_children(node.children)

	def _props_script(self) -> str:
		if self.meta.props_object:
			fields = ", ".join(f"{p.name}: {self.meta.props_object}.{p.name}" for p in self._props)
		else:
			fields = ", ".join(p.name for p in self._props)
		payload = f"JSON.stringify({{ {fields} }}).replace(/</g, '\\\\u003c')"
		return (
			f'<script type="application/json" {PROPS_ATTR}={{__scopeId}} '
			f"dangerouslySetInnerHTML={{{{ __html: {payload} }}}} />"
		)

	# --- document ---

	def _signature(self) -> str:
		meta = self.meta
		if meta.props_object:
			return f"{{ __instanceId, __bfScope, ...{meta.props_object} }}"
		fields = []
		for prop in meta.props:
			fields.append(f"{prop.name} = {prop.default}" if prop.default is not None else prop.name)
		fields.extend(["__instanceId", "__bfScope"])
		if meta.rest_props:
			fields.append(f"...{meta.rest_props}")
		return "{ " + ", ".join(fields) + " }"

	def _props_type(self) -> str:
		meta = self.meta
		base = meta.props_type or ("Record<string, unknown>" if meta.props or meta.rest_props else "{}")
		return f"type {meta.name}PropsWithHydration = {base} & {{ __instanceId?: string; __bfScope?: string }}"

	def _body(self) -> List[str]:
		meta = self.meta
		entries = []
		for signal in meta.signals:
			typed = f"(): {signal.type_arg}" if signal.type_arg else "()"
			lines = [f"const {signal.getter} = {typed} => {signal.initial}"]
			if signal.setter:
				lines.append(f"const {signal.setter} = (..._args: unknown[]) => {{}}")
			entries.append((signal.order, lines))
		for memo in meta.memos:
			entries.append((memo.order, [f"const {memo.name} = {memo.computation}"]))
		for helper in meta.local_helpers:
			entries.append((helper.order, [helper.text]))
		out: List[str] = []
		for _, lines in sorted(entries, key=lambda e: e[0]):
			out.extend(lines)
		return out

	def _return(self, node: IRNode, depth: int) -> List[str]:
		pad = _INDENT * depth
		return [f"{pad}return (", f"{pad}{_INDENT}{self.emit(node)}", f"{pad})"]

	def emit_document(self) -> str:
		meta = self.meta
		body = [f"{_INDENT}{line}" for line in self._body()]
		returns: List[str] = []
		for guard in self.ir.guarded:
			returns.append(f"{_INDENT}if ({guard.condition}) {{")
			returns.extend(self._return(guard.root, 2))
			returns.append(f"{_INDENT}}}")
		returns.extend(self._return(self.ir.root, 1))

		head: List[str] = []
		for imp in meta.imports:
			if imp.source in self.runtime_modules:
				continue
			head.append(imp.text)
		if self._uses_raw:
			head.append("import { raw } from 'hono/html'")
		if head:
			head.append("")
		for type_def in meta.type_defs:
			head.extend([type_def.text, ""])
		for helper in meta.module_helpers:
			head.extend([helper.text, ""])
		head.extend([self._props_type(), ""])

		export = "export default function" if meta.is_default_export else "export function" if meta.is_exported else "function"
		scope = f"{_INDENT}const __scopeId = __bfScope || __instanceId || `{meta.name}_${{Math.random().toString(36).slice(2, 8)}}`"
		lines = head + [
			f"{export} {meta.name}({self._signature()}: {meta.name}PropsWithHydration) {{",
			scope,
			*body,
			*returns,
			"}",
			"",
		]
		logger.debug("hono: %s rendered (%d lines)", meta.name, len(lines))
		return "\n".join(lines)


def generate_hono(ir, meta, runtime_module: str = RUNTIME_MODULES[0]) -> Tuple[str, List[CompilerError]]:
	emitter = HonoEmitter(ir, meta, runtime_module)
	return emitter.emit_document(), emitter.diagnostics


__all__ = ["HonoEmitter", "RUNTIME_MODULES", "generate_hono"]
