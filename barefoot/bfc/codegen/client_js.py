# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Client hydration script backend.

Pipeline placement:
  ComponentIR + ComponentMetadata → ClientScript (this module) → `{Name}.client.js`

The script exports `init{Name}(__instanceIndex, __parentScope, props)` and
registers it with `hydrate`. Inside, it locates the component's scope
element, merges server-serialized props, recreates signals and memos,
copies the live helpers (TypeScript stripped) and wires every slot:

  - text and attribute effects for reactive slots
  - direct `on{event}` handlers for slot elements
  - `reconcileList` / `innerHTML` effects and one delegated listener per
    event type for client-rendered lists
  - `cond(...)` for reactive conditionals, with branch templates and the
    handlers to rebind after each swap
  - `initChild(...)` for child components rendered once

List items and conditional branches are re-rendered from JS template
literals produced by `ClientTemplateEmitter` from the same IR and marker
rules the server templates use.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

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
	walk,
)
from .emitter import BOOLEAN_ATTRS, SCOPE_ATTR, Marker, TemplateEmitter, cond_end, cond_start
from .hono import RUNTIME_MODULES
from .liveness import LiveCode, live_code
from .strip_types import strip_types

logger = get_logger("bfc.codegen")

_INDENT = "  "
_SIMPLE_EXPR = re.compile(r"^[\w$.]+(\(\))?$")
# DOM properties written directly instead of through setAttribute.
_PROPERTY_ATTRS = {"value": "value", "checked": "checked", "selected": "selected"}

ESC_HELPER = """const __escMap = { '&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#39;' }
function __esc(value) {
  if (value == null || typeof value === 'boolean') return ''
  return String(value).replace(/[&<>"']/g, (c) => __escMap[c])
}"""


def template_text(text: str) -> str:
	"""Escape `text` for use inside a JS template literal."""
	return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def js_string(text: str) -> str:
	return "'" + text.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n") + "'"


def slot_selector(slot_id: str) -> str:
	return f'[data-bf="{slot_id}"]'


class ClientTemplateEmitter(TemplateEmitter):
	"""
	IR subtree → body of a JS template literal.

	Used for list items and conditional branches re-rendered in the browser.
	Child components cannot be rendered client-side: they are reported and
	left out of the template.
	"""

	backend = "client"

	def __init__(self, ir, meta) -> None:
		super().__init__(ir, meta)
		self.uses_esc = False

	def hole(self, expr: str) -> str:
		self.uses_esc = True
		return "${__esc(" + strip_types(expr) + ")}"

	def render_marker(self, marker: Marker) -> str:
		if marker.name == SCOPE_ATTR:
			return ""
		if marker.dynamic:
			return f' {marker.name}="{self.hole(marker.value)}"'
		return f' {marker.name}="{marker.value}"'

	def render_attr(self, attr: IRAttribute) -> str:
		if attr.spread:
			self.warn(self.ir.root.span, "spread attributes are not re-rendered in the browser")
			return ""
		if attr.expr is not None:
			expr = strip_types(attr.expr)
			if attr.name in BOOLEAN_ATTRS:
				return "${(" + expr + ") ? ' " + attr.name + "' : ''}"
			return f' {attr.name}="{self.hole(attr.expr)}"'
		if attr.value is not None:
			value = attr.value.replace("&", "&amp;").replace('"', "&quot;")
			return f' {attr.name}="{template_text(value)}"'
		return f" {attr.name}"

	def emit_element(self, node: IRElement) -> str:
		return f"{self.open_tag(node)}{self.emit_children(node.children)}{self.close_tag(node)}"

	def emit_text(self, node: IRText) -> str:
		return template_text(node.text)

	def emit_expression(self, node: IRExpression) -> str:
		inner = self.hole(node.expr)
		if node.wrapped:
			return f'<span data-bf="{node.slot_id}">{inner}</span>'
		return inner

	def branch(self, node: Optional[IRNode]) -> str:
		return "`" + self.emit(node) + "`"

	def emit_conditional(self, node: IRConditional) -> str:
		condition = strip_types(node.condition)
		out = "${(" + condition + ") ? " + self.branch(node.when_true) + " : " + self.branch(node.when_false) + "}"
		if node.cond_id is not None and node.mode == "fragment":
			return cond_start(node.cond_id) + out + cond_end(node.cond_id)
		return out

	def emit_loop(self, node: IRLoop) -> str:
		params = node.param if not node.index else f"{node.param}, {node.index}"
		out = "${(" + strip_types(node.array) + f").map(({params}) => " + self.branch(node.body) + ").join('')}"
		if node.wrapped:
			return f'<span data-bf="{node.slot_id}">{out}</span>'
		return out

	def emit_component(self, node: IRComponent) -> str:
		self.warn(node.span, f"<{node.name}> inside client-rendered markup is not rendered in the browser")
		return ""

	def emit_fragment(self, node: IRFragment) -> str:
		return self.emit_children(node.children)


@dataclass
class _Site:
	node: IRNode
	# Inside a reactive conditional branch: looked up each time it is used.
	dynamic: bool = False
	# May be missing from the server markup (conditional branch, guarded root).
	optional: bool = False


@dataclass
class _Sites:
	slots: List[_Site] = field(default_factory=list)
	loops: List[_Site] = field(default_factory=list)
	conds: List[_Site] = field(default_factory=list)
	children: List[_Site] = field(default_factory=list)


class ClientScript:
	"""Builds the client script text for one interactive component."""

	def __init__(self, ir, meta, runtime_module: str = RUNTIME_MODULES[0]) -> None:
		self.ir = ir
		self.meta = meta
		self.runtime_module = runtime_module
		self.runtime_modules = {runtime_module, *RUNTIME_MODULES}
		self.templates = ClientTemplateEmitter(ir, meta)
		self.live: LiveCode = live_code(meta, ir)
		self.used: Set[str] = set()
		self.sites = _Sites()
		self._declared: Set[str] = set()

	@property
	def diagnostics(self) -> List[CompilerError]:
		return self.templates.diagnostics

	def rt(self, name: str) -> str:
		self.used.add(name)
		return name

	# --- site collection ---

	def _collect(self, node: Optional[IRNode], dynamic: bool, optional: bool) -> None:
		if node is None:
			return
		if isinstance(node, IRElement):
			if node.slot_id is not None:
				self.sites.slots.append(_Site(node, dynamic, optional))
			for child in node.children:
				self._collect(child, dynamic, optional)
		elif isinstance(node, IRExpression):
			if node.wrapped:
				self.sites.slots.append(_Site(node, dynamic, optional))
		elif isinstance(node, IRLoop):
			if node.needs_client:
				self.sites.loops.append(_Site(node, dynamic, optional))
		elif isinstance(node, IRConditional):
			if node.reactive:
				self.sites.conds.append(_Site(node, dynamic, optional))
				self._collect(node.when_true, True, True)
				self._collect(node.when_false, True, True)
			else:
				self._collect(node.when_true, dynamic, True)
				self._collect(node.when_false, dynamic, True)
		elif isinstance(node, IRComponent):
			self.sites.children.append(_Site(node, dynamic, optional))
			for child in node.children:
				# rendered inside the child's scope element
				self._collect(child, dynamic, True)
		elif isinstance(node, IRFragment):
			for child in node.children:
				self._collect(child, dynamic, optional)

	# --- slot access ---

	def _lookup(self, slot_id: str) -> str:
		return f"{self.rt('find')}(__scope, '{slot_selector(slot_id)}')"

	def _slot_var(self, slot_id: str, out: List[str]) -> str:
		name = f"_s{slot_id}"
		if name not in self._declared:
			self._declared.add(name)
			out.append(f"const {name} = {self._lookup(slot_id)}")
		return name

	@staticmethod
	def _guarded(var: str, lines: List[str], optional: bool) -> List[str]:
		if not optional or not lines:
			return lines
		return [f"if ({var}) {{"] + [_INDENT + line for line in lines] + ["}"]

	# --- per-slot wiring ---

	def _text_value(self, parts: List[IRNode]) -> str:
		exprs = [p for p in parts if isinstance(p, IRExpression)]
		if len(parts) == 1 and exprs:
			expr = strip_types(exprs[0].expr)
			return f"String({expr} ?? '')" if _SIMPLE_EXPR.match(expr) else f"String(({expr}) ?? '')"
		chunks = []
		for part in parts:
			if isinstance(part, IRText):
				chunks.append(template_text(part.text))
			elif isinstance(part, IRExpression):
				chunks.append("${(" + strip_types(part.expr) + ") ?? ''}")
		return "`" + "".join(chunks) + "`"

	def _attr_update(self, el: str, attr: IRAttribute) -> List[str]:
		expr = strip_types(attr.expr or "")
		if attr.name in _PROPERTY_ATTRS:
			prop = _PROPERTY_ATTRS[attr.name]
			value = f"!!({expr})" if attr.name in BOOLEAN_ATTRS else f"({expr}) ?? ''"
			return [f"{el}.{prop} = {value}"]
		if attr.name in BOOLEAN_ATTRS:
			return [f"if ({expr}) {el}.setAttribute('{attr.name}', '')", f"else {el}.removeAttribute('{attr.name}')"]
		return [
			f"const __v = {expr}",
			f"if (__v == null || __v === false) {el}.removeAttribute('{attr.name}')",
			f"else {el}.setAttribute('{attr.name}', String(__v))",
		]

	def _updates(self, site: _Site, el: str) -> List[List[str]]:
		"""Effect bodies keeping the slot's text and attributes current."""
		node = site.node
		bodies: List[List[str]] = []
		if isinstance(node, IRExpression):
			bodies.append([f"{el}.textContent = {self._text_value([node])}"])
			return bodies
		assert isinstance(node, IRElement)
		if node.text_binding:
			bodies.append([f"{el}.textContent = {self._text_value(node.children)}"])
		for attr in node.attrs:
			if attr.reactive and not attr.spread:
				bodies.append(self._attr_update(el, attr))
		return bodies

	def _effect(self, body: List[str]) -> List[str]:
		return [f"{self.rt('createEffect')}(() => {{"] + [_INDENT + line for line in body] + ["})"]

	def _wire_slot(self, site: _Site) -> List[str]:
		node = site.node
		slot_id = node.slot_id  # type: ignore[attr-defined]
		out: List[str] = []
		if site.dynamic:
			# Re-found on every run: the branch holding it may have been swapped.
			for body in self._updates(site, "__el"):
				out.extend(
					self._effect([f"const __el = {self._lookup(slot_id)}", "if (!__el) return"] + body)
				)
			if isinstance(node, IRElement) and node.ref is not None:
				out.append(f"{{ const __el = {self._lookup(slot_id)}; if (__el) ({strip_types(node.ref)})(__el) }}")
			return out
		var = self._slot_var(slot_id, out)
		lines: List[str] = []
		for body in self._updates(site, var):
			lines.extend(self._effect(body))
		if isinstance(node, IRElement):
			for event in node.events:
				if not event.delegated:
					lines.append(f"{var}.on{event.name} = {strip_types(event.handler)}")
			if node.ref is not None:
				lines.append(f";({strip_types(node.ref)})({var})")
		return out + self._guarded(var, lines, site.optional)

	# --- loops ---

	def _loop_params(self, loop: IRLoop) -> str:
		return f"({loop.param}, {loop.index or '__i'})"

	def _wire_loop(self, site: _Site) -> List[str]:
		loop = site.node
		assert isinstance(loop, IRLoop)
		slot_id = loop.slot_id or ""
		out: List[str] = []
		if site.dynamic:
			container = "__c"
			lookup = [f"const __c = {self._lookup(slot_id)}", "if (!__c) return"]
		else:
			container = self._slot_var(slot_id, out)
			lookup = [f"if (!{container}) return"] if site.optional else []
		array = strip_types(loop.array)
		template = self.templates.branch(loop.body)
		if loop.reactive:
			if loop.keyed:
				key_fn = f"{self._loop_params(loop)} => String({strip_types(loop.key or '')})"
				render = f"{self._loop_params(loop)} => {template}"
				body = lookup + [f"{self.rt('reconcileList')}({container}, {array}, {key_fn}, {render})"]
			else:
				body = lookup + [
					f"{container}.innerHTML = ({array}).map({self._loop_params(loop)} => {template}).join('')"
				]
			out.extend(self._effect(body))
		out.extend(self._delegation(loop, container if not site.dynamic else self._lookup(slot_id)))
		return out

	def _delegation(self, loop: IRLoop, container: str) -> List[str]:
		by_event: Dict[str, Dict[str, str]] = {}
		for node in walk(loop.body):
			if not isinstance(node, IRElement):
				continue
			element_id = node.delegated_event_id
			for event in node.events:
				if event.delegated and element_id is not None:
					by_event.setdefault(event.name, {})[element_id] = event.handler
		out: List[str] = []
		array = strip_types(loop.array)
		for name, table in by_event.items():
			out.append(f"{self.rt('delegate')}({container}, '{name}', {{")
			for element_id, handler in table.items():
				out.append(f"{_INDENT}'{element_id}': (__key, __e) => {{")
				body = [f"const __items = {array}"]
				if loop.keyed:
					body.append(
						f"const __i = __items.findIndex({self._loop_params(loop)} => String({strip_types(loop.key or '')}) === __key)"
					)
				else:
					body.append("const __i = Number(__key)")
				body.append("if (__i < 0 || __i >= __items.length) return")
				body.append(f"const {loop.param} = __items[__i]")
				if loop.index:
					body.append(f"const {loop.index} = __i")
				body.append(f";({strip_types(handler)})(__e)")
				out.extend(_INDENT * 2 + line for line in body)
				out.append(f"{_INDENT}}},")
			out.append("})")
		return out

	# --- conditionals ---

	def _wire_cond(self, site: _Site) -> List[str]:
		node = site.node
		assert isinstance(node, IRConditional)
		templates = [f"() => {self.templates.branch(node.when_true)}", f"() => {self.templates.branch(node.when_false)}"]
		handlers = []
		for branch in (node.when_true, node.when_false):
			for sub in walk(branch):
				if isinstance(sub, IRElement) and sub.slot_id is not None:
					for event in sub.events:
						if not event.delegated:
							handlers.append(
								f"['{slot_selector(sub.slot_id)}', '{event.name}', {strip_types(event.handler)}]"
							)
		args = [
			"__scope",
			f"'{node.cond_id}'",
			f"() => {strip_types(node.condition)}",
			"[" + ", ".join(templates) + "]",
		]
		if handlers:
			args.append("[" + ", ".join(handlers) + "]")
		return [f"{self.rt('cond')}({', '.join(args)})"]

	# --- child components ---

	def _child_props(self, node: IRComponent) -> str:
		fields = []
		for prop in node.props:
			if prop.spread:
				fields.append(f"...{strip_types(prop.expr or '')}")
			elif prop.expr is not None:
				expr = strip_types(prop.expr)
				if prop.reactive:
					fields.append(f"get {prop.name}() {{ return {expr} }}")
				else:
					fields.append(f"{prop.name}: {expr}")
			else:
				fields.append(f"{prop.name}: {js_string(prop.value or '')}")
		return "{ " + ", ".join(fields) + " }" if fields else "{}"

	def _wire_children(self) -> List[str]:
		unconditional: Dict[str, bool] = {}
		for site in self.sites.children:
			name = site.node.name  # type: ignore[attr-defined]
			unconditional[name] = unconditional.get(name, True) and not (site.dynamic or site.optional)
		for node in (n for root in self.ir.roots() for n in walk(root)):
			if isinstance(node, IRLoop):
				for sub in walk(node.body):
					if isinstance(sub, IRComponent):
						unconditional[sub.name] = False
		out: List[str] = []
		counts: Dict[str, int] = {}
		for site in self.sites.children:
			node = site.node
			assert isinstance(node, IRComponent)
			if not unconditional.get(node.name):
				continue
			index = counts.get(node.name, 0)
			counts[node.name] = index + 1
			element = f"{self.rt('find')}(__scope, '[{SCOPE_ATTR}^=\"{node.name}_\"]', {index})"
			out.append(f"{self.rt('initChild')}('{node.name}', {element}, {self._child_props(node)})")
		return out

	# --- document ---

	def _props_lines(self) -> List[str]:
		meta = self.meta
		if not (meta.props or meta.props_object or meta.rest_props):
			return []
		lines = [
			f"props = Object.defineProperties({{ ...{self.rt('readProps')}(__scope) }}, "
			"Object.getOwnPropertyDescriptors(props))"
		]
		if meta.props_object:
			if meta.props_object != "props":
				lines.append(f"const {meta.props_object} = props")
			return lines
		fields = [f"{p.name} = {strip_types(p.default)}" if p.default is not None else p.name for p in meta.props]
		if meta.rest_props:
			fields.append(f"...{meta.rest_props}")
		lines.append("const { " + ", ".join(fields) + " } = props")
		return lines

	def _state_lines(self) -> List[str]:
		meta = self.meta
		entries: List[Tuple[int, str]] = []
		for signal in meta.signals:
			target = f"[{signal.getter}, {signal.setter}]" if signal.setter else f"[{signal.getter}]"
			entries.append((signal.order, f"const {target} = {self.rt('createSignal')}({strip_types(signal.initial)})"))
		for memo in meta.memos:
			entries.append((memo.order, f"const {memo.name} = {self.rt('createMemo')}({strip_types(memo.computation)})"))
		for helper in self.live.local_helpers:
			entries.append((helper.order, strip_types(helper.text)))
		return [text for _, text in sorted(entries, key=lambda e: e[0])]

	def _init_body(self) -> List[str]:
		meta = self.meta
		for root in self.ir.roots():
			self._collect(root, False, bool(self.ir.guarded))
		body = [
			f"const __scope = {self.rt('findScope')}('{meta.name}', __instanceIndex, __parentScope)",
			"if (!__scope) return",
		]
		body += self._props_lines()
		body += self._state_lines()
		wiring: List[str] = []
		for site in self.sites.slots:
			wiring += self._wire_slot(site)
		for site in self.sites.loops:
			wiring += self._wire_loop(site)
		for site in self.sites.conds:
			wiring += self._wire_cond(site)
		for effect in meta.effects:
			wiring.append(f"{self.rt('createEffect')}({strip_types(effect.body)})")
		for mount in meta.on_mounts:
			wiring.append(f"{self.rt('onMount')}({strip_types(mount.body)})")
		wiring += self._wire_children()
		return body + wiring

	def _imports(self, text: str) -> List[str]:
		meta = self.meta
		words = set(re.findall(r"[A-Za-z_$][\w$]*", text))
		runtime = sorted(self.used)
		out: List[str] = []
		for imp in meta.imports:
			if imp.type_only:
				continue
			if imp.source in self.runtime_modules:
				runtime = sorted(set(runtime) | {s.name for s in imp.specifiers if not s.type_only and s.local in words and s.local == s.name})
				continue
			specs = [
				s for s in imp.specifiers
				if not s.type_only and s.local in words and s.local not in meta.child_components
			]
			names = [f"{s.name} as {s.alias}" if s.alias else s.name for s in specs]
			default = imp.default if imp.default and imp.default in words and imp.default not in meta.child_components else None
			namespace = imp.namespace if imp.namespace and imp.namespace in words else None
			if namespace:
				out.append(f"import * as {namespace} from '{imp.source}'")
			elif default or names:
				clause = ", ".join(([default] if default else []) + (["{ " + ", ".join(names) + " }"] if names else []))
				out.append(f"import {clause} from '{imp.source}'")
		return [f"import {{ {', '.join(runtime)} }} from '{self.runtime_module}'"] + out

	def generate(self) -> str:
		meta = self.meta
		body = self._init_body()
		self.rt("hydrate")
		init = [f"export function init{meta.name}(__instanceIndex, __parentScope, props = {{}}) {{"]
		init += [_INDENT + line for line in body]
		init.append("}")
		helpers = [strip_types(h.text) for h in self.live.module_helpers]
		tail = [f"{self.rt('hydrate')}('{meta.name}', init{meta.name})"]
		code = "\n".join(helpers + init + tail)
		sections = ["\n".join(self._imports(code)), ""]
		if self.templates.uses_esc:
			sections += [ESC_HELPER, ""]
		for helper in helpers:
			sections += [helper, ""]
		sections += ["\n".join(init), "", tail[0], ""]
		logger.debug(
			"client: %s wired %d slots, %d lists, %d conditionals",
			meta.name,
			len(self.sites.slots),
			len(self.sites.loops),
			len(self.sites.conds),
		)
		return "\n".join(sections)


def generate_client(ir, meta, runtime_module: str = RUNTIME_MODULES[0]) -> Tuple[str, List[CompilerError]]:
	script = ClientScript(ir, meta, runtime_module)
	return script.generate(), script.diagnostics


__all__ = [
	"ClientScript",
	"ClientTemplateEmitter",
	"ESC_HELPER",
	"generate_client",
	"js_string",
	"slot_selector",
	"template_text",
]
