# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Markup → IR lowering with slot, event and attribute-binding tables.

Pipeline placement:
  analysis (ComponentMetadata) → build_ir → codegen

The builder walks each markup root once, depth-first and left to right.
Slot ids and conditional ids come from one per-component counter, so the
same source always produces the same markers. Per-item markup inside a loop
gets no slots: the whole item is re-rendered from the loop's client template
and its events go through one delegated listener on the loop container.

Problems are reported as `CompilerError`s on the returned `ComponentIR`
(phase "ir"); the only error-severity one is a loop key that references a
binding the item cannot see.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from barefoot.logging import get_logger

from ..analysis.analyzer import pattern_names
from ..analysis.metadata import ComponentMetadata
from ..core.diagnostics import CompilerError, ErrorCode, make_error, make_warning
from ..core.span import Span
from ..parser.ast import (
	Item,
	JsxAttr,
	JsxElement,
	JsxExpr,
	JsxFragment,
	JsxNode,
	JsxSpread,
	JsxText,
	Tok,
)
from ..parser.items import (
	called_names,
	find_op,
	is_group,
	is_kw,
	is_name,
	is_op,
	iter_items,
	referenced_names,
	split_statements,
	split_top,
	unwrap_parens,
)
from .nodes import (
	ComponentIR,
	GuardedIR,
	IRAttribute,
	IRComponent,
	IRConditional,
	IRElement,
	IREvent,
	IRExpression,
	IRFragment,
	IRLoop,
	IRNode,
	IRProp,
	IRText,
	render_literal,
	walk,
)

logger = get_logger("bfc.ir")

PHASE = "ir"
_EVENT_ATTR = re.compile(r"^on[A-Z]")
_ATTR_ALIASES = {"className": "class", "htmlFor": "for"}
_EMPTY_BRANCHES = ("null", "undefined", "false")

# Free names a key expression may use besides the item's own bindings.
JS_GLOBALS = frozenset(
	{
		"Array",
		"Boolean",
		"Date",
		"Infinity",
		"JSON",
		"Math",
		"NaN",
		"Number",
		"Object",
		"String",
		"encodeURIComponent",
		"false",
		"null",
		"parseFloat",
		"parseInt",
		"this",
		"true",
		"undefined",
	}
)


def reactive_callables(meta: ComponentMetadata) -> Set[str]:
	"""
	Names whose call reads reactive state: signal getters, memos and helper
	functions that (transitively) reference one of them or the props object.
	"""
	reactive = set(meta.reactive_names)
	sources = {meta.props_object} if meta.props_object else set()
	helpers = [h for h in meta.module_helpers + meta.local_helpers if h.names and h.is_function]
	changed = True
	while changed:
		changed = False
		for helper in helpers:
			if set(helper.names) <= reactive:
				continue
			if helper.references & (reactive | sources):
				reactive.update(helper.names)
				changed = True
	return reactive


def jsx_text(text: str) -> str:
	"""
	Collapse JSX text the way JSX compilers do: lines are trimmed, blank lines
	dropped and the remaining lines joined with a single space.
	"""
	if "\n" not in text:
		return text
	lines = text.split("\n")
	last_non_empty = max((i for i, line in enumerate(lines) if line.strip()), default=-1)
	out: List[str] = []
	for idx, line in enumerate(lines):
		if idx > 0:
			line = line.lstrip(" \t")
		if idx < len(lines) - 1:
			line = line.rstrip(" \t")
		if line:
			out.append(line + (" " if idx != last_non_empty else ""))
	return "".join(out)


@dataclass
class _LoopParts:
	array: List[Item]
	param: List[Item]
	index: Optional[str]
	body: JsxNode


@dataclass
class _CondParts:
	condition: List[Item]
	when_true: List[Item]
	when_false: Optional[List[Item]]


@dataclass
class _EventScope:
	key: str
	table: Dict[str, str] = field(default_factory=dict)


class IRBuilder:
	"""
	Lowers one component's markup roots to IR.

	Per-node work is dispatched to `_build_{Kind}` methods keyed by the markup
	class name; unknown kinds raise `NotImplementedError`.
	"""

	def __init__(self, meta: ComponentMetadata) -> None:
		self.meta = meta
		self.diagnostics: List[CompilerError] = []
		self.reactive = reactive_callables(meta)
		self._next_id = 0
		self._slot_nodes: Dict[str, IRNode] = {}
		self._attr_bindings: Dict[str, Dict[str, str]] = {}
		self._events: Dict[str, Dict[str, str]] = {"component": {}}
		self._scopes: List[_EventScope] = [_EventScope("component", self._events["component"])]
		# Bindings of every enclosing loop item, innermost last.
		self._loops: List[Set[str]] = []
		self._has_refs = False
		self._has_conds = False

	# --- entry point ---

	def build(self) -> ComponentIR:
		guarded = [
			GuardedIR(g.condition, g.condition_items, self._build_root(g.markup))
			for g in self.meta.guarded_roots
		]
		root = self._build_root(self.meta.root)
		ir = ComponentIR(
			name=self.meta.name,
			root=root,
			guarded=guarded,
			slots={sid: render_literal(node) for sid, node in self._slot_nodes.items()},
			events={k: v for k, v in self._events.items() if v or k == "component"},
			attr_bindings=self._attr_bindings,
			reactive_names=frozenset(self.reactive),
			diagnostics=self.diagnostics,
		)
		ir.interactive = bool(
			self.meta.is_stateful
			or self._slot_nodes
			or self._has_refs
			or self._has_conds
			or any(self._events.values())
		)
		logger.debug(
			"ir %s: %d slots, %d event scopes, interactive=%s",
			ir.name,
			len(ir.slots),
			len(ir.events),
			ir.interactive,
		)
		return ir

	def _build_root(self, markup: JsxNode) -> IRNode:
		if isinstance(markup, JsxFragment):
			meaningful = [c for c in markup.children if not (isinstance(c, JsxText) and not jsx_text(c.text).strip())]
			if len(meaningful) == 1 and isinstance(meaningful[0], JsxElement) and not _is_component(meaningful[0]):
				markup = meaningful[0]
		if isinstance(markup, JsxElement) and not _is_component(markup):
			node = self._build(markup)
			assert isinstance(node, IRElement)
			node.is_root = True
			return node
		# Component or multi-node roots get a neutral element to carry the scope.
		wrapper = IRElement("div", [IRAttribute("style", "display:contents")], is_root=True, span=markup.span)
		children = markup.children if isinstance(markup, JsxFragment) else [markup]
		wrapper.children = self._build_children(children)
		return wrapper

	# --- dispatch ---

	def _build(self, node) -> Optional[IRNode]:
		method = getattr(self, f"_build_{type(node).__name__}", None)
		if method is None:
			raise NotImplementedError(f"No IR lowering for markup node {type(node).__name__}")
		return method(node)

	def _build_JsxText(self, node: JsxText) -> Optional[IRNode]:
		text = jsx_text(node.text)
		return IRText(text, node.span) if text else None

	def _build_JsxFragment(self, node: JsxFragment) -> IRNode:
		return IRFragment(self._build_children(node.children), node.span)

	def _build_JsxExpr(self, node: JsxExpr) -> Optional[IRNode]:
		return self._build_expr_items(node.items, node.span, wrap=True)

	def _build_JsxElement(self, node: JsxElement) -> IRNode:
		if _is_component(node):
			return self._build_component(node)
		el = IRElement(node.tag, span=node.span)
		self._lower_attrs(node, el)
		children = _meaningful_children(node.children)
		in_loop = bool(self._loops)
		loop_child = self._sole_loop(children)
		text_binding = not in_loop and self._is_text_binding(children)
		needs_slot = not in_loop and (
			any(not e.delegated for e in el.events)
			or any(a.reactive and not a.spread for a in el.attrs)
			or el.ref is not None
			or text_binding
			or (loop_child is not None and self._loop_needs_client(loop_child))
		)
		if needs_slot:
			el.slot_id = self._slot(el)
			bindings = {a.name: a.expr for a in el.attrs if a.reactive and not a.spread and a.expr is not None}
			if bindings:
				self._attr_bindings[el.slot_id] = bindings
		if text_binding:
			el.text_binding = True
			el.children = [self._text_part(c) for c in children]
		elif loop_child is not None:
			loop = self._build_loop(loop_child, children[0].span, container_slot=el.slot_id)
			el.children = [loop] if loop is not None else []
		else:
			el.children = self._build_children(node.children)
		return el

	# --- elements ---

	def _lower_attrs(self, node: JsxElement, el: IRElement) -> None:
		in_loop = bool(self._loops)
		for attr in node.attrs:
			if isinstance(attr, JsxSpread):
				expr = self.meta.text(attr.items)
				el.attrs.append(IRAttribute("...", expr=expr, items=tuple(attr.items), spread=True))
				continue
			name = _ATTR_ALIASES.get(attr.name, attr.name)
			value = attr.value
			if name == "key":
				if not in_loop:
					continue
				if isinstance(value, JsxExpr):
					el.key, el.key_items = self.meta.text(value.items), tuple(value.items)
				elif isinstance(value, str):
					el.key = repr(value)
				continue
			if name == "ref":
				if isinstance(value, JsxExpr):
					if in_loop:
						self._unsupported(attr.span, "ref callbacks inside list items are not supported")
						continue
					el.ref, el.ref_items = self.meta.text(value.items), tuple(value.items)
					self._has_refs = True
				continue
			if _EVENT_ATTR.match(name) and isinstance(value, JsxExpr):
				self._lower_event(el, name[2:].lower(), value, attr.span)
				continue
			if isinstance(value, JsxExpr):
				expr = self.meta.text(value.items)
				reactive = not in_loop and self._is_reactive(value.items)
				el.attrs.append(IRAttribute(name, expr=expr, items=tuple(value.items), reactive=reactive))
			else:
				el.attrs.append(IRAttribute(name, value=value))

	def _lower_event(self, el: IRElement, name: str, value: JsxExpr, span: Span) -> None:
		if len(self._loops) > 1:
			self._unsupported(span, f"'{name}' handler inside a nested list is not supported")
			return
		scope = self._scopes[-1]
		event_id = str(len(scope.table))
		handler = self.meta.text(value.items)
		scope.table[event_id] = handler
		el.events.append(IREvent(name, handler, tuple(value.items), event_id, delegated=bool(self._loops)))

	def _build_component(self, node: JsxElement) -> IRComponent:
		comp = IRComponent(node.tag, span=node.span)
		for attr in node.attrs:
			if isinstance(attr, JsxSpread):
				expr = self.meta.text(attr.items)
				comp.props.append(IRProp("...", expr=expr, items=tuple(attr.items), spread=True))
			elif attr.name == "key":
				continue
			elif isinstance(attr.value, JsxExpr):
				items = attr.value.items
				comp.props.append(
					IRProp(
						attr.name,
						expr=self.meta.text(items),
						items=tuple(items),
						reactive=not self._loops and self._is_reactive(items),
					)
				)
			elif attr.value is None:
				comp.props.append(IRProp(attr.name, expr="true"))
			else:
				comp.props.append(IRProp(attr.name, value=attr.value))
		comp.children = self._build_children(node.children)
		return comp

	def _build_children(self, children: Sequence) -> List[IRNode]:
		out: List[IRNode] = []
		for child in children:
			built = self._build(child)
			if built is not None:
				out.append(built)
		return out

	def _text_part(self, child) -> IRNode:
		if isinstance(child, JsxText):
			return IRText(jsx_text(child.text), child.span)
		return IRExpression(
			self.meta.text(child.items),
			tuple(child.items),
			reactive=self._is_reactive(child.items),
			span=child.span,
		)

	def _is_text_binding(self, children: List) -> bool:
		"""Only text and plain expressions, at least one of them reactive."""
		if not children:
			return False
		reactive = False
		for child in children:
			if isinstance(child, JsxText):
				continue
			if not isinstance(child, JsxExpr) or _classify(child.items)[0] != "expr":
				return False
			reactive = reactive or self._is_reactive(child.items)
		return reactive

	def _sole_loop(self, children: List) -> Optional[_LoopParts]:
		if len(children) == 1 and isinstance(children[0], JsxExpr) and not self._loops:
			kind, parts = _classify(children[0].items)
			if kind == "loop":
				return parts  # type: ignore[return-value]
		return None

	# --- expressions ---

	def _build_expr_items(self, items: Sequence[Item], span: Span, wrap: bool) -> Optional[IRNode]:
		kind, parts = _classify(items)
		if kind == "empty":
			return None
		if kind == "markup":
			return self._build(parts)
		if kind == "loop":
			return self._build_loop(parts, span, container_slot=None)  # type: ignore[arg-type]
		if kind == "cond":
			return self._build_conditional(parts, span)  # type: ignore[arg-type]
		expr = IRExpression(self.meta.text(items), tuple(items), span=span)
		if not self._loops and self._is_reactive(items):
			expr.reactive = True
			if wrap:
				expr.wrapped = True
				expr.slot_id = self._slot(expr)
		return expr

	def _build_branch(self, items: Optional[List[Item]], span: Span) -> Optional[IRNode]:
		if items is None:
			return None
		inner = unwrap_parens(list(items))
		if len(inner) == 1 and isinstance(inner[0], Tok) and inner[0].text in _EMPTY_BRANCHES:
			return None
		return self._build_expr_items(inner, span, wrap=True)

	def _build_conditional(self, parts: _CondParts, span: Span) -> IRConditional:
		reactive = not self._loops and self._is_reactive(parts.condition)
		cond = IRConditional(self.meta.text(parts.condition), tuple(parts.condition), None, None, span=span)
		if reactive:
			cond.reactive = True
			cond.cond_id = self._next()
			self._has_conds = True
		cond.when_true = self._build_branch(parts.when_true, span)
		cond.when_false = self._build_branch(parts.when_false, span)
		if isinstance(cond.when_true, IRElement) and isinstance(cond.when_false, IRElement):
			cond.mode = "element"
			if cond.cond_id is not None:
				cond.when_true.cond_id = cond.cond_id
				cond.when_false.cond_id = cond.cond_id
		return cond

	# --- loops ---

	def _loop_needs_client(self, parts: _LoopParts) -> bool:
		return self._is_reactive(parts.array) or _has_events(parts.body)

	def _build_loop(self, parts: _LoopParts, span: Span, container_slot: Optional[str]) -> Optional[IRLoop]:
		nested = bool(self._loops)
		param_names = tuple(pattern_names(parts.param))
		loop = IRLoop(
			array=self.meta.text(parts.array),
			array_items=tuple(parts.array),
			param=self.meta.text(parts.param),
			param_names=param_names,
			body=IRFragment(),
			index=parts.index,
			span=span,
		)
		if not nested:
			loop.reactive = self._is_reactive(parts.array)
			if self._loop_needs_client(parts):
				if container_slot is None:
					loop.wrapped = True
					container_slot = self._slot(loop)
				loop.slot_id = container_slot
		bindings = set(param_names) | ({parts.index} if parts.index else set())
		body = parts.body
		self._loops.append(bindings)
		pushed = loop.slot_id is not None
		if pushed:
			scope = _EventScope(loop.slot_id)  # type: ignore[arg-type]
			self._events[scope.key] = scope.table
			self._scopes.append(scope)
		try:
			built = self._build(body)
		finally:
			self._loops.pop()
			if pushed:
				self._scopes.pop()
		loop.body = built if built is not None else IRFragment()
		for node in walk(loop.body):
			if isinstance(node, IRElement) and node is not loop.body:
				node.key = None
				node.key_items = ()
		if pushed:
			loop.events = {
				e.event_id: e for n in walk(loop.body) if isinstance(n, IRElement) for e in n.events
			}
		self._classify_key(loop, body, span)
		return loop

	def _classify_key(self, loop: IRLoop, body: JsxNode, span: Span) -> None:
		root = loop.body
		if isinstance(body, JsxElement) and _is_component(body):
			if loop.needs_client:
				self._unsupported(
					body.span,
					f"<{body.tag}> as a list item cannot be re-rendered in the browser; the list renders unkeyed",
				)
			return
		if not isinstance(root, IRElement) or root.key is None:
			self.diagnostics.append(make_warning(ErrorCode.MISSING_KEY_IN_LIST, span, phase=PHASE))
			return
		allowed = set(self.meta.bindings()) | JS_GLOBALS | set(loop.param_names)
		if loop.index:
			allowed.add(loop.index)
		for outer in self._loops:
			allowed |= outer
		unknown = sorted(referenced_names(root.key_items) - allowed)
		if unknown:
			self.diagnostics.append(
				make_error(
					ErrorCode.MISSING_KEY_IN_LIST,
					root.key_items[0].span if root.key_items else span,
					f"Key expression references undefined binding '{unknown[0]}'",
					phase=PHASE,
					suggestion=f"Use the item parameter ({', '.join(loop.param_names) or loop.param}) in the key",
				)
			)
			return
		loop.keyed = True
		loop.key = root.key
		loop.key_items = root.key_items

	# --- helpers ---

	def _is_reactive(self, items: Sequence[Item]) -> bool:
		if called_names(items) & self.reactive:
			return True
		return bool(self.meta.props_object and self.meta.props_object in referenced_names(items))

	def _next(self) -> str:
		value = str(self._next_id)
		self._next_id += 1
		return value

	def _slot(self, node: IRNode) -> str:
		slot_id = self._next()
		self._slot_nodes[slot_id] = node
		logger.debug("slot %s → %s", slot_id, type(node).__name__)
		return slot_id

	def _unsupported(self, span: Span, message: str) -> None:
		self.diagnostics.append(make_warning(ErrorCode.UNSUPPORTED_JSX_PATTERN, span, message, phase=PHASE))


def build_ir(meta: ComponentMetadata) -> ComponentIR:
	"""Lower the component's markup roots (guarded roots first) to IR."""
	return IRBuilder(meta).build()


# --- shape recognition on item lists ---


def _is_component(node: JsxElement) -> bool:
	return node.tag[:1].isupper()


def _meaningful_children(children: Sequence) -> List:
	out = []
	for child in children:
		if isinstance(child, JsxText) and not jsx_text(child.text):
			continue
		if isinstance(child, JsxExpr) and not child.items:
			continue
		out.append(child)
	return out


def _has_events(node: JsxNode) -> bool:
	for item in iter_items([node]):
		if isinstance(item, JsxElement) and not _is_component(item):
			if any(isinstance(a, JsxAttr) and _EVENT_ATTR.match(a.name) for a in item.attrs):
				return True
	return False


def _classify(items: Sequence[Item]) -> Tuple[str, object]:
	"""
	Recognise the markup-producing shapes of a `{...}` child.

	Returns ("empty", None), ("markup", node), ("loop", _LoopParts),
	("cond", _CondParts) or ("expr", None).
	"""
	inner = unwrap_parens(list(items))
	if not inner:
		return "empty", None
	if len(inner) == 1 and isinstance(inner[0], (JsxElement, JsxFragment)):
		return "markup", inner[0]
	loop = _match_loop(inner)
	if loop is not None:
		return "loop", loop
	cond = _match_conditional(inner)
	if cond is not None:
		return "cond", cond
	return "expr", None


def _match_loop(items: List[Item]) -> Optional[_LoopParts]:
	"""`array.map((item, index) => <markup>)` with an expression or block body."""
	if len(items) < 4:
		return None
	if not (is_op(items[-3], ".", "?.") and is_name(items[-2], "map") and is_group(items[-1], "(")):
		return None
	args = split_top(items[-1].items)  # type: ignore[attr-defined]
	if len(args) != 1:
		return None
	cb = args[0]
	arrow = find_op(cb, "=>")
	if arrow < 0:
		return None
	head, body_items = cb[:arrow], cb[arrow + 1 :]
	if len(head) == 1 and is_name(head[0]):
		params = [list(head)]
	elif len(head) == 1 and is_group(head[0], "("):
		params = split_top(head[0].items)  # type: ignore[attr-defined]
	else:
		return None
	if not params:
		return None
	body = _callback_markup(body_items)
	if body is None:
		return None
	param = _strip_annotation(params[0])
	index = None
	if len(params) > 1:
		index_items = _strip_annotation(params[1])
		if len(index_items) == 1 and is_name(index_items[0]):
			index = index_items[0].text  # type: ignore[attr-defined]
	return _LoopParts(items[:-3], param, index, body)


def _strip_annotation(part: List[Item]) -> List[Item]:
	colon = find_op(part, ":")
	return part[:colon] if colon >= 0 else part


def _callback_markup(body: List[Item]) -> Optional[JsxNode]:
	if len(body) == 1 and is_group(body[0], "{"):
		for stmt in split_statements(body[0].items):  # type: ignore[attr-defined]
			if is_kw(stmt[0], "return"):
				inner = unwrap_parens(stmt[1:])
				if len(inner) == 1 and isinstance(inner[0], (JsxElement, JsxFragment)):
					return inner[0]
				return None
		return None
	inner = unwrap_parens(list(body))
	if len(inner) == 1 and isinstance(inner[0], (JsxElement, JsxFragment)):
		return inner[0]
	return None


def _produces_markup(items: List[Item]) -> bool:
	inner = unwrap_parens(list(items))
	if len(inner) == 1 and isinstance(inner[0], (JsxElement, JsxFragment)):
		return True
	return _match_loop(inner) is not None or _match_conditional(inner) is not None


def _match_conditional(items: List[Item]) -> Optional[_CondParts]:
	"""Top-level `c ? a : b` or `c && a` where a branch produces markup."""
	question = find_op(items, "?")
	if question > 0:
		depth = 0
		for idx in range(question + 1, len(items)):
			if is_op(items[idx], "?"):
				depth += 1
			elif is_op(items[idx], ":"):
				if depth == 0:
					when_true = items[question + 1 : idx]
					when_false = items[idx + 1 :]
					if _produces_markup(when_true) or _produces_markup(when_false):
						return _CondParts(items[:question], when_true, when_false)
					return None
				depth -= 1
		return None
	and_at = -1
	for idx, item in enumerate(items):
		if is_op(item, "&&"):
			and_at = idx
	if and_at > 0 and _produces_markup(items[and_at + 1 :]):
		return _CondParts(items[:and_at], items[and_at + 1 :], None)
	return None


__all__ = ["IRBuilder", "JS_GLOBALS", "build_ir", "jsx_text", "reactive_callables"]
