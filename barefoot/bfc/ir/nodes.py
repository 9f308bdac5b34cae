# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Backend-agnostic markup IR.

Pipeline placement:
  analysis (ComponentMetadata) → ir builder → IR (this module) → codegen

The node set is closed: `IRElement`, `IRText`, `IRExpression`,
`IRConditional`, `IRLoop`, `IRComponent`, `IRFragment`. Consumers dispatch on
the class name and raise `NotImplementedError` for anything else.

Slot ids, conditional ids and event ids are decimal strings allocated by the
builder in a single depth-first pass; they are the values written into the
`data-bf`, `data-bf-cond` and `data-event-id` markers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..core.diagnostics import CompilerError
from ..core.span import Span
from ..parser.ast import Item


class IRNode:
	"""Base class for IR nodes."""

	span: Span


@dataclass
class IRAttribute:
	"""
	An intrinsic element attribute.

	Exactly one shape applies: a static literal (`value`), an expression
	(`expr`, reactive or rendered once), a spread (`spread`, `expr` holds the
	spread operand), or a bare boolean attribute (neither set).
	"""

	name: str
	value: Optional[str] = None
	expr: Optional[str] = None
	items: Tuple[Item, ...] = ()
	reactive: bool = False
	spread: bool = False

	@property
	def is_bare(self) -> bool:
		return self.value is None and self.expr is None and not self.spread


@dataclass
class IREvent:
	name: str
	handler: str
	items: Tuple[Item, ...] = ()
	event_id: str = "0"
	# True inside a loop item: handled by one listener on the loop container.
	delegated: bool = False


@dataclass
class IRElement(IRNode):
	tag: str
	attrs: List[IRAttribute] = field(default_factory=list)
	events: List[IREvent] = field(default_factory=list)
	children: List[IRNode] = field(default_factory=list)
	slot_id: Optional[str] = None
	ref: Optional[str] = None
	ref_items: Tuple[Item, ...] = ()
	# Loop item roots carry the key expression, rendered as `data-key`.
	key: Optional[str] = None
	key_items: Tuple[Item, ...] = ()
	# Set on both branch roots of a single-element conditional.
	cond_id: Optional[str] = None
	is_root: bool = False
	# textContent is rewritten from the (text + expression) children.
	text_binding: bool = False
	span: Span = field(default_factory=Span)

	@property
	def delegated_event_id(self) -> Optional[str]:
		for event in self.events:
			if event.delegated:
				return event.event_id
		return None


@dataclass
class IRText(IRNode):
	text: str
	span: Span = field(default_factory=Span)


@dataclass
class IRExpression(IRNode):
	expr: str
	items: Tuple[Item, ...] = ()
	reactive: bool = False
	slot_id: Optional[str] = None
	# Rendered inside its own `<span data-bf="N">` (reactive, with element siblings).
	wrapped: bool = False
	span: Span = field(default_factory=Span)


@dataclass
class IRConditional(IRNode):
	condition: str
	cond_items: Tuple[Item, ...]
	when_true: Optional[IRNode]
	when_false: Optional[IRNode]
	cond_id: Optional[str] = None
	# "element": both branches are one element carrying `data-bf-cond`.
	# "fragment": anchored by `bf-cond-start`/`bf-cond-end` comments.
	mode: str = "fragment"
	reactive: bool = False
	span: Span = field(default_factory=Span)


@dataclass
class IRLoop(IRNode):
	array: str
	array_items: Tuple[Item, ...]
	param: str
	param_names: Tuple[str, ...]
	body: IRNode
	index: Optional[str] = None
	keyed: bool = False
	key: Optional[str] = None
	key_items: Tuple[Item, ...] = ()
	# Container slot: the parent element's slot, or the wrapper span's own.
	slot_id: Optional[str] = None
	wrapped: bool = False
	events: Dict[str, IREvent] = field(default_factory=dict)
	reactive: bool = False
	span: Span = field(default_factory=Span)

	@property
	def needs_client(self) -> bool:
		return self.slot_id is not None


@dataclass
class IRProp:
	name: str
	value: Optional[str] = None
	expr: Optional[str] = None
	items: Tuple[Item, ...] = ()
	reactive: bool = False
	spread: bool = False


@dataclass
class IRComponent(IRNode):
	name: str
	props: List[IRProp] = field(default_factory=list)
	children: List[IRNode] = field(default_factory=list)
	span: Span = field(default_factory=Span)


@dataclass
class IRFragment(IRNode):
	children: List[IRNode] = field(default_factory=list)
	span: Span = field(default_factory=Span)


@dataclass
class GuardedIR:
	condition: str
	cond_items: Tuple[Item, ...]
	root: IRNode


@dataclass
class ComponentIR:
	"""IR for one component plus the side tables built alongside it."""

	name: str
	root: IRNode
	guarded: List[GuardedIR] = field(default_factory=list)
	# slot id → literal markup of the slot's node
	slots: Dict[str, str] = field(default_factory=dict)
	# event scope ("component" or a loop's slot id) → event id → handler source
	events: Dict[str, Dict[str, str]] = field(default_factory=dict)
	# element slot id → attribute name → dynamic source
	attr_bindings: Dict[str, Dict[str, str]] = field(default_factory=dict)
	# Names whose call reads reactive state (signals, memos, props, derived helpers).
	reactive_names: frozenset = frozenset()
	interactive: bool = False
	diagnostics: List[CompilerError] = field(default_factory=list)

	def roots(self) -> List[IRNode]:
		return [g.root for g in self.guarded] + [self.root]


def walk(node: Optional[IRNode]):
	"""Pre-order traversal over every IR node, loop bodies and branches included."""
	if node is None:
		return
	yield node
	if isinstance(node, (IRElement, IRFragment, IRComponent)):
		for child in node.children:
			yield from walk(child)
	elif isinstance(node, IRConditional):
		yield from walk(node.when_true)
		yield from walk(node.when_false)
	elif isinstance(node, IRLoop):
		yield from walk(node.body)


def _attr_literal(attr: IRAttribute) -> str:
	if attr.spread:
		return "{..." + (attr.expr or "") + "}"
	if attr.expr is not None:
		return f"{attr.name}={{{attr.expr}}}"
	if attr.value is not None:
		return f'{attr.name}="{attr.value}"'
	return attr.name


def render_literal(node: Optional[IRNode]) -> str:
	"""Compact JSX-like rendering, used for the slot table and the IR dump."""
	if node is None:
		return ""
	if isinstance(node, IRText):
		return node.text
	if isinstance(node, IRExpression):
		inner = "{" + node.expr + "}"
		return f'<span data-bf="{node.slot_id}">{inner}</span>' if node.wrapped else inner
	if isinstance(node, IRElement):
		parts = [node.tag]
		if node.slot_id is not None:
			parts.append(f'data-bf="{node.slot_id}"')
		parts.extend(_attr_literal(a) for a in node.attrs)
		parts.extend(f"on:{e.name}={{{e.handler}}}" for e in node.events)
		inner = "".join(render_literal(c) for c in node.children)
		return f"<{' '.join(parts)}>{inner}</{node.tag}>"
	if isinstance(node, IRConditional):
		when_true = render_literal(node.when_true) or "null"
		when_false = render_literal(node.when_false) or "null"
		return "{" + f"{node.condition} ? {when_true} : {when_false}" + "}"
	if isinstance(node, IRLoop):
		return "{" + f"{node.array}.map(({node.param}) => {render_literal(node.body)})" + "}"
	if isinstance(node, IRComponent):
		props = [f"{p.name}={{{p.expr}}}" if p.expr is not None else f'{p.name}="{p.value}"' for p in node.props]
		return f"<{' '.join([node.name] + props)} />"
	if isinstance(node, IRFragment):
		return "<>" + "".join(render_literal(c) for c in node.children) + "</>"
	raise NotImplementedError(f"unknown IR node {type(node).__name__}")


def to_json(node: Optional[IRNode]) -> Any:
	"""JSON-friendly dump of an IR tree (item tuples and spans omitted)."""
	if node is None:
		return None
	out: Dict[str, Any] = {"kind": type(node).__name__}
	if isinstance(node, IRElement):
		out.update(
			tag=node.tag,
			slot=node.slot_id,
			attrs=[
				{k: v for k, v in vars(a).items() if k != "items" and v not in (None, False)}
				for a in node.attrs
			],
			events=[
				{"name": e.name, "handler": e.handler, "id": e.event_id, "delegated": e.delegated}
				for e in node.events
			],
			ref=node.ref,
			key=node.key,
			cond=node.cond_id,
			root=node.is_root,
			text_binding=node.text_binding,
			children=[to_json(c) for c in node.children],
		)
	elif isinstance(node, IRText):
		out["text"] = node.text
	elif isinstance(node, IRExpression):
		out.update(expr=node.expr, reactive=node.reactive, slot=node.slot_id, wrapped=node.wrapped)
	elif isinstance(node, IRConditional):
		out.update(
			condition=node.condition,
			cond=node.cond_id,
			mode=node.mode,
			reactive=node.reactive,
			when_true=to_json(node.when_true),
			when_false=to_json(node.when_false),
		)
	elif isinstance(node, IRLoop):
		out.update(
			array=node.array,
			param=node.param,
			index=node.index,
			keyed=node.keyed,
			key=node.key,
			slot=node.slot_id,
			events={k: v.handler for k, v in node.events.items()},
			body=to_json(node.body),
		)
	elif isinstance(node, IRComponent):
		out.update(
			name=node.name,
			props=[{"name": p.name, "value": p.value, "expr": p.expr, "reactive": p.reactive} for p in node.props],
			children=[to_json(c) for c in node.children],
		)
	elif isinstance(node, IRFragment):
		out["children"] = [to_json(c) for c in node.children]
	else:
		raise NotImplementedError(f"unknown IR node {type(node).__name__}")
	return out


def component_to_json(ir: ComponentIR) -> Dict[str, Any]:
	return {
		"name": ir.name,
		"interactive": ir.interactive,
		"root": to_json(ir.root),
		"guarded": [{"condition": g.condition, "root": to_json(g.root)} for g in ir.guarded],
		"slots": dict(ir.slots),
		"events": {scope: dict(table) for scope, table in ir.events.items()},
		"attr_bindings": {slot: dict(table) for slot, table in ir.attr_bindings.items()},
	}


__all__ = [
	"ComponentIR",
	"GuardedIR",
	"IRAttribute",
	"IRComponent",
	"IRConditional",
	"IRElement",
	"IREvent",
	"IRExpression",
	"IRFragment",
	"IRLoop",
	"IRNode",
	"IRProp",
	"IRText",
	"component_to_json",
	"render_literal",
	"to_json",
	"walk",
]
