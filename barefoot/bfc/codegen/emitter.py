# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared template-emitter base and hydration marker rules.

Pipeline placement:
  ComponentIR → TemplateEmitter subclass (hono, jinja, client templates)

Every backend walks the same IR and must write the same markers in the same
places, otherwise the client script cannot find what the server rendered.
`marker_attrs` is the single source of those rules; backends only decide
how a marker is spelled (`render_marker`) and how attribute values are
written (`render_attr`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..analysis.metadata import ComponentMetadata, PropDecl
from ..core.diagnostics import CompilerError, ErrorCode, make_warning
from ..core.span import Span
from ..ir.nodes import (
	ComponentIR,
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

PHASE = "codegen"

SCOPE_ATTR = "data-bf-scope"
SLOT_ATTR = "data-bf"
COND_ATTR = "data-bf-cond"
KEY_ATTR = "data-key"
EVENT_ID_ATTR = "data-event-id"
PROPS_ATTR = "data-bf-props"

VOID_ELEMENTS = frozenset(
	{"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)
BOOLEAN_ATTRS = frozenset(
	{
		"allowfullscreen",
		"async",
		"autofocus",
		"autoplay",
		"checked",
		"controls",
		"default",
		"defer",
		"disabled",
		"formnovalidate",
		"hidden",
		"inert",
		"loop",
		"multiple",
		"muted",
		"novalidate",
		"open",
		"readonly",
		"required",
		"reversed",
		"selected",
	}
)

_CALLBACK_PROP = re.compile(r"^on[A-Z]")


@dataclass(frozen=True)
class Marker:
	"""
	One hydration marker attribute.

	`dynamic` markers carry an expression (the scope id variable, a loop key)
	instead of a literal id.
	"""

	name: str
	value: str
	dynamic: bool = False


def marker_attrs(node: IRElement) -> List[Marker]:
	"""Markers for `node`, in the order every backend writes them."""
	out: List[Marker] = []
	if node.is_root:
		out.append(Marker(SCOPE_ATTR, "", dynamic=True))
	if node.slot_id is not None:
		out.append(Marker(SLOT_ATTR, node.slot_id))
	if node.cond_id is not None:
		out.append(Marker(COND_ATTR, node.cond_id))
	if node.key is not None:
		out.append(Marker(KEY_ATTR, node.key, dynamic=True))
	event_id = node.delegated_event_id
	if event_id is not None:
		out.append(Marker(EVENT_ID_ATTR, event_id))
	return out


def cond_start(cond_id: str) -> str:
	return f"<!--bf-cond-start:{cond_id}-->"


def cond_end(cond_id: str) -> str:
	return f"<!--bf-cond-end:{cond_id}-->"


def is_callback_prop(prop: PropDecl) -> bool:
	return bool(_CALLBACK_PROP.match(prop.name)) or (prop.type is not None and "=>" in prop.type)


def serializable_props(meta: ComponentMetadata) -> List[PropDecl]:
	"""Props written into the `data-bf-props` JSON script (no callbacks, no children)."""
	return [p for p in meta.props if p.name != "children" and not is_callback_prop(p)]


class TemplateEmitter:
	"""
	Base class for IR → markup text emitters.

	`emit` dispatches on the node class name (`IRElement` → `emit_element`,
	...); subclasses implement each kind plus `emit_document`. Unknown node
	kinds raise `NotImplementedError`.
	"""

	backend = ""
	_METHODS = {
		"IRElement": "emit_element",
		"IRText": "emit_text",
		"IRExpression": "emit_expression",
		"IRConditional": "emit_conditional",
		"IRLoop": "emit_loop",
		"IRComponent": "emit_component",
		"IRFragment": "emit_fragment",
	}

	def __init__(self, ir: ComponentIR, meta: ComponentMetadata) -> None:
		self.ir = ir
		self.meta = meta
		self.diagnostics: List[CompilerError] = []

	def emit(self, node: Optional[IRNode]) -> str:
		if node is None:
			return ""
		method = getattr(self, self._METHODS.get(type(node).__name__, ""), None)
		if method is None:
			raise NotImplementedError(f"{self.backend or type(self).__name__}: no emitter for {type(node).__name__}")
		return method(node)

	def emit_children(self, nodes: Sequence[IRNode]) -> str:
		return "".join(self.emit(child) for child in nodes)

	def emit_document(self) -> str:
		raise NotImplementedError

	def emit_element(self, node: IRElement) -> str:
		raise NotImplementedError

	def emit_text(self, node: IRText) -> str:
		raise NotImplementedError

	def emit_expression(self, node: IRExpression) -> str:
		raise NotImplementedError

	def emit_conditional(self, node: IRConditional) -> str:
		raise NotImplementedError

	def emit_loop(self, node: IRLoop) -> str:
		raise NotImplementedError

	def emit_component(self, node: IRComponent) -> str:
		raise NotImplementedError

	def emit_fragment(self, node: IRFragment) -> str:
		return self.emit_children(node.children)

	# --- element helpers shared by the markup backends ---

	def render_marker(self, marker: Marker) -> str:
		raise NotImplementedError

	def render_attr(self, attr: IRAttribute) -> str:
		raise NotImplementedError

	def open_tag(self, node: IRElement, extra: str = "") -> str:
		"""`<tag markers attrs>`; every rendered piece carries its own leading space."""
		parts = [self.render_marker(m) for m in marker_attrs(node)]
		parts.extend(self.render_attr(a) for a in node.attrs)
		return f"<{node.tag}{''.join(parts)}{extra}>"

	def close_tag(self, node: IRElement) -> str:
		return "" if node.tag in VOID_ELEMENTS else f"</{node.tag}>"

	def warn(self, span: Span, message: str) -> None:
		self.diagnostics.append(make_warning(ErrorCode.UNSUPPORTED_JSX_PATTERN, span, message, phase=PHASE))


__all__ = [
	"BOOLEAN_ATTRS",
	"COND_ATTR",
	"EVENT_ID_ATTR",
	"KEY_ATTR",
	"Marker",
	"PHASE",
	"PROPS_ATTR",
	"SCOPE_ATTR",
	"SLOT_ATTR",
	"TemplateEmitter",
	"VOID_ELEMENTS",
	"cond_end",
	"cond_start",
	"is_callback_prop",
	"marker_attrs",
	"serializable_props",
]
