# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Scope resolution, hydration bootstrap, conditional swaps and delegated events.

These are the DOM-side entry points a generated hydration script calls
(`findScope`, `find`, `cond`, event delegation), expressed over the
`barefoot.dom.nodes` model.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Optional, Sequence, Tuple

from barefoot.logging import get_logger
from barefoot.runtime.reactive import ReactiveRuntime, default_runtime

from .html import parse_fragment
from .nodes import SCOPE_ATTR, Comment, Document, Element, Event, Node, compile_selector
from .reconcile import EVENT_ID_ATTR, KEY_ATTR, key_index

logger = get_logger("dom.hydrate")

INIT_ATTR = "data-bf-init"
SLOT_ATTR = "data-bf"
COND_ATTR = "data-bf-cond"
PROPS_ATTR = "data-bf-props"

Handler = Tuple[str, str, Callable[[Event], Any]]


def find(scope: Optional[Element], selector: str, index: int = 0) -> Optional[Element]:
	"""
	Return the `index`-th match of `selector` among the scope element itself
	and its descendants, in document order.

	Elements inside a nested component scope belong to that component and are
	skipped; the nested scope root itself still matches. When nothing the
	scope owns matches, the first match inside a nested scope is returned:
	markup passed as children to a child component renders there.
	"""
	if scope is None:
		return None
	if isinstance(scope, Document):
		matches = scope.query_selector_all(selector)
		return matches[index] if index < len(matches) else None
	match = compile_selector(selector)
	remaining = index
	if match(scope):
		if remaining == 0:
			return scope
		remaining -= 1
	fallback: Optional[Element] = None
	owner = scope if SCOPE_ATTR in scope.attrs else _owning_scope(scope)
	for el in scope.iter_elements():
		if match(el) and _owning_scope(el) is owner:
			if remaining == 0:
				return el
			remaining -= 1
		elif fallback is None and match(el):
			fallback = el
	return fallback if index == 0 else None


def _owning_scope(el: Element) -> Optional[Element]:
	node = el.parent
	while isinstance(node, Element) and not isinstance(node, Document):
		if SCOPE_ATTR in node.attrs:
			return node
		node = node.parent
	return None


def _is_claimed(el: Element) -> bool:
	return el.has_attribute(INIT_ATTR)


def find_scope(name: str, index: int, parent: Optional[Element]) -> Optional[Element]:
	"""
	Claim the `index`-th unclaimed scope of component `name` under `parent`.

	If `parent` is itself an unclaimed `{name}_` scope it is claimed directly
	(a parent script handing over the exact child root). Otherwise scopes are
	taken from the document's scope index in document order, skipping those
	already marked `data-bf-init`. A miss returns None; callers skip hydration.
	"""
	if parent is None:
		return None
	prefix = f"{name}_"
	if not isinstance(parent, Document):
		own = parent.get_attribute(SCOPE_ATTR)
		if own is not None and own.startswith(prefix) and not _is_claimed(parent):
			parent.set_attribute(INIT_ATTR, "true")
			return parent

	doc = parent if isinstance(parent, Document) else parent.owner_document
	if doc is not None:
		pool = doc.scope_elements()
	else:
		pool = [el for el in parent.iter_elements() if SCOPE_ATTR in el.attrs]
	candidates = [
		el
		for el in pool
		if el is not parent
		and el.attrs.get(SCOPE_ATTR, "").startswith(prefix)
		and not _is_claimed(el)
		and (parent is doc or parent.contains(el))
	]
	if index >= len(candidates):
		logger.debug("no unclaimed scope %s[%d]; skipping hydration", name, index)
		return None
	scope = candidates[index]
	scope.set_attribute(INIT_ATTR, "true")
	return scope


def read_props(scope: Element) -> dict[str, Any]:
	"""Load the JSON props payload serialized next to a scope, if any."""
	doc = scope.owner_document
	scope_id = scope.get_attribute(SCOPE_ATTR)
	if doc is None or scope_id is None:
		return {}
	for el in doc.query_selector_all(f'script[{PROPS_ATTR}="{scope_id}"]'):
		return json.loads(el.text_content or "{}")
	return {}


InitFn = Callable[[int, Optional[Element], dict[str, Any]], Any]


class ComponentRegistry:
	"""
	Name → init function, for parents initializing child instances.

	A parent may reach `init_child` before the child's script registered; the
	call is queued and replayed on registration. Children without a script
	never register, so their queued calls are simply never run.
	"""

	def __init__(self) -> None:
		self._inits: dict[str, InitFn] = {}
		self._pending: dict[str, list[tuple[Element, dict[str, Any]]]] = {}

	def register(self, name: str, init: InitFn) -> None:
		self._inits[name] = init
		for element, props in self._pending.pop(name, []):
			init(0, element, props)

	def is_registered(self, name: str) -> bool:
		return name in self._inits

	def init_child(self, name: str, element: Optional[Element], props: Optional[dict[str, Any]] = None) -> None:
		if element is None:
			return
		props = dict(props or {})
		init = self._inits.get(name)
		if init is None:
			logger.debug("%s not registered yet; queueing child init", name)
			self._pending.setdefault(name, []).append((element, props))
			return
		init(0, element, props)


default_registry = ComponentRegistry()


def register_component(name: str, init: InitFn) -> None:
	default_registry.register(name, init)


def init_child(name: str, element: Optional[Element], props: Optional[dict[str, Any]] = None) -> None:
	default_registry.init_child(name, element, props)


def hydrate(
	document: Document,
	name: str,
	init: InitFn,
	registry: Optional[ComponentRegistry] = None,
) -> int:
	"""
	Register `init` for `name` and initialize its unclaimed instances.

	An instance nested inside a scope of the same component is left for the
	enclosing instance, which initializes it with props its own state
	produces. Instances inside other components are initialized here unless
	the parent already claimed them.
	"""
	(registry or default_registry).register(name, init)
	prefix = f"{name}_"
	count = 0
	for el in list(document.scope_elements()):
		if not el.attrs.get(SCOPE_ATTR, "").startswith(prefix) or _is_claimed(el):
			continue
		enclosing = el.parent.closest(f"[{SCOPE_ATTR}]") if el.parent is not None else None
		if enclosing is not None and enclosing.attrs.get(SCOPE_ATTR, "").startswith(prefix):
			continue
		init(0, el, read_props(el))
		count += 1
	return count


# --- conditionals ---


def _find_comment(scope: Element, data: str) -> Optional[Comment]:
	for node in scope.iter_descendants():
		if isinstance(node, Comment) and node.data == data:
			return node
	return None


def swap_conditional(scope: Element, cond_id: str, markup: str) -> None:
	"""Replace the DOM owned by conditional `cond_id` with `markup`."""
	start_marker = f"bf-cond-start:{cond_id}"
	end_marker = f"bf-cond-end:{cond_id}"
	fresh = parse_fragment(markup)
	start = _find_comment(scope, start_marker)
	if start is not None and start.parent is not None:
		parent = start.parent
		node = start.next_sibling
		while node is not None and not (isinstance(node, Comment) and node.data == end_marker):
			following = node.next_sibling
			node.remove()
			node = following
		end = node
		for new in fresh:
			if isinstance(new, Comment) and new.data.startswith("bf-cond-"):
				continue
			parent.insert_before(new, end)
		return
	current = find(scope, f'[{COND_ATTR}="{cond_id}"]')
	if current is not None and fresh:
		current.replace_with(*fresh)


def cond(
	scope: Optional[Element],
	cond_id: str,
	condition: Callable[[], Any],
	templates: Tuple[Callable[[], str], Callable[[], str]],
	handlers: Sequence[Handler] = (),
	runtime: Optional[ReactiveRuntime] = None,
) -> None:
	"""
	Keep conditional `cond_id` in sync with `condition()`.

	The server already rendered the initial branch, so the first run only
	binds handlers; later runs swap DOM when the truthiness changes.
	"""
	if scope is None:
		return
	runtime = runtime or default_runtime
	when_true, when_false = templates
	state: dict[str, Optional[bool]] = {"prev": None}

	def update() -> None:
		current = bool(condition())
		previous = state["prev"]
		state["prev"] = current
		if previous is not None and previous == current:
			return
		if previous is not None:
			swap_conditional(scope, cond_id, when_true() if current else when_false())
		for selector, event, handler in handlers:
			el = find(scope, selector)
			if el is not None:
				el.handlers[event] = handler

	runtime.create_effect(update)


# --- delegated events ---


def delegate(
	container: Optional[Element],
	event: str,
	handlers: dict[str, Callable[[Optional[str], Event], Any]],
) -> None:
	"""
	Attach one listener for `event` to a loop container.

	The listener finds the nearest `data-event-id` element between the target
	and the container and calls `handlers[event_id](item_key, event)`. The item
	key comes from the container's key index (keyed loops) or the item's
	position (unkeyed loops, passed as a string).
	"""
	if container is None:
		return

	def listener(ev: Event) -> None:
		node: Optional[Element] = ev.target
		event_id: Optional[str] = None
		while node is not None and node is not container:
			if event_id is None and node.has_attribute(EVENT_ID_ATTR):
				event_id = node.get_attribute(EVENT_ID_ATTR)
			if node.parent is container:
				break
			node = node.parent
		if node is None or node is container or event_id is None:
			return
		handler = handlers.get(event_id)
		if handler is None:
			return
		handler(_item_key(container, node), ev)

	container.add_event_listener(event, listener)


def _item_key(container: Element, item: Node) -> Optional[str]:
	for key, el in key_index(container).items():
		if el is item:
			return key
	if isinstance(item, Element) and item.has_attribute(KEY_ATTR):
		return item.get_attribute(KEY_ATTR)
	items = container.element_children
	for position, el in enumerate(items):
		if el is item:
			return str(position)
	return None


__all__ = [
	"COND_ATTR",
	"ComponentRegistry",
	"INIT_ATTR",
	"PROPS_ATTR",
	"SLOT_ATTR",
	"cond",
	"delegate",
	"find",
	"find_scope",
	"hydrate",
	"init_child",
	"read_props",
	"register_component",
	"swap_conditional",
]
