# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Keyed list reconciliation.

`reconcile_list(container, items, key_fn, render_fn)` keeps the container's
children in sync with `items`, where each child carries `data-key`. Both
callbacks receive `(item, position)`:

- a rendered item that is structurally equal to the existing node for its key
  keeps the existing node (identity, listeners and incidental state survive);
- an item whose existing node holds the focused text input is patched in
  place (attributes except `value`/`checked`, then children structurally) so
  typing is not interrupted;
- any other changed item is replaced by the freshly rendered node;
- keys that disappeared are dropped, and the children are re-assembled in
  item order.

The container's `key_index` (key → element) is rebuilt on every pass; later
lookups (delegated events, the next pass) use it instead of walking the
children. Duplicate keys resolve first-match-wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from barefoot.logging import get_logger

from .html import first_element, parse_fragment
from .nodes import Element, Node, Text

logger = get_logger("dom.reconcile")

KEY_ATTR = "data-key"
EVENT_ID_ATTR = "data-event-id"

_TEXT_INPUT_TYPES = frozenset({"", "text", "search", "email", "url", "tel", "password", "number"})
_LIVE_ATTRS = frozenset({"value", "checked"})


@dataclass
class _FocusState:
	element: Element
	item: Element
	key: str
	tag: str
	event_id: Optional[str]

	@property
	def is_text_input(self) -> bool:
		if self.tag == "textarea" or self.element.has_attribute("contenteditable"):
			return True
		if self.tag != "input":
			return False
		return (self.element.get_attribute("type") or "").lower() in _TEXT_INPUT_TYPES


def key_index(container: Element) -> dict[str, Element]:
	"""Return the container's key index, building it from its children on first use."""
	if container.key_index is None:
		index: dict[str, Element] = {}
		for child in container.element_children:
			key = child.get_attribute(KEY_ATTR)
			if key is None:
				continue
			if key in index:
				logger.debug("duplicate data-key %r in container; keeping the first", key)
				continue
			index[key] = child
		container.key_index = index
	return container.key_index


def reconcile_list(
	container: Optional[Element],
	items: Iterable[Any],
	key_fn: Callable[[Any, int], Any],
	render_fn: Callable[[Any, int], str],
) -> None:
	if container is None:
		return
	focus = _capture_focus(container)
	existing = dict(key_index(container))

	ordered: list[Element] = []
	new_index: dict[str, Element] = {}
	for position, item in enumerate(items):
		key = str(key_fn(item, position))
		rendered = first_element(parse_fragment(render_fn(item, position)))
		if rendered is None:
			continue
		if key in new_index:
			# The duplicate gets its own fresh node; the index keeps the first.
			logger.debug("duplicate key %r in rendered items; first occurrence keeps the existing node", key)
			ordered.append(rendered)
			continue
		current = existing.pop(key, None)
		if current is None:
			node = rendered
		elif current.is_equal_node(rendered):
			node = current
		elif focus is not None and focus.item is current and focus.is_text_input:
			_patch_element(current, rendered, skip=_LIVE_ATTRS)
			node = current
		else:
			node = rendered
		new_index[key] = node
		ordered.append(node)

	container.replace_children(list(ordered))
	container.key_index = new_index

	if focus is not None:
		_restore_focus(focus, new_index)


def _capture_focus(container: Element) -> Optional[_FocusState]:
	doc = container.owner_document
	if doc is None or doc.active_element is None:
		return None
	active = doc.active_element
	if active is container or not container.contains(active):
		return None
	item: Node = active
	while item.parent is not container:
		item = item.parent  # type: ignore[assignment]
	if not isinstance(item, Element):
		return None
	key = item.get_attribute(KEY_ATTR)
	if key is None:
		return None
	return _FocusState(
		element=active,
		item=item,
		key=key,
		tag=active.tag,
		event_id=active.get_attribute(EVENT_ID_ATTR),
	)


def _restore_focus(focus: _FocusState, index: dict[str, Element]) -> None:
	doc = focus.item.owner_document or focus.element.owner_document
	item = index.get(focus.key)
	if item is None:
		return
	if item.contains(focus.element):
		focus.element.focus()
		return
	candidates = [item] + list(item.iter_elements())
	target = None
	if focus.event_id is not None:
		target = next(
			(el for el in candidates if el.tag == focus.tag and el.get_attribute(EVENT_ID_ATTR) == focus.event_id),
			None,
		)
	if target is None:
		target = next((el for el in candidates if el.tag == focus.tag), None)
	if target is not None:
		target.focus()
	elif doc is not None:
		doc.active_element = None


def _patch_element(current: Element, fresh: Element, skip: frozenset[str]) -> None:
	for name in list(current.attrs):
		if name not in fresh.attrs and name not in skip:
			current.remove_attribute(name)
	for name, value in fresh.attrs.items():
		if name in skip:
			continue
		if current.attrs.get(name) != value:
			current.set_attribute(name, value)
	_patch_children(current, fresh, skip)


def _patch_children(current: Element, fresh: Element, skip: frozenset[str]) -> None:
	old_children = list(current.children)
	new_children = list(fresh.children)
	for idx, new in enumerate(new_children):
		if idx >= len(old_children):
			current.append_child(new.clone())
			continue
		old = old_children[idx]
		if isinstance(old, Element) and isinstance(new, Element) and old.tag == new.tag:
			_patch_element(old, new, skip)
		elif isinstance(old, Text) and isinstance(new, Text):
			if old.data != new.data:
				old.data = new.data
		elif not old.is_equal_node(new):
			old.replace_with(new.clone())
	for old in old_children[len(new_children):]:
		old.remove()


__all__ = ["EVENT_ID_ATTR", "KEY_ATTR", "key_index", "reconcile_list"]
