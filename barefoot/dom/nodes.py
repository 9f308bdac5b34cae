# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Minimal DOM model used by the hydration runtime.

Only what hydration needs is modelled: elements with ordered attributes,
text and comment nodes, a document that tracks focus, simple compound
selectors (`tag`, `#id`, `.class`, `[attr]`, `[attr="v"]`, `[attr^="v"]`,
`:not(...)`), on-property handlers plus bubbling listeners, and structural
equality (`is_equal_node`).

The document keeps a mutation counter; indexes built over the tree (the
scope index) are rebuilt lazily only when the counter moved.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional

VOID_ELEMENTS = frozenset(
	{"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)
RAW_TEXT_ELEMENTS = frozenset({"script", "style"})

SCOPE_ATTR = "data-bf-scope"


class Node:
	"""Base class for all DOM nodes."""

	parent: Optional["Element"] = None

	@property
	def owner_document(self) -> Optional["Document"]:
		node: Optional[Node] = self
		while node is not None and not isinstance(node, Document):
			node = node.parent
		return node

	def _touch(self) -> None:
		doc = self.owner_document
		if doc is not None:
			doc.version += 1

	def remove(self) -> None:
		if self.parent is not None:
			self.parent.remove_child(self)

	def replace_with(self, *nodes: "Node") -> None:
		parent = self.parent
		if parent is None:
			return
		for node in nodes:
			parent.insert_before(node, self)
		parent.remove_child(self)

	@property
	def next_sibling(self) -> Optional["Node"]:
		if self.parent is None:
			return None
		siblings = self.parent.children
		idx = _index_of(siblings, self)
		return siblings[idx + 1] if idx + 1 < len(siblings) else None

	def clone(self, deep: bool = True) -> "Node":
		raise NotImplementedError

	def is_equal_node(self, other: "Node") -> bool:
		raise NotImplementedError

	def to_html(self) -> str:
		raise NotImplementedError

	@property
	def text_content(self) -> str:
		return ""


class Text(Node):
	def __init__(self, data: str) -> None:
		self.data = data
		self.parent = None

	def clone(self, deep: bool = True) -> "Text":
		return Text(self.data)

	def is_equal_node(self, other: Node) -> bool:
		return isinstance(other, Text) and other.data == self.data

	def to_html(self) -> str:
		if self.parent is not None and self.parent.tag in RAW_TEXT_ELEMENTS:
			return self.data
		return html.escape(self.data, quote=False)

	@property
	def text_content(self) -> str:
		return self.data

	def __repr__(self) -> str:
		return f"Text({self.data!r})"


class Comment(Node):
	def __init__(self, data: str) -> None:
		self.data = data
		self.parent = None

	def clone(self, deep: bool = True) -> "Comment":
		return Comment(self.data)

	def is_equal_node(self, other: Node) -> bool:
		return isinstance(other, Comment) and other.data == self.data

	def to_html(self) -> str:
		return f"<!--{self.data}-->"

	def __repr__(self) -> str:
		return f"Comment({self.data!r})"


@dataclass
class Event:
	"""A dispatched event; `current_target` changes while bubbling."""

	type: str
	target: "Element"
	current_target: Optional["Element"] = None
	stopped: bool = False
	detail: Any = None

	def stop_propagation(self) -> None:
		self.stopped = True


class Element(Node):
	def __init__(self, tag: str, attrs: Optional[dict[str, str]] = None) -> None:
		self.tag = tag.lower()
		self.attrs: dict[str, str] = dict(attrs or {})
		self.children: List[Node] = []
		self.parent = None
		# on-property handlers (`el.onclick = fn` in the browser).
		self.handlers: dict[str, Callable[[Event], Any]] = {}
		self.listeners: dict[str, list[Callable[[Event], Any]]] = {}
		# Live form state, distinct from the `value`/`checked` attributes.
		self.value: Optional[str] = self.attrs.get("value")
		self.checked: bool = "checked" in self.attrs
		# data-key → item element; built by reconcile, dropped on any child mutation.
		self.key_index: Optional[dict[str, Element]] = None

	def __repr__(self) -> str:
		return f"<{self.tag} {self.attrs!r}>"

	# --- attributes ---

	def get_attribute(self, name: str) -> Optional[str]:
		return self.attrs.get(name)

	def has_attribute(self, name: str) -> bool:
		return name in self.attrs

	def set_attribute(self, name: str, value: Any) -> None:
		self.attrs[name] = str(value)
		self._touch()

	def remove_attribute(self, name: str) -> None:
		if self.attrs.pop(name, None) is not None:
			self._touch()

	# --- tree mutation ---

	def _children_changed(self) -> None:
		self.key_index = None
		self._touch()

	def append_child(self, node: Node) -> Node:
		node.remove()
		node.parent = self
		self.children.append(node)
		self._children_changed()
		return node

	def insert_before(self, node: Node, ref: Optional[Node]) -> Node:
		if ref is None:
			return self.append_child(node)
		node.remove()
		idx = _index_of(self.children, ref)
		if idx < 0:
			raise ValueError("reference node is not a child of this element")
		node.parent = self
		self.children.insert(idx, node)
		self._children_changed()
		return node

	def remove_child(self, node: Node) -> Node:
		idx = _index_of(self.children, node)
		if idx < 0:
			raise ValueError("node is not a child of this element")
		del self.children[idx]
		node.parent = None
		self._children_changed()
		return node

	def replace_children(self, nodes: List[Node]) -> None:
		for child in self.children:
			child.parent = None
		self.children = []
		for node in nodes:
			node.remove()
			node.parent = self
			self.children.append(node)
		self._children_changed()

	# --- content ---

	@property
	def element_children(self) -> List["Element"]:
		return [c for c in self.children if isinstance(c, Element)]

	@property
	def inner_html(self) -> str:
		return "".join(child.to_html() for child in self.children)

	@inner_html.setter
	def inner_html(self, markup: str) -> None:
		from .html import parse_fragment

		self.replace_children(parse_fragment(markup))

	@property
	def outer_html(self) -> str:
		return self.to_html()

	@property
	def text_content(self) -> str:
		return "".join(child.text_content for child in self.children)

	@text_content.setter
	def text_content(self, value: str) -> None:
		self.replace_children([Text(str(value))] if value != "" else [])

	def to_html(self) -> str:
		attrs = "".join(
			f" {name}" if value == "" and name not in ("value",) else f' {name}="{html.escape(value, quote=True)}"'
			for name, value in self.attrs.items()
		)
		if self.tag in VOID_ELEMENTS:
			return f"<{self.tag}{attrs}>"
		return f"<{self.tag}{attrs}>{self.inner_html}</{self.tag}>"

	def clone(self, deep: bool = True) -> "Element":
		copy = Element(self.tag, self.attrs)
		if deep:
			for child in self.children:
				copy.append_child(child.clone(deep=True))
		return copy

	def is_equal_node(self, other: Node) -> bool:
		if not isinstance(other, Element) or other.tag != self.tag or other.attrs != self.attrs:
			return False
		if len(other.children) != len(self.children):
			return False
		return all(a.is_equal_node(b) for a, b in zip(self.children, other.children))

	# --- traversal ---

	def iter_descendants(self) -> Iterator[Node]:
		for child in self.children:
			yield child
			if isinstance(child, Element):
				yield from child.iter_descendants()

	def iter_elements(self) -> Iterator["Element"]:
		for node in self.iter_descendants():
			if isinstance(node, Element):
				yield node

	def contains(self, node: Optional[Node]) -> bool:
		while node is not None:
			if node is self:
				return True
			node = node.parent
		return False

	def matches(self, selector: str) -> bool:
		return compile_selector(selector)(self)

	def query_selector(self, selector: str) -> Optional["Element"]:
		match = compile_selector(selector)
		for el in self.iter_elements():
			if match(el):
				return el
		return None

	def query_selector_all(self, selector: str) -> List["Element"]:
		match = compile_selector(selector)
		return [el for el in self.iter_elements() if match(el)]

	def closest(self, selector: str) -> Optional["Element"]:
		match = compile_selector(selector)
		node: Optional[Element] = self
		while node is not None and not isinstance(node, Document):
			if match(node):
				return node
			node = node.parent
		return None

	# --- focus & events ---

	def focus(self) -> None:
		doc = self.owner_document
		if doc is not None:
			doc.active_element = self

	def add_event_listener(self, type_: str, fn: Callable[[Event], Any]) -> None:
		self.listeners.setdefault(type_, []).append(fn)

	def dispatch_event(self, type_: str, detail: Any = None) -> Event:
		"""Dispatch an event at this element and bubble it to the root."""
		event = Event(type=type_, target=self, detail=detail)
		node: Optional[Element] = self
		while node is not None and not event.stopped:
			event.current_target = node
			handler = node.handlers.get(type_)
			if handler is not None:
				handler(event)
			for listener in list(node.listeners.get(type_, ())):
				listener(event)
			node = node.parent
		return event

	def click(self) -> Event:
		return self.dispatch_event("click")


class Document(Element):
	"""Root node; owns focus and the lazily rebuilt scope index."""

	def __init__(self) -> None:
		super().__init__("#document")
		self.active_element: Optional[Element] = None
		self.version = 0
		self._scope_index: list[Element] = []
		self._scope_index_version = -1

	def to_html(self) -> str:
		return self.inner_html

	def _touch(self) -> None:
		self.version += 1

	def scope_elements(self) -> list[Element]:
		"""All elements carrying a scope attribute, in document order."""
		if self._scope_index_version != self.version:
			self._scope_index = [el for el in self.iter_elements() if SCOPE_ATTR in el.attrs]
			self._scope_index_version = self.version
		return self._scope_index


def _index_of(nodes: List[Node], node: Node) -> int:
	for idx, candidate in enumerate(nodes):
		if candidate is node:
			return idx
	return -1


# --- selectors ---

_SIMPLE_SELECTOR = re.compile(
	r"""
	(?P<tag>[A-Za-z][\w-]*|\*)
	|\[(?P<attr>[\w:.-]+)(?:(?P<op>[\^$*]?=)(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\]]*)))?\]
	|:not\((?P<neg>[^)]*)\)
	|\#(?P<id>[\w-]+)
	|\.(?P<cls>[\w-]+)
	""",
	re.VERBOSE,
)


@dataclass
class _Compound:
	tests: list[Callable[[Element], bool]] = field(default_factory=list)

	def __call__(self, el: Element) -> bool:
		return all(test(el) for test in self.tests)


_SELECTOR_CACHE: dict[str, _Compound] = {}


def compile_selector(selector: str) -> _Compound:
	"""Compile one compound selector (no combinators) into a predicate."""
	cached = _SELECTOR_CACHE.get(selector)
	if cached is not None:
		return cached
	text = selector.strip()
	compound = _Compound()
	pos = 0
	while pos < len(text):
		m = _SIMPLE_SELECTOR.match(text, pos)
		if m is None:
			raise ValueError(f"unsupported selector: {selector!r}")
		compound.tests.append(_simple_test(m))
		pos = m.end()
	_SELECTOR_CACHE[selector] = compound
	return compound


def _simple_test(m: re.Match) -> Callable[[Element], bool]:
	if m.group("tag"):
		tag = m.group("tag").lower()
		return lambda el: tag == "*" or el.tag == tag
	if m.group("id"):
		ident = m.group("id")
		return lambda el: el.attrs.get("id") == ident
	if m.group("cls"):
		cls = m.group("cls")
		return lambda el: cls in (el.attrs.get("class") or "").split()
	if m.group("neg") is not None:
		inner = compile_selector(m.group("neg"))
		return lambda el: not inner(el)
	name = m.group("attr")
	op = m.group("op")
	if op is None:
		return lambda el: name in el.attrs
	expected = next(v for v in (m.group("dq"), m.group("sq"), m.group("bare")) if v is not None)
	if op == "=":
		return lambda el: el.attrs.get(name) == expected
	if op == "^=":
		return lambda el: (el.attrs.get(name) or "").startswith(expected) and name in el.attrs
	if op == "$=":
		return lambda el: name in el.attrs and el.attrs[name].endswith(expected)
	return lambda el: name in el.attrs and expected in el.attrs[name]


__all__ = [
	"Comment",
	"Document",
	"Element",
	"Event",
	"Node",
	"Text",
	"VOID_ELEMENTS",
	"compile_selector",
]
