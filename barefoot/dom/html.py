# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""HTML fragment/document parsing into the DOM model (stdlib `html.parser`)."""

from __future__ import annotations

from html.parser import HTMLParser
from typing import List, Optional

from .nodes import VOID_ELEMENTS, Comment, Document, Element, Node, Text


class _TreeBuilder(HTMLParser):
	def __init__(self, root: Element) -> None:
		super().__init__(convert_charrefs=True)
		self.root = root
		self.stack: list[Element] = [root]

	@property
	def current(self) -> Element:
		return self.stack[-1]

	def handle_starttag(self, tag: str, attrs: list[tuple[str, Optional[str]]]) -> None:
		el = Element(tag, {name: ("" if value is None else value) for name, value in attrs})
		self.current.append_child(el)
		if el.tag not in VOID_ELEMENTS:
			self.stack.append(el)

	def handle_startendtag(self, tag: str, attrs: list[tuple[str, Optional[str]]]) -> None:
		el = Element(tag, {name: ("" if value is None else value) for name, value in attrs})
		self.current.append_child(el)

	def handle_endtag(self, tag: str) -> None:
		tag = tag.lower()
		# Close up to the nearest matching open element; stray end tags are ignored.
		for depth in range(len(self.stack) - 1, 0, -1):
			if self.stack[depth].tag == tag:
				del self.stack[depth:]
				return

	def handle_data(self, data: str) -> None:
		if not data:
			return
		last = self.current.children[-1] if self.current.children else None
		if isinstance(last, Text):
			last.data += data
		else:
			self.current.append_child(Text(data))

	def handle_comment(self, data: str) -> None:
		self.current.append_child(Comment(data))


def parse_fragment(markup: str) -> List[Node]:
	"""Parse markup into a list of detached top-level nodes."""
	holder = Element("template")
	builder = _TreeBuilder(holder)
	builder.feed(markup)
	builder.close()
	nodes = list(holder.children)
	holder.replace_children([])
	return nodes


def parse_document(markup: str) -> Document:
	doc = Document()
	builder = _TreeBuilder(doc)
	builder.feed(markup)
	builder.close()
	return doc


def first_element(nodes: List[Node]) -> Optional[Element]:
	for node in nodes:
		if isinstance(node, Element):
			return node
	return None


__all__ = ["first_element", "parse_document", "parse_fragment"]
