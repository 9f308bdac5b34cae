# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from barefoot.dom import parse_document, parse_fragment
from barefoot.dom.nodes import Comment, Element, Text


def test_parse_and_serialize_round_trip() -> None:
	markup = '<div class="a" data-bf="0"><input type="text" disabled><!--c--><p>x &amp; y</p></div>'
	doc = parse_document(markup)
	assert doc.to_html() == markup


def test_parse_fragment_returns_detached_nodes() -> None:
	nodes = parse_fragment("<!--bf-cond-start:1--><li>a</li>tail")
	assert isinstance(nodes[0], Comment)
	assert isinstance(nodes[1], Element)
	assert isinstance(nodes[2], Text)
	assert all(node.parent is None for node in nodes)


def test_selectors() -> None:
	doc = parse_document(
		'<div data-bf-scope="Counter_1" data-bf-init="true"></div>'
		'<div data-bf-scope="Counter_2" class="x y"></div>'
		'<span id="s"></span>'
	)
	assert len(doc.query_selector_all('[data-bf-scope^="Counter_"]')) == 2
	unclaimed = doc.query_selector_all('[data-bf-scope^="Counter_"]:not([data-bf-init])')
	assert [el.get_attribute("data-bf-scope") for el in unclaimed] == ["Counter_2"]
	assert doc.query_selector("div.y") is unclaimed[0]
	assert doc.query_selector("#s").tag == "span"
	with pytest.raises(ValueError):
		doc.query_selector("div > span")


def test_is_equal_node_is_structural() -> None:
	a = parse_fragment('<li data-key="1"><b>x</b></li>')[0]
	b = parse_fragment('<li data-key="1"><b>x</b></li>')[0]
	c = parse_fragment('<li data-key="1"><b>y</b></li>')[0]
	assert a.is_equal_node(b)
	assert not a.is_equal_node(c)


def test_text_content_setter_and_events_bubble() -> None:
	doc = parse_document('<div id="outer"><button id="b">x</button></div>')
	outer = doc.query_selector("#outer")
	button = doc.query_selector("#b")
	log: list[str] = []
	outer.add_event_listener("click", lambda ev: log.append(f"outer:{ev.target.get_attribute('id')}"))
	button.handlers["click"] = lambda ev: log.append("button")
	button.click()
	assert log == ["button", "outer:b"]
	button.text_content = "42"
	assert button.inner_html == "42"


def test_mutation_bumps_document_version() -> None:
	doc = parse_document("<ul></ul>")
	before = doc.version
	doc.query_selector("ul").append_child(Element("li"))
	assert doc.version > before
