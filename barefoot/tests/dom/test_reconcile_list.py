# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from barefoot.dom import parse_document, reconcile_list
from barefoot.dom.nodes import Element, Text


def _render(item: dict, _index: int) -> str:
	return f'<li data-key="{item["id"]}">{item["text"]}</li>'


def _key(item: dict, _index: int) -> int:
	return item["id"]


def _list_doc(items: list[dict]) -> tuple[Element, Element]:
	doc = parse_document('<ul id="list"></ul>')
	ul = doc.query_selector("#list")
	assert ul is not None
	reconcile_list(ul, items, _key, _render)
	return doc, ul


FRUIT = [
	{"id": 1, "text": "Apple"},
	{"id": 2, "text": "Banana"},
	{"id": 3, "text": "Cherry"},
]


def test_initial_render_creates_keyed_children() -> None:
	_doc, ul = _list_doc(FRUIT)
	assert [li.get_attribute("data-key") for li in ul.element_children] == ["1", "2", "3"]
	assert ul.text_content == "AppleBananaCherry"


def test_reverse_reorders_without_recreating() -> None:
	_doc, ul = _list_doc(FRUIT)
	for li in ul.element_children:
		li.marker = f"orig-{li.get_attribute('data-key')}"
	reconcile_list(ul, list(reversed(FRUIT)), _key, _render)
	children = ul.element_children
	assert [li.text_content for li in children] == ["Cherry", "Banana", "Apple"]
	assert [li.marker for li in children] == ["orig-3", "orig-2", "orig-1"]


def test_content_change_replaces_only_changed_node() -> None:
	_doc, ul = _list_doc(FRUIT[:2])
	for li in ul.element_children:
		li.marker = "orig"
	reconcile_list(ul, [{"id": 1, "text": "Apple Updated"}, FRUIT[1]], _key, _render)
	first, second = ul.element_children
	assert first.text_content == "Apple Updated"
	assert not hasattr(first, "marker")
	assert second.marker == "orig"


def test_single_item_update_keeps_count() -> None:
	_doc, ul = _list_doc([{"id": 1, "text": "Apple"}])
	reconcile_list(ul, [{"id": 1, "text": "Apple Updated"}], _key, _render)
	assert len(ul.element_children) == 1
	assert ul.text_content == "Apple Updated"


def test_removal_drops_exactly_one_node() -> None:
	_doc, ul = _list_doc(FRUIT)
	first, _, third = ul.element_children
	reconcile_list(ul, [FRUIT[0], FRUIT[2]], _key, _render)
	assert ul.element_children == [first, third]


def test_key_index_tracks_current_children() -> None:
	_doc, ul = _list_doc(FRUIT)
	reconcile_list(ul, FRUIT[1:], _key, _render)
	assert ul.key_index is not None
	assert sorted(ul.key_index) == ["2", "3"]
	assert ul.key_index["2"] is ul.element_children[0]


def test_outside_child_mutations_drop_the_key_index() -> None:
	_doc, ul = _list_doc(FRUIT)
	ul.inner_html = '<li data-key="1">Apple</li>'
	assert ul.key_index is None
	fresh = ul.element_children[0]
	reconcile_list(ul, FRUIT[:1], _key, _render)
	assert ul.element_children[0] is fresh

	extra = Element("li", {"data-key": "4"})
	extra.append_child(Text("Date"))
	ul.append_child(extra)
	assert ul.key_index is None
	reconcile_list(ul, FRUIT[:1] + [{"id": 4, "text": "Date"}], _key, _render)
	assert ul.element_children[1] is extra

	ul.remove_child(extra)
	assert ul.key_index is None
	assert [li.get_attribute("data-key") for li in ul.element_children] == ["1"]


def test_duplicate_keys_first_match_wins() -> None:
	_doc, ul = _list_doc(FRUIT[:1])
	original = ul.element_children[0]
	dupes = [{"id": 1, "text": "Apple"}, {"id": 1, "text": "Apple again"}]
	reconcile_list(ul, dupes, _key, _render)
	first, second = ul.element_children
	assert first is original
	assert second.text_content == "Apple again"
	assert ul.key_index == {"1": original}


def test_focused_input_survives_content_change() -> None:
	doc = parse_document('<ul id="todos"></ul>')
	ul = doc.query_selector("#todos")
	assert ul is not None

	def render(item: dict, _index: int) -> str:
		done = " done" if item["done"] else ""
		return (
			f'<li data-key="{item["id"]}" class="todo{done}">'
			f'<input type="text" data-event-id="0" value="{item["text"]}"></li>'
		)

	items = [{"id": 1, "text": "milk", "done": False}]
	reconcile_list(ul, items, _key, render)
	field = ul.query_selector("input")
	assert field is not None
	field.focus()
	field.value = "milk and eggs"

	reconcile_list(ul, [{"id": 1, "text": "milk", "done": True}], _key, render)
	li = ul.element_children[0]
	assert li.get_attribute("class") == "todo done"
	assert ul.query_selector("input") is field
	assert doc.active_element is field
	assert field.value == "milk and eggs"


def test_focus_restored_on_replacement_by_event_id() -> None:
	doc = parse_document('<ul id="l"></ul>')
	ul = doc.query_selector("#l")
	assert ul is not None

	def render(item: dict, _index: int) -> str:
		return (
			f'<li data-key="{item["id"]}"><span>{item["text"]}</span>'
			f'<button data-event-id="0">x</button><button data-event-id="1">y</button></li>'
		)

	reconcile_list(ul, [{"id": 1, "text": "a"}], _key, render)
	ul.query_selector('[data-event-id="1"]').focus()
	reconcile_list(ul, [{"id": 1, "text": "b"}], _key, render)
	active = doc.active_element
	assert active is not None
	assert active.get_attribute("data-event-id") == "1"
	assert ul.contains(active)


def test_none_container_is_ignored() -> None:
	reconcile_list(None, FRUIT, _key, _render)
