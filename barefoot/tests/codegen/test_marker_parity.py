# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import re

from barefoot.bfc.codegen.emitter import marker_attrs
from barefoot.bfc.ir.nodes import IRElement

TODO = """'use client'
export function Todo() {
  const [items, setItems] = createSignal([{ id: 1, text: 'a' }])
  const [open, setOpen] = createSignal(false)
  return (
    <div>
      <button onClick={() => setOpen(!open())}>toggle</button>
      {open() ? <p>Open</p> : <span>Closed</span>}
      {open() && <><em>one</em><em>two</em></>}
      <ul>
        {items().map((item) => (
          <li key={item.id} onClick={() => setItems([])}>{item.text}</li>
        ))}
      </ul>
      <h2>{items().length} items</h2>
    </div>
  )
}
"""

_STATIC_MARKER = re.compile(r'(data-bf|data-bf-cond|data-event-id)="(\d+)"')
_COMMENT_MARKER = re.compile(r"bf-cond-(?:start|end):\d+")


def _markers(text: str):
	return _STATIC_MARKER.findall(text), _COMMENT_MARKER.findall(text), text.count("data-key"), text.count("data-bf-scope")


def test_backends_emit_the_same_markers(compile_tsx) -> None:
	hono = compile_tsx(TODO, "Todo.tsx", backend="hono").file("template").content
	jinja = compile_tsx(TODO, "Todo.tsx", backend="jinja").file("template").content
	assert _markers(hono) == _markers(jinja)
	static, comments, keys, scopes = _markers(hono)
	assert ("data-bf-cond", "1") in static and ("data-event-id", "0") in static
	assert comments == ["bf-cond-start:2", "bf-cond-end:2"]
	assert keys == 1 and scopes == 1


def test_marker_order_is_fixed() -> None:
	el = IRElement("li", is_root=True, slot_id="3", cond_id="4", key="item.id")
	assert [m.name for m in marker_attrs(el)] == ["data-bf-scope", "data-bf", "data-bf-cond", "data-key"]
	assert marker_attrs(el)[3].dynamic
