# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from barefoot.bfc.analysis import analyze
from barefoot.bfc.codegen import generate_hono
from barefoot.bfc.ir import build_ir

COUNTER = """'use client'
import { createSignal } from '@barefootjs/dom'
import { format } from './format'

type CounterProps = { initial?: number; label: string }

export function Counter({ initial = 0, label }: CounterProps) {
  // @bf-ignore props-destructuring
  const [count, setCount] = createSignal<number>(initial)
  return (
    <div class="counter">
      <p>{count()}</p>
      <button onClick={() => setCount(n => n + 1)}>{format(label)}</button>
    </div>
  )
}
"""


def _hono(src: str) -> str:
	result = analyze(src, "Counter.tsx")
	assert result.metadata is not None, result.diagnostics
	text, _ = generate_hono(build_ir(result.metadata), result.metadata)
	return text


def test_counter_template_shape() -> None:
	text = _hono(COUNTER)
	assert "import { format } from './format'" in text
	assert "@barefootjs/dom" not in text
	assert "type CounterProps = { initial?: number; label: string }" in text
	assert "type CounterPropsWithHydration = CounterProps & { __instanceId?: string; __bfScope?: string }" in text
	assert "export function Counter({ initial = 0, label, __instanceId, __bfScope }: CounterPropsWithHydration) {" in text
	assert "const count = (): number => initial" in text
	assert "const setCount = (..._args: unknown[]) => {}" in text
	assert '<div data-bf-scope={__scopeId} class="counter">' in text
	assert '<p data-bf="0">{count()}</p>' in text
	assert "onClick" not in text


def test_props_script_holds_serializable_props() -> None:
	text = _hono(COUNTER)
	assert '<script type="application/json" data-bf-props={__scopeId}' in text
	assert "JSON.stringify({ initial, label })" in text
	# the script is the last child of the root element
	assert text.index("data-bf-props") < text.rindex("</div>")


def test_static_component_has_no_props_script() -> None:
	src = "export function Badge({ label }: { label: string }) {\n  return <span class=\"badge\">{label}</span>\n}\n"
	text = _hono(src)
	assert "data-bf-props" not in text
	assert '<span data-bf-scope={__scopeId} class="badge">{label}</span>' in text


def test_fragment_conditional_uses_raw_comment_markers() -> None:
	src = """'use client'
export function Toggle() {
  const [open, setOpen] = createSignal(false)
  return (
    <div>
      {open() ? <p>Open</p> : null}
      {open() ? <b>yes</b> : <i>no</i>}
    </div>
  )
}
"""
	text = _hono(src)
	assert "import { raw } from 'hono/html'" in text
	assert "{raw('<!--bf-cond-start:0-->')}{(open()) ? <p>Open</p> : null}{raw('<!--bf-cond-end:0-->')}" in text
	assert '{(open()) ? <b data-bf-cond="1">yes</b> : <i data-bf-cond="1">no</i>}' in text


def test_keyed_list_items_carry_key_and_event_markers() -> None:
	src = """'use client'
export function List() {
  const [items, setItems] = createSignal([{ id: 1, text: 'a' }])
  return (
    <ul>
      {items().map((item) => (
        <li key={item.id} onClick={() => setItems([])}>{item.text}</li>
      ))}
    </ul>
  )
}
"""
	text = _hono(src)
	assert '<ul data-bf-scope={__scopeId} data-bf="0">' in text
	assert '{items().map((item) => <li data-key={item.id} data-event-id="0">{item.text}</li>)}' in text


def test_guarded_return_becomes_early_return() -> None:
	src = """'use client'
export function Status() {
  const [count, setCount] = createSignal(0)
  if (count() > 9) return <p>{count()}</p>
  return <div><span>{count()}</span></div>
}
"""
	text = _hono(src)
	assert "  if (count() > 9) {\n    return (" in text
	assert text.index("if (count() > 9)") < text.rindex("return (")
