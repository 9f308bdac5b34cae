# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from barefoot.bfc.analysis import analyze
from barefoot.bfc.codegen import generate_client, live_code
from barefoot.bfc.ir import build_ir

COUNTER = """'use client'
import { createSignal } from '@barefootjs/dom'

export function Counter() {
  const [count, setCount] = createSignal(0)
  return (
    <div class="counter">
      <p>{count()}</p>
      <button onClick={() => setCount(n => n + 1)}>+1</button>
    </div>
  )
}
"""

HELPER = """'use client'
function double(n) { return n * 2 }

export function Doubler() {
  const [count, setCount] = createSignal(1)
  return (
    <div title={double(3)}>
      <button onClick={HANDLER}>go</button>
    </div>
  )
}
"""


def _meta_ir(src: str):
	result = analyze(src, "C.tsx")
	assert result.metadata is not None, result.diagnostics
	return result.metadata, build_ir(result.metadata)


def _script(src: str) -> str:
	meta, ir = _meta_ir(src)
	text, _ = generate_client(ir, meta)
	return text


def test_counter_script_wires_text_effect_and_click_handler() -> None:
	text = _script(COUNTER)
	assert text.startswith("import { createEffect, createSignal, find, findScope, hydrate } from '@barefootjs/dom'\n")
	assert "export function initCounter(__instanceIndex, __parentScope, props = {}) {" in text
	assert "  const __scope = findScope('Counter', __instanceIndex, __parentScope)\n  if (!__scope) return" in text
	assert "const [count, setCount] = createSignal(0)" in text
	assert "const _s0 = find(__scope, '[data-bf=\"0\"]')" in text
	assert "_s0.textContent = String(count() ?? '')" in text
	assert "_s1.onclick = () => setCount(n => n + 1)" in text
	assert text.rstrip().endswith("hydrate('Counter', initCounter)")
	# effect comes before the handler, in slot order
	assert text.index("_s0.textContent") < text.index("_s1.onclick")


def test_helper_only_used_in_server_markup_is_left_out() -> None:
	text = _script(HELPER.replace("HANDLER", "() => setCount(count() + 1)"))
	assert "double" not in text


def test_helper_used_by_a_handler_is_copied() -> None:
	text = _script(HELPER.replace("HANDLER", "() => setCount(double(count()))"))
	assert "function double(n) { return n * 2 }" in text
	assert text.index("function double") < text.index("export function initDoubler")


def test_helper_reachability_is_transitive() -> None:
	src = """'use client'
const FACTOR = 3
function scale(n) { return n * FACTOR }
function unused() { return 1 }
export function Scaled() {
  const [count, setCount] = createSignal(1)
  const label = () => `x${scale(count())}`
  return <p>{label()}</p>
}
"""
	meta, ir = _meta_ir(src)
	live = live_code(meta, ir)
	assert [h.names for h in live.module_helpers] == [("FACTOR",), ("scale",)]
	assert [h.names for h in live.local_helpers] == [("label",)]


def test_typescript_is_stripped_from_copied_code() -> None:
	src = """'use client'
function clamp(n: number, max: number): number { return n > max ? max : n }
export function Clamp() {
  const [count, setCount] = createSignal<number>(0)
  return <button onClick={(e: MouseEvent) => setCount(clamp(count() + 1, 10))}>{count()}</button>
}
"""
	text = _script(src)
	assert "function clamp(n, max) { return n > max ? max : n }" in text
	assert "createSignal(0)" in text
	assert "_s0.onclick = (e) => setCount(clamp(count() + 1, 10))" in text


def test_keyed_list_uses_reconcile_and_delegation() -> None:
	src = """'use client'
export function List() {
  const [items, setItems] = createSignal([{ id: 1, text: 'a' }])
  return (
    <ul>
      {items().map((item) => (
        <li key={item.id} onClick={() => setItems(items().filter((x) => x !== item))}>{item.text}</li>
      ))}
    </ul>
  )
}
"""
	text = _script(src)
	assert (
		"reconcileList(_s0, items(), (item, __i) => String(item.id), "
		"(item, __i) => `<li data-key=\"${__esc(item.id)}\" data-event-id=\"0\">${__esc(item.text)}</li>`)"
	) in text
	assert "function __esc(value)" in text
	assert "delegate(_s0, 'click', {" in text
	assert "const __i = __items.findIndex((item, __i) => String(item.id) === __key)" in text
	assert "const item = __items[__i]" in text
	assert ";(() => setItems(items().filter((x) => x !== item)))(__e)" in text


def test_unkeyed_list_rewrites_inner_html() -> None:
	src = """'use client'
export function Names() {
  const [names, setNames] = createSignal(['a'])
  return <ul>{names().map((n) => <li>{n}</li>)}</ul>
}
"""
	text = _script(src)
	assert "_s0.innerHTML = (names()).map((n, __i) => `<li>${__esc(n)}</li>`).join('')" in text
	assert "reconcileList" not in text
	assert "delegate" not in text


def test_reactive_conditionals_use_cond_with_branch_templates() -> None:
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
	text = _script(src)
	assert "cond(__scope, '0', () => open(), [() => `<p>Open</p>`, () => ``])" in text
	assert (
		"cond(__scope, '1', () => open(), [() => `<b data-bf-cond=\"1\">yes</b>`, () => `<i data-bf-cond=\"1\">no</i>`])"
	) in text


def test_handlers_inside_conditional_branches_are_rebound() -> None:
	src = """'use client'
export function Editor() {
  const [editing, setEditing] = createSignal(false)
  return (
    <div>
      {editing() ? <button onClick={() => setEditing(false)}>done</button> : <span>view</span>}
    </div>
  )
}
"""
	text = _script(src)
	assert "['[data-bf=\"1\"]', 'click', () => setEditing(false)]" in text
	# the button may not exist yet, so it is not bound at init time
	assert "_s1.onclick" not in text


def test_attribute_effects_and_refs() -> None:
	src = """'use client'
export function Field() {
  const [busy, setBusy] = createSignal(false)
  const [name, setName] = createSignal('')
  let input
  return <input value={name()} disabled={busy()} title={name()} ref={(el) => (input = el)} />
}
"""
	text = _script(src)
	assert "_s0.value = (name()) ?? ''" in text
	assert "if (busy()) _s0.setAttribute('disabled', '')" in text
	assert "else _s0.removeAttribute('disabled')" in text
	assert "const __v = name()" in text
	assert ";((el) => (input = el))(_s0)" in text
	assert "let input" in text


def test_effects_and_mount_callbacks_are_copied() -> None:
	src = """'use client'
export function Logger() {
  const [count, setCount] = createSignal(0)
  createEffect(() => console.log(count()))
  onMount(() => setCount(1))
  return <p>{count()}</p>
}
"""
	text = _script(src)
	assert "createEffect(() => console.log(count()))" in text
	assert "onMount(() => setCount(1))" in text
	assert "onMount" in text.split("\n", 1)[0]


def test_child_components_are_initialized_with_reactive_getters() -> None:
	src = """'use client'
import { Display } from './Display'
export function Panel() {
  const [count, setCount] = createSignal(0)
  return (
    <section>
      <Display value={count()} label="Total" />
      <button onClick={() => setCount(count() + 1)}>+</button>
    </section>
  )
}
"""
	text = _script(src)
	assert (
		"initChild('Display', find(__scope, '[data-bf-scope^=\"Display_\"]', 0), "
		"{ get value() { return count() }, label: 'Total' })"
	) in text
	# children register themselves; no import of their scripts
	assert "./Display" not in text


def test_props_are_merged_with_serialized_props() -> None:
	src = """'use client'
export function Stepper({ step = 1 }: { step?: number }) {
  // @bf-ignore props-destructuring
  const [count, setCount] = createSignal(0)
  return <button onClick={() => setCount(count() + step)}>{count()}</button>
}
"""
	text = _script(src)
	assert "props = Object.defineProperties({ ...readProps(__scope) }, Object.getOwnPropertyDescriptors(props))" in text
	assert "const { step = 1 } = props" in text
