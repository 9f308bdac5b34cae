# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

from barefoot.bfc.analysis import analyze
from barefoot.bfc.ir import build_ir, component_to_json
from barefoot.bfc.ir.builder import jsx_text, reactive_callables
from barefoot.bfc.ir.nodes import IRConditional, IRElement, IRExpression, IRLoop, IRText, walk

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

LIST = """'use client'
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


def _ir(src: str):
	result = analyze(src, "C.tsx")
	assert result.metadata is not None, result.diagnostics
	return build_ir(result.metadata)


def _nodes(ir, kind):
	return [n for root in ir.roots() for n in walk(root) if isinstance(n, kind)]


def test_counter_slots_and_events() -> None:
	ir = _ir(COUNTER)
	assert ir.interactive
	assert sorted(ir.slots) == ["0", "1"]
	p, button = ir.root.children
	assert (p.tag, p.slot_id, p.text_binding) == ("p", "0", True)
	assert (button.tag, button.slot_id) == ("button", "1")
	assert ir.events["component"] == {"0": "() => setCount(n => n + 1)"}
	assert ir.root.is_root and ir.root.slot_id is None
	assert ir.diagnostics == []


def test_numbering_is_deterministic() -> None:
	assert component_to_json(_ir(COUNTER)) == component_to_json(_ir(COUNTER))


def test_keyed_loop_uses_container_slot_and_delegated_events() -> None:
	ir = _ir(LIST)
	ul = ir.root
	assert ul.slot_id == "0"
	(loop,) = ul.children
	assert isinstance(loop, IRLoop)
	assert loop.keyed and loop.key == "item.id"
	assert loop.slot_id == "0" and not loop.wrapped
	assert loop.param == "item"
	assert loop.param_names == ("item",)
	li = loop.body
	assert isinstance(li, IRElement) and li.slot_id is None
	assert li.events[0].delegated and li.events[0].event_id == "0"
	assert ir.events["0"] == {"0": "() => setItems([])"}
	assert list(loop.events) == ["0"]


def test_unkeyed_loop_warns_and_degrades() -> None:
	ir = _ir(LIST.replace(" key={item.id}", ""))
	(loop,) = _nodes(ir, IRLoop)
	assert not loop.keyed and loop.key is None
	codes = [(d.code, d.severity) for d in ir.diagnostics]
	assert codes == [("BF023", "warning")]


def test_key_with_undefined_binding_is_an_error() -> None:
	ir = _ir(LIST.replace("key={item.id}", "key={other.id}"))
	errors = [d for d in ir.diagnostics if d.is_error]
	assert [e.code for e in errors] == ["BF023"]
	assert "other" in errors[0].message


def test_key_may_use_index_and_globals() -> None:
	src = LIST.replace("(item) =>", "(item, i) =>").replace("key={item.id}", "key={String(i)}")
	ir = _ir(src)
	(loop,) = _nodes(ir, IRLoop)
	assert loop.keyed and loop.index == "i"
	assert not any(d.is_error for d in ir.diagnostics)


def test_conditional_modes() -> None:
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
	ir = _ir(src)
	first, second = _nodes(ir, IRConditional)
	assert (first.mode, first.cond_id, first.when_false) == ("fragment", "0", None)
	assert (second.mode, second.cond_id) == ("element", "1")
	assert second.when_true.cond_id == "1" and second.when_false.cond_id == "1"
	assert ir.interactive


def test_logical_and_with_multiple_nodes_is_fragment_mode() -> None:
	src = """'use client'
export function Note() {
  const [show, setShow] = createSignal(true)
  return <section>{show() && <><h2>Title</h2><p>Body</p></>}</section>
}
"""
	(cond,) = _nodes(_ir(src), IRConditional)
	assert cond.mode == "fragment" and cond.when_false is None


def test_static_conditional_gets_no_id() -> None:
	src = """export function Badge({ label }: { label?: string }) {
  return <span>{label ? <b>{label}</b> : <i>none</i>}</span>
}
"""
	ir = _ir(src)
	(cond,) = _nodes(ir, IRConditional)
	assert cond.cond_id is None and not cond.reactive
	assert not ir.interactive


def test_reactive_expression_beside_elements_is_wrapped() -> None:
	src = """'use client'
export function Total() {
  const [count, setCount] = createSignal(0)
  return (
    <div>
      <h1>Total {count()}</h1>
      <p>Count: {count()} <b>!</b></p>
    </div>
  )
}
"""
	ir = _ir(src)
	h1, p = ir.root.children
	assert h1.text_binding and h1.slot_id == "0"
	assert [type(c) for c in h1.children] == [IRText, IRExpression]
	assert not p.text_binding and p.slot_id is None
	expr = p.children[1]
	assert isinstance(expr, IRExpression) and expr.wrapped and expr.slot_id == "1"


def test_attribute_bindings_and_refs() -> None:
	src = """'use client'
export function Field() {
  const [busy, setBusy] = createSignal(false)
  let input
  return <input className="f" disabled={busy()} placeholder={"Name"} ref={(el) => (input = el)} />
}
"""
	ir = _ir(src)
	root = ir.root
	assert root.slot_id == "0"
	assert ir.attr_bindings == {"0": {"disabled": "busy()"}}
	assert [a.name for a in root.attrs] == ["class", "disabled", "placeholder"]
	assert root.ref == "(el) => (input = el)"


def test_fragment_root_is_wrapped() -> None:
	src = "export function Pair() {\n  return <><a>1</a><b>2</b></>\n}\n"
	ir = _ir(src)
	assert ir.root.tag == "div" and ir.root.is_root
	assert [c.tag for c in ir.root.children] == ["a", "b"]


def test_guarded_roots_share_the_counter() -> None:
	src = """'use client'
export function Status() {
  const [count, setCount] = createSignal(0)
  if (count() > 9) return <p>{count()}</p>
  return <div><span>{count()}</span></div>
}
"""
	ir = _ir(src)
	assert ir.guarded[0].condition == "count() > 9"
	assert ir.guarded[0].root.slot_id == "0"
	assert ir.root.children[0].slot_id == "1"


def test_helpers_that_read_signals_are_reactive() -> None:
	src = """'use client'
export function Label() {
  const [count, setCount] = createSignal(0)
  const label = () => `n=${count()}`
  const title = 'static'
  return <p title={title}>{label()}</p>
}
"""
	meta = analyze(src).metadata
	assert "label" in reactive_callables(meta)
	ir = build_ir(meta)
	assert ir.root.slot_id == "0" and ir.root.text_binding
	assert ir.attr_bindings == {}


def test_jsx_text_whitespace() -> None:
	assert jsx_text("\n    hello\n    world\n  ") == "hello world"
	assert jsx_text("  keep  ") == "  keep  "
	assert jsx_text("\n   \n") == ""
