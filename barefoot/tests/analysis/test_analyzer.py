# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

from barefoot.bfc.analysis import analyze, list_exported_components
from barefoot.bfc.parser.ast import JsxElement

COUNTER = """'use client'
import { createSignal, createMemo, createEffect } from '@barefootjs/dom'
import type { Theme } from './theme'

interface CounterProps {
  initial?: number
  label: string
}

function formatCount(n: number): string {
  return `Count: ${n}`
}

export function Counter({ initial = 0, label }: CounterProps) {
  // @bf-ignore props-destructuring
  const [count, setCount] = createSignal<number>(initial)
  const doubled = createMemo(() => count() * 2)
  const handleClick = () => setCount(n => n + 1)
  createEffect(() => {
    console.log(count())
  })
  return (
    <div class="counter">
      <p>{count()}</p>
      <button onClick={handleClick}>{label}</button>
    </div>
  )
}
"""


def _codes(result) -> list[str]:
	return [d.code for d in result.diagnostics]


def test_counter_declarations_are_classified() -> None:
	result = analyze(COUNTER, "Counter.tsx")
	assert _codes(result) == []
	meta = result.metadata
	assert meta is not None
	assert meta.name == "Counter"
	assert meta.use_client and meta.is_exported
	signal = meta.signals[0]
	assert (signal.getter, signal.setter, signal.initial, signal.type_arg) == ("count", "setCount", "initial", "number")
	assert meta.memos[0].name == "doubled"
	assert meta.memos[0].computation == "() => count() * 2"
	assert len(meta.effects) == 1
	assert "console.log(count())" in meta.effects[0].body
	assert [h.names for h in meta.local_helpers] == [("handleClick",)]
	assert "setCount" in meta.local_helpers[0].references
	assert [h.names for h in meta.module_helpers] == [("formatCount",)]
	assert isinstance(meta.root, JsxElement) and meta.root.tag == "div"


def test_props_optionality_defaults_and_types() -> None:
	meta = analyze(COUNTER).metadata
	initial, label = meta.props
	assert (initial.name, initial.optional, initial.default, initial.type) == ("initial", True, "0", "number")
	assert (label.name, label.optional, label.default, label.type) == ("label", False, None, "string")
	assert meta.props_type == "CounterProps"


def test_imports_and_type_definitions() -> None:
	meta = analyze(COUNTER).metadata
	runtime, theme = meta.imports
	assert runtime.source == "@barefootjs/dom"
	assert [s.name for s in runtime.specifiers] == ["createSignal", "createMemo", "createEffect"]
	assert theme.type_only and theme.local_names == []
	assert [t.name for t in meta.type_defs] == ["CounterProps"]
	assert meta.type_defs[0].text.startswith("interface CounterProps")


def test_missing_use_client_is_an_error() -> None:
	result = analyze(COUNTER.replace("'use client'\n", ""))
	assert "BF001" in _codes(result)
	assert any(d.is_error for d in result.diagnostics)


def test_directive_must_come_first() -> None:
	src = "import { createSignal } from '@barefootjs/dom'\n'use client'\n" + COUNTER.split("\n", 1)[1]
	result = analyze(src)
	assert "BF002" in _codes(result)


def test_lowercase_exported_markup_function() -> None:
	result = analyze("export function card() {\n  return <div>x</div>\n}\n")
	assert "BF042" in _codes(result)
	assert "BF040" in _codes(result)
	assert result.metadata is None


def test_requested_component_not_found() -> None:
	result = analyze(COUNTER, "Counter.tsx", component="Missing")
	assert _codes(result) == ["BF040"]
	assert "Missing" in result.diagnostics[0].message


def test_syntax_error_reports_bf020_with_location() -> None:
	result = analyze("export function A() {\n  return <div>\n}\n", "A.tsx")
	assert _codes(result) == ["BF020"]
	err = result.diagnostics[0]
	assert err.span.file == "A.tsx"
	assert err.span.line is not None
	assert err.span.end_line is not None and err.span.end_column is not None
	assert (err.span.end_line, err.span.end_column) >= (err.span.line, err.span.column)


def test_destructured_props_in_stateful_component_warn() -> None:
	src = COUNTER.replace("  // @bf-ignore props-destructuring\n", "")
	result = analyze(src)
	warnings = [d for d in result.diagnostics if d.code == "BF043"]
	assert len(warnings) == 1
	assert warnings[0].severity == "warning"
	assert result.metadata is not None


def test_bare_getter_and_class_name_warnings() -> None:
	src = """'use client'
export function Bad() {
  const [count, setCount] = createSignal(0)
  return <p className="x">{count}</p>
}
"""
	result = analyze(src)
	by_code = {d.code: d for d in result.diagnostics}
	assert by_code["BF044"].severity == "warning"
	assert by_code["BF044"].suggestion.replacement == "{count()}"
	assert by_code["BF050"].suggestion.replacement == 'class="x"'
	assert not any(d.is_error for d in result.diagnostics)


def test_signal_at_module_level() -> None:
	src = "'use client'\nconst [a, setA] = createSignal(0)\nexport function A() {\n  return <p>{a()}</p>\n}\n"
	assert "BF011" in _codes(analyze(src))


def test_guarded_roots() -> None:
	src = """export function Status({ loading }: { loading: boolean }) {
  if (loading) return <p>Loading</p>
  if (!loading) {
    return <span>Done</span>
  }
  return <div>Ready</div>
}
"""
	meta = analyze(src).metadata
	assert [g.condition for g in meta.guarded_roots] == ["loading", "!loading"]
	assert meta.root.tag == "div"
	assert meta.props[0].type == "boolean"


def test_props_object_reads_keys_from_type_alias() -> None:
	src = """type CardProps = { title: string; subtitle?: string }
export function Card(props: CardProps) {
  return <h1>{props.title}</h1>
}
"""
	meta = analyze(src).metadata
	assert meta.props_object == "props"
	assert [(p.name, p.optional) for p in meta.props] == [("title", False), ("subtitle", True)]


def test_component_selection_and_export_listing() -> None:
	src = """function Inner() {
  return <i>inner</i>
}
export function First() {
  return <div><Inner /></div>
}
export default function Second() {
  return <p>second</p>
}
"""
	assert list_exported_components(src) == ["First", "Second"]
	result = analyze(src)
	assert result.components == ["Inner", "First", "Second"]
	assert result.metadata.name == "Second"
	first = analyze(src, component="First").metadata
	assert first.child_components == ("Inner",)


def test_arrow_component_with_expression_body() -> None:
	src = "export const Hello = ({ name }: { name: string }) => <p>Hello {name}</p>\n"
	meta = analyze(src).metadata
	assert meta.name == "Hello"
	assert [p.name for p in meta.props] == ["name"]


def test_mismatched_closing_tag_reports_an_end_location() -> None:
	result = analyze("export function B() {\n  return <div><span></div>\n}\n", "B.tsx")
	assert _codes(result) == ["BF020"]
	span = result.diagnostics[0].span
	assert span.line == 2
	assert span.end_line is not None and span.end_column is not None
