# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

from barefoot.bfc.parser import parse_module
from barefoot.bfc.parser.items import (
	called_names,
	referenced_names,
	split_statements,
	split_top,
	template_holes,
)


def test_statements_split_on_newlines_and_semicolons() -> None:
	src = """'use client'
import { createSignal } from '@barefootjs/dom'
const a = 1; const b = a
  + 2
function f() {
  return a
}
export default f
"""
	module = parse_module(src)
	stmts = split_statements(module.items)
	texts = [module.text(s) for s in stmts]
	assert texts == [
		"'use client'",
		"import { createSignal } from '@barefootjs/dom'",
		"const a = 1",
		"const b = a\n  + 2",
		"function f() {\n  return a\n}",
		"export default f",
	]


def test_if_else_stays_one_statement() -> None:
	src = "if (a) {\n  x()\n}\nelse {\n  y()\n}\nz()"
	module = parse_module(src)
	stmts = split_statements(module.items)
	assert len(stmts) == 2
	assert module.text(stmts[1]) == "z()"


def test_function_declaration_ends_at_body() -> None:
	module = parse_module("function a() {} function b() {}")
	assert len(split_statements(module.items)) == 2


def test_split_top_ignores_nested_commas() -> None:
	module = parse_module("a, f(b, c), [d, e]")
	parts = split_top(module.items)
	assert [module.text(p) for p in parts] == ["a", "f(b, c)", "[d, e]"]


def test_referenced_names_skip_members_and_read_templates() -> None:
	module = parse_module("const s = `a ${x + y} b ${`n${z}`}` + obj.prop")
	names = referenced_names(module.items)
	assert {"x", "y", "z", "obj"} <= names
	assert "prop" not in names


def test_component_tags_are_references() -> None:
	module = parse_module("const v = <Child label={title} />")
	assert {"Child", "title"} <= referenced_names(module.items)


def test_called_names() -> None:
	module = parse_module("count() + props.x() + label() + `${total()}`")
	assert called_names(module.items) == {"count", "label", "total"}


def test_template_holes() -> None:
	assert template_holes("`a ${b} c ${d ? '}' : e}`") == ["b", "d ? '}' : e"]
	assert template_holes("`plain`") == []
