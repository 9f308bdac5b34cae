# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from barefoot.bfc.codegen import strip_types


def test_parameter_and_return_annotations() -> None:
	assert strip_types("function double(n: number): number { return n * 2 }") == "function double(n) { return n * 2 }"
	assert strip_types("(e: MouseEvent) => handle(e)") == "(e) => handle(e)"
	assert strip_types("(a: number, b?: string): string => `${a}${b}`") == "(a, b) => `${a}${b}`"


def test_generic_types_with_commas_stay_inside_one_annotation() -> None:
	src = "(m: Map<string, number>, k: string) => m.get(k)"
	assert strip_types(src) == "(m, k) => m.get(k)"


def test_casts_and_non_null_assertions() -> None:
	assert strip_types("const el = ref as HTMLInputElement") == "const el = ref"
	assert strip_types("const xs = [1, 2] as const") == "const xs = [1, 2]"
	assert strip_types("input!.focus()") == "input.focus()"


def test_generic_call_arguments() -> None:
	assert strip_types("createSignal<number>(0)") == "createSignal(0)"
	assert strip_types("createSignal<Array<Item>>([])") == "createSignal([])"


def test_declaration_annotations() -> None:
	assert strip_types("const total: number = 5") == "const total = 5"
	assert strip_types("let input: HTMLInputElement | null") == "let input"


def test_plain_javascript_is_unchanged() -> None:
	src = "const ok = a < b && c > d\nconst f = (x) => !x"
	assert strip_types(src) == src


def test_unparseable_code_is_returned_as_is() -> None:
	src = "const = = ("
	assert strip_types(src) == src
