# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from barefoot.bfc.codegen.jsexpr import UnsupportedExpression, jinja_string, translate_source


def _t(source: str, *getters: str) -> str:
	return translate_source(source, getters)


def test_getter_calls_become_names() -> None:
	assert _t("count()", "count") == "count"
	assert _t("count() + 1", "count") == "(count + 1)"
	assert _t("items().length", "items") == "(items or [])|length"


def test_string_concatenation_uses_tilde() -> None:
	assert _t("'Hi ' + name") == "('Hi ' ~ name)"
	assert _t("`n=${count()}`", "count") == "('n=' ~ count)"
	assert _t("a + b") == "(a + b)"


def test_logical_and_comparison_operators() -> None:
	assert _t("a === 1") == "(a == 1)"
	assert _t("a !== b") == "(a != b)"
	assert _t("a && b || c") == "((a and b) or c)"
	assert _t("!done") == "not done"
	assert _t("label ?? 'none'") == "(label if label is not none else 'none')"


def test_conditional_operator() -> None:
	assert _t("open() ? 'yes' : 'no'", "open") == "('yes' if open else 'no')"
	assert _t("a ? 1 : b ? 2 : 3") == "(1 if a else (2 if b else 3))"


def test_literals() -> None:
	assert _t("null") == "none"
	assert _t("undefined") == "none"
	assert _t("true") == "true"
	assert _t("[1, 2]") == "[1, 2]"
	assert _t("{ a: 1, 'b-c': x, d }") == "{'a': 1, 'b-c': x, 'd': d}"
	assert _t('"it\'s"') == "'it\\'s'"


def test_known_methods() -> None:
	assert _t("user.name.toUpperCase()") == "user['name']|upper"
	assert _t("tags.includes('a')") == "('a' in tags)"
	assert _t("tags.join(', ')") == "tags|join(', ')"
	assert _t("price.toFixed(2)") == "'%.2f'|format(price)"
	assert _t("Math.round(x)") == "x|round|int"
	assert _t("String(n)") == "n|string"
	assert _t("JSON.stringify(data)") == "data|tojson"
	assert _t("name.slice(1)") == "name[1:]"


def test_member_and_index_access() -> None:
	assert _t("user.address.city") == "user['address']['city']"
	assert _t("rows[0].id") == "rows[0]['id']"
	assert _t("props.items") == "props['items']"


@pytest.mark.parametrize(
	"source",
	[
		"items.map((x) => x)",
		"format(count())",
		"x => x + 1",
		"{ ...rest }",
		"name.split(',')",
	],
)
def test_untranslatable_expressions_raise(source: str) -> None:
	with pytest.raises(UnsupportedExpression):
		_t(source, "count")


def test_jinja_string_quoting() -> None:
	assert jinja_string("a'b\n") == "'a\\'b\\n'"
