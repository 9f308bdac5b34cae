# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typing import Callable, Dict

import jinja2
import pytest

from barefoot.bfc import CompileOptions, compile


@pytest.fixture
def compile_tsx() -> Callable[..., object]:
	"""Compile `source` and fail loudly on any error diagnostic."""

	def _compile(source: str, path: str = "Component.tsx", **options):
		result = compile(source, path, CompileOptions(**options))
		assert result.ok, [e.message for e in result.errors if e.is_error]
		return result

	return _compile


@pytest.fixture
def render_jinja() -> Callable[[Dict[str, str], str], str]:
	"""Render `page` against the given templates with HTML autoescaping on."""

	def _render(templates: Dict[str, str], page: str) -> str:
		env = jinja2.Environment(loader=jinja2.DictLoader(templates), autoescape=True)
		return env.from_string(page).render().strip()

	return _render
