# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reactive runtime: the primitives generated hydration scripts call into.

The module-level functions operate on a shared default `ReactiveRuntime`;
tests and embedders that want isolation construct their own runtime.
"""

from .reactive import (
	MAX_EFFECT_RUNS,
	EffectCycleError,
	NestedEffectError,
	ReactiveRuntime,
	create_effect,
	create_memo,
	create_signal,
	default_runtime,
	on_cleanup,
	on_mount,
	untrack,
)

__all__ = [
	"MAX_EFFECT_RUNS",
	"EffectCycleError",
	"NestedEffectError",
	"ReactiveRuntime",
	"create_effect",
	"create_memo",
	"create_signal",
	"default_runtime",
	"on_cleanup",
	"on_mount",
	"untrack",
]
