# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import math

import pytest

from barefoot.runtime import reactive as r


def test_signal_get_set_and_updater() -> None:
	rt = r.ReactiveRuntime()
	count, set_count = rt.create_signal(0)
	assert count() == 0
	set_count(5)
	assert count() == 5
	set_count(lambda n: n + 1)
	assert count() == 6


def test_identity_equal_write_triggers_no_run() -> None:
	rt = r.ReactiveRuntime()
	items = [1, 2]
	get, set_ = rt.create_signal(items)
	seen: list[object] = []
	rt.create_effect(lambda: seen.append(get()))
	assert len(seen) == 1
	set_(items)
	assert len(seen) == 1
	# Equal but distinct list: identity differs, so the effect re-runs.
	set_([1, 2])
	assert len(seen) == 2


def test_scalar_write_compares_by_value() -> None:
	rt = r.ReactiveRuntime()
	name, set_name = rt.create_signal("x")
	runs: list[str] = []
	rt.create_effect(lambda: runs.append(name()))
	set_name("".join(["x"]))
	assert runs == ["x"]
	assert r.same_value(math.nan, float("nan"))
	assert not r.same_value(1, True)


def test_differing_write_runs_each_subscriber_once_before_returning() -> None:
	rt = r.ReactiveRuntime()
	count, set_count = rt.create_signal(0)
	a: list[int] = []
	b: list[int] = []
	rt.create_effect(lambda: a.append(count()))
	rt.create_effect(lambda: b.append(count() * 10))
	set_count(1)
	assert a == [0, 1]
	assert b == [0, 10]


def test_dependencies_rebuilt_on_every_run() -> None:
	rt = r.ReactiveRuntime()
	use_left, set_use_left = rt.create_signal(True)
	left, set_left = rt.create_signal("L")
	right, set_right = rt.create_signal("R")
	log: list[str] = []
	rt.create_effect(lambda: log.append(left() if use_left() else right()))
	set_use_left(False)
	assert log == ["L", "R"]
	# `left` is no longer read, so writing it must not re-run the effect.
	set_left("L2")
	assert log == ["L", "R"]
	set_right("R2")
	assert log == ["L", "R", "R2"]


def test_nested_create_effect_raises() -> None:
	rt = r.ReactiveRuntime()

	def outer() -> None:
		rt.create_effect(lambda: None)

	with pytest.raises(r.NestedEffectError):
		rt.create_effect(outer)
	assert rt.current is None


def test_cycle_detected_after_exactly_max_runs_and_counter_recovers() -> None:
	rt = r.ReactiveRuntime()
	value, set_value = rt.create_signal(0)
	runs = []

	def cyclic() -> None:
		runs.append(1)
		set_value(value() + 1)

	with pytest.raises(r.EffectCycleError):
		rt.create_effect(cyclic)
	assert len(runs) == r.MAX_EFFECT_RUNS
	assert rt.pending_runs == 0
	assert rt.current is None

	other, set_other = rt.create_signal(0)
	seen: list[int] = []
	rt.create_effect(lambda: seen.append(other()))
	for i in range(1, 150):
		set_other(i)
	assert seen[-1] == 149


def test_cleanup_runs_before_rerun_and_chains() -> None:
	rt = r.ReactiveRuntime()
	count, set_count = rt.create_signal(0)
	log: list[str] = []

	def body() -> None:
		n = count()
		log.append(f"run {n}")
		rt.on_cleanup(lambda: log.append(f"first {n}"))
		rt.on_cleanup(lambda: log.append(f"second {n}"))

	rt.create_effect(body)
	set_count(1)
	assert log == ["run 0", "first 0", "second 0", "run 1"]


def test_returned_callable_becomes_cleanup() -> None:
	rt = r.ReactiveRuntime()
	count, set_count = rt.create_signal(0)
	log: list[str] = []

	def body():
		n = count()
		return lambda: log.append(f"cleanup {n}")

	rt.create_effect(body)
	set_count(3)
	assert log == ["cleanup 0"]


def test_cleanup_restores_current_effect_on_exception() -> None:
	rt = r.ReactiveRuntime()

	def boom() -> None:
		raise ValueError("boom")

	with pytest.raises(ValueError):
		rt.create_effect(boom)
	assert rt.current is None
	assert rt.pending_runs == 0


def test_memo_tracks_source() -> None:
	rt = r.ReactiveRuntime()
	count, set_count = rt.create_signal(2)
	doubled = rt.create_memo(lambda: count() * 2)
	seen: list[int] = []
	rt.create_effect(lambda: seen.append(doubled()))
	set_count(5)
	assert doubled() == 10
	assert seen == [4, 10]


def test_on_mount_and_untrack_do_not_subscribe() -> None:
	rt = r.ReactiveRuntime()
	count, set_count = rt.create_signal(0)
	log: list[int] = []
	rt.on_mount(lambda: log.append(count()))
	rt.create_effect(lambda: log.append(rt.untrack(count)))
	set_count(1)
	assert log == [0, 0]


def test_module_level_helpers_use_default_runtime() -> None:
	count, set_count = r.create_signal(1)
	seen: list[int] = []
	r.create_effect(lambda: seen.append(count()))
	set_count(2)
	assert seen == [1, 2]
	assert r.default_runtime.current is None
