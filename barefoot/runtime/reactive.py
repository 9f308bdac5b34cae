# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reactive primitives: signals, effects, memos and cleanup chaining.

Placement:
  generated hydration script → (this module) → barefoot.dom (reconcile/cond)

Model:
- A signal owns a value and the set of effects subscribed to it.
- An effect re-subscribes from scratch on every run: before the body runs,
  the previous cleanup is invoked and every subscription is dropped, so no
  stale dependency survives a re-run.
- Writes are synchronous: a setter returns only after every subscribed
  effect (and whatever those effects trigger) has finished.

The "currently running effect" is the top of an explicit stack owned by a
`ReactiveRuntime`. The module-level functions delegate to a shared default
runtime; isolated runtimes are plain instances.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple

from barefoot.logging import get_logger

logger = get_logger("runtime")

MAX_EFFECT_RUNS = 100

Getter = Callable[[], Any]
Setter = Callable[[Any], None]
Cleanup = Callable[[], None]

# Scalars compare by value (mirrors JS Object.is for primitives); everything
# else compares by identity.
_VALUE_TYPES = (str, int, float, bool, bytes, type(None))


class NestedEffectError(RuntimeError):
	"""Raised when create_effect is called while another effect is running."""


class EffectCycleError(RuntimeError):
	"""Raised when effect re-runs exceed the run ceiling (likely a write/read cycle)."""


def same_value(old: Any, new: Any) -> bool:
	"""Identity comparison with value semantics for immutable scalars (NaN equals NaN)."""
	if old is new:
		return True
	if type(old) is not type(new) or not isinstance(old, _VALUE_TYPES):
		return False
	if isinstance(old, float) and math.isnan(old) and math.isnan(new):
		return True
	return old == new


@dataclass(eq=False)
class Signal:
	"""Mutable cell plus its subscriber set."""

	value: Any
	subscribers: set["Effect"] = field(default_factory=set)


@dataclass(eq=False)
class Effect:
	"""A tracked function, its pending cleanup and the signals it currently reads."""

	fn: Callable[[], Any]
	cleanup: Optional[Cleanup] = None
	dependencies: set[Signal] = field(default_factory=set)
	runs: int = 0


class ReactiveRuntime:
	"""
	Owns the effect stack and the global re-run counter.

	The counter increments on every effect run and decrements when the run
	completes, so it measures the depth of the current synchronous trigger
	chain. Exceeding `max_runs` resets it and raises `EffectCycleError`.
	"""

	def __init__(self, max_runs: int = MAX_EFFECT_RUNS) -> None:
		self.max_runs = max_runs
		self._stack: list[Optional[Effect]] = []
		self._runs = 0

	@property
	def current(self) -> Optional[Effect]:
		return self._stack[-1] if self._stack else None

	@property
	def pending_runs(self) -> int:
		return self._runs

	# --- signals ---

	def create_signal(self, initial: Any) -> Tuple[Getter, Setter]:
		signal = Signal(value=initial)

		def get() -> Any:
			effect = self.current
			if effect is not None:
				signal.subscribers.add(effect)
				effect.dependencies.add(signal)
			return signal.value

		def set_(value_or_fn: Any) -> None:
			new_value = value_or_fn(signal.value) if callable(value_or_fn) else value_or_fn
			if same_value(signal.value, new_value):
				return
			signal.value = new_value
			# Re-running may add or drop subscriptions; iterate a snapshot.
			for effect in list(signal.subscribers):
				self._run(effect)

		return get, set_

	# --- effects ---

	def create_effect(self, fn: Callable[[], Any]) -> Effect:
		if self.current is not None:
			raise NestedEffectError("create_effect cannot be nested inside another effect")
		effect = Effect(fn=fn)
		self._run(effect)
		return effect

	def create_memo(self, fn: Callable[[], Any]) -> Getter:
		get, set_ = self.create_signal(None)
		# Updater form so a callable result is stored, not invoked.
		self.create_effect(lambda: set_(lambda _prev: fn()))
		return get

	def on_cleanup(self, fn: Cleanup) -> None:
		effect = self.current
		if effect is None:
			return
		previous = effect.cleanup

		def chained() -> None:
			if previous is not None:
				previous()
			fn()

		effect.cleanup = chained

	def on_mount(self, fn: Callable[[], Any]) -> None:
		"""Run `fn` once, without tracking any signal it reads."""
		self.untrack(fn)

	def untrack(self, fn: Callable[[], Any]) -> Any:
		self._stack.append(None)
		try:
			return fn()
		finally:
			self._stack.pop()

	def _run(self, effect: Effect) -> None:
		self._runs += 1
		if self._runs > self.max_runs:
			self._runs = 0
			logger.debug("effect run ceiling (%d) exceeded", self.max_runs)
			raise EffectCycleError(
				f"Effect exceeded maximum run limit ({self.max_runs}). Possible circular dependency."
			)
		try:
			if effect.cleanup is not None:
				cleanup, effect.cleanup = effect.cleanup, None
				cleanup()
			for signal in effect.dependencies:
				signal.subscribers.discard(effect)
			effect.dependencies.clear()

			self._stack.append(effect)
			try:
				effect.runs += 1
				result = effect.fn()
				if callable(result):
					effect.cleanup = result
			finally:
				self._stack.pop()
		finally:
			# Frames unwinding after an overflow reset must not drive the counter negative.
			if self._runs > 0:
				self._runs -= 1


default_runtime = ReactiveRuntime()


def create_signal(initial: Any) -> Tuple[Getter, Setter]:
	return default_runtime.create_signal(initial)


def create_effect(fn: Callable[[], Any]) -> Effect:
	return default_runtime.create_effect(fn)


def create_memo(fn: Callable[[], Any]) -> Getter:
	return default_runtime.create_memo(fn)


def on_cleanup(fn: Cleanup) -> None:
	default_runtime.on_cleanup(fn)


def on_mount(fn: Callable[[], Any]) -> None:
	default_runtime.on_mount(fn)


def untrack(fn: Callable[[], Any]) -> Any:
	return default_runtime.untrack(fn)


__all__ = [
	"MAX_EFFECT_RUNS",
	"Effect",
	"EffectCycleError",
	"NestedEffectError",
	"ReactiveRuntime",
	"Signal",
	"create_effect",
	"create_memo",
	"create_signal",
	"default_runtime",
	"on_cleanup",
	"on_mount",
	"same_value",
	"untrack",
]
