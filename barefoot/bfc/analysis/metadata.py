# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Component metadata produced by the analyzer.

Everything here is read-only after analysis: the IR builder and code
generators only consume it. Source-carrying fields hold verbatim text sliced
from the input file; `items` fields hold the parsed item lists for code that
needs to scan names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..core.span import Span
from ..parser.ast import Item, JsxNode, source_text


@dataclass(frozen=True)
class SignalDecl:
	getter: str
	setter: Optional[str]
	initial: str
	type_arg: Optional[str] = None
	order: int = 0
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class MemoDecl:
	name: str
	computation: str
	type_arg: Optional[str] = None
	order: int = 0
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class EffectDecl:
	"""`createEffect(fn)` or `onMount(fn)`; `body` is the source of `fn`."""

	body: str
	items: Tuple[Item, ...] = ()
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class PropDecl:
	name: str
	type: Optional[str] = None
	optional: bool = False
	default: Optional[str] = None


@dataclass(frozen=True)
class ImportSpec:
	name: str
	alias: Optional[str] = None
	type_only: bool = False

	@property
	def local(self) -> str:
		return self.alias or self.name


@dataclass(frozen=True)
class ImportDecl:
	source: str
	specifiers: Tuple[ImportSpec, ...] = ()
	default: Optional[str] = None
	namespace: Optional[str] = None
	type_only: bool = False
	text: str = ""

	@property
	def local_names(self) -> List[str]:
		names = [s.local for s in self.specifiers if not s.type_only]
		if self.default:
			names.append(self.default)
		if self.namespace:
			names.append(self.namespace)
		return [] if self.type_only else names


@dataclass(frozen=True)
class TypeDef:
	name: str
	text: str
	# `name?: type` members when the definition is an object shape.
	members: Tuple[PropDecl, ...] = ()


@dataclass(frozen=True)
class Helper:
	"""
	A module-level or component-local declaration kept verbatim.

	`names` are the bindings it declares (empty for a bare statement);
	`references` the identifiers its source mentions.
	"""

	names: Tuple[str, ...]
	text: str
	references: frozenset = frozenset()
	order: int = 0
	is_function: bool = False


@dataclass(frozen=True)
class GuardedRoot:
	"""`if (condition) return <markup>` ahead of the main return."""

	condition: str
	condition_items: Tuple[Item, ...]
	markup: JsxNode


@dataclass(frozen=True)
class ComponentMetadata:
	name: str
	root: JsxNode
	signals: Tuple[SignalDecl, ...] = ()
	memos: Tuple[MemoDecl, ...] = ()
	effects: Tuple[EffectDecl, ...] = ()
	on_mounts: Tuple[EffectDecl, ...] = ()
	props: Tuple[PropDecl, ...] = ()
	rest_props: Optional[str] = None
	# `props` when the component takes a props object instead of destructuring.
	props_object: Optional[str] = None
	props_type: Optional[str] = None
	imports: Tuple[ImportDecl, ...] = ()
	type_defs: Tuple[TypeDef, ...] = ()
	module_helpers: Tuple[Helper, ...] = ()
	local_helpers: Tuple[Helper, ...] = ()
	child_components: Tuple[str, ...] = ()
	guarded_roots: Tuple[GuardedRoot, ...] = ()
	use_client: bool = False
	is_default_export: bool = False
	is_exported: bool = False
	span: Span = field(default_factory=Span)
	path: Optional[str] = None
	# Full file text; expression sources are sliced from it through spans.
	source: str = field(default="", repr=False)

	@property
	def signal_getters(self) -> set[str]:
		return {s.getter for s in self.signals}

	@property
	def signal_setters(self) -> set[str]:
		return {s.setter for s in self.signals if s.setter}

	@property
	def memo_names(self) -> set[str]:
		return {m.name for m in self.memos}

	@property
	def prop_names(self) -> set[str]:
		return {p.name for p in self.props}

	@property
	def reactive_names(self) -> set[str]:
		"""Names whose call `name()` reads a signal directly."""
		return self.signal_getters | self.memo_names

	@property
	def is_stateful(self) -> bool:
		return bool(self.signals or self.memos or self.effects or self.on_mounts)

	def text(self, items: Sequence[Item]) -> str:
		return source_text(self.source, list(items))

	def bindings(self) -> set[str]:
		"""Every name visible in the component body (for key validation)."""
		names = self.signal_getters | self.signal_setters | self.memo_names | self.prop_names
		for helper in self.module_helpers + self.local_helpers:
			names.update(helper.names)
		for imp in self.imports:
			names.update(imp.local_names)
		if self.rest_props:
			names.add(self.rest_props)
		if self.props_object:
			names.add(self.props_object)
		return names


__all__ = [
	"ComponentMetadata",
	"EffectDecl",
	"GuardedRoot",
	"Helper",
	"ImportDecl",
	"ImportSpec",
	"MemoDecl",
	"PropDecl",
	"SignalDecl",
	"TypeDef",
]
