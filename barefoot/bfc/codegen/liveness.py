# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Which helpers and locals the client script needs.

Pipeline placement:
  ComponentMetadata + ComponentIR → live_code → client_js

The server template re-emits every helper; the client script only carries
the declarations reachable from code that runs in the browser: event
handlers, reactive expressions and attributes, refs, memo computations,
signal initialisers, effects, client-rendered loop and conditional
templates, and props handed to child components. Reachability is
transitive over the names each helper references.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set

from barefoot.logging import get_logger

from ..analysis.metadata import ComponentMetadata, Helper
from ..ir.nodes import (
	ComponentIR,
	IRComponent,
	IRConditional,
	IRElement,
	IRExpression,
	IRFragment,
	IRLoop,
	IRNode,
	walk,
)
from ..parser import parse_items
from ..parser.items import referenced_names

logger = get_logger("bfc.codegen")


@dataclass
class LiveCode:
	module_helpers: List[Helper] = field(default_factory=list)
	local_helpers: List[Helper] = field(default_factory=list)
	names: Set[str] = field(default_factory=set)


def _text_names(text: str) -> Set[str]:
	return referenced_names(parse_items(text)) if text.strip() else set()


def _subtree_names(node: Optional[IRNode]) -> Set[str]:
	"""Every name a client-rendered subtree mentions."""
	names: Set[str] = set()
	for sub in walk(node):
		if isinstance(sub, IRExpression):
			names |= referenced_names(sub.items)
		elif isinstance(sub, IRElement):
			for attr in sub.attrs:
				names |= referenced_names(attr.items)
			for event in sub.events:
				names |= referenced_names(event.items)
			names |= referenced_names(sub.key_items)
		elif isinstance(sub, IRConditional):
			names |= referenced_names(sub.cond_items)
		elif isinstance(sub, IRLoop):
			names |= referenced_names(sub.array_items) | referenced_names(sub.key_items)
		elif isinstance(sub, IRComponent):
			for prop in sub.props:
				names |= referenced_names(prop.items)
	return names


def client_names(node: Optional[IRNode]) -> Set[str]:
	"""Names referenced by the parts of `node` that run in the browser."""
	names: Set[str] = set()
	if node is None:
		return names
	if isinstance(node, IRExpression):
		if node.reactive:
			names |= referenced_names(node.items)
	elif isinstance(node, IRElement):
		for attr in node.attrs:
			if attr.reactive:
				names |= referenced_names(attr.items)
		for event in node.events:
			names |= referenced_names(event.items)
		if node.ref is not None:
			names |= referenced_names(node.ref_items)
		for child in node.children:
			names |= client_names(child)
	elif isinstance(node, IRConditional):
		if node.reactive:
			names |= referenced_names(node.cond_items)
			names |= _subtree_names(node.when_true) | _subtree_names(node.when_false)
		else:
			names |= client_names(node.when_true) | client_names(node.when_false)
	elif isinstance(node, IRLoop):
		if node.needs_client:
			names |= referenced_names(node.array_items) | _subtree_names(node.body)
	elif isinstance(node, IRComponent):
		for prop in node.props:
			names |= referenced_names(prop.items)
		for child in node.children:
			names |= client_names(child)
	elif isinstance(node, IRFragment):
		for child in node.children:
			names |= client_names(child)
	return names


def live_code(meta: ComponentMetadata, ir: ComponentIR) -> LiveCode:
	names: Set[str] = set()
	for root in ir.roots():
		names |= client_names(root)
	for guard in ir.guarded:
		names |= referenced_names(guard.cond_items)
	for memo in meta.memos:
		names |= _text_names(memo.computation)
	for signal in meta.signals:
		names |= _text_names(signal.initial)
	for effect in meta.effects + meta.on_mounts:
		names |= referenced_names(effect.items)

	state = meta.signal_getters | meta.signal_setters | meta.memo_names
	included: Set[int] = set()
	helpers = list(meta.module_helpers) + list(meta.local_helpers)
	changed = True
	while changed:
		changed = False
		for idx, helper in enumerate(helpers):
			if idx in included:
				continue
			if helper.names:
				wanted = bool(set(helper.names) & names)
			else:
				# Bare statements run for their side effects on live state.
				wanted = bool(helper.references & (names | state))
			if wanted:
				included.add(idx)
				names |= helper.references
				changed = True

	n_module = len(meta.module_helpers)
	live = LiveCode(
		module_helpers=[h for i, h in enumerate(helpers[:n_module]) if i in included],
		local_helpers=[h for i, h in enumerate(helpers[n_module:], n_module) if i in included],
		names=names,
	)
	logger.debug(
		"live code %s: %d module helpers, %d locals",
		meta.name,
		len(live.module_helpers),
		len(live.local_helpers),
	)
	return live


__all__ = ["LiveCode", "client_names", "live_code"]
