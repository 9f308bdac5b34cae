# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
DOM-side runtime: node model, keyed list reconciliation and hydration.

Modules:
  - nodes: Element/Text/Comment/Document plus compound selectors
  - html: markup parsing into the node model
  - reconcile: keyed list diff (`reconcile_list`)
  - hydrate: scope lookup, bootstrap, conditional swaps, delegated events
"""

from .html import parse_document, parse_fragment
from .hydrate import (
	ComponentRegistry,
	cond,
	delegate,
	find,
	find_scope,
	hydrate,
	init_child,
	read_props,
	register_component,
	swap_conditional,
)
from .nodes import Comment, Document, Element, Event, Text
from .reconcile import reconcile_list

__all__ = [
	"Comment",
	"ComponentRegistry",
	"Document",
	"Element",
	"Event",
	"Text",
	"cond",
	"delegate",
	"find",
	"find_scope",
	"hydrate",
	"init_child",
	"parse_document",
	"parse_fragment",
	"read_props",
	"reconcile_list",
	"register_component",
	"swap_conditional",
]
