# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
barefoot package: component compiler plus the hydration runtime it targets.

Subpackages:
  bfc:     compiler (parser → analysis → IR → codegen); CLI is `barefoot.bfc.bfc:main`
  runtime: reactive primitives (signals, effects, memos)
  dom:     DOM model, keyed list reconciliation, scope lookup/hydration
"""

__all__ = ["bfc", "runtime", "dom"]
