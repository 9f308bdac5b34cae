"""
barefoot.bfc.parser: lark grammar and tree builder for component source.

Modules:
  - ast: parsed module (script items and structured markup)
  - parser: Lark setup, parse_module/parse_items, ParseError
  - items: helpers over item lists (splitting, name scanning)
"""

from .parser import ParseError, parse_items, parse_module

__all__ = ["ParseError", "parse_items", "parse_module"]
