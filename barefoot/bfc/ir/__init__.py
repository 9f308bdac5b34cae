"""
barefoot.bfc.ir: backend-agnostic markup IR and its builder.

Modules:
  - nodes: IR node dataclasses, ComponentIR, walk/render_literal/to_json
  - builder: build_ir() (slot, event and attribute-binding tables)
"""

from .builder import IRBuilder, build_ir
from .nodes import ComponentIR, component_to_json

__all__ = ["ComponentIR", "IRBuilder", "build_ir", "component_to_json"]
