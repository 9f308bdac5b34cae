# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
barefoot component compiler (`bfc`).

Pipeline placement:
  source (TSX) → parser → analysis (ComponentMetadata) → ir (IR + side tables)
  → codegen (template via a backend emitter, hydration script)

The programmatic entry point is `barefoot.bfc.compiler.compile`; the CLI is
`barefoot.bfc.bfc:main` (also `python -m barefoot.bfc`).
"""

from .compiler import CompileOptions, CompileResult, FileOutput, compile

__all__ = ["CompileOptions", "CompileResult", "FileOutput", "compile"]
