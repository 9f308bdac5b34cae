"""
barefoot.bfc.core: shared location and diagnostic types used across stages.

Modules:
  - span: source spans (file/line/column)
  - diagnostics: CompilerError, error code table, code frames
"""

__all__ = [
	"diagnostics",
	"span",
]
