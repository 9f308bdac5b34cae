"""
barefoot.bfc.analysis: component recognition and metadata extraction.

Modules:
  - metadata: ComponentMetadata and its declaration records
  - analyzer: analyze(), list_exported_components(), SemanticError
"""

from .analyzer import AnalysisResult, SemanticError, analyze, list_exported_components
from .metadata import ComponentMetadata

__all__ = [
	"AnalysisResult",
	"ComponentMetadata",
	"SemanticError",
	"analyze",
	"list_exported_components",
]
