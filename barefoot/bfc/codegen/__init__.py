"""
barefoot.bfc.codegen: template backends and the client hydration script.

Modules:
  - emitter: TemplateEmitter base, marker_attrs (shared marker rules)
  - hono: Hono TSX server template
  - jinja: Jinja2 macro template
  - jsexpr: JS expression → Jinja expression translation (Pratt parser)
  - liveness: which helpers the client script needs
  - strip_types: TypeScript annotation removal for client code
  - client_js: hydration script (`init{Name}`)
"""

from .client_js import generate_client
from .emitter import TemplateEmitter, marker_attrs
from .hono import generate_hono
from .jinja import generate_jinja
from .jsexpr import UnsupportedExpression, translate_source
from .liveness import live_code
from .strip_types import strip_types

__all__ = [
	"TemplateEmitter",
	"UnsupportedExpression",
	"generate_client",
	"generate_hono",
	"generate_jinja",
	"live_code",
	"marker_attrs",
	"strip_types",
	"translate_source",
]
