# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Component analysis: parsed module → `ComponentMetadata` + diagnostics.

Pipeline placement:
  parser (Module) → analyze → ir builder

The analyzer recognises declarations by shape on the flat item lists the
parser produces: `const [a, setA] = createSignal(...)`, `createMemo`,
`createEffect`, `onMount`, props destructuring, guarded early returns. Any
other statement is kept verbatim as a helper; whether a helper reaches the
hydration script is decided later by the liveness filter.

Problems are collected as `CompilerError`s. Only `ParseError`/`SemanticError`
(ValueError subclasses carrying `loc`) and lark's `UnexpectedInput` are
raised internally, and `analyze` converts them at its boundary.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from lark.exceptions import UnexpectedInput

from barefoot.logging import get_logger

from ..core.diagnostics import CompilerError, ErrorCode, make_error, make_warning
from ..core.span import Span
from ..parser import ParseError, parse_module
from ..parser.ast import (
	Group,
	Item,
	JsxAttr,
	JsxElement,
	JsxExpr,
	JsxFragment,
	JsxNode,
	Module,
	Tok,
)
from ..parser.items import (
	at,
	called_names,
	find_op,
	is_group,
	is_kw,
	is_name,
	is_op,
	referenced_names,
	split_statements,
	split_top,
	strip_string,
	unwrap_parens,
)
from .metadata import (
	ComponentMetadata,
	EffectDecl,
	GuardedRoot,
	Helper,
	ImportDecl,
	ImportSpec,
	MemoDecl,
	PropDecl,
	SignalDecl,
	TypeDef,
)

logger = get_logger("bfc.analysis")

PHASE = "analysis"
_IGNORE_DESTRUCTURING = re.compile(r"//\s*@bf-ignore\s+props-destructuring\b")
_EVENT_ATTR = re.compile(r"^on[A-Z]")
_DIRECTIVES = ("'use client'", '"use client"')
_DECL_WORDS = ("const", "let", "var")


class SemanticError(ValueError):
	"""Component-shape error raised during analysis; carries `loc` and a code."""

	def __init__(self, message: str, *, loc: Optional[Span] = None, code: str = ErrorCode.INVALID_JSX_EXPRESSION) -> None:
		super().__init__(message)
		self.loc = loc
		self.code = code


@dataclass
class AnalysisResult:
	metadata: Optional[ComponentMetadata]
	diagnostics: List[CompilerError] = field(default_factory=list)
	# All component names in source order, and the exported subset.
	components: List[str] = field(default_factory=list)
	exported: List[str] = field(default_factory=list)


@dataclass
class _ComponentDecl:
	name: str
	params: List[Item]
	body: List[Item]
	# True when `body` is a `{...}` statement block, False for an arrow
	# expression body.
	block: bool
	exported: bool
	default: bool
	order: int
	span: Span


@dataclass
class _ModuleInfo:
	module: Module
	use_client: bool = False
	imports: List[ImportDecl] = field(default_factory=list)
	type_defs: List[TypeDef] = field(default_factory=list)
	helpers: List[Helper] = field(default_factory=list)
	components: List[_ComponentDecl] = field(default_factory=list)
	default_name: Optional[str] = None
	diagnostics: List[CompilerError] = field(default_factory=list)


def parse_error_diagnostic(err: Exception, path: Optional[str]) -> CompilerError:
	"""Convert a lark `UnexpectedInput` or a ValueError with `loc` to BF020."""
	if isinstance(err, UnexpectedInput):
		token = getattr(err, "token", None)
		span = Span(
			file=path,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			end_line=getattr(token, "end_line", None),
			end_column=getattr(token, "end_column", None),
		)
		message = str(err).strip().split("\n")[0]
		return make_error(ErrorCode.INVALID_JSX_EXPRESSION, _with_end(span), f"Syntax error: {message}", phase="parser")
	loc = getattr(err, "loc", None)
	code = getattr(err, "code", ErrorCode.INVALID_JSX_EXPRESSION)
	return make_error(code, _with_end(Span.from_loc(loc, path)), str(err), phase="parser")


def _with_end(span: Span) -> Span:
	"""A point location ends where it starts."""
	if span.line is None or (span.end_line is not None and span.end_column is not None):
		return span
	return replace(span, end_line=span.line, end_column=span.column)


def analyze(source: str, path: Optional[str] = None, component: Optional[str] = None) -> AnalysisResult:
	"""
	Analyze one source file and return metadata for one component.

	`component` selects by name; by default the default export wins, then the
	first exported component, then the first component in the file.
	"""
	try:
		module = parse_module(source, path)
		info = _scan_module(module)
	except (UnexpectedInput, ParseError, SemanticError) as err:
		return AnalysisResult(None, [parse_error_diagnostic(err, path)])

	names = [c.name for c in info.components]
	exported = [c.name for c in info.components if c.exported or c.default or c.name == info.default_name]
	result = AnalysisResult(None, list(info.diagnostics), names, exported)

	decl = _select(info, component)
	if decl is None:
		if component is not None:
			message = f"Component '{component}' not found"
		else:
			message = "No component found in file"
		result.diagnostics.append(make_error(ErrorCode.COMPONENT_NOT_FOUND, Span(file=path), message, phase=PHASE))
		return result
	try:
		result.metadata = _ComponentAnalyzer(info, decl, result.diagnostics).run()
	except (ParseError, SemanticError) as err:
		result.diagnostics.append(parse_error_diagnostic(err, path))
	return result


def list_exported_components(source: str, path: Optional[str] = None) -> List[str]:
	"""Exported component names in source order (the default export included)."""
	module = parse_module(source, path)
	info = _scan_module(module)
	return [c.name for c in info.components if c.exported or c.default or c.name == info.default_name]


def _select(info: _ModuleInfo, requested: Optional[str]) -> Optional[_ComponentDecl]:
	if requested is not None:
		for decl in info.components:
			if decl.name == requested:
				return decl
		return None
	for decl in info.components:
		if decl.default or decl.name == info.default_name:
			return decl
	for decl in info.components:
		if decl.exported:
			return decl
	return info.components[0] if info.components else None


# --- module level ---


def _span_of(items: Sequence[Item]) -> Span:
	return items[0].span.join(items[-1].span)


def _strip_modifiers(stmt: List[Item]) -> Tuple[List[Item], bool, bool]:
	"""Drop leading `export` / `default` / `declare`; report which were present."""
	exported = default = False
	idx = 0
	while idx < len(stmt):
		item = stmt[idx]
		if is_name(item, "export"):
			exported = True
		elif isinstance(item, Tok) and item.text == "default" and exported:
			default = True
		elif is_name(item, "declare"):
			pass
		else:
			break
		idx += 1
	return stmt[idx:], exported, default


def _scan_module(module: Module) -> _ModuleInfo:
	info = _ModuleInfo(module)
	for order, stmt in enumerate(split_statements(module.items)):
		if len(stmt) == 1 and isinstance(stmt[0], Tok) and stmt[0].text in _DIRECTIVES:
			info.use_client = True
			if order != 0:
				info.diagnostics.append(
					make_error(ErrorCode.INVALID_DIRECTIVE_POSITION, stmt[0].span, phase=PHASE)
				)
			continue
		if is_name(stmt[0], "import"):
			info.imports.append(_parse_import(module, stmt))
			continue
		body, exported, default = _strip_modifiers(stmt)
		if not body:
			continue
		if default and len(body) == 1 and is_name(body[0]):
			info.default_name = body[0].text  # type: ignore[attr-defined]
			continue
		typedef = _parse_type_def(module, stmt, body)
		if typedef is not None:
			info.type_defs.append(typedef)
			continue
		decl = _match_function(body)
		if decl is not None:
			name, params, fn_body, block = decl
			returns_markup = _returns_markup(fn_body, block)
			if name[:1].isupper() and returns_markup:
				info.components.append(
					_ComponentDecl(name, params, fn_body, block, exported, default, order, _span_of(stmt))
				)
				continue
			if returns_markup and exported:
				info.diagnostics.append(
					make_error(
						ErrorCode.INVALID_COMPONENT_NAME,
						_span_of(stmt),
						f"Component name '{name}' must start with an uppercase letter",
						phase=PHASE,
						suggestion=f"Rename to '{name[:1].upper()}{name[1:]}'",
					)
				)
				continue
		if "createSignal" in called_names(body):
			info.diagnostics.append(
				make_error(ErrorCode.SIGNAL_OUTSIDE_COMPONENT, _span_of(stmt), phase=PHASE)
			)
		info.helpers.append(_helper(module, body, order))
	logger.debug(
		"module scan: %d components, %d helpers, %d imports",
		len(info.components),
		len(info.helpers),
		len(info.imports),
	)
	return info


def _parse_import(module: Module, stmt: List[Item]) -> ImportDecl:
	text = module.text(stmt)
	last = stmt[-1]
	source = strip_string(last.text) if isinstance(last, Tok) and last.kind == "string" else ""
	idx = 1
	type_only = False
	if is_name(at(stmt, 1), "type") and not is_name(at(stmt, 2), "from") and not is_op(at(stmt, 2), ","):
		type_only = True
		idx = 2
	default = namespace = None
	specs: List[ImportSpec] = []
	while idx < len(stmt) and not is_name(stmt[idx], "from"):
		item = stmt[idx]
		if is_group(item, "{"):
			for part in split_top(item.items):  # type: ignore[attr-defined]
				spec_type = is_name(part[0], "type") and len(part) > 1
				if spec_type:
					part = part[1:]
				alias = part[2].text if len(part) == 3 and is_name(part[1], "as") else None  # type: ignore[attr-defined]
				specs.append(ImportSpec(part[0].text, alias, spec_type))  # type: ignore[attr-defined]
		elif is_op(item, "*") and is_name(at(stmt, idx + 1), "as"):
			namespace = stmt[idx + 2].text  # type: ignore[attr-defined]
			idx += 2
		elif is_name(item):
			default = item.text  # type: ignore[attr-defined]
		idx += 1
	return ImportDecl(source, tuple(specs), default, namespace, type_only, text)


def _parse_type_def(module: Module, stmt: List[Item], body: List[Item]) -> Optional[TypeDef]:
	if is_name(body[0], "interface") and is_name(at(body, 1)) and is_group(body[-1], "{"):
		members = _type_members(module, body[-1].items)  # type: ignore[attr-defined]
		return TypeDef(body[1].text, module.text(stmt), members)  # type: ignore[attr-defined]
	if is_name(body[0], "type") and is_name(at(body, 1)) and find_op(body, "=") > 0:
		rhs = body[find_op(body, "=") + 1 :]
		members: Tuple[PropDecl, ...] = ()
		if len(rhs) == 1 and is_group(rhs[0], "{"):
			members = _type_members(module, rhs[0].items)  # type: ignore[attr-defined]
		return TypeDef(body[1].text, module.text(stmt), members)  # type: ignore[attr-defined]
	return None


def _type_members(module: Module, items: List[Item]) -> Tuple[PropDecl, ...]:
	"""`name?: type` members of an object type body (`;`, `,` or newline separated)."""
	parts: List[List[Item]] = []
	for stmt in split_statements(items):
		for part in split_top(stmt):
			starts_member = is_name(at(part, 0)) and (
				is_op(at(part, 1), ":") or (is_op(at(part, 1), "?") and is_op(at(part, 2), ":"))
			)
			if starts_member or not parts:
				parts.append(list(part))
			else:
				# Comma inside a generic argument list: `Map<string, number>`.
				parts[-1].extend(part)
	members: List[PropDecl] = []
	for part in parts:
		if not is_name(at(part, 0)):
			continue
		optional = is_op(at(part, 1), "?")
		colon = 2 if optional else 1
		type_text = module.text(part[colon + 1 :]) if is_op(at(part, colon), ":") else None
		members.append(PropDecl(part[0].text, type_text or None, optional))  # type: ignore[attr-defined]
	return tuple(members)


def _match_function(body: List[Item]) -> Optional[Tuple[str, List[Item], List[Item], bool]]:
	"""
	Recognise `function Name(params) {...}` and `const Name = (params) => ...`.

	Returns (name, params, body, block) with `params` the items inside the
	parameter list.
	"""
	items = body[1:] if is_name(at(body, 0), "async") else body
	if is_name(at(items, 0), "function") and is_name(at(items, 1)) and is_group(at(items, 2), "("):
		if is_group(items[-1], "{"):
			return items[1].text, items[2].items, items[-1].items, True  # type: ignore[attr-defined]
		return None
	if not (is_name(at(items, 0), *_DECL_WORDS) and is_name(at(items, 1))):
		return None
	eq = find_op(items, "=")
	if eq < 0:
		return None
	name = items[1].text  # type: ignore[attr-defined]
	rhs = items[eq + 1 :]
	if is_name(at(rhs, 0), "async"):
		rhs = rhs[1:]
	if is_name(at(rhs, 0), "function") and is_group(rhs[-1], "{"):
		group = next((i for i in rhs if is_group(i, "(")), None)
		return name, group.items if group else [], rhs[-1].items, True  # type: ignore[attr-defined,union-attr]
	arrow = find_op(rhs, "=>")
	if arrow < 0:
		return None
	head = rhs[:arrow]
	if is_group(at(head, 0), "("):
		params = head[0].items  # type: ignore[attr-defined]
	elif len(head) == 1 and is_name(head[0]):
		params = [head[0]]
	else:
		return None
	fn_body = rhs[arrow + 1 :]
	if len(fn_body) == 1 and is_group(fn_body[0], "{"):
		return name, params, fn_body[0].items, True  # type: ignore[attr-defined]
	return name, params, fn_body, False


def _markup(items: Sequence[Item]) -> Optional[JsxNode]:
	inner = unwrap_parens(list(items))
	if len(inner) == 1 and isinstance(inner[0], (JsxElement, JsxFragment)):
		return inner[0]
	return None


def _returns_markup(body: List[Item], block: bool) -> bool:
	if not block:
		return _markup(body) is not None
	for stmt in split_statements(body):
		if is_kw(stmt[0], "return") and _markup(stmt[1:]) is not None:
			return True
		if is_name(stmt[0], "if") and _guarded_return(stmt) is not None:
			return True
	return False


def _guarded_return(stmt: List[Item]) -> Optional[Tuple[List[Item], JsxNode]]:
	"""`if (cond) return <x/>` or `if (cond) { return <x/> }` without `else`."""
	if not (is_name(stmt[0], "if") and is_group(at(stmt, 1), "(")):
		return None
	rest = stmt[2:]
	if len(rest) == 1 and is_group(rest[0], "{"):
		inner = split_statements(rest[0].items)  # type: ignore[attr-defined]
		if len(inner) != 1:
			return None
		rest = inner[0]
	if rest and is_kw(rest[0], "return"):
		markup = _markup(rest[1:])
		if markup is not None:
			return stmt[1].items, markup  # type: ignore[attr-defined]
	return None


def pattern_names(items: Sequence[Item]) -> List[str]:
	"""Binding names of a declaration pattern (`a`, `[a, b]`, `{a, b: c, ...d}`)."""
	if len(items) == 1 and is_name(items[0]):
		return [items[0].text]  # type: ignore[attr-defined]
	if len(items) == 1 and isinstance(items[0], Group):
		names: List[str] = []
		for part in split_top(items[0].items):
			if is_op(at(part, 0), "..."):
				part = part[1:]
			eq = find_op(part, "=")
			if eq >= 0:
				part = part[:eq]
			colon = find_op(part, ":")
			if colon >= 0 and items[0].open == "{":
				part = part[colon + 1 :]
			names.extend(pattern_names(part))
		return names
	return []


def _declared_names(body: List[Item]) -> Tuple[Tuple[str, ...], bool]:
	items = body[1:] if is_name(at(body, 0), "async") else body
	if is_name(at(items, 0), "function", "class") and is_name(at(items, 1)):
		return (items[1].text,), items[0].text == "function"  # type: ignore[attr-defined]
	if is_name(at(items, 0), *_DECL_WORDS):
		names: List[str] = []
		for part in split_top(items[1:]):
			eq = find_op(part, "=")
			target = part[:eq] if eq >= 0 else part
			colon = find_op(target, ":")
			if colon >= 0:
				target = target[:colon]
			names.extend(pattern_names(target))
		rhs_arrow = find_op(items, "=>") >= 0 or any(is_name(i, "function") for i in items[2:])
		return tuple(names), rhs_arrow
	return (), False


def _helper(module: Module, body: List[Item], order: int) -> Helper:
	names, is_function = _declared_names(body)
	references = frozenset(referenced_names(body) - set(names))
	return Helper(names, module.text(body), references, order, is_function)


# --- component level ---


class _ComponentAnalyzer:
	def __init__(self, info: _ModuleInfo, decl: _ComponentDecl, diagnostics: List[CompilerError]) -> None:
		self.info = info
		self.module = info.module
		self.decl = decl
		self.diagnostics = diagnostics
		self.path = info.module.path
		self.signals: List[SignalDecl] = []
		self.memos: List[MemoDecl] = []
		self.effects: List[EffectDecl] = []
		self.on_mounts: List[EffectDecl] = []
		self.locals: List[Helper] = []
		self.guarded: List[GuardedRoot] = []
		self.root: Optional[JsxNode] = None

	def run(self) -> ComponentMetadata:
		decl = self.decl
		props, rest, props_object, props_type, destructured = self._props(decl.params)
		if decl.block:
			for order, stmt in enumerate(split_statements(decl.body)):
				self._statement(stmt, order)
		else:
			self.root = _markup(decl.body)
		if self.root is None:
			raise SemanticError(
				f"Component '{decl.name}' does not return markup",
				loc=decl.span,
				code=ErrorCode.INVALID_JSX_EXPRESSION,
			)

		markups = [self.root] + [g.markup for g in self.guarded]
		children: List[str] = []
		has_events = False
		for markup in markups:
			for el in _elements(markup):
				if el.tag[:1].isupper():
					if el.tag != decl.name and el.tag not in children:
						children.append(el.tag)
					continue
				for attr in el.attrs:
					if isinstance(attr, JsxAttr):
						if _EVENT_ATTR.match(attr.name):
							has_events = True
						elif attr.name == "className":
							self.diagnostics.append(
								make_warning(
									ErrorCode.CLASS_ATTRIBUTE,
									attr.span,
									phase=PHASE,
									suggestion="Replace 'className' with 'class'",
									replacement=self.module.slice(attr.span).replace("className", "class", 1),
								)
							)
			self._check_bare_getters(markup)

		stateful = bool(self.signals or self.memos or self.effects or self.on_mounts)
		if (stateful or has_events) and not self.info.use_client:
			self.diagnostics.append(
				make_error(
					ErrorCode.MISSING_USE_CLIENT,
					decl.span,
					phase=PHASE,
					suggestion="Add 'use client' at the top of the file",
					replacement="'use client'",
				)
			)
		if destructured and stateful and not _IGNORE_DESTRUCTURING.search(self.module.source):
			self.diagnostics.append(
				make_warning(
					ErrorCode.PROPS_DESTRUCTURING,
					_span_of(decl.params) if decl.params else decl.span,
					phase=PHASE,
					suggestion="Accept `props` and read `props.name`, or add `// @bf-ignore props-destructuring`",
				)
			)

		logger.debug(
			"component %s: %d signals, %d memos, %d effects, %d locals",
			decl.name,
			len(self.signals),
			len(self.memos),
			len(self.effects),
			len(self.locals),
		)
		return ComponentMetadata(
			name=decl.name,
			root=self.root,
			signals=tuple(self.signals),
			memos=tuple(self.memos),
			effects=tuple(self.effects),
			on_mounts=tuple(self.on_mounts),
			props=tuple(props),
			rest_props=rest,
			props_object=props_object,
			props_type=props_type,
			imports=tuple(self.info.imports),
			type_defs=tuple(self.info.type_defs),
			module_helpers=tuple(self.info.helpers),
			local_helpers=tuple(self.locals),
			child_components=tuple(children),
			guarded_roots=tuple(self.guarded),
			use_client=self.info.use_client,
			is_default_export=decl.default or decl.name == self.info.default_name,
			is_exported=decl.exported or decl.name == self.info.default_name,
			span=decl.span,
			path=self.path,
			source=self.module.source,
		)

	# props

	def _props(
		self, params: List[Item]
	) -> Tuple[List[PropDecl], Optional[str], Optional[str], Optional[str], bool]:
		parts = split_top(params)
		if not parts:
			return [], None, None, None, False
		first = parts[0]
		colon = find_op(first, ":")
		pattern = first[:colon] if colon >= 0 else first
		type_items = first[colon + 1 :] if colon >= 0 else []
		members = self._resolve_members(type_items)
		type_text = self.module.text(type_items) or None

		if len(pattern) == 1 and is_name(pattern[0]):
			props = [PropDecl(m.name, m.type, m.optional) for m in members]
			return props, None, pattern[0].text, type_text, False  # type: ignore[attr-defined]
		if not (len(pattern) == 1 and is_group(pattern[0], "{")):
			raise SemanticError("Unsupported props parameter", loc=_span_of(first))

		by_name = {m.name: m for m in members}
		props: List[PropDecl] = []
		rest: Optional[str] = None
		for part in split_top(pattern[0].items):  # type: ignore[attr-defined]
			if is_op(at(part, 0), "...") and is_name(at(part, 1)):
				rest = part[1].text  # type: ignore[attr-defined]
				continue
			if not is_name(at(part, 0)):
				continue
			name = part[0].text  # type: ignore[attr-defined]
			eq = find_op(part, "=")
			default = self.module.text(part[eq + 1 :]) if eq >= 0 else None
			member = by_name.get(name)
			props.append(
				PropDecl(
					name,
					member.type if member else None,
					(member.optional if member else False) or default is not None,
					default,
				)
			)
		return props, rest, None, type_text, True

	def _resolve_members(self, type_items: List[Item]) -> Tuple[PropDecl, ...]:
		if len(type_items) == 1 and is_group(type_items[0], "{"):
			return _type_members(self.module, type_items[0].items)  # type: ignore[attr-defined]
		names = {i.text for i in type_items if is_name(i)}  # type: ignore[attr-defined]
		members: List[PropDecl] = []
		for td in self.info.type_defs:
			if td.name in names:
				members.extend(td.members)
		return tuple(members)

	# statements

	def _statement(self, stmt: List[Item], order: int) -> None:
		head = stmt[0]
		if is_kw(head, "return"):
			if self.root is None:
				self.root = _markup(stmt[1:])
				if self.root is None:
					raise SemanticError(
						"Component must return markup",
						loc=_span_of(stmt),
						code=ErrorCode.INVALID_JSX_EXPRESSION,
					)
			return
		if is_name(head, "if") and self.root is None:
			guarded = _guarded_return(stmt)
			if guarded is not None:
				cond_items, markup = guarded
				self.guarded.append(GuardedRoot(self.module.text(cond_items), tuple(cond_items), markup))
				return
		if is_name(head, "createEffect", "onMount") and len(stmt) == 2 and is_group(stmt[1], "("):
			args = split_top(stmt[1].items)  # type: ignore[attr-defined]
			fn = args[0] if args else []
			target = self.effects if head.text == "createEffect" else self.on_mounts  # type: ignore[attr-defined]
			target.append(EffectDecl(self.module.text(fn), tuple(fn), _span_of(stmt)))
			return
		if is_name(head, *_DECL_WORDS) and self._reactive_declaration(stmt, order):
			return
		helper = _helper(self.module, stmt, order)
		self.locals.append(helper)

	def _reactive_declaration(self, stmt: List[Item], order: int) -> bool:
		eq = find_op(stmt, "=")
		if eq < 0:
			return False
		pattern = stmt[1:eq]
		colon = find_op(pattern, ":")
		if colon >= 0:
			pattern = pattern[:colon]
		rhs = stmt[eq + 1 :]
		if not (is_name(at(rhs, 0), "createSignal", "createMemo") and is_group(rhs[-1], "(")):
			return False
		type_arg = None
		if is_op(at(rhs, 1), "<") and len(rhs) > 3:
			type_arg = self.module.text(rhs[1:-1])[1:-1].strip() or None
		elif len(rhs) != 2:
			return False
		args = split_top(rhs[-1].items)  # type: ignore[attr-defined]
		first = self.module.text(args[0]) if args else "undefined"
		if rhs[0].text == "createSignal":  # type: ignore[attr-defined]
			names = pattern_names(pattern)
			if not names or not is_group(at(pattern, 0), "["):
				raise SemanticError(
					"createSignal result must be destructured as [getter, setter]",
					loc=_span_of(stmt),
					code=ErrorCode.INVALID_SIGNAL_USAGE,
				)
			setter = names[1] if len(names) > 1 else None
			self.signals.append(SignalDecl(names[0], setter, first, type_arg, order, _span_of(stmt)))
			return True
		if len(pattern) != 1 or not is_name(pattern[0]):
			raise SemanticError(
				"createMemo result must be bound to a name",
				loc=_span_of(stmt),
				code=ErrorCode.INVALID_SIGNAL_USAGE,
			)
		self.memos.append(MemoDecl(pattern[0].text, first, type_arg, order, _span_of(stmt)))  # type: ignore[attr-defined]
		return True

	def _check_bare_getters(self, markup: JsxNode) -> None:
		getters = {s.getter for s in self.signals} | {m.name for m in self.memos}
		for node in _walk_markup(markup):
			if not isinstance(node, JsxExpr):
				continue
			if len(node.items) == 1 and is_name(node.items[0]) and node.items[0].text in getters:  # type: ignore[attr-defined]
				name = node.items[0].text  # type: ignore[attr-defined]
				self.diagnostics.append(
					make_warning(
						ErrorCode.SIGNAL_GETTER_NOT_CALLED,
						node.span,
						f"Signal getter '{name}' used without calling it",
						phase=PHASE,
						suggestion=f"Call the getter: {{{name}()}}",
						replacement=f"{{{name}()}}",
					)
				)


def _walk_markup(node: JsxNode):
	"""Markup nodes and child expression containers, depth-first."""
	yield node
	for child in node.children:
		if isinstance(child, (JsxElement, JsxFragment)):
			yield from _walk_markup(child)
		else:
			yield child
			if isinstance(child, JsxExpr):
				for item in child.items:
					yield from _nested_markup(item)


def _nested_markup(item: Item):
	if isinstance(item, (JsxElement, JsxFragment)):
		yield from _walk_markup(item)
	elif isinstance(item, Group):
		for inner in item.items:
			yield from _nested_markup(inner)


def _elements(node: JsxNode) -> List[JsxElement]:
	out: List[JsxElement] = []
	for n in _walk_markup(node):
		if isinstance(n, JsxElement):
			out.append(n)
	return out


__all__ = [
	"AnalysisResult",
	"SemanticError",
	"analyze",
	"list_exported_components",
	"parse_error_diagnostic",
	"pattern_names",
]
