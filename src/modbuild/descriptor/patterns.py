"""Named pattern predicates for the well-known constructs of a module source.

Each predicate answers "does this text contain construct X" and, when it
does, returns the balanced block span of that construct so it can be
unit-tested against a fixture snippet without the rest of the extractor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator

from modbuild.scanning import PAIRS, Block, blank_nested, extract_block

__all__ = [
    "PatternMatch",
    "CallSite",
    "find_call",
    "find_factory_body",
    "find_module_constructor",
    "identity_options",
    "module_options",
    "bound_array",
    "iter_step_literals",
    "iter_field_literals",
    "handlers_object",
    "permissions_array",
    "find_data_provider_call",
]

_FACTORY_FUNCTION = re.compile(r"function\s+(\w*ModuleFactory)\s*(?:<[^>(]*>)?\s*\(")
_FACTORY_ARROW = re.compile(
    r"(?:const|let|var)\s+(\w*ModuleFactory)\s*(?::[^=]+)?=\s*(?:async\s*)?\([^)]*\)\s*(?::[^=>]+)?=>\s*\{"
)
_NEW_CALL = re.compile(r"new\s+(\w+)\s*(?:<[^>(]*>)?\s*\(")
_NEW_MODULE_CALL = re.compile(r"new\s+(\w+Module)\s*(?:<[^>(]*>)?\s*\(")
_STEP_LITERAL = re.compile(r"new\s+ConfigurationStep\s*\(")
_FIELD_LITERAL = re.compile(r"new\s+(\w+Field)\s*\(")
_HANDLERS_DECL = re.compile(r"(?:const|let|var)\s+handlers\s*(?::\s*[\w<>\[\]., |]+?\s*)?=\s*\{")
_SATISFIES_HANDLERS = re.compile(r"\s*satisfies\s+InterfaceHandlers\b")
_PERMISSIONS_METHOD = re.compile(r"getPermissions\s*\(\s*\)\s*(?::\s*[\w<>\[\]., |]+?\s*)?\{")
_RETURN_ARRAY = re.compile(r"return\s*\[")
_DATA_PROVIDER_CALL = re.compile(r"useDataProvider\s*(?:<[^>(]*(?:<[^>]*>[^>(]*)*>)?\s*\(")


@dataclass(frozen=True)
class PatternMatch:
    """Outcome of a pattern predicate.

    Attributes:
        name: Which construct was looked for.
        block: Balanced span of the construct, or None when it is absent.
        reason: Why the construct was not recovered, when a partial shape was seen.
    """

    name: str
    block: Block | None = None
    reason: str | None = None

    @property
    def matched(self) -> bool:
        return self.block is not None

    def __bool__(self) -> bool:
        return self.matched


@dataclass(frozen=True)
class CallSite:
    """A call expression with its top-level argument spans."""

    callee: str
    parens: Block
    args: tuple[tuple[int, int], ...] = field(default=())

    def arg_text(self, source: str, index: int) -> str | None:
        if index >= len(self.args):
            return None
        start, end = self.args[index]
        return source[start:end].strip()

    def arg_block(self, source: str, index: int, opener: str = "{") -> Block | None:
        """The literal passed as argument ``index`` when it opens with ``opener``."""
        if index >= len(self.args):
            return None
        start, end = self.args[index]
        i = start
        while i < end and source[i].isspace():
            i += 1
        if i >= end or source[i] != opener:
            return None
        return extract_block(source, i)


def _arg_spans(source: str, parens: Block) -> tuple[tuple[int, int], ...]:
    flat = blank_nested(parens.inner)
    spans: list[tuple[int, int]] = []
    depth = 0
    last = 0
    for i, ch in enumerate(flat):
        if ch in PAIRS:
            depth += 1
        elif ch in PAIRS.values() and depth > 0:
            depth -= 1
        elif ch == "," and depth == 0:
            spans.append((parens.inner_start + last, parens.inner_start + i))
            last = i + 1
    if parens.inner[last:].strip():
        spans.append((parens.inner_start + last, parens.inner_start + len(flat)))
    return tuple(spans)


def find_call(source: str, pattern: re.Pattern[str], pos: int = 0, endpos: int | None = None) -> CallSite | None:
    """Locate the first call matching ``pattern`` (which must end at the opening paren)."""
    m = pattern.search(source, pos, endpos if endpos is not None else len(source))
    if m is None:
        return None
    parens = extract_block(source, m.end() - 1)
    if parens is None:
        return None
    callee = m.group(1) if m.groups() else m.group(0)
    return CallSite(callee=callee, parens=parens, args=_arg_spans(source, parens))


def find_factory_body(source: str) -> PatternMatch:
    """Body of the module factory function (``function XModuleFactory(...) { ... }``)."""
    m = _FACTORY_FUNCTION.search(source)
    if m is not None:
        params = extract_block(source, m.end() - 1)
        if params is None:
            return PatternMatch("factory", reason="factory parameter list is unbalanced")
        brace = source.find("{", params.end)
        body = extract_block(source, brace) if brace != -1 else None
        if body is None:
            return PatternMatch("factory", reason="factory body is unbalanced")
        return PatternMatch("factory", block=body)

    m = _FACTORY_ARROW.search(source)
    if m is not None:
        body = extract_block(source, m.end() - 1)
        if body is None:
            return PatternMatch("factory", reason="factory body is unbalanced")
        return PatternMatch("factory", block=body)
    return PatternMatch("factory", reason="no module factory function found")


def find_module_constructor(source: str, pos: int = 0, endpos: int | None = None) -> CallSite | None:
    """First ``new XModule(...)`` call in the given range."""
    return find_call(source, _NEW_MODULE_CALL, pos, endpos)


def identity_options(source: str) -> PatternMatch:
    """The options object passed as second argument of the constructor inside the factory."""
    factory = find_factory_body(source)
    if factory.block is None:
        return PatternMatch("identity-options", reason=factory.reason)

    body = factory.block
    pos = body.inner_start
    while True:
        call = find_call(source, _NEW_CALL, pos, body.end)
        if call is None:
            return PatternMatch(
                "identity-options",
                reason="factory body has no constructor call with an options object",
            )
        options = call.arg_block(source, 1)
        if options is not None:
            return PatternMatch("identity-options", block=options)
        pos = call.parens.start + 1


def module_options(source: str) -> PatternMatch:
    """Options object of the first ``new XModule(context, {...}, ...)`` call anywhere."""
    call = find_module_constructor(source)
    if call is None:
        return PatternMatch("module-options", reason="no module constructor call found")
    options = call.arg_block(source, 1)
    if options is None:
        return PatternMatch("module-options", reason="module constructor has no options object")
    return PatternMatch("module-options", block=options)


def bound_array(source: str, var_name: str) -> PatternMatch:
    """Array literal bound to ``const|let|var <var_name> = [...]``."""
    decl = re.compile(r"(?:const|let|var)\s+" + re.escape(var_name) + r"\b[^=;]*=\s*\[")
    m = decl.search(source)
    if m is None:
        return PatternMatch(f"array:{var_name}", reason=f"no array bound to '{var_name}'")
    block = extract_block(source, m.end() - 1)
    if block is None:
        return PatternMatch(f"array:{var_name}", reason=f"array bound to '{var_name}' is unbalanced")
    return PatternMatch(f"array:{var_name}", block=block)


def iter_step_literals(text: str) -> Iterator[Block]:
    """Object literals passed to each ``new ConfigurationStep(...)``, in source order."""
    for m in _STEP_LITERAL.finditer(text):
        brace = text.find("{", m.end())
        if brace == -1:
            continue
        block = extract_block(text, brace)
        if block is not None:
            yield block


def iter_field_literals(text: str) -> Iterator[tuple[str, Block]]:
    """``(FieldClass, object block)`` for each ``new XField({...})``, in source order."""
    starts = list(_FIELD_LITERAL.finditer(text))
    for i, m in enumerate(starts):
        limit = starts[i + 1].start() if i + 1 < len(starts) else len(text)
        brace = text.find("{", m.end(), limit)
        if brace == -1:
            continue
        block = extract_block(text, brace)
        if block is not None:
            yield m.group(1), block


def handlers_object(component: str) -> tuple[PatternMatch, bool]:
    """The interface handlers object literal and whether it is ``satisfies InterfaceHandlers``.

    A declaration annotated with ``satisfies`` wins over a bare assignment.
    """
    fallback: Block | None = None
    for m in _HANDLERS_DECL.finditer(component):
        block = extract_block(component, m.end() - 1)
        if block is None:
            continue
        if _SATISFIES_HANDLERS.match(component, block.end + 1):
            return PatternMatch("handlers", block=block), True
        if fallback is None:
            fallback = block
    if fallback is not None:
        return PatternMatch("handlers", block=fallback), False
    return PatternMatch("handlers", reason="handlers object not found"), False


def permissions_array(source: str) -> PatternMatch:
    """Array literal returned by the ``getPermissions()`` accessor."""
    m = _PERMISSIONS_METHOD.search(source)
    if m is None:
        return PatternMatch("permissions", reason="no getPermissions() accessor")
    body = extract_block(source, m.end() - 1)
    if body is None:
        return PatternMatch("permissions", reason="getPermissions() body is unbalanced")
    ret = _RETURN_ARRAY.search(source, body.inner_start, body.end)
    if ret is None:
        return PatternMatch("permissions", reason="getPermissions() does not return an array literal")
    block = extract_block(source, ret.end() - 1)
    if block is None:
        return PatternMatch("permissions", reason="permissions array is unbalanced")
    return PatternMatch("permissions", block=block)


def find_data_provider_call(source: str) -> CallSite | None:
    """First ``useDataProvider(...)`` call, with or without type arguments."""
    return find_call(source, _DATA_PROVIDER_CALL)
