"""Flat literal lookups inside object-literal text.

All lookups are top-level only: keys nested inside a child object, array or
call are invisible to them, so a step's ``description`` is never confused with
the ``description`` of one of its fields.
"""

from __future__ import annotations

import re
from functools import lru_cache

from modbuild.scanning import Block, blank_comments, blank_nested, extract_block

__all__ = [
    "STRING_LITERAL",
    "find_key",
    "string_value",
    "number_value",
    "bool_value",
    "literal_value",
    "key_block",
    "string_list",
    "array_strings",
    "top_level_keys",
]

STRING_LITERAL = re.compile(
    r"""'((?:[^'\\\n]|\\.)*)'|"((?:[^"\\\n]|\\.)*)"|`((?:[^`\\]|\\.)*)`"""
)
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?(?![\w.])")
_BOOL = re.compile(r"(true|false)\b")
_UNESCAPE = re.compile(r"\\(.)")
_KEY_NAME = re.compile(r"""(?:^|[,{])\s*(?:async\s+)?["']?([A-Za-z_$][\w$]*)["']?\s*(?=[:(,]|$)""")


@lru_cache(maxsize=256)
def _flat(content: str) -> str:
    return blank_nested(blank_comments(content))


def _string_from_match(m: re.Match[str]) -> str:
    raw = next(g for g in m.groups() if g is not None)
    return _UNESCAPE.sub(r"\1", raw)


def find_key(content: str, key: str) -> int | None:
    """Return the index just past ``key:`` (and any whitespace) at the top level."""
    pattern = re.compile(r"""(?:^|[,{])\s*["']?""" + re.escape(key) + r"""["']?\s*:\s*""")
    m = pattern.search(_flat(content))
    if m is None:
        return None
    return m.end()


def string_value(content: str, key: str) -> str | None:
    """Top-level ``key: 'text'`` value; empty strings count as absent."""
    pos = find_key(content, key)
    if pos is None:
        return None
    m = STRING_LITERAL.match(content, pos)
    if m is None:
        return None
    value = _string_from_match(m)
    return value or None


def number_value(content: str, key: str) -> int | float | None:
    pos = find_key(content, key)
    if pos is None:
        return None
    m = _NUMBER.match(content, pos)
    if m is None:
        return None
    text = m.group(0)
    return float(text) if "." in text else int(text)


def bool_value(content: str, key: str) -> bool | None:
    pos = find_key(content, key)
    if pos is None:
        return None
    m = _BOOL.match(content, pos)
    if m is None:
        return None
    return m.group(1) == "true"


def literal_value(content: str, key: str) -> str | int | float | bool | None:
    """First of string, number or boolean literal bound to ``key``."""
    pos = find_key(content, key)
    if pos is None:
        return None
    m = STRING_LITERAL.match(content, pos)
    if m is not None:
        return _string_from_match(m) or None
    m = _NUMBER.match(content, pos)
    if m is not None:
        text = m.group(0)
        return float(text) if "." in text else int(text)
    m = _BOOL.match(content, pos)
    if m is not None:
        return m.group(1) == "true"
    return None


def key_block(content: str, key: str, opener: str = "{") -> Block | None:
    """Carve the object or array literal bound to a top-level ``key``."""
    pos = find_key(content, key)
    if pos is None or pos >= len(content) or content[pos] != opener:
        return None
    return extract_block(content, pos)


def string_list(content: str) -> list[str]:
    """Every non-empty string literal in ``content``, in order."""
    values = [_string_from_match(m) for m in STRING_LITERAL.finditer(content)]
    return [v for v in values if v]


def array_strings(content: str, key: str) -> list[str] | None:
    """String literals of the array bound to ``key``; None when the key is absent."""
    block = key_block(content, key, "[")
    if block is None:
        return None
    return string_list(block.inner)


def top_level_keys(content: str) -> list[str]:
    """Property names declared at the top level of an object literal body."""
    return [m.group(1) for m in _KEY_NAME.finditer(_flat(content))]
