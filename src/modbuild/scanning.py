"""Delimiter-balance scanning over free-form source text.

Every nested-structure extraction in modbuild goes through this module
instead of a full-language parser. The scanner counts delimiters only: it
does not understand string literals, template literals or regex literals,
so a brace character inside a string is counted like any other. Callers
must treat such sources as a compatibility risk. Comments can be blanked
beforehand with ``blank_comments``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

__all__ = [
    "Block",
    "PAIRS",
    "find_matching",
    "extract_block",
    "find_block",
    "blank_nested",
    "blank_comments",
    "iter_blocks",
    "split_top_level",
]

PAIRS: dict[str, str] = {"{": "}", "[": "]", "(": ")"}
_CLOSERS = {v: k for k, v in PAIRS.items()}


@dataclass(frozen=True)
class Block:
    """A balanced delimiter span carved out of a larger text.

    Attributes:
        start: Index of the opening delimiter.
        end: Index of the matching closing delimiter.
        inner: Text strictly between the two delimiters.
    """

    start: int
    end: int
    inner: str

    @property
    def inner_start(self) -> int:
        """Index in the source text where ``inner`` begins."""
        return self.start + 1


def find_matching(text: str, start: int) -> int | None:
    """Return the index of the delimiter closing the one at ``start``.

    Only the delimiter kind found at ``start`` is counted. Returns None when
    ``start`` is not an opening delimiter or the depth never returns to zero.
    """
    if start < 0 or start >= len(text):
        return None
    opener = text[start]
    closer = PAIRS.get(opener)
    if closer is None:
        return None

    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
    return None


def extract_block(text: str, start: int) -> Block | None:
    """Carve the balanced block that opens at ``start``."""
    end = find_matching(text, start)
    if end is None:
        return None
    return Block(start=start, end=end, inner=text[start + 1 : end])


def find_block(text: str, opener: str, pos: int = 0) -> Block | None:
    """Find the first ``opener`` at or after ``pos`` and carve its block."""
    start = text.find(opener, pos)
    if start == -1:
        return None
    return extract_block(text, start)


def blank_nested(text: str) -> str:
    """Replace everything nested inside any delimiter pair with spaces.

    Delimiters themselves are kept and the result has the same length as the
    input, so offsets found in the blanked text are valid in the input.
    Unbalanced closers are left untouched.
    """
    out = list(text)
    depth = 0
    for i, ch in enumerate(text):
        if ch in PAIRS:
            if depth > 0:
                out[i] = " "
            depth += 1
        elif ch in _CLOSERS and depth > 0:
            depth -= 1
            if depth > 0:
                out[i] = " "
        elif depth > 0 and ch != "\n":
            out[i] = " "
    return "".join(out)


def blank_comments(text: str) -> str:
    """Replace ``//`` and ``/* */`` comments with spaces, keeping newlines.

    Comment markers inside string and template literals are left alone. The
    result has the same length as the input.
    """
    out = list(text)
    quote: str | None = None
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote or (ch == "\n" and quote != "`"):
                quote = None
            i += 1
            continue
        if ch in "'\"`":
            quote = ch
            i += 1
            continue
        if text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
        else:
            i += 1
            continue
        for j in range(i, end):
            if out[j] != "\n":
                out[j] = " "
        i = end
    return "".join(out)


def iter_blocks(text: str, opener: str) -> Iterator[Block]:
    """Yield every top-level ``opener`` block in ``text`` in source order."""
    pos = 0
    while True:
        start = text.find(opener, pos)
        if start == -1:
            return
        block = extract_block(text, start)
        if block is None:
            return
        yield block
        pos = block.end + 1


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split ``text`` on ``sep`` occurrences that are not nested in any delimiter.

    Parts are stripped; a trailing empty part (trailing comma) is dropped.
    """
    flat = blank_nested(text)
    parts: list[str] = []
    last = 0
    depth = 0
    for i, ch in enumerate(flat):
        if ch in PAIRS:
            depth += 1
        elif ch in _CLOSERS and depth > 0:
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(text[last:i].strip())
            last = i + 1
    tail = text[last:].strip()
    if tail:
        parts.append(tail)
    return parts
