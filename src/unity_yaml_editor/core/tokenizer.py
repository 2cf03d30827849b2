"""Split Unity YAML text into a header and an ordered list of blocks."""

import re
from typing import List, Tuple

from unity_yaml_editor.core.block import Block

_ANCHOR_LINE = re.compile(r"^--- !u!\d+ &-?\d+", re.MULTILINE)

LF = "\n"
CRLF = "\r\n"


def detect_line_ending(text: str) -> str:
    """Return CRLF only when every newline in ``text`` is CRLF."""
    crlf = text.count(CRLF)
    if crlf and crlf == text.count(LF):
        return CRLF
    return LF


def normalize_newlines(text: str) -> Tuple[str, str]:
    """Return (LF-normalized text, original line ending)."""
    ending = detect_line_ending(text)
    if ending == CRLF:
        return text.replace(CRLF, LF), ending
    return text, ending


def has_blocks(text: str) -> bool:
    """True when ``text`` contains at least one block anchor line."""
    return _ANCHOR_LINE.search(text) is not None


def split_blocks(text: str) -> Tuple[str, List[Block]]:
    """Split LF-normalized text into (header, blocks).

    The header is everything before the first ``--- !u!`` anchor line
    (``%YAML``/``%TAG`` directives). Each block runs until the next anchor
    line or the end of the text, so ``header + "".join(b.raw for b in
    blocks)`` reproduces ``text`` exactly. Text without any anchor yields
    no blocks.
    """
    starts = [m.start() for m in _ANCHOR_LINE.finditer(text)]
    if not starts:
        return text, []

    header = text[: starts[0]]
    bounds = starts + [len(text)]
    blocks = [Block(text[bounds[i] : bounds[i + 1]]) for i in range(len(starts))]
    return header, blocks


def join_blocks(header: str, blocks: List[Block]) -> str:
    return header + "".join(block.raw for block in blocks)
