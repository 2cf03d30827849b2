"""
Pagination utilities for list-style read commands.

Provides offset cursors (opaque Base64 tokens or plain integers),
encoding/decoding, and page slicing.

Pagination Defaults
===================

    DEFAULT_PAGE_SIZE (200)  - Default number of items per page
    MAX_PAGE_SIZE (1000)     - Maximum allowed page size

Example usage:

    from unity_yaml_editor.core.pagination import (
        decode_offset,
        encode_cursor,
        normalize_page_size,
        paginate,
    )

    limit = normalize_page_size(page_size)
    offset = decode_offset(cursor)
    page = paginate(items, offset, limit)

    emit_success(
        {"items": page.items},
        pagination=page.to_meta(),
    )
"""

import base64
import json
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar


# ---------------------------------------------------------------------------
# Pagination Constants
# ---------------------------------------------------------------------------

#: Default number of items per page
DEFAULT_PAGE_SIZE: int = 200

#: Maximum allowed page size
MAX_PAGE_SIZE: int = 1000

#: Cursor format version (for future compatibility)
CURSOR_VERSION: int = 1

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Cursor Encoding/Decoding
# ---------------------------------------------------------------------------


class CursorError(Exception):
    """Error during cursor encoding or decoding.

    Attributes:
        cursor: The invalid cursor string (if decoding).
        reason: Description of what went wrong.
    """

    def __init__(
        self,
        message: str,
        cursor: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message)
        self.cursor = cursor
        self.reason = reason


def encode_cursor(data: Dict[str, Any]) -> str:
    """Encode cursor data as opaque Base64 token.

    Args:
        data: Dictionary containing cursor data (typically ``offset``).

    Returns:
        Opaque cursor string (URL-safe Base64 encoded).
    """
    cursor_data = {**data, "version": CURSOR_VERSION}
    json_str = json.dumps(cursor_data, separators=(",", ":"))
    return base64.urlsafe_b64encode(json_str.encode()).decode()


def decode_cursor(cursor: str) -> Dict[str, Any]:
    """Decode cursor token to dictionary.

    Raises:
        CursorError: If cursor is invalid or cannot be decoded.
    """
    if not cursor:
        raise CursorError("Cursor cannot be empty", cursor=cursor, reason="empty")

    try:
        decoded_bytes = base64.urlsafe_b64decode(cursor.encode())
        data = json.loads(decoded_bytes.decode())
    except (ValueError, json.JSONDecodeError) as e:
        raise CursorError(
            f"Failed to decode cursor: {str(e)}",
            cursor=cursor,
            reason="decode_failed",
        )

    if not isinstance(data, dict):
        raise CursorError(
            "Invalid cursor format",
            cursor=cursor,
            reason="not_a_dict",
        )

    return data


def decode_offset(cursor: Optional[str]) -> int:
    """Turn a ``--cursor`` value into a start offset.

    Accepts ``None`` (start of list), a non-negative integer string, or an
    opaque token previously returned in ``meta.pagination.cursor``.

    Raises:
        CursorError: If the cursor is negative or cannot be decoded.
    """
    if cursor is None or cursor == "":
        return 0

    text = str(cursor).strip()
    if text.lstrip("-").isdigit():
        offset = int(text)
        if offset < 0:
            raise CursorError(
                "Cursor must be a non-negative integer",
                cursor=text,
                reason="negative",
            )
        return offset

    data = decode_cursor(text)
    offset = data.get("offset")
    if not isinstance(offset, int) or offset < 0:
        raise CursorError("Cursor has no valid offset", cursor=text, reason="no_offset")
    return offset


# ---------------------------------------------------------------------------
# Page slicing
# ---------------------------------------------------------------------------


@dataclass
class Page(Generic[T]):
    """One page of a list result."""

    items: List[T]
    offset: int
    page_size: int
    total_count: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total_count

    @property
    def next_offset(self) -> Optional[int]:
        return self.offset + len(self.items) if self.has_more else None

    def to_meta(self) -> Dict[str, Any]:
        """Pagination block for ``meta.pagination``."""
        next_offset = self.next_offset
        return {
            "cursor": encode_cursor({"offset": next_offset}) if next_offset is not None else None,
            "next_offset": next_offset,
            "has_more": self.has_more,
            "page_size": self.page_size,
            "total_count": self.total_count,
        }


def paginate(items: Sequence[T], offset: int, page_size: int) -> Page[T]:
    """Slice ``items`` starting at ``offset``.

    Returns ``min(page_size, max(0, len(items) - offset))`` items in their
    original order.
    """
    start = max(0, offset)
    window = list(items[start : start + page_size])
    return Page(items=window, offset=start, page_size=page_size, total_count=len(items))


def normalize_page_size(
    requested: Optional[int],
    default: int = DEFAULT_PAGE_SIZE,
    maximum: int = MAX_PAGE_SIZE,
) -> int:
    """Normalize requested page size to valid range.

    Example:
        >>> normalize_page_size(None)
        200
        >>> normalize_page_size(5000)
        1000
        >>> normalize_page_size(-1)
        1
    """
    if requested is None:
        return default
    return min(max(1, requested), maximum)
