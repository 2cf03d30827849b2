"""
Standard response contracts for editor operations.
Provides one response structure shared by every CLI command.

Response Schema Contract
========================

    {
        "success": bool,       # Required: operation success/failure
        "data": {...},         # Required: primary payload (error details on failure)
        "error": str | null,   # Required: error message or null on success
        "meta": {              # Required: response metadata
            "version": "response-v2",
            "request_id": "cli_abc123"?,
            "warnings": ["..."]?,
            "pagination": { ... }?
        }
    }

Key Principle:
    - `success=True` means the operation executed correctly (even if the result is empty).
    - `success=False` means the operation failed to execute; `data` carries
      `error_code`, `error_type` and optional `remediation`/`details`.
    - Keep document data inside `data` and operational context inside `meta`.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable error codes for editor responses.

    Codes follow SCREAMING_SNAKE_CASE convention and map one-to-one onto the
    exception classes in :mod:`unity_yaml_editor.core.errors`.
    """

    # Input errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CURSOR = "INVALID_CURSOR"
    INVALID_JSON = "INVALID_JSON"

    # Document errors
    NOT_FOUND = "NOT_FOUND"
    AMBIGUOUS_MATCH = "AMBIGUOUS_MATCH"
    NOT_RECOGNIZED = "NOT_RECOGNIZED"
    MALFORMED = "MALFORMED"
    TEMPLATE_UNRESOLVED = "TEMPLATE_UNRESOLVED"

    # System errors
    IO_FAILURE = "IO_FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorType(str, Enum):
    """Error categories for routing and client-side handling."""

    VALIDATION = "validation"  # Fix input, no retry
    NOT_FOUND = "not_found"  # No retry
    CONFLICT = "conflict"  # Disambiguate and retry
    UNSUPPORTED = "unsupported"  # Not a document this tool understands
    DEPENDENCY = "dependency"  # External asset could not be resolved
    INTERNAL = "internal"  # Filesystem or programming failure


@dataclass
class ToolResponse:
    """
    Standard response structure for editor operations.

    Attributes:
        success: Whether the operation completed successfully
        data: The primary payload (operation-specific structured data)
        error: Error message if success is False, None otherwise
        meta: Response metadata including version identifier
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": "response-v2"})


def _build_meta(
    *,
    request_id: Optional[str] = None,
    warnings: Optional[Sequence[str]] = None,
    pagination: Optional[Mapping[str, Any]] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Construct a metadata payload that always includes the response version."""
    meta: Dict[str, Any] = {"version": "response-v2"}

    if request_id:
        meta["request_id"] = request_id
    if warnings:
        meta["warnings"] = list(warnings)
    if pagination:
        meta["pagination"] = dict(pagination)
    if extra:
        meta.update(dict(extra))

    return meta


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    *,
    warnings: Optional[Sequence[str]] = None,
    pagination: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
    meta: Optional[Mapping[str, Any]] = None,
    **fields: Any,
) -> ToolResponse:
    """Create a standardized success response.

    Args:
        data: Optional mapping used as the base payload.
        warnings: Non-fatal issues to surface in ``meta.warnings``.
        pagination: Cursor metadata for list results.
        request_id: Correlation identifier propagated through logs.
        meta: Arbitrary extra metadata to merge into ``meta``.
        **fields: Additional payload fields (shorthand for ``data.update``).
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))
    if fields:
        payload.update(fields)

    meta_payload = _build_meta(
        request_id=request_id,
        warnings=warnings,
        pagination=pagination,
        extra=meta,
    )

    return ToolResponse(success=True, data=payload, error=None, meta=meta_payload)


def error_response(
    message: str,
    *,
    data: Optional[Mapping[str, Any]] = None,
    error_code: Optional[Union[ErrorCode, str]] = None,
    error_type: Optional[Union[ErrorType, str]] = None,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
    meta: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """Create a standardized error response.

    Args:
        message: Human-readable description of the failure.
        data: Optional mapping with additional machine-readable context.
        error_code: Canonical error code (``ErrorCode`` or string).
        error_type: Error category for routing (``ErrorType`` or string).
        remediation: User-facing guidance on how to fix the issue.
        details: Nested structure describing the failure.
        request_id: Correlation identifier propagated through logs.
        meta: Arbitrary extra metadata to merge into ``meta``.

    Example:
        >>> error_response(
        ...     'Multiple GameObjects named "Enemy" found (fileIDs: 200, 300).',
        ...     error_code=ErrorCode.AMBIGUOUS_MATCH,
        ...     error_type=ErrorType.CONFLICT,
        ...     remediation="Use --by-id with one of the listed fileIDs",
        ... )
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))

    effective_error_code: Union[ErrorCode, str] = (
        error_code if error_code is not None else ErrorCode.INTERNAL_ERROR
    )
    effective_error_type: Union[ErrorType, str] = (
        error_type if error_type is not None else ErrorType.INTERNAL
    )

    if "error_code" not in payload:
        payload["error_code"] = (
            effective_error_code.value
            if isinstance(effective_error_code, Enum)
            else effective_error_code
        )
    if "error_type" not in payload:
        payload["error_type"] = (
            effective_error_type.value
            if isinstance(effective_error_type, Enum)
            else effective_error_type
        )
    if remediation is not None and "remediation" not in payload:
        payload["remediation"] = remediation
    if details and "details" not in payload:
        payload["details"] = dict(details)

    meta_payload = _build_meta(
        request_id=request_id,
        extra=meta,
    )

    return ToolResponse(success=False, data=payload, error=message, meta=meta_payload)
