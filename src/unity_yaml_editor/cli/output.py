"""Output helpers for the unity-yaml CLI.

This module provides the sole output mechanism for the CLI. Success
responses go to stdout as minified response-v2 JSON, or as rich tables
when ``--format text`` is selected. Errors are always JSON on stderr
followed by exit code 1, whatever the format.

The envelope itself is built by :mod:`unity_yaml_editor.core.responses`.
"""

import json
import sys
from contextvars import ContextVar
from dataclasses import asdict
from typing import Any, Dict, Mapping, NoReturn, Optional, Sequence

from unity_yaml_editor.cli.logging import generate_request_id, get_request_id, set_request_id
from unity_yaml_editor.core.errors import EditorError
from unity_yaml_editor.core.responses import error_response, success_response

OUTPUT_FORMATS = ("json", "text")

_output_format: ContextVar[str] = ContextVar("output_format", default="json")


def set_output_format(output_format: str) -> None:
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {output_format}")
    _output_format.set(output_format)


def get_output_format() -> str:
    return _output_format.get()


def _ensure_request_id() -> str:
    request_id = get_request_id()
    if request_id:
        return request_id
    request_id = generate_request_id()
    set_request_id(request_id)
    return request_id


def emit(data: Any) -> None:
    """Emit JSON to stdout.

    Data is serialized in minified format for smaller payloads.
    """
    print(json.dumps(data, separators=(",", ":"), default=str))


def emit_error(
    message: str,
    code: str = "INTERNAL_ERROR",
    *,
    error_type: str = "internal",
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
) -> NoReturn:
    """Emit error JSON to stderr and exit with code 1.

    Error info is structured in the ``data`` field with ``error_code``,
    ``error_type`` and ``remediation``. The ``error`` field contains the
    human-readable message.

    Args:
        message: Human-readable error description.
        code: Error code in SCREAMING_SNAKE_CASE (e.g., VALIDATION_ERROR, NOT_FOUND).
        error_type: Error category for routing (validation, not_found, internal, etc.).
        remediation: Actionable guidance for resolving the error.
        details: Optional additional error context.

    Raises:
        SystemExit: Always exits with code 1.
    """
    response = error_response(
        message=message,
        error_code=code,
        error_type=error_type,
        remediation=remediation,
        details=details,
        request_id=_ensure_request_id(),
    )
    print(json.dumps(asdict(response), separators=(",", ":"), default=str), file=sys.stderr)
    sys.exit(1)


def emit_editor_error(error: EditorError) -> NoReturn:
    """Emit an :class:`EditorError` with its own code and category."""
    emit_error(
        error.message,
        code=error.code.value,
        error_type=error.error_type.value,
        remediation=error.remediation,
        details=error.details or None,
    )


def emit_success(
    data: Any,
    *,
    warnings: Optional[Sequence[str]] = None,
    pagination: Optional[Mapping[str, Any]] = None,
    meta: Optional[Mapping[str, Any]] = None,
    title: Optional[str] = None,
) -> None:
    """Emit success response envelope to stdout.

    Args:
        data: The operation-specific payload.
        warnings: Non-fatal issues to surface in meta.warnings.
        pagination: Cursor metadata for list results.
        meta: Additional metadata to merge into meta object.
        title: Heading used by the text renderer.
    """
    payload = data if isinstance(data, dict) else {"result": data}
    response = success_response(
        data=payload,
        warnings=warnings,
        pagination=pagination,
        meta=meta,
        request_id=_ensure_request_id(),
    )
    if get_output_format() == "text":
        from unity_yaml_editor.cli.render import render_response

        render_response(asdict(response), title=title)
        return
    emit(asdict(response))


def emit_result(
    result: Optional[Dict[str, Any]],
    error: Optional[EditorError],
    *,
    title: Optional[str] = None,
) -> None:
    """Emit the ``(result, error)`` pair returned by a core editor operation.

    ``pagination`` and ``warnings`` keys of ``result`` move into ``meta``.
    """
    if error is not None:
        emit_editor_error(error)
    payload = dict(result or {})
    pagination = payload.pop("pagination", None)
    warnings = payload.pop("warnings", None)
    emit_success(payload, warnings=warnings, pagination=pagination, title=title)
