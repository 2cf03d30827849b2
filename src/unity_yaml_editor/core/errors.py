"""Exception hierarchy for document and mutation failures.

Core functions raise these; file-level operations in
:mod:`unity_yaml_editor.core.editor` convert them to ``(result, error)``
tuples and the CLI maps ``code`` onto the response envelope.
"""

from typing import Any, Dict, List, Optional

from unity_yaml_editor.core.responses import ErrorCode, ErrorType


class EditorError(Exception):
    """Base exception for editor operations.

    Attributes:
        message: Human-readable error description
        code: Canonical error code for the response envelope
        error_type: Error category for routing
        details: Optional machine-readable context
        remediation: Optional guidance for the caller
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    error_type: ErrorType = ErrorType.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        remediation: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.remediation = remediation

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": self.message,
            "error_code": self.code.value,
            "error_type": self.error_type.value,
        }
        if self.details:
            payload["details"] = dict(self.details)
        if self.remediation:
            payload["remediation"] = self.remediation
        return payload


class NotFoundError(EditorError):
    """A file, block, field, or override entry does not exist."""

    code = ErrorCode.NOT_FOUND
    error_type = ErrorType.NOT_FOUND


class AmbiguousMatchError(EditorError):
    """A display name resolves to more than one block.

    Attributes:
        candidates: fileIDs of every matching block
    """

    code = ErrorCode.AMBIGUOUS_MATCH
    error_type = ErrorType.CONFLICT

    def __init__(self, name: str, candidates: List[int], *, kind: str = "GameObjects"):
        ids = ", ".join(str(c) for c in candidates)
        super().__init__(
            f'Multiple {kind} named "{name}" found (fileIDs: {ids}). '
            "Use numeric fileID to specify which one.",
            details={"name": name, "candidates": list(candidates)},
            remediation="Retry with --by-id and one of the listed fileIDs.",
        )
        self.candidates = list(candidates)


class NotRecognizedError(EditorError):
    """The file does not carry the Unity YAML signature."""

    code = ErrorCode.NOT_RECOGNIZED
    error_type = ErrorType.UNSUPPORTED


class MalformedError(EditorError):
    """A referenced section exists but cannot be navigated."""

    code = ErrorCode.MALFORMED
    error_type = ErrorType.VALIDATION


class TemplateUnresolvedError(EditorError):
    """A prefab instance's source asset cannot be located."""

    code = ErrorCode.TEMPLATE_UNRESOLVED
    error_type = ErrorType.DEPENDENCY

    def __init__(self, message: str, *, guid: Optional[str] = None):
        super().__init__(
            message,
            details={"guid": guid} if guid else None,
            remediation="Pass --project pointing at the Unity project or run 'unity-yaml guid rebuild'.",
        )
        self.guid = guid


class DocumentIOError(EditorError):
    """Reading or writing the document failed at the filesystem level."""

    code = ErrorCode.IO_FAILURE
    error_type = ErrorType.INTERNAL


class ValidationFailureError(EditorError):
    """Input violates a constraint of the serialization format.

    Attributes:
        field: Name of the rejected input
    """

    code = ErrorCode.VALIDATION_ERROR
    error_type = ErrorType.VALIDATION

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field
