"""Core document model and editing operations for unity-yaml-editor."""

from unity_yaml_editor.core.block import Block, format_ref, parse_ref
from unity_yaml_editor.core.document import NameMatch, UnityDocument

from unity_yaml_editor.core.errors import (
    AmbiguousMatchError,
    DocumentIOError,
    EditorError,
    MalformedError,
    NotFoundError,
    NotRecognizedError,
    TemplateUnresolvedError,
    ValidationFailureError,
)

from unity_yaml_editor.core.guid_resolver import GuidResolver, find_project_root
from unity_yaml_editor.core.references import TraceResult, trace

__all__ = [
    "Block",
    "format_ref",
    "parse_ref",
    "NameMatch",
    "UnityDocument",
    "AmbiguousMatchError",
    "DocumentIOError",
    "EditorError",
    "MalformedError",
    "NotFoundError",
    "NotRecognizedError",
    "TemplateUnresolvedError",
    "ValidationFailureError",
    "GuidResolver",
    "find_project_root",
    "TraceResult",
    "trace",
]
