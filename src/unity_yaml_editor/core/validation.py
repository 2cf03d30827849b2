"""Input and document validation."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from unity_yaml_editor.core.errors import ValidationFailureError

logger = logging.getLogger(__name__)

# (character, description) pairs rejected in names written into block text
_FORBIDDEN_NAME_CHARS = (
    ("/", "forward slashes (/); Unity uses them as hierarchy path separators"),
    ("\\", "backslashes (\\)"),
    ("\n", "newlines; they corrupt YAML structure"),
    ("\r", "newlines; they corrupt YAML structure"),
    ("\t", "tab characters; they break YAML indentation"),
    ("\0", "null bytes"),
)


def validate_name(name: Optional[str], label: str = "Name") -> str:
    """Check a name that will be embedded verbatim as a YAML scalar.

    Returns the name unchanged.

    Raises:
        ValidationFailureError: The name is empty or contains a forbidden
            character. The message names the constraint.
    """
    if name is None or not name.strip():
        raise ValidationFailureError(f"{label} cannot be empty", field=label.lower())
    for char, description in _FORBIDDEN_NAME_CHARS:
        if char in name:
            raise ValidationFailureError(
                f"{label} cannot contain {description}", field=label.lower()
            )
    return name


def validate_value(value: str, label: str = "Value") -> str:
    """Field values must stay on one line."""
    if "\n" in value or "\r" in value:
        raise ValidationFailureError(
            f"{label} cannot contain newlines; they corrupt YAML structure",
            field=label.lower(),
        )
    return value


def validate_document(doc: Any, path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Summarize structural problems of a loaded document.

    Args:
        doc: A :class:`~unity_yaml_editor.core.document.UnityDocument`
        path: Path reported in the result (defaults to ``doc.path``)

    Returns:
        Dict with ``valid``, ``issues`` and ``block_count``.
    """
    issues: List[str] = doc.validate()
    if issues:
        logger.info("Validation found %d issue(s) in %s", len(issues), path or doc.path)
    return {
        "file": str(path or doc.path or ""),
        "valid": not issues,
        "issues": issues,
        "block_count": len(doc),
    }
