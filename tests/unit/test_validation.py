"""Tests for name, value and document validation."""

import pytest

from unity_yaml_editor.core.document import UnityDocument
from unity_yaml_editor.core.errors import ValidationFailureError
from unity_yaml_editor.core.validation import validate_document, validate_name, validate_value

from tests.conftest import BASIC_SCENE


class TestValidateName:
    def test_accepts_plain_names(self):
        assert validate_name("Main Camera (1)") == "Main Camera (1)"

    @pytest.mark.parametrize("name", [None, "", "  ", "a/b", "a\\b", "a\tb", "a\rb", "a\0b"])
    def test_rejects(self, name):
        with pytest.raises(ValidationFailureError):
            validate_name(name)

    def test_field_follows_label(self):
        with pytest.raises(ValidationFailureError) as exc_info:
            validate_name("", "New name")
        assert exc_info.value.field == "new name"
        assert "New name cannot be empty" in str(exc_info.value)


class TestValidateValue:
    def test_single_line(self):
        assert validate_value("{x: 1}") == "{x: 1}"

    def test_newline_rejected(self):
        with pytest.raises(ValidationFailureError):
            validate_value("1\n2")


class TestValidateDocument:
    def test_valid(self):
        report = validate_document(UnityDocument.from_text(BASIC_SCENE), "Basic.unity")
        assert report == {"file": "Basic.unity", "valid": True, "issues": [], "block_count": 9}

    def test_invalid(self):
        doc = UnityDocument.from_text(BASIC_SCENE + "--- !u!1 &100\nGameObject:\n  m_Name: Dup\n")
        report = validate_document(doc)
        assert report["valid"] is False
        assert report["issues"] == ["Duplicate fileID 100"]
