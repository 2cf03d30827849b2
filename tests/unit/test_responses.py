"""
Tests for response helper functions and the response-v2 envelope.
"""

from dataclasses import asdict

from unity_yaml_editor.core.errors import (
    AmbiguousMatchError,
    NotFoundError,
    TemplateUnresolvedError,
    ValidationFailureError,
)
from unity_yaml_editor.core.responses import (
    ErrorCode,
    ErrorType,
    ToolResponse,
    error_response,
    success_response,
)


class TestToolResponse:
    """Tests for the ToolResponse dataclass."""

    def test_default_meta_carries_version(self):
        response = ToolResponse(success=True)
        assert response.meta == {"version": "response-v2"}
        assert response.data == {}

    def test_asdict_has_four_top_level_keys(self):
        response = success_response(file="Main.unity")
        assert set(asdict(response)) == {"success", "data", "error", "meta"}


class TestSuccessResponse:
    """Tests for the success_response helper function."""

    def test_merges_data_and_fields(self):
        response = success_response({"file": "Main.unity"}, count=3)
        assert response.success is True
        assert response.error is None
        assert response.data == {"file": "Main.unity", "count": 3}

    def test_meta_fields_convention(self):
        """Operational context lives in meta, never in data."""
        response = success_response(
            {"objects": []},
            warnings=["Duplicate name"],
            pagination={"cursor": None, "has_more": False},
            request_id="cli_abc",
            meta={"trace": "t1"},
        )
        assert response.meta["version"] == "response-v2"
        assert response.meta["warnings"] == ["Duplicate name"]
        assert response.meta["pagination"]["has_more"] is False
        assert response.meta["request_id"] == "cli_abc"
        assert response.meta["trace"] == "t1"
        assert "warnings" not in response.data

    def test_empty_optional_meta_is_omitted(self):
        response = success_response(warnings=[], pagination=None)
        assert response.meta == {"version": "response-v2"}


class TestErrorResponse:
    """Tests for the error_response helper function."""

    def test_defaults_to_internal_error(self):
        response = error_response("Boom")
        assert response.success is False
        assert response.error == "Boom"
        assert response.data["error_code"] == "INTERNAL_ERROR"
        assert response.data["error_type"] == "internal"

    def test_structured_error_payload(self):
        response = error_response(
            'Multiple GameObjects named "Enemy" found',
            error_code=ErrorCode.AMBIGUOUS_MATCH,
            error_type=ErrorType.CONFLICT,
            remediation="Use --by-id",
            details={"candidates": [1, 2]},
            request_id="cli_1",
        )
        assert response.data["error_code"] == "AMBIGUOUS_MATCH"
        assert response.data["error_type"] == "conflict"
        assert response.data["remediation"] == "Use --by-id"
        assert response.data["details"] == {"candidates": [1, 2]}
        assert response.meta["request_id"] == "cli_1"


class TestEditorErrors:
    """Exception classes map onto error codes."""

    def test_not_found_to_dict(self):
        payload = NotFoundError("GameObject \"X\" not found").to_dict()
        assert payload["error_code"] == "NOT_FOUND"
        assert payload["error_type"] == "not_found"
        assert "details" not in payload

    def test_ambiguous_lists_candidates(self):
        error = AmbiguousMatchError("Enemy", [200, 300])
        assert error.candidates == [200, 300]
        assert "fileIDs: 200, 300" in error.message
        assert error.details == {"name": "Enemy", "candidates": [200, 300]}
        assert error.code is ErrorCode.AMBIGUOUS_MATCH

    def test_validation_failure_field(self):
        error = ValidationFailureError("bad", field="cascade")
        assert error.field == "cascade"
        assert error.to_dict()["details"] == {"field": "cascade"}

    def test_template_unresolved_carries_guid(self):
        error = TemplateUnresolvedError("missing", guid="abc")
        assert error.to_dict()["error_code"] == "TEMPLATE_UNRESOLVED"
        assert error.details["guid"] == "abc"
        assert error.remediation
