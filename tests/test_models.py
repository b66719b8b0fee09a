import pytest
from pydantic import ValidationError

from api_test_planner.models import (
    AnalysisResult,
    KeyValue,
    Param,
    ParamLocation,
    SecurityDescriptor,
    SecurityType,
    SuggestionType,
)
from api_test_planner import models


class TestParam:
    def test_create_required_param(self):
        p = Param(name="id", location="path", required=True, value="{{resourceId}}")
        assert p.location is ParamLocation.PATH
        assert p.required is True
        assert p.description == ""
        assert p.param_schema == {}

    def test_unknown_location_rejected(self):
        with pytest.raises(ValidationError):
            Param(name="x", location="body", value="1")


class TestSecurityDescriptor:
    def test_type_is_closed_set(self):
        d = SecurityDescriptor(scheme_name="key", type="apiKey", location="header", name="X-API-Key")
        assert d.type is SecurityType.API_KEY
        with pytest.raises(ValidationError):
            SecurityDescriptor(scheme_name="tls", type="mutualTLS")


class TestSuggestion:
    def test_suggestion_is_frozen(self):
        s = models.TestSuggestion(
            operation_id="listPets",
            verb="GET",
            path="/pets",
            type=SuggestionType.HAPPY_PATH,
            description="Happy Path",
            estimated_hours=0.75,
        )
        with pytest.raises(ValidationError):
            s.estimated_hours = 1.0


class TestAnalysisResult:
    def test_defaults_are_independent(self):
        a = AnalysisResult(title="A", base_url="{{baseUrl}}")
        b = AnalysisResult(title="B", base_url="{{baseUrl}}")
        a.variables.append(KeyValue(key="token"))
        a.legend["Happy Path"] = "x"
        assert b.variables == []
        assert b.legend == {}

    def test_serialization_roundtrip(self):
        result = AnalysisResult(title="A", base_url="https://api.example.com/")
        result.summary.verb_counts["get"] = 2
        again = AnalysisResult(**result.model_dump())
        assert again.summary.verb_counts == {"get": 2}


class TestRequestDescriptor:
    def test_fields_are_request_shape_only(self):
        assert set(models.RequestDescriptor.model_fields) == {
            "operation_id",
            "name",
            "method",
            "path",
            "description",
            "headers",
            "path_variables",
            "query",
            "parameters",
            "body",
            "auth",
        }
