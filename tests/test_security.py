from api_test_planner.generator.security import effective_security, resolve_security
from api_test_planner.models import SecurityType

SPEC = {
    "security": [{"bearerAuth": []}],
    "components": {
        "securitySchemes": {
            "apiKey": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
            "bearerAuth": {"type": "http", "scheme": "bearer"},
            "oauth": {"type": "oauth2", "flows": {}},
            "tls": {"type": "mutualTLS"},
        }
    },
}


class TestEffectiveSecurity:
    def test_operation_overrides_global(self):
        assert effective_security({"security": [{"apiKey": []}]}, SPEC) == [{"apiKey": []}]

    def test_empty_operation_list_means_no_auth(self):
        requirements = effective_security({"security": []}, SPEC)
        assert requirements == []
        assert resolve_security(requirements, SPEC) is None

    def test_global_used_when_operation_silent(self):
        assert effective_security({}, SPEC) == [{"bearerAuth": []}]


class TestResolveSecurity:
    def test_api_key(self):
        d = resolve_security([{"apiKey": []}], SPEC)
        assert d.scheme_name == "apiKey"
        assert d.type is SecurityType.API_KEY
        assert d.location == "header"
        assert d.name == "X-API-Key"

    def test_only_first_requirement_and_first_scheme(self):
        d = resolve_security([{"bearerAuth": [], "apiKey": []}, {"oauth": ["read"]}], SPEC)
        assert d.scheme_name == "bearerAuth"
        assert d.type is SecurityType.HTTP
        assert d.scheme == "bearer"

    def test_missing_scheme_warns(self, caplog):
        assert resolve_security([{"nope": []}], SPEC) is None
        assert "nope" in caplog.text

    def test_empty_requirement_object(self):
        assert resolve_security([{}], SPEC) is None

    def test_unsupported_type(self):
        assert resolve_security([{"tls": []}], SPEC) is None

    def test_swagger2_basic(self):
        spec = {"securityDefinitions": {"basic": {"type": "basic"}}}
        d = resolve_security([{"basic": []}], spec)
        assert d.type is SecurityType.HTTP
        assert d.scheme == "basic"
