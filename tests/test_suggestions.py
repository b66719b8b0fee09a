from api_test_planner.generator.suggestions import (
    ESTIMATED_HOURS,
    OperationSuggestions,
    estimation_table,
    legend_entry,
    suggest_for_operation,
    type_description,
    type_label,
)
from api_test_planner.models import Param, SecurityDescriptor, SuggestionType as S

API_KEY = SecurityDescriptor(scheme_name="apiKey", type="apiKey", location="header", name="X-API-Key")


def run(verb, path, operation=None, parameters=(), body_schema=None, security=None, spec=None, estimates=None):
    acc = OperationSuggestions(f"{verb.upper()} {path}", verb, path, estimates)
    suggest_for_operation(acc, verb, path, operation or {}, list(parameters), body_schema, security, spec or {})
    return acc


def types(acc):
    return [s.type for s in acc.suggestions]


class TestVerbRules:
    def test_delete_with_path_id(self):
        acc = run("delete", "/users/{id}")
        assert types(acc) == [
            S.HAPPY_PATH,
            S.DELETE_NOT_FOUND,
            S.DELETE_VERIFY,
            S.DELETE_IDEMPOTENCY,
            S.SECURITY_HEADERS,
            S.PERFORMANCE,
        ]
        assert round(acc.hours, 2) == 1.85

    def test_delete_without_path_id(self):
        assert types(run("delete", "/users")) == [S.HAPPY_PATH, S.SECURITY_HEADERS, S.PERFORMANCE]

    def test_get_filtering_params(self):
        limit = Param(name="pageSize", location="query", value="10")
        acc = run("get", "/users", parameters=[limit])
        assert S.GET_FILTERING in types(acc)
        assert S.GET_NOT_FOUND not in types(acc)

    def test_post_created_and_conflict(self):
        acc = run("post", "/users", operation={"responses": {"201": {}, "409": {}}})
        assert S.CONTRACT in types(acc)
        assert S.POST_CREATED in types(acc)
        assert S.POST_CONFLICT in types(acc)

    def test_put_vs_patch(self):
        assert S.PUT_IDEMPOTENCY in types(run("put", "/users/{id}"))
        patch = types(run("patch", "/users/{id}"))
        assert S.PUT_PATCH_NOT_FOUND in patch
        assert S.PUT_IDEMPOTENCY not in patch

    def test_contract_needs_200_or_201(self):
        assert S.CONTRACT not in types(run("get", "/users", operation={"responses": {"204": {}}}))
        assert S.CONTRACT in types(run("get", "/users", operation={"responses": {200: {}}}))


class TestAuthAndValidationRules:
    def test_auth_suggestions_need_security(self):
        acc = run("get", "/users", security=API_KEY)
        assert types(acc).count(S.AUTH_MISSING) == 1
        assert types(acc).count(S.AUTH_INVALID) == 1

    def test_parameter_rules(self):
        params = [
            Param(name="id", location="path", required=True, value="1", param_schema={"type": "string", "format": "uuid"}),
            Param(name="q", location="query", value="x", param_schema={"type": "string"}),
        ]
        acc = run("get", "/users/{id}", parameters=params)
        descriptions = [s.description for s in acc.suggestions]
        assert "Validation: Required Missing (path param: id)" in descriptions
        assert "Validation: Invalid Type (path param: id)" in descriptions
        assert "Validation: Invalid Type (query param: q)" in descriptions
        assert "Validation: Invalid Format/Enum/Pattern (path param: id)" in descriptions
        assert "Validation: Invalid Format/Enum/Pattern (query param: q)" not in descriptions

    def test_body_rules_resolve_ref(self):
        spec = {
            "components": {
                "schemas": {
                    "User": {
                        "type": "object",
                        "required": ["name", "email"],
                        "properties": {"name": {"type": "string"}, "email": {"type": "string", "format": "email"}},
                    }
                }
            }
        }
        acc = run("post", "/users", body_schema={"$ref": "#/components/schemas/User"}, spec=spec)
        descriptions = [s.description for s in acc.suggestions]
        assert "Validation: Malformed Body" in descriptions
        assert "Validation: Required Missing (body field: name)" in descriptions
        assert "Validation: Required Missing (body field: email)" in descriptions
        assert "Validation: Invalid Type (body field type)" in descriptions
        assert "Validation: Invalid Format/Enum/Pattern (body field format/enum/pattern)" in descriptions


class TestEstimates:
    def test_zero_override_disables_type(self):
        table = estimation_table({"Performance (Basic Check)": 0})
        acc = run("get", "/users", estimates=table)
        assert S.PERFORMANCE not in types(acc)
        assert S.PERFORMANCE.value not in acc.legend

    def test_override_changes_hours(self):
        table = estimation_table({"Happy Path": 2.0})
        acc = run("get", "/users", estimates=table)
        assert acc.suggestions[0].estimated_hours == 2.0
        assert ESTIMATED_HOURS[S.HAPPY_PATH] == 0.75

    def test_legend_first_seen(self):
        acc = run("get", "/users")
        assert list(acc.legend) == [S.HAPPY_PATH.value, S.SECURITY_HEADERS.value, S.PERFORMANCE.value]
        assert acc.legend["Happy Path"] == "Estimated effort: 0,75h. Basic check for happy path."

    def test_legend_entry_format(self):
        assert legend_entry(S.MALFORMED_BODY, 0.3) == "Estimated effort: 0,30h. Basic check for validation: malformed body."


class TestLocalizedText:
    def test_labels(self):
        assert type_label(S.HAPPY_PATH) == "Camino Feliz"
        assert type_label(S.DELETE_VERIFY) == "DELETE: Verificar Inaccesibilidad"

    def test_descriptions_include_verb(self):
        assert type_description(S.HAPPY_PATH, "get").startswith("[GET]")

    def test_every_type_is_covered(self):
        for t in S:
            assert t in ESTIMATED_HOURS
            assert type_label(t) != "Descripción no disponible"
