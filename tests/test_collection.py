import uuid
from pathlib import Path

from api_test_planner.generator.analyzer import analyze_openapi
from api_test_planner.generator.collection import POSTMAN_SCHEMA, build_collection, postman_path
from api_test_planner.models import (
    AnalysisResult,
    AuthDescriptor,
    BodyMode,
    Folder,
    KeyValue,
    RequestBody,
    RequestDescriptor,
)

FIXTURES = Path(__file__).parent / "fixtures"


def fixed_ids():
    return uuid.UUID(int=7)


def items_by_name(collection):
    return {item["name"]: item for folder in collection["item"] for item in folder["item"]}


class TestPostmanPath:
    def test_converts_templated_segments(self):
        assert postman_path("/users/{id}/orders/{orderId}") == ["users", ":id", "orders", ":orderId"]

    def test_plain_path(self):
        assert postman_path("/pets") == ["pets"]


class TestPetstoreCollection:
    def setup_method(self):
        self.result = analyze_openapi(FIXTURES / "petstore.yaml")
        self.collection = build_collection(self.result, id_factory=fixed_ids)
        self.items = items_by_name(self.collection)

    def test_info(self):
        info = self.collection["info"]
        assert info["name"] == "Swagger Petstore (petstore.yaml)"
        assert info["schema"] == POSTMAN_SCHEMA
        assert info["_postman_id"] == str(uuid.UUID(int=7))

    def test_folders(self):
        assert [f["name"] for f in self.collection["item"]] == ["Pets"]
        assert self.collection["item"][0]["description"] == "Requests for path: /pets"

    def test_variables(self):
        variables = {v["key"]: v["value"] for v in self.collection["variable"]}
        assert variables["baseUrl"] == "https://api.example.com/"
        assert variables["nonExistentId"] == "id-does-not-exist-999"

    def test_path_variable_url(self):
        url = self.items["Info for a specific pet"]["request"]["url"]
        assert url["raw"] == "{{baseUrl}}pets/:petId"
        assert url["host"] == ["{{baseUrl}}"]
        assert url["path"] == ["pets", ":petId"]
        assert url["variable"][0]["key"] == "petId"
        assert url["variable"][0]["value"] == "{{resourceId}}"

    def test_optional_query_disabled(self):
        query = self.items["List all pets"]["request"]["url"]["query"]
        assert query == [
            {
                "key": "limit",
                "value": "100",
                "description": "How many items to return at one time",
                "disabled": True,
            }
        ]

    def test_api_key_auth_and_raw_body(self):
        request = self.items["Create a pet"]["request"]
        assert request["method"] == "POST"
        assert request["auth"]["type"] == "apikey"
        assert {e["key"]: e["value"] for e in request["auth"]["apikey"]} == {
            "key": "X-API-Key",
            "value": "{{apiKey}}",
            "in": "header",
        }
        assert request["body"]["mode"] == "raw"
        assert request["body"]["options"] == {"raw": {"language": "json"}}

    def test_noauth(self):
        assert self.items["List all pets"]["request"]["auth"] == {"type": "noauth"}

    def test_test_script(self):
        script = self.items["Create a pet"]["event"][0]["script"]
        assert script["type"] == "text/javascript"
        lines = script["exec"]
        assert "let expectedStatusCode = 201;" in lines
        assert "// - Validation: Required Missing (body field: name)" in lines
        assert lines[-1] == "// - Performance (Basic Check)"

    def test_delete_expects_204(self):
        lines = self.items["DELETE /pets/{petId}"]["event"][0]["script"]["exec"]
        assert "let expectedStatusCode = 204;" in lines
        assert "// - DELETE: Idempotency Check" in lines


class TestFormBodies:
    def _collection(self, body):
        request = RequestDescriptor(
            operation_id="upload",
            name="upload",
            method="POST",
            path="/files",
            body=body,
            auth=AuthDescriptor(type="noauth"),
        )
        result = AnalysisResult(title="T", base_url="{{baseUrl}}", folders=[Folder(name="Files", requests=[request])])
        return build_collection(result, id_factory=fixed_ids)["item"][0]["item"][0]["request"]

    def test_formdata_file_field(self):
        body = RequestBody(
            mode=BodyMode.FORMDATA,
            content_type="multipart/form-data",
            fields=[KeyValue(key="file", type="file"), KeyValue(key="caption", value="string")],
            file_fields=["file"],
        )
        request = self._collection(body)
        assert request["body"]["mode"] == "formdata"
        file_field, caption = request["body"]["formdata"]
        assert file_field["type"] == "file"
        assert file_field["src"] == []
        assert caption == {"key": "caption", "value": "string", "type": "text", "description": ""}

    def test_urlencoded(self):
        body = RequestBody(
            mode=BodyMode.URLENCODED,
            content_type="application/x-www-form-urlencoded",
            fields=[KeyValue(key="user", value="string")],
        )
        request = self._collection(body)
        assert request["body"] == {
            "mode": "urlencoded",
            "urlencoded": [{"key": "user", "value": "string", "type": "text", "description": ""}],
        }

    def test_no_body_key_without_body(self):
        assert "body" not in self._collection(None)

    def test_custom_base_url_variable(self):
        request = RequestDescriptor(operation_id="a", name="a", method="GET", path="/a")
        result = AnalysisResult(title="T", base_url="x", folders=[Folder(name="A", requests=[request])])
        collection = build_collection(result, base_url_var="{{host}}", id_factory=fixed_ids)
        url = collection["item"][0]["item"][0]["request"]["url"]
        assert url["raw"] == "{{host}}a"
        assert "auth" not in collection["item"][0]["item"][0]["request"]
