from pathlib import Path

import pytest

from docfinder.errors import DocumentError, EndpointNotFoundError
from docfinder.parser.base import ApiDocument, PathItem
from docfinder.parser.openapi import (
    find_path_item,
    load_document,
    normalize_endpoint_path,
    parse_document,
)

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="module")
def events_doc() -> ApiDocument:
    return load_document(FIXTURES / "events.yaml")


class TestLoadDocument:
    def test_info_and_servers(self, events_doc):
        assert events_doc.openapi == "3.0.3"
        assert events_doc.info.title == "Notify API"
        assert events_doc.info.version == "1.2.0"
        assert [s.url for s in events_doc.servers] == ["https://api.example.com/v1", "http://localhost:8080"]
        assert events_doc.servers[0].description == "Production"
        assert events_doc.servers[1].description == ""

    def test_operations_keyed_by_upper_case_method(self, events_doc):
        item = events_doc.paths["/events/{event_id}"]
        assert sorted(item.operations) == ["DELETE", "GET", "PUT"]
        assert item.operations["GET"].operation_id == "getEvent"
        assert item.operations["DELETE"].deprecated is True

    def test_empty_path_item(self, events_doc):
        assert events_doc.paths["/empty"].operations == {}

    def test_parameter_refs_resolved_in_order(self, events_doc):
        params = events_doc.paths["/events/{event_id}"].operations["GET"].parameters
        assert [p.name for p in params] == ["event_id", "expand"]
        assert params[0].location == "path"
        assert params[0].required is True
        assert params[0].schema_.pattern == "^evt_[a-z0-9]+$"
        assert params[1].required is False
        assert params[1].schema_.enum == ["owner", "tags"]

    def test_schema_refs_resolved(self, events_doc):
        get = events_doc.paths["/events/{event_id}"].operations["GET"]
        event = get.responses["200"].content["application/json"].schema_
        assert event.type == ["object"]
        assert event.required == ["id", "title"]
        assert event.properties["title"].min_length == 1
        assert event.properties["title"].max_length == 200
        assert event.properties["status"].default == "draft"
        assert event.properties["legacy_code"].deprecated is True
        assert event.properties["starts_at"].nullable is True
        assert event.properties["attendees"].items.properties["email"].format == "email"

    def test_shared_ref_is_one_instance(self, events_doc):
        item = events_doc.paths["/events/{event_id}"]
        from_get = item.operations["GET"].responses["200"].content["application/json"].schema_
        from_put = item.operations["PUT"].request_body.content["application/json"].schema_
        assert from_get is from_put

    def test_recursive_schema_becomes_cycle(self, events_doc):
        get = events_doc.paths["/tree"].operations["GET"]
        category = get.responses["200"].content["application/json"].schema_
        assert category.properties["children"].items is category

    def test_response_ref_headers_and_examples(self, events_doc):
        get = events_doc.paths["/events/{event_id}"].operations["GET"]
        assert get.responses["404"].description == "Not found"
        assert get.responses["404"].content["application/json"].schema_.required == ["message"]
        headers = get.responses["200"].headers
        assert headers["X-Request-Id"].description == "Request identifier"
        assert headers["ETag"].schema_.type == ["string"]
        examples = get.responses["200"].content["application/json"].examples
        assert examples["basic"].summary == "A basic event"
        assert examples["basic"].value == {"id": "evt_1", "title": "Launch"}
        assert examples["minimal"].summary == ""

    def test_request_body_and_security(self, events_doc):
        put = events_doc.paths["/events/{event_id}"].operations["PUT"]
        assert put.request_body.required is True
        assert put.request_body.description == "Fields to update"
        assert put.security == [{"oauth": ["events.write"], "apiKey": []}]
        assert events_doc.paths["/events/{event_id}"].operations["DELETE"].security is None

    def test_openapi_31_json(self):
        doc = load_document(FIXTURES / "openapi31.json")
        schema = doc.paths["/scores"].operations["POST"].request_body.content["application/json"].schema_
        assert schema.type == ["number", "null"]
        assert schema.minimum == 0
        assert schema.exclusive_minimum is True
        assert schema.maximum == 100
        assert schema.exclusive_maximum is False

    def test_swagger_2_rejected(self):
        with pytest.raises(DocumentError, match="Swagger 2.0"):
            load_document(FIXTURES / "swagger2.yaml")

    def test_invalid_yaml(self, tmp_path):
        f = tmp_path / "broken.yaml"
        f.write_text("openapi: 3.0.0\npaths: [unclosed\n")
        with pytest.raises(DocumentError, match="failed to load"):
            load_document(f)


class TestParseDocument:
    def test_unresolved_ref_is_absent(self):
        doc = parse_document(
            {
                "openapi": "3.0.0",
                "paths": {
                    "/a": {
                        "get": {
                            "responses": {
                                "200": {
                                    "description": "OK",
                                    "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Nope"}}},
                                }
                            }
                        }
                    }
                },
            }
        )
        media = doc.paths["/a"].operations["GET"].responses["200"].content["application/json"]
        assert media.schema_ is None

    def test_file_ref_without_source_is_absent(self):
        doc = parse_document(
            {"openapi": "3.0.0", "paths": {"/a": {"get": {"parameters": [{"$ref": "other.yaml#/P"}]}}}}
        )
        assert doc.paths["/a"].operations["GET"].parameters == []

    def test_self_referencing_alias_does_not_loop(self):
        doc = parse_document(
            {
                "openapi": "3.0.0",
                "components": {"schemas": {"Loop": {"$ref": "#/components/schemas/Loop"}}},
                "paths": {
                    "/a": {
                        "post": {
                            "requestBody": {
                                "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Loop"}}}
                            }
                        }
                    }
                },
            }
        )
        body = doc.paths["/a"].operations["POST"].request_body
        assert body.content["application/json"].schema_ is None

    def test_non_method_keys_ignored(self):
        doc = parse_document(
            {"openapi": "3.0.0", "paths": {"/a": {"summary": "x", "parameters": [], "get": {}}}}
        )
        assert list(doc.paths["/a"].operations) == ["GET"]

    def test_numeric_status_codes_become_strings(self):
        doc = parse_document(
            {"openapi": "3.0.0", "paths": {"/a": {"get": {"responses": {200: {"description": "OK"}}}}}}
        )
        assert list(doc.paths["/a"].operations["GET"].responses) == ["200"]

    def test_missing_response_description_stays_none(self):
        doc = parse_document({"openapi": "3.0.0", "paths": {"/a": {"get": {"responses": {"204": {}}}}}})
        assert doc.paths["/a"].operations["GET"].responses["204"].description is None

    def test_parameter_schema_from_content(self):
        doc = parse_document(
            {
                "openapi": "3.0.0",
                "paths": {
                    "/a": {
                        "get": {
                            "parameters": [
                                {
                                    "name": "filter",
                                    "in": "query",
                                    "content": {"application/json": {"schema": {"type": "object"}}},
                                }
                            ]
                        }
                    }
                },
            }
        )
        assert doc.paths["/a"].operations["GET"].parameters[0].schema_.type == ["object"]

    def test_composition_members_resolved(self):
        doc = parse_document(
            {
                "openapi": "3.0.0",
                "components": {"schemas": {"Cat": {"type": "object"}, "Dog": {"type": "object"}}},
                "paths": {
                    "/pets": {
                        "post": {
                            "requestBody": {
                                "content": {
                                    "application/json": {
                                        "schema": {
                                            "oneOf": [
                                                {"$ref": "#/components/schemas/Cat"},
                                                {"$ref": "#/components/schemas/Dog"},
                                                {"$ref": "#/components/schemas/Missing"},
                                            ]
                                        }
                                    }
                                }
                            }
                        }
                    }
                },
            }
        )
        schema = doc.paths["/pets"].operations["POST"].request_body.content["application/json"].schema_
        assert len(schema.one_of) == 3
        assert schema.one_of[0].type == ["object"]
        assert schema.one_of[2] is None

    def test_no_paths(self):
        assert parse_document({"openapi": "3.0.0"}).paths is None


class TestExternalRefs:
    @pytest.fixture(scope="class")
    def split_doc(self) -> ApiDocument:
        return load_document(FIXTURES / "split" / "api.yaml")

    def _thing(self, doc):
        return doc.paths["/things/{thing_id}"].operations["GET"].responses["200"].content["application/json"].schema_

    def test_schema_from_sibling_file(self, split_doc):
        thing = self._thing(split_doc)
        assert thing.type == ["object"]
        assert thing.required == ["id"]
        assert sorted(thing.properties) == ["id", "owner", "parent", "tags"]

    def test_local_ref_inside_referenced_file(self, split_doc):
        param = split_doc.paths["/things/{thing_id}"].operations["GET"].parameters[0]
        assert param.name == "thing_id"
        assert param.schema_.format == "uuid"
        assert self._thing(split_doc).properties["tags"].items.max_length == 16

    def test_whole_file_ref(self, split_doc):
        responses = split_doc.paths["/things/{thing_id}"].operations["GET"].responses
        assert responses["404"].description == "Not found"

    def test_cycles_across_files_share_instances(self, split_doc):
        thing = self._thing(split_doc)
        assert thing.properties["parent"] is thing
        assert thing.properties["owner"].properties["things"].items is thing

    def test_missing_referenced_file(self, tmp_path):
        f = tmp_path / "api.yaml"
        f.write_text(
            "openapi: 3.0.0\n"
            "paths:\n"
            "  /a:\n"
            "    get:\n"
            "      parameters:\n"
            "        - $ref: 'nope.yaml#/P'\n"
        )
        with pytest.raises(DocumentError, match="failed to read"):
            load_document(f)

    def test_remote_ref_is_absent(self, tmp_path):
        doc = parse_document(
            {
                "openapi": "3.0.0",
                "paths": {"/a": {"get": {"parameters": [{"$ref": "https://example.com/api.yaml#/P"}]}}},
            },
            source=tmp_path / "api.yaml",
        )
        assert doc.paths["/a"].operations["GET"].parameters == []


class TestNormalizeEndpointPath:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("/events/{id}", "/events/{id}"),
            ("events/{id}", "/events/{id}"),
            ("/", "/"),
            ("", "/"),
            ("users", "/users"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_endpoint_path(raw) == expected


class TestFindPathItem:
    def test_exact_match(self, events_doc):
        item = find_path_item(events_doc, "/events/{event_id}")
        assert "GET" in item.operations

    def test_template_match_ignores_parameter_name(self, events_doc):
        item = find_path_item(events_doc, "/items/{id}")
        assert item is events_doc.paths["/items/{itemId}"]

    def test_not_found(self, events_doc):
        with pytest.raises(EndpointNotFoundError, match="endpoint not found: /nope"):
            find_path_item(events_doc, "/nope")

    def test_literal_does_not_match_template(self, events_doc):
        with pytest.raises(EndpointNotFoundError):
            find_path_item(events_doc, "/items/42")

    def test_document_without_paths(self):
        with pytest.raises(DocumentError, match="no paths"):
            find_path_item(ApiDocument(), "/a")

    def test_empty_paths(self):
        with pytest.raises(EndpointNotFoundError):
            find_path_item(ApiDocument(paths={"/b": PathItem()}), "/a")
