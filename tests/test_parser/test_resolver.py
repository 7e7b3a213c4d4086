"""Tests for mcpgen.parser.resolver."""

from __future__ import annotations

from typing import Any

import pytest

from mcpgen.exceptions import DocumentError
from mcpgen.parser.resolver import dereference, resolve_pointer


class TestResolvePointer:
    def test_follows_nested_path(self) -> None:
        root = {"components": {"schemas": {"Pet": {"type": "object"}}}}
        assert resolve_pointer("#/components/schemas/Pet", root) == {"type": "object"}

    def test_unescapes_segments(self) -> None:
        root = {"paths": {"/a/b": {"x~y": 1}}}
        assert resolve_pointer("#/paths/~1a~1b/x~0y", root) == 1

    def test_indexes_lists(self) -> None:
        root = {"items": [{"v": 0}, {"v": 1}]}
        assert resolve_pointer("#/items/1/v", root) == 1

    def test_external_ref_raises(self) -> None:
        with pytest.raises(DocumentError, match="External"):
            resolve_pointer("other.yaml#/Pet", {})

    def test_dangling_ref_raises(self) -> None:
        with pytest.raises(DocumentError, match="'Missing' not found"):
            resolve_pointer("#/components/schemas/Missing", {"components": {"schemas": {}}})


class TestDereference:
    def test_inlines_request_body_schema(self, petstore_raw: dict[str, Any]) -> None:
        doc = dereference(petstore_raw)
        schema = doc["paths"]["/pets"]["post"]["requestBody"]["content"]["application/json"]["schema"]
        assert schema["type"] == "object"
        assert schema["required"] == ["name"]

    def test_does_not_mutate_input(self, petstore_raw: dict[str, Any]) -> None:
        dereference(petstore_raw)
        body = petstore_raw["paths"]["/pets"]["post"]["requestBody"]
        assert body["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/NewPet"}

    def test_chained_refs(self) -> None:
        raw = {
            "a": {"$ref": "#/b"},
            "b": {"$ref": "#/c"},
            "c": {"type": "string"},
        }
        assert dereference(raw)["a"] == {"type": "string"}

    def test_sibling_keys_override_target(self) -> None:
        raw = {
            "components": {"schemas": {"Id": {"type": "string", "description": "shared"}}},
            "use": {"$ref": "#/components/schemas/Id", "description": "local"},
        }
        assert dereference(raw)["use"] == {"type": "string", "description": "local"}

    def test_cycle_is_left_as_ref(self) -> None:
        raw = {
            "components": {
                "schemas": {
                    "Node": {
                        "type": "object",
                        "properties": {"next": {"$ref": "#/components/schemas/Node"}},
                    }
                }
            },
            "root": {"$ref": "#/components/schemas/Node"},
        }
        doc = dereference(raw)
        assert doc["root"]["type"] == "object"
        assert doc["root"]["properties"]["next"] == {"$ref": "#/components/schemas/Node"}
        # Walking the definition itself expands the first self-reference once.
        defined = doc["components"]["schemas"]["Node"]
        assert defined["properties"]["next"]["properties"]["next"] == {
            "$ref": "#/components/schemas/Node"
        }

    def test_same_ref_in_sibling_positions(self) -> None:
        raw = {
            "defs": {"S": {"type": "string"}},
            "pair": [{"$ref": "#/defs/S"}, {"$ref": "#/defs/S"}],
        }
        assert dereference(raw)["pair"] == [{"type": "string"}, {"type": "string"}]

    def test_dangling_ref_raises(self) -> None:
        with pytest.raises(DocumentError):
            dereference({"x": {"$ref": "#/nowhere"}})
