"""Discovery over OpenAPI documents."""

from __future__ import annotations

from typing import Any

import pytest

from entityscope import (
    DiscoveryOverrides,
    Discoverer,
    OpenAPIAdapter,
    Settings,
    discover,
    load_overrides,
)
from entityscope.models import (
    FilterStyle,
    Mutation,
    MutationKind,
    PaginationStyle,
    PredicateMapping,
    ResponsePaginationStyle,
    SyncMode,
)

PET_REF = {"$ref": "#/components/schemas/Pet"}
PET = {"type": "object", "properties": {"id": {"type": "integer"}, "name": {"type": "string"}}}
NAMELESS = {"type": "object", "properties": {"name": {"type": "string"}}}


def list_endpoint(response: dict[str, Any], *params: str, operation_id: str | None = None) -> dict:
    operation: dict[str, Any] = {
        "parameters": [{"name": p, "in": "query", "schema": {"type": "string"}} for p in params],
        "responses": {
            "200": {"description": "ok", "content": {"application/json": {"schema": response}}}
        },
    }
    if operation_id:
        operation["operationId"] = operation_id
    return {"get": operation}


class TestPetstore:
    """The canonical petstore document."""

    @pytest.fixture
    def pet(self, petstore_adapter):
        result = discover(petstore_adapter)
        return result.get("Pet")

    def test_single_entity(self, petstore_adapter) -> None:
        result = discover(petstore_adapter)

        assert result.entity_names == ["Pet"]
        assert result.warnings == ()

    def test_key_and_list_query(self, pet) -> None:
        assert pet.key_field == "id"
        assert pet.key_field_type == "string"
        assert pet.list_query.operation_name == "listPets"
        assert pet.list_query.selector_path == "data"
        assert pet.list_query.item_path is None
        assert pet.list_query.params_type_name == "ListPetsParams"
        assert pet.list_query.query_key_tokens == ("Pet",)

    def test_mutations(self, pet) -> None:
        assert pet.mutations == (
            Mutation(MutationKind.INSERT, "createPet", "CreatePetInput"),
            Mutation(MutationKind.UPDATE, "updatePet", "UpdatePetInput", "petId"),
            Mutation(MutationKind.DELETE, "deletePet", None, "petId"),
        )

    def test_capabilities(self, pet) -> None:
        assert pet.filter_capabilities.filter_style is FilterStyle.REST_SIMPLE
        assert pet.filter_capabilities.filter_params == ("price_gte",)
        assert pet.sort_capabilities.sort_param_name == "sort"
        assert pet.pagination_capabilities.style is PaginationStyle.OFFSET
        assert pet.predicate_mapping is PredicateMapping.REST_SIMPLE

    def test_response_pagination(self, pet) -> None:
        assert pet.pagination_response.style is ResponsePaginationStyle.OFFSET
        assert pet.pagination_response.total_path == ("total",)

    def test_no_sync_mode_without_override(self, pet) -> None:
        assert pet.sync_mode is None


class TestFatalAndSkipped:
    def test_no_paths_is_fatal(self, make_openapi) -> None:
        result = discover(OpenAPIAdapter(make_openapi({})))

        assert result.entities == ()
        assert result.warnings == ("OpenAPI document has no paths - no entities discovered",)

    def test_missing_key_skips_entity_with_one_warning(self, make_openapi) -> None:
        document = make_openapi(
            {"/tags": list_endpoint({"type": "array", "items": {"$ref": "#/components/schemas/Tag"}})},
            {"Tag": NAMELESS},
        )

        result = discover(OpenAPIAdapter(document))

        assert result.entities == ()
        assert result.warnings == (
            "Could not find key field for entity Tag - skipping collection generation",
        )

    def test_untyped_items_warn(self, make_openapi) -> None:
        document = make_openapi(
            {"/things": list_endpoint({"type": "array", "items": {}}, operation_id="listThings")}
        )

        result = discover(OpenAPIAdapter(document))

        assert result.entities == ()
        assert len(result.warnings) == 1
        assert "listThings" in result.warnings[0]
        assert "selectorPath" in result.warnings[0]

    def test_scalar_items_are_silent(self, make_openapi) -> None:
        document = make_openapi(
            {"/tags": list_endpoint({"type": "array", "items": {"type": "string"}})}
        )

        result = discover(OpenAPIAdapter(document))

        assert result.entities == ()
        assert result.warnings == ()

    def test_missing_key_warning_names_schema_type(self, make_openapi) -> None:
        items = {"type": "array", "items": {"$ref": "#/components/schemas/pet_record"}}
        document = make_openapi({"/records": list_endpoint(items)}, {"pet_record": NAMELESS})

        result = discover(OpenAPIAdapter(document))

        assert result.warnings == (
            "Could not find key field for entity PetRecord (type pet_record) - "
            "skipping collection generation",
        )

    def test_identical_warnings_are_reported_once(self, make_openapi) -> None:
        tag_list = {"type": "array", "items": {"$ref": "#/components/schemas/Tag"}}
        document = make_openapi(
            {"/tags": list_endpoint(tag_list), "/labels": list_endpoint(tag_list)},
            {"Tag": NAMELESS},
        )

        result = discover(OpenAPIAdapter(document))

        assert len(result.warnings) == 1

    def test_non_list_operations_are_ignored(self, make_openapi) -> None:
        document = make_openapi(
            {
                "/health": list_endpoint({"type": "object", "properties": {"ok": {"type": "boolean"}}}),
                "/pets/{id}": list_endpoint(PET),
            }
        )

        result = discover(OpenAPIAdapter(document))

        assert result.entities == ()
        assert result.warnings == ()

    def test_first_list_query_per_type_wins(self, make_openapi) -> None:
        pets = {"type": "array", "items": PET_REF}
        document = make_openapi(
            {
                "/pets": list_endpoint(pets, operation_id="listPets"),
                "/pets/search": list_endpoint(pets, operation_id="searchPets"),
            },
            {"Pet": PET},
        )

        result = discover(OpenAPIAdapter(document))

        assert result.entity_names == ["Pet"]
        assert result.entities[0].list_query.operation_name == "listPets"


class TestResponseShapes:
    def test_bare_array(self, make_openapi) -> None:
        document = make_openapi(
            {"/pets": list_endpoint({"type": "array", "items": PET_REF})}, {"Pet": PET}
        )

        pet = discover(OpenAPIAdapter(document)).entities[0]

        assert pet.list_query.selector_path is None
        assert pet.key_field_type == "number"
        assert pet.pagination_response.style is ResponsePaginationStyle.NONE

    def test_nested_envelope_with_cursor(self, make_openapi) -> None:
        response = {
            "type": "object",
            "properties": {
                "response": {
                    "type": "object",
                    "properties": {
                        "items": {"type": "array", "items": PET_REF},
                        "nextCursor": {"type": "string"},
                    },
                }
            },
        }
        document = make_openapi({"/pets": list_endpoint(response, "cursor")}, {"Pet": PET})

        pet = discover(OpenAPIAdapter(document)).entities[0]

        assert pet.list_query.selector_path == "response.items"
        assert pet.pagination_response.style is ResponsePaginationStyle.CURSOR
        assert pet.pagination_response.next_cursor_path == ("response", "nextCursor")

    def test_root_signal_when_parent_has_none(self, make_openapi) -> None:
        response = {
            "type": "object",
            "properties": {
                "data": {"type": "object", "properties": {"rows": {"type": "array", "items": PET_REF}}},
                "total": {"type": "integer"},
            },
        }
        document = make_openapi({"/pets": list_endpoint(response, "limit", "offset")}, {"Pet": PET})

        pet = discover(OpenAPIAdapter(document)).entities[0]

        assert pet.list_query.selector_path == "data.rows"
        assert pet.pagination_response.total_path == ("total",)

    def test_ref_to_all_of_item(self, make_openapi) -> None:
        schemas = {
            "NewPet": {
                "type": "object",
                "required": ["name"],
                "properties": {"name": {"type": "string"}, "tag": {"type": "string"}},
            },
            "Pet": {
                "allOf": [
                    {"$ref": "#/components/schemas/NewPet"},
                    {"type": "object", "required": ["id"], "properties": {"id": {"type": "integer"}}},
                ]
            },
        }
        document = make_openapi({"/pets": list_endpoint({"type": "array", "items": PET_REF})}, schemas)

        result = discover(OpenAPIAdapter(document))

        assert result.entity_names == ["Pet"]
        assert result.entities[0].key_field == "id"
        assert result.entities[0].key_field_type == "number"
        assert result.warnings == ()

    def test_self_referencing_all_of_terminates(self, make_openapi) -> None:
        schemas = {
            "Node": {
                "allOf": [
                    {"$ref": "#/components/schemas/Node"},
                    {"properties": {"id": {"type": "string"}}},
                ]
            }
        }
        items = {"type": "array", "items": {"$ref": "#/components/schemas/Node"}}
        document = make_openapi({"/nodes": list_endpoint(items)}, schemas)

        assert discover(OpenAPIAdapter(document)).entity_names == ["Node"]

    def test_multiple_arrays_warn_once(self, make_openapi) -> None:
        response = {
            "type": "object",
            "properties": {
                "data": {"type": "array", "items": PET_REF},
                "included": {"type": "array", "items": PET_REF},
            },
        }
        document = make_openapi({"/pets": list_endpoint(response)}, {"Pet": PET})

        result = discover(OpenAPIAdapter(document))

        assert result.entities[0].list_query.selector_path == "data"
        assert len(result.warnings) == 1
        assert "data, included" in result.warnings[0]


class TestEntityNaming:
    def test_title_wins(self, make_openapi) -> None:
        item = {**PET, "title": "pet record"}
        document = make_openapi({"/pets": list_endpoint({"type": "array", "items": item})})

        assert discover(OpenAPIAdapter(document)).entity_names == ["PetRecord"]

    def test_name_from_path(self, make_openapi) -> None:
        document = make_openapi(
            {"/api/categories": list_endpoint({"type": "array", "items": PET})}
        )

        entity = discover(OpenAPIAdapter(document)).entities[0]

        assert entity.name == "Category"
        assert entity.type_name == "Category"

    def test_synthesized_operation_id(self, make_openapi) -> None:
        document = make_openapi(
            {"/pet-owners": list_endpoint({"type": "array", "items": PET}, "limit")}
        )

        entity = discover(OpenAPIAdapter(document)).entities[0]

        assert entity.list_query.operation_name == "getPetOwners"
        assert entity.list_query.params_type_name == "GetPetOwnersParams"

    def test_entity_specific_key_candidate(self, make_openapi) -> None:
        item = {"type": "object", "properties": {"ownerId": {"type": "integer"}}}
        document = make_openapi({"/owners": list_endpoint({"type": "array", "items": item})})

        owner = discover(OpenAPIAdapter(document)).entities[0]

        assert owner.key_field == "ownerId"


class TestOverrides:
    def test_key_field_override(self, petstore_adapter) -> None:
        overrides = load_overrides({"collections": {"Pet": {"keyField": "name"}}})

        pet = discover(petstore_adapter, overrides).entities[0]

        assert pet.key_field == "name"

    def test_missing_key_field_override_warns(self, petstore_adapter) -> None:
        overrides = load_overrides({"collections": {"Pet": {"keyField": "sku"}}})

        result = discover(petstore_adapter, overrides)

        assert result.entities[0].key_field == "id"
        assert result.warnings == (
            "Configured keyField 'sku' not found in entity Pet - falling back to automatic detection",
        )

    def test_selector_override_replaces_detection(self, make_openapi) -> None:
        response = {
            "type": "object",
            "properties": {
                "featured": {"type": "array", "items": PET_REF},
                "results": {"type": "array", "items": PET_REF},
            },
        }
        document = make_openapi({"/pets": list_endpoint(response)}, {"Pet": PET})
        overrides = load_overrides({"collections": {"Pet": {"selectorPath": "results"}}})

        result = discover(OpenAPIAdapter(document), overrides)

        assert result.entities[0].list_query.selector_path == "results"
        assert result.warnings == ()

    def test_invalid_selector_override_falls_back(self, petstore_adapter) -> None:
        overrides = load_overrides({"collections": {"Pet": {"selectorPath": "meta.items"}}})

        result = discover(petstore_adapter, overrides)

        assert result.entities[0].list_query.selector_path == "data"
        assert len(result.warnings) == 1
        assert "selectorPath 'meta.items'" in result.warnings[0]
        assert "listPets" in result.warnings[0]

    def test_unsupported_predicate_mapping(self, petstore_adapter) -> None:
        overrides = load_overrides({"collections": {"Pet": {"predicateMapping": "hasura"}}})

        result = discover(petstore_adapter, overrides)

        assert result.entities[0].predicate_mapping is PredicateMapping.REST_SIMPLE
        assert len(result.warnings) == 1
        assert "predicateMapping 'hasura'" in result.warnings[0]

    def test_supported_predicate_mapping(self, petstore_adapter) -> None:
        overrides = load_overrides({"collections": {"Pet": {"predicateMapping": "jsonapi"}}})

        pet = discover(petstore_adapter, overrides).entities[0]

        assert pet.predicate_mapping is PredicateMapping.JSONAPI

    def test_on_demand_kept_when_translatable(self, petstore_adapter) -> None:
        overrides = load_overrides({"collections": {"Pet": {"syncMode": "on-demand"}}})

        result = discover(petstore_adapter, overrides)

        assert result.entities[0].sync_mode is SyncMode.ON_DEMAND
        assert result.warnings == ()

    def test_on_demand_downgraded_without_filters(self, make_openapi) -> None:
        document = make_openapi({"/pets": list_endpoint({"type": "array", "items": PET_REF})}, {"Pet": PET})
        overrides = load_overrides({"collections": {"Pet": {"syncMode": "on-demand"}}})

        result = discover(OpenAPIAdapter(document), overrides)

        assert result.entities[0].sync_mode is SyncMode.FULL
        assert len(result.warnings) == 1
        assert "on-demand" in result.warnings[0]

    def test_overrides_for_unknown_entities_are_ignored(self, petstore_adapter) -> None:
        overrides = DiscoveryOverrides.model_validate({"collections": {"Ghost": {"keyField": "x"}}})

        result = discover(petstore_adapter, overrides)

        assert result.entity_names == ["Pet"]
        assert result.warnings == ()


class TestDeterminism:
    def test_repeated_runs_serialize_identically(self, petstore) -> None:
        first = discover(OpenAPIAdapter(petstore)).to_json()
        second = discover(OpenAPIAdapter(petstore)).to_json()

        assert first == second

    def test_thread_pool_matches_sequential(self, make_openapi) -> None:
        paths = {
            f"/things{i}": list_endpoint(
                {"type": "array", "items": {**PET, "title": f"Thing{i}"}}, "limit", "offset"
            )
            for i in range(8)
        }
        adapter = OpenAPIAdapter(make_openapi(paths))

        sequential = Discoverer(adapter).discover()
        pooled = Discoverer(adapter, max_workers=4).discover()

        assert pooled == sequential
        assert pooled.entity_names == [f"Thing{i}" for i in range(8)]

    def test_array_depth_setting(self, make_openapi) -> None:
        response = {
            "type": "object",
            "properties": {
                "a": {
                    "type": "object",
                    "properties": {"b": {"type": "object", "properties": {"c": {"type": "array", "items": PET_REF}}}},
                }
            },
        }
        document = make_openapi({"/pets": list_endpoint(response)}, {"Pet": PET})

        shallow = discover(OpenAPIAdapter(document), settings=Settings(array_max_depth=2))
        deep = discover(OpenAPIAdapter(document), settings=Settings(array_max_depth=3))

        assert shallow.entities == ()
        assert deep.entity_names == ["Pet"]
