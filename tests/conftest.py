"""Pytest fixtures for entityscope tests."""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

import pytest

from entityscope.adapters.graphql import GraphQLAdapter
from entityscope.adapters.openapi import JSONSchemaShape, OpenAPIAdapter
from entityscope.adapters.ref_resolver import RefResolver
from entityscope.shapes import ArgumentDescriptor, TypeShape


def json_response(schema: dict[str, Any], status: str = "200") -> dict[str, Any]:
    return {status: {"description": "ok", "content": {"application/json": {"schema": schema}}}}


def query_param(name: str, type_: str = "string") -> dict[str, Any]:
    return {"name": name, "in": "query", "schema": {"type": type_}}


PET_REF = {"$ref": "#/components/schemas/Pet"}

PETSTORE: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "parameters": [
                    query_param("limit", "integer"),
                    query_param("offset", "integer"),
                    query_param("status"),
                    query_param("price_gte", "number"),
                    query_param("sort"),
                ],
                "responses": json_response(
                    {
                        "type": "object",
                        "properties": {
                            "data": {"type": "array", "items": PET_REF},
                            "total": {"type": "integer"},
                        },
                    }
                ),
            },
            "post": {
                "operationId": "createPet",
                "requestBody": {"content": {"application/json": {"schema": PET_REF}}},
                "responses": json_response(PET_REF, "201"),
            },
        },
        "/pets/{petId}": {
            "parameters": [
                {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}}
            ],
            "get": {"operationId": "getPet", "responses": json_response(PET_REF)},
            "put": {
                "operationId": "updatePet",
                "requestBody": {"content": {"application/json": {"schema": PET_REF}}},
                "responses": json_response(PET_REF),
            },
            "delete": {"operationId": "deletePet", "responses": {"204": {"description": "gone"}}},
        },
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "required": ["id", "name"],
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                },
            }
        }
    },
}


PETS_SDL = """
type Query {
  pets(where: pets_bool_exp, order_by: [pets_order_by!], limit: Int, offset: Int): [Pet!]!
  users(first: Int, after: String, last: Int, before: String): UserConnection!
  pet(id: ID!): Pet
}

type Mutation {
  createPet(name: String!): Pet
  updatePet(id: ID!, name: String): Pet
  deletePet(id: ID!): Pet
  createUser(email: String!): User
}

type Pet {
  id: ID!
  name: String!
  owner: User
}

type User {
  id: ID!
  email: String!
  pets: [Pet!]!
}

type UserEdge {
  cursor: String!
  node: User!
}

type PageInfo {
  hasNextPage: Boolean!
  endCursor: String
}

type UserConnection {
  edges: [UserEdge!]!
  nodes: [User!]!
  pageInfo: PageInfo!
  totalCount: Int!
}

input pets_bool_exp {
  _and: [pets_bool_exp!]
  _or: [pets_bool_exp!]
  name: String_comparison_exp
}

input String_comparison_exp {
  _eq: String
  _neq: String
  _in: [String!]
}

enum order_by {
  asc
  desc
}

input pets_order_by {
  name: order_by
}
"""


@pytest.fixture
def petstore() -> dict[str, Any]:
    """A fresh copy of the petstore OpenAPI document."""
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def petstore_adapter(petstore: dict[str, Any]) -> OpenAPIAdapter:
    return OpenAPIAdapter(petstore)


@pytest.fixture
def pets_sdl() -> str:
    return PETS_SDL


@pytest.fixture
def graphql_adapter() -> GraphQLAdapter:
    return GraphQLAdapter.from_sdl(PETS_SDL)


@pytest.fixture
def make_openapi() -> Callable[..., dict[str, Any]]:
    """Build a minimal OpenAPI document from paths and component schemas."""

    def _make(
        paths: dict[str, Any], schemas: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        document: dict[str, Any] = {
            "openapi": "3.0.3",
            "info": {"title": "Test", "version": "1.0.0"},
            "paths": paths,
        }
        if schemas:
            document["components"] = {"schemas": schemas}
        return document

    return _make


@pytest.fixture
def shape_of() -> Callable[..., TypeShape]:
    """Wrap an inline JSON schema (plus optional components) in a TypeShape."""

    def _shape(schema: dict[str, Any], schemas: dict[str, Any] | None = None) -> TypeShape:
        resolver = RefResolver({"components": {"schemas": schemas or {}}})
        return JSONSchemaShape(schema, resolver)

    return _shape


@pytest.fixture
def make_args(shape_of: Callable[..., TypeShape]) -> Callable[..., tuple[ArgumentDescriptor, ...]]:
    """Scalar query parameters with the given names."""

    def _args(*names: str) -> tuple[ArgumentDescriptor, ...]:
        return tuple(
            ArgumentDescriptor(name=name, required=False, shape=shape_of({"type": "string"}), location="query")
            for name in names
        )

    return _args
