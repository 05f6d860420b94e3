"""Tests for the command line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from entityscope.adapters import GraphQLAdapter, OpenAPIAdapter
from entityscope.cli import cli, load_adapter
from entityscope.cli.commands import EXIT_CONFIG_ERROR, EXIT_NO_ENTITIES, EXIT_OK


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def petstore_file(tmp_path, petstore):
    path = tmp_path / "petstore.json"
    path.write_text(json.dumps(petstore))
    return path


@pytest.fixture
def schema_file(tmp_path, pets_sdl):
    path = tmp_path / "schema.graphql"
    path.write_text(pets_sdl)
    return path


class TestLoadAdapter:
    def test_graphql_by_suffix(self, schema_file) -> None:
        assert isinstance(load_adapter(schema_file), GraphQLAdapter)

    def test_openapi_by_default(self, petstore_file) -> None:
        assert isinstance(load_adapter(petstore_file), OpenAPIAdapter)

    def test_yaml_openapi(self, tmp_path) -> None:
        path = tmp_path / "api.yaml"
        path.write_text("openapi: 3.0.3\ninfo: {title: t, version: '1'}\npaths: {}\n")

        adapter = load_adapter(path)

        assert isinstance(adapter, OpenAPIAdapter)
        assert not adapter.has_query_root()

    def test_documents(self, tmp_path, schema_file) -> None:
        doc = tmp_path / "ops.graphql"
        doc.write_text("query AllPets { pets { id } }")

        adapter = load_adapter(schema_file, documents=(str(doc),))

        assert [q.operation_name for q in adapter.list_query_descriptors()] == ["AllPets"]


class TestDiscoverCommand:
    def test_json_output(self, runner, petstore_file) -> None:
        result = runner.invoke(cli, ["discover", str(petstore_file), "--json"])

        assert result.exit_code == EXIT_OK
        data = json.loads(result.output)
        assert [e["name"] for e in data["entities"]] == ["Pet"]
        assert data["entities"][0]["list_query"]["selector_path"] == "data"
        assert data["warnings"] == []

    def test_table_output(self, runner, petstore_file) -> None:
        result = runner.invoke(cli, ["discover", str(petstore_file)])

        assert result.exit_code == EXIT_OK
        assert "Pet" in result.output

    def test_graphql_json_has_warning(self, runner, schema_file) -> None:
        result = runner.invoke(cli, ["discover", str(schema_file), "--json"])

        assert result.exit_code == EXIT_OK
        data = json.loads(result.output)
        assert [e["name"] for e in data["entities"]] == ["Pet", "User"]
        assert len(data["warnings"]) == 1

    def test_no_entities_exit_code(self, runner, tmp_path) -> None:
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"openapi": "3.0.3", "paths": {}}))

        result = runner.invoke(cli, ["discover", str(path), "--json"])

        assert result.exit_code == EXIT_NO_ENTITIES
        assert json.loads(result.output)["warnings"] == [
            "OpenAPI document has no paths - no entities discovered"
        ]

    def test_overrides_file(self, runner, petstore_file, tmp_path) -> None:
        overrides = tmp_path / "overrides.yaml"
        overrides.write_text("collections:\n  Pet:\n    keyField: name\n")

        result = runner.invoke(cli, ["discover", str(petstore_file), "-o", str(overrides), "--json"])

        assert result.exit_code == EXIT_OK
        assert json.loads(result.output)["entities"][0]["key_field"] == "name"

    def test_invalid_overrides_exit_code(self, runner, petstore_file, tmp_path) -> None:
        overrides = tmp_path / "overrides.yaml"
        overrides.write_text("collections:\n  Pet:\n    syncMode: sometimes\n")

        result = runner.invoke(cli, ["discover", str(petstore_file), "-o", str(overrides)])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_missing_overrides_file(self, runner, petstore_file, tmp_path) -> None:
        result = runner.invoke(
            cli, ["discover", str(petstore_file), "-o", str(tmp_path / "missing.yaml")]
        )

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_invalid_schema_exit_code(self, runner, tmp_path) -> None:
        path = tmp_path / "broken.graphql"
        path.write_text("type Query {")

        result = runner.invoke(cli, ["discover", str(path)])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_settings_file(self, runner, petstore_file, tmp_path) -> None:
        settings = tmp_path / "settings.yaml"
        settings.write_text("array_max_depth: 0\n")

        result = runner.invoke(cli, ["discover", str(petstore_file), "--settings", str(settings)])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_malformed_settings_file(self, runner, schema_file, tmp_path) -> None:
        settings = tmp_path / "settings.yaml"
        settings.write_text("a: [unclosed\n")

        result = runner.invoke(cli, ["discover", str(schema_file), "--settings", str(settings)])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_explicit_log_level(self, runner, petstore_file) -> None:
        result = runner.invoke(cli, ["--log-level", "error", "discover", str(petstore_file)])

        assert result.exit_code == EXIT_OK


class TestPlanCommand:
    def test_json_plans(self, runner, petstore_file) -> None:
        result = runner.invoke(cli, ["plan", str(petstore_file), "--json"])

        assert result.exit_code == EXIT_OK
        data = json.loads(result.output)
        row = data["plans"][0]
        assert row["entity"] == "Pet"
        assert row["operation"] == "listPets"
        assert row["plan"]["expression"].endswith("lastPage.total ? (lastPageParam ?? 0) + 20 : undefined")
        assert row["translator"]["style"] == "rest-simple"

    def test_uninferable_plan_adds_warning(self, runner, schema_file) -> None:
        result = runner.invoke(cli, ["plan", str(schema_file), "--json"])

        data = json.loads(result.output)
        pets = next(row for row in data["plans"] if row["entity"] == "Pet")
        users = next(row for row in data["plans"] if row["entity"] == "User")
        assert "reason" in pets["plan"]
        assert "translator" not in users
        assert any('Operation "pets"' in w for w in data["warnings"])

    def test_page_size_setting(self, runner, petstore_file, tmp_path) -> None:
        settings = tmp_path / "settings.yaml"
        settings.write_text("default_page_size: 50\n")

        result = runner.invoke(
            cli, ["plan", str(petstore_file), "--settings", str(settings), "--json"]
        )

        assert "+ 50" in json.loads(result.output)["plans"][0]["plan"]["expression"]

    def test_table_output(self, runner, petstore_file) -> None:
        result = runner.invoke(cli, ["plan", str(petstore_file)])

        assert result.exit_code == EXIT_OK
        assert "Pet" in result.output
