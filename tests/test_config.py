"""Tests for settings and override loading."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from entityscope.config import (
    CollectionOverride,
    DiscoveryOverrides,
    Settings,
    load_overrides,
    load_settings,
)
from entityscope.errors import ConfigValidationError, ErrorCode
from entityscope.models import PredicateMapping, SyncMode


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ENTITYSCOPE_ARRAY_MAX_DEPTH",
        "ENTITYSCOPE_DEFAULT_PAGE_SIZE",
        "ENTITYSCOPE_MAX_WORKERS",
        "ENTITYSCOPE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self) -> None:
        settings = load_settings()

        assert settings.array_max_depth == 3
        assert settings.default_page_size == 20
        assert settings.max_workers == 1
        assert settings.log_level == "WARNING"

    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("array_max_depth: 5\nlog_level: debug\n")

        settings = load_settings(path)

        assert settings.array_max_depth == 5
        assert settings.log_level == "DEBUG"

    def test_env_beats_file(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("max_workers: 2\n")
        monkeypatch.setenv("ENTITYSCOPE_MAX_WORKERS", "8")

        assert load_settings(path).max_workers == 8

    def test_non_integer_env(self, monkeypatch) -> None:
        monkeypatch.setenv("ENTITYSCOPE_DEFAULT_PAGE_SIZE", "lots")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings()

        assert exc_info.value.field == "default_page_size"

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(tmp_path / "nope.yaml")

        assert exc_info.value.code is ErrorCode.CONFIG_NOT_FOUND

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("array_max_depth: [unclosed\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(path)

        assert "Invalid YAML" in exc_info.value.message

    def test_wrong_type_in_file(self, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("max_workers: many\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(path)

        assert exc_info.value.field == "max_workers"

    def test_file_must_be_mapping(self, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigValidationError):
            load_settings(path)

    @pytest.mark.parametrize("field", ["array_max_depth", "default_page_size", "max_workers"])
    def test_values_must_be_positive(self, field) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            Settings(**{field: 0})

        assert exc_info.value.field == field

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            Settings(log_level="LOUD")

        assert "Invalid log level" in exc_info.value.message


class TestOverrides:
    def test_none_is_empty(self) -> None:
        assert load_overrides(None) == DiscoveryOverrides()

    def test_camel_case_keys(self) -> None:
        overrides = load_overrides(
            {
                "collections": {
                    "Pet": {
                        "keyField": "petId",
                        "selectorPath": "data.items",
                        "syncMode": "on-demand",
                        "predicateMapping": "rest-simple",
                    }
                },
                "queries": {"listPets": {"nextPageParamPath": "meta.next", "pageSize": 50}},
            }
        )

        assert overrides.collection("Pet") == CollectionOverride(
            key_field="petId",
            selector_path="data.items",
            sync_mode=SyncMode.ON_DEMAND,
            predicate_mapping=PredicateMapping.REST_SIMPLE,
        )
        assert overrides.query("listPets").page_size == 50
        assert overrides.query("listPets").next_page_param_path == "meta.next"

    def test_snake_case_keys(self) -> None:
        overrides = load_overrides({"collections": {"Pet": {"key_field": "petId"}}})

        assert overrides.collection("Pet").key_field == "petId"

    def test_unknown_lookup_returns_none(self) -> None:
        overrides = load_overrides({})

        assert overrides.collection("Pet") is None
        assert overrides.query("listPets") is None

    def test_initial_page_param_presence(self) -> None:
        overrides = load_overrides(
            {"queries": {"a": {"initialPageParam": None}, "b": {"pageSize": 10}}}
        )

        assert overrides.query("a").has_initial_page_param
        assert not overrides.query("b").has_initial_page_param

    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "overrides.yaml"
        path.write_text("collections:\n  Pet:\n    keyField: petId\n")

        assert load_overrides(path).collection("Pet").key_field == "petId"

    def test_empty_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "overrides.yaml"
        path.write_text("")

        assert load_overrides(str(path)) == DiscoveryOverrides()

    def test_unknown_key_is_rejected(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            load_overrides({"collections": {"Pet": {"keyFeild": "id"}}})

        assert exc_info.value.field == "collections.Pet.keyFeild"

    def test_bad_enum_value_is_rejected(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            load_overrides({"collections": {"Pet": {"syncMode": "sometimes"}}})

        assert exc_info.value.field == "collections.Pet.syncMode"

    def test_page_size_must_be_positive(self) -> None:
        with pytest.raises(ConfigValidationError):
            load_overrides({"queries": {"listPets": {"pageSize": 0}}})

    def test_top_level_must_be_mapping(self, tmp_path) -> None:
        path = tmp_path / "overrides.yaml"
        path.write_text("- Pet\n")

        with pytest.raises(ConfigValidationError):
            load_overrides(path)

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "overrides.yaml"
        path.write_text("collections: [unclosed\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_overrides(path)

        assert "Invalid YAML" in exc_info.value.message

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            load_overrides(tmp_path / "missing.yaml")

        assert exc_info.value.code is ErrorCode.CONFIG_NOT_FOUND

    def test_overrides_are_frozen(self) -> None:
        override = load_overrides({"collections": {"Pet": {"keyField": "id"}}}).collection("Pet")

        with pytest.raises(ValidationError):
            override.key_field = "other"
