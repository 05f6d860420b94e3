"""``entityscope`` command group."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from entityscope.adapters.base import SchemaAdapter
from entityscope.adapters.graphql import GraphQLAdapter
from entityscope.adapters.openapi import OpenAPIAdapter
from entityscope.cli.output import configure_logging, render_entities, render_error, render_plans
from entityscope.config.overrides import DiscoveryOverrides, load_overrides
from entityscope.config.settings import Settings, load_settings
from entityscope.discovery.discoverer import discover
from entityscope.errors import EntityScopeError
from entityscope.models import DiscoveryResult
from entityscope.planning.infinite import InfiniteQueryPlan, plan_infinite_query
from entityscope.planning.predicates import synthesize_translator

GRAPHQL_SUFFIXES = (".graphql", ".gql", ".graphqls")

EXIT_OK = 0
EXIT_NO_ENTITIES = 1
EXIT_CONFIG_ERROR = 2


def load_adapter(
    schema: str | Path, kind: str = "auto", documents: tuple[str, ...] = ()
) -> SchemaAdapter:
    """Build the adapter for ``schema``; ``auto`` picks GraphQL by file suffix."""
    path = Path(schema)
    if kind == "auto":
        kind = "graphql" if path.suffix in GRAPHQL_SUFFIXES else "openapi"
    if kind == "graphql":
        texts = [Path(d).read_text(encoding="utf-8") for d in documents]
        return GraphQLAdapter.from_file(path, texts or None)
    return OpenAPIAdapter.from_file(path)


def _common_options(func: Any) -> Any:
    func = click.option(
        "--json", "output_json", is_flag=True, help="Output results as JSON"
    )(func)
    func = click.option(
        "--settings",
        "settings_path",
        type=click.Path(dir_okay=False),
        help="YAML settings file",
    )(func)
    func = click.option(
        "--overrides",
        "-o",
        "overrides_path",
        type=click.Path(dir_okay=False),
        help="YAML overrides file",
    )(func)
    func = click.option(
        "--documents",
        "-d",
        multiple=True,
        type=click.Path(exists=True, dir_okay=False),
        help="GraphQL operation document (repeatable)",
    )(func)
    func = click.option(
        "--kind",
        type=click.Choice(["auto", "openapi", "graphql"]),
        default="auto",
        show_default=True,
        help="Schema family",
    )(func)
    func = click.argument("schema", type=click.Path(exists=True, dir_okay=False))(func)
    return func


def _run_discovery(
    ctx: click.Context,
    schema: str,
    kind: str,
    documents: tuple[str, ...],
    overrides_path: str | None,
    settings_path: str | None,
    output_json: bool,
) -> tuple[DiscoveryResult, DiscoveryOverrides, Settings]:
    explicit_level = ctx.obj.get("log_level") if ctx.obj else None
    try:
        settings = load_settings(settings_path)
        configure_logging(explicit_level or ("ERROR" if output_json else settings.log_level))
        overrides = load_overrides(overrides_path)
        adapter = load_adapter(schema, kind, documents)
    except EntityScopeError as e:
        render_error(str(e))
        raise SystemExit(EXIT_CONFIG_ERROR) from e
    return discover(adapter, overrides, settings=settings), overrides, settings


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log level (default: ENTITYSCOPE_LOG_LEVEL or WARNING)",
)
@click.version_option(package_name="entityscope")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Discover entities, capabilities and pagination plans in API schemas."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@cli.command("discover")
@_common_options
@click.pass_context
def discover_command(
    ctx: click.Context,
    schema: str,
    kind: str,
    documents: tuple[str, ...],
    overrides_path: str | None,
    settings_path: str | None,
    output_json: bool,
) -> None:
    """Discover entities in an OpenAPI document or GraphQL schema.

    Exit codes:
        0 - At least one entity discovered
        1 - No entities discovered
        2 - Configuration or schema load error

    Examples:
        entityscope discover petstore.yaml
        entityscope discover schema.graphql -d operations.graphql --json
    """
    result, _, _ = _run_discovery(
        ctx, schema, kind, documents, overrides_path, settings_path, output_json
    )

    if output_json:
        click.echo(result.to_json())
    else:
        render_entities(result, schema)

    raise SystemExit(EXIT_OK if result.entities else EXIT_NO_ENTITIES)


@cli.command("plan")
@_common_options
@click.pass_context
def plan_command(
    ctx: click.Context,
    schema: str,
    kind: str,
    documents: tuple[str, ...],
    overrides_path: str | None,
    settings_path: str | None,
    output_json: bool,
) -> None:
    """Show infinite-query plans and predicate translators per entity.

    Exit codes are the same as for ``discover``.
    """
    result, overrides, settings = _run_discovery(
        ctx, schema, kind, documents, overrides_path, settings_path, output_json
    )

    rows: list[dict[str, Any]] = []
    warnings = list(result.warnings)
    for entity in result.entities:
        operation = entity.list_query.operation_name
        plan = plan_infinite_query(
            entity,
            overrides.query(operation),
            default_page_size=settings.default_page_size,
        )
        if isinstance(plan, InfiniteQueryPlan):
            plan_data = plan.to_dict()
        else:
            plan_data = {"reason": plan.reason}
            if plan.warning:
                warnings.append(plan.warning)
        translator = synthesize_translator(entity)
        row: dict[str, Any] = {"entity": entity.name, "operation": operation, "plan": plan_data}
        if translator is not None:
            row["translator"] = translator.to_dict()
        rows.append(row)

    if output_json:
        click.echo(json.dumps({"plans": rows, "warnings": warnings}, indent=2))
    elif rows:
        render_plans(rows)
    else:
        render_entities(result, schema)

    raise SystemExit(EXIT_OK if result.entities else EXIT_NO_ENTITIES)


__all__ = ["cli", "load_adapter", "EXIT_OK", "EXIT_NO_ENTITIES", "EXIT_CONFIG_ERROR"]
