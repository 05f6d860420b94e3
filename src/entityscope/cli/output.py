"""Console rendering and logging setup for the command line."""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from entityscope.models import DiscoveryResult, MutationKind

console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str = "WARNING") -> None:
    """Route ``entityscope`` log records through a rich handler on stderr.

    Safe to call repeatedly; the previous handler is replaced.
    """
    logger = logging.getLogger("entityscope")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False


def render_entities(result: DiscoveryResult, source: str) -> None:
    if not result.entities:
        console.print(f"[yellow]No entities discovered in {source}[/yellow]")
        return

    table = Table(title=f"Entities in {source}")
    table.add_column("Entity", style="bold cyan")
    table.add_column("Key")
    table.add_column("List query")
    table.add_column("Selector")
    table.add_column("Mutations")
    table.add_column("Filter")
    table.add_column("Pagination")
    table.add_column("Translator")

    for entity in result.entities:
        kinds = [kind.value for kind in MutationKind if entity.mutation(kind) is not None]
        selector = entity.list_query.selector_path or "-"
        if entity.list_query.item_path:
            selector = f"{selector} -> {entity.list_query.item_path}"
        table.add_row(
            entity.name,
            f"{entity.key_field}: {entity.key_field_type}",
            entity.list_query.operation_name,
            selector,
            ", ".join(kinds) or "-",
            _style(entity.filter_capabilities.filter_style),
            f"{entity.pagination_capabilities.style.value} / {entity.pagination_response.style.value}",
            _style(entity.predicate_mapping),
        )
    console.print(table)


def render_plans(rows: list[dict[str, Any]]) -> None:
    table = Table(title="Infinite queries and translators")
    table.add_column("Entity", style="bold cyan")
    table.add_column("Operation")
    table.add_column("Initial")
    table.add_column("Next page")
    table.add_column("Translator")

    for row in rows:
        plan = row["plan"]
        if "expression" in plan:
            initial = repr(plan.get("initial_page_param"))
            next_page = plan["expression"]
        else:
            initial = "-"
            next_page = f"[dim]{plan['reason']}[/dim]"
        translator = row.get("translator")
        table.add_row(
            row["entity"],
            row["operation"],
            initial,
            next_page,
            translator["style"] if translator else "-",
        )
    console.print(table)


def render_error(message: str) -> None:
    err_console.print(Panel(message, title="Error", border_style="red"))


def _style(value: Any) -> str:
    return value.value if value is not None else "-"


__all__ = [
    "configure_logging",
    "console",
    "render_entities",
    "render_error",
    "render_plans",
]
