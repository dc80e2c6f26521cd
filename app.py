# app.py
from __future__ import annotations
import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from core.db import get_engine, init_db
from core.log_config import configure_logging
from core.settings import Settings, load_settings
from search_select import (
    ConfigError,
    SearchProfile,
    SearchSelect,
    SelectionState,
    SelectorView,
    SqlQueryBackend,
    get_profile,
    student_profile,
)

logger = logging.getLogger(__name__)
console = Console()

app = typer.Typer(help="Coaching center search & select", no_args_is_help=True)

EXIT_NO_CONTEXT = 1
EXIT_QUERY_ERROR = 2
EXIT_SCHEMA_FAILED = 3
EXIT_CONFIG_ERROR = 4


@app.callback()
def main_options(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Path to settings.yaml"),
) -> None:
    try:
        settings = load_settings(config)
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=EXIT_CONFIG_ERROR)
    configure_logging(settings.logging.level)
    ctx.obj = settings


@app.command("init-db")
def init_db_command(
    ctx: typer.Context,
    seed: bool = typer.Option(True, "--seed/--no-seed", help="Load demo coaching data"),
) -> None:
    """Install all schemas (idempotent), optionally with demo data."""
    settings: Settings = ctx.obj
    engine = get_engine(settings.db.url)
    failed = init_db(engine, seed=seed)
    if failed:
        console.print(f"[red]Schema installers failed: {', '.join(failed)}[/red]")
        raise typer.Exit(code=EXIT_SCHEMA_FAILED)
    console.print(f"Database ready at {engine.url}")


def _profile_for(kind: str, include_inactive: bool) -> SearchProfile:
    if kind == "student":
        return student_profile(enrolled_only=not include_inactive)
    try:
        return get_profile(kind)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="KIND")


async def _run_search(picker: SearchSelect, term: str) -> SelectorView:
    async with picker:
        picker.type(term)
        await picker.wait_idle()
        return picker.view()


def _render(view: SelectorView) -> None:
    table = Table(title=f"{view.label}: \"{view.term}\"")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Secondary")
    table.add_column("Scope")
    table.add_column("Badge")
    table.add_column("Detail")
    table.add_column("Image")
    for i, c in enumerate(view.candidates, start=1):
        table.add_row(
            str(i),
            c.display_name,
            c.secondary_label or "",
            c.scope_label or "",
            c.auxiliary_badge or "",
            c.detail or "",
            c.image_ref or c.initials,
        )
    console.print(table)


@app.command()
def search(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="student | class | branch"),
    term: str = typer.Argument(..., help="Search text (minimum length from settings)"),
    branch_id: Optional[str] = typer.Option(None, "--branch-id", help="Branch scope"),
    center_id: Optional[str] = typer.Option(None, "--center-id", help="Coaching center scope"),
    class_id: Optional[str] = typer.Option(None, "--class-id", help="Narrow student search to one class"),
    include_inactive: bool = typer.Option(
        False, "--include-inactive", help="Student search: include dropped/completed enrollments"
    ),
) -> None:
    """Run one debounced search the way a selector would and print the candidates."""
    settings: Settings = ctx.obj
    profile = _profile_for(kind, include_inactive)
    engine = get_engine(settings.db.url)
    picker = SearchSelect(
        profile,
        SqlQueryBackend(engine),
        branch_id=branch_id,
        coaching_center_id=center_id,
        class_id=class_id,
        debounce_ms=settings.search.debounce_ms,
        min_query_length=settings.search.min_query_length,
        result_limit=settings.search.result_limit,
    )

    if not picker.has_context:
        console.print(f"[yellow]{picker.view().helper_text}[/yellow]")
        raise typer.Exit(code=EXIT_NO_CONTEXT)

    view = asyncio.run(_run_search(picker, term))

    if view.state is SelectionState.ERROR:
        console.print(f"[red]{view.message}[/red]")
        raise typer.Exit(code=EXIT_QUERY_ERROR)
    if view.state is SelectionState.IDLE:
        console.print(profile.texts.too_short(settings.search.min_query_length))
        return
    if not view.candidates:
        console.print(view.message)
        return
    _render(view)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
