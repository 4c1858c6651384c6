from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from adapters.dispatch.inline import InlineDispatcher
from adapters.filesystem.event_repository import (
    FileSystemEventRepository,
    FileSystemLayoutRepository,
)
from adapters.layout.column import ColumnLayoutEngine
from app.config import AppSettings, LayoutSettings, load_settings
from app.web_main import create_app
from domain.models import LayoutSolution, SolveOutcome
from domain.services.frame_calculation import FrameCalculation
from domain.services.placement_domain import DomainStrategy

app = typer.Typer(no_args_is_help=True)
console = Console()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_settings_or_exit(config: Optional[Path]) -> AppSettings:
    try:
        return load_settings(config)
    except (FileNotFoundError, ValidationError) as exc:
        console.print(f"[red]Invalid configuration:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _render_solution(solution: LayoutSolution) -> Table:
    table = Table(title=f"Layout ({solution.outcome.value})")
    for column in ("event", "x", "y", "width", "height"):
        table.add_column(column, justify="right")
    for event_id in sorted(solution.frames):
        rect = solution.frames[event_id]
        table.add_row(
            str(event_id),
            f"{rect.x:.2f}",
            f"{rect.y:.2f}",
            f"{rect.width:.2f}",
            f"{rect.height:.2f}",
        )
    return table


@app.command("layout")
def layout(
    input_path: Path = typer.Argument(..., help="JSON file with the day's events."),
    output: Optional[Path] = typer.Option(None, help="Where to write the layout JSON."),
    width: Optional[float] = typer.Option(None, help="Column width, overrides config."),
    height: Optional[float] = typer.Option(None, help="Column height, overrides config."),
    strategy: Optional[DomainStrategy] = typer.Option(None, help="Placement domain strategy."),
    time_budget: Optional[float] = typer.Option(None, help="Solver time budget in seconds."),
    config: Optional[Path] = typer.Option(None, help="YAML config file."),
) -> None:
    settings = _load_settings_or_exit(config)
    overrides = {
        "column_width": width,
        "column_height": height,
        "domain_strategy": strategy,
        "time_budget_seconds": time_budget,
    }
    try:
        layout_settings = LayoutSettings.model_validate(
            settings.layout.model_dump()
            | {key: value for key, value in overrides.items() if value is not None}
        )
    except ValidationError as exc:
        console.print(f"[red]Invalid layout options:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    configure_logging(layout_settings.log_level)

    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        batch = FileSystemEventRepository().load(input_path)
    except (ValueError, ValidationError) as exc:
        console.print(f"[red]Invalid events file:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    calculation = FrameCalculation(
        layout_settings.column(),
        ColumnLayoutEngine(layout_settings.to_layout_config()),
        InlineDispatcher(),
    )
    try:
        calculation.start(batch.by_id(), lambda _job, _result: None).result()
    except Exception as exc:
        console.print(f"[red]Layout calculation failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    solution = calculation.solution or LayoutSolution(outcome=SolveOutcome.CANCELLED)

    console.print(_render_solution(solution))
    if solution.outcome not in (SolveOutcome.SOLVED, SolveOutcome.NO_COLLISIONS):
        console.print(f"[yellow]Layout is best effort:[/] search {solution.outcome.value}")
    if output is not None:
        FileSystemLayoutRepository().save(solution, output)
        console.print(f"[green]Wrote[/] {output}")


@app.command("validate")
def validate(input_path: Path = typer.Argument(..., help="Events file to validate.")) -> None:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        batch = FileSystemEventRepository().load(input_path)
    except (ValueError, ValidationError) as exc:
        console.print(f"[red]Validation failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    console.print(f"[green]Valid events file[/] ({len(batch.events)} events): {input_path}")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8080, help="Port to listen on."),
    config: Optional[Path] = typer.Option(None, help="YAML config file."),
) -> None:
    settings = _load_settings_or_exit(config)
    configure_logging(settings.layout.log_level)
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    app()
