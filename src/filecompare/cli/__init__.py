from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, dump_config, load_config
from ..core import ComparisonService
from ..detection import detect_format
from ..exceptions import FileCompareError
from ..history import HistoryStore
from ..logging import configure_logging
from ..models import ComparisonConfig, ComparisonResult, DiffLineType

console = Console()

app = typer.Typer(help="Compare documents line by line across formats")

_STYLES = {
    DiffLineType.ADDED: ("+", "green"),
    DiffLineType.DELETED: ("-", "red"),
    DiffLineType.UNCHANGED: (" ", "dim"),
}


def _load_config(path: Path | None) -> AppConfig:
    config = load_config(path)
    configure_logging(config.runtime.log_level)
    return config


def _history(config: AppConfig) -> HistoryStore:
    return HistoryStore(config.history.path, config.history.limit)


def _render_result(result: ComparisonResult, changes_only: bool) -> None:
    table = Table(title=f"{result.file_a.name} → {result.file_b.name}")
    table.add_column("#", justify="right")
    table.add_column("")
    table.add_column(result.file_a.name)
    table.add_column(result.file_b.name)
    for line in result.lines:
        if changes_only and line.type is DiffLineType.UNCHANGED:
            continue
        marker, style = _STYLES[line.type]
        table.add_row(str(line.index), marker, line.left or "", line.right or "", style=style)
    console.print(table)
    stats = result.stats
    console.print(
        f"[green]+{stats.added}[/green] [red]-{stats.deleted}[/red] "
        f"={stats.unchanged} (A: {stats.total_a} lines, B: {stats.total_b} lines) "
        f"similarity {stats.similarity:.1%}"
    )


@app.command()
def compare(
    file_a: Path,
    file_b: Path,
    ignore_whitespace: bool | None = typer.Option(
        None, "--ignore-whitespace/--no-ignore-whitespace", help="Treat lines differing only in whitespace as equal"
    ),
    ignore_empty_lines: bool | None = typer.Option(
        None, "--ignore-empty-lines/--keep-empty-lines", help="Drop blank lines before diffing"
    ),
    case_insensitive: bool = typer.Option(False, "--case-insensitive", help="Lowercase both inputs first"),
    no_worker: bool = typer.Option(False, "--no-worker", help="Run the diff in-process"),
    save: bool = typer.Option(True, "--save/--no-save", help="Record the result in history"),
    changes_only: bool = typer.Option(False, "--changes-only", help="Hide unchanged lines"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    defaults = cfg.compare
    options = ComparisonConfig(
        ignore_whitespace=defaults.ignore_whitespace if ignore_whitespace is None else ignore_whitespace,
        ignore_empty_lines=defaults.ignore_empty_lines if ignore_empty_lines is None else ignore_empty_lines,
        case_sensitive=defaults.case_sensitive and not case_insensitive,
    )
    if no_worker:
        cfg.runtime.worker.enabled = False
    service = ComparisonService(cfg)
    try:
        result = asyncio.run(service.compare_files(file_a, file_b, options))
    except FileCompareError as exc:
        console.print(f"[red]Comparison failed[/red]: {exc.code} - {exc}")
        raise typer.Exit(1) from exc
    finally:
        service.dispatcher.close()
    _render_result(result, changes_only)
    if save:
        _history(cfg).save(result)


@app.command()
def detect(file: Path) -> None:
    console.print(detect_format(file.name).value)


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", min=1, help="Number of records to show"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    records = _history(cfg).load()[:limit]
    if not records:
        console.print("No comparisons recorded.")
        raise typer.Exit()
    table = Table(title="Comparison history")
    table.add_column("ID")
    table.add_column("When")
    table.add_column("File A")
    table.add_column("File B")
    table.add_column("Similarity", justify="right")
    for record in records:
        when = datetime.fromtimestamp(record.created_at / 1000).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(record.id, when, record.file_a.name, record.file_b.name, f"{record.stats.similarity:.1%}")
    console.print(table)


@app.command()
def clear_history(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    _history(cfg).clear()
    console.print("History cleared.")


@app.command("show-config")
def show_config(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Print the effective configuration as JSON."""
    cfg = _load_config(config)
    typer.echo(dump_config(cfg))


@app.command()
def serve(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    import uvicorn

    from ..api import create_app

    cfg = _load_config(config)
    try:
        api = create_app(config=cfg)
    except RuntimeError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    uvicorn.run(api, host=cfg.api.host, port=cfg.api.port)


if __name__ == "__main__":
    app()
