"""CLI commands for inspecting the ``.kuse`` staging area.

Undo history lives in the memory of the agent process; these commands only
show what is on disk. Nothing is ever deleted from here.
"""

from __future__ import annotations

import importlib
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from kuse_undo.core.errors import InvalidInput
from kuse_undo.core.settings import UndoSettings
from kuse_undo.fs.backup import BackupStore
from kuse_undo.fs.trash import TrashStore

app: TyperType = typer.Typer(help="Inspect kuse backups and trash on disk.")

BaseDirOption = Annotated[
    Path | None,
    typer.Option(
        "--base-dir",
        help="Directory holding .kuse (defaults to KUSE_BASE_DIR or the current directory).",
    ),
]
ConversationOption = Annotated[
    str | None,
    typer.Option("--conversation", "-c", help="Only show one conversation's snapshots."),
]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit JSON instead of a table."),
]


def _settings(base_dir: Path | None) -> UndoSettings:
    try:
        settings = UndoSettings.from_env()
    except ValueError as exc:
        typer.secho(f"Invalid configuration: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    if base_dir is not None:
        settings = UndoSettings(
            max_backup_bytes=settings.max_backup_bytes,
            history_limit=settings.history_limit,
            base_dir=base_dir,
        )
    return settings


def _format_size(size: int | None) -> str:
    if size is None:
        return "-"
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024 or unit == "GiB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def _format_ts(ts: int | None) -> str:
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")


def backups(
    conversation: ConversationOption = None,
    base_dir: BaseDirOption = None,
    json_output: JsonFlag = False,
) -> None:
    """List content snapshots taken before overwrites."""

    store = BackupStore(_settings(base_dir))
    try:
        snapshots = store.list_snapshots(conversation)
    except InvalidInput as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(json.dumps(snapshots, indent=2))
        return

    if not snapshots:
        typer.echo("No backups found.")
        return

    table = Table(title="Backups")
    table.add_column("Conversation", style="cyan")
    table.add_column("Slot")
    table.add_column("File")
    table.add_column("Size", justify="right")
    for snapshot in snapshots:
        slot = snapshot["slot"]
        ts = int(slot.split("-", 1)[0]) if slot.split("-", 1)[0].isdigit() else None
        table.add_row(
            snapshot["conversation_id"],
            f"{slot} ({_format_ts(ts)})",
            Path(snapshot["path"]).name,
            _format_size(snapshot.get("size")),
        )
    Console().print(table)


def trash(
    base_dir: BaseDirOption = None,
    json_output: JsonFlag = False,
) -> None:
    """List files relocated into the trash by delete_file."""

    store = TrashStore(_settings(base_dir))
    entries = store.list_entries()

    if json_output:
        typer.echo(json.dumps(entries, indent=2))
        return

    if not entries:
        typer.echo("Trash is empty.")
        return

    table = Table(title="Trash")
    table.add_column("Entry", style="cyan")
    table.add_column("Deleted at")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    for entry in entries:
        table.add_row(
            entry["name"],
            _format_ts(entry["deleted_at"]),
            "dir" if entry["is_dir"] else "file",
            "-" if entry["is_dir"] else _format_size(entry.get("size")),
        )
    Console().print(table)


app.command("backups")(backups)
app.command("trash")(trash)
