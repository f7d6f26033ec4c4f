"""Console rendering helpers for the dropzone CLI."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .models import Dropzone, FileItem, PermissionSet, UploadSession, UploadSource, UploadState


console = Console()
err_console = Console(stderr=True)

_STATE_LABELS = {
    UploadState.REQUESTED: "[cyan]requesting URL[/cyan]",
    UploadState.URL_ISSUED: "[cyan]uploading bytes[/cyan]",
    UploadState.BYTES_SENT: "[cyan]confirming[/cyan]",
    UploadState.CONFIRMED: "[bold green]done[/bold green]",
}


def _human_size(value: Optional[int]) -> str:
    if value is None:
        return "-"
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, escape(rendered))

    panel = Panel(
        table,
        title="[bold green]dropzone[/bold green]",
        subtitle="[dim]Dropzone API client[/dim]",
        border_style="blue",
    )
    err_console.print(panel)


def render_dropzone(dropzone: Dropzone) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()
    table.add_row("ID", escape(dropzone.id))
    table.add_row("Name", escape(dropzone.name or "-"))
    table.add_row("Size", "-" if dropzone.gb is None else f"{dropzone.gb} GB")
    table.add_row("Days", "-" if dropzone.days is None else str(dropzone.days))
    console.print(table)


def render_files(files: Iterable[FileItem]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Type")
    table.add_column("Status")
    count = 0
    for item in files:
        count += 1
        status = item.meta.s3_status.value
        if item.is_uploaded:
            status = f"[green]{status}[/green]"
        table.add_row(
            escape(item.id),
            escape(item.name or "-"),
            _human_size(item.size),
            escape(item.type or "-"),
            status,
        )
    if count == 0:
        console.print("[dim]no files[/dim]")
        return
    console.print(table)


def render_file(item: FileItem) -> None:
    render_files([item])


def render_permissions(permissions: PermissionSet) -> None:
    if not permissions:
        console.print("[dim]no permissions[/dim]")
        return
    for token in permissions:
        console.print(f"- {escape(token)}")


def render_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def render_error(message: str) -> None:
    err_console.print(f"[bold red]ERROR:[/bold red] {escape(message)}")


class UploadStateDisplay:
    """Prints one status line per upload state transition."""

    def __init__(self, quiet: bool = False):
        self._quiet = quiet

    def on_state(
        self, source: UploadSource, state: UploadState, session: Optional[UploadSession]
    ) -> None:
        if self._quiet:
            return
        label = _STATE_LABELS.get(state, state.value)
        suffix = f" [dim]({escape(session.file_id)})[/dim]" if session else ""
        size = escape(f"[{_human_size(source.size)}]")
        err_console.print(f"{escape(source.name)} {size}: {label}{suffix}")
