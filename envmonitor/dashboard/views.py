"""
Terminal views over the cached environments: summary counts, a grid table and a card panel.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from envmonitor.modules.environments.models import ENVIRONMENT_STATUSES
from envmonitor.modules.environments.schemas import EnvironmentResponse

STATUS_LABELS = {
    "working": "Operational",
    "degraded": "Degraded",
    "down": "Down",
}
STATUS_STYLES = {
    "working": "bold green",
    "degraded": "bold yellow",
    "down": "bold red",
}


def status_text(status: str) -> str:
    return STATUS_LABELS.get(status, "Unknown")


def time_ago(last_updated: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    if last_updated.tzinfo is None:
        last_updated = last_updated.replace(tzinfo=timezone.utc)
    diff_minutes = int((now - last_updated).total_seconds() // 60)

    if diff_minutes < 1:
        return "Just now"
    if diff_minutes < 60:
        return f"{diff_minutes}m ago"
    if diff_minutes < 24 * 60:
        return f"{diff_minutes // 60}h ago"
    return f"{diff_minutes // (24 * 60)}d ago"


def status_counts(environments: Iterable[EnvironmentResponse]) -> Dict[str, int]:
    counts = {status: 0 for status in ENVIRONMENT_STATUSES}
    for env in environments:
        counts[env.status] = counts.get(env.status, 0) + 1
    return counts


def render_grid(environments: Iterable[EnvironmentResponse], loading: bool = False, now: Optional[datetime] = None):
    environments = list(environments)
    if loading:
        return Text("Loading environments...", style="dim")

    counts = status_counts(environments)
    summary = Text.assemble(
        (f"{counts['working']} working", STATUS_STYLES["working"]), "  ",
        (f"{counts['degraded']} degraded", STATUS_STYLES["degraded"]), "  ",
        (f"{counts['down']} down", STATUS_STYLES["down"]),
    )
    if not environments:
        return Group(summary, Text("No environments yet. Add one with `envmonitor-dashboard add`.", style="yellow"))

    table = Table(title="Environments", box=box.ROUNDED, header_style="bold")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("URL", style="magenta")
    table.add_column("Version")
    table.add_column("Status")
    table.add_column("Updated", justify="right", style="dim")

    for env in environments:
        table.add_row(
            env.id,
            env.name or "-",
            env.url,
            env.version or "-",
            Text(status_text(env.status), style=STATUS_STYLES.get(env.status, "")),
            time_ago(env.last_updated, now),
        )
    return Group(summary, table)


def render_card(environment: EnvironmentResponse, now: Optional[datetime] = None) -> Panel:
    body = Table.grid(padding=(0, 2))
    body.add_column(style="dim")
    body.add_column()
    body.add_row("URL", environment.url)
    if environment.version:
        body.add_row("Version", environment.version)
    if environment.notes:
        notes_style = "" if environment.status == "working" else "yellow"
        body.add_row("Notes", Text(environment.notes, style=notes_style))
    body.add_row("Updated", time_ago(environment.last_updated, now))

    title = Text.assemble(
        (environment.name or environment.url, "bold"), "  ",
        (status_text(environment.status), STATUS_STYLES.get(environment.status, "")),
    )
    return Panel(body, title=title, subtitle=environment.id, box=box.ROUNDED)
