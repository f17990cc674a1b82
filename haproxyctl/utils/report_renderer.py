"""
Report Renderer
Turns status/action report rows into rich tables
"""

from datetime import timedelta
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

STATUS_HEADERS = ["LoadBalancer", "Backend", "Server", "Status", "LastCheck", "Downtime", "Error"]
ACTION_HEADERS = ["LoadBalancer", "Done", "All OK", "Error"]

# Free-text columns absorb the wrapping on narrow terminals
WRAPPED_COLUMNS = ("LastCheck", "Error")

STATUS_STYLES = {
    "UP": "green",
    "OPEN": "green",
    "DOWN": "red",
    "ERROR": "bold red",
    "MAINT": "yellow",
    "DRAIN": "yellow",
    "NOLB": "yellow",
}


def format_duration(duration: Optional[timedelta]) -> str:
    """Compact duration text: 0s, 45s, 2m5s, 1h0m3s"""
    if duration is None:
        return ""

    total = int(duration.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)

    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def status_cells(row) -> List[str]:
    if row.error is not None:
        return [row.load_balancer, "", "", "ERROR", "", "", str(row.error)]
    return [
        row.load_balancer,
        row.backend,
        row.server,
        row.status,
        row.last_check,
        format_duration(row.downtime),
        "",
    ]


def action_cells(row) -> List[str]:
    return [
        row.load_balancer,
        format_bool(row.done),
        format_bool(row.all_ok),
        str(row.error) if row.error is not None else "",
    ]


def _status_style(status: str) -> str:
    # HAProxy appends transition hints, e.g. "UP 1/3" or "DOWN (agent)"
    word = status.split(" ", 1)[0] if status else ""
    return STATUS_STYLES.get(word, "")


def build_status_table(rows) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    for header in STATUS_HEADERS:
        table.add_column(header, style="red" if header == "Error" else None,
                         no_wrap=header not in WRAPPED_COLUMNS)

    for row in rows:
        cells = status_cells(row)
        styled = [Text(cell) for cell in cells]
        styled[3].stylize(_status_style(cells[3]))
        table.add_row(*styled)
    return table


def build_action_table(rows) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    for header in ACTION_HEADERS:
        table.add_column(header, style="red" if header == "Error" else None,
                         no_wrap=header not in WRAPPED_COLUMNS)

    for row in rows:
        cells = action_cells(row)
        styled = [Text(cell) for cell in cells]
        styled[2].stylize("green" if row.all_ok else "yellow")
        table.add_row(*styled)
    return table


def render(table: Table, console: Optional[Console] = None):
    (console or Console()).print(table)
