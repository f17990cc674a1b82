"""
Tests for report rendering
"""
from datetime import timedelta

import pytest
from rich.console import Console

from haproxyctl.errors import ActionOutcomeError, TransportError
from haproxyctl.models.action import ActionOutcome
from haproxyctl.services.load_balancer_service import ActionReportRow, StatusReportRow
from haproxyctl.utils.report_renderer import (
    ACTION_HEADERS,
    STATUS_HEADERS,
    action_cells,
    build_action_table,
    build_status_table,
    format_duration,
    status_cells,
)


@pytest.mark.parametrize("seconds,text", [
    (0, "0s"),
    (45, "45s"),
    (125, "2m5s"),
    (3600, "1h0m0s"),
    (3725, "1h2m5s"),
    (90061, "25h1m1s"),
    (-30, "-30s"),
])
def test_format_duration(seconds, text):
    assert format_duration(timedelta(seconds=seconds)) == text


def test_format_duration_none():
    assert format_duration(None) == ""


def test_status_cells():
    row = StatusReportRow(load_balancer="ny-lb01", backend="prod-web", server="ny-web02",
                          status="DOWN", last_check="L4CON", downtime=timedelta(seconds=125))
    assert status_cells(row) == ["ny-lb01", "prod-web", "ny-web02", "DOWN", "L4CON", "2m5s", ""]


def test_status_cells_error_row():
    row = StatusReportRow(load_balancer="ny-lb02", error=TransportError("connection refused"))

    cells = status_cells(row)
    assert len(cells) == len(STATUS_HEADERS)
    assert cells == ["ny-lb02", "", "", "ERROR", "", "", "connection refused"]


def test_action_cells():
    ok = ActionReportRow(load_balancer="ny-lb01", done=True, all_ok=True)
    part = ActionReportRow(load_balancer="ny-lb02", done=True, all_ok=False,
                           error=ActionOutcomeError("partially applied", ActionOutcome.PART))

    assert action_cells(ok) == ["ny-lb01", "true", "true", ""]
    assert action_cells(part) == ["ny-lb02", "true", "false", "partially applied"]
    assert len(action_cells(ok)) == len(ACTION_HEADERS)


def _render(table) -> str:
    console = Console(width=200, record=True, color_system=None)
    console.print(table)
    return console.export_text()


def test_status_table_text():
    rows = [
        StatusReportRow(load_balancer="ny-lb01", backend="prod-web", server="ny-web01",
                        status="UP", last_check="L7OK", downtime=timedelta(0)),
        StatusReportRow(load_balancer="ny-lb02", error=TransportError("[Errno 111] refused")),
    ]
    text = _render(build_status_table(rows))

    for header in STATUS_HEADERS:
        assert header in text
    assert "ny-web01" in text
    assert "[Errno 111] refused" in text


def test_action_table_text():
    text = _render(build_action_table([ActionReportRow(load_balancer="ny-lb01", done=True, all_ok=True)]))

    assert "All OK" in text
    assert "true" in text
