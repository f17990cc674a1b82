"""
Test configuration and fixtures for haproxyctl
"""
import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port

from haproxyctl.models.endpoint import Endpoint

# Column order of the HAProxy 1.6 stats CSV, plus a few newer columns
# that the decoder is expected to ignore
HEADER_COLUMNS = [
    "pxname", "svname", "qcur", "qmax", "scur", "smax", "slim", "stot", "bin", "bout",
    "dreq", "dresp", "ereq", "econ", "eresp", "wretr", "wredis", "status", "weight", "act",
    "bck", "chkfail", "chkdown", "lastchg", "downtime", "qlimit", "pid", "iid", "sid",
    "throttle", "lbtot", "tracked", "type", "rate", "rate_lim", "rate_max", "check_status",
    "check_code", "check_duration", "hrsp_1xx", "hrsp_2xx", "hrsp_3xx", "hrsp_4xx", "hrsp_5xx",
    "hrsp_other", "hanafail", "req_rate", "req_rate_max", "req_tot", "cli_abrt", "srv_abrt",
    "comp_in", "comp_out", "comp_byp", "comp_rsp", "lastsess", "last_chk", "last_agt",
    "qtime", "ctime", "rtime", "ttime", "agent_status", "addr", "mode",
]


def make_csv(rows: List[Dict[str, Any]], columns: Optional[List[str]] = None) -> str:
    """Render rows the way HAProxy does: '# ' header marker and a trailing comma"""
    columns = columns or HEADER_COLUMNS
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["# " + columns[0]] + columns[1:] + [""])
    for row in rows:
        writer.writerow([row.get(column, "") for column in columns] + [""])
    buffer.write("\n")
    return buffer.getvalue()


SAMPLE_ROWS = [
    {"pxname": "http-in", "svname": "FRONTEND", "status": "OPEN", "type": "0",
     "scur": "3", "smax": "12", "slim": "2000", "stot": "1045", "bin": "50311",
     "bout": "902113", "pid": "1", "iid": "2", "sid": "0", "rate": "4", "rate_max": "31",
     "hrsp_2xx": "1001", "hrsp_5xx": "2", "req_tot": "1040", "mode": "http"},
    {"pxname": "prod-web", "svname": "ny-web01", "status": "UP", "type": "2",
     "weight": "1", "act": "1", "bck": "0", "chkfail": "0", "chkdown": "0",
     "lastchg": "86400", "downtime": "", "check_status": "L7OK", "check_code": "200",
     "check_duration": "1", "lastsess": "3", "last_chk": "Layer7 check passed",
     "qtime": "0", "ctime": "1", "rtime": "12", "ttime": "14", "addr": "10.0.0.11:80"},
    {"pxname": "prod-web", "svname": "ny-web02", "status": "DOWN", "type": "2",
     "weight": "1", "act": "1", "chkfail": "7", "chkdown": "1", "lastchg": "125",
     "downtime": "125", "check_status": "L4CON", "lastsess": "",
     "last_chk": "Connection refused, info: \"no route\"", "addr": "10.0.0.12:80"},
    {"pxname": "prod-web", "svname": "ny-web03", "status": "MAINT", "type": "2",
     "weight": "1", "act": "1", "lastchg": "3725", "downtime": "3725",
     "last_chk": "", "addr": "10.0.0.13:80"},
    {"pxname": "prod-web", "svname": "BACKEND", "status": "UP", "type": "1",
     "weight": "3", "act": "2", "bck": "0", "lastchg": "86400", "downtime": "0",
     "lbtot": "1040", "stot": "1040"},
]


@pytest.fixture
def sample_csv() -> str:
    """Stats export with a frontend, three servers and a backend summary"""
    return make_csv(SAMPLE_ROWS)


@pytest.fixture
def header_only_csv() -> str:
    return make_csv([])


@dataclass
class RecordedRequest:
    method: str
    raw_path: str
    body: str
    headers: Dict[str, str]


@dataclass
class FakeHAProxy:
    """Stand-in for the HAProxy stats page, served by a real aiohttp server"""

    stats_status: int = 200
    stats_body: str = ""
    action_status: int = 303
    location: Optional[str] = "/haproxy?st=DONE"
    requests: List[RecordedRequest] = field(default_factory=list)
    url: str = ""

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append(RecordedRequest(
            method=request.method,
            raw_path=request.raw_path,
            body=await request.text(),
            headers=dict(request.headers),
        ))

        if request.method == "POST":
            headers = {"Location": self.location} if self.location is not None else {}
            return web.Response(status=self.action_status, headers=headers)

        if request.raw_path.endswith(";csv"):
            return web.Response(status=self.stats_status, text=self.stats_body,
                                content_type="text/csv")

        return web.Response(status=200, text="<html>Statistics Report</html>",
                            content_type="text/html")

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self.handle)
        return app


@pytest_asyncio.fixture
async def haproxy_server(sample_csv):
    """Running fake HAProxy serving the sample stats"""
    fake = FakeHAProxy(stats_body=sample_csv)
    server = TestServer(fake.app())
    await server.start_server()
    fake.url = str(server.make_url("/"))
    yield fake
    await server.close()


@pytest.fixture
def dead_url() -> str:
    """URL nothing listens on"""
    return f"http://127.0.0.1:{unused_port()}/"


@pytest.fixture
def sample_endpoint(haproxy_server) -> Endpoint:
    return Endpoint(name="ny-lb01", url=haproxy_server.url, username="admin", password="secret")


@pytest.fixture
def write_config(tmp_path):
    """Write a TOML config file and return its path"""
    def _write(content: str, name: str = "config.toml"):
        path = tmp_path / name
        path.write_text(content)
        return path
    return _write


@pytest.fixture(autouse=True)
def isolate_logging():
    """Drop handlers installed by setup_logging during a test"""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)
