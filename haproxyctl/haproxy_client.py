import asyncio
import logging
from typing import List, Optional, Sequence
from urllib.parse import urlencode

import aiohttp

from .config import REQUEST_TIMEOUT_SECONDS
from .errors import ActionOutcomeError, HTTPStatusError, TransportError
from .models.action import Action, ActionOutcome, ActionResult
from .models.endpoint import Endpoint
from .models.stats import StatRow
from .utils.haproxy_stats_parser import HAProxyStatsParser, haproxy_stats_parser

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def build_action_form(servers: Sequence[str], backend: str, action: Action) -> str:
    """Body of the admin form POST: ``s=<server>&...&action=<code>&b=<backend>``"""
    fields = [("s", server) for server in servers]
    fields.append(("action", action.value))
    fields.append(("b", backend))
    return urlencode(fields)


def classify_location(location: str) -> ActionOutcome:
    """Map the ``Location`` of HAProxy's 303 answer to an outcome.

    HAProxy redirects back to the stats page with a single query parameter
    carrying the result, e.g. ``/haproxy?st=DONE``. Anything that does not
    split into exactly two parts on ``=`` is UNKNOWN.
    """
    parts = location.split('=')
    if len(parts) != 2:
        return ActionOutcome.UNKNOWN
    try:
        return ActionOutcome(parts[1])
    except ValueError:
        return ActionOutcome.UNKNOWN


def action_result_from_location(location: str) -> ActionResult:
    outcome = classify_location(location)

    if outcome is ActionOutcome.DONE:
        return ActionResult(done=True, all_ok=True)
    if outcome is ActionOutcome.PART:
        return ActionResult(done=True, all_ok=False,
                            error=ActionOutcomeError("partially applied", outcome, location))
    if outcome is ActionOutcome.NONE:
        return ActionResult(done=True, all_ok=False,
                            error=ActionOutcomeError("no changes were applied", outcome, location))

    parts = location.split('=')
    if len(parts) != 2:
        message = f"unrecognised response: {location}"
    else:
        message = f"haproxy response: {parts[1]}"
    return ActionResult(done=False, all_ok=False,
                        error=ActionOutcomeError(message, outcome, location))


class HAProxyClient:
    """Client for the HTTP stats/admin page of one HAProxy instance

    The aiohttp session is created by ``open()`` (or ``async with``) and
    never follows redirects for admin actions: the 303 itself is the answer.
    """

    def __init__(self, endpoint: Endpoint,
                 timeout: float = REQUEST_TIMEOUT_SECONDS,
                 parser: Optional[HAProxyStatsParser] = None):
        self.endpoint = endpoint
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.parser = parser or haproxy_stats_parser
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HAProxyClient":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def open(self):
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)

    async def close(self):
        if self._session is not None:
            await self._session.close()
            self._session = None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(f"client for '{self.endpoint.name}' is not open")
        return self._session

    def get_request_uri(self, csv: bool) -> str:
        """URL of the stats page; ``;csv`` selects the CSV rendering"""
        if csv:
            return f"{self.endpoint.base_url}/haproxy;csv"
        return f"{self.endpoint.base_url}/haproxy"

    def set_credentials_from_auth_string(self, auth_string: str):
        """Replace credentials from a Base64 ``user:pass``; unchanged on error"""
        self.endpoint = self.endpoint.with_auth_string(auth_string)

    def _auth(self) -> Optional[aiohttp.BasicAuth]:
        if self.endpoint.username:
            return aiohttp.BasicAuth(self.endpoint.username, self.endpoint.password,
                                     encoding="utf-8")
        return None

    def _transport_error(self, error: Exception) -> TransportError:
        detail = str(error) or type(error).__name__
        return TransportError(f"request to {self.endpoint.base_url} failed: {detail}",
                              endpoint=self.endpoint.name)

    async def get_stats(self) -> List[StatRow]:
        """Fetch and decode the stats CSV"""
        url = self.get_request_uri(csv=True)
        logger.debug(f"GET {url} ({self.endpoint.name})")

        try:
            async with self.session.get(url, auth=self._auth()) as response:
                if response.status != 200:
                    raise HTTPStatusError(response.status, endpoint=self.endpoint.name)
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._transport_error(e) from e

        rows = self.parser.parse_csv_stats(body)
        logger.debug(f"{self.endpoint.name}: {len(rows)} stats rows")
        return rows

    async def send_action(self, servers: Sequence[str], backend: str, action: Action) -> ActionResult:
        """
        Apply an admin action to servers of one backend.

        ``done`` tells whether HAProxy applied anything, ``all_ok`` whether it
        applied to every listed server. For example, a request may have been
        applied to some servers but not others: done is True, all_ok is False
        and error says "partially applied".
        """
        if not action.is_wire_action:
            raise ValueError(f"'{action.value}' is not an admin action")

        url = self.get_request_uri(csv=False)
        body = build_action_form(servers, backend, action)
        logger.debug(f"POST {url} ({self.endpoint.name}): {body}")

        try:
            async with self.session.post(url, data=body,
                                         headers={"Content-Type": FORM_CONTENT_TYPE},
                                         auth=self._auth(),
                                         allow_redirects=False) as response:
                # HAProxy answers a processed form with 303 See Other
                if response.status != 303:
                    raise HTTPStatusError(response.status, endpoint=self.endpoint.name)
                location = response.headers.get("Location", "")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._transport_error(e) from e

        result = action_result_from_location(location)
        logger.debug(f"{self.endpoint.name}: Location {location!r} -> done={result.done} all_ok={result.all_ok}")
        return result
