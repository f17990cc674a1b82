"""
Load Balancer Service
Fans a status query or an admin action out to every configured load
balancer and collects one uniform set of report rows
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Awaitable, Callable, List, Optional, Sequence

from ..config import REQUEST_TIMEOUT_SECONDS
from ..errors import EndpointError
from ..haproxy_client import HAProxyClient
from ..models.action import Action
from ..models.endpoint import Endpoint
from ..utils.logging_config import PerformanceLogger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusReportRow:
    load_balancer: str
    backend: str = ""
    server: str = ""
    status: str = ""
    last_check: str = ""
    downtime: Optional[timedelta] = None
    error: Optional[EndpointError] = None


@dataclass(frozen=True)
class ActionReportRow:
    load_balancer: str
    done: bool
    all_ok: bool
    error: Optional[EndpointError] = None


class LoadBalancerService:
    """Runs one operation against every load balancer, in configured order.

    Each load balancer gets its own HAProxyClient (and aiohttp session), so a
    parallel run shares nothing between them. Failures of one load balancer
    become a report row and never stop the others.
    """

    def __init__(self, endpoints: Sequence[Endpoint],
                 timeout: float = REQUEST_TIMEOUT_SECONDS,
                 parallel: bool = False,
                 client_factory: Callable[..., HAProxyClient] = HAProxyClient):
        self.clients = [client_factory(endpoint, timeout=timeout) for endpoint in endpoints]
        self.parallel = parallel

    async def __aenter__(self) -> "LoadBalancerService":
        for client in self.clients:
            await client.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        for client in self.clients:
            await client.close()

    async def status_report(self) -> List[StatusReportRow]:
        """Per-server status rows for every load balancer"""
        groups = await self._run(self._status_rows)
        return [row for group in groups for row in group]

    async def action_report(self, servers: Sequence[str], backend: str, action: Action) -> List[ActionReportRow]:
        """Exactly one row per load balancer"""
        if not action.is_wire_action:
            raise ValueError(f"'{action.value}' is not an admin action")

        servers = list(servers)

        async def send(client: HAProxyClient) -> ActionReportRow:
            return await self._action_row(client, servers, backend, action)

        return await self._run(send)

    async def _run(self, operation: Callable[[HAProxyClient], Awaitable]) -> list:
        if self.parallel:
            # gather keeps the order of its arguments
            return list(await asyncio.gather(*(operation(client) for client in self.clients)))

        results = []
        for client in self.clients:
            results.append(await operation(client))
        return results

    async def _status_rows(self, client: HAProxyClient) -> List[StatusReportRow]:
        name = client.endpoint.name
        try:
            with PerformanceLogger(logger, f"get stats from {name}", load_balancer=name):
                stats = await client.get_stats()
        except EndpointError as e:
            return [StatusReportRow(load_balancer=name, error=e)]

        rows = [
            StatusReportRow(
                load_balancer=name,
                backend=stat.backend_name,
                server=stat.service_name,
                status=stat.status,
                last_check=stat.last_check,
                downtime=stat.downtime,
            )
            for stat in stats
            if not stat.is_summary
        ]
        logger.debug(f"{name}: {len(stats)} rows decoded, {len(rows)} server rows reported")
        return rows

    async def _action_row(self, client: HAProxyClient, servers: List[str],
                          backend: str, action: Action) -> ActionReportRow:
        name = client.endpoint.name
        try:
            with PerformanceLogger(logger, f"{action.value} on {name}",
                                   load_balancer=name, backend=backend, servers=servers):
                result = await client.send_action(servers, backend, action)
        except EndpointError as e:
            return ActionReportRow(load_balancer=name, done=False, all_ok=False, error=e)

        if result.error is not None:
            logger.warning(f"{name}: {action.value} on {backend}: {result.error}")
        return ActionReportRow(load_balancer=name, done=result.done,
                               all_ok=result.all_ok, error=result.error)
