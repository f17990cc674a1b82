"""
haproxyctl - query and drive HAProxy load balancers through their stats page

Usage: haproxyctl [--config config.toml] action [server1,server2 backend]
"""

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import CONFIG_PATH, LOG_FORMAT, LOG_LEVEL, REQUEST_TIMEOUT_SECONDS, load_endpoints
from .errors import AuthDecodeError, ConfigError
from .models.action import ACTION_DESCRIPTIONS, Action
from .models.endpoint import Endpoint
from .services.load_balancer_service import LoadBalancerService
from .utils.auth import decode_auth_string
from .utils.logging_config import get_correlation_id, setup_logging
from .utils.report_renderer import build_action_table, build_status_table, render

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def _actions_epilog() -> str:
    lines = ["\b", "Valid actions are:"]
    for action, description in ACTION_DESCRIPTIONS.items():
        lines.append(f"    {action.value:<8} - {description}")
    lines.append("")
    lines.append("Example: haproxyctl get")
    lines.append("Example: haproxyctl ready ny-web01,ny-web02 prod-web")
    return "\n".join(lines)


app = typer.Typer(
    name="haproxyctl",
    help="Interact with HAProxy servers via their web admin interface",
    add_completion=False,
    no_args_is_help=True,
)


def parse_arguments(action: str, servers: Optional[str],
                    backend: Optional[str]) -> Tuple[Action, List[str], str]:
    """Validate the positional arguments before anything touches the network"""
    if (servers is None) != (backend is None):
        raise typer.BadParameter("must specify one or three arguments",
                                 param_hint="'ACTION [SERVERS BACKEND]'")

    try:
        parsed = Action(action.strip().lower())
    except ValueError:
        raise typer.BadParameter(f"invalid command specified ({action})", param_hint="'ACTION'")

    if parsed is Action.GET:
        if servers is not None:
            raise typer.BadParameter("'get' takes no server or backend arguments",
                                     param_hint="'ACTION'")
        return parsed, [], ""

    if servers is None:
        raise typer.BadParameter(
            f"you must specify at least one server name and a backend when using the '{parsed.value}' command",
            param_hint="'SERVERS BACKEND'"
        )

    server_list = [server.strip() for server in servers.lower().split(",")]
    if not all(server_list):
        raise typer.BadParameter(f"empty server name in '{servers}'", param_hint="'SERVERS'")

    backend_name = backend.strip().lower()
    if not backend_name:
        raise typer.BadParameter(
            f"you must specify a backend when using the '{parsed.value}' command",
            param_hint="'BACKEND'"
        )

    return parsed, server_list, backend_name


async def run_report(endpoints: Sequence[Endpoint], action: Action, servers: Sequence[str],
                     backend: str, timeout: float, parallel: bool) -> Table:
    async with LoadBalancerService(endpoints, timeout=timeout, parallel=parallel) as service:
        if action is Action.GET:
            return build_status_table(await service.status_report())
        return build_action_table(await service.action_report(servers, backend, action))


@app.command(epilog=_actions_epilog())
def main(
    action: str = typer.Argument(..., help="The action to perform (see below)"),
    servers: Optional[str] = typer.Argument(
        None, help="A comma-separated list of backend servers to perform the action on"
    ),
    backend: Optional[str] = typer.Argument(None, help="The name of the backend to apply the action to"),
    config: str = typer.Option(
        CONFIG_PATH, "--config", "-c", help="Configuration file for your haproxy nodes"
    ),
    log_level: str = typer.Option(LOG_LEVEL, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    log_format: str = typer.Option(LOG_FORMAT, "--log-format", help="text or json"),
    timeout: float = typer.Option(
        REQUEST_TIMEOUT_SECONDS, "--timeout", min=0.1, help="Per-request timeout in seconds"
    ),
    auth: Optional[str] = typer.Option(
        None, "--auth", help="Base64 'user:pass' used for every load balancer"
    ),
    parallel: bool = typer.Option(False, "--parallel", help="Query load balancers concurrently"),
):
    """Query or change backend servers on every configured HAProxy load balancer."""
    try:
        setup_logging(log_level, log_format)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="'--log-level' / '--log-format'")

    parsed_action, server_list, backend_name = parse_arguments(action, servers, backend)

    if auth is not None:
        try:
            decode_auth_string(auth)
        except AuthDecodeError as e:
            raise typer.BadParameter(str(e), param_hint="'--auth'")

    logger.debug(f"haproxyctl {__version__} run {get_correlation_id()}: {parsed_action.value}")

    try:
        endpoints = load_endpoints(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        err_console.print(f"Error: {e}", style="red", markup=False, highlight=False)
        raise typer.Exit(code=1)

    if auth is not None:
        endpoints = [endpoint.with_auth_string(auth) for endpoint in endpoints]

    table = asyncio.run(run_report(endpoints, parsed_action, server_list, backend_name,
                                   timeout=timeout, parallel=parallel))
    render(table, console)


if __name__ == "__main__":
    app()
