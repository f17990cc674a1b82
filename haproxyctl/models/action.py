from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import HAProxyCtlError


class Action(str, Enum):
    """Admin verbs understood by the HAProxy stats page.

    The value is the exact code POSTed as ``action=``. ``GET`` is local to
    haproxyctl and is never sent over the wire.
    """

    GET = "get"
    READY = "ready"
    DRAIN = "drain"
    MAINT = "maint"
    HEALTH_DISABLE_CHECKS = "dhlth"
    HEALTH_ENABLE_CHECKS = "ehlth"
    HEALTH_FORCE_UP = "hrunn"
    HEALTH_FORCE_NOLB = "hnolb"
    HEALTH_FORCE_DOWN = "hdown"
    AGENT_DISABLE_CHECKS = "dagent"
    AGENT_ENABLE_CHECKS = "eagent"
    AGENT_FORCE_UP = "arunn"
    AGENT_FORCE_DOWN = "adown"
    KILL_SESSIONS = "shutdown"

    @property
    def is_wire_action(self) -> bool:
        return self is not Action.GET


ACTION_DESCRIPTIONS = {
    Action.GET: "Gets the status of the backends. No additional arguments are required",
    Action.READY: "Sets the server state to 'ready'",
    Action.DRAIN: "Sets the server state to 'drain'",
    Action.MAINT: "Sets the server state to 'maintenance'",
    Action.HEALTH_DISABLE_CHECKS: "Disables health checks",
    Action.HEALTH_ENABLE_CHECKS: "Enables health checks",
    Action.HEALTH_FORCE_UP: "Forces the server to be UP",
    Action.HEALTH_FORCE_NOLB: "Forces the server to disable load balancing",
    Action.HEALTH_FORCE_DOWN: "Forces the server to be DOWN",
    Action.AGENT_DISABLE_CHECKS: "Disables agent checks",
    Action.AGENT_ENABLE_CHECKS: "Enables agent checks",
    Action.AGENT_FORCE_UP: "Forces agent to be UP",
    Action.AGENT_FORCE_DOWN: "Forces agent to be DOWN",
    Action.KILL_SESSIONS: "Kills all sessions",
}


class ActionOutcome(str, Enum):
    """Status token HAProxy puts in the ``Location`` of its 303 redirect"""

    DONE = "DONE"
    PART = "PART"
    NONE = "NONE"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class ActionResult:
    done: bool
    all_ok: bool
    error: Optional[HAProxyCtlError] = None
