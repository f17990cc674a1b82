from .stats import StatRow, EntryType
from .action import Action, ActionOutcome, ActionResult, ACTION_DESCRIPTIONS
from .endpoint import Endpoint, LoadBalancerConfig, HAProxyCtlConfig

__all__ = [
    "StatRow",
    "EntryType",
    "Action",
    "ActionOutcome",
    "ActionResult",
    "ACTION_DESCRIPTIONS",
    "Endpoint",
    "LoadBalancerConfig",
    "HAProxyCtlConfig"
]
