import logging
import os
import tomllib
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from .errors import ConfigError
from .models.endpoint import Endpoint, HAProxyCtlConfig

logger = logging.getLogger(__name__)

# Config file location (overridden by --config)
CONFIG_PATH = os.getenv("HAPROXYCTL_CONFIG", "config.toml")

# Logging
LOG_LEVEL = os.getenv("HAPROXYCTL_LOG_LEVEL", "WARNING")
LOG_FORMAT = os.getenv("HAPROXYCTL_LOG_FORMAT", "text")  # text or json

# Total time allowed for one request to a load balancer
REQUEST_TIMEOUT_SECONDS = float(os.getenv("HAPROXYCTL_TIMEOUT", "10"))


def load_config(path: Optional[Union[str, Path]]) -> HAProxyCtlConfig:
    """Read and validate the TOML config file.

    An empty path skips loading and yields a config without load balancers.
    """
    if not path:
        logger.debug("No config file given, using an empty configuration")
        return HAProxyCtlConfig()

    path = Path(path)
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as e:
        raise ConfigError(f"config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {path}: {e}") from e

    try:
        config = HAProxyCtlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}: {_describe(e)}") from e

    logger.debug(f"Loaded {len(config.load_balancers)} load balancers from {path}")
    return config


def load_endpoints(path: Optional[Union[str, Path]]) -> List[Endpoint]:
    """Config file straight to resolved endpoints, in file order"""
    config = load_config(path)
    try:
        return config.resolve_endpoints()
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}: {_describe(e)}") from e


def _describe(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        location = '.'.join(str(part) for part in item.get('loc', ()))
        messages.append(f"{location}: {item.get('msg')}" if location else item.get('msg'))
    return "; ".join(messages)
