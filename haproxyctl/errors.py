"""
haproxyctl Errors
Exception hierarchy shared by the client, the orchestrator and the CLI.

Only the CLI decides how an error is shown; everything below it raises.
"""

from typing import Optional


class HAProxyCtlError(Exception):
    """Base error for haproxyctl"""
    pass


class ConfigError(HAProxyCtlError):
    """Bad configuration file, URL or credential override (fatal)"""
    pass


class AuthDecodeError(HAProxyCtlError):
    """Malformed Base64 ``user:pass`` credential string"""
    pass


class EndpointError(HAProxyCtlError):
    """Failure scoped to a single load balancer; reported, never fatal"""

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint

    def __str__(self) -> str:
        return self.message


class TransportError(EndpointError):
    """Network-level failure (DNS, connection refused, timeout)"""
    pass


class HTTPStatusError(EndpointError):
    """HAProxy answered with an unexpected status code"""

    def __init__(self, status_code: int, endpoint: Optional[str] = None):
        super().__init__(f"status code {status_code}", endpoint=endpoint)
        self.status_code = status_code


class DecodeError(EndpointError):
    """Stats CSV could not be decoded"""

    def __init__(self, message: str, raw: str = "", endpoint: Optional[str] = None):
        super().__init__(message, endpoint=endpoint)
        self.raw = raw


class ActionOutcomeError(EndpointError):
    """Admin action was not fully applied (PART, NONE or an unknown token)"""

    def __init__(self, message: str, outcome, location: str = "", endpoint: Optional[str] = None):
        super().__init__(message, endpoint=endpoint)
        self.outcome = outcome
        self.location = location
