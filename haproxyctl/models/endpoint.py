from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from yarl import URL

from ..errors import AuthDecodeError, ConfigError
from ..utils.auth import decode_auth_string


class Endpoint(BaseModel):
    """One load balancer as the client sees it: resolved URL and credentials"""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    username: str = ""
    password: str = Field("", repr=False)

    @property
    def base_url(self) -> str:
        return self.url.rstrip('/')

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        # Basic auth cannot carry a colon in the user part
        if ':' in v:
            raise ValueError("username must not contain ':'")
        return v

    def with_auth_string(self, auth_string: str) -> "Endpoint":
        """Return a copy using the credentials packed in a Basic auth string"""
        username, password = decode_auth_string(auth_string)
        return self.model_copy(update={"username": username, "password": password})


class LoadBalancerConfig(BaseModel):
    """A ``[[load_balancers]]`` table of the config file"""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(validation_alias=AliasChoices("name", "Name"))
    url: str = Field(validation_alias=AliasChoices("url", "Url", "URL"))
    username: str = Field("", validation_alias=AliasChoices("username", "Username"))
    password: str = Field("", validation_alias=AliasChoices("password", "Password"), repr=False)
    auth: Optional[str] = Field(None, validation_alias=AliasChoices("auth", "Auth"), repr=False)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("load balancer name must not be empty")
        return v

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        parsed = URL(v)
        if parsed.scheme not in ('http', 'https') or not parsed.host:
            raise ValueError(f"url must be an absolute http(s) URL, got {v!r}")
        return v


class HAProxyCtlConfig(BaseModel):
    """Top level of the config file"""

    model_config = ConfigDict(extra="forbid")

    default_username: str = Field(
        "", validation_alias=AliasChoices("default_username", "DefaultUsername")
    )
    default_password: str = Field(
        "", validation_alias=AliasChoices("default_password", "DefaultPassword"), repr=False
    )
    load_balancers: List[LoadBalancerConfig] = Field(
        default_factory=list, validation_alias=AliasChoices("load_balancers", "LoadBalancers")
    )

    def resolve_endpoints(self) -> List[Endpoint]:
        """Apply default credentials field by field, then any ``auth`` override"""
        endpoints = []
        for lb in self.load_balancers:
            endpoint = Endpoint(
                name=lb.name,
                url=lb.url,
                username=lb.username or self.default_username,
                password=lb.password or self.default_password,
            )
            if lb.auth:
                try:
                    endpoint = endpoint.with_auth_string(lb.auth)
                except AuthDecodeError as e:
                    raise ConfigError(f"load balancer '{lb.name}': {e}") from e
            endpoints.append(endpoint)
        return endpoints
