import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from appmanager.errors import ConfigurationError

DEFAULT_API_VERSION = "v1"
DEFAULT_WAIT_INTERVAL = 3.0
DEFAULT_WAIT_TIMEOUT = 180.0
DEFAULT_REQUEST_TIMEOUT = 30.0

ENDPOINT_ENV = "FLINK_APPMANAGER_ENDPOINT"


class ClientConfig(BaseModel):
    """
    Immutable client settings. Every URL the client builds is derived from
    this value, so two clients with different configs never interfere.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str
    version: str = DEFAULT_API_VERSION
    wait_interval: float = Field(default=DEFAULT_WAIT_INTERVAL, gt=0)
    wait_timeout: float = Field(default=DEFAULT_WAIT_TIMEOUT, gt=0)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)

    @field_validator("endpoint")
    @classmethod
    def _strip_endpoint(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("endpoint cannot be an empty string")
        return value

    @property
    def base_url(self) -> str:
        return f"{self.endpoint}/api/{self.version}"

    @classmethod
    def build(
        cls,
        endpoint: Optional[str],
        *,
        version: Optional[str] = None,
        wait_interval: Optional[float] = None,
        wait_timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
    ) -> "ClientConfig":
        """
        Build a config the way provider settings are interpreted: a missing or
        zero interval/timeout means "use the default", an empty endpoint is an
        error.
        """
        if not endpoint or not endpoint.strip():
            raise ConfigurationError("endpoint cannot be an empty string")
        return cls(
            endpoint=endpoint,
            version=version or DEFAULT_API_VERSION,
            wait_interval=wait_interval or DEFAULT_WAIT_INTERVAL,
            wait_timeout=wait_timeout or DEFAULT_WAIT_TIMEOUT,
            request_timeout=request_timeout or DEFAULT_REQUEST_TIMEOUT,
        )

    @classmethod
    def from_env(cls, endpoint: Optional[str] = None) -> "ClientConfig":
        return cls.build(
            endpoint or os.getenv(ENDPOINT_ENV, ""),
            version=os.getenv("FLINK_APPMANAGER_API_VERSION"),
            wait_interval=_env_float("FLINK_APPMANAGER_WAIT_INTERVAL"),
            wait_timeout=_env_float("FLINK_APPMANAGER_WAIT_TIMEOUT"),
            request_timeout=_env_float("FLINK_APPMANAGER_REQUEST_TIMEOUT"),
        )


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
