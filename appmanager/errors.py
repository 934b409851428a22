from typing import Any, Dict, Optional


class AppManagerError(Exception):
    """Base class for every error raised by the AppManager client."""


class ConfigurationError(AppManagerError):
    pass


class TransportError(AppManagerError):
    """The HTTP request never produced a response (connection, read timeout)."""


class ApiError(AppManagerError):
    """
    Non-2xx response from AppManager.

    ``str(err)`` is the composed message surfaced to users; the parsed error
    envelope (when there was one) is kept on ``envelope``.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        reason: Optional[str] = None,
        envelope: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.reason = reason
        self.envelope = envelope

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class InvalidStateError(AppManagerError, ValueError):
    def __init__(self, state: str):
        super().__init__(f"use a wrong state: {state}")
        self.state = state


class FetchError(AppManagerError):
    """Re-fetching a resource failed while waiting on it. ``__cause__`` holds the original error."""


class WaitTimeoutError(AppManagerError, TimeoutError):
    def __init__(self, description: str, timeout: float, last_state: Optional[str] = None):
        msg = f"Timed out after {timeout:g}s waiting for {description}"
        if last_state is not None:
            msg += f" (last observed state {last_state})"
        super().__init__(msg)
        self.timeout = timeout
        self.last_state = last_state


class ImageResolutionError(AppManagerError):
    """An image tag could not be resolved against the AppManager UI config."""
