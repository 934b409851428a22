from contextlib import contextmanager

from appmanager.errors import AppManagerError


class ProviderError(Exception):
    """
    User-facing failure of a resource operation: a short ``summary`` plus a
    ``detail`` line carrying the underlying cause.
    """

    def __init__(self, summary: str, detail: str):
        super().__init__(f"{summary}: {detail}")
        self.summary = summary
        self.detail = detail


@contextmanager
def reporting(summary: str, detail: str):
    """Translate client errors raised inside the block into a ``ProviderError``."""
    try:
        yield
    except (AppManagerError, ValueError) as exc:
        raise ProviderError(summary, f"{detail}: {exc}") from exc
