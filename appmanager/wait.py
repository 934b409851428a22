"""
Fixed-interval polling until a remote resource reaches a state.

The first check happens one full interval after the call, never before, so an
already-converged resource still costs one interval. Fetch errors are not
retried: the first one aborts the wait with ``FetchError``.
"""

import logging
import time
from typing import Callable, Iterator, Optional, Protocol, TypeVar

from appmanager.errors import ApiError, FetchError, InvalidStateError, WaitTimeoutError

logger = logging.getLogger("appmanager.wait")


class HasState(Protocol):
    @property
    def state(self) -> Optional[str]: ...


S = TypeVar("S", bound=HasState)


def _ticks(
    interval: float,
    timeout: float,
    sleep: Callable[[float], None],
    clock: Callable[[], float],
) -> Iterator[None]:
    """Yield once per interval until the deadline would pass before the next tick."""
    if interval <= 0 or timeout <= 0:
        raise ValueError("interval and timeout must be positive")
    deadline = clock() + timeout
    while True:
        remaining = deadline - clock()
        if remaining < interval:
            sleep(max(remaining, 0.0))
            return
        sleep(interval)
        yield


def wait_for_state(
    fetch: Callable[[], S],
    target_state: str,
    is_valid_state: Callable[[str], bool],
    *,
    interval: float,
    timeout: float,
    description: str = "resource",
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> S:
    """
    Poll ``fetch`` every ``interval`` seconds until the snapshot's ``state``
    equals ``target_state`` and return that snapshot.

    Raises:
        InvalidStateError: ``target_state`` fails ``is_valid_state``; nothing is fetched.
        FetchError: ``fetch`` raised; wraps the original error.
        WaitTimeoutError: ``timeout`` elapsed without observing ``target_state``.
    """
    if not is_valid_state(target_state):
        raise InvalidStateError(target_state)

    logger.info(
        "Waiting for %s to reach %s (interval=%ss, timeout=%ss)",
        description,
        target_state,
        interval,
        timeout,
    )
    last_state: Optional[str] = None
    polls = 0
    for _ in _ticks(interval, timeout, sleep, clock):
        polls += 1
        try:
            snapshot = fetch()
        except Exception as exc:
            logger.warning("Fetching %s failed on poll %d: %s", description, polls, exc)
            raise FetchError(f"failed to fetch {description}: {exc}") from exc

        last_state = snapshot.state
        logger.debug("%s is %s (poll %d)", description, last_state, polls)
        if last_state == target_state:
            logger.info("%s reached %s after %d polls", description, target_state, polls)
            return snapshot

    logger.warning("%s did not reach %s within %ss", description, target_state, timeout)
    raise WaitTimeoutError(f"{description} to reach {target_state}", timeout, last_state)


def wait_until_gone(
    fetch: Callable[[], object],
    *,
    interval: float,
    timeout: float,
    description: str = "resource",
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Poll ``fetch`` until it raises a 404 ``ApiError``."""
    logger.info("Waiting for %s to be deleted", description)
    for _ in _ticks(interval, timeout, sleep, clock):
        try:
            fetch()
        except ApiError as exc:
            if exc.not_found:
                logger.info("%s is gone", description)
                return
            raise FetchError(f"failed to fetch {description}: {exc}") from exc
        except Exception as exc:
            raise FetchError(f"failed to fetch {description}: {exc}") from exc

    raise WaitTimeoutError(f"{description} to be deleted", timeout)
