"""Polling of long-running operations."""

import logging
import time
from typing import Callable

from .errors import PollTimeoutError
from .models import Operation

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0
DEFAULT_POLL_INTERVAL = 2.0


class OperationPoller:
    """
    Re-fetches an operation until it reports ``done`` or a deadline passes.

    Polling is sequential at a fixed interval by default. ``backoff`` > 1
    multiplies the interval after every unfinished poll (capped at
    ``max_interval``); it is an opt-in and does not change timeout semantics.
    """

    def __init__(
        self,
        fetch: Callable[[str], Operation],
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the poller.

        Args:
            fetch: Returns the current state of an operation by name
            clock: Monotonic time source in seconds
            sleep: Blocks for the given number of seconds
        """
        self.fetch = fetch
        self.clock = clock
        self.sleep = sleep

    def wait(
        self,
        operation_name: str,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        backoff: float = 1.0,
        max_interval: float | None = None,
    ) -> Operation:
        """
        Poll ``operation_name`` until it is done.

        A finished operation is returned whether it holds a response or an
        error; use ``Operation.raise_for_error`` to treat the latter as an
        exception.

        Args:
            operation_name: Resource name (e.g., 'fileSearchStores/abc/operations/xyz')
            timeout: Seconds to wait before giving up
            poll_interval: Seconds between polls
            backoff: Interval multiplier applied after each unfinished poll
            max_interval: Upper bound for the interval when backing off

        Returns:
            The first operation state with ``done`` set

        Raises:
            PollTimeoutError: If the operation is still running at the deadline
        """
        if poll_interval < 0:
            raise ValueError(f"poll_interval must be >= 0, got {poll_interval}")
        if backoff < 1.0:
            raise ValueError(f"backoff must be >= 1.0, got {backoff}")

        start = self.clock()
        interval = poll_interval
        polls = 0
        while True:
            operation = self.fetch(operation_name)
            polls += 1
            if operation.done:
                elapsed = self.clock() - start
                if operation.error is not None:
                    logger.warning(
                        f"Operation {operation_name} finished with error after {elapsed:.1f}s: "
                        f"{operation.error.message}"
                    )
                else:
                    logger.info(f"Operation {operation_name} done after {polls} poll(s), {elapsed:.1f}s")
                return operation

            logger.debug(f"Operation {operation_name} not done (poll {polls}), sleeping {interval}s")
            self.sleep(interval)

            elapsed = self.clock() - start
            if elapsed >= timeout:
                logger.error(f"Operation {operation_name} timed out after {elapsed:.1f}s")
                raise PollTimeoutError(operation_name, elapsed)

            interval = interval * backoff
            if max_interval is not None:
                interval = min(interval, max_interval)
