"""Optimistic retry loop for read-modify-write updates."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from etcdkv.errors import SwapRetryExhaustedError
from etcdkv.types import CasResult

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]
"""Async sleep callable taking seconds; ``asyncio.sleep`` by default."""

Attempt = Callable[[], Awaitable[Tuple[CasResult, Any]]]
"""One read-compute-CAS round: returns the CAS outcome and the computed value."""


class SwapRetryPolicy:
    """Retries an attempt for as long as it loses compare-and-swap races.

    Only a conflicted CasResult triggers a retry. Any exception raised by
    the attempt propagates at once. The pause between attempts is fixed,
    and there is no attempt limit unless ``max_attempts`` is given.
    """

    def __init__(self, retry_delay_ms: int, sleep: Optional[Sleep] = None):
        """Initialize the retry policy.

        Args:
            retry_delay_ms: Pause between conflicted attempts, in milliseconds
            sleep: Async sleep function; injectable so tests need not wait
        """
        self._delay = retry_delay_ms / 1000.0
        self._sleep = sleep or asyncio.sleep

    async def execute(
        self,
        attempt: Attempt,
        key: Any = None,
        max_attempts: Optional[int] = None,
    ) -> Any:
        """Run attempts until one is applied.

        Args:
            attempt: Async function performing one read-compute-CAS round
            key: Key being updated, for logging and error messages
            max_attempts: Optional bound on the number of attempts

        Returns:
            The value computed by the applied attempt

        Raises:
            SwapRetryExhaustedError: If ``max_attempts`` attempts all conflicted
        """
        attempts = 0

        while True:
            result, value = await attempt()
            attempts += 1

            if result.applied:
                return value

            if max_attempts is not None and attempts >= max_attempts:
                raise SwapRetryExhaustedError(key, attempts)

            logger.debug(
                "swap of %r conflicted (attempt %d), retrying in %.3fs",
                key,
                attempts,
                self._delay,
            )
            await self._sleep(self._delay)
