"""
Admission control for remote lookups.

Heavy users are delayed rather than rejected: the delay grows with the
client's calls in the trailing five minutes and with all clients' calls in
the trailing minute.
"""
import logging
import time
from typing import Callable

from image_resolver.data_access.rate_limit_log_repository import RateLimitLogRepository
from image_resolver.models import RateLimitEvent
from image_resolver.utils.graceful_degradation import with_fallback

logger = logging.getLogger(__name__)

CLIENT_WINDOW_MS = 5 * 60 * 1000
GLOBAL_WINDOW_MS = 60 * 1000

CLIENT_FREE_CALLS = 20
GLOBAL_FREE_CALLS = 100

CLIENT_PENALTY_MS = 10000
GLOBAL_PENALTY_MS = 5000

MAX_DELAY_MS = 60000


def calculate_delay_ms(client_total: int, global_total: int) -> int:
    """
    Delay for the given usage totals.

    Example:
        >>> calculate_delay_ms(25, 50)
        50000
        >>> calculate_delay_ms(0, 150)
        60000
    """
    delay = (
        max(0, client_total - CLIENT_FREE_CALLS) * CLIENT_PENALTY_MS
        + max(0, global_total - GLOBAL_FREE_CALLS) * GLOBAL_PENALTY_MS
    )
    return min(MAX_DELAY_MS, delay)


def _now_ms() -> int:
    return int(time.time() * 1000)


class AdmissionController:
    """
    Computes admission delays from the rate limit log and records usage.

    An unreachable log counts as zero usage.
    """

    def __init__(
        self,
        repository: RateLimitLogRepository,
        clock: Callable[[], int] = _now_ms
    ):
        """
        Initialize admission controller.

        Args:
            repository: Rate limit log repository
            clock: Returns the current time in epoch milliseconds
        """
        self.repository = repository
        self.clock = clock

    def compute_delay(self, client_identity: str) -> int:
        """
        Compute the delay to await before issuing remote lookups.

        Args:
            client_identity: Caller identity

        Returns:
            Delay in milliseconds, between 0 and MAX_DELAY_MS
        """
        now = self.clock()
        client_total = self._client_total(client_identity, now - CLIENT_WINDOW_MS)
        global_total = self._global_total(now - GLOBAL_WINDOW_MS)
        delay_ms = calculate_delay_ms(client_total, global_total)

        if delay_ms > 0:
            logger.info(
                f"Admission delay {delay_ms}ms for {client_identity} "
                f"(client={client_total}, global={global_total})"
            )
        return delay_ms

    def record_calls(self, client_identity: str, call_count: int) -> None:
        """
        Append one usage event for a batch of remote calls.

        Nothing is written when call_count is below 1. Write failures are
        logged and swallowed.

        Args:
            client_identity: Caller identity
            call_count: Remote calls made
        """
        if call_count < 1:
            return

        event = RateLimitEvent(
            client_identity=client_identity,
            call_count=call_count,
            occurred_at=self.clock(),
        )
        try:
            self.repository.append(event)
        except Exception as e:
            logger.warning(
                f"Failed to record {call_count} calls for {client_identity}: {e}"
            )

    @with_fallback(fallback_value=0)
    def _client_total(self, client_identity: str, since_ms: int) -> int:
        return self.repository.sum_calls_for_client(client_identity, since_ms)

    @with_fallback(fallback_value=0)
    def _global_total(self, since_ms: int) -> int:
        return self.repository.sum_calls_global(since_ms)
