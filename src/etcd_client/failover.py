"""
Multi-endpoint failover.

Tries an operation against each endpoint in order, one at a time, and returns
the first successful result. If every endpoint fails, raises ClusterError with
one error per endpoint, in endpoint order.
"""
import logging
import time
from typing import Awaitable, Callable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .endpoints import Endpoint
from .errors import ClusterError, NoEndpointsError
from .types import FailoverEvent, FailoverEventListener

logger = logging.getLogger("etcd_client.failover")

T = TypeVar("T")


class FailoverState:
    """State of one failover call.

    Owned by a single call. Pass one in to keep reading the errors collected
    so far after the call is cancelled or times out.
    """

    def __init__(self, endpoints: Sequence[Endpoint]):
        self.endpoints: Tuple[Endpoint, ...] = tuple(endpoints)
        self._remaining: Iterator[Endpoint] = iter(self.endpoints)
        self.in_flight: Optional[Endpoint] = None
        self.errors: List[BaseException] = []
        self.attempted: List[Endpoint] = []

    def next_endpoint(self) -> Optional[Endpoint]:
        """Advance the cursor. Returns None once the endpoints are exhausted."""
        endpoint = next(self._remaining, None)
        self.in_flight = endpoint
        if endpoint is not None:
            self.attempted.append(endpoint)
        return endpoint

    def record_failure(self, error: BaseException) -> None:
        self.errors.append(error)
        self.in_flight = None

    @property
    def attempts(self) -> int:
        return len(self.attempted)


class FailoverExecutor:
    """
    Failover Executor

    Runs per-endpoint operations against a fixed, ordered endpoint list:
    - at most one endpoint in flight
    - short-circuit on the first success
    - every failure recorded, none retried
    - events emitted for observability
    """

    def __init__(self, endpoints: Sequence[Endpoint]):
        if not endpoints:
            raise NoEndpointsError()
        self._endpoints = tuple(endpoints)
        self._listeners: List[FailoverEventListener] = []

    @property
    def endpoints(self) -> Sequence[Endpoint]:
        return self._endpoints

    def _emit(self, event: FailoverEvent) -> None:
        """Emit an event to all listeners."""
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"FailoverExecutor: listener failed on {event.type}")

    async def execute(
        self,
        operation: Callable[[Endpoint], Awaitable[T]],
        state: Optional[FailoverState] = None,
    ) -> T:
        """
        Run operation against each endpoint until one succeeds.

        Args:
            operation: Async callable taking one Endpoint. A raised Exception
                counts as that endpoint's failure.
            state: Optional fresh FailoverState over this executor's
                endpoints to collect errors into

        Returns:
            The first successful result

        Raises:
            ClusterError: every endpoint failed; errors are in endpoint order
            ValueError: state was already used or covers other endpoints
        """
        if state is None:
            state = FailoverState(self._endpoints)
        elif state.attempts > 0:
            raise ValueError(
                f"FailoverState already used for {state.attempts} attempt(s); "
                "pass a fresh state to each call"
            )
        elif state.endpoints != self._endpoints:
            raise ValueError(
                f"FailoverState endpoints {list(state.endpoints)} do not match "
                f"executor endpoints {list(self._endpoints)}"
            )
        start_time = time.monotonic()

        while True:
            endpoint = state.next_endpoint()
            if endpoint is None:
                break

            attempt = state.attempts - 1
            self._emit(FailoverEvent(type="attempt:start", attempt=attempt, endpoint=endpoint))
            logger.debug(f"FailoverExecutor.execute: attempt {attempt} -> {endpoint}")
            attempt_start = time.monotonic()

            try:
                result = await operation(endpoint)
            except Exception as error:
                state.record_failure(error)
                logger.warning(
                    f"FailoverExecutor.execute: {endpoint} failed "
                    f"({type(error).__name__}: {error})"
                )
                self._emit(FailoverEvent(
                    type="attempt:fail",
                    attempt=attempt,
                    endpoint=endpoint,
                    data={
                        "error": error,
                        "duration_seconds": time.monotonic() - attempt_start,
                    },
                ))
                continue

            state.in_flight = None
            logger.debug(f"FailoverExecutor.execute: {endpoint} succeeded on attempt {attempt}")
            self._emit(FailoverEvent(
                type="attempt:success",
                attempt=attempt,
                endpoint=endpoint,
                data={
                    "duration_seconds": time.monotonic() - attempt_start,
                    "failed_before": len(state.errors),
                },
            ))
            return result

        logger.error(
            f"FailoverExecutor.execute: all {len(state.errors)} endpoint(s) failed "
            f"in {time.monotonic() - start_time:.3f}s"
        )
        self._emit(FailoverEvent(
            type="failover:exhausted",
            attempt=state.attempts,
            data={"errors": list(state.errors)},
        ))
        raise ClusterError(state.errors, state.attempted)

    def on(self, listener: FailoverEventListener) -> Callable[[], None]:
        """
        Add an event listener.

        Returns:
            Function to remove the listener
        """
        self._listeners.append(listener)
        return lambda: self.off(listener)

    def off(self, listener: FailoverEventListener) -> None:
        """Remove an event listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)


async def run_with_failover(
    endpoints: Sequence[Endpoint],
    operation: Callable[[Endpoint], Awaitable[T]],
    *,
    state: Optional[FailoverState] = None,
    listeners: Optional[Sequence[FailoverEventListener]] = None,
) -> T:
    """
    Run operation against endpoints in order and return the first success.

    Example:
        async def fetch(endpoint):
            ...

        result = await run_with_failover(client.endpoints, fetch)
    """
    executor = FailoverExecutor(endpoints)
    for listener in listeners or ():
        executor.on(listener)
    return await executor.execute(operation, state=state)
