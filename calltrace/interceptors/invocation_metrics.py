import threading
from dataclasses import dataclass
from typing import Any, Dict

import httpx
from pydantic import PrivateAttr

from calltrace.core.invocation import invocation_of
from calltrace.interceptors.interceptor import Interceptor, mark_request_started, seconds_since_start


@dataclass(frozen=True)
class OperationStats:
    """Aggregated counters for one operation."""

    calls: int = 0
    errors: int = 0
    total_seconds: float = 0.0
    max_seconds: float = 0.0

    @property
    def mean_seconds(self) -> float:
        if self.calls == 0:
            return 0.0
        return self.total_seconds / self.calls


class InvocationMetricsInterceptor(Interceptor):
    """Counts calls, error responses and latency per operation.

    Stats are keyed by ``Operation.qualified_name``. A call is counted when its
    response arrives; responses with status >= 400 also count as errors. Requests
    without an invocation are not counted.
    """

    _stats: Dict[str, OperationStats] = PrivateAttr(default_factory=dict)
    _lock: Any = PrivateAttr(default_factory=threading.Lock)

    def on_request(self, request: httpx.Request) -> None:
        if invocation_of(request) is not None:
            mark_request_started(request)

    def on_response(self, response: httpx.Response) -> None:
        invocation = invocation_of(response)
        if invocation is None:
            return
        elapsed = seconds_since_start(response) or 0.0
        key = invocation.operation.qualified_name
        with self._lock:
            current = self._stats.get(key, OperationStats())
            self._stats[key] = OperationStats(
                calls=current.calls + 1,
                errors=current.errors + (1 if response.status_code >= 400 else 0),
                total_seconds=current.total_seconds + elapsed,
                max_seconds=max(current.max_seconds, elapsed),
            )

    def snapshot(self) -> Dict[str, OperationStats]:
        """Return a copy of the current stats, keyed by qualified operation name."""
        with self._lock:
            return dict(self._stats)

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()
