"""Request observers for calltrace service clients."""

from .interceptor import REQUEST_STARTED, Interceptor, build_event_hooks
from .invocation_logging import InvocationLoggingInterceptor
from .invocation_metrics import InvocationMetricsInterceptor, OperationStats

__all__ = [
    "Interceptor",
    "InvocationLoggingInterceptor",
    "InvocationMetricsInterceptor",
    "OperationStats",
    "REQUEST_STARTED",
    "build_event_hooks",
]
