"""
calltrace: immutable invocation records attached to outgoing HTTP requests.
"""

from calltrace.client import Service, ServiceClient, delete, get, patch, post, put
from calltrace.core import INVOCATION, ArgumentList, InvocationRecord, Operation, TagKey, Tags, invocation_of
from calltrace.exceptions import CalltraceError, InvalidArgumentError, ServiceDefinitionError, UnsupportedOperationError
from calltrace.interceptors import Interceptor, InvocationLoggingInterceptor, InvocationMetricsInterceptor

__all__ = [
    "ArgumentList",
    "CalltraceError",
    "INVOCATION",
    "Interceptor",
    "InvalidArgumentError",
    "InvocationLoggingInterceptor",
    "InvocationMetricsInterceptor",
    "InvocationRecord",
    "Operation",
    "Service",
    "ServiceClient",
    "ServiceDefinitionError",
    "TagKey",
    "Tags",
    "UnsupportedOperationError",
    "delete",
    "get",
    "invocation_of",
    "patch",
    "post",
    "put",
]
