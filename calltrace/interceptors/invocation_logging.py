import logging
import re
from typing import Any, FrozenSet, List

import httpx
from pydantic import BaseModel, Field

from calltrace.core.invocation import InvocationRecord, invocation_of
from calltrace.core.logging import resolve_log_level
from calltrace.interceptors.interceptor import Interceptor, mark_request_started, seconds_since_start
from calltrace.settings import Settings

# Parameter names that typically carry sensitive data
SENSITIVE_PARAMETERS: FrozenSet[str] = frozenset(
    {
        "api_key",
        "apikey",
        "password",
        "passwd",
        "pwd",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "auth",
        "authorization",
        "bearer",
        "private_key",
        "secret_key",
        "client_secret",
    }
)

BEARER_PATTERN = re.compile(r"(Bearer\s+)([A-Za-z0-9\-_.]+)", re.IGNORECASE)
API_KEY_PATTERN = re.compile(r"sk-[A-Za-z0-9_\-]{20,}")


class InvocationLoggingInterceptor(Interceptor):
    """Logs each tagged invocation and the status of its response.

    Requests are logged as ``--> Owner.method [args]`` and responses as
    ``<-- 200 Owner.method (12 ms)``. Values of sensitive parameters, and sensitive keys
    nested inside dict, list and pydantic model arguments, are redacted.
    Requests that carry no invocation are ignored.

    Attributes:
        log_level (str): The logging level to use (DEBUG, INFO, WARNING, ERROR).
        redact_parameters (List[str]): Extra parameter names to redact, on top of
            SENSITIVE_PARAMETERS.
    """

    log_level: str = Field(default_factory=lambda: Settings().get_invocation_log_level())
    redact_parameters: List[str] = Field(default_factory=lambda: Settings().get_redact_parameters())

    def __init__(self, **data: Any) -> None:
        super().__init__(**data)
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    def _is_sensitive(self, key: str) -> bool:
        key = key.lower().replace("-", "_")
        return key in SENSITIVE_PARAMETERS or key in {name.lower() for name in self.redact_parameters}

    @staticmethod
    def _mask(value: Any) -> Any:
        if isinstance(value, str):
            if len(value) == 0:
                return ""
            return f"{value[:4]}***" if len(value) > 8 else "***"
        return "***"

    def _redact(self, key: str, value: Any) -> Any:
        """Redact ``value`` if ``key`` names sensitive data, walking into models and containers."""
        if value is None:
            return None
        if self._is_sensitive(key):
            return self._mask(value)
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="python")
        if isinstance(value, dict):
            return {k: self._redact(str(k), v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._redact("", item) for item in value]
        if isinstance(value, tuple):
            return tuple(self._redact("", item) for item in value)
        if isinstance(value, str):
            redacted = BEARER_PATTERN.sub(r"\1***", value)
            if redacted != value:
                return redacted
            if API_KEY_PATTERN.fullmatch(value):
                return self._mask(value)
        return value

    def format_arguments(self, invocation: InvocationRecord) -> str:
        """Render the argument list with sensitive values redacted."""
        names = invocation.operation.parameter_names
        rendered = [
            self._redact(names[i] if i < len(names) else "", value) for i, value in enumerate(invocation.arguments)
        ]
        return repr(rendered)

    def on_request(self, request: httpx.Request) -> None:
        invocation = invocation_of(request)
        if invocation is None:
            return
        try:
            mark_request_started(request)
            operation = invocation.operation
            self.logger.log(
                resolve_log_level(self.log_level),
                f"--> {operation.owner_simple_name}.{operation.name} {self.format_arguments(invocation)}",
            )
        except Exception as e:
            # Don't let logging errors break the request flow
            self.logger.error(f"Failed to log invocation: {e}")

    def on_response(self, response: httpx.Response) -> None:
        invocation = invocation_of(response)
        if invocation is None:
            return
        try:
            operation = invocation.operation
            elapsed = seconds_since_start(response)
            timing = f" ({elapsed * 1000:.0f} ms)" if elapsed is not None else ""
            self.logger.log(
                resolve_log_level(self.log_level),
                f"<-- {response.status_code} {operation.owner_simple_name}.{operation.name}{timing}",
            )
        except Exception as e:
            self.logger.error(f"Failed to log invocation response: {e}")
