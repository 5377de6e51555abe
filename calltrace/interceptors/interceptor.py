# Interfaces for observing outgoing requests.

import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, Field

from calltrace.core.tags import TagKey, get_request_tag, tag_request

# perf_counter() reading taken when the first interceptor saw the request
REQUEST_STARTED: TagKey[float] = TagKey("calltrace.request_started", float)


def mark_request_started(request: httpx.Request) -> None:
    if get_request_tag(request, REQUEST_STARTED) is None:
        tag_request(request, REQUEST_STARTED, time.perf_counter())


def seconds_since_start(response: httpx.Response) -> Optional[float]:
    started = get_request_tag(response, REQUEST_STARTED)
    if started is None:
        return None
    return time.perf_counter() - started


class Interceptor(BaseModel):
    """Base class for request observers.

    Interceptors are wired into httpx event hooks by ServiceClient. They observe the
    request after the dispatch layer has tagged it and the response before its body
    is read. Both hooks are synchronous and must not perform blocking I/O.

    Attributes:
        name (Optional[str]): An optional name for the interceptor instance, used
            for logging and identification.
    """

    name: Optional[str] = Field(default=None)
    logger: logging.Logger = Field(default_factory=lambda: logging.getLogger(__name__), exclude=True)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __init__(self, **data: Any) -> None:
        if data.get("name") is None:
            data["name"] = self.__class__.__name__
        super().__init__(**data)

    def on_request(self, request: httpx.Request) -> None:
        """Called once per outgoing request, before it is sent."""

    def on_response(self, response: httpx.Response) -> None:
        """Called once per response, after headers arrive and before the body is read."""

    def __repr__(self) -> str:
        return f"<{self.name} <{self.__class__.__name__}>>"


def _as_async(hook: Callable[[Any], None]) -> Callable[[Any], Awaitable[None]]:
    async def async_hook(message: Any) -> None:
        hook(message)

    return async_hook


def build_event_hooks(interceptors: Sequence[Interceptor], asynchronous: bool = False) -> Dict[str, List[Any]]:
    """Convert interceptors into an httpx ``event_hooks`` mapping.

    Hooks run in the order the interceptors are given. An AsyncClient requires
    coroutine hooks, so for ``asynchronous=True`` each hook is wrapped.

    Args:
        interceptors: The interceptors to install.
        asynchronous: Whether the hooks are for an httpx.AsyncClient.

    Returns:
        A dict with "request" and "response" hook lists.
    """
    request_hooks: List[Any] = [interceptor.on_request for interceptor in interceptors]
    response_hooks: List[Any] = [interceptor.on_response for interceptor in interceptors]
    if asynchronous:
        request_hooks = [_as_async(hook) for hook in request_hooks]
        response_hooks = [_as_async(hook) for hook in response_hooks]
    return {"request": request_hooks, "response": response_hooks}
