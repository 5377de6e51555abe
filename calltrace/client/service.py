# Dispatch layer: turns service method calls into tagged HTTP requests.

import contextvars
import logging
from typing import Any, Dict, Iterable, Optional, Tuple, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from calltrace.client.endpoint import Endpoint
from calltrace.core.invocation import INVOCATION, InvocationRecord
from calltrace.core.logging import log_invocation_state
from calltrace.core.tags import tag_request
from calltrace.interceptors.interceptor import Interceptor, build_event_hooks
from calltrace.settings import Settings

logger = logging.getLogger(__name__)

ServiceT = TypeVar("ServiceT", bound="Service")


class Service:
    """Base class for declarative service definitions.

    Subclasses declare endpoints with the ``get``/``post``/... decorators and are
    instantiated through ``ServiceClient.create``.
    """

    def __init__(self, client: "ServiceClient"):
        self.client = client

    @classmethod
    def endpoints(cls) -> Dict[str, Endpoint]:
        """All endpoints declared on this class and its bases, by attribute name."""
        found: Dict[str, Endpoint] = {}
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, Endpoint):
                    found[name] = value
        return found

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} base_url={self.client.base_url!r}>"


def _json_body(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


class ServiceClient:
    """Creates service instances and dispatches their calls over httpx.

    Every call produces one InvocationRecord, which is attached to the outgoing
    httpx.Request as a tag before the interceptors' event hooks run.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        interceptors: Iterable[Interceptor] = (),
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Initializes the client.

        Args:
            base_url: Base URL every endpoint path is resolved against. Defaults to
                CALLTRACE_BASE_URL.
            interceptors: Request observers, run in order.
            timeout: Request timeout in seconds. Defaults to CALLTRACE_TIMEOUT.
            transport: Optional transport for the synchronous httpx.Client.
            async_transport: Optional transport for the httpx.AsyncClient.
            settings: Settings to read defaults from.

        Raises:
            ValueError: If no base URL is given or configured.
        """
        self.settings = settings or Settings()
        self.base_url = base_url or self.settings.get_base_url()
        if not self.base_url:
            raise ValueError("Base URL is not configured")
        self.timeout = timeout if timeout is not None else self.settings.get_timeout()
        self.interceptors = list(interceptors)
        self._transport = transport
        self._async_transport = async_transport
        self._http_client: Optional[httpx.Client] = None
        self._async_http_client: Optional[httpx.AsyncClient] = None

    @property
    def http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                event_hooks=build_event_hooks(self.interceptors),
            )
        return self._http_client

    @property
    def async_http_client(self) -> httpx.AsyncClient:
        if self._async_http_client is None:
            self._async_http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._async_transport,
                event_hooks=build_event_hooks(self.interceptors, asynchronous=True),
            )
        return self._async_http_client

    def create(self, service_cls: Type[ServiceT]) -> ServiceT:
        """Return an instance of ``service_cls`` whose endpoints dispatch through this client."""
        if not (isinstance(service_cls, type) and issubclass(service_cls, Service)):
            raise TypeError(f"{service_cls!r} is not a Service subclass")
        return service_cls(self)

    # --- Dispatch ---

    def _build_request(
        self, client: httpx.Client | httpx.AsyncClient, endpoint: Endpoint, record: InvocationRecord
    ) -> httpx.Request:
        values = dict(zip(record.operation.parameter_names, record.arguments))
        path = endpoint.path.format(**{name: quote(str(values[name]), safe="") for name in endpoint.path_params})
        params = {
            name: value
            for name, value in values.items()
            if name not in endpoint.path_params and name != endpoint.body and value is not None
        }
        json_body = _json_body(values[endpoint.body]) if endpoint.body is not None else None
        request = client.build_request(endpoint.method, path, params=params, json=json_body)
        tag_request(request, INVOCATION, record)
        return request

    def _new_record(
        self, endpoint: Endpoint, args: Tuple[Any, ...], kwargs: Dict[str, Any], execution_context: Optional[Any] = None
    ) -> InvocationRecord:
        arguments = endpoint.bind_arguments(args, kwargs)
        record = InvocationRecord._from_owned(endpoint.operation, arguments, execution_context)  # type: ignore[arg-type]
        log_invocation_state(record, "created", {"method": endpoint.method, "path": endpoint.path})
        return record

    def _finish(self, endpoint: Endpoint, record: InvocationRecord, response: httpx.Response) -> Any:
        log_invocation_state(record, "completed", {"status_code": response.status_code})
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"{record.describe()} failed with status {response.status_code}: {e}")
            raise
        return endpoint.convert(response)

    def call(self, endpoint: Endpoint, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        """Dispatch a synchronous endpoint call."""
        record = self._new_record(endpoint, args, kwargs)
        request = self._build_request(self.http_client, endpoint, record)
        try:
            response = self.http_client.send(request)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout during {record.describe()}: {e}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"HTTP error during {record.describe()}: {e}")
            raise
        return self._finish(endpoint, record, response)

    async def acall(self, endpoint: Endpoint, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        """Dispatch an ``async def`` endpoint call, recording the caller's context."""
        record = self._new_record(endpoint, args, kwargs, execution_context=contextvars.copy_context())
        request = self._build_request(self.async_http_client, endpoint, record)
        try:
            response = await self.async_http_client.send(request)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout during {record.describe()}: {e}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"HTTP error during {record.describe()}: {e}")
            raise
        return self._finish(endpoint, record, response)

    # --- Lifecycle ---

    def close(self) -> None:
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    async def aclose(self) -> None:
        if self._async_http_client is not None:
            await self._async_http_client.aclose()
            self._async_http_client = None
        self.close()

    def __enter__(self) -> "ServiceClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> "ServiceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
