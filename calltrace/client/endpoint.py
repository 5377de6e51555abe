# Declarative endpoint definitions for service classes.

import functools
import inspect
import string
import typing
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
from pydantic import TypeAdapter

from calltrace.core.operation import Operation
from calltrace.exceptions import ServiceDefinitionError


class Endpoint:
    """A service method bound to an HTTP method and path template.

    Endpoints are descriptors. When the owning class body is evaluated,
    ``__set_name__`` builds the Operation describing the method and checks the
    declaration; reading the attribute from a service instance returns a callable
    that dispatches through the instance's ServiceClient.

    Path placeholders (``/users/{user_id}``) bind to same-named parameters. The
    parameter named by ``body`` is sent as JSON. Every other parameter becomes a
    query parameter, skipped when None.
    """

    def __init__(self, method: str, path: str, func: Callable[..., Any], body: Optional[str] = None):
        self.method = method.upper()
        self.path = path
        self.func = func
        self.body = body
        self.is_async = inspect.iscoroutinefunction(func)
        self.path_params: Tuple[str, ...] = tuple(
            field for _, field, _, _ in string.Formatter().parse(path) if field is not None
        )
        self.operation: Optional[Operation] = None
        self.signature: Optional[inspect.Signature] = None
        self.return_type: Any = httpx.Response
        self._adapter: Optional[TypeAdapter] = None
        functools.update_wrapper(self, func)

    def __set_name__(self, owner: type, name: str) -> None:
        operation = Operation.for_method(owner, self.func)
        parameters = list(inspect.signature(self.func).parameters.values())
        if not parameters or parameters[0].name != "self":
            raise ServiceDefinitionError(f"{owner.__qualname__}.{name} must take 'self' as its first parameter")
        parameters = parameters[1:]

        for parameter in parameters:
            if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                raise ServiceDefinitionError(
                    f"{owner.__qualname__}.{name} cannot declare *{parameter.name}; "
                    "every argument must map to a declared parameter"
                )
        for placeholder in self.path_params:
            if placeholder not in operation.parameter_names:
                raise ServiceDefinitionError(
                    f"Path placeholder '{{{placeholder}}}' of {owner.__qualname__}.{name} has no matching parameter"
                )
        if self.body is not None:
            if self.body not in operation.parameter_names:
                raise ServiceDefinitionError(f"Body parameter '{self.body}' of {owner.__qualname__}.{name} is not declared")
            if self.body in self.path_params:
                raise ServiceDefinitionError(f"Parameter '{self.body}' cannot be both path placeholder and body")

        try:
            hints = typing.get_type_hints(self.func)
        except NameError as e:
            raise ServiceDefinitionError(f"Cannot resolve annotations of {owner.__qualname__}.{name}: {e}") from e

        self.return_type = hints.get("return", httpx.Response)
        if self.return_type not in (httpx.Response, None, type(None)):
            self._adapter = TypeAdapter(self.return_type)

        self.operation = operation
        self.signature = inspect.Signature(parameters)

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        client = instance.client
        if self.is_async:

            @functools.wraps(self.func)
            async def async_call(*args: Any, **kwargs: Any) -> Any:
                return await client.acall(self, args, kwargs)

            return async_call

        @functools.wraps(self.func)
        def call(*args: Any, **kwargs: Any) -> Any:
            return client.call(self, args, kwargs)

        return call

    def bind_arguments(self, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> List[Any]:
        """Bind a call's arguments to the declared parameters, in declaration order.

        Raises:
            TypeError: If the arguments do not match the signature.
        """
        if self.signature is None or self.operation is None:
            raise ServiceDefinitionError(f"Endpoint {self.func.__qualname__} is not attached to a service class")
        bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return [bound.arguments[name] for name in self.operation.parameter_names]

    def convert(self, response: httpx.Response) -> Any:
        """Turn a successful response into the declared return type."""
        if self.return_type is httpx.Response:
            return response
        if self._adapter is None:
            return None
        return self._adapter.validate_python(response.json())

    def __repr__(self) -> str:
        return f"<Endpoint {self.method} {self.path} ({self.func.__qualname__})>"


def _endpoint(method: str) -> Callable[..., Callable[[Callable[..., Any]], Endpoint]]:
    def decorator_factory(path: str, *, body: Optional[str] = None) -> Callable[[Callable[..., Any]], Endpoint]:
        def decorator(func: Callable[..., Any]) -> Endpoint:
            return Endpoint(method, path, func, body=body)

        return decorator

    decorator_factory.__name__ = method.lower()
    decorator_factory.__doc__ = f"Declare a {method} endpoint at ``path``."
    return decorator_factory


get = _endpoint("GET")
post = _endpoint("POST")
put = _endpoint("PUT")
patch = _endpoint("PATCH")
delete = _endpoint("DELETE")
