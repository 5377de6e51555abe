"""
A single invocation of a service method.

The dispatch layer attaches an InvocationRecord to every outgoing request as a tag.
Interceptors can read it back for logging, metrics and tracing:

    class InvocationPrinter(Interceptor):
        def on_request(self, request: httpx.Request) -> None:
            invocation = invocation_of(request)
            if invocation is not None:
                print(f"{invocation.operation.owner_simple_name}.{invocation.operation.name} {invocation.arguments}")

Note: the argument list is immutable but the arguments themselves may not be, and they
may be unsafe for concurrent access. Prefer immutable types for service parameters.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Union

import httpx

from calltrace.core.arguments import ArgumentList
from calltrace.core.operation import Operation
from calltrace.core.tags import TagKey, get_request_tag
from calltrace.exceptions import InvalidArgumentError


@dataclass(frozen=True, eq=False, slots=True)
class InvocationRecord:
    """Which operation was invoked, with what arguments.

    Use ``create`` to build a record. Direct construction applies the same checks and
    copies any arguments that are not already an ArgumentList.

    Attributes:
        operation: The declared operation that was called.
        arguments: The call's positional values, aligned with ``operation.parameter_names``.
        execution_context: Opaque token for the async context the call was made from,
            or None for synchronous calls.
    """

    operation: Operation
    arguments: ArgumentList
    execution_context: Optional[Any] = None

    def __post_init__(self) -> None:
        if self.operation is None:
            raise InvalidArgumentError("operation")
        if self.arguments is None:
            raise InvalidArgumentError("arguments")
        if not isinstance(self.arguments, ArgumentList):
            object.__setattr__(self, "arguments", ArgumentList(self.arguments))

    @classmethod
    def create(
        cls,
        operation: Operation,
        arguments: Iterable[Any],
        execution_context: Optional[Any] = None,
    ) -> "InvocationRecord":
        """Build a record from a defensive copy of ``arguments``.

        Raises:
            InvalidArgumentError: If ``operation`` or ``arguments`` is None.
        """
        return cls(operation, arguments, execution_context)  # type: ignore[arg-type]

    @classmethod
    def _from_owned(
        cls,
        operation: Operation,
        arguments: List[Any],
        execution_context: Optional[Any] = None,
    ) -> "InvocationRecord":
        """Trusted path for the dispatch layer; takes ownership of ``arguments``."""
        return cls(operation, ArgumentList._wrap(arguments), execution_context)

    @property
    def has_execution_context(self) -> bool:
        return self.execution_context is not None

    def describe(self) -> str:
        return f"{self.operation.qualified_owner}.{self.operation.name}() {self.arguments!r}"

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"<InvocationRecord {self.describe()}>"


INVOCATION: TagKey[InvocationRecord] = TagKey("calltrace.invocation", InvocationRecord)


def invocation_of(message: Union[httpx.Request, httpx.Response]) -> Optional[InvocationRecord]:
    """Return the invocation tagged on a request (or a response's request), if any."""
    return get_request_tag(message, INVOCATION)
