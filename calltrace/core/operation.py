# Descriptor identifying a declared remote call.

import inspect
import typing
from typing import Any, Callable, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Operation(BaseModel):
    """The declared signature of a remote call.

    Built once by the dispatch layer when a service class is defined; the record
    that carries it only identifies and renders the operation, never invokes it.

    Attributes:
        owner_module: Module of the owning service type.
        owner_name: Qualified name of the owning service type.
        name: The method name.
        parameter_names: Declared parameter names, excluding ``self``.
        parameter_types: Resolved annotations, ``Any`` where a parameter is unannotated.
    """

    owner_module: str = Field()
    owner_name: str = Field()
    name: str = Field()
    parameter_names: Tuple[str, ...] = Field(default=())
    parameter_types: Tuple[Any, ...] = Field(default=())

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @classmethod
    def for_method(cls, owner: type, func: Callable[..., Any]) -> "Operation":
        """Describe ``func`` as declared on ``owner``.

        Args:
            owner: The class the method is declared on.
            func: The undecorated function object.

        Returns:
            An Operation with one entry per parameter after ``self``.
        """
        parameters = list(inspect.signature(func).parameters.values())
        if parameters and parameters[0].name == "self":
            parameters = parameters[1:]
        try:
            hints = typing.get_type_hints(func)
        except NameError:
            # Unresolvable forward references; the dispatch layer reports these
            hints = {}
        return cls(
            owner_module=owner.__module__,
            owner_name=owner.__qualname__,
            name=func.__name__,
            parameter_names=tuple(p.name for p in parameters),
            parameter_types=tuple(hints.get(p.name, Any) for p in parameters),
        )

    @property
    def owner_simple_name(self) -> str:
        return self.owner_name.rsplit(".", 1)[-1]

    @property
    def qualified_owner(self) -> str:
        return f"{self.owner_module}.{self.owner_name}"

    @property
    def qualified_name(self) -> str:
        return f"{self.qualified_owner}.{self.name}"

    def __str__(self) -> str:
        return self.qualified_name
