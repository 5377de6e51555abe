# Typed metadata attached to outgoing requests.

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

import httpx

T = TypeVar("T")

# Key under which the side table lives in httpx.Request.extensions
TAGS_EXTENSION = "calltrace.tags"


@dataclass(frozen=True)
class TagKey(Generic[T]):
    """A stable, explicitly declared key for a typed request tag.

    Attributes:
        name: A unique identifier for the tag, used for diagnostics.
        value_type: The type every value stored under this key must be an instance of.
    """

    name: str
    value_type: Type[T]

    def __repr__(self) -> str:
        return f"TagKey({self.name!r}, {self.value_type.__name__})"


class Tags:
    """A side table mapping TagKeys to values, owned by a single request."""

    def __init__(self) -> None:
        self._values: Dict[TagKey[Any], Any] = {}

    def put(self, key: TagKey[T], value: Optional[T]) -> None:
        """Store ``value`` under ``key``, or remove the entry when ``value`` is None.

        Raises:
            TypeError: If ``value`` is not an instance of ``key.value_type``.
        """
        if value is None:
            self._values.pop(key, None)
            return
        if not isinstance(value, key.value_type):
            raise TypeError(
                f"Tag {key.name!r} expects {key.value_type.__name__}, got {type(value).__name__}"
            )
        self._values[key] = value

    def get(self, key: TagKey[T]) -> Optional[T]:
        return self._values.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        entries = ", ".join(f"{key.name}={value!r}" for key, value in self._values.items())
        return f"Tags({entries})"


def _as_request(message: Union[httpx.Request, httpx.Response]) -> httpx.Request:
    if isinstance(message, httpx.Response):
        return message.request
    return message


def request_tags(message: Union[httpx.Request, httpx.Response]) -> Tags:
    """Return the tag table of a request (or of the request behind a response), creating it on first use."""
    request = _as_request(message)
    tags = request.extensions.get(TAGS_EXTENSION)
    if tags is None:
        tags = Tags()
        request.extensions[TAGS_EXTENSION] = tags
    return tags


def tag_request(request: httpx.Request, key: TagKey[T], value: Optional[T]) -> None:
    request_tags(request).put(key, value)


def get_request_tag(message: Union[httpx.Request, httpx.Response], key: TagKey[T]) -> Optional[T]:
    """Look up a tag without creating a table on untagged requests."""
    tags = _as_request(message).extensions.get(TAGS_EXTENSION)
    if tags is None:
        return None
    return tags.get(key)
