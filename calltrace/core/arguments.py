from collections.abc import Sequence
from typing import Any, Iterable, Iterator, List, NoReturn

from calltrace.exceptions import UnsupportedOperationError


class ArgumentList(Sequence):
    """An immutable, ordered view over the arguments of a single call.

    Constructing an ArgumentList copies the given iterable, so later changes to the
    caller's collection are not visible here. Every structural mutation method raises
    UnsupportedOperationError and leaves the view unchanged.

    Note: the values themselves are not copied. Mutable argument objects may still be
    changed by whoever holds a reference to them.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Any] = ()):
        if hasattr(self, "_items"):
            raise UnsupportedOperationError("Invocation arguments are immutable")
        self._items: List[Any] = list(items)

    @classmethod
    def _wrap(cls, items: List[Any]) -> "ArgumentList":
        """Take ownership of ``items`` without copying. The caller must not keep a reference."""
        view = cls.__new__(cls)
        view._items = items
        return view

    def __getitem__(self, index):
        if isinstance(index, slice):
            return ArgumentList._wrap(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __contains__(self, value: Any) -> bool:
        return value in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ArgumentList):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return self._items == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return repr(self._items)

    def to_list(self) -> List[Any]:
        """Return a new, independent list of the arguments."""
        return list(self._items)

    # --- Structural mutation is rejected ---

    def _reject(self, *args: Any, **kwargs: Any) -> NoReturn:
        raise UnsupportedOperationError("Invocation arguments are immutable")

    append = _reject
    extend = _reject
    insert = _reject
    remove = _reject
    pop = _reject
    clear = _reject
    sort = _reject
    reverse = _reject
    __setitem__ = _reject
    __delitem__ = _reject
    __iadd__ = _reject
    __imul__ = _reject
