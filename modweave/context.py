from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Iterator

from .errors import ContextMutationError, UnknownContextKeyError

log = logging.getLogger(__name__)

_MISSING = object()


class ContextStore(Mapping):
    """Shared state handed to every module and action.

    Top-level keys are fixed once ``create`` returns. Values are stored by
    identity and are not frozen themselves, so a reactive container kept in
    the store stays mutable internally.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Any]) -> None:
        object.__setattr__(self, "_entries", MappingProxyType(dict(entries)))

    @classmethod
    def create(cls, initializer: Callable[[], Mapping[str, Any]]) -> "ContextStore":
        entries = initializer()
        if not isinstance(entries, Mapping):
            raise TypeError(
                f"context initializer must return a mapping, got {type(entries).__name__}"
            )
        store = cls(entries)
        log.debug("Context created with keys: %s", ", ".join(store) or "<none>")
        return store

    @classmethod
    def from_dict(cls, entries: Mapping[str, Any]) -> "ContextStore":
        return cls.create(lambda: entries)

    # -- reads --------------------------------------------------------------
    def __getitem__(self, key: str) -> Any:
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownContextKeyError(key) from None

    def get(self, key: str, default: Any = _MISSING) -> Any:
        if key in self._entries:
            return self._entries[key]
        if default is _MISSING:
            raise UnknownContextKeyError(key)
        return default

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __repr__(self) -> str:
        return f"ContextStore({sorted(self._entries)!r})"

    # -- writes are rejected ------------------------------------------------
    def __setitem__(self, key: str, value: Any) -> None:
        raise ContextMutationError("assign", key)

    def __delitem__(self, key: str) -> None:
        raise ContextMutationError("delete", key)

    def __setattr__(self, name: str, value: Any) -> None:
        raise ContextMutationError("set attribute", name)

    def __delattr__(self, name: str) -> None:
        raise ContextMutationError("delete attribute", name)

    def update(self, *args: Any, **kwargs: Any) -> None:
        raise ContextMutationError("update")

    def pop(self, key: str, *default: Any) -> Any:
        raise ContextMutationError("pop", key)

    def popitem(self) -> Any:
        raise ContextMutationError("popitem")

    def setdefault(self, key: str, default: Any = None) -> Any:
        raise ContextMutationError("setdefault", key)

    def clear(self) -> None:
        raise ContextMutationError("clear")
