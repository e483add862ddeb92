from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

log = logging.getLogger(__name__)


class Router:
    """Minimal in-memory route table: ``register(path, handler)``."""

    def __init__(self) -> None:
        self._routes: Dict[str, Callable[..., Any]] = {}

    def register(self, path: str, handler: Callable[..., Any]) -> None:
        if not path.startswith("/"):
            raise ValueError(f"route path must start with '/': {path!r}")
        if path in self._routes:
            raise ValueError(f"route {path!r} already registered")
        self._routes[path] = handler
        log.debug("Route %s -> %r", path, handler)

    def dispatch(self, path: str, **props: Any) -> Any:
        try:
            handler = self._routes[path]
        except KeyError:
            raise LookupError(f"no route for {path!r}") from None
        return handler(**props)

    def paths(self) -> List[str]:
        return sorted(self._routes)

    def __contains__(self, path: object) -> bool:
        return path in self._routes


class State:
    """Mutable in-memory collections, kept as a single context entry."""

    def __init__(self) -> None:
        self._items: Dict[str, List[Dict[str, Any]]] = defaultdict(list)

    def add(self, collection: str, item: Dict[str, Any]) -> Dict[str, Any]:
        rows = self._items[collection]
        record = {"id": len(rows) + 1, **item}
        rows.append(record)
        return record

    def all(self, collection: str) -> List[Dict[str, Any]]:
        return list(self._items.get(collection, ()))

    def count(self, collection: str) -> int:
        return len(self._items.get(collection, ()))
