from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Tuple

from .context import ContextStore
from .registry import ActionRegistry, ActionsView

log = logging.getLogger(__name__)

CONTEXT_PROP = "context"
ACTIONS_PROP = "actions"


class Injected:
    """A component closed over the context and the merged actions.

    Calling the wrapper calls the component with ``context`` and ``actions``
    props followed by whatever the caller passes; explicit props win.
    """

    def __init__(
        self,
        component: Callable[..., Any],
        context: ContextStore,
        registry: ActionRegistry,
        scope: Optional[Tuple[str, ...]] = None,
    ) -> None:
        self.component = component
        self._context = context
        self._registry = registry
        self.scope = scope
        functools.update_wrapper(self, component, updated=())

    def bindings(self) -> Dict[str, Any]:
        # resolved per call so modules loaded later are visible
        actions = self._registry.bind(self._context, self.scope)
        return {CONTEXT_PROP: self._context, ACTIONS_PROP: actions}

    def __call__(self, *args: Any, **props: Any) -> Any:
        merged = self.bindings()
        merged.update(props)
        return self.component(*args, **merged)

    def __repr__(self) -> str:
        name = getattr(self.component, "__qualname__", repr(self.component))
        scope = "" if self.scope is None else f" scope={list(self.scope)!r}"
        return f"<Injected {name}{scope}>"


class Binder:
    """The ``inject`` function handed to every module's ``routes`` hook."""

    def __init__(self, context: ContextStore, registry: ActionRegistry) -> None:
        self._context = context
        self._registry = registry
        self._cache: Dict[Tuple[Hashable, Optional[Tuple[str, ...]]], Injected] = {}

    @property
    def context(self) -> ContextStore:
        return self._context

    @property
    def actions(self) -> ActionsView:
        return self._registry.bind(self._context)

    def __call__(
        self, component: Callable[..., Any], namespaces: Optional[Iterable[str]] = None
    ) -> Injected:
        if not callable(component):
            raise TypeError(f"cannot inject into non-callable {component!r}")
        scope = None if namespaces is None else tuple(namespaces)
        try:
            key = (component, scope)
            cached = self._cache.get(key)
        except TypeError:  # unhashable component
            return Injected(component, self._context, self._registry, scope)
        if cached is None:
            cached = Injected(component, self._context, self._registry, scope)
            self._cache[key] = cached
            log.debug("Bound %r", cached)
        return cached


def create_binder(context: ContextStore, registry: ActionRegistry) -> Binder:
    return Binder(context, registry)
