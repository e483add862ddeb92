from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import (
    ApplicationStateError,
    DuplicateNamespaceError,
    ModuleDescriptorError,
    UnknownActionError,
)

log = logging.getLogger(__name__)

ActionMap = Mapping[str, Callable[..., Any]]


def _check_name(kind: str, name: Any) -> None:
    if not isinstance(name, str) or not name:
        raise ModuleDescriptorError(f"{kind} must be a non-empty string, got {name!r}")


def _freeze_actions(namespace: str, actions: ActionMap) -> Mapping[str, Callable[..., Any]]:
    _check_name("namespace", namespace)
    if not isinstance(actions, Mapping):
        raise ModuleDescriptorError(
            f"actions for namespace {namespace!r} must be a mapping, "
            f"got {type(actions).__name__}"
        )
    frozen: Dict[str, Callable[..., Any]] = {}
    for name, fn in actions.items():
        _check_name(f"action name in {namespace!r}", name)
        if not callable(fn):
            raise ModuleDescriptorError(f"action {namespace}.{name} is not callable")
        frozen[name] = fn
    return MappingProxyType(frozen)


class ActionRegistry:
    """Namespaced actions contributed by modules.

    A namespace can be claimed only once. Once ``seal`` is called the
    registry never changes again.
    """

    def __init__(self) -> None:
        self._namespaces: Dict[str, Mapping[str, Callable[..., Any]]] = {}
        self._owners: Dict[str, Optional[str]] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        self._sealed = True
        log.debug("Action registry sealed with %d namespace(s)", len(self._namespaces))

    def _ensure_open(self, operation: str) -> None:
        if self._sealed:
            raise ApplicationStateError(f"cannot {operation}: action registry is sealed")

    def _ensure_free(self, namespace: str) -> None:
        if namespace in self._namespaces:
            raise DuplicateNamespaceError(namespace, self._owners.get(namespace))

    def register(self, namespace: str, actions: ActionMap, owner: Optional[str] = None) -> None:
        self._ensure_open(f"register namespace {namespace!r}")
        frozen = _freeze_actions(namespace, actions)
        self._ensure_free(namespace)
        self._namespaces[namespace] = frozen
        self._owners[namespace] = owner
        log.debug("Registered namespace %r (%s) for %s", namespace, ", ".join(frozen), owner)

    def register_many(
        self, namespaces: Mapping[str, ActionMap], owner: Optional[str] = None
    ) -> List[str]:
        """Register several namespaces at once; none are stored if any fails."""
        self._ensure_open("register namespaces")
        staged: List[Tuple[str, Mapping[str, Callable[..., Any]]]] = []
        for namespace, actions in namespaces.items():
            frozen = _freeze_actions(namespace, actions)
            self._ensure_free(namespace)
            staged.append((namespace, frozen))
        for namespace, frozen in staged:
            self._namespaces[namespace] = frozen
            self._owners[namespace] = owner
            log.debug("Registered namespace %r (%s) for %s", namespace, ", ".join(frozen), owner)
        return [namespace for namespace, _ in staged]

    def unregister(self, namespace: str) -> None:
        self._ensure_open(f"unregister namespace {namespace!r}")
        if namespace not in self._namespaces:
            raise UnknownActionError(namespace)
        del self._namespaces[namespace]
        del self._owners[namespace]
        log.debug("Unregistered namespace %r", namespace)

    # -- lookups ------------------------------------------------------------
    def owner_of(self, namespace: str) -> Optional[str]:
        if namespace not in self._namespaces:
            raise UnknownActionError(namespace)
        return self._owners[namespace]

    def namespaces(self) -> List[str]:
        return list(self._namespaces)

    def lookup(self, namespace: str, action: str) -> Callable[..., Any]:
        try:
            actions = self._namespaces[namespace]
        except KeyError:
            raise UnknownActionError(namespace) from None
        try:
            return actions[action]
        except KeyError:
            raise UnknownActionError(namespace, action) from None

    def invoke(self, namespace: str, action: str, context: Any, *args: Any, **kwargs: Any) -> Any:
        fn = self.lookup(namespace, action)
        return fn(context, *args, **kwargs)

    def resolve(self, namespaces: Optional[Iterable[str]] = None) -> "ActionsView":
        return ActionsView(self, None if namespaces is None else tuple(namespaces))

    def bind(self, context: Any, namespaces: Optional[Iterable[str]] = None) -> "ActionsView":
        """Like ``resolve``, but every action receives ``context`` implicitly."""
        scope = None if namespaces is None else tuple(namespaces)
        return ActionsView(self, scope, bound=True, context=context)

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._namespaces

    def __len__(self) -> int:
        return len(self._namespaces)

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"<ActionRegistry {state} namespaces={self.namespaces()!r}>"


# Views expose only dunder methods and private slots; every public attribute
# name is looked up in the registry, so actions named ``get`` or ``items``
# stay reachable.
class NamespaceView:
    """Read-only actions of one namespace, optionally bound to a context."""

    __slots__ = ("_registry", "_namespace", "_bound", "_context")

    def __init__(
        self,
        registry: ActionRegistry,
        namespace: str,
        bound: bool = False,
        context: Any = None,
    ) -> None:
        object.__setattr__(self, "_registry", registry)
        object.__setattr__(self, "_namespace", namespace)
        object.__setattr__(self, "_bound", bound)
        object.__setattr__(self, "_context", context)

    def _actions(self) -> Mapping[str, Callable[..., Any]]:
        try:
            return self._registry._namespaces[self._namespace]
        except KeyError:
            raise UnknownActionError(self._namespace) from None

    def __getitem__(self, action: str) -> Callable[..., Any]:
        fn = self._registry.lookup(self._namespace, action)
        if not self._bound:
            return fn
        return BoundAction(fn, self._context, self._namespace, action)

    def __getattr__(self, action: str) -> Callable[..., Any]:
        if action.startswith("_"):
            raise AttributeError(action)
        return self[action]

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"namespace {self._namespace!r} is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"namespace {self._namespace!r} is read-only")

    def __contains__(self, action: object) -> bool:
        actions = self._registry._namespaces.get(self._namespace, {})
        return action in actions

    def __iter__(self) -> Iterator[str]:
        return iter(self._actions())

    def __len__(self) -> int:
        return len(self._actions())

    def __repr__(self) -> str:
        return f"<NamespaceView {self._namespace} {list(self._actions())!r}>"


class BoundAction:
    """An action with its context argument already supplied."""

    __slots__ = ("func", "context", "namespace", "name")

    def __init__(self, func: Callable[..., Any], context: Any, namespace: str, name: str) -> None:
        self.func = func
        self.context = context
        self.namespace = namespace
        self.name = name

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.func(self.context, *args, **kwargs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundAction):
            return NotImplemented
        return self.func is other.func and self.context is other.context

    def __hash__(self) -> int:
        return hash((id(self.func), id(self.context)))

    def __repr__(self) -> str:
        return f"<BoundAction {self.namespace}.{self.name}>"


class ActionsView:
    """Merged, read-only view over the registry, keyed by namespace.

    The view reads through to the registry on every access, so namespaces
    registered after the view was created are visible. A scope restricts
    the view to a subset of namespaces.
    """

    __slots__ = ("_registry", "_scope", "_bound", "_context")

    def __init__(
        self,
        registry: ActionRegistry,
        scope: Optional[Tuple[str, ...]] = None,
        bound: bool = False,
        context: Any = None,
    ) -> None:
        object.__setattr__(self, "_registry", registry)
        object.__setattr__(self, "_scope", scope)
        object.__setattr__(self, "_bound", bound)
        object.__setattr__(self, "_context", context)

    def _visible(self) -> List[str]:
        names = self._registry.namespaces()
        if self._scope is None:
            return names
        return [name for name in names if name in self._scope]

    def __getitem__(self, namespace: str) -> NamespaceView:
        if self._scope is not None and namespace not in self._scope:
            raise UnknownActionError(namespace)
        if namespace not in self._registry:
            raise UnknownActionError(namespace)
        return NamespaceView(self._registry, namespace, self._bound, self._context)

    def __getattr__(self, namespace: str) -> NamespaceView:
        if namespace.startswith("_"):
            raise AttributeError(namespace)
        return self[namespace]

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("actions view is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("actions view is read-only")

    def __iter__(self) -> Iterator[str]:
        return iter(self._visible())

    def __len__(self) -> int:
        return len(self._visible())

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._visible()

    def __repr__(self) -> str:
        kind = "bound" if self._bound else "unbound"
        return f"<ActionsView {kind} {self._visible()!r}>"
