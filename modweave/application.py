from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from .base_module import ModuleDescriptor
from .context import ContextStore
from .errors import AlreadyInitializedError, ApplicationStateError
from .injector import Binder, create_binder
from .registry import ActionRegistry, ActionsView

log = logging.getLogger(__name__)

LoadHook = Callable[[ContextStore, ActionsView], Any]


class AppState(str, enum.Enum):
    CONSTRUCTED = "constructed"
    LOADING = "loading"
    INITIALIZED = "initialized"
    RUNNING = "running"
    FAILED = "failed"


class Application:
    def __init__(
        self,
        context: ContextStore | Mapping[str, Any] | Callable[[], Mapping[str, Any]],
        registry: Optional[ActionRegistry] = None,
    ) -> None:
        if isinstance(context, ContextStore):
            self.context = context
        elif callable(context):
            self.context = ContextStore.create(context)
        else:
            self.context = ContextStore.from_dict(context)
        self.registry = registry if registry is not None else ActionRegistry()
        self.state = AppState.CONSTRUCTED
        self._binder = create_binder(self.context, self.registry)
        self._modules: List[ModuleDescriptor] = []
        self._deferred: List[Tuple[str, LoadHook]] = []

    # -- inspection ---------------------------------------------------------
    @property
    def inject(self) -> Binder:
        return self._binder

    @property
    def actions(self) -> ActionsView:
        return self.registry.resolve()

    @property
    def modules(self) -> List[str]:
        return [m.label for m in self._modules]

    @property
    def initialized(self) -> bool:
        return self.state in (AppState.INITIALIZED, AppState.RUNNING)

    # -- loading ------------------------------------------------------------
    def load_module(self, module: Any, name: Optional[str] = None) -> ModuleDescriptor:
        if self.state not in (AppState.CONSTRUCTED, AppState.LOADING):
            raise ApplicationStateError(
                f"cannot load a module once the application is {self.state.value}"
            )
        descriptor = ModuleDescriptor.coerce(module, name=name)
        label = descriptor.label

        # all-or-nothing: a duplicate namespace leaves no trace of this module
        registered = self.registry.register_many(descriptor.actions, owner=label)

        if descriptor.routes is not None:
            try:
                descriptor.routes(self._binder)
            except Exception:
                for namespace in registered:
                    self.registry.unregister(namespace)
                log.error("Routes of module %s failed; namespaces rolled back", label)
                raise

        if descriptor.load is not None:
            self._deferred.append((label, descriptor.load))
            log.debug("Deferred load hook of %s", label)

        self._modules.append(descriptor)
        self.state = AppState.LOADING
        log.info("Loaded module %s (namespaces: %s)", label, ", ".join(registered) or "-")
        return descriptor

    def load_modules(self, modules: Iterable[Any]) -> List[ModuleDescriptor]:
        return [self.load_module(m) for m in modules]

    # -- lifecycle ----------------------------------------------------------
    def init(self) -> None:
        if self.state in (AppState.INITIALIZED, AppState.RUNNING, AppState.FAILED):
            raise AlreadyInitializedError(f"application already initialized ({self.state.value})")

        self.registry.seal()
        self.state = AppState.INITIALIZED
        actions = self.registry.resolve()
        hooks, self._deferred = self._deferred, []
        for label, hook in hooks:
            log.debug("Running load hook of %s", label)
            try:
                hook(self.context, actions)
            except Exception:
                self.state = AppState.FAILED
                log.error("Load hook of %s failed; initialization aborted", label)
                raise
        log.info("Application initialized with %d module(s)", len(self._modules))

    def run(self) -> None:
        if self.state is not AppState.INITIALIZED:
            raise ApplicationStateError(
                f"cannot run an application that is {self.state.value}; call init() first"
            )
        self.state = AppState.RUNNING
        log.info("Application running")

    # -- actions ------------------------------------------------------------
    def invoke(self, namespace: str, action: str, *args: Any, **kwargs: Any) -> Any:
        return self.registry.invoke(namespace, action, self.context, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<Application {self.state.value} modules={self.modules!r}>"
