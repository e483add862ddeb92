from .application import Application, AppState
from .base_module import BaseModule, ModuleDescriptor
from .context import ContextStore
from .errors import (
    AlreadyInitializedError,
    ApplicationStateError,
    ConfigError,
    ContextMutationError,
    DuplicateNamespaceError,
    ModuleDescriptorError,
    ModweaveError,
    UnknownActionError,
    UnknownContextKeyError,
)
from .injector import Binder, Injected, create_binder
from .registry import ActionRegistry, ActionsView, BoundAction, NamespaceView

__all__ = [
    "ActionRegistry",
    "ActionsView",
    "AlreadyInitializedError",
    "AppState",
    "Application",
    "ApplicationStateError",
    "BaseModule",
    "Binder",
    "BoundAction",
    "ConfigError",
    "ContextMutationError",
    "ContextStore",
    "DuplicateNamespaceError",
    "Injected",
    "ModuleDescriptor",
    "ModuleDescriptorError",
    "ModweaveError",
    "NamespaceView",
    "UnknownActionError",
    "UnknownContextKeyError",
    "create_binder",
]
