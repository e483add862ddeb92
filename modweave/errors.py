from typing import Any, Optional


class ModweaveError(Exception):
    """Base class for every error raised by modweave."""


class ContextMutationError(ModweaveError, TypeError):
    def __init__(self, operation: str, key: Any = None) -> None:
        self.operation = operation
        self.key = key
        target = f" key {key!r}" if key is not None else ""
        super().__init__(f"context is read-only: cannot {operation}{target}")


class UnknownContextKeyError(ModweaveError, KeyError):
    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"no context entry named {self.key!r}"


class DuplicateNamespaceError(ModweaveError, ValueError):
    def __init__(self, namespace: str, owner: Optional[str] = None) -> None:
        self.namespace = namespace
        self.owner = owner
        claimed = f" (already claimed by {owner})" if owner else ""
        super().__init__(f"duplicate action namespace {namespace!r}{claimed}")


class UnknownActionError(ModweaveError, LookupError, AttributeError):
    def __init__(self, namespace: str, action: Optional[str] = None) -> None:
        self.namespace = namespace
        self.action = action
        if action is None:
            msg = f"unknown action namespace {namespace!r}"
        else:
            msg = f"unknown action {namespace}.{action}"
        super().__init__(msg)


class AlreadyInitializedError(ModweaveError):
    pass


class ApplicationStateError(ModweaveError):
    pass


class ModuleDescriptorError(ModweaveError, ValueError):
    pass


class ConfigError(ModweaveError):
    pass
