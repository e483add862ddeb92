from __future__ import annotations

from abc import ABC
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ModuleDescriptorError

ActionsDecl = Dict[str, Dict[str, Callable[..., Any]]]

_FIELDS = ("name", "actions", "routes", "load")


class ModuleDescriptor(BaseModel):
    """What a module contributes: action namespaces, routes and a load hook."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    name: Optional[str] = None
    actions: ActionsDecl = Field(default_factory=dict)
    routes: Optional[Callable[..., Any]] = None
    load: Optional[Callable[..., Any]] = None

    @field_validator("actions")
    @classmethod
    def _namespaces_not_empty(cls, value: ActionsDecl) -> ActionsDecl:
        for namespace, actions in value.items():
            if not namespace:
                raise ValueError("namespace must be a non-empty string")
            for action in actions:
                if not action:
                    raise ValueError(f"action name in {namespace!r} must be non-empty")
        return value

    @property
    def label(self) -> str:
        return self.name or "<anonymous>"

    @classmethod
    def coerce(cls, obj: Any, name: Optional[str] = None) -> "ModuleDescriptor":
        """Build a descriptor from a descriptor, a mapping, a BaseModule or any
        object exposing ``actions``/``routes``/``load`` attributes."""
        if isinstance(obj, ModuleDescriptor):
            if name and not obj.name:
                return obj.model_copy(update={"name": name})
            return obj
        if isinstance(obj, BaseModule):
            return obj.descriptor()
        if isinstance(obj, Mapping):
            data = dict(obj)
        else:
            data = {f: getattr(obj, f) for f in _FIELDS if getattr(obj, f, None) is not None}
            if not data:
                raise ModuleDescriptorError(
                    f"{type(obj).__name__} does not look like a module: "
                    "expected at least one of actions, routes, load"
                )
            data.setdefault("name", getattr(obj, "__name__", type(obj).__name__))
        if name and not data.get("name"):
            data["name"] = name
        if data.get("actions") is None:
            data.pop("actions", None)
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            label = data.get("name") or type(obj).__name__
            raise ModuleDescriptorError(f"invalid module {label}: {exc}") from exc


class BaseModule(ABC):
    """Convenience base for class-based modules.

    Subclasses override ``actions``, ``routes`` and ``load`` as needed; the
    ones left alone contribute nothing.
    """

    name: Optional[str] = None

    def __init__(self, params: Dict[str, Any] | None = None) -> None:
        self.params = params or {}

    def actions(self) -> ActionsDecl:
        return {}

    def routes(self, inject: Any) -> None:
        """Register routes through the router reachable from ``inject.context``."""

    def load(self, ctx: Any, actions: Any) -> None:
        """Run once after every module has been loaded."""

    def _overrides(self, attr: str) -> bool:
        return getattr(type(self), attr) is not getattr(BaseModule, attr)

    def descriptor(self) -> ModuleDescriptor:
        data: Dict[str, Any] = {
            "name": self.name or type(self).__name__,
            "actions": self.actions(),
        }
        if self._overrides("routes"):
            data["routes"] = self.routes
        if self._overrides("load"):
            data["load"] = self.load
        try:
            return ModuleDescriptor.model_validate(data)
        except ValidationError as exc:
            raise ModuleDescriptorError(f"invalid module {data['name']}: {exc}") from exc
