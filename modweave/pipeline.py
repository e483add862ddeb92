from collections.abc import Mapping
from importlib import import_module
from typing import Any, Dict, List

from rich.console import Console

from .application import Application
from .base_module import BaseModule, ModuleDescriptor
from .config import AppCfg, ModuleCfg
from .context import ContextStore
from .errors import ConfigError
from .router import Router, State

console = Console()

LOCAL_PACKAGE = "modweave.modules"


def _candidates(mod_path: str) -> List[str]:
    if mod_path.startswith("modweave"):
        return [mod_path]
    local = f"{LOCAL_PACKAGE}.{mod_path}"
    # bare names are local demo modules first, dotted paths are absolute first
    if "." not in mod_path:
        return [local, mod_path]
    return [mod_path, local]


def _import(mod_path: str):
    for candidate in _candidates(mod_path):
        try:
            return import_module(candidate)
        except ModuleNotFoundError as exc:
            # only swallow "this candidate does not exist", not its broken imports
            missing = exc.name or ""
            if missing != candidate and not candidate.startswith(missing + "."):
                raise
    raise ConfigError(f"cannot import module {mod_path!r}")


def resolve_module(m: ModuleCfg) -> Any:
    """Turn a config entry into something ``Application.load_module`` accepts."""
    if "." not in m.name:
        raise ConfigError(f"module name must be 'module.Attribute', got {m.name!r}")
    mod_path, attr = m.name.rsplit(".", 1)
    mod = _import(mod_path)
    try:
        obj = getattr(mod, attr)
    except AttributeError:
        raise ConfigError(f"{mod.__name__} has no attribute {attr!r}") from None

    if isinstance(obj, type) and issubclass(obj, BaseModule):
        return obj(m.params)
    if isinstance(obj, (ModuleDescriptor, Mapping)):
        if m.params:
            raise ConfigError(f"{m.name} is a static descriptor and takes no params")
        return obj
    if callable(obj):
        return obj(**m.params)
    raise ConfigError(f"{m.name} is not a module, descriptor or factory")


class Pipeline:
    def __init__(self, cfg: AppCfg) -> None:
        self.cfg = cfg
        self.router = Router()
        self.ctx = ContextStore.create(self._context_entries)
        self.app = Application(self.ctx)
        self.stages: List[Any] = self._load_stages()

    def _context_entries(self) -> Dict[str, Any]:
        entries: Dict[str, Any] = dict(self.cfg.context)
        builtin = {"config": self.cfg, "router": self.router, "store": State()}
        clash = sorted(set(entries) & set(builtin))
        if clash:
            raise ConfigError(f"context keys reserved for the runtime: {', '.join(clash)}")
        entries.update(builtin)
        return entries

    def _load_stages(self) -> List[Any]:
        return [resolve_module(m) for m in self.cfg.modules]

    def run(self) -> Application:
        console.rule("[bold blue]modweave")
        for stage in self.stages:
            descriptor = self.app.load_module(stage)
            console.print(f"[cyan]▶ Loaded {descriptor.label}")
        self.app.init()
        self.app.run()
        console.rule("[green]✔ Application running")
        return self.app
