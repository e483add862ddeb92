from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError


class ModuleCfg(BaseModel):
    name: str                  # dotted path; bare names resolve under modweave.modules
    params: dict = Field(default_factory=dict)


class AppCfg(BaseModel):
    context: Dict[str, Any] = Field(default_factory=dict)
    modules: List[ModuleCfg] = Field(default_factory=list)


def load_config(path: Path) -> AppCfg:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    try:
        return AppCfg.model_validate(data or {})
    except ValidationError as exc:
        raise ConfigError(f"invalid config {path}: {exc}") from exc
