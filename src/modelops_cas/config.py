"""Tiered store configuration.

Configuration lives in a YAML file (``.modelops-cas.yaml`` or the path in
``MODELOPS_CAS_CONFIG``)::

    tiers:
      - id: local
        kind: memory
        priority: 0
      - id: remote
        kind: external
        priority: 1
        write: false
    list_page_size: 1000
    fallback_on_error: false

``external`` tiers are provided by the caller at build time (for example a
ContentStorePeer), looked up by id.
"""

import os
from pathlib import Path
from typing import List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .constants import CONFIG_ENV_VAR, CONFIG_FILE, LIST_PAGE_SIZE
from .errors import InvalidTierConfigError


class TierConfig(BaseModel):
    """One tier of a tiered store."""
    id: Optional[str] = Field(None, min_length=1)
    kind: Literal["memory", "external"] = "memory"
    priority: int = 0
    read: bool = True
    write: bool = True

    @model_validator(mode="after")
    def _validate(self):
        if self.kind == "external" and not self.id:
            raise ValueError("external tiers need an id to be resolved")
        return self


class TieredStoreConfig(BaseModel):
    """Configuration for a TieredContentStore."""
    tiers: List[TierConfig] = Field(default_factory=lambda: [TierConfig(id="local")])
    max_workers: Optional[int] = Field(None, gt=0)
    list_page_size: int = Field(LIST_PAGE_SIZE, gt=0)
    fallback_on_error: bool = False

    @model_validator(mode="after")
    def _validate(self):
        if not self.tiers:
            raise ValueError("At least one tier must be configured")
        ids = [t.id for t in self.tiers if t.id is not None]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate tier ids: {duplicates}")
        return self


def default_config_path() -> Path:
    """Resolve the config path: env override, else the working directory file."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path.cwd() / CONFIG_FILE


def load_config(path: Optional[Union[str, Path]] = None) -> TieredStoreConfig:
    """
    Load tiered store configuration from YAML.

    A missing file yields the default configuration (a single read/write
    memory tier).

    Args:
        path: Config file (defaults to default_config_path())

    Returns:
        Validated TieredStoreConfig

    Raises:
        InvalidTierConfigError: If the file is not valid YAML or fails validation
    """
    cfg_path = Path(path) if path is not None else default_config_path()
    if not cfg_path.exists():
        return TieredStoreConfig()

    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except yaml.YAMLError as e:
        raise InvalidTierConfigError(f"Invalid YAML in {cfg_path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidTierConfigError(f"{cfg_path} must contain a mapping")

    try:
        return TieredStoreConfig.model_validate(data.get("cas", data))
    except ValidationError as e:
        raise InvalidTierConfigError(f"Invalid tier configuration in {cfg_path}: {e}") from e
