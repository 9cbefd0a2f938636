"""
Loading and validation of the SiteAudit configuration.
The schema is described with Pydantic; files may be YAML or JSON.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, FrozenSet, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ("AuditConfig", "load_config", "DEFAULT_CONFIG_PATH")


class AuditConfig(BaseModel):
    """Configuration for a single audit run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    log_level: str = Field("INFO", description="Logging level name; unknown names fall back to INFO.")
    start_url: str = Field("", description="Seed URL, including its scheme.")
    agent: str = Field("agent", min_length=1, description="User-Agent header and robots.txt agent.")
    valid_schemes: str = Field("https", description="Comma-separated schemes followed in addition to https.")
    respect_robots: bool = Field(True, description="Fetch and honour robots.txt before crawling.")
    max_workers: int = Field(10, description="Number of concurrent workers.")
    max_depth: int = Field(2, description="Number of link hops to follow from the seed.")
    timeout: float = Field(5.0, gt=0, description="Per-request timeout (seconds).")

    @field_validator("start_url", "valid_schemes", mode="before")
    def _join_and_strip(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            v = ",".join(str(item) for item in v)
        if isinstance(v, str):
            return v.strip()
        return v

    def schemes(self) -> FrozenSet[str]:
        """Scheme allow-list: ``https`` plus every configured scheme."""
        parsed = frozenset(
            part.strip().lower() for part in self.valid_schemes.split(",") if part.strip()
        )
        return frozenset({"https"}) | parsed


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> AuditConfig:
    """
    Read YAML or JSON and return a validated AuditConfig.

    Without *path*, ``configs/default.yaml`` is used when it exists and the
    built-in defaults otherwise. A *path* that does not exist raises
    FileNotFoundError.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.is_file():
            return AuditConfig()
        path_obj = DEFAULT_CONFIG_PATH
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return AuditConfig(**data)
