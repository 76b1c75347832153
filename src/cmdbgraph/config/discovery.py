"""Config file discovery and loading.

Walk-up finder locates cmdbgraph.toml, similar to how git finds .git/.
The CMDBGRAPH_CONFIG env var overrides discovery.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from cmdbgraph.config.models import CmdbGraphConfig

CONFIG_FILENAME = "cmdbgraph.toml"
CONFIG_ENV_VAR = "CMDBGRAPH_CONFIG"


class ConfigError(ValueError):
    """Raised when a config file exists but cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid TOML in {path}: {reason}")
        self.path = path


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for cmdbgraph.toml.

    Returns the path to the config file, or None if not found.
    Checks CMDBGRAPH_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path* as TOML, wrapping decode failures in :class:`ConfigError`."""
    raw = path.read_text(encoding="utf-8")
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(path, str(exc)) from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> CmdbGraphConfig:
    """Load and validate config from a TOML file.

    If *path* is None, uses find_config(*cwd*) to discover the file.
    Returns default CmdbGraphConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)

    if path is None:
        return CmdbGraphConfig()

    return CmdbGraphConfig.model_validate(read_toml(path))
