"""Unified settings — init kwargs, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — values passed by the embedding application
  2. Env vars     — ``CMDBGRAPH_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``cmdbgraph.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`cmdbgraph.config.discovery`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from cmdbgraph.config.discovery import find_config, read_toml
from cmdbgraph.config.models import CmdbGraphConfig, ImpactConfig, LayoutConfig
from cmdbgraph.domain.graph import GraphFilters


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``cmdbgraph.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            self._data = read_toml(toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class CmdbGraphSettings(BaseSettings):
    """Unified settings for the graph pipeline.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        verbose: Enable DEBUG logging and telemetry spans.
        log_json: Emit JSON log lines instead of console output.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CMDBGRAPH_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None
    verbose: bool = False
    log_json: bool = False

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    impact: ImpactConfig = Field(default_factory=ImpactConfig)
    filters: GraphFilters = Field(default_factory=GraphFilters)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def load(
        cls,
        *,
        config_path: str | Path | None = None,
        start: Path | None = None,
        **overrides: Any,
    ) -> CmdbGraphSettings:
        """Construct settings, discovering ``cmdbgraph.toml`` unless a path is given.

        An explicit *config_path* that does not exist is ignored and the
        code defaults apply.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None

    def to_config(self) -> CmdbGraphConfig:
        """Project the pipeline-relevant sections into a :class:`CmdbGraphConfig`."""
        return CmdbGraphConfig(layout=self.layout, impact=self.impact, filters=self.filters)
