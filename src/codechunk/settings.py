"""
Centralized chunker settings.

Defaults for chunking and batch processing can be changed without code via
``CODECHUNK_*`` environment variables or a ``codechunk.toml`` file.
"""
from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class ChunkerSettings(BaseSettings):
    """Project-wide defaults loaded from env or a TOML file."""

    model_config = SettingsConfigDict(
        env_prefix="CODECHUNK_",
        extra="ignore",
    )

    max_chunk_size: int = Field(default=1500, gt=0)
    context_mode: Literal["none", "minimal", "full"] = "full"
    sibling_detail: Literal["none", "names", "signatures"] = "signatures"
    filter_imports: bool = False
    overlap_lines: int = Field(default=10, ge=0)
    batch_concurrency: int = Field(default=10, gt=0)
    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment variables win over values read from the TOML file.
        return env_settings, init_settings, dotenv_settings, file_secret_settings


_CONFIG_ENV_VAR = "CODECHUNK_CONFIG_PATH"
_DEFAULT_CONFIG_FILE = Path("codechunk.toml")


def _load_toml_config() -> Dict[str, Any]:
    """Load configuration from the primary TOML file on disk."""
    candidates: List[Path] = []
    config_override = os.getenv(_CONFIG_ENV_VAR)
    if config_override:
        candidates.append(Path(config_override))
    candidates.append(_DEFAULT_CONFIG_FILE)

    for candidate in candidates:
        if candidate.is_file():
            with candidate.open("rb") as handle:
                return tomllib.load(handle)
    return {}


def _flatten_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Translate grouped TOML sections into ChunkerSettings keyword arguments."""
    data: Dict[str, Any] = {}

    chunking = raw.get("chunking", {})
    for key in (
        "max_chunk_size",
        "context_mode",
        "sibling_detail",
        "filter_imports",
        "overlap_lines",
    ):
        if key in chunking:
            data[key] = chunking[key]

    batch = raw.get("batch", {})
    if "concurrency" in batch:
        data["batch_concurrency"] = batch["concurrency"]

    logging_section = raw.get("logging", {})
    if "level" in logging_section:
        data["log_level"] = str(logging_section["level"])

    return data


def load_settings() -> ChunkerSettings:
    return ChunkerSettings(**_flatten_config(_load_toml_config()))


settings = load_settings()
