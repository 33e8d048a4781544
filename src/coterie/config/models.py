"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``coterie.toml`` only contains
overrides. A local store needs no configuration at all; a remote store
needs ``[remote] url`` plus an API key (preferably from
``COTERIE_REMOTE__API_KEY`` rather than the file).
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr


class BackendKind(StrEnum):
    """Which store backend the CLI opens."""

    LOCAL = "local"
    REMOTE = "remote"
    MEMORY = "memory"


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    backend: BackendKind = BackendKind.LOCAL
    # Relative paths resolve against the directory holding coterie.toml.
    data_dir: Path = Path(".coterie")


class RemoteConfig(BaseModel):
    """[remote] section."""

    model_config = {"frozen": True}

    url: str = ""
    api_key: SecretStr = SecretStr("")
    timeout_seconds: float = Field(default=15.0, gt=0)
    max_concurrency: int = Field(default=4, ge=1)
    retry_attempts: int = Field(default=3, ge=1)


class LayoutConfig(BaseModel):
    """[layout] section: canvas geometry for auto-layout."""

    model_config = {"frozen": True}

    canvas_height: float = 3000.0
    start_x: float = 300.0
    card_spacing_x: float = 220.0
    card_spacing_y: float = 300.0
    column_gap: float = 400.0
    max_per_column: int = Field(default=10, ge=1)

    # People sit below-right of their employer.
    person_offset_x: float = 120.0
    person_offset_y: float = 100.0
    person_step_x: float = 100.0
    person_step_y: float = 120.0
    people_per_column: int = Field(default=3, ge=1)

    # Projects sit left of their producer.
    project_offset_x: float = 120.0
    project_step_x: float = 100.0
    project_step_y: float = 100.0
    projects_per_column: int = Field(default=2, ge=1)

    # Bands for objects without an anchor.
    band_per_row: int = Field(default=12, ge=1)
    person_band_margin: float = 300.0
    project_band_y: float = 150.0


class MatchingConfig(BaseModel):
    """[matching] section."""

    model_config = {"frozen": True}

    threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    import_threshold: float = Field(default=0.75, ge=0.0, le=1.0)


class CoterieConfig(BaseModel):
    """Top-level ``coterie.toml`` contents."""

    model_config = {"frozen": True}

    store: StoreConfig = Field(default_factory=StoreConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
