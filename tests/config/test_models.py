"""Tests for config models — defaults and sparse overrides."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from coterie.config.models import (
    BackendKind,
    CoterieConfig,
    LayoutConfig,
    MatchingConfig,
    RemoteConfig,
)


class TestCoterieConfig:
    def test_full_defaults(self) -> None:
        cfg = CoterieConfig()
        assert cfg.store.backend is BackendKind.LOCAL
        assert cfg.store.data_dir == Path(".coterie")
        assert cfg.remote.url == ""
        assert cfg.remote.timeout_seconds == 15.0
        assert cfg.remote.retry_attempts == 3
        assert cfg.layout.canvas_height == 3000.0
        assert cfg.layout.max_per_column == 10
        assert cfg.matching.threshold == 0.8
        assert cfg.matching.import_threshold == 0.75

    def test_sparse_override(self) -> None:
        cfg = CoterieConfig.model_validate({"layout": {"column_gap": 100}})
        assert cfg.layout.column_gap == 100.0
        assert cfg.layout.card_spacing_x == 220.0

    def test_frozen(self) -> None:
        cfg = CoterieConfig()
        with pytest.raises(ValidationError):
            cfg.store = cfg.store  # type: ignore[misc]


class TestSectionBounds:
    def test_api_key_is_secret(self) -> None:
        remote = RemoteConfig(url="https://x.test", api_key="top-secret")  # type: ignore[arg-type]
        assert "top-secret" not in repr(remote)
        assert remote.api_key.get_secret_value() == "top-secret"

    @pytest.mark.parametrize(
        ("model", "values"),
        [
            (RemoteConfig, {"timeout_seconds": 0}),
            (RemoteConfig, {"max_concurrency": 0}),
            (LayoutConfig, {"max_per_column": 0}),
            (MatchingConfig, {"threshold": -0.1}),
        ],
    )
    def test_rejects_out_of_range(self, model: type, values: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            model(**values)
