"""Tests for InitService."""

from __future__ import annotations

from pathlib import Path

from coterie.config.discovery import CONFIG_FILENAME
from coterie.config.models import BackendKind
from coterie.infrastructure.store.local import LocalBackend
from coterie.infrastructure.store.memory import MemoryBackend
from coterie.infrastructure.store.store import GraphStore
from coterie.services.init import InitService


class TestInitProject:
    def test_writes_config_and_seeds(self, tmp_path: Path) -> None:
        with GraphStore(LocalBackend.open(tmp_path / ".coterie")) as store:
            result = InitService.init_project(tmp_path, store)
        assert result.ok
        assert result.op == "init"
        assert result.data["config_created"] is True
        assert result.data["backend"] == "local"
        assert result.data["object_classes"] == 3
        assert result.data["object_types"] == 25
        assert result.data["relationship_types"] == 11
        assert result.data["objects"] == 0
        assert result.warnings == []

        text = (tmp_path / CONFIG_FILENAME).read_text(encoding="utf-8")
        assert 'backend = "local"' in text
        assert 'data_dir = ".coterie"' in text

    def test_remote_config(self, tmp_path: Path, memory_store: GraphStore) -> None:
        InitService.init_project(
            tmp_path, memory_store, backend=BackendKind.REMOTE, data_dir="graph"
        )
        text = (tmp_path / CONFIG_FILENAME).read_text(encoding="utf-8")
        assert 'backend = "remote"' in text
        assert 'data_dir = "graph"' in text

    def test_existing_config_kept(self, tmp_path: Path, memory_store: GraphStore) -> None:
        config = tmp_path / CONFIG_FILENAME
        config.write_text('[store]\nbackend = "memory"\n', encoding="utf-8")
        result = InitService.init_project(tmp_path, memory_store)
        assert result.ok
        assert result.data["config_created"] is False
        assert config.read_text(encoding="utf-8") == '[store]\nbackend = "memory"\n'

    def test_creates_missing_root(self, tmp_path: Path, memory_store: GraphStore) -> None:
        root = tmp_path / "new" / "project"
        assert InitService.init_project(root, memory_store).ok
        assert (root / CONFIG_FILENAME).is_file()

    def test_counts_existing_objects(self, tmp_path: Path, memory_store: GraphStore) -> None:
        memory_store.create_object("company", "Acme")
        assert InitService.init_project(tmp_path, memory_store).data["objects"] == 1

    def test_unwritable_root(self, tmp_path: Path, memory_store: GraphStore) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        result = InitService.init_project(blocker, memory_store)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "IO_ERROR"

    def test_store_without_taxonomy_warns(self, tmp_path: Path) -> None:
        result = InitService.init_project(tmp_path, GraphStore(MemoryBackend(seed=False)))
        assert result.ok
        assert result.data["object_classes"] == 0
        assert len(result.warnings) == 1

    def test_store_failure(self, tmp_path: Path) -> None:
        backend = MemoryBackend()
        backend.fail_on.add("load")
        result = InitService.init_project(tmp_path, GraphStore(backend))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "STORAGE_FAILURE"
        # The config is still written before the store is touched.
        assert (tmp_path / CONFIG_FILENAME).is_file()
