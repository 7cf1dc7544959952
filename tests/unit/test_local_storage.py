from __future__ import annotations

from pathlib import Path

import pytest

from src.app.domain.errors import PersistenceReadError, PersistenceWriteError
from src.app.infra.storage.local_provider import LocalFileStorage


class TestLocalFileStorageRead:
    def test_missing_file_returns_none(self, tmp_path: Path) -> None:
        storage = LocalFileStorage(tmp_path / "drinks.json")

        assert storage.read_bytes() is None

    def test_unreadable_path_raises(self, tmp_path: Path) -> None:
        directory = tmp_path / "drinks.json"
        directory.mkdir()
        storage = LocalFileStorage(directory)

        with pytest.raises(PersistenceReadError):
            storage.read_bytes()


class TestLocalFileStorageWrite:
    def test_write_then_read(self, tmp_path: Path) -> None:
        storage = LocalFileStorage(tmp_path / "drinks.json")

        storage.write_bytes(b"[]")

        assert storage.read_bytes() == b"[]"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        storage = LocalFileStorage(tmp_path / "nested" / "dir" / "drinks.json")

        storage.write_bytes(b"[1]")

        assert (tmp_path / "nested" / "dir" / "drinks.json").read_bytes() == b"[1]"

    def test_overwrites_whole_blob(self, tmp_path: Path) -> None:
        storage = LocalFileStorage(tmp_path / "drinks.json")
        storage.write_bytes(b"[1, 2, 3, 4, 5]")

        storage.write_bytes(b"[]")

        assert storage.read_bytes() == b"[]"

    def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        storage = LocalFileStorage(tmp_path / "drinks.json")

        storage.write_bytes(b"[]")

        assert [p.name for p in tmp_path.iterdir()] == ["drinks.json"]

    def test_unwritable_location_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")
        storage = LocalFileStorage(blocker / "drinks.json")

        with pytest.raises(PersistenceWriteError) as exc_info:
            storage.write_bytes(b"[]")

        assert exc_info.value.location == str(blocker / "drinks.json")

    def test_location(self, tmp_path: Path) -> None:
        assert LocalFileStorage(tmp_path / "drinks.json").location == str(tmp_path / "drinks.json")
