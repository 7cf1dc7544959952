# src/app/infra/storage/local_provider.py
"""
Local filesystem storage for the drink log.
Writes go to a temp file in the same directory and are swapped in with
os.replace, so readers never see a half-written file.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from src.app.domain.errors import PersistenceReadError, PersistenceWriteError
from src.app.infra.storage.base import BlobStorage

logger = logging.getLogger(__name__)


class LocalFileStorage(BlobStorage):
    def __init__(self, path: Path | str):
        self.path = Path(path)

    @property
    def location(self) -> str:
        return str(self.path)

    def read_bytes(self) -> Optional[bytes]:
        if not self.path.exists():
            logger.debug("No drink log at %s", self.path)
            return None
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise PersistenceReadError(self.location, str(e)) from e

    def write_bytes(self, data: bytes) -> None:
        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise PersistenceWriteError(self.location, str(e)) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_name)

        logger.debug("Wrote %d bytes to %s", len(data), self.path)
