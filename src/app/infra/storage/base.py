# src/app/infra/storage/base.py
"""
Abstract base class for the drink log's persistence medium.
The store only produces and consumes one serialized blob; where it lives is up
to the implementation (local file, app container, remote bucket, ...).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class BlobStorage(ABC):
    """
    Abstract interface for reading and writing the serialized drink log.

    Implementations:
    - LocalFileStorage: a JSON file on the local filesystem
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the blob lives (for logs)."""
        pass

    @abstractmethod
    def read_bytes(self) -> Optional[bytes]:
        """
        Read the whole blob.

        Returns:
            The stored bytes, or None when nothing has been persisted yet

        Raises:
            PersistenceReadError: If the medium exists but cannot be read
        """
        pass

    @abstractmethod
    def write_bytes(self, data: bytes) -> None:
        """
        Replace the whole blob in one step.

        Args:
            data: The serialized drink log

        Raises:
            PersistenceWriteError: If the write did not complete
        """
        pass
