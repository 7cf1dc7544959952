from __future__ import annotations


class RecordStoreError(Exception):
    pass


class PersistenceReadError(RecordStoreError):
    def __init__(self, location: str, reason: str = "Read failed"):
        super().__init__(f"Failed to read drink log from {location}: {reason}")
        self.location = location
        self.reason = reason


class PersistenceWriteError(RecordStoreError):
    def __init__(self, location: str, reason: str = "Write failed"):
        super().__init__(f"Failed to write drink log to {location}: {reason}")
        self.location = location
        self.reason = reason


class RecordDecodeError(PersistenceReadError):
    def __init__(self, reason: str):
        super().__init__("serialized payload", reason)
