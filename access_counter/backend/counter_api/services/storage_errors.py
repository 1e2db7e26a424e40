from __future__ import annotations


class StorageError(RuntimeError):
    kind = "storage_error"

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(f"{backend}: {message}")
        self.backend = backend


class StorageUnavailable(StorageError):
    """Backing store could not be reached (connect / network failure)."""

    kind = "storage_unavailable"


class WriteRejected(StorageError):
    """Store was reachable but refused the write."""

    kind = "write_rejected"
