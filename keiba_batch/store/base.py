"""Intermediate State Store protocol."""

from typing import Any, Protocol

from keiba_batch.constants import ApiType, FileStatus
from keiba_batch.models.intermediate import IntermediateFile, IntermediateFileInfo


class IntermediateStore(Protocol):
    """Durable store of one IntermediateFile per (api, date, trackCode, attempt).

    Every save() creates a new record and returns its reference; records are
    never overwritten. Only status and errors change afterwards, and a record
    in status ``sent`` never changes again.
    """

    def save(
        self, api: ApiType, date: str, track_code: str, data: list[dict[str, Any]]
    ) -> str:
        """Create a new ``pending`` record and return its reference."""
        ...

    def load(self, ref: str) -> IntermediateFile:
        """Load a record. Raises IntermediateFileNotFoundError if absent."""
        ...

    def update_status(
        self, ref: str, status: FileStatus, errors: list[str] | None = None
    ) -> None:
        """Change status (and errors). Raises SentRecordImmutableError on sent records."""
        ...

    def find(
        self,
        api: ApiType,
        date: str,
        track_code: str | None = None,
        status: FileStatus | None = None,
    ) -> list[IntermediateFileInfo]:
        """Return matching records ordered by createdAt."""
        ...

    def cleanup_old_files(self, days_to_keep: int = 7) -> int:
        """Best-effort removal of old records. Returns the number removed."""
        ...
