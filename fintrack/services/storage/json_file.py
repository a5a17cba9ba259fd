"""
JSON File Storage Implementation

DESIGN DECISION: The whole key-value space lives in one JSON document
on disk, the desktop equivalent of the mobile app's localStorage:
1. No database setup required
2. Users can inspect or back up a single file
3. Writes are full-document overwrites, so there is no partial state

TRADEOFFS:
- Every write rewrites the whole file (fine for one person's ledger)
- Last writer wins; only one session is active per device anyway

Each write goes to a temporary file that is then atomically moved into
place, so a crash mid-write never leaves a truncated document behind.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Optional

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fintrack.audit import AuditLogger
from fintrack.config import get_settings
from fintrack.services.storage.interface import (
    KeyValueStoreInterface,
    StorageError,
    StorageWriteError,
)


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """
    Key-value store persisted as a single JSON object on disk.

    The document is read once at construction and cached; every
    mutation writes the full document back before returning.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            path: Location of the JSON document. Defaults to the
                  configured storage path.
            audit_logger: Receives an event if the document on disk
                  turns out to be unreadable.
        """
        self._path = Path(path) if path else get_settings().storage.path
        self._audit_logger = audit_logger
        self._document: dict[str, Any] = self._load_document()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def _tmp_path(self) -> Path:
        return self._path.with_name(self._path.name + ".tmp")

    def _load_document(self) -> dict[str, Any]:
        """
        Read the document from disk.

        A missing file is an empty store. An unreadable or non-object
        document is also treated as empty: availability over data.
        """
        if not self._path.exists():
            return {}

        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            self._report_recovery(f"unreadable document: {e}")
            return {}

        if not isinstance(document, dict):
            self._report_recovery(
                f"expected a JSON object, found {type(document).__name__}"
            )
            return {}

        return document

    def _report_recovery(self, reason: str) -> None:
        if self._audit_logger:
            self._audit_logger.log_stored_data_recovered(
                key=str(self._path),
                reason=reason,
            )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_document(self, payload: str) -> None:
        """Atomically replace the document on disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._tmp_path.write_text(payload, encoding="utf-8")
        os.replace(self._tmp_path, self._path)

    def _commit(self, document: dict[str, Any]) -> None:
        try:
            payload = json.dumps(document, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Document is not JSON-serializable: {e}")

        try:
            self._write_document(payload)
        except OSError as e:
            self._discard_tmp_file()
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type="storage_write_failed",
                    error_message=str(e),
                    details={"path": str(self._path)},
                )
            raise StorageWriteError(f"Failed to write {self._path}: {e}")

        self._document = document

    def _discard_tmp_file(self) -> None:
        """Remove a temporary file left behind by a failed write."""
        try:
            self._tmp_path.unlink(missing_ok=True)
        except OSError as e:
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type="storage_cleanup_failed",
                    error_message=str(e),
                    details={"path": str(self._tmp_path)},
                )

    def get(self, key: str) -> Optional[Any]:
        if key not in self._document:
            return None
        return copy.deepcopy(self._document[key])

    def set(self, key: str, value: Any) -> None:
        document = dict(self._document)
        document[key] = copy.deepcopy(value)
        self._commit(document)

    def remove(self, key: str) -> bool:
        if key not in self._document:
            return False
        document = dict(self._document)
        del document[key]
        self._commit(document)
        return True

    def keys(self) -> list[str]:
        return sorted(self._document)
