"""
Whole-store JSON file storage.

Every save rewrites the file with a snapshot of the store:

  {"options": {...}, "documents": {"<id>": {...}, ...}}

Documents keep their insertion order across a save/load cycle.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from .document import ID_FIELD, DocMap, validate_document
from .errors import DocumentValidationError, StorageError


class JsonFileStorage:
    def __init__(self, path: str | Path, sync_every_write: bool = False) -> None:
        self.path = Path(path)
        self.sync_every_write = sync_every_write

    def exists(self) -> bool:
        """
        True if the store file exists; raises if the path is not a regular file.
        """
        if not self.path.exists():
            return False
        if not self.path.is_file():
            raise StorageError(f"store path is not a file: {self.path}")
        return True

    def load(self) -> DocMap:
        """
        Read the snapshot from disk and return its documents keyed by id.
        """
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, ValueError) as exc:
            raise StorageError(f"store read failed: {self.path}: {exc}") from exc

        if not isinstance(payload, dict):
            raise StorageError(f"store file is not a JSON object: {self.path}")

        documents = payload.get("documents", {})
        if not isinstance(documents, dict):
            raise StorageError(f"store file has malformed documents: {self.path}")

        for key, doc in documents.items():
            try:
                validate_document(doc)
            except DocumentValidationError as exc:
                raise StorageError(f"store file has an invalid document {key!r}: {exc}") from exc
            if doc.get(ID_FIELD) != key:
                raise StorageError(f"store file document {key!r} has a mismatched {ID_FIELD}")
        return documents

    def save(self, options: dict[str, object], documents: DocMap) -> None:
        """
        Serialize the whole store and atomically replace the file on disk.
        """
        payload = json.dumps(
            {"options": options, "documents": documents},
            separators=(",", ":"),
        )

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.flush()
                    if self.sync_every_write:
                        os.fsync(fh.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"store write failed: {self.path}: {exc}") from exc
