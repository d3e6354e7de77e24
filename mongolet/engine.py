"""
Store facade that wires together querying, updating, projection and storage.
"""

from __future__ import annotations

import logging

from .config import StoreOptions
from .document import DocMap, Document, insert_document
from .errors import StorageError
from .projection import project
from .query import select, select_one
from .storage import JsonFileStorage
from .update import apply_update

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    One named collection of documents, kept in memory and optionally saved
    to a JSON file after every change.
    """

    def __init__(
        self,
        options: StoreOptions,
        documents: DocMap | None = None,
        storage: JsonFileStorage | None = None,
    ) -> None:
        self.options = options
        self.docs: DocMap = documents if documents is not None else {}
        if storage is None and not options.in_memory:
            storage = JsonFileStorage(options.path, sync_every_write=options.sync_every_write)
        self.storage = storage

    @property
    def name(self) -> str:
        return self.options.name

    def __len__(self) -> int:
        return len(self.docs)

    def count(self, query: object) -> int:
        """
        Count the documents matching the query.
        """
        return len(select(self.docs, query))

    def find(self, query: object, projection: object | None = None) -> list[Document]:
        """
        Return copies of all matching documents, in insertion order.
        """
        ids = select(self.docs, query)
        results: list[Document] = []
        for doc_id in ids:
            doc = project(self.docs[doc_id], projection if projection is not None else {})
            if doc is None:
                # Invalid projection: it would fail for every document.
                return []
            results.append(doc)
        return results

    def find_one(self, query: object, projection: object | None = None) -> Document | None:
        """
        Return a copy of the first matching document or None.
        """
        doc_id = select_one(self.docs, query)
        if doc_id is None:
            return None
        return project(self.docs[doc_id], projection if projection is not None else {})

    def insert(self, doc: object, skip_save: bool = False) -> str | None:
        """
        Insert a copy of ``doc`` and return its id, or None if it was rejected.
        """
        doc_id = insert_document(self.docs, doc)
        if doc_id is not None and not skip_save:
            self.save()
        return doc_id

    def update(
        self,
        query: object,
        update: object,
        multi: bool = False,
        skip_save: bool = False,
    ) -> int:
        """
        Apply ``update`` to the matching documents and return how many changed.

        Selecting more than one document without ``multi=True`` changes nothing.
        """
        ids = select(self.docs, query)
        if not ids:
            return 0

        if len(ids) > 1 and not multi:
            logger.warning(
                "update skipped: %d documents selected without multi=True", len(ids)
            )
            return 0

        num_updated = 0
        for doc_id in ids:
            num_updated += apply_update(self.docs[doc_id], update)

        if num_updated and not skip_save:
            self.save()
        return num_updated

    def remove(self, query: object, multi: bool = False, skip_save: bool = False) -> int:
        """
        Delete the matching documents and return how many were removed.

        Selecting more than one document without ``multi=True`` removes nothing.
        """
        ids = select(self.docs, query)
        if not ids:
            return 0

        if len(ids) > 1 and not multi:
            logger.warning(
                "remove skipped: %d documents selected without multi=True", len(ids)
            )
            return 0

        for doc_id in ids:
            del self.docs[doc_id]

        if not skip_save:
            self.save()
        return len(ids)

    def save(self) -> bool:
        """
        Write the whole store to disk. In-memory stores are never written.
        """
        if self.storage is None:
            return True

        try:
            self.storage.save(self.options.to_dict(), self.docs)
        except StorageError as exc:
            logger.error("save failed for store %r: %s", self.name, exc)
            return False
        return True
