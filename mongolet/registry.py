"""
Registry of open stores, keyed by name.

The embedding application owns a StoreRegistry and opens stores through it;
opening the same name twice returns a store over the same documents.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .config import StoreOptions
from .engine import DocumentStore
from .errors import StoreConflictError, StoreNotFoundError
from .storage import JsonFileStorage

logger = logging.getLogger(__name__)


class StoreRegistry:
    def __init__(self) -> None:
        self._stores: dict[str, DocumentStore] = {}

    def open(self, options: StoreOptions | str, **kwargs: object) -> DocumentStore:
        """
        Return the open store for ``options.name``, loading or creating it
        on first use.

        ``options`` may be a store name, in which case ``kwargs`` are passed
        to StoreOptions.
        """
        if isinstance(options, str):
            options = StoreOptions(options, **kwargs)

        existing = self._stores.get(options.name)
        if existing is not None:
            if existing.options.in_memory != options.in_memory:
                kind = "in-memory" if existing.options.in_memory else "persisted"
                raise StoreConflictError(
                    f"store {options.name!r} is already open as a {kind} store"
                )
            return existing

        if options.in_memory:
            store = self._create(options)
        else:
            storage = JsonFileStorage(options.path, sync_every_write=options.sync_every_write)
            if storage.exists():
                documents = storage.load()
                store = DocumentStore(options, documents, storage)
                logger.info("store loaded: %s, documents: %d", options.name, len(documents))
            else:
                store = self._create(options, storage)

        self._stores[options.name] = store
        return store

    def close(self, name: str) -> bool:
        """
        Forget the store. Returns False if no store of that name is open.
        """
        if self._stores.pop(name, None) is None:
            logger.warning("close skipped: store is not open: %r", name)
            return False
        return True

    def get(self, name: str) -> DocumentStore | None:
        return self._stores.get(name)

    def names(self) -> list[str]:
        return list(self._stores)

    def __contains__(self, name: object) -> bool:
        return name in self._stores

    def __len__(self) -> int:
        return len(self._stores)

    def __iter__(self) -> Iterator[str]:
        return iter(self._stores)

    # --- internal helpers -------------------------------------------------

    @staticmethod
    def _create(options: StoreOptions, storage: JsonFileStorage | None = None) -> DocumentStore:
        if not options.create_if_not_exists:
            raise StoreNotFoundError(f"store does not exist: {options.name!r}")
        logger.info("store created: %s, documents: 0", options.name)
        return DocumentStore(options, {}, storage)
