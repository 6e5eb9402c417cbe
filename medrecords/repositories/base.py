"""
File-backed repository

One repository owns one entity kind: an in-memory ordered list loaded lazily from a
pipe-delimited file, guarded by a re-entrant lock, and written back in full after every
successful mutation. Entities are copied in and out so callers never share state with
the store.
"""

import functools
import logging
import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Generic, Iterator, List, Optional, TypeVar, Union

from medrecords.codec import EntityCodec, ParseError
from medrecords.filestore import FileStore
from medrecords.ids import next_id
from medrecords.models import Record

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)


class StoreError(str, Enum):
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    IO_FAILURE = "io_failure"
    MALFORMED_DATA = "malformed_data"


def synchronized(method):
    """Run the method under the repository lock, after the lazy load, with last_error reset"""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            self.last_error = None
            self._ensure_loaded()
            return method(self, *args, **kwargs)

    return wrapper


class FileRepository(Generic[T]):
    """Base repository; subclasses set the codec, the ID prefix and the duplicate predicate"""

    codec: EntityCodec
    id_prefix: str = ""

    def __init__(self, file_path: Union[str, Path], file_store: FileStore):
        self.file_path = Path(file_path)
        self.file_store = file_store
        self.last_error: Optional[StoreError] = None
        self.skipped_lines = 0
        self._items: List[T] = []
        self._loaded = False
        self._lock = threading.RLock()

    @property
    def kind(self) -> str:
        return self.codec.kind

    @contextmanager
    def locked(self) -> Iterator["FileRepository[T]"]:
        """Hold the repository lock across several calls"""
        with self._lock:
            self._ensure_loaded()
            yield self

    # ------------------------------------------------------------------
    # Loading and saving
    # ------------------------------------------------------------------

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            logger.debug(f"Lazy loading {self.kind} from {self.file_path}")
            self._load()

    def _load(self) -> bool:
        self.skipped_lines = 0

        if not self.file_store.file_exists(self.file_path):
            self._items = []
            self._loaded = True
            if not self.file_store.create_file_if_not_exists(self.file_path, self.codec.header()):
                self.last_error = StoreError.IO_FAILURE
                logger.error(f"Cannot create {self.kind} data file {self.file_path}")
                return False
            return True

        items: List[T] = []
        skipped = 0
        seen = set()
        for number, line in enumerate(self.file_store.read_all_lines(self.file_path), start=1):
            try:
                entity = self.codec.decode(line)
            except ParseError as e:
                skipped += 1
                logger.warning(f"Skipping malformed line {number} in {self.file_path.name}: {e}")
                continue
            if entity is None:
                continue
            if entity.entity_id in seen:
                skipped += 1
                logger.warning(f"Skipping duplicate {self.kind} {entity.entity_id} on line {number} in {self.file_path.name}")
                continue
            seen.add(entity.entity_id)
            items.append(entity)

        # Swap in only once the whole file has been read
        self._items = items
        self.skipped_lines = skipped
        self._loaded = True
        if skipped:
            self.last_error = StoreError.MALFORMED_DATA
        return True

    def load(self) -> bool:
        """Re-read the backing file, discarding the in-memory list"""
        with self._lock:
            self.last_error = None
            return self._load()

    def _save(self) -> bool:
        self.file_store.create_backup(self.file_path)
        lines = [self.codec.encode(item) for item in self._items]
        if not self.file_store.write_lines(self.file_path, lines, self.codec.header()):
            # In-memory state stays ahead of the file until the next successful save
            self.last_error = StoreError.IO_FAILURE
            logger.error(f"Failed to save {len(lines)} {self.kind} records to {self.file_path}")
            return False
        return True

    @synchronized
    def save(self) -> bool:
        return self._save()

    def set_file_path(self, file_path: Union[str, Path]) -> None:
        with self._lock:
            self.file_path = Path(file_path)
            self._items = []
            self._loaded = False

    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Uniqueness
    # ------------------------------------------------------------------

    def conflicts(self, candidate: T, existing: T) -> bool:
        """True when candidate may not coexist with another stored record"""
        return False

    def _find_conflict(self, candidate: T) -> Optional[T]:
        for existing in self._items:
            if existing.entity_id == candidate.entity_id:
                continue
            if self.conflicts(candidate, existing):
                return existing
        return None

    def _index_of(self, entity_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.entity_id == entity_id:
                return index
        return -1

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    @synchronized
    def get_all(self) -> List[T]:
        return [item.model_copy(deep=True) for item in self._items]

    @synchronized
    def get_by_id(self, entity_id: str) -> Optional[T]:
        index = self._index_of(entity_id)
        if index < 0:
            self.last_error = StoreError.NOT_FOUND
            return None
        return self._items[index].model_copy(deep=True)

    @synchronized
    def add(self, entity: T) -> bool:
        if self._index_of(entity.entity_id) >= 0:
            self.last_error = StoreError.DUPLICATE
            logger.debug(f"{self.kind} {entity.entity_id} already exists")
            return False
        conflict = self._find_conflict(entity)
        if conflict is not None:
            self.last_error = StoreError.DUPLICATE
            logger.debug(f"{self.kind} {entity.entity_id} conflicts with {conflict.entity_id}")
            return False
        self._items.append(entity.model_copy(deep=True))
        return self._save()

    @synchronized
    def update(self, entity: T) -> bool:
        index = self._index_of(entity.entity_id)
        if index < 0:
            self.last_error = StoreError.NOT_FOUND
            return False
        conflict = self._find_conflict(entity)
        if conflict is not None:
            self.last_error = StoreError.DUPLICATE
            logger.debug(f"{self.kind} {entity.entity_id} conflicts with {conflict.entity_id}")
            return False
        self._items[index] = entity.model_copy(deep=True)
        return self._save()

    @synchronized
    def remove(self, entity_id: str) -> bool:
        index = self._index_of(entity_id)
        if index < 0:
            self.last_error = StoreError.NOT_FOUND
            return False
        del self._items[index]
        return self._save()

    @synchronized
    def exists(self, entity_id: str) -> bool:
        return self._index_of(entity_id) >= 0

    @synchronized
    def count(self) -> int:
        return len(self._items)

    @synchronized
    def clear(self) -> bool:
        self._items = []
        return self._save()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @synchronized
    def find(self, predicate: Callable[[T], bool]) -> List[T]:
        return [item.model_copy(deep=True) for item in self._items if predicate(item)]

    @synchronized
    def find_one(self, predicate: Callable[[T], bool]) -> Optional[T]:
        for item in self._items:
            if predicate(item):
                return item.model_copy(deep=True)
        self.last_error = StoreError.NOT_FOUND
        return None

    @synchronized
    def get_next_id(self) -> str:
        return next_id(self.id_prefix, (item.entity_id for item in self._items))


def contains_text(value: str, query: str) -> bool:
    """Case-insensitive substring match used by search queries"""
    return query.strip().casefold() in value.casefold()
