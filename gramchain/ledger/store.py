"""Mini README: Persistent record store for the GramChain ledger.

Structure:
    * RecordStoreCorruptedError - raised when stored JSON cannot be parsed.
    * RecordStore - abstract base implementing load/save/clear over two keys.
    * InMemoryRecordStore - key -> JSON text mapping, mirrors browser storage.
    * JsonFileRecordStore - one ``<key>.json`` file per key on disk.

The two collections live under independent keys (``blockchain_transactions``
and ``blockchain_projects``). A key that is absent on load is seeded with an
empty array and written back immediately. Corrupt content falls back to empty
collections with a warning unless ``strict=True`` is requested. There is no
schema version; ``clear`` followed by a fresh load is the only migration.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from ..logging_utils import get_logger
from .models import Project, Transaction

LOGGER = get_logger(__name__)

TRANSACTIONS_KEY = "blockchain_transactions"
PROJECTS_KEY = "blockchain_projects"

_RecordT = TypeVar("_RecordT")


class RecordStoreCorruptedError(ValueError):
    """Stored ledger content is not valid JSON or does not match the schema."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Stored collection '{key}' is unreadable: {reason}")
        self.key = key


class RecordStore(ABC):
    """Load and persist the transaction and project collections."""

    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        """Return the raw text stored under ``key`` or ``None`` when absent."""

    @abstractmethod
    def _write(self, key: str, text: str) -> None:
        """Persist ``text`` under ``key``."""

    @abstractmethod
    def _remove(self, key: str) -> None:
        """Delete ``key`` if present."""

    def load(self, *, strict: bool = False) -> Tuple[List[Transaction], List[Project]]:
        """Return both collections, seeding empty ones on first use."""

        transactions = self._load_collection(TRANSACTIONS_KEY, Transaction.from_dict, strict)
        projects = self._load_collection(PROJECTS_KEY, Project.from_dict, strict)
        LOGGER.debug(
            "Loaded %s transactions and %s projects", len(transactions), len(projects)
        )
        return transactions, projects

    def save(self, transactions: Sequence[Transaction], projects: Sequence[Project]) -> None:
        """Persist both collections wholesale."""

        self.save_transactions(transactions)
        self.save_projects(projects)

    def save_transactions(self, transactions: Sequence[Transaction]) -> None:
        self._write(TRANSACTIONS_KEY, _dump([item.as_dict() for item in transactions]))

    def save_projects(self, projects: Sequence[Project]) -> None:
        self._write(PROJECTS_KEY, _dump([item.as_dict() for item in projects]))

    def clear(self) -> None:
        """Remove both collections; the next load starts from empty."""

        self._remove(TRANSACTIONS_KEY)
        self._remove(PROJECTS_KEY)
        LOGGER.info("Cleared ledger record store")

    def _load_collection(
        self,
        key: str,
        factory: Callable[[Dict[str, Any]], _RecordT],
        strict: bool,
    ) -> List[_RecordT]:
        raw = self._read(key)
        if raw is None:
            LOGGER.debug("No stored data for '%s'; seeding empty collection", key)
            self._write(key, _dump([]))
            return []
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise RecordStoreCorruptedError(key, "expected a JSON array")
            return [factory(item) for item in payload]
        except RecordStoreCorruptedError:
            if strict:
                raise
            LOGGER.warning("Stored collection '%s' is not an array; using empty collection", key)
            return []
        except (ValueError, KeyError, TypeError) as error:
            if strict:
                raise RecordStoreCorruptedError(key, str(error)) from error
            LOGGER.warning(
                "Stored collection '%s' could not be parsed (%s); using empty collection",
                key,
                error,
            )
            return []


def _dump(payload: List[Dict[str, Any]]) -> str:
    return json.dumps(payload)


class InMemoryRecordStore(RecordStore):
    """Volatile store keeping serialised JSON text per key."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.entries: Dict[str, str] = dict(initial or {})

    def _read(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def _write(self, key: str, text: str) -> None:
        self.entries[key] = text

    def _remove(self, key: str) -> None:
        self.entries.pop(key, None)


class JsonFileRecordStore(RecordStore):
    """Store each collection as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        LOGGER.debug("Ledger record store directory set to %s", self.directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, text: str) -> None:
        self._path(key).write_text(text, encoding="utf-8")

    def _remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
