"""Key-value persistence and the entry repository built on it."""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from .samples import sample_entries
from .schema import Category, KnowledgeEntry

logger = logging.getLogger(__name__)

ENTRIES_KEY = "devbrain_entries"
HIGHLIGHT_KEY_PREFIX = "devbrain_highlight_"


def highlight_key(entry_id: str) -> str:
    """Store key holding the active highlight term of one entry."""
    return f"{HIGHLIGHT_KEY_PREFIX}{entry_id}"


class KeyValueStore(Protocol):
    """String key/value persistence collaborator."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Flat string mapping persisted to a single JSON file.

    Every write rewrites the whole file through a temporary sibling that is
    then moved into place, so a crash never leaves a half-written store.
    """

    def __init__(self, path: Path):
        self.path = path

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"[STORE] Could not read {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"[STORE] Ignoring malformed store file {self.path}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class EntryRepository:
    """Reads and writes the entry collection stored under one key."""

    def __init__(self, store: KeyValueStore, seed_samples: bool = True):
        self.store = store
        self.seed_samples = seed_samples

    def load(self) -> list[KnowledgeEntry]:
        """Load all entries, newest first as stored.

        Entries that fail validation are skipped. When nothing has been
        stored yet, the collection starts from the sample entries.
        """
        raw = self.store.get(ENTRIES_KEY)
        if raw is None:
            return sample_entries() if self.seed_samples else []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"[STORE] Stored entries are not valid JSON: {e}")
            return []
        if not isinstance(items, list):
            logger.error("[STORE] Stored entries are not a list, ignoring")
            return []

        entries = []
        for item in items:
            try:
                entries.append(KnowledgeEntry.model_validate(item))
            except ValidationError as e:
                logger.warning(f"[STORE] Skipping invalid entry: {e.error_count()} error(s)")
        return entries

    def save_all(self, entries: list[KnowledgeEntry]) -> None:
        payload = [entry.to_json_dict() for entry in entries]
        self.store.set(ENTRIES_KEY, json.dumps(payload, ensure_ascii=False))
        logger.debug(f"[STORE] Saved {len(entries)} entries")

    def get(self, entry_id: str) -> Optional[KnowledgeEntry]:
        return next((e for e in self.load() if e.id == entry_id), None)

    def add(self, entry: KnowledgeEntry) -> KnowledgeEntry:
        """Prepend a new entry to the collection."""
        entries = [entry, *self.load()]
        self.save_all(entries)
        logger.info(f"[STORE] Added entry '{entry.title}' ({entry.id})")
        return entry

    def delete(self, entry_id: str) -> bool:
        """Delete an entry and its highlight state. Returns False if missing."""
        entries = self.load()
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) == len(entries):
            return False
        self.save_all(remaining)
        self.store.remove(highlight_key(entry_id))
        logger.info(f"[STORE] Deleted entry {entry_id}")
        return True

    def search(self, query: str = "", category: Optional[Category] = None) -> list[KnowledgeEntry]:
        return [e for e in self.load() if e.matches(query, category)]
