"""
Notebook persistence for saved dictionary entries.

The notebook is an ordered list of entries, newest first, mutated only by
explicit save/unsave (plus image backfill of an entry that is already saved).
It is stored as a single JSON document in ~/.lingopop/notebook.json:

    {"schema_version": 1, "entries": [...]}

A bare JSON list (the unversioned layout) is accepted on load.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from loguru import logger

from lingopop.core.errors import NotebookError
from lingopop.core.languages import Language
from lingopop.core.models import DictEntry

SCHEMA_VERSION = 1


class NotebookStore:
    """
    Ordered collection of saved entries.

    Reads serve the resolver's cache lookup and identity checks; identity is
    always the entry id, never a content comparison. A store created without
    a path keeps everything in memory.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        self._entries: list[DictEntry] = []
        if path is not None and path.exists():
            self._entries = self._load(path)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def entries(self) -> list[DictEntry]:
        """Saved entries, newest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def find(self, term: str, source_lang: Language, target_lang: Language) -> DictEntry | None:
        """Saved entry for ``term`` in this language pair, if any."""
        for entry in self._entries:
            if entry.matches(term, source_lang, target_lang):
                return entry
        return None

    def get(self, entry_id: str) -> DictEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def contains(self, entry_id: str) -> bool:
        return self.get(entry_id) is not None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save(self, entry: DictEntry) -> bool:
        """Prepend ``entry``. Returns False if it (or its term) is already saved."""
        if self.contains(entry.id):
            return False
        if entry.source_lang and entry.target_lang:
            duplicate = self.find(entry.source_term, entry.source_lang, entry.target_lang)
        else:
            duplicate = next((e for e in self._entries if e.key == entry.key), None)
        if duplicate is not None:
            logger.debug(f"'{entry.source_term}' already saved as {duplicate.id}")
            return False

        self._entries.insert(0, entry)
        self._flush()
        return True

    def unsave(self, entry_id: str) -> bool:
        """Remove an entry by id. Returns False if it was not saved."""
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._entries = remaining
        self._flush()
        return True

    def toggle(self, entry: DictEntry) -> bool:
        """Save if absent, remove if present. Returns whether it is now saved."""
        if self.contains(entry.id):
            self.unsave(entry.id)
            return False
        return self.save(entry)

    def replace(self, entry: DictEntry) -> bool:
        """Swap in a new value for an already-saved entry, keeping its position."""
        for index, existing in enumerate(self._entries):
            if existing.id == entry.id:
                self._entries[index] = entry
                self._flush()
                return True
        return False

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _flush(self) -> None:
        if self.path is None:
            return
        document = {
            "schema_version": SCHEMA_VERSION,
            "entries": [e.to_dict() for e in self._entries],
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
        except OSError as exc:
            raise NotebookError(f"Could not write notebook {self.path}: {exc}") from exc

    @staticmethod
    def _load(path: Path) -> list[DictEntry]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise NotebookError(f"Could not read notebook {path}: {exc}") from exc

        if isinstance(data, list):
            raw_entries = data
        elif isinstance(data, dict):
            version = data.get("schema_version", 0)
            if not isinstance(version, int) or version > SCHEMA_VERSION:
                raise NotebookError(
                    f"Notebook {path} uses schema version {version}; "
                    f"this version supports up to {SCHEMA_VERSION}"
                )
            raw_entries = data.get("entries", [])
        else:
            raise NotebookError(f"Notebook {path} is not a JSON object or list")

        try:
            entries = [DictEntry.from_dict(item) for item in raw_entries]
        except (KeyError, TypeError, ValueError) as exc:
            raise NotebookError(f"Notebook {path} has a malformed entry: {exc}") from exc

        logger.debug(f"Loaded {len(entries)} notebook entries from {path}")
        return entries
