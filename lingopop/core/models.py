"""
Domain data model for LingoPop.

Entries and reports are plain dataclasses, serialized the same way the
notebook persists them. Oracle payload validation lives in
``lingopop.integrations.schemas``; these types are only ever built from
already-validated payloads.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any

from .languages import Language


def normalize_term(term: str) -> str:
    """Comparison key for a term: trimmed and casefolded."""
    return term.strip().casefold()


# =============================================================================
# Dictionary entries
# =============================================================================


@dataclass(frozen=True)
class Example:
    """An example sentence with reading and translation."""

    text: str
    phonetic: str
    translation: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Example:
        return cls(
            text=data["text"],
            phonetic=data["phonetic"],
            translation=data["translation"],
        )


@dataclass(frozen=True)
class DictEntry:
    """A resolved, enriched vocabulary entry."""

    id: str
    source_term: str  # learner's input, original casing
    target_term: str
    phonetic: str
    native_definition: str
    examples: tuple[Example, ...]
    usage_note: str
    created_at: int  # epoch milliseconds
    image_ref: str | None = None
    source_lang: Language | None = None
    target_lang: Language | None = None

    @property
    def key(self) -> str:
        return normalize_term(self.source_term)

    def matches(self, term: str, source_lang: Language, target_lang: Language) -> bool:
        """Case-insensitive term match within a language pair.

        Legacy entries saved without a language pair match on term alone.
        """
        if self.key != normalize_term(term):
            return False
        if self.source_lang is None or self.target_lang is None:
            return True
        return self.source_lang == source_lang and self.target_lang == target_lang

    def with_image(self, image_ref: str) -> DictEntry:
        return replace(self, image_ref=image_ref)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["examples"] = [asdict(e) for e in self.examples]
        data["source_lang"] = self.source_lang.value if self.source_lang else None
        data["target_lang"] = self.target_lang.value if self.target_lang else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DictEntry:
        """Create from dictionary. Accepts the original camelCase keys too."""
        source_lang = data.get("source_lang")
        target_lang = data.get("target_lang")
        return cls(
            id=str(data["id"]),
            source_term=data.get("source_term") or data["term"],
            target_term=data.get("target_term") or data["targetTerm"],
            phonetic=data.get("phonetic", ""),
            native_definition=data.get("native_definition") or data.get("nativeDefinition", ""),
            examples=tuple(Example.from_dict(e) for e in data.get("examples", [])),
            usage_note=data.get("usage_note") or data.get("usageNote", ""),
            created_at=int(data.get("created_at") or data.get("createdAt") or 0),
            image_ref=data.get("image_ref") or data.get("imageUrl"),
            source_lang=Language(source_lang) if source_lang else None,
            target_lang=Language(target_lang) if target_lang else None,
        )


def new_entry_id() -> str:
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


# =============================================================================
# Roleplay
# =============================================================================


class Role(str, Enum):
    """Who spoke a turn."""

    LEARNER = "learner"
    COUNTERPART = "counterpart"


@dataclass(frozen=True)
class ChatTurn:
    """A single utterance in a roleplay or tutor conversation."""

    role: Role
    text: str


@dataclass(frozen=True)
class ScenarioDescriptor:
    """A generated roleplay premise. Never persisted."""

    id: str
    title: str
    description: str
    opening_line: str


@dataclass(frozen=True)
class Correction:
    original: str
    correction: str
    explanation: str


@dataclass(frozen=True)
class ScenarioReport:
    """Terminal grading result of a roleplay session."""

    score: int  # 0-100
    feedback: str
    corrections: tuple[Correction, ...] = field(default_factory=tuple)


# =============================================================================
# Media
# =============================================================================


@dataclass(frozen=True)
class GeneratedImage:
    """Inline image returned by the Oracle."""

    mime_type: str
    data: str  # base64

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"
