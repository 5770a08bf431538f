"""Supported languages and speech voices."""

from __future__ import annotations

from enum import Enum


class Language(str, Enum):
    """Languages a learner can study from or into. Values are prompt display names."""

    ENGLISH = "English"
    CHINESE = "Chinese (Simplified)"
    SPANISH = "Spanish"
    FRENCH = "French"
    GERMAN = "German"
    JAPANESE = "Japanese"
    KOREAN = "Korean"
    PORTUGUESE = "Portuguese"
    RUSSIAN = "Russian"
    ARABIC = "Arabic"

    @classmethod
    def parse(cls, name: str) -> Language:
        """Resolve a display name or member name, case-insensitively."""
        key = name.strip().casefold()
        for language in cls:
            if key in (language.value.casefold(), language.name.casefold()):
                return language
        # "Chinese" alone is accepted for the simplified variant
        if key == "chinese":
            return cls.CHINESE
        raise ValueError(f"Unsupported language: {name!r}")


class Voice(str, Enum):
    """Prebuilt speech voices."""

    KORE = "Kore"
    PUCK = "Puck"
    CHARON = "Charon"

    @classmethod
    def parse(cls, name: str) -> Voice:
        key = name.strip().casefold()
        for voice in cls:
            if voice.value.casefold() == key:
                return voice
        raise ValueError(f"Unknown voice: {name!r}")


DEFAULT_VOICE = Voice.KORE
