"""Mnemonic stories woven from the learner's saved words."""

from __future__ import annotations

import re
from typing import Sequence

from loguru import logger

from lingopop.core.errors import LingoPopError, StoryFailure
from lingopop.core.harness import bounded
from lingopop.core.languages import Language
from lingopop.core.models import DictEntry
from lingopop.integrations.oracle import Oracle

EMPTY_NOTEBOOK_MESSAGE = "Your notebook is empty! Add some words first."

_HIGHLIGHT = re.compile(r"(\*[^*]+\*)")


class StoryWriter:
    """Asks the Oracle for a short story using every saved target term."""

    def __init__(self, oracle: Oracle, timeout: float = 20.0):
        self.oracle = oracle
        self.timeout = timeout

    async def write_story(
        self,
        entries: Sequence[DictEntry],
        source_lang: Language,
        target_lang: Language,
    ) -> str:
        if not entries:
            return EMPTY_NOTEBOOK_MESSAGE

        words = [e.target_term or e.source_term for e in entries]
        try:
            return await bounded(
                self.oracle.write_story(words, source_lang, target_lang),
                operation="write_story",
                timeout=self.timeout,
            )
        except LingoPopError as exc:
            logger.error(f"Story generation failed: {exc}")
            raise StoryFailure("Sorry, I couldn't write a story right now.") from exc


def split_highlights(story: str) -> list[tuple[str, bool]]:
    """Split a story into ``(segment, is_target_word)`` pairs, dropping the asterisks."""
    segments = []
    for part in _HIGHLIGHT.split(story):
        if not part:
            continue
        if len(part) > 2 and part.startswith("*") and part.endswith("*"):
            segments.append((part[1:-1], True))
        else:
            segments.append((part, False))
    return segments
