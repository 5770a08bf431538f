"""
Oracle contract.

The Oracle is the external generative service behind every enrichment,
scenario, reply, grade, image and voice. Implementations must localize their
own failures: malformed payloads raise ``OracleError``, failed requests raise
``OracleTransportError``. Timeouts are applied by callers through
``lingopop.core.harness.bounded``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from lingopop.core.languages import Language, Voice
from lingopop.core.models import (
    ChatTurn,
    GeneratedImage,
    ScenarioDescriptor,
    ScenarioReport,
)

from .schemas import EnrichPayload


class Oracle(ABC):
    """Request/response contract of the generative service. No streaming."""

    @abstractmethod
    async def enrich(
        self, term: str, source_lang: Language, target_lang: Language
    ) -> EnrichPayload:
        """Translate and explain ``term`` for a ``source_lang`` speaker learning ``target_lang``."""

    @abstractmethod
    async def synthesize(self, text: str, voice: Voice) -> str:
        """Speak ``text``. Returns base64 PCM16LE mono audio at 24 kHz."""

    @abstractmethod
    async def generate_scenarios(
        self, target_lang: Language, source_lang: Language
    ) -> list[ScenarioDescriptor]:
        """Generate a batch of (nominally 3) roleplay scenarios."""

    @abstractmethod
    async def scenario_reply(
        self,
        history: Sequence[ChatTurn],
        scenario: ScenarioDescriptor,
        target_lang: Language,
    ) -> str:
        """Reply in character to the last learner turn, given the full history."""

    @abstractmethod
    async def evaluate_session(
        self,
        history: Sequence[ChatTurn],
        source_lang: Language,
        target_lang: Language,
    ) -> ScenarioReport:
        """Grade a finished roleplay."""

    @abstractmethod
    async def generate_image(self, term: str) -> GeneratedImage | None:
        """Generate a mnemonic image. ``None`` means the model produced no image."""

    @abstractmethod
    async def write_story(
        self, words: Sequence[str], source_lang: Language, target_lang: Language
    ) -> str:
        """Write a short mnemonic story weaving ``words``."""

    @abstractmethod
    async def discuss_term(
        self,
        history: Sequence[ChatTurn],
        question: str,
        term: str,
        source_lang: Language,
        target_lang: Language,
    ) -> str:
        """Answer a question about ``term`` given the prior tutor exchange."""
