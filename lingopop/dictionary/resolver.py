"""
Entry Resolver: term lookup with cache-first resolution and parallel enrichment.

Resolution pipeline:
1. Normalize the term (trim + casefold) for comparison; keep the trimmed
   original for display.
2. Cache check against the notebook for the active language pair. A hit is
   returned unchanged: each unique term is fetched at most once.
3. On a miss, run Enrich and GenerateImage concurrently and join them with
   asymmetric policy: an Enrich failure is fatal (LookupFailure); an image
   failure only leaves the entry without an image.

Resolving never writes to the notebook. Saving is the caller's decision.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from lingopop.core.errors import ImageFailure, LookupFailure
from lingopop.core.harness import Outcome, bounded, settle
from lingopop.core.languages import Language
from lingopop.core.models import (
    DictEntry,
    Example,
    GeneratedImage,
    new_entry_id,
    normalize_term,
    now_ms,
)
from lingopop.integrations.oracle import Oracle
from lingopop.integrations.schemas import EnrichPayload

from .notebook import NotebookStore


class EntryResolver:
    """Resolves terms into enriched dictionary entries."""

    def __init__(
        self,
        oracle: Oracle,
        notebook: NotebookStore,
        timeout: float = 20.0,
        with_images: bool = True,
    ):
        self.oracle = oracle
        self.notebook = notebook
        self.timeout = timeout
        self.with_images = with_images

    async def resolve(
        self, term: str, source_lang: Language, target_lang: Language
    ) -> DictEntry:
        """
        Resolve ``term`` to a DictEntry.

        Raises:
            LookupFailure: blank term, or enrichment failed/unparsable/timed out
        """
        display = term.strip()
        if not normalize_term(display):
            raise LookupFailure("Nothing to look up")

        cached = self.notebook.find(display, source_lang, target_lang)
        if cached is not None:
            logger.debug(f"Cache hit for '{display}' -> {cached.id}")
            return cached

        enrich_outcome, image_outcome = await asyncio.gather(
            settle(self._enrich(display, source_lang, target_lang), LookupFailure),
            settle(self._image(display), ImageFailure),
        )

        if not enrich_outcome.ok:
            logger.error(f"Lookup of '{display}' failed: {enrich_outcome.error}")
            raise LookupFailure(f"Could not look up '{display}'") from enrich_outcome.error

        image_ref = self._image_ref(display, image_outcome)
        return self._assemble(display, enrich_outcome.value, image_ref, source_lang, target_lang)

    async def backfill_image(self, entry: DictEntry) -> DictEntry:
        """
        Generate an image for an entry that has none.

        The result is written back only if the entry is still saved; a stale
        entry gets the new value returned without touching the notebook.
        """
        if entry.image_ref:
            return entry

        outcome = await settle(self._image(entry.source_term), ImageFailure)
        image_ref = self._image_ref(entry.source_term, outcome)
        if image_ref is None:
            return entry

        updated = entry.with_image(image_ref)
        if self.notebook.contains(entry.id):
            self.notebook.replace(updated)
        else:
            logger.debug(f"Entry {entry.id} no longer saved; image not applied")
        return updated

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    async def _enrich(
        self, term: str, source_lang: Language, target_lang: Language
    ) -> EnrichPayload:
        return await bounded(
            self.oracle.enrich(term, source_lang, target_lang),
            operation="enrich",
            timeout=self.timeout,
        )

    async def _image(self, term: str) -> GeneratedImage:
        if not self.with_images:
            raise ImageFailure("image generation disabled")
        image = await bounded(
            self.oracle.generate_image(term),
            operation="generate_image",
            timeout=self.timeout,
        )
        if image is None:
            raise ImageFailure(f"no image for '{term}'")
        return image

    @staticmethod
    def _image_ref(term: str, outcome: Outcome[GeneratedImage]) -> str | None:
        if outcome.ok:
            return outcome.value.to_data_uri()
        logger.warning(f"Continuing without image for '{term}': {outcome.error}")
        return None

    @staticmethod
    def _assemble(
        term: str,
        payload: EnrichPayload,
        image_ref: str | None,
        source_lang: Language,
        target_lang: Language,
    ) -> DictEntry:
        if len(payload.examples) != 2:
            logger.debug(f"Expected 2 examples for '{term}', got {len(payload.examples)}")
        return DictEntry(
            id=new_entry_id(),
            source_term=term,
            target_term=payload.target_term,
            phonetic=payload.phonetic,
            native_definition=payload.native_definition,
            examples=tuple(
                Example(text=e.text, phonetic=e.phonetic, translation=e.translation)
                for e in payload.examples
            ),
            usage_note=payload.usage_note,
            created_at=now_ms(),
            image_ref=image_ref,
            source_lang=source_lang,
            target_lang=target_lang,
        )
