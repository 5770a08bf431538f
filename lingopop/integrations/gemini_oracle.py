"""
Gemini-backed Oracle.

Uses the ``google-genai`` async client. Structured operations run in JSON
mode with a response schema and are validated on the way back; speech and
images are read from inline data parts.
"""

from __future__ import annotations

import base64
from typing import Any, Sequence

import httpx
from loguru import logger

from config import Settings, get_settings
from lingopop.core.errors import OracleError, OracleTransportError
from lingopop.core.languages import Language, Voice
from lingopop.core.models import (
    ChatTurn,
    GeneratedImage,
    ScenarioDescriptor,
    ScenarioReport,
)

from .oracle import Oracle
from .prompts import (
    ENRICH_PROMPT,
    EVALUATION_PROMPT,
    IMAGE_PROMPT,
    SCENARIO_REPLY_PROMPT,
    SCENARIOS_PROMPT,
    STORY_PROMPT,
    TERM_TUTOR_PROMPT,
    format_history,
)
from .schemas import (
    ENRICH_SCHEMA,
    EVALUATION_SCHEMA,
    SCENARIOS_SCHEMA,
    EnrichPayload,
    EvaluationPayload,
    ScenarioBatchPayload,
    parse_payload,
)


def json_config(schema: dict[str, Any], temperature: float = 0.7) -> dict[str, Any]:
    """Generation config for JSON-mode calls."""
    return {
        "temperature": temperature,
        "response_mime_type": "application/json",
        "response_schema": schema,
    }


class GeminiOracle(Oracle):
    """Oracle implementation on Google Gemini."""

    def __init__(self, settings: Settings | None = None, client: Any = None):
        """
        Initialize the Oracle.

        Args:
            settings: Application settings (uses cached settings if not provided)
            client: Pre-built ``genai.Client`` (built lazily from the API key otherwise)
        """
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self):
        """Lazy-load the Gemini client."""
        if self._client is None:
            if not self.settings.gemini_api_key:
                raise OracleTransportError("GEMINI_API_KEY is not configured")
            from google import genai

            self._client = genai.Client(api_key=self.settings.gemini_api_key)
        return self._client

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _generate(self, operation: str, model: str, contents: Any, config: Any = None):
        from google.genai import errors as genai_errors

        logger.debug(f"Oracle {operation} -> {model}")
        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as exc:
            raise OracleTransportError(f"{operation}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise OracleTransportError(f"{operation}: {exc}") from exc
        except OracleTransportError:
            raise
        except Exception as exc:
            # aiohttp transport, SDK argument and response-parsing errors
            logger.exception(f"Oracle {operation} failed unexpectedly")
            raise OracleTransportError(f"{operation}: {type(exc).__name__}: {exc}") from exc

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise OracleError(f"{operation}: blocked ({feedback.block_reason})")
        return response

    async def _text(self, operation: str, prompt: str, config: Any = None) -> str:
        response = await self._generate(operation, self.settings.text_model, prompt, config)
        text = (response.text or "").strip()
        if not text:
            raise OracleError(f"{operation}: empty response")
        return text

    @staticmethod
    def _inline_parts(response) -> list[Any]:
        candidates = getattr(response, "candidates", None) or []
        if not candidates or candidates[0].content is None:
            return []
        parts = candidates[0].content.parts or []
        return [p.inline_data for p in parts if getattr(p, "inline_data", None) is not None]

    @staticmethod
    def _as_base64(data: bytes | str) -> str:
        if isinstance(data, str):
            return data
        return base64.b64encode(data).decode("ascii")

    # ------------------------------------------------------------------
    # Dictionary
    # ------------------------------------------------------------------

    async def enrich(
        self, term: str, source_lang: Language, target_lang: Language
    ) -> EnrichPayload:
        prompt = ENRICH_PROMPT.format(
            term=term, source_lang=source_lang.value, target_lang=target_lang.value
        )
        raw = await self._text("enrich", prompt, json_config(ENRICH_SCHEMA))
        return parse_payload(EnrichPayload, raw, "enrich")

    async def generate_image(self, term: str) -> GeneratedImage | None:
        response = await self._generate(
            "generate_image", self.settings.image_model, IMAGE_PROMPT.format(term=term)
        )
        for inline in self._inline_parts(response):
            if inline.data:
                return GeneratedImage(
                    mime_type=inline.mime_type or "image/png",
                    data=self._as_base64(inline.data),
                )
        logger.debug(f"No image part returned for {term!r}")
        return None

    async def write_story(
        self, words: Sequence[str], source_lang: Language, target_lang: Language
    ) -> str:
        prompt = STORY_PROMPT.format(
            words=", ".join(words),
            source_lang=source_lang.value,
            target_lang=target_lang.value,
        )
        return await self._text("write_story", prompt)

    async def discuss_term(
        self,
        history: Sequence[ChatTurn],
        question: str,
        term: str,
        source_lang: Language,
        target_lang: Language,
    ) -> str:
        prompt = TERM_TUTOR_PROMPT.format(
            term=term,
            source_lang=source_lang.value,
            target_lang=target_lang.value,
            history=format_history(history),
            question=question,
        )
        return await self._text("discuss_term", prompt)

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------

    async def synthesize(self, text: str, voice: Voice) -> str:
        from google.genai import types

        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice.value),
                ),
            ),
        )
        response = await self._generate("synthesize", self.settings.tts_model, text, config)
        for inline in self._inline_parts(response):
            if inline.data:
                return self._as_base64(inline.data)
        raise OracleError("synthesize: no audio data")

    # ------------------------------------------------------------------
    # Roleplay
    # ------------------------------------------------------------------

    async def generate_scenarios(
        self, target_lang: Language, source_lang: Language
    ) -> list[ScenarioDescriptor]:
        prompt = SCENARIOS_PROMPT.format(
            target_lang=target_lang.value, source_lang=source_lang.value
        )
        raw = await self._text("generate_scenarios", prompt, json_config(SCENARIOS_SCHEMA, 0.9))
        batch = parse_payload(ScenarioBatchPayload, raw, "generate_scenarios")
        return [s.to_descriptor() for s in batch.scenarios]

    async def scenario_reply(
        self,
        history: Sequence[ChatTurn],
        scenario: ScenarioDescriptor,
        target_lang: Language,
    ) -> str:
        prompt = SCENARIO_REPLY_PROMPT.format(
            title=scenario.title,
            description=scenario.description,
            target_lang=target_lang.value,
            history=format_history(history),
        )
        return await self._text("scenario_reply", prompt)

    async def evaluate_session(
        self,
        history: Sequence[ChatTurn],
        source_lang: Language,
        target_lang: Language,
    ) -> ScenarioReport:
        prompt = EVALUATION_PROMPT.format(
            target_lang=target_lang.value,
            source_lang=source_lang.value,
            history=format_history(history),
        )
        raw = await self._text("evaluate_session", prompt, json_config(EVALUATION_SCHEMA, 0.1))
        return parse_payload(EvaluationPayload, raw, "evaluate_session").to_report()
