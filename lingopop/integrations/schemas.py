"""
Oracle payload schemas.

Two halves:
- Response schemas handed to Gemini's JSON mode (``response_schema``) so the
  model emits machine-parsable output for each structured operation.
- Pydantic models that validate whatever actually comes back. A payload that
  does not match fails fast with ``OracleError``; entities are never
  partially populated.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lingopop.core.errors import OracleError
from lingopop.core.models import Correction, ScenarioDescriptor, ScenarioReport

# =============================================================================
# Gemini response schemas
# =============================================================================

EXAMPLE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "text": {"type": "STRING", "description": "Example sentence in the target language"},
        "phonetic": {"type": "STRING", "description": "Phonetic reading of the example sentence"},
        "translation": {"type": "STRING", "description": "Translation in the native language"},
    },
    "required": ["text", "phonetic", "translation"],
}

ENRICH_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "targetTerm": {"type": "STRING"},
        "phonetic": {"type": "STRING", "description": "IPA, Pinyin, or Kana reading for the term"},
        "nativeDefinition": {"type": "STRING"},
        "examples": {"type": "ARRAY", "items": EXAMPLE_SCHEMA},
        "usageNote": {"type": "STRING"},
    },
    "required": ["targetTerm", "phonetic", "nativeDefinition", "examples", "usageNote"],
}

SCENARIOS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "scenarios": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "title": {"type": "STRING", "description": "Title in the native language"},
                    "description": {"type": "STRING", "description": "Short context in the native language"},
                    "openingLine": {"type": "STRING", "description": "First line spoken by the counterpart, in the target language"},
                },
                "required": ["id", "title", "description", "openingLine"],
            },
        },
    },
    "required": ["scenarios"],
}

EVALUATION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "score": {"type": "NUMBER", "description": "0-100, fluency and appropriateness"},
        "feedback": {"type": "STRING"},
        "corrections": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "original": {"type": "STRING"},
                    "correction": {"type": "STRING"},
                    "explanation": {"type": "STRING"},
                },
            },
        },
    },
    "required": ["score", "feedback", "corrections"],
}


# =============================================================================
# Payload validation
# =============================================================================


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ExamplePayload(_Payload):
    text: str
    phonetic: str
    translation: str


class EnrichPayload(_Payload):
    """Enrich result: translation, reading, definition, examples, usage note."""

    target_term: str = Field(alias="targetTerm", min_length=1)
    phonetic: str
    native_definition: str = Field(alias="nativeDefinition")
    examples: list[ExamplePayload]
    usage_note: str = Field(alias="usageNote")


class ScenarioPayload(_Payload):
    id: str = ""
    title: str = Field(min_length=1)
    description: str
    opening_line: str = Field(alias="openingLine", min_length=1)

    def to_descriptor(self, scenario_id: str | None = None) -> ScenarioDescriptor:
        return ScenarioDescriptor(
            id=scenario_id or self.id,
            title=self.title,
            description=self.description,
            opening_line=self.opening_line,
        )


class ScenarioBatchPayload(_Payload):
    scenarios: list[ScenarioPayload]


class CorrectionPayload(_Payload):
    original: str
    correction: str
    explanation: str = ""


class EvaluationPayload(_Payload):
    score: float = Field(ge=0, le=100)
    feedback: str
    corrections: list[CorrectionPayload] = Field(default_factory=list)

    def to_report(self) -> ScenarioReport:
        return ScenarioReport(
            score=round(self.score),
            feedback=self.feedback,
            corrections=tuple(
                Correction(original=c.original, correction=c.correction, explanation=c.explanation)
                for c in self.corrections
            ),
        )


P = TypeVar("P", bound=BaseModel)


def parse_payload(model: type[P], raw: str | None, operation: str) -> P:
    """Validate a JSON payload for ``operation`` or fail with OracleError."""
    if not raw or not raw.strip():
        raise OracleError(f"{operation}: empty response")
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise OracleError(f"{operation}: malformed payload ({exc.error_count()} errors)") from exc
