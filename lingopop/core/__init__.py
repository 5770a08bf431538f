"""
Core types shared by every LingoPop component.

Modules:
- errors: failure taxonomy
- languages: Language and Voice enumerations
- models: entries, turns, scenarios, reports
- harness: Oracle timeouts and fan-out outcomes
"""

from .errors import (
    AudioFailure,
    EvaluationFailure,
    ImageFailure,
    LingoPopError,
    LookupFailure,
    NotebookError,
    OracleError,
    OracleTimeout,
    OracleTransportError,
    ScenarioGenerationFailure,
    SessionStateError,
    StoryFailure,
    TurnFailure,
    TurnRejected,
)
from .languages import DEFAULT_VOICE, Language, Voice
from .models import (
    ChatTurn,
    Correction,
    DictEntry,
    Example,
    GeneratedImage,
    Role,
    ScenarioDescriptor,
    ScenarioReport,
    normalize_term,
)

__all__ = [
    "AudioFailure",
    "ChatTurn",
    "Correction",
    "DEFAULT_VOICE",
    "DictEntry",
    "EvaluationFailure",
    "Example",
    "GeneratedImage",
    "ImageFailure",
    "Language",
    "LingoPopError",
    "LookupFailure",
    "NotebookError",
    "OracleError",
    "OracleTimeout",
    "OracleTransportError",
    "Role",
    "ScenarioDescriptor",
    "ScenarioGenerationFailure",
    "ScenarioReport",
    "SessionStateError",
    "StoryFailure",
    "TurnFailure",
    "TurnRejected",
    "Voice",
    "normalize_term",
]
