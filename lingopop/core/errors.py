"""
Error taxonomy for LingoPop.

Every Oracle-facing call localizes its failures into one of these types at the
component boundary. None of them is fatal to the process: each one degrades
exactly one feature.
"""

from __future__ import annotations


class LingoPopError(Exception):
    """Base class for all LingoPop errors."""


# =============================================================================
# Oracle boundary
# =============================================================================


class OracleError(LingoPopError):
    """The Oracle answered, but the payload was malformed or empty."""


class OracleTransportError(LingoPopError):
    """The Oracle request itself failed (network, quota, server error)."""


class OracleTimeout(LingoPopError):
    """The Oracle did not answer within the configured bound."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout:g}s")


# =============================================================================
# Feature failures
# =============================================================================


class LookupFailure(LingoPopError):
    """Enrichment failed or was unparsable; no entry could be resolved."""


class ImageFailure(LingoPopError):
    """Concept image could not be generated. Never fatal to a lookup."""


class ScenarioGenerationFailure(LingoPopError):
    """No scenario batch could be generated; the menu keeps its last batch."""


class TurnFailure(LingoPopError):
    """A roleplay or tutor reply could not be obtained."""


class EvaluationFailure(LingoPopError):
    """Session grading failed; the session is discarded."""


class AudioFailure(LingoPopError):
    """Speech could not be synthesized, decoded or played."""


class StoryFailure(LingoPopError):
    """Mnemonic story could not be generated."""


class NotebookError(LingoPopError):
    """Notebook file could not be read or written."""


# =============================================================================
# State machine misuse
# =============================================================================


class SessionStateError(LingoPopError):
    """Operation is not valid in the session's current state."""


class TurnRejected(SessionStateError):
    """A submission arrived while a reply was still pending."""
