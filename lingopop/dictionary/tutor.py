"""
Term Tutor: short Q&A chat about the entry being studied.

The exchange is recorded only once an answer arrives, so a failed question
leaves the history exactly as it was. One question may be pending at a time.
"""

from __future__ import annotations

from loguru import logger

from lingopop.core.errors import LingoPopError, TurnFailure, TurnRejected
from lingopop.core.harness import bounded
from lingopop.core.languages import Language
from lingopop.core.models import ChatTurn, DictEntry, Role
from lingopop.integrations.oracle import Oracle


class TermTutor:
    """Tutor chat bound to one dictionary entry."""

    def __init__(
        self,
        oracle: Oracle,
        entry: DictEntry,
        source_lang: Language,
        target_lang: Language,
        timeout: float = 20.0,
    ):
        self.oracle = oracle
        self.entry = entry
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.timeout = timeout
        self._history: list[ChatTurn] = []
        self._pending = False

    @property
    def history(self) -> tuple[ChatTurn, ...]:
        return tuple(self._history)

    @property
    def pending(self) -> bool:
        return self._pending

    async def ask(self, question: str) -> str:
        """Ask about the current term and return the tutor's answer."""
        question = question.strip()
        if not question:
            raise TurnRejected("Empty question")
        if self._pending:
            raise TurnRejected("Still waiting for the previous answer")

        self._pending = True
        try:
            answer = await bounded(
                self.oracle.discuss_term(
                    tuple(self._history),
                    question,
                    self.entry.target_term or self.entry.source_term,
                    self.source_lang,
                    self.target_lang,
                ),
                operation="discuss_term",
                timeout=self.timeout,
            )
        except LingoPopError as exc:
            logger.error(f"Tutor could not answer: {exc}")
            raise TurnFailure("I'm having trouble thinking right now.") from exc
        finally:
            self._pending = False

        self._history.append(ChatTurn(Role.LEARNER, question))
        self._history.append(ChatTurn(Role.COUNTERPART, answer))
        return answer
