"""
Roleplay Session: scenario selection, turn loop, grading, report.

State machine:

    MENU --select--> ACTIVE --end--> GRADING --ok--> REPORT --leave--> MENU
      ^                 |                 |
      +----abandon------+                 +--fail (EvaluationFailure)--> MENU

Inside ACTIVE the turn sub-state is IDLE or AWAITING_REPLY. Only one reply
may be outstanding: a submission while AWAITING_REPLY is rejected, never
queued, so history order always equals submission order. The full history is
sent with every reply request.

Async results are applied only if the session epoch is unchanged since the
request went out. Every transition that invalidates in-flight work bumps it.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Sequence

from loguru import logger

from lingopop.core.errors import (
    EvaluationFailure,
    LingoPopError,
    ScenarioGenerationFailure,
    SessionStateError,
    TurnFailure,
    TurnRejected,
)
from lingopop.core.harness import bounded
from lingopop.core.languages import Language
from lingopop.core.models import ChatTurn, Role, ScenarioDescriptor, ScenarioReport
from lingopop.integrations.oracle import Oracle

SCENARIO_BATCH_SIZE = 3


class SessionState(str, Enum):
    """Top-level roleplay state."""
    MENU = "menu"
    ACTIVE = "active"
    GRADING = "grading"
    REPORT = "report"


class TurnState(str, Enum):
    """Reply gating inside an active session."""
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


class ScenarioSession:
    """Drives one learner's roleplay practice against the Oracle."""

    def __init__(
        self,
        oracle: Oracle,
        source_lang: Language,
        target_lang: Language,
        timeout: float = 20.0,
    ):
        self.oracle = oracle
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.timeout = timeout

        self.state = SessionState.MENU
        self.turn_state = TurnState.IDLE
        self.scenarios: tuple[ScenarioDescriptor, ...] = ()
        self.scenarios_pending = False
        self.scenario: ScenarioDescriptor | None = None
        self.report: ScenarioReport | None = None
        self.unanswered = False
        self._history: list[ChatTurn] = []
        self._epoch = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def history(self) -> tuple[ChatTurn, ...]:
        return tuple(self._history)

    @property
    def can_select(self) -> bool:
        return self.state == SessionState.MENU and not self.scenarios_pending and bool(self.scenarios)

    @property
    def can_submit(self) -> bool:
        return self.state == SessionState.ACTIVE and self.turn_state == TurnState.IDLE

    def _require(self, state: SessionState, action: str) -> None:
        if self.state != state:
            raise SessionStateError(f"Cannot {action} while {self.state.value}")

    def _is_live(self, epoch: int, state: SessionState) -> bool:
        return epoch == self._epoch and self.state == state

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    async def load_scenarios(self) -> tuple[ScenarioDescriptor, ...]:
        """
        Request a fresh batch of scenarios.

        The current batch stays in place until the new one arrives, and is
        kept if the request fails.

        Raises:
            ScenarioGenerationFailure: the Oracle produced no usable batch
            SessionStateError: not in the menu, or a request is already pending
        """
        self._require(SessionState.MENU, "load scenarios")
        if self.scenarios_pending:
            raise SessionStateError("Scenarios are already loading")

        self.scenarios_pending = True
        epoch = self._epoch
        try:
            batch = await bounded(
                self.oracle.generate_scenarios(self.target_lang, self.source_lang),
                operation="generate_scenarios",
                timeout=self.timeout,
            )
        except LingoPopError as exc:
            logger.error(f"Scenario generation failed: {exc}")
            raise ScenarioGenerationFailure("Could not generate scenarios") from exc
        finally:
            self.scenarios_pending = False

        batch = self._normalize_batch(batch)
        if not batch:
            raise ScenarioGenerationFailure("Oracle returned no scenarios")
        if not self._is_live(epoch, SessionState.MENU):
            logger.debug("Discarding scenario batch for a menu that is no longer shown")
            return self.scenarios

        self.scenarios = batch
        return batch

    @staticmethod
    def _normalize_batch(batch: Sequence[ScenarioDescriptor]) -> tuple[ScenarioDescriptor, ...]:
        if len(batch) != SCENARIO_BATCH_SIZE:
            logger.warning(f"Expected {SCENARIO_BATCH_SIZE} scenarios, got {len(batch)}")

        seen: set[str] = set()
        normalized = []
        for scenario in batch[:SCENARIO_BATCH_SIZE]:
            scenario_id = scenario.id.strip()
            if not scenario_id or scenario_id in seen:
                scenario_id = uuid.uuid4().hex[:8]
            seen.add(scenario_id)
            if scenario_id != scenario.id:
                scenario = ScenarioDescriptor(
                    id=scenario_id,
                    title=scenario.title,
                    description=scenario.description,
                    opening_line=scenario.opening_line,
                )
            normalized.append(scenario)
        return tuple(normalized)

    def select(self, scenario: ScenarioDescriptor | str) -> ChatTurn:
        """Start the roleplay. History is seeded with the opening line."""
        self._require(SessionState.MENU, "select a scenario")
        if self.scenarios_pending:
            raise SessionStateError("Scenarios are still loading")

        scenario_id = scenario if isinstance(scenario, str) else scenario.id
        chosen = next((s for s in self.scenarios if s.id == scenario_id), None)
        if chosen is None:
            raise SessionStateError(f"Unknown scenario: {scenario_id}")

        opening = ChatTurn(Role.COUNTERPART, chosen.opening_line)
        self._epoch += 1
        self.scenario = chosen
        self._history = [opening]
        self.turn_state = TurnState.IDLE
        self.unanswered = False
        self.state = SessionState.ACTIVE
        logger.debug(f"Roleplay started: {chosen.title}")
        return opening

    # ------------------------------------------------------------------
    # Turn loop
    # ------------------------------------------------------------------

    async def submit(self, text: str) -> ChatTurn | None:
        """
        Append a learner turn and wait for the counterpart's reply.

        Returns the counterpart turn, or None if the session moved on before
        the reply arrived (the reply is then discarded).

        Raises:
            TurnRejected: blank text, or a reply is still pending
            TurnFailure: the reply could not be obtained; the learner turn is
                kept and ``retry_reply`` may be used
        """
        self._require(SessionState.ACTIVE, "submit a turn")
        if self.turn_state == TurnState.AWAITING_REPLY:
            raise TurnRejected("Still waiting for the previous reply")
        text = text.strip()
        if not text:
            raise TurnRejected("Empty message")

        self._history.append(ChatTurn(Role.LEARNER, text))
        return await self._request_reply()

    async def retry_reply(self) -> ChatTurn | None:
        """Re-request the reply to a learner turn left unanswered by a TurnFailure."""
        self._require(SessionState.ACTIVE, "retry a reply")
        if self.turn_state == TurnState.AWAITING_REPLY:
            raise TurnRejected("Still waiting for the previous reply")
        if not self.unanswered:
            raise SessionStateError("Nothing to retry")
        return await self._request_reply()

    async def _request_reply(self) -> ChatTurn | None:
        self.turn_state = TurnState.AWAITING_REPLY
        self.unanswered = False
        epoch = self._epoch
        snapshot = tuple(self._history)

        try:
            text = await bounded(
                self.oracle.scenario_reply(snapshot, self.scenario, self.target_lang),
                operation="scenario_reply",
                timeout=self.timeout,
            )
        except LingoPopError as exc:
            if self._is_live(epoch, SessionState.ACTIVE):
                self.turn_state = TurnState.IDLE
                self.unanswered = True
            logger.error(f"Counterpart reply failed: {exc}")
            raise TurnFailure("The other side couldn't respond. Try again.") from exc

        if not self._is_live(epoch, SessionState.ACTIVE):
            logger.debug("Discarding reply for a session that moved on")
            return None

        reply = ChatTurn(Role.COUNTERPART, text)
        self._history.append(reply)
        self.turn_state = TurnState.IDLE
        return reply

    # ------------------------------------------------------------------
    # Grading
    # ------------------------------------------------------------------

    async def end(self) -> ScenarioReport:
        """
        Freeze the history and grade it.

        A reply still in flight is discarded when it lands.

        Raises:
            EvaluationFailure: grading failed; the session is back in the
                menu and its work is gone
        """
        self._require(SessionState.ACTIVE, "end the session")
        frozen = tuple(self._history)
        self._epoch += 1
        epoch = self._epoch
        self.turn_state = TurnState.IDLE
        self.state = SessionState.GRADING
        logger.debug(f"Grading {len(frozen)} turns")

        try:
            report = await bounded(
                self.oracle.evaluate_session(frozen, self.source_lang, self.target_lang),
                operation="evaluate_session",
                timeout=self.timeout,
            )
        except LingoPopError as exc:
            logger.error(f"Evaluation failed: {exc}")
            if self._is_live(epoch, SessionState.GRADING):
                self._return_to_menu()
            raise EvaluationFailure("Could not evaluate session") from exc

        if self._is_live(epoch, SessionState.GRADING):
            self.report = report
            self.state = SessionState.REPORT
        return report

    # ------------------------------------------------------------------
    # Leaving
    # ------------------------------------------------------------------

    def leave_report(self) -> None:
        """Close the report. It is discarded."""
        self._require(SessionState.REPORT, "leave the report")
        self._return_to_menu()

    def abandon(self) -> None:
        """Walk away from an active roleplay without grading it."""
        self._require(SessionState.ACTIVE, "abandon the session")
        self._return_to_menu()

    def _return_to_menu(self) -> None:
        self._epoch += 1
        self.state = SessionState.MENU
        self.turn_state = TurnState.IDLE
        self.scenario = None
        self.report = None
        self.unanswered = False
        self._history = []
