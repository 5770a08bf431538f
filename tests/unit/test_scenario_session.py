"""
Unit tests for the roleplay session state machine.
"""

import asyncio

import pytest
import pytest_asyncio

from lingopop.core.errors import (
    EvaluationFailure,
    OracleError,
    OracleTransportError,
    ScenarioGenerationFailure,
    SessionStateError,
    TurnFailure,
    TurnRejected,
)
from lingopop.core.languages import Language
from lingopop.core.models import ChatTurn, Role, ScenarioDescriptor, ScenarioReport
from lingopop.roleplay.session import (
    SCENARIO_BATCH_SIZE,
    ScenarioSession,
    SessionState,
    TurnState,
)

EN, ES = Language.ENGLISH, Language.SPANISH


def scenario(index: int, scenario_id: str | None = None) -> ScenarioDescriptor:
    return ScenarioDescriptor(
        id=f"s{index}" if scenario_id is None else scenario_id,
        title=f"Scenario {index}",
        description=f"Premise {index}",
        opening_line=f"Opening {index}",
    )


async def settle_tasks(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def session(oracle):
    return ScenarioSession(oracle, EN, ES, timeout=1.0)


@pytest_asyncio.fixture
async def active(session):
    """Session with scenarios loaded and the first one selected."""
    await session.load_scenarios()
    session.select("s1")
    return session


# =============================================================================
# Menu
# =============================================================================


class TestScenarioMenu:
    @pytest.mark.asyncio
    async def test_load_scenarios(self, session, oracle):
        batch = await session.load_scenarios()

        assert len(batch) == SCENARIO_BATCH_SIZE
        assert session.scenarios == batch
        assert session.can_select
        assert oracle.calls["generate_scenarios"] == [(ES, EN)]

    @pytest.mark.asyncio
    async def test_nothing_selectable_before_first_batch(self, session):
        assert not session.can_select
        with pytest.raises(SessionStateError):
            session.select("s1")

    @pytest.mark.asyncio
    async def test_selection_disabled_while_loading(self, session, oracle):
        await session.load_scenarios()
        gate = oracle.hold("generate_scenarios")
        task = asyncio.create_task(session.load_scenarios())
        await settle_tasks()

        assert session.scenarios_pending
        assert not session.can_select
        with pytest.raises(SessionStateError):
            session.select("s1")

        gate.set()
        await task
        assert session.can_select

    @pytest.mark.asyncio
    async def test_concurrent_load_rejected(self, session, oracle):
        gate = oracle.hold("generate_scenarios")
        task = asyncio.create_task(session.load_scenarios())
        await settle_tasks()

        with pytest.raises(SessionStateError):
            await session.load_scenarios()

        gate.set()
        await task
        assert len(oracle.calls["generate_scenarios"]) == 1

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_batch(self, session, oracle):
        first = await session.load_scenarios()
        oracle.script("generate_scenarios", OracleTransportError("offline"))

        with pytest.raises(ScenarioGenerationFailure):
            await session.load_scenarios()

        assert session.scenarios == first
        assert not session.scenarios_pending
        assert session.can_select

    @pytest.mark.asyncio
    async def test_malformed_batch_is_a_failure(self, session, oracle):
        oracle.script("generate_scenarios", OracleError("generate_scenarios: malformed payload"))
        with pytest.raises(ScenarioGenerationFailure):
            await session.load_scenarios()
        assert session.scenarios == ()

    @pytest.mark.asyncio
    async def test_empty_batch_is_a_failure(self, session, oracle):
        oracle.script("generate_scenarios", [])
        with pytest.raises(ScenarioGenerationFailure):
            await session.load_scenarios()

    @pytest.mark.asyncio
    async def test_oversized_batch_truncated(self, session, oracle):
        oracle.script("generate_scenarios", [scenario(i) for i in range(1, 6)])
        batch = await session.load_scenarios()
        assert [s.id for s in batch] == ["s1", "s2", "s3"]

    @pytest.mark.asyncio
    async def test_short_batch_accepted(self, session, oracle):
        oracle.script("generate_scenarios", [scenario(1), scenario(2)])
        batch = await session.load_scenarios()
        assert len(batch) == 2

    @pytest.mark.asyncio
    async def test_blank_and_duplicate_ids_replaced(self, session, oracle):
        oracle.script("generate_scenarios", [scenario(1, "x"), scenario(2, "x"), scenario(3, "")])
        batch = await session.load_scenarios()

        ids = [s.id for s in batch]
        assert ids[0] == "x"
        assert all(ids)
        assert len(set(ids)) == 3
        assert [s.title for s in batch] == ["Scenario 1", "Scenario 2", "Scenario 3"]

    @pytest.mark.asyncio
    async def test_select_seeds_history_with_opening_line(self, session):
        await session.load_scenarios()

        opening = session.select("s2")

        assert opening == ChatTurn(Role.COUNTERPART, "Opening 2")
        assert session.history == (opening,)
        assert session.state == SessionState.ACTIVE
        assert session.turn_state == TurnState.IDLE
        assert session.scenario.id == "s2"

    @pytest.mark.asyncio
    async def test_select_by_descriptor(self, session):
        batch = await session.load_scenarios()
        session.select(batch[2])
        assert session.scenario == batch[2]

    @pytest.mark.asyncio
    async def test_select_unknown_rejected(self, session):
        await session.load_scenarios()
        with pytest.raises(SessionStateError, match="Unknown scenario"):
            session.select("nope")
        assert session.state == SessionState.MENU


# =============================================================================
# Turn loop
# =============================================================================


class TestTurns:
    @pytest.mark.asyncio
    async def test_submit_appends_both_turns(self, active):
        reply = await active.submit("  Hola  ")

        assert reply == ChatTurn(Role.COUNTERPART, "reply 2")
        assert active.history == (
            ChatTurn(Role.COUNTERPART, "Opening 1"),
            ChatTurn(Role.LEARNER, "Hola"),
            reply,
        )
        assert active.turn_state == TurnState.IDLE

    @pytest.mark.asyncio
    async def test_request_carries_prior_history_plus_newest_turn(self, active, oracle):
        await active.submit("uno")
        await active.submit("dos")

        first, second = (call[0] for call in oracle.calls["scenario_reply"])
        assert second[:-1] == first + (ChatTurn(Role.COUNTERPART, "reply 2"),)
        assert second[-1] == ChatTurn(Role.LEARNER, "dos")
        assert len(second) == len(first) + 2

    @pytest.mark.asyncio
    async def test_scenario_and_language_sent(self, active, oracle):
        await active.submit("hola")
        _, sent_scenario, target = oracle.calls["scenario_reply"][0]
        assert sent_scenario.id == "s1"
        assert target == ES

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    async def test_blank_submission_rejected(self, active, oracle, text):
        with pytest.raises(TurnRejected):
            await active.submit(text)
        assert len(active.history) == 1
        assert oracle.calls["scenario_reply"] == []

    @pytest.mark.asyncio
    async def test_single_flight(self, active, oracle):
        gate = oracle.hold("scenario_reply")
        first = asyncio.create_task(active.submit("uno"))
        await settle_tasks()

        assert active.turn_state == TurnState.AWAITING_REPLY
        assert not active.can_submit
        history_before = active.history

        with pytest.raises(TurnRejected):
            await active.submit("dos")

        assert active.history == history_before
        assert len(oracle.calls["scenario_reply"]) == 1

        gate.set()
        await first
        assert [t.text for t in active.history] == ["Opening 1", "uno", "reply 2"]
        assert active.can_submit

    @pytest.mark.asyncio
    async def test_submit_outside_active_rejected(self, session):
        with pytest.raises(SessionStateError):
            await session.submit("hola")

    @pytest.mark.asyncio
    async def test_turn_failure_keeps_learner_turn(self, active, oracle):
        oracle.script("scenario_reply", OracleTransportError("offline"))

        with pytest.raises(TurnFailure):
            await active.submit("hola")

        assert active.history[-1] == ChatTurn(Role.LEARNER, "hola")
        assert active.unanswered
        assert active.turn_state == TurnState.IDLE
        assert active.state == SessionState.ACTIVE

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, active, oracle):
        oracle.script("scenario_reply", OracleTransportError("offline"))
        with pytest.raises(TurnFailure):
            await active.submit("hola")

        reply = await active.retry_reply()

        assert reply.text == "reply 2"
        assert [t.role for t in active.history] == [Role.COUNTERPART, Role.LEARNER, Role.COUNTERPART]
        assert not active.unanswered
        retried_history = oracle.calls["scenario_reply"][1][0]
        assert retried_history == oracle.calls["scenario_reply"][0][0]

    @pytest.mark.asyncio
    async def test_retry_without_failure_rejected(self, active):
        with pytest.raises(SessionStateError, match="Nothing to retry"):
            await active.retry_reply()

    @pytest.mark.asyncio
    async def test_reply_timeout_is_turn_failure(self, oracle):
        session = ScenarioSession(oracle, EN, ES, timeout=0.01)
        await session.load_scenarios()
        session.select("s1")
        oracle.hold("scenario_reply")

        with pytest.raises(TurnFailure):
            await session.submit("hola")
        assert session.unanswered


# =============================================================================
# Grading
# =============================================================================


class TestGrading:
    @pytest.mark.asyncio
    async def test_evaluation_receives_full_history(self, active, oracle):
        await active.submit("uno")
        await active.submit("dos")

        report = await active.end()

        sent_history, source, target = oracle.calls["evaluate_session"][0]
        assert len(sent_history) == 5
        assert sent_history == active.history
        assert (source, target) == (EN, ES)
        assert active.state == SessionState.REPORT
        assert active.report == report

    @pytest.mark.asyncio
    async def test_end_immediately_grades_opening_only(self, active, oracle):
        report = await active.end()

        assert len(oracle.calls["evaluate_session"][0][0]) == 1
        assert report.corrections == ()

    @pytest.mark.asyncio
    async def test_empty_corrections_report_is_well_formed(self, active, oracle):
        oracle.script("evaluate_session", ScenarioReport(score=0, feedback="Say something next time."))

        report = await active.end()

        assert report.corrections == ()
        assert report.score == 0

    @pytest.mark.asyncio
    async def test_evaluation_failure_returns_to_menu(self, active, oracle):
        batch = active.scenarios
        await active.submit("hola")
        oracle.script("evaluate_session", OracleError("evaluate_session: malformed payload"))

        with pytest.raises(EvaluationFailure):
            await active.end()

        assert active.state == SessionState.MENU
        assert active.history == ()
        assert active.report is None
        assert active.scenarios == batch

    @pytest.mark.asyncio
    async def test_submit_rejected_while_grading(self, active, oracle):
        gate = oracle.hold("evaluate_session")
        task = asyncio.create_task(active.end())
        await settle_tasks()

        assert active.state == SessionState.GRADING
        with pytest.raises(SessionStateError):
            await active.submit("late")

        gate.set()
        await task

    @pytest.mark.asyncio
    async def test_in_flight_reply_discarded_after_end(self, active, oracle):
        gate = oracle.hold("scenario_reply")
        pending = asyncio.create_task(active.submit("uno"))
        await settle_tasks()

        report = await active.end()
        frozen = oracle.calls["evaluate_session"][0][0]

        gate.set()
        assert await pending is None
        assert active.history == frozen
        assert [t.text for t in frozen] == ["Opening 1", "uno"]
        assert active.report == report

    @pytest.mark.asyncio
    async def test_leave_report(self, active):
        await active.end()

        active.leave_report()

        assert active.state == SessionState.MENU
        assert active.report is None
        assert active.history == ()
        assert active.can_select

    @pytest.mark.asyncio
    async def test_leave_report_requires_report(self, active):
        with pytest.raises(SessionStateError):
            active.leave_report()


class TestAbandon:
    @pytest.mark.asyncio
    async def test_abandon_discards_conversation(self, active):
        await active.submit("hola")

        active.abandon()

        assert active.state == SessionState.MENU
        assert active.history == ()
        assert active.scenario is None

    @pytest.mark.asyncio
    async def test_late_reply_after_abandon_discarded(self, active, oracle):
        gate = oracle.hold("scenario_reply")
        pending = asyncio.create_task(active.submit("hola"))
        await settle_tasks()

        active.abandon()
        gate.set()

        assert await pending is None
        assert active.history == ()

    @pytest.mark.asyncio
    async def test_late_reply_not_applied_to_next_session(self, active, oracle):
        gate = oracle.hold("scenario_reply")
        pending = asyncio.create_task(active.submit("hola"))
        await settle_tasks()

        active.abandon()
        active.select("s2")
        gate.set()

        assert await pending is None
        assert active.history == (ChatTurn(Role.COUNTERPART, "Opening 2"),)
        assert active.turn_state == TurnState.IDLE

    @pytest.mark.asyncio
    async def test_late_failure_after_abandon_does_not_mark_unanswered(self, active, oracle):
        oracle.script("scenario_reply", OracleTransportError("offline"))
        gate = oracle.hold("scenario_reply")
        pending = asyncio.create_task(active.submit("hola"))
        await settle_tasks()

        active.abandon()
        active.select("s2")
        gate.set()

        with pytest.raises(TurnFailure):
            await pending
        assert not active.unanswered
