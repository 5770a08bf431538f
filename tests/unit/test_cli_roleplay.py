"""
Unit tests for the roleplay scenario menu in the CLI.

The menu is driven with scripted Prompt answers against the in-memory Oracle.
"""

from unittest.mock import patch

import pytest

from lingopop.cli.main import _choose_scenario
from lingopop.core.errors import OracleTransportError
from lingopop.core.languages import Language
from lingopop.roleplay import ScenarioSession, SessionState

EN, ES = Language.ENGLISH, Language.SPANISH


@pytest.fixture
def session(oracle):
    return ScenarioSession(oracle, EN, ES, timeout=1.0)


def answers(*choices):
    return patch("lingopop.cli.main.Prompt.ask", side_effect=list(choices))


class TestChooseScenario:
    @pytest.mark.asyncio
    async def test_pick_from_fresh_batch(self, session, oracle):
        with answers("2"):
            assert await _choose_scenario(session) is True

        assert session.state == SessionState.ACTIVE
        assert session.scenario.id == "s2"

    @pytest.mark.asyncio
    async def test_quit_from_menu(self, session):
        with answers("q"):
            assert await _choose_scenario(session) is False
        assert session.state == SessionState.MENU

    @pytest.mark.asyncio
    async def test_failed_first_load_offers_retry(self, session, oracle):
        oracle.script("generate_scenarios", OracleTransportError("offline"))

        with answers("r", "1") as ask:
            assert await _choose_scenario(session) is True

        assert session.state == SessionState.ACTIVE
        assert session.scenario.id == "s1"
        assert len(oracle.calls["generate_scenarios"]) == 2
        assert ask.call_args_list[0].kwargs["choices"] == ["r", "q"]

    @pytest.mark.asyncio
    async def test_failed_first_load_then_quit(self, session, oracle):
        oracle.script("generate_scenarios", OracleTransportError("offline"))

        with answers("q"):
            assert await _choose_scenario(session) is False

        assert session.scenarios == ()
        assert session.state == SessionState.MENU

    @pytest.mark.asyncio
    async def test_new_batch_on_request(self, session, oracle):
        with answers("r", "3"):
            assert await _choose_scenario(session) is True

        assert len(oracle.calls["generate_scenarios"]) == 2
        assert session.scenario.id == "s3"


class TestReturnToMenu:
    async def _finish_roleplay(self, session):
        with answers("1"):
            await _choose_scenario(session)
        await session.end()
        session.leave_report()

    @pytest.mark.asyncio
    async def test_menu_reloads_after_report(self, session, oracle):
        await self._finish_roleplay(session)
        assert len(oracle.calls["generate_scenarios"]) == 1

        with answers("q"):
            await _choose_scenario(session)

        assert len(oracle.calls["generate_scenarios"]) == 2

    @pytest.mark.asyncio
    async def test_failed_reload_keeps_previous_batch(self, session, oracle):
        await self._finish_roleplay(session)
        previous = session.scenarios
        oracle.script("generate_scenarios", OracleTransportError("offline"))

        with answers("1") as ask:
            assert await _choose_scenario(session) is True

        assert session.scenarios == previous
        assert session.scenario.id == "s1"
        assert "1" in ask.call_args.kwargs["choices"]
