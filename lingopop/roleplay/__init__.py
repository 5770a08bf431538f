"""Roleplay practice: scenario menu, turn loop and graded report."""

from .session import SCENARIO_BATCH_SIZE, ScenarioSession, SessionState, TurnState

__all__ = ["SCENARIO_BATCH_SIZE", "ScenarioSession", "SessionState", "TurnState"]
