"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests,
including a scripted in-memory Oracle.
"""
import asyncio
import base64
import sys
from collections import defaultdict
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from lingopop.core.models import (  # noqa: E402
    GeneratedImage,
    ScenarioDescriptor,
    ScenarioReport,
)
from lingopop.dictionary.notebook import NotebookStore  # noqa: E402
from lingopop.integrations.oracle import Oracle  # noqa: E402
from lingopop.integrations.schemas import EnrichPayload, ExamplePayload  # noqa: E402

# Three samples: 0.0, just under +1.0, -1.0
PCM_BYTES = bytes([0x00, 0x00, 0xFF, 0x7F, 0x00, 0x80])
PCM_BASE64 = base64.b64encode(PCM_BYTES).decode("ascii")
PNG_BASE64 = base64.b64encode(b"\x89PNG fake image").decode("ascii")


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# =============================================================================
# Scripted Oracle
# =============================================================================


class FakeOracle(Oracle):
    """
    In-memory Oracle.

    Each operation answers with a sensible default unless scripted:
    ``script(op, *results)`` queues results (exceptions are raised), and
    ``hold(op)`` returns an Event the call waits on before answering.
    Every call's arguments are recorded in ``calls[op]``.
    """

    def __init__(self):
        self.calls: dict[str, list[tuple]] = defaultdict(list)
        self._scripted: dict[str, list] = defaultdict(list)
        self._gates: dict[str, asyncio.Event] = {}

    def script(self, operation: str, *results) -> "FakeOracle":
        self._scripted[operation].extend(results)
        return self

    def hold(self, operation: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[operation] = gate
        return gate

    def release(self, operation: str) -> None:
        self._gates.pop(operation).set()

    async def _answer(self, operation: str, args: tuple, default):
        self.calls[operation].append(args)
        gate = self._gates.get(operation)
        if gate is not None:
            await gate.wait()
        if self._scripted[operation]:
            result = self._scripted[operation].pop(0)
        else:
            result = default
        if isinstance(result, BaseException):
            raise result
        return result

    async def enrich(self, term, source_lang, target_lang):
        return await self._answer(
            "enrich", (term, source_lang, target_lang), make_enrich_payload(term)
        )

    async def synthesize(self, text, voice):
        return await self._answer("synthesize", (text, voice), PCM_BASE64)

    async def generate_scenarios(self, target_lang, source_lang):
        return await self._answer(
            "generate_scenarios", (target_lang, source_lang), make_scenarios()
        )

    async def scenario_reply(self, history, scenario, target_lang):
        return await self._answer(
            "scenario_reply", (tuple(history), scenario, target_lang), f"reply {len(history)}"
        )

    async def evaluate_session(self, history, source_lang, target_lang):
        return await self._answer(
            "evaluate_session",
            (tuple(history), source_lang, target_lang),
            ScenarioReport(score=80, feedback="Nice work."),
        )

    async def generate_image(self, term):
        return await self._answer(
            "generate_image", (term,), GeneratedImage(mime_type="image/png", data=PNG_BASE64)
        )

    async def write_story(self, words, source_lang, target_lang):
        return await self._answer(
            "write_story", (tuple(words), source_lang, target_lang), "A *gato* sat on a *mesa*."
        )

    async def discuss_term(self, history, question, term, source_lang, target_lang):
        return await self._answer(
            "discuss_term",
            (tuple(history), question, term, source_lang, target_lang),
            f"About {term}: it depends.",
        )


def make_enrich_payload(term: str = "hola") -> EnrichPayload:
    return EnrichPayload(
        target_term=term.strip(),
        phonetic="ˈo.la",
        native_definition="hello; a friendly greeting",
        examples=[
            ExamplePayload(text="¡Hola, amigo!", phonetic="ˈo.la aˈmi.ɣo", translation="Hello, friend!"),
            ExamplePayload(text="Hola a todos.", phonetic="ˈo.la a ˈto.ðos", translation="Hello everyone."),
        ],
        usage_note="Informal; works any time of day.",
    )


def make_scenarios(count: int = 3) -> list[ScenarioDescriptor]:
    return [
        ScenarioDescriptor(
            id=f"s{i}",
            title=f"Scenario {i}",
            description=f"Premise {i}",
            opening_line=f"Opening {i}",
        )
        for i in range(1, count + 1)
    ]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def oracle():
    """Scripted Oracle with default answers for every operation."""
    return FakeOracle()


@pytest.fixture
def notebook_path(tmp_path):
    return tmp_path / "notebook.json"


@pytest.fixture
def notebook(notebook_path):
    """Empty notebook persisted to a temporary file."""
    return NotebookStore(notebook_path)
