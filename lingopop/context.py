"""
Application context.

Built once at process start and passed to whatever needs it. Holds the
process-wide collaborators (settings, Oracle, notebook, audio output) and
assembles feature components from them, so nothing reaches for a global.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from config import Settings, get_settings
from lingopop.audio import AudioOutput, AudioPipeline
from lingopop.core.languages import Language, Voice
from lingopop.core.models import DictEntry
from lingopop.dictionary import EntryResolver, NotebookStore, StoryWriter, TermTutor
from lingopop.integrations import GeminiOracle, Oracle
from lingopop.roleplay import ScenarioSession


@dataclass
class AppContext:
    """Process-wide collaborators plus component factories."""

    settings: Settings
    oracle: Oracle
    notebook: NotebookStore
    audio_output: AudioOutput = field(default_factory=AudioOutput)

    @property
    def timeout(self) -> float:
        return self.settings.oracle_timeout_seconds

    @property
    def native_language(self) -> Language:
        return Language.parse(self.settings.native_language)

    @property
    def target_language(self) -> Language:
        return Language.parse(self.settings.target_language)

    def resolver(self) -> EntryResolver:
        return EntryResolver(
            self.oracle,
            self.notebook,
            timeout=self.timeout,
            with_images=self.settings.image_generation_enabled,
        )

    def roleplay(self, source_lang: Language, target_lang: Language) -> ScenarioSession:
        return ScenarioSession(self.oracle, source_lang, target_lang, timeout=self.timeout)

    def audio(self) -> AudioPipeline:
        return AudioPipeline(
            self.oracle,
            self.audio_output,
            timeout=self.timeout,
            default_voice=Voice.parse(self.settings.default_voice),
        )

    def story_writer(self) -> StoryWriter:
        return StoryWriter(self.oracle, timeout=self.timeout)

    def tutor(self, entry: DictEntry, source_lang: Language, target_lang: Language) -> TermTutor:
        return TermTutor(self.oracle, entry, source_lang, target_lang, timeout=self.timeout)


def build_context(settings: Settings | None = None, oracle: Oracle | None = None) -> AppContext:
    """Construct the context from settings (cached settings by default)."""
    settings = settings or get_settings()
    return AppContext(
        settings=settings,
        oracle=oracle or GeminiOracle(settings),
        notebook=NotebookStore(settings.notebook_path),
    )
