"""
LingoPop CLI.

Commands:
- lookup: resolve a term into a dictionary entry (cached in the notebook)
- notebook / remove / flashcards: work with saved words
- story: a mnemonic story using every saved word
- chat: ask the tutor about one term
- roleplay: scenario conversation practice with a graded report
- say: speak any text aloud
"""

from __future__ import annotations

import asyncio
import base64
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.prompt import Prompt

from config import get_settings
from lingopop.context import AppContext, build_context
from lingopop.core.errors import (
    AudioFailure,
    EvaluationFailure,
    LingoPopError,
    SessionStateError,
    TurnFailure,
)
from lingopop.core.languages import Language, Voice
from lingopop.core.models import DictEntry
from lingopop.roleplay import ScenarioSession, SessionState

from .display import (
    STYLES,
    console,
    render_entry,
    render_notebook,
    render_report,
    render_scenarios,
    render_story,
    render_turn,
)

app = typer.Typer(
    name="lingopop",
    help="Generative vocabulary and conversation practice.",
    no_args_is_help=True,
)


# =============================================================================
# Helpers
# =============================================================================


def _context(needs_ai: bool = True) -> AppContext:
    settings = get_settings()
    if needs_ai and not settings.has_ai_configured():
        console.print(f"[{STYLES['error']}]GEMINI_API_KEY is not set.[/]")
        console.print("[dim]Add it to your environment or .env file.[/dim]")
        raise typer.Exit(code=1)
    return build_context(settings)


def _languages(ctx: AppContext, source: str | None, target: str | None) -> tuple[Language, Language]:
    try:
        source_lang = Language.parse(source) if source else ctx.native_language
        target_lang = Language.parse(target) if target else ctx.target_language
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return source_lang, target_lang


def _fail(exc: LingoPopError) -> None:
    console.print(f"[{STYLES['error']}]{exc}[/]")
    raise typer.Exit(code=1)


async def _speak(ctx: AppContext, text: str, voice: Voice | None = None, wait: bool = True) -> None:
    """Speak ``text``; with ``wait`` the process stays up until playback ends."""
    try:
        duration = await ctx.audio().synthesize_and_play(text, voice)
    except AudioFailure as exc:
        console.print(f"[dim]🔇 {exc}[/dim]")
        return
    if wait:
        await asyncio.sleep(duration + 0.2)


def _write_image(entry: DictEntry, path: Path) -> None:
    if not entry.image_ref:
        console.print("[dim]No image for this entry.[/dim]")
        return
    data = entry.image_ref.split(",", 1)[-1]
    path.write_bytes(base64.b64decode(data))
    console.print(f"[dim]Image written to {path}[/dim]")


# =============================================================================
# Dictionary
# =============================================================================


@app.command("lookup")
def lookup(
    term: str = typer.Argument(..., help="Word or phrase to look up"),
    source: Optional[str] = typer.Option(None, "--from", "-f", help="Native language"),
    target: Optional[str] = typer.Option(None, "--to", "-t", help="Target language"),
    save: bool = typer.Option(False, "--save", "-s", help="Save the entry to the notebook"),
    speak: bool = typer.Option(False, "--speak", help="Pronounce the target term"),
    image_out: Optional[Path] = typer.Option(None, "--image-out", help="Write the concept image here"),
):
    """Look up a term: definition, examples, usage note and a concept image."""
    ctx = _context()
    source_lang, target_lang = _languages(ctx, source, target)

    async def run() -> DictEntry:
        resolver = ctx.resolver()
        with console.status(f"Looking up '{term}'..."):
            entry = await resolver.resolve(term, source_lang, target_lang)
            if ctx.notebook.contains(entry.id) and not entry.image_ref and ctx.settings.image_generation_enabled:
                entry = await resolver.backfill_image(entry)
        render_entry(entry, saved=ctx.notebook.contains(entry.id))
        if speak:
            await _speak(ctx, entry.target_term)
        return entry

    try:
        entry = asyncio.run(run())
        if save:
            if ctx.notebook.save(entry):
                console.print(f"[{STYLES['info']}]★ Saved '{entry.source_term}'[/]")
            else:
                console.print("[dim]Already in your notebook.[/dim]")
    except LingoPopError as exc:
        _fail(exc)

    if image_out is not None:
        _write_image(entry, image_out)


@app.command("notebook")
def notebook():
    """List saved words, newest first."""
    ctx = _context(needs_ai=False)
    entries = ctx.notebook.entries()
    if not entries:
        console.print("[dim]Your notebook is empty. Use 'lingopop lookup TERM --save'.[/dim]")
        return
    render_notebook(entries)
    console.print(f"[dim]{len(entries)} saved words[/dim]")


@app.command("remove")
def remove(
    term: str = typer.Argument(..., help="Saved term to remove"),
    source: Optional[str] = typer.Option(None, "--from", "-f", help="Native language"),
    target: Optional[str] = typer.Option(None, "--to", "-t", help="Target language"),
):
    """Remove a saved word from the notebook."""
    ctx = _context(needs_ai=False)
    source_lang, target_lang = _languages(ctx, source, target)
    try:
        entry = ctx.notebook.find(term, source_lang, target_lang)
        if entry is None or not ctx.notebook.unsave(entry.id):
            console.print(f"[{STYLES['warning']}]'{term}' is not in your notebook.[/]")
            raise typer.Exit(code=1)
    except LingoPopError as exc:
        _fail(exc)
    console.print(f"Removed '{entry.source_term}'.")


@app.command("flashcards")
def flashcards(
    speak: bool = typer.Option(False, "--speak", help="Pronounce each card"),
):
    """Flip through saved words. Enter reveals, q quits."""
    ctx = _context(needs_ai=speak)
    entries = ctx.notebook.entries()
    if not entries:
        console.print("[dim]Your notebook is empty! Add some words first.[/dim]")
        return

    for index, entry in enumerate(entries, 1):
        console.print(f"\n[dim]{index}/{len(entries)}[/dim]  [{STYLES['term']}]{entry.target_term}[/]")
        if speak:
            asyncio.run(_speak(ctx, entry.target_term, wait=False))
        if Prompt.ask("[dim]Press Enter to reveal[/dim]", default="").strip().lower() == "q":
            break
        render_entry(entry, saved=True)
        if Prompt.ask("[dim]Press Enter for next card[/dim]", default="").strip().lower() == "q":
            break


@app.command("story")
def story(
    source: Optional[str] = typer.Option(None, "--from", "-f", help="Native language"),
    target: Optional[str] = typer.Option(None, "--to", "-t", help="Target language"),
):
    """Write a short mnemonic story using your saved words."""
    ctx = _context()
    source_lang, target_lang = _languages(ctx, source, target)

    async def run() -> str:
        with console.status("Writing a story..."):
            return await ctx.story_writer().write_story(ctx.notebook.entries(), source_lang, target_lang)

    try:
        render_story(asyncio.run(run()))
    except LingoPopError as exc:
        _fail(exc)


@app.command("chat")
def chat(
    term: str = typer.Argument(..., help="Term to ask about"),
    source: Optional[str] = typer.Option(None, "--from", "-f", help="Native language"),
    target: Optional[str] = typer.Option(None, "--to", "-t", help="Target language"),
):
    """Ask the tutor questions about one term. Type /quit to leave."""
    ctx = _context()
    source_lang, target_lang = _languages(ctx, source, target)

    async def run() -> None:
        with console.status(f"Looking up '{term}'..."):
            entry = await ctx.resolver().resolve(term, source_lang, target_lang)
        render_entry(entry, saved=ctx.notebook.contains(entry.id))
        tutor = ctx.tutor(entry, source_lang, target_lang)

        while True:
            question = Prompt.ask(f"[{STYLES['learner']}]ask[/]", default="").strip()
            if question in ("/quit", "/q"):
                return
            if not question:
                continue
            try:
                with console.status("Thinking..."):
                    answer = await tutor.ask(question)
            except TurnFailure as exc:
                console.print(f"[{STYLES['warning']}]{exc}[/]")
                continue
            console.print(f"[{STYLES['counterpart']}]tutor[/] {answer}")

    try:
        asyncio.run(run())
    except LingoPopError as exc:
        _fail(exc)


# =============================================================================
# Roleplay
# =============================================================================


async def _refresh_scenarios(session: ScenarioSession) -> None:
    """Request a new batch; on failure the menu keeps whatever it had."""
    try:
        with console.status("Generating scenarios..."):
            await session.load_scenarios()
    except LingoPopError as exc:
        fallback = "Keeping the current list." if session.scenarios else "Press r to try again."
        console.print(f"[{STYLES['warning']}]{exc}. {fallback}[/]")


async def _choose_scenario(session: ScenarioSession) -> bool:
    """Show the menu until a scenario is started. False means the learner quit."""
    await _refresh_scenarios(session)
    while True:
        if session.scenarios:
            render_scenarios(session.scenarios)
            choices = [str(i) for i in range(1, len(session.scenarios) + 1)] + ["r", "q"]
            choice = Prompt.ask("Pick a scenario (r = new batch, q = quit)", choices=choices, default="1")
        else:
            console.print("[dim]No scenarios to choose from.[/dim]")
            choice = Prompt.ask("r = try again, q = quit", choices=["r", "q"], default="r")

        if choice == "q":
            return False
        if choice == "r":
            await _refresh_scenarios(session)
            continue

        scenario = session.scenarios[int(choice) - 1]
        console.print(f"\n[bold]{scenario.title}[/bold]\n[dim]{scenario.description}[/dim]")
        console.print("[dim]/end grades the conversation, /retry re-asks a failed reply, /quit leaves.[/dim]\n")
        render_turn(session.select(scenario))
        return True


async def _converse(ctx: AppContext, session: ScenarioSession, speak: bool) -> None:
    if speak:
        await _speak(ctx, session.history[0].text, wait=False)

    while session.state == SessionState.ACTIVE:
        text = Prompt.ask(f"[{STYLES['learner']}]you[/]", default="").strip()
        if text == "/quit":
            session.abandon()
            return
        if text == "/end":
            try:
                with console.status("Grading..."):
                    report = await session.end()
            except EvaluationFailure as exc:
                console.print(f"[{STYLES['error']}]{exc}. Back to the menu.[/]")
                return
            render_report(report)
            Prompt.ask("[dim]Press Enter to return to the menu[/dim]", default="")
            session.leave_report()
            return

        try:
            with console.status("..."):
                if text == "/retry":
                    reply = await session.retry_reply()
                else:
                    reply = await session.submit(text)
        except TurnFailure as exc:
            console.print(f"[{STYLES['warning']}]{exc} (/retry)[/]")
            continue
        except SessionStateError as exc:
            console.print(f"[dim]{exc}[/dim]")
            continue

        if reply is not None:
            render_turn(reply)
            if speak:
                await _speak(ctx, reply.text, wait=False)


@app.command("roleplay")
def roleplay(
    source: Optional[str] = typer.Option(None, "--from", "-f", help="Native language"),
    target: Optional[str] = typer.Option(None, "--to", "-t", help="Target language"),
    speak: bool = typer.Option(False, "--speak", help="Speak the other side's lines"),
):
    """Practice a conversation in a generated scenario and get graded."""
    ctx = _context()
    source_lang, target_lang = _languages(ctx, source, target)
    session = ctx.roleplay(source_lang, target_lang)

    async def run() -> None:
        while await _choose_scenario(session):
            await _converse(ctx, session, speak)

    try:
        asyncio.run(run())
    except LingoPopError as exc:
        _fail(exc)


# =============================================================================
# Audio
# =============================================================================


@app.command("say")
def say(
    text: str = typer.Argument(..., help="Text to speak"),
    voice: Optional[str] = typer.Option(None, "--voice", "-v", help="Kore, Puck or Charon"),
):
    """Speak any text aloud."""
    ctx = _context()
    try:
        chosen = Voice.parse(voice) if voice else None
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    async def run() -> None:
        duration = await ctx.audio().synthesize_and_play(text, chosen)
        await asyncio.sleep(duration + 0.2)

    try:
        asyncio.run(run())
    except LingoPopError as exc:
        _fail(exc)


# =============================================================================
# Entry point
# =============================================================================


def configure_logging() -> None:
    settings = get_settings()
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level, format="<level>{message}</level>")
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="1 MB", retention=3)


def main():
    """Main entry point."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
