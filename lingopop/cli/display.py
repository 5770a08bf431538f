"""Rich rendering helpers for the LingoPop CLI."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lingopop.core.models import ChatTurn, DictEntry, Role, ScenarioDescriptor, ScenarioReport
from lingopop.dictionary.story import split_highlights

console = Console()

STYLES = {
    "term": "bold magenta",
    "phonetic": "italic cyan",
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "dim": "dim",
    "learner": "bold blue",
    "counterpart": "bold green",
}


def score_style(score: int) -> str:
    if score >= 80:
        return "bold green"
    if score >= 50:
        return "bold yellow"
    return "bold red"


def image_label(image_ref: str | None) -> str:
    """Short description of a data-URI image reference."""
    if not image_ref:
        return "no image"
    mime = image_ref[5:].split(";", 1)[0] if image_ref.startswith("data:") else "image"
    return f"{mime} attached"


# =============================================================================
# Dictionary
# =============================================================================


def render_entry(entry: DictEntry, saved: bool = False) -> None:
    body = Text()
    body.append(entry.target_term, style=STYLES["term"])
    if entry.phonetic:
        body.append(f"  {entry.phonetic}", style=STYLES["phonetic"])
    body.append(f"\n\n{entry.native_definition}\n")

    for index, example in enumerate(entry.examples, 1):
        body.append(f"\n{index}. {example.text}\n", style="bold")
        if example.phonetic:
            body.append(f"   {example.phonetic}\n", style=STYLES["phonetic"])
        body.append(f"   {example.translation}\n", style=STYLES["dim"])

    if entry.usage_note:
        body.append(f"\nNote: {entry.usage_note}\n", style="yellow")
    body.append(f"\n[{image_label(entry.image_ref)}]", style=STYLES["dim"])

    title = f"{entry.source_term}" + ("  ★ saved" if saved else "")
    console.print(Panel(body, title=title, title_align="left", border_style="magenta", padding=(1, 2)))


def render_notebook(entries: Sequence[DictEntry]) -> None:
    table = Table(title="Notebook", show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Term", style="cyan")
    table.add_column("Target", style="magenta")
    table.add_column("Reading", style="italic")
    table.add_column("Pair", style="dim")
    table.add_column("Saved", style="dim")

    for index, entry in enumerate(entries, 1):
        pair = (
            f"{entry.source_lang.value} → {entry.target_lang.value}"
            if entry.source_lang and entry.target_lang
            else "-"
        )
        saved_at = datetime.fromtimestamp(entry.created_at / 1000).strftime("%Y-%m-%d")
        table.add_row(str(index), entry.source_term, entry.target_term, entry.phonetic, pair, saved_at)

    console.print(table)


def render_story(story: str) -> None:
    text = Text()
    for segment, highlighted in split_highlights(story):
        text.append(segment, style=STYLES["term"] if highlighted else None)
    console.print(Panel(text, title="Story", border_style="yellow", padding=(1, 2)))


# =============================================================================
# Roleplay
# =============================================================================


def render_scenarios(scenarios: Sequence[ScenarioDescriptor]) -> None:
    table = Table(title="Choose a scenario", show_header=True)
    table.add_column("#", justify="right", style="bold")
    table.add_column("Title", style="cyan")
    table.add_column("Description")
    for index, scenario in enumerate(scenarios, 1):
        table.add_row(str(index), scenario.title, scenario.description)
    console.print(table)


def render_turn(turn: ChatTurn) -> None:
    if turn.role == Role.LEARNER:
        console.print(f"[{STYLES['learner']}]you[/]  {turn.text}")
    else:
        console.print(f"[{STYLES['counterpart']}]them[/] {turn.text}")


def render_report(report: ScenarioReport) -> None:
    style = score_style(report.score)
    console.print(Panel(
        f"[{style}]{report.score}/100[/{style}]\n\n{report.feedback}",
        title="[bold]Session Report[/bold]",
        border_style=style.split()[-1],
        padding=(1, 2),
    ))
    if not report.corrections:
        return

    table = Table(title="Corrections", show_header=True, show_lines=True)
    table.add_column("You said", style="red")
    table.add_column("Better", style="green")
    table.add_column("Why")
    for correction in report.corrections:
        table.add_row(correction.original, correction.correction, correction.explanation)
    console.print(table)
