"""Rich console views for the workshop, plus saving a solution image."""

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from rich.align import Align
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from studio.models import AgentRole, DebateMessage, DesignResult, DesignSolution, Evaluation
from studio.roles import display_for
from studio.state import SessionState

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_CHART_WIDTH = 40
_CURSOR = "▌"

_SCORE_LABELS = (
    ("Feasibility", "technical_feasibility"),
    ("Market", "market_competitiveness"),
    ("Aesthetics", "aesthetics"),
    ("Usability", "usability"),
    ("Innovation", "innovation"),
)


def synthesis_score(evaluation: Evaluation) -> str:
    """Mean of all five scores, one decimal place."""
    values = [getattr(evaluation, attr) for _, attr in _SCORE_LABELS]
    return f"{sum(values) / len(values):.1f}"


def download_filename(title: str) -> str:
    """e.g. 'Modular Brew Station' -> 'council-ai-modular-brew-station.png'.

    Characters other than letters, digits, whitespace and hyphens count as
    word breaks, so a title never yields a path component.
    """
    slug = re.sub(r"[^\w\s-]", " ", title.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return f"council-ai-{slug or 'design'}.png"


def save_solution_image(solution: DesignSolution, output_dir: Path) -> Path:
    """Write the solution's image to output_dir and return the path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / download_filename(solution.title)
    filepath.write_bytes(solution.image.data)
    logger.info("Solution image saved to: %s", filepath)
    return filepath


def render_role_bar(state: SessionState) -> Table:
    """One column per role; the active speaker and the focused role light up."""
    bar = Table.grid(expand=True, padding=(0, 1))
    cells: list[Text] = []
    for role in AgentRole:
        disp = display_for(role)
        lit = role in (state.active_role, state.selected_role)
        label = Text(f"{disp.icon} {disp.short_name}", justify="center")
        if role == state.active_role:
            label.stylize(f"bold reverse {disp.color}")
        elif lit:
            label.stylize(f"bold {disp.color}")
        else:
            label.stylize("dim")
        bar.add_column(justify="center", ratio=1)
        cells.append(label)
    bar.add_row(*cells)
    return bar


def _bubble(message: DebateMessage, shown: int | None) -> RenderableType:
    disp = display_for(message.role)
    text = Text(message.content if shown is None else message.content[:shown])
    if shown is not None and shown < len(message.content):
        text.append(_CURSOR, style="dim")
    panel = Panel(
        text,
        title=f"[bold {disp.color}]{disp.icon} {message.role.value}[/]",
        title_align="right" if disp.align_right else "left",
        border_style=disp.color,
        width=min(100, max(40, console.width * 4 // 5)),
    )
    return Align.right(panel) if disp.align_right else Align.left(panel)


def render_transcript(state: SessionState, visible: Sequence[DebateMessage]) -> Group:
    newest = state.revealed[-1] if state.revealed else None
    bubbles = [
        _bubble(msg, state.typed_chars if msg is newest else None)
        for msg in visible
    ]
    if not bubbles:
        bubbles = [Text("Synchronizing...", style="dim italic", justify="center")]
    return Group(*bubbles)


def render_debate(state: SessionState, visible: Sequence[DebateMessage]) -> Group:
    """Live view used during playback."""
    if state.finished:
        status = Rule("[bold green]Workshop Synthesized[/bold green]")
    else:
        status = Rule("[bold cyan]Synthesizing Product Form[/bold cyan]")
    return Group(render_role_bar(state), status, render_transcript(state, visible))


def render_score_chart(evaluation: Evaluation) -> Table:
    chart = Table.grid(padding=(0, 1))
    chart.add_column(style="bold", width=12)
    chart.add_column()
    chart.add_column(justify="right", style="dim")
    for label, attr in _SCORE_LABELS:
        score = getattr(evaluation, attr)
        filled = round(score / 100 * _CHART_WIDTH)
        bar = Text("█" * filled, style="medium_purple") + Text("░" * (_CHART_WIDTH - filled), style="grey23")
        chart.add_row(label, bar, f"{score:.1f}")
    return chart


def render_solution_detail(solution: DesignSolution) -> Panel:
    score = Text.assemble(
        ("Synthesis Score ", "dim"),
        (synthesis_score(solution.evaluation), "bold magenta"),
        (" / 100", "dim"),
    )
    tags = Text("  ").join(Text(f" {h.upper()} ", style="bold white on slate_blue3") for h in solution.highlights)
    body = Group(
        score,
        tags,
        Text(""),
        render_score_chart(solution.evaluation),
        Text(""),
        Text("Optimization Findings", style="bold"),
        Text(solution.consensus_summary),
    )
    return Panel(body, title=f"[bold]{solution.title}[/bold]", border_style="magenta")


def render_solutions(result: DesignResult, selected: int) -> Group:
    cards = Table.grid(expand=True, padding=(0, 2))
    for _ in result.solutions:
        cards.add_column(ratio=1)
    cards.add_row(*[
        Panel(
            Text(sol.title, style="bold"),
            subtitle=f"{len(sol.image.data) // 1024} KB {sol.image.mime_type}",
            title=f"{'● ' if idx == selected else ''}Path {idx + 1}",
            border_style="magenta" if idx == selected else "dim",
        )
        for idx, sol in enumerate(result.solutions)
    ])
    return Group(cards, render_solution_detail(result.solutions[selected]))


def print_transcript(state: SessionState, visible: Sequence[DebateMessage]) -> None:
    focus = f" (focus: {display_for(state.selected_role).short_name})" if state.selected_role else ""
    console.print(Rule(f"[bold cyan]Board Transcript{focus}[/bold cyan]"))
    console.print(render_transcript(state, visible))


def print_solutions(state: SessionState) -> None:
    if state.result is None:
        return
    console.print(Rule("[bold green]Optimized Designs[/bold green]"))
    console.print(render_solutions(state.result, state.selected_solution))


def print_notice(message: str) -> None:
    console.print(f"[bold red]Notice:[/bold red] {message}")
