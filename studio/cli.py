"""Click CLI — loads config, builds the provider, runs and replays the workshop."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.live import Live
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, PlaybackConfig, load_config
from studio.brief import MODES, apply_brief_constraints, brief_image_path, load_image, parse_brief
from studio.models import AgentRole, Constraints
from studio.output import console, print_notice, print_solutions, print_transcript, render_debate
from studio.providers.base import AIProvider, ProviderError
from studio.providers.gemini import GeminiProvider
from studio.providers.openai_provider import OpenAIProvider
from studio.roles import ROLE_DISPLAY, display_for, resolve_role
from studio.session import WorkshopSession
from studio.synthesis import SynthesisClient

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "gemini": GeminiProvider,
    "openai": OpenAIProvider,
}

# Bubbles kept on screen while the live replay runs
_LIVE_TAIL = 4

_INSTANT = PlaybackConfig(base_delay_sec=0, per_char_sec=0, pause_sec=0, typing_interval_sec=0)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _build_provider(config: AppConfig, name: str) -> AIProvider:
    """Instantiate the named provider. Raises ProviderError when unusable."""
    if name not in PROVIDER_CLASSES:
        raise ProviderError(name, f"Unknown provider; choose from {', '.join(PROVIDER_CLASSES)}")
    if name not in config.models:
        raise ProviderError(name, "No model configured in settings.yaml")
    if name not in config.available_providers:
        raise ProviderError(name, f"Missing API key: {config.models[name].api_key_env}")
    return PROVIDER_CLASSES[name](config.models[name])


def _resolve_constraints(
    config: AppConfig,
    brief_meta: dict,
    purpose: str | None,
    brand_tone: str | None,
    audience: str | None,
    price_point: str | None,
    mode: str | None,
) -> Constraints:
    """CLI flag > brief frontmatter > config default."""
    base = Constraints(price_point=config.defaults.price_point, mode=config.defaults.mode)
    constraints = apply_brief_constraints(base, brief_meta)
    overrides = {
        "purpose": purpose,
        "brand_tone": brand_tone,
        "target_audience": audience,
        "price_point": price_point,
        "mode": mode,
    }
    for field_name, value in overrides.items():
        if value is not None:
            setattr(constraints, field_name, value)
    return constraints


async def _run_workshop(session: WorkshopSession, focus: AgentRole | None) -> bool:
    """Synthesize with a spinner, then replay the debate live."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Board meeting in session...", total=None)
        ok = await session.submit()

    if not ok:
        print_notice(session.state.notice or "Workshop failed.")
        return False

    if focus is not None:
        session.select_role(focus)

    with Live(
        console=console,
        refresh_per_second=20,
        transient=True,
        get_renderable=lambda: render_debate(session.state, session.visible_messages[-_LIVE_TAIL:]),
    ):
        await session.play()

    print_transcript(session.state, session.visible_messages)
    session.view_results()
    return True


def _prompt_role() -> AgentRole:
    by_name = {d.short_name: role for role, d in ROLE_DISPLAY.items()}
    name = click.prompt("Role", type=click.Choice(list(by_name), case_sensitive=False))
    return by_name[name]


def _result_menu(session: WorkshopSession, output_dir: Path) -> bool:
    """Interactive result stage. Returns True when the user asked to refine."""
    while True:
        print_solutions(session.state)
        choice = click.prompt(
            "[1/2] select path, [f]ocus role, [s]ave image, [r]efine, [q]uit",
            type=click.Choice(["1", "2", "f", "s", "r", "q"], case_sensitive=False),
            default="q",
            show_choices=False,
        ).lower()
        if choice in ("1", "2"):
            session.select_solution(int(choice) - 1)
        elif choice == "f":
            selected = session.select_role(_prompt_role())
            label = display_for(selected).short_name if selected else "everyone"
            console.print(f"[dim]Showing: {label}[/dim]")
            print_transcript(session.state, session.visible_messages)
        elif choice == "s":
            saved = session.download(output_dir)
            console.print(f"\n[dim]Saved to: {saved}[/dim]")
        elif choice == "r":
            session.refine()
            return True
        else:
            return False


@click.command()
@click.argument("idea", required=False)
@click.option("--image", "image_path", type=click.Path(exists=True, dir_okay=False), help="Prototype image to attach")
@click.option("--brief", "brief_file", type=click.Path(exists=True, dir_okay=False),
              help="Read idea and constraints from a .md brief with frontmatter")
@click.option("--purpose", default=None, help="Design goal")
@click.option("--brand-tone", default=None, help="Brand persona, e.g. 'Minimalist High-Tech'")
@click.option("--audience", default=None, help="Target audience")
@click.option("--price-point", default=None, help="Price point (default: from config)")
@click.option("--mode", type=click.Choice(MODES), default=None,
              help="quick: fast cycle, deep: full workshop (default: from config)")
@click.option("--provider", default=None, help="Backend to use (default: from config)")
@click.option("--focus", default=None, help="Only show one role's messages, e.g. TECH")
@click.option("--output", "output_path", default=None, help="Where saved images go (default: from config)")
@click.option("--instant", is_flag=True, help="Skip playback pacing")
@click.option("--save/--no-save", default=False, help="Save the selected image without prompting")
@click.option("--interactive/--no-interactive", default=True, help="Offer the result menu after playback")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(
    idea: str | None,
    image_path: str | None,
    brief_file: str | None,
    purpose: str | None,
    brand_tone: str | None,
    audience: str | None,
    price_point: str | None,
    mode: str | None,
    provider: str | None,
    focus: str | None,
    output_path: str | None,
    instant: bool,
    save: bool,
    interactive: bool,
    verbose: bool,
) -> None:
    """Council AI -- a board of five AI specialists debates your product idea.

    \b
    Examples:
      python -m studio.cli "A countertop espresso machine for tiny kitchens"
      python -m studio.cli "Desk lamp" --brand-tone "Warm Scandinavian" --mode deep
      python -m studio.cli --image sketch.png --focus TECH
      python -m studio.cli --brief lamp.md --no-interactive --save
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    focus_role: AgentRole | None = None
    if focus:
        focus_role = resolve_role(focus)
        if focus_role is None:
            console.print(f"[bold red]Error:[/bold red] Unknown role '{focus}'.")
            sys.exit(1)

    brief_meta: dict = {}
    idea_text = idea or ""
    image_file = Path(image_path) if image_path else None
    if brief_file:
        brief_text, brief_meta = parse_brief(Path(brief_file))
        idea_text = idea or brief_text
        image_file = image_file or brief_image_path(Path(brief_file), brief_meta)

    try:
        backend = _build_provider(config, provider or config.defaults.provider)
        image = load_image(image_file) if image_file else None
        constraints = _resolve_constraints(
            config, brief_meta, purpose, brand_tone, audience, price_point, mode
        )
    except (ProviderError, FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)

    session = WorkshopSession(
        client=SynthesisClient(backend, config.prompts),
        playback=_INSTANT if instant else config.playback,
        refine_template=config.prompts.refine,
    )
    session.state.prompt = idea_text
    session.state.image = image
    session.state.constraints = constraints
    output_dir = Path(output_path) if output_path else config.defaults.output_dir

    console.print(f"\n[bold cyan]Council AI[/bold cyan] — Design Studio ({backend.name()}: {backend.model_string()})")
    session.open_workshop()

    if not session.can_submit():
        console.print("[bold red]Error:[/bold red] Provide an IDEA argument, --image, or --brief.")
        sys.exit(1)

    while True:
        c = session.state.constraints
        console.print(f"Idea: [italic]{session.state.prompt[:80]}{'...' if len(session.state.prompt) > 80 else ''}[/italic]")
        console.print(f"[dim]Mode: {c.mode} | Price: {c.price_point} | Image: {'yes' if session.state.image else 'no'}[/dim]\n")

        ok = asyncio.run(_run_workshop(session, focus_role))
        if not ok:
            if interactive and click.confirm("Submit again?", default=False):
                continue
            sys.exit(1)

        if save:
            saved = session.download(output_dir)
            console.print(f"\n[dim]Saved to: {saved}[/dim]")

        if not interactive:
            print_solutions(session.state)
            return

        if not _result_menu(session, output_dir):
            return
        session.state.prompt = click.prompt("Idea", default=session.state.prompt)


if __name__ == "__main__":
    main()
