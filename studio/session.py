"""Workshop session: stage machine and user actions around one synthesis run."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from config.config_loader import PlaybackConfig
from studio.models import AgentRole, DebateMessage, DesignSolution
from studio.output import save_solution_image
from studio.providers.base import ProviderError
from studio.role_filter import RoleFilter
from studio.sequencer import PlaybackSequencer, SleepFn
from studio.state import SessionState, Stage
from studio.synthesis import SynthesisClient, SynthesisError

logger = logging.getLogger(__name__)

FAILURE_NOTICE = "Workshop connection interrupted. Retrying is recommended."
DEFAULT_REFINE_TEMPLATE = "Optimize the {title} further based on the feedback provided in the meeting..."


class WorkshopSession:
    """Drives landing -> input -> debating -> result for one user."""

    def __init__(
        self,
        client: SynthesisClient,
        playback: PlaybackConfig,
        refine_template: str = DEFAULT_REFINE_TEMPLATE,
        sleep: SleepFn = asyncio.sleep,
        on_change: Callable[[], None] | None = None,
        state: SessionState | None = None,
    ) -> None:
        self.state = state if state is not None else SessionState()
        self._client = client
        self._refine_template = refine_template
        self.role_filter = RoleFilter(self.state)
        self.sequencer = PlaybackSequencer(self.state, playback, sleep=sleep, on_change=on_change)

    def open_workshop(self) -> None:
        self.state.stage = Stage.INPUT

    def can_submit(self) -> bool:
        return bool(self.state.prompt.strip()) or self.state.image is not None

    async def submit(self) -> bool:
        """Run synthesis for the current input.

        Returns:
            True when a result is ready for playback, False when synthesis
            failed and the session went back to the input stage.

        Raises:
            ValueError: If neither prompt text nor an image is set.
        """
        if not self.can_submit():
            raise ValueError("Provide an idea or an image before starting the workshop")

        self.sequencer.cancel()
        self.state.reset_playback()
        self.role_filter.clear()
        self.state.result = None
        self.state.notice = None
        self.state.selected_solution = 0
        self.state.stage = Stage.DEBATING

        try:
            result = await self._client.synthesize(
                self.state.prompt, self.state.image, self.state.constraints
            )
        except (ProviderError, SynthesisError) as exc:
            logger.error("Synthesis failed: %s", exc)
            self.state.notice = FAILURE_NOTICE
            self.state.stage = Stage.INPUT
            return False

        self.state.result = result
        return True

    async def play(self) -> None:
        """Replay the stored transcript until it has been shown in full."""
        if self.state.result is None:
            raise ValueError("No design result to play back")
        await self.sequencer.play(self.state.result.transcript)

    async def run(self) -> bool:
        """submit() then play() when synthesis succeeded."""
        if not await self.submit():
            return False
        await self.play()
        return True

    def view_results(self) -> None:
        if self.state.result is None or not self.state.finished:
            raise ValueError("Results are available once the debate playback has finished")
        self.state.stage = Stage.RESULT

    def select_role(self, role: AgentRole) -> AgentRole | None:
        return self.role_filter.toggle(role)

    @property
    def visible_messages(self) -> list[DebateMessage]:
        return self.role_filter.visible()

    def select_solution(self, index: int) -> None:
        if self.state.result is None:
            raise ValueError("No design result to select from")
        if not 0 <= index < len(self.state.result.solutions):
            raise ValueError(f"Solution index out of range: {index}")
        self.state.selected_solution = index

    @property
    def current_solution(self) -> DesignSolution | None:
        if self.state.result is None:
            return None
        return self.state.result.solutions[self.state.selected_solution]

    def download(self, output_dir: Path) -> Path | None:
        solution = self.current_solution
        if solution is None:
            return None
        return save_solution_image(solution, output_dir)

    def refine(self) -> None:
        """Feed the current solution back in as the next session's input."""
        solution = self.current_solution
        if solution is None:
            return
        self.state.image = solution.image
        self.state.prompt = self._refine_template.format(title=solution.title)
        self.state.stage = Stage.INPUT
