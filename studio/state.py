"""Session state shared by the workshop, sequencer, filter and display.

Each field has a single writer: the sequencer owns the playback fields, the
role filter owns ``selected_role``, the workshop session owns the rest. The
display only reads.
"""

from dataclasses import dataclass, field
from enum import Enum

from studio.models import AgentRole, Constraints, DebateMessage, DesignResult, ImageData


class Stage(str, Enum):
    LANDING = "landing"
    INPUT = "input"
    DEBATING = "debating"
    RESULT = "result"


@dataclass
class SessionState:
    stage: Stage = Stage.LANDING
    prompt: str = ""
    image: ImageData | None = None
    constraints: Constraints = field(default_factory=Constraints)
    result: DesignResult | None = None
    selected_solution: int = 0
    notice: str | None = None

    # playback
    revealed: list[DebateMessage] = field(default_factory=list)
    active_role: AgentRole | None = None
    finished: bool = False
    typed_chars: int | None = None   # None: newest message fully shown

    # filter
    selected_role: AgentRole | None = None

    def reset_playback(self) -> None:
        self.revealed = []
        self.active_role = None
        self.finished = False
        self.typed_chars = None

    @property
    def typing(self) -> bool:
        if self.typed_chars is None or not self.revealed:
            return False
        return self.typed_chars < len(self.revealed[-1].content)
