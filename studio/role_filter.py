"""Focus the transcript on one speaker without touching playback."""

from collections.abc import Sequence

from studio.models import AgentRole, DebateMessage
from studio.state import SessionState


class RoleFilter:
    """Owns ``state.selected_role``. Never mutates the revealed messages."""

    def __init__(self, state: SessionState) -> None:
        self._state = state

    @property
    def selected(self) -> AgentRole | None:
        return self._state.selected_role

    def toggle(self, role: AgentRole) -> AgentRole | None:
        """Select ``role``, or clear the selection if it is already selected."""
        self._state.selected_role = None if self._state.selected_role == role else role
        return self._state.selected_role

    def clear(self) -> None:
        self._state.selected_role = None

    def visible(self, revealed: Sequence[DebateMessage] | None = None) -> list[DebateMessage]:
        messages = self._state.revealed if revealed is None else revealed
        role = self._state.selected_role
        if role is None:
            return list(messages)
        return [m for m in messages if m.role == role]
