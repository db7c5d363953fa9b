"""Display identity per agent role: short name, icon, color, bubble side."""

from dataclasses import dataclass

from studio.models import AgentRole


class RoleTableError(Exception):
    """Raised when a role display table does not cover every AgentRole."""


@dataclass(frozen=True)
class RoleDisplay:
    short_name: str
    icon: str
    color: str             # rich color name
    align_right: bool = False


ROLE_DISPLAY: dict[AgentRole, RoleDisplay] = {
    AgentRole.CPO: RoleDisplay("CPO", "💼", "blue"),
    AgentRole.DESIGN: RoleDisplay("DESIGN", "✏️", "magenta", align_right=True),
    AgentRole.TECH: RoleDisplay("TECH", "🧩", "slate_blue1", align_right=True),
    AgentRole.UX: RoleDisplay("UX", "👤", "medium_purple"),
    AgentRole.MARKET: RoleDisplay("MARKET", "💲", "grey70"),
}


def check_role_table(table: dict[AgentRole, RoleDisplay]) -> None:
    """Raise RoleTableError unless every AgentRole has a display entry."""
    missing = [role.name for role in AgentRole if role not in table]
    if missing:
        raise RoleTableError(f"Role display table missing entries for: {', '.join(missing)}")


check_role_table(ROLE_DISPLAY)


def display_for(role: AgentRole) -> RoleDisplay:
    return ROLE_DISPLAY[role]


def resolve_role(raw: str) -> AgentRole | None:
    """Match a role by full name or short name, case-insensitively.

    Returns None when nothing matches.
    """
    key = raw.strip().lower()
    for role in AgentRole:
        if key in (role.value.lower(), role.name.lower(), ROLE_DISPLAY[role].short_name.lower()):
            return role
    return None
