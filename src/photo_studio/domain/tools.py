"""Editing tool selection."""

from dataclasses import dataclass
from enum import StrEnum


class Tool(StrEnum):
    """Editing tools that open a panel in the editor."""

    RETOUCH = "retouch"
    ADJUST = "adjust"
    FILTER = "filter"


@dataclass
class ToolSelector:
    """Single active tool; None means no panel is shown."""

    active: Tool | None = None

    def select(self, tool: Tool) -> Tool | None:
        """Toggle a tool on or off and return the new active tool."""
        self.active = None if self.active == tool else tool
        return self.active

    def reset(self) -> None:
        self.active = None
