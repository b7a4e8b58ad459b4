"""Editing session aggregate for a single loaded image."""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

from photo_studio.domain.compare import CompareOverlay
from photo_studio.domain.hotspot import Hotspot, map_to_natural
from photo_studio.domain.images import ImagePayload, ImageSize
from photo_studio.domain.tools import Tool, ToolSelector
from photo_studio.domain.versions import VersionStore


@dataclass
class EditSession:
    """State machine for one image: tools, hotspot, history and busy flag.

    Every public method is a user event. Events that are not allowed in the
    current state return False and leave the session untouched.
    """

    original: ImagePayload
    id: UUID = field(default_factory=uuid4)
    versions: VersionStore = field(init=False)
    tools: ToolSelector = field(default_factory=ToolSelector)
    compare: CompareOverlay = field(default_factory=CompareOverlay)
    pending_hotspot: Hotspot | None = None
    retouch_instruction: str = ""
    is_busy: bool = False
    last_error: str | None = None

    def __post_init__(self) -> None:
        self.versions = VersionStore(self.original)

    @property
    def active_tool(self) -> Tool | None:
        return self.tools.active

    def select_tool(self, tool: Tool) -> bool:
        """Toggle a tool; ignored while an edit is in flight."""
        if self.is_busy:
            return False
        self.tools.select(tool)
        self._clear_tool_state()
        return True

    def capture_hotspot(
        self,
        offset_x: float,
        offset_y: float,
        rendered: ImageSize,
        natural: ImageSize,
    ) -> bool:
        """Record the retouch target from a click on the rendered image."""
        if self.is_busy or self.tools.active is not Tool.RETOUCH:
            return False
        if rendered.width <= 0 or rendered.height <= 0:
            return False
        self.pending_hotspot = map_to_natural(offset_x, offset_y, rendered, natural)
        return True

    def set_retouch_instruction(self, text: str) -> bool:
        if self.is_busy:
            return False
        self.retouch_instruction = text
        return True

    def undo(self) -> bool:
        if self.is_busy:
            return False
        return self.versions.undo()

    def redo(self) -> bool:
        if self.is_busy:
            return False
        return self.versions.redo()

    def press_compare(self) -> None:
        self.compare.press()

    def release_compare(self) -> None:
        self.compare.release()

    def current(self) -> ImagePayload:
        return self.versions.current()

    def displayed(self) -> ImagePayload:
        return self.compare.displayed(self.versions)

    def begin_edit(self) -> bool:
        """Claim the busy flag for a single outstanding edit request."""
        if self.is_busy:
            return False
        self.is_busy = True
        self.last_error = None
        return True

    def commit_edit(self, version: ImagePayload) -> None:
        """Append a successful result and close the tool panel."""
        self.versions.append(version)
        self.tools.reset()
        self._clear_tool_state()
        self.is_busy = False

    def fail_edit(self, message: str) -> None:
        self.pending_hotspot = None
        self.last_error = message
        self.is_busy = False

    def consume_retouch(self) -> None:
        """Drop the single-use hotspot and its instruction."""
        self.pending_hotspot = None
        self.retouch_instruction = ""

    def _clear_tool_state(self) -> None:
        self.pending_hotspot = None
        self.retouch_instruction = ""
        self.last_error = None


@dataclass
class Workspace:
    """Editor view that holds at most one session at a time.

    The generation counter changes every time the session is replaced or
    dropped, so responses issued against an earlier session can be told
    apart from current ones.
    """

    id: UUID = field(default_factory=uuid4)
    session: EditSession | None = None
    generation: int = 0

    def load(self, original: ImagePayload) -> EditSession:
        """Start a fresh session for a newly selected image."""
        self.session = EditSession(original=original)
        self.generation += 1
        return self.session

    def close(self) -> None:
        self.session = None
        self.generation += 1
