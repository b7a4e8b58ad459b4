"""Pydantic models for the editor HTTP API."""

from uuid import UUID

from pydantic import BaseModel, Field

from photo_studio.domain.tools import Tool
from photo_studio.services.editing import EditOutcome


class HotspotPayload(BaseModel):
    """Pixel coordinate in the original image."""

    x: int
    y: int


class WorkspaceState(BaseModel):
    """Everything the presentation layer needs to render the editor."""

    workspace_id: UUID
    session_id: UUID | None = None
    has_image: bool = False
    version_count: int = 0
    cursor: int | None = None
    can_undo: bool = False
    can_redo: bool = False
    active_tool: Tool | None = None
    pending_hotspot: HotspotPayload | None = None
    retouch_instruction: str = ""
    is_busy: bool = False
    last_error: str | None = None
    is_comparing: bool = False
    displaying: str | None = None
    current_image_url: str | None = None


class EditResult(BaseModel):
    """Outcome of an edit request and the state after it."""

    outcome: EditOutcome
    state: WorkspaceState


class ToolSelection(BaseModel):
    """Tool toggle request."""

    tool: Tool


class PointerClick(BaseModel):
    """Click on the rendered image, forwarded from the viewer."""

    offset_x: float
    offset_y: float
    rendered_width: float = Field(gt=0)
    rendered_height: float = Field(gt=0)
    natural_width: float = Field(gt=0)
    natural_height: float = Field(gt=0)


class InstructionText(BaseModel):
    """Free-text retouch instruction typed by the user."""

    text: str


class EditInstruction(BaseModel):
    """Instruction for a global adjustment or filter."""

    instruction: str
