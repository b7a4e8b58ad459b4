"""Workspace lifecycle and routing of editor events."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from photo_studio.domain.images import ImagePayload, ImageSize
from photo_studio.domain.sessions import EditSession, Workspace
from photo_studio.domain.tools import Tool
from photo_studio.services.editing import EditOrchestrator, EditOutcome

logger = logging.getLogger(__name__)


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace id is unknown."""


class WorkspaceRepository(Protocol):
    """Storage interface for open workspaces."""

    def add(self, workspace: Workspace) -> None:
        """Store a new workspace."""

    def get(self, workspace_id: UUID) -> Workspace | None:
        """Return a workspace by id, if present."""

    def remove(self, workspace_id: UUID) -> None:
        """Forget a workspace."""


@dataclass
class InMemoryWorkspaceRepository(WorkspaceRepository):
    """Process-local workspace storage."""

    _workspaces: dict[UUID, Workspace]

    def __init__(self) -> None:
        self._workspaces = {}

    def add(self, workspace: Workspace) -> None:
        self._workspaces[workspace.id] = workspace

    def get(self, workspace_id: UUID) -> Workspace | None:
        return self._workspaces.get(workspace_id)

    def remove(self, workspace_id: UUID) -> None:
        self._workspaces.pop(workspace_id, None)


@dataclass
class WorkspaceService:
    """Application service that forwards editor events to sessions."""

    repository: WorkspaceRepository
    orchestrator: EditOrchestrator

    def create_workspace(self) -> Workspace:
        """Open an empty editor view."""
        workspace = Workspace()
        self.repository.add(workspace)
        return workspace

    def get(self, workspace_id: UUID) -> Workspace:
        """Return a workspace or raise if it does not exist."""
        workspace = self.repository.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(str(workspace_id))
        return workspace

    def load_image(self, workspace_id: UUID, original: ImagePayload) -> EditSession:
        """Replace any existing session with one seeded by a new image."""
        workspace = self.get(workspace_id)
        session = workspace.load(original)
        logger.info(
            "Image loaded",
            extra={"workspace_id": str(workspace_id), "session_id": str(session.id)},
        )
        return session

    def close(self, workspace_id: UUID) -> None:
        """Close the editor view and discard its history."""
        workspace = self.get(workspace_id)
        workspace.close()
        self.repository.remove(workspace_id)

    def select_tool(self, workspace_id: UUID, tool: Tool) -> bool:
        session = self._session(workspace_id)
        return session is not None and session.select_tool(tool)

    def capture_hotspot(
        self,
        workspace_id: UUID,
        offset_x: float,
        offset_y: float,
        rendered: ImageSize,
        natural: ImageSize,
    ) -> bool:
        session = self._session(workspace_id)
        return session is not None and session.capture_hotspot(
            offset_x, offset_y, rendered, natural
        )

    def set_retouch_instruction(self, workspace_id: UUID, text: str) -> bool:
        session = self._session(workspace_id)
        return session is not None and session.set_retouch_instruction(text)

    def undo(self, workspace_id: UUID) -> bool:
        session = self._session(workspace_id)
        return session is not None and session.undo()

    def redo(self, workspace_id: UUID) -> bool:
        session = self._session(workspace_id)
        return session is not None and session.redo()

    def press_compare(self, workspace_id: UUID) -> None:
        session = self._session(workspace_id)
        if session is not None:
            session.press_compare()

    def release_compare(self, workspace_id: UUID) -> None:
        session = self._session(workspace_id)
        if session is not None:
            session.release_compare()

    async def apply_adjustment(
        self, workspace_id: UUID, instruction: str
    ) -> EditOutcome:
        return await self.orchestrator.apply_adjustment(
            self.get(workspace_id), instruction
        )

    async def apply_filter(self, workspace_id: UUID, instruction: str) -> EditOutcome:
        return await self.orchestrator.apply_filter(self.get(workspace_id), instruction)

    async def apply_retouch(self, workspace_id: UUID) -> EditOutcome:
        return await self.orchestrator.apply_retouch(self.get(workspace_id))

    def _session(self, workspace_id: UUID) -> EditSession | None:
        return self.get(workspace_id).session
