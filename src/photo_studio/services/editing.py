"""Edit orchestration between the session and the generation backend."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from photo_studio.domain.images import ImagePayload
from photo_studio.domain.sessions import EditSession, Workspace
from photo_studio.domain.tools import Tool
from photo_studio.services.generation import EditFailure, GenerativeEditor

logger = logging.getLogger(__name__)

_FALLBACK_ERRORS = {
    Tool.ADJUST: "An unknown error occurred during adjustment.",
    Tool.FILTER: "An unknown error occurred during filtering.",
    Tool.RETOUCH: "An unknown error occurred during retouching.",
}


class EditOutcome(StrEnum):
    """Result of a single edit request."""

    APPLIED = "applied"
    FAILED = "failed"
    SKIPPED = "skipped"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class EditTicket:
    """Identity of the session an edit request was issued against."""

    session_id: UUID
    generation: int

    @classmethod
    def issue(cls, workspace: Workspace, session: EditSession) -> "EditTicket":
        return cls(session_id=session.id, generation=workspace.generation)

    def matches(self, workspace: Workspace) -> bool:
        """Return true when the workspace still shows the issuing session."""
        return (
            workspace.session is not None
            and workspace.session.id == self.session_id
            and workspace.generation == self.generation
        )


@dataclass
class EditOrchestrator:
    """Runs one edit request at a time and reconciles its outcome."""

    editor: GenerativeEditor
    debug_errors: bool = False

    async def apply_adjustment(
        self, workspace: Workspace, instruction: str
    ) -> EditOutcome:
        """Apply a global adjustment to the current version."""
        session = workspace.session
        if session is None or not instruction.strip():
            return EditOutcome.SKIPPED
        return await self._run(
            workspace,
            session,
            Tool.ADJUST,
            lambda image: self.editor.adjust(image, instruction),
        )

    async def apply_filter(self, workspace: Workspace, instruction: str) -> EditOutcome:
        """Apply a stylistic filter to the current version."""
        session = workspace.session
        if session is None or not instruction.strip():
            return EditOutcome.SKIPPED
        return await self._run(
            workspace,
            session,
            Tool.FILTER,
            lambda image: self.editor.filter(image, instruction),
        )

    async def apply_retouch(self, workspace: Workspace) -> EditOutcome:
        """Apply the pending retouch instruction at the pending hotspot."""
        session = workspace.session
        if session is None or session.is_busy:
            return EditOutcome.SKIPPED
        hotspot = session.pending_hotspot
        instruction = session.retouch_instruction
        if hotspot is None or not instruction.strip():
            return EditOutcome.SKIPPED
        ticket = EditTicket.issue(workspace, session)
        try:
            return await self._run(
                workspace,
                session,
                Tool.RETOUCH,
                lambda image: self.editor.retouch(image, instruction, hotspot),
            )
        finally:
            # The hotspot is single-use, even when the request is cancelled.
            if ticket.matches(workspace):
                session.consume_retouch()

    async def _run(
        self,
        workspace: Workspace,
        session: EditSession,
        kind: Tool,
        request: Callable[[ImagePayload], Awaitable[ImagePayload]],
    ) -> EditOutcome:
        if not session.begin_edit():
            logger.info(
                "Edit request skipped, another edit is in flight",
                extra={"session_id": str(session.id), "kind": kind.value},
            )
            return EditOutcome.SKIPPED
        ticket = EditTicket.issue(workspace, session)
        try:
            image = _materialize(session)
            result = await request(image)
        except asyncio.CancelledError:
            if ticket.matches(workspace):
                session.fail_edit("The edit request was cancelled.")
            raise
        except Exception as exc:
            if not ticket.matches(workspace):
                return _discard(ticket, kind)
            logger.exception(
                "Edit request failed",
                extra={"session_id": str(session.id), "kind": kind.value},
            )
            session.fail_edit(self._error_message(kind, exc))
            return EditOutcome.FAILED
        if not ticket.matches(workspace):
            return _discard(ticket, kind)
        session.commit_edit(result)
        logger.info(
            "Edit applied",
            extra={
                "session_id": str(session.id),
                "kind": kind.value,
                "cursor": session.versions.cursor,
            },
        )
        return EditOutcome.APPLIED

    def _error_message(self, kind: Tool, exc: Exception) -> str:
        message = str(exc).strip() or _FALLBACK_ERRORS[kind]
        if self.debug_errors:
            return f"{message} (debug: {type(exc).__name__})"
        return message


def _materialize(session: EditSession) -> ImagePayload:
    """Return the current version ready to be sent to the backend."""
    current = session.current()
    if not current.data:
        raise EditFailure("The current image could not be prepared for editing.")
    return current.renamed(session.original.file_name)


def _discard(ticket: EditTicket, kind: Tool) -> EditOutcome:
    logger.info(
        "Discarding edit response for a replaced session",
        extra={"session_id": str(ticket.session_id), "kind": kind.value},
    )
    return EditOutcome.DISCARDED
