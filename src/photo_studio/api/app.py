"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from http import HTTPStatus
from uuid import UUID

from fastapi import FastAPI, Header, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from photo_studio.api.models import (
    EditInstruction,
    EditResult,
    HotspotPayload,
    InstructionText,
    PointerClick,
    ToolSelection,
    WorkspaceState,
)
from photo_studio.app_logging import configure_logging
from photo_studio.containers import AppContainer
from photo_studio.domain.images import ImagePayload, ImageSize, InvalidImageError
from photo_studio.domain.sessions import Workspace
from photo_studio.services.editing import EditOutcome
from photo_studio.services.workspaces import WorkspaceNotFoundError


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    workspaces = container.workspace_service

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(WorkspaceNotFoundError)
    async def workspace_not_found(
        request: Request, exc: WorkspaceNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"Workspace {exc} not found"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/workspaces", status_code=status.HTTP_201_CREATED)
    async def create_workspace() -> WorkspaceState:
        """Open an empty editor view."""
        return _workspace_state(workspaces.create_workspace())

    @app.get("/workspaces/{workspace_id}")
    async def get_workspace(workspace_id: UUID) -> WorkspaceState:
        return _workspace_state(workspaces.get(workspace_id))

    @app.delete("/workspaces/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def close_workspace(workspace_id: UUID) -> Response:
        """Close the editor view and drop its history."""
        workspaces.close(workspace_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.put("/workspaces/{workspace_id}/image")
    async def upload_image(
        workspace_id: UUID,
        request: Request,
        content_type: str | None = Header(default=None),
        x_file_name: str | None = Header(default=None),
    ) -> WorkspaceState:
        """Seed a new session from the raw request body."""
        workspace = workspaces.get(workspace_id)
        max_bytes = container.settings.max_upload_bytes
        try:
            data = await _read_upload(request, max_bytes)
            original = ImagePayload.from_upload(
                data,
                file_name=x_file_name,
                content_type=content_type,
                max_bytes=max_bytes,
            )
        except InvalidImageError as exc:
            logger.info(
                "Rejected image upload",
                extra={"workspace_id": str(workspace_id), "reason": str(exc)},
            )
            code = (
                HTTPStatus.REQUEST_ENTITY_TOO_LARGE
                if exc.too_large
                else HTTPStatus.BAD_REQUEST
            )
            raise HTTPException(status_code=code, detail=str(exc)) from exc
        workspaces.load_image(workspace_id, original)
        return _workspace_state(workspace)

    @app.get("/workspaces/{workspace_id}/image")
    async def displayed_image(workspace_id: UUID) -> Response:
        """Return the original while comparing, otherwise the current version."""
        session = workspaces.get(workspace_id).session
        if session is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="No image loaded"
            )
        image = session.displayed()
        return Response(
            content=image.data,
            media_type=image.mime_type,
            headers={"Cache-Control": "no-store"},
        )

    @app.post("/workspaces/{workspace_id}/tool")
    async def select_tool(workspace_id: UUID, body: ToolSelection) -> WorkspaceState:
        workspaces.select_tool(workspace_id, body.tool)
        return _workspace_state(workspaces.get(workspace_id))

    @app.post("/workspaces/{workspace_id}/hotspot")
    async def capture_hotspot(
        workspace_id: UUID, body: PointerClick
    ) -> WorkspaceState:
        """Map a click on the rendered image to a retouch hotspot."""
        workspaces.capture_hotspot(
            workspace_id,
            body.offset_x,
            body.offset_y,
            rendered=ImageSize(body.rendered_width, body.rendered_height),
            natural=ImageSize(body.natural_width, body.natural_height),
        )
        return _workspace_state(workspaces.get(workspace_id))

    @app.put("/workspaces/{workspace_id}/retouch/instruction")
    async def set_retouch_instruction(
        workspace_id: UUID, body: InstructionText
    ) -> WorkspaceState:
        workspaces.set_retouch_instruction(workspace_id, body.text)
        return _workspace_state(workspaces.get(workspace_id))

    @app.post("/workspaces/{workspace_id}/retouch")
    async def apply_retouch(workspace_id: UUID) -> EditResult:
        outcome = await workspaces.apply_retouch(workspace_id)
        return _edit_result(workspaces.get(workspace_id), outcome)

    @app.post("/workspaces/{workspace_id}/adjust")
    async def apply_adjustment(
        workspace_id: UUID, body: EditInstruction
    ) -> EditResult:
        outcome = await workspaces.apply_adjustment(workspace_id, body.instruction)
        return _edit_result(workspaces.get(workspace_id), outcome)

    @app.post("/workspaces/{workspace_id}/filter")
    async def apply_filter(workspace_id: UUID, body: EditInstruction) -> EditResult:
        outcome = await workspaces.apply_filter(workspace_id, body.instruction)
        return _edit_result(workspaces.get(workspace_id), outcome)

    @app.post("/workspaces/{workspace_id}/undo")
    async def undo(workspace_id: UUID) -> WorkspaceState:
        workspaces.undo(workspace_id)
        return _workspace_state(workspaces.get(workspace_id))

    @app.post("/workspaces/{workspace_id}/redo")
    async def redo(workspace_id: UUID) -> WorkspaceState:
        workspaces.redo(workspace_id)
        return _workspace_state(workspaces.get(workspace_id))

    @app.post("/workspaces/{workspace_id}/compare/press")
    async def press_compare(workspace_id: UUID) -> WorkspaceState:
        workspaces.press_compare(workspace_id)
        return _workspace_state(workspaces.get(workspace_id))

    @app.post("/workspaces/{workspace_id}/compare/release")
    async def release_compare(workspace_id: UUID) -> WorkspaceState:
        workspaces.release_compare(workspace_id)
        return _workspace_state(workspaces.get(workspace_id))

    return app


def _workspace_state(workspace: Workspace) -> WorkspaceState:
    """Render a workspace and its session for the presentation layer."""
    session = workspace.session
    if session is None:
        return WorkspaceState(workspace_id=workspace.id)
    hotspot = session.pending_hotspot
    return WorkspaceState(
        workspace_id=workspace.id,
        session_id=session.id,
        has_image=True,
        version_count=len(session.versions),
        cursor=session.versions.cursor,
        can_undo=session.versions.can_undo,
        can_redo=session.versions.can_redo,
        active_tool=session.active_tool,
        pending_hotspot=(
            HotspotPayload(x=hotspot.x, y=hotspot.y) if hotspot is not None else None
        ),
        retouch_instruction=session.retouch_instruction,
        is_busy=session.is_busy,
        last_error=session.last_error,
        is_comparing=session.compare.pressed,
        displaying="original" if session.compare.pressed else "current",
        current_image_url=f"/workspaces/{workspace.id}/image",
    )


async def _read_upload(request: Request, max_bytes: int) -> bytes:
    """Read the request body, stopping as soon as it passes the size limit."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise InvalidImageError.over_limit(max_bytes)
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise InvalidImageError.over_limit(max_bytes)
    return bytes(body)


def _edit_result(workspace: Workspace, outcome: EditOutcome) -> EditResult:
    return EditResult(outcome=outcome, state=_workspace_state(workspace))
