"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from photo_studio.adapters.openai_image_client import OpenAIImageClient
from photo_studio.config import Settings
from photo_studio.services.editing import EditOrchestrator
from photo_studio.services.generation import GenerativeEditService
from photo_studio.services.workspaces import (
    InMemoryWorkspaceRepository,
    WorkspaceService,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    generative_edit_service: GenerativeEditService
    workspace_service: WorkspaceService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    openai_client = OpenAIImageClient.create(resolved_settings.openai_api_key)
    generative_edit_service = GenerativeEditService(
        client=openai_client,
        model=resolved_settings.openai_image_model,
        size=resolved_settings.openai_image_size,
    )
    orchestrator = EditOrchestrator(
        editor=generative_edit_service,
        debug_errors=resolved_settings.debug_errors,
    )
    workspace_service = WorkspaceService(
        repository=InMemoryWorkspaceRepository(),
        orchestrator=orchestrator,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        generative_edit_service=generative_edit_service,
        workspace_service=workspace_service,
        close_resources=close_resources,
    )
