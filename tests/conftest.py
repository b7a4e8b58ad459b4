"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from photo_studio.config import Settings
from photo_studio.containers import AppContainer
from photo_studio.domain.hotspot import Hotspot
from photo_studio.domain.images import ImagePayload
from photo_studio.domain.sessions import Workspace
from photo_studio.services.editing import EditOrchestrator
from photo_studio.services.generation import (
    GenerativeEditor,
    GenerativeEditService,
    ImageEditClient,
)
from photo_studio.services.workspaces import (
    InMemoryWorkspaceRepository,
    WorkspaceService,
)

PNG_HEADER = b"\x89PNG\r\n\x1a\n"
ORIGINAL_BYTES = PNG_HEADER + b"original"


def make_original(name: str = "photo.png") -> ImagePayload:
    return ImagePayload(data=ORIGINAL_BYTES, mime_type="image/png", file_name=name)


@dataclass
class EditCall:
    """One request received by the fake editor."""

    kind: str
    image: ImagePayload
    instruction: str
    hotspot: Hotspot | None = None


@dataclass
class FakeGenerativeEditor(GenerativeEditor):
    """Fake editor that returns numbered versions or a configured error."""

    error: Exception | None = None
    gate: asyncio.Event | None = None
    calls: list[EditCall] = field(default_factory=list)
    produced: int = 0

    async def adjust(self, image: ImagePayload, instruction: str) -> ImagePayload:
        return await self._respond(EditCall("adjust", image, instruction))

    async def filter(self, image: ImagePayload, instruction: str) -> ImagePayload:
        return await self._respond(EditCall("filter", image, instruction))

    async def retouch(
        self, image: ImagePayload, instruction: str, hotspot: Hotspot
    ) -> ImagePayload:
        return await self._respond(EditCall("retouch", image, instruction, hotspot))

    async def _respond(self, call: EditCall) -> ImagePayload:
        self.calls.append(call)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        self.produced += 1
        return ImagePayload(
            data=PNG_HEADER + f"v{self.produced}".encode(),
            mime_type="image/png",
            file_name=call.image.file_name,
        )


@dataclass
class FakeImageEditClient(ImageEditClient):
    """Fake image edit client that records prompts."""

    content: bytes = PNG_HEADER + b"edited"
    prompts: list[str] = field(default_factory=list)
    images: list[ImagePayload] = field(default_factory=list)

    async def edit(
        self,
        *,
        model: str,
        image: ImagePayload,
        prompt: str,
        size: str,
    ) -> bytes:
        self.prompts.append(prompt)
        self.images.append(image)
        return self.content


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key", environment="test")


@pytest.fixture
def editor() -> FakeGenerativeEditor:
    return FakeGenerativeEditor()


@pytest.fixture
def orchestrator(editor: FakeGenerativeEditor) -> EditOrchestrator:
    return EditOrchestrator(editor=editor)


@pytest.fixture
def workspace() -> Workspace:
    workspace = Workspace()
    workspace.load(make_original())
    return workspace


@pytest.fixture
def workspace_service(orchestrator: EditOrchestrator) -> WorkspaceService:
    return WorkspaceService(
        repository=InMemoryWorkspaceRepository(),
        orchestrator=orchestrator,
    )


@pytest.fixture
def container(
    settings: Settings, workspace_service: WorkspaceService
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        generative_edit_service=GenerativeEditService(
            client=FakeImageEditClient(), model=settings.openai_image_model
        ),
        workspace_service=workspace_service,
        close_resources=close_resources,
    )
