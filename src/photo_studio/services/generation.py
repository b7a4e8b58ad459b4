"""Generative image edits using an image-edit model."""

from dataclasses import dataclass
from typing import Protocol

from photo_studio.domain.hotspot import Hotspot
from photo_studio.domain.images import ImagePayload

_OUTPUT_RULE = (
    "Output: return ONLY the final edited image. Do not return text, "
    "captions or explanations."
)


class EditFailure(RuntimeError):
    """Raised when the backend cannot produce an edited image."""


class ImageEditClient(Protocol):
    """Interface for an image-in, image-out edit model."""

    async def edit(
        self,
        *,
        model: str,
        image: ImagePayload,
        prompt: str,
        size: str,
    ) -> bytes:
        """Return the edited image bytes."""


class GenerativeEditor(Protocol):
    """The three edit operations consumed by the edit orchestrator."""

    async def adjust(self, image: ImagePayload, instruction: str) -> ImagePayload:
        """Apply a global photographic adjustment."""

    async def filter(self, image: ImagePayload, instruction: str) -> ImagePayload:
        """Apply a stylistic filter to the whole image."""

    async def retouch(
        self, image: ImagePayload, instruction: str, hotspot: Hotspot
    ) -> ImagePayload:
        """Apply a localized edit around a pixel coordinate."""


@dataclass
class GenerativeEditService(GenerativeEditor):
    """Service that prepares edit prompts and wraps model output."""

    client: ImageEditClient
    model: str
    size: str = "auto"

    async def adjust(self, image: ImagePayload, instruction: str) -> ImagePayload:
        """Apply a global adjustment described by the user."""
        prompt = (
            "You are an expert photo editor. Perform a natural, global "
            "adjustment to the entire image based on the user's request.\n"
            f'User request: "{instruction}"\n'
            "The result must stay photorealistic and keep the original "
            "composition.\n"
            f"{_OUTPUT_RULE}"
        )
        return await self._edit(image, prompt)

    async def filter(self, image: ImagePayload, instruction: str) -> ImagePayload:
        """Restyle the image without changing its content."""
        prompt = (
            "You are an expert photo editor. Apply a stylistic filter to the "
            "entire image based on the user's request. Do not change the "
            "composition or content, only apply the style.\n"
            f'Filter request: "{instruction}"\n'
            f"{_OUTPUT_RULE}"
        )
        return await self._edit(image, prompt)

    async def retouch(
        self, image: ImagePayload, instruction: str, hotspot: Hotspot
    ) -> ImagePayload:
        """Edit a small area around the hotspot, leaving the rest intact."""
        prompt = (
            "You are an expert photo editor. Perform a natural, localized "
            "edit on the provided image based on the user's request.\n"
            f'User request: "{instruction}"\n'
            f"Edit location: focus on the area around pixel coordinates "
            f"(x: {hotspot.x}, y: {hotspot.y}).\n"
            "The edit must be realistic and blend seamlessly with the "
            "surrounding area. The rest of the image outside the immediate "
            "edit area must remain identical to the original.\n"
            f"{_OUTPUT_RULE}"
        )
        return await self._edit(image, prompt)

    async def _edit(self, image: ImagePayload, prompt: str) -> ImagePayload:
        data = await self.client.edit(
            model=self.model,
            image=image,
            prompt=prompt,
            size=self.size,
        )
        if not data:
            raise EditFailure("The model did not return an image.")
        return ImagePayload.from_generated(data, file_name=image.file_name)
