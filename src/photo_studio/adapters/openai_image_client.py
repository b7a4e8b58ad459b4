"""OpenAI Images API client for generative edits."""

import base64
import binascii
from dataclasses import dataclass

from openai import AsyncOpenAI

from photo_studio.domain.images import ImagePayload
from photo_studio.services.generation import EditFailure, ImageEditClient


@dataclass
class OpenAIImageClient(ImageEditClient):
    """Image edit client backed by the OpenAI Images API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIImageClient":
        """Create an OpenAI image client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def edit(
        self,
        *,
        model: str,
        image: ImagePayload,
        prompt: str,
        size: str,
    ) -> bytes:
        """Call the image edit endpoint and decode the first result."""
        response = await self.client.images.edit(
            model=model,
            image=(image.file_name, image.data, image.mime_type),
            prompt=prompt,
            size=size,
            n=1,
        )
        if not response.data or not response.data[0].b64_json:
            raise EditFailure("OpenAI returned no image for this request.")
        try:
            return base64.b64decode(response.data[0].b64_json, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise EditFailure("OpenAI returned an unreadable image.") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
