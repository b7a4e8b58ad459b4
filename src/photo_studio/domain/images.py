"""Image payloads exchanged between file intake, history and generation."""

from dataclasses import dataclass

DEFAULT_MIME_TYPE = "image/jpeg"


class InvalidImageError(ValueError):
    """Raised when an uploaded payload cannot seed an editing session."""

    def __init__(self, message: str, *, too_large: bool = False) -> None:
        super().__init__(message)
        self.too_large = too_large

    @classmethod
    def over_limit(cls, max_bytes: int) -> "InvalidImageError":
        return cls(f"The uploaded file exceeds {max_bytes} bytes.", too_large=True)


@dataclass(frozen=True)
class ImageSize:
    """Pixel dimensions of an image, rendered or natural."""

    width: float
    height: float


@dataclass(frozen=True)
class ImagePayload:
    """Immutable image bytes plus the metadata needed to transfer them."""

    data: bytes
    mime_type: str
    file_name: str

    @classmethod
    def from_upload(
        cls,
        data: bytes,
        file_name: str | None,
        content_type: str | None,
        max_bytes: int,
    ) -> "ImagePayload":
        """Validate an uploaded file and wrap it as the original image."""
        if not data:
            raise InvalidImageError("The uploaded file is empty.")
        if len(data) > max_bytes:
            raise InvalidImageError.over_limit(max_bytes)
        declared = (content_type or "").split(";")[0].strip().lower()
        detected = detect_mime_type(data)
        if detected is None and not declared.startswith("image/"):
            raise InvalidImageError("The uploaded file is not an image.")
        return cls(
            data=data,
            mime_type=detected or declared,
            file_name=file_name or "image",
        )

    @classmethod
    def from_generated(cls, data: bytes, file_name: str) -> "ImagePayload":
        """Wrap bytes returned by the generation backend."""
        return cls(
            data=data,
            mime_type=detect_mime_type(data) or DEFAULT_MIME_TYPE,
            file_name=file_name,
        )

    def renamed(self, file_name: str) -> "ImagePayload":
        return ImagePayload(
            data=self.data, mime_type=self.mime_type, file_name=file_name
        )


def detect_mime_type(data: bytes) -> str | None:
    """Infer an image MIME type from file signatures."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    return None
