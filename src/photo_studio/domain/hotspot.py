"""Pointer-to-pixel mapping for localized retouch targets."""

import math
from dataclasses import dataclass

from photo_studio.domain.images import ImageSize


@dataclass(frozen=True)
class Hotspot:
    """Pixel coordinate in the original image's native resolution."""

    x: int
    y: int


def map_to_natural(
    offset_x: float, offset_y: float, rendered: ImageSize, natural: ImageSize
) -> Hotspot:
    """Scale a click on a rendered image into natural pixel coordinates.

    Each axis is scaled independently and rounded half up. The result is
    clamped into the image so a click on the far edge stays addressable.
    """
    if rendered.width <= 0 or rendered.height <= 0:
        raise ValueError("Rendered image size must be positive")
    x = _scale(offset_x, natural.width, rendered.width)
    y = _scale(offset_y, natural.height, rendered.height)
    return Hotspot(x=_clamp(x, natural.width), y=_clamp(y, natural.height))


def _scale(offset: float, natural: float, rendered: float) -> int:
    return math.floor(offset * natural / rendered + 0.5)


def _clamp(value: int, limit: float) -> int:
    upper = max(math.ceil(limit) - 1, 0)
    return min(max(value, 0), upper)
