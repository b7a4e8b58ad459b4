"""Hold-to-compare view flag."""

from dataclasses import dataclass

from photo_studio.domain.images import ImagePayload
from photo_studio.domain.versions import VersionStore


@dataclass
class CompareOverlay:
    """Shows the original while the compare control is held down."""

    pressed: bool = False

    def press(self) -> None:
        self.pressed = True

    def release(self) -> None:
        self.pressed = False

    def displayed(self, store: VersionStore) -> ImagePayload:
        """Return the image the viewer should render right now."""
        return store.base() if self.pressed else store.current()
