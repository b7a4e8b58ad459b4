"""Linear image version history with a cursor."""

from photo_studio.domain.images import ImagePayload


class VersionStore:
    """Append-only sequence of image versions and the displayed index.

    Index 0 is always the unedited original. Appending after an undo drops
    every version beyond the cursor, so there is never more than one branch.
    """

    def __init__(self, original: ImagePayload) -> None:
        self._versions: list[ImagePayload] = [original]
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._versions)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def versions(self) -> tuple[ImagePayload, ...]:
        return tuple(self._versions)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._versions) - 1

    def append(self, version: ImagePayload) -> None:
        """Commit a new version after the cursor and move onto it."""
        del self._versions[self._cursor + 1 :]
        self._versions.append(version)
        self._cursor = len(self._versions) - 1

    def undo(self) -> bool:
        """Step back one version; return whether the cursor moved."""
        if not self.can_undo:
            return False
        self._cursor -= 1
        return True

    def redo(self) -> bool:
        """Step forward one version; return whether the cursor moved."""
        if not self.can_redo:
            return False
        self._cursor += 1
        return True

    def current(self) -> ImagePayload:
        return self._versions[self._cursor]

    def base(self) -> ImagePayload:
        return self._versions[0]
