"""ImageSelection — the single slot holding the currently selected image."""
import logging
from dataclasses import dataclass
from typing import Optional

from src.constants import DEFAULT_IMAGE_NAME

logger = logging.getLogger(__name__)


class PreviewHandle:
    """Revocable zero-copy view over image bytes."""

    def __init__(self, data: bytes) -> None:
        self._view: memoryview | None = memoryview(data)

    @property
    def released(self) -> bool:
        return self._view is None

    @property
    def nbytes(self) -> int:
        match self._view:
            case None:
                return 0
            case view:
                return view.nbytes

    def view(self) -> memoryview:
        match self._view:
            case None:
                raise ValueError("preview handle already released")
            case view:
                return view

    def _release(self) -> None:
        match self._view:
            case None:
                pass
            case view:
                view.release()
                self._view = None


class PreviewAllocator:
    """Hands out preview handles and counts the ones not yet released."""

    def __init__(self) -> None:
        self._outstanding: set[int] = set()

    @property
    def outstanding(self) -> int:
        return len(self._outstanding)

    def allocate(self, data: bytes) -> PreviewHandle:
        handle = PreviewHandle(data)
        self._outstanding.add(id(handle))
        return handle

    def release(self, handle: PreviewHandle) -> None:
        match id(handle) in self._outstanding:
            case True:
                self._outstanding.discard(id(handle))
                handle._release()
            case False:
                raise ValueError("preview handle released twice or never allocated")


@dataclass(frozen=True)
class SelectedImage:
    data: bytes
    name: str
    preview: Optional[PreviewHandle]


class ImageSelection:
    """Owns the current SelectedImage and its preview handle.

    Every selection operation bumps a monotonic generation. Asynchronous
    producers (sample loads) take a token with ``begin()`` and hand it back
    when they complete; a token older than the current generation means a
    newer selection or clear happened in between, and the result is dropped.
    """

    def __init__(self, allocator: PreviewAllocator | None = None) -> None:
        self._allocator = allocator or PreviewAllocator()
        self._current: SelectedImage | None = None
        self._generation = 0

    @property
    def allocator(self) -> PreviewAllocator:
        return self._allocator

    def begin(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def current(self) -> SelectedImage | None:
        return self._current

    def select_from_bytes(
        self, data: bytes, name: str = "", token: int | None = None
    ) -> SelectedImage | None:
        match token:
            case None:
                self.begin()
            case t if not self.is_current(t):
                logger.debug("Dropping stale selection %r (token %d < %d)", name, t, self._generation)
                return None
            case _:
                pass
        self._release_current()
        selected = SelectedImage(
            data=data,
            name=name or DEFAULT_IMAGE_NAME,
            preview=self._allocator.allocate(data),
        )
        self._current = selected
        return selected

    def clear(self) -> None:
        self.begin()
        self._release_current()

    def close(self) -> None:
        self.clear()

    def _release_current(self) -> None:
        match self._current:
            case None:
                pass
            case SelectedImage(preview=None):
                self._current = None
            case SelectedImage(preview=handle):
                self._allocator.release(handle)
                self._current = None
