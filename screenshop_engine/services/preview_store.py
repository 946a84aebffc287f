"""
In-memory preview resources for uploaded screenshots.

Each preview is an explicit handle that must be released exactly once by
its owner. Released previews are no longer served.
"""
import uuid
from dataclasses import dataclass
from typing import Dict, Tuple

from exceptions import PreviewNotFoundError
from logging_config import logger

PREVIEW_URL_PREFIX = "/api/previews"


class PreviewAlreadyReleasedError(RuntimeError):
    """Raised when a preview handle is released a second time"""


class PreviewStore:
    """Holds preview bytes keyed by handle id"""

    def __init__(self):
        self._previews: Dict[str, Tuple[bytes, str]] = {}

    def __len__(self) -> int:
        return len(self._previews)

    def __contains__(self, preview_id: str) -> bool:
        return preview_id in self._previews

    def register(self, data: bytes, media_type: str) -> "PreviewHandle":
        preview_id = uuid.uuid4().hex
        self._previews[preview_id] = (data, media_type)
        return PreviewHandle(id=preview_id, store=self)

    def get(self, preview_id: str) -> Tuple[bytes, str]:
        try:
            return self._previews[preview_id]
        except KeyError:
            raise PreviewNotFoundError(f"Preview not found: {preview_id}")

    def _release(self, preview_id: str) -> None:
        self._previews.pop(preview_id, None)


@dataclass(eq=False)
class PreviewHandle:
    id: str
    store: PreviewStore
    released: bool = False

    @property
    def url(self) -> str:
        return f"{PREVIEW_URL_PREFIX}/{self.id}"

    def release(self) -> None:
        if self.released:
            raise PreviewAlreadyReleasedError(f"Preview {self.id} already released")
        self.store._release(self.id)
        self.released = True
        logger.debug("Preview released", preview_id=self.id)


# Process-wide store, analogous to the browser's object URL table
preview_store = PreviewStore()
