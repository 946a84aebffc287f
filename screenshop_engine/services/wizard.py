"""
Wizard session state for the upload -> generate -> download flow.

A session owns its screenshots and their preview handles. Generation is
single-flight per session; a failed generation keeps the screenshots so
the user can retry without uploading again.
"""
import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from config import Settings, settings as default_settings
from exceptions import (
    ClientInputError,
    GenerationBusyError,
    GenerationError,
    InvalidStateError,
    ResourceLimitError,
    SessionNotFoundError,
)
from logging_config import logger
from models import GeneratedFile, PageHint, ScreenshotPayload
from services.image_normalizer import NormalizedImage, normalize_image
from services.preview_store import PreviewHandle, PreviewStore, preview_store


class WizardStatus(Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


# UI step shown for each status
WIZARD_STEPS = {
    WizardStatus.IDLE: 1,
    WizardStatus.COLLECTING: 1,
    WizardStatus.FAILED: 1,
    WizardStatus.GENERATING: 2,
    WizardStatus.DONE: 3,
}


@dataclass
class Upload:
    filename: str
    data: bytes


@dataclass
class UploadRejection:
    filename: str
    error: str


@dataclass
class Screenshot:
    filename: str
    image: NormalizedImage
    preview: PreviewHandle
    page_hint: PageHint = PageHint.HOMEPAGE

    def to_payload(self) -> ScreenshotPayload:
        return ScreenshotPayload(
            base64=self.image.base64,
            mime_type=self.image.media_type,
            preview_url=self.preview.url,
            page_hint=self.page_hint
        )


@dataclass
class WizardSession:
    """Tracks one user's screenshots and generation result"""
    session_id: str
    settings: Settings = field(default_factory=lambda: default_settings)
    previews: PreviewStore = field(default_factory=lambda: preview_store)
    status: WizardStatus = WizardStatus.IDLE
    screenshots: List[Screenshot] = field(default_factory=list)
    status_message: str = ""
    result: Optional[List[GeneratedFile]] = None
    error: Optional[str] = None
    _generation_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def step(self) -> int:
        return WIZARD_STEPS[self.status]

    def _require_not_generating(self) -> None:
        if self.status == WizardStatus.GENERATING:
            raise GenerationBusyError("Generation in progress")

    def _screenshots_changed(self) -> None:
        self.result = None
        self.status = WizardStatus.COLLECTING if self.screenshots else WizardStatus.IDLE

    def _screenshot(self, index: int) -> Screenshot:
        if not 0 <= index < len(self.screenshots):
            raise InvalidStateError(f"No screenshot at index {index}")
        return self.screenshots[index]

    def add_screenshots(self, uploads: Sequence[Upload]) -> List[UploadRejection]:
        """
        Normalize and append uploads.

        Files past the per-session count ceiling are dropped silently.
        Oversized or unreadable files are rejected one by one and reported.
        """
        self._require_not_generating()

        free_slots = max(0, self.settings.MAX_SCREENSHOTS - len(self.screenshots))
        if len(uploads) > free_slots:
            logger.info(
                "Dropping uploads over the screenshot limit",
                session_id=self.session_id,
                dropped=len(uploads) - free_slots
            )

        rejections = []
        added = 0
        for upload in uploads[:free_slots]:
            try:
                if len(upload.data) > self.settings.MAX_UPLOAD_BYTES:
                    raise ResourceLimitError(
                        f"{upload.filename} exceeds the "
                        f"{self.settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit"
                    )
                image = normalize_image(
                    upload.data,
                    max_dimension=self.settings.MAX_IMAGE_DIMENSION,
                    quality=self.settings.IMAGE_QUALITY
                )
            except GenerationError as e:
                logger.warning(
                    "Upload rejected",
                    session_id=self.session_id,
                    filename=upload.filename,
                    error=e.message
                )
                rejections.append(UploadRejection(upload.filename, e.message))
                continue

            preview = self.previews.register(image.data, image.media_type)
            self.screenshots.append(
                Screenshot(filename=upload.filename, image=image, preview=preview)
            )
            added += 1

        if added:
            self._screenshots_changed()
        return rejections

    def remove_screenshot(self, index: int) -> None:
        self._require_not_generating()
        screenshot = self._screenshot(index)
        screenshot.preview.release()
        del self.screenshots[index]
        self._screenshots_changed()

    def update_page_hint(self, index: int, hint: PageHint) -> None:
        self._require_not_generating()
        screenshot = self._screenshot(index)
        hint = PageHint(hint)
        if screenshot.page_hint != hint:
            screenshot.page_hint = hint
            # A result built from the old hints is stale
            self._screenshots_changed()

    async def generate(self, generator) -> List[GeneratedFile]:
        """
        Run a generation from the current screenshots.

        Raises GenerationBusyError if one is already running. Any other
        generation error is recorded on the session and re-raised; the
        screenshots are left untouched.
        """
        if self._generation_lock.locked():
            raise GenerationBusyError("A generation is already in progress for this session")
        if not self.screenshots:
            raise ClientInputError("No screenshots provided.")

        async with self._generation_lock:
            self.status = WizardStatus.GENERATING
            self.status_message = "Sending screenshots to Claude..."
            self.error = None

            payloads = [s.to_payload() for s in self.screenshots]
            try:
                files = await generator.generate(payloads, [p.page_hint for p in payloads])
            except asyncio.CancelledError:
                self.status = WizardStatus.FAILED
                self.status_message = ""
                self.error = "Generation was cancelled"
                logger.warning("Generation cancelled", session_id=self.session_id)
                raise
            except Exception as e:
                self.status = WizardStatus.FAILED
                self.status_message = ""
                self.error = e.message if isinstance(e, GenerationError) else str(e) or "Generation failed"
                logger.warning(
                    "Generation failed",
                    session_id=self.session_id,
                    error=self.error
                )
                raise

            self.status = WizardStatus.DONE
            self.status_message = "Done!"
            self.result = files
            return files

    def reset(self) -> None:
        """Release every preview and return to the initial state"""
        self._require_not_generating()
        for screenshot in self.screenshots:
            screenshot.preview.release()
        self.screenshots = []
        self.status = WizardStatus.IDLE
        self.status_message = ""
        self.result = None
        self.error = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "step": self.step,
            "status": self.status.value,
            "status_message": self.status_message,
            "error": self.error,
            "screenshots": [
                {
                    "index": i,
                    "filename": s.filename,
                    "page_hint": s.page_hint.value,
                    "media_type": s.image.media_type,
                    "width": s.image.width,
                    "height": s.image.height,
                    "preview_url": s.preview.url,
                }
                for i, s in enumerate(self.screenshots)
            ],
            "file_count": len(self.result) if self.result is not None else 0,
        }


class WizardSessionStore:
    """In-memory session registry"""

    def __init__(self, settings: Optional[Settings] = None, previews: Optional[PreviewStore] = None):
        self.settings = settings if settings is not None else default_settings
        self.previews = previews if previews is not None else preview_store
        self.sessions: Dict[str, WizardSession] = {}

    def create(self) -> WizardSession:
        session_id = uuid.uuid4().hex
        session = WizardSession(
            session_id=session_id,
            settings=self.settings,
            previews=self.previews
        )
        self.sessions[session_id] = session
        logger.info("Created wizard session", session_id=session_id)
        return session

    def get(self, session_id: str) -> WizardSession:
        try:
            return self.sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session not found: {session_id}")

    def discard(self, session_id: str) -> None:
        session = self.get(session_id)
        session.reset()
        del self.sessions[session_id]
        logger.info("Discarded wizard session", session_id=session_id)


session_store = WizardSessionStore()
