"""
Wizard session API router.

Server-held version of the upload -> generate -> download flow: screenshots
are uploaded to a session, tagged with page hints, generated from, and the
result is downloaded as a zip.
"""
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from config import settings
from dependencies import get_session_store, get_storefront_generator
from exceptions import GenerationError, InvalidStateError
from logging_config import logger
from models import GenerateResponse, PageHint
from routers.generate import archive_response
from services.archive_builder import build_archive
from services.storefront_generator import StorefrontGenerator
from services.wizard import Upload, WizardSessionStore, WizardStatus

router = APIRouter()


class UpdatePageHintRequest(BaseModel):
    """Request model for retagging a screenshot"""
    model_config = ConfigDict(populate_by_name=True)

    page_hint: PageHint = Field(alias="pageHint")


@router.post("/wizard/sessions")
async def create_session(store: WizardSessionStore = Depends(get_session_store)):
    """Start a new wizard session"""
    return store.create().snapshot()


@router.get("/wizard/sessions/{session_id}")
async def get_session_state(
    session_id: str,
    store: WizardSessionStore = Depends(get_session_store)
):
    return store.get(session_id).snapshot()


@router.post("/wizard/sessions/{session_id}/screenshots")
async def upload_screenshots(
    session_id: str,
    files: List[UploadFile] = File(...),
    store: WizardSessionStore = Depends(get_session_store)
):
    """
    Upload screenshots to a session.

    Files beyond the per-session limit are ignored. Files over the size
    limit or that cannot be decoded are listed under ``rejected``.
    """
    session = store.get(session_id)

    uploads = []
    for upload_file in files:
        # One byte past the ceiling is enough to reject
        data = await upload_file.read(settings.MAX_UPLOAD_BYTES + 1)
        uploads.append(Upload(filename=upload_file.filename or "upload", data=data))
        await upload_file.close()

    rejections = session.add_screenshots(uploads)

    state = session.snapshot()
    state["rejected"] = [asdict(r) for r in rejections]
    return state


@router.patch("/wizard/sessions/{session_id}/screenshots/{index}")
async def update_page_hint(
    session_id: str,
    index: int,
    data: UpdatePageHintRequest,
    store: WizardSessionStore = Depends(get_session_store)
):
    session = store.get(session_id)
    session.update_page_hint(index, data.page_hint)
    return session.snapshot()


@router.delete("/wizard/sessions/{session_id}/screenshots/{index}")
async def remove_screenshot(
    session_id: str,
    index: int,
    store: WizardSessionStore = Depends(get_session_store)
):
    session = store.get(session_id)
    session.remove_screenshot(index)
    return session.snapshot()


@router.post("/wizard/sessions/{session_id}/generate", response_model=GenerateResponse)
async def generate_from_session(
    session_id: str,
    store: WizardSessionStore = Depends(get_session_store),
    generator: StorefrontGenerator = Depends(get_storefront_generator)
):
    """
    Generate a storefront from the session's screenshots.

    Returns 409 while another generation for the same session is running.
    On failure the session returns to the upload step with its screenshots.
    """
    session = store.get(session_id)
    try:
        files = await session.generate(generator)
        return GenerateResponse(files=files)
    except GenerationError:
        raise
    except Exception as e:
        logger.error(f"Error generating storefront: {str(e)}", exc_info=True)
        raise GenerationError(str(e) or "Unknown error")


@router.get("/wizard/sessions/{session_id}/archive")
async def download_session_archive(
    session_id: str,
    store: WizardSessionStore = Depends(get_session_store)
):
    session = store.get(session_id)
    if session.status != WizardStatus.DONE or session.result is None:
        raise InvalidStateError("No generated storefront to download")
    return archive_response(build_archive(session.result))


@router.post("/wizard/sessions/{session_id}/reset")
async def reset_session(
    session_id: str,
    store: WizardSessionStore = Depends(get_session_store)
):
    session = store.get(session_id)
    session.reset()
    return session.snapshot()


@router.delete("/wizard/sessions/{session_id}")
async def delete_session(
    session_id: str,
    store: WizardSessionStore = Depends(get_session_store)
):
    store.discard(session_id)
    return {"success": True, "session_id": session_id}
