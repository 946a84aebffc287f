"""
Storefront generation API router
"""
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from config import settings
from dependencies import get_preview_store, get_storefront_generator
from exceptions import GenerationError
from logging_config import logger
from models import ArchiveRequest, GenerateRequest, GenerateResponse
from services.archive_builder import build_archive
from services.preview_store import PreviewStore
from services.storefront_generator import StorefrontGenerator

router = APIRouter()


def archive_response(data: bytes) -> Response:
    return Response(
        content=data,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{settings.ARCHIVE_FILENAME}"'
        }
    )


@router.post("/generate", response_model=GenerateResponse)
async def generate_storefront(
    data: GenerateRequest,
    generator: StorefrontGenerator = Depends(get_storefront_generator)
):
    """
    Generate a Next.js storefront from normalized screenshots.

    This endpoint:
    1. Builds a multimodal prompt from the screenshots and page hints
    2. Calls Claude once, without streaming
    3. Parses the JSON file list and merges it with the static templates

    Errors are returned as ``{"error": message}``:
    - 400: no screenshots, or hints do not match screenshots
    - 500: missing ANTHROPIC_API_KEY or any internal failure
    - 502: Anthropic API returned an error
    """
    try:
        logger.info(
            "Generate request received",
            screenshots=len(data.screenshots),
            page_hints=len(data.page_hints)
        )

        files = await generator.generate(data.screenshots, data.page_hints)
        return GenerateResponse(files=files)

    except GenerationError:
        raise
    except Exception as e:
        logger.error(f"Error generating storefront: {str(e)}", exc_info=True)
        raise GenerationError(str(e) or "Unknown error")


@router.post("/archive")
async def download_archive(data: ArchiveRequest):
    """Zip a file set for download"""
    return archive_response(build_archive(data.files))


@router.get("/previews/{preview_id}")
async def get_preview(
    preview_id: str,
    previews: PreviewStore = Depends(get_preview_store)
):
    """Serve a screenshot preview until its owner releases it"""
    content, media_type = previews.get(preview_id)
    return Response(content=content, media_type=media_type)
