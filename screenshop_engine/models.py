"""
Shared request/response models
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PageHint(str, Enum):
    """What a screenshot depicts"""
    HOMEPAGE = "Homepage"
    PRODUCT_PAGE = "Product Page"
    COLLECTION_PAGE = "Collection Page"
    CART = "Cart"
    OTHER = "Other"


SUPPORTED_MEDIA_TYPES = ("image/png", "image/jpeg", "image/webp", "image/gif")


class ScreenshotPayload(BaseModel):
    """A normalized screenshot as sent over the wire"""
    model_config = ConfigDict(populate_by_name=True)

    base64: str
    mime_type: str = Field(alias="mimeType")
    preview_url: Optional[str] = Field(default=None, alias="previewUrl")
    page_hint: PageHint = Field(default=PageHint.HOMEPAGE, alias="pageHint")


class GeneratedFile(BaseModel):
    """One file of the generated project, keyed by relative path"""
    path: str
    content: str


class GenerateRequest(BaseModel):
    """Request model for generating a storefront"""
    model_config = ConfigDict(populate_by_name=True)

    screenshots: List[ScreenshotPayload]
    page_hints: List[PageHint] = Field(alias="pageHints")


class GenerateResponse(BaseModel):
    """Response model for a generated storefront"""
    files: List[GeneratedFile]


class ArchiveRequest(BaseModel):
    """Request model for zipping a file set"""
    files: List[GeneratedFile]
