"""
Error taxonomy for storefront generation.

Every failure the pipeline can surface derives from GenerationError and
carries the HTTP status it maps to. The API layer renders them all as
``{"error": message}``.
"""
from enum import Enum
from typing import List, Optional


class GenerationError(Exception):
    """Base class for failures surfaced to the caller"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(GenerationError):
    """Server-side configuration is missing (credential, templates)"""


class ClientInputError(GenerationError):
    """The request itself is invalid; rejected before any external call"""

    status_code = 400


class UnreadableImageError(ClientInputError):
    """Uploaded bytes could not be decoded as an image"""


class ResourceLimitError(ClientInputError):
    """Upload exceeds the per-file size ceiling"""

    status_code = 413


class UpstreamError(GenerationError):
    """The model endpoint answered with a non-success status"""

    status_code = 502

    def __init__(self, upstream_status: int, detail: str):
        super().__init__(f"Anthropic API error: {detail}")
        self.upstream_status = upstream_status
        self.detail = detail


class ModelTransportError(GenerationError):
    """The model endpoint could not be reached"""


class ParseFailure(str, Enum):
    """Why model output was rejected"""

    NO_TEXT_BLOCK = "no_text_block"
    INVALID_JSON = "invalid_json"
    NOT_AN_OBJECT = "not_an_object"
    MISSING_FILES = "missing_files"
    FILES_NOT_A_LIST = "files_not_a_list"
    MISSING_REQUIRED_FILES = "missing_required_files"


class MalformedResponse(GenerationError):
    """Model output is unparseable or structurally invalid"""

    def __init__(
        self,
        reason: ParseFailure,
        message: str,
        missing_paths: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.reason = reason
        self.missing_paths = missing_paths or []


class GenerationBusyError(GenerationError):
    """A generation is already in flight for this session"""

    status_code = 409


class SessionNotFoundError(GenerationError):
    status_code = 404


class PreviewNotFoundError(GenerationError):
    status_code = 404


class InvalidStateError(GenerationError):
    """Operation not allowed in the session's current state"""

    status_code = 409
