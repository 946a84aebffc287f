"""
Parse model output into generated files.

The model is instructed to answer with bare JSON, but fenced output is
tolerated. Anything beyond field presence and type is left to
validate_required_files.
"""
import json
import re
from typing import Any, Iterable, List

from exceptions import MalformedResponse, ParseFailure
from logging_config import logger
from models import GeneratedFile

_OPENING_FENCE = re.compile(r"^```(?:json)?[ \t]*(?:\r?\n|$)", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"(?:^|\r?\n)```[ \t]*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json line and a trailing ``` line, if present"""
    cleaned = text.strip()
    cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _is_file_entry(entry: Any) -> bool:
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("path"), str)
        and isinstance(entry.get("content"), str)
    )


def parse_model_output(text: str) -> List[GeneratedFile]:
    """
    Turn raw model text into a list of files.

    Entries missing a string ``path`` or ``content`` are dropped; extra
    fields on an entry are ignored.

    Raises:
        MalformedResponse: Output is not JSON, not an object, or lacks a
            ``files`` list
    """
    cleaned = strip_code_fences(text)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedResponse(
            ParseFailure.INVALID_JSON,
            f"Model response is not valid JSON: {e.msg}"
        ) from e

    if not isinstance(parsed, dict):
        raise MalformedResponse(
            ParseFailure.NOT_AN_OBJECT,
            "Model response is not a JSON object"
        )
    if "files" not in parsed:
        raise MalformedResponse(
            ParseFailure.MISSING_FILES,
            "Model response missing files array"
        )
    if not isinstance(parsed["files"], list):
        raise MalformedResponse(
            ParseFailure.FILES_NOT_A_LIST,
            "Model response files field is not an array"
        )

    entries = parsed["files"]
    files = [
        GeneratedFile(path=entry["path"], content=entry["content"])
        for entry in entries
        if _is_file_entry(entry)
    ]

    dropped = len(entries) - len(files)
    if dropped:
        logger.warning("Dropped malformed file entries", dropped=dropped, kept=len(files))

    return files


def validate_required_files(
    files: Iterable[GeneratedFile],
    required_paths: Iterable[str]
) -> None:
    """Raise MalformedResponse unless every required path is present"""
    present = {f.path for f in files}
    missing = [path for path in required_paths if path not in present]
    if missing:
        raise MalformedResponse(
            ParseFailure.MISSING_REQUIRED_FILES,
            f"Model response missing required files: {', '.join(missing)}",
            missing_paths=missing
        )
