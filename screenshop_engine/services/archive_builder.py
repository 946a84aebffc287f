"""
Zip archive assembly for the download artifact
"""
import io
import zipfile
from typing import Iterable, List

from exceptions import ClientInputError
from models import GeneratedFile


def build_archive(files: Iterable[GeneratedFile]) -> bytes:
    """Deflate every file into a zip, stored under its exact path"""
    buffer = io.BytesIO()
    seen = set()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for f in files:
            if f.path in seen:
                raise ClientInputError(f"Duplicate path in file set: {f.path}")
            seen.add(f.path)
            archive.writestr(f.path, f.content.encode("utf-8"))
    return buffer.getvalue()


def read_archive(data: bytes) -> List[GeneratedFile]:
    """Inverse of build_archive; directory entries are skipped"""
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return [
            GeneratedFile(path=info.filename, content=archive.read(info).decode("utf-8"))
            for info in archive.infolist()
            if not info.is_dir()
        ]
