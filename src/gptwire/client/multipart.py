"""File references for multipart request bodies."""

from __future__ import annotations

import hashlib
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class FormFile:
    """A file to upload as one field of a multipart body.

    Holds only the path; the content is read on demand, and every read opens,
    fully reads, and closes the file before returning.

    Args:
        path: Location of the file.  ``~`` is expanded and the path is made
            absolute so that the same file referenced two ways compares equal.
        content_type: MIME type sent with the upload.  Guessed from the file
            name when omitted.
    """

    path: Path
    content_type: Optional[str] = None

    def __init__(self, path: Union[str, Path], content_type: Optional[str] = None) -> None:
        object.__setattr__(self, "path", Path(path).expanduser().resolve())
        object.__setattr__(self, "content_type", content_type)

    @property
    def filename(self) -> str:
        return self.path.name

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def sha256(self) -> str:
        """Hex SHA-256 digest of the full file content."""
        return hashlib.sha256(self.read_bytes()).hexdigest()

    def as_upload(self) -> tuple[str, bytes, str]:
        """Return the ``(filename, content, content_type)`` tuple httpx expects."""
        content_type = (
            self.content_type
            or mimetypes.guess_type(self.filename)[0]
            or "application/octet-stream"
        )
        return self.filename, self.read_bytes(), content_type
