from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""UploadedFile model: the inbound byte buffer handed to the importer.

The caller (HTTP layer or CLI) supplies the bytes together with the original
filename and its declared media type; the importer never sniffs content.
"""

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
OCTET_STREAM = "application/octet-stream"

_SUFFIX_MEDIA_TYPES = {
    ".csv": CSV_MEDIA_TYPE,
    ".xlsx": XLSX_MEDIA_TYPE,
}


@dataclass(frozen=True)
class UploadedFile:
    content: bytes
    filename: str
    media_type: str

    @classmethod
    def from_path(cls, path: Path) -> UploadedFile:
        media_type = _SUFFIX_MEDIA_TYPES.get(path.suffix.lower(), OCTET_STREAM)
        return cls(content=path.read_bytes(), filename=path.name, media_type=media_type)
