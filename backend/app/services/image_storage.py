"""Local filesystem storage for images attached to event data.

Storage layout:
    <upload_dir>/<stem>_<YYYYMMDD_HHmmss>_<token>.<ext>

Stored files are served under ``/uploads/<filename>``.
"""
import logging
import re
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from app.exceptions import ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/"
ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}


def _datetime_stamp() -> str:
    """Return a UTC datetime stamp suitable for filenames: YYYYMMDD_HHmmss."""
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _sanitise(name: str, max_len: int = 80) -> str:
    """Replace non-word characters with underscores and truncate."""
    return re.sub(r"[^\w\-]", "_", name)[:max_len].strip("_") or "image"


class LocalImageStorage:
    """Infrastructure adapter for uploaded images."""

    def __init__(self, upload_dir: str, max_bytes: int):
        self._upload_dir = Path(upload_dir)
        self._max_bytes = max_bytes

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def validate(self, filename: str, content_type: Optional[str], size: int) -> None:
        suffix = Path(filename or "").suffix.lower()
        if suffix not in ALLOWED_EXTENSIONS or not (content_type or "").startswith("image/"):
            raise ValidationError("Only image files are allowed")
        if size > self._max_bytes:
            raise ValidationError(f"Image exceeds the maximum size of {self._max_bytes // (1024 * 1024)} MB")

    def store(self, content: bytes, filename: str, content_type: Optional[str]) -> str:
        """Validate and write an image, returning its public URL."""
        self.validate(filename, content_type, len(content))
        self._upload_dir.mkdir(parents=True, exist_ok=True)

        path = Path(filename)
        stored_name = f"{_sanitise(path.stem)}_{_datetime_stamp()}_{secrets.token_hex(4)}{path.suffix.lower()}"
        (self._upload_dir / stored_name).write_bytes(content)

        logger.info("Stored image: %s (%d bytes)", stored_name, len(content))
        return PUBLIC_PREFIX + stored_name

    def delete(self, url: Optional[str]) -> bool:
        """Remove a stored image. URLs outside the upload directory are ignored."""
        if not url or not url.startswith(PUBLIC_PREFIX):
            return False
        name = url[len(PUBLIC_PREFIX):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return False
        target = self._upload_dir / name
        if not target.is_file():
            return False
        target.unlink()
        logger.info("Deleted image: %s", name)
        return True
