"""Output directory handling for captured and diff images."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import structlog

from diffshot.constants import IMAGE_SUFFIX, TIMESTAMP_FORMAT
from diffshot.exceptions import StorageError, ValidationError

logger = structlog.get_logger(__name__)


def timestamp_identifier(now: datetime | None = None) -> str:
    """Sortable local date-time stem, e.g. ``20261019_143005``."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


class OutputStore:
    """Reads and writes images under a single output directory.

    The directory must already exist and be readable and writable.
    """

    def __init__(self, base_dir: Path | str) -> None:
        path = Path(base_dir).expanduser().resolve()
        if not path.is_dir():
            msg = f"output directory does not exist: {path}"
            raise ValidationError(msg)
        if not os.access(path, os.R_OK | os.W_OK):
            msg = f"output directory is not readable and writable: {path}"
            raise ValidationError(msg)
        self._base = path

    @property
    def base_dir(self) -> Path:
        return self._base

    def image_path(self, identifier: str) -> Path:
        """Get path for an image file named after ``identifier``."""
        path = (self._base / f"{identifier}{IMAGE_SUFFIX}").resolve()
        if path.parent != self._base:
            msg = f"Path traversal detected: {identifier}"
            raise ValueError(msg)
        return path

    def save_image(self, identifier: str, data: bytes) -> Path:
        """Write image bytes and return the written path."""
        path = self.image_path(identifier)
        try:
            path.write_bytes(data)
        except OSError as e:
            msg = f"failed to write {path}: {e}"
            raise StorageError(msg) from e
        logger.debug("image_saved", path=str(path), size=len(data))
        return path

    def load_image(self, path: Path) -> bytes:
        """Read image bytes from ``path``."""
        try:
            return path.read_bytes()
        except OSError as e:
            msg = f"failed to read {path}: {e}"
            raise StorageError(msg) from e
