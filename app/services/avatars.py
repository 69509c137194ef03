"""Avatar image storage on the local filesystem."""

import logging
import uuid
from pathlib import Path

from app.models.user import DEFAULT_AVATAR

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp"})


class AvatarError(Exception):
    """Raised when an uploaded avatar is rejected (bad extension, empty or too large)."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def validate_avatar(filename: str | None, content: bytes, max_bytes: int) -> str:
    """Return the lower-cased extension of an acceptable avatar upload."""
    suffix = Path(filename or "").suffix.lower()
    if suffix not in ALLOWED_IMAGE_EXTENSIONS:
        raise AvatarError(
            f"Avatar must be one of: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}"
        )
    if not content:
        raise AvatarError("Avatar file is empty.")
    if len(content) > max_bytes:
        raise AvatarError(f"Avatar must not exceed {max_bytes} bytes.")
    return suffix


def store_avatar(avatar_dir: str, suffix: str, content: bytes) -> str:
    """Write content under a random name in avatar_dir and return the file name."""
    directory = Path(avatar_dir)
    directory.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{suffix}"
    (directory / filename).write_bytes(content)
    return filename


def remove_avatar(avatar_dir: str, filename: str | None) -> None:
    """Delete a stored avatar; the shared default image is never removed."""
    if not filename or filename == DEFAULT_AVATAR:
        return
    # Stored names are generated by store_avatar, but never follow a path out of the dir.
    path = Path(avatar_dir) / Path(filename).name
    try:
        path.unlink()
    except FileNotFoundError:
        logger.warning("Old avatar file already gone: %s", path)
