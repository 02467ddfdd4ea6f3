"""
Flat-directory storage for uploaded originals and their thumbnails.

Every stored file lives directly under the storage root; originals are named
``{unix_timestamp}_{12 hex chars}.{ext}`` and thumbnails carry a prefix in front of
the original's name. Gallery association lives only in the database.
"""

import logging
import secrets
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class StorageKeyError(ValueError):
    """Raised for keys that do not name a file directly under the storage root."""


def generate_storage_key(extension: str) -> str:
    """Generate a collision-resistant filename for an original upload."""
    return f"{int(time.time())}_{secrets.token_hex(6)}.{extension}"


def generate_thumbnail_key(storage_key: str, prefix: str = "thumb_") -> str:
    """Derive the thumbnail filename from the original's storage key.

    Example: ``1760000000_a1b2c3d4e5f6.jpg`` -> ``thumb_1760000000_a1b2c3d4e5f6.jpg``
    """
    return f"{prefix}{storage_key}"


class LocalStorage:
    """Stores files by key in a single flat directory."""

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, key: str) -> Path:
        if not key or key in {".", ".."} or Path(key).name != key:
            raise StorageKeyError(f"Invalid storage key: {key!r}")
        return self.root / key

    def exists(self, key: str) -> bool:
        return self.path(key).is_file()

    def save(self, key: str, data: bytes) -> Path:
        """Write ``data`` under ``key``.

        Raises FileExistsError if the key is already taken; the existing file is left
        untouched. Any other write failure removes the partially written file before
        the error propagates.
        """
        path = self.path(key)
        fileobj = path.open("xb")
        try:
            with fileobj:
                fileobj.write(data)
        except OSError:
            path.unlink(missing_ok=True)
            raise
        return path

    def delete(self, key: str) -> bool:
        """Delete a stored file. Returns False when nothing was removed."""
        try:
            self.path(key).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete {key} from storage: {e}")
            return False
        return True

    def list_keys(self) -> list[str]:
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_file())


__all__ = ["LocalStorage", "StorageKeyError", "generate_storage_key", "generate_thumbnail_key"]
