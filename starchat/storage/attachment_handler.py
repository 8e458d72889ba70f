"""
Attachment storage for chat files and post media.

``LocalDiskStorage`` does the blocking disk I/O against a public storage root.
``AttachmentHandler`` is what services talk to: it names files, runs the I/O in
a worker thread and turns OS failures into ``StorageError``. It does not look
at file contents; size and type checks belong to the caller.
"""

import enum
import logging
import os
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from starchat.core.config import settings
from starchat.services.exceptions import StorageError

logger = logging.getLogger(__name__)


class AttachmentCategory(str, enum.Enum):
    """Logical bucket, used as the top-level directory under the storage root."""

    CHAT = "chat_files"
    POST_MEDIA = "post_media"


@dataclass(frozen=True)
class IncomingAttachment:
    """An uploaded file as received from the client, not yet stored."""

    content: bytes
    filename: str

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class StoredAttachment:
    path: str
    original_name: str
    size_bytes: int


def public_url(path: str) -> str:
    """Public URL a stored path is served under."""
    return f"{settings.STORAGE_URL.rstrip('/')}/{path.lstrip('/')}"


class LocalDiskStorage:
    """Blocking file operations rooted at a single directory."""

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root)

    def put(self, content: bytes, relative_path: str) -> str:
        target = self._resolve(relative_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(content)
        logger.debug(f"[Storage] Saved file: {target} ({len(content)} bytes)")
        return relative_path

    def exists(self, relative_path: str) -> bool:
        return self._resolve(relative_path).is_file()

    def delete(self, relative_path: str) -> bool:
        """Remove a file. Returns False if it was already gone."""
        target = self._resolve(relative_path)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.warning(f"[Storage] File not found for deletion: {target}")
            return False
        logger.debug(f"[Storage] Deleted file: {target}")
        return True

    def _resolve(self, relative_path: str) -> Path:
        root = self.root.resolve()
        target = (root / relative_path).resolve()
        if root not in target.parents:
            raise StorageError(f"Path '{relative_path}' escapes the storage root.")
        return target


class AttachmentHandler:
    def __init__(self, storage: LocalDiskStorage):
        self.storage = storage

    async def store(
        self,
        content: bytes,
        original_name: str,
        category: AttachmentCategory = AttachmentCategory.CHAT,
    ) -> StoredAttachment:
        stored_name = (
            f"{int(time.time())}_{uuid.uuid4().hex[:8]}_"
            f"{self._sanitize_filename(original_name)}"
        )
        relative_path = f"{category.value}/{stored_name}"
        try:
            path = await run_in_threadpool(self.storage.put, content, relative_path)
        except OSError as e:
            logger.error(f"Failed to store attachment '{original_name}': {e}", exc_info=True)
            raise StorageError(f"Could not store attachment '{original_name}'.") from e
        return StoredAttachment(
            path=path, original_name=original_name, size_bytes=len(content)
        )

    async def exists(self, path: str) -> bool:
        try:
            return await run_in_threadpool(self.storage.exists, path)
        except OSError as e:
            logger.error(f"Failed to check attachment '{path}': {e}", exc_info=True)
            raise StorageError(f"Could not check attachment '{path}'.") from e

    async def delete(self, path: str) -> bool:
        try:
            return await run_in_threadpool(self.storage.delete, path)
        except OSError as e:
            logger.error(f"Failed to delete attachment '{path}': {e}", exc_info=True)
            raise StorageError(f"Could not delete attachment '{path}'.") from e

    @staticmethod
    def _sanitize_filename(filename: str) -> str:
        # Drop any client-supplied directories, then replace unsafe characters
        safe = re.sub(r"[^\w\-. ]", "_", os.path.basename(filename)).strip()
        return safe or "unnamed_file"


def get_attachment_handler() -> AttachmentHandler:
    """Dependency provider for the AttachmentHandler."""
    return AttachmentHandler(LocalDiskStorage(settings.STORAGE_ROOT))
