import asyncio
import logging
import re
import time
from pathlib import Path

from recruitform.errors import UploadError

logger = logging.getLogger(__name__)


def resume_key(filename: str) -> str:
    """Blob key for an uploaded resume, prefixed with a nanosecond timestamp."""
    safe_name = re.sub(r"[^A-Za-z0-9.-]", "_", filename or "resume")
    return f"resumes/{time.time_ns()}-{safe_name}"


class LocalBlobStore:
    """
    Stores blobs as files under a root directory and hands back public URLs
    rooted at base_url.
    """

    def __init__(self, root: Path, base_url: str) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def put(self, data: bytes, content_type: str, key: str) -> str:
        try:
            path = (self.root / key).resolve()
            if self.root.resolve() not in path.parents:
                raise UploadError(f"Blob key escapes the store: {key}")
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            raise UploadError(f"Failed to store {key}: {e}") from e

        url = f"{self.base_url}/{key}"
        logger.info("Stored %d bytes (%s) at %s", len(data), content_type or "unknown", url)
        return url
