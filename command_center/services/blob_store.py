# command_center/services/blob_store.py
import os
import re
import time

from command_center.errors import ErrorType
from command_center.logger import get_logger
from command_center.schemas.results import ActionResult

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_file_name(file_name: str) -> str:
    return _UNSAFE_CHARS.sub("_", file_name)


def attachment_path(project_id: int, item_id: str, file_name: str, timestamp_ms: int = None) -> str:
    """{projectId}/{itemId}/{timestamp}-{sanitizedFileName}"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{project_id}/{item_id}/{timestamp_ms}-{sanitize_file_name(file_name)}"


class BlobStore:
    """Attachment storage. upload() answers data={"url", "path"}; delete() answers ok or an error."""

    def upload(self, path: str, data: bytes, content_type: str) -> ActionResult:
        raise NotImplementedError

    def delete(self, path: str) -> ActionResult:
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    """
    Blob store on the local filesystem, under the upload folder.
    Files are served back by the /attachments route.
    """

    def __init__(self, root: str, base_url: str = "/attachments"):
        self.root = os.path.abspath(root)
        self.base_url = base_url.rstrip("/")
        os.makedirs(self.root, exist_ok=True)

    def _full_path(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self.root, path))
        if not full.startswith(self.root + os.sep):
            raise ValueError(f"Path escapes blob store root: {path}")
        return full

    def upload(self, path: str, data: bytes, content_type: str) -> ActionResult:
        try:
            full = self._full_path(path)
            if os.path.exists(full):
                return ActionResult.failure(ErrorType.BLOB_STORE_ERROR, "The resource already exists")
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as f:
                f.write(data)
        except (OSError, ValueError) as e:
            logger.error(f"Upload error: {e}")
            return ActionResult.failure(ErrorType.BLOB_STORE_ERROR, str(e))
        return ActionResult(ok=True, data={"url": f"{self.base_url}/{path}", "path": path})

    def delete(self, path: str) -> ActionResult:
        try:
            os.remove(self._full_path(path))
        except (OSError, ValueError) as e:
            logger.error(f"Delete error: {e}")
            return ActionResult.failure(ErrorType.BLOB_STORE_ERROR, str(e))
        return ActionResult(ok=True)
