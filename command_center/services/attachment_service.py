# command_center/services/attachment_service.py
from datetime import datetime, timezone
from typing import Tuple
from uuid import uuid4

from command_center.db.enums import AttachmentType
from command_center.errors import ErrorType
from command_center.logger import get_logger
from command_center.schemas.project import PunchListAttachment, PunchListItem
from command_center.schemas.results import ActionResult
from command_center.services.blob_store import BlobStore, attachment_path

logger = get_logger(__name__)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
ALLOWED_VIDEO_TYPES = ("video/mp4", "video/quicktime", "video/webm")

INVALID_TYPE_MESSAGE = "Invalid file type. Use images (jpg, png, gif, webp) or videos (mp4, mov, webm)"


def file_type_for(content_type: str) -> AttachmentType:
    """image/* -> image, everything else -> video."""
    if (content_type or "").startswith("image/"):
        return AttachmentType.IMAGE
    return AttachmentType.VIDEO


class AttachmentService:
    """
    Photo / video evidence on punch-list items.

    Validation happens before the blob store is touched; expected failures come
    back as ActionResult instead of exceptions.
    """

    def __init__(self, blob_store: BlobStore, max_attachments: int = 5, max_size: int = 25 * 1024 * 1024):
        self.blob_store = blob_store
        self.max_attachments = max_attachments
        self.max_size = max_size

    def validate(self, *, item: PunchListItem, content_type: str, size: int) -> ActionResult:
        # 检查顺序: 数量上限 -> 大小 -> 类型
        if len(item.attachments) >= self.max_attachments:
            return ActionResult.failure(
                ErrorType.VALIDATION_ERROR,
                f"Maximum {self.max_attachments} attachments allowed",
            )
        if size > self.max_size:
            return ActionResult.failure(
                ErrorType.VALIDATION_ERROR,
                f"File size exceeds {self.max_size // (1024 * 1024)}MB limit",
            )
        if content_type not in ALLOWED_IMAGE_TYPES + ALLOWED_VIDEO_TYPES:
            return ActionResult.failure(ErrorType.VALIDATION_ERROR, INVALID_TYPE_MESSAGE)
        return ActionResult(ok=True)

    def upload(
        self,
        *,
        project_id: int,
        item: PunchListItem,
        file_name: str,
        content_type: str,
        data: bytes,
        user_email: str,
    ) -> Tuple[ActionResult, PunchListItem]:
        '''
        Store one file and attach it to a punch-list item.

        :param project_id: owning project, first segment of the storage path
        :type project_id: int
        :param item: the punch-list item receiving the attachment
        :type item: PunchListItem
        :param file_name: original file name
        :param content_type: MIME type reported by the client
        :param data: file content
        :type data: bytes
        :param user_email: uploader
        :return: (result with data={"attachment": ...} on success, item with the
            attachment appended; the untouched item on failure)
        :rtype: Tuple[ActionResult, PunchListItem]
        '''
        check = self.validate(item=item, content_type=content_type, size=len(data))
        if not check.ok:
            return check, item

        path = attachment_path(project_id, item.id, file_name)
        stored = self.blob_store.upload(path, data, content_type)
        if not stored.ok:
            logger.error(f"Upload failed for item {item.id}: {stored.error_message}")
            return stored, item

        attachment = PunchListAttachment(
            id=str(uuid4()),
            url=stored.data["url"],
            type=file_type_for(content_type),
            file_name=file_name,
            file_size=len(data),
            uploaded_at=datetime.now(timezone.utc).isoformat(),
            uploaded_by=user_email,
            path=stored.data["path"],
        )
        updated = item.model_copy(update={"attachments": [*item.attachments, attachment]})
        logger.info(f"[attachment] {attachment.file_name} -> item {item.id}")
        return ActionResult(ok=True, data={"attachment": attachment.model_dump(mode="json", by_alias=True)}), updated

    def delete(self, *, item: PunchListItem, attachment_id: str) -> Tuple[ActionResult, PunchListItem]:
        """Blob first; the reference is only dropped once the blob is gone."""
        attachment = next((a for a in item.attachments if a.id == attachment_id), None)
        if attachment is None:
            return ActionResult.failure(ErrorType.NOT_FOUND, f"Attachment not found: {attachment_id}"), item

        if attachment.path:
            removed = self.blob_store.delete(attachment.path)
            if not removed.ok:
                logger.error(f"Delete failed for attachment {attachment_id}: {removed.error_message}")
                return removed, item

        updated = item.model_copy(
            update={"attachments": [a for a in item.attachments if a.id != attachment_id]}
        )
        return ActionResult(ok=True), updated
