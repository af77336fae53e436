import re

import pytest

from command_center.db.enums import AttachmentType
from command_center.errors import ErrorType
from command_center.services.attachment_service import AttachmentService, file_type_for
from command_center.services.blob_store import LocalBlobStore, attachment_path, sanitize_file_name
from command_center.tests.conftest import TEST_EMAIL, item

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 32


@pytest.fixture
def service(blob_store):
    return AttachmentService(blob_store, max_attachments=5, max_size=25 * 1024 * 1024)


def upload(service, target, *, file_name="photo 1.png", content_type="image/png", data=PNG):
    return service.upload(
        project_id=3,
        item=target,
        file_name=file_name,
        content_type=content_type,
        data=data,
        user_email=TEST_EMAIL,
    )


def test_upload_appends_attachment(service, blob_store):
    result, updated = upload(service, item("abc"))

    assert result.ok
    attachment = updated.attachments[0]
    assert attachment.type == AttachmentType.IMAGE
    assert attachment.file_name == "photo 1.png"
    assert attachment.file_size == len(PNG)
    assert attachment.uploaded_by == TEST_EMAIL
    assert re.match(r"^3/abc/\d+-photo_1\.png$", attachment.path)
    assert attachment.url == f"/attachments/{attachment.path}"
    assert blob_store.files[attachment.path] == PNG
    assert result.data["attachment"]["fileName"] == "photo 1.png"


def test_video_type(service):
    result, updated = upload(service, item("abc"), file_name="clip.mov", content_type="video/quicktime")
    assert result.ok
    assert updated.attachments[0].type == AttachmentType.VIDEO


def test_cap_is_checked_first(service, blob_store):
    target = item("abc")
    for i in range(5):
        result, target = upload(service, target, file_name=f"p{i}.png")
        assert result.ok

    # 超上限 + 超大小 + 错误类型，只报数量
    result, unchanged = upload(service, target, content_type="text/plain", data=b"0" * (26 * 1024 * 1024))
    assert not result.ok
    assert result.error_type == ErrorType.VALIDATION_ERROR
    assert result.error_message == "Maximum 5 attachments allowed"
    assert unchanged is target
    assert blob_store.uploads == 5


def test_size_before_type(service, blob_store):
    result, _ = upload(service, item("abc"), content_type="text/plain", data=b"0" * (25 * 1024 * 1024 + 1))
    assert result.error_message == "File size exceeds 25MB limit"
    assert blob_store.uploads == 0


def test_invalid_type(service, blob_store):
    result, _ = upload(service, item("abc"), file_name="notes.pdf", content_type="application/pdf")
    assert result.error_message == (
        "Invalid file type. Use images (jpg, png, gif, webp) or videos (mp4, mov, webm)"
    )
    assert blob_store.uploads == 0


def test_delete_removes_blob_then_reference(service, blob_store):
    _, target = upload(service, item("abc"))
    attachment = target.attachments[0]

    result, updated = service.delete(item=target, attachment_id=attachment.id)

    assert result.ok
    assert updated.attachments == []
    assert attachment.path not in blob_store.files


def test_delete_failure_keeps_reference(service, blob_store):
    _, target = upload(service, item("abc"))
    blob_store.fail_delete = True

    result, unchanged = service.delete(item=target, attachment_id=target.attachments[0].id)

    assert not result.ok
    assert result.error_type == ErrorType.BLOB_STORE_ERROR
    assert len(unchanged.attachments) == 1


def test_delete_unknown(service):
    result, _ = service.delete(item=item("abc"), attachment_id="nope")
    assert result.error_type == ErrorType.NOT_FOUND


def test_file_type_for():
    assert file_type_for("image/webp") == AttachmentType.IMAGE
    assert file_type_for("video/webm") == AttachmentType.VIDEO


class TestLocalBlobStore:

    def test_path_convention(self):
        assert sanitize_file_name("Breaker #2 (final).JPG") == "Breaker__2__final_.JPG"
        assert attachment_path(7, "item1", "a b.png", timestamp_ms=1700000000000) == (
            "7/item1/1700000000000-a_b.png"
        )

    def test_upload_and_delete(self, tmp_path):
        store = LocalBlobStore(str(tmp_path), "/attachments")
        result = store.upload("1/x/1-a.png", PNG, "image/png")

        assert result.ok
        assert result.data == {"url": "/attachments/1/x/1-a.png", "path": "1/x/1-a.png"}
        assert (tmp_path / "1" / "x" / "1-a.png").read_bytes() == PNG

        again = store.upload("1/x/1-a.png", b"other", "image/png")
        assert not again.ok
        assert (tmp_path / "1" / "x" / "1-a.png").read_bytes() == PNG

        assert store.delete("1/x/1-a.png").ok
        assert not store.delete("1/x/1-a.png").ok

    def test_rejects_escaping_paths(self, tmp_path):
        store = LocalBlobStore(str(tmp_path / "root"))
        result = store.upload("../outside.png", PNG, "image/png")
        assert not result.ok
        assert result.error_type == ErrorType.BLOB_STORE_ERROR
