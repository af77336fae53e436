# command_center/routes/editor.py
"""
Project edit drafts.

Opening the editor snapshots the project into the Flask session; every
milestone click, punch-list change and field edit only touches that draft.
Saving hands snapshot + draft to ProjectService, so only the net difference
is logged. Cancelling drops the draft.
"""
from flask import Blueprint, current_app, jsonify, request, session

from command_center.core.editor import ProjectEditor
from command_center.db.session import get_session
from command_center.errors import BackendError, ErrorType, NotFoundError
from command_center.routes.helpers import (
    blob_store,
    current_user,
    json_error,
    open_workspace,
    require_login,
)
from command_center.routes.project import project_detail, save_outcome_payload
from command_center.services.attachment_service import AttachmentService

editor_bp = Blueprint("editor", __name__, url_prefix="/projects/<int:project_id>/edit")

DRAFTS_KEY = "drafts"


def _load_editor(project_id: int) -> ProjectEditor:
    data = session.get(DRAFTS_KEY, {}).get(str(project_id))
    if data is None:
        raise NotFoundError(f"No open draft for project {project_id}")
    return ProjectEditor.from_session(data)


def _store_editor(project_id: int, editor: ProjectEditor) -> None:
    drafts = dict(session.get(DRAFTS_KEY, {}))
    drafts[str(project_id)] = editor.to_session()
    session[DRAFTS_KEY] = drafts


def _drop_editor(project_id: int) -> None:
    drafts = dict(session.get(DRAFTS_KEY, {}))
    drafts.pop(str(project_id), None)
    session[DRAFTS_KEY] = drafts


def _draft_payload(editor: ProjectEditor) -> dict:
    return {
        "draft": project_detail(editor.draft),
        "changes": editor.changes(),
        "punchListEnabled": editor.punch_list_enabled,
    }


def _attachment_service() -> AttachmentService:
    return AttachmentService(
        blob_store(),
        max_attachments=current_app.config["MAX_ATTACHMENTS_PER_ITEM"],
        max_size=current_app.config["MAX_ATTACHMENT_SIZE"],
    )


def _edit(project_id: int, action):
    """Load the draft, apply action(editor), store it back; ValueError -> 400."""
    check = require_login()
    if check:
        return check
    try:
        editor = _load_editor(project_id)
        action(editor)
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)
    except ValueError as e:
        return json_error(str(e), ErrorType.VALIDATION_ERROR, 400)
    _store_editor(project_id, editor)
    return jsonify(_draft_payload(editor))


# ======================================================
# Open / read / cancel
# ======================================================

@editor_bp.route("", methods=["POST"])
def open_editor(project_id):
    """打开编辑：以当前项目为快照"""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        ws = open_workspace(db)
        editor = ProjectEditor(ws.state.get_project(project_id))
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()

    _store_editor(project_id, editor)
    return jsonify(_draft_payload(editor))


@editor_bp.route("", methods=["GET"])
def get_draft(project_id):
    return _edit(project_id, lambda editor: None)


@editor_bp.route("", methods=["DELETE"])
def cancel(project_id):
    """取消编辑，丢弃草稿"""
    check = require_login()
    if check:
        return check
    _drop_editor(project_id)
    return jsonify({"cancelled": project_id})


# ======================================================
# Fields / milestones
# ======================================================

@editor_bp.route("", methods=["PATCH"])
def update_fields(project_id):
    payload = request.get_json(silent=True) or {}
    aliases = {"fatDate": "fat_date"}

    def apply(editor):
        for name, value in payload.items():
            editor.set_field(aliases.get(name, name), value)

    return _edit(project_id, apply)


@editor_bp.route("/milestones/<stage>", methods=["POST"])
def advance_milestone(project_id, stage):
    """里程碑点击一次前进一格"""
    return _edit(project_id, lambda editor: editor.advance_milestone(stage))


# ======================================================
# Punch list
# ======================================================

@editor_bp.route("/punch-list", methods=["POST"])
def add_punch_item(project_id):
    description = (request.get_json(silent=True) or {}).get("description", "")
    return _edit(project_id, lambda editor: editor.add_punch_item(description))


@editor_bp.route("/punch-list/<item_id>/toggle", methods=["POST"])
def toggle_punch_item(project_id, item_id):
    return _edit(project_id, lambda editor: editor.toggle_punch_item(item_id))


@editor_bp.route("/punch-list/<item_id>", methods=["DELETE"])
def remove_punch_item(project_id, item_id):
    return _edit(project_id, lambda editor: editor.remove_punch_item(item_id))


@editor_bp.route("/punch-list/<item_id>/attachments", methods=["POST"])
def upload_attachment(project_id, item_id):
    """上传图片/视频到 punch item（立即写入存储，引用随草稿保存）"""
    check = require_login()
    if check:
        return check

    file = request.files.get("file")
    if file is None or not file.filename:
        return json_error("No file selected", ErrorType.VALIDATION_ERROR, 400)

    try:
        editor = _load_editor(project_id)
        item = editor.get_item(item_id)
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)

    result, updated = _attachment_service().upload(
        project_id=project_id,
        item=item,
        file_name=file.filename,
        content_type=file.mimetype,
        data=file.read(),
        user_email=current_user(),
    )
    if not result.ok:
        status = 400 if result.error_type == ErrorType.VALIDATION_ERROR else 502
        return json_error(result.error_message, result.error_type, status)

    editor.replace_item(updated)
    _store_editor(project_id, editor)
    return jsonify({**_draft_payload(editor), "attachment": result.data["attachment"]})


@editor_bp.route("/punch-list/<item_id>/attachments/<attachment_id>", methods=["DELETE"])
def delete_attachment(project_id, item_id, attachment_id):
    check = require_login()
    if check:
        return check

    try:
        editor = _load_editor(project_id)
        item = editor.get_item(item_id)
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)

    result, updated = _attachment_service().delete(item=item, attachment_id=attachment_id)
    if not result.ok:
        status = 404 if result.error_type == ErrorType.NOT_FOUND else 502
        return json_error(result.error_message, result.error_type, status)

    editor.replace_item(updated)
    _store_editor(project_id, editor)
    return jsonify(_draft_payload(editor))


# ======================================================
# Save
# ======================================================

@editor_bp.route("/save", methods=["POST"])
def save(project_id):
    """保存草稿：只记录打开编辑以来的净变化"""
    check = require_login()
    if check:
        return check

    try:
        editor = _load_editor(project_id)
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)

    db = get_session()
    try:
        ws = open_workspace(db)
        outcome = ws.projects.save_project(editor.draft, original=editor.original)
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)
    except ValueError as e:
        return json_error(str(e), ErrorType.VALIDATION_ERROR, 400)
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()

    _drop_editor(project_id)
    return jsonify(save_outcome_payload(outcome))
