# command_center/routes/punch_list.py
from flask import Blueprint, current_app, jsonify, send_from_directory

from command_center.db.session import get_session
from command_center.errors import BackendError, ErrorType, NotFoundError
from command_center.routes.helpers import json_error, open_workspace, require_login
from command_center.routes.project import project_detail

punch_list_bp = Blueprint("punch_list", __name__, url_prefix="")


@punch_list_bp.route("/punch-list", methods=["GET"])
def list_fat_projects():
    """FAT 已完成且有 punch item 的项目"""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        ws = open_workspace(db)
        projects = ws.state.fat_projects_with_punch_list
        return jsonify({"projects": [project_detail(p) for p in projects]})
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


@punch_list_bp.route("/projects/<int:project_id>/punch-list/<item_id>/toggle", methods=["POST"])
def toggle_item(project_id, item_id):
    """列表页直接勾选，单独记一条 Punch List Updated"""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        ws = open_workspace(db)
        project, entry = ws.projects.toggle_punch_item(project_id=project_id, item_id=item_id)
        return jsonify({
            "project": project_detail(project),
            "entry": entry.to_api() if entry else None,
        })
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


@punch_list_bp.route("/attachments/<path:path>", methods=["GET"])
def attachment(path):
    """本地 blob store 的文件回读"""
    check = require_login()
    if check:
        return check
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], path)
