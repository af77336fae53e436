# command_center/routes/audit.py
from flask import Blueprint, jsonify, request, send_file

from command_center.core.diff import parse_change_fragments
from command_center.db.session import get_session
from command_center.errors import BackendError, ErrorType
from command_center.routes.helpers import json_error, open_workspace, require_login
from command_center.services.report_service import XLSX_MIMETYPE, export_change_log

audit_bp = Blueprint("audit", __name__, url_prefix="/audit-logs")

PER_PAGE = 50


def _filters():
    project_id = request.args.get("project_id", "").strip()
    return {
        "project_id": int(project_id) if project_id else None,
        "action": request.args.get("action", "").strip() or None,
        "search": request.args.get("search", "").strip(),
    }


@audit_bp.route("", methods=["GET"])
def list_logs():
    """变更日志列表（最新在前）"""
    check = require_login()
    if check:
        return check

    try:
        filters = _filters()
        page = max(int(request.args.get("page", 1)), 1)
    except ValueError as e:
        return json_error(str(e), ErrorType.VALIDATION_ERROR, 400)

    db = get_session()
    try:
        ws = open_workspace(db)
        entries = ws.change_log.list_entries(**filters)
        total = len(entries)
        start = (page - 1) * PER_PAGE
        return jsonify({
            "entries": [
                {**e.to_api(), "fragments": parse_change_fragments(e.changes)}
                for e in entries[start:start + PER_PAGE]
            ],
            "total": total,
            "page": page,
            "perPage": PER_PAGE,
        })
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


@audit_bp.route("/export", methods=["GET"])
def export():
    """导出变更日志 Excel（应用当前筛选）"""
    check = require_login()
    if check:
        return check

    try:
        filters = _filters()
    except ValueError as e:
        return json_error(str(e), ErrorType.VALIDATION_ERROR, 400)

    db = get_session()
    try:
        ws = open_workspace(db)
        output = export_change_log(ws.change_log.list_entries(**filters))
        return send_file(
            output,
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name="change_log.xlsx",
        )
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()
