# command_center/routes/project.py
from flask import Blueprint, jsonify, request, send_file

from command_center.core.dashboard import ALL_STATUSES, filter_projects
from command_center.core.milestones import stepper
from command_center.core.punch_list import completion_summary
from command_center.db.enums import ProjectCategory
from command_center.db.session import get_session
from command_center.errors import BackendError, ErrorType, NotFoundError
from command_center.routes.helpers import json_error, open_workspace, require_login
from command_center.schemas.project import Milestones, Project
from command_center.services.report_service import XLSX_MIMETYPE, export_projects

project_bp = Blueprint("project", __name__, url_prefix="/projects")


def project_detail(project: Project) -> dict:
    completed, total = completion_summary(project.punch_list)
    return {
        **project.to_api(),
        "stepper": stepper(project.milestones),
        "punchListSummary": {"completed": completed, "total": total},
    }


@project_bp.route("", methods=["GET"])
def list_projects():
    """项目列表：分类、搜索、状态筛选"""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        ws = open_workspace(db)
        projects = filter_projects(
            ws.state.projects,
            category=request.args.get("category", "").strip() or None,
            search=request.args.get("search", ""),
            status=request.args.get("status", ALL_STATUSES).strip() or ALL_STATUSES,
        )
        return jsonify({
            "projects": [project_detail(p) for p in projects],
            "total": len(projects),
        })
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


@project_bp.route("/dashboard", methods=["GET"])
def dashboard():
    """统计卡片 + 有待办的 FAT 项目"""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        ws = open_workspace(db)
        categories = {
            c.value: sum(1 for p in ws.state.projects if p.category == c)
            for c in ProjectCategory
        }
        return jsonify({
            "user": ws.state.user_email,
            "stats": ws.state.stats,
            "categories": categories,
            "fatProjectsWithPunchList": [
                project_detail(p) for p in ws.state.fat_projects_with_punch_list
            ],
        })
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


@project_bp.route("", methods=["POST"])
def create_project():
    """新建项目"""
    check = require_login()
    if check:
        return check

    payload = request.get_json(silent=True) or {}
    db = get_session()
    try:
        ws = open_workspace(db)
        milestones = payload.get("milestones")
        project, entry = ws.projects.create_project(
            category=ProjectCategory(payload.get("category", "")),
            utility=payload.get("utility", ""),
            substation=payload.get("substation", ""),
            order=str(payload.get("order", "")),
            fat_date=payload.get("fatDate"),
            landing=payload.get("landing"),
            status=payload.get("status", "Active"),
            progress=int(payload.get("progress", 0) or 0),
            lead=payload.get("lead"),
            description=payload.get("description", ""),
            comments=payload.get("comments", ""),
            milestones=Milestones.model_validate(milestones) if milestones else None,
        )
        return jsonify({
            "project": project_detail(project),
            "entry": entry.to_api() if entry else None,
        }), 201
    except ValueError as e:
        return json_error(str(e), ErrorType.VALIDATION_ERROR, 400)
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


@project_bp.route("/<int:project_id>", methods=["GET"])
def get_project(project_id):
    """项目详情 + 该项目的变更记录"""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        ws = open_workspace(db)
        project = ws.state.get_project(project_id)
        history = ws.change_log.list_entries(project_id=project_id)
        return jsonify({
            "project": project_detail(project),
            "changeLog": [e.to_api() for e in history],
        })
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


@project_bp.route("/<int:project_id>", methods=["PUT"])
def save_project(project_id):
    """整条保存（不经过编辑草稿）"""
    check = require_login()
    if check:
        return check

    payload = request.get_json(silent=True) or {}
    db = get_session()
    try:
        ws = open_workspace(db)
        updated = Project.model_validate({**payload, "id": project_id})
        outcome = ws.projects.save_project(updated)
        return jsonify(save_outcome_payload(outcome))
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)
    except ValueError as e:
        return json_error(str(e), ErrorType.VALIDATION_ERROR, 400)
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


def save_outcome_payload(outcome) -> dict:
    return {
        "project": project_detail(outcome.project),
        "changes": outcome.changes,
        "entry": outcome.entry.to_api() if outcome.entry else None,
        "localOnly": outcome.local_only,
        "warning": outcome.warning,
    }


@project_bp.route("/<int:project_id>", methods=["DELETE"])
def delete_project(project_id):
    """删除项目"""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        ws = open_workspace(db)
        entry = ws.projects.delete_project(project_id=project_id)
        return jsonify({"deleted": project_id, "entry": entry.to_api() if entry else None})
    except NotFoundError as e:
        return json_error(str(e), ErrorType.NOT_FOUND, 404)
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


@project_bp.route("/export", methods=["GET"])
def export():
    """导出项目列表 Excel"""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        ws = open_workspace(db)
        output = export_projects(ws.state.projects)
        return send_file(
            output,
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name="projects.xlsx",
        )
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()
