# command_center/routes/helpers.py
from typing import NamedTuple, Optional

from flask import current_app, jsonify, session

from command_center.config import SESSION_USER_KEY
from command_center.errors import ErrorType
from command_center.services.backend import SqlBackend
from command_center.services.change_log_service import ChangeLogService
from command_center.services.project_service import ProjectService
from command_center.services.state import DashboardState


class Workspace(NamedTuple):
    backend: SqlBackend
    state: DashboardState
    change_log: ChangeLogService
    projects: ProjectService


def json_error(message: str, error_type: Optional[ErrorType], status: int):
    return jsonify({
        "error": message,
        "errorType": error_type.value if error_type else None,
    }), status


def current_user() -> Optional[str]:
    return session.get(SESSION_USER_KEY)


def require_login():
    """检查登录状态"""
    if not current_user():
        return json_error("Please sign in", ErrorType.AUTH_ERROR, 401)
    return None


def open_workspace(db) -> Workspace:
    """Load the dashboard state for the signed-in user and wire the services to it."""
    backend = SqlBackend(db)
    state = DashboardState.open(current_user(), backend)
    change_log = ChangeLogService(backend, state)
    return Workspace(backend, state, change_log, ProjectService(backend, state, change_log))


def blob_store():
    return current_app.extensions["blob_store"]
