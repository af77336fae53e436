# command_center/services/backend.py
from typing import Any, Dict, List

from sqlalchemy import asc, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from command_center.errors import BackendError
from command_center.logger import get_logger
from command_center.models.change_log import ChangeLog
from command_center.models.project import Project
from command_center.schemas.mapping import CHANGE_LOG_COLUMNS, PROJECT_COLUMNS

logger = get_logger(__name__)

_PROJECT_COLUMN_NAMES = set(PROJECT_COLUMNS.values())


def _project_row(project: Project) -> Dict[str, Any]:
    return {column: getattr(project, column) for column in _PROJECT_COLUMN_NAMES}


def _change_log_row(log: ChangeLog) -> Dict[str, Any]:
    return {column: getattr(log, column) for column in CHANGE_LOG_COLUMNS.values()}


class SqlBackend:
    """
    Record store for projects and the change log.

    Speaks snake_case row dicts only; translation to the in-memory models lives
    in schemas.mapping. Every call is its own transaction: it commits, or rolls
    back and raises BackendError.
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, what: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{what} failed: {e}")
            raise BackendError(f"{what} failed: {e}") from e

    # ======================================================
    # Projects
    # ======================================================

    def list_projects(self) -> List[Dict[str, Any]]:
        try:
            projects = self.db.query(Project).order_by(asc(Project.id)).all()
        except SQLAlchemyError as e:
            logger.error(f"Loading projects failed: {e}")
            raise BackendError(f"Loading projects failed: {e}") from e
        return [_project_row(p) for p in projects]

    def insert_project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        '''
        Insert a project; the backend assigns the id.

        :param row: snake_case column values (an "id" key is ignored)
        :return: the stored row including its id
        '''
        values = {k: v for k, v in row.items() if k in _PROJECT_COLUMN_NAMES and k != "id"}
        project = Project(**values)
        try:
            self.db.add(project)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Inserting project failed: {e}")
            raise BackendError(f"Inserting project failed: {e}") from e
        self._commit("Inserting project")
        return _project_row(project)

    def update_project(self, project_id: int, row: Dict[str, Any]) -> None:
        """Full replace of the named columns."""
        try:
            project = self.db.get(Project, project_id)
        except SQLAlchemyError as e:
            raise BackendError(f"Loading project {project_id} failed: {e}") from e
        if project is None:
            raise BackendError(f"Project {project_id} does not exist")
        for column, value in row.items():
            if column in _PROJECT_COLUMN_NAMES and column != "id":
                setattr(project, column, value)
        self._commit(f"Updating project {project_id}")

    def delete_project(self, project_id: int) -> None:
        project = self.db.get(Project, project_id)
        if project is None:
            raise BackendError(f"Project {project_id} does not exist")
        self.db.delete(project)
        self._commit(f"Deleting project {project_id}")

    # ======================================================
    # Change log (append only)
    # ======================================================

    def list_change_log(self) -> List[Dict[str, Any]]:
        try:
            logs = self.db.query(ChangeLog).order_by(desc(ChangeLog.created_at)).all()
        except SQLAlchemyError as e:
            logger.error(f"Loading change log failed: {e}")
            raise BackendError(f"Loading change log failed: {e}") from e
        return [_change_log_row(log) for log in logs]

    def insert_change_log(self, row: Dict[str, Any]) -> Dict[str, Any]:
        log = ChangeLog(**{k: v for k, v in row.items() if k in CHANGE_LOG_COLUMNS.values()})
        self.db.add(log)
        self._commit("Inserting change log entry")
        return _change_log_row(log)
