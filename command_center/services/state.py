# command_center/services/state.py
from typing import Dict, List, Optional

from command_center.core.dashboard import pipeline_stats
from command_center.core.punch_list import fat_projects_with_punch_list
from command_center.errors import NotFoundError
from command_center.schemas.change_log import ChangeLogEntry
from command_center.schemas.mapping import change_log_from_row, project_from_row
from command_center.schemas.project import Project


class DashboardState:
    """
    Application state of one signed-in session: the acting identity, the
    project collection (id ascending) and the change log (newest first).

    Built by open() right after authentication, torn down by close() on logout.
    Services receive it explicitly instead of reaching for globals.
    """

    def __init__(self, user_email: str):
        self.user_email: Optional[str] = user_email
        self.projects: List[Project] = []
        self.change_log: List[ChangeLogEntry] = []

    @classmethod
    def open(cls, user_email: str, backend) -> "DashboardState":
        state = cls(user_email)
        state.projects = [project_from_row(row) for row in backend.list_projects()]
        state.change_log = [change_log_from_row(row) for row in backend.list_change_log()]
        return state

    def close(self) -> None:
        self.user_email = None
        self.projects = []
        self.change_log = []

    @property
    def is_open(self) -> bool:
        return self.user_email is not None

    # ======================================================
    # Project collection
    # ======================================================

    def get_project(self, project_id: int) -> Project:
        for project in self.projects:
            if project.id == project_id:
                return project
        raise NotFoundError(f"Project not found: {project_id}")

    def add_project(self, project: Project) -> None:
        self.projects.append(project)

    def replace_project(self, project: Project) -> None:
        self.projects = [project if p.id == project.id else p for p in self.projects]

    def remove_project(self, project_id: int) -> None:
        self.projects = [p for p in self.projects if p.id != project_id]

    # ======================================================
    # Change log (newest first)
    # ======================================================

    def prepend_log(self, entry: ChangeLogEntry) -> None:
        self.change_log.insert(0, entry)

    # ======================================================
    # Derived views, recomputed on access
    # ======================================================

    @property
    def fat_projects_with_punch_list(self) -> List[Project]:
        return fat_projects_with_punch_list(self.projects)

    @property
    def stats(self) -> Dict[str, int]:
        return pipeline_stats(self.projects)
