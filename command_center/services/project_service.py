# command_center/services/project_service.py
from datetime import date
from typing import Optional, Tuple

from command_center.core.diff import diff_project, join_changes
from command_center.core.punch_list import toggle_fragment, toggle_item
from command_center.db.enums import ChangeAction, ProjectCategory, ProjectStatus
from command_center.errors import BackendError
from command_center.logger import get_logger
from command_center.schemas.change_log import ChangeLogEntry
from command_center.schemas.mapping import (
    DEFAULT_FAT_DATE,
    DEFAULT_LANDING,
    DEFAULT_LEAD,
    project_from_row,
    project_to_row,
)
from command_center.schemas.project import Milestones, Project
from command_center.schemas.results import SaveOutcome
from command_center.services.change_log_service import ChangeLogService
from command_center.services.state import DashboardState

logger = get_logger(__name__)

LOCAL_ONLY_WARNING = "Saved locally only: the change could not be written to the server."


def format_created_date(day: date) -> str:
    """'1/5/2026'"""
    return f"{day.month}/{day.day}/{day.year}"


def _or_default(value: Optional[str], default: str) -> str:
    text = (value or "").strip()
    return text or default


class ProjectService:
    """
    Project lifecycle: create, save an edit, toggle a punch item, delete.
    Every successful mutation goes through the change-log appender.
    """

    def __init__(self, backend, state: DashboardState, change_log: ChangeLogService):
        self.backend = backend
        self.state = state
        self.change_log = change_log

    # ======================================================
    # Create
    # ======================================================

    def create_project(
        self,
        *,
        category: ProjectCategory,
        utility: str,
        substation: str,
        order: str,
        fat_date: Optional[str] = None,
        landing: Optional[str] = None,
        status: ProjectStatus = ProjectStatus.ACTIVE,
        progress: int = 0,
        lead: Optional[str] = None,
        description: str = "",
        comments: str = "",
        milestones: Optional[Milestones] = None,
        today: Optional[date] = None,
    ) -> Tuple[Project, Optional[ChangeLogEntry]]:
        '''
        Insert a new project and log its creation.

        :param category: category tab the project belongs to
        :type category: ProjectCategory
        :param utility: utility name, required
        :type utility: str
        :param substation: substation name, required
        :type substation: str
        :param order: order number
        :type order: str
        :param fat_date: free-form FAT date, blank -> "N/A"
        :param landing: free-form landing date, blank -> "TBD"
        :param lead: PM name, blank -> "TBD"
        :param today: creation day, defaults to date.today()
        :return: (stored project with its assigned id, creation log entry)
        :rtype: Tuple[Project, Optional[ChangeLogEntry]]
        :raises ValueError: utility or substation missing
        :raises BackendError: the record store rejected the insert
        '''
        utility = (utility or "").strip()
        substation = (substation or "").strip()
        if not utility or not substation:
            raise ValueError("Utility and substation are required")

        project = Project(
            category=ProjectCategory(category),
            utility=utility,
            substation=substation,
            date_created=format_created_date(today or date.today()),
            order=(order or "").strip(),
            fat_date=_or_default(fat_date, DEFAULT_FAT_DATE),
            landing=_or_default(landing, DEFAULT_LANDING),
            status=ProjectStatus(status),
            progress=progress,
            lead=_or_default(lead, DEFAULT_LEAD),
            description=description or "",
            comments=comments or "",
            milestones=milestones or Milestones(),
        )

        # 插入失败直接抛出，不写日志、不改内存
        row = self.backend.insert_project(project_to_row(project))
        stored = project_from_row(row)
        self.state.add_project(stored)
        logger.info(f"[project] created id={stored.id} {stored.project_info}")

        entry = self.change_log.append(
            action=ChangeAction.CREATED,
            project_id=stored.id,
            project_info=stored.project_info,
            changes=join_changes([
                f"Order: {stored.order}",
                f"Category: {stored.category.value}",
                f"Status: {stored.status.value}",
            ]),
        )
        return stored, entry

    # ======================================================
    # Save (edit)
    # ======================================================

    def save_project(self, updated: Project, *, original: Optional[Project] = None) -> SaveOutcome:
        '''
        Persist an edited project and log the net difference.

        The whole record is rewritten even when nothing tracked changed; an
        entry is only written for a non-empty diff. When the record store
        rejects the update the in-memory collection still takes the new
        version and the outcome is flagged local_only, with no entry written.

        :param updated: the edited project
        :type updated: Project
        :param original: snapshot taken when editing started; defaults to the
            in-memory version of the project
        :type original: Optional[Project]
        :return: outcome with the diff fragments and the entry, if any
        :rtype: SaveOutcome
        :raises ValueError: unknown project id or original/updated mismatch
        '''
        if updated.id is None:
            raise ValueError("Cannot save a project without an id")
        current = self.state.get_project(updated.id)
        original = original or current

        diffs = diff_project(original, updated)

        try:
            self.backend.update_project(updated.id, project_to_row(updated))
        except BackendError as e:
            logger.error(f"Error updating project {updated.id}: {e}")
            self.state.replace_project(updated)
            return SaveOutcome(
                project=updated,
                changes=diffs,
                local_only=True,
                warning=LOCAL_ONLY_WARNING,
            )

        self.state.replace_project(updated)
        entry = self.change_log.record_diffs(
            action=ChangeAction.UPDATED,
            project_id=updated.id,
            project_info=updated.project_info,
            diffs=diffs,
        )
        return SaveOutcome(project=updated, changes=diffs, entry=entry)

    # ======================================================
    # Punch list toggle outside the editor
    # ======================================================

    def toggle_punch_item(self, *, project_id: int, item_id: str) -> Tuple[Project, Optional[ChangeLogEntry]]:
        project = self.state.get_project(project_id)
        items, toggled = toggle_item(project.punch_list, item_id)
        updated = project.model_copy(update={"punch_list": items})

        self.backend.update_project(project_id, project_to_row(updated))
        self.state.replace_project(updated)

        entry = self.change_log.append(
            action=ChangeAction.PUNCH_LIST,
            project_id=project_id,
            project_info=updated.project_info,
            changes=toggle_fragment(toggled),
        )
        return updated, entry

    # ======================================================
    # Delete
    # ======================================================

    def delete_project(self, *, project_id: int) -> Optional[ChangeLogEntry]:
        '''
        Delete a project. The deletion entry is written with the summary
        frozen before the project leaves the in-memory collection.

        :raises ValueError: unknown project id
        :raises BackendError: the record store rejected the delete
        '''
        project = self.state.get_project(project_id)

        self.backend.delete_project(project_id)

        entry = self.change_log.append(
            action=ChangeAction.DELETED,
            project_id=project_id,
            project_info=project.project_info,
            changes=join_changes([
                f"Deleted: {project.project_info}",
                f"Order: {project.order}",
            ]),
        )
        self.state.remove_project(project_id)
        logger.info(f"[project] deleted id={project_id}")
        return entry
