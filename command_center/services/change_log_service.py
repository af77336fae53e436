# command_center/services/change_log_service.py
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import uuid4

from command_center.core.diff import join_changes
from command_center.db.enums import ChangeAction
from command_center.errors import BackendError
from command_center.logger import get_logger
from command_center.schemas.change_log import ChangeLogEntry
from command_center.schemas.mapping import change_log_from_row, change_log_to_row
from command_center.services.state import DashboardState

logger = get_logger(__name__)


def format_timestamp(moment: datetime) -> str:
    """'1/15/2026, 3:04:05 PM'"""
    hour = moment.hour % 12 or 12
    return f"{moment.month}/{moment.day}/{moment.year}, {hour}:{moment:%M:%S} {moment:%p}"


class ChangeLogService:
    """
    The only place where change-log entries are created.
    Entries are appended, never edited or removed.
    """

    def __init__(self, backend, state: DashboardState):
        self.backend = backend
        self.state = state

    def append(
        self,
        *,
        action: ChangeAction,
        project_id: int,
        project_info: str,
        changes: str,
    ) -> Optional[ChangeLogEntry]:
        '''
        Write one change-log entry and put it at the head of the in-memory log.
        Empty changes write nothing.

        :param action: action label
        :type action: ChangeAction
        :param project_id: project the change belongs to
        :type project_id: int
        :param project_info: "utility - substation" at write time
        :type project_info: str
        :param changes: ' | '-joined diff fragments
        :type changes: str
        :return: the stored entry; None when nothing was written
        :rtype: Optional[ChangeLogEntry]
        '''
        if not changes:
            return None

        entry = ChangeLogEntry(
            id=str(uuid4()),
            timestamp=format_timestamp(datetime.now()),
            user_email=self.state.user_email or "Unknown",
            project_id=project_id,
            project_info=project_info,
            action=ChangeAction(action).value,
            changes=changes,
        )
        try:
            row = self.backend.insert_change_log(change_log_to_row(entry))
        except BackendError as e:
            logger.error(f"Error logging change for project {project_id}: {e}")
            return None

        stored = change_log_from_row(row)
        self.state.prepend_log(stored)
        logger.info(f"[changelog] {stored.action} project_id={project_id} by {stored.user_email}")
        return stored

    def record_diffs(
        self,
        *,
        action: ChangeAction,
        project_id: int,
        project_info: str,
        diffs: Sequence[str],
    ) -> Optional[ChangeLogEntry]:
        return self.append(
            action=action,
            project_id=project_id,
            project_info=project_info,
            changes=join_changes(diffs),
        )

    def list_entries(
        self,
        *,
        project_id: Optional[int] = None,
        action: Optional[str] = None,
        search: str = "",
    ) -> List[ChangeLogEntry]:
        term = (search or "").strip().lower()
        entries = []
        for entry in self.state.change_log:
            if project_id is not None and entry.project_id != project_id:
                continue
            if action and entry.action != action:
                continue
            if term and not (
                term in entry.changes.lower()
                or term in entry.project_info.lower()
                or term in entry.user_email.lower()
            ):
                continue
            entries.append(entry)
        return entries
