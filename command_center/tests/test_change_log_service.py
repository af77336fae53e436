import re
from datetime import datetime

from command_center.db.enums import ChangeAction
from command_center.services.change_log_service import format_timestamp
from command_center.tests.conftest import TEST_EMAIL


def append(change_log, changes, project_id=1):
    return change_log.append(
        action=ChangeAction.UPDATED,
        project_id=project_id,
        project_info="Duke Energy - Riverside",
        changes=changes,
    )


def test_empty_changes_write_nothing(change_log, backend, state):
    assert append(change_log, "") is None
    assert state.change_log == []
    assert backend.list_change_log() == []


def test_entry_is_stored_and_prepended(change_log, backend, state):
    first = append(change_log, 'Status: "Active" -> "Late"')
    second = append(change_log, 'Lead: "TBD" -> "Kim"', project_id=2)

    assert state.change_log == [second, first]
    assert first.user_email == TEST_EMAIL
    assert first.action == "Updated Project Details"
    assert first.id != second.id

    stored = backend.list_change_log()
    assert [row["id"] for row in stored] == [second.id, first.id]


def test_insert_failure_is_not_prepended(change_log, backend, state):
    backend.fail_log = True
    assert append(change_log, 'Status: "Active" -> "Late"') is None
    assert state.change_log == []


def test_record_diffs_joins_fragments(change_log):
    entry = change_log.record_diffs(
        action=ChangeAction.UPDATED,
        project_id=1,
        project_info="Duke Energy - Riverside",
        diffs=['Status: "Active" -> "Late"', "FAT: Not Started -> Started"],
    )
    assert entry.changes == 'Status: "Active" -> "Late" | FAT: Not Started -> Started'


def test_timestamp_format():
    assert format_timestamp(datetime(2026, 1, 5, 15, 4, 5)) == "1/5/2026, 3:04:05 PM"
    assert format_timestamp(datetime(2026, 11, 25, 0, 30, 0)) == "11/25/2026, 12:30:00 AM"
    assert re.match(r"^\d{1,2}/\d{1,2}/\d{4}, \d{1,2}:\d{2}:\d{2} [AP]M$", format_timestamp(datetime.now()))


def test_list_entries_filters(change_log):
    append(change_log, 'Status: "Active" -> "Late"', project_id=1)
    append(change_log, 'Lead: "TBD" -> "Kim"', project_id=2)
    change_log.append(
        action=ChangeAction.DELETED,
        project_id=3,
        project_info="Entergy - Waterford",
        changes="Deleted: Entergy - Waterford | Order: FS-9",
    )

    assert [e.project_id for e in change_log.list_entries(project_id=2)] == [2]
    assert [e.project_id for e in change_log.list_entries(action="Project Deleted")] == [3]
    assert [e.project_id for e in change_log.list_entries(search="kim")] == [2]
    assert [e.project_id for e in change_log.list_entries(search="waterford")] == [3]
    assert len(change_log.list_entries()) == 3
