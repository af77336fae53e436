# command_center/core/diff.py
"""
Project diff engine.

Pure comparison of two snapshots of the same project, producing the
human-readable fragments that end up ' | '-joined in a change-log entry:

    Status: "Active" -> "Late"
    FAT: Not Started -> Completed
    Punch List: Added "Replace gasket"

Order is fixed: tracked fields (in TRACKED_FIELDS order), then milestones
(stage order), then punch-list fragments.
"""
from enum import Enum
from typing import Any, Dict, List, Sequence

from command_center.core.milestones import (
    STAGE_KEYS,
    parse_milestone_fragment,
    status_label,
)
from command_center.core.punch_list import reconcile_punch_list
from command_center.schemas.project import Project

# category / utility / substation / date_created / order 不参与 diff
TRACKED_FIELDS = (
    "status",
    "progress",
    "lead",
    "fat_date",
    "landing",
    "description",
    "comments",
)

CHANGES_SEPARATOR = " | "


def field_label(attribute: str) -> str:
    """API field name with its first character capitalised, e.g. fat_date -> FatDate."""
    name = Project.model_fields[attribute].alias or attribute
    return name[:1].upper() + name[1:]


def _display(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def diff_fields(original: Project, updated: Project) -> List[str]:
    diffs = []
    for attribute in TRACKED_FIELDS:
        before = getattr(original, attribute)
        after = getattr(updated, attribute)
        if before != after:
            diffs.append(f'{field_label(attribute)}: "{_display(before)}" -> "{_display(after)}"')
    return diffs


def diff_milestones(original: Project, updated: Project) -> List[str]:
    diffs = []
    for key in STAGE_KEYS:
        before = getattr(original.milestones, key)
        after = getattr(updated.milestones, key)
        if before != after:
            diffs.append(f"{key.upper()}: {status_label(before)} -> {status_label(after)}")
    return diffs


def diff_project(original: Project, updated: Project) -> List[str]:
    '''
    All diff fragments between two snapshots of one project.

    :param original: snapshot taken when editing started
    :type original: Project
    :param updated: snapshot being saved
    :type updated: Project
    :return: ordered fragments, empty when nothing tracked changed
    :rtype: List[str]
    '''
    if original.id is not None and updated.id is not None and original.id != updated.id:
        raise ValueError(f"Cannot diff project {original.id} against project {updated.id}")

    diffs = diff_fields(original, updated)
    diffs.extend(diff_milestones(original, updated))
    diffs.extend(reconcile_punch_list(original.punch_list, updated.punch_list))
    return diffs


def join_changes(diffs: Sequence[str]) -> str:
    return CHANGES_SEPARATOR.join(diffs)


def parse_change_fragments(changes: str) -> List[Dict[str, Any]]:
    """
    Split a stored changes string back into fragments. Milestone fragments from
    both the four-state and the boolean era are recognised; everything else is
    returned as plain text.
    """
    fragments = []
    for text in (changes or "").split(CHANGES_SEPARATOR):
        if not text:
            continue
        parsed = parse_milestone_fragment(text)
        if parsed is None:
            fragments.append({"kind": "text", "text": text})
        else:
            stage, before, after = parsed
            fragments.append({
                "kind": "milestone",
                "text": text,
                "stage": stage,
                "from": before.value,
                "to": after.value,
            })
    return fragments
