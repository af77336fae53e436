# command_center/schemas/mapping.py
"""
Row <-> model mapping.

The record store speaks snake_case rows (``order_number``, ``fat_date``,
``punch_list``...); the in-memory side is the pydantic models in
schemas.project / schemas.change_log. Every column name and every default for
an absent/null column is listed here and nowhere else.
"""
from typing import Any, Dict, Optional

from pydantic import ValidationError

from command_center.core.milestones import normalize_milestones
from command_center.db.enums import ProjectCategory, ProjectStatus
from command_center.logger import get_logger
from command_center.schemas.change_log import ChangeLogEntry
from command_center.schemas.project import Project, PunchListAttachment, PunchListItem

logger = get_logger(__name__)

# model attribute -> column
PROJECT_COLUMNS = {
    "id": "id",
    "category": "category",
    "utility": "utility",
    "substation": "substation",
    "date_created": "date_created",
    "order": "order_number",
    "fat_date": "fat_date",
    "landing": "landing",
    "status": "status",
    "progress": "progress",
    "lead": "lead",
    "description": "description",
    "comments": "comments",
    "milestones": "milestones",
    "punch_list": "punch_list",
}

CHANGE_LOG_COLUMNS = {
    "id": "id",
    "timestamp": "timestamp",
    "user_email": "user_email",
    "project_id": "project_id",
    "project_info": "project_info",
    "action": "action",
    "changes": "changes",
}

# 可选列为空时的默认值
DEFAULT_FAT_DATE = "N/A"
DEFAULT_LANDING = "TBD"
DEFAULT_LEAD = "TBD"

# 存储里的脏数据读入时的兜底值
DEFAULT_CATEGORY = ProjectCategory.PUMPING
DEFAULT_STATUS = ProjectStatus.ACTIVE
MISSING_DESCRIPTION = "(no description)"


def _text(value: Any, default: str = "") -> str:
    if value is None or str(value).strip() == "":
        return default
    return str(value)


def _enum_or_default(enum_cls, value: Any, default, *, project_id: Any, column: str):
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(f"Project {project_id}: unknown {column} {value!r}, using {default.value!r}")
        return default


def _progress(value: Any, *, project_id: Any) -> int:
    try:
        progress = int(float(value)) if value is not None and value != "" else 0
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Project {project_id}: unreadable progress {value!r}, using 0")
        return 0
    clamped = min(max(progress, 0), 100)
    if clamped != progress:
        logger.warning(f"Project {project_id}: progress {progress} clamped to {clamped}")
    return clamped


def _punch_item_from_raw(raw: Any, *, project_id: Any) -> Optional[PunchListItem]:
    '''
    One stored punch-list item. Items without an id are skipped; a blank
    description gets a placeholder; unreadable attachments are dropped.
    '''
    if not isinstance(raw, dict) or not raw.get("id"):
        logger.warning(f"Project {project_id}: skipping punch list item without id: {raw!r}")
        return None

    description = _text(raw.get("description")).strip()
    if not description:
        logger.warning(f"Project {project_id}: punch list item {raw['id']} has no description")
        description = MISSING_DESCRIPTION

    attachments = []
    for attachment in raw.get("attachments") or []:
        try:
            attachments.append(PunchListAttachment.model_validate(attachment))
        except ValidationError as e:
            logger.warning(f"Project {project_id}: dropping unreadable attachment on item {raw['id']}: {e}")

    return PunchListItem(
        id=str(raw["id"]),
        description=description,
        completed=bool(raw.get("completed")),
        attachments=attachments,
    )


def project_from_row(row: Dict[str, Any]) -> Project:
    '''
    Build a Project from a stored row, applying the column defaults and the
    milestone normalisation (legacy booleans -> four-state).

    The store does no validation, so anything outside the model's range is
    coerced here and logged: unknown category/status fall back to
    DEFAULT_CATEGORY/DEFAULT_STATUS, progress is clamped to 0..100.

    :param row: snake_case row from the persistence backend
    :type row: Dict[str, Any]
    :return: in-memory project
    :rtype: Project
    '''
    project_id = row.get("id")
    punch_list = []
    raw_items = row.get("punch_list") or []
    if not isinstance(raw_items, list):
        logger.warning(f"Project {project_id}: punch_list is not a list, ignored")
        raw_items = []
    for raw in raw_items:
        item = _punch_item_from_raw(raw, project_id=project_id)
        if item is not None:
            punch_list.append(item)

    milestones = row.get("milestones")
    if milestones is not None and not isinstance(milestones, dict):
        logger.warning(f"Project {project_id}: milestones is not a mapping, ignored")
        milestones = None

    return Project(
        id=project_id,
        category=_enum_or_default(
            ProjectCategory, row.get("category"), DEFAULT_CATEGORY,
            project_id=project_id, column="category",
        ),
        utility=_text(row.get("utility")),
        substation=_text(row.get("substation")),
        date_created=_text(row.get("date_created")),
        order=_text(row.get("order_number")),
        fat_date=_text(row.get("fat_date"), DEFAULT_FAT_DATE),
        landing=_text(row.get("landing"), DEFAULT_LANDING),
        status=_enum_or_default(
            ProjectStatus, row.get("status"), DEFAULT_STATUS,
            project_id=project_id, column="status",
        ),
        progress=_progress(row.get("progress"), project_id=project_id),
        lead=_text(row.get("lead"), DEFAULT_LEAD),
        description=_text(row.get("description")),
        comments=_text(row.get("comments")),
        milestones=normalize_milestones(milestones),
        punch_list=punch_list,
    )


def project_to_row(project: Project, *, include_id: bool = False) -> Dict[str, Any]:
    """Full snake_case row for insert/update. Enums are written as their values."""
    data = project.model_dump(mode="json", by_alias=False)
    row = {
        column: data[attribute]
        for attribute, column in PROJECT_COLUMNS.items()
        if attribute != "id"
    }
    # punch list JSON keeps the camelCase keys (fileName, uploadedAt ...)
    row["punch_list"] = [
        item.model_dump(mode="json", by_alias=True) for item in project.punch_list
    ]
    if include_id and project.id is not None:
        row["id"] = project.id
    return row


def change_log_from_row(row: Dict[str, Any]) -> ChangeLogEntry:
    return ChangeLogEntry(**{
        attribute: row[column] for attribute, column in CHANGE_LOG_COLUMNS.items()
    })


def change_log_to_row(entry: ChangeLogEntry) -> Dict[str, Any]:
    data = entry.model_dump(by_alias=False)
    return {column: data[attribute] for attribute, column in CHANGE_LOG_COLUMNS.items()}


def project_row_from_seed(record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    '''
    Turn one spreadsheet record (camelCase or snake_case headers) into an insert row.
    Returns None for rows without utility/substation.
    '''
    def pick(*keys, default=None):
        for key in keys:
            value = record.get(key)
            if value is not None and str(value).strip() != "":
                return value
        return default

    utility = pick("utility")
    substation = pick("substation")
    if utility is None or substation is None:
        return None
    return {
        "category": str(pick("category", default=ProjectCategory.PUMPING.value)).strip(),
        "utility": str(utility).strip(),
        "substation": str(substation).strip(),
        "date_created": str(pick("dateCreated", "date_created", default="")).strip(),
        "order_number": str(pick("order", "order_number", default="")).strip(),
        "fat_date": str(pick("fatDate", "fat_date", default=DEFAULT_FAT_DATE)).strip(),
        "landing": str(pick("landing", default=DEFAULT_LANDING)).strip(),
        "status": str(pick("status", default=ProjectStatus.ACTIVE.value)).strip(),
        "progress": int(float(pick("progress", default=0))),
        "lead": str(pick("lead", default=DEFAULT_LEAD)).strip(),
        "description": str(pick("description", default="")),
        "comments": str(pick("comments", default="")),
        "milestones": normalize_milestones(None).model_dump(mode="json"),
        "punch_list": [],
    }
