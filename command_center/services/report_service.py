# command_center/services/report_service.py
import io
import os
from typing import Any, Dict, Iterable, List

import pandas as pd

from command_center.core.milestones import STAGES, status_label
from command_center.db.enums import ProjectCategory, ProjectStatus
from command_center.logger import get_logger
from command_center.schemas.change_log import ChangeLogEntry
from command_center.schemas.mapping import project_row_from_seed
from command_center.schemas.project import Project

logger = get_logger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

CHANGE_LOG_HEADERS = ["Timestamp", "User", "Project ID", "Project", "Action", "Changes"]


def _to_xlsx(df: pd.DataFrame, sheet_name: str) -> io.BytesIO:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    output.seek(0)
    return output


def change_log_frame(entries: Iterable[ChangeLogEntry]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            [e.timestamp, e.user_email, e.project_id, e.project_info, e.action, e.changes]
            for e in entries
        ],
        columns=CHANGE_LOG_HEADERS,
    )


def project_frame(projects: Iterable[Project]) -> pd.DataFrame:
    records = []
    for p in projects:
        record = {
            "ID": p.id,
            "Category": p.category.value,
            "Utility": p.utility,
            "Substation": p.substation,
            "Order": p.order,
            "Date Created": p.date_created,
            "FAT Date": p.fat_date,
            "Landing": p.landing,
            "Status": p.status.value,
            "Progress": p.progress,
            "Lead": p.lead,
        }
        for key, label, _ in STAGES:
            record[label] = status_label(getattr(p.milestones, key))
        record["Open Punch Items"] = sum(1 for item in p.punch_list if not item.completed)
        records.append(record)
    return pd.DataFrame(records)


def export_change_log(entries: Iterable[ChangeLogEntry]) -> io.BytesIO:
    return _to_xlsx(change_log_frame(entries), "Change Log")


def export_projects(projects: Iterable[Project]) -> io.BytesIO:
    return _to_xlsx(project_frame(projects), "Projects")


def load_seed_rows(path: str) -> List[Dict[str, Any]]:
    '''
    Read a seed spreadsheet (.xlsx / .xls / .csv) into insert rows.
    Rows without utility or substation are skipped.

    :raises ValueError: unsupported extension or unreadable file
    '''
    ext = os.path.splitext(path)[1].lower()
    try:
        if ext in (".xlsx", ".xls"):
            df = pd.read_excel(path, dtype=str)
        elif ext == ".csv":
            df = pd.read_csv(path, dtype=str)
        else:
            raise ValueError(f"Unsupported seed file type: {ext}")
    except (OSError, pd.errors.ParserError) as e:
        raise ValueError(f"Cannot read seed file {path}: {e}") from e

    # NaN -> None，避免写入 "nan"
    df = df.astype(object).where(pd.notna(df), None)

    rows = []
    for record in df.to_dict(orient="records"):
        try:
            row = project_row_from_seed(record)
            if row is not None:
                ProjectCategory(row["category"])
                ProjectStatus(row["status"])
        except ValueError as e:
            logger.warning(f"Skipping invalid seed row {record}: {e}")
            continue
        if row is None:
            logger.warning(f"Skipping seed row without utility/substation: {record}")
            continue
        rows.append(row)
    return rows


def seed_projects(backend, path: str) -> int:
    """Insert every seed row; returns the number inserted."""
    count = 0
    for row in load_seed_rows(path):
        backend.insert_project(row)
        count += 1
    logger.info(f"Seeded {count} projects from {path}")
    return count
