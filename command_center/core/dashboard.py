# command_center/core/dashboard.py
from typing import Dict, Iterable, List, Optional

from command_center.db.enums import MilestoneStatus, ProjectStatus
from command_center.schemas.project import Project

ALL_STATUSES = "All"


def filter_projects(
    projects: Iterable[Project],
    *,
    category: Optional[str] = None,
    search: str = "",
    status: str = ALL_STATUSES,
) -> List[Project]:
    '''
    Project list filtering: category tab, search and status filter.
    Search is case-insensitive on utility/substation and a plain substring on the order number.
    '''
    term = (search or "").strip()
    lowered = term.lower()
    result = []
    for project in projects:
        if category and project.category.value != category:
            continue
        if term and not (
            lowered in project.utility.lower()
            or lowered in project.substation.lower()
            or term in project.order
        ):
            continue
        if status and status != ALL_STATUSES and project.status.value != status:
            continue
        result.append(project)
    return result


def pipeline_stats(projects: Iterable[Project]) -> Dict[str, int]:
    projects = list(projects)
    completed = MilestoneStatus.COMPLETED
    return {
        "total": len(projects),
        "critical": sum(1 for p in projects if p.status == ProjectStatus.CRITICAL),
        "fatReady": sum(
            1 for p in projects
            if p.milestones.fab == completed and p.milestones.fat != completed
        ),
        "shipReady": sum(
            1 for p in projects
            if p.milestones.fat == completed and p.milestones.ship != completed
        ),
        "done": sum(1 for p in projects if p.status == ProjectStatus.DONE),
    }
