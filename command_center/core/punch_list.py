# command_center/core/punch_list.py
from typing import Iterable, List, Optional, Sequence, Tuple
from uuid import uuid4

from command_center.core.milestones import is_punch_list_unlocked
from command_center.errors import NotFoundError
from command_center.schemas.project import Project, PunchListItem


def reconcile_punch_list(
    original_list: Optional[Sequence[PunchListItem]],
    updated_list: Optional[Sequence[PunchListItem]],
) -> List[str]:
    '''
    Punch-list diff fragments between two snapshots, matched by item id.

    Emission order: all additions (updated order), then all removals (original
    order), then all completion toggles (updated order). An item that is new in
    this save only produces its "Added" fragment.

    :param original_list: items before the edit, may be None
    :param updated_list: items after the edit, may be None
    :return: list of diff fragments
    '''
    original_list = list(original_list or [])
    updated_list = list(updated_list or [])
    original_by_id = {item.id: item for item in original_list}
    updated_ids = {item.id for item in updated_list}

    diffs: List[str] = []

    # 1. additions
    for item in updated_list:
        if item.id not in original_by_id:
            diffs.append(f'Punch List: Added "{item.description}"')

    # 2. removals
    for item in original_list:
        if item.id not in updated_ids:
            diffs.append(f'Punch List: Removed "{item.description}"')

    # 3. toggles，只比较两边都存在的 item
    for item in updated_list:
        before = original_by_id.get(item.id)
        if before is not None and before.completed != item.completed:
            diffs.append(toggle_fragment(item))

    return diffs


def toggle_fragment(item: PunchListItem) -> str:
    state = "COMPLETED" if item.completed else "PENDING"
    return f'Punch List: "{item.description}" marked as {state}'


def fat_projects_with_punch_list(projects: Iterable[Project]) -> List[Project]:
    """Projects whose FAT stage is completed and which carry at least one punch item."""
    return [
        project for project in projects
        if is_punch_list_unlocked(project.milestones) and len(project.punch_list) > 0
    ]


def new_item_id() -> str:
    return uuid4().hex


def new_punch_item(description: str) -> PunchListItem:
    text = (description or "").strip()
    if not text:
        raise ValueError("Punch list item description cannot be empty")
    return PunchListItem(id=new_item_id(), description=text, completed=False)


def find_item(items: Sequence[PunchListItem], item_id: str) -> PunchListItem:
    for item in items:
        if item.id == item_id:
            return item
    raise NotFoundError(f"Punch list item not found: {item_id}")


def toggle_item(
    items: Sequence[PunchListItem],
    item_id: str,
) -> Tuple[List[PunchListItem], PunchListItem]:
    """Copy of items with one completion flag flipped, plus the flipped item."""
    find_item(items, item_id)
    result: List[PunchListItem] = []
    toggled = None
    for item in items:
        if item.id == item_id:
            toggled = item.model_copy(update={"completed": not item.completed})
            result.append(toggled)
        else:
            result.append(item)
    return result, toggled


def completion_summary(items: Sequence[PunchListItem]) -> Tuple[int, int]:
    """(completed count, total count)"""
    return sum(1 for item in items if item.completed), len(items)
