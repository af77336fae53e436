# command_center/core/editor.py
from typing import Any, Dict, List

from command_center.core.diff import diff_project
from command_center.core.milestones import advance_stage, is_punch_list_unlocked
from command_center.core.punch_list import find_item, new_punch_item, toggle_item
from command_center.schemas.project import Project, PunchListAttachment, PunchListItem

# 编辑表单可以修改的字段
EDITABLE_FIELDS = (
    "status",
    "progress",
    "lead",
    "fat_date",
    "landing",
    "description",
    "comments",
)


class ProjectEditor:
    """
    Edit draft of one project.

    Holds the snapshot taken when editing started and the working copy. Every
    milestone click, punch-list change and field edit only touches the draft;
    only the net difference is logged when the draft is saved.
    """

    def __init__(self, project: Project, draft: Project = None):
        self.original = project.model_copy(deep=True)
        self.draft = (draft or project).model_copy(deep=True)

    # ======================================================
    # Fields / milestones
    # ======================================================

    def set_field(self, name: str, value: Any) -> None:
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"Field is not editable: {name}")
        data = self.draft.model_dump()
        data[name] = value
        # 重新校验，确保枚举 / progress 范围正确
        self.draft = Project.model_validate(data)

    def advance_milestone(self, stage: str) -> None:
        self.draft = self.draft.model_copy(
            update={"milestones": advance_stage(self.draft.milestones, stage)}
        )

    @property
    def punch_list_enabled(self) -> bool:
        return is_punch_list_unlocked(self.draft.milestones)

    # ======================================================
    # Punch list
    # ======================================================

    def _require_punch_list(self) -> None:
        if not self.punch_list_enabled:
            raise ValueError("Punch list is available once the FAT milestone is completed")

    def _set_punch_list(self, items: List[PunchListItem]) -> None:
        self.draft = self.draft.model_copy(update={"punch_list": items})

    def add_punch_item(self, description: str) -> PunchListItem:
        self._require_punch_list()
        item = new_punch_item(description)
        self._set_punch_list([*self.draft.punch_list, item])
        return item

    def remove_punch_item(self, item_id: str) -> None:
        find_item(self.draft.punch_list, item_id)
        self._set_punch_list([i for i in self.draft.punch_list if i.id != item_id])

    def toggle_punch_item(self, item_id: str) -> PunchListItem:
        self._require_punch_list()
        items, toggled = toggle_item(self.draft.punch_list, item_id)
        self._set_punch_list(items)
        return toggled

    def get_item(self, item_id: str) -> PunchListItem:
        return find_item(self.draft.punch_list, item_id)

    def replace_item(self, item: PunchListItem) -> None:
        find_item(self.draft.punch_list, item.id)
        self._set_punch_list([item if i.id == item.id else i for i in self.draft.punch_list])

    def add_attachment(self, item_id: str, attachment: PunchListAttachment) -> None:
        item = self.get_item(item_id)
        self.replace_item(item.model_copy(update={"attachments": [*item.attachments, attachment]}))

    # ======================================================
    # Diff / session storage
    # ======================================================

    def changes(self) -> List[str]:
        return diff_project(self.original, self.draft)

    def to_session(self) -> Dict[str, Any]:
        return {
            "original": self.original.model_dump(mode="json", by_alias=True),
            "draft": self.draft.model_dump(mode="json", by_alias=True),
        }

    @classmethod
    def from_session(cls, data: Dict[str, Any]) -> "ProjectEditor":
        return cls(
            Project.model_validate(data["original"]),
            Project.model_validate(data["draft"]),
        )
