# command_center/schemas/project.py
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from command_center.db.enums import (
    AttachmentType,
    MilestoneStatus,
    ProjectCategory,
    ProjectStatus,
)


def from_legacy_boolean(value: Any) -> Any:
    """Boolean-era stage value -> four-state status; anything else unchanged."""
    if isinstance(value, bool):
        return MilestoneStatus.COMPLETED if value else MilestoneStatus.NOT_STARTED
    return value


class Milestones(BaseModel):
    '''
    The five fixed pipeline stages. Legacy boolean values (stored data or
    request bodies) are read as completed / not_started; any other value must
    be one of the four states. Stored data additionally goes through
    core.milestones.normalize_milestones, which also tolerates unknown values.
    '''
    model_config = ConfigDict(extra="forbid")

    design: MilestoneStatus = MilestoneStatus.NOT_STARTED
    mat: MilestoneStatus = MilestoneStatus.NOT_STARTED
    fab: MilestoneStatus = MilestoneStatus.NOT_STARTED
    fat: MilestoneStatus = MilestoneStatus.NOT_STARTED
    ship: MilestoneStatus = MilestoneStatus.NOT_STARTED

    @field_validator("design", "mat", "fab", "fat", "ship", mode="before")
    @classmethod
    def _legacy_boolean(cls, value):
        return from_legacy_boolean(value)


class PunchListAttachment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    url: str
    type: AttachmentType
    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize")
    uploaded_at: str = Field(alias="uploadedAt")
    uploaded_by: str = Field(alias="uploadedBy")
    # blob store path, needed to delete the stored file
    path: Optional[str] = None


class PunchListItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    description: str = Field(min_length=1)
    completed: bool = False
    attachments: List[PunchListAttachment] = Field(default_factory=list)


class Project(BaseModel):
    '''
    In-memory project record. Attribute names are snake_case; aliases carry the
    camelCase names used by the JSON API and by the change-log field labels.
    '''
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    category: ProjectCategory
    utility: str
    substation: str
    date_created: str = Field(alias="dateCreated")
    order: str
    fat_date: str = Field(default="N/A", alias="fatDate")
    landing: str = "TBD"
    status: ProjectStatus = ProjectStatus.ACTIVE
    progress: int = Field(default=0, ge=0, le=100)
    lead: str = "TBD"
    description: str = ""
    comments: str = ""
    milestones: Milestones = Field(default_factory=Milestones)
    punch_list: List[PunchListItem] = Field(default_factory=list, alias="punchList")

    @property
    def project_info(self) -> str:
        return f"{self.utility} - {self.substation}"

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
