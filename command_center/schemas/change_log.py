# command_center/schemas/change_log.py
from pydantic import BaseModel, ConfigDict, Field


class ChangeLogEntry(BaseModel):
    """Immutable audit record; frozen once constructed."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    timestamp: str
    user_email: str = Field(alias="userEmail")
    project_id: int = Field(alias="projectId")
    project_info: str = Field(alias="projectInfo")
    action: str
    changes: str

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
