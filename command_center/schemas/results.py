# command_center/schemas/results.py
from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from command_center.errors import ErrorType
from command_center.schemas.change_log import ChangeLogEntry
from command_center.schemas.project import Project


class ActionResult(BaseModel):
    '''
    Structured outcome of a side-effecting action (blob upload / delete).

    ok: bool - whether the action completed
    error_type: Optional[ErrorType] - structured error category
    error_message: Optional[str] - human readable message shown inline
    data: Optional[Dict[str, Any]] - structured payload, e.g. {"url", "path"}
    '''
    ok: bool

    error_type: Optional[ErrorType] = None
    error_message: Optional[str] = None

    data: Optional[Dict[str, Any]] = None

    @classmethod
    def failure(cls, error_type: ErrorType, message: str) -> "ActionResult":
        return cls(ok=False, error_type=error_type, error_message=message)


class SaveOutcome(BaseModel):
    '''
    Result of saving an edited project.

    local_only: the record store rejected the update; the in-memory collection
    already holds the new version and warning carries the text shown to the user.
    '''
    project: Project
    changes: List[str] = []
    entry: Optional[ChangeLogEntry] = None
    local_only: bool = False
    warning: Optional[str] = None
