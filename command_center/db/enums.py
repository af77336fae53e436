# command_center/db/enums.py
import enum


# Project related enums
class ProjectCategory(str, enum.Enum):
    PUMPING = "Pumping"
    FIELD_SERVICE = "Field Service"
    EHV = "EHV"


class ProjectStatus(str, enum.Enum):
    ACTIVE = "Active"
    CRITICAL = "Critical"
    LATE = "Late"
    DONE = "Done"
    # 旧版本把 FAT 当作状态而不是里程碑，只读兼容
    FAT = "FAT"


# Milestone related enums
class MilestoneStatus(str, enum.Enum):
    '''
    Four-state milestone cycle:
        not_started -> started -> stuck -> completed -> not_started ...
    '''
    NOT_STARTED = "not_started"
    STARTED = "started"
    STUCK = "stuck"
    COMPLETED = "completed"


# Punch list attachment enums
class AttachmentType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"


# ChangeLog related enums
class ChangeAction(str, enum.Enum):
    CREATED = "Created New Project"
    UPDATED = "Updated Project Details"
    PUNCH_LIST = "Punch List Updated"
    DELETED = "Project Deleted"
