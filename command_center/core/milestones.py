# command_center/core/milestones.py
"""
Milestone state machine.

Each of the five fixed stages cycles through four states, one step per click:

    not_started -> started -> stuck -> completed -> not_started -> ...

There is no direct jump and no reverse step. Stored data written before the
four-state model holds booleans; schemas.project.from_legacy_boolean() is the
only place that looks at that representation (True -> completed, False ->
not_started). normalize_status() also turns unknown values into not_started.
"""
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from command_center.db.enums import MilestoneStatus
from command_center.logger import get_logger
from command_center.schemas.project import Milestones, from_legacy_boolean

logger = get_logger(__name__)

# (key, label, short label)，顺序即流水线顺序
STAGES: Tuple[Tuple[str, str, str], ...] = (
    ("design", "Design", "DES"),
    ("mat", "Material", "MAT"),
    ("fab", "Fabrication", "FAB"),
    ("fat", "FAT", "FAT"),
    ("ship", "Ship", "SHIP"),
)
STAGE_KEYS: Tuple[str, ...] = tuple(key for key, _, _ in STAGES)

CYCLE: Tuple[MilestoneStatus, ...] = (
    MilestoneStatus.NOT_STARTED,
    MilestoneStatus.STARTED,
    MilestoneStatus.STUCK,
    MilestoneStatus.COMPLETED,
)

STATUS_LABELS: Dict[MilestoneStatus, str] = {
    MilestoneStatus.NOT_STARTED: "Not Started",
    MilestoneStatus.STARTED: "Started",
    MilestoneStatus.STUCK: "Stuck",
    MilestoneStatus.COMPLETED: "Completed",
}

# labels found in change-log text written by the boolean-era dashboard
LEGACY_LABELS: Dict[str, MilestoneStatus] = {
    "Pending": MilestoneStatus.NOT_STARTED,
    "Done": MilestoneStatus.COMPLETED,
}

STEPPER_STYLES: Dict[MilestoneStatus, Dict[str, str]] = {
    MilestoneStatus.NOT_STARTED: {"color": "slate", "icon": "circle"},
    MilestoneStatus.STARTED: {"color": "blue", "icon": "play"},
    MilestoneStatus.STUCK: {"color": "red", "icon": "alert"},
    MilestoneStatus.COMPLETED: {"color": "green", "icon": "check"},
}

_FRAGMENT_RE = re.compile(r"^([A-Z]+): ([A-Za-z ]+?) -> ([A-Za-z ]+)$")


def normalize_status(value: Any) -> MilestoneStatus:
    '''
    Convert any stored stage value into the four-state model.

    :param value: bool (legacy), MilestoneStatus, status string or None
    :return: MilestoneStatus
    '''
    if isinstance(value, MilestoneStatus):
        return value
    if isinstance(value, bool):
        return from_legacy_boolean(value)
    if value is None:
        return MilestoneStatus.NOT_STARTED
    try:
        return MilestoneStatus(str(value).strip().lower())
    except ValueError:
        logger.warning(f"Unknown milestone value {value!r}, treated as not_started")
        return MilestoneStatus.NOT_STARTED


def normalize_milestones(raw: Optional[Mapping[str, Any]]) -> Milestones:
    """Normalise a stored milestones mapping. Keys outside the five stages are dropped."""
    raw = raw or {}
    return Milestones(**{key: normalize_status(raw.get(key)) for key in STAGE_KEYS})


def advance(status: MilestoneStatus) -> MilestoneStatus:
    """Next state in the cycle."""
    index = CYCLE.index(status)
    return CYCLE[(index + 1) % len(CYCLE)]


def advance_stage(milestones: Milestones, stage: str) -> Milestones:
    '''
    Return a copy of milestones with one stage advanced by a single step.

    :raises ValueError: stage is not one of the five fixed keys
    '''
    if stage not in STAGE_KEYS:
        raise ValueError(f"Unknown milestone stage: {stage}")
    current = getattr(milestones, stage)
    return milestones.model_copy(update={stage: advance(current)})


def status_label(status: MilestoneStatus) -> str:
    return STATUS_LABELS[status]


def is_punch_list_unlocked(milestones: Milestones) -> bool:
    return milestones.fat == MilestoneStatus.COMPLETED


def stepper(milestones: Milestones) -> List[Dict[str, str]]:
    """Display data for the milestone stepper, derived from state only."""
    steps = []
    for key, label, short in STAGES:
        status = getattr(milestones, key)
        steps.append({
            "key": key,
            "label": label,
            "short": short,
            "status": status.value,
            "statusLabel": STATUS_LABELS[status],
            **STEPPER_STYLES[status],
        })
    return steps


def parse_milestone_fragment(fragment: str) -> Optional[Tuple[str, MilestoneStatus, MilestoneStatus]]:
    '''
    Read a stored milestone diff fragment, e.g. "FAT: Not Started -> Completed"
    or the boolean-era "FAT: Pending -> Done". The stored text is never rewritten.

    :return: (stage key, old status, new status) or None when not a milestone fragment
    '''
    match = _FRAGMENT_RE.match(fragment.strip())
    if not match:
        return None
    stage = match.group(1).lower()
    if stage not in STAGE_KEYS:
        return None
    old, new = _label_to_status(match.group(2)), _label_to_status(match.group(3))
    if old is None or new is None:
        return None
    return stage, old, new


def _label_to_status(label: str) -> Optional[MilestoneStatus]:
    label = label.strip()
    if label in LEGACY_LABELS:
        return LEGACY_LABELS[label]
    for status, text in STATUS_LABELS.items():
        if text == label:
            return status
    return None
