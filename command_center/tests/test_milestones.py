import pytest

from command_center.core.milestones import (
    advance,
    advance_stage,
    is_punch_list_unlocked,
    normalize_milestones,
    normalize_status,
    parse_milestone_fragment,
    status_label,
    stepper,
)
from command_center.db.enums import MilestoneStatus
from command_center.schemas.project import Milestones


class TestCycle:
    """One click = one step, wrapping back to not_started."""

    def test_cycle_order(self):
        assert advance(MilestoneStatus.NOT_STARTED) == MilestoneStatus.STARTED
        assert advance(MilestoneStatus.STARTED) == MilestoneStatus.STUCK
        assert advance(MilestoneStatus.STUCK) == MilestoneStatus.COMPLETED
        assert advance(MilestoneStatus.COMPLETED) == MilestoneStatus.NOT_STARTED

    def test_four_clicks_return_to_start(self):
        status = MilestoneStatus.STUCK
        for _ in range(4):
            status = advance(status)
        assert status == MilestoneStatus.STUCK

    def test_advance_stage_touches_one_stage(self):
        milestones = Milestones(design=MilestoneStatus.COMPLETED)
        result = advance_stage(milestones, "fat")

        assert result.fat == MilestoneStatus.STARTED
        assert result.design == MilestoneStatus.COMPLETED
        assert milestones.fat == MilestoneStatus.NOT_STARTED

    def test_advance_unknown_stage(self):
        with pytest.raises(ValueError):
            advance_stage(Milestones(), "install")


class TestNormalize:

    def test_legacy_booleans(self):
        milestones = normalize_milestones({"design": True, "mat": False, "fab": True})
        assert milestones.design == MilestoneStatus.COMPLETED
        assert milestones.mat == MilestoneStatus.NOT_STARTED
        assert milestones.fab == MilestoneStatus.COMPLETED
        assert milestones.ship == MilestoneStatus.NOT_STARTED

    def test_missing_mapping(self):
        assert normalize_milestones(None) == Milestones()

    def test_unknown_value_is_not_started(self):
        assert normalize_status("halfway") == MilestoneStatus.NOT_STARTED

    def test_status_strings_pass_through(self):
        assert normalize_status("stuck") == MilestoneStatus.STUCK
        assert normalize_status(" Completed ") == MilestoneStatus.COMPLETED

    def test_extra_keys_dropped(self):
        milestones = normalize_milestones({"fat": "completed", "install": True})
        assert milestones.fat == MilestoneStatus.COMPLETED
        assert not hasattr(milestones, "install")


class TestDisplay:

    def test_punch_list_unlock(self):
        assert is_punch_list_unlocked(Milestones(fat=MilestoneStatus.COMPLETED))
        assert not is_punch_list_unlocked(Milestones(fat=MilestoneStatus.STUCK))
        assert not is_punch_list_unlocked(
            Milestones(ship=MilestoneStatus.COMPLETED, fab=MilestoneStatus.COMPLETED)
        )

    def test_stepper_is_derived_from_state(self):
        steps = stepper(Milestones(fab=MilestoneStatus.STUCK))

        assert [s["key"] for s in steps] == ["design", "mat", "fab", "fat", "ship"]
        assert steps[2]["short"] == "FAB"
        assert steps[2]["status"] == "stuck"
        assert steps[2]["statusLabel"] == "Stuck"
        assert steps[2]["color"] == "red"
        assert steps[0]["color"] == "slate"

    def test_labels(self):
        assert status_label(MilestoneStatus.NOT_STARTED) == "Not Started"
        assert status_label(MilestoneStatus.COMPLETED) == "Completed"


class TestFragments:

    def test_four_state_fragment(self):
        assert parse_milestone_fragment("FAT: Not Started -> Completed") == (
            "fat", MilestoneStatus.NOT_STARTED, MilestoneStatus.COMPLETED,
        )

    def test_boolean_era_fragment(self):
        assert parse_milestone_fragment("DESIGN: Pending -> Done") == (
            "design", MilestoneStatus.NOT_STARTED, MilestoneStatus.COMPLETED,
        )

    def test_other_text(self):
        assert parse_milestone_fragment('Status: "Active" -> "Late"') is None
        assert parse_milestone_fragment("INSTALL: Pending -> Done") is None


def test_legacy_booleans_accepted_by_model():
    milestones = Milestones.model_validate({"fat": True, "ship": False, "fab": "stuck"})
    assert milestones.fat == MilestoneStatus.COMPLETED
    assert milestones.ship == MilestoneStatus.NOT_STARTED
    assert milestones.fab == MilestoneStatus.STUCK

    with pytest.raises(ValueError):
        Milestones.model_validate({"fat": "halfway"})
