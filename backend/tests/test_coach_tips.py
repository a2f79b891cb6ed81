"""
Tests for coaching tip selection
"""

from dataclasses import replace

import pytest

from core.domain import AnalysisResult, GestureType
from core.services import ALL_TIPS, get_tip, select_coach_tips


@pytest.fixture
def neutral_result():
    """A result that fires no tip rule."""
    return AnalysisResult(
        gesture=GestureType.EMPHASIS,
        impact=60,
        arm_angle_left=120,
        arm_angle_right=120,
        shoulder_width=0.2,
        hands_above_waist=True,
        symmetry=90,
        fidgeting=False,
        is_power_move=False,
        is_slouching=False,
        nose_above_shoulder=0.8,
        shoulder_to_eye_ratio=6.5,
    )


def ids(tips):
    return [tip.id for tip in tips]


class TestCatalog:
    """The fixed tip catalog."""

    def test_catalog_size_and_unique_ids(self):
        assert len(ALL_TIPS) == 16
        assert len({tip.id for tip in ALL_TIPS}) == 16

    def test_get_tip(self):
        assert get_tip("slouching").priority == 1
        assert get_tip("does-not-exist") is None


class TestSelectCoachTips:
    """Rule evaluation, padding and ordering."""

    def test_always_two_tips(self, neutral_result):
        """Test padding from the catalog in declaration order"""
        assert ids(select_coach_tips(neutral_result, elapsed=0)) == ["open-palms", "raise-hands"]

    def test_slouch_tip_first(self, neutral_result):
        result = replace(neutral_result, is_slouching=True, fidgeting=True)
        tips = select_coach_tips(result, elapsed=0)
        assert ids(tips) == ["slouching", "no-face-touch"]

    def test_priority_sort(self, neutral_result):
        """Test the lower priority number wins even when its rule fires later"""
        result = replace(
            neutral_result,
            hands_above_waist=False,
            gesture=GestureType.POWER_POSE,
            impact=80,
        )
        tips = select_coach_tips(result, elapsed=0)
        assert ids(tips) == ["power-pose", "above-waist"]

    def test_extend_arms_needs_both_arms_short(self, neutral_result):
        one_arm = replace(neutral_result, arm_angle_left=80)
        both_arms = replace(neutral_result, arm_angle_left=80, arm_angle_right=95)
        assert "extend-arms" not in ids(select_coach_tips(one_arm, elapsed=0))
        assert "extend-arms" in ids(select_coach_tips(both_arms, elapsed=0))

    def test_raise_hands_after_idle_period(self, neutral_result):
        resting = replace(neutral_result, gesture=GestureType.REST)
        assert "raise-hands" in ids(select_coach_tips(resting, elapsed=6))
        # Only the padding can add it early, and padding comes after open-palms
        early = select_coach_tips(replace(resting, symmetry=40), elapsed=3)
        assert ids(early) == ["open-palms", "symmetry"]

    def test_smile_tip_after_warm_up(self, neutral_result):
        later = select_coach_tips(neutral_result, elapsed=9, is_smiling=False)
        early = select_coach_tips(neutral_result, elapsed=7, is_smiling=False)
        assert "smile" in ids(later)
        assert "smile" not in ids(early)

    def test_steeple_tip(self, neutral_result):
        result = replace(neutral_result, gesture=GestureType.STEEPLE)
        assert "steeple" in ids(select_coach_tips(result, elapsed=0))

    def test_at_most_two(self, neutral_result):
        result = replace(
            neutral_result,
            is_slouching=True,
            fidgeting=True,
            hands_above_waist=False,
            symmetry=10,
        )
        assert len(select_coach_tips(result, elapsed=20, is_smiling=False)) == 2
