"""
Tests for per-frame gesture analysis
"""

import pytest

from core.constants import DEFAULT_THRESHOLDS
from core.domain import BodyPart, GestureType, PoseLandmark
from core.services import GestureAnalyzer, analyze_gesture, arm_quality
from core.services.gesture_analyzer import GestureFeatures


def features(**overrides) -> GestureFeatures:
    values = dict(
        left_arm_up=False,
        right_arm_up=False,
        left_straight=False,
        right_straight=False,
        hand_spread=0.0,
        hands_close=False,
        hands_at_chest=False,
        is_asymmetric=False,
        hands_above_waist=True,
        posture_score=50.0,
        impact=30.0,
    )
    values.update(overrides)
    return GestureFeatures(**values)


class TestArmQuality:
    """Elbow angle scoring parabola."""

    def test_peak_at_natural_angle(self):
        assert arm_quality(110) == pytest.approx(100.0)

    def test_symmetric_falloff(self):
        assert arm_quality(75) == pytest.approx(arm_quality(145))
        assert arm_quality(75) == pytest.approx(75.0)

    def test_limp_arm_scores_below_bent_arm(self):
        assert arm_quality(40) < arm_quality(90)
        assert arm_quality(180) < arm_quality(110)

    def test_clamped_at_zero(self):
        """Test extreme angles bottom out instead of going negative"""
        assert arm_quality(0) == 0.0
        assert arm_quality(180) == 0.0


class TestKnownPoses:
    """Hand-built landmark sets classify as expected."""

    def test_power_pose(self, power_pose_landmarks):
        result = analyze_gesture(power_pose_landmarks)

        assert result.gesture == GestureType.POWER_POSE
        assert result.is_power_move
        assert result.impact == 90
        assert result.arm_angle_left == 143
        assert result.arm_angle_right == 143
        assert result.symmetry == 100
        assert result.hands_above_waist
        assert not result.fidgeting
        assert not result.is_slouching

    def test_slumped_rest(self, slumped_landmarks):
        result = analyze_gesture(slumped_landmarks)

        assert result.gesture == GestureType.REST
        assert result.is_slouching
        assert result.impact == 33
        assert result.nose_above_shoulder == pytest.approx(0.15)
        assert not result.is_power_move

    def test_relaxed_rest(self, relaxed_rest_landmarks):
        """Test hands hanging low without slouching scores as rest"""
        result = analyze_gesture(relaxed_rest_landmarks)

        assert result.gesture == GestureType.REST
        assert result.impact == 41
        assert result.arm_angle_left == 180
        assert result.arm_angle_right == 106
        assert result.symmetry == 98
        assert not result.hands_above_waist
        assert not result.is_slouching
        assert not result.is_power_move
        assert not result.fidgeting

    def test_upright_without_arms_is_emphasis(self, make_landmarks, upright_torso):
        """Test the same torso without the slouch penalty"""
        result = analyze_gesture(make_landmarks(upright_torso))

        assert not result.is_slouching
        assert result.impact == 68
        assert result.gesture == GestureType.EMPHASIS

    def test_steeple(self, steeple_landmarks):
        result = analyze_gesture(steeple_landmarks)

        assert result.gesture == GestureType.STEEPLE
        assert not result.is_power_move

    def test_pointing(self, pointing_landmarks):
        result = analyze_gesture(pointing_landmarks)

        assert result.gesture == GestureType.POINTING
        assert result.symmetry == 0


class TestSlouchDetection:
    """Head drop and shoulder roll are independent cues."""

    def test_head_drop_alone(self, slumped_landmarks):
        result = analyze_gesture(slumped_landmarks)
        assert result.is_slouching
        assert result.shoulder_to_eye_ratio > DEFAULT_THRESHOLDS.shoulder_roll_threshold

    def test_shoulder_roll_alone(self, make_landmarks, upright_torso):
        """Test narrow shoulders relative to the eyes flag slouching with the head up"""
        wide_eyes = {
            BodyPart.LEFT_EYE: (0.46, 0.13),
            BodyPart.RIGHT_EYE: (0.54, 0.13),
        }
        result = analyze_gesture(make_landmarks(upright_torso, wide_eyes))

        assert result.is_slouching
        assert result.nose_above_shoulder > DEFAULT_THRESHOLDS.head_drop_threshold
        assert result.shoulder_to_eye_ratio == pytest.approx(2.5)

    def test_slouch_penalty_applied(self, make_landmarks, upright_torso, slumped_landmarks):
        upright = analyze_gesture(make_landmarks(upright_torso))
        slumped = analyze_gesture(slumped_landmarks)
        assert upright.impact - slumped.impact == 35

    def test_hidden_eyes_disable_shoulder_roll(self, make_landmarks, upright_torso):
        landmarks = make_landmarks(upright_torso)
        landmarks[BodyPart.LEFT_EYE] = PoseLandmark(0.46, 0.13, visibility=0.4)
        result = analyze_gesture(landmarks)

        assert result.shoulder_to_eye_ratio == DEFAULT_THRESHOLDS.default_shoulder_to_eye
        assert not result.is_slouching


class TestFidgeting:
    """Hands near the face."""

    def test_hand_near_nose(self, make_landmarks, upright_torso):
        hand_at_face = {BodyPart.RIGHT_WRIST: (0.55, 0.18)}
        without = analyze_gesture(make_landmarks(upright_torso))
        result = analyze_gesture(make_landmarks(upright_torso, hand_at_face))

        assert result.fidgeting
        assert result.impact < without.impact


class TestRobustness:
    """Missing data never raises and never leaves the valid range."""

    def test_empty_landmarks(self):
        result = analyze_gesture([])
        assert 0 <= result.impact <= 100
        assert 0 <= result.symmetry <= 100
        assert result.arm_angle_left == 90
        assert not result.fidgeting

    def test_short_landmark_list(self, power_pose_landmarks):
        """Test a list without hips or hands is read as far as it goes"""
        result = analyze_gesture(power_pose_landmarks[:15])
        assert 0 <= result.impact <= 100

    def test_none_entries(self, power_pose_landmarks):
        landmarks = list(power_pose_landmarks)
        landmarks[BodyPart.NOSE] = None
        landmarks[BodyPart.LEFT_WRIST] = None
        result = analyze_gesture(landmarks)
        assert 0 <= result.impact <= 100

    def test_all_invisible(self, make_landmarks):
        result = analyze_gesture(make_landmarks())
        assert 0 <= result.impact <= 100
        assert result.shoulder_width == DEFAULT_THRESHOLDS.default_shoulder_width

    @pytest.mark.parametrize("part,point", [
        (BodyPart.LEFT_ELBOW, (float("nan"), 0.25)),
        (BodyPart.LEFT_WRIST, (float("inf"), 0.15)),
        (BodyPart.LEFT_SHOULDER, (0.4, float("-inf"))),
        (BodyPart.NOSE, (float("nan"), float("nan"))),
    ])
    def test_non_finite_coordinates(self, power_pose_landmarks, part, point):
        """Test a visible point with NaN or infinite coordinates counts as missing"""
        landmarks = list(power_pose_landmarks)
        landmarks[part] = PoseLandmark(*point, visibility=0.9)
        result = analyze_gesture(landmarks)

        assert 0 <= result.impact <= 100
        assert 0 <= result.symmetry <= 100
        assert 0 <= result.arm_angle_left <= 180

    def test_nan_elbow_falls_back_to_default_angle(self, power_pose_landmarks):
        landmarks = list(power_pose_landmarks)
        landmarks[BodyPart.LEFT_ELBOW] = PoseLandmark(float("nan"), 0.25, visibility=0.9)
        result = analyze_gesture(landmarks)

        assert result.arm_angle_left == 90
        assert result.arm_angle_right == 143

    def test_idempotent(self, power_pose_landmarks):
        analyzer = GestureAnalyzer()
        assert analyzer.analyze(power_pose_landmarks) == analyzer.analyze(power_pose_landmarks)


class TestClassificationOrder:
    """First matching rule wins."""

    @pytest.fixture
    def analyzer(self):
        return GestureAnalyzer()

    def test_power_pose_beats_open_gesture(self, analyzer):
        f = features(left_arm_up=True, right_arm_up=True, hand_spread=1.5)
        assert analyzer.classify(f) == GestureType.POWER_POSE

    def test_arms_up_but_narrow(self, analyzer):
        f = features(left_arm_up=True, right_arm_up=True, hand_spread=1.0)
        assert analyzer.classify(f) == GestureType.OPEN_GESTURE

    def test_straight_arms_are_open(self, analyzer):
        f = features(left_straight=True, right_straight=True)
        assert analyzer.classify(f) == GestureType.OPEN_GESTURE

    def test_open_beats_steeple(self, analyzer):
        f = features(hand_spread=1.0, hands_close=True, hands_at_chest=True)
        assert analyzer.classify(f) == GestureType.OPEN_GESTURE

    def test_steeple_beats_pointing(self, analyzer):
        f = features(hands_close=True, hands_at_chest=True, is_asymmetric=True)
        assert analyzer.classify(f) == GestureType.STEEPLE

    def test_pointing_beats_emphasis(self, analyzer):
        f = features(is_asymmetric=True, impact=80)
        assert analyzer.classify(f) == GestureType.POINTING

    def test_emphasis(self, analyzer):
        assert analyzer.classify(features(impact=46)) == GestureType.EMPHASIS

    def test_wide_stance_needs_hands_low(self, analyzer):
        low = features(posture_score=70, hands_above_waist=False)
        high = features(posture_score=70, hands_above_waist=True)
        assert analyzer.classify(low) == GestureType.WIDE_STANCE
        assert analyzer.classify(high) == GestureType.REST

    def test_default_rest(self, analyzer):
        assert analyzer.classify(features()) == GestureType.REST
