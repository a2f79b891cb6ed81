"""
Gesture Analyzer Service

Turns one landmark set into one AnalysisResult: arm angles, posture and
slouch signals, the 0-100 impact score and a gesture classification.

The analyzer is stateless. Missing or low-confidence landmarks fall back
to conservative constants so every result stays in range; it never raises
on geometry.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ..constants import GestureThresholds, DEFAULT_THRESHOLDS
from ..domain.pose import PoseLandmark, BodyPart, landmark_at
from ..domain.analysis import AnalysisResult, GestureType
from .geometry import calculate_angle, distance_2d, clamp, is_visible, round_half_up

logger = logging.getLogger(__name__)


def arm_quality(angle: float, thresholds: GestureThresholds = DEFAULT_THRESHOLDS) -> float:
    """
    Score an elbow angle on an inverted parabola.

    Peaks at 100 for 110 degrees (natural presenting range), falls off
    quadratically for limp (<60) and locked-out (>155) arms.
    """
    delta = (angle - thresholds.arm_peak_angle) / thresholds.arm_width
    return clamp(100 - delta * delta * 100)


@dataclass(frozen=True)
class GestureFeatures:
    """Intermediate signals consumed by the classification cascade."""
    left_arm_up: bool
    right_arm_up: bool
    left_straight: bool
    right_straight: bool
    hand_spread: float
    hands_close: bool
    hands_at_chest: bool
    is_asymmetric: bool
    hands_above_waist: bool
    posture_score: float
    impact: float


Rule = Tuple[Callable[[GestureFeatures], bool], GestureType]


def build_classification_rules(t: GestureThresholds) -> Tuple[Rule, ...]:
    """
    Ordered (predicate, gesture) pairs. First match wins.

    Later rules are only reachable when all earlier ones fail, so the
    order is the priority.
    """
    return (
        (lambda f: f.left_arm_up and f.right_arm_up and f.hand_spread > t.power_pose_spread,
         GestureType.POWER_POSE),
        (lambda f: f.hand_spread > t.open_gesture_spread or (f.left_straight and f.right_straight),
         GestureType.OPEN_GESTURE),
        (lambda f: f.hands_close and f.hands_at_chest,
         GestureType.STEEPLE),
        (lambda f: f.is_asymmetric,
         GestureType.POINTING),
        (lambda f: f.impact > t.emphasis_impact,
         GestureType.EMPHASIS),
        (lambda f: f.posture_score > t.wide_stance_posture and not f.hands_above_waist,
         GestureType.WIDE_STANCE),
    )


class GestureAnalyzer:
    """
    Analyzes presenter body language from pose landmarks.

    Usage:
        analyzer = GestureAnalyzer()
        result = analyzer.analyze(landmarks)
        print(result.gesture, result.impact)
    """

    def __init__(self, thresholds: GestureThresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds
        self.rules = build_classification_rules(thresholds)

    # -------------------------------------------------------------------------
    # Main Analysis Method
    # -------------------------------------------------------------------------

    def analyze(self, landmarks: Sequence[Optional[PoseLandmark]]) -> AnalysisResult:
        """
        Analyze a single landmark set.

        Args:
            landmarks: Indexed landmarks (BlazePose order). Shorter
                collections are fine; absent entries count as invisible.

        Returns:
            AnalysisResult with every value in range
        """
        t = self.thresholds

        def get(part: BodyPart) -> Optional[PoseLandmark]:
            return landmark_at(landmarks, part)

        nose = get(BodyPart.NOSE)
        l_eye, r_eye = get(BodyPart.LEFT_EYE), get(BodyPart.RIGHT_EYE)
        l_sh, r_sh = get(BodyPart.LEFT_SHOULDER), get(BodyPart.RIGHT_SHOULDER)
        l_el, r_el = get(BodyPart.LEFT_ELBOW), get(BodyPart.RIGHT_ELBOW)
        l_wr, r_wr = get(BodyPart.LEFT_WRIST), get(BodyPart.RIGHT_WRIST)
        l_hip, r_hip = get(BodyPart.LEFT_HIP), get(BodyPart.RIGHT_HIP)
        l_idx, r_idx = get(BodyPart.LEFT_INDEX), get(BodyPart.RIGHT_INDEX)
        l_th, r_th = get(BodyPart.LEFT_THUMB), get(BodyPart.RIGHT_THUMB)

        vis = lambda lm: is_visible(lm, t.body_visibility)
        shoulders_visible = vis(l_sh) and vis(r_sh)
        hips_visible = vis(l_hip) and vis(r_hip)
        l_wr_visible, r_wr_visible = vis(l_wr), vis(r_wr)

        if not shoulders_visible:
            logger.debug("Shoulders not visible, using fallback geometry")

        # Arm extension angles (shoulder -> elbow -> wrist)
        left_arm_angle = self._arm_angle(l_sh, l_el, l_wr)
        right_arm_angle = self._arm_angle(r_sh, r_el, r_wr)

        # Shoulder width and hand spread, both relative to frame width
        shoulder_width = abs(r_sh.x - l_sh.x) if shoulders_visible else t.default_shoulder_width
        wrist_span = abs(r_wr.x - l_wr.x) if l_wr_visible and r_wr_visible else 0.0
        hand_spread = wrist_span / shoulder_width if shoulder_width > 0 else 0.0

        # Hands above waist (an invisible wrist does not count against it)
        hip_y = (l_hip.y + r_hip.y) / 2 if hips_visible else t.default_hip_y
        hands_above_waist = (
            (not l_wr_visible or l_wr.y < hip_y)
            and (not r_wr_visible or r_wr.y < hip_y)
        )

        # Slouching: head drop OR shoulder roll
        nose_above_shoulder, shoulder_to_eye_ratio, is_slouching = self._slouch_signals(
            nose, l_eye, r_eye, l_sh, r_sh, shoulder_width
        )

        # Power zone: hands between shoulders and hips score highest
        shoulder_y = (l_sh.y + r_sh.y) / 2 if shoulders_visible else t.default_shoulder_y
        power_zone_score = (
            self._zone_score(l_wr, l_wr_visible, shoulder_y, hip_y)
            + self._zone_score(r_wr, r_wr_visible, shoulder_y, hip_y)
        ) / 2

        # Hands near face
        fidgeting = bool(nose is not None and (
            (l_wr_visible and distance_2d(l_wr, nose) < t.fidget_distance)
            or (r_wr_visible and distance_2d(r_wr, nose) < t.fidget_distance)
        ))

        # Symmetry of arm extension (shoulder-to-wrist reach)
        left_extend = distance_2d(l_sh, l_wr) if vis(l_sh) and l_wr_visible else 0.0
        right_extend = distance_2d(r_sh, r_wr) if vis(r_sh) and r_wr_visible else 0.0
        max_ext = max(left_extend, right_extend, t.extension_epsilon)
        symmetry = clamp(100 - abs(left_extend - right_extend) / max_ext * 100)

        ext_ratio = min(left_extend, right_extend) / max_ext
        is_asymmetric = ext_ratio < t.pointing_ratio and max_ext > shoulder_width * t.pointing_reach

        # Hand openness (thumb-index spread)
        hand_openness = (self._openness(l_idx, l_th) + self._openness(r_idx, r_th)) / 2

        posture_score = clamp(shoulder_width * t.posture_scale)
        arm_score = (arm_quality(left_arm_angle, t) + arm_quality(right_arm_angle, t)) / 2

        # Impact: weighted sum, then penalties, then clamp
        spread_bonus = (
            t.spread_bonus if hand_spread > t.spread_bonus_cutoff
            else hand_spread * t.spread_ramp
        )
        impact = (
            arm_score * t.weight_arm
            + power_zone_score * t.weight_zone
            + hand_openness * t.weight_openness
            + posture_score * t.weight_posture
            + symmetry * t.weight_symmetry
            + spread_bonus
        )
        if fidgeting:
            impact -= t.fidget_penalty
        if is_slouching:
            impact -= t.slouch_penalty
        impact = clamp(impact)

        features = GestureFeatures(
            left_arm_up=l_wr_visible and l_sh is not None and l_wr.y < l_sh.y,
            right_arm_up=r_wr_visible and r_sh is not None and r_wr.y < r_sh.y,
            left_straight=left_arm_angle > t.straight_arm_angle,
            right_straight=right_arm_angle > t.straight_arm_angle,
            hand_spread=hand_spread,
            hands_close=(
                l_wr_visible and r_wr_visible
                and distance_2d(l_wr, r_wr) < t.steeple_distance
            ),
            hands_at_chest=(
                l_wr_visible and r_wr_visible
                and self._between(l_wr.y, l_sh, l_hip)
                and self._between(r_wr.y, r_sh, r_hip)
            ),
            is_asymmetric=is_asymmetric,
            hands_above_waist=hands_above_waist,
            posture_score=posture_score,
            impact=impact,
        )
        gesture = self.classify(features)

        return AnalysisResult(
            gesture=gesture,
            impact=round_half_up(impact),
            arm_angle_left=round_half_up(left_arm_angle),
            arm_angle_right=round_half_up(right_arm_angle),
            shoulder_width=shoulder_width,
            hands_above_waist=hands_above_waist,
            symmetry=round_half_up(symmetry),
            fidgeting=fidgeting,
            is_power_move=gesture.is_power_move,
            is_slouching=is_slouching,
            nose_above_shoulder=round_half_up(nose_above_shoulder * 100) / 100,
            shoulder_to_eye_ratio=round_half_up(shoulder_to_eye_ratio * 10) / 10,
        )

    def classify(self, features: GestureFeatures) -> GestureType:
        """Walk the rule cascade top-down; REST when nothing matches."""
        for predicate, gesture in self.rules:
            if predicate(features):
                return gesture
        return GestureType.REST

    # -------------------------------------------------------------------------
    # Feature Helpers
    # -------------------------------------------------------------------------

    def _arm_angle(
        self,
        shoulder: Optional[PoseLandmark],
        elbow: Optional[PoseLandmark],
        wrist: Optional[PoseLandmark],
    ) -> float:
        t = self.thresholds
        if all(is_visible(lm, t.body_visibility) for lm in (shoulder, elbow, wrist)):
            return calculate_angle(shoulder, elbow, wrist)
        return t.default_arm_angle

    def _slouch_signals(
        self,
        nose: Optional[PoseLandmark],
        l_eye: Optional[PoseLandmark],
        r_eye: Optional[PoseLandmark],
        l_sh: Optional[PoseLandmark],
        r_sh: Optional[PoseLandmark],
        shoulder_width: float,
    ) -> Tuple[float, float, bool]:
        """
        Two camera-distance-invariant slouch cues.

        Head drop: (shoulder mid Y - nose Y) / shoulder width. The nose
        sinks towards the shoulder line when the head drops forward.

        Shoulder roll: shoulder width / inter-ocular distance. Rolled
        shoulders narrow in the image while eye spacing stays put; both
        scale the same way with distance. Upright is roughly 6-7x.

        Either cue alone flags slouching.

        Returns:
            (nose_above_shoulder, shoulder_to_eye_ratio, is_slouching)
        """
        t = self.thresholds
        shoulders_visible = (
            is_visible(l_sh, t.body_visibility) and is_visible(r_sh, t.body_visibility)
        )

        shoulder_mid_y = (l_sh.y + r_sh.y) / 2 if shoulders_visible else t.default_shoulder_mid_y
        if is_visible(nose, t.body_visibility) and shoulders_visible and shoulder_width > 0:
            nose_above_shoulder = (shoulder_mid_y - nose.y) / shoulder_width
        else:
            nose_above_shoulder = t.default_nose_above_shoulder
        is_head_down = nose_above_shoulder < t.head_drop_threshold

        if is_visible(l_eye, t.eye_visibility) and is_visible(r_eye, t.eye_visibility):
            eye_width = abs(r_eye.x - l_eye.x)
        else:
            eye_width = 0.0
        eyes_usable = eye_width > t.min_eye_width
        shoulder_to_eye_ratio = (
            shoulder_width / eye_width if eyes_usable else t.default_shoulder_to_eye
        )
        is_shoulder_rolled = eyes_usable and shoulder_to_eye_ratio < t.shoulder_roll_threshold

        return nose_above_shoulder, shoulder_to_eye_ratio, is_head_down or is_shoulder_rolled

    def _zone_score(
        self,
        wrist: Optional[PoseLandmark],
        visible: bool,
        shoulder_y: float,
        hip_y: float,
    ) -> float:
        t = self.thresholds
        if not visible:
            return t.zone_unknown_score
        if shoulder_y < wrist.y < hip_y:
            return t.zone_in_score
        if wrist.y <= shoulder_y:
            return t.zone_above_score
        return t.zone_below_score

    def _openness(self, index: Optional[PoseLandmark], thumb: Optional[PoseLandmark]) -> float:
        t = self.thresholds
        if is_visible(index, t.body_visibility) and is_visible(thumb, t.body_visibility):
            return clamp(distance_2d(index, thumb) * t.openness_scale)
        return t.default_openness

    @staticmethod
    def _between(y: float, upper: Optional[PoseLandmark], lower: Optional[PoseLandmark]) -> bool:
        """y lies below `upper` and above `lower` (missing bounds are the frame edges)."""
        top = upper.y if upper is not None else 0.0
        bottom = lower.y if lower is not None else 1.0
        return top < y < bottom


# =============================================================================
# Convenience function for quick usage
# =============================================================================

_default_analyzer = GestureAnalyzer()


def analyze_gesture(landmarks: Sequence[Optional[PoseLandmark]]) -> AnalysisResult:
    """
    Analyze a landmark set with the default thresholds.

    Usage:
        result = analyze_gesture(frame.landmarks)
        if result.is_slouching:
            print("Sit up straight!")
    """
    return _default_analyzer.analyze(landmarks)
