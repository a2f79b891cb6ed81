"""
Tuning Constants

Every threshold and weight used by frame analysis and session scoring.
Changing a number here never requires touching algorithm code.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GestureThresholds:
    """Per-frame analysis constants (normalized image units unless noted)."""

    # Visibility gating
    body_visibility: float = 0.3
    eye_visibility: float = 0.5

    # Fallbacks for missing landmarks
    default_arm_angle: float = 90.0          # degrees
    default_shoulder_width: float = 0.3
    default_hip_y: float = 0.7
    default_shoulder_mid_y: float = 0.4
    default_shoulder_y: float = 0.35

    # Slouch: head drop
    head_drop_threshold: float = 0.45
    default_nose_above_shoulder: float = 0.5

    # Slouch: shoulder roll
    shoulder_roll_threshold: float = 4.5
    min_eye_width: float = 0.015
    default_shoulder_to_eye: float = 6.0

    # Power zone
    zone_in_score: float = 100.0
    zone_above_score: float = 65.0
    zone_below_score: float = 20.0
    zone_unknown_score: float = 60.0

    # Fidgeting / symmetry / pointing
    fidget_distance: float = 0.18
    extension_epsilon: float = 0.001
    pointing_ratio: float = 0.65
    pointing_reach: float = 0.6              # x shoulder width

    # Hands and posture
    openness_scale: float = 1000.0
    default_openness: float = 50.0
    posture_scale: float = 350.0

    # Arm quality parabola
    arm_peak_angle: float = 110.0            # degrees
    arm_width: float = 70.0                  # degrees

    # Impact composition
    weight_arm: float = 0.30
    weight_zone: float = 0.25
    weight_openness: float = 0.20
    weight_posture: float = 0.15
    weight_symmetry: float = 0.05
    spread_bonus: float = 15.0
    spread_bonus_cutoff: float = 0.9
    spread_ramp: float = 12.0
    fidget_penalty: float = 25.0
    slouch_penalty: float = 35.0

    # Classification cascade
    power_pose_spread: float = 1.1
    open_gesture_spread: float = 0.9
    straight_arm_angle: float = 120.0        # degrees
    steeple_distance: float = 0.16
    emphasis_impact: float = 45.0
    wide_stance_posture: float = 60.0


@dataclass(frozen=True)
class SessionTuning:
    """Temporal aggregation constants (seconds unless noted)."""

    throttle_interval: float = 0.3
    smoothing_samples: int = 12              # ~300 ms at 30 fps
    gesture_min_impact: float = 60.0

    streak_threshold: float = 80.0
    streak_min_seconds: float = 3.0

    good_posture_floor: float = 60.0
    good_posture_credit: float = 0.3

    celebration_threshold: float = 95.0
    celebration_min_elapsed: float = 5.0
    celebration_cooldown: float = 30.0

    min_tip_hold: float = 8.0
    smile_threshold: float = 0.35
    tick_interval: float = 1.0


DEFAULT_THRESHOLDS = GestureThresholds()
DEFAULT_TUNING = SessionTuning()
