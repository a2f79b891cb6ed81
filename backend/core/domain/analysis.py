"""
Gesture Analysis Domain Models

Data structures for per-frame gesture analysis results, coaching tips,
live session state and the summary handed to storage when a session ends.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class GestureType(Enum):
    """
    Gesture categories recognised by the frame analyzer.

    Declaration order matches the classification cascade:
    - POWER_POSE: Both wrists raised above the shoulders, hands spread wide
    - OPEN_GESTURE: Wide hand spread or both arms extended
    - STEEPLE: Hands close together at chest height
    - POINTING: One arm clearly more extended than the other
    - EMPHASIS: Any other high-impact posture
    - WIDE_STANCE: Open shoulders with hands resting low
    - REST: Nothing notable
    """
    POWER_POSE = "power_pose"
    OPEN_GESTURE = "open_gesture"
    STEEPLE = "steeple"
    POINTING = "pointing"
    EMPHASIS = "emphasis"
    WIDE_STANCE = "wide_stance"
    REST = "rest"

    @property
    def is_power_move(self) -> bool:
        """Power moves are the categories counted as achievements."""
        return self in (GestureType.POWER_POSE, GestureType.OPEN_GESTURE)


@dataclass(frozen=True)
class AnalysisResult:
    """
    Everything derived from a single landmark set.

    Built fresh for every frame and never mutated.

    Attributes:
        gesture: Classified gesture category
        impact: Composite presentation quality, 0-100
        arm_angle_left / arm_angle_right: Elbow angles in degrees
        shoulder_width: Normalized horizontal shoulder span
        hands_above_waist: Both visible wrists above the hip line
        symmetry: Left/right arm extension balance, 0-100
        fidgeting: A wrist is close to the face
        is_power_move: Gesture is POWER_POSE or OPEN_GESTURE
        is_slouching: Head-drop or shoulder-roll detected
        nose_above_shoulder: Raw head-drop ratio (calibration aid)
        shoulder_to_eye_ratio: Raw shoulder-roll ratio (calibration aid)
    """
    gesture: GestureType
    impact: int
    arm_angle_left: int
    arm_angle_right: int
    shoulder_width: float
    hands_above_waist: bool
    symmetry: int
    fidgeting: bool
    is_power_move: bool
    is_slouching: bool
    nose_above_shoulder: float
    shoulder_to_eye_ratio: float


@dataclass(frozen=True)
class CoachTip:
    """
    A catalog entry of coaching advice.

    Attributes:
        id: Stable identifier
        text: Display text
        icon: Emoji shown next to the text
        priority: Lower is more urgent
    """
    id: str
    text: str
    icon: str
    priority: int


@dataclass
class SessionState:
    """
    Live session snapshot read by the UI.

    Counters and peak values never decrease within a session.
    """
    is_active: bool = False
    elapsed: int = 0                     # seconds
    gestures: int = 0                    # power-move transitions
    impact: int = 0                      # smoothed live value
    average_impact: int = 0
    peak_impact: int = 0
    streak: int = 0                      # seconds, current
    best_streak: int = 0                 # seconds
    gesture: GestureType = GestureType.REST
    tips: list[CoachTip] = field(default_factory=list)
    celebration: bool = False
    is_slouching: bool = False
    nose_above_shoulder: float = 0.5
    smile_count: int = 0
    slouch_count: int = 0
    good_posture_seconds: int = 0

    def copy(self) -> "SessionState":
        """Detached copy safe to hand to other components."""
        return replace(self, tips=list(self.tips))


@dataclass(frozen=True)
class SessionSummary:
    """Final numbers of a completed session, handed to storage."""
    duration: int
    gestures: int
    best_streak: int
    smile_count: int
    slouch_count: int
    good_posture_seconds: int
    peak_impact: int
    average_impact: int = 0

    @classmethod
    def from_state(cls, state: SessionState) -> "SessionSummary":
        return cls(
            duration=state.elapsed,
            gestures=state.gestures,
            best_streak=state.best_streak,
            smile_count=state.smile_count,
            slouch_count=state.slouch_count,
            good_posture_seconds=state.good_posture_seconds,
            peak_impact=state.peak_impact,
            average_impact=state.average_impact,
        )


@dataclass(frozen=True)
class SessionRecord:
    """A stored session summary with its identity."""
    id: str
    date: str
    summary: SessionSummary


@dataclass
class StoredStats:
    """Aggregate practice statistics across stored sessions."""
    total_gestures: int = 0
    total_sessions: int = 0
    best_streak: int = 0
    best_impact: int = 0
    total_time: int = 0                  # seconds
    sessions: list[SessionRecord] = field(default_factory=list)

    def latest(self) -> Optional[SessionRecord]:
        return self.sessions[-1] if self.sessions else None
