"""
Pose Domain Models

Data structures for representing human body pose landmarks
produced by the landmark-detection runtime (MediaPipe BlazePose).

MediaPipe Pose returns 33 landmarks:
https://developers.google.com/mediapipe/solutions/vision/pose_landmarker
"""
import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Sequence


class BodyPart(IntEnum):
    """
    MediaPipe Pose landmark indices.

    These map directly to MediaPipe's 33-point pose model.
    Only the points used by gesture analysis are listed; the
    analyzer never needs more than the first 25.
    """
    # Face
    NOSE = 0
    LEFT_EYE = 2
    RIGHT_EYE = 5

    # Upper body
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16

    # Hands
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22

    # Lower body
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26


@dataclass(frozen=True)
class PoseLandmark:
    """
    A single body landmark with normalized coordinates and optional confidence.

    Attributes:
        x: Horizontal position (0.0 = left edge, 1.0 = right edge)
        y: Vertical position (0.0 = top edge, 1.0 = bottom edge)
        z: Depth (smaller = closer to camera), 0.0 when not supplied
        visibility: Confidence score (0.0 to 1.0), None when the runtime
            does not report one (treated as fully visible)

    Note:
        Coordinates are normalized to image dimensions.
        To get pixel coordinates: pixel_x = x * image_width
    """
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    @property
    def confidence(self) -> float:
        """Visibility with the 'not reported' case resolved to 1.0."""
        return 1.0 if self.visibility is None else self.visibility

    def is_visible(self, threshold: float = 0.3) -> bool:
        """
        Check if landmark is visible above confidence threshold.

        A point with a NaN or infinite coordinate is never visible.
        """
        return math.isfinite(self.x) and math.isfinite(self.y) and self.confidence > threshold


@dataclass
class PoseFrame:
    """
    A complete pose detection result for a single video frame.

    Attributes:
        landmarks: Indexed landmark collection (usually 33 entries)
        timestamp_ms: Capture timestamp in milliseconds
        frame_number: Sequential frame number
        confidence: Overall detection confidence
    """
    landmarks: Sequence[Optional[PoseLandmark]] = field(default_factory=list)
    timestamp_ms: int = 0
    frame_number: int = 0
    confidence: float = 0.0


def landmark_at(
    landmarks: Sequence[Optional[PoseLandmark]],
    body_part: BodyPart
) -> Optional[PoseLandmark]:
    """Index-safe lookup into a landmark collection of any length."""
    index = int(body_part)
    if 0 <= index < len(landmarks):
        return landmarks[index]
    return None
