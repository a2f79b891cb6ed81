"""
Domain Models

Pure data structures representing gesture coaching concepts.
No external dependencies - just Python dataclasses and enums.
"""

from .pose import PoseLandmark, PoseFrame, BodyPart, landmark_at
from .analysis import (
    GestureType,
    AnalysisResult,
    CoachTip,
    SessionState,
    SessionSummary,
    SessionRecord,
    StoredStats,
)

__all__ = [
    "PoseLandmark",
    "PoseFrame",
    "BodyPart",
    "landmark_at",
    "GestureType",
    "AnalysisResult",
    "CoachTip",
    "SessionState",
    "SessionSummary",
    "SessionRecord",
    "StoredStats",
]
