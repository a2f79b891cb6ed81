"""
Services Layer

Business logic services for gesture coaching.
These services orchestrate domain models and external dependencies.

PoseDetector lives in `pose_detector` and is imported on demand, since it
needs the optional MediaPipe/OpenCV stack.
"""

from .gesture_analyzer import GestureAnalyzer, analyze_gesture, arm_quality
from .coach_tips import ALL_TIPS, select_coach_tips, get_tip
from .session_tracker import SessionTracker, TipDebouncer
from .session_store import (
    SessionStore,
    InMemorySessionStore,
    JsonFileSessionStore,
    format_time,
)

__all__ = [
    "GestureAnalyzer",
    "analyze_gesture",
    "arm_quality",
    "ALL_TIPS",
    "select_coach_tips",
    "get_tip",
    "SessionTracker",
    "TipDebouncer",
    "SessionStore",
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "format_time",
]
