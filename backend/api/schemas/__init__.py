"""
API Schemas

Pydantic models for request/response validation.
"""

from .pose import (
    LandmarkSchema,
    PoseDetectionRequest,
    WebSocketMessageType,
    WebSocketMessage,
    LandmarksMessage,
    FrameMessage,
)

from .analysis import (
    GestureEnum,
    CoachTipSchema,
    AnalysisResultSchema,
    AnalyzeLandmarksRequest,
    AnalyzeResponse,
    SessionStateSchema,
    SessionSummarySchema,
    SessionRecordSchema,
    StatsResponse,
    HealthResponse,
)

__all__ = [
    # Pose schemas
    "LandmarkSchema",
    "PoseDetectionRequest",
    "WebSocketMessageType",
    "WebSocketMessage",
    "LandmarksMessage",
    "FrameMessage",
    # Analysis schemas
    "GestureEnum",
    "CoachTipSchema",
    "AnalysisResultSchema",
    "AnalyzeLandmarksRequest",
    "AnalyzeResponse",
    "SessionStateSchema",
    "SessionSummarySchema",
    "SessionRecordSchema",
    "StatsResponse",
    "HealthResponse",
]
