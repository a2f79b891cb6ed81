"""
Analysis API Schemas

Pydantic models for gesture analysis and session API responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum

from core.domain.analysis import (
    AnalysisResult,
    CoachTip,
    SessionRecord,
    SessionState,
    SessionSummary,
    StoredStats,
)
from .pose import LandmarkSchema


class GestureEnum(str, Enum):
    """Gesture categories for API."""
    POWER_POSE = "power_pose"
    OPEN_GESTURE = "open_gesture"
    STEEPLE = "steeple"
    POINTING = "pointing"
    EMPHASIS = "emphasis"
    WIDE_STANCE = "wide_stance"
    REST = "rest"


class CoachTipSchema(BaseModel):
    """
    Actionable coaching advice.
    """
    id: str = Field(..., description="Tip identifier")
    text: str = Field(..., description="Display text")
    icon: str = Field(..., description="Emoji icon")
    priority: int = Field(..., ge=1, description="Priority (1=most urgent)")

    @classmethod
    def from_domain(cls, tip: CoachTip) -> "CoachTipSchema":
        return cls(id=tip.id, text=tip.text, icon=tip.icon, priority=tip.priority)


class AnalysisResultSchema(BaseModel):
    """
    Per-frame gesture analysis.
    """
    gesture: GestureEnum = Field(..., description="Classified gesture")
    impact: int = Field(..., ge=0, le=100, description="Impact score")
    arm_angle_left: int = Field(..., description="Left elbow angle (degrees)")
    arm_angle_right: int = Field(..., description="Right elbow angle (degrees)")
    shoulder_width: float = Field(..., description="Normalized shoulder span")
    hands_above_waist: bool
    symmetry: int = Field(..., ge=0, le=100, description="Arm extension balance")
    fidgeting: bool
    is_power_move: bool
    is_slouching: bool
    nose_above_shoulder: float = Field(..., description="Head-drop ratio (calibration)")
    shoulder_to_eye_ratio: float = Field(..., description="Shoulder-roll ratio (calibration)")

    class Config:
        json_schema_extra = {
            "example": {
                "gesture": "open_gesture",
                "impact": 72,
                "arm_angle_left": 135,
                "arm_angle_right": 128,
                "shoulder_width": 0.22,
                "hands_above_waist": True,
                "symmetry": 91,
                "fidgeting": False,
                "is_power_move": True,
                "is_slouching": False,
                "nose_above_shoulder": 0.82,
                "shoulder_to_eye_ratio": 6.4
            }
        }

    @classmethod
    def from_domain(cls, result: AnalysisResult) -> "AnalysisResultSchema":
        return cls(
            gesture=GestureEnum(result.gesture.value),
            impact=result.impact,
            arm_angle_left=result.arm_angle_left,
            arm_angle_right=result.arm_angle_right,
            shoulder_width=result.shoulder_width,
            hands_above_waist=result.hands_above_waist,
            symmetry=result.symmetry,
            fidgeting=result.fidgeting,
            is_power_move=result.is_power_move,
            is_slouching=result.is_slouching,
            nose_above_shoulder=result.nose_above_shoulder,
            shoulder_to_eye_ratio=result.shoulder_to_eye_ratio,
        )


class AnalyzeLandmarksRequest(BaseModel):
    """
    Request to analyse one pre-detected landmark set.
    """
    landmarks: List[LandmarkSchema] = Field(..., min_length=1, description="Landmark set")
    elapsed_seconds: float = Field(0.0, ge=0.0, description="Session time, used for tip rules")
    smile_score: Optional[float] = Field(None, ge=0.0, le=1.0, description="Smile score 0-1")


class AnalyzeResponse(BaseModel):
    """
    Analysis plus the tips it selects.
    """
    analysis: AnalysisResultSchema
    tips: List[CoachTipSchema] = Field(default_factory=list)
    landmarks: Optional[List[LandmarkSchema]] = Field(None, description="Detected landmarks (image requests only)")
    processing_time_ms: float = Field(0.0, description="Time taken to process in milliseconds")


class SessionStateSchema(BaseModel):
    """
    Live session snapshot sent to the UI.
    """
    is_active: bool
    elapsed: int = Field(..., ge=0, description="Seconds since start")
    gestures: int = Field(..., ge=0, description="Power-move count")
    impact: int = Field(..., ge=0, le=100, description="Smoothed live impact")
    average_impact: int
    peak_impact: int
    streak: int
    best_streak: int
    gesture: GestureEnum
    tips: List[CoachTipSchema] = Field(default_factory=list)
    celebration: bool
    is_slouching: bool
    nose_above_shoulder: float
    smile_count: int
    slouch_count: int
    good_posture_seconds: int

    @classmethod
    def from_domain(cls, state: SessionState) -> "SessionStateSchema":
        return cls(
            is_active=state.is_active,
            elapsed=state.elapsed,
            gestures=state.gestures,
            impact=state.impact,
            average_impact=state.average_impact,
            peak_impact=state.peak_impact,
            streak=state.streak,
            best_streak=state.best_streak,
            gesture=GestureEnum(state.gesture.value),
            tips=[CoachTipSchema.from_domain(t) for t in state.tips],
            celebration=state.celebration,
            is_slouching=state.is_slouching,
            nose_above_shoulder=state.nose_above_shoulder,
            smile_count=state.smile_count,
            slouch_count=state.slouch_count,
            good_posture_seconds=state.good_posture_seconds,
        )


class SessionSummarySchema(BaseModel):
    """
    Final numbers of a completed session.
    """
    duration: int = Field(..., description="Seconds")
    gestures: int
    best_streak: int
    smile_count: int
    slouch_count: int
    good_posture_seconds: int
    peak_impact: int
    average_impact: int = 0

    @classmethod
    def from_domain(cls, summary: SessionSummary) -> "SessionSummarySchema":
        return cls(**vars(summary))


class SessionRecordSchema(BaseModel):
    """
    A stored session.
    """
    id: str
    date: str = Field(..., description="ISO 8601 timestamp")
    summary: SessionSummarySchema

    @classmethod
    def from_domain(cls, record: SessionRecord) -> "SessionRecordSchema":
        return cls(
            id=record.id,
            date=record.date,
            summary=SessionSummarySchema.from_domain(record.summary),
        )


class StatsResponse(BaseModel):
    """
    Aggregate practice statistics.
    """
    total_gestures: int
    total_sessions: int
    best_streak: int
    best_impact: int
    total_time: int = Field(..., description="Seconds")
    total_time_display: str = Field(..., description="Total time as m:ss")

    @classmethod
    def from_domain(cls, stats: StoredStats, total_time_display: str) -> "StatsResponse":
        return cls(
            total_gestures=stats.total_gestures,
            total_sessions=stats.total_sessions,
            best_streak=stats.best_streak,
            best_impact=stats.best_impact,
            total_time=stats.total_time,
            total_time_display=total_time_display,
        )


class HealthResponse(BaseModel):
    """
    Health check response.
    """
    status: str = Field("healthy", description="Service status")
    version: str = Field(..., description="API version")
    detector_available: bool = Field(..., description="Whether server-side pose detection works")
