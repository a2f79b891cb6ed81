"""
Pose API Schemas

Pydantic models for pose-related API requests and responses.
These define the JSON structure for communication with frontend.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum

from core.domain.pose import PoseLandmark


class LandmarkSchema(BaseModel):
    """
    Single body landmark.

    Coordinates are normalized (0.0 to 1.0) but may fall slightly outside
    that range for points the model places off-frame. NaN and infinity
    are rejected.
    """
    x: float = Field(..., allow_inf_nan=False, description="Horizontal position (0=left, 1=right)")
    y: float = Field(..., allow_inf_nan=False, description="Vertical position (0=top, 1=bottom)")
    z: Optional[float] = Field(None, allow_inf_nan=False, description="Depth (negative=closer to camera)")
    visibility: Optional[float] = Field(None, ge=0.0, le=1.0, description="Detection confidence")

    class Config:
        json_schema_extra = {
            "example": {
                "x": 0.45,
                "y": 0.32,
                "z": -0.15,
                "visibility": 0.95
            }
        }

    def to_domain(self) -> PoseLandmark:
        return PoseLandmark(x=self.x, y=self.y, z=self.z or 0.0, visibility=self.visibility)

    @classmethod
    def from_domain(cls, landmark: PoseLandmark) -> "LandmarkSchema":
        return cls(x=landmark.x, y=landmark.y, z=landmark.z, visibility=landmark.visibility)


class PoseDetectionRequest(BaseModel):
    """
    Request to detect and analyse the pose in a base64-encoded image.
    """
    image_base64: str = Field(..., min_length=1, description="Base64 encoded JPEG/PNG image")
    timestamp_ms: int = Field(0, ge=0, description="Optional timestamp")
    frame_number: int = Field(0, ge=0, description="Optional frame number")

    class Config:
        json_schema_extra = {
            "example": {
                "image_base64": "/9j/4AAQSkZJRg...",
                "timestamp_ms": 0,
                "frame_number": 0
            }
        }


# =============================================================================
# WebSocket Message Schemas
# =============================================================================

class WebSocketMessageType(str, Enum):
    """Types of WebSocket messages."""
    # Client -> Server
    START_SESSION = "start_session"    # Start new practice session
    LANDMARKS = "landmarks"            # Pre-detected landmarks for one frame
    FRAME = "frame"                    # Raw video frame for server-side detection
    END_SESSION = "end_session"        # End practice session

    # Server -> Client
    SESSION_STARTED = "session_started"
    SESSION_STATE = "session_state"    # Throttled session snapshot
    TICK = "tick"                      # Elapsed seconds, ~1 Hz
    SESSION_SUMMARY = "session_summary"
    SESSION_ENDED = "session_ended"
    ERROR = "error"                    # Error message


class WebSocketMessage(BaseModel):
    """
    Base WebSocket message structure.

    All WebSocket communication uses this format.
    """
    type: WebSocketMessageType = Field(..., description="Message type")
    data: dict = Field(default_factory=dict, description="Message payload")
    timestamp: int = Field(0, description="Unix timestamp in milliseconds")

    class Config:
        json_schema_extra = {
            "example": {
                "type": "landmarks",
                "data": {"landmarks": [], "smile_score": 0.6},
                "timestamp": 1704067200000
            }
        }


class LandmarksMessage(BaseModel):
    """
    Landmarks detected client-side for one frame.

    smile_score comes from the client's face model; omit it when
    no face signal is available.
    """
    landmarks: List[LandmarkSchema] = Field(default_factory=list, description="Landmark set")
    smile_score: Optional[float] = Field(None, description="Smile score 0-1")
    is_smiling: Optional[bool] = Field(None, description="Pre-thresholded smile flag")


class FrameMessage(BaseModel):
    """
    WebSocket message containing a video frame.

    Sent from frontend to backend for server-side pose detection.
    """
    image_base64: str = Field(..., description="Base64 encoded frame")
    frame_number: int = Field(0, description="Frame sequence number")
    smile_score: Optional[float] = Field(None, description="Smile score 0-1 if known")
