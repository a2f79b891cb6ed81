# config.py
import os
from typing import List

from pydantic import BaseModel

from core.constants import SessionTuning


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings(BaseModel):
    """
    Application settings - loads from environment variables with defaults
    """
    # Application
    app_name: str
    version: str
    host: str
    port: int
    log_level: str
    cors_origins: List[str]

    # Storage
    stats_path: str
    max_stored_sessions: int

    # Landmark detection (optional MediaPipe stack)
    pose_model_path: str
    face_model_path: str
    min_detection_confidence: float
    min_tracking_confidence: float

    # Session tuning overrides
    min_tip_hold_seconds: float
    celebration_cooldown_seconds: float
    smile_threshold: float

    def __init__(self, **data):
        # Load values from environment variables with defaults
        env_values = {
            "app_name": os.getenv("GESTUREFLOW_APP_NAME", "GestureFlow API"),
            "version": os.getenv("GESTUREFLOW_VERSION", "1.0.0"),
            "host": os.getenv("GESTUREFLOW_HOST", "0.0.0.0"),
            "port": int(os.getenv("GESTUREFLOW_PORT", "8000")),
            "log_level": os.getenv("GESTUREFLOW_LOG_LEVEL", "INFO"),
            "cors_origins": _env_list(
                "GESTUREFLOW_CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
            ),
            "stats_path": os.getenv("GESTUREFLOW_STATS_PATH", "data/gestureflow_stats.json"),
            "max_stored_sessions": int(os.getenv("GESTUREFLOW_MAX_STORED_SESSIONS", "20")),
            "pose_model_path": os.getenv("GESTUREFLOW_POSE_MODEL", "models/pose_landmarker_lite.task"),
            "face_model_path": os.getenv("GESTUREFLOW_FACE_MODEL", "models/face_landmarker.task"),
            "min_detection_confidence": float(os.getenv("GESTUREFLOW_MIN_DETECTION_CONFIDENCE", "0.5")),
            "min_tracking_confidence": float(os.getenv("GESTUREFLOW_MIN_TRACKING_CONFIDENCE", "0.5")),
            "min_tip_hold_seconds": float(os.getenv("GESTUREFLOW_MIN_TIP_HOLD", "8.0")),
            "celebration_cooldown_seconds": float(os.getenv("GESTUREFLOW_CELEBRATION_COOLDOWN", "30.0")),
            "smile_threshold": float(os.getenv("GESTUREFLOW_SMILE_THRESHOLD", "0.35")),
        }

        # Merge with any provided data (provided data takes precedence)
        merged_data = {**env_values, **data}
        super().__init__(**merged_data)

    def session_tuning(self) -> SessionTuning:
        """Session constants with the configurable overrides applied."""
        return SessionTuning(
            min_tip_hold=self.min_tip_hold_seconds,
            celebration_cooldown=self.celebration_cooldown_seconds,
            smile_threshold=self.smile_threshold,
        )

    class Config:
        validate_assignment = True


# Create settings instance
settings = Settings()
