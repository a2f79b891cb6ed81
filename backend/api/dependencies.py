"""
Shared API Dependencies

Factories for the session store and the optional landmark detectors,
shared by REST routes and the WebSocket handler.
"""

import logging
from functools import lru_cache
from typing import Optional

from config import settings
from core.services import SessionStore, JsonFileSessionStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    """Process-wide session store (JSON stats file from settings)."""
    return JsonFileSessionStore(settings.stats_path, max_sessions=settings.max_stored_sessions)


def create_pose_detector():
    """
    Build a server-side pose detector.

    Raises:
        ImportError: MediaPipe/OpenCV are not installed
        FileNotFoundError: The pose model bundle is missing
    """
    from core.services.pose_detector import PoseDetector

    return PoseDetector(
        settings.pose_model_path,
        min_detection_confidence=settings.min_detection_confidence,
        min_tracking_confidence=settings.min_tracking_confidence,
    )


def create_smile_detector():
    """Face smile detector, or None when the face model is unavailable."""
    try:
        from core.services.pose_detector import FaceSmileDetector

        return FaceSmileDetector(
            settings.face_model_path,
            min_detection_confidence=settings.min_detection_confidence,
        )
    except (ImportError, FileNotFoundError) as e:
        logger.info(f"Smile detection disabled: {e}")
        return None


def detector_available() -> bool:
    """Check whether server-side pose detection can be used."""
    try:
        with create_pose_detector():
            return True
    except Exception as e:
        logger.warning(f"Pose detector not available: {e}")
        return False


def read_smile(smile_detector, image) -> Optional[float]:
    """Smile score from an image, None if there is no detector or face."""
    if smile_detector is None:
        return None
    return smile_detector.detect_smile(image)
