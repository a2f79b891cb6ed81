"""
Pose Detector Service

Wrapper around the MediaPipe Tasks landmarkers for detecting body
landmarks and a smile score in single images.
Handles all MediaPipe-specific logic and converts to our domain models.

Both landmarkers need a downloaded `.task` model bundle; paths come from
settings. This module is only imported when image frames are sent, so the
rest of the application runs without MediaPipe or OpenCV installed.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Any, Optional, List

import cv2
import numpy as np
import mediapipe as mp
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from ..domain.pose import PoseLandmark, PoseFrame
from .smile import smile_score

logger = logging.getLogger(__name__)


def decode_base64_image(base64_image: str) -> np.ndarray:
    """
    Decode a base64 JPEG/PNG into a BGR image.

    Raises:
        ValueError: If the payload is not valid base64 or not an image
    """
    # Accept data URLs from browser canvases
    if base64_image.startswith("data:") and "," in base64_image:
        base64_image = base64_image.split(",", 1)[1]

    try:
        image_bytes = base64.b64decode(base64_image, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image: {e}") from e

    nparr = np.frombuffer(image_bytes, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if image is None:
        raise ValueError("Could not decode image data")
    return image


def _to_mp_image(image: np.ndarray) -> Any:
    """BGR (OpenCV) or RGB array -> mediapipe Image."""
    if len(image.shape) == 3 and image.shape[2] == 3:
        image_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    else:
        image_rgb = image
    return mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(image_rgb))


def _check_model(model_path: str) -> str:
    if not Path(model_path).is_file():
        raise FileNotFoundError(f"MediaPipe model not found: {model_path}")
    return str(model_path)


class PoseDetector:
    """
    Detects human body pose using the MediaPipe PoseLandmarker task.

    PoseLandmarker provides 33 body landmarks with normalized coordinates.
    This class wraps MediaPipe and converts results to our domain models.

    Usage:
        with PoseDetector("models/pose_landmarker_lite.task") as detector:
            frame = detector.detect_pose(image)
            if frame:
                result = analyze_gesture(frame.landmarks)
    """

    def __init__(
        self,
        model_path: str,
        min_detection_confidence: float = 0.5,
        min_presence_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ):
        """
        Initialize the pose detector.

        Args:
            model_path: Path to a pose_landmarker .task bundle
            min_detection_confidence: Minimum confidence for person detection.
            min_presence_confidence: Minimum pose presence score.
            min_tracking_confidence: Minimum confidence for landmark tracking.

        Raises:
            FileNotFoundError: If the model bundle is missing
        """
        options = vision.PoseLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=_check_model(model_path)),
            running_mode=vision.RunningMode.IMAGE,
            num_poses=1,
            min_pose_detection_confidence=min_detection_confidence,
            min_pose_presence_confidence=min_presence_confidence,
            min_tracking_confidence=min_tracking_confidence,
            output_segmentation_masks=False,
        )
        self.landmarker = vision.PoseLandmarker.create_from_options(options)

    def __enter__(self) -> "PoseDetector":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any]
    ) -> None:
        """Context manager exit - cleanup resources."""
        self.close()

    def close(self) -> None:
        """Release MediaPipe resources."""
        self.landmarker.close()

    # -------------------------------------------------------------------------
    # Core Detection Methods
    # -------------------------------------------------------------------------

    def detect_pose(
        self,
        image: np.ndarray,
        timestamp_ms: int = 0,
        frame_number: int = 0
    ) -> Optional[PoseFrame]:
        """
        Detect pose in a single image.

        Args:
            image: BGR image (OpenCV format) or RGB image
            timestamp_ms: Capture timestamp in milliseconds
            frame_number: Sequential frame number

        Returns:
            PoseFrame with 33 landmarks, or None if no person detected
        """
        result = self.landmarker.detect(_to_mp_image(image))

        if not result.pose_landmarks:
            return None

        landmarks = self._convert_landmarks(result.pose_landmarks[0])
        avg_confidence = sum(lm.confidence for lm in landmarks) / len(landmarks)

        return PoseFrame(
            landmarks=landmarks,
            timestamp_ms=timestamp_ms,
            frame_number=frame_number,
            confidence=avg_confidence,
        )

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    @staticmethod
    def _convert_landmarks(mp_landmarks: Any) -> List[PoseLandmark]:
        """Convert MediaPipe landmarks to our domain model."""
        return [
            PoseLandmark(
                x=mp_lm.x,
                y=mp_lm.y,
                z=mp_lm.z or 0.0,
                visibility=mp_lm.visibility,
            )
            for mp_lm in mp_landmarks
        ]


class FaceSmileDetector:
    """
    Scores smiling with the MediaPipe FaceLandmarker blendshapes.

    The face model is optional: callers treat a missing detector as
    "no smile signal".
    """

    def __init__(self, model_path: str, min_detection_confidence: float = 0.5):
        options = vision.FaceLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=_check_model(model_path)),
            running_mode=vision.RunningMode.IMAGE,
            num_faces=1,
            min_face_detection_confidence=min_detection_confidence,
            output_face_blendshapes=True,
        )
        self.landmarker = vision.FaceLandmarker.create_from_options(options)

    def __enter__(self) -> "FaceSmileDetector":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.landmarker.close()

    def detect_smile(self, image: np.ndarray) -> Optional[float]:
        """Smile score in [0, 1], or None when no face is found."""
        result = self.landmarker.detect(_to_mp_image(image))
        if not result.face_blendshapes:
            return None
        categories = {c.category_name: c.score for c in result.face_blendshapes[0]}
        return smile_score(categories)
