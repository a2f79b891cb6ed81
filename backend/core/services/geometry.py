"""
Geometry Utilities

Mathematical helpers for landmark geometry used in gesture analysis.
All angles are calculated in degrees (0-180).

This is pure mathematics - no external dependencies except numpy.
"""

import math
from typing import Optional, Tuple
import numpy as np

from ..domain.pose import PoseLandmark


def calculate_angle(
    p1: PoseLandmark,
    p2: PoseLandmark,  # Vertex point
    p3: PoseLandmark
) -> float:
    """
    Calculate angle at p2 formed by p1-p2-p3.

    Uses the dot product of the two arm vectors in the image plane.

    Args:
        p1: First point
        p2: Vertex point (where angle is measured)
        p3: Third point

    Returns:
        Angle in degrees (0-180); 0 when either arm has zero length
        or a coordinate is not finite

    Example:
        For elbow angle: shoulder -> elbow -> wrist
        angle = calculate_angle(shoulder, elbow, wrist)
    """
    v1 = np.array([p1.x - p2.x, p1.y - p2.y])
    v2 = np.array([p3.x - p2.x, p3.y - p2.y])

    norm1 = np.linalg.norm(v1)
    norm2 = np.linalg.norm(v2)
    if norm1 == 0 or norm2 == 0 or not np.isfinite(norm1 * norm2):
        return 0.0

    # Clamp to valid range (handles floating point errors)
    cos_angle = np.clip(np.dot(v1, v2) / (norm1 * norm2), -1.0, 1.0)

    return float(np.degrees(np.arccos(cos_angle)))


def distance_2d(p1: PoseLandmark, p2: PoseLandmark) -> float:
    """Calculate 2D distance between two landmarks."""
    return math.sqrt((p1.x - p2.x) ** 2 + (p1.y - p2.y) ** 2)


def midpoint(p1: PoseLandmark, p2: PoseLandmark) -> Tuple[float, float]:
    """Calculate midpoint between two landmarks."""
    return ((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def is_visible(landmark: Optional[PoseLandmark], threshold: float = 0.3) -> bool:
    """A missing landmark is never visible."""
    return landmark is not None and landmark.is_visible(threshold)


def round_half_up(value: float) -> int:
    """Round half up, so 12.5 -> 13 and -12.5 -> -12."""
    return int(math.floor(value + 0.5))
