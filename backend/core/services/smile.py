"""
Smile Signal Helpers

Reduces face-landmarker blendshapes to a single smile score and turns
whatever smile signal a client sends into a boolean.
"""

from typing import Mapping, Optional, Union

SMILE_THRESHOLD = 0.35
SMILE_CATEGORIES = ("mouthSmileLeft", "mouthSmileRight")

SmileSignal = Union[float, bool, None]


def smile_score(blendshapes: Mapping[str, float]) -> float:
    """
    Mean of the left/right mouth-smile blendshape scores.

    Args:
        blendshapes: Category name -> score (0-1)

    Returns:
        Smile score in [0, 1]; missing categories count as 0
    """
    left, right = (float(blendshapes.get(name, 0.0)) for name in SMILE_CATEGORIES)
    return (left + right) / 2


def is_smiling(signal: SmileSignal, threshold: float = SMILE_THRESHOLD) -> bool:
    """
    Interpret a smile signal.

    A bool is taken as-is and a float is thresholded. None means no face
    signal is available and counts as smiling, so missing face tracking
    never triggers the smile tip.
    """
    if signal is None:
        return True
    if isinstance(signal, bool):
        return signal
    return float(signal) > threshold


def optional_score(signal: Optional[float]) -> SmileSignal:
    """Clamp a raw client score into [0, 1], passing None through."""
    if signal is None:
        return None
    return max(0.0, min(1.0, float(signal)))
