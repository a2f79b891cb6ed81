"""
Shared fixtures: hand-built BlazePose landmark sets for known poses.

Coordinates are normalized image units. Apart from the relaxed stance,
every set puts the shoulders 0.2 apart at y=0.3 and the hips at y=0.7;
landmarks not listed are present but invisible.
"""

import pytest

from core.domain import BodyPart, PoseLandmark

VISIBLE = 0.9

UPRIGHT_TORSO = {
    BodyPart.NOSE: (0.5, 0.15),
    BodyPart.LEFT_EYE: (0.485, 0.13),
    BodyPart.RIGHT_EYE: (0.515, 0.13),
    BodyPart.LEFT_SHOULDER: (0.4, 0.3),
    BodyPart.RIGHT_SHOULDER: (0.6, 0.3),
    BodyPart.LEFT_HIP: (0.42, 0.7),
    BodyPart.RIGHT_HIP: (0.58, 0.7),
}

# Both arms raised above the shoulders, wrists far apart, hands open
POWER_POSE_ARMS = {
    BodyPart.LEFT_ELBOW: (0.3, 0.25),
    BodyPart.RIGHT_ELBOW: (0.7, 0.25),
    BodyPart.LEFT_WRIST: (0.25, 0.15),
    BodyPart.RIGHT_WRIST: (0.75, 0.15),
    BodyPart.LEFT_INDEX: (0.21, 0.07),
    BodyPart.LEFT_THUMB: (0.29, 0.17),
    BodyPart.RIGHT_INDEX: (0.79, 0.07),
    BodyPart.RIGHT_THUMB: (0.71, 0.17),
}

# Fingertips together in front of the chest
STEEPLE_ARMS = {
    BodyPart.LEFT_ELBOW: (0.35, 0.5),
    BodyPart.RIGHT_ELBOW: (0.65, 0.5),
    BodyPart.LEFT_WRIST: (0.47, 0.5),
    BodyPart.RIGHT_WRIST: (0.53, 0.5),
}

# Left arm straight up, right arm out of view
POINTING_ARMS = {
    BodyPart.LEFT_ELBOW: (0.39, 0.15),
    BodyPart.LEFT_WRIST: (0.38, 0.0),
}

# Head sunk towards the shoulder line
DROPPED_HEAD = {
    BodyPart.NOSE: (0.5, 0.27),
    BodyPart.LEFT_EYE: (0.485, 0.25),
    BodyPart.RIGHT_EYE: (0.515, 0.25),
}

# Standing further back (shoulders 0.16 apart), upright, fists loosely
# closed below the waist: left arm hanging straight, right hand resting
# in front with the elbow out
RELAXED_STANCE = {
    BodyPart.NOSE: (0.5, 0.18),
    BodyPart.LEFT_EYE: (0.485, 0.16),
    BodyPart.RIGHT_EYE: (0.515, 0.16),
    BodyPart.LEFT_SHOULDER: (0.42, 0.3),
    BodyPart.RIGHT_SHOULDER: (0.58, 0.3),
    BodyPart.LEFT_ELBOW: (0.42, 0.47),
    BodyPart.RIGHT_ELBOW: (0.68, 0.44),
    BodyPart.LEFT_WRIST: (0.42, 0.64),
    BodyPart.RIGHT_WRIST: (0.52, 0.64),
    BodyPart.LEFT_INDEX: (0.42, 0.66),
    BodyPart.LEFT_THUMB: (0.42, 0.66),
    BodyPart.RIGHT_INDEX: (0.52, 0.66),
    BodyPart.RIGHT_THUMB: (0.52, 0.66),
    BodyPart.LEFT_HIP: (0.44, 0.62),
    BodyPart.RIGHT_HIP: (0.56, 0.62),
}


def build_landmarks(*groups, count: int = 33) -> list:
    """Merge point groups (later groups win) into a full landmark list."""
    landmarks = [PoseLandmark(0.5, 0.5, visibility=0.0) for _ in range(count)]
    for group in groups:
        for part, (x, y) in group.items():
            landmarks[part] = PoseLandmark(x, y, visibility=VISIBLE)
    return landmarks


@pytest.fixture
def make_landmarks():
    return build_landmarks


@pytest.fixture
def power_pose_landmarks():
    """Classified POWER_POSE with impact 90."""
    return build_landmarks(UPRIGHT_TORSO, POWER_POSE_ARMS)


@pytest.fixture
def slumped_landmarks():
    """Head dropped, arms out of view: REST, slouching, impact 33."""
    return build_landmarks(UPRIGHT_TORSO, DROPPED_HEAD)


@pytest.fixture
def relaxed_rest_landmarks():
    """Hands low and relaxed, no slouch: REST with impact 41."""
    return build_landmarks(RELAXED_STANCE)


@pytest.fixture
def steeple_landmarks():
    return build_landmarks(UPRIGHT_TORSO, STEEPLE_ARMS)


@pytest.fixture
def pointing_landmarks():
    return build_landmarks(UPRIGHT_TORSO, POINTING_ARMS)


@pytest.fixture
def upright_torso():
    """Head and torso points only; arms out of view."""
    return dict(UPRIGHT_TORSO)
