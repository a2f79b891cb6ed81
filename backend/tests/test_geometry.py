"""
Tests for landmark geometry helpers
"""

import pytest

from core.domain import PoseLandmark
from core.services.geometry import (
    calculate_angle,
    distance_2d,
    midpoint,
    clamp,
    is_visible,
    round_half_up,
)


class TestCalculateAngle:
    """Angle at the middle point of three landmarks."""

    def test_right_angle(self):
        """Test perpendicular arms give 90 degrees"""
        angle = calculate_angle(PoseLandmark(0, 1), PoseLandmark(0, 0), PoseLandmark(1, 0))
        assert angle == pytest.approx(90.0)

    def test_straight_line(self):
        """Test collinear points give 180 degrees"""
        angle = calculate_angle(PoseLandmark(0, 0), PoseLandmark(0.5, 0.5), PoseLandmark(1, 1))
        assert angle == pytest.approx(180.0)

    def test_zero_length_vector(self):
        """Test coincident points give 0 instead of NaN"""
        p = PoseLandmark(0.3, 0.3)
        assert calculate_angle(p, p, PoseLandmark(0.5, 0.5)) == 0.0

    def test_ignores_depth(self):
        """Test z does not change the image-plane angle"""
        flat = calculate_angle(PoseLandmark(0, 1), PoseLandmark(0, 0), PoseLandmark(1, 0))
        deep = calculate_angle(PoseLandmark(0, 1, z=-2), PoseLandmark(0, 0), PoseLandmark(1, 0, z=3))
        assert flat == pytest.approx(deep)


class TestHelpers:
    """Distance, midpoint, clamp, visibility and rounding."""

    def test_distance_2d(self):
        assert distance_2d(PoseLandmark(0, 0), PoseLandmark(0.3, 0.4)) == pytest.approx(0.5)

    def test_midpoint(self):
        assert midpoint(PoseLandmark(0.2, 0.4), PoseLandmark(0.6, 0.8)) == pytest.approx((0.4, 0.6))

    @pytest.mark.parametrize("value,expected", [(-5, 0), (50, 50), (130, 100)])
    def test_clamp(self, value, expected):
        assert clamp(value) == expected

    def test_visibility_is_strictly_greater(self):
        """Test a landmark exactly at the threshold is not visible"""
        assert not is_visible(PoseLandmark(0.5, 0.5, visibility=0.3), 0.3)
        assert is_visible(PoseLandmark(0.5, 0.5, visibility=0.31), 0.3)

    def test_missing_visibility_counts_as_visible(self):
        assert is_visible(PoseLandmark(0.5, 0.5), 0.9)

    def test_missing_landmark_is_invisible(self):
        assert not is_visible(None)

    @pytest.mark.parametrize("value,expected", [(12.5, 13), (12.49, 12), (-12.5, -12), (0.5, 1)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("x,y", [(float("nan"), 0.5), (0.5, float("inf")), (float("-inf"), 0.5)])
    def test_non_finite_landmark_is_invisible(self, x, y):
        assert not is_visible(PoseLandmark(x, y, visibility=0.9))

    def test_angle_overflow_gives_zero(self):
        """Test coordinates too large to square give 0 instead of NaN"""
        angle = calculate_angle(PoseLandmark(-1e200, 0), PoseLandmark(1e200, 0), PoseLandmark(1e200, 1e200))
        assert angle == 0.0
