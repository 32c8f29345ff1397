import math

import pytest

from repsense.geometry import angle_deg, distance, mean_or_none, midpoint


def test_right_angle():
    assert angle_deg((0, 10), (0, 0), (10, 0)) == pytest.approx(90.0)


def test_straight_and_folded():
    assert angle_deg((-5, 0), (0, 0), (7, 0)) == pytest.approx(180.0)
    assert angle_deg((3, 0), (0, 0), (8, 0)) == pytest.approx(0.0, abs=1e-6)


@pytest.mark.parametrize(
    "a, b, c",
    [
        ((0, 0), (3, 4), (10, 1)),
        ((100, 200), (150, 260), (90, 400)),
        ((-2, 7), (1, 1), (5, 9)),
        ((300, 300), (300, 400), (398.5, 417.4)),
    ],
)
def test_range_and_symmetry(a, b, c):
    ang = angle_deg(a, b, c)
    assert 0.0 <= ang <= 180.0
    assert ang == pytest.approx(angle_deg(c, b, a))


def test_degenerate_returns_none_not_nan():
    assert angle_deg((0, 0), (0, 0), (1, 1)) is None
    assert angle_deg((1, 1), (2, 2), (2, 2)) is None
    assert angle_deg(None, (0, 0), (1, 1)) is None


def test_nearly_collinear_is_clamped():
    ang = angle_deg((0, 0), (1e6, 1e-9), (2e6, 0))
    assert not math.isnan(ang)
    assert ang == pytest.approx(180.0)


def test_midpoint_distance_mean():
    assert midpoint((0, 0), (4, 2)) == (2.0, 1.0)
    assert midpoint(None, (4, 2)) is None
    assert distance((0, 0), (3, 4)) == pytest.approx(5.0)
    assert distance((0, 0), None) is None
    assert mean_or_none([None, 2.0, 4.0]) == pytest.approx(3.0)
    assert mean_or_none([None]) is None
