import math

import pytest

from turtlecanvas.errors import DegenerateGeometryError, InvalidArgumentError
from turtlecanvas.vector import Vector


@pytest.mark.parametrize("phi", [0, 30, 45, 90, 135, 180, 225, 270, 315, 359.5, 400, -30])
def test_from_angle_round_trips_modulo_360(phi):
    assert Vector.from_angle(phi).to_angle() == pytest.approx(phi % 360, abs=1e-3)


@pytest.mark.parametrize("v", [Vector(3, 4), Vector(-1, 1e-3), Vector(1, 2, 3), Vector(-7, -7)])
def test_normalize_gives_unit_length(v):
    assert v.normalize().length() == pytest.approx(1.0, abs=1e-9)


def test_zero_vector_normalizes_to_itself():
    assert Vector(0, 0).normalize() == Vector(0.0, 0.0, 0.0)
    assert Vector(0, 0).to_angle() == 0


def test_division_by_zero_is_degenerate():
    with pytest.raises(DegenerateGeometryError):
        Vector(1, 1).div(0)


def test_to_angle_snaps_float_residue():
    # cos(90 degrees) leaves ~6e-17 in x
    assert Vector(-1e-16, 1).to_angle() == 90
    assert Vector(-1, -1e-16).to_angle() == 180


def test_arithmetic():
    a, b = Vector(1, 2), Vector(3, 5)
    assert a + b == Vector(4, 7, 0)
    assert b - a == Vector(2, 3, 0)
    assert a * 2 == Vector(2, 4, 0)
    assert 2 * a == a.smul(2)
    assert a.linear(1, 10, Vector(1, 0)) == Vector(11, 2, 0)
    assert a.dot(b) == 13


def test_cross_of_normal_and_heading_points_left_of_turtle():
    # the turtle's turn axis for the home pose
    assert Vector(0, 0, -1).cross(Vector(1, 0, 0)) == Vector(0, -1, 0)


def test_rotate_is_counter_clockwise_and_drops_z():
    r = Vector(1, 0, 5).rotate(90)
    assert r.x == pytest.approx(0.0, abs=1e-12)
    assert r.y == pytest.approx(1.0)
    assert r.z == 0.0


def test_rotate_normal_blends_orthonormal_pair():
    r = Vector(1, 0).rotate_normal(Vector(0, 1), math.pi / 2)
    assert (r.x, r.y) == pytest.approx((0.0, 1.0))


def test_scale_sets_z_to_one():
    assert Vector(2, 3).scale(2, 10) == Vector(4, 30, 1)


def test_of_coerces_sequences():
    assert Vector.of((1, 2)) == Vector(1.0, 2.0, 0.0)
    assert Vector.of([1, 2, 3]) == Vector(1.0, 2.0, 3.0)
    with pytest.raises(InvalidArgumentError):
        Vector.of((1,))
    with pytest.raises(InvalidArgumentError):
        Vector.of("ab")
