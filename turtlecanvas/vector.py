# turtlecanvas/vector.py
"""
Immutable 3-component vector used for turtle positions, headings and normals.

All turtle geometry is planar (z == 0) but headings are turned with a 3D
cross product against the turtle normal, so the vector keeps a z component.
Every operation returns a new Vector.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence, Union

import numpy as np

from .errors import DegenerateGeometryError, InvalidArgumentError


## --- Core Constants ---
DEGREE_TO_RAD = math.pi / 180
RAD_TO_DEGREE = 180 / math.pi
AXIS_EPSILON = 1e-5  # components below this are snapped to 0 by to_angle()

VectorLike = Union["Vector", Sequence[float]]


@dataclass(frozen=True)
class Vector:
    """
    A vector in 3D space; positions are plain points, headings are unit length.

    Attributes:
        x (float): first component
        y (float): second component
        z (float): third component, 0 for every point on the drawing plane

    Examples:
        >>> Vector(1, 0).rotate(90)
        Vector(x=6.123233995736766e-17, y=1.0, z=0.0)
        >>> Vector.from_angle(180).to_angle()
        180.0
    """
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def of(cls, value: VectorLike) -> Vector:
        """
        Coerces a Vector or a 2/3 element sequence into a Vector.

        Raises:
            InvalidArgumentError: if the value does not have 2 or 3 numeric components
        """
        if isinstance(value, Vector):
            return value
        try:
            components = [float(c) for c in value]
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Cannot build a vector from {value!r}") from e
        if len(components) == 2:
            return cls(components[0], components[1], 0.0)
        if len(components) == 3:
            return cls(*components)
        raise InvalidArgumentError(f"A vector needs 2 or 3 components, got {len(components)}")

    @classmethod
    def from_angle(cls, phi: float) -> Vector:
        """Unit vector pointing at ``phi`` degrees counter-clockwise from +x."""
        phi = phi * DEGREE_TO_RAD
        return cls(math.cos(phi), math.sin(phi), 0.0)

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __add__(self, other: VectorLike) -> Vector:
        return self.add(other)

    def __sub__(self, other: VectorLike) -> Vector:
        return self.sub(other)

    def __mul__(self, k: float) -> Vector:
        return self.smul(k)

    __rmul__ = __mul__

    def __truediv__(self, n: float) -> Vector:
        return self.div(n)

    def __neg__(self) -> Vector:
        return Vector(-self.x, -self.y, -self.z)

    def add(self, other: VectorLike) -> Vector:
        v = Vector.of(other)
        return Vector(self.x + v.x, self.y + v.y, self.z + v.z)

    def sub(self, other: VectorLike) -> Vector:
        v = Vector.of(other)
        return Vector(self.x - v.x, self.y - v.y, self.z - v.z)

    def smul(self, k: float) -> Vector:
        return Vector(self.x * k, self.y * k, self.z * k)

    def div(self, n: float) -> Vector:
        if n == 0:
            raise DegenerateGeometryError("Cannot divide a vector by zero")
        return Vector(self.x / n, self.y / n, self.z / n)

    def scale(self, xs: float, ys: float) -> Vector:
        """Anisotropic 2D scale; z is set to 1 and carries no geometric meaning."""
        return Vector(self.x * xs, self.y * ys, 1.0)

    def linear(self, a: float, b: float, v: VectorLike) -> Vector:
        """
        Returns ``a * self + b * v``.

        Moving forward along a heading is ``position.linear(1, distance, heading)``.
        """
        v = Vector.of(v)
        return Vector(a * self.x + b * v.x,
                      a * self.y + b * v.y,
                      a * self.z + b * v.z)

    def dot(self, other: VectorLike) -> float:
        v = Vector.of(other)
        return self.x * v.x + self.y * v.y + self.z * v.z

    def cross(self, other: VectorLike) -> Vector:
        v = Vector.of(other)
        return Vector(self.y * v.z - self.z * v.y,
                      self.z * v.x - self.x * v.z,
                      self.x * v.y - self.y * v.x)

    def rotate(self, angle: float) -> Vector:
        """
        Rotates counter-clockwise about z by ``angle`` degrees.

        Blends the vector with its perpendicular ``(-y, x, 0)``; the z component
        is dropped.
        """
        perp = Vector(-self.y, self.x, 0.0)
        angle = angle * DEGREE_TO_RAD
        c = math.cos(angle)
        s = math.sin(angle)
        return Vector(self.x * c + perp.x * s, self.y * c + perp.y * s, 0.0)

    def rotate_normal(self, other: VectorLike, alpha: float) -> Vector:
        """
        Rotates self towards ``other`` by ``alpha`` radians.

        Both vectors must be orthonormal; the result is
        ``cos(alpha) * self + sin(alpha) * other``.
        """
        return self.linear(math.cos(alpha), math.sin(alpha), other)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> Vector:
        """Unit vector in the same direction; the zero vector normalizes to itself."""
        n = self.length()
        if n == 0:
            return Vector(0.0, 0.0, 0.0)
        return self.div(n)

    def to_angle(self) -> float:
        """
        Direction of the (x, y) part in degrees, in [0, 360).

        Components smaller than 1e-5 are treated as exactly zero so that
        floating point residue such as -1e-16 does not flip the quadrant.
        """
        x = 0.0 if abs(self.x) < AXIS_EPSILON else self.x
        y = 0.0 if abs(self.y) < AXIS_EPSILON else self.y
        deg = math.atan2(abs(y), abs(x)) * RAD_TO_DEGREE
        if x < 0 and y > 0:
            deg = 180 - deg
        elif x < 0 and y <= 0:
            deg = 180 + deg
        elif x >= 0 and y < 0:
            deg = 360 - deg
        return deg

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)
