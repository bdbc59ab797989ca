"""Plane geometry for drawable shapes: points, rectangles, ellipses and circles."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, replace

Coordinate = tuple[float, float]
Color = tuple[int, int, int, int]

TRANSPARENT: Color = (0, 0, 0, 0)


@dataclass(frozen=True)
class Point:
    """A point (or vector) in the plane."""

    x: float = 0.0
    y: float = 0.0

    @property
    def angle(self) -> float:
        """Polar angle of the point about the origin."""
        return math.atan2(self.y, self.x)

    def rotate_by(self, rad: float) -> Point:
        """Rotate about the origin by ``rad`` radians."""
        c, s = math.cos(rad), math.sin(rad)
        return Point(self.x * c - self.y * s, self.x * s + self.y * c)

    def rotate_to(self, rad: float) -> Point:
        """Rotate about the origin so the polar angle becomes ``rad``."""
        return self.rotate_by(rad - self.angle)

    def move_by(self, vector: Point) -> Point:
        """Translate by ``vector``."""
        return Point(self.x + vector.x, self.y + vector.y)


@dataclass(frozen=True)
class Size:
    """Width and height of a shape."""

    width: float = 1.0
    height: float = 1.0


@dataclass(frozen=True)
class Polygon:
    """A closed outline ready for plotting."""

    points: tuple[Coordinate, ...]
    name: str = ""
    fill_color: Color = (0, 0, 0, 12)
    stroke_width: float = 1.0
    stroke_color: Color = TRANSPARENT


@dataclass(frozen=True)
class Line:
    """An open polyline ready for plotting."""

    points: tuple[Coordinate, ...]
    name: str = ""


@dataclass(frozen=True)
class Shape:
    """A sized, rotated and positioned shape; builder methods return new shapes."""

    size: Size = Size()
    angle: float = 0.0
    position: Point = Point()
    fill_alpha: float = 0.05

    @property
    def width(self) -> float:
        return self.size.width

    @property
    def height(self) -> float:
        return self.size.height

    def with_width(self, width: float):
        return replace(self, size=replace(self.size, width=width))

    def with_height(self, height: float):
        return replace(self, size=replace(self.size, height=height))

    def with_size(self, size: Size):
        return replace(self, size=size)

    def scale(self, by: float):
        return replace(self, size=Size(self.width * by, self.height * by))

    def with_angle(self, rad: float):
        return replace(self, angle=rad)

    def rotate_by(self, rad: float):
        return replace(self, angle=self.angle + rad)

    def at(self, x: float, y: float):
        return replace(self, position=Point(x, y))

    def move_to(self, position: Point):
        return replace(self, position=position)

    def move_by(self, vector: Point):
        return replace(self, position=self.position.move_by(vector))

    def local_to_global(self, x: float, y: float) -> Point:
        """Map a point in the shape's own frame to the plane."""
        return Point(x, y).rotate_by(self.angle).move_by(self.position)

    def upper_left(self) -> Point:
        return self.local_to_global(-self.width / 2.0, self.height / 2.0)

    def upper_right(self) -> Point:
        return self.local_to_global(self.width / 2.0, self.height / 2.0)

    def lower_left(self) -> Point:
        return self.local_to_global(-self.width / 2.0, -self.height / 2.0)

    def lower_right(self) -> Point:
        return self.local_to_global(self.width / 2.0, -self.height / 2.0)

    def bounding_box(self) -> tuple[Coordinate, ...]:
        """Corners in the order upper-left, upper-right, lower-right, lower-left."""
        corners = (self.upper_left(), self.upper_right(), self.lower_right(), self.lower_left())
        return tuple((p.x, p.y) for p in corners)

    def to_polygon(self) -> Polygon:
        return Polygon(points=self.bounding_box(), fill_color=self._fill_color())

    def _fill_color(self) -> Color:
        alpha = min(max(int(self.fill_alpha * 255.0), 0), 255)
        return (0, 0, 0, alpha)


def _sample_closed(curve: Callable[[float], Coordinate], count: int) -> tuple[Coordinate, ...]:
    step = math.tau / count
    return tuple(curve(i * step) for i in range(count))


def _point_count(extent: float) -> int:
    return max(max(int(extent), 0) * 50, 20)


@dataclass(frozen=True)
class Rectangle(Shape):
    """A rectangle whose outline is its bounding box."""


@dataclass(frozen=True)
class Ellipse(Shape):
    """An ellipse with axes equal to its width and height."""

    def to_polygon(self) -> Polygon:
        a = self.width / 2.0
        b = self.height / 2.0
        cx, cy = self.position.x, self.position.y
        ca, sa = math.cos(self.angle), math.sin(self.angle)

        def curve(t: float) -> Coordinate:
            x1 = a * math.cos(t)
            y1 = b * math.sin(t)
            return (x1 * ca - y1 * sa + cx, x1 * sa + y1 * ca + cy)

        return Polygon(points=_sample_closed(curve, _point_count(max(a, b))), fill_color=self._fill_color())


@dataclass(frozen=True)
class Circle(Shape):
    """A circle whose radius is the larger of its width and height."""

    def with_radius(self, radius: float) -> Circle:
        return self.with_size(Size(radius, radius))

    def to_polygon(self) -> Polygon:
        r = max(self.width, self.height)
        cx, cy = self.position.x, self.position.y

        def curve(t: float) -> Coordinate:
            return (r * math.cos(t) + cx, r * math.sin(t) + cy)

        return Polygon(points=_sample_closed(curve, _point_count(r)), fill_color=self._fill_color())