"""Drawable figures of a cart-pole and of a car-like vehicle."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any

from robokit.shapes import TRANSPARENT, Circle, Line, Polygon, Rectangle

REF_MASS = 1500.0
BASE_WIDTH = 1.8
FRONT_OVERHANG = 0.8
REAR_OVERHANG = 0.5
WHEEL_LENGTH = 0.6
WHEEL_WIDTH = 0.25
WHEEL_COLOR = (60, 60, 60, 255)


@dataclass(frozen=True)
class CartFigure:
    """The parts of a cart with an inverted pendulum."""

    body: Polygon
    left_wheel: Polygon
    right_wheel: Polygon
    ball: Polygon
    rod: Line
    left_tick: Line
    right_tick: Line

    @property
    def polygons(self) -> tuple[Polygon, ...]:
        return (self.body, self.left_wheel, self.right_wheel, self.ball)

    @property
    def lines(self) -> tuple[Line, ...]:
        return (self.rod, self.left_tick, self.right_tick)


@dataclass(frozen=True)
class VehicleFigure:
    """The parts of a vehicle: body, heading marker and four wheels.

    Wheels are ordered front-left, front-right, rear-left, rear-right.
    """

    body: Polygon
    heading: Polygon
    wheels: tuple[Polygon, ...]


def draw_cart(x_pos: float, rod_angle: float, model: Any, name: str) -> CartFigure:
    """Figure of a cart at ``x_pos`` whose rod leans by ``rod_angle``.

    ``model`` needs ``m_ball``, ``m_cart`` and ``l_bar``; the masses set the sizes.
    """
    x = float(x_pos)
    y = 0.0
    r_ball = 0.1 * model.m_ball
    r_whl = 0.1 * model.m_cart
    w = 1.0 * model.m_cart
    h = 0.5 * model.m_cart
    length = float(model.l_bar)
    th = float(rod_angle)

    bottom = (x, y + h + 2.0 * r_whl)
    top = (bottom[0] - length * math.sin(th), bottom[1] + length * math.cos(th))

    body = Rectangle().with_width(w).with_height(h).at(x, y + h / 2.0 + 2.0 * r_whl).to_polygon()
    left_center = (x - w / 4.0, y + r_whl)
    right_center = (x + w / 4.0, y + r_whl)
    left_wheel = Circle().with_radius(r_whl).at(*left_center).to_polygon()
    right_wheel = Circle().with_radius(r_whl).at(*right_center).to_polygon()
    ball = Circle().with_radius(r_ball).at(*top).to_polygon()
    rod = Line((bottom, top))

    # Wheels turn clockwise as the cart moves right.
    wheel_angle = -x / r_whl

    def tick(center: tuple[float, float]) -> Line:
        cx, cy = center
        return Line(((cx, cy), (cx + r_whl * math.cos(wheel_angle), cy + r_whl * math.sin(wheel_angle))))

    return CartFigure(
        body=replace(body, name=name),
        left_wheel=left_wheel,
        right_wheel=right_wheel,
        ball=ball,
        rod=rod,
        left_tick=tick(left_center),
        right_tick=tick(right_center),
    )


def _local_to_global(lx: float, ly: float, x: float, y: float, ang: float) -> tuple[float, float]:
    c, s = math.cos(ang), math.sin(ang)
    return (x + lx * c - ly * s, y + lx * s + ly * c)


def draw_vehicle(state: Sequence[float], name: str, steering: float, params: Any) -> VehicleFigure:
    """Figure of a vehicle in state ``[x, y, phi, v]`` with front wheels steered by ``steering``.

    ``params`` needs ``lf``, ``lr`` and ``mass``; the axle distances set the
    length and the mass sets the width.
    """
    x, y, ang = float(state[0]), float(state[1]), float(state[2])
    steer = float(steering)
    lf = float(params.lf)
    lr = float(params.lr)
    mass = float(params.mass)

    body_front = lf + FRONT_OVERHANG
    body_rear = lr + REAR_OVERHANG
    body_length = body_front + body_rear
    body_offset = (body_front - body_rear) / 2.0
    body_width = BASE_WIDTH * math.sqrt(mass / REF_MASS)

    cx, cy = _local_to_global(body_offset, 0.0, x, y, ang)
    body = (
        Rectangle()
        .with_width(body_length)
        .with_height(body_width)
        .with_angle(ang)
        .at(cx, cy)
        .to_polygon()
    )

    tri_height = body_length * 0.15
    heading = Polygon(
        points=(
            _local_to_global(body_front, body_width * 0.5, x, y, ang),
            _local_to_global(body_front, -body_width * 0.5, x, y, ang),
            _local_to_global(body_front + tri_height, 0.0, x, y, ang),
        ),
        fill_color=TRANSPARENT,
    )

    wheel_y = body_width * 0.5 + WHEEL_WIDTH * 0.5
    configs = (
        (lf, wheel_y, True),
        (lf, -wheel_y, True),
        (-lr, wheel_y, False),
        (-lr, -wheel_y, False),
    )
    wheels = []
    for wx, wy, is_front in configs:
        gx, gy = _local_to_global(wx, wy, x, y, ang)
        wheel_ang = ang + steer if is_front else ang
        wheel = (
            Rectangle()
            .with_width(WHEEL_LENGTH)
            .with_height(WHEEL_WIDTH)
            .with_angle(wheel_ang)
            .at(gx, gy)
            .to_polygon()
        )
        wheels.append(replace(wheel, fill_color=WHEEL_COLOR))

    return VehicleFigure(body=replace(body, name=name), heading=heading, wheels=tuple(wheels))