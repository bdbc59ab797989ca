import math
from types import SimpleNamespace

import pytest

from robokit.drawing import (
    BASE_WIDTH,
    FRONT_OVERHANG,
    REAR_OVERHANG,
    REF_MASS,
    WHEEL_COLOR,
    draw_cart,
    draw_vehicle,
)
from robokit.shapes import TRANSPARENT


def centroid(points):
    n = len(points)
    return (sum(p[0] for p in points) / n, sum(p[1] for p in points) / n)


def length(a, b):
    return math.hypot(b[0] - a[0], b[1] - a[1])


def edge_angle(polygon):
    p0, p1 = polygon.points[0], polygon.points[1]
    return math.atan2(p1[1] - p0[1], p1[0] - p0[0])


MODEL = SimpleNamespace(m_ball=1.0, m_cart=1.0, l_bar=2.0)
PARAMS = SimpleNamespace(lf=1.2, lr=1.6, mass=REF_MASS)


def test_cart_only_body_is_named():
    fig = draw_cart(0.5, 0.1, MODEL, "cart")
    assert fig.body.name == "cart"
    assert [p.name for p in fig.polygons[1:]] == ["", "", ""]
    assert [l.name for l in fig.lines] == ["", "", ""]


@pytest.mark.parametrize("angle", [0.0, 0.3, -1.0])
def test_cart_rod_has_bar_length(angle):
    fig = draw_cart(1.0, angle, MODEL, "c")
    bottom, top = fig.rod.points
    assert length(bottom, top) == pytest.approx(MODEL.l_bar)


def test_cart_upright_rod_is_vertical_above_cart():
    fig = draw_cart(2.0, 0.0, MODEL, "c")
    bottom, top = fig.rod.points
    assert bottom[0] == pytest.approx(2.0)
    assert top[0] == pytest.approx(2.0)
    assert top[1] > bottom[1]


def test_cart_ball_sits_on_rod_top():
    fig = draw_cart(0.0, 0.4, MODEL, "c")
    cx, cy = centroid(fig.ball.points)
    top = fig.rod.points[1]
    assert cx == pytest.approx(top[0], abs=1e-9)
    assert cy == pytest.approx(top[1], abs=1e-9)


def test_cart_ticks_start_at_wheel_centres_with_wheel_radius():
    fig = draw_cart(0.7, 0.0, MODEL, "c")
    for wheel, tick in ((fig.left_wheel, fig.left_tick), (fig.right_wheel, fig.right_tick)):
        centre = centroid(wheel.points)
        radius = length(centre, wheel.points[0])
        assert tick.points[0] == pytest.approx(centre, abs=1e-9)
        assert length(*tick.points) == pytest.approx(radius)


def test_cart_translation_moves_body():
    a = draw_cart(0.0, 0.2, MODEL, "c")
    b = draw_cart(3.0, 0.2, MODEL, "c")
    for pa, pb in zip(a.body.points, b.body.points):
        assert pb[0] - pa[0] == pytest.approx(3.0)
        assert pb[1] == pytest.approx(pa[1])


def test_vehicle_named_body_and_colours():
    fig = draw_vehicle([0.0, 0.0, 0.0, 0.0], "car", 0.0, PARAMS)
    assert fig.body.name == "car"
    assert fig.heading.name == ""
    assert fig.heading.fill_color == TRANSPARENT
    assert len(fig.wheels) == 4
    assert all(w.fill_color == WHEEL_COLOR for w in fig.wheels)


def test_vehicle_body_dimensions():
    fig = draw_vehicle([0.0, 0.0, 0.5, 0.0], "car", 0.0, PARAMS)
    ul, ur, lr_, ll = fig.body.points
    assert length(ul, ur) == pytest.approx(PARAMS.lf + PARAMS.lr + FRONT_OVERHANG + REAR_OVERHANG)
    assert length(ur, lr_) == pytest.approx(BASE_WIDTH)


def test_vehicle_steering_turns_only_front_wheels():
    phi, steer = 0.4, 0.3
    fig = draw_vehicle([1.0, 2.0, phi, 0.0], "car", steer, PARAMS)
    for wheel in fig.wheels[:2]:
        assert edge_angle(wheel) == pytest.approx(phi + steer)
    for wheel in fig.wheels[2:]:
        assert edge_angle(wheel) == pytest.approx(phi)
    assert edge_angle(fig.body) == pytest.approx(phi)


def test_vehicle_axles_at_lf_and_lr():
    fig = draw_vehicle([0.0, 0.0, 0.0, 0.0], "car", 0.0, PARAMS)
    front = [centroid(w.points) for w in fig.wheels[:2]]
    rear = [centroid(w.points) for w in fig.wheels[2:]]
    assert all(c[0] == pytest.approx(PARAMS.lf) for c in front)
    assert all(c[0] == pytest.approx(-PARAMS.lr) for c in rear)
    assert front[0][1] == pytest.approx(-front[1][1])


def test_vehicle_heading_marker_on_front_edge():
    fig = draw_vehicle([0.0, 0.0, 0.0, 0.0], "car", 0.0, PARAMS)
    base_a, base_b, apex = fig.heading.points
    assert base_a[0] == pytest.approx(PARAMS.lf + FRONT_OVERHANG)
    assert base_b[0] == pytest.approx(PARAMS.lf + FRONT_OVERHANG)
    assert apex[1] == pytest.approx(0.0)
    assert apex[0] > base_a[0]


def test_vehicle_translation_invariance():
    a = draw_vehicle([0.0, 0.0, 0.7, 0.0], "car", 0.1, PARAMS)
    b = draw_vehicle([5.0, -2.0, 0.7, 0.0], "car", 0.1, PARAMS)
    for pa, pb in zip(a.body.points + a.heading.points, b.body.points + b.heading.points):
        assert pb[0] - pa[0] == pytest.approx(5.0)
        assert pb[1] - pa[1] == pytest.approx(-2.0)