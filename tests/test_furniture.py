"""Unit tests for furniture footprints, hit testing and collisions."""

import pytest

from roomplan.geometry.furniture import (
    check_furniture_collision,
    find_collision,
    find_furniture_at_point,
    get_furniture_bounds,
    is_point_in_furniture,
    rotate,
)
from roomplan.schema import Bounds
from tests.utils_layout import make_instance, make_template, pt


def test_bounds_convert_inches_to_cells():
    template = make_template(36, 24)
    bounds = get_furniture_bounds(make_instance(1, 2), template, 12)
    assert bounds == Bounds(x=1, y=2, width=3, height=2)


@pytest.mark.parametrize("rotation, size", [(0, (3, 2)), (90, (2, 3)), (180, (3, 2)), (270, (2, 3))])
def test_bounds_swap_for_quarter_turns(rotation, size):
    bounds = get_furniture_bounds(make_instance(0, 0, rotation), make_template(36, 24), 12)
    assert (bounds.width, bounds.height) == size


def test_overlapping_furniture_collides():
    template = make_template(36, 24)
    a = make_instance(0, 0, furniture_id="a")
    b = make_instance(2, 1, furniture_id="b")
    assert check_furniture_collision(a, template, b, template, 12)
    assert check_furniture_collision(b, template, a, template, 12)


def test_adjacent_furniture_does_not_collide():
    template = make_template(36, 24)
    a = make_instance(0, 0, furniture_id="a")
    assert not check_furniture_collision(a, template, make_instance(3, 0, furniture_id="b"), template, 12)
    assert not check_furniture_collision(a, template, make_instance(0, 2, furniture_id="b"), template, 12)


def test_rotation_changes_collision():
    template = make_template(36, 24)
    other = make_instance(0, 2.5, furniture_id="b")
    assert not check_furniture_collision(make_instance(0, 0), template, other, template, 12)
    assert check_furniture_collision(make_instance(0, 0, 90), template, other, template, 12)


def test_collision_depends_on_scale():
    template = make_template(36, 24)
    a = make_instance(0, 0, furniture_id="a")
    b = make_instance(2, 0, furniture_id="b")
    assert check_furniture_collision(a, template, b, template, 12)
    # 36in at 24in/cell is 1.5 cells wide
    assert not check_furniture_collision(a, template, b, template, 24)


def test_point_containment_is_half_open():
    template = make_template(36, 24)
    item = make_instance(0, 0)
    assert is_point_in_furniture(pt(0, 0), item, template, 12)
    assert is_point_in_furniture(pt(2.99, 1.99), item, template, 12)
    assert not is_point_in_furniture(pt(3, 0), item, template, 12)
    assert not is_point_in_furniture(pt(0, 2), item, template, 12)
    assert not is_point_in_furniture(pt(-0.01, 1), item, template, 12)


def test_rotate_cycles_through_quarter_turns():
    assert [rotate(r) for r in (0, 90, 180, 270)] == [90, 180, 270, 0]
    rotation = 0
    for _ in range(4):
        rotation = rotate(rotation)
    assert rotation == 0


def test_find_furniture_at_point_skips_dangling():
    template = make_template(36, 24)
    dangling = make_instance(0, 0, furniture_id="ghost", template_id="missing")
    placed = make_instance(0, 0, furniture_id="real")
    templates = {"t": template}

    assert find_furniture_at_point(pt(1, 1), [dangling, placed], templates, 12) is placed
    assert find_furniture_at_point(pt(10, 10), [dangling, placed], templates, 12) is None


def test_find_furniture_at_point_first_match():
    template = make_template(36, 24)
    a = make_instance(0, 0, furniture_id="a")
    b = make_instance(1, 1, furniture_id="b")
    assert find_furniture_at_point(pt(1.5, 1.5), [a, b], {"t": template}, 12).id == "a"
    assert find_furniture_at_point(pt(1.5, 1.5), [b, a], {"t": template}, 12).id == "b"


def test_find_collision_ignores_self_and_dangling():
    template = make_template(36, 24)
    candidate = make_instance(0, 0, furniture_id="a")
    dangling = make_instance(1, 1, furniture_id="ghost", template_id="missing")
    templates = {"t": template}

    assert find_collision(candidate, template, [candidate, dangling], templates, 12) is None

    other = make_instance(1, 1, furniture_id="b")
    assert find_collision(candidate, template, [candidate, dangling, other], templates, 12) is other
