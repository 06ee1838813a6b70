from __future__ import annotations

import itertools

import pytest

from fontatlas.layout import DEFAULT_GUTTER, STRATEGIES, Placement, plan_layout


def _assert_disjoint_and_inside(plan):
    for p in plan.placements:
        assert p.x >= 0 and p.y >= 0
        assert p.right <= plan.width
        assert p.bottom <= plan.height
    for a, b in itertools.combinations(plan.placements, 2):
        assert not a.overlaps(b)


def test_single_page_is_identity():
    plan = plan_layout([(512, 256)])
    assert (plan.width, plan.height) == (512, 256)
    assert plan.placements == (Placement(0, 0, 512, 256),)
    assert plan.is_identity


def test_two_pages_side_by_side_with_gutter():
    plan = plan_layout([(256, 256), (256, 256)])
    assert DEFAULT_GUTTER == 2
    assert (plan.width, plan.height) == (514, 256)
    assert plan.placements == (Placement(0, 0, 256, 256), Placement(258, 0, 256, 256))
    assert not plan.is_identity


def test_horizontal_height_is_tallest_page():
    plan = plan_layout([(100, 50), (80, 120), (40, 30)])
    assert plan.height == 120
    assert plan.width == 100 + 2 + 80 + 2 + 40
    assert [p.x for p in plan.placements] == [0, 102, 184]


def test_zero_gutter():
    plan = plan_layout([(64, 64), (64, 64)], gutter=0)
    assert plan.width == 128
    assert plan.placements[1].x == 64


@pytest.mark.parametrize("strategy", STRATEGIES)
@pytest.mark.parametrize("count", [1, 2, 3, 5, 9])
def test_placements_never_overlap_and_stay_inside(strategy, count):
    sizes = [(64 + 8 * i, 32 + 16 * (i % 3)) for i in range(count)]
    plan = plan_layout(sizes, strategy=strategy)
    assert plan.page_count == count
    assert plan.source_sizes == tuple(sizes)
    for placement, (w, h) in zip(plan.placements, sizes):
        assert (placement.width, placement.height) == (w, h)
    _assert_disjoint_and_inside(plan)


def test_plan_is_deterministic():
    sizes = [(128, 128), (128, 64), (64, 64), (32, 200)]
    for strategy in STRATEGIES:
        assert plan_layout(sizes, strategy=strategy) == plan_layout(sizes, strategy=strategy)


def test_vertical_stacks_pages():
    plan = plan_layout([(256, 256), (256, 256)], strategy="vertical")
    assert (plan.width, plan.height) == (256, 514)
    assert plan.placements[1] == Placement(0, 258, 256, 256)


def test_grid_uses_square_arrangement():
    plan = plan_layout([(100, 100)] * 4, strategy="grid")
    assert (plan.width, plan.height) == (202, 202)
    assert plan.placements[3] == Placement(102, 102, 100, 100)


def test_auto_picks_smallest_area():
    sizes = [(10, 100)] * 4
    plan = plan_layout(sizes, strategy="auto")
    assert plan.strategy == "vertical"
    assert plan.area == min(plan_layout(sizes, strategy=s).area for s in ("horizontal", "vertical", "grid"))


def test_placement_for_out_of_range_is_none():
    plan = plan_layout([(10, 10), (10, 10)])
    assert plan.placement_for(1) == Placement(12, 0, 10, 10)
    assert plan.placement_for(2) is None
    assert plan.placement_for(-1) is None


@pytest.mark.parametrize(
    "sizes, kwargs",
    [
        ([], {}),
        ([(0, 10)], {}),
        ([(10, -1)], {}),
        ([(10, 10)], {"strategy": "spiral"}),
        ([(10, 10)], {"gutter": -1}),
    ],
)
def test_invalid_input_raises(sizes, kwargs):
    with pytest.raises(ValueError):
        plan_layout(sizes, **kwargs)
