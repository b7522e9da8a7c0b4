"""
Tests for the planar instantiation: lines, sub-lines and polygon sets.

Containment is cross-checked against a plain even-odd ray casting
reference on grids of sample points kept away from the boundary.
"""

from __future__ import annotations

import math
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from bspgeom.services.euclidean_2d import (  # type: ignore
    Line,
    PolygonsSet,
    SubLine,
    Vector2D,
    even_odd_contains,
    signed_area,
)
from bspgeom.services.hyperplane import Side  # type: ignore
from bspgeom.services.region import Location  # type: ignore
from bspgeom.services.region_factory import NotConvexHyperplanesError, RegionFactory  # type: ignore

TOL = 1e-10

UNIT_SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
L_SHAPE = [(0.0, 0.0), (2.0, 0.0), (2.0, 1.0), (1.0, 1.0), (1.0, 2.0), (0.0, 2.0)]


def _grid(lo: float, hi: float, step: float = 0.1):
    n = int(round((hi - lo) / step))
    for i in range(n):
        for j in range(n):
            yield (lo + (i + 0.5) * step, lo + (j + 0.5) * step)


def test_line_offsets_and_projection() -> None:
    line = Line((0.0, 1.0), (1.0, 1.0), TOL)
    # the left of the direction is the minus side
    assert line.offset((0.0, 2.0)) == pytest.approx(-1.0)
    assert line.offset((5.0, 0.0)) == pytest.approx(1.0)
    assert line.to_space(line.to_sub_space((3.0, 1.0))) == Vector2D(3.0, 1.0)
    assert line.project((2.0, 5.0)) == Vector2D(2.0, 1.0)


def test_line_intersection_and_parallels() -> None:
    horizontal = Line((0.0, 1.0), (1.0, 1.0), TOL)
    vertical = Line((0.5, 0.0), (0.5, 1.0), TOL)
    crossing = horizontal.intersection(vertical)
    assert crossing.x == pytest.approx(0.5)
    assert crossing.y == pytest.approx(1.0)
    assert horizontal.intersection(Line((0.0, 3.0), (2.0, 3.0), TOL)) is None
    assert horizontal.is_parallel_to(horizontal.reverse())
    assert not horizontal.same_orientation_as(horizontal.reverse())
    assert horizontal.same_hyperplane_as(Line((-4.0, 1.0), (7.0, 1.0), TOL))


def test_sub_line_split_at_crossing() -> None:
    segment = SubLine.from_points((0.0, 0.0), (2.0, 0.0), TOL)
    split = segment.split(Line((1.0, -1.0), (1.0, 1.0), TOL))
    assert split.side == Side.BOTH
    assert split.plus.size == pytest.approx(1.0)
    assert split.minus.size == pytest.approx(1.0)
    (plus_segment,) = split.plus.segments()
    assert plus_segment.start.x == pytest.approx(1.0)
    assert plus_segment.end.x == pytest.approx(2.0)


def test_sub_line_split_by_parallel_line() -> None:
    segment = SubLine.from_points((0.0, 0.0), (2.0, 0.0), TOL)
    assert segment.split(Line((0.0, 1.0), (1.0, 1.0), TOL)).side == Side.PLUS
    assert segment.split(Line((1.0, 1.0), (0.0, 1.0), TOL)).side == Side.MINUS
    assert segment.split(Line((5.0, 0.0), (6.0, 0.0), TOL)).side == Side.HYPER


def test_sub_line_split_beyond_its_end() -> None:
    segment = SubLine.from_points((0.0, 0.0), (2.0, 0.0), TOL)
    split = segment.split(Line((3.0, -1.0), (3.0, 1.0), TOL))
    assert split.side == Side.MINUS


def test_unit_square_measures() -> None:
    square = PolygonsSet.from_vertices(UNIT_SQUARE, TOL)
    assert square.size == pytest.approx(1.0)
    assert square.barycenter.x == pytest.approx(0.5)
    assert square.barycenter.y == pytest.approx(0.5)
    assert square.boundary_size == pytest.approx(4.0)


def test_box_helper() -> None:
    box = PolygonsSet.box(-1.0, 3.0, 0.0, 2.0, TOL)
    assert box.size == pytest.approx(8.0)
    assert box.barycenter.x == pytest.approx(1.0)
    assert box.barycenter.y == pytest.approx(1.0)


def test_check_point_on_square() -> None:
    square = PolygonsSet.from_vertices(UNIT_SQUARE, TOL)
    assert square.check_point((0.5, 0.5)) == Location.INSIDE
    assert square.check_point((1.5, 0.5)) == Location.OUTSIDE
    assert square.check_point((1.0, 0.5)) == Location.BOUNDARY
    assert square.check_point(Vector2D(0.0, 0.0)) == Location.BOUNDARY
    # boundary points are contained
    assert (1.0, 0.5) in square
    assert (2.0, 2.0) not in square


def test_clockwise_loop_bounds_the_outside() -> None:
    outside = PolygonsSet.from_vertices(list(reversed(UNIT_SQUARE)), TOL)
    assert math.isinf(outside.size)
    assert outside.check_point((0.5, 0.5)) == Location.OUTSIDE
    assert outside.check_point((3.0, 3.0)) == Location.INSIDE


def test_normalised_polygons_agree() -> None:
    """A loop and its reversal describe the same finite polygon once normalised."""
    direct = PolygonsSet.from_vertices(L_SHAPE, TOL)
    reverse = PolygonsSet.from_vertices(list(reversed(L_SHAPE)), TOL)
    assert math.isinf(reverse.size)
    normalised = RegionFactory().complement(reverse)
    assert normalised.size == pytest.approx(direct.size)
    assert normalised.size == pytest.approx(3.0)
    for point in _grid(-0.5, 2.5, 0.25):
        assert normalised.contains(point) == direct.contains(point)


@pytest.mark.parametrize("loop", [UNIT_SQUARE, L_SHAPE])
def test_containment_matches_even_odd_reference(loop) -> None:
    region = PolygonsSet.from_vertices(loop, TOL)
    for point in _grid(-0.5, 2.5):
        assert region.contains(point) == even_odd_contains(point, loop), point


def test_complement_round_trip() -> None:
    factory = RegionFactory()
    square = PolygonsSet.from_vertices(L_SHAPE, TOL)
    complement = factory.complement(square)
    assert math.isinf(complement.size)
    twice = factory.complement(complement)
    assert twice.size == pytest.approx(3.0)
    for point in _grid(-0.5, 2.5, 0.25):
        assert twice.contains(point) == square.contains(point)
        assert complement.contains(point) != square.contains(point)


def test_boolean_operations_on_overlapping_squares() -> None:
    a = PolygonsSet.box(0.0, 2.0, 0.0, 2.0, TOL)
    b = PolygonsSet.box(1.0, 3.0, 1.0, 3.0, TOL)
    factory = RegionFactory()
    assert factory.union(a, b).size == pytest.approx(7.0)
    assert factory.intersection(a, b).size == pytest.approx(1.0)
    assert factory.difference(a, b).size == pytest.approx(3.0)
    assert factory.xor(a, b).size == pytest.approx(6.0)
    # inputs are left untouched
    assert a.size == pytest.approx(4.0)
    assert b.size == pytest.approx(4.0)


def test_intersection_barycenter() -> None:
    a = PolygonsSet.box(0.0, 2.0, 0.0, 2.0, TOL)
    b = PolygonsSet.box(1.0, 3.0, 1.0, 3.0, TOL)
    overlap = a & b
    assert overlap.barycenter.x == pytest.approx(1.5)
    assert overlap.barycenter.y == pytest.approx(1.5)


def test_region_containment_and_self_intersection() -> None:
    big = PolygonsSet.box(0.0, 4.0, 0.0, 4.0, TOL)
    small = PolygonsSet.box(1.0, 2.0, 1.0, 2.0, TOL)
    assert big.contains(small)
    assert not small.contains(big)
    assert big.contains(big)
    assert (big & ~big).is_empty()


def test_intersection_with_sub_line() -> None:
    square = PolygonsSet.from_vertices(UNIT_SQUARE, TOL)
    chord = square.intersection(Line((-5.0, 0.5), (5.0, 0.5), TOL).whole_hyperplane())
    assert chord.size == pytest.approx(1.0)
    assert square.intersection(Line((-5.0, 3.0), (5.0, 3.0), TOL).whole_hyperplane()) is None


def test_vertices_of_l_shape() -> None:
    region = PolygonsSet.from_vertices(L_SHAPE, TOL)
    loops = region.vertices()
    assert len(loops) == 1
    loop = loops[0]
    assert len(loop) == 6
    assert signed_area(loop) == pytest.approx(3.0)
    assert {(round(p.x, 9), round(p.y, 9)) for p in loop} == set(L_SHAPE)


def test_vertices_of_union_form_one_loop() -> None:
    union = PolygonsSet.box(0.0, 2.0, 0.0, 2.0, TOL) | PolygonsSet.box(1.0, 3.0, 1.0, 3.0, TOL)
    loops = union.vertices()
    assert len(loops) == 1
    assert len(loops[0]) == 8
    assert signed_area(loops[0]) == pytest.approx(7.0)


def test_square_with_hole() -> None:
    outer = PolygonsSet.box(0.0, 4.0, 0.0, 4.0, TOL)
    hole = PolygonsSet.box(1.0, 3.0, 1.0, 3.0, TOL)
    ring = outer - hole
    assert ring.size == pytest.approx(12.0)
    loops = ring.vertices()
    assert sorted(signed_area(loop) for loop in loops) == pytest.approx([-4.0, 16.0])


def test_half_plane_has_open_boundary() -> None:
    edge = Line((0.0, 0.0), (1.0, 0.0), TOL).whole_hyperplane()
    half_plane = PolygonsSet.from_boundary([edge], TOL)
    assert math.isinf(half_plane.size)
    assert half_plane.check_point((0.0, 1.0)) == Location.INSIDE
    loops = half_plane.vertices()
    assert len(loops) == 1
    assert loops[0][0] is None


def test_build_convex_square() -> None:
    lines = [
        Line((0.0, 0.0), (1.0, 0.0), TOL),
        Line((1.0, 0.0), (1.0, 1.0), TOL),
        Line((1.0, 1.0), (0.0, 1.0), TOL),
        Line((0.0, 1.0), (0.0, 0.0), TOL),
    ]
    square = RegionFactory().build_convex(*lines)
    assert square.size == pytest.approx(1.0)
    assert square.check_point((0.5, 0.5)) == Location.INSIDE


def test_build_convex_with_opposite_lines_is_empty() -> None:
    line = Line((0.0, 0.0), (1.0, 0.0), TOL)
    region = RegionFactory().build_convex(line, line.reverse())
    assert region.is_empty()


def test_build_convex_rejects_outside_hyperplane() -> None:
    with pytest.raises(NotConvexHyperplanesError):
        RegionFactory().build_convex(
            Line((0.0, 0.0), (1.0, 0.0), TOL),
            Line((0.0, -1.0), (1.0, -1.0), TOL),
        )


def test_reference_helpers() -> None:
    assert signed_area(UNIT_SQUARE) == pytest.approx(1.0)
    assert signed_area(list(reversed(UNIT_SQUARE))) == pytest.approx(-1.0)
    assert even_odd_contains((0.5, 0.5), UNIT_SQUARE)
    assert not even_odd_contains((1.5, 0.5), UNIT_SQUARE)


def test_reunite_rejects_foreign_sub_hyperplane() -> None:
    edge = SubLine.from_points((0.0, 0.0), (1.0, 0.0), TOL)
    with pytest.raises(TypeError):
        edge.reunite((1.0, 0.0))
