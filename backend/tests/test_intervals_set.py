"""Tests for one-dimensional interval sets and their boolean operations."""

from __future__ import annotations

import math
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from bspgeom.services.euclidean_1d import IntervalsSet, OrientedPoint, Vector1D  # type: ignore
from bspgeom.services.region import Location  # type: ignore
from bspgeom.services.region_factory import RegionFactory  # type: ignore

TOL = 1e-10


def _bounds(region: IntervalsSet) -> list[tuple[float, float]]:
    return [(i.lower, i.upper) for i in region.as_list()]


def test_single_interval_measures() -> None:
    region = IntervalsSet(0.0, 2.0, TOL)
    assert region.size == pytest.approx(2.0)
    assert region.barycenter.x == pytest.approx(1.0)
    assert region.inf == 0.0
    assert region.sup == 2.0


def test_check_point_locations() -> None:
    region = IntervalsSet(0.0, 2.0, TOL)
    assert region.check_point(Vector1D(1.0)) == Location.INSIDE
    assert region.check_point(Vector1D(3.0)) == Location.OUTSIDE
    assert region.check_point(Vector1D(0.0)) == Location.BOUNDARY
    assert region.check_point(2.0) == Location.BOUNDARY
    assert 1.5 in region
    assert -1.0 not in region


def test_half_line_is_infinite() -> None:
    region = IntervalsSet(0.0, None, TOL)
    assert math.isinf(region.size)
    assert region.inf == 0.0
    assert math.isinf(region.sup)


def test_whole_line_and_empty_set() -> None:
    whole = IntervalsSet(tolerance=TOL)
    assert whole.is_full()
    assert math.isinf(whole.size)
    empty = RegionFactory().complement(whole)
    assert empty.is_empty()
    assert empty.size == 0.0


def test_union_of_disjoint_intervals() -> None:
    region = IntervalsSet(0.0, 1.0, TOL) | IntervalsSet(2.0, 3.0, TOL)
    assert _bounds(region) == [(0.0, 1.0), (2.0, 3.0)]
    assert region.size == pytest.approx(2.0)


def test_union_of_overlapping_intervals() -> None:
    region = RegionFactory().union(IntervalsSet(0.0, 2.0, TOL), IntervalsSet(1.0, 3.0, TOL))
    assert _bounds(region) == [(0.0, 3.0)]


def test_intersection_difference_and_xor() -> None:
    a = IntervalsSet(0.0, 2.0, TOL)
    b = IntervalsSet(1.0, 3.0, TOL)
    assert _bounds(a & b) == [(1.0, 2.0)]
    assert _bounds(a - b) == [(0.0, 1.0)]
    assert _bounds(b - a) == [(2.0, 3.0)]
    assert _bounds(a ^ b) == [(0.0, 1.0), (2.0, 3.0)]


def test_difference_can_split_an_interval() -> None:
    region = IntervalsSet(0.0, 3.0, TOL) - IntervalsSet(1.0, 2.0, TOL)
    assert _bounds(region) == [(0.0, 1.0), (2.0, 3.0)]


def test_operations_leave_inputs_untouched() -> None:
    a = IntervalsSet(0.0, 2.0, TOL)
    b = IntervalsSet(1.0, 3.0, TOL)
    _ = a | b
    _ = a - b
    assert _bounds(a) == [(0.0, 2.0)]
    assert _bounds(b) == [(1.0, 3.0)]


def test_complement_of_interval() -> None:
    region = ~IntervalsSet(0.0, 2.0, TOL)
    assert _bounds(region) == [(-math.inf, 0.0), (2.0, math.inf)]
    assert region.check_point(1.0) == Location.OUTSIDE


def test_region_containment() -> None:
    big = IntervalsSet(0.0, 4.0, TOL)
    small = IntervalsSet(1.0, 2.0, TOL)
    assert big.contains(small)
    assert not small.contains(big)
    assert big.contains(big)


def test_from_boundary() -> None:
    boundary = [
        OrientedPoint(Vector1D(1.0), False, TOL).whole_hyperplane(),
        OrientedPoint(Vector1D(4.0), True, TOL).whole_hyperplane(),
    ]
    region = IntervalsSet.from_boundary(boundary, TOL)
    assert _bounds(region) == [(1.0, 4.0)]
