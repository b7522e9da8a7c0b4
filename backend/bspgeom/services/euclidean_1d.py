"""
One-dimensional Euclidean space.

The hyperplanes of the real line are oriented points: an
:class:`OrientedPoint` at ``location`` whose plus side is the right
half-line when ``direct`` is True and the left one otherwise.  Regions
are :class:`IntervalsSet` instances, unions of possibly infinite
intervals.  Interval sets are also the remaining regions of 2D
sub-lines, expressed in the abscissa frame of their line.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from .bsp_tree import BSPTree
from .hyperplane import AbstractSubHyperplane, Hyperplane, SplitSubHyperplane, SubHyperplane
from .region import Region

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vector1D:
    """A point of the real line."""

    x: float

    def distance(self, other: "Vector1D") -> float:
        return abs(self.x - other.x)


class OrientedPoint(Hyperplane):
    """Hyperplane of the real line."""

    def __init__(self, location: Vector1D, direct: bool, tolerance: float):
        self.location = location
        self.direct = direct
        self.tolerance = tolerance

    def offset(self, point) -> float:
        x = point.x if isinstance(point, Vector1D) else float(point)
        delta = x - self.location.x
        return delta if self.direct else -delta

    def project(self, point: Vector1D) -> Vector1D:
        return self.location

    def same_orientation_as(self, other: Hyperplane) -> bool:
        return self.direct == other.direct

    def probe_points(self):
        return (self.location,)

    def whole_hyperplane(self) -> "SubOrientedPoint":
        return SubOrientedPoint(self, None)

    def whole_space(self) -> "IntervalsSet":
        return IntervalsSet(tolerance=self.tolerance)

    @property
    def abscissa(self) -> float:
        return self.location.x

    def reverse(self) -> "OrientedPoint":
        return OrientedPoint(self.location, not self.direct, self.tolerance)

    def __repr__(self) -> str:
        return f"OrientedPoint({self.location.x!r}, direct={self.direct})"


class SubOrientedPoint(AbstractSubHyperplane):
    """Sub-hyperplane of the real line: the oriented point itself."""

    @property
    def size(self) -> float:
        return 0.0

    def is_empty(self) -> bool:
        return False

    def _build_new(self, hyperplane: Hyperplane, remaining_region: Optional[Region]) -> "SubOrientedPoint":
        return SubOrientedPoint(hyperplane, remaining_region)

    def copy_self(self) -> "SubOrientedPoint":
        return self

    def reunite(self, other: SubHyperplane) -> "SubOrientedPoint":
        return self

    def split(self, hyperplane: Hyperplane) -> SplitSubHyperplane:
        global_offset = hyperplane.offset(self.hyperplane.location)
        if global_offset < -hyperplane.tolerance:
            return SplitSubHyperplane(None, self)
        if global_offset > hyperplane.tolerance:
            return SplitSubHyperplane(self, None)
        return SplitSubHyperplane(None, None)


@dataclass(frozen=True)
class Interval:
    """Closed interval of the real line, bounds may be infinite."""

    lower: float
    upper: float

    @property
    def size(self) -> float:
        return self.upper - self.lower

    @property
    def barycenter(self) -> float:
        return 0.5 * (self.lower + self.upper)

    def contains(self, x: float, tolerance: float = 0.0) -> bool:
        return self.lower - tolerance <= x <= self.upper + tolerance


class IntervalsSet(Region):
    """Region of the real line, union of intervals.

    ``IntervalsSet(tolerance=t)`` is the whole line,
    ``IntervalsSet(lower, upper, t)`` a single interval (infinite bounds
    allowed) and ``IntervalsSet(tree=..., tolerance=t)`` wraps an
    existing tree.
    """

    def __init__(
        self,
        lower: Optional[float] = None,
        upper: Optional[float] = None,
        tolerance: float = 1e-10,
        tree: Optional[BSPTree] = None,
    ):
        if tree is None:
            if lower is None and upper is None:
                tree = BSPTree(True)
            else:
                tree = _build_interval_tree(
                    -math.inf if lower is None else lower,
                    math.inf if upper is None else upper,
                    tolerance,
                )
        super().__init__(tree, tolerance)

    @classmethod
    def from_boundary(cls, boundary: List[SubHyperplane], tolerance: float) -> "IntervalsSet":
        return cls(tree=Region.tree_from_boundary(boundary), tolerance=tolerance)

    def build_new(self, tree: BSPTree) -> "IntervalsSet":
        return IntervalsSet(tree=tree, tolerance=self.tolerance)

    def as_list(self) -> List[Interval]:
        """Return the sorted list of disjoint intervals covered by the set."""
        raw: List[Interval] = []
        collect_intervals(self.get_tree(False), -math.inf, math.inf, raw)
        raw.sort(key=lambda interval: interval.lower)

        intervals: List[Interval] = []
        for interval in raw:
            if intervals and interval.lower <= intervals[-1].upper + self.tolerance:
                last = intervals[-1]
                intervals[-1] = Interval(last.lower, max(last.upper, interval.upper))
            else:
                intervals.append(interval)
        return intervals

    @property
    def inf(self) -> float:
        intervals = self.as_list()
        return intervals[0].lower if intervals else math.inf

    @property
    def sup(self) -> float:
        intervals = self.as_list()
        return intervals[-1].upper if intervals else -math.inf

    def _compute_geometrical_properties(self) -> None:
        tree = self.get_tree(False)
        if tree.cut is None:
            self._set_size(math.inf if tree.attribute else 0.0)
            self._set_barycenter(Vector1D(math.nan))
            return

        size = 0.0
        weighted = 0.0
        for interval in self.as_list():
            size += interval.size
            weighted += interval.size * interval.barycenter
        self._set_size(size)
        if math.isinf(size):
            self._set_barycenter(Vector1D(math.nan))
        elif size > 0.0:
            self._set_barycenter(Vector1D(weighted / size))
        else:
            self._set_barycenter(tree.cut.hyperplane.location)


def _build_interval_tree(lower: float, upper: float, tolerance: float) -> BSPTree:
    if math.isinf(lower) and lower < 0:
        if math.isinf(upper) and upper > 0:
            # the tree must cover the whole real line
            return BSPTree(True)
        # open on the negative infinity side
        upper_cut = OrientedPoint(Vector1D(upper), True, tolerance).whole_hyperplane()
        return BSPTree.internal(upper_cut, BSPTree(False), BSPTree(True), None)

    lower_cut = OrientedPoint(Vector1D(lower), False, tolerance).whole_hyperplane()
    if math.isinf(upper) and upper > 0:
        # open on the positive infinity side
        return BSPTree.internal(lower_cut, BSPTree(False), BSPTree(True), None)

    # bounded on both sides
    upper_cut = OrientedPoint(Vector1D(upper), True, tolerance).whole_hyperplane()
    return BSPTree.internal(
        lower_cut,
        BSPTree(False),
        BSPTree.internal(upper_cut, BSPTree(False), BSPTree(True), None),
        None,
    )


def collect_intervals(node: BSPTree, lower: float, upper: float, out: List[Interval]) -> None:
    """Append to *out* the inside cells of an oriented-points tree clipped to [lower, upper]."""
    if lower > upper:
        return
    if node.cut is None:
        if node.attribute:
            out.append(Interval(lower, upper))
        return
    point = node.cut.hyperplane
    x = point.abscissa
    right_lower, right_upper = max(lower, x), upper
    left_lower, left_upper = lower, min(upper, x)
    if point.direct:
        collect_intervals(node.plus, right_lower, right_upper, out)
        collect_intervals(node.minus, left_lower, left_upper, out)
    else:
        collect_intervals(node.plus, left_lower, left_upper, out)
        collect_intervals(node.minus, right_lower, right_upper, out)
