"""
One-dimensional sphere (the unit circle).

Points of the circle are angles normalised to ``[0, 2π)``.  The
hyperplanes are :class:`LimitAngle` instances: a location on the circle
with a direction telling which side of it is the plus side.  The circle
is cut open at angle 0, so offsets are plain differences of normalised
angles and an :class:`ArcsSet` tree looks like an intervals tree on
``[0, 2π)``.  Arcs crossing angle 0 are stored as two pieces and joined
again by :meth:`ArcsSet.as_list`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from .bsp_tree import BSPTree
from .euclidean_1d import Interval, collect_intervals
from .hyperplane import AbstractSubHyperplane, Hyperplane, SplitSubHyperplane, SubHyperplane
from .region import Region

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi


def normalize_angle(alpha: float) -> float:
    """Normalise *alpha* to ``[0, 2π)``."""
    if math.isnan(alpha):
        return alpha
    normalized = alpha - TWO_PI * math.floor(alpha / TWO_PI)
    # rounding may land exactly on 2π
    return 0.0 if normalized >= TWO_PI else normalized


@dataclass(frozen=True)
class S1Point:
    """A point of the circle, stored as its normalised angle."""

    alpha: float

    def __post_init__(self):
        object.__setattr__(self, "alpha", normalize_angle(self.alpha))

    @classmethod
    def of(cls, point) -> "S1Point":
        return point if isinstance(point, S1Point) else cls(float(point))

    def distance(self, other: "S1Point") -> float:
        """Shortest angular distance along the circle."""
        delta = abs(self.alpha - other.alpha)
        return min(delta, TWO_PI - delta)


class LimitAngle(Hyperplane):
    """Hyperplane of the circle.

    With ``direct`` True the plus side is made of the angles above the
    location (up to 2π), otherwise of the angles below it (down to 0).
    """

    def __init__(self, location: S1Point, direct: bool, tolerance: float):
        self.location = S1Point.of(location)
        self.direct = direct
        self.tolerance = tolerance

    def offset(self, point) -> float:
        delta = S1Point.of(point).alpha - self.location.alpha
        return delta if self.direct else -delta

    def project(self, point) -> S1Point:
        return self.location

    def same_orientation_as(self, other: Hyperplane) -> bool:
        return self.direct == other.direct

    def probe_points(self):
        return (self.location,)

    def whole_hyperplane(self) -> "SubLimitAngle":
        return SubLimitAngle(self, None)

    def whole_space(self) -> "ArcsSet":
        return ArcsSet(tolerance=self.tolerance)

    @property
    def abscissa(self) -> float:
        return self.location.alpha

    def reverse(self) -> "LimitAngle":
        return LimitAngle(self.location, not self.direct, self.tolerance)

    def __repr__(self) -> str:
        return f"LimitAngle({self.location.alpha!r}, direct={self.direct})"


class SubLimitAngle(AbstractSubHyperplane):
    """Sub-hyperplane of the circle: the limit angle itself."""

    @property
    def size(self) -> float:
        return 0.0

    def is_empty(self) -> bool:
        return False

    def _build_new(self, hyperplane: Hyperplane, remaining_region: Optional[Region]) -> "SubLimitAngle":
        return SubLimitAngle(hyperplane, remaining_region)

    def copy_self(self) -> "SubLimitAngle":
        return self

    def reunite(self, other: SubHyperplane) -> "SubLimitAngle":
        return self

    def split(self, hyperplane: Hyperplane) -> SplitSubHyperplane:
        global_offset = hyperplane.offset(self.hyperplane.location)
        if global_offset < -hyperplane.tolerance:
            return SplitSubHyperplane(None, self)
        if global_offset > hyperplane.tolerance:
            return SplitSubHyperplane(self, None)
        return SplitSubHyperplane(None, None)


@dataclass(frozen=True)
class Arc:
    """Arc from ``lower`` to ``upper`` counter-clockwise.

    ``upper`` may exceed 2π for arcs crossing angle 0; it never exceeds
    ``lower + 2π``.
    """

    lower: float
    upper: float

    @property
    def size(self) -> float:
        return self.upper - self.lower

    @property
    def barycenter(self) -> float:
        return 0.5 * (self.lower + self.upper)

    def contains(self, point, tolerance: float = 0.0) -> bool:
        alpha = S1Point.of(point).alpha
        # bring the angle into [lower, lower + 2π)
        alpha = self.lower + normalize_angle(alpha - self.lower)
        return alpha <= self.upper + tolerance or alpha - TWO_PI >= self.lower - tolerance


class ArcsSet(Region):
    """Region of the circle, union of arcs.

    ``ArcsSet(tolerance=t)`` is the whole circle,
    ``ArcsSet(lower, upper, t)`` a single arc and
    ``ArcsSet(tree=..., tolerance=t)`` wraps an existing tree.
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
                tree = _build_arc_tree(lower, upper, tolerance)
        super().__init__(tree, tolerance)

    def build_new(self, tree: BSPTree) -> "ArcsSet":
        return ArcsSet(tree=tree, tolerance=self.tolerance)

    def as_list(self) -> List[Arc]:
        """Return the sorted list of disjoint arcs covered by the set."""
        raw: List[Interval] = []
        collect_intervals(self.get_tree(False), 0.0, TWO_PI, raw)
        raw.sort(key=lambda interval: interval.lower)

        arcs: List[Arc] = []
        for interval in raw:
            if arcs and interval.lower <= arcs[-1].upper + self.tolerance:
                last = arcs[-1]
                arcs[-1] = Arc(last.lower, max(last.upper, interval.upper))
            else:
                arcs.append(Arc(interval.lower, interval.upper))

        if len(arcs) > 1 and arcs[0].lower <= self.tolerance and arcs[-1].upper >= TWO_PI - self.tolerance:
            # the first and last arcs are two halves of an arc crossing 0
            first = arcs.pop(0)
            last = arcs.pop()
            arcs.append(Arc(last.lower, first.upper + TWO_PI))
        return arcs

    def _compute_geometrical_properties(self) -> None:
        tree = self.get_tree(False)
        if tree.cut is None:
            self._set_size(TWO_PI if tree.attribute else 0.0)
            self._set_barycenter(S1Point(math.nan) if tree.attribute else None)
            return

        size = 0.0
        weighted = 0.0
        for arc in self.as_list():
            size += arc.size
            weighted += arc.size * arc.barycenter
        self._set_size(size)
        if size >= TWO_PI - self.tolerance:
            self._set_barycenter(S1Point(math.nan))
        elif size > 0.0:
            self._set_barycenter(S1Point(weighted / size))
        else:
            self._set_barycenter(tree.cut.hyperplane.location)


def _build_arc_tree(lower: float, upper: float, tolerance: float) -> BSPTree:
    if lower > upper:
        raise ValueError(f"arc lower bound {lower} is above its upper bound {upper}")
    if lower == upper or upper - lower >= TWO_PI:
        # the tree must cover the whole circle
        return BSPTree(True)

    normalized_lower = normalize_angle(lower)
    normalized_upper = normalized_lower + (upper - lower)
    lower_cut = LimitAngle(S1Point(normalized_lower), False, tolerance).whole_hyperplane()

    if normalized_upper < TWO_PI:
        # regular arc, starting after 0 and ending before 2π
        upper_cut = LimitAngle(S1Point(normalized_upper), True, tolerance).whole_hyperplane()
        return BSPTree.internal(
            lower_cut,
            BSPTree(False),
            BSPTree.internal(upper_cut, BSPTree(False), BSPTree(True), None),
            None,
        )

    if normalized_upper == TWO_PI:
        return BSPTree.internal(lower_cut, BSPTree(False), BSPTree(True), None)

    # arc crossing angle 0
    upper_cut = LimitAngle(S1Point(normalized_upper - TWO_PI), True, tolerance).whole_hyperplane()
    return BSPTree.internal(
        lower_cut,
        BSPTree.internal(upper_cut, BSPTree(False), BSPTree(True), None),
        BSPTree(True),
        None,
    )
