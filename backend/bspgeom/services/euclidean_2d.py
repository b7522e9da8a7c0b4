"""
Two-dimensional Euclidean space.

The hyperplanes of the plane are oriented lines.  A :class:`Line` built
from two points is directed from the first point to the second one; its
minus side (negative offset) is on the left of that direction.  Since
region interiors lie on the minus side of their boundary facets, a
counter-clockwise loop of points bounds a finite polygon while the same
loop given clockwise bounds the infinite complement of that polygon.

Sub-lines carry an :class:`IntervalsSet` of abscissas along their line.
:class:`PolygonsSet` is the 2D region type: it computes its area and
barycenter with Green's theorem over the oriented boundary segments and
can extract its boundary as vertex loops.

The module also provides the loop helpers used by callers and tests:
the shoelace :func:`signed_area` and the even-odd ray casting
:func:`even_odd_contains`, both vectorised with numpy.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .bsp_tree import BSPTree
from .euclidean_1d import IntervalsSet, OrientedPoint, Vector1D
from .hyperplane import AbstractSubHyperplane, Hyperplane, SplitSubHyperplane
from .region import Region

logger = logging.getLogger(__name__)

# abscissa used for the far dummy points of open loops
_FAR = 3.4028234663852886e38


@dataclass(frozen=True)
class Vector2D:
    """A point (or vector) of the plane."""

    x: float
    y: float

    @classmethod
    def of(cls, point) -> "Vector2D":
        """Coerce a ``Vector2D`` or any ``(x, y)`` sequence."""
        if isinstance(point, Vector2D):
            return point
        return cls(float(point[0]), float(point[1]))

    def __iter__(self):
        yield self.x
        yield self.y

    def __add__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Vector2D":
        return Vector2D(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def dot(self, other: "Vector2D") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vector2D") -> float:
        return self.x * other.y - self.y * other.x

    def norm(self) -> float:
        return math.hypot(self.x, self.y)

    def distance(self, other: "Vector2D") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def is_nan(self) -> bool:
        return math.isnan(self.x) or math.isnan(self.y)


NAN_VECTOR = Vector2D(math.nan, math.nan)


class Line(Hyperplane):
    """Oriented line of the plane.

    Args:
        p1: First point, origin of the direction.
        p2: Second point.
        tolerance: Tolerance below which points are considered identical.
    """

    def __init__(self, p1, p2, tolerance: float):
        p1 = Vector2D.of(p1)
        p2 = Vector2D.of(p2)
        self.tolerance = tolerance
        dx = p2.x - p1.x
        dy = p2.y - p1.y
        d = math.hypot(dx, dy)
        if d == 0.0:
            self.angle = 0.0
            self.cos = 1.0
            self.sin = 0.0
            self.origin_offset = p1.y
        else:
            self.angle = math.pi + math.atan2(-dy, -dx)
            self.cos = dx / d
            self.sin = dy / d
            self.origin_offset = math.fsum((p2.x * p1.y, -p1.x * p2.y)) / d

    @classmethod
    def from_angle(cls, point, angle: float, tolerance: float) -> "Line":
        """Line through *point* with direction *angle* (radians)."""
        point = Vector2D.of(point)
        return cls(point, Vector2D(point.x + math.cos(angle), point.y + math.sin(angle)), tolerance)

    @classmethod
    def _from_fields(cls, angle: float, cos: float, sin: float, origin_offset: float, tolerance: float) -> "Line":
        line = cls.__new__(cls)
        line.angle = angle
        line.cos = cos
        line.sin = sin
        line.origin_offset = origin_offset
        line.tolerance = tolerance
        return line

    def reverse(self) -> "Line":
        angle = self.angle + math.pi if self.angle < math.pi else self.angle - math.pi
        return Line._from_fields(angle, -self.cos, -self.sin, -self.origin_offset, self.tolerance)

    def offset(self, point) -> float:
        point = Vector2D.of(point)
        return self.sin * point.x - self.cos * point.y + self.origin_offset

    def offset_of_line(self, line: "Line") -> float:
        """Offset of a parallel *line* with respect to the instance."""
        same = self.cos * line.cos + self.sin * line.sin > 0
        return self.origin_offset + (-line.origin_offset if same else line.origin_offset)

    def to_sub_space(self, point) -> Vector1D:
        point = Vector2D.of(point)
        return Vector1D(self.cos * point.x + self.sin * point.y)

    def to_space(self, abscissa) -> Vector2D:
        a = abscissa.x if isinstance(abscissa, Vector1D) else float(abscissa)
        return Vector2D(
            a * self.cos - self.origin_offset * self.sin,
            a * self.sin + self.origin_offset * self.cos,
        )

    def project(self, point) -> Vector2D:
        return self.to_space(self.to_sub_space(point))

    def intersection(self, other: "Line") -> Optional[Vector2D]:
        """Intersection point with *other*, None if the lines are parallel."""
        d = self.sin * other.cos - other.sin * self.cos
        if abs(d) < self.tolerance:
            return None
        return Vector2D(
            (self.cos * other.origin_offset - other.cos * self.origin_offset) / d,
            (self.sin * other.origin_offset - other.sin * self.origin_offset) / d,
        )

    def is_parallel_to(self, other: "Line") -> bool:
        return abs(self.sin * other.cos - self.cos * other.sin) < self.tolerance

    def contains(self, point) -> bool:
        return abs(self.offset(point)) < self.tolerance

    def distance(self, point) -> float:
        return abs(self.offset(point))

    def same_orientation_as(self, other: Hyperplane) -> bool:
        return self.sin * other.sin + self.cos * other.cos >= 0.0

    def probe_points(self):
        return (self.to_space(0.0), self.to_space(1.0))

    def whole_hyperplane(self) -> "SubLine":
        return SubLine(self, IntervalsSet(tolerance=self.tolerance))

    def whole_space(self) -> "PolygonsSet":
        return PolygonsSet(tolerance=self.tolerance)

    def __repr__(self) -> str:
        return f"Line(angle={self.angle:.6g}, origin_offset={self.origin_offset:.6g})"


@dataclass(frozen=True)
class Segment:
    """Piece of a line; ``start``/``end`` are None at infinity."""

    start: Optional[Vector2D]
    end: Optional[Vector2D]
    line: Line

    @property
    def length(self) -> float:
        if self.start is None or self.end is None:
            return math.inf
        return self.start.distance(self.end)


class SubLine(AbstractSubHyperplane):
    """Sub-hyperplane of the plane: a set of segments on a line."""

    def __init__(self, line: Line, remaining_region: IntervalsSet):
        super().__init__(line, remaining_region)

    @classmethod
    def from_points(cls, start, end, tolerance: float) -> "SubLine":
        """Segment from *start* to *end*, oriented in that direction."""
        line = Line(start, end, tolerance)
        return cls(
            line,
            IntervalsSet(line.to_sub_space(start).x, line.to_sub_space(end).x, tolerance),
        )

    @property
    def line(self) -> Line:
        return self.hyperplane

    def _build_new(self, hyperplane: Hyperplane, remaining_region: Region) -> "SubLine":
        return SubLine(hyperplane, remaining_region)

    def segments(self) -> List[Segment]:
        line = self.line
        result = []
        for interval in self.remaining_region.as_list():
            start = None if math.isinf(interval.lower) else line.to_space(interval.lower)
            end = None if math.isinf(interval.upper) else line.to_space(interval.upper)
            result.append(Segment(start, end, line))
        return result

    def split(self, hyperplane: Hyperplane) -> SplitSubHyperplane:
        this_line = self.line
        other_line: Line = hyperplane
        tolerance = this_line.tolerance
        crossing = this_line.intersection(other_line)

        if crossing is None:
            # the lines are parallel
            global_offset = other_line.offset_of_line(this_line)
            if global_offset < -tolerance:
                return SplitSubHyperplane(None, self)
            if global_offset > tolerance:
                return SplitSubHyperplane(self, None)
            return SplitSubHyperplane(None, None)

        direct = math.sin(this_line.angle - other_line.angle) < 0
        x = this_line.to_sub_space(crossing)
        sub_plus = OrientedPoint(x, not direct, tolerance).whole_hyperplane()
        sub_minus = OrientedPoint(x, direct, tolerance).whole_hyperplane()

        remaining: IntervalsSet = self.remaining_region
        split_tree = remaining.get_tree(False).split(sub_minus)

        plus = None
        if not remaining.is_empty(split_tree.plus):
            plus_tree = BSPTree.internal(sub_plus, BSPTree(False), split_tree.plus, None)
            plus = SubLine(this_line, IntervalsSet(tree=plus_tree, tolerance=tolerance))
        minus = None
        if not remaining.is_empty(split_tree.minus):
            minus_tree = BSPTree.internal(sub_minus, BSPTree(False), split_tree.minus, None)
            minus = SubLine(this_line, IntervalsSet(tree=minus_tree, tolerance=tolerance))
        return SplitSubHyperplane(plus, minus)


class PolygonsSet(Region):
    """Region of the plane.

    ``PolygonsSet(tolerance)`` is the whole plane; use
    :meth:`from_boundary`, :meth:`from_vertices` or :meth:`box` to build
    bounded polygons.
    """

    def __init__(self, tolerance: float = 1e-10, tree: Optional[BSPTree] = None):
        super().__init__(BSPTree(True) if tree is None else tree, tolerance)

    @classmethod
    def from_boundary(cls, edges: Iterable[SubLine], tolerance: float) -> "PolygonsSet":
        """Polygon whose interior lies on the left of every edge."""
        return cls(tolerance=tolerance, tree=Region.tree_from_boundary(edges))

    @classmethod
    def from_vertices(cls, vertices: Sequence, tolerance: float) -> "PolygonsSet":
        """Polygon bounded by the closed loop through *vertices*.

        Counter-clockwise loops give finite polygons, clockwise loops their
        infinite complement.
        """
        return cls.from_boundary(loop_edges(vertices, tolerance), tolerance)

    @classmethod
    def box(cls, x_min: float, x_max: float, y_min: float, y_max: float, tolerance: float) -> "PolygonsSet":
        return cls.from_vertices(
            [(x_min, y_min), (x_max, y_min), (x_max, y_max), (x_min, y_max)], tolerance
        )

    def build_new(self, tree: BSPTree) -> "PolygonsSet":
        return PolygonsSet(tolerance=self.tolerance, tree=tree)

    def oriented_segments(self) -> List[Segment]:
        """Boundary segments oriented with the interior on their left."""
        segments: List[Segment] = []
        for node, attribute in self.boundary_attributes():
            if attribute is None:
                continue
            if attribute.plus_outside is not None:
                segments.extend(attribute.plus_outside.segments())
            if attribute.plus_inside is not None:
                for segment in attribute.plus_inside.segments():
                    segments.append(Segment(segment.end, segment.start, segment.line.reverse()))
        return segments

    def _compute_geometrical_properties(self) -> None:
        segments = self.oriented_segments()
        if not segments:
            if self.is_empty():
                self._set_size(0.0)
                self._set_barycenter(Vector2D(0.0, 0.0))
            else:
                # no boundary at all but some inside cell: the whole plane
                self._set_size(math.inf)
                self._set_barycenter(NAN_VECTOR)
            return

        if any(segment.start is None or segment.end is None for segment in segments):
            # at least one infinite boundary segment: the polygon is infinite
            self._set_size(math.inf)
            self._set_barycenter(NAN_VECTOR)
            return

        starts = np.array([(s.start.x, s.start.y) for s in segments], dtype=float)
        ends = np.array([(s.end.x, s.end.y) for s in segments], dtype=float)
        factor = starts[:, 0] * ends[:, 1] - starts[:, 1] * ends[:, 0]
        total = math.fsum(factor)
        if total < 0:
            # a finite outside surrounded by an infinite inside
            self._set_size(math.inf)
            self._set_barycenter(NAN_VECTOR)
            return

        self._set_size(total / 2.0)
        if total == 0.0:
            self._set_barycenter(NAN_VECTOR)
            return
        sum_x = math.fsum(factor * (starts[:, 0] + ends[:, 0]))
        sum_y = math.fsum(factor * (starts[:, 1] + ends[:, 1]))
        self._set_barycenter(Vector2D(sum_x / (3.0 * total), sum_y / (3.0 * total)))

    def vertices(self) -> List[List[Optional[Vector2D]]]:
        """Return the boundary as loops of vertices.

        Closed loops are lists of vertices oriented with the interior on
        their left (outer boundaries counter-clockwise, holes clockwise).
        Open loops, produced by infinite boundaries, start with a ``None``
        sentinel followed by a far dummy point, the finite vertices and a
        far dummy point at the other end.
        """
        remaining = self.oriented_segments()
        link_tolerance = max(10.0 * self.tolerance, 1e-8)
        loops: List[List[Optional[Vector2D]]] = []

        while remaining:
            first = next((s for s in remaining if s.start is None), remaining[0])
            remaining.remove(first)
            chain = [first]
            while True:
                end = chain[-1].end
                if end is None:
                    break
                if chain[0].start is not None and end.distance(chain[0].start) <= link_tolerance:
                    break
                successor = _closest_successor(end, remaining, link_tolerance)
                if successor is None:
                    break
                remaining.remove(successor)
                chain.append(successor)

            if chain[0].start is None:
                loops.append(_open_loop(chain))
            else:
                loop = _remove_collinear([segment.start for segment in chain], self.tolerance)
                if len(loop) >= 3:
                    loops.append(loop)
        return loops


def _closest_successor(end: Vector2D, candidates: List[Segment], link_tolerance: float) -> Optional[Segment]:
    best = None
    best_distance = link_tolerance
    for candidate in candidates:
        if candidate.start is None:
            continue
        distance = end.distance(candidate.start)
        if distance <= best_distance:
            best = candidate
            best_distance = distance
    return best


def _open_loop(chain: List[Segment]) -> List[Optional[Vector2D]]:
    first = chain[0]
    last = chain[-1]
    if first.end is None:
        # a single infinite line
        return [None, first.line.to_space(-_FAR), first.line.to_space(_FAR)]

    x = first.line.to_sub_space(first.end).x
    x -= max(1.0, abs(x / 2))
    loop: List[Optional[Vector2D]] = [None, first.line.to_space(x)]
    loop.extend(segment.end for segment in chain if segment.end is not None)
    if last.end is None:
        x = last.line.to_sub_space(last.start).x
        x += max(1.0, abs(x / 2))
        loop.append(last.line.to_space(x))
    return loop


def _remove_collinear(loop: List[Vector2D], tolerance: float) -> List[Vector2D]:
    """Drop vertices lying on the segment joining their neighbours."""
    changed = True
    while changed and len(loop) >= 3:
        changed = False
        for i in range(len(loop)):
            previous = loop[i - 1]
            current = loop[i]
            following = loop[(i + 1) % len(loop)]
            if previous.distance(following) == 0.0:
                continue
            chord = following - previous
            distance = abs(chord.cross(current - previous)) / chord.norm()
            if distance < tolerance and (current - previous).dot(following - current) >= 0:
                del loop[i]
                changed = True
                break
    return loop


def loop_edges(vertices: Sequence, tolerance: float) -> List[SubLine]:
    """Edges ``(vertices[i-1], vertices[i])`` of a closed loop, wrapping around.

    Zero-length edges (consecutive points closer than the tolerance) are
    skipped.
    """
    points = [Vector2D.of(v) for v in vertices]
    edges: List[SubLine] = []
    if not points:
        return edges
    current = points[-1]
    for point in points:
        previous = current
        current = point
        if previous.distance(current) <= tolerance:
            continue
        edges.append(SubLine.from_points(previous, current, tolerance))
    return edges


def signed_area(loop: Sequence) -> float:
    """Signed area of a closed loop (shoelace formula).

    Positive for counter-clockwise loops, negative for clockwise ones.
    """
    if len(loop) < 3:
        return 0.0
    pts = np.array([tuple(Vector2D.of(p)) for p in loop], dtype=float)
    x = pts[:, 0]
    y = pts[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def even_odd_contains(point, loop: Sequence) -> bool:
    """Even-odd ray casting test of *point* against a closed loop."""
    p = Vector2D.of(point)
    pts = np.array([tuple(Vector2D.of(v)) for v in loop], dtype=float)
    if len(pts) < 3:
        return False
    xi, yi = pts[:, 0], pts[:, 1]
    xj, yj = np.roll(xi, 1), np.roll(yi, 1)
    straddles = (yi > p.y) != (yj > p.y)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = (xj - xi) * (p.y - yi) / (yj - yi) + xi
    crossings = np.count_nonzero(straddles & (p.x < x_cross))
    return bool(crossings % 2)
