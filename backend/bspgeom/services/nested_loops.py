"""
Orientation correction for nested closed loops.

Outlines extracted from drawings, slices or imported files often come as
a bag of closed polygon loops with arbitrary winding: an island inside a
hole inside an outer boundary may be given clockwise or counter-clockwise
regardless of its role.  :class:`NestedLoops` organises such loops into a
containment forest and rewrites their vertex order so that:

* top-level loops are counter-clockwise (positive signed area);
* each nesting level winds opposite to the loop containing it, so holes
  are clockwise, islands in holes counter-clockwise again, and so on.

Each loop is turned into a finite :class:`PolygonsSet`.  A loop that
bounds an infinite region as supplied (a clockwise loop) is complemented
and remembered as mis-oriented.  Containment between loops is then
decided with region differences and intersections, so loops that merely
touch are accepted while loops whose boundaries cross are rejected.

Typical usage::

    nested = NestedLoops(1e-10)
    for loop in loops:
        nested.add(loop)
    nested.correct_orientation()

The ``loop`` lists passed to :meth:`NestedLoops.add` are reversed in
place by :meth:`NestedLoops.correct_orientation`.  Use
:meth:`NestedLoops.oriented` for a result that leaves them untouched.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from .euclidean_2d import PolygonsSet, loop_edges
from .region_factory import RegionFactory
from .settings import get_settings

logger = logging.getLogger(__name__)


class OpenLoopError(ValueError):
    """Raised when a loop is not closed (leading ``None`` sentinel or no vertex)."""


class CrossingLoopsError(ValueError):
    """Raised when a loop partially overlaps a loop already inserted."""


class DegenerateLoopError(ValueError):
    """Raised when a loop does not enclose a finite, non-empty area."""


@dataclass
class OrientedLoop:
    """Loop with its vertices in corrected order, and its nested loops."""

    vertices: Tuple
    depth: int
    children: List["OrientedLoop"] = field(default_factory=list)

    def walk(self) -> Iterator["OrientedLoop"]:
        yield self
        for child in self.children:
            yield from child.walk()


class LoopNode:
    """Node of the containment forest.

    Attributes:
        loop: The caller's vertex list, ``None`` for the synthetic root.
        surrounded: Nodes directly enclosed by this one.
        polygon: Finite region bounded by the loop, ``None`` for the root.
        ccw: Whether the loop as currently stored has its interior on its
            left (counter-clockwise for an outer loop).  Set from the
            supplied winding, updated when the loop is reversed.
        tolerance: Tolerance used to build the polygon.
    """

    def __init__(self, loop: Optional[list], tolerance: float):
        self.loop = loop
        self.surrounded: List[LoopNode] = []
        self.tolerance = tolerance
        self.polygon: Optional[PolygonsSet] = None
        self.ccw = True
        if loop is None:
            return

        if len(loop) == 0 or loop[0] is None:
            raise OpenLoopError("An outline boundary loop is open")

        edges = loop_edges(loop, tolerance)
        if not edges:
            raise DegenerateLoopError("An outline boundary loop has no edge")
        polygon = PolygonsSet.from_boundary(edges, tolerance)
        if math.isinf(polygon.size):
            # the loop bounds the outside of its polygon, keep the finite side
            polygon = RegionFactory().complement(polygon)
            self.ccw = False
        # flat loops give a half-plane on both sides, or nothing at all
        if math.isinf(polygon.size) or polygon.is_empty():
            raise DegenerateLoopError("An outline boundary loop encloses no area")
        self.polygon = polygon

    def insert(self, node: "LoopNode") -> None:
        """Insert *node* below this one, at the level where it belongs.

        Raises:
            CrossingLoopsError: If the new loop partially overlaps one of
                the loops at its level.
        """
        for child in self.surrounded:
            if child.polygon.contains(node.polygon):
                child.insert(node)
                return

        # loops enclosed by the new one move below it
        absorbed = []
        kept = []
        for child in self.surrounded:
            if node.polygon.contains(child.polygon):
                absorbed.append(child)
            else:
                kept.append(child)

        factory = RegionFactory()
        for child in kept:
            if not factory.intersection(node.polygon, child.polygon).is_empty():
                raise CrossingLoopsError("Some outline boundary loops cross each other")

        node.surrounded.extend(absorbed)
        self.surrounded = kept
        self.surrounded.append(node)

    def needs_reversal(self, ccw: bool) -> bool:
        return self.loop is not None and self.ccw != ccw

    def oriented(self, ccw: bool, depth: int) -> OrientedLoop:
        vertices = tuple(reversed(self.loop)) if self.needs_reversal(ccw) else tuple(self.loop)
        return OrientedLoop(
            vertices=vertices,
            depth=depth,
            children=[child.oriented(not ccw, depth + 1) for child in self.surrounded],
        )

    def apply(self, oriented: OrientedLoop) -> None:
        """Write the vertex order of *oriented* back into the stored loops."""
        ccw = oriented.depth % 2 == 0
        if self.needs_reversal(ccw):
            self.loop[:] = oriented.vertices
            self.ccw = ccw
        for child, oriented_child in zip(self.surrounded, oriented.children):
            child.apply(oriented_child)


class NestedLoops:
    """Containment forest of closed loops.

    Args:
        tolerance: Tolerance below which points are considered identical.
            Defaults to the configured ``BSPGEOM_TOLERANCE``.
    """

    def __init__(self, tolerance: Optional[float] = None):
        self.tolerance = get_settings().tolerance if tolerance is None else tolerance
        self._root = LoopNode(None, self.tolerance)

    def add(self, loop: list) -> None:
        """Add a closed loop to the forest.

        Args:
            loop: Mutable list of vertices, each a ``Vector2D`` or an
                ``(x, y)`` pair.  The last vertex connects back to the
                first one.  A leading ``None`` marks an open loop.

        Raises:
            OpenLoopError: If the loop is empty or open.
            DegenerateLoopError: If the loop encloses no finite area.
            CrossingLoopsError: If the loop crosses an inserted loop.
        """
        node = LoopNode(loop, self.tolerance)
        self._root.insert(node)
        if get_settings().debug:
            depth = next(d for n, d in self.depth_first() if n is node)
            logger.debug(
                "Inserted loop with %d vertices at depth %d (area %.6g, %s as supplied)",
                len(loop),
                depth,
                node.polygon.size,
                "counter-clockwise" if node.ccw else "clockwise",
            )

    def correct_orientation(self) -> None:
        """Reverse mis-oriented loops in place.

        Top-level loops end up counter-clockwise and the winding alternates
        with the nesting depth.  Calling it a second time is harmless: the
        loops already have the required winding.
        """
        for child, oriented in zip(self._root.surrounded, self.oriented()):
            child.apply(oriented)

    def oriented(self) -> List[OrientedLoop]:
        """Return the corrected loops as a forest, without touching the inputs."""
        return [child.oriented(True, 0) for child in self._root.surrounded]

    @property
    def roots(self) -> List[LoopNode]:
        return list(self._root.surrounded)

    def depth_first(self) -> Iterator[Tuple[LoopNode, int]]:
        """Yield ``(node, depth)`` pairs, parents before their children."""
        stack = [(child, 0) for child in reversed(self._root.surrounded)]
        while stack:
            node, depth = stack.pop()
            yield node, depth
            for child in reversed(node.surrounded):
                stack.append((child, depth + 1))

    def loops(self) -> List[Tuple[Sequence, int]]:
        """Return ``(loop, depth)`` pairs in depth-first order."""
        return [(node.loop, depth) for node, depth in self.depth_first()]

    def __len__(self) -> int:
        return sum(1 for _ in self.depth_first())
