"""
Regions represented by BSP trees.

A :class:`Region` wraps the root of a :class:`BSPTree` whose leaves are
tagged ``True`` (inside) or ``False`` (outside).  It answers point
location and containment queries, reports its size, barycenter and
boundary size, and can be combined with other regions of the same space
through :class:`~bspgeom.services.region_factory.RegionFactory` or the
Python operators ``|``, ``&``, ``^``, ``-`` and ``~``.

Regions can be built from a collection of boundary sub-hyperplanes.  The
boundary elements are inserted top-down, largest first, and every leaf
reached on the minus side of its parent cut is flagged inside.  This
means that the interior of a region is always on the minus side of its
boundary facets; for polygons this makes counter-clockwise loops bound
finite regions.

The size and barycenter depend on the concrete space and are computed
lazily by :meth:`Region._compute_geometrical_properties`.  The tree held
by a region is never shared with another region, so cached values stay
valid for the lifetime of the instance.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional

from .bsp_tree import BSPTree, BSPTreeVisitor, Order
from .hyperplane import Side, SubHyperplane
from .settings import get_settings

logger = logging.getLogger(__name__)


class Location(Enum):
    """Location of a point with respect to a region."""

    INSIDE = "inside"
    OUTSIDE = "outside"
    BOUNDARY = "boundary"


@dataclass
class BoundaryAttribute:
    """Boundary facets carried by the cut of an internal node.

    Attributes:
        plus_outside: Part of the cut having the outside on its plus side
            and the inside on its minus side, or ``None``.
        plus_inside: Part of the cut having the inside on its plus side
            and the outside on its minus side, or ``None``.
    """

    plus_outside: Optional[SubHyperplane] = None
    plus_inside: Optional[SubHyperplane] = None

    def reversed(self) -> "BoundaryAttribute":
        """Attribute of the complemented region: both halves swap roles."""
        return BoundaryAttribute(
            plus_outside=None if self.plus_inside is None else self.plus_inside.copy_self(),
            plus_inside=None if self.plus_outside is None else self.plus_outside.copy_self(),
        )


class _Characterization:
    """Split of a sub-hyperplane into parts touching inside and outside leaves."""

    def __init__(self, node: BSPTree, sub: SubHyperplane, plus_side: bool):
        self.outside_touching: Optional[SubHyperplane] = None
        self.inside_touching: Optional[SubHyperplane] = None
        self._plus_side = plus_side
        self._characterize(node, sub)

    def _characterize(self, node: BSPTree, sub: SubHyperplane) -> None:
        if node.cut is None:
            if node.attribute:
                self.inside_touching = sub if self.inside_touching is None else self.inside_touching.reunite(sub)
            else:
                self.outside_touching = sub if self.outside_touching is None else self.outside_touching.reunite(sub)
            return
        split = sub.split(node.cut.hyperplane)
        side = split.side
        if side == Side.PLUS:
            self._characterize(node.plus, sub)
        elif side == Side.MINUS:
            self._characterize(node.minus, sub)
        elif side == Side.BOTH:
            self._characterize(node.plus, split.plus)
            self._characterize(node.minus, split.minus)
        else:
            # the sub-hyperplane lies on a cut of the sub-tree, follow the
            # side of that cut facing the characterized cell
            same = node.cut.hyperplane.same_orientation_as(sub.hyperplane)
            self._characterize(node.plus if same == self._plus_side else node.minus, sub)


class _BoundaryBuilder(BSPTreeVisitor):
    """Set the boundary attributes of all internal nodes."""

    def visit_order(self, node: BSPTree) -> Order:
        return Order.PLUS_MINUS_SUB

    def visit_internal_node(self, node: BSPTree) -> None:
        plus_outside = None
        plus_inside = None

        # cuts copied around by merges may overhang their cell
        cut = node.fit_to_cell(node.cut.copy_self())
        if cut is None:
            node.attribute = BoundaryAttribute()
            return

        plus_char = _Characterization(node.plus, cut, True)
        if plus_char.outside_touching is not None and not plus_char.outside_touching.is_empty():
            minus_char = _Characterization(node.minus, plus_char.outside_touching, False)
            if minus_char.inside_touching is not None and not minus_char.inside_touching.is_empty():
                plus_outside = minus_char.inside_touching

        if plus_char.inside_touching is not None and not plus_char.inside_touching.is_empty():
            minus_char = _Characterization(node.minus, plus_char.inside_touching, False)
            if minus_char.outside_touching is not None and not minus_char.outside_touching.is_empty():
                plus_inside = minus_char.outside_touching

        node.attribute = BoundaryAttribute(plus_outside, plus_inside)

    def visit_leaf_node(self, node: BSPTree) -> None:
        pass


class _InternalNodeCleaner(BSPTreeVisitor):
    """Drop stale boundary attributes from a freshly merged tree."""

    def visit_order(self, node: BSPTree) -> Order:
        return Order.PLUS_SUB_MINUS

    def visit_internal_node(self, node: BSPTree) -> None:
        node.attribute = None

    def visit_leaf_node(self, node: BSPTree) -> None:
        pass


class _MinusLeavesInside(BSPTreeVisitor):
    """Flag leaves reached through a minus branch as inside."""

    def visit_order(self, node: BSPTree) -> Order:
        return Order.PLUS_SUB_MINUS

    def visit_internal_node(self, node: BSPTree) -> None:
        pass

    def visit_leaf_node(self, node: BSPTree) -> None:
        node.attribute = node.parent is None or node is node.parent.minus


def clean_internal_attributes(tree: BSPTree) -> None:
    tree.visit(_InternalNodeCleaner())


class Region(ABC):
    """Region of a space, represented by a BSP tree.

    Args:
        tree: Root of the BSP tree; leaf attributes must be booleans.  The
            tree is adopted, not copied.
        tolerance: Tolerance below which points are considered identical.
    """

    def __init__(self, tree: BSPTree, tolerance: float):
        self._tree = tree
        self.tolerance = tolerance
        self._size: Optional[float] = None
        self._barycenter: Any = None

    # ------------------------------------------------------------------
    # construction helpers
    # ------------------------------------------------------------------

    @staticmethod
    def tree_from_boundary(boundary: Iterable[SubHyperplane]) -> BSPTree:
        """Build the tree of the region bounded by *boundary*.

        The interior of the region lies on the minus side of every
        boundary element.  An empty boundary yields the whole space.
        """
        # stable sort, equal-size elements all survive
        ordered = sorted(boundary, key=lambda sub: sub.size, reverse=True)
        if not ordered:
            return BSPTree(True)

        tree = BSPTree()
        _insert_cuts(tree, ordered)
        tree.visit(_MinusLeavesInside())
        if get_settings().debug:
            logger.debug(
                "Region tree built from %d boundary elements: depth=%d leaves=%d",
                len(ordered),
                tree.depth(),
                tree.leaf_count(),
            )
        return tree

    @abstractmethod
    def build_new(self, tree: BSPTree) -> "Region":
        """Build a region of the same type and tolerance from *tree*."""

    def copy_self(self) -> "Region":
        return self.build_new(self._tree.copy_self())

    # ------------------------------------------------------------------
    # tree access
    # ------------------------------------------------------------------

    def get_tree(self, include_boundary_attributes: bool = False) -> BSPTree:
        """Return the underlying tree.

        Args:
            include_boundary_attributes: If True, make sure every internal
                node carries its :class:`BoundaryAttribute`.
        """
        if include_boundary_attributes and self._tree.cut is not None and self._tree.attribute is None:
            self._tree.visit(_BoundaryBuilder())
        return self._tree

    @property
    def tree(self) -> BSPTree:
        return self._tree

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def is_empty(self, node: Optional[BSPTree] = None) -> bool:
        """Return True if the region (or the sub-tree *node*) has no inside cell."""
        node = self._tree if node is None else node
        if node.cut is None:
            return not node.attribute
        return self.is_empty(node.minus) and self.is_empty(node.plus)

    def is_full(self, node: Optional[BSPTree] = None) -> bool:
        """Return True if the region (or the sub-tree *node*) has no outside cell."""
        node = self._tree if node is None else node
        if node.cut is None:
            return bool(node.attribute)
        return self.is_full(node.minus) and self.is_full(node.plus)

    def check_point(self, point: Any, node: Optional[BSPTree] = None) -> Location:
        """Locate *point* with respect to the region."""
        node = self._tree if node is None else node
        cell = node.get_cell(point, self.tolerance)
        if cell.cut is None:
            return Location.INSIDE if cell.attribute else Location.OUTSIDE
        # the point lies on a cut, it is on the boundary only if both sides differ
        minus_code = self.check_point(point, cell.minus)
        plus_code = self.check_point(point, cell.plus)
        return minus_code if minus_code == plus_code else Location.BOUNDARY

    def contains(self, other: Any) -> bool:
        """Check whether a point or a whole region lies in the instance.

        Boundary points are considered contained.  For regions the test
        is ``difference(other, self).is_empty()``: *other* is contained
        if nothing of it remains outside the instance.
        """
        if isinstance(other, Region):
            from .region_factory import RegionFactory  # Local import to avoid cycles

            return RegionFactory().difference(other, self).is_empty()
        return self.check_point(other) != Location.OUTSIDE

    def __contains__(self, point: Any) -> bool:
        return self.contains(point)

    @property
    def size(self) -> float:
        if self._size is None:
            self._compute_geometrical_properties()
        return self._size

    @property
    def barycenter(self) -> Any:
        if self._size is None:
            self._compute_geometrical_properties()
        return self._barycenter

    def _set_size(self, size: float) -> None:
        self._size = size

    def _set_barycenter(self, barycenter: Any) -> None:
        self._barycenter = barycenter

    @abstractmethod
    def _compute_geometrical_properties(self) -> None:
        """Compute and store size and barycenter (via the setters)."""

    @property
    def boundary_size(self) -> float:
        """Total measure of the boundary facets."""
        total = 0.0
        for facet in self.boundary_facets():
            total += facet.size
        return total

    def boundary_facets(self) -> List[SubHyperplane]:
        """Return the boundary facets, oriented as stored in the cuts.

        Each facet is paired implicitly with its cut: use
        :meth:`boundary_attributes` when the inside side matters.
        """
        facets: List[SubHyperplane] = []
        for _, attribute in self.boundary_attributes():
            if attribute is None:
                continue
            if attribute.plus_outside is not None:
                facets.append(attribute.plus_outside)
            if attribute.plus_inside is not None:
                facets.append(attribute.plus_inside)
        return facets

    def boundary_attributes(self) -> List[tuple]:
        """Return ``(node, BoundaryAttribute)`` pairs for all internal nodes."""
        pairs: List[tuple] = []
        stack = [self.get_tree(True)]
        while stack:
            node = stack.pop()
            if node.cut is None:
                continue
            pairs.append((node, node.attribute))
            stack.append(node.minus)
            stack.append(node.plus)
        return pairs

    def intersection(self, sub: SubHyperplane) -> Optional[SubHyperplane]:
        """Return the part of *sub* lying inside the region, or None."""
        return self._recurse_intersection(self._tree, sub)

    def _recurse_intersection(self, node: BSPTree, sub: Optional[SubHyperplane]) -> Optional[SubHyperplane]:
        if sub is None:
            return None
        if node.cut is None:
            return sub.copy_self() if node.attribute else None

        split = sub.split(node.cut.hyperplane)
        if split.plus is not None:
            if split.minus is not None:
                plus = self._recurse_intersection(node.plus, split.plus)
                minus = self._recurse_intersection(node.minus, split.minus)
                if plus is None:
                    return minus
                if minus is None:
                    return plus
                return plus.reunite(minus)
            return self._recurse_intersection(node.plus, sub)
        if split.minus is not None:
            return self._recurse_intersection(node.minus, sub)
        # the sub-hyperplane lies on the cut
        return self._recurse_intersection(node.plus, self._recurse_intersection(node.minus, sub))

    # ------------------------------------------------------------------
    # operators
    # ------------------------------------------------------------------

    def __or__(self, other: "Region") -> "Region":
        from .region_factory import RegionFactory  # Local import to avoid cycles

        return RegionFactory().union(self, other)

    def __and__(self, other: "Region") -> "Region":
        from .region_factory import RegionFactory  # Local import to avoid cycles

        return RegionFactory().intersection(self, other)

    def __xor__(self, other: "Region") -> "Region":
        from .region_factory import RegionFactory  # Local import to avoid cycles

        return RegionFactory().xor(self, other)

    def __sub__(self, other: "Region") -> "Region":
        from .region_factory import RegionFactory  # Local import to avoid cycles

        return RegionFactory().difference(self, other)

    def __invert__(self) -> "Region":
        from .region_factory import RegionFactory  # Local import to avoid cycles

        return RegionFactory().complement(self)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(leaves={self._tree.leaf_count()}, tolerance={self.tolerance})"


def _insert_cuts(node: BSPTree, boundary: List[SubHyperplane]) -> None:
    """Insert the boundary elements top-down below *node*."""
    index = 0
    inserted = None
    while inserted is None and index < len(boundary):
        inserted = boundary[index].hyperplane
        index += 1
        if not node.insert_cut(inserted.copy_self()):
            inserted = None

    if index >= len(boundary):
        return

    plus_list: List[SubHyperplane] = []
    minus_list: List[SubHyperplane] = []
    for other in boundary[index:]:
        split = other.split(inserted)
        side = split.side
        if side == Side.PLUS:
            plus_list.append(other)
        elif side == Side.MINUS:
            minus_list.append(other)
        elif side == Side.BOTH:
            plus_list.append(split.plus)
            minus_list.append(split.minus)
        # elements lying on the inserted hyperplane are already covered

    _insert_cuts(node.plus, plus_list)
    _insert_cuts(node.minus, minus_list)
