"""
Boolean operations on regions.

Every binary operation is one call to :meth:`BSPTree.merge` with a
different :class:`LeafMerger`: when the merge reaches a leaf of one
operand facing a subtree of the other, the merger decides from the leaf
flag whether the result is the leaf itself, the subtree or its
complement.  The truth tables are:

==============  ===================  ====================
operation       leaf inside          leaf outside
==============  ===================  ====================
union           leaf (inside)        subtree
intersection    subtree              leaf (outside)
xor             complement(subtree)  subtree
difference      see DifferenceMerger
==============  ===================  ====================

Input regions are never modified: their trees are copied before being
merged and the result is wrapped in a new region of the same type as
the first operand.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .bsp_tree import BSPTree, LeafMerger, VanishingCutHandler
from .hyperplane import Hyperplane, Side

if TYPE_CHECKING:
    from .region import Region

logger = logging.getLogger(__name__)


class NotConvexHyperplanesError(ValueError):
    """Raised when hyperplanes given to build a convex region are inconsistent."""


class VanishingToLeaf(VanishingCutHandler):
    """Replace a node whose cut vanished by a leaf.

    If both children are leaves with the same flag the ambiguity is
    harmless and that flag is kept, otherwise ``inside`` is used.
    """

    def __init__(self, inside: bool):
        self.inside = inside

    def fix_node(self, node: BSPTree) -> BSPTree:
        if node.plus.cut is None and node.minus.cut is None and node.plus.attribute == node.minus.attribute:
            return BSPTree(node.plus.attribute)
        return BSPTree(self.inside)


def recurse_complement(node: BSPTree) -> BSPTree:
    """Return a complemented copy of the tree rooted at *node*."""
    if node.cut is None:
        return BSPTree(not node.attribute)

    attribute = node.attribute
    if attribute is not None:
        attribute = attribute.reversed()
    return BSPTree.internal(
        node.cut.copy_self(),
        recurse_complement(node.plus),
        recurse_complement(node.minus),
        attribute,
    )


class UnionMerger(LeafMerger):
    def merge(self, leaf, tree, parent_tree, is_plus_child, leaf_from_instance):
        if leaf.attribute:
            # the leaf node represents an inside cell
            leaf.insert_in_tree(parent_tree, is_plus_child, VanishingToLeaf(True))
            return leaf
        tree.insert_in_tree(parent_tree, is_plus_child, VanishingToLeaf(False))
        return tree


class IntersectionMerger(LeafMerger):
    def merge(self, leaf, tree, parent_tree, is_plus_child, leaf_from_instance):
        if leaf.attribute:
            tree.insert_in_tree(parent_tree, is_plus_child, VanishingToLeaf(True))
            return tree
        # the leaf node represents an outside cell
        leaf.insert_in_tree(parent_tree, is_plus_child, VanishingToLeaf(False))
        return leaf


class XorMerger(LeafMerger):
    def merge(self, leaf, tree, parent_tree, is_plus_child, leaf_from_instance):
        t = recurse_complement(tree) if leaf.attribute else tree
        t.insert_in_tree(parent_tree, is_plus_child, VanishingToLeaf(True))
        return t


class DifferenceMerger(LeafMerger):
    """Merger for ``first - second`` where ``first`` is the instance tree."""

    def merge(self, leaf, tree, parent_tree, is_plus_child, leaf_from_instance):
        if leaf.attribute:
            # inside cell: of first, keep what second does not cover;
            # of second, nothing survives
            arg_tree = recurse_complement(tree if leaf_from_instance else leaf)
            arg_tree.insert_in_tree(parent_tree, is_plus_child, VanishingToLeaf(True))
            return arg_tree
        # outside cell: of first, nothing survives; of second, first is kept
        instance_tree = leaf if leaf_from_instance else tree
        instance_tree.insert_in_tree(parent_tree, is_plus_child, VanishingToLeaf(False))
        return instance_tree


class RegionFactory:
    """Stateless library of boolean operations on regions."""

    def complement(self, region: "Region") -> "Region":
        """Return the complement of *region*; the input is left untouched."""
        return region.build_new(recurse_complement(region.get_tree(False)))

    def union(self, region1: "Region", region2: "Region") -> "Region":
        return self._combine(region1, region2, UnionMerger())

    def intersection(self, region1: "Region", region2: "Region") -> "Region":
        return self._combine(region1, region2, IntersectionMerger())

    def xor(self, region1: "Region", region2: "Region") -> "Region":
        return self._combine(region1, region2, XorMerger())

    def difference(self, region1: "Region", region2: "Region") -> "Region":
        return self._combine(region1, region2, DifferenceMerger())

    def _combine(self, region1: "Region", region2: "Region", merger: LeafMerger) -> "Region":
        from .region import clean_internal_attributes  # Local import to avoid cycles

        tree1 = region1.get_tree(False).copy_self()
        tree2 = region2.get_tree(False).copy_self()
        tree = tree1.merge(tree2, merger)
        clean_internal_attributes(tree)
        return region1.build_new(tree)

    def build_convex(self, *hyperplanes: Hyperplane) -> Optional["Region"]:
        """Build the convex region on the minus side of all *hyperplanes*.

        Returns:
            The convex region, or ``None`` when no hyperplane is given.

        Raises:
            NotConvexHyperplanesError: If a hyperplane lies entirely on the
                plus side of the convex cell built so far.
        """
        if not hyperplanes:
            return None

        region = hyperplanes[0].whole_space()
        node = region.get_tree(False)
        node.attribute = True
        for hyperplane in hyperplanes:
            if node.insert_cut(hyperplane):
                node.attribute = None
                node.plus.attribute = False
                node = node.minus
                node.attribute = True
                continue

            # the hyperplane could not be inserted in the current leaf: it is
            # either outside the convex cell or parallel to a previous one
            s = hyperplane.whole_hyperplane()
            tree = node
            while tree.parent is not None and s is not None:
                other = tree.parent.cut.hyperplane
                split = s.split(other)
                side = split.side
                if side == Side.HYPER:
                    if not hyperplane.same_orientation_as(other):
                        # opposite parallel hyperplanes closer than the
                        # tolerance: the region is empty
                        return self.complement(hyperplanes[0].whole_space())
                    # extension of an already known hyperplane
                    break
                if side == Side.PLUS:
                    raise NotConvexHyperplanesError(
                        "hyperplanes do not define a convex region"
                    )
                s = split.minus
                tree = tree.parent
        return region
