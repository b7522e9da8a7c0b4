"""
Tests for the BSP tree primitives.

The trees used here are built on the real line with oriented points as
cuts, which keeps the cells easy to reason about: every cut splits an
interval in two.
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from bspgeom.services.bsp_tree import BSPTree, BSPTreeVisitor, Order  # type: ignore
from bspgeom.services.euclidean_1d import IntervalsSet, OrientedPoint, Vector1D  # type: ignore
from bspgeom.services.region_factory import VanishingToLeaf  # type: ignore

TOL = 1e-10


def _point(x: float, direct: bool = True) -> OrientedPoint:
    return OrientedPoint(Vector1D(x), direct, TOL)


class _LeafCounter(BSPTreeVisitor):
    def __init__(self) -> None:
        self.leaves = 0
        self.internal = 0

    def visit_order(self, node):
        return Order.MINUS_SUB_PLUS

    def visit_internal_node(self, node) -> None:
        self.internal += 1

    def visit_leaf_node(self, node) -> None:
        self.leaves += 1


def test_insert_cut_in_leaf_creates_two_children() -> None:
    tree = BSPTree()
    assert tree.insert_cut(_point(1.0))
    assert not tree.is_leaf()
    assert tree.plus.is_leaf() and tree.minus.is_leaf()
    assert tree.plus.parent is tree and tree.minus.parent is tree


def test_insert_cut_outside_cell_is_rejected() -> None:
    """A cut lying on the boundary of the cell leaves nothing inside it."""
    tree = BSPTree()
    tree.insert_cut(_point(1.0))
    assert not tree.minus.insert_cut(_point(1.0))
    assert tree.minus.is_leaf()
    # a point inside the minus cell (x < 1) can still be inserted
    assert tree.minus.insert_cut(_point(0.0))


def test_get_cell_stops_on_cuts() -> None:
    tree = BSPTree()
    tree.insert_cut(_point(1.0))
    assert tree.get_cell(Vector1D(2.0), TOL) is tree.plus
    assert tree.get_cell(Vector1D(0.0), TOL) is tree.minus
    assert tree.get_cell(Vector1D(1.0), TOL) is tree


def test_copy_is_independent() -> None:
    tree = IntervalsSet(0.0, 2.0, TOL).get_tree()
    copy = tree.copy_self()
    copy.minus.minus.attribute = False
    assert tree.minus.minus.attribute is True
    assert copy.parent is None
    assert copy.leaf_count() == tree.leaf_count() == 3


def test_condense_merges_equal_leaves() -> None:
    tree = BSPTree.internal(_point(0.0).whole_hyperplane(), BSPTree(True), BSPTree(True))
    tree.condense()
    assert tree.is_leaf()
    assert tree.attribute is True


def test_condense_keeps_different_leaves() -> None:
    tree = BSPTree.internal(_point(0.0).whole_hyperplane(), BSPTree(False), BSPTree(True))
    tree.condense()
    assert not tree.is_leaf()


def test_visit_reaches_every_node() -> None:
    tree = IntervalsSet(0.0, 2.0, TOL).get_tree()
    counter = _LeafCounter()
    tree.visit(counter)
    assert counter.leaves == 3
    assert counter.internal == 2


def test_split_partitions_tree_without_touching_it() -> None:
    tree = IntervalsSet(0.0, 2.0, TOL).get_tree()
    sub = _point(1.0).whole_hyperplane()

    split = tree.split(sub)

    assert split.cut is sub
    assert tree.leaf_count() == 3
    plus_part = IntervalsSet(tree=BSPTree.internal(sub, split.plus, BSPTree(False)), tolerance=TOL)
    minus_part = IntervalsSet(tree=BSPTree.internal(sub, BSPTree(False), split.minus), tolerance=TOL)
    assert [(i.lower, i.upper) for i in plus_part.as_list()] == [(1.0, 2.0)]
    assert [(i.lower, i.upper) for i in minus_part.as_list()] == [(0.0, 1.0)]
    assert IntervalsSet(tree=split, tolerance=TOL).size == 2.0


def test_split_by_existing_cut_copies_children() -> None:
    tree = IntervalsSet(0.0, 2.0, TOL).get_tree()
    # same location as the lower bound, opposite orientation
    split = tree.split(_point(0.0, direct=True).whole_hyperplane())
    assert split.plus.leaf_count() == 2
    assert split.minus.is_leaf() and split.minus.attribute is False


def test_vanishing_handler_prefers_common_leaf_value() -> None:
    handler = VanishingToLeaf(False)
    agreeing = BSPTree.internal(_point(0.0).whole_hyperplane(), BSPTree(True), BSPTree(True))
    disagreeing = BSPTree.internal(_point(0.0).whole_hyperplane(), BSPTree(True), BSPTree(False))
    assert handler.fix_node(agreeing).attribute is True
    assert handler.fix_node(disagreeing).attribute is False


def test_prune_around_convex_cell() -> None:
    tree = IntervalsSet(0.0, 2.0, TOL).get_tree()
    pruned = tree.minus.minus.prune_around_convex_cell(True, False)
    region = IntervalsSet(tree=pruned, tolerance=TOL)
    assert region.size == 2.0
    assert tree.leaf_count() == 3
