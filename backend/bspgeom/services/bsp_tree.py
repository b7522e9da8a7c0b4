"""
Binary space partition trees.

A :class:`BSPTree` node is either a leaf or an internal node.  Leaves
carry an attribute (for regions, ``True`` for inside cells and
``False`` for outside cells).  Internal nodes carry a cut
sub-hyperplane and two children: ``plus`` for the part of the node cell
lying on the plus side of the cut hyperplane and ``minus`` for the part
on its minus side.  The cut of every node is restricted to the cell of
the node, i.e. it is the whole hyperplane chopped by all the cuts of
its ancestors.

Each node exclusively owns its children.  The ``parent`` back-reference
is only used to fit new cuts inside the node cell.

Boolean combination of trees is performed by :meth:`BSPTree.merge`,
which is parametrised by a :class:`LeafMerger` deciding what happens
when a leaf of one tree meets a subtree of the other.  Merging mutates
the operands, callers that need to keep their trees must pass copies
(see :class:`~bspgeom.services.region_factory.RegionFactory`).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

from .hyperplane import Hyperplane, Side, SubHyperplane

logger = logging.getLogger(__name__)


class Order(Enum):
    """Order in which a visitor explores the sub-trees of a node."""

    PLUS_MINUS_SUB = "plus_minus_sub"
    PLUS_SUB_MINUS = "plus_sub_minus"
    MINUS_PLUS_SUB = "minus_plus_sub"
    MINUS_SUB_PLUS = "minus_sub_plus"
    SUB_PLUS_MINUS = "sub_plus_minus"
    SUB_MINUS_PLUS = "sub_minus_plus"


class BSPTreeVisitor(ABC):
    """Visitor walking a tree in a node-selected order."""

    @abstractmethod
    def visit_order(self, node: "BSPTree") -> Order:
        ...

    @abstractmethod
    def visit_internal_node(self, node: "BSPTree") -> None:
        ...

    @abstractmethod
    def visit_leaf_node(self, node: "BSPTree") -> None:
        ...


class LeafMerger(ABC):
    """Rule combining a leaf of one tree with a subtree of another."""

    @abstractmethod
    def merge(
        self,
        leaf: "BSPTree",
        tree: "BSPTree",
        parent_tree: Optional["BSPTree"],
        is_plus_child: bool,
        leaf_from_instance: bool,
    ) -> "BSPTree":
        """Merge *leaf* with *tree* and plug the result under *parent_tree*.

        Args:
            leaf: Leaf node, from the tree on which ``merge`` was called
                when ``leaf_from_instance`` is True, from the argument tree
                otherwise.
            tree: Subtree of the other operand covering the leaf cell.
            parent_tree: Node under which the result must be inserted, or
                ``None`` at the top level.
            is_plus_child: Whether the result is the plus child of
                ``parent_tree``.
            leaf_from_instance: Whether ``leaf`` comes from the instance
                tree; needed by non-commutative operations.

        Returns:
            The merged subtree.
        """


class VanishingCutHandler(ABC):
    """Fix for nodes whose cut vanished while grafted into a smaller cell."""

    @abstractmethod
    def fix_node(self, node: "BSPTree") -> "BSPTree":
        ...


class BSPTree:
    """Node of a binary space partition tree."""

    def __init__(
        self,
        attribute: Any = None,
        cut: Optional[SubHyperplane] = None,
        plus: Optional["BSPTree"] = None,
        minus: Optional["BSPTree"] = None,
    ):
        self.cut = cut
        self.plus = plus
        self.minus = minus
        self.parent: Optional[BSPTree] = None
        self.attribute = attribute
        if plus is not None:
            plus.parent = self
        if minus is not None:
            minus.parent = self

    @classmethod
    def internal(
        cls,
        cut: SubHyperplane,
        plus: "BSPTree",
        minus: "BSPTree",
        attribute: Any = None,
    ) -> "BSPTree":
        return cls(attribute=attribute, cut=cut, plus=plus, minus=minus)

    def is_leaf(self) -> bool:
        return self.cut is None

    def insert_cut(self, hyperplane: Hyperplane) -> bool:
        """Insert a cut sub-hyperplane in a leaf node.

        The whole hyperplane is chopped to the node cell.  When nothing
        remains the node is left as a leaf.

        Returns:
            True if a cut was inserted, False otherwise.
        """
        if self.cut is not None:
            self.plus.parent = None
            self.minus.parent = None

        chopped = self.fit_to_cell(hyperplane.whole_hyperplane())
        if chopped is None or chopped.is_empty():
            self.cut = None
            self.plus = None
            self.minus = None
            return False

        self.cut = chopped
        self.plus = BSPTree()
        self.plus.parent = self
        self.minus = BSPTree()
        self.minus.parent = self
        return True

    def copy_self(self) -> "BSPTree":
        """Deep copy of the tree; the new root has no parent."""
        if self.cut is None:
            return BSPTree(self.attribute)
        return BSPTree.internal(
            self.cut.copy_self(), self.plus.copy_self(), self.minus.copy_self(), self.attribute
        )

    def get_cell(self, point: Any, tolerance: float) -> "BSPTree":
        """Return the deepest node whose cell contains *point*.

        If the point lies on a cut hyperplane (within tolerance) the
        internal node owning that cut is returned instead of a leaf.
        """
        if self.cut is None:
            return self
        offset = self.cut.hyperplane.offset(point)
        if abs(offset) < tolerance:
            return self
        if offset <= 0:
            return self.minus.get_cell(point, tolerance)
        return self.plus.get_cell(point, tolerance)

    def visit(self, visitor: BSPTreeVisitor) -> None:
        if self.cut is None:
            visitor.visit_leaf_node(self)
            return
        order = visitor.visit_order(self)
        if order == Order.PLUS_MINUS_SUB:
            self.plus.visit(visitor)
            self.minus.visit(visitor)
            visitor.visit_internal_node(self)
        elif order == Order.PLUS_SUB_MINUS:
            self.plus.visit(visitor)
            visitor.visit_internal_node(self)
            self.minus.visit(visitor)
        elif order == Order.MINUS_PLUS_SUB:
            self.minus.visit(visitor)
            self.plus.visit(visitor)
            visitor.visit_internal_node(self)
        elif order == Order.MINUS_SUB_PLUS:
            self.minus.visit(visitor)
            visitor.visit_internal_node(self)
            self.plus.visit(visitor)
        elif order == Order.SUB_PLUS_MINUS:
            visitor.visit_internal_node(self)
            self.plus.visit(visitor)
            self.minus.visit(visitor)
        else:
            visitor.visit_internal_node(self)
            self.minus.visit(visitor)
            self.plus.visit(visitor)

    def fit_to_cell(self, sub: Optional[SubHyperplane]) -> Optional[SubHyperplane]:
        """Chop *sub* so that it fits in the cell of this node."""
        s = sub
        tree = self
        while tree.parent is not None and s is not None:
            split = s.split(tree.parent.cut.hyperplane)
            s = split.plus if tree is tree.parent.plus else split.minus
            tree = tree.parent
        return s

    def condense(self) -> None:
        """Turn a node with two equivalent leaf children into a leaf."""
        if (
            self.cut is not None
            and self.plus.cut is None
            and self.minus.cut is None
            and self.plus.attribute == self.minus.attribute
        ):
            self.attribute = self.plus.attribute
            self.cut = None
            self.plus = None
            self.minus = None

    def merge(
        self,
        tree: "BSPTree",
        leaf_merger: LeafMerger,
        parent_tree: Optional["BSPTree"] = None,
        is_plus_child: bool = False,
    ) -> "BSPTree":
        """Merge the instance with *tree*, both trees are consumed.

        Whenever a leaf of one tree meets a subtree of the other the
        ``leaf_merger`` decides the resulting subtree; the caller's merger
        encodes the boolean operation.
        """
        if self.cut is None:
            return leaf_merger.merge(self, tree, parent_tree, is_plus_child, True)
        if tree.cut is None:
            return leaf_merger.merge(tree, self, parent_tree, is_plus_child, False)

        merged = tree.split(self.cut)
        if parent_tree is not None:
            merged.parent = parent_tree
            if is_plus_child:
                parent_tree.plus = merged
            else:
                parent_tree.minus = merged

        self.plus.merge(merged.plus, leaf_merger, merged, True)
        self.minus.merge(merged.minus, leaf_merger, merged, False)
        merged.condense()
        if merged.cut is not None:
            merged.cut = merged.fit_to_cell(merged.cut.hyperplane.whole_hyperplane())
        return merged

    def split(self, sub: SubHyperplane) -> "BSPTree":
        """Split the tree by a sub-hyperplane.

        The instance is left untouched.  The returned tree has *sub* as
        its root cut, its plus child covers the part of the instance on
        the plus side of *sub* and its minus child the part on the minus
        side.  The ``attribute`` of the new root is ``None``.
        """
        if self.cut is None:
            return BSPTree.internal(sub, self.copy_self(), BSPTree(self.attribute), None)

        c_hyperplane = self.cut.hyperplane
        s_hyperplane = sub.hyperplane
        sub_parts = sub.split(c_hyperplane)
        side = sub_parts.side

        if side == Side.PLUS:
            # the sub-hyperplane only crosses the plus sub-tree of the instance
            split = self.plus.split(sub)
            if self.cut.split(s_hyperplane).side == Side.PLUS:
                split.plus = BSPTree.internal(
                    self.cut.copy_self(), split.plus, self.minus.copy_self(), self.attribute
                )
                split.plus.condense()
                split.plus.parent = split
            else:
                split.minus = BSPTree.internal(
                    self.cut.copy_self(), split.minus, self.minus.copy_self(), self.attribute
                )
                split.minus.condense()
                split.minus.parent = split
            return split

        if side == Side.MINUS:
            # the sub-hyperplane only crosses the minus sub-tree of the instance
            split = self.minus.split(sub)
            if self.cut.split(s_hyperplane).side == Side.PLUS:
                split.plus = BSPTree.internal(
                    self.cut.copy_self(), self.plus.copy_self(), split.plus, self.attribute
                )
                split.plus.condense()
                split.plus.parent = split
            else:
                split.minus = BSPTree.internal(
                    self.cut.copy_self(), self.plus.copy_self(), split.minus, self.attribute
                )
                split.minus.condense()
                split.minus.parent = split
            return split

        if side == Side.BOTH:
            cut_parts = self.cut.split(s_hyperplane)
            split_plus = self.plus.split(sub_parts.plus)
            split_minus = self.minus.split(sub_parts.minus)
            # a cut part may vanish when the straddling tests disagree within
            # tolerance, the whole cut is kept then and refitted by later merges
            plus_cut = cut_parts.plus if cut_parts.plus is not None else self.cut.copy_self()
            minus_cut = cut_parts.minus if cut_parts.minus is not None else self.cut.copy_self()
            split = BSPTree.internal(
                sub,
                BSPTree.internal(plus_cut, split_plus.plus, split_minus.plus, self.attribute),
                BSPTree.internal(minus_cut, split_plus.minus, split_minus.minus, self.attribute),
                None,
            )
            split.plus.condense()
            split.minus.condense()
            return split

        # the sub-hyperplane lies on the instance cut hyperplane
        if c_hyperplane.same_orientation_as(s_hyperplane):
            return BSPTree.internal(sub, self.plus.copy_self(), self.minus.copy_self(), self.attribute)
        return BSPTree.internal(sub, self.minus.copy_self(), self.plus.copy_self(), self.attribute)

    def insert_in_tree(
        self,
        parent_tree: Optional["BSPTree"],
        is_plus_child: bool,
        vanishing_handler: VanishingCutHandler,
    ) -> None:
        """Graft the instance as a child of *parent_tree*.

        Cuts of the instance are chopped so that they fit in their new
        cell.  Nodes whose cut vanishes are repaired by
        ``vanishing_handler``.
        """
        self.parent = parent_tree
        if parent_tree is not None:
            if is_plus_child:
                parent_tree.plus = self
            else:
                parent_tree.minus = self

        if self.cut is None:
            return

        tree = self
        while tree.parent is not None:
            hyperplane = tree.parent.cut.hyperplane
            if tree is tree.parent.plus:
                self.cut = self.cut.split(hyperplane).plus
                self.plus._chop_off(hyperplane, False, vanishing_handler)
                self.minus._chop_off(hyperplane, False, vanishing_handler)
            else:
                self.cut = self.cut.split(hyperplane).minus
                self.plus._chop_off(hyperplane, True, vanishing_handler)
                self.minus._chop_off(hyperplane, True, vanishing_handler)

            if self.cut is None:
                self._replace_with(vanishing_handler.fix_node(self))
                if self.cut is None:
                    break
            tree = tree.parent

        # some parts of the inserted tree may have been dropped
        self.condense()

    def _chop_off(self, hyperplane: Hyperplane, keep_minus: bool, vanishing_handler: VanishingCutHandler) -> None:
        """Remove the parts of the subtree lying on one side of *hyperplane*."""
        if self.cut is None:
            return
        split = self.cut.split(hyperplane)
        self.cut = split.minus if keep_minus else split.plus
        self.plus._chop_off(hyperplane, keep_minus, vanishing_handler)
        self.minus._chop_off(hyperplane, keep_minus, vanishing_handler)
        if self.cut is None:
            self._replace_with(vanishing_handler.fix_node(self))

    def _replace_with(self, fixed: "BSPTree") -> None:
        self.cut = fixed.cut
        self.plus = fixed.plus
        self.minus = fixed.minus
        self.attribute = fixed.attribute
        if self.plus is not None:
            self.plus.parent = self
        if self.minus is not None:
            self.minus.parent = self

    def prune_around_convex_cell(self, cell_attribute: Any, other_leaves_attribute: Any) -> "BSPTree":
        """Copy the path from the root down to this node, pruning everything else.

        Leaves hanging off the path get ``other_leaves_attribute``; the
        node itself becomes a leaf with ``cell_attribute``.
        """
        tree = BSPTree(cell_attribute)
        current = self
        while current.parent is not None:
            parent = current.parent
            other = BSPTree(other_leaves_attribute)
            if current is parent.plus:
                tree = BSPTree.internal(parent.cut.copy_self(), tree, other, None)
            else:
                tree = BSPTree.internal(parent.cut.copy_self(), other, tree, None)
            current = parent
        return tree

    def depth(self) -> int:
        if self.cut is None:
            return 0
        return 1 + max(self.plus.depth(), self.minus.depth())

    def leaf_count(self) -> int:
        if self.cut is None:
            return 1
        return self.plus.leaf_count() + self.minus.leaf_count()

    def __repr__(self) -> str:
        if self.cut is None:
            return f"BSPTree({self.attribute!r})"
        return f"BSPTree(cut={self.cut!r}, leaves={self.leaf_count()})"

