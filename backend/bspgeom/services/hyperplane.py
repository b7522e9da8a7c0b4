"""
Hyperplane and sub-hyperplane contracts for the partitioning kernel.

A hyperplane is an infinite, oriented dividing surface of the ambient
space: a point on the real line, a line in the plane, a limit angle on
the circle.  Its ``offset`` gives the signed distance of a point to it;
points with a positive offset lie on the *plus* side, points with a
negative offset on the *minus* side and points closer than the
tolerance lie on the hyperplane itself.

A sub-hyperplane is a bounded piece of a hyperplane.  It pairs the
hyperplane with a region of the hyperplane's own sub-space (one
dimension lower) describing which part of it is real.  Sub-hyperplanes
are the cuts stored in BSP tree nodes and the facets of region
boundaries.

All objects defined here are immutable: splitting or reuniting a
sub-hyperplane always builds new instances.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional

if TYPE_CHECKING:
    from .region import Region

logger = logging.getLogger(__name__)


class Side(Enum):
    """Position of a sub-hyperplane with respect to a hyperplane."""

    PLUS = "plus"
    MINUS = "minus"
    BOTH = "both"
    HYPER = "hyper"


class Hyperplane(ABC):
    """Infinite oriented dividing surface of a space."""

    tolerance: float

    @abstractmethod
    def offset(self, point: Any) -> float:
        """Return the signed distance of *point* to the hyperplane."""

    @abstractmethod
    def project(self, point: Any) -> Any:
        """Return the orthogonal projection of *point* on the hyperplane."""

    @abstractmethod
    def same_orientation_as(self, other: "Hyperplane") -> bool:
        """Return True if both hyperplanes have the same orientation."""

    @abstractmethod
    def whole_hyperplane(self) -> "SubHyperplane":
        """Return a sub-hyperplane covering the whole hyperplane."""

    @abstractmethod
    def whole_space(self) -> "Region":
        """Return a region covering the whole ambient space."""

    def copy_self(self) -> "Hyperplane":
        # hyperplanes are immutable, sharing them is safe
        return self

    def probe_points(self) -> Iterable[Any]:
        """Return a few points lying on the hyperplane.

        Used by :meth:`same_hyperplane_as`; concrete hyperplanes return
        enough points to pin down their location.
        """
        return ()

    def same_hyperplane_as(self, other: "Hyperplane", tolerance: Optional[float] = None) -> bool:
        """Check whether *other* describes the same oriented hyperplane.

        Both hyperplanes must share their orientation and every probe
        point of one must lie within ``tolerance`` of the other.
        """
        if tolerance is None:
            tolerance = max(self.tolerance, other.tolerance)
        if not self.same_orientation_as(other):
            return False
        for point in self.probe_points():
            if abs(other.offset(point)) > tolerance:
                return False
        for point in other.probe_points():
            if abs(self.offset(point)) > tolerance:
                return False
        return True


@dataclass(frozen=True)
class SplitSubHyperplane:
    """Result of splitting a sub-hyperplane by a hyperplane.

    Attributes:
        plus: Part lying on the plus side of the cutting hyperplane, or
            ``None`` when no such part exists.
        minus: Part lying on the minus side, or ``None``.
    """

    plus: Optional["SubHyperplane"]
    minus: Optional["SubHyperplane"]

    @property
    def side(self) -> Side:
        if self.plus is not None:
            return Side.BOTH if self.minus is not None else Side.PLUS
        if self.minus is not None:
            return Side.MINUS
        return Side.HYPER


class SubHyperplane(ABC):
    """Bounded piece of a hyperplane."""

    @property
    @abstractmethod
    def hyperplane(self) -> Hyperplane:
        """Underlying hyperplane."""

    @property
    @abstractmethod
    def size(self) -> float:
        """Measure of the piece in the hyperplane's own dimension."""

    @abstractmethod
    def is_empty(self) -> bool:
        ...

    @abstractmethod
    def split(self, hyperplane: Hyperplane) -> SplitSubHyperplane:
        """Split the instance by *hyperplane* into plus and minus parts."""

    @abstractmethod
    def reunite(self, other: "SubHyperplane") -> "SubHyperplane":
        """Return the union of the instance and *other*.

        Both sub-hyperplanes must lie on the same hyperplane.
        """

    @abstractmethod
    def copy_self(self) -> "SubHyperplane":
        ...

    def side(self, hyperplane: Hyperplane) -> Side:
        return self.split(hyperplane).side


class AbstractSubHyperplane(SubHyperplane):
    """Sub-hyperplane described by a region of the hyperplane sub-space.

    Args:
        hyperplane: The underlying hyperplane.
        remaining_region: Region of the hyperplane's sub-space (in its
            local coordinate frame) covered by the instance.  ``None`` for
            zero-dimensional hyperplanes which have no sub-space.
    """

    def __init__(self, hyperplane: Hyperplane, remaining_region: Optional["Region"]):
        self._hyperplane = hyperplane
        self.remaining_region = remaining_region

    @property
    def hyperplane(self) -> Hyperplane:
        return self._hyperplane

    @property
    def size(self) -> float:
        return self.remaining_region.size

    def is_empty(self) -> bool:
        return self.remaining_region.is_empty()

    @abstractmethod
    def _build_new(self, hyperplane: Hyperplane, remaining_region: Optional["Region"]) -> "AbstractSubHyperplane":
        ...

    def copy_self(self) -> "AbstractSubHyperplane":
        region = None if self.remaining_region is None else self.remaining_region.copy_self()
        return self._build_new(self._hyperplane, region)

    def reunite(self, other: SubHyperplane) -> "AbstractSubHyperplane":
        from .region_factory import RegionFactory  # Local import to avoid cycles

        if not isinstance(other, AbstractSubHyperplane):
            raise TypeError(f"Cannot reunite {type(other).__name__} with {type(self).__name__}")
        merged = RegionFactory().union(self.remaining_region, other.remaining_region)
        return self._build_new(self._hyperplane, merged)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._hyperplane!r}, {self.remaining_region!r})"
