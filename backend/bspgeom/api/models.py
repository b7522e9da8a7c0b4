"""
Pydantic data models for the partitioning API.

These models define the shapes of requests and responses used by the
loop orientation and region endpoints.  Points travel as ``[x, y]``
pairs and loops as lists of points, the last point connecting back to
the first one.

Infinite quantities cannot be encoded in JSON: unbounded regions report
``bounded: false`` with a ``null`` size and barycenter instead.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

Point = Tuple[float, float]


class LoopsOrientRequest(BaseModel):
    """Request body for orienting a set of nested loops."""

    loops: List[List[Point]] = Field(..., description="Closed loops, in any winding")
    tolerance: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Distance below which points are considered identical (defaults to the server setting)",
    )


class OrientedLoopInfo(BaseModel):
    """One loop of the containment forest, in corrected winding."""

    index: int = Field(..., description="Position of the loop in the request")
    depth: int = Field(..., description="Nesting depth, 0 for outer loops")
    points: List[Point] = Field(..., description="Vertices in corrected order")
    signedArea: float = Field(..., description="Shoelace signed area, positive when counter-clockwise")
    reversed: bool = Field(..., description="Whether the vertex order was reversed")


class LoopsOrientResponse(BaseModel):
    """Response returned after orienting loops."""

    loops: List[OrientedLoopInfo] = Field(..., description="Loops in depth-first order")


class RegionCombineRequest(BaseModel):
    """Request body for combining two polygonal regions.

    Each region is the area on the left of its loop: a counter-clockwise
    loop bounds a finite polygon, a clockwise one the outside of it.
    """

    operation: Literal["union", "intersection", "difference", "xor"] = Field(
        ..., description="Boolean operation applied as first <op> second"
    )
    first: List[Point] = Field(..., description="Loop bounding the first region")
    second: List[Point] = Field(..., description="Loop bounding the second region")
    tolerance: Optional[float] = Field(default=None, gt=0.0)


class BoundaryLoop(BaseModel):
    """Boundary loop of a region, interior on its left."""

    closed: bool = Field(..., description="False for infinite boundary chains")
    points: List[Point] = Field(..., description="Vertices of the loop")


class RegionSummary(BaseModel):
    """Measures and boundary of a region."""

    bounded: bool = Field(..., description="Whether the region has a finite size")
    empty: bool = Field(..., description="Whether the region contains no point")
    size: Optional[float] = Field(default=None, description="Area, null when unbounded")
    barycenter: Optional[Point] = Field(default=None, description="Centre of mass, null when undefined")
    boundarySize: Optional[float] = Field(default=None, description="Boundary length, null when infinite")
    loops: List[BoundaryLoop] = Field(default_factory=list)


class RegionContainsRequest(BaseModel):
    """Request body for locating points with respect to a polygonal region."""

    loop: List[Point] = Field(..., description="Loop bounding the region, interior on its left")
    points: List[Point] = Field(..., description="Points to locate")
    tolerance: Optional[float] = Field(default=None, gt=0.0)


class RegionContainsResponse(BaseModel):
    """Location of each requested point."""

    locations: List[Literal["inside", "outside", "boundary"]]
    contained: List[bool] = Field(..., description="Whether each point is inside or on the boundary")
