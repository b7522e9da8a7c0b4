"""
API routes for polygonal regions.

Regions are described by a single loop each, the interior lying on the
left of the loop: counter-clockwise loops bound finite polygons while
clockwise loops bound their infinite outside.  The endpoints combine two
such regions with a boolean operation and locate points with respect to
a region.
"""

from __future__ import annotations

import logging
import math
from typing import List

from fastapi import APIRouter, HTTPException

from .models import (
    BoundaryLoop,
    RegionCombineRequest,
    RegionContainsRequest,
    RegionContainsResponse,
    RegionSummary,
)
from ..services.euclidean_2d import PolygonsSet
from ..services.region import Location
from ..services.region_factory import RegionFactory
from ..services.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _polygon(loop: List, tolerance: float) -> PolygonsSet:
    if len(loop) < 3:
        raise HTTPException(status_code=400, detail="A region loop needs at least three points")
    return PolygonsSet.from_vertices(loop, tolerance)


def summarize(region: PolygonsSet) -> RegionSummary:
    """Build the API summary of a region."""
    size = region.size
    bounded = not math.isinf(size)
    empty = region.is_empty()
    barycenter = region.barycenter
    boundary_size = region.boundary_size

    loops = []
    for loop in region.vertices():
        if loop and loop[0] is None:
            loops.append(BoundaryLoop(closed=False, points=[p.to_tuple() for p in loop[1:]]))
        else:
            loops.append(BoundaryLoop(closed=True, points=[p.to_tuple() for p in loop]))

    return RegionSummary(
        bounded=bounded,
        empty=empty,
        size=size if bounded else None,
        barycenter=None if empty or not bounded or barycenter.is_nan() else barycenter.to_tuple(),
        boundarySize=None if math.isinf(boundary_size) else boundary_size,
        loops=loops,
    )


@router.post(
    "/regions/combine",
    response_model=RegionSummary,
)
async def combine_regions(body: RegionCombineRequest) -> RegionSummary:
    """Apply a boolean operation to two polygonal regions."""
    tolerance = body.tolerance if body.tolerance is not None else get_settings().tolerance
    first = _polygon(body.first, tolerance)
    second = _polygon(body.second, tolerance)
    operation = getattr(RegionFactory(), body.operation)
    result = operation(first, second)
    logger.debug("Combined regions with %s: size=%s", body.operation, result.size)
    return summarize(result)


@router.post(
    "/regions/contains",
    response_model=RegionContainsResponse,
)
async def locate_points(body: RegionContainsRequest) -> RegionContainsResponse:
    """Locate points with respect to a polygonal region.

    Points closer to the boundary than the tolerance are reported as
    ``boundary`` and count as contained.
    """
    tolerance = body.tolerance if body.tolerance is not None else get_settings().tolerance
    region = _polygon(body.loop, tolerance)
    locations = [region.check_point(point) for point in body.points]
    return RegionContainsResponse(
        locations=[location.value for location in locations],
        contained=[location != Location.OUTSIDE for location in locations],
    )
