"""
API routes for loop orientation.

This module exposes the nested loops orientation correction.  Clients
send a bag of closed loops in arbitrary winding; the endpoint builds the
containment forest, fixes the winding (outer loops counter-clockwise,
alternating with depth) and returns every loop with its depth and
signed area.  Loops that cross each other or are empty are rejected
with a 400 response carrying the error message.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from .models import LoopsOrientRequest, LoopsOrientResponse, OrientedLoopInfo
from ..services.euclidean_2d import signed_area
from ..services.nested_loops import CrossingLoopsError, DegenerateLoopError, NestedLoops, OpenLoopError
from ..services.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/loops/orient",
    response_model=LoopsOrientResponse,
)
async def orient_loops(body: LoopsOrientRequest) -> LoopsOrientResponse:
    """Organise loops by containment and correct their winding.

    Returns:
        LoopsOrientResponse listing the loops depth-first, parents before
        the loops they enclose.
    """
    tolerance = body.tolerance if body.tolerance is not None else get_settings().tolerance
    nested = NestedLoops(tolerance)
    loops = [list(loop) for loop in body.loops]
    index_of = {id(loop): i for i, loop in enumerate(loops)}

    for loop in loops:
        try:
            nested.add(loop)
        except (OpenLoopError, DegenerateLoopError, CrossingLoopsError) as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    reversed_flags = {
        id(node.loop): node.needs_reversal(depth % 2 == 0) for node, depth in nested.depth_first()
    }
    nested.correct_orientation()

    result = []
    for loop, depth in nested.loops():
        points = [(float(x), float(y)) for x, y in loop]
        result.append(
            OrientedLoopInfo(
                index=index_of[id(loop)],
                depth=depth,
                points=points,
                signedArea=signed_area(points),
                reversed=reversed_flags[id(loop)],
            )
        )
    logger.info("Oriented %d loops (tolerance %g)", len(result), tolerance)
    return LoopsOrientResponse(loops=result)
