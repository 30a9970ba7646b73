"""Order picked stops into a drivable or walkable sequence."""
from __future__ import annotations

from typing import List, Optional, Sequence

from app.agents.scoring import score_candidate
from app.tools.geo import haversine_km
from app.tools.places import Place

RIDER_RING_MIN_STOPS = 3


def order_by_nearest_neighbor(places: Sequence[Place], rider_mode: bool = False) -> List[Place]:
    """Start at the best-scored place and hop to the closest unvisited one."""
    if len(places) <= 2:
        return list(places)

    remaining = sorted(places, key=lambda p: score_candidate(p, rider_mode), reverse=True)
    ordered = [remaining.pop(0)]

    while remaining:
        last = ordered[-1].location
        if last is None:
            ordered.append(remaining.pop(0))
            continue
        best_idx, best_km = 0, float("inf")
        for idx, place in enumerate(remaining):
            if place.location is None:
                continue
            km = haversine_km(last, place.location)
            if km < best_km:
                best_idx, best_km = idx, km
        ordered.append(remaining.pop(best_idx))

    return ordered


def sequence_stops(
    picked: Sequence[Place],
    *,
    anchor: Optional[Place] = None,
    park_once: bool = False,
    rider_mode: bool = False,
) -> List[Place]:
    """Route order for the picked stops.

    Park-once keeps the first pick where the car is left; rider mode then
    re-sorts everything after the first stop by distance from the anchor.
    """
    picked = list(picked)
    if not picked:
        return []

    if park_once:
        ordered = [picked[0], *order_by_nearest_neighbor(picked[1:], rider_mode)]
    else:
        ordered = order_by_nearest_neighbor(picked, rider_mode)

    anchor_loc = anchor.location if anchor is not None else None
    if rider_mode and len(ordered) >= RIDER_RING_MIN_STOPS and anchor_loc is not None:
        head, rest = ordered[0], ordered[1:]
        located = [p for p in rest if p.location is not None]
        if len(located) == len(rest):
            rest.sort(key=lambda p: haversine_km(anchor_loc, p.location))
        ordered = [head, *rest]

    return ordered
