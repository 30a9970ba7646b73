"""Choose a category-balanced set of stops from the ranked pool."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from app.agents.classifier import ATTRACTION, FOOD, PARK, Category, pick_category
from app.tools.geo import haversine_km
from app.tools.places import Place

SHORT_TRIP_MAX_MINUTES = 140
WALK_KM_PRIMARY = 1.5
WALK_KM_RELAXED = 3.0
CATEGORY_CYCLE: Sequence[Category] = (FOOD, PARK, ATTRACTION)


def pick_stop_count(total_minutes: float) -> int:
    return 2 if total_minutes <= SHORT_TRIP_MAX_MINUTES else 3


def desired_categories(vibes: Iterable[str], stop_count: int) -> List[Category]:
    """Category wish-list for a plan, always led by an attraction."""
    wanted = {str(v) for v in vibes or ()}
    wants: List[Category] = [ATTRACTION]

    if "foodie" in wanted:
        wants.append(FOOD)
    if "adventure" in wanted or "relaxed" in wanted:
        wants.append(PARK)
    if "culture" in wanted:
        wants.append(ATTRACTION)

    for category in CATEGORY_CYCLE:
        if category not in wants:
            wants.append(category)

    return wants[:stop_count]


@dataclass
class Selection:
    picked: List[Place]
    anchor: Optional[Place] = None
    primary: List[Place] = field(default_factory=list)
    relaxed: List[Place] = field(default_factory=list)
    pool: List[Place] = field(default_factory=list)

    def fallback_order(self) -> List[Place]:
        """Every pooled place once, nearest walk ring first."""
        seen: set[str] = set()
        ordered: List[Place] = []
        for place in [*self.primary, *self.relaxed, *self.pool]:
            if place.id not in seen:
                seen.add(place.id)
                ordered.append(place)
        return ordered


def _within(pool: Sequence[Place], anchor: Place, max_km: float) -> List[Place]:
    if anchor.location is None:
        return list(pool)
    return [
        p for p in pool
        if p.location is not None and haversine_km(anchor.location, p.location) <= max_km
    ]


def select_stops(
    pool: Sequence[Place],
    stop_count: int,
    categories: Sequence[Category],
    *,
    park_once: bool = False,
) -> Selection:
    pool = list(pool)
    if not pool:
        return Selection(picked=[])

    first = categories[0] if categories else ATTRACTION
    anchor = next((p for p in pool if pick_category(p.types) == first), pool[0])
    picked: List[Place] = [anchor]

    if park_once and anchor.location is not None:
        primary = _within(pool, anchor, WALK_KM_PRIMARY)
        relaxed = _within(pool, anchor, WALK_KM_RELAXED)
    else:
        primary = relaxed = pool

    def unused(place: Place) -> bool:
        return all(place.id != p.id for p in picked)

    for category in categories[1:]:
        for candidates in (primary, relaxed, pool):
            hit = next((p for p in candidates if pick_category(p.types) == category and unused(p)), None)
            if hit is not None:
                picked.append(hit)
                break

    for candidates in (primary, relaxed, pool):
        for place in candidates:
            if len(picked) >= stop_count:
                break
            if unused(place):
                picked.append(place)

    return Selection(picked=picked, anchor=anchor, primary=primary, relaxed=relaxed, pool=pool)
