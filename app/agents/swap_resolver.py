"""Find an open, same-category replacement for one stop."""
from __future__ import annotations

from typing import Iterable, List

from app.agents.classifier import DEFAULT_CATEGORY, FOOD, PARK, Category, is_noisy, pick_category
from app.agents.scoring import score_candidate
from app.errors import NoOpenReplacement, UpstreamError
from app.logs import get_logger
from app.tools.geo import LatLng, haversine_km
from app.tools.places import Place, PlacesProvider

logger = get_logger(__name__)

SWAP_SEARCH_RESULTS = 30
SWAP_CANDIDATES_TO_CHECK = 12
SWAP_RADIUS_KM = 4.0
SWAP_RADIUS_KM_PARK_ONCE = 2.0


def nearby_query(category: Category, center: LatLng) -> str:
    near = f"near {center.latitude},{center.longitude}"
    if category == FOOD:
        return f"cafes restaurants {near}"
    if category == PARK:
        return f"parks viewpoints {near}"
    return f"tourist attractions museums {near}"


async def category_of(provider: PlacesProvider, place_id: str) -> Category:
    try:
        details = await provider.get_place_details(place_id)
    except UpstreamError:
        logger.warning("Could not re-fetch %s; treating it as %s", place_id, DEFAULT_CATEGORY, exc_info=True)
        return DEFAULT_CATEGORY
    return pick_category(details.types)


def filter_replacements(
    candidates: Iterable[Place],
    *,
    category: Category,
    center: LatLng,
    used_ids: Iterable[str],
    park_once: bool = False,
    rider_mode: bool = False,
) -> List[Place]:
    """Same-category places inside the swap radius, best first.

    ``used_ids`` includes the stop being replaced so it cannot come back.
    """
    used = set(used_ids)
    max_km = SWAP_RADIUS_KM_PARK_ONCE if park_once else SWAP_RADIUS_KM
    kept = [
        p for p in candidates
        if p.id
        and p.location is not None
        and p.id not in used
        and not is_noisy(p.types)
        and pick_category(p.types) == category
        and haversine_km(center, p.location) <= max_km
    ]
    kept.sort(key=lambda p: score_candidate(p, rider_mode), reverse=True)
    return kept


async def find_replacement(
    provider: PlacesProvider,
    *,
    swap_place_id: str,
    center: LatLng,
    used_ids: Iterable[str],
    park_once: bool = False,
    rider_mode: bool = False,
) -> Place:
    category = await category_of(provider, swap_place_id)
    query = nearby_query(category, center)
    try:
        candidates = await provider.search_places_text(query, SWAP_SEARCH_RESULTS)
    except UpstreamError:
        logger.warning("Nearby search failed for '%s'", query, exc_info=True)
        candidates = []

    ranked = filter_replacements(
        candidates,
        category=category,
        center=center,
        used_ids=used_ids,
        park_once=park_once,
        rider_mode=rider_mode,
    )
    logger.info(
        "Swap for %s: %d %s candidate(s) of %d nearby", swap_place_id, len(ranked), category, len(candidates)
    )

    for candidate in ranked[:SWAP_CANDIDATES_TO_CHECK]:
        try:
            details = await provider.get_place_details(candidate.id)
        except UpstreamError:
            logger.warning("Details failed for swap candidate %s", candidate.id, exc_info=True)
            continue
        if details.is_closed:
            logger.debug("Swap candidate %s is closed right now", candidate.id)
            continue
        return candidate

    raise NoOpenReplacement("No OPEN replacement found nearby")
