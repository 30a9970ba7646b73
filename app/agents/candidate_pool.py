"""Pool building: fan out the searches, merge, filter and rank."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from app.agents.classifier import is_noisy
from app.agents.scoring import CandidatePolicy, score_candidate
from app.errors import NotEnoughPlaces
from app.logs import get_logger
from app.tools.geo import LatLng, haversine_km
from app.tools.places import Place, PlacesProvider

logger = get_logger(__name__)

DESTINATION_LOOKUP_RESULTS = 3
MIN_POOL_SIZE = 2


@dataclass
class CandidatePool:
    places: List[Place]
    center: Optional[LatLng] = None


def vibe_to_query(vibe: str, destination: str) -> str:
    if vibe == "adventure":
        return f"top viewpoints parks trails in {destination}"
    if vibe == "foodie":
        return f"best cafes restaurants bakeries in {destination}"
    if vibe == "relaxed":
        return f"waterfront parks cafes in {destination}"
    return f"top tourist attractions museums in {destination}"


def fixed_queries(destination: str, rider_mode: bool) -> List[str]:
    """Category queries issued for every plan, in merge order."""
    food = f"best cafes restaurants bakeries in {destination}"
    return [
        f"top attractions museums landmarks in {destination}",
        food,
        f"best parks viewpoints waterfront in {destination}",
        f"scenic viewpoints waterfront drives in {destination}",
        f"coffee stops with parking in {destination}" if rider_mode else food,
    ]


def merge_unique(result_sets: Iterable[Sequence[Place]]) -> List[Place]:
    by_id: Dict[str, Place] = {}
    for results in result_sets:
        for place in results:
            if place.id and place.id not in by_id:
                by_id[place.id] = place
    return list(by_id.values())


def filter_and_rank(
    places: Iterable[Place],
    *,
    center: Optional[LatLng] = None,
    exclude_ids: Iterable[str] = (),
    rider_mode: bool = False,
    policy: Optional[CandidatePolicy] = None,
) -> List[Place]:
    policy = policy or CandidatePolicy()
    excluded = {str(pid) for pid in exclude_ids if pid}
    kept: List[Place] = []
    for place in places:
        if not place.id or place.id in excluded:
            continue
        if place.location is None:
            continue
        if is_noisy(place.types):
            continue
        if not policy.passes_rating_gate(place):
            continue
        if center is not None and haversine_km(center, place.location) > policy.radius_km:
            continue
        kept.append(place)
    kept.sort(key=lambda p: score_candidate(p, rider_mode), reverse=True)
    return kept


async def build_candidate_pool(
    provider: PlacesProvider,
    destination: str,
    vibes: Sequence[str],
    *,
    rider_mode: bool = False,
    exclude_ids: Iterable[str] = (),
    policy: Optional[CandidatePolicy] = None,
) -> CandidatePool:
    """Search the provider for candidates around ``destination``.

    All searches are independent reads and run concurrently. A failing search
    fails the whole pool.
    """
    policy = policy or CandidatePolicy()
    vibe_queries = [vibe_to_query(v, destination) for v in vibes]
    category_queries = fixed_queries(destination, rider_mode)
    limit = policy.max_results_per_query

    destination_hits, *results = await asyncio.gather(
        provider.search_places_text(destination, DESTINATION_LOOKUP_RESULTS),
        *[provider.search_places_text(q, limit) for q in category_queries],
        *[provider.search_places_text(q, limit) for q in vibe_queries],
    )
    category_results = results[: len(category_queries)]
    vibe_results = results[len(category_queries):]
    raw_count = sum(len(r) for r in results)

    center = destination_hits[0].location if destination_hits else None
    attraction, food, park, scenic, rider_food = category_results
    merged = merge_unique([attraction, food, park, *vibe_results, scenic, rider_food])
    ranked = filter_and_rank(
        merged,
        center=center,
        exclude_ids=exclude_ids,
        rider_mode=rider_mode,
        policy=policy,
    )
    logger.info(
        "Candidate pool for '%s': %d unique of %d raw hits, %d after filtering (center %s)",
        destination,
        len(merged),
        raw_count,
        len(ranked),
        "found" if center else "missing",
    )

    if len(ranked) < MIN_POOL_SIZE:
        raise NotEnoughPlaces("Not enough high-quality places found")

    return CandidatePool(places=ranked, center=center)
