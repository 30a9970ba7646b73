# app/orchestrator.py
from __future__ import annotations

from typing import List, Tuple

from app.agents.candidate_pool import build_candidate_pool
from app.agents.enrichment import describe_stop, enrich_stops, lookup_parking
from app.agents.logistics_planner import (
    build_items,
    compute_travel_legs,
    floor_durations,
    split_stop_durations,
)
from app.agents.route_sequencer import sequence_stops
from app.agents.scoring import CandidatePolicy
from app.agents.stop_selector import desired_categories, pick_stop_count, select_stops
from app.agents.swap_resolver import find_replacement
from app.errors import ClosedStop, InvalidRequest
from app.logs import get_logger
from app.schemas import ItineraryRequest, ItineraryResponse, PlanItem, StopDetails
from app.tools.geo import LatLng
from app.tools.places import Place, PlacesProvider

logger = get_logger(__name__)

MIN_SWAP_STOPS = 2


def validate_request(req: ItineraryRequest) -> None:
    """Reject malformed requests before any provider call is made."""
    if not req.destination:
        raise InvalidRequest("Destination is required")
    if req.is_swap:
        _swap_target(req)


def _swap_target(req: ItineraryRequest) -> Tuple[int, LatLng]:
    if len(req.stops) < MIN_SWAP_STOPS:
        raise InvalidRequest("Not enough stops to swap")
    index = req.swap_index
    if index is None or index < 0 or index >= len(req.stops):
        raise InvalidRequest("Invalid swap index")

    current = req.stops[index]
    lat = req.swap_lat if req.swap_lat is not None else current.lat
    lng = req.swap_lng if req.swap_lng is not None else current.lng
    if not current.place_id or lat is None or lng is None:
        raise InvalidRequest("Invalid swap request")
    return index, LatLng(lat, lng)


async def orchestrate_itinerary(
    req: ItineraryRequest,
    provider: PlacesProvider,
    policy: CandidatePolicy | None = None,
) -> ItineraryResponse:
    """Run the pipeline for an already validated request (see ``validate_request``)."""
    if req.is_swap:
        return await swap_stop(req, provider)
    return await generate_itinerary(req, provider, policy)


async def generate_itinerary(
    req: ItineraryRequest,
    provider: PlacesProvider,
    policy: CandidatePolicy | None = None,
) -> ItineraryResponse:
    """Build a fresh plan (or a regenerated one when ``exclude_place_ids`` is set)."""
    vibes = req.resolved_vibes
    stop_count = pick_stop_count(req.total_minutes)
    logger.info(
        "Planning %d-stop itinerary: destination=%s, minutes=%d, vibes=%s, park_once=%s, rider=%s, excluded=%d",
        stop_count,
        req.destination,
        req.total_minutes,
        ",".join(vibes),
        req.park_once,
        req.rider_mode,
        len(req.exclude_place_ids),
    )

    pool = await build_candidate_pool(
        provider,
        req.destination,
        vibes,
        rider_mode=req.rider_mode,
        exclude_ids=req.exclude_place_ids,
        policy=policy,
    )

    categories = desired_categories(vibes, stop_count)
    selection = select_stops(pool.places, stop_count, categories, park_once=req.park_once)
    ordered = sequence_stops(
        selection.picked,
        anchor=selection.anchor,
        park_once=req.park_once,
        rider_mode=req.rider_mode,
    )
    logger.info("Picked %s for categories %s", [p.name for p in ordered], categories)

    # Closed picks are replaced from the rest of the pool, nearest ring first.
    ordered_ids = {p.id for p in ordered}
    candidates: List[Place] = [*ordered, *(p for p in selection.fallback_order() if p.id not in ordered_ids)]
    stops = await enrich_stops(provider, candidates, stop_count, req.destination)

    parking = await lookup_parking(provider, stops[0].title, req.destination) if req.park_once else None
    travel = await compute_travel_legs(provider, stops, parking=parking, buffer_minutes=req.buffer_minutes)
    durations = floor_durations(split_stop_durations(req.total_minutes, travel.total, len(stops)))

    return _response(req, build_items(stops, durations, travel))


async def swap_stop(req: ItineraryRequest, provider: PlacesProvider) -> ItineraryResponse:
    """Replace one stop and rebuild the plan around the caller's durations."""
    index, center = _swap_target(req)
    target = req.stops[index]
    logger.info(
        "Swapping stop %d (%s) of %d around %.5f,%.5f",
        index,
        target.place_id,
        len(req.stops),
        center.latitude,
        center.longitude,
    )

    replacement = await find_replacement(
        provider,
        swap_place_id=target.place_id,
        center=center,
        used_ids=[s.place_id for s in req.stops],
        park_once=req.park_once,
        rider_mode=req.rider_mode,
    )

    next_stops = list(req.stops)
    next_stops[index] = target.model_copy(update={"place_id": replacement.id})

    stops: List[StopDetails] = []
    for position, stop in enumerate(next_stops):
        details = await provider.get_place_details(stop.place_id)
        if details.is_closed:
            raise ClosedStop(
                f"One of the stops is closed right now ({details.name or 'Place'}). Please regenerate."
            )
        fallback = replacement.location if position == index else None
        stops.append(
            await describe_stop(
                provider,
                details,
                req.destination,
                place_id=stop.place_id,
                fallback_title=stop.title,
                fallback_location=fallback or LatLng(stop.lat, stop.lng),
            )
        )

    parking = await lookup_parking(provider, stops[0].title, req.destination) if req.park_once else None
    travel = await compute_travel_legs(provider, stops, parking=parking, buffer_minutes=req.buffer_minutes)
    durations = [s.duration_min for s in next_stops]

    return _response(req, build_items(stops, durations, travel))


def _response(req: ItineraryRequest, items: List[PlanItem]) -> ItineraryResponse:
    logger.info("Itinerary for %s ready with %d item(s)", req.destination, len(items))
    return ItineraryResponse(
        destination=req.destination,
        total_minutes=req.total_minutes,
        vibe=req.vibe_label,
        vibes=req.resolved_vibes,
        park_once=req.park_once,
        rider_mode=req.rider_mode,
        buffer_minutes=req.buffer_minutes,
        items=items,
    )
