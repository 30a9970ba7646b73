"""Per-stop detail enrichment and parking lookups.

Enrichment is sequential on purpose: candidates are tried in route order and
the loop stops as soon as enough open stops are collected, which keeps the
number of provider calls bounded.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from app.errors import NotEnoughOpenPlaces, UpstreamError
from app.logs import get_logger
from app.schemas import ParkingOption, StopDetails
from app.tools.geo import LatLng, safe_text
from app.tools.places import Place, PlaceDetails, PlacesProvider

logger = get_logger(__name__)

REVIEW_SNIPPET_MAX_CHARS = 170
PHOTO_MAX_WIDTH_PX = 1000
PARKING_SEARCH_RESULTS = 5
ATTEMPTS_PER_STOP = 8
MIN_OPEN_STOPS = 2


async def find_parking_near(provider: PlacesProvider, place_title: str, destination: str) -> Optional[ParkingOption]:
    results = await provider.search_places_text(f"parking near {place_title} {destination}", PARKING_SEARCH_RESULTS)
    if not results:
        return None
    best = results[0]
    parking = ParkingOption(
        place_id=best.id or None,
        name=best.name or "Parking",
        address=best.address,
        lat=best.location.latitude if best.location else None,
        lng=best.location.longitude if best.location else None,
    )
    return await _with_maps_uri(provider, parking)


async def _with_maps_uri(provider: PlacesProvider, parking: ParkingOption) -> ParkingOption:
    if not parking.place_id:
        return parking
    try:
        details = await provider.get_place_details(parking.place_id)
    except UpstreamError:
        logger.warning("Maps link lookup failed for parking %s", parking.place_id, exc_info=True)
        return parking
    return parking.model_copy(update={"maps_uri": details.maps_uri})


async def lookup_parking(provider: PlacesProvider, place_title: str, destination: str) -> Optional[ParkingOption]:
    """Best-effort parking search; provider failures leave the stop without parking."""
    try:
        return await find_parking_near(provider, place_title, destination)
    except UpstreamError:
        logger.warning("Parking lookup failed near '%s'", place_title, exc_info=True)
        return None


async def describe_stop(
    provider: PlacesProvider,
    details: PlaceDetails,
    destination: str,
    *,
    place_id: Optional[str] = None,
    fallback_title: Optional[str] = None,
    fallback_location: Optional[LatLng] = None,
) -> StopDetails:
    photo_url = None
    if details.photo_names:
        photo_url = await provider.get_photo_uri(details.photo_names[0], PHOTO_MAX_WIDTH_PX)

    parking = await lookup_parking(provider, details.name, destination)
    location = details.location or fallback_location
    if location is None:
        raise UpstreamError(f"Place {details.id or place_id} has no coordinates")

    return StopDetails(
        place_id=place_id or details.id,
        title=details.name or fallback_title or "Place",
        address=details.address,
        lat=location.latitude,
        lng=location.longitude,
        maps_uri=details.maps_uri,
        rating=details.rating,
        user_rating_count=details.user_rating_count,
        price_level=details.price_level,
        open_now=details.open_now,
        weekday_text=details.weekday_text,
        photo_url=photo_url,
        review_snippet=safe_text(details.review_text, REVIEW_SNIPPET_MAX_CHARS),
        parking=parking,
    )


async def enrich_stops(
    provider: PlacesProvider,
    candidates: Sequence[Place],
    stop_count: int,
    destination: str,
) -> List[StopDetails]:
    """Collect up to ``stop_count`` open stops from ``candidates`` in order."""
    max_attempts = min(len(candidates), stop_count * ATTEMPTS_PER_STOP)
    stops: List[StopDetails] = []
    seen: set[str] = set()
    attempts = 0

    for place in candidates:
        if len(stops) >= stop_count or attempts >= max_attempts:
            break
        attempts += 1
        if not place.id or place.id in seen:
            continue
        seen.add(place.id)

        details = await provider.get_place_details(place.id)
        if details.is_closed:
            logger.debug("Skipping %s (%s): closed right now", place.name, place.id)
            continue
        stops.append(
            await describe_stop(
                provider,
                details,
                destination,
                place_id=place.id,
                fallback_title=place.name,
                fallback_location=place.location,
            )
        )

    logger.info("Enriched %d open stop(s) in %d attempt(s)", len(stops), attempts)
    if len(stops) < MIN_OPEN_STOPS:
        raise NotEnoughOpenPlaces("Not enough OPEN places found right now")
    return stops
