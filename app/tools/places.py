"""Google Places (New) and Routes client.

The planner only needs four provider operations: text search, place details,
photo media lookup and a single-leg travel duration. They are exposed by
``PlacesClient`` and described structurally by ``PlacesProvider`` so tests
and alternative providers can stand in for Google.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Protocol, Tuple
from urllib.parse import quote

import httpx
from dotenv import load_dotenv

from app.errors import ConfigurationError, UpstreamError
from app.logs import get_logger
from app.tools.geo import LatLng, minutes_from_duration

logger = get_logger(__name__)

load_dotenv()

TravelMode = Literal["DRIVE", "WALK"]

SEARCH_FIELD_MASK = ",".join(
    [
        "places.id",
        "places.displayName",
        "places.formattedAddress",
        "places.location",
        "places.types",
        "places.rating",
        "places.userRatingCount",
    ]
)
DETAILS_FIELD_MASK = ",".join(
    [
        "id",
        "displayName",
        "formattedAddress",
        "location",
        "types",
        "rating",
        "userRatingCount",
        "priceLevel",
        "regularOpeningHours",
        "photos",
        "reviews",
        "googleMapsUri",
    ]
)


@dataclass
class Place:
    id: str
    name: str
    address: Optional[str] = None
    location: Optional[LatLng] = None
    types: Tuple[str, ...] = ()
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None


@dataclass
class PlaceDetails(Place):
    maps_uri: Optional[str] = None
    price_level: Optional[str] = None
    open_now: Optional[bool] = None
    weekday_text: Optional[List[str]] = None
    photo_names: List[str] = field(default_factory=list)
    review_text: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        """Only an explicit ``openNow: false`` counts as closed; unknown stays open."""
        return self.open_now is False


class PlacesProvider(Protocol):
    async def search_places_text(self, query: str, max_results: int = 10) -> List[Place]: ...

    async def get_place_details(self, place_id: str) -> PlaceDetails: ...

    async def get_photo_uri(self, photo_name: str, max_width_px: int = 900) -> Optional[str]: ...

    async def compute_travel_minutes(self, origin: LatLng, destination: LatLng, mode: TravelMode) -> int: ...


class PlacesClient:
    SEARCH_TEXT_ENDPOINT = "https://places.googleapis.com/v1/places:searchText"
    DETAILS_ENDPOINT = "https://places.googleapis.com/v1/places/"
    MEDIA_ENDPOINT = "https://places.googleapis.com/v1/{name}/media"
    ROUTES_ENDPOINT = "https://routes.googleapis.com/directions/v2:computeRoutes"

    def __init__(self, *, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.api_key = api_key or os.getenv("GOOGLE_MAPS_API_KEY")
        if not self.api_key:
            raise ConfigurationError(
                "Missing GOOGLE_MAPS_API_KEY. Add it to .env and restart the server."
            )
        if timeout is None:
            timeout = float(os.getenv("ITINERARY_HTTP_TIMEOUT", "10"))
        self.timeout = timeout

    async def search_places_text(self, query: str, max_results: int = 10) -> List[Place]:
        data = await self._request(
            "POST",
            self.SEARCH_TEXT_ENDPOINT,
            field_mask=SEARCH_FIELD_MASK,
            json={"textQuery": query, "maxResultCount": max_results},
        )
        places = [_place_from_payload(item) for item in data.get("places") or [] if isinstance(item, dict)]
        logger.debug("Text search '%s' returned %d place(s)", query, len(places))
        return places

    async def get_place_details(self, place_id: str) -> PlaceDetails:
        data = await self._request(
            "GET",
            f"{self.DETAILS_ENDPOINT}{quote(place_id, safe='')}",
            field_mask=DETAILS_FIELD_MASK,
        )
        return _details_from_payload(data)

    async def get_photo_uri(self, photo_name: str, max_width_px: int = 900) -> Optional[str]:
        try:
            data = await self._request(
                "GET",
                self.MEDIA_ENDPOINT.format(name=photo_name),
                field_mask="photoUri",
                params={"maxWidthPx": max_width_px, "skipHttpRedirect": "true"},
            )
        except UpstreamError:
            logger.warning("Photo lookup failed for %s", photo_name, exc_info=True)
            return None
        uri = data.get("photoUri")
        return uri if isinstance(uri, str) and uri else None

    async def compute_travel_minutes(self, origin: LatLng, destination: LatLng, mode: TravelMode) -> int:
        data = await self._request(
            "POST",
            self.ROUTES_ENDPOINT,
            field_mask="routes.duration",
            json={
                "origin": {"location": {"latLng": origin.as_payload()}},
                "destination": {"location": {"latLng": destination.as_payload()}},
                "travelMode": mode,
            },
        )
        routes = data.get("routes") or []
        duration = routes[0].get("duration") if routes and isinstance(routes[0], dict) else None
        return minutes_from_duration(duration)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        field_mask: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": field_mask,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, headers=headers, json=json, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Request to {url} failed: {exc}") from exc

        if response.is_error:
            raise UpstreamError(response.text or f"{url} answered HTTP {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(f"{url} answered with a non-JSON body") from exc
        return data if isinstance(data, dict) else {}


def _place_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    display = item.get("displayName") or {}
    location = item.get("location") or {}
    lat, lng = location.get("latitude"), location.get("longitude")
    rating = item.get("rating")
    count = item.get("userRatingCount")
    types = item.get("types")
    return {
        "id": str(item.get("id") or ""),
        "name": (display.get("text") if isinstance(display, dict) else None) or "",
        "address": item.get("formattedAddress"),
        "location": LatLng(float(lat), float(lng)) if _is_number(lat) and _is_number(lng) else None,
        "types": tuple(str(t) for t in types) if isinstance(types, list) else (),
        "rating": float(rating) if _is_number(rating) else None,
        "user_rating_count": int(count) if _is_number(count) else None,
    }


def _place_from_payload(item: Dict[str, Any]) -> Place:
    return Place(**_place_fields(item))


def _details_from_payload(item: Dict[str, Any]) -> PlaceDetails:
    hours = item.get("regularOpeningHours") or {}
    open_now = hours.get("openNow")
    weekday = hours.get("weekdayDescriptions")
    photos = item.get("photos") or []
    reviews = item.get("reviews") or []
    review_text = None
    if reviews and isinstance(reviews[0], dict):
        text_block = reviews[0].get("text") or {}
        review_text = text_block.get("text") if isinstance(text_block, dict) else None
    price_level = item.get("priceLevel")

    return PlaceDetails(
        **_place_fields(item),
        maps_uri=item.get("googleMapsUri"),
        price_level=price_level if isinstance(price_level, str) else None,
        open_now=open_now if isinstance(open_now, bool) else None,
        weekday_text=[str(line) for line in weekday] if isinstance(weekday, list) else None,
        photo_names=[p["name"] for p in photos if isinstance(p, dict) and p.get("name")],
        review_text=review_text,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
