import asyncio

import pytest

from app.agents.enrichment import describe_stop, enrich_stops, find_parking_near, lookup_parking
from app.errors import NotEnoughOpenPlaces
from fakes import ART_GALLERY, CAFE_MEDINA, SCIENCE_WORLD, STANLEY_PARK, FakePlacesProvider, vancouver_provider


def test_closed_stops_are_replaced_by_the_next_candidate():
    async def run() -> None:
        provider = vancouver_provider(closed=["a1"])
        stops = await enrich_stops(provider, [ART_GALLERY, CAFE_MEDINA, SCIENCE_WORLD, STANLEY_PARK], 3, "Vancouver")

        assert [s.place_id for s in stops] == ["f1", "a2", "p1"]
        assert all(s.open_now for s in stops)

    asyncio.run(run())


def test_enrichment_stops_once_enough_stops_are_collected():
    async def run() -> None:
        provider = vancouver_provider()
        await enrich_stops(provider, [ART_GALLERY, CAFE_MEDINA, SCIENCE_WORLD, STANLEY_PARK], 2, "Vancouver")

        candidate_lookups = [pid for pid in provider.details_calls if pid != "pk1"]
        assert candidate_lookups == ["a1", "f1"]

    asyncio.run(run())


def test_too_few_open_places_fails():
    async def run() -> None:
        provider = vancouver_provider(closed=["a1", "f1"])
        with pytest.raises(NotEnoughOpenPlaces) as exc:
            await enrich_stops(provider, [ART_GALLERY, CAFE_MEDINA, SCIENCE_WORLD], 3, "Vancouver")
        assert exc.value.message == "Not enough OPEN places found right now"

    asyncio.run(run())


def test_stop_details_carry_photo_review_and_parking():
    async def run() -> None:
        provider = vancouver_provider(reviews={"f1": "Lovely waffles. " * 30})
        details = await provider.get_place_details("f1")
        stop = await describe_stop(provider, details, "Vancouver")

        assert stop.place_id == "f1"
        assert stop.title == "Cafe Medina"
        assert stop.maps_uri == "https://maps.example/f1"
        assert stop.price_level == "PRICE_LEVEL_MODERATE"
        assert stop.photo_url == "https://photos.example/places/f1/photos/p1?w=1000"
        assert len(stop.review_snippet) == 170
        assert stop.review_snippet.endswith("…")
        assert stop.parking.place_id == "pk1"
        assert stop.parking.maps_uri == "https://maps.example/pk1"
        assert ("parking near Cafe Medina Vancouver", 5) in provider.search_calls

    asyncio.run(run())


def test_short_reviews_are_kept_whole():
    async def run() -> None:
        provider = vancouver_provider(reviews={"a1": "  Great   light.  "})
        stop = await describe_stop(provider, await provider.get_place_details("a1"), "Vancouver")
        assert stop.review_snippet == "Great   light."

    asyncio.run(run())


def test_parking_lookup_is_best_effort():
    async def run() -> None:
        failing = vancouver_provider(failing_searches=["parking near"])
        assert await lookup_parking(failing, "Art Gallery", "Vancouver") is None

        empty = FakePlacesProvider()
        assert await find_parking_near(empty, "Art Gallery", "Vancouver") is None

    asyncio.run(run())


def test_parking_keeps_search_hit_when_its_details_fail():
    async def run() -> None:
        provider = vancouver_provider(failing_details=["pk1"])
        parking = await find_parking_near(provider, "Art Gallery", "Vancouver")

        assert parking.name == "EasyPark Lot 31"
        assert parking.maps_uri is None
        assert parking.location is not None

    asyncio.run(run())
