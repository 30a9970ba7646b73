from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from app import main
from app.main import app
from app.schemas import ItineraryResponse
from fakes import FakePlacesProvider, vancouver_provider


def _sample_payload() -> dict:
    return {"destination": "Vancouver", "totalMinutes": 150, "vibes": ["culture"], "parkOnce": False}


def _swap_payload() -> dict:
    return {
        "destination": "Vancouver",
        "totalMinutes": 150,
        "vibes": ["culture"],
        "swapIndex": 1,
        "stops": [
            {"placeId": "a1", "title": "Art Gallery", "durationMin": 50, "lat": 49.283, "lng": -123.12},
            {"placeId": "f1", "title": "Cafe Medina", "durationMin": 45, "lat": 49.28, "lng": -123.116},
            {"placeId": "a2", "title": "Science World", "durationMin": 35, "lat": 49.2734, "lng": -123.1038},
        ],
    }


def test_health():
    client = TestClient(app)
    assert client.get("/health").json() == {"status": "ok"}


def test_itinerary_endpoint_returns_camel_case_plan(monkeypatch):
    client = TestClient(app)
    monkeypatch.setattr(main, "get_places_provider", vancouver_provider)

    response = client.post("/api/itinerary", json=_sample_payload())

    assert response.status_code == 200
    data = response.json()
    assert data["destination"] == "Vancouver"
    assert data["totalMinutes"] == 150
    assert data["source"] == "google"
    assert [item["type"] for item in data["items"]] == ["stop", "travel", "stop", "travel", "stop"]
    first = data["items"][0]
    assert first["placeId"] == "a1"
    assert first["durationMin"] == 52
    assert first["photoUrl"].endswith("?w=1000")
    assert first["parking"]["mapsUri"] == "https://maps.example/pk1"
    assert "reviewSnippet" not in first


def test_blank_destination_is_rejected(monkeypatch):
    client = TestClient(app)
    provider_factory = AsyncMock()
    monkeypatch.setattr(main, "get_places_provider", provider_factory)

    response = client.post("/api/itinerary", json={"destination": "  "})

    assert response.status_code == 400
    assert response.json() == {"error": "Destination is required"}
    provider_factory.assert_not_called()


def test_missing_api_key_is_a_server_error(monkeypatch):
    client = TestClient(app)
    monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)

    response = client.post("/api/itinerary", json=_sample_payload())

    assert response.status_code == 500
    assert "GOOGLE_MAPS_API_KEY" in response.json()["error"]


def test_no_candidates_is_not_found(monkeypatch):
    client = TestClient(app)
    monkeypatch.setattr(main, "get_places_provider", FakePlacesProvider)

    response = client.post("/api/itinerary", json={**_sample_payload(), "destination": "Atlantis"})

    assert response.status_code == 404
    assert response.json() == {"error": "Not enough high-quality places found"}


def test_malformed_swap_stop_is_a_bad_request(monkeypatch):
    client = TestClient(app)
    monkeypatch.setattr(main, "get_places_provider", vancouver_provider)
    payload = _swap_payload()
    del payload["stops"][0]["lat"]

    response = client.post("/api/itinerary/swap", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request"
    assert body["detail"]


def test_swap_endpoint_forces_swap_action(monkeypatch):
    client = TestClient(app)
    orchestrator = AsyncMock(
        return_value=ItineraryResponse(
            destination="Vancouver",
            total_minutes=150,
            vibe="culture",
            vibes=["culture"],
            park_once=False,
            rider_mode=False,
            buffer_minutes=0,
        )
    )
    monkeypatch.setattr(main, "get_places_provider", vancouver_provider)
    monkeypatch.setattr(main, "orchestrate_itinerary", orchestrator)

    response = client.post("/api/itinerary/swap", json=_swap_payload())

    assert response.status_code == 200
    orchestrator.assert_awaited_once()
    called_request = orchestrator.await_args.args[0]
    assert called_request.is_swap
    assert called_request.swap_index == 1
    assert response.json()["items"] == []


def test_swap_without_open_replacement_is_not_found(monkeypatch):
    client = TestClient(app)
    monkeypatch.setattr(main, "get_places_provider", vancouver_provider)

    response = client.post("/api/itinerary", json={**_swap_payload(), "action": "swap"})

    assert response.status_code == 404
    assert response.json() == {"error": "No OPEN replacement found nearby"}


class _BrokenPhotoProvider(FakePlacesProvider):
    async def get_photo_uri(self, photo_name, max_width_px=900):
        raise RuntimeError("photo service exploded")


def test_unexpected_failures_still_answer_json(monkeypatch):
    client = TestClient(app, raise_server_exceptions=False)
    monkeypatch.setattr(main, "get_places_provider", lambda: vancouver_provider(_BrokenPhotoProvider))

    response = client.post("/api/itinerary", json=_sample_payload())

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"error": "photo service exploded"}


def test_request_is_validated_once(monkeypatch):
    from app import orchestrator

    client = TestClient(app)
    calls = []
    real_validate = orchestrator.validate_request

    def counting_validate(req):
        calls.append(req)
        real_validate(req)

    monkeypatch.setattr(main, "validate_request", counting_validate)
    monkeypatch.setattr(orchestrator, "validate_request", counting_validate)
    monkeypatch.setattr(main, "get_places_provider", vancouver_provider)

    response = client.post("/api/itinerary", json=_sample_payload())

    assert response.status_code == 200
    assert len(calls) == 1
