# debug_orchestrator.py
import asyncio
import json

from app.orchestrator import orchestrate_itinerary, validate_request
from app.schemas import ItineraryRequest
from app.tools.places import PlacesClient


async def main():
    payload = {
        "destination": "Vancouver",
        "totalMinutes": 150,
        "vibes": ["culture", "foodie"],
        "parkOnce": True,
        "riderMode": False,
        "bufferMinutes": 5,
        "excludePlaceIds": [],
    }

    # Call orchestrator directly against the live Google APIs
    req = ItineraryRequest.model_validate(payload)
    validate_request(req)
    result = await orchestrate_itinerary(req, PlacesClient())
    print("➡️ Orchestrator returned:\n")
    print(json.dumps(result.model_dump(by_alias=True, exclude_none=True), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
