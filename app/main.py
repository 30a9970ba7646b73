from __future__ import annotations

import os
from typing import Any, Dict

from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.errors import InvalidRequest, ItineraryError
from app.logs import get_logger
from app.orchestrator import orchestrate_itinerary, validate_request
from app.schemas import ItineraryRequest
from app.tools.places import PlacesClient, PlacesProvider

logger = get_logger(__name__)

app = FastAPI(title="Short Itinerary API")

# Local UIs (dev servers, static builds) call the API cross-origin. Operators
# can scope this via ITINERARY_ALLOWED_ORIGINS.
raw_origins = os.getenv("ITINERARY_ALLOWED_ORIGINS") or "*"
allowed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
if not allowed_origins:
    allowed_origins = ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_places_provider() -> PlacesProvider:
    return PlacesClient()


@app.exception_handler(ItineraryError)
async def _itinerary_error(_request, exc: ItineraryError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Itinerary request failed: %s", exc.message)
    else:
        logger.info("Itinerary request rejected (%d): %s", exc.status_code, exc.message)
    content: Dict[str, Any] = {"error": exc.message}
    if exc.detail is not None:
        content["detail"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def _unexpected_error(_request, exc: Exception) -> JSONResponse:
    logger.error("Unexpected itinerary failure", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc) or "Failed to generate itinerary"})


async def _itinerary_from_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the incoming payload and delegate to the orchestrator."""
    try:
        req = ItineraryRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRequest(
            "Invalid request", detail=exc.errors(include_url=False, include_context=False)
        ) from exc

    validate_request(req)
    provider = get_places_provider()
    response = await orchestrate_itinerary(req, provider)
    return response.model_dump(by_alias=True, exclude_none=True)


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/api/itinerary")
async def api_itinerary(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Generate, regenerate (``excludePlaceIds``) or swap (``action: "swap"``)."""
    return await _itinerary_from_payload(payload)


@app.post("/api/itinerary/swap")
async def api_itinerary_swap(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    return await _itinerary_from_payload({**payload, "action": "swap"})
