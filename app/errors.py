"""Error taxonomy for itinerary requests.

Each error carries the HTTP status the API layer answers with, so the
pipelines can raise without knowing about FastAPI. The 404 family marks
"try different inputs" outcomes; 500s are configuration or upstream faults.
"""
from __future__ import annotations

from typing import Any


class ItineraryError(Exception):
    status_code: int = 500

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidRequest(ItineraryError):
    status_code = 400


class ConfigurationError(ItineraryError):
    status_code = 500


class UpstreamError(ItineraryError):
    status_code = 500


class NotEnoughPlaces(ItineraryError):
    status_code = 404


class NotEnoughOpenPlaces(ItineraryError):
    status_code = 404


class NoOpenReplacement(ItineraryError):
    status_code = 404


class ClosedStop(ItineraryError):
    status_code = 404
