"""Geo and numeric helpers used across the planning pipeline."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

EARTH_RADIUS_KM = 6371.0
DEFAULT_LEG_SECONDS = 900
MIN_LEG_MINUTES = 5


@dataclass(frozen=True)
class LatLng:
    latitude: float
    longitude: float

    def as_payload(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


def haversine_km(a: LatLng, b: LatLng) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def clamp(value: Any, low: float, high: float) -> float:
    """Clamp ``value`` into ``[low, high]``; anything non-numeric collapses to ``low``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return low
    if not math.isfinite(number):
        return low
    return max(low, min(high, number))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def minutes_from_duration(duration: Any) -> int:
    """Convert a provider duration such as ``"754s"`` into whole minutes.

    Missing or unparseable durations fall back to ``DEFAULT_LEG_SECONDS``;
    the result is never below ``MIN_LEG_MINUTES``.
    """
    raw = str(duration if duration is not None else "").strip().replace("s", "")
    try:
        seconds = float(raw)
    except ValueError:
        seconds = 0.0
    if not math.isfinite(seconds) or seconds == 0:
        seconds = DEFAULT_LEG_SECONDS
    return max(MIN_LEG_MINUTES, round_half_up(seconds / 60))


def safe_text(value: Any, max_len: int) -> Optional[str]:
    text = str(value if value is not None else "").strip()
    if not text:
        return None
    if len(text) > max_len:
        return f"{text[: max_len - 1]}…"
    return text
