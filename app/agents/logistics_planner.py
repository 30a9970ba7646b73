"""Travel legs, stop timing and item assembly."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from app.logs import get_logger
from app.schemas import ParkingOption, PlanItem, StopDetails, StopItem, TravelItem
from app.tools.places import PlacesProvider, TravelMode

logger = get_logger(__name__)

MIN_ACTIVITY_MINUTES = 60
MIN_STOP_MINUTES = 25
PARK_ONCE_STOP_MINUTES = 5
FALLBACK_STOP_MINUTES = 40
FALLBACK_LEG_MINUTES = 10
PARK_ONCE_TITLE = "Park once"


@dataclass
class TravelPlan:
    minutes: List[int] = field(default_factory=list)
    mode: TravelMode = "DRIVE"
    parking: Optional[ParkingOption] = None

    @property
    def total(self) -> int:
        return sum(self.minutes)


async def compute_travel_legs(
    provider: PlacesProvider,
    stops: Sequence[StopDetails],
    *,
    parking: Optional[ParkingOption] = None,
    buffer_minutes: int = 0,
) -> TravelPlan:
    """Leg durations in stop order, each padded with ``buffer_minutes``.

    With a located park-once parking the first leg walks from the car to the
    first stop and every later leg walks too; otherwise every leg drives.
    """
    plan = TravelPlan()
    parking_loc = parking.location if parking is not None else None
    if parking_loc is not None and stops:
        plan.mode = "WALK"
        plan.parking = parking
        minutes = await provider.compute_travel_minutes(parking_loc, stops[0].location, "WALK")
        plan.minutes.append(minutes + buffer_minutes)

    for origin, destination in zip(stops[:-1], stops[1:]):
        minutes = await provider.compute_travel_minutes(origin.location, destination.location, plan.mode)
        plan.minutes.append(minutes + buffer_minutes)

    logger.info("Computed %d %s leg(s) totalling %d min", len(plan.minutes), plan.mode.lower(), plan.total)
    return plan


def split_stop_durations(total_minutes: int, travel_total: int, stop_count: int) -> List[int]:
    """Share the time left after travel between the stops.

    Two stops split 55/45, three split 42/35/rest; the first shares are
    floored and the last stop takes the remainder.
    """
    remaining = max(MIN_ACTIVITY_MINUTES, total_minutes - travel_total)
    if stop_count <= 2:
        first = int(remaining * 0.55)
        return [first, remaining - first]
    first = int(remaining * 0.42)
    second = int(remaining * 0.35)
    return [first, second, remaining - first - second]


def floor_durations(durations: Sequence[int], minimum: int = MIN_STOP_MINUTES) -> List[int]:
    return [max(minimum, d) for d in durations]


def build_items(
    stops: Sequence[StopDetails],
    durations: Sequence[int],
    travel: TravelPlan,
) -> List[PlanItem]:
    items: List[PlanItem] = []
    offset = 0
    verb = "Walk" if travel.mode == "WALK" else "Drive"

    if travel.parking is not None:
        parking = travel.parking
        items.append(
            StopItem(
                duration_min=PARK_ONCE_STOP_MINUTES,
                place_id=parking.place_id or "parking",
                title=PARK_ONCE_TITLE,
                address=parking.address,
                lat=parking.lat,
                lng=parking.lng,
                maps_uri=parking.maps_uri,
                parking=parking.model_copy(),
            )
        )
        if travel.minutes:
            items.append(
                TravelItem(
                    title=f"Walk to {stops[0].title if stops else 'first stop'}",
                    duration_min=travel.minutes[0],
                    mode="WALK",
                )
            )
        offset = 1

    for idx, stop in enumerate(stops):
        duration = durations[idx] if idx < len(durations) else FALLBACK_STOP_MINUTES
        items.append(StopItem(duration_min=duration, **stop.model_dump()))
        if idx < len(stops) - 1:
            leg_idx = idx + offset
            leg = travel.minutes[leg_idx] if leg_idx < len(travel.minutes) else FALLBACK_LEG_MINUTES
            items.append(
                TravelItem(
                    title=f"{verb} to {stops[idx + 1].title}",
                    duration_min=leg,
                    mode=travel.mode,
                )
            )
    return items
