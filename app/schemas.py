import math
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.tools.geo import LatLng, clamp, round_half_up

DEFAULT_TOTAL_MINUTES = 150
MIN_TOTAL_MINUTES, MAX_TOTAL_MINUTES = 120, 420
MAX_BUFFER_MINUTES = 20
DEFAULT_VIBE = "culture"
MIXED_VIBE_LABEL = "mixed"
SWAP_STOP_MIN_MINUTES, SWAP_STOP_MAX_MINUTES = 20, 180


class CamelModel(BaseModel):
    # Wire format is camelCase; attributes stay snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ------- Request models -------
class StopInput(CamelModel):
    place_id: str = Field(..., min_length=1)
    title: str
    duration_min: int
    lat: float = Field(..., allow_inf_nan=False)
    lng: float = Field(..., allow_inf_nan=False)

    @field_validator("place_id", "title", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("duration_min", mode="before")
    @classmethod
    def _clamp_duration(cls, value: Any) -> int:
        return round_half_up(clamp(value, SWAP_STOP_MIN_MINUTES, SWAP_STOP_MAX_MINUTES))


class ItineraryRequest(CamelModel):
    action: str = ""
    destination: str = ""
    total_minutes: int = DEFAULT_TOTAL_MINUTES
    vibe: str = DEFAULT_VIBE
    vibes: List[str] = Field(default_factory=list)
    park_once: bool = False
    rider_mode: bool = False
    buffer_minutes: int = 0
    exclude_place_ids: List[str] = Field(default_factory=list)
    # swap only
    stops: List[StopInput] = Field(default_factory=list)
    swap_index: Optional[int] = None
    swap_lat: Optional[float] = None
    swap_lng: Optional[float] = None

    @field_validator("action", "destination", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    @field_validator("vibe", mode="before")
    @classmethod
    def _vibe(cls, value: Any) -> str:
        return str(value) if value is not None else DEFAULT_VIBE

    @field_validator("vibes", "exclude_place_ids", mode="before")
    @classmethod
    def _string_list(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None and str(item)]

    @field_validator("total_minutes", mode="before")
    @classmethod
    def _clamp_total(cls, value: Any) -> int:
        if value is None:
            value = DEFAULT_TOTAL_MINUTES
        return round_half_up(clamp(value, MIN_TOTAL_MINUTES, MAX_TOTAL_MINUTES))

    @field_validator("buffer_minutes", mode="before")
    @classmethod
    def _clamp_buffer(cls, value: Any) -> int:
        if value is None:
            value = 0
        return round_half_up(clamp(value, 0, MAX_BUFFER_MINUTES))

    @field_validator("swap_lat", "swap_lng", mode="before")
    @classmethod
    def _finite_or_none(cls, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None

    @property
    def resolved_vibes(self) -> List[str]:
        return list(self.vibes) if self.vibes else [self.vibe]

    @property
    def vibe_label(self) -> str:
        vibes = self.resolved_vibes
        return MIXED_VIBE_LABEL if len(vibes) > 1 else vibes[0]

    @property
    def is_swap(self) -> bool:
        return self.action == "swap"


# ------- Response models -------
class ParkingOption(CamelModel):
    place_id: Optional[str] = None
    name: str = "Parking"
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    maps_uri: Optional[str] = None

    @property
    def location(self) -> Optional[LatLng]:
        if self.lat is None or self.lng is None:
            return None
        return LatLng(self.lat, self.lng)


class StopDetails(CamelModel):
    place_id: str
    title: str
    address: Optional[str] = None
    lat: float
    lng: float
    maps_uri: Optional[str] = None
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None
    price_level: Optional[str] = None
    open_now: Optional[bool] = None
    weekday_text: Optional[List[str]] = None
    photo_url: Optional[str] = None
    review_snippet: Optional[str] = None
    parking: Optional[ParkingOption] = None

    @property
    def location(self) -> LatLng:
        return LatLng(self.lat, self.lng)


class StopItem(StopDetails):
    type: Literal["stop"] = "stop"
    duration_min: int


class TravelItem(CamelModel):
    type: Literal["travel"] = "travel"
    title: str
    duration_min: int
    mode: Literal["DRIVE", "WALK"]


PlanItem = Annotated[Union[StopItem, TravelItem], Field(discriminator="type")]


class ItineraryResponse(CamelModel):
    destination: str
    total_minutes: int
    vibe: str
    vibes: List[str]
    park_once: bool
    rider_mode: bool
    buffer_minutes: int
    source: str = "google"
    items: List[PlanItem] = Field(default_factory=list)
