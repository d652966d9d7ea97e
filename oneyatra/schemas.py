from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

TransportMode = Literal["CAB", "BUS", "TRAIN", "FLIGHT", "MIXED"]
TripType = Literal["ONE_WAY", "ROUND_TRIP", "MULTI_CITY"]
PriceTrend = Literal["UP", "DOWN", "STABLE"]

# Wire format is camelCase (the SPA posts and reads it); attributes stay snake_case.
_WIRE = dict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ------- Request models -------
class TripSegment(BaseModel):
    model_config = ConfigDict(**_WIRE, frozen=True)

    id: Optional[str] = None
    origin: str
    destination: str
    date: str
    time: str = "09:00"


class SearchParams(BaseModel):
    model_config = ConfigDict(**_WIRE, frozen=True)

    origin: str = ""
    destination: str = ""
    date: str
    time: str = "09:00"
    passengers: int = Field(1, ge=1)
    trip_type: TripType = "ONE_WAY"
    is_flexible: bool = False
    return_date: Optional[str] = None
    return_time: Optional[str] = None
    segments: List[TripSegment] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalise_trip_shape(cls, data: Any) -> Any:
        # Forms keep stale segments / return dates around when the user flips
        # trip type; drop whatever the chosen trip type does not use.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        trip_type = _pick(data, "tripType", "trip_type") or "ONE_WAY"
        if trip_type != "MULTI_CITY":
            data.pop("segments", None)
        if trip_type != "ROUND_TRIP":
            for key in ("returnDate", "return_date", "returnTime", "return_time"):
                data.pop(key, None)
        if trip_type == "MULTI_CITY":
            segments = data.get("segments") or []
            if segments:
                if not data.get("origin"):
                    data["origin"] = _segment_field(segments[0], "origin")
                if not data.get("destination"):
                    data["destination"] = _segment_field(segments[-1], "destination")
        return data

    @model_validator(mode="after")
    def _check_trip_shape(self) -> "SearchParams":
        if self.trip_type == "MULTI_CITY" and not self.segments:
            raise ValueError("MULTI_CITY searches require at least one segment")
        if self.trip_type == "ROUND_TRIP" and not self.return_date:
            raise ValueError("ROUND_TRIP searches require returnDate")
        return self


class ChatMessage(BaseModel):
    model_config = ConfigDict(**_WIRE)

    id: Optional[str] = None
    sender: Literal["USER", "BOT"]
    text: str
    timestamp: Optional[int] = None


class ChatRequest(BaseModel):
    model_config = ConfigDict(**_WIRE)

    message: str
    history: List[ChatMessage] = Field(default_factory=list)


class DeepLinkClick(BaseModel):
    provider: str
    status: Literal["attempted", "fallback"]


# ------- Response models -------
class TravelOption(BaseModel):
    model_config = ConfigDict(**_WIRE)

    id: str
    mode: TransportMode
    provider: str
    departure_time: str = ""
    arrival_time: str = ""
    duration: str = ""
    distance: Optional[str] = None
    price: float
    currency: str = "INR"
    rating: Optional[float] = None
    eco_score: float = 0
    features: List[str] = Field(default_factory=list)
    tag: Optional[str] = None
    legs: Optional[List["TravelOption"]] = None
    carbon_emission: Optional[str] = None
    # Filled in by the enrichment pipeline, never trusted from upstream.
    deep_link: Optional[str] = None
    deep_link_fallback: Optional[str] = None
    android_intent: Optional[str] = None
    surge_multiplier: Optional[float] = None
    price_trend: Optional[PriceTrend] = None
    real_time_status: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _fill_upstream_gaps(cls, data: Any) -> Any:
        # Model output sends null for list/text fields and leaves id/price off
        # nested legs; keep such options instead of failing the whole route.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, field in cls.model_fields.items():
            if field.is_required() or field.default is None:
                continue
            for key in {name, field.alias}:
                if key in data and data[key] is None:
                    del data[key]
        legs = data.get("legs")
        if isinstance(legs, list):
            parent_id = data.get("id") or "leg"
            data["legs"] = [_fill_leg(leg, parent_id, index) for index, leg in enumerate(legs, start=1)]
        return data


class RouteResponse(BaseModel):
    model_config = ConfigDict(**_WIRE, frozen=True)

    origin: str
    destination: str
    date: str
    return_date: Optional[str] = None
    options: List[TravelOption] = Field(default_factory=list)
    return_options: Optional[List[TravelOption]] = None
    ai_insight: Optional[str] = None


class ChatResponse(BaseModel):
    response: str


class RoundTripBundleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    outbound: TravelOption
    inbound: TravelOption = Field(..., alias="return")


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _segment_field(segment: Any, name: str) -> str:
    if isinstance(segment, dict):
        return segment.get(name) or ""
    return getattr(segment, name, "") or ""


def _fill_leg(leg: Any, parent_id: str, index: int) -> Any:
    if not isinstance(leg, dict):
        return leg
    leg = dict(leg)
    if not leg.get("id"):
        leg["id"] = f"{parent_id}-{index}"
    if leg.get("price") is None:
        leg["price"] = 0.0
    return leg
