"""Cab fare estimation: unit parsing, city rate cards, surge and price trends."""
from __future__ import annotations

import math
import random
import re
from dataclasses import dataclass
from typing import Any, Dict, Protocol


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True)
class RateCard:
    base_fare: int
    per_km: int
    per_min: float
    min_fare: int
    night_surcharge: float  # multiplier


@dataclass(frozen=True)
class CabFare:
    price: int
    surge: float
    breakdown: str


CITY_RATES: Dict[str, RateCard] = {
    "Delhi": RateCard(base_fare=50, per_km=14, per_min=2, min_fare=100, night_surcharge=1.25),
    "Mumbai": RateCard(base_fare=40, per_km=16, per_min=2.5, min_fare=90, night_surcharge=1.3),
    "Bangalore": RateCard(base_fare=60, per_km=18, per_min=3, min_fare=120, night_surcharge=1.5),
    "Default": RateCard(base_fare=45, per_km=15, per_min=2, min_fare=80, night_surcharge=1.2),
}

# First rule whose alias appears in the city string wins. Case-sensitive.
_CITY_RULES = (
    (("Delhi", "Noida", "Gurgaon"), "Delhi"),
    (("Mumbai", "Pune"), "Mumbai"),
    (("Bangalore", "Bengaluru"), "Bangalore"),
)

_HOURS_RE = re.compile(r"(\d+)h")
_MINUTES_RE = re.compile(r"(\d+)m")
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")
_LEADING_HOUR_RE = re.compile(r"\s*([+-]?\d+)")

DEFAULT_DURATION_MINS = 60
DEFAULT_DISTANCE_KM = 10.0


def parse_duration_to_mins(text: Any) -> int:
    """Convert strings such as ``"2h 30m"`` or ``"45m"`` to minutes (60 when unknown)."""
    if not isinstance(text, str):
        return DEFAULT_DURATION_MINS
    minutes = 0
    hours = _HOURS_RE.search(text)
    mins = _MINUTES_RE.search(text)
    if hours:
        minutes += int(hours.group(1)) * 60
    if mins:
        minutes += int(mins.group(1))
    return minutes or DEFAULT_DURATION_MINS


def parse_distance_to_km(text: Any) -> float:
    if not isinstance(text, str):
        return DEFAULT_DISTANCE_KM
    match = _NUMBER_RE.search(text)
    return float(match.group(0)) if match else DEFAULT_DISTANCE_KM


def get_rate_card(city: str) -> RateCard:
    city = city or ""
    for aliases, card_name in _CITY_RULES:
        if any(alias in city for alias in aliases):
            return CITY_RATES[card_name]
    return CITY_RATES["Default"]


def calculate_surge(time_str: str, rng: RandomSource | None = None) -> float:
    """Time-of-day multiplier.

    Rush hours (08-11, 17-20) land somewhere in [1.4, 1.8), nights (22-06) are a
    flat 1.2 and everything else, including unparseable times, is 1.0.
    """
    hour = _leading_hour(time_str)
    if hour is None:
        return 1.0
    if 8 <= hour <= 11 or 17 <= hour <= 20:
        return 1.4 + (rng or random).random() * 0.4
    if hour >= 22 or hour <= 6:
        return 1.2
    return 1.0


def calculate_cab_price(
    distance_km: float,
    duration_mins: float,
    city: str,
    time_str: str,
    rng: RandomSource | None = None,
) -> CabFare:
    rates = get_rate_card(city)
    surge = calculate_surge(time_str, rng)

    distance_cost = distance_km * rates.per_km
    time_cost = duration_mins * rates.per_min
    raw_total = (rates.base_fare + distance_cost + time_cost) * surge
    final_price = max(raw_total, rates.min_fare)

    return CabFare(
        price=_round_half_up(final_price),
        surge=round(surge, 1),
        breakdown=f"Base ₹{rates.base_fare} + ₹{rates.per_km}/km + Time",
    )


def predict_price_trend(mode: str, rng: RandomSource | None = None) -> str:
    roll = (rng or random).random()
    if mode in ("FLIGHT", "TRAIN"):
        return "UP" if roll > 0.3 else "STABLE"
    if mode == "CAB":
        if roll > 0.8:
            return "UP"
        return "DOWN" if roll < 0.2 else "STABLE"
    return "STABLE"


def _leading_hour(time_str: Any) -> int | None:
    if not isinstance(time_str, str):
        return None
    match = _LEADING_HOUR_RE.match(time_str.split(":")[0])
    return int(match.group(1)) if match else None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
