"""Post-processing for travel options coming from the model or the mock dataset."""
from __future__ import annotations

import math
import random
from typing import Iterable, List

from oneyatra.deeplinks import generate_deep_link
from oneyatra.log import get_logger
from oneyatra.pricing import (
    RandomSource,
    calculate_cab_price,
    parse_distance_to_km,
    parse_duration_to_mins,
    predict_price_trend,
)
from oneyatra.schemas import TravelOption

logger = get_logger(__name__)

ROUND_TRIP_DISCOUNT = 0.95


def process_option(
    option: TravelOption,
    origin: str,
    time: str,
    destination: str,
    rng: RandomSource | None = None,
) -> TravelOption:
    """Return a copy of ``option`` with pricing, links and live status attached.

    Legs are processed with the parent's origin/time/destination rather than
    their own segment context.
    """
    rng = rng or random
    updates = {}

    if option.legs:
        # TODO: carry per-leg origin/destination once the model returns them reliably.
        updates["legs"] = [process_option(leg, origin, time, destination, rng) for leg in option.legs]

    if option.mode == "CAB" and option.distance:
        km = parse_distance_to_km(option.distance)
        mins = parse_duration_to_mins(option.duration)
        estimate = calculate_cab_price(km, mins, origin, time, rng)
        surge_tag = f"Surge {estimate.surge}x" if estimate.surge > 1 else "Standard Rate"
        logger.debug(
            "Priced %s cab %s: %.1f km / %d min -> %d (surge %.1f)",
            option.provider, option.id, km, mins, estimate.price, estimate.surge,
        )
        updates.update(
            price=float(estimate.price),
            surge_multiplier=estimate.surge,
            features=[*option.features, surge_tag],
        )

    link = generate_deep_link(option.provider, option.mode, origin, destination)
    updates.update(
        deep_link=link.url,
        deep_link_fallback=link.fallback_url,
        android_intent=link.android_intent,
        price_trend=predict_price_trend(option.mode, rng),
    )

    status = _real_time_status(option.mode, rng)
    if status is not None:
        updates["real_time_status"] = status

    return option.model_copy(update=updates)


def process_options(
    options: Iterable[TravelOption],
    origin: str,
    time: str,
    destination: str,
    rng: RandomSource | None = None,
) -> List[TravelOption]:
    return [process_option(opt, origin, time, destination, rng) for opt in options]


def build_round_trip_bundle(outbound: TravelOption, inbound: TravelOption) -> TravelOption:
    """Combine a selected outbound and return option into one discounted booking."""
    return TravelOption(
        id=f"rt-{outbound.id}-{inbound.id}",
        mode="MIXED",
        provider="Round Trip Bundle",
        departure_time=outbound.departure_time,
        arrival_time=inbound.arrival_time,
        duration="Combined",
        price=round((outbound.price + inbound.price) * ROUND_TRIP_DISCOUNT, 2),
        currency=outbound.currency,
        features=["Round Trip Discount Applied"],
        eco_score=math.floor((outbound.eco_score + inbound.eco_score) / 2),
        legs=[outbound, inbound],
        tag="Round Trip",
    )


def _real_time_status(mode: str, rng: RandomSource) -> str | None:
    if mode == "CAB":
        return f"Driver arriving in {math.floor(rng.random() * 10) + 2} mins"
    if mode == "BUS":
        return "Live: On Time" if rng.random() > 0.5 else "Live: 5 mins delayed"
    if mode == "TRAIN":
        return "Live: Running on time"
    return None
