"""Deterministic offline dataset served when the model is unavailable."""
from __future__ import annotations

from typing import List

from oneyatra.enrichment import process_options
from oneyatra.pricing import RandomSource
from oneyatra.schemas import RouteResponse, SearchParams, TravelOption

DEFAULT_RETURN_TIME = "09:00"


def _outbound(passengers: int) -> List[TravelOption]:
    return [
        TravelOption(
            id="m1",
            mode="FLIGHT",
            provider="IndiGo",
            departure_time="10:00 AM",
            arrival_time="12:00 PM",
            duration="2h 00m",
            distance="1100 km",
            price=4500 * passengers,
            rating=4.2,
            features=["Non-stop", "Saver"],
            tag="Fastest",
            carbon_emission=f"{80 * passengers} kg",
            eco_score=40,
        ),
        TravelOption(
            id="m2",
            mode="TRAIN",
            provider="Vande Bharat Express",
            departure_time="06:00 AM",
            arrival_time="02:00 PM",
            duration="8h 00m",
            distance="500 km",
            price=1800 * passengers,
            rating=4.8,
            features=["AC Chair Car", "Meals Included"],
            tag="Best Value",
            carbon_emission=f"{15 * passengers} kg",
            eco_score=85,
        ),
        TravelOption(
            id="m3",
            mode="BUS",
            provider="ZingBus",
            departure_time="09:00 PM",
            arrival_time="07:00 AM",
            duration="10h 00m",
            distance="500 km",
            price=1200 * passengers,
            rating=4.0,
            features=["AC Sleeper", "Water Bottle"],
            tag="Cheapest",
            carbon_emission=f"{25 * passengers} kg",
            eco_score=70,
        ),
        # Cab fares are per vehicle; the enrichment pass reprices this one.
        TravelOption(
            id="m4",
            mode="CAB",
            provider="Uber Intercity",
            departure_time="Flexible",
            arrival_time="Flexible",
            duration="7h 30m",
            distance="500 km",
            price=8500,
            rating=4.5,
            features=["Door-to-Door", "Private"],
            tag="Eco-Choice",
            carbon_emission=f"{120 * passengers} kg",
            eco_score=30,
        ),
    ]


def _return(passengers: int) -> List[TravelOption]:
    return [
        TravelOption(
            id="mr1",
            mode="FLIGHT",
            provider="Vistara",
            departure_time="06:00 PM",
            arrival_time="08:00 PM",
            duration="2h 00m",
            distance="1100 km",
            price=4800 * passengers,
            rating=4.5,
            features=["Non-stop", "Flexi"],
            tag="Best Value",
            carbon_emission=f"{80 * passengers} kg",
            eco_score=40,
        ),
        TravelOption(
            id="mr2",
            mode="TRAIN",
            provider="Shatabdi Express",
            departure_time="04:00 PM",
            arrival_time="10:30 PM",
            duration="6h 30m",
            distance="500 km",
            price=1500 * passengers,
            rating=4.6,
            features=["Executive Class", "Fastest Train"],
            tag="Fastest",
            carbon_emission=f"{15 * passengers} kg",
            eco_score=85,
        ),
    ]


def mock_travel_data(params: SearchParams, rng: RandomSource | None = None) -> RouteResponse:
    options = process_options(_outbound(params.passengers), params.origin, params.time, params.destination, rng)
    return_options = None
    if params.trip_type == "ROUND_TRIP":
        return_options = process_options(
            _return(params.passengers),
            params.destination,
            params.return_time or DEFAULT_RETURN_TIME,
            params.origin,
            rng,
        )
    return RouteResponse(
        origin=params.origin,
        destination=params.destination,
        date=params.date,
        return_date=params.return_date,
        ai_insight=f"Mock Data: Traveling with {params.passengers} people.",
        options=options,
        return_options=return_options,
    )
