from oneyatra.enrichment import build_round_trip_bundle, process_option, process_options
from oneyatra.schemas import TravelOption


class FixedRandom:
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def _flight(**overrides) -> TravelOption:
    data = dict(
        id="f1",
        mode="FLIGHT",
        provider="IndiGo",
        departure_time="10:00 AM",
        arrival_time="12:00 PM",
        duration="2h 00m",
        distance="1100 km",
        price=9000,
        eco_score=40,
        features=["Non-stop"],
    )
    data.update(overrides)
    return TravelOption(**data)


def _cab(**overrides) -> TravelOption:
    data = dict(
        id="c1",
        mode="CAB",
        provider="Uber Go",
        duration="35m",
        distance="14.5 km",
        price=999,
        eco_score=30,
        features=["AC"],
    )
    data.update(overrides)
    return TravelOption(**data)


def test_flight_price_is_left_alone_and_stable_across_passes():
    once = process_option(_flight(), "Mumbai", "09:00", "Delhi", FixedRandom(0.5))
    twice = process_option(once, "Mumbai", "09:00", "Delhi", FixedRandom(0.1))

    assert once.price == 9000
    assert twice.price == once.price
    assert twice.deep_link == once.deep_link
    assert once.deep_link == "https://www.goindigo.in/booking/flight-ticket.html?origin=Mumbai&dest=Delhi"
    assert once.deep_link_fallback == "https://www.goindigo.in/"
    assert once.surge_multiplier is None
    assert once.real_time_status is None
    assert once.price_trend == "UP"


def test_cab_is_repriced_from_distance_and_duration():
    original = _cab()
    enriched = process_option(original, "Delhi", "14:00", "Noida", FixedRandom(0.5))

    # 50 + 14.5 * 14 + 35 * 2
    assert enriched.price == 323
    assert enriched.surge_multiplier == 1.0
    assert enriched.features == ["AC", "Standard Rate"]
    assert enriched.deep_link.startswith("https://m.uber.com/ul/")
    assert enriched.android_intent is not None
    assert enriched.real_time_status == "Driver arriving in 7 mins"
    assert enriched.price_trend == "STABLE"
    # Input is not mutated.
    assert original.price == 999
    assert original.features == ["AC"]
    assert original.deep_link is None


def test_cab_in_rush_hour_is_tagged_with_surge():
    enriched = process_option(_cab(), "Delhi", "18:00", "Noida", FixedRandom(0.5))
    assert enriched.surge_multiplier == 1.6
    assert enriched.features[-1] == "Surge 1.6x"


def test_cab_without_distance_keeps_upstream_price():
    enriched = process_option(_cab(distance=None), "Delhi", "18:00", "Noida", FixedRandom(0.0))
    assert enriched.price == 999
    assert enriched.surge_multiplier is None
    assert enriched.features == ["AC"]
    assert enriched.real_time_status == "Driver arriving in 2 mins"


def test_bus_and_train_live_status():
    bus = TravelOption(id="b1", mode="BUS", provider="ZingBus", price=1200)
    assert process_option(bus, "Mumbai", "21:00", "Pune", FixedRandom(0.7)).real_time_status == "Live: On Time"
    assert (
        process_option(bus, "Mumbai", "21:00", "Pune", FixedRandom(0.2)).real_time_status
        == "Live: 5 mins delayed"
    )

    train = TravelOption(id="t1", mode="TRAIN", provider="IRCTC Shatabdi", price=1500)
    assert process_option(train, "Mumbai", "06:00", "Pune").real_time_status == "Live: Running on time"


def test_legs_are_enriched_with_parent_context():
    composite = TravelOption(
        id="mx1",
        mode="MIXED",
        provider="OneYatra Combo",
        price=5000,
        legs=[
            _cab(id="leg-1"),
            TravelOption(id="leg-2", mode="TRAIN", provider="Vande Bharat", price=1800),
        ],
    )

    enriched = process_option(composite, "Delhi", "14:00", "Jaipur", FixedRandom(0.5))

    cab_leg, train_leg = enriched.legs
    assert cab_leg.price == 323
    assert train_leg.deep_link == "irctcconnect://train_search?src=Delhi&dst=Jaipur"
    # The composite's own price is an aggregate computed elsewhere.
    assert enriched.price == 5000
    assert enriched.deep_link.startswith("https://www.google.com/maps/dir/")
    assert composite.legs[0].price == 999


def test_process_options_maps_every_option():
    result = process_options([_flight(), _cab()], "Mumbai", "14:00", "Pune", FixedRandom(0.5))
    assert [opt.id for opt in result] == ["f1", "c1"]
    assert all(opt.deep_link for opt in result)


def test_round_trip_bundle_applies_discount():
    outbound = _flight(id="o1", price=4500, eco_score=40)
    inbound = _flight(id="r1", provider="Vistara", price=4800, eco_score=85, arrival_time="08:00 PM")

    bundle = build_round_trip_bundle(outbound, inbound)

    assert bundle.mode == "MIXED"
    assert bundle.provider == "Round Trip Bundle"
    assert bundle.price == 8835.0
    assert bundle.eco_score == 62
    assert bundle.departure_time == "10:00 AM"
    assert bundle.arrival_time == "08:00 PM"
    assert [leg.id for leg in bundle.legs] == ["o1", "r1"]
    assert bundle.features == ["Round Trip Discount Applied"]
    assert bundle.tag == "Round Trip"
