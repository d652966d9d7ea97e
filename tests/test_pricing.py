import random

import pytest

from oneyatra.pricing import (
    CITY_RATES,
    calculate_cab_price,
    calculate_surge,
    get_rate_card,
    parse_distance_to_km,
    parse_duration_to_mins,
    predict_price_trend,
)


class FixedRandom:
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2h 30m", 150),
        ("45m", 45),
        ("8h", 480),
        ("7h 30m", 450),
        ("garbage", 60),
        ("0m", 60),
        ("", 60),
        (None, 60),
    ],
)
def test_parse_duration_to_mins(text, expected):
    assert parse_duration_to_mins(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("14.5 km", 14.5),
        ("500 km", 500.0),
        ("approx 1100km by road", 1100.0),
        ("no digits", 10.0),
        (None, 10.0),
    ],
)
def test_parse_distance_to_km(text, expected):
    assert parse_distance_to_km(text) == expected


def test_ncr_cities_share_the_delhi_card():
    assert get_rate_card("Gurgaon") is CITY_RATES["Delhi"]
    assert get_rate_card("Sector 29, Gurgaon") == get_rate_card("Delhi")
    assert get_rate_card("Noida Extension") is CITY_RATES["Delhi"]


def test_rate_card_matching_rules():
    assert get_rate_card("Pune") is CITY_RATES["Mumbai"]
    assert get_rate_card("Navi Mumbai") is CITY_RATES["Mumbai"]
    assert get_rate_card("Bengaluru") is CITY_RATES["Bangalore"]
    assert get_rate_card("Chennai") is CITY_RATES["Default"]
    # Matching is case-sensitive.
    assert get_rate_card("delhi") is CITY_RATES["Default"]
    assert get_rate_card("") is CITY_RATES["Default"]


def test_rush_hour_surge_stays_in_band():
    assert calculate_surge("09:00", FixedRandom(0.0)) == pytest.approx(1.4)
    assert calculate_surge("18:45", FixedRandom(0.5)) == pytest.approx(1.6)
    top = calculate_surge("11:59", FixedRandom(0.999999))
    assert 1.4 <= top < 1.8

    rng = random.Random(7)
    for _ in range(200):
        assert 1.4 <= calculate_surge("09:00", rng) < 1.8


def test_night_and_off_peak_surge():
    assert calculate_surge("23:00") == 1.2
    assert calculate_surge("06:30") == 1.2
    assert calculate_surge("00:15") == 1.2
    assert calculate_surge("14:00") == 1.0
    assert calculate_surge("21:00") == 1.0
    assert calculate_surge("Flexible") == 1.0


@pytest.mark.parametrize(
    "time_str, expected",
    [
        ("07:00", 1.0),
        ("08:00", 1.6),
        ("11:00", 1.6),
        ("12:00", 1.0),
        ("16:59", 1.0),
        ("17:00", 1.6),
        ("20:00", 1.6),
        ("20:59", 1.6),
        ("21:59", 1.0),
        ("22:00", 1.2),
        ("06:00", 1.2),
    ],
)
def test_surge_band_edges(time_str, expected):
    assert calculate_surge(time_str, FixedRandom(0.5)) == pytest.approx(expected)


def test_surge_reads_leading_hour_of_twelve_hour_times():
    assert calculate_surge("10:00 AM", FixedRandom(0.25)) == pytest.approx(1.5)


def test_cab_price_off_peak():
    fare = calculate_cab_price(500, 450, "Mumbai", "14:00")
    assert fare.price == 9165
    assert fare.surge == 1.0
    assert fare.breakdown == "Base ₹40 + ₹16/km + Time"


def test_cab_price_applies_rounded_surge_and_minimum_fare():
    fare = calculate_cab_price(10, 20, "Delhi", "09:00", FixedRandom(0.5))
    assert fare.surge == 1.6
    assert fare.price == 368

    floor = calculate_cab_price(0, 0, "Delhi", "14:00")
    assert floor.price == CITY_RATES["Delhi"].min_fare


def test_cab_price_rounds_half_up():
    # 40 + 10 * 16 + 1 * 2.5 = 202.5
    assert calculate_cab_price(10, 1, "Mumbai", "14:00").price == 203


def test_cab_price_never_below_minimum_fare():
    rng = random.Random(42)
    for city in ("Delhi", "Pune", "Bengaluru", "Kochi"):
        card = get_rate_card(city)
        for _ in range(50):
            km = rng.uniform(0, 40)
            mins = rng.uniform(0, 90)
            hour = rng.randint(0, 23)
            fare = calculate_cab_price(km, mins, city, f"{hour:02d}:00", rng)
            assert fare.price >= card.min_fare


def test_price_trend_by_mode():
    assert predict_price_trend("FLIGHT", FixedRandom(0.5)) == "UP"
    assert predict_price_trend("TRAIN", FixedRandom(0.1)) == "STABLE"
    assert predict_price_trend("CAB", FixedRandom(0.9)) == "UP"
    assert predict_price_trend("CAB", FixedRandom(0.1)) == "DOWN"
    assert predict_price_trend("CAB", FixedRandom(0.5)) == "STABLE"
    assert predict_price_trend("BUS", FixedRandom(0.99)) == "STABLE"
