"""Provider deep links: universal links, custom URI schemes and Android intents.

Every origin/destination is trimmed and percent-encoded before it is placed in
a URL. Query parameter names mirror what each provider's app expects, so they
must not be "tidied up".
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from oneyatra.log import get_logger

logger = get_logger(__name__)
analytics_logger = get_logger("oneyatra.analytics")

ALLOWED_PROVIDERS = (
    "Uber", "Ola", "Rapido", "BluSmart",
    "IndiGo", "Air India", "Vistara",
    "IRCTC", "Vande Bharat",
    "RedBus", "ZingBus", "IntrCity",
)

# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class DeepLinkResult:
    url: str
    fallback_url: str
    is_universal: bool
    android_intent: Optional[str] = None


def sanitize_input(value: str) -> str:
    return quote((value or "").strip(), safe=_URI_COMPONENT_SAFE)


def resolve_provider(provider: str) -> str:
    provider = provider or ""
    return next((p for p in ALLOWED_PROVIDERS if p in provider), "Generic")


def track_deep_link_click(provider: str, status: str) -> None:
    """Record that the UI tried (or fell back from) a provider deep link."""
    analytics_logger.info(
        "DeepLink Clicked: %s | Status: %s | Timestamp: %d",
        provider,
        status,
        int(time.time() * 1000),
    )


def generate_deep_link(provider: str, mode: str, origin: str, destination: str) -> DeepLinkResult:
    safe_provider = resolve_provider(provider)
    safe_origin = sanitize_input(origin)
    safe_dest = sanitize_input(destination)
    logger.debug("Deep link for %r (%s) resolved to %s", provider, mode, safe_provider)

    if safe_provider == "Uber":
        return DeepLinkResult(
            url=(
                "https://m.uber.com/ul/?action=setPickup&pickup=my_location"
                f"&dropoff[formatted_address]={safe_dest}&dropoff[nickname]={safe_dest}"
            ),
            is_universal=True,
            fallback_url=f"https://m.uber.com/looking?dropoff[formatted_address]={safe_dest}",
            android_intent=(
                "intent://?action=setPickup&pickup=my_location"
                f"&dropoff[formatted_address]={safe_dest}#Intent;package=com.ubercab;scheme=uber;end"
            ),
        )

    if safe_provider == "Ola":
        fallback = f"https://book.olacabs.com/?drop_name={safe_dest}"
        return DeepLinkResult(
            url=f"olacabs://app?drop_lat=&drop_lng=&drop_name={safe_dest}",
            is_universal=False,
            fallback_url=fallback,
            android_intent=(
                f"intent://app?drop_lat=&drop_lng=&drop_name={safe_dest}"
                "#Intent;scheme=olacabs;package=com.olacabs.customer;"
                f"S.browser_fallback_url={sanitize_input(fallback)};end"
            ),
        )

    if safe_provider == "Rapido":
        return DeepLinkResult(
            url=f"rapido://booking?destination={safe_dest}",
            is_universal=False,
            fallback_url="https://www.rapido.bike/",
            android_intent=(
                f"intent://booking?destination={safe_dest}"
                "#Intent;scheme=rapido;package=com.rapido.passenger;end"
            ),
        )

    if safe_provider == "IndiGo":
        return DeepLinkResult(
            url=f"https://www.goindigo.in/booking/flight-ticket.html?origin={safe_origin}&dest={safe_dest}",
            is_universal=True,
            fallback_url="https://www.goindigo.in/",
        )

    if safe_provider in ("IRCTC", "Vande Bharat"):
        return DeepLinkResult(
            url=f"irctcconnect://train_search?src={safe_origin}&dst={safe_dest}",
            is_universal=False,
            fallback_url="https://www.irctc.co.in/nget/train-search",
            android_intent=(
                f"intent://train_search?src={safe_origin}&dst={safe_dest}"
                "#Intent;scheme=irctcconnect;package=com.irctc.rail.connect;end"
            ),
        )

    if safe_provider in ("RedBus", "ZingBus"):
        return DeepLinkResult(
            url=f"redbus://search?fromCityName={safe_origin}&toCityName={safe_dest}",
            is_universal=False,
            fallback_url=f"https://www.redbus.in/search?fromCity={safe_origin}&toCity={safe_dest}",
            android_intent=(
                f"intent://search?fromCityName={safe_origin}&toCityName={safe_dest}"
                "#Intent;scheme=redbus;package=in.redbus.android;end"
            ),
        )

    # Generic, plus allowlisted providers that have no app contract yet.
    return DeepLinkResult(
        url=(
            f"https://www.google.com/maps/dir/?api=1&origin={safe_origin}"
            f"&destination={safe_dest}&travelmode=transit"
        ),
        is_universal=True,
        fallback_url=f"https://www.google.com/maps/dir/?api=1&origin={safe_origin}&destination={safe_dest}",
    )
