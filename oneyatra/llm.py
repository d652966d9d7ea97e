# oneyatra/llm.py
from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from openai import AsyncOpenAI

from oneyatra.config import Settings, get_settings
from oneyatra.log import get_logger
from oneyatra.schemas import ChatMessage, SearchParams

logger = get_logger(__name__)

T = TypeVar("T")

SEARCH_SYSTEM_PROMPT = """You are a world-class travel expert for the Indian market.
You provide precise, realistic travel options across Cabs, Buses, Trains, and Flights.
You MUST always return a variety of transport modes (at least one of each: CAB, BUS, TRAIN, FLIGHT)
whenever possible for the given route.
You understand Indian geography, typical travel times, and pricing nuances.
Keep the JSON response concise.
"""

CHAT_SYSTEM_PROMPT = """You are YatraBot, the AI assistant for OneYatra, India's MaaS Super App.
You help users find travel options, explain refund policies, and provide travel tips.
Keep responses concise and helpful.
If asked for routes, suggest they use the main search bar for precise real-time data,
but you can give general advice.
"""

SEARCH_TEMPLATE = """Act as a Travel Search Engine. Generate realistic travel options for the following request:
{trip_context}

Passengers: {passengers} (Prices must be TOTAL for all passengers)

Modes to include: You MUST provide a diverse mix of CAB, BUS, TRAIN, and FLIGHT options. Do not just provide one mode.

For each option:
1. 'distance': Estimate precise road/track distance.
2. 'ecoScore': (0-100).
3. 'carbonEmission': Estimate CO2 in kg.
4. 'price': Total price in INR.
5. 'tag': 'Cheapest', 'Fastest', 'Best Value', 'Eco-Choice'.

Provide a short 'aiInsight' comparing the options.
Limit the response to a maximum of 3-4 high-quality options per journey to ensure a concise and valid JSON response.
"""

SINGLE_TRIP_TEMPLATE = 'Single Trip Request: From "{origin}" to "{destination}" on {date} after {time}.'

ROUND_TRIP_TEMPLATE = """Round Trip Request:
Outbound: From "{origin}" to "{destination}" on {date} after {time}.
Return: From "{destination}" to "{origin}" on {return_date} after {return_time}.

Provide two lists of options: 'options' for outbound and 'returnOptions' for the return journey.
"""

MULTI_CITY_TEMPLATE = """Multi-City Trip Request:
{segments}

Provide a unified itinerary. 'mode' can be 'MIXED' if different modes are used for segments.
Include a 'legs' array in the response options detailing each segment.
"""

OFFLINE_CHAT_REPLY = "I'm in offline mode right now. How can I help you with your travel plans?"
EMPTY_CHAT_REPLY = "I'm sorry, I couldn't process that. Could you try again?"
BUSY_CHAT_REPLY = (
    "I'm currently receiving too many requests. Please try again in a minute, "
    "or use the search bar for travel options!"
)
FAILED_CHAT_REPLY = "I'm having a bit of trouble connecting. Please try again in a moment."

_STRING = {"type": "string"}
_NUMBER = {"type": "number"}
_STRINGS = {"type": "array", "items": _STRING}
_MODES = ["CAB", "BUS", "TRAIN", "FLIGHT", "MIXED"]

_LEG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": _STRING,
        "mode": {"type": "string", "enum": _MODES},
        "provider": _STRING,
        "departureTime": _STRING,
        "arrivalTime": _STRING,
        "duration": _STRING,
        "price": _NUMBER,
        "distance": _STRING,
        "currency": _STRING,
        "ecoScore": _NUMBER,
        "features": _STRINGS,
    },
    "required": ["mode", "provider"],
}

_OPTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": _STRING,
        "mode": {"type": "string", "enum": _MODES},
        "provider": _STRING,
        "departureTime": _STRING,
        "arrivalTime": _STRING,
        "duration": _STRING,
        "distance": _STRING,
        "price": _NUMBER,
        "currency": _STRING,
        "rating": _NUMBER,
        "carbonEmission": _STRING,
        "ecoScore": _NUMBER,
        "deepLink": _STRING,
        "features": _STRINGS,
        "tag": {"type": ["string", "null"]},
        "legs": {"type": "array", "items": _LEG_SCHEMA},
    },
    "required": ["id", "mode", "provider", "price", "duration", "ecoScore"],
}

ROUTE_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "origin": _STRING,
        "destination": _STRING,
        "date": _STRING,
        "returnDate": {"type": ["string", "null"]},
        "aiInsight": _STRING,
        "options": {"type": "array", "items": _OPTION_SCHEMA},
        "returnOptions": {"type": "array", "items": _OPTION_SCHEMA},
    },
}


def build_search_prompt(params: SearchParams) -> str:
    """Render the mode/trip-type specific search prompt."""
    if params.trip_type == "MULTI_CITY" and params.segments:
        segments = "\n".join(
            f'Segment {i}: From "{seg.origin}" to "{seg.destination}" on {seg.date} after {seg.time}'
            for i, seg in enumerate(params.segments, 1)
        )
        trip_context = MULTI_CITY_TEMPLATE.format(segments=segments)
    elif params.trip_type == "ROUND_TRIP":
        trip_context = ROUND_TRIP_TEMPLATE.format(
            origin=params.origin,
            destination=params.destination,
            date=params.date,
            time=params.time,
            return_date=params.return_date,
            return_time=params.return_time or "09:00",
        )
    else:
        trip_context = SINGLE_TRIP_TEMPLATE.format(
            origin=params.origin,
            destination=params.destination,
            date=params.date,
            time=params.time,
        )
    return SEARCH_TEMPLATE.format(trip_context=trip_context, passengers=params.passengers)


def is_rate_limited(exc: BaseException) -> bool:
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    if status == 429:
        return True
    message = str(exc)
    return "429" in message or "quota" in message.lower()


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    retries: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Await ``fn()``, retrying rate-limit failures with doubling delays.

    Anything that is not a rate limit, or a rate limit once ``retries`` are
    spent, propagates to the caller.
    """
    attempt = 0
    delay = base_delay
    while True:
        try:
            return await fn()
        except Exception as exc:
            if attempt >= retries or not is_rate_limited(exc):
                raise
            attempt += 1
            logger.warning(
                "Upstream model rate limited. Retrying in %.2fs (%d retries left)",
                delay,
                retries - attempt,
            )
            await sleep(delay)
            delay *= 2


class TravelModel:
    """Thin async wrapper over the chat completions API."""

    def __init__(self, client: Any, model: str):
        self._client = client
        self.model = model

    async def generate_route_json(self, prompt: str) -> Optional[str]:
        logger.info("Invoking model %s for travel search", self.model)
        resp = await self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SEARCH_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.4,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "route_response", "schema": ROUTE_RESPONSE_SCHEMA},
            },
        )
        return resp.choices[0].message.content

    async def chat(self, message: str, history: List[ChatMessage]) -> Optional[str]:
        messages: List[Dict[str, str]] = [{"role": "system", "content": CHAT_SYSTEM_PROMPT}]
        for item in history:
            role = "user" if item.sender == "USER" else "assistant"
            messages.append({"role": role, "content": item.text})
        messages.append({"role": "user", "content": message})

        logger.info("Invoking model %s for chat (%d history messages)", self.model, len(history))
        resp = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=0.6,
        )
        return resp.choices[0].message.content


def get_travel_model(settings: Settings | None = None) -> TravelModel | None:
    """Build a model client, or None when no API key is configured (offline mode)."""
    settings = settings or get_settings()
    if not settings.live:
        return None
    return TravelModel(_client_for(settings.api_key), settings.model)


@lru_cache(maxsize=4)
def _client_for(api_key: str) -> AsyncOpenAI:
    # Backoff is handled by with_retry, so the SDK must not retry on its own.
    return AsyncOpenAI(api_key=api_key, max_retries=0)
