# oneyatra/orchestrator.py
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from pydantic import ValidationError

from oneyatra.config import Settings, get_settings
from oneyatra.enrichment import process_options
from oneyatra.llm import (
    BUSY_CHAT_REPLY,
    EMPTY_CHAT_REPLY,
    FAILED_CHAT_REPLY,
    OFFLINE_CHAT_REPLY,
    TravelModel,
    build_search_prompt,
    get_travel_model,
    is_rate_limited,
    with_retry,
)
from oneyatra.log import get_logger
from oneyatra.mock_data import DEFAULT_RETURN_TIME, mock_travel_data
from oneyatra.pricing import RandomSource
from oneyatra.schemas import ChatMessage, RouteResponse, SearchParams

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class LiveResult:
    """Outcome of one live search: either a response or the reason there is none."""

    response: Optional[RouteResponse] = None
    error: Optional[str] = None


async def fetch_travel_options(
    params: SearchParams,
    *,
    model: TravelModel | None = None,
    settings: Settings | None = None,
    rng: RandomSource | None = None,
    sleep: Sleep = asyncio.sleep,
) -> RouteResponse:
    """Return enriched travel options for ``params``.

    Upstream failures never escape: without a configured model, or when the live
    call fails for any reason, the enriched mock dataset is returned instead.
    """
    settings = settings or get_settings()
    logger.info(
        "Search start: %s -> %s on %s at %s (%s, %d passenger(s))",
        params.origin,
        params.destination,
        params.date,
        params.time,
        params.trip_type,
        params.passengers,
    )
    if model is None:
        model = get_travel_model(settings)
    if model is None:
        logger.warning("No API key configured; returning mock data")
        return mock_travel_data(params, rng)

    result = await _fetch_live(params, model, settings, rng, sleep)
    if result.response is None:
        logger.warning("Falling back to mock data: %s", result.error)
        return mock_travel_data(params, rng)

    logger.info(
        "Live search returned %d outbound and %d return option(s)",
        len(result.response.options),
        len(result.response.return_options or []),
    )
    return result.response


async def chat_with_ai(
    message: str,
    history: Sequence[ChatMessage] = (),
    *,
    model: TravelModel | None = None,
    settings: Settings | None = None,
    sleep: Sleep = asyncio.sleep,
) -> str:
    settings = settings or get_settings()
    if model is None:
        model = get_travel_model(settings)
    if model is None:
        return OFFLINE_CHAT_REPLY

    try:
        reply = await with_retry(
            lambda: model.chat(message, list(history)),
            retries=settings.retry_attempts,
            base_delay=settings.retry_base_delay,
            sleep=sleep,
        )
    except Exception as exc:
        if is_rate_limited(exc):
            logger.error("Model quota exhausted in chat")
            return BUSY_CHAT_REPLY
        logger.error("Chat model call failed: %s", exc, exc_info=True)
        return FAILED_CHAT_REPLY

    return reply or EMPTY_CHAT_REPLY


async def _fetch_live(
    params: SearchParams,
    model: TravelModel,
    settings: Settings,
    rng: RandomSource | None,
    sleep: Sleep,
) -> LiveResult:
    prompt = build_search_prompt(params)
    try:
        text = await with_retry(
            lambda: model.generate_route_json(prompt),
            retries=settings.retry_attempts,
            base_delay=settings.retry_base_delay,
            sleep=sleep,
        )
    except Exception as exc:
        if is_rate_limited(exc):
            logger.error("Model quota exhausted after %d retries", settings.retry_attempts)
            return LiveResult(error="rate limited")
        logger.error("Model call failed: %s", exc, exc_info=True)
        return LiveResult(error=f"model error: {exc}")

    if not text:
        return LiveResult(error="empty model response")

    try:
        payload = json.loads(text)
    except ValueError:
        logger.error("Model response was not valid JSON")
        return LiveResult(error="invalid JSON")
    if not isinstance(payload, dict):
        return LiveResult(error="model JSON is not an object")

    try:
        raw = RouteResponse.model_validate(_fill_route_defaults(payload, params))
    except ValidationError as exc:
        logger.error("Model response failed validation: %s", exc.errors())
        return LiveResult(error="schema mismatch")

    options = process_options(raw.options, params.origin, params.time, params.destination, rng)
    return_options = None
    if raw.return_options is not None:
        return_options = process_options(
            raw.return_options,
            params.destination,
            params.return_time or DEFAULT_RETURN_TIME,
            params.origin,
            rng,
        )
    return LiveResult(response=raw.model_copy(update={"options": options, "return_options": return_options}))


def _fill_route_defaults(payload: Dict[str, Any], params: SearchParams) -> Dict[str, Any]:
    filled = dict(payload)
    for key, fallback in (
        ("origin", params.origin),
        ("destination", params.destination),
        ("date", params.date),
    ):
        if not filled.get(key):
            filled[key] = fallback
    if not filled.get("returnDate") and params.return_date:
        filled["returnDate"] = params.return_date
    if not isinstance(filled.get("options"), list):
        filled["options"] = []
    if not isinstance(filled.get("returnOptions"), list):
        filled.pop("returnOptions", None)
    return filled
