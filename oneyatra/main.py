from __future__ import annotations

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from oneyatra.config import allowed_origins
from oneyatra.deeplinks import track_deep_link_click
from oneyatra.enrichment import build_round_trip_bundle
from oneyatra.log import get_logger
from oneyatra.orchestrator import chat_with_ai, fetch_travel_options
from oneyatra.schemas import (
    ChatRequest,
    ChatResponse,
    DeepLinkClick,
    RoundTripBundleRequest,
    RouteResponse,
    SearchParams,
    TravelOption,
)

logger = get_logger(__name__)

app = FastAPI(title="OneYatra Travel API")

# The SPA is served from a different origin during development. Operators can
# scope this via ONEYATRA_ALLOWED_ORIGINS if they prefer something narrower.
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post(
    "/api/travel",
    response_model=RouteResponse,
    response_model_exclude_none=True,
    responses={500: {"description": "Unhandled failure"}},
)
async def api_travel(params: SearchParams):
    """Primary search endpoint consumed by the results page."""
    try:
        return await fetch_travel_options(params)
    except Exception:
        logger.exception("/api/travel failed")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch travel options"})


@app.post("/api/chat", response_model=ChatResponse, responses={500: {"description": "Unhandled failure"}})
async def api_chat(payload: ChatRequest):
    try:
        reply = await chat_with_ai(payload.message, payload.history)
    except Exception:
        logger.exception("/api/chat failed")
        return JSONResponse(status_code=500, content={"error": "Failed to chat with AI"})
    return ChatResponse(response=reply)


@app.post("/api/bundle", response_model=TravelOption, response_model_exclude_none=True)
async def api_round_trip_bundle(payload: RoundTripBundleRequest):
    """Combine the chosen outbound and return options into one discounted booking."""
    return build_round_trip_bundle(payload.outbound, payload.inbound)


@app.post("/api/deeplink/click", status_code=204)
async def api_deep_link_click(payload: DeepLinkClick) -> Response:
    track_deep_link_click(payload.provider, payload.status)
    return Response(status_code=204)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("oneyatra.main:app", host="0.0.0.0", port=3000)
