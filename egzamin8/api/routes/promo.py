"""
Promo banner feed as server-sent events: countdown ticks and purchase prompts.
Timers live as long as the client connection.
"""
import asyncio
import json
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from egzamin8.promo.countdown import Countdown
from egzamin8.promo.notifications import PromoTimers, PurchaseNotification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/promo", tags=["promo"])

# Poll interval for client disconnects
DISCONNECT_POLL_SECONDS = 1.0


def format_sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


async def promo_events(request: Request) -> AsyncIterator[str]:
    queue: asyncio.Queue[str] = asyncio.Queue()

    def on_tick(countdown: Countdown) -> None:
        queue.put_nowait(format_sse("countdown", {"remaining": str(countdown)}))

    def on_notification(notification: PurchaseNotification) -> None:
        queue.put_nowait(format_sse("notification", notification.model_dump()))

    timers = PromoTimers(on_tick, on_notification)
    timers.start()
    try:
        while not await request.is_disconnected():
            try:
                yield await asyncio.wait_for(queue.get(), timeout=DISCONNECT_POLL_SECONDS)
            except asyncio.TimeoutError:
                continue
    finally:
        timers.cancel()


@router.get("/stream")
async def promo_stream(request: Request) -> StreamingResponse:
    return StreamingResponse(promo_events(request), media_type="text/event-stream")
