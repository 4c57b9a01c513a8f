"""WebSocket relay for order notifications.

WS /ws/notifications?token=<access token>

Subscribes to the notification channel and forwards only the events
addressed to the connected principal. Nothing is buffered for clients that
are offline.

The socket is read concurrently with the pub/sub loop, so a client that
disconnects releases its Redis subscription immediately, even when no event
for it ever arrives.
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from config.settings import settings
from src.am_common.errors import InvalidCredentialsError
from src.am_common.redis_client import get_redis
from src.am_gateway.auth.dependencies import Principal, principal_from_token
from src.am_notify.domain.events import OrderEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


async def _forward_events(websocket: WebSocket, pubsub: Any, principal: Principal) -> None:
    async for message in pubsub.listen():
        if message.get("type") != "message":
            continue
        try:
            event = OrderEvent.model_validate_json(message["data"])
        except ValidationError:
            logger.warning("Skipping malformed notification on %s", settings.NOTIFY_CHANNEL)
            continue
        if event.is_addressed_to(principal.user_id):
            await websocket.send_json(event.model_dump(mode="json"))


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Clients never send anything meaningful; inbound frames are discarded.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws/notifications")
async def notifications(websocket: WebSocket, token: str = Query(...)) -> None:
    try:
        principal = principal_from_token(token)
    except InvalidCredentialsError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    redis = await get_redis()
    pubsub = redis.pubsub()
    await pubsub.subscribe(settings.NOTIFY_CHANNEL)
    logger.info("Notification stream opened for %s %s", principal.role.value, principal.user_id)

    forward = asyncio.create_task(_forward_events(websocket, pubsub, principal))
    watch = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        done, pending = await asyncio.wait(
            {forward, watch}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        if forward in done:
            try:
                forward.result()
            except WebSocketDisconnect:
                pass
    finally:
        for task in (forward, watch):
            task.cancel()
        await pubsub.unsubscribe(settings.NOTIFY_CHANNEL)
        await pubsub.aclose()
        logger.info("Notification stream closed for %s", principal.user_id)
