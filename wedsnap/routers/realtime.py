import asyncio
import logging

from fastapi import APIRouter, WebSocket, status

from wedsnap.database import async_session
from wedsnap.dependencies import authorize_feed, couple_from_token, guest_from_token
from wedsnap.services.realtime import EVENT_DELETED, broadcaster
from wedsnap.utils.exceptions import AppException

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def relay_changes(websocket: WebSocket, queue: asyncio.Queue) -> None:
    """Forward queued changes until the client leaves or the event is deleted."""
    disconnect = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        while True:
            next_change = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait(
                {next_change, disconnect}, return_when=asyncio.FIRST_COMPLETED
            )
            if disconnect in done:
                next_change.cancel()
                error = disconnect.exception()
                if error is not None:
                    logger.warning("Photo stream receive failed: %s", error)
                return
            change = next_change.result()
            await websocket.send_json(change)
            if change["type"] == EVENT_DELETED:
                await websocket.close()
                return
    finally:
        disconnect.cancel()


@router.websocket("/events/{event_id}/photos/stream")
async def photo_stream(websocket: WebSocket, event_id: str, access_token: str = "", guest_token: str = ""):
    async with async_session() as db:
        couple = await couple_from_token(db, access_token)
        guest = await guest_from_token(db, guest_token)
        if couple is None and guest is None:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Not authenticated")
            return
        try:
            await authorize_feed(db, event_id, couple, guest)
        except AppException as e:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
            return

    await websocket.accept()
    async with broadcaster.subscription(event_id) as queue:
        await websocket.send_json({"type": "SUBSCRIBED", "event_id": event_id})
        await relay_changes(websocket, queue)
    logger.debug("Photo stream for event %s closed", event_id)
