"""In-process fan-out of photo changes to subscribers of a wedding event."""
import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager

from wedsnap.models.photo import Photo
from wedsnap.schemas.photo import PhotoResponse

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
EVENT_DELETED = "EVENT_DELETED"


class PhotoBroadcaster:
    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: dict[str, set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, event_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers[event_id].add(queue)
        logger.debug("Subscriber added to event %s (%d total)", event_id, len(self._subscribers[event_id]))
        return queue

    def unsubscribe(self, event_id: str, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(event_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            del self._subscribers[event_id]

    def subscriber_count(self, event_id: str) -> int:
        return len(self._subscribers.get(event_id, ()))

    def publish(self, event_id: str, change: dict) -> int:
        """Queue a change for every subscriber of the event.

        A full queue loses its oldest entry. Returns the number of
        subscribers reached.
        """
        queues = list(self._subscribers.get(event_id, ()))
        for queue in queues:
            if queue.full():
                queue.get_nowait()
                logger.warning("Dropped oldest change for a slow subscriber of event %s", event_id)
            queue.put_nowait(change)
        return len(queues)

    @asynccontextmanager
    async def subscription(self, event_id: str):
        queue = self.subscribe(event_id)
        try:
            yield queue
        finally:
            self.unsubscribe(event_id, queue)


broadcaster = PhotoBroadcaster()


def photo_change(kind: str, photo: Photo, url: str | None = None) -> dict:
    if kind == DELETE:
        payload = {"id": photo.id}
    else:
        payload = PhotoResponse.model_validate(photo).model_dump()
        payload["url"] = url
    return {"type": kind, "event_id": photo.wedding_event_id, "photo": payload}


def publish_photo_change(kind: str, photo: Photo, url: str | None = None) -> None:
    delivered = broadcaster.publish(photo.wedding_event_id, photo_change(kind, photo, url))
    logger.debug("Published %s of photo %s to %d subscribers", kind, photo.id, delivered)


def publish_event_deleted(event_id: str) -> None:
    """Tell subscribers the event is gone; streams close after relaying it."""
    delivered = broadcaster.publish(event_id, {"type": EVENT_DELETED, "event_id": event_id})
    logger.debug("Notified %d subscribers that event %s was deleted", delivered, event_id)
