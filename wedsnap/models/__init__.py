from wedsnap.models.user import User
from wedsnap.models.wedding_event import WeddingEvent
from wedsnap.models.guest import Guest
from wedsnap.models.photo import Photo

__all__ = ["User", "WeddingEvent", "Guest", "Photo"]
