"""View models for the two photo feeds: the dashboard grid and the swipe feed."""
from datetime import datetime, timezone

from wedsnap.models.photo import Photo
from wedsnap.services.storage import PhotoStorage


def alt_text(guest_name: str | None) -> str:
    return f"Photo by {guest_name}" if guest_name else "Wedding photo"


def time_ago(captured_at: str, now: datetime | None = None) -> str:
    """Render an ISO timestamp as a rough distance like ``about 2 hours ago``."""
    now = now or datetime.now(timezone.utc)
    then = datetime.fromisoformat(captured_at)
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    seconds = max(0, int((now - then).total_seconds()))
    minutes = round(seconds / 60)

    if seconds < 45:
        return "less than a minute ago"
    if minutes < 2:
        return "1 minute ago"
    if minutes < 45:
        return f"{minutes} minutes ago"
    hours = round(minutes / 60)
    if minutes < 90:
        return "about 1 hour ago"
    if hours < 24:
        return f"about {hours} hours ago"
    days = round(hours / 24)
    if hours < 42:
        return "1 day ago"
    if days < 30:
        return f"{days} days ago"
    months = round(days / 30)
    if days < 45:
        return "about 1 month ago"
    if days < 365:
        return f"{months} months ago"
    years = days // 365
    return "about 1 year ago" if years == 1 else f"about {years} years ago"


def render_grid(photos: list[Photo], storage: PhotoStorage) -> list[dict]:
    return [
        {
            "id": p.id,
            "url": storage.signed_url(p.storage_path),
            "guest_name": p.guest_name,
            "alt": alt_text(p.guest_name),
        }
        for p in photos
    ]


def render_swipe(photos: list[Photo], storage: PhotoStorage, now: datetime | None = None) -> dict:
    total = len(photos)
    items = [
        {
            "id": p.id,
            "url": storage.signed_url(p.storage_path),
            "caption": p.caption,
            "guest_name": p.guest_name,
            "alt": p.caption or alt_text(p.guest_name),
            "captured_at": p.captured_at,
            "captured_ago": time_ago(p.captured_at, now),
            "position": f"{index} / {total}",
        }
        for index, p in enumerate(photos, start=1)
    ]
    return {"total": total, "items": items}
