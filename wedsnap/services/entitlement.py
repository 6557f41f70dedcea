"""Guest photo quota.

A guest starts with ``default_photo_quota`` uploads. Each upload takes one
unit and unlocks the shared feed; the unlock is never revoked. Deleting a
photo gives one unit back, capped at ``photo_restore_cap`` (the default
quota when unset).
"""
import logging

from sqlalchemy import case, update
from sqlalchemy.ext.asyncio import AsyncSession

from wedsnap.config import settings
from wedsnap.models.guest import Guest

logger = logging.getLogger(__name__)


def initial_quota() -> int:
    return settings.default_photo_quota


def restore_cap() -> int:
    if settings.photo_restore_cap is not None:
        return settings.photo_restore_cap
    return settings.default_photo_quota


async def consume_quota(db: AsyncSession, guest_id: str) -> bool:
    """Take one upload from the guest and unlock their feed.

    The check and the decrement are a single guarded UPDATE, so concurrent
    uploads cannot push the counter below zero. Returns False when nothing
    was left. Does not commit.
    """
    result = await db.execute(
        update(Guest)
        .where(Guest.id == guest_id, Guest.photos_remaining > 0)
        .values(photos_remaining=Guest.photos_remaining - 1, has_unlocked_feed=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.info("Quota exhausted for guest %s", guest_id)
        return False
    return True


async def restore_quota(db: AsyncSession, guest_id: str) -> None:
    """Give one upload back, never above the restore cap. Does not commit."""
    cap = restore_cap()
    restored = Guest.photos_remaining + 1
    await db.execute(
        update(Guest)
        .where(Guest.id == guest_id)
        .values(photos_remaining=case((restored > cap, cap), else_=restored))
        .execution_options(synchronize_session=False)
    )
