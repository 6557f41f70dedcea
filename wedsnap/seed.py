import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wedsnap.models.user import User
from wedsnap.models.wedding_event import WeddingEvent
from wedsnap.services.security import hash_password


SEED_USER_ID = str(uuid.uuid5(uuid.NAMESPACE_DNS, "couple-demo"))
SEED_USER_EMAIL = "sarah@example.com"
SEED_USER_PASSWORD = "wedding123"

SEED_EVENT = {
    "id": str(uuid.uuid5(uuid.NAMESPACE_DNS, "event-demo")),
    "couple_name": "Sarah",
    "partner_name": "James",
    "wedding_date": "2026-06-20",
    "event_code": "SARJAM-DEMO",
}


async def seed_data(session: AsyncSession) -> None:
    result = await session.execute(select(User).where(User.id == SEED_USER_ID))
    if result.scalars().first() is not None:
        return

    now = datetime.now(timezone.utc).isoformat()
    session.add(User(
        id=SEED_USER_ID,
        email=SEED_USER_EMAIL,
        password_hash=hash_password(SEED_USER_PASSWORD),
        created_at=now,
    ))
    session.add(WeddingEvent(
        **SEED_EVENT,
        couple_user_id=SEED_USER_ID,
        created_at=now,
        updated_at=now,
    ))

    await session.commit()
