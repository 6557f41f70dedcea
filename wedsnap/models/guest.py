from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, String

from wedsnap.database import Base


class Guest(Base):
    __tablename__ = "guests"
    __table_args__ = (
        CheckConstraint("photos_remaining >= 0", name="guests_photos_remaining_non_negative"),
    )

    id = Column(String, primary_key=True)
    wedding_event_id = Column(
        String, ForeignKey("wedding_events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    guest_name = Column(String, nullable=True)
    session_token = Column(String, nullable=False, unique=True)
    photos_remaining = Column(Integer, nullable=False)
    has_unlocked_feed = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False)
