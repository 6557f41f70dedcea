from sqlalchemy import CheckConstraint, Column, ForeignKey, String

from wedsnap.database import Base


class Photo(Base):
    __tablename__ = "photos"
    __table_args__ = (
        CheckConstraint(
            "caption IS NULL OR (length(caption) >= 1 AND length(caption) <= 150)",
            name="photos_caption_length",
        ),
    )

    id = Column(String, primary_key=True)
    wedding_event_id = Column(
        String, ForeignKey("wedding_events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    guest_id = Column(String, ForeignKey("guests.id", ondelete="CASCADE"), nullable=False, index=True)
    storage_path = Column(String, nullable=False)
    guest_name = Column(String, nullable=True)
    caption = Column(String(150), nullable=True)
    captured_at = Column(String, nullable=False)
