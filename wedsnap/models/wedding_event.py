from sqlalchemy import Column, String, ForeignKey

from wedsnap.database import Base


class WeddingEvent(Base):
    __tablename__ = "wedding_events"

    id = Column(String, primary_key=True)
    couple_user_id = Column(String, ForeignKey("users.id"), nullable=False, unique=True)
    couple_name = Column(String, nullable=False)
    partner_name = Column(String, nullable=False)
    wedding_date = Column(String, nullable=False)
    event_code = Column(String, nullable=False, unique=True)
    cover_image_url = Column(String, nullable=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
