import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB

from src.db.interfaces.postgresql import Base


def new_id() -> str:
    return uuid.uuid4().hex


class CollectionRecord(Base):
    __tablename__ = "collections"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, index=True)
    owner = Column(String(255), nullable=False, index=True)
    category = Column(String(255), nullable=False)

    # Ordered card documents; image bytes live in the object store.
    cards = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(
        timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
