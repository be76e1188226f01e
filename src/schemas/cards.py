from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImagePayload(BaseModel):
    """Transported image: base64 (optionally a data URI) plus its MIME type."""

    model_config = ConfigDict(populate_by_name=True)

    base64: str = Field(..., description="Base64 data or a data: URI")
    content_type: str = Field(..., alias="contentType", description="MIME type of the source file")


class Card(BaseModel):
    """A card as stored inside its collection document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    question: str
    answer: str
    topic: Optional[str] = None
    image_key: Optional[str] = Field(None, alias="imageKey")


class Collection(BaseModel):
    """Collection document with its embedded, ordered cards."""

    id: str
    name: str
    owner: str
    category: str
    cards: List[Card] = Field(default_factory=list)


class ImageBlob(BaseModel):
    """Image bytes drained from the object store."""

    data: bytes
    content_type: str
    content_length: int


class IngestionResult(BaseModel):
    """Outcome of a card write.

    ``partial`` is set when an image was supplied but could not be stored;
    the card text is persisted regardless.
    """

    card: Card
    image_stored: bool = False
    partial: bool = False


class ImageCacheEntry(BaseModel):
    """Cached single image; ``data`` is base64 so the entry stays valid JSON."""

    image_id: str
    data: str
    content_type: str
    content_length: int
    cached_at: datetime
    expires_at: datetime
