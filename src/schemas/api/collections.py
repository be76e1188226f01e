from typing import Dict

from pydantic import BaseModel, Field


class ImageEntry(BaseModel):
    data: str = Field(..., description="Base64 encoded image bytes")
    content_type: str = Field(..., serialization_alias="contentType")
    content_length: int = Field(..., serialization_alias="contentLength")


class CollectionImagesResponse(BaseModel):
    """Buffered images of a collection keyed by card id."""

    success: bool = True
    images: Dict[str, ImageEntry]
