from src.schemas.api.cards import (
    AddCardRequest,
    AddCardResponse,
    CardChanges,
    CardDraft,
    CardMatch,
    CardRef,
    DeleteCardRequest,
    UpdateCardRequest,
)
from src.schemas.api.collections import CollectionImagesResponse, ImageEntry

__all__ = [
    "AddCardRequest",
    "AddCardResponse",
    "CardChanges",
    "CardDraft",
    "CardMatch",
    "CardRef",
    "DeleteCardRequest",
    "UpdateCardRequest",
    "CollectionImagesResponse",
    "ImageEntry",
]
