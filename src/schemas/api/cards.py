from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.schemas.cards import ImagePayload


class CardDraft(BaseModel):
    """Card fields submitted by the client on creation."""

    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    topic: Optional[str] = Field(None, validation_alias=AliasChoices("topic", "category"))
    img: Optional[ImagePayload] = None


class AddCardRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "card": {
                    "question": "Capital of Portugal?",
                    "answer": "Lisbon",
                    "topic": "Geography",
                    "img": {"base64": "data:image/png;base64,iVBORw0KGgo=", "contentType": "image/png"},
                },
                "collectionId": "4f1c2b0a9d8e4c7b8a6f5e4d3c2b1a09",
            }
        },
    )

    card: CardDraft
    collection_id: str = Field(..., alias="collectionId", min_length=1)


class AddCardResponse(BaseModel):
    card_added: bool = Field(True, serialization_alias="cardAdded")
    message: str
    card: dict
    image_stored: bool = Field(False, serialization_alias="imageStored")


class CardRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    card_id: str = Field(..., alias="cardId", min_length=1)
    collection_id: str = Field(..., alias="collectionId", min_length=1)


class CardChanges(BaseModel):
    """Partial card update; omitted fields are left untouched."""

    question: Optional[str] = None
    answer: Optional[str] = None
    topic: Optional[str] = Field(None, validation_alias=AliasChoices("topic", "category"))
    img: Optional[ImagePayload] = None


class UpdateCardRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    card: CardRef
    new_card: CardChanges = Field(..., alias="newCard")


class CardMatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., min_length=1)
    topic: Optional[str] = Field(None, validation_alias=AliasChoices("category", "topic"))
    collection_name: str = Field(..., alias="collectionName", min_length=1)


class DeleteCardRequest(BaseModel):
    """Either a content match (``card``) or direct ids (``collectionId`` + ``cardId``)."""

    model_config = ConfigDict(populate_by_name=True)

    card: Optional[CardMatch] = None
    collection_id: Optional[str] = Field(None, alias="collectionId")
    card_id: Optional[str] = Field(None, alias="cardId")
