class FlashcardsException(Exception):
    """Base exception for the flashcards service."""


class ImageReadError(FlashcardsException):
    """Raised when a local image file cannot be read for encoding."""


class ImageDecodeError(FlashcardsException):
    """Raised when a transported image payload is malformed."""


class NotFoundError(FlashcardsException):
    """Raised when a referenced collection or card does not exist."""


class CollectionNotFoundError(NotFoundError):
    def __init__(self, collection_id: str):
        super().__init__(f"Collection {collection_id} not found")
        self.collection_id = collection_id


class CardNotFoundError(NotFoundError):
    def __init__(self, card_id: str):
        super().__init__(f"Card {card_id} not found")
        self.card_id = card_id


class StoreError(FlashcardsException):
    """Raised when the card store transport or database fails."""


class StoreWriteError(StoreError):
    """Raised when the card store rejects a write."""
