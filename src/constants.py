# Messages returned to clients. Internal error text is only ever logged.
INCOMPLETE_REQUEST_INFO = "Information submitted is not fully complete"
UNEXPECTED_ERROR = "An unexpected error occurred"
CARD_ADDED = "Card was added to your collection"
ERROR_ADD_CARD = "We couldn't add your card to the collection"
ERROR_UPDATE_CARD = "We couldn't update your card"
INVALID_IMAGE = "The attached image could not be read"
COLLECTION_NOT_FOUND = "Collection not found"
CARD_NOT_FOUND = "Card not found"
IMAGE_NOT_FOUND = "Image not found"

DEFAULT_CONTENT_TYPE = "application/octet-stream"
