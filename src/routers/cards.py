import logging

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from src.constants import (
    CARD_ADDED,
    CARD_NOT_FOUND,
    COLLECTION_NOT_FOUND,
    ERROR_ADD_CARD,
    ERROR_UPDATE_CARD,
    INCOMPLETE_REQUEST_INFO,
    INVALID_IMAGE,
    UNEXPECTED_ERROR,
)
from src.dependencies import IngestionServiceDep
from src.exceptions import (
    CollectionNotFoundError,
    ImageDecodeError,
    NotFoundError,
    StoreError,
)
from src.schemas.api.cards import (
    AddCardRequest,
    AddCardResponse,
    DeleteCardRequest,
    UpdateCardRequest,
)

router = APIRouter(prefix="/cards", tags=["cards"])
logger = logging.getLogger(__name__)


@router.post("/add-card", status_code=status.HTTP_201_CREATED, response_model=AddCardResponse)
async def add_card(body: AddCardRequest, service: IngestionServiceDep):
    """Create a card, uploading its image first when one is attached."""
    try:
        result = await service.add_card(body.collection_id, body.card, body.card.img)
    except ImageDecodeError as e:
        logger.warning(f"Rejected card image for collection {body.collection_id}: {e}")
        return _failure(status.HTTP_400_BAD_REQUEST, "cardAdded", INVALID_IMAGE)
    except CollectionNotFoundError:
        return _failure(status.HTTP_400_BAD_REQUEST, "cardAdded", ERROR_ADD_CARD)
    except StoreError as e:
        logger.error(f"Failed to add card to {body.collection_id}: {e}")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "cardAdded", UNEXPECTED_ERROR)
    except Exception as e:
        logger.exception(f"Unexpected error adding card to {body.collection_id}: {e}")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "cardAdded", UNEXPECTED_ERROR)

    return AddCardResponse(
        message=CARD_ADDED,
        card=result.card.model_dump(by_alias=True),
        image_stored=result.image_stored,
    )


@router.patch("/update-card", status_code=status.HTTP_204_NO_CONTENT)
async def update_card(body: UpdateCardRequest, service: IngestionServiceDep):
    """Partially update a card; a new image replaces the old one under the same key."""
    ref = body.card
    try:
        await service.update_card(ref.collection_id, ref.card_id, body.new_card)
    except ImageDecodeError as e:
        logger.warning(f"Rejected card image for {ref.card_id}: {e}")
        return _failure(status.HTTP_400_BAD_REQUEST, "cardUpdated", INVALID_IMAGE)
    except NotFoundError:
        return _failure(status.HTTP_404_NOT_FOUND, "cardUpdated", ERROR_UPDATE_CARD)
    except StoreError as e:
        logger.error(f"Failed to update card {ref.card_id}: {e}")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "cardUpdated", UNEXPECTED_ERROR)
    except Exception as e:
        logger.exception(f"Unexpected error updating card {ref.card_id}: {e}")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "cardUpdated", UNEXPECTED_ERROR)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/delete-card", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(body: DeleteCardRequest, service: IngestionServiceDep):
    """Delete a card by content match or by ids, then drop its image."""
    try:
        if body.card is not None:
            await service.delete_card_matching(body.card.collection_name, body.card.question, body.card.topic)
        elif body.collection_id and body.card_id:
            await service.delete_card(body.collection_id, body.card_id)
        else:
            return _failure(status.HTTP_400_BAD_REQUEST, "cardDeleted", INCOMPLETE_REQUEST_INFO)
    except CollectionNotFoundError:
        return _failure(status.HTTP_400_BAD_REQUEST, "cardDeleted", COLLECTION_NOT_FOUND)
    except NotFoundError:
        return _failure(status.HTTP_400_BAD_REQUEST, "cardDeleted", CARD_NOT_FOUND)
    except StoreError as e:
        logger.error(f"Failed to delete card: {e}")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "cardDeleted", UNEXPECTED_ERROR)
    except Exception as e:
        logger.exception(f"Unexpected error deleting card: {e}")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "cardDeleted", UNEXPECTED_ERROR)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _failure(status_code: int, flag: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={flag: False, "message": message})
