import base64
import logging

from fastapi import APIRouter, HTTPException, Path, status
from fastapi.responses import Response, StreamingResponse

from src.constants import COLLECTION_NOT_FOUND, IMAGE_NOT_FOUND, UNEXPECTED_ERROR
from src.dependencies import ImageAssemblerDep
from src.exceptions import CollectionNotFoundError
from src.schemas.api.collections import CollectionImagesResponse, ImageEntry
from src.services.images import multipart

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collections", tags=["collections"])


@router.get(
    "/image/{image_id}",
    summary="Get a single card image",
    responses={200: {"content": {"image/*": {}}}},
)
async def get_image(
    assembler: ImageAssemblerDep,
    image_id: str = Path(..., min_length=1),
):
    blob = await assembler.get_image(image_id)
    if blob is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=IMAGE_NOT_FOUND)
    return Response(content=blob.data, media_type=blob.content_type)


@router.get(
    "/{collection_id}/all-images",
    response_model=CollectionImagesResponse,
    summary="Get every card image of a collection as one JSON document",
)
async def get_all_images(assembler: ImageAssemblerDep, collection_id: str):
    try:
        images = await assembler.load_images(collection_id)
    except CollectionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=COLLECTION_NOT_FOUND)
    except Exception as e:
        logger.exception(f"Error getting all images for collection {collection_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=UNEXPECTED_ERROR)

    return CollectionImagesResponse(
        images={
            card_id: ImageEntry(
                data=base64.b64encode(blob.data).decode("ascii"),
                content_type=blob.content_type,
                content_length=blob.content_length,
            )
            for card_id, blob in images.items()
        }
    )


@router.get(
    "/{collection_id}",
    summary="Stream every card image of a collection as multipart/mixed",
    responses={200: {"content": {"multipart/mixed": {}}}},
)
async def stream_images(assembler: ImageAssemblerDep, collection_id: str):
    boundary = multipart.new_boundary()
    try:
        body = await assembler.open_stream(collection_id, boundary)
    except CollectionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=COLLECTION_NOT_FOUND)
    except Exception as e:
        logger.exception(f"Error opening image stream for collection {collection_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=UNEXPECTED_ERROR)

    return StreamingResponse(body, media_type=multipart.content_type_header(boundary))
