import asyncio
import logging
from typing import AsyncIterator, Dict, List, Optional

from src.exceptions import CollectionNotFoundError
from src.repositories.collections import CollectionsRepository
from src.schemas.cards import Card, ImageBlob
from src.services.images import multipart
from src.services.images.cache import ImageCache
from src.services.storage.client import ObjectStoreGateway, ObjectStream

logger = logging.getLogger(__name__)


class CollectionImageAssembler:
    """Gathers the images of every card in a collection.

    Object store reads are issued concurrently. A card whose image cannot
    be fetched is left out of the result; it never fails the collection.
    """

    def __init__(
        self,
        repo: CollectionsRepository,
        object_store: ObjectStoreGateway,
        image_cache: Optional[ImageCache] = None,
    ):
        self.repo = repo
        self.object_store = object_store
        self.image_cache = image_cache

    async def load_images(self, collection_id: str) -> Dict[str, ImageBlob]:
        """Buffered mode: drain every image into memory, keyed by card id in card order."""
        cards = await self._image_cards(collection_id)

        results = await asyncio.gather(
            *(self._fetch_blob(card) for card in cards),
            return_exceptions=True,
        )

        images: Dict[str, ImageBlob] = {}
        for card, result in zip(cards, results):
            if isinstance(result, BaseException):
                logger.error(f"Error processing image for card {card.id}: {result}")
                continue
            if result is not None:
                images[card.id] = result

        logger.info(f"Loaded {len(images)}/{len(cards)} images for collection {collection_id}")
        return images

    async def open_stream(self, collection_id: str, boundary: str) -> AsyncIterator[bytes]:
        """Streaming mode: resolve the collection now, return the multipart body iterator.

        Parts are written in the order fetches complete.

        :raises CollectionNotFoundError: before any byte is produced
        """
        cards = await self._image_cards(collection_id)
        return self._stream_parts(collection_id, cards, boundary)

    async def get_image(self, image_id: str) -> Optional[ImageBlob]:
        """Single image lookup, served from the cache when possible."""
        if self.image_cache is not None:
            cached = await self.image_cache.get(image_id)
            if cached is not None:
                return cached

        stream = await self.object_store.get_stream(image_id)
        if stream is None:
            return None

        blob = await _drain(stream)
        if self.image_cache is not None:
            await self.image_cache.set(image_id, blob)
        return blob

    async def _image_cards(self, collection_id: str) -> List[Card]:
        collection = await self.repo.get_collection(collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)
        return [card for card in collection.cards if card.image_key]

    async def _fetch_blob(self, card: Card) -> Optional[ImageBlob]:
        stream = await self.object_store.get_stream(card.image_key)
        if stream is None:
            return None
        return await _drain(stream)

    async def _fetch_part(self, card: Card):
        try:
            return card, await self._fetch_blob(card)
        except Exception as e:
            logger.error(f"Error fetching image for card {card.id}: {e}")
            return card, None

    async def _stream_parts(self, collection_id: str, cards: List[Card], boundary: str) -> AsyncIterator[bytes]:
        # Each image is drained before its part header goes out, so a failed
        # read drops the card instead of truncating the response.
        tasks = [asyncio.ensure_future(self._fetch_part(card)) for card in cards]
        written = 0
        try:
            for fetch in asyncio.as_completed(tasks):
                card, blob = await fetch
                if blob is None:
                    continue

                yield multipart.part_header(boundary, card.id, blob.content_type)
                yield blob.data
                yield multipart.part_trailer()
                written += 1

            yield multipart.closing_boundary(boundary)
            logger.info(f"Streamed {written}/{len(cards)} images for collection {collection_id}")
        finally:
            # Client went away: stop outstanding fetches, their bodies close on cancel.
            for task in tasks:
                if not task.done():
                    task.cancel()


async def _drain(stream: ObjectStream) -> ImageBlob:
    data = await stream.read()
    return ImageBlob(data=data, content_type=stream.content_type, content_length=len(data))
