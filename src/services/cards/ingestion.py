import logging
import uuid
from typing import Optional

from src.exceptions import (
    CardNotFoundError,
    CollectionNotFoundError,
    NotFoundError,
    StoreError,
    StoreWriteError,
)
from src.repositories.collections import CollectionsRepository
from src.schemas.api.cards import CardChanges, CardDraft
from src.schemas.cards import Card, ImagePayload, IngestionResult
from src.services.images.cache import ImageCache
from src.services.images.codec import decode_image
from src.services.storage.client import ObjectStoreGateway

logger = logging.getLogger(__name__)


class CardIngestionService:
    """Writes cards: text to the card store, image bytes to the object store.

    The card id doubles as the object store key, so no mapping is kept.
    Image uploads are best-effort: a failed upload leaves ``image_key``
    unset but the card text is still saved. Blob cleanup after a card is
    removed (or never saved) is also best-effort.
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

    async def add_card(
        self, collection_id: str, draft: CardDraft, image: Optional[ImagePayload] = None
    ) -> IngestionResult:
        """Create a card in a collection.

        :raises ImageDecodeError: payload is malformed; nothing was written
        :raises CollectionNotFoundError: collection does not exist
        :raises StoreWriteError: card store failed
        """
        card_id = uuid.uuid4().hex
        # Decode up front so a bad payload never reaches either store.
        data = decode_image(image) if image else None

        image_stored = False
        if data is not None:
            image_stored = await self.object_store.put(card_id, data, image.content_type)
            if not image_stored:
                logger.warning(f"Image upload failed for card {card_id}; saving text only")

        card = Card(
            id=card_id,
            question=draft.question,
            answer=draft.answer,
            topic=draft.topic,
            image_key=card_id if image_stored else None,
        )

        try:
            updated = await self.repo.push_card(collection_id, card)
        except StoreError as e:
            await self._discard_blob(card, image_stored)
            raise StoreWriteError(f"Could not save card {card_id}: {e}") from e

        if updated is None:
            await self._discard_blob(card, image_stored)
            raise CollectionNotFoundError(collection_id)

        logger.info(f"Card {card_id} added to collection {collection_id} (image_stored={image_stored})")
        return IngestionResult(card=card, image_stored=image_stored, partial=data is not None and not image_stored)

    async def update_card(
        self, collection_id: str, card_id: str, changes: CardChanges
    ) -> IngestionResult:
        """Apply a partial update, replacing the image under the same key if one is sent.

        :raises ImageDecodeError: payload is malformed; nothing was written
        :raises NotFoundError: collection or card does not exist
        :raises StoreWriteError: card store failed
        """
        data = decode_image(changes.img) if changes.img else None

        try:
            existing = await self.repo.get_card(collection_id, card_id)
            if existing is None and await self.repo.get_collection(collection_id) is None:
                raise CollectionNotFoundError(collection_id)
        except StoreError as e:
            raise StoreWriteError(f"Could not load card {card_id}: {e}") from e
        if existing is None:
            raise CardNotFoundError(card_id)

        image_stored = False
        if data is not None:
            image_stored = await self.object_store.put(card_id, data, changes.img.content_type)
            if not image_stored:
                logger.warning(f"Image replacement failed for card {card_id}; updating text only")

        fields = changes.model_dump(include={"question", "answer", "topic"})
        if image_stored:
            fields["image_key"] = card_id

        try:
            await self.repo.update_card_fields(collection_id, card_id, fields)
        except NotFoundError:
            # Card removed between the lookup and the update.
            await self._discard_blob(existing, image_stored)
            raise
        except StoreError as e:
            raise StoreWriteError(f"Could not update card {card_id}: {e}") from e

        if image_stored:
            await self._invalidate(card_id)

        card = await self.repo.get_card(collection_id, card_id)
        if card is None:
            # Removed concurrently after the update went through.
            raise CardNotFoundError(card_id)
        return IngestionResult(card=card, image_stored=image_stored, partial=data is not None and not image_stored)

    async def delete_card(self, collection_id: str, card_id: str) -> None:
        """Remove a card and then its image blob.

        :raises CollectionNotFoundError: collection does not exist
        :raises StoreWriteError: card store failed
        """
        try:
            card = await self.repo.get_card(collection_id, card_id)
            removed = await self.repo.pull_card(collection_id, card_id)
        except StoreError as e:
            raise StoreWriteError(f"Could not delete card {card_id}: {e}") from e

        if not removed:
            raise CollectionNotFoundError(collection_id)

        if card is not None:
            logger.info(f"Card {card_id} removed from collection {collection_id}")
            await self._discard_blob(card, card.image_key is not None)

    async def delete_card_matching(self, collection_name: str, question: str, topic: Optional[str] = None) -> None:
        """Delete the first card whose content matches, within a collection found by name.

        :raises CardNotFoundError: no card matches
        """
        try:
            match = await self.repo.find_card(collection_name, question, topic)
        except StoreError as e:
            raise StoreWriteError(f"Could not look up card in {collection_name}: {e}") from e

        if match is None:
            raise CardNotFoundError(question)

        collection_id, card = match
        await self.delete_card(collection_id, card.id)

    async def _discard_blob(self, card: Card, stored: bool) -> None:
        if not stored:
            return
        key = card.image_key or card.id
        if not await self.object_store.delete_many([key]):
            logger.warning(f"Image {key} could not be deleted and is now orphaned")
        await self._invalidate(key)

    async def _invalidate(self, key: str) -> None:
        if self.image_cache is not None:
            await self.image_cache.invalidate(key)
