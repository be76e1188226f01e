import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.attributes import flag_modified

from src.exceptions import CardNotFoundError, CollectionNotFoundError, StoreError
from src.models.collection import CollectionRecord, new_id
from src.schemas.cards import Card, Collection

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("question", "answer", "topic", "image_key")


class CollectionsRepository:
    """Card store: collections with their embedded, ordered cards.

    Each public method runs its blocking SQLAlchemy work in a worker thread
    with its own session. Mutations lock the collection row for the length
    of one transaction, so concurrent pushes/pulls on the same collection
    never interleave partially.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def create_collection(self, name: str, owner: str, category: str) -> Collection:
        return await self._run(self._create_collection, name, owner, category)

    async def get_collection(self, collection_id: str) -> Optional[Collection]:
        return await self._run(self._get_collection, collection_id)

    async def get_card(self, collection_id: str, card_id: str) -> Optional[Card]:
        collection = await self.get_collection(collection_id)
        if collection is None:
            return None
        return next((c for c in collection.cards if c.id == card_id), None)

    async def find_card(
        self, collection_name: str, question: str, topic: Optional[str] = None
    ) -> Optional[Tuple[str, Card]]:
        """Locate a card by its content within a collection looked up by name."""
        return await self._run(self._find_card, collection_name, question, topic)

    async def push_card(self, collection_id: str, card: Card) -> Optional[Collection]:
        """Append a card; returns the updated collection or None if it does not exist."""
        return await self._run(self._push_card, collection_id, card)

    async def pull_card(self, collection_id: str, card_id: str) -> bool:
        """Remove a card. Absent cards are a successful no-op; absent collections are not."""
        return await self._run(self._pull_card, collection_id, card_id)

    async def update_card_fields(self, collection_id: str, card_id: str, fields: Dict[str, Any]) -> bool:
        """Partial update; ``None`` values and unknown keys are ignored.

        :raises CollectionNotFoundError: collection does not exist
        :raises CardNotFoundError: collection exists but holds no such card
        """
        return await self._run(self._update_card_fields, collection_id, card_id, fields)

    async def _run(self, fn: Callable, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            logger.error(f"Card store operation {fn.__name__} failed: {e}")
            raise StoreError(f"Card store operation failed: {e}") from e

    # Synchronous bodies, executed in worker threads

    def _create_collection(self, name: str, owner: str, category: str) -> Collection:
        with self.session_factory() as session, session.begin():
            record = CollectionRecord(id=new_id(), name=name, owner=owner, category=category, cards=[])
            session.add(record)
            session.flush()
            return _to_schema(record)

    def _get_collection(self, collection_id: str) -> Optional[Collection]:
        with self.session_factory() as session:
            record = session.get(CollectionRecord, collection_id)
            return _to_schema(record) if record else None

    def _find_card(self, collection_name: str, question: str, topic: Optional[str]) -> Optional[Tuple[str, Card]]:
        with self.session_factory() as session:
            stmt = (
                select(CollectionRecord)
                .where(CollectionRecord.name == collection_name)
                .order_by(CollectionRecord.created_at)
            )
            for record in session.scalars(stmt):
                for doc in record.cards or []:
                    if doc.get("question") != question:
                        continue
                    if topic is not None and doc.get("topic") != topic:
                        continue
                    return record.id, Card.model_validate(doc)
        return None

    def _push_card(self, collection_id: str, card: Card) -> Optional[Collection]:
        with self.session_factory() as session, session.begin():
            record = _locked(session, collection_id)
            if record is None:
                logger.warning(f"Cannot add card {card.id}: collection {collection_id} not found")
                return None
            _set_cards(record, [*(record.cards or []), card.model_dump()])
            return _to_schema(record)

    def _pull_card(self, collection_id: str, card_id: str) -> bool:
        with self.session_factory() as session, session.begin():
            record = _locked(session, collection_id)
            if record is None:
                return False
            remaining = [doc for doc in record.cards or [] if doc.get("id") != card_id]
            if len(remaining) != len(record.cards or []):
                _set_cards(record, remaining)
            return True

    def _update_card_fields(self, collection_id: str, card_id: str, fields: Dict[str, Any]) -> bool:
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
        with self.session_factory() as session, session.begin():
            record = _locked(session, collection_id)
            if record is None:
                raise CollectionNotFoundError(collection_id)

            cards: List[dict] = []
            matched = False
            for doc in record.cards or []:
                if doc.get("id") == card_id:
                    doc = {**doc, **changes}
                    matched = True
                cards.append(doc)

            if not matched:
                raise CardNotFoundError(card_id)
            if changes:
                _set_cards(record, cards)
            return True


def _locked(session: Session, collection_id: str) -> Optional[CollectionRecord]:
    stmt = select(CollectionRecord).where(CollectionRecord.id == collection_id).with_for_update()
    return session.execute(stmt).scalar_one_or_none()


def _set_cards(record: CollectionRecord, cards: List[dict]) -> None:
    record.cards = cards
    record.updated_at = datetime.now(timezone.utc)
    flag_modified(record, "cards")


def _to_schema(record: CollectionRecord) -> Collection:
    return Collection(
        id=record.id,
        name=record.name,
        owner=record.owner,
        category=record.category,
        cards=[Card.model_validate(doc) for doc in record.cards or []],
    )
