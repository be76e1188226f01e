from src.db.interfaces.postgresql import PostgreSQLDatabase
from src.repositories.collections import CollectionsRepository
from src.services.cards.ingestion import CardIngestionService
from src.services.images.cache import ImageCache
from src.services.storage.client import ObjectStoreGateway


def make_card_ingestion_service(
    database: PostgreSQLDatabase,
    object_store: ObjectStoreGateway,
    image_cache: ImageCache | None = None,
) -> CardIngestionService:
    return CardIngestionService(
        repo=CollectionsRepository(database.session_factory),
        object_store=object_store,
        image_cache=image_cache,
    )
