from src.db.interfaces.postgresql import PostgreSQLDatabase
from src.repositories.collections import CollectionsRepository
from src.services.images.assembler import CollectionImageAssembler
from src.services.images.cache import ImageCache
from src.services.storage.client import ObjectStoreGateway


def make_image_assembler(
    database: PostgreSQLDatabase,
    object_store: ObjectStoreGateway,
    image_cache: ImageCache | None = None,
) -> CollectionImageAssembler:
    return CollectionImageAssembler(
        repo=CollectionsRepository(database.session_factory),
        object_store=object_store,
        image_cache=image_cache,
    )
