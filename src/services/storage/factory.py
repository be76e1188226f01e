from functools import lru_cache

from src.config import get_settings
from src.services.storage.client import ObjectStoreGateway


@lru_cache(maxsize=1)
def make_object_store() -> ObjectStoreGateway:
    """Create the process-wide object store gateway."""
    settings = get_settings()
    return ObjectStoreGateway(
        bucket=settings.s3.bucket_name,
        settings=settings.s3,
        chunk_size=settings.stream_chunk_size,
    )
