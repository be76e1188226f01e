import base64
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from redis.asyncio import Redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from src.schemas.cards import ImageBlob, ImageCacheEntry

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "image"


class ImageCache:
    """Redis cache for single card images served to previews.

    Cache failures are logged and treated as misses; the object store stays
    the source of truth.
    """

    def __init__(self, redis_client: Redis, ttl_seconds: int = 3600, version: int = 1):
        self._redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.version = version

    def _key(self, image_id: str) -> str:
        return f"{CACHE_KEY_PREFIX}:v{self.version}:{image_id}"

    async def get(self, image_id: str) -> Optional[ImageBlob]:
        try:
            raw = await self._redis.get(self._key(image_id))
        except RedisError as e:
            logger.warning(f"Image cache read failed for {image_id}: {e}")
            return None

        if raw is None:
            return None

        try:
            entry = ImageCacheEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cache entry for {image_id}: {e}")
            return None
        return ImageBlob(
            data=base64.b64decode(entry.data),
            content_type=entry.content_type,
            content_length=entry.content_length,
        )

    async def set(self, image_id: str, blob: ImageBlob) -> None:
        now = datetime.now(timezone.utc)
        entry = ImageCacheEntry(
            image_id=image_id,
            data=base64.b64encode(blob.data).decode("ascii"),
            content_type=blob.content_type,
            content_length=blob.content_length,
            cached_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        try:
            await self._redis.set(self._key(image_id), entry.model_dump_json(), ex=self.ttl_seconds)
        except RedisError as e:
            logger.warning(f"Image cache write failed for {image_id}: {e}")

    async def invalidate(self, image_id: str) -> None:
        try:
            await self._redis.delete(self._key(image_id))
        except RedisError as e:
            logger.warning(f"Image cache invalidation failed for {image_id}: {e}")
