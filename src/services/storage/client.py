import asyncio
import logging
from typing import AsyncIterator, Iterable, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.config import S3Settings
from src.constants import DEFAULT_CONTENT_TYPE

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
# S3 DeleteObjects accepts at most 1000 keys per request.
DELETE_BATCH_SIZE = 1000


class ObjectStream:
    """Body of a fetched object, read in a worker thread chunk by chunk."""

    def __init__(self, body, content_type: str, content_length: Optional[int], chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._body = body
        self.content_type = content_type
        self.content_length = content_length
        self.chunk_size = chunk_size

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await asyncio.to_thread(self._body.read, self.chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await self.close()

    async def read(self) -> bytes:
        chunks = [chunk async for chunk in self.iter_chunks()]
        return b"".join(chunks)

    async def close(self) -> None:
        close = getattr(self._body, "close", None)
        if close is not None:
            await asyncio.to_thread(close)


class ObjectStoreGateway:
    """Thin async wrapper around an S3 bucket.

    Failures never raise: ``put``/``delete_many`` return False and
    ``get_stream`` returns None, with the detail logged for operators.
    """

    def __init__(self, bucket: str, client=None, settings: Optional[S3Settings] = None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.bucket = bucket
        self.chunk_size = chunk_size
        if client is None:
            client = boto3.client(
                "s3",
                region_name=settings.region if settings else None,
                aws_access_key_id=settings.access_key_id if settings else None,
                aws_secret_access_key=settings.secret_access_key if settings else None,
                endpoint_url=settings.endpoint_url if settings else None,
            )
        self.client = client

    async def put(self, key: str, data: bytes, content_type: str) -> bool:
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 put failed for key={key} [{_status_code(e)}]: {e}")
            return False

    async def get_stream(self, key: str) -> Optional[ObjectStream]:
        try:
            response = await asyncio.to_thread(self.client.get_object, Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"S3 get failed for key={key} [{_status_code(e)}]: {e}")
            return None

        body = response.get("Body")
        if body is None:
            logger.warning(f"S3 object {key} has no content")
            return None

        return ObjectStream(
            body,
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
            content_length=response.get("ContentLength"),
            chunk_size=self.chunk_size,
        )

    async def delete_many(self, keys: Iterable[str]) -> bool:
        keys = [k for k in keys if k]
        if not keys:
            return True

        ok = True
        for batch in _batched(keys, DELETE_BATCH_SIZE):
            try:
                response = await asyncio.to_thread(
                    self.client.delete_objects,
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                )
            except (ClientError, BotoCoreError) as e:
                logger.error(f"S3 delete failed for {len(batch)} keys [{_status_code(e)}]: {e}")
                ok = False
                continue

            for err in response.get("Errors", []):
                logger.error(f"S3 could not delete {err.get('Key')}: {err.get('Code')} {err.get('Message')}")
                ok = False
        return ok


def _status_code(error: Exception) -> Optional[int]:
    if isinstance(error, ClientError):
        return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return None


def _batched(items: List[str], size: int) -> Iterable[List[str]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]
