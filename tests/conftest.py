import asyncio
import io
import struct
import zlib

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from src.db.interfaces.postgresql import Base, PostgreSQLDatabase
from src.repositories.collections import CollectionsRepository
from src.services.cards.ingestion import CardIngestionService
from src.services.images.assembler import CollectionImageAssembler
from src.services.images.cache import ImageCache
from src.services.storage.client import ObjectStream


class FakeObjectStore:
    """In-memory stand-in for ObjectStoreGateway with injectable failures."""

    def __init__(self, delay: float = 0.0):
        self.objects = {}
        self.fail_put = set()
        self.fail_get = set()
        self.put_calls = []
        self.deleted = []
        self.delay = delay
        self.delays = {}
        self.broken_reads = set()
        self.closed = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def put(self, key, data, content_type):
        self.put_calls.append(key)
        if key in self.fail_put or "*" in self.fail_put:
            return False
        self.objects[key] = (bytes(data), content_type)
        return True

    async def get_stream(self, key):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(key, self.delay)
            if delay:
                await asyncio.sleep(delay)
        finally:
            self.in_flight -= 1
        if key in self.fail_get or key not in self.objects:
            return None
        data, content_type = self.objects[key]
        body = _BrokenBody(self, key) if key in self.broken_reads else _TrackedBody(self, key, data)
        return ObjectStream(body, content_type=content_type, content_length=len(data), chunk_size=4)

    async def delete_many(self, keys):
        for key in keys:
            self.deleted.append(key)
            self.objects.pop(key, None)
        return True


class _TrackedBody(io.BytesIO):
    def __init__(self, store, key, data):
        super().__init__(data)
        self._store = store
        self._key = key

    def close(self):
        self._store.closed.append(self._key)
        super().close()


class _BrokenBody:
    """Body whose connection drops on the first read."""

    def __init__(self, store, key):
        self._store = store
        self._key = key

    def read(self, size=-1):
        raise OSError("connection reset by peer")

    def close(self):
        self._store.closed.append(self._key)


class FakeRedis:
    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value

    async def delete(self, key):
        self.store.pop(key, None)


def _png_bytes() -> bytes:
    def chunk(kind, data):
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)

    header = struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0)
    pixels = zlib.compress(b"\x00\xff\x00\x00")
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IDAT", pixels) + chunk(b"IEND", b"")


def _jpeg_bytes() -> bytes:
    # SOI, JFIF APP0 header, a few payload bytes, EOI
    app0 = b"\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    return b"\xff\xd8" + app0 + bytes(range(256)) + b"\xff\xd9"


@pytest.fixture
def png_bytes():
    return _png_bytes()


@pytest.fixture
def jpeg_bytes():
    return _jpeg_bytes()


@pytest.fixture
def png_file(tmp_path, png_bytes):
    path = tmp_path / "card.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def jpeg_file(tmp_path, jpeg_bytes):
    path = tmp_path / "card.jpg"
    path.write_bytes(jpeg_bytes)
    return path


@pytest.fixture
def database():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = PostgreSQLDatabase(engine=engine)
    db.create_tables()
    yield db
    Base.metadata.drop_all(engine)
    db.teardown()


@pytest.fixture
def repo(database):
    return CollectionsRepository(database.session_factory)


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def image_cache():
    return ImageCache(redis_client=FakeRedis(), ttl_seconds=60)


@pytest.fixture
def ingestion(repo, object_store, image_cache):
    return CardIngestionService(repo=repo, object_store=object_store, image_cache=image_cache)


@pytest.fixture
def assembler(repo, object_store, image_cache):
    return CollectionImageAssembler(repo=repo, object_store=object_store, image_cache=image_cache)


@pytest.fixture
def collection(repo):
    return asyncio.run(repo.create_collection(name="Geography", owner="user-1", category="school"))
