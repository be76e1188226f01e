import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.constants import INCOMPLETE_REQUEST_INFO
from src.db.factory import make_database
from src.db.redis.redis import close_redis_pool, get_redis_client
from src.middlewares import log_error, request_logging_middleware
from src.routers import cards, collections, ping
from src.services.cards.factory import make_card_ingestion_service
from src.services.images.cache import ImageCache
from src.services.images.factory import make_image_assembler
from src.services.storage.factory import make_object_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Failure flag each card endpoint reports alongside a 400.
FAILURE_FLAGS = {
    "/add-card": "cardAdded",
    "/update-card": "cardUpdated",
    "/delete-card": "cardDeleted",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan for the API.
    """
    logger.info("Starting Flashcards API...")

    # Missing required settings abort startup here.
    settings = get_settings()
    app.state.settings = settings

    database = make_database()
    app.state.database = database
    logger.info("Database connected")

    object_store = make_object_store()
    image_cache = ImageCache(
        redis_client=get_redis_client(),
        ttl_seconds=settings.redis.image_ttl_seconds,
        version=settings.redis.cache_version,
    )
    app.state.ingestion_service = make_card_ingestion_service(database, object_store, image_cache)
    app.state.image_assembler = make_image_assembler(database, object_store, image_cache)
    logger.info(f"Services initialized: object store bucket={settings.s3.bucket_name}, image cache")

    logger.info("API ready")
    yield

    # Cleanup
    await close_redis_pool()
    database.teardown()
    logger.info("API shutdown complete")


app = FastAPI(
    title="Flashcards",
    description="Flashcard collections with card images kept in an object store.",
    version=os.getenv("APP_VERSION", "0.1.0"),
    lifespan=lifespan,
)

app.middleware("http")(request_logging_middleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    log_error(str(exc.errors()), request.method, request.url.path)
    content = {"message": INCOMPLETE_REQUEST_INFO}
    for suffix, flag in FAILURE_FLAGS.items():
        if request.url.path.endswith(suffix):
            content = {flag: False, **content}
            break
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


app.include_router(ping.router, prefix="/api/v1")
app.include_router(cards.router, prefix="/api/v1")
app.include_router(collections.router, prefix="/api/v1")


if __name__ == "__main__":
    uvicorn.run(app, port=8000, host="0.0.0.0")
