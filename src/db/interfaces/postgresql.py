import logging
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


class PostgreSQLDatabase:
    """Owns the engine and session factory for the card store."""

    def __init__(self, url: Optional[str] = None, engine: Optional[Engine] = None, **engine_kwargs):
        if engine is None:
            engine = create_engine(url, pool_pre_ping=True, **engine_kwargs)
        self.engine = engine
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def startup(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info(f"Connected to database {self.engine.url.render_as_string(hide_password=True)}")

    def create_tables(self) -> None:
        import src.models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def teardown(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")
