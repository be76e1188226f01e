from src.config import get_settings
from src.db.interfaces.postgresql import PostgreSQLDatabase


def make_database() -> PostgreSQLDatabase:
    """Create the card store database handle and verify connectivity."""
    settings = get_settings()
    database = PostgreSQLDatabase(url=settings.postgres_database_url)
    database.startup()
    return database
