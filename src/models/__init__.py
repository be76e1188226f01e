from src.models.collection import CollectionRecord

__all__ = ["CollectionRecord"]
