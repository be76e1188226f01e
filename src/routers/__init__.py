"""Router modules for the flashcards API."""

from . import cards, collections, ping

__all__ = ["cards", "collections", "ping"]
