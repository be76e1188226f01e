import os

APP_TITLE = "Flashcards"

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000/api/v1")
REQUEST_TIMEOUT = int(os.getenv("API_TIMEOUT_SECONDS", "30"))

IMAGE_TYPES = ["png", "jpg", "jpeg", "gif", "webp"]
