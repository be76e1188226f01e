from typing import Dict, List, Optional

import requests

from config import API_BASE_URL, REQUEST_TIMEOUT
from src.services.images.codec import encode_image
from src.services.images.multipart import Part, boundary_from_content_type, parse_parts


def _image_body(image_file) -> Optional[dict]:
    if image_file is None:
        return None
    payload = encode_image(image_file)
    return {"base64": payload.base64, "contentType": payload.content_type}


def add_card(collection_id: str, question: str, answer: str, topic: str, image_file=None) -> dict:
    body = {
        "card": {
            "question": question,
            "answer": answer,
            "topic": topic,
            "img": _image_body(image_file),
        },
        "collectionId": collection_id,
    }
    response = requests.post(f"{API_BASE_URL}/cards/add-card", json=body, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response.json()


def update_card(collection_id: str, card_id: str, changes: Dict[str, str], image_file=None) -> None:
    new_card = {k: v for k, v in changes.items() if v}
    image = _image_body(image_file)
    if image:
        new_card["img"] = image
    body = {"card": {"cardId": card_id, "collectionId": collection_id}, "newCard": new_card}
    response = requests.patch(f"{API_BASE_URL}/cards/update-card", json=body, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()


def delete_card(collection_id: str, card_id: str) -> None:
    body = {"collectionId": collection_id, "cardId": card_id}
    response = requests.patch(f"{API_BASE_URL}/cards/delete-card", json=body, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()


def fetch_collection_images(collection_id: str) -> List[Part]:
    """Download every image of a collection from the multipart endpoint."""
    response = requests.get(f"{API_BASE_URL}/collections/{collection_id}", timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    boundary = boundary_from_content_type(response.headers["Content-Type"])
    return parse_parts(response.content, boundary)
