import asyncio
import base64

import pytest
from fastapi.testclient import TestClient

from src.dependencies import get_image_assembler, get_ingestion_service
from src.main import app
from src.services.images import multipart
from src.services.images.codec import encode_image


@pytest.fixture
def client(ingestion, assembler):
    app.dependency_overrides[get_ingestion_service] = lambda: ingestion
    app.dependency_overrides[get_image_assembler] = lambda: assembler
    yield TestClient(app)
    app.dependency_overrides.clear()


def _add_card_body(collection_id, img=None, **card):
    fields = {"question": "2 + 2?", "answer": "4", "topic": "math", "img": img}
    fields.update(card)
    return {"card": fields, "collectionId": collection_id}


def _img(path):
    payload = encode_image(path)
    return {"base64": payload.base64, "contentType": payload.content_type}


def test_ping(client):
    assert client.get("/api/v1/ping").json() == {"status": "ok"}


def test_add_card_without_image(client, collection):
    response = client.post("/api/v1/cards/add-card", json=_add_card_body(collection.id))

    assert response.status_code == 201
    data = response.json()
    assert data["cardAdded"] is True
    assert data["imageStored"] is False
    assert data["card"]["question"] == "2 + 2?"
    assert data["card"]["imageKey"] is None


def test_add_card_with_image(client, object_store, collection, png_file, png_bytes):
    response = client.post("/api/v1/cards/add-card", json=_add_card_body(collection.id, img=_img(png_file)))

    assert response.status_code == 201
    card = response.json()["card"]
    assert card["imageKey"] == card["id"]
    assert object_store.objects[card["id"]] == (png_bytes, "image/png")


def test_add_card_missing_fields_is_400(client, object_store, collection):
    response = client.post("/api/v1/cards/add-card", json={"card": {"answer": "4"}, "collectionId": collection.id})

    assert response.status_code == 400
    assert response.json()["cardAdded"] is False
    assert object_store.put_calls == []


def test_add_card_unknown_collection_is_400(client):
    response = client.post("/api/v1/cards/add-card", json=_add_card_body("missing"))

    assert response.status_code == 400
    assert response.json()["cardAdded"] is False


def test_add_card_bad_image_is_400(client, collection):
    body = _add_card_body(collection.id, img={"base64": "###", "contentType": "image/png"})

    response = client.post("/api/v1/cards/add-card", json=body)

    assert response.status_code == 400
    assert response.json() == {"cardAdded": False, "message": "The attached image could not be read"}


def test_update_card(client, repo, collection):
    card_id = client.post("/api/v1/cards/add-card", json=_add_card_body(collection.id)).json()["card"]["id"]

    body = {
        "card": {"cardId": card_id, "collectionId": collection.id},
        "newCard": {"question": "3 + 3?", "category": "arithmetic", "answer": "6", "img": None},
    }
    response = client.patch("/api/v1/cards/update-card", json=body)

    assert response.status_code == 204
    card = asyncio.run(repo.get_card(collection.id, card_id))
    assert (card.question, card.answer, card.topic) == ("3 + 3?", "6", "arithmetic")


def test_update_unknown_card_is_404(client, collection):
    body = {"card": {"cardId": "nope", "collectionId": collection.id}, "newCard": {"answer": "x"}}

    assert client.patch("/api/v1/cards/update-card", json=body).status_code == 404


def test_delete_card_by_content(client, repo, object_store, collection, png_file):
    added = client.post(
        "/api/v1/cards/add-card", json=_add_card_body(collection.id, img=_img(png_file))
    ).json()["card"]

    body = {"card": {"question": "2 + 2?", "category": "math", "collectionName": collection.name}}
    response = client.patch("/api/v1/cards/delete-card", json=body)

    assert response.status_code == 204
    assert asyncio.run(repo.get_collection(collection.id)).cards == []
    assert object_store.deleted == [added["id"]]


def test_delete_card_by_ids(client, repo, collection):
    card_id = client.post("/api/v1/cards/add-card", json=_add_card_body(collection.id)).json()["card"]["id"]

    response = client.patch("/api/v1/cards/delete-card", json={"collectionId": collection.id, "cardId": card_id})

    assert response.status_code == 204
    assert asyncio.run(repo.get_card(collection.id, card_id)) is None


def test_delete_card_errors(client):
    assert client.patch("/api/v1/cards/delete-card", json={}).status_code == 400
    assert client.patch(
        "/api/v1/cards/delete-card", json={"collectionId": "missing", "cardId": "c1"}
    ).json() == {"cardDeleted": False, "message": "Collection not found"}


def test_stream_collection_images(client, collection, png_file, jpeg_file, png_bytes, jpeg_bytes):
    ids = {}
    for path in (png_file, jpeg_file):
        card = client.post("/api/v1/cards/add-card", json=_add_card_body(collection.id, img=_img(path))).json()["card"]
        ids[card["id"]] = path
    client.post("/api/v1/cards/add-card", json=_add_card_body(collection.id))

    response = client.get(f"/api/v1/collections/{collection.id}")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("multipart/mixed; boundary=")
    boundary = multipart.boundary_from_content_type(response.headers["content-type"])
    parts = {p.content_id: p for p in multipart.parse_parts(response.content, boundary)}
    assert set(parts) == set(ids)
    expected = {png_file: (png_bytes, "image/png"), jpeg_file: (jpeg_bytes, "image/jpeg")}
    for card_id, path in ids.items():
        assert (parts[card_id].data, parts[card_id].content_type) == expected[path]


def test_stream_empty_collection(client, collection):
    response = client.get(f"/api/v1/collections/{collection.id}")

    boundary = multipart.boundary_from_content_type(response.headers["content-type"])
    assert response.content == f"--{boundary}--\r\n".encode()


def test_stream_unknown_collection_is_404(client):
    assert client.get("/api/v1/collections/missing").status_code == 404


def test_all_images_buffered(client, collection, png_file, png_bytes):
    card = client.post("/api/v1/cards/add-card", json=_add_card_body(collection.id, img=_img(png_file))).json()["card"]

    response = client.get(f"/api/v1/collections/{collection.id}/all-images")

    assert response.status_code == 200
    entry = response.json()["images"][card["id"]]
    assert base64.b64decode(entry["data"]) == png_bytes
    assert entry["contentType"] == "image/png"
    assert entry["contentLength"] == len(png_bytes)
    assert client.get("/api/v1/collections/missing/all-images").status_code == 404


def test_single_image(client, collection, jpeg_file, jpeg_bytes):
    card = client.post("/api/v1/cards/add-card", json=_add_card_body(collection.id, img=_img(jpeg_file))).json()["card"]

    response = client.get(f"/api/v1/collections/image/{card['imageKey']}")

    assert response.status_code == 200
    assert response.content == jpeg_bytes
    assert response.headers["content-type"] == "image/jpeg"
    assert client.get("/api/v1/collections/image/unknown").status_code == 404
