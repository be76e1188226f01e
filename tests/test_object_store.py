import asyncio
import io

from botocore.exceptions import ClientError, EndpointConnectionError

from src.services.storage.client import ObjectStoreGateway


def _client_error(code, status, operation):
    return ClientError(
        {"Error": {"Code": code, "Message": code}, "ResponseMetadata": {"HTTPStatusCode": status}},
        operation,
    )


class _StubS3:
    def __init__(self):
        self.objects = {}
        self.calls = []
        self.raise_on = {}

    def _maybe_raise(self, operation):
        if operation in self.raise_on:
            raise self.raise_on[operation]

    def put_object(self, Bucket, Key, Body, ContentType):
        self.calls.append(("put_object", Bucket, Key))
        self._maybe_raise("put_object")
        self.objects[Key] = (Body, ContentType)

    def get_object(self, Bucket, Key):
        self.calls.append(("get_object", Bucket, Key))
        self._maybe_raise("get_object")
        if Key not in self.objects:
            raise _client_error("NoSuchKey", 404, "GetObject")
        body, content_type = self.objects[Key]
        return {"Body": io.BytesIO(body), "ContentType": content_type, "ContentLength": len(body)}

    def delete_objects(self, Bucket, Delete):
        self.calls.append(("delete_objects", Bucket, [o["Key"] for o in Delete["Objects"]]))
        self._maybe_raise("delete_objects")
        errors = []
        for obj in Delete["Objects"]:
            if obj["Key"] == "locked":
                errors.append({"Key": "locked", "Code": "AccessDenied", "Message": "denied"})
            else:
                self.objects.pop(obj["Key"], None)
        return {"Errors": errors} if errors else {}


def _gateway(stub):
    return ObjectStoreGateway(bucket="cards", client=stub, chunk_size=3)


def test_put_then_stream_back():
    stub = _StubS3()
    gateway = _gateway(stub)

    async def scenario():
        assert await gateway.put("card-1", b"\x89PNG-bytes", "image/png") is True
        stream = await gateway.get_stream("card-1")
        return stream, await stream.read()

    stream, data = asyncio.run(scenario())

    assert data == b"\x89PNG-bytes"
    assert stream.content_type == "image/png"
    assert stream.content_length == len(data)
    assert ("put_object", "cards", "card-1") in stub.calls


def test_put_failure_returns_false():
    stub = _StubS3()
    stub.raise_on["put_object"] = _client_error("AccessDenied", 403, "PutObject")

    assert asyncio.run(_gateway(stub).put("card-1", b"x", "image/png")) is False


def test_get_missing_and_transport_error_are_both_none():
    stub = _StubS3()
    gateway = _gateway(stub)

    assert asyncio.run(gateway.get_stream("nope")) is None

    stub.objects["card-1"] = (b"x", "image/png")
    stub.raise_on["get_object"] = EndpointConnectionError(endpoint_url="https://s3.example")
    assert asyncio.run(gateway.get_stream("card-1")) is None


def test_stream_iterates_in_chunks():
    stub = _StubS3()
    stub.objects["k"] = (b"abcdefgh", "image/gif")

    async def scenario():
        stream = await _gateway(stub).get_stream("k")
        return [chunk async for chunk in stream.iter_chunks()]

    assert asyncio.run(scenario()) == [b"abc", b"def", b"gh"]


def test_delete_many():
    stub = _StubS3()
    stub.objects.update({"a": (b"1", "image/png"), "b": (b"2", "image/png")})
    gateway = _gateway(stub)

    assert asyncio.run(gateway.delete_many(["a", "b"])) is True
    assert stub.objects == {}


def test_delete_many_empty_is_noop():
    stub = _StubS3()

    assert asyncio.run(_gateway(stub).delete_many([])) is True
    assert stub.calls == []


def test_delete_many_reports_partial_errors():
    stub = _StubS3()
    stub.objects.update({"a": (b"1", "image/png"), "locked": (b"2", "image/png")})

    assert asyncio.run(_gateway(stub).delete_many(["a", "locked"])) is False
    assert "a" not in stub.objects


def test_delete_many_transport_error_returns_false():
    stub = _StubS3()
    stub.raise_on["delete_objects"] = _client_error("InternalError", 500, "DeleteObjects")

    assert asyncio.run(_gateway(stub).delete_many(["a"])) is False
