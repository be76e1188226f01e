"""multipart/mixed framing for collection image responses.

Each part carries one image::

    --<boundary>\\r\\n
    Content-Type: <type>\\r\\n
    Content-ID: <card id>\\r\\n
    \\r\\n
    <raw bytes>\\r\\n

and the body ends with ``--<boundary>--\\r\\n``.
"""

import uuid
from typing import Dict, List, NamedTuple

CRLF = b"\r\n"


class Part(NamedTuple):
    content_id: str
    content_type: str
    data: bytes


def new_boundary() -> str:
    return uuid.uuid4().hex


def content_type_header(boundary: str) -> str:
    return f'multipart/mixed; boundary="{boundary}"'


def part_header(boundary: str, content_id: str, content_type: str) -> bytes:
    return (
        f"--{boundary}\r\n"
        f"Content-Type: {content_type}\r\n"
        f"Content-ID: {content_id}\r\n"
        "\r\n"
    ).encode("utf-8")


def part_trailer() -> bytes:
    return CRLF


def closing_boundary(boundary: str) -> bytes:
    return f"--{boundary}--\r\n".encode("utf-8")


def boundary_from_content_type(content_type: str) -> str:
    for param in content_type.split(";")[1:]:
        key, _, value = param.strip().partition("=")
        if key.lower() == "boundary":
            return value.strip('"')
    raise ValueError(f"No boundary in content type: {content_type!r}")


def parse_parts(body: bytes, boundary: str) -> List[Part]:
    """Split a multipart/mixed body produced by this service back into parts."""
    delimiter = f"--{boundary}".encode("utf-8")
    closing = closing_boundary(boundary)
    if not body.endswith(closing):
        raise ValueError("Multipart body is not terminated")

    parts: List[Part] = []
    # Drop the trailing "--\r\n" of the closing marker before splitting.
    segments = body[: -len(closing) + len(delimiter)].split(delimiter)
    for segment in segments[1:-1]:
        if not segment.startswith(CRLF) or not segment.endswith(CRLF):
            raise ValueError("Malformed multipart segment")
        head, sep, data = segment[len(CRLF):-len(CRLF)].partition(CRLF + CRLF)
        if not sep:
            raise ValueError("Multipart part is missing its header block")
        headers = _parse_headers(head)
        parts.append(
            Part(
                content_id=headers.get("content-id", ""),
                content_type=headers.get("content-type", ""),
                data=data,
            )
        )
    return parts


def _parse_headers(block: bytes) -> Dict[str, str]:
    headers = {}
    for line in block.decode("utf-8").split("\r\n"):
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return headers
