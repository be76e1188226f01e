"""Image payload encoding for transport and decoding on ingestion.

The client turns a selected image into a data URI (what a browser
``FileReader.readAsDataURL`` produces) plus the MIME type of the source
file; the server reverses it into raw bytes before writing to the object
store.
"""

import base64
import binascii
import mimetypes
import re
from pathlib import Path
from typing import Any, Union

from src.constants import DEFAULT_CONTENT_TYPE
from src.exceptions import ImageDecodeError, ImageReadError
from src.schemas.cards import ImagePayload

_DATA_URI = re.compile(r"^data:(?P<type>[^;,]*)(?:;[^,]*)?;base64,(?P<data>.*)$", re.DOTALL)
_MIME_TYPE = re.compile(r"^[\w.+-]+/[\w.+-]+$")


def encode_image(source: Union[str, Path, Any]) -> ImagePayload:
    """Read a path or an uploaded file object and encode it as a data URI.

    :param source: filesystem path, or a file-like upload exposing ``getvalue()``
        or ``read()`` and optionally ``name`` / ``type``
    :returns: ImagePayload with the source MIME type preserved as-is
    :raises ImageReadError: if the content cannot be read
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ImageReadError(f"Cannot read image {path}: {e}") from e
        content_type = _guess_type(path.name)
    else:
        try:
            data = source.getvalue() if hasattr(source, "getvalue") else source.read()
        except (OSError, ValueError) as e:
            raise ImageReadError(f"Cannot read uploaded image: {e}") from e
        if not isinstance(data, (bytes, bytearray)):
            raise ImageReadError("Uploaded image did not yield bytes")
        content_type = getattr(source, "type", None) or _guess_type(getattr(source, "name", ""))

    encoded = base64.b64encode(bytes(data)).decode("ascii")
    return ImagePayload(base64=f"data:{content_type};base64,{encoded}", content_type=content_type)


def decode_image(payload: ImagePayload) -> bytes:
    """Decode a transported payload back into the original bytes.

    :raises ImageDecodeError: on a bad content type, malformed or empty base64
    """
    if not _MIME_TYPE.match(payload.content_type or ""):
        raise ImageDecodeError(f"Invalid content type: {payload.content_type!r}")

    raw = payload.base64.strip()
    match = _DATA_URI.match(raw)
    if match:
        raw = match.group("data")

    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Malformed base64 image data: {e}") from e

    if not data:
        raise ImageDecodeError("Image payload is empty")
    return data


def _guess_type(name: str) -> str:
    guessed, _ = mimetypes.guess_type(name)
    return guessed or DEFAULT_CONTENT_TYPE
