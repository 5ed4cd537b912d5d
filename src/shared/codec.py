"""Transport codec: the single place where document bytes become base64 text and back."""

import base64
import binascii

from .exceptions import PayloadError


def encode_payload(content: bytes) -> str:
    """
    Encode document bytes for transport.

    Args:
        content: Raw document bytes

    Returns:
        Base64 string (no data URI prefix)

    Raises:
        PayloadError: If the content is empty or not bytes
    """
    if not isinstance(content, (bytes, bytearray)):
        raise PayloadError("Document content must be bytes")
    if not content:
        raise PayloadError("Document content is empty")

    return base64.b64encode(bytes(content)).decode('ascii')


def decode_payload(encoded: str) -> bytes:
    """
    Decode a transport string back into document bytes.

    Accepts plain base64 and data URIs (``data:application/pdf;base64,...``).

    Raises:
        PayloadError: If the string is empty or not valid base64
    """
    if not encoded:
        raise PayloadError("Document data is required")

    if encoded.startswith('data:'):
        if ',' not in encoded:
            raise PayloadError("Malformed data URI")
        encoded = encoded.split(',', 1)[1]

    try:
        content = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise PayloadError("Invalid base64 encoding")

    if not content:
        raise PayloadError("Document data is empty")

    return content
