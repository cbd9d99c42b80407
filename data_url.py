"""Encode and decode images as `data:<media-type>;base64,<payload>` strings."""

import base64
import binascii
import re

from errors import FormatError

ALLOWED_TYPES = ("image/png", "image/jpeg", "image/webp")

DATA_URL_RE = re.compile(r"data:(.+);base64,(.+)")


def parse_data_url(data_url):
    """Split a data URL into (media_type, base64_payload), both unchanged."""
    match = DATA_URL_RE.fullmatch(data_url or "")
    if not match:
        raise FormatError("Invalid data URL format")
    return match.group(1), match.group(2)


def decode_payload(payload):
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Invalid base64 payload: {e}") from e


def build_data_url(media_type, data):
    b64 = base64.b64encode(data).decode("utf-8")
    return f"data:{media_type};base64,{b64}"


def is_image_type(file_type):
    return bool(file_type) and file_type.startswith("image/")
