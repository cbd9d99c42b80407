import base64

import pytest

from data_url import build_data_url, decode_payload, is_image_type, parse_data_url
from errors import FormatError


@pytest.mark.parametrize(
    "media_type, payload",
    [
        ("image/png", "iVBORw0KGgo="),
        ("image/jpeg", "/9j/4AAQSkZJRg=="),
        ("image/svg+xml", "PHN2Zz4="),
    ],
)
def test_parse_returns_parts_unchanged(media_type, payload):
    assert parse_data_url(f"data:{media_type};base64,{payload}") == (media_type, payload)


@pytest.mark.parametrize(
    "text",
    [
        "",
        None,
        "not a data url",
        "data:image/png,iVBORw0KGgo=",
        "data:;base64,AAAA",
        "data:image/png;base64,",
        "xdata:image/png;base64,AAAA",
        "data:image/png;base64,AAAA\n",
    ],
)
def test_parse_rejects_malformed(text):
    with pytest.raises(FormatError):
        parse_data_url(text)


def test_decode_payload():
    assert decode_payload(base64.b64encode(b"\x89PNG").decode()) == b"\x89PNG"


def test_decode_payload_rejects_bad_base64():
    with pytest.raises(FormatError):
        decode_payload("@@not-base64@@")


def test_build_data_url_parses_back():
    url = build_data_url("image/png", b"\x00\x01")
    assert url == "data:image/png;base64,AAE="
    assert parse_data_url(url) == ("image/png", "AAE=")


@pytest.mark.parametrize(
    "file_type, expected",
    [("image/png", True), ("image/webp", True), ("text/plain", False), ("", False), (None, False)],
)
def test_is_image_type(file_type, expected):
    assert is_image_type(file_type) is expected
