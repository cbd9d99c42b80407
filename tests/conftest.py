import io
import os

import pytest
from PIL import Image

os.environ.setdefault("GEMINI_API_KEY", "test-key")

from google.genai import types  # noqa: E402

import gemini_service  # noqa: E402


def make_image_bytes(fmt="PNG", size=(4, 4)):
    buf = io.BytesIO()
    Image.new("RGBA" if fmt == "PNG" else "RGB", size, (255, 0, 0)).save(buf, format=fmt)
    return buf.getvalue()


def make_response(parts, finish_reason=types.FinishReason.STOP):
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=parts),
                finish_reason=finish_reason,
            )
        ]
    )


def image_part(data, mime_type="image/png"):
    return types.Part(inline_data=types.Blob(data=data, mime_type=mime_type))


class FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return self.response


class FakeClient:
    def __init__(self, response=None, error=None):
        self.models = FakeModels(response=response, error=error)


@pytest.fixture
def png_bytes():
    return make_image_bytes()


@pytest.fixture
def fake_client(monkeypatch):
    def install(response=None, error=None):
        client = FakeClient(response=response, error=error)
        monkeypatch.setattr(gemini_service, "client", client)
        return client

    return install
