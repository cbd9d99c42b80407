"""
Background removal through the Gemini image model.

One upload becomes one `generate_content` call carrying the image and the
fixed instruction from `system_prompt`. The first inline image in the reply
is the result; everything else is mapped onto the `errors` hierarchy.
"""

import io
import logging
import time

import httpx
from PIL import Image
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from google.genai.types import Modality

import config
from data_url import decode_payload, parse_data_url
from errors import ContentPolicyError, NoOutputError, TransportError
from system_prompt import REMOVE_BG_PROMPT

logger = logging.getLogger(__name__)

NORMAL_FINISH_REASON = "STOP"

client = genai.Client(
    api_key=config.require_api_key(),
    http_options=types.HttpOptions(timeout=config.TIMEOUT_MS),
)


def build_request(data_url):
    """Turn a data URL into the `contents` and `config` for generate_content."""
    mime_type, payload = parse_data_url(data_url)
    image_part = types.Part.from_bytes(data=decode_payload(payload), mime_type=mime_type)
    request_config = types.GenerateContentConfig(
        response_modalities=[Modality.IMAGE, Modality.TEXT],
    )
    return [image_part, REMOVE_BG_PROMPT], request_config


def _reason_name(reason):
    # SDK enums are str subclasses; plain strings pass through
    return getattr(reason, "value", reason)


def extract_image(response):
    """Return the first inline payload of the response or raise why there is none."""
    candidates = response.candidates or []
    if not candidates:
        feedback = response.prompt_feedback
        if feedback is not None and feedback.block_reason:
            raise ContentPolicyError(_reason_name(feedback.block_reason))
        raise NoOutputError()

    candidate = candidates[0]
    parts = candidate.content.parts if candidate.content else None
    for part in parts or []:
        if part.inline_data and part.inline_data.data:
            return part.inline_data.data

    reason = _reason_name(candidate.finish_reason)
    # a missing reason is not a refusal, so it reports as no output
    if reason and reason != NORMAL_FINISH_REASON:
        raise ContentPolicyError(reason)
    raise NoOutputError()


def ensure_png(image_bytes):
    """Re-encode the model output as PNG when it arrives in another format."""
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise NoOutputError(f"The API returned unreadable image data: {e}") from e

    if img.format == "PNG":
        return image_bytes

    buf = io.BytesIO()
    img.convert("RGBA").save(buf, format="PNG")
    return buf.getvalue()


def remove_background(data_url):
    """Send one image to the model and return the background-free PNG bytes."""
    contents, request_config = build_request(data_url)

    start = time.time()
    try:
        response = client.models.generate_content(
            model=config.IMAGE_MODEL, contents=contents, config=request_config,
        )
    except genai_errors.APIError as e:
        logger.error("Gemini API error: %s", e)
        raise TransportError(e.message or str(e)) from e
    except httpx.HTTPError as e:
        logger.error("Transport error calling Gemini: %s", e)
        raise TransportError(str(e)) from e

    image_bytes = extract_image(response)
    logger.info(
        "Background removed in %.1fs (%d bytes)", time.time() - start, len(image_bytes)
    )
    return ensure_png(image_bytes)
