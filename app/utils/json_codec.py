# app/utils/json_codec.py
"""
Encode/decode pairs for the JSON text columns on documents.
  image_url       → JSON array of data-URL strings
  analysis_result → JSON object returned by the classifier
Decoding raises CodecError instead of returning partial data.
"""

import json
from typing import Any

from app.errors import CodecError


def encode_images(images: list[str]) -> str:
    return json.dumps(list(images))


def decode_images(raw: str | None) -> list[str]:
    """Decode the stored image list. A missing column decodes to []."""
    if not raw:
        return []
    value = _loads(raw, "image_url")
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise CodecError("image_url is not a JSON array of strings")
    return value


def encode_analysis(analysis: dict[str, Any]) -> str:
    return json.dumps(analysis, ensure_ascii=False)


def decode_analysis(raw: str | None) -> dict[str, Any]:
    if not raw:
        raise CodecError("analysis_result is empty")
    value = _loads(raw, "analysis_result")
    if not isinstance(value, dict):
        raise CodecError("analysis_result is not a JSON object")
    return value


def _loads(raw: str, column: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise CodecError(f"{column} holds malformed JSON: {e}") from e
