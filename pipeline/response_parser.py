"""
Provider Response Parsing.

Turns a loosely structured Messages API response into a ClassificationResult.

Policy:
- missing optional field (confidence, tags) -> None / []
- unparsable body, missing text, missing label/description -> MalformedResponse
"""

import json
import math
from typing import Any

from errors import MalformedResponse
from logging_config import get_logger
from pipeline.interfaces.classification import ClassificationResult

logger = get_logger(__name__)


def extract_text(response: Any) -> str:
    """Concatenates the text blocks of a Messages API response."""
    if not isinstance(response, dict):
        raise MalformedResponse("Provider response is not a JSON object")

    content = response.get("content")
    if not isinstance(content, list):
        raise MalformedResponse("Provider response has no content array")

    texts = [
        block.get("text")
        for block in content
        if isinstance(block, dict)
        and block.get("type") == "text"
        and isinstance(block.get("text"), str)
    ]
    text = "\n".join(t for t in texts if t.strip())
    if not text:
        raise MalformedResponse("Provider response has no text block")
    return text


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Parses the JSON object embedded in text.

    Models sometimes wrap the object in prose or code fences, so the span from
    the first '{' to the last '}' is used.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise MalformedResponse("No JSON object in provider text")

    try:
        parsed = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Invalid classification JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedResponse("Classification JSON is not an object")
    return parsed


def _required_text(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedResponse(f"Classification is missing '{key}'")
    return value.strip()


def parse_confidence(value: Any) -> float | None:
    """Numeric value in [0, 1], otherwise None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-numeric confidence: {value!r}")
        return None
    if math.isnan(confidence) or not 0.0 <= confidence <= 1.0:
        logger.debug(f"Ignoring out-of-range confidence: {value!r}")
        return None
    return confidence


def parse_tags(value: Any) -> list[str]:
    """Keeps string items in order, drops blanks and everything else."""
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def parse_classification(response: Any, model_id: str = "") -> ClassificationResult:
    """
    Builds a ClassificationResult from a full provider response.

    Args:
        response: Decoded JSON body of the provider response.
        model_id: Model identifier to attach to the result.

    Raises:
        MalformedResponse: The response cannot yield label and description.
    """
    payload = extract_json_object(extract_text(response))

    return ClassificationResult(
        label=_required_text(payload, "label"),
        description=_required_text(payload, "description"),
        confidence=parse_confidence(payload.get("confidence")),
        tags=parse_tags(payload.get("tags")),
        raw_json=response,
        model_id=model_id,
    )
