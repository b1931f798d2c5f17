"""
Classification Service - Image Recognition via the Anthropic Messages API.

Implements ClassificationInterface. Validates the payload locally, sends one
request (retried once on transient failures) and parses the answer
defensively.
"""

import base64
import time

import requests

from config import get_config
from errors import InvalidImage, MalformedResponse, ProviderUnavailable, UpstreamError
from logging_config import get_logger
from pipeline.interfaces.classification import (
    ClassificationInterface,
    ClassificationResult,
)
from pipeline.response_parser import parse_classification
from utils.image_ops import probe_image

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a friendly nature guide who classifies landscapes, plants, animals, "
    "and weather. Avoid brand names. Be concise."
)
USER_PROMPT = (
    "Identify the natural scene. Return strict JSON with fields: label (short name), "
    "description (1-2 sentences), tags (array of 3-6 lowercase words), "
    "confidence (0-1). No markdown."
)

TRANSIENT_STATUS_CODES = {408, 429, 500, 502, 503, 504, 529}

# Media types the Messages API accepts for image blocks
SUPPORTED_MIME_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class _TransientFailure(Exception):
    """A provider failure worth one retry."""


class ClassificationService(ClassificationInterface):
    """
    Classifies images with an Anthropic model.

    Features:
    - Rejects empty and non-image payloads before calling the provider
    - Exactly one retry after a fixed backoff on transient failures
    - "missing -> null, unparsable -> reject" response parsing
    """

    def __init__(
        self,
        api_key: str = None,
        model: str = None,
        api_url: str = None,
        api_version: str = None,
        max_tokens: int = None,
        timeout: float = None,
        retry_backoff: float = None,
        session: requests.Session = None,
    ):
        """
        Initialize the classification service.

        Unset arguments fall back to the application configuration.

        Args:
            session: Optional requests session (tests inject a mock).
        """
        config = get_config()
        self._api_key = api_key if api_key is not None else config["ANTHROPIC_API_KEY"]
        self._model = model or config["ANTHROPIC_MODEL"]
        self._api_url = api_url or config["ANTHROPIC_API_URL"]
        self._api_version = api_version or config["ANTHROPIC_VERSION"]
        self._max_tokens = max_tokens or config["CLASSIFIER_MAX_TOKENS"]
        self._timeout = timeout if timeout is not None else config["CLASSIFIER_TIMEOUT"]
        self._retry_backoff = (
            retry_backoff
            if retry_backoff is not None
            else config["CLASSIFIER_RETRY_BACKOFF"]
        )
        self._session = session or requests.Session()

    def classify(self, data: bytes, mime: str) -> ClassificationResult:
        """
        Classifies an image.

        Args:
            data: Raw image bytes.
            mime: Declared MIME type.

        Returns:
            ClassificationResult parsed from the provider answer.
        """
        self.validate_image(data, mime)
        body = self._build_request_body(data, mime)

        try:
            response = self._send(body)
        except _TransientFailure as first:
            logger.warning(
                f"Classification request failed ({first}), retrying in {self._retry_backoff}s"
            )
            time.sleep(self._retry_backoff)
            try:
                response = self._send(body)
            except _TransientFailure as second:
                logger.error(f"Classification provider unavailable: {second}")
                raise ProviderUnavailable(
                    f"Provider unreachable after retry: {second}"
                ) from second

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponse(f"Provider response is not JSON: {e}") from e

        result = parse_classification(payload, model_id=self.get_model_id())
        logger.info(
            f"Classified image as '{result.label}' (confidence={result.confidence})"
        )
        return result

    def get_model_id(self) -> str:
        """
        Returns the model identifier.

        Returns:
            Configured Anthropic model name.
        """
        return self._model

    @staticmethod
    def validate_image(data: bytes, mime: str) -> None:
        """Raises InvalidImage for empty, unsupported or non-image payloads."""
        if not data:
            raise InvalidImage("Image payload is empty")
        if not mime or mime.lower() not in SUPPORTED_MIME_TYPES:
            raise InvalidImage(f"Unsupported content type: {mime or 'unknown'}")
        if probe_image(data) is None:
            raise InvalidImage("Payload is not a recognizable image")

    def _build_request_body(self, data: bytes, mime: str) -> dict:
        encoded = base64.standard_b64encode(data).decode("ascii")
        return {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "system": SYSTEM_PROMPT,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": mime.lower(),
                                "data": encoded,
                            },
                        },
                        {"type": "text", "text": USER_PROMPT},
                    ],
                }
            ],
        }

    def _send(self, body: dict) -> requests.Response:
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": self._api_version,
            "content-type": "application/json",
        }
        try:
            response = self._session.post(
                self._api_url, json=body, headers=headers, timeout=self._timeout
            )
        except (
            requests.ConnectionError,
            requests.Timeout,
            requests.exceptions.ChunkedEncodingError,
        ) as e:
            raise _TransientFailure(str(e)) from e
        except requests.RequestException as e:
            logger.error(f"Classification request failed: {e}", exc_info=True)
            raise UpstreamError(f"Provider request failed: {e}") from e

        if response.status_code in TRANSIENT_STATUS_CODES:
            raise _TransientFailure(f"HTTP {response.status_code}")
        if not 200 <= response.status_code < 300:
            logger.error(
                f"Classification provider error {response.status_code}: {response.text[:500]}"
            )
            raise UpstreamError(f"Provider error {response.status_code}")
        return response
