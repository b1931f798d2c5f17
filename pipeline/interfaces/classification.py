"""
Classification Interface - Image Recognition.

Defines the contract for classifying a captured image through an external
recognition provider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ClassificationResult:
    """
    Normalized result of a classification operation.

    Attributes:
        label: Short name of what the image shows (e.g., "Red Fox").
        description: One or two sentences of free text.
        confidence: Provider confidence (0.0 to 1.0), None if not given.
        tags: Ordered list of keywords.
        raw_json: The provider's complete response, kept for diagnostics.
        model_id: Identifier of the model used.
    """

    label: str
    description: str
    confidence: float | None = None
    tags: list[str] = field(default_factory=list)
    raw_json: dict[str, Any] | None = None
    model_id: str = ""


class ClassificationInterface(ABC):
    """
    Interface for image classification.

    Implementations should handle:
    - Payload validation before any network call
    - A single retry on transient provider failures
    - Defensive parsing into ClassificationResult
    """

    @abstractmethod
    def classify(self, data: bytes, mime: str) -> ClassificationResult:
        """
        Classifies an image.

        Args:
            data: Raw image bytes.
            mime: Declared MIME type (e.g., "image/jpeg").

        Returns:
            ClassificationResult with label, description, tags and confidence.

        Raises:
            InvalidImage: Empty or non-image payload.
            ProviderUnavailable: Provider unreachable after one retry.
            MalformedResponse: Provider answer could not be parsed.
        """
        pass

    @abstractmethod
    def get_model_id(self) -> str:
        """
        Returns the model identifier.

        Returns:
            String identifying the provider model.
        """
        pass
