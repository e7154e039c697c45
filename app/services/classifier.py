# app/services/classifier.py
"""
Document Classifier client: a hosted multimodal model behind a tiny interface:
submit one prompt plus image parts, get the model's text back.

The production implementation wraps the Anthropic messages API. It is built
once at startup by build_classifier() and handed to request handlers through
the get_classifier dependency, so tests can swap in a fake.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import anthropic
from fastapi import Request

from app.config import Settings
from app.errors import ClassifierConfigError, ClassifierError
from app.utils.logger import get_logger

logger = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"


@dataclass(frozen=True)
class ImagePart:
    mime_type: str     # image/jpeg | image/png | application/pdf ...
    data: str          # base64 payload, no data-URL header


class Classifier(ABC):

    @abstractmethod
    def generate(self, prompt: str, images: list[ImagePart]) -> str:
        """Send prompt + images in a single call and return the raw text answer."""


def _content_block(img: ImagePart) -> dict:
    """PDF pages go up as document blocks, everything else as image blocks."""
    block_type = "document" if img.mime_type == PDF_MIME_TYPE else "image"
    return {
        "type": block_type,
        "source": {"type": "base64", "media_type": img.mime_type, "data": img.data},
    }


class AnthropicClassifier(Classifier):

    def __init__(self, api_key: str, model: str, max_tokens: int = 1024):
        self.model = model
        self.max_tokens = max_tokens
        self.client = anthropic.Anthropic(api_key=api_key)

    def generate(self, prompt: str, images: list[ImagePart]) -> str:
        content = [_content_block(img) for img in images]
        content.append({"type": "text", "text": prompt})

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIError as e:
            logger.error(f"[CLASSIFIER] {self.model} call failed: {e}")
            raise ClassifierError() from e

        text = "".join(block.text for block in response.content if block.type == "text")
        logger.info(
            f"[CLASSIFIER] {self.model} | {len(images)} image(s) | "
            f"{len(text)} chars | stop={response.stop_reason}"
        )
        return text


def build_classifier(settings: Settings) -> Classifier:
    """Construct the configured classifier. A missing API key is fatal."""
    if not settings.ANTHROPIC_API_KEY:
        raise ClassifierConfigError("ANTHROPIC_API_KEY is not set, document analysis cannot run")
    return AnthropicClassifier(
        api_key=settings.ANTHROPIC_API_KEY,
        model=settings.CLASSIFIER_MODEL,
        max_tokens=settings.CLASSIFIER_MAX_TOKENS,
    )


def get_classifier(request: Request) -> Classifier:
    """FastAPI dependency: the classifier built during startup."""
    classifier = getattr(request.app.state, "classifier", None)
    if classifier is None:
        raise ClassifierConfigError("Classifier not initialised; was the startup hook run?")
    return classifier
