"""
Gemini Captioner Adapter for Guess The Child

Sends a captioning request (two inline photos plus the prompt) to Google
Gemini through the google-genai SDK and returns the generated text.
"""

import logging
from typing import List, Optional

from google import genai
from google.genai import types

from ..core.config import DEFAULT_MODEL, MissingCredentialError
from ..core.pipeline import CaptionRequest, ContentPart, ImagePart, TextPart

logger = logging.getLogger(__name__)


class CaptioningServiceError(RuntimeError):
    """Raised when Gemini fails or returns no text."""


class GeminiCaptioner:
    """Gemini model adapter for pair captioning."""

    def __init__(self,
                 api_key: Optional[str],
                 model_name: str = DEFAULT_MODEL,
                 client: Optional[genai.Client] = None):
        """Initialize Gemini captioner.

        Args:
            api_key: Gemini API key
            model_name: Model used when a request does not name one
            client: Pre-built client (tests inject a fake here)

        Raises:
            MissingCredentialError: If no API key is given and no client injected
        """
        if client is None and not api_key:
            raise MissingCredentialError("API_KEY environment variable not set.")

        self.model_name = model_name
        self.client = client if client is not None else genai.Client(api_key=api_key)

        logger.info(f"Initialized Gemini captioner with model: {self.model_name}")

    @staticmethod
    def _to_part(part: ContentPart) -> types.Part:
        if isinstance(part, ImagePart):
            return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
        if isinstance(part, TextPart):
            return types.Part.from_text(text=part.text)
        raise TypeError(f"Unsupported content part: {type(part).__name__}")

    def build_contents(self, request: CaptionRequest) -> List[types.Part]:
        return [self._to_part(part) for part in request.parts]

    def generate(self, request: CaptionRequest) -> str:
        """Generate a caption for one request.

        Args:
            request: Ordered content parts and model identifier

        Returns:
            Caption text, stripped of surrounding whitespace

        Raises:
            CaptioningServiceError: If the call fails or the response has no text
        """
        model = request.model or self.model_name
        contents = self.build_contents(request)

        logger.debug(f"Requesting caption from {model} with {len(contents)} part(s)")
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=contents,
            )
        except Exception as e:
            logger.error(f"Error calling Gemini API: {e}")
            raise CaptioningServiceError("Failed to generate content from Gemini API.") from e

        text = (response.text or "").strip()
        if not text:
            logger.error("Gemini API returned an empty response")
            raise CaptioningServiceError("Failed to generate content from Gemini API.")

        return text
