from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CompletionRequest:
    instruction: str
    system_instruction: Optional[str] = None
    image: Optional[bytes] = None
    image_mime_type: str = "image/jpeg"
    max_output_tokens: int = 200


class CompletionProvider(ABC):
    """
    A model that turns one prompt (text and optionally an image) into text.

    Implementations:
    - GeminiClient: Google Gemini via the google-genai SDK
    """

    @abstractmethod
    async def complete(self, request: CompletionRequest, api_key: str) -> str:
        """
        Send one request and return the raw reply text.

        Raises:
            ConfigurationError: If api_key is empty
            TransportError: On non-success responses or connection failures
            ProviderError: When the provider reports an error message
            ParseError: When the reply carries no text
        """
        pass
