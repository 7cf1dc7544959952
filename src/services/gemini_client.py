from __future__ import annotations

import logging
import threading
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from src.services.completion import CompletionProvider, CompletionRequest
from src.services.errors import (
    ConfigurationError,
    ParseError,
    ProviderError,
    RateLimitedError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "gemini-2.5-flash"


def _is_rate_limited_error(exc: genai_errors.APIError) -> bool:
    if exc.code == 429:
        return True
    return "RESOURCE_EXHAUSTED" in f"{exc.status or ''} {exc.message or ''}"


class GeminiClient(CompletionProvider):
    def __init__(self, model_name: str = DEFAULT_MODEL_NAME) -> None:
        self.model_name = model_name
        self._client: Optional[genai.Client] = None
        self._client_key: Optional[str] = None
        self._lock = threading.Lock()

    def _get_client(self, api_key: str) -> genai.Client:
        if not api_key:
            raise ConfigurationError("Missing Google API key.")
        with self._lock:
            if self._client is None or self._client_key != api_key:
                self._client = genai.Client(api_key=api_key)
                self._client_key = api_key
            return self._client

    def _build_parts(self, request: CompletionRequest) -> list[types.Part]:
        parts = [types.Part(text=request.instruction)]
        if request.image:
            parts.append(types.Part.from_bytes(data=request.image, mime_type=request.image_mime_type))
        return parts

    def _build_config(self, request: CompletionRequest) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=request.system_instruction,
            max_output_tokens=request.max_output_tokens,
        )

    async def complete(self, request: CompletionRequest, api_key: str) -> str:
        client = self._get_client(api_key)
        logger.info(
            "Sending Gemini request: model=%s, image=%s, max_output_tokens=%d",
            self.model_name,
            request.image is not None,
            request.max_output_tokens,
        )

        try:
            response = await client.aio.models.generate_content(
                model=self.model_name,
                contents=self._build_parts(request),
                config=self._build_config(request),
            )
        except genai_errors.APIError as err:
            if _is_rate_limited_error(err):
                raise RateLimitedError() from err
            if not err.message:
                raise TransportError(err.code) from err
            raise ProviderError(err.message, status_code=err.code) from err
        except httpx.HTTPError as err:
            raise TransportError(None, str(err)) from err

        text = response.text
        if not text:
            raise ParseError("Model response did not include text content.")
        return text
