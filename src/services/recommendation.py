"""
Recommendation orchestration.

Two single-shot calls to the completion provider:
- extract_from_image: read name/brand/style off a label photo
- recommend: ask whether the user should order a drink, given their history
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence

from src.app.config import settings
from src.app.domain.models import BeerStyle, DrinkCheck, DrinkRecord, ExtractionResult, Found
from src.services.completion import CompletionProvider, CompletionRequest
from src.services.errors import ConfigurationError, ParseError
from src.services.gemini_client import GeminiClient
from src.services.image_encoding import JPEG_MIME_TYPE, encode_jpeg
from src.services.matcher import find_match
from src.services.prompt_builder import (
    RECOMMENDATION_SYSTEM_PROMPT,
    build_extraction_instruction,
    build_recommendation_prompt,
    load_prompt,
)

logger = logging.getLogger(__name__)


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def parse_extraction_response(text: str) -> ExtractionResult:
    """
    Pull the JSON object out of a free-text reply.
    Only the span from the first '{' to the last '}' is parsed.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ParseError("No JSON object in extraction response")

    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError as err:
        raise ParseError(f"Invalid JSON in extraction response: {err}") from err

    if not isinstance(parsed, dict):
        raise ParseError("Extraction response is not a JSON object")

    return ExtractionResult(
        name=_optional_str(parsed.get("name")),
        brand=_optional_str(parsed.get("brand")),
        style=BeerStyle.from_label(parsed.get("style")),
    )


class RecommendationService:
    """
    Builds prompts from the drink log and decodes the model's replies.

    Every call is one independent request; failures surface as ServiceError
    subclasses and nothing is retried here.
    """

    def __init__(
        self,
        provider: Optional[CompletionProvider] = None,
        api_key: Optional[str] = None,
        history_limit: int = settings.RECOMMENDATION_HISTORY_LIMIT,
        max_output_tokens: int = settings.MAX_OUTPUT_TOKENS,
        jpeg_quality: int = settings.JPEG_QUALITY,
    ):
        self._provider = provider or GeminiClient(model_name=settings.GEMINI_MODEL)
        self._api_key = (api_key if api_key is not None else settings.gemini_api_key()).strip()
        self.history_limit = history_limit
        self.max_output_tokens = max_output_tokens
        self.jpeg_quality = jpeg_quality

    def _require_api_key(self) -> str:
        if not self._api_key:
            raise ConfigurationError("Gemini API key not configured")
        return self._api_key

    async def extract_from_image(self, image_bytes: bytes) -> ExtractionResult:
        api_key = self._require_api_key()
        jpeg = encode_jpeg(image_bytes, quality=self.jpeg_quality)

        request = CompletionRequest(
            instruction=build_extraction_instruction(),
            image=jpeg,
            image_mime_type=JPEG_MIME_TYPE,
            max_output_tokens=self.max_output_tokens,
        )
        reply = await self._provider.complete(request, api_key)
        result = parse_extraction_response(reply)
        logger.info(
            "Extracted label: name=%r, brand=%r, style=%s",
            result.name,
            result.brand,
            result.style.value if result.style else None,
        )
        return result

    async def recommend(
        self,
        query_name: str,
        matched_record: Optional[DrinkRecord],
        history: Sequence[DrinkRecord],
    ) -> str:
        api_key = self._require_api_key()

        request = CompletionRequest(
            instruction=build_recommendation_prompt(
                query_name,
                matched_record,
                history,
                limit=self.history_limit,
            ),
            system_instruction=load_prompt(RECOMMENDATION_SYSTEM_PROMPT),
            max_output_tokens=self.max_output_tokens,
        )
        reply = await self._provider.complete(request, api_key)
        recommendation = reply.strip()
        if not recommendation:
            raise ParseError("Model returned an empty recommendation")
        return recommendation

    async def check_drink(self, query_name: str, history: Sequence[DrinkRecord]) -> DrinkCheck:
        """Match the name against the log, then ask for a recommendation."""
        match = find_match(query_name, history)
        matched = match.record if isinstance(match, Found) else None
        logger.info("Checking %r (previously logged: %s)", query_name, matched is not None)

        recommendation = await self.recommend(query_name, matched, history)
        return DrinkCheck(query=query_name, match=match, recommendation=recommendation)
