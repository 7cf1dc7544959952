"""
Decides whether a drink name refers to something already in the log.

Rules run in order and the first one that hits wins: exact match after
normalization, substring containment either way, then the first record whose
similarity clears SIMILARITY_THRESHOLD.
"""
from __future__ import annotations

import logging
from typing import Sequence

from src.app.domain.models import DrinkRecord, Found, MatchResult, NotFound

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.7


def normalize(text: str) -> str:
    # Single replace pass: three spaces collapse to two, not one.
    return text.lower().strip().replace("  ", " ")


def levenshtein_distance(a: str, b: str) -> int:
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current[j] = previous[j - 1]
            else:
                current[j] = min(
                    previous[j] + 1,       # deletion
                    current[j - 1] + 1,    # insertion
                    previous[j - 1] + 1,   # substitution
                )
        previous = current
    return previous[len(b)]


def similarity(a: str, b: str) -> float:
    """1.0 for identical strings, 0.0 when nothing lines up."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


def find_match(
    query: str,
    records: Sequence[DrinkRecord],
    threshold: float = SIMILARITY_THRESHOLD,
) -> MatchResult:
    normalized_query = normalize(query)
    if not normalized_query or not records:
        return NotFound()

    candidates = [(record, normalize(record.name)) for record in records]

    for record, name in candidates:
        if name == normalized_query:
            logger.debug("Exact match for %r: %s", query, record.id)
            return Found(record)

    for record, name in candidates:
        if normalized_query in name or name in normalized_query:
            logger.debug("Containment match for %r: %s", query, record.id)
            return Found(record)

    for record, name in candidates:
        score = similarity(name, normalized_query)
        if score >= threshold:
            logger.debug("Similarity match for %r: %s (%.3f)", query, record.id, score)
            return Found(record)

    return NotFound()
