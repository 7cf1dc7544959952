from __future__ import annotations

from collections import Counter
from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence

from src.app.domain.models import BeerStyle, DrinkRecord, Rating
from src.services.errors import ConfigurationError

PROMPT_DIR = Path(__file__).parent / "prompts"
RECOMMENDATION_SYSTEM_PROMPT = "RECOMMENDATION_SYSTEM_PROMPT.txt"
EXTRACTION_PROMPT = "EXTRACTION_PROMPT.txt"

HISTORY_HEADER = "User's beer history:"


@lru_cache(maxsize=None)
def load_prompt(file_name: str) -> str:
    path = PROMPT_DIR / file_name
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError as not_found_error:
        raise ConfigurationError(f"Prompt file not found: {path}") from not_found_error
    except OSError as io_error:
        raise ConfigurationError(f"Unable to read prompt file: {io_error}") from io_error


def build_extraction_instruction() -> str:
    return load_prompt(EXTRACTION_PROMPT).format(styles=", ".join(BeerStyle.labels()))


def format_history(history: Sequence[DrinkRecord]) -> str:
    lines = [HISTORY_HEADER]
    for record in history:
        lines.append(f"- {record.name} ({record.style}): {record.rating.display_name}")
    return "\n".join(lines)


def tally_styles(history: Sequence[DrinkRecord]) -> tuple[Counter[str], Counter[str]]:
    """Count styles among liked and disliked records. Neutral ratings are ignored."""
    liked: Counter[str] = Counter()
    disliked: Counter[str] = Counter()
    for record in history:
        if record.rating is Rating.LIKE:
            liked[record.style] += 1
        elif record.rating is Rating.DISLIKE:
            disliked[record.style] += 1
    return liked, disliked


def format_style_counts(counts: Counter[str]) -> str:
    return ", ".join(f"{style}: {count}" for style, count in counts.items())


def build_repeat_prompt(query_name: str, matched: DrinkRecord, history: Sequence[DrinkRecord]) -> str:
    notes_line = f'Their notes: "{matched.notes}"' if matched.notes is not None else ""
    return (
        f'The user is looking at "{query_name}" which they have tried before.\n'
        f"They rated it: {matched.rating.display_name}\n"
        f"{notes_line}\n"
        "\n"
        f"{format_history(history)}\n"
        "\n"
        "Based on their rating and overall preferences, give a brief (2-3 sentences) "
        "personalized recommendation about whether they should order this beer again.\n"
        "Be conversational and helpful."
    )


def build_discovery_prompt(query_name: str, history: Sequence[DrinkRecord]) -> str:
    liked, disliked = tally_styles(history)
    return (
        f'The user is considering "{query_name}" which they have NOT tried before.\n'
        "\n"
        f"{format_history(history)}\n"
        "\n"
        f"Liked styles: {format_style_counts(liked)}\n"
        f"Disliked styles: {format_style_counts(disliked)}\n"
        "\n"
        "Based on their preferences, give a brief (2-3 sentences) personalized "
        "recommendation about whether this beer might be a good choice for them.\n"
        "Consider if this beer's likely style matches their preferences.\n"
        "Be conversational and helpful."
    )


def build_recommendation_prompt(
    query_name: str,
    matched: Optional[DrinkRecord],
    history: Sequence[DrinkRecord],
    limit: int = 20,
) -> str:
    recent_history = list(history[:limit])
    if matched is not None:
        return build_repeat_prompt(query_name, matched, recent_history)
    return build_discovery_prompt(query_name, recent_history)
