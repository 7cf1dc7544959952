# src/app/domain/models.py
"""
Domain models for the drink log and the recommendation flow.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Any, Optional, Union
from uuid import UUID, uuid4


class Rating(IntEnum):
    """Three-valued rating, persisted as 0/1/2."""
    DISLIKE = 0
    NEUTRAL = 1
    LIKE = 2

    @classmethod
    def from_value(cls, value: Any) -> Rating:
        """Decode a persisted value; anything unknown falls back to NEUTRAL."""
        if isinstance(value, bool) or not isinstance(value, int):
            return cls.NEUTRAL
        if value == 0:
            return cls.DISLIKE
        if value == 2:
            return cls.LIKE
        return cls.NEUTRAL

    @property
    def display_name(self) -> str:
        return _RATING_LABELS[self]

    @property
    def emoji(self) -> str:
        return _RATING_EMOJI[self]


_RATING_LABELS = {
    Rating.DISLIKE: "Dislike",
    Rating.NEUTRAL: "Neutral",
    Rating.LIKE: "Like",
}

_RATING_EMOJI = {
    Rating.DISLIKE: "👎",
    Rating.NEUTRAL: "😐",
    Rating.LIKE: "👍",
}


class ServingType(IntEnum):
    """How the drink was served, persisted as 0/1."""
    DRAFT = 0
    BOTTLE_OR_CAN = 1

    @classmethod
    def from_value(cls, value: Any) -> ServingType:
        """Decode a persisted value; anything but 0 is a bottle/can."""
        if isinstance(value, int) and not isinstance(value, bool) and value == 0:
            return cls.DRAFT
        return cls.BOTTLE_OR_CAN

    @property
    def display_name(self) -> str:
        return "Draft" if self is ServingType.DRAFT else "Bottle/Can"


class BeerStyle(str, Enum):
    """Closed set of style labels exchanged with the extraction model."""
    IPA = "IPA"
    PALE_ALE = "Pale Ale"
    LAGER = "Lager"
    PILSNER = "Pilsner"
    STOUT = "Stout"
    PORTER = "Porter"
    WHEAT = "Wheat"
    SOUR = "Sour"
    AMBER = "Amber"
    BROWN_ALE = "Brown Ale"
    BELGIAN = "Belgian"
    OTHER = "Other"

    @classmethod
    def from_label(cls, label: Any) -> Optional[BeerStyle]:
        """Case-insensitive lookup; unknown labels give None."""
        if not isinstance(label, str):
            return None
        wanted = label.lower()
        for style in cls:
            if style.value.lower() == wanted:
                return style
        return None

    @classmethod
    def labels(cls) -> list[str]:
        return [style.value for style in cls]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DrinkRecord:
    """
    A logged drink.
    `id` and `created_at` are fixed at creation; edits go through `with_changes`.
    """
    name: str
    brand: str = ""
    style: str = BeerStyle.OTHER.value
    rating: Rating = Rating.NEUTRAL
    serving_type: ServingType = ServingType.BOTTLE_OR_CAN
    notes: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Drink name must not be empty")
        # created_at is always aware UTC; naive values are taken as UTC
        if self.created_at.tzinfo is None:
            object.__setattr__(self, "created_at", self.created_at.replace(tzinfo=timezone.utc))
        elif self.created_at.utcoffset() != timedelta(0):
            object.__setattr__(self, "created_at", self.created_at.astimezone(timezone.utc))

    def with_changes(self, **changes: Any) -> DrinkRecord:
        """Return an edited copy that keeps the same identity."""
        for locked in ("id", "created_at"):
            if locked in changes:
                raise ValueError(f"{locked} cannot be changed")
        return replace(self, **changes)


@dataclass(frozen=True)
class Found:
    """The query refers to an already-logged drink."""
    record: DrinkRecord


@dataclass(frozen=True)
class NotFound:
    """No logged drink matches the query."""


MatchResult = Union[Found, NotFound]


@dataclass
class ExtractionResult:
    """Fields read off a label image. Each may be missing independently."""
    name: Optional[str] = None
    brand: Optional[str] = None
    style: Optional[BeerStyle] = None


@dataclass
class DrinkCheck:
    """Outcome of checking a drink name against the log."""
    query: str
    match: MatchResult
    recommendation: str

    @property
    def matched_record(self) -> Optional[DrinkRecord]:
        return self.match.record if isinstance(self.match, Found) else None


class RequestState(str, Enum):
    """Lifecycle of a single completion request."""
    IDLE = "IDLE"
    IN_FLIGHT = "IN_FLIGHT"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"

    @property
    def is_complete(self) -> bool:
        return self in (RequestState.SUCCEEDED, RequestState.FAILED)


class ChangeKind(str, Enum):
    LOADED = "LOADED"
    ADDED = "ADDED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class StoreChange:
    """Notification sent to store listeners after a change."""
    kind: ChangeKind
    record_ids: tuple[UUID, ...] = ()
