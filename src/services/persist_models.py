# src/services/persist_models.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional
from uuid import UUID

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from src.app.domain.errors import RecordDecodeError
from src.app.domain.models import BeerStyle, DrinkRecord, Rating, ServingType

# Numeric dates are seconds since this instant (the iOS app's default encoding).
REFERENCE_EPOCH = datetime(2001, 1, 1, tzinfo=timezone.utc)


class DrinkRecordPayload(BaseModel):
    id: UUID
    name: str = Field(min_length=1)
    brand: str = ""
    style: str = BeerStyle.OTHER.value
    ratingValue: int = Rating.NEUTRAL.value
    typeValue: int = ServingType.BOTTLE_OR_CAN.value
    notes: Optional[str] = None
    dateAdded: datetime

    @field_validator("dateAdded", mode="before")
    @classmethod
    def _decode_reference_date(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return REFERENCE_EPOCH + timedelta(seconds=value)
        return value

    @field_validator("dateAdded")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_record(cls, record: DrinkRecord) -> DrinkRecordPayload:
        return cls(
            id=record.id,
            name=record.name,
            brand=record.brand,
            style=record.style,
            ratingValue=record.rating.value,
            typeValue=record.serving_type.value,
            notes=record.notes,
            dateAdded=record.created_at,
        )

    def to_record(self) -> DrinkRecord:
        return DrinkRecord(
            id=self.id,
            name=self.name,
            brand=self.brand,
            style=self.style,
            rating=Rating.from_value(self.ratingValue),
            serving_type=ServingType.from_value(self.typeValue),
            notes=self.notes,
            created_at=self.dateAdded,
        )


_PAYLOAD_LIST = TypeAdapter(list[DrinkRecordPayload])


def encode_records(records: Iterable[DrinkRecord]) -> bytes:
    payloads = [DrinkRecordPayload.from_record(record) for record in records]
    return _PAYLOAD_LIST.dump_json(payloads)


def decode_records(data: bytes) -> list[DrinkRecord]:
    try:
        payloads = _PAYLOAD_LIST.validate_json(data)
    except ValidationError as err:
        raise RecordDecodeError(f"{err.error_count()} invalid field(s)") from err
    try:
        return [payload.to_record() for payload in payloads]
    except ValueError as err:
        raise RecordDecodeError(str(err)) from err
