"""Pydantic views of the upstream job / operation records we consume."""

import datetime
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def parse_timestamp(value: Any) -> Optional[datetime.datetime]:
    """
    Coerce an upstream timestamp to an aware UTC datetime.

    Accepts ISO-8601 strings (with ``Z`` or an offset, or date-only),
    ``date`` and ``datetime`` objects.  Naive values are taken as UTC.
    Anything unparseable becomes None rather than an error.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        dt = value
    elif isinstance(value, datetime.date):
        dt = datetime.datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


Timestamp = Annotated[Optional[datetime.datetime], BeforeValidator(parse_timestamp)]


class UpstreamModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class Job(UpstreamModel):
    id: Optional[Union[str, int]] = None
    name: Optional[str] = None
    number: Optional[Union[int, str]] = None
    status: Optional[str] = None
    scheduled_start_utc: Timestamp = None
    scheduled_end_utc: Timestamp = None
    original_scheduled_start_utc: Timestamp = None
    original_scheduled_end_utc: Timestamp = None
    production_due_date: Timestamp = None
    sales_order_id: Optional[Union[str, int]] = None
    created_utc: Timestamp = None

    @property
    def key(self) -> Optional[str]:
        return None if self.id is None else str(self.id)

    @property
    def effective_start(self) -> Optional[datetime.datetime]:
        return (
            self.scheduled_start_utc
            or self.original_scheduled_start_utc
            or self.production_due_date
        )

    @property
    def effective_end(self) -> Optional[datetime.datetime]:
        return self.scheduled_end_utc or self.original_scheduled_end_utc


class Operation(UpstreamModel):
    id: Optional[Union[str, int]] = None
    name: Optional[str] = None
    job_id: Optional[Union[str, int]] = None
    scheduled_equipment_name: Optional[str] = None
    scheduled_start_utc: Timestamp = None
    scheduled_end_utc: Timestamp = None
    original_scheduled_start_utc: Timestamp = None
    original_scheduled_end_utc: Timestamp = None

    @property
    def effective_start(self) -> Optional[datetime.datetime]:
        return self.scheduled_start_utc or self.original_scheduled_start_utc

    @property
    def effective_end(self) -> Optional[datetime.datetime]:
        return self.scheduled_end_utc or self.original_scheduled_end_utc


class ItemReference(UpstreamModel):
    name: Optional[str] = None
    number: Optional[Union[str, int]] = None
    description: Optional[str] = None


class ItemToMake(UpstreamModel):
    item_reference: Optional[ItemReference] = None
    quantity_to_make: Optional[Union[int, float]] = None


class OperationEntry(UpstreamModel):
    """One row of a job's operation listing: the operation plus what it produces."""

    operation: Operation
    item_to_make: Optional[ItemToMake] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "OperationEntry":
        """Accept either ``{operation, itemToMake}`` or a bare operation object."""
        if isinstance(raw, dict) and isinstance(raw.get("operation"), dict):
            return cls.model_validate(raw)
        return cls(operation=Operation.model_validate(raw or {}))
