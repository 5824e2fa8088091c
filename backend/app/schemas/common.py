from __future__ import annotations
from datetime import date, datetime
from typing import Annotated, Any, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel
from app.services.time_windows import ensure_utc


def parse_timestamp(value: Any) -> datetime | None:
    """Lenient timestamp parsing: ISO strings (with or without `Z`), dates, datetimes.

    Unparseable values become None so one malformed field never sinks a whole record.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return ensure_utc(datetime(value.year, value.month, value.day))
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(raw))
        except ValueError:
            return None
    return None


Timestamp = Annotated[Optional[datetime], BeforeValidator(parse_timestamp)]


class PortalModel(BaseModel):
    """Base for records exchanged with the portal API (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )
