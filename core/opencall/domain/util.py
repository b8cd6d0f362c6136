"""Helpers and utilities."""

from typing import Any, Optional, Union
from datetime import datetime
from dateutil.parser import parse as parse_date
from pytz import UTC


def get_tzaware_utc_now() -> datetime:
    """Generate a datetime for the current moment in UTC."""
    return datetime.now(UTC)


def coerce_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse ISO strings and localize naive datetimes to UTC."""
    if value is None:
        return None
    if isinstance(value, str):
        value = parse_date(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def is_blank(value: Any) -> bool:
    """A missing value or a string with no printable content."""
    return value is None or (isinstance(value, str) and not value.strip())
