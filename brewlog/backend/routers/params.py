from datetime import datetime, timezone
from typing import Annotated, Optional

from fastapi import Path

from ..exceptions import FieldError, FieldValidationError
from ..schemas import SQL_INT_MAX, SQL_INT_MIN
from ..validators import check_count

PathId = Annotated[int, Path(ge=SQL_INT_MIN, le=SQL_INT_MAX)]


def lookup(enum_class, value: Optional[str], field: str):
    """Parse an optional enum query parameter, rejecting unknown values with a field error."""
    if value is None or not value.strip():
        return None
    try:
        return enum_class.parse(value)
    except ValueError as exc:
        raise FieldValidationError([FieldError(field, str(exc))], str(exc)) from exc


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def count_param(count: int = 10) -> int:
    return check_count(count)
