"""
Keyset pagination parameters

  limit       - page size, default 30; non-numeric or negative -> default
  after_id    - strict lower bound on the row id (ids sort by creation time)
  after_date  - YYYY-MM-DD lower bound for date-grouped views
"""
from dataclasses import dataclass
from datetime import date, datetime

from taskboard.errors import InvalidCursor

DEFAULT_LIMIT = 30
DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class Pagination:
    limit: int = DEFAULT_LIMIT
    after_id: str | None = None
    after_date: date | None = None


def parse_limit(raw: str | None) -> int:
    if raw is None or raw.strip() == "":
        return DEFAULT_LIMIT
    try:
        limit = int(raw)
    except ValueError:
        return DEFAULT_LIMIT
    if limit < 0:
        return DEFAULT_LIMIT
    return limit


def parse_after_date(raw: str | None) -> date | None:
    if raw is None or raw.strip() == "":
        return None
    try:
        return datetime.strptime(raw.strip(), DATE_FORMAT).date()
    except ValueError:
        raise InvalidCursor()


def parse_pagination(
    limit: str | None = None,
    after_id: str | None = None,
    after_date: str | None = None,
) -> Pagination:
    """
    Build Pagination from raw query-string values

    Raises:
        InvalidCursor: after_date is not YYYY-MM-DD
    """
    return Pagination(
        limit=parse_limit(limit),
        after_id=(after_id or "").strip() or None,
        after_date=parse_after_date(after_date),
    )
