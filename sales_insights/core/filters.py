from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime


class ValidationError(ValueError):
    """Raised when a request parameter is missing or cannot be understood."""


_MONTHS: dict[str, int] = {}
for _number in range(1, 13):
    _MONTHS[calendar.month_name[_number].lower()] = _number
    _MONTHS[calendar.month_abbr[_number].lower()] = _number


def parse_month(selector: str | int | None) -> int:
    """Normalise a month selector to its calendar number.

    Accepts a month name ("March"), a three-letter abbreviation ("mar") or a
    number between 1 and 12 ("3", "03" or 3). Matching is case-insensitive.
    """
    if selector is None or (isinstance(selector, str) and not selector.strip()):
        raise ValidationError("month is required")
    if isinstance(selector, bool):
        raise ValidationError(f"Invalid month: {selector!r}")
    if isinstance(selector, int):
        number = selector
    else:
        text = selector.strip().lower()
        if text in _MONTHS:
            return _MONTHS[text]
        if not text.isdecimal():
            raise ValidationError(f"Invalid month: {selector!r}")
        number = int(text)
    if not 1 <= number <= 12:
        raise ValidationError(f"month must be between 1 and 12, got {number}")
    return number


def month_of(value: str | date | datetime) -> int:
    """Return the calendar month of a sale date as written, without timezone conversion."""
    if isinstance(value, (date, datetime)):
        return value.month
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).month
    except ValueError:
        raise ValueError(f"Unrecognized dateOfSale: {value!r}") from None


def in_month(value: str | date | datetime, month: str | int) -> bool:
    return month_of(value) == parse_month(month)


def format_price(price: float) -> str:
    price = float(price)
    if price.is_integer():
        return str(int(price))
    return repr(price)


def matches_search(title, description, price, text) -> bool:
    """Case-insensitive substring test across title, description and price."""
    if not text:
        return True
    needle = str(text).casefold()
    haystacks = (title or "", description or "", format_price(price or 0))
    return any(needle in str(value).casefold() for value in haystacks)


@dataclass(frozen=True)
class TransactionFilter:
    """Conjunction of month membership and free-text search."""

    month: int | None = None
    search: str | None = None

    def where(self) -> tuple[str, list[object]]:
        conditions: list[str] = []
        params: list[object] = []
        if self.month is not None:
            conditions.append("sale_month = ?")
            params.append(self.month)
        if self.search:
            conditions.append("matches_search(title, description, price, ?)")
            params.append(self.search)
        where = " WHERE " + " AND ".join(conditions) if conditions else ""
        return where, params
