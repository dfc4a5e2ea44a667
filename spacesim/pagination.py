"""Page, page size and ordering options read from a request's query string."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

_INT_MAX = 2**63 - 1
_INT_MIN = -(2**63)
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _query_value(query: Mapping[str, Any], name: str) -> str:
    """Return the first value of a query parameter, or an empty string."""
    value = query.get(name)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return str(value[0]) if value else ""
    return str(value)


def _to_int(text: str) -> int:
    """Parse a decimal integer; malformed input gives 0, overflow is clamped."""
    if not _INTEGER.fullmatch(text):
        return 0
    return max(_INT_MIN, min(_INT_MAX, int(text)))


@dataclass
class Pagination:
    """Which slice of a listing to return and how to order it."""

    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE
    order_by: str = ""

    def offset(self) -> int:
        """Number of rows to skip before the requested page."""
        return (self.page - 1) * self.per_page

    def limit(self) -> int:
        """Maximum number of rows in one page."""
        return self.per_page

    def order_by_field(self, allowed_order_by: Iterable[str], default_order_by: str) -> str:
        """The lower-cased field to order by, or the default when it is not allowed."""
        field = self.order_by.split(",", 1)[0].lower()
        if field not in list(allowed_order_by):
            return default_order_by
        return field

    def order_by_direction(self) -> str:
        """Either ``"desc"`` when requested after the comma, or ``"asc"``."""
        parts = self.order_by.split(",")
        if len(parts) > 1 and parts[1] == "desc":
            return "desc"
        return "asc"

    def to_dict(self) -> dict[str, Any]:
        """The JSON form used in listing responses."""
        return {"Page": self.page, "PerPage": self.per_page, "OrderBy": self.order_by}


def get_pagination(query: Mapping[str, Any]) -> Pagination:
    """Build a :class:`Pagination` from query parameters.

    ``query`` may be any mapping whose values are strings or lists of strings.
    """
    page_text = _query_value(query, "page") or str(DEFAULT_PAGE)
    per_page_text = _query_value(query, "per_page") or str(DEFAULT_PER_PAGE)
    order_by = _query_value(query, "order_by")

    page = _to_int(page_text)
    per_page = min(_to_int(per_page_text), MAX_PER_PAGE)

    return Pagination(page=page, per_page=per_page, order_by=order_by)