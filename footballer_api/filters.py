"""
Filters and Pagination
======================

Turns raw query-string values into a validated page and sort request, and
computes the pagination metadata returned alongside list results.
"""

import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from pydantic import BaseModel

from footballer_api.config import settings
from footballer_api.validator import Validator, matches, permitted_value

# Optional sign and ASCII digits only: no spaces, underscores or other scripts
INTEGER_RX = re.compile(r"[+-]?[0-9]+")


@dataclass
class Filters:
    page: int = 1
    page_size: int = 20
    sort: str = "id"
    sort_safelist: Sequence[str] = field(default_factory=lambda: ["id"])

    def sort_column(self) -> str:
        """
        Column name for the requested sort key, without the "-" prefix.

        The key is checked against the safelist again here so that an
        unvalidated Filters can never put an arbitrary column into ORDER BY.
        """
        if self.sort not in self.sort_safelist:
            raise ValueError(f"unsafe sort parameter: {self.sort}")
        return self.sort.removeprefix("-")

    def sort_direction(self) -> str:
        return "DESC" if self.sort.startswith("-") else "ASC"

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def spell_count(n: int) -> str:
    """10_000_000 -> "10 million", 2_500 -> "2,500"."""
    if n >= 1_000_000 and n % 1_000_000 == 0:
        return f"{n // 1_000_000} million"
    return f"{n:,}"


def validate_filters(v: Validator, filters: Filters) -> None:
    v.check(filters.page > 0, "page", "must be greater than zero")
    v.check(filters.page <= settings.max_page, "page", f"must be a maximum of {spell_count(settings.max_page)}")
    v.check(filters.page_size > 0, "page_size", "must be greater than zero")
    v.check(filters.page_size <= settings.max_page_size, "page_size", f"must be a maximum of {settings.max_page_size}")

    v.check(permitted_value(filters.sort, *filters.sort_safelist), "sort", "invalid sort value")


class Metadata(BaseModel):
    """Pagination summary. All zeros when nothing matched."""
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()

    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=(total_records + page_size - 1) // page_size,
        total_records=total_records,
    )


# =============================================================================
# QUERY-STRING READERS
# =============================================================================

def read_string(qs: Mapping[str, str], key: str, default: str) -> str:
    value = qs.get(key)
    if not value:
        return default
    return value


def read_csv(qs: Mapping[str, str], key: str, default: List[str]) -> List[str]:
    value = qs.get(key)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


def read_int(qs: Mapping[str, str], key: str, default: int, v: Validator) -> int:
    value: Optional[str] = qs.get(key)
    if not value:
        return default
    if not matches(value, INTEGER_RX):
        v.add_error(key, "must be an integer value")
        return default
    return int(value)
