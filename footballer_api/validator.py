"""
Validator
=========

Accumulates field errors for a single request. The first message recorded
for a key wins; later failures on the same key are ignored so every check
can run without short-circuiting.

Usage:
    v = Validator()
    v.check(page > 0, "page", "must be greater than zero")
    if not v.valid():
        raise HTTPException(status_code=422, detail=v.errors)
"""

import re
from typing import Dict, Hashable, Iterable, Pattern, Union


class Validator:
    """Write-once-per-request error accumulator."""

    def __init__(self):
        self.errors: Dict[str, str] = {}

    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        if key not in self.errors:
            self.errors[key] = message

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)


def permitted_value(value: Hashable, *permitted: Hashable) -> bool:
    """True if value is one of the permitted values."""
    return value in permitted


def matches(value: str, pattern: Union[str, Pattern[str]]) -> bool:
    """True if the whole of value matches pattern."""
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    return pattern.fullmatch(value) is not None


def unique(values: Iterable[Hashable]) -> bool:
    """True if no value appears twice."""
    seen = set()
    for value in values:
        if value in seen:
            return False
        seen.add(value)
    return True
