from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class StatboardError(Exception):
    """Base exception for all statboard errors"""
    pass

class ConfigError(StatboardError):
    """Invalid or inconsistent global.json / source config"""
    pass

class InvalidIntervalError(StatboardError):
    """
    A widget asked for a bucket size the query builder does not support.
    This is a programming error in widget code, not a user-facing condition.
    """
    pass

class DataSourceError(StatboardError):
    """
    The data source failed to answer a query
    timeouts, lost connections, unknown source/field, etc
    """
    pass


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    field: Optional[str] = None


class ValidationError(StatboardError):
    """Raw filter input that can't be turned into a FilterState"""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("\n".join(f"{i.code}: {i.message}" for i in issues))

    def messages_by_field(self) -> dict[str, list[str]]:
        out: dict[str, list[str]] = {}
        for issue in self.issues:
            out.setdefault(issue.field or "__all__", []).append(issue.message)
        return out


class InvalidRangeError(ValidationError):
    """start_date falls after end_date"""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(
            [
                ValidationIssue(
                    "RANGE_ORDER",
                    f"Start date {start} is after end date {end}.",
                    field="end_date",
                )
            ]
        )
