from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, Mapping, Optional

from statboard.core.exceptions import InvalidRangeError, ValidationError, ValidationIssue
from statboard.core.filter_state import END_DATE, PUBLISHED_STATUS, START_DATE, FilterState
from statboard.core.query import parse_tri_state

_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?$")


def parse_filter_form(raw: Optional[Mapping[str, Any]]) -> FilterState:
    """
    Parse raw filter-form values into a typed FilterState.

    Validate everything BEFORE building the state, so a half-valid submission
    never replaces the one that is currently on screen.

    - start_date / end_date: "YYYY-MM-DD" (or date objects) -> datetime.date
    - published_status: ""/None -> unset, "1"/true -> True, "0"/false -> False
    - any other key: kept as-is, blank values dropped

    :raises ValidationError: bad date strings or status values (all issues reported together)
    :raises InvalidRangeError: start_date after end_date
    """
    issues: list[ValidationIssue] = []
    values: Dict[str, Any] = {}

    for name, value in (raw or {}).items():
        if _is_blank(value):
            continue

        if name in (START_DATE, END_DATE):
            parsed = _parse_date(value)
            if parsed is None:
                issues.append(
                    ValidationIssue("DATE_FORMAT", f"'{value}' is not a valid date (YYYY-MM-DD).", field=name)
                )
            else:
                values[name] = parsed
        elif name == PUBLISHED_STATUS:
            try:
                values[name] = parse_tri_state(value)
            except ValidationError as e:
                issues.extend(e.issues)
        else:
            values[name] = value.strip() if isinstance(value, str) else value

    if issues:
        raise ValidationError(issues)

    start, end = values.get(START_DATE), values.get(END_DATE)
    if start is not None and end is not None and start > end:
        raise InvalidRangeError(start, end)

    return FilterState.from_values(values)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple)) and not value:
        return True
    return False


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value if type(value) is date else value.date()
    # dcc.DatePickerSingle sends "YYYY-MM-DD", sometimes with a time part
    match = _DATE_RE.match(str(value).strip())
    if match is None:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None
