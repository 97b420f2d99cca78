from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

# Recognised filter names. Anything else is carried through untouched.
START_DATE = "start_date"
END_DATE = "end_date"
PUBLISHED_STATUS = "published_status"

KNOWN_FILTERS = (PUBLISHED_STATUS, START_DATE, END_DATE)


@dataclass(frozen=True)
class FilterState:
    """
    Immutable snapshot of the dashboard filters the user currently has selected.

    Fields:

    - values: read-only mapping of filter name -> typed value
        * start_date / end_date: datetime.date
        * published_status: bool (True = published only, False = drafts only)
        * any other name: whatever the form produced (usually a str)

    A name missing from 'values' means "unset". FilterState never fills in
    defaults or coerces values, consumers decide what an unset filter means.
    Every update returns a new FilterState, so a widget rendering from one
    snapshot never sees it change underneath it.
    """

    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze a private copy so callers can't mutate us through their dict
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @classmethod
    def empty(cls) -> FilterState:
        return cls()

    @classmethod
    def from_values(cls, values: Optional[Mapping[str, Any]]) -> FilterState:
        return cls(values=dict(values or {}))

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def is_set(self, name: str) -> bool:
        return name in self.values

    def with_updated(self, name: str, value: Any) -> FilterState:
        new_values = dict(self.values)
        new_values[name] = value
        return FilterState(values=new_values)

    def without(self, name: str) -> FilterState:
        new_values = {k: v for k, v in self.values.items() if k != name}
        return FilterState(values=new_values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilterState):
            return NotImplemented
        return dict(self.values) == dict(other.values)

    def __hash__(self) -> int:
        return hash(tuple(sorted((k, _hashable(v)) for k, v in self.values.items())))

    def __repr__(self) -> str:
        return f"FilterState({dict(self.values)!r})"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation (dates as ISO strings) for dcc.Store."""
        out: Dict[str, Any] = {}
        for name, value in self.values.items():
            if isinstance(value, (date, datetime)):
                out[name] = value.isoformat()
            else:
                out[name] = value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FilterState:
        values: Dict[str, Any] = {}
        for name, value in (data or {}).items():
            if name in (START_DATE, END_DATE) and isinstance(value, str):
                values[name] = date.fromisoformat(value)
            else:
                values[name] = value
        return cls(values=values)


def _hashable(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted((k, _hashable(v)) for k, v in value.items()))
    if isinstance(value, set):
        return frozenset(value)
    return value
