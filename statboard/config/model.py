from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class SourceConfig:
    """
    Parsed config entry for a single data source (one CSV -> one DataFrame).
    """
    raw: Dict[str, Any]
    source_path: Path
    index: int

    @property
    def name(self) -> str:
        return self.raw.get("name", f"source_{self.index}")

    @property
    def file(self) -> Path:
        return Path(self.raw["file"])

    @property
    def date_field(self) -> str:
        return self.raw.get("date_field", "created_at")

    @property
    def status_field(self) -> str:
        return self.raw.get("status_field", "published")

    @property
    def parse_dates(self) -> List[str]:
        return list(self.raw.get("parse_dates", [self.date_field]))

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], source_path: Path, index: int) -> SourceConfig:
        return cls(raw=raw, source_path=source_path, index=index)


@dataclass
class GlobalConfig:
    ui_title: str
    sources: List[SourceConfig]
    default_filters: Dict[str, Any] = field(default_factory=dict)
    data_root: Optional[Path] = None
    dev_mode: bool = False
    port: int = 8050
    max_page_sessions: int = 64

    def source(self, name: str) -> Optional[SourceConfig]:
        return next((s for s in self.sources if s.name == name), None)
