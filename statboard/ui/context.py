from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from statboard.config.model import GlobalConfig
from statboard.core.data_source import DataSource
from statboard.core.widget_registry import WidgetRegistry
from statboard.services.page_sessions import PageSessions


@dataclass
class AppContext:
    """
    Holds shared state for the Dash app: config, the data source, the widget
    registry and the page sessions (one coordinator + filter store per page).
    This is passed into layout + callback registration functions instead of
    using module-level globals.
    """
    config_root: Path
    global_config: GlobalConfig
    data_source: DataSource
    registry: WidgetRegistry
    sessions: PageSessions
    widget_ids: List[str] = field(default_factory=list)
