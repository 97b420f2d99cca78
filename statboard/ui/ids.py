from __future__ import annotations

__all__ = ["IDs", "widget_graph_id"]


class IDs:
    class Store:
        FILTER_STATE = "filter-state"
        PAGE_SESSION = "page-session-id"

    class Control:
        # Filter form
        PUBLISHED_STATUS = "published-status-select"
        START_DATE = "start-date-picker"
        END_DATE = "end-date-picker"
        APPLY_BTN = "apply-filters-btn"
        RESET_BTN = "reset-filters-btn"
        FILTER_ALERT = "filter-alert"
        ACTIVE_FILTERS = "active-filters-text"

    class Pattern:
        WIDGET_GRAPH = "widget-graph"


def widget_graph_id(widget_id: str) -> dict:
    return {"type": IDs.Pattern.WIDGET_GRAPH, "index": widget_id}
