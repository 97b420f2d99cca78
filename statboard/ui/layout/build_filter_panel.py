from __future__ import annotations

from typing import Any, Dict, Optional

import dash_bootstrap_components as dbc
from dash import dcc, html

from statboard.core.filter_state import END_DATE, PUBLISHED_STATUS, START_DATE, FilterState
from statboard.ui.ids import IDs

# Tri-state select: "" means "don't filter on status"
STATUS_OPTIONS = [
    {"label": "All posts", "value": ""},
    {"label": "Published", "value": "1"},
    {"label": "Drafts", "value": "0"},
]


def form_values(state: FilterState) -> Dict[str, Any]:
    """FilterState -> values the form controls understand."""
    published = state.get(PUBLISHED_STATUS)
    start = state.get(START_DATE)
    end = state.get(END_DATE)
    return {
        PUBLISHED_STATUS: "" if published is None else ("1" if published else "0"),
        START_DATE: start.isoformat() if start is not None else None,
        END_DATE: end.isoformat() if end is not None else None,
    }


def build_filter_panel(initial: Optional[FilterState] = None) -> dbc.Card:
    values = form_values(initial or FilterState.empty())

    return dbc.Card(
        [
            dbc.CardHeader("Filters", className="fw-semibold"),
            dbc.CardBody(
                [
                    html.Label("Status", className="form-label"),
                    dcc.Dropdown(
                        id=IDs.Control.PUBLISHED_STATUS,
                        options=STATUS_OPTIONS,
                        value=values[PUBLISHED_STATUS],
                        clearable=False,
                        className="mb-3",
                    ),
                    html.Label("Start date", className="form-label d-block"),
                    dcc.DatePickerSingle(
                        id=IDs.Control.START_DATE,
                        date=values[START_DATE],
                        display_format="YYYY-MM-DD",
                        clearable=True,
                        className="mb-3",
                    ),
                    html.Label("End date", className="form-label d-block"),
                    dcc.DatePickerSingle(
                        id=IDs.Control.END_DATE,
                        date=values[END_DATE],
                        display_format="YYYY-MM-DD",
                        clearable=True,
                        className="mb-3",
                    ),
                    html.Div(
                        [
                            dbc.Button("Apply", id=IDs.Control.APPLY_BTN, color="primary", size="sm"),
                            dbc.Button(
                                "Reset",
                                id=IDs.Control.RESET_BTN,
                                color="secondary",
                                size="sm",
                                className="ms-2",
                            ),
                        ],
                        className="d-flex mb-3",
                    ),
                    dbc.Alert(
                        id=IDs.Control.FILTER_ALERT,
                        color="danger",
                        is_open=False,
                        dismissable=True,
                        className="mb-0",
                    ),
                    html.Small(id=IDs.Control.ACTIVE_FILTERS, className="text-muted"),
                ]
            ),
        ],
        className="sb-sidebar",
    )
