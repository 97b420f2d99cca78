from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple

import dash
from dash import Input, Output, State, html
from dash.exceptions import PreventUpdate

from statboard.core.exceptions import ValidationError
from statboard.core.filter_state import END_DATE, PUBLISHED_STATUS, START_DATE, FilterState
from statboard.services.coordinator import DashboardCoordinator
from statboard.ui.ids import IDs
from statboard.ui.layout.build_filter_panel import form_values

if TYPE_CHECKING:
    from statboard.ui.context import AppContext

logger = logging.getLogger(__name__)


def describe_filters(state: FilterState) -> str:
    parts = []
    if state.is_set(PUBLISHED_STATUS):
        parts.append("published only" if state.get(PUBLISHED_STATUS) else "drafts only")
    start, end = state.get(START_DATE), state.get(END_DATE)
    if start is not None or end is not None:
        parts.append(f"{start or '…'} → {end or '…'}")
    return "Showing: " + (", ".join(parts) if parts else "all posts")


def apply_filter_action(
        coordinator: DashboardCoordinator,
        reset: bool,
        raw: Optional[Mapping[str, Any]],
) -> Tuple[Optional[dict], List[str]]:
    """
    Run Apply / Reset against the page's coordinator.

    :return: (filter-state store data, validation messages). Data is None when
             the submission was rejected and the page keeps its current filters.
    """
    if reset:
        return coordinator.reset_filters().to_dict(), []
    try:
        state = coordinator.submit_filters(raw)
    except ValidationError as e:
        return None, [issue.message for issue in e.issues]
    return state.to_dict(), []


def register_filter_callbacks(app: dash.Dash, ctx: AppContext) -> None:
    # ---------------------------------------------------------
    # Apply / reset: form -> page coordinator -> filter-state store
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.FILTER_STATE, "data"),
        Output(IDs.Control.FILTER_ALERT, "children"),
        Output(IDs.Control.FILTER_ALERT, "is_open"),
        Input(IDs.Control.APPLY_BTN, "n_clicks"),
        Input(IDs.Control.RESET_BTN, "n_clicks"),
        State(IDs.Control.PUBLISHED_STATUS, "value"),
        State(IDs.Control.START_DATE, "date"),
        State(IDs.Control.END_DATE, "date"),
        State(IDs.Store.PAGE_SESSION, "data"),
        prevent_initial_call=True,
    )
    def apply_filters(_apply_clicks, _reset_clicks, published_status, start_date, end_date, session_id):
        if not session_id:
            raise PreventUpdate

        coordinator = ctx.sessions.ensure(session_id)
        raw = {
            PUBLISHED_STATUS: published_status,
            START_DATE: start_date,
            END_DATE: end_date,
        }
        data, messages = apply_filter_action(coordinator, dash.ctx.triggered_id == IDs.Control.RESET_BTN, raw)
        if data is None:
            # Keep the previous filters on screen, just tell the user why
            return dash.no_update, [html.Div(m) for m in messages], True
        return data, None, False

    # ---------------------------------------------------------
    # Filter-state store -> form controls + summary line
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.PUBLISHED_STATUS, "value"),
        Output(IDs.Control.START_DATE, "date"),
        Output(IDs.Control.END_DATE, "date"),
        Output(IDs.Control.ACTIVE_FILTERS, "children"),
        Input(IDs.Store.FILTER_STATE, "data"),
    )
    def sync_filter_form(fs_data):
        try:
            state = FilterState.from_dict(fs_data or {})
        except (ValueError, AttributeError):
            logger.exception("Invalid filter-state: %r", fs_data)
            raise PreventUpdate
        values = form_values(state)
        return values[PUBLISHED_STATUS], values[START_DATE], values[END_DATE], describe_filters(state)
