from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional

import dash
import plotly.graph_objs as go
from dash import Input, Output, State
from dash.exceptions import PreventUpdate

from statboard.core.filter_state import FilterState
from statboard.services.coordinator import DashboardCoordinator
from statboard.ui.ids import IDs, widget_graph_id

if TYPE_CHECKING:
    from statboard.ui.context import AppContext

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Helper: Empty/Error Figures
# -----------------------------------------------------------------------------
def _message_figure(title: str, details: Optional[str] = None) -> go.Figure:
    fig = go.Figure()
    text = title if details is None else f"{title}<br><br>{details}"
    fig.add_annotation(
        text=text,
        showarrow=False,
        xref="paper",
        yref="paper",
        x=0.5,
        y=0.5,
    )
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    fig.update_layout(margin=dict(l=40, r=40, t=40, b=40))
    return fig


def render_page_figures(
        coordinator: DashboardCoordinator,
        widget_ids: List[str],
        fs_data: dict[str, Any] | None,
) -> List[go.Figure]:
    """
    Bring the page's coordinator in line with the browser's filter-state and
    render one figure per widget, in 'widget_ids' order.
    """
    try:
        state = FilterState.from_dict(fs_data or {})
    except (ValueError, AttributeError):
        logger.warning("Ignoring unreadable filter-state", extra={"filter_state": fs_data})
        state = coordinator.current()
    coordinator.apply_state(state)

    figures = []
    for widget_id in widget_ids:
        try:
            figures.append(coordinator.widget(widget_id).figure())
        except Exception:
            # One widget failing must not blank the whole dashboard
            logger.exception(
                "Error rendering widget",
                extra={"widget_id": widget_id, "filter_state": fs_data},
            )
            figures.append(
                _message_figure(
                    "Something went wrong while rendering this widget.",
                    "If this keeps happening, grab the logs and open an issue.",
                )
            )
    return figures


def register_render_callbacks(app: dash.Dash, ctx: AppContext) -> None:
    widget_ids = list(ctx.widget_ids)
    if not widget_ids:
        return

    # ---------------------------------------------------------
    # Filter store changed -> every widget of this page re-renders
    # ---------------------------------------------------------
    @app.callback(
        [Output(widget_graph_id(wid), "figure") for wid in widget_ids],
        Input(IDs.Store.FILTER_STATE, "data"),
        State(IDs.Store.PAGE_SESSION, "data"),
    )
    def update_widget_figures(fs_data: dict[str, Any] | None, session_id: str | None):
        if not session_id:
            raise PreventUpdate
        return render_page_figures(ctx.sessions.ensure(session_id), widget_ids, fs_data)
