from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc, html

from statboard.ui.ids import IDs
from statboard.ui.layout.build_filter_panel import build_filter_panel
from statboard.ui.layout.build_widget_panel import build_widget_panel

if TYPE_CHECKING:
    from statboard.ui.context import AppContext


def build_layout(ctx: AppContext):
    """Layout for one page load; opens the page's own filter session."""
    session_id = ctx.sessions.open()
    coordinator = ctx.sessions.ensure(session_id)
    current = coordinator.current()

    if coordinator.widgets:
        widget_panels = [build_widget_panel(w) for w in coordinator.widgets]
    else:
        widget_panels = [
            dbc.Card(
                dbc.CardBody("No widgets registered."),
                className="sb-widget",
            )
        ]

    return dbc.Container(
        fluid=True,
        className="sb-root",
        children=[
            dbc.NavbarSimple(
                brand=ctx.global_config.ui_title,
                color="primary",
                dark=True,
                fluid=True,
            ),
            # Page-scoped: a reload starts a new session
            dcc.Store(id=IDs.Store.PAGE_SESSION, data=session_id, storage_type="memory"),
            # Last successfully applied filters, JSON-safe; survives reloads within the tab
            dcc.Store(id=IDs.Store.FILTER_STATE, data=current.to_dict(), storage_type="session"),
            dbc.Row(
                [
                    dbc.Col(build_filter_panel(current), md=3, className="mt-3"),
                    dbc.Col(html.Div(widget_panels), md=9, className="mt-3"),
                ],
                className="gx-3",
            ),
        ],
    )
