from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from statboard.core.base_widget import WidgetBinding
from statboard.ui.ids import widget_graph_id


def build_widget_panel(widget: WidgetBinding) -> dbc.Card:
    return dbc.Card(
        [
            dbc.CardHeader(html.Strong(widget.label), className="p-2"),
            dbc.CardBody(
                dcc.Loading(
                    type="default",
                    children=dcc.Graph(
                        id=widget_graph_id(widget.id),
                        figure=widget.figure(),
                        config={"responsive": True, "displayModeBar": False},
                    ),
                ),
            ),
        ],
        className="sb-widget mb-3",
    )
