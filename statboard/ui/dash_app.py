from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import dash_bootstrap_components as dbc
from dash import Dash

from statboard.config.io import load_data_source
from statboard.core.base_widget import dev_mode_enabled
from statboard.core.filter_store import FilterStore
from statboard.core.query import AggregateQueryBuilder
from statboard.core.widget_registry import WidgetRegistry
from statboard.services.coordinator import DashboardCoordinator
from statboard.services.page_sessions import PageSessions
from statboard.ui.callbacks.callbacks_filters import register_filter_callbacks
from statboard.ui.callbacks.callbacks_render import register_render_callbacks
from statboard.ui.context import AppContext
from statboard.ui.layout.build_layout import build_layout
from statboard.validation.filter_validation import parse_filter_form

logger = logging.getLogger(__name__)


def resolve_config_root(config_root: Path | str | None = None) -> Path:
    if config_root is None:
        config_root = os.getenv("STATBOARD_CONFIG", "config")
    return Path(config_root)


def build_widget_registry() -> WidgetRegistry:
    from statboard.widgets import PostStatsWidget, PostsChartWidget, ViewsChartWidget

    registry = WidgetRegistry()
    registry.register(PostStatsWidget)
    registry.register(PostsChartWidget)
    registry.register(ViewsChartWidget)
    return registry


def build_context(config_root: Path | str, registry: Optional[WidgetRegistry] = None) -> AppContext:
    config_root = Path(config_root)

    # 1) Load config + data
    global_config, data_source = load_data_source(config_root)
    if not global_config.sources:
        raise RuntimeError(f"No sources were configured under {config_root}")

    strict = global_config.dev_mode or dev_mode_enabled()
    # A broken default should fail at startup, not on the first page load
    parse_filter_form(global_config.default_filters)

    # 2) Query builders per widget, columns taken from the widget's source config
    registry = registry or build_widget_registry()
    builders = {}
    for widget_cls in registry.all_classes():
        src_cfg = global_config.source(widget_cls.source)
        if src_cfg is None:
            logger.warning(
                "Skipping widget without a configured source",
                extra={"widget_id": widget_cls.id, "source": widget_cls.source},
            )
            continue
        builders[widget_cls.id] = AggregateQueryBuilder(
            date_field=src_cfg.date_field,
            status_field=src_cfg.status_field,
        )

    # 3) Every page session gets its own store, coordinator and widget bindings
    def new_coordinator() -> DashboardCoordinator:
        store = FilterStore(raise_listener_errors=strict)
        coordinator = DashboardCoordinator(store, initial_filters=global_config.default_filters)
        for widget_id, builder in builders.items():
            coordinator.register_widget(
                registry.create(widget_id, store, data_source, builder=builder, strict=strict)
            )
        return coordinator

    return AppContext(
        config_root=config_root,
        global_config=global_config,
        data_source=data_source,
        registry=registry,
        sessions=PageSessions(new_coordinator, max_sessions=global_config.max_page_sessions),
        widget_ids=list(builders),
    )


def build_dash_app(ctx: AppContext) -> Dash:
    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
    )
    app.title = ctx.global_config.ui_title
    # Served per request, so every page load opens its own session
    app.layout = lambda: build_layout(ctx)

    # Register callbacks
    register_filter_callbacks(app, ctx)
    register_render_callbacks(app, ctx)

    logger.info(
        "Dash app created",
        extra={"config_root": str(ctx.config_root), "widgets": ctx.widget_ids},
    )
    return app


def create_dash_app(config_root: Path | str | None = None) -> Dash:
    return build_dash_app(build_context(resolve_config_root(config_root)))
