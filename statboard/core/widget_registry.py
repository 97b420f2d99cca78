from __future__ import annotations
from typing import Any, Dict, List, Type

from .base_widget import WidgetBinding
from .data_source import DataSource
from .filter_store import FilterStore


class WidgetRegistry:
    """
    Registry for widget classes so the app can build the dashboard dynamically

    Purpose:
    - Decouples the Dash layer from hardcoded widget implementations by exposing {@link create(widget_id, ...)}
    - Lets the layout build one panel per registered widget rather than from a hardcoded list

    Design Notes:
    - Stores the subclasses of {@link WidgetBinding}, not instances, so each page gets fresh bindings
    - Enforces invariants:
        * only {@link WidgetBinding} subclasses can be registered
        * each widget 'id' is unique across the registry
    """

    def __init__(self):
        self._widgets: Dict[str, Type[WidgetBinding]] = {}

    def register(self, widget_cls: Type[WidgetBinding]) -> None:
        """
        Register a {@link WidgetBinding} subclass with the registry

        :param widget_cls: the subclass of {@link WidgetBinding}

        Raises:
            TypeError: if widget_cls is not a subclass of {@link WidgetBinding}
            ValueError: if a widget with same 'id' already exists
        """
        if not isinstance(widget_cls, type) or not issubclass(widget_cls, WidgetBinding):
            raise TypeError(f"Widget '{getattr(widget_cls, 'id', widget_cls)}' must be a subclass of WidgetBinding")

        if widget_cls.id in self._widgets:
            raise ValueError(f"Widget '{widget_cls.id}' already registered")

        self._widgets[widget_cls.id] = widget_cls

    def create(self, widget_id: str, store: FilterStore, data_source: DataSource, **kwargs: Any) -> WidgetBinding:
        """
        Instantiate a widget for the given widget_id, bound to 'store' and reading from 'data_source'

        Raises:
            KeyError: if no widget with the given id exists in the registry
        """
        try:
            cls = self._widgets[widget_id]
        except KeyError:
            raise KeyError(f"Widget '{widget_id}' not found")
        return cls(store, data_source, **kwargs)

    def all_classes(self) -> List[Type[WidgetBinding]]:
        return list(self._widgets.values())
