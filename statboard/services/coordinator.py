from __future__ import annotations

import enum
import logging
from typing import Any, List, Mapping, Optional

from statboard.core.base_widget import WidgetBinding
from statboard.core.exceptions import ValidationError
from statboard.core.filter_state import FilterState
from statboard.core.filter_store import FilterStore
from statboard.validation.filter_validation import parse_filter_form

logger = logging.getLogger(__name__)


class CoordinatorStatus(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class DashboardCoordinator:
    """
    Owns the page's FilterStore and the widgets that read from it.

    - submit_filters() parses raw form input and publishes a new FilterState
    - bad input leaves the store untouched, so every widget keeps showing a
      consistent state
    - widgets are notified synchronously in registration order
    """

    def __init__(
        self,
        store: Optional[FilterStore] = None,
        *,
        initial_filters: Optional[Mapping[str, Any]] = None,
    ):
        self.store = store if store is not None else FilterStore()
        self._widgets: List[WidgetBinding] = []
        # Validate defaults up-front, a broken config should fail at startup
        self._defaults: FilterState = parse_filter_form(initial_filters)

        if not self.store.is_populated:
            self.store.replace(self._defaults)

        logger.info(
            "Dashboard coordinator ready",
            extra={"default_filters": self._defaults.to_dict()},
        )

    @property
    def status(self) -> CoordinatorStatus:
        return CoordinatorStatus.READY if self.store.is_populated else CoordinatorStatus.UNINITIALIZED

    @property
    def widgets(self) -> List[WidgetBinding]:
        return list(self._widgets)

    def current(self) -> FilterState:
        return self.store.current()

    # ------------------------------------------------------------------
    # Widget registration
    # ------------------------------------------------------------------
    def register_widget(self, binding: WidgetBinding) -> WidgetBinding:
        if binding in self._widgets:
            raise ValueError(f"Widget '{binding.id}' is already registered")
        if binding.store is not self.store:
            raise ValueError(f"Widget '{binding.id}' is bound to a different FilterStore")

        self._widgets.append(binding)
        binding.attach()

        # Prime with what is on screen right now
        state, version = self.store.snapshot()
        binding.on_filter_changed(state, version)

        logger.info("Widget registered", extra={"widget_id": binding.id, "n_widgets": len(self._widgets)})
        return binding

    def unregister_widget(self, binding: WidgetBinding) -> None:
        if binding not in self._widgets:
            return
        binding.teardown()
        self._widgets = [w for w in self._widgets if w is not binding]
        logger.info("Widget unregistered", extra={"widget_id": binding.id, "n_widgets": len(self._widgets)})

    def widget(self, widget_id: str) -> WidgetBinding:
        for w in self._widgets:
            if w.id == widget_id:
                return w
        raise KeyError(f"Widget '{widget_id}' not registered")

    # ------------------------------------------------------------------
    # Filter input
    # ------------------------------------------------------------------
    def submit_filters(self, raw_form_values: Optional[Mapping[str, Any]]) -> FilterState:
        """
        Parse raw form values and publish them to every registered widget.

        :raises ValidationError: (incl. InvalidRangeError) the store is left unchanged
        """
        try:
            state = parse_filter_form(raw_form_values)
        except ValidationError as e:
            logger.warning(
                "Rejected filter submission",
                extra={"issues": [i.code for i in e.issues]},
            )
            raise

        version = self.store.replace(state)
        logger.info("Filters applied", extra={"filters": state.to_dict(), "version": version})
        return state

    def reset_filters(self) -> FilterState:
        """Go back to the configured default filters."""
        version = self.store.replace(self._defaults)
        logger.info("Filters reset", extra={"version": version})
        return self._defaults

    def apply_state(self, state: FilterState) -> bool:
        """
        Publish an already-validated FilterState (e.g. restored from the browser).

        :return: True if the store changed, False if 'state' was already current
        """
        if state == self.store.current():
            return False
        version = self.store.replace(state)
        logger.info("Filters restored", extra={"filters": state.to_dict(), "version": version})
        return True

    def close(self) -> None:
        """Tear down every widget; the store is dropped with the coordinator."""
        for binding in list(self._widgets):
            self.unregister_widget(binding)
