from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from .filter_state import FilterState

logger = logging.getLogger(__name__)

# Callback signature: (new_state, version)
FilterListener = Callable[[FilterState, int], None]


class Subscription:
    """Handle returned by {@link FilterStore.subscribe}. unsubscribe() is idempotent."""

    def __init__(self, store: FilterStore, callback: FilterListener):
        self._store = store
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._store._remove(self)


class FilterStore:
    """
    Page-scoped holder of the current {@link FilterState}.

    - current() always returns a complete snapshot, never a half-updated one
    - replace() swaps the snapshot and notifies subscribers synchronously, in
      the order they subscribed
    - every replace() bumps 'version', which widgets use to drop late results

    The subscriber list is copied before each notification pass, so a
    callback that unsubscribes itself (or a sibling) does not change who gets
    notified in that pass.
    """

    def __init__(self, initial: Optional[FilterState] = None, *, raise_listener_errors: bool = False):
        self._lock = threading.Lock()
        self._state: Optional[FilterState] = initial
        self._version = 0 if initial is None else 1
        self._subscriptions: List[Subscription] = []
        # Development mode: re-raise the first listener failure once everyone was notified
        self.raise_listener_errors = raise_listener_errors

    @property
    def version(self) -> int:
        return self._version

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @property
    def is_populated(self) -> bool:
        return self._state is not None

    def current(self) -> FilterState:
        state = self._state
        return state if state is not None else FilterState.empty()

    def snapshot(self) -> tuple[FilterState, int]:
        """Current state and its version, read together."""
        with self._lock:
            return self.current(), self._version

    def replace(self, new_state: FilterState) -> int:
        """
        Atomically swap in 'new_state' and notify all subscribers.
        :return: the version number assigned to 'new_state'
        """
        if not isinstance(new_state, FilterState):
            raise TypeError(f"Expected FilterState, got {type(new_state).__name__}")

        with self._lock:
            self._state = new_state
            self._version += 1
            version = self._version
            pass_subscriptions = list(self._subscriptions)

        logger.debug(
            "Filter state replaced",
            extra={"version": version, "n_subscribers": len(pass_subscriptions)},
        )

        errors: List[Exception] = []
        for sub in pass_subscriptions:
            try:
                sub.callback(new_state, version)
            except Exception as e:
                # One broken listener must not starve the rest
                logger.exception(
                    "Filter listener failed",
                    extra={"version": version, "listener": repr(sub.callback)},
                )
                errors.append(e)

        if errors and self.raise_listener_errors:
            raise errors[0]
        return version

    def subscribe(self, callback: FilterListener) -> Subscription:
        sub = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s is not sub]
