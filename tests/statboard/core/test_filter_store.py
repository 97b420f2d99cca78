from __future__ import annotations

import logging

import pytest

from statboard.core.filter_state import FilterState
from statboard.core.filter_store import FilterStore


def test_current_is_empty_before_first_replace():
    store = FilterStore()
    assert store.current() == FilterState.empty()
    assert store.version == 0
    assert not store.is_populated


def test_replace_notifies_in_registration_order():
    store = FilterStore()
    calls = []
    store.subscribe(lambda s, v: calls.append("A"))
    store.subscribe(lambda s, v: calls.append("B"))
    store.subscribe(lambda s, v: calls.append("C"))

    store.replace(FilterState.from_values({"published_status": True}))

    assert calls == ["A", "B", "C"]


def test_replace_passes_new_state_and_increasing_version():
    store = FilterStore()
    seen = []
    store.subscribe(lambda s, v: seen.append((s.get("published_status"), v)))

    v1 = store.replace(FilterState.from_values({"published_status": True}))
    v2 = store.replace(FilterState.from_values({"published_status": False}))

    assert seen == [(True, 1), (False, 2)]
    assert (v1, v2) == (1, 2)
    assert store.current().get("published_status") is False


def test_unsubscribe_stops_notifications():
    store = FilterStore()
    calls = []
    sub = store.subscribe(lambda s, v: calls.append(v))

    store.replace(FilterState.empty())
    sub.unsubscribe()
    sub.unsubscribe()  # idempotent
    store.replace(FilterState.empty())

    assert calls == [1]
    assert store.subscriber_count == 0


def test_unsubscribe_during_notification_does_not_affect_current_pass():
    store = FilterStore()
    calls = []
    subs = {}

    def a(state, version):
        calls.append(("A", version))
        subs["b"].unsubscribe()

    subs["a"] = store.subscribe(a)
    subs["b"] = store.subscribe(lambda s, v: calls.append(("B", v)))

    store.replace(FilterState.empty())
    store.replace(FilterState.empty())

    # B was already scheduled for pass 1, gone for pass 2
    assert calls == [("A", 1), ("B", 1), ("A", 2)]


def test_failing_listener_does_not_starve_others(caplog):
    store = FilterStore()
    calls = []

    def broken(state, version):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda s, v: calls.append(v))

    with caplog.at_level(logging.ERROR):
        store.replace(FilterState.empty())

    assert calls == [1]
    assert "Filter listener failed" in caplog.text


def test_raise_listener_errors_reraises_after_full_pass():
    store = FilterStore(raise_listener_errors=True)
    calls = []

    def broken(state, version):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda s, v: calls.append(v))

    with pytest.raises(RuntimeError):
        store.replace(FilterState.empty())

    assert calls == [1]
    assert store.version == 1


def test_replace_rejects_non_state():
    store = FilterStore()
    with pytest.raises(TypeError):
        store.replace({"published_status": "1"})  # type: ignore[arg-type]
