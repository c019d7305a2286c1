"""
Tests for pulse.reactive — observable records, batches, computed values.
"""

import logging

import pytest

from pulse.reactive import (
    ReactiveState,
    ReadOnlyView,
    batch,
    computed,
    is_batching,
)


# ── ReactiveState Tests ──────────────────────────────────────

class TestReactiveState:
    def test_read_and_write_fields(self):
        state = ReactiveState(count=0, label=None)
        state.count += 2
        state.label = "ready"
        assert state.count == 2
        assert state.label == "ready"

    def test_unknown_field_read_raises(self):
        state = ReactiveState(count=0)
        with pytest.raises(AttributeError, match="no field 'missing'"):
            state.missing

    def test_unknown_field_write_raises(self):
        state = ReactiveState(count=0)
        with pytest.raises(AttributeError):
            state.missing = 1

    def test_reserved_field_name_rejected(self):
        with pytest.raises(ValueError, match="reserved"):
            ReactiveState(subscribe=1)

    def test_to_dict_is_detached(self):
        state = ReactiveState(count=1)
        snapshot = state.to_dict()
        state.count = 5
        assert snapshot == {"count": 1}

    def test_write_outside_batch_notifies_each_time(self):
        state = ReactiveState(a=0, b=0)
        seen = []
        state.subscribe(lambda s: seen.append((s.a, s.b)))
        state.a = 1
        state.b = 2
        assert seen == [(1, 0), (1, 2)]

    def test_unsubscribe_stops_notifications(self):
        state = ReactiveState(a=0)
        seen = []
        unsubscribe = state.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        state.a = 1
        assert seen == []
        assert state.observer_count() == 0

    def test_non_callable_observer_rejected(self):
        state = ReactiveState(a=0)
        with pytest.raises(TypeError):
            state.subscribe("nope")

    def test_failing_observer_is_logged_not_raised(self, caplog):
        state = ReactiveState(a=0)
        seen = []

        def broken(_):
            raise RuntimeError("observer down")

        state.subscribe(broken)
        state.subscribe(lambda s: seen.append(s.a))
        with caplog.at_level(logging.ERROR, logger="pulse.reactive"):
            state.a = 3
        assert seen == [3]
        assert "observer down" in caplog.text


# ── Batch Tests ──────────────────────────────────────────────

class TestBatch:
    def test_batch_coalesces_notifications(self):
        state = ReactiveState(a=0, b=0)
        seen = []
        state.subscribe(lambda s: seen.append(s.to_dict()))
        with batch():
            state.a = 1
            state.b = 2
            state.a = 3
            assert seen == []
        assert seen == [{"a": 3, "b": 2}]

    def test_nested_batches_commit_once_at_outermost(self):
        state = ReactiveState(a=0)
        seen = []
        state.subscribe(lambda s: seen.append(s.a))
        with batch():
            state.a = 1
            with batch():
                state.a = 2
            assert seen == []
            assert is_batching()
        assert seen == [2]
        assert not is_batching()

    def test_each_changed_record_notified_once(self):
        first = ReactiveState(a=0)
        second = ReactiveState(b=0)
        calls = []
        first.subscribe(lambda s: calls.append("first"))
        second.subscribe(lambda s: calls.append("second"))
        with batch():
            first.a = 1
            second.b = 1
            first.a = 2
        assert sorted(calls) == ["first", "second"]

    def test_batch_commits_when_body_raises(self):
        state = ReactiveState(a=0)
        seen = []
        state.subscribe(lambda s: seen.append(s.a))
        with pytest.raises(KeyError):
            with batch():
                state.a = 9
                raise KeyError("boom")
        assert seen == [9]
        assert not is_batching()

    def test_untouched_record_not_notified(self):
        state = ReactiveState(a=0)
        seen = []
        state.subscribe(seen.append)
        with batch():
            pass
        assert seen == []


# ── Computed / ReadOnlyView Tests ────────────────────────────

class TestComputed:
    def test_recomputed_on_every_read(self):
        state = ReactiveState(n=1)
        doubled = computed(lambda: state.n * 2)
        assert doubled.value == 2
        state.n = 5
        assert doubled() == 10

    def test_non_callable_getter_rejected(self):
        with pytest.raises(TypeError):
            computed(42)


class TestReadOnlyView:
    def test_view_is_live(self):
        state = ReactiveState(n=1)
        view = ReadOnlyView(state)
        state.n = 4
        assert view.n == 4

    def test_view_rejects_writes(self):
        view = ReadOnlyView(ReactiveState(n=1))
        with pytest.raises(AttributeError, match="read-only"):
            view.n = 2

    def test_view_can_subscribe(self):
        state = ReactiveState(n=1)
        view = ReadOnlyView(state)
        seen = []
        view.subscribe(lambda s: seen.append(s.n))
        state.n = 7
        assert seen == [7]
