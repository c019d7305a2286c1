"""
Tests for pulse.events.middleware — ordered payload transformations.
"""

import logging

import pytest

from pulse.events.errors import InvalidMiddlewareError
from pulse.events.middleware import WILDCARD, MiddlewareChain


# ── Registration Tests ───────────────────────────────────────

class TestUse:
    def test_non_callable_rejected(self):
        chain = MiddlewareChain()
        with pytest.raises(InvalidMiddlewareError):
            chain.use("order.placed", {"not": "callable"})

    def test_invalid_middleware_is_type_error(self):
        with pytest.raises(TypeError):
            MiddlewareChain().use("*", 3)

    def test_unregister_removes_first_occurrence_only(self):
        chain = MiddlewareChain()

        def tag(payload, event, bus):
            return payload + ["tag"]

        unregister_first = chain.use("e", tag)
        chain.use("e", tag)
        unregister_first()
        assert chain.count("e") == 1
        assert chain.run("e", []) == ["tag"]

    def test_unregister_twice_is_noop(self):
        chain = MiddlewareChain()

        def tag(payload, event, bus):
            return payload + ["tag"]

        unregister = chain.use("e", tag)
        chain.use("e", tag)
        unregister()
        unregister()
        assert chain.count("e") == 1

    def test_clear(self):
        chain = MiddlewareChain()
        chain.use("e", lambda p, e, b: None)
        chain.use(WILDCARD, lambda p, e, b: None)
        chain.clear()
        assert chain.count("e") == 0
        assert chain.count(WILDCARD) == 0


# ── Run Tests ────────────────────────────────────────────────

class TestRun:
    def test_wildcard_runs_before_event_chain(self):
        chain = MiddlewareChain()
        order = []
        chain.use("e", lambda p, e, b: order.append("specific"))
        chain.use("*", lambda p, e, b: order.append("global-1"))
        chain.use("*", lambda p, e, b: order.append("global-2"))
        chain.run("e", {})
        assert order == ["global-1", "global-2", "specific"]

    def test_returned_value_replaces_payload_for_rest_of_chain(self):
        chain = MiddlewareChain()
        chain.use("e", lambda p, e, b: {**p, "step": 1})
        chain.use("e", lambda p, e, b: {**p, "seen_step": p["step"]})
        assert chain.run("e", {}) == {"step": 1, "seen_step": 1}

    def test_none_leaves_payload_identical(self):
        chain = MiddlewareChain()
        chain.use("e", lambda p, e, b: None)
        payload = {"x": 1}
        assert chain.run("e", payload) is payload

    def test_receives_event_name_and_bus(self):
        chain = MiddlewareChain()
        seen = []
        chain.use("*", lambda p, e, b: seen.append((e, b)))
        bus = object()
        chain.run("order.placed", {}, bus)
        assert seen == [("order.placed", bus)]

    def test_other_events_untouched(self):
        chain = MiddlewareChain()
        chain.use("a", lambda p, e, b: "changed")
        assert chain.run("b", "original") == "original"

    def test_failing_middleware_does_not_abort_chain(self, caplog):
        chain = MiddlewareChain()

        def broken(payload, event, bus):
            raise ValueError("userId is required")

        chain.use("e", lambda p, e, b: {**p, "first": True})
        chain.use("e", broken)
        chain.use("e", lambda p, e, b: {**p, "last": True})

        with caplog.at_level(logging.ERROR, logger="pulse.events"):
            result = chain.run("e", {})

        assert result == {"first": True, "last": True}
        assert "userId is required" in caplog.text
        assert "'e'" in caplog.text

    def test_self_unregistering_middleware_does_not_skip_neighbour(self):
        chain = MiddlewareChain()
        calls = []
        unregister = None

        def one_shot(payload, event, bus):
            calls.append("one_shot")
            unregister()

        unregister = chain.use("e", one_shot)
        chain.use("e", lambda p, e, b: calls.append("next"))
        chain.run("e", None)
        chain.run("e", None)
        assert calls == ["one_shot", "next", "next"]
