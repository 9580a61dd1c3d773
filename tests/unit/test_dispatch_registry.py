"""Unit tests for the dispatch registry."""

import pytest

from fieldvoice.dispatch import DispatchRegistry
from fieldvoice.models import Action, Fill


@pytest.mark.unit
class TestDispatchRegistry:
    """Test cases for DispatchRegistry."""

    def test_dispatch_to_registered_handler(self):
        received = []
        registry = DispatchRegistry()
        registry.register("all-shops", lambda wire: received.append(wire) or True)

        assert registry.dispatch(Action("next-shop")) is True
        assert received == ["next-shop"]
        assert registry.pending_text == ""

    def test_fill_uses_wire_format(self):
        received = []
        registry = DispatchRegistry()
        registry.register("individual-product", received.append)

        registry.dispatch(Fill("add-price", "120 rupees"))

        assert received == ["add-price:120 rupees"]

    def test_unconsumed_input_stays_pending(self):
        registry = DispatchRegistry()
        registry.register("individual-product", lambda wire: False)

        assert registry.dispatch(Fill("add-note", "fragile")) is False
        assert registry.pending_text == "add-note:fragile"

    def test_no_handler(self):
        registry = DispatchRegistry()
        assert registry.dispatch("next-shop") is False
        assert registry.pending_text == "next-shop"

    def test_register_replaces_previous_handler(self):
        first, second = [], []
        registry = DispatchRegistry()
        registry.register("all-shops", first.append)
        registry.register("individual-shop", second.append)

        registry.dispatch("add-name")

        assert first == []
        assert second == ["add-name"]
        assert registry.page_scope == "individual-shop"

    def test_clear_only_matching_scope(self):
        registry = DispatchRegistry()
        registry.register("individual-shop", lambda wire: True)

        assert registry.clear("all-shops") is False
        assert registry.has_handler
        assert registry.clear("individual-shop") is True
        assert not registry.has_handler
        assert registry.clear() is False

    def test_clear_without_scope(self):
        registry = DispatchRegistry()
        registry.register("all-shops", lambda wire: True)
        assert registry.clear() is True
        assert registry.page_scope is None

    def test_set_pending_text(self):
        registry = DispatchRegistry()
        registry.set_pending_text("draft")
        assert registry.pending_text == "draft"
