"""
Tests for view resolution and the router.
"""

import pytest

from bookkeeping.navigation import (
    ADMIN_VIEWS,
    DEFAULT_VIEW,
    View,
    ViewRouter,
    page_title,
    resolve_view,
)


class TestResolveView:
    def test_known_identifiers(self):
        assert resolve_view("transactions") == View.TRANSACTIONS
        assert resolve_view(View.CUSTOMERS) == View.CUSTOMERS

    @pytest.mark.parametrize("identifier", [None, "", "reports", "DASHBOARD"])
    def test_unknown_falls_back_to_dashboard(self, identifier):
        assert resolve_view(identifier) == DEFAULT_VIEW

    def test_titles(self):
        assert page_title("dashboard") == "Dashboard"
        assert page_title("transactions") == "Transaction History"
        assert page_title("customers") == "Customer List"
        assert page_title("settings") == "Settings"
        assert page_title("nope") == "Dashboard"

    def test_settings_is_admin_only(self):
        assert ADMIN_VIEWS == {View.SETTINGS}


class TestViewRouter:
    """Tests for ViewRouter."""

    def test_resolves_registered_target(self):
        router = ViewRouter({View.DASHBOARD: "dash", View.CUSTOMERS: "cust"})

        route = router.resolve("customers")
        assert route.view == View.CUSTOMERS
        assert route.title == "Customer List"
        assert route.target == "cust"

    def test_unregistered_view_lands_on_dashboard(self):
        router = ViewRouter({View.DASHBOARD: "dash"})
        route = router.resolve(View.SETTINGS)
        assert route.view == View.DASHBOARD
        assert route.target == "dash"

    def test_views_follow_declaration_order(self):
        router = ViewRouter({View.SETTINGS: 1, View.DASHBOARD: 2, View.TRANSACTIONS: 3})
        assert router.views == [View.DASHBOARD, View.TRANSACTIONS, View.SETTINGS]

    def test_dashboard_route_required(self):
        with pytest.raises(ValueError):
            ViewRouter({View.CUSTOMERS: "cust"})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
