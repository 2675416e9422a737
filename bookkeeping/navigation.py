"""
View Router

Maps a view identifier to its page title and whatever renders it.
Knows nothing about business logic; the Streamlit app registers its
page functions as targets.
"""

from enum import Enum
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict


class View(str, Enum):
    """Top-level pages of the app."""
    DASHBOARD = "dashboard"
    TRANSACTIONS = "transactions"
    CUSTOMERS = "customers"
    SETTINGS = "settings"


DEFAULT_VIEW = View.DASHBOARD

PAGE_TITLES = {
    View.DASHBOARD: "Dashboard",
    View.TRANSACTIONS: "Transaction History",
    View.CUSTOMERS: "Customer List",
    View.SETTINGS: "Settings",
}

# Pages only administrators may open
ADMIN_VIEWS = frozenset({View.SETTINGS})


def resolve_view(identifier: Union[View, str, None]) -> View:
    """The view for an identifier; anything unknown is the dashboard."""
    if isinstance(identifier, View):
        return identifier
    try:
        return View(identifier)
    except ValueError:
        return DEFAULT_VIEW


def page_title(identifier: Union[View, str, None]) -> str:
    return PAGE_TITLES[resolve_view(identifier)]


class Route(BaseModel):
    """A resolved view with its title and render target."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    view: View
    title: str
    target: Any


class ViewRouter:
    """
    Resolves view identifiers to registered targets.

    Usage:
        router = ViewRouter({View.DASHBOARD: render_dashboard, ...})
        route = router.resolve(st.session_state.view)
        route.target(state)
    """

    def __init__(self, routes: Mapping[View, Any]):
        if DEFAULT_VIEW not in routes:
            raise ValueError("A router needs a target for the dashboard view")
        self._routes = dict(routes)

    @property
    def views(self) -> list[View]:
        return [view for view in View if view in self._routes]

    def resolve(self, identifier: Any) -> Route:
        view = resolve_view(identifier)
        if view not in self._routes:
            view = DEFAULT_VIEW
        return Route(view=view, title=PAGE_TITLES[view], target=self._routes[view])
