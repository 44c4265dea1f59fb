"""
View registry.

Ordered list of open views (tabs), each uniquely keyed, plus the active index.
Opening a key that is already open activates it in place instead of adding a
duplicate. A non-closable default view always sits at index 0.
"""
from __future__ import annotations

from typing import Any, List, Optional

import mergedeep

from client.app.logging_config import get_logger
from client.app.schemas.views import VWView
from client.app.utils.datetime_utils import epoch_millis

logger = get_logger(__name__)

PROFILE_VIEW_PREFIX = "profile"


class ViewRegistry:
    """Open views and the active index."""

    def __init__(self, default_view_id: str, default_title: str, default_component: Any = None):
        self._default = VWView(
            id=default_view_id,
            title=default_title,
            component=default_component,
            closable=False,
            )
        self._views: List[VWView] = [self._default.model_copy(deep=True)]
        self.active_index = 0

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def views(self) -> List[VWView]:
        return list(self._views)

    @property
    def active_view(self) -> VWView:
        return self._views[self.active_index]

    @property
    def active_props(self) -> dict[str, Any]:
        return self.active_view.props

    def find_index(self, key: str) -> int:
        """Index of the view with `key`, or -1."""
        for index, view in enumerate(self._views):
            if view.id == key:
                return index
        return -1

    def __len__(self) -> int:
        return len(self._views)

    def __contains__(self, key: str) -> bool:
        return self.find_index(key) != -1

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def open(
        self,
        key: str,
        title: str,
        component: Any = None,
        props: Optional[dict[str, Any]] = None,
        closable: bool = True,
        merge: bool = False
        ) -> VWView:
        """
        Activate the view with `key`, opening it if needed.

        An already open view keeps its place, title and component; only its
        props change: replaced by `props`, or deep-merged into the current
        ones when `merge` is set. A call without props leaves them as they are.

        Returns:
            The active view
        """
        index = self.find_index(key)
        if index != -1:
            view = self._views[index]
            if props is not None:
                if merge:
                    new_props = mergedeep.merge({}, view.props, props)
                else:
                    new_props = dict(props)
                view = view.model_copy(update={"props": new_props})
                self._views[index] = view
            self.active_index = index
            logger.debug("View re-activated", key=key, index=index)
            return view

        view = VWView(id=key, title=title, component=component, props=dict(props or {}), closable=closable)
        self._views.append(view)
        self.active_index = len(self._views) - 1
        logger.debug("View opened", key=key, index=self.active_index)
        return view

    def add_new_view(
        self,
        title: str,
        component: Any = None,
        props: Optional[dict[str, Any]] = None,
        closable: bool = True
        ) -> VWView:
        """Open a view under a freshly generated key (`tab-<epoch ms>`)."""
        key = f"tab-{epoch_millis()}"
        while key in self:
            key = f"{key}-1"
        return self.open(key, title, component, props, closable)

    def open_user_profile(self, user: dict[str, Any], component: Any = None) -> VWView:
        """Open (or re-activate) the profile view of `user`; one per user."""
        user_id = user.get("id")
        title = user.get("username") or f"User {user_id}"
        return self.open(f"{PROFILE_VIEW_PREFIX}:{user_id}", title, component, props={"user": dict(user)})

    def switch_to(self, index: int) -> VWView:
        """
        Activate the view at `index`.

        Raises:
            IndexError: if `index` is out of range
        """
        self._check_index(index)
        self.active_index = index
        return self._views[index]

    def close(self, index: int) -> bool:
        """
        Close the view at `index` if it is closable.

        The active index follows: closing the active view activates index 0,
        closing a view before it shifts it down by one, closing one after it
        leaves it unchanged.

        Returns:
            False if the view is not closable (nothing changes)

        Raises:
            IndexError: if `index` is out of range
        """
        self._check_index(index)
        view = self._views[index]
        if not view.closable:
            logger.debug("View not closable", key=view.id)
            return False

        del self._views[index]
        if index == self.active_index:
            self.active_index = 0
        elif index < self.active_index:
            self.active_index -= 1
        logger.debug("View closed", key=view.id, active_index=self.active_index)
        return True

    def reset(self) -> None:
        """Back to the default view only."""
        self._views = [self._default.model_copy(deep=True)]
        self.active_index = 0

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._views):
            raise IndexError(f"view index {index} out of range (0..{len(self._views) - 1})")
