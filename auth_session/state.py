"""
Session State Container

Holds the current user record and the startup loading flag, and notifies
subscribers whenever either changes.

`loading` starts True and flips to False exactly once, when the startup
session check resolves. `user` is None while unauthenticated.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

User = Dict[str, Any]


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Immutable view of the session handed to subscribers.

    Attributes:
        user: Copy of the current user record, or None when logged out
        loading: True until the startup session check has resolved
    """
    user: Optional[User]
    loading: bool

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


Subscriber = Callable[[SessionSnapshot], None]


class SessionState:
    """
    Owned session state with a change-notification contract.

    Mutations happen only through the methods below, from the event loop
    that runs the adapter's operations. Subscribers are called after the
    change is applied and receive a deep copy of the user.
    """

    def __init__(self, user: Optional[User] = None):
        self._user: Optional[User] = user
        self._loading = True
        self._subscribers: List[Subscriber] = []

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def loading(self) -> bool:
        return self._loading

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(user=copy.deepcopy(self._user), loading=self._loading)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a change callback.

        Returns:
            Function that removes the callback again
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def set_user(self, user: Optional[User]) -> None:
        """Replace the stored user (None clears it)."""
        changed = user != self._user
        self._user = user
        if not changed:
            return

        logger.debug(f"Session user changed: {_describe(user)}")
        self._notify()

    def clear_user(self) -> None:
        self.set_user(None)

    def merge_handle(self, platform: str, handle: str) -> None:
        """Set apiHandles[platform], creating the user mapping if needed."""
        user = self._user or {}
        handles = dict(user.get("apiHandles") or {})
        handles[platform] = handle
        self.set_user({**user, "apiHandles": handles})

    def revert_handle(
        self,
        platform: str,
        handle: str,
        prior: Optional[str],
        had_prior: bool,
    ) -> bool:
        """
        Undo merge_handle(platform, handle) for that platform only.

        Nothing happens if apiHandles[platform] no longer holds `handle`
        (a later write owns it). Other platforms are untouched.

        Returns:
            True if the entry was reverted
        """
        if self._user is None:
            return False

        handles = dict(self._user.get("apiHandles") or {})
        if platform not in handles or handles[platform] != handle:
            return False

        if had_prior:
            handles[platform] = prior
        else:
            del handles[platform]

        reverted: Optional[User] = {**self._user, "apiHandles": handles}
        if not handles and set(reverted) == {"apiHandles"}:
            # Mapping only existed to hold the optimistic handle
            reverted = None

        self.set_user(reverted)
        return True

    def finish_loading(self) -> None:
        """Mark the startup session check as resolved. One-way."""
        if not self._loading:
            return
        self._loading = False
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()

        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Session subscriber {callback!r} failed: {e}", exc_info=True)


def _describe(user: Optional[User]) -> str:
    if user is None:
        return "logged out"
    return str(user.get("email") or user.get("id") or "anonymous")
