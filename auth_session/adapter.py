"""
Session Adapter

Client-side session for the auth backend. Holds the current user and the
startup loading flag (SessionState) and exposes the account operations:
session check, Google/GitHub/email login, registration, logout, handle and
profile updates, account deletion.

Every operation makes a single request through AuthTransport. Server
rejections are surfaced to the user as notifications (where the operation
calls for it) and returned as a failure value; transport failures are only
logged. No exception escapes an operation.

Usage:
    async with SessionAdapter(notifier=show_toast) as session:
        if not session.user:
            await session.login_with_email("a@b.com", "secret")
"""
import logging
from typing import Any, Callable, Dict, Optional

import httpx
from pydantic import ValidationError

from auth_session.config import Settings, get_settings
from auth_session.errors import AuthSessionError, ServerRejection, TransportFailure
from auth_session.notifications import Notification, NotificationLevel, Notifier, log_notifier
from auth_session.schemas import (
    EmailLoginRequest,
    GithubLoginRequest,
    GoogleLoginRequest,
    HandleUpdateRequest,
    RegisterRequest,
    UserResponse,
)
from auth_session.state import SessionSnapshot, SessionState, User
from auth_session.transport import AuthTransport

logger = logging.getLogger(__name__)

# Backend endpoints
ME_PATH = "/api/auth/me"
GOOGLE_PATH = "/api/auth/google"
LOGIN_PATH = "/api/auth/login"
REGISTER_PATH = "/api/auth/register"
GITHUB_PATH = "/api/auth/github"
LOGOUT_PATH = "/api/auth/logout"
UPDATE_HANDLES_PATH = "/api/auth/update-handles"
UPDATE_PROFILE_PATH = "/api/auth/update-profile"
DELETE_PATH = "/api/auth/delete"


class SessionAdapter:
    """
    Auth session for a UI (or any other consumer).

    Public surface: `user`, `loading`, `subscribe()` and the nine
    operations. Concurrent operations are not serialized; the last
    response to resolve wins.
    """

    def __init__(
        self,
        base_url: str = None,
        notifier: Optional[Notifier] = None,
        settings: Optional[Settings] = None,
        transport: Optional[AuthTransport] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        state: Optional[SessionState] = None,
    ):
        """
        Initialize adapter.

        Args:
            base_url: Backend base URL (default: AUTH_API_URL)
            notifier: Callback receiving user-facing notifications (default: log them)
            settings: Settings instance (default: get_settings())
            transport: Pre-built AuthTransport (base_url/http_transport are ignored)
            http_transport: httpx transport for the owned client, e.g. httpx.MockTransport
            state: Existing SessionState to drive (default: a fresh one, loading=True)
        """
        self.settings = settings or get_settings()
        self._transport = transport or AuthTransport(
            base_url=base_url,
            transport=http_transport,
            settings=self.settings,
        )
        self._notifier = notifier or log_notifier
        self._state = state or SessionState()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def transport(self) -> AuthTransport:
        return self._transport

    def subscribe(self, callback: Callable[[SessionSnapshot], None]) -> Callable[[], None]:
        """Register for session changes. Returns the unsubscribe function."""
        return self._state.subscribe(callback)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def check_session(self) -> None:
        """
        Startup session check: ask the backend who the credential cookie
        belongs to. Always ends the loading phase, whatever the outcome.
        """
        try:
            body = await self._transport.get(ME_PATH)
            user = self._parse_user(body)
            if user:
                self._state.set_user(user)
                logger.info(f"Session restored for {user.get('email', 'unknown')}")
            else:
                logger.info("No active session")
        except ServerRejection as e:
            logger.info(f"No active session ({e.status_code})")
        except TransportFailure as e:
            logger.error(f"Failed to load user session: {e}")
        finally:
            self._state.finish_loading()

    async def login_with_google(self, token: str) -> Optional[User]:
        """
        Log in with a Google credential.

        Returns:
            The user record, or None on failure
        """
        hint = self.settings.google_config_hint
        payload = GoogleLoginRequest(token=token).model_dump()

        try:
            body = await self._transport.post(GOOGLE_PATH, payload)
            user = self._parse_user(body)
        except ServerRejection as e:
            logger.error(f"Google login failed: {e.message}")
            self._notify_error(f"Backend login failed: {e.message or 'unknown error'}. {hint}")
            return None
        except TransportFailure as e:
            logger.error(f"Google login request failed: {e}")
            self._notify_error(f"Google login request failed. {hint}")
            return None

        self._state.set_user(user)
        logger.info(f"Logged in with Google: {_email_of(user)}")
        return user

    async def login_with_email(self, email: str, password: str) -> bool:
        """Log in with email and password."""
        payload = EmailLoginRequest(email=email, password=password).model_dump()
        return await self._authenticate(LOGIN_PATH, payload, "Login failed")

    async def register_with_email(self, email: str, password: str, name: str) -> bool:
        """Create an account and log into it."""
        payload = RegisterRequest(email=email, password=password, name=name).model_dump()
        return await self._authenticate(REGISTER_PATH, payload, "Registration failed")

    async def login_with_github(self, code: str) -> bool:
        """Log in with a GitHub OAuth authorization code."""
        payload = GithubLoginRequest(code=code).model_dump()
        return await self._authenticate(GITHUB_PATH, payload, "GitHub login failed")

    async def logout(self) -> None:
        """
        Log out. The local user is cleared even if the backend call fails.
        """
        try:
            await self._transport.post(LOGOUT_PATH, expect_json=False)
            logger.info("Logged out")
            self._notify(NotificationLevel.SUCCESS, "Logged out")
        except ServerRejection as e:
            logger.warning(f"Logout rejected by backend: {e}")
        except TransportFailure as e:
            logger.error(f"Logout failed: {e}")
        finally:
            self._state.clear_user()

    async def update_handle(self, platform: str, handle: str) -> bool:
        """
        Set the user's handle for a platform.

        The handle is merged into `apiHandles` immediately (optimistic
        update) and replaced by the server's user record once it arrives.
        On failure only this platform's entry is reverted, and only while it
        still holds `handle`. Rollback can be disabled in settings.

        Returns:
            True if the backend accepted the update
        """
        previous_handles = (self._state.user or {}).get("apiHandles") or {}
        had_prior = platform in previous_handles
        prior = previous_handles.get(platform)
        self._state.merge_handle(platform, handle)

        payload = HandleUpdateRequest(platform=platform, handle=handle).model_dump()
        try:
            body = await self._transport.post(UPDATE_HANDLES_PATH, payload)
            user = self._parse_user(body)
        except AuthSessionError as e:
            logger.error(f"Failed to update {platform} handle: {e}")
            if self.settings.rollback_failed_handle_updates:
                if self._state.revert_handle(platform, handle, prior, had_prior):
                    logger.info(f"Rolled back optimistic {platform} handle")
            return False

        if user is not None:
            self._state.set_user(user)
        return True

    async def update_profile(self, details: Dict[str, Any]) -> bool:
        """Update profile fields. Returns True if the backend accepted them."""
        try:
            body = await self._transport.post(UPDATE_PROFILE_PATH, dict(details))
            user = self._parse_user(body)
        except ServerRejection as e:
            logger.warning(f"Profile update rejected: {e}")
            return False
        except TransportFailure as e:
            logger.error(f"Update profile error: {e}")
            return False

        self._state.set_user(user)
        logger.info(f"Profile updated: {sorted(details)}")
        self._notify(NotificationLevel.SUCCESS, "Profile updated")
        return True

    async def delete_account(self) -> bool:
        """Delete the account. Clears the local user only on success."""
        try:
            await self._transport.delete(DELETE_PATH, expect_json=False)
        except ServerRejection as e:
            logger.warning(f"Account deletion rejected: {e}")
            return False
        except TransportFailure as e:
            logger.error(f"Delete account error: {e}")
            return False

        logger.info(f"Account deleted: {_email_of(self._state.user)}")
        self._state.clear_user()
        self._notify(NotificationLevel.SUCCESS, "Account deleted")
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> "SessionAdapter":
        await self.check_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _authenticate(self, path: str, payload: Dict[str, Any], fallback_message: str) -> bool:
        """Shared flow for email login, registration and GitHub login."""
        try:
            body = await self._transport.post(path, payload)
            user = self._parse_user(body)
        except ServerRejection as e:
            logger.warning(f"{fallback_message}: {e}")
            self._notify_error(e.message or fallback_message)
            return False
        except TransportFailure as e:
            logger.error(f"{fallback_message}: {e}")
            return False

        self._state.set_user(user)
        logger.info(f"Authenticated via {path}: {_email_of(user)}")
        return True

    @staticmethod
    def _parse_user(body: Dict[str, Any]) -> Optional[User]:
        try:
            return UserResponse.model_validate(body).user
        except ValidationError as e:
            raise TransportFailure("Malformed user record", details=str(e)) from e

    def _notify_error(self, message: str) -> None:
        self._notify(NotificationLevel.ERROR, message)

    def _notify(self, level: NotificationLevel, message: str) -> None:
        try:
            self._notifier(Notification(level=level, message=message))
        except Exception as e:
            logger.error(f"Notifier failed: {e}", exc_info=True)


def _email_of(user: Optional[User]) -> str:
    if not user:
        return "unknown"
    return str(user.get("email", "unknown"))
