"""
Auth Session Client

Client-side session for a cookie-authenticated auth backend: keeps the
current user and loading state, runs the account operations over HTTP and
republishes changes to subscribers.

Architecture:
    UI / CLI → SessionAdapter → AuthTransport (httpx) → Auth backend
"""
from auth_session.adapter import SessionAdapter
from auth_session.config import Settings, get_settings
from auth_session.errors import AuthSessionError, ServerRejection, TransportFailure
from auth_session.notifications import (
    Notification,
    NotificationLevel,
    NotificationRecorder,
    log_notifier,
)
from auth_session.state import SessionSnapshot, SessionState
from auth_session.transport import AuthTransport

__all__ = [
    'SessionAdapter',
    'SessionState',
    'SessionSnapshot',
    'AuthTransport',
    'Settings',
    'get_settings',
    'AuthSessionError',
    'ServerRejection',
    'TransportFailure',
    'Notification',
    'NotificationLevel',
    'NotificationRecorder',
    'log_notifier',
]
