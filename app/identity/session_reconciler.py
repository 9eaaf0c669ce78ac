"""
Session reconciler: keeps `has_session` and `profile` in step with the auth backend.

Precondition on the auth provider: right after subscribe() it emits one
notification that mirrors the current session (INITIAL_SESSION). That
notification duplicates the explicit initial check done in initialize(), so the
reconciler consumes it in the AWAITING_INITIAL_EVENT state without acting on it.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

from app.application.exceptions import ApplicationError, AuthenticationFailedError
from app.domain.models.identity import AuthSession, SessionSnapshot, UserProfile

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], Awaitable[None]]


class Subscription(Protocol):
    def unsubscribe(self) -> None:
        ...


class AuthProvider(Protocol):
    """Boundary to the server auth mechanism."""

    async def get_session(self) -> Optional[AuthSession]:
        ...

    async def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        ...

    async def sign_out(self) -> None:
        ...

    def subscribe(self, listener: AuthListener) -> Subscription:
        ...


class ReconcilerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    AWAITING_INITIAL_EVENT = "awaiting_initial_event"
    LISTENING = "listening"
    CLOSED = "closed"


class SessionReconciler:
    """
    uninitialized -> awaiting_initial_event -> listening -> closed.
    Only SIGNED_OUT clears the session; TOKEN_REFRESHED reloads the profile
    without touching has_session.
    """

    def __init__(self, provider: AuthProvider) -> None:
        self._provider = provider
        self._state = ReconcilerState.UNINITIALIZED
        self._subscription: Optional[Subscription] = None
        self._has_session = False
        self._user_id: Optional[str] = None
        self._profile: Optional[UserProfile] = None

    @property
    def state(self) -> ReconcilerState:
        return self._state

    @property
    def has_session(self) -> bool:
        return self._has_session

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._profile

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            has_session=self._has_session,
            user_id=self._user_id,
            profile=self._profile,
        )

    async def initialize(self) -> None:
        """Subscribe, then run the explicit initial session check."""
        if self._state != ReconcilerState.UNINITIALIZED:
            return
        self._state = ReconcilerState.AWAITING_INITIAL_EVENT
        self._subscription = self._provider.subscribe(self._on_auth_event)
        try:
            session = await self._provider.get_session()
        except ApplicationError as e:
            logger.warning("session_check_failed", extra={"error": e.message})
            session = None
        if session is None:
            self._clear()
        else:
            self._has_session = True
            self._user_id = session.user_id
            await self._reload_profile()
        logger.info("session_initialized", extra={"has_session": self._has_session})

    async def sign_in(self, email: str, password: str) -> SessionSnapshot:
        """Password sign-in. Raises AuthenticationFailedError with a user-safe message."""
        if not email or not password:
            raise AuthenticationFailedError("Email and password are required")
        session = await self._provider.sign_in_with_password(email, password)
        self._has_session = True
        self._user_id = session.user_id
        await self._reload_profile()
        logger.info("signed_in", extra={"user_id": session.user_id})
        return self.snapshot()

    async def sign_out(self) -> None:
        await self._provider.sign_out()
        self._clear()
        logger.info("signed_out")

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._state = ReconcilerState.CLOSED

    async def _on_auth_event(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        if self._state == ReconcilerState.AWAITING_INITIAL_EVENT:
            self._state = ReconcilerState.LISTENING
            logger.debug("initial_auth_event_consumed", extra={"auth_event": event.value})
            return
        if self._state != ReconcilerState.LISTENING:
            return

        if event == AuthEvent.SIGNED_OUT:
            self._clear()
            logger.info("session_cleared_by_sign_out")
        elif event == AuthEvent.TOKEN_REFRESHED:
            if self._has_session:
                await self._reload_profile()
        elif event == AuthEvent.SIGNED_IN and session is not None:
            self._has_session = True
            self._user_id = session.user_id
            await self._reload_profile()

    async def _reload_profile(self) -> None:
        if self._user_id is None:
            return
        try:
            self._profile = await self._provider.get_user_profile(self._user_id)
        except ApplicationError as e:
            # has_session stays authoritative; the profile simply is not loaded yet.
            logger.warning("profile_load_failed", extra={"error": e.message})
            self._profile = None

    def _clear(self) -> None:
        self._has_session = False
        self._user_id = None
        self._profile = None
