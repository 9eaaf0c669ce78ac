"""
Supabase (GoTrue + PostgREST) auth provider over httpx. One instance per kiosk
device; the session lives in memory only.
"""

import asyncio
import logging
import time
from typing import Any, Optional

import httpx

from app.application.exceptions import AuthenticationFailedError, TransportFailureError
from app.domain.models.identity import AuthSession, UserProfile
from app.identity.session_reconciler import AuthEvent, AuthListener

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id,name,email,role,commune_id,phone"
REFRESH_MARGIN_SECONDS = 60

# Never reveal which of email/password was wrong.
INVALID_CREDENTIALS_MESSAGE = "Incorrect email or password"


class _Subscription:
    def __init__(self, listeners: list[AuthListener], listener: AuthListener) -> None:
        self._listeners = listeners
        self._listener = listener

    def unsubscribe(self) -> None:
        if self._listener in self._listeners:
            self._listeners.remove(self._listener)


def _session_from_token_response(body: dict[str, Any]) -> AuthSession:
    user = body.get("user") or {}
    expires_at = body.get("expires_at")
    if expires_at is None and body.get("expires_in") is not None:
        expires_at = int(time.time()) + int(body["expires_in"])
    return AuthSession(
        user_id=user["id"],
        access_token=body["access_token"],
        refresh_token=body.get("refresh_token"),
        expires_at=expires_at,
        email=user.get("email"),
    )


class SupabaseAuthProvider:
    """Implements AuthProvider. Emits INITIAL_SESSION to each new subscriber on the next loop turn."""

    def __init__(self, http: httpx.AsyncClient, base_url: str, api_key: str) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._session: Optional[AuthSession] = None
        self._listeners: list[AuthListener] = []
        self._pending: set[asyncio.Task] = set()

    def _headers(self, access_token: Optional[str] = None) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {access_token or self._api_key}",
        }

    async def get_session(self) -> Optional[AuthSession]:
        session = self._session
        if session is None:
            return None
        if (
            session.expires_at is not None
            and session.refresh_token
            and time.time() >= session.expires_at - REFRESH_MARGIN_SECONDS
        ):
            return await self.refresh_session()
        return session

    async def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        token = self._session.access_token if self._session else None
        try:
            response = await self._http.get(
                f"{self._base_url}/rest/v1/users",
                params={"id": f"eq.{user_id}", "select": PROFILE_COLUMNS},
                headers=self._headers(token),
            )
        except httpx.HTTPError as e:
            raise TransportFailureError(f"Profile request failed: {e.__class__.__name__}") from e
        if not response.is_success:
            raise TransportFailureError(
                "Profile could not be loaded", status_code=response.status_code
            )
        rows = response.json()
        if not rows:
            return None
        row = rows[0]
        return UserProfile(
            id=str(row["id"]),
            name=row.get("name"),
            email=row.get("email"),
            role=row.get("role"),
            commune_id=str(row["commune_id"]) if row.get("commune_id") is not None else None,
            phone=row.get("phone"),
        )

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        body = await self._token_request("password", {"email": email, "password": password})
        self._session = _session_from_token_response(body)
        await self._emit(AuthEvent.SIGNED_IN)
        return self._session

    async def refresh_session(self) -> Optional[AuthSession]:
        if self._session is None or not self._session.refresh_token:
            return self._session
        try:
            body = await self._token_request(
                "refresh_token", {"refresh_token": self._session.refresh_token}
            )
        except AuthenticationFailedError:
            logger.info("session_refresh_rejected")
            self._session = None
            await self._emit(AuthEvent.SIGNED_OUT)
            return None
        self._session = _session_from_token_response(body)
        await self._emit(AuthEvent.TOKEN_REFRESHED)
        return self._session

    async def sign_out(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            try:
                response = await self._http.post(
                    f"{self._base_url}/auth/v1/logout",
                    headers=self._headers(session.access_token),
                )
            except httpx.HTTPError as e:
                raise TransportFailureError(f"Sign-out failed: {e.__class__.__name__}") from e
            if not response.is_success and response.status_code != 401:
                raise TransportFailureError("Sign-out failed", status_code=response.status_code)
        await self._emit(AuthEvent.SIGNED_OUT)

    def subscribe(self, listener: AuthListener) -> _Subscription:
        self._listeners.append(listener)
        task = asyncio.get_running_loop().create_task(
            listener(AuthEvent.INITIAL_SESSION, self._session)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return _Subscription(self._listeners, listener)

    async def _token_request(self, grant_type: str, payload: dict[str, str]) -> dict[str, Any]:
        try:
            response = await self._http.post(
                f"{self._base_url}/auth/v1/token",
                params={"grant_type": grant_type},
                json=payload,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise TransportFailureError(f"Auth request failed: {e.__class__.__name__}") from e
        if response.status_code in (400, 401, 422):
            logger.info("auth_rejected", extra={"grant_type": grant_type})
            raise AuthenticationFailedError(INVALID_CREDENTIALS_MESSAGE)
        if not response.is_success:
            raise TransportFailureError(
                "Authentication service unavailable", status_code=response.status_code
            )
        return response.json()

    async def _emit(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            await listener(event, self._session)
