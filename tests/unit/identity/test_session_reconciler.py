"""Session reconciler tests: initial duplicate event, sign-out, refresh, profile failures."""

import pytest

from app.application.exceptions import AuthenticationFailedError, TransportFailureError
from app.domain.models.identity import AuthSession, UserProfile
from app.identity.session_reconciler import AuthEvent, ReconcilerState, SessionReconciler
from tests.unit.fakes import FakeAuthProvider

SESSION = AuthSession(user_id="user-1", access_token="tok", refresh_token="ref")
PROFILE = UserProfile(id="user-1", name="Agent Smith", commune_id="c-1")


async def test_initialize_loads_session_and_profile():
    provider = FakeAuthProvider(session=SESSION, profile=PROFILE)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    snap = reconciler.snapshot()
    assert snap.has_session is True
    assert snap.profile == PROFILE
    assert reconciler.state == ReconcilerState.AWAITING_INITIAL_EVENT


async def test_first_notification_is_consumed_without_side_effects():
    provider = FakeAuthProvider(session=SESSION, profile=PROFILE)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    calls = provider.profile_calls
    # Mirror of the initial state, even if it claims signed-out.
    await provider.emit(AuthEvent.SIGNED_OUT, None)
    assert reconciler.has_session is True
    assert provider.profile_calls == calls
    assert reconciler.state == ReconcilerState.LISTENING


async def test_signed_out_clears_session():
    provider = FakeAuthProvider(session=SESSION, profile=PROFILE)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    await provider.emit(AuthEvent.INITIAL_SESSION, SESSION)
    await provider.emit(AuthEvent.SIGNED_OUT, None)
    snap = reconciler.snapshot()
    assert snap.has_session is False
    assert snap.profile is None


async def test_signed_in_notification_marks_session_and_loads_profile():
    provider = FakeAuthProvider(profile=PROFILE)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    await provider.emit(AuthEvent.INITIAL_SESSION, None)
    assert reconciler.state == ReconcilerState.LISTENING
    assert reconciler.has_session is False

    await provider.emit(AuthEvent.SIGNED_IN, SESSION)

    snap = reconciler.snapshot()
    assert snap.has_session is True
    assert snap.user_id == "user-1"
    assert snap.profile == PROFILE
    assert provider.profile_calls == 1


async def test_token_refresh_keeps_session_and_reloads_profile():
    provider = FakeAuthProvider(session=SESSION, profile=PROFILE)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    await provider.emit(AuthEvent.INITIAL_SESSION, SESSION)
    calls = provider.profile_calls
    await provider.emit(AuthEvent.TOKEN_REFRESHED, SESSION)
    assert reconciler.has_session is True
    assert provider.profile_calls == calls + 1


async def test_profile_failure_leaves_session_authoritative():
    provider = FakeAuthProvider(session=SESSION, profile=PROFILE)
    provider.profile_error = TransportFailureError("db down", status_code=503)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    assert reconciler.has_session is True
    assert reconciler.profile is None


async def test_sign_in_and_sign_out():
    provider = FakeAuthProvider(profile=PROFILE)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    assert reconciler.has_session is False
    snap = await reconciler.sign_in("agent@example.org", "secret")
    assert snap.has_session is True
    assert snap.profile == PROFILE
    await reconciler.sign_out()
    assert reconciler.has_session is False


async def test_sign_in_wrong_password_is_generic():
    provider = FakeAuthProvider(profile=PROFILE)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    with pytest.raises(AuthenticationFailedError) as exc_info:
        await reconciler.sign_in("agent@example.org", "nope")
    assert "email or password" in exc_info.value.message
    assert reconciler.has_session is False


async def test_close_unsubscribes():
    provider = FakeAuthProvider(session=SESSION, profile=PROFILE)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    reconciler.close()
    assert provider.listener is None
    assert reconciler.state == ReconcilerState.CLOSED
