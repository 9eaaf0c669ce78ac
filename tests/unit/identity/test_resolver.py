"""Identity resolution tests: device-local precedence, session profile, unresolved cases."""

from datetime import datetime, timezone

from app.domain.models.identity import (
    AuthSession,
    DeviceLocalIdentity,
    IdentitySource,
    SessionSnapshot,
    SubmitterIdentity,
    Unresolved,
    UserProfile,
)
from app.identity.resolver import IdentityResolver, resolve_identity
from app.identity.session_reconciler import SessionReconciler
from tests.unit.fakes import FakeAuthProvider, FakeDeviceStore

PROFILE = UserProfile(id="user-7", name="Awa Koné", commune_id="commune-3", phone="+2250700000000")
DEVICE = DeviceLocalIdentity(
    identity_id="dev-id-1",
    first_name=" Kouassi",
    last_name="Yao ",
    phone="0102030405",
    enrolled_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
)


def test_device_identity_wins_over_session():
    identity = resolve_identity(
        SessionSnapshot(has_session=True, user_id="user-7", profile=PROFILE), DEVICE
    )
    assert isinstance(identity, SubmitterIdentity)
    assert identity.source == IdentitySource.DEVICE_LOCAL
    assert identity.name == "Kouassi Yao"
    assert identity.phone == "0102030405"
    assert identity.user_id == "dev-id-1"
    assert identity.commune_id is None


def test_session_profile_used_without_device_identity():
    identity = resolve_identity(
        SessionSnapshot(has_session=True, user_id="user-7", profile=PROFILE), None
    )
    assert identity.source == IdentitySource.SESSION
    assert identity.commune_id == "commune-3"
    assert identity.user_id == "user-7"


def test_session_without_profile_is_unresolved():
    identity = resolve_identity(SessionSnapshot(has_session=True, user_id="user-7"), None)
    assert isinstance(identity, Unresolved)


def test_nothing_is_unresolved():
    assert isinstance(resolve_identity(SessionSnapshot(has_session=False), None), Unresolved)


async def test_resolver_reads_store_and_reconciler():
    provider = FakeAuthProvider(session=AuthSession(user_id="user-7", access_token="t"), profile=PROFILE)
    reconciler = SessionReconciler(provider)
    await reconciler.initialize()
    store = FakeDeviceStore()
    resolver = IdentityResolver(reconciler, store)

    identity = await resolver.resolve("kiosk-1")
    assert identity.source == IdentitySource.SESSION

    await store.save("kiosk-1", DEVICE)
    identity = await resolver.resolve("kiosk-1")
    assert identity.source == IdentitySource.DEVICE_LOCAL
    other = await resolver.resolve("kiosk-2")
    assert other.source == IdentitySource.SESSION


async def test_resolver_without_sources():
    assert isinstance(await IdentityResolver(None, None).resolve(None), Unresolved)
