"""Tests for SessionGate subscriptions and the notification bus."""

import pytest

from tagnote.client.identity import SIGNED_IN, SIGNED_OUT
from tagnote.client.notifications import NotificationBus
from tagnote.client.session_gate import SessionGate
from tagnote.core.errors import AuthRequired

from fakes import FakeIdentity, make_session


class TestSessionGate:
    @pytest.mark.asyncio
    async def test_loads_current_session(self):
        session = make_session()
        async with SessionGate(FakeIdentity(session)) as gate:
            assert gate.loaded is True
            assert gate.user.email == "alice@example.com"
            assert gate.access_token == "access-1"
            assert gate.require_user() is session.user

    @pytest.mark.asyncio
    async def test_require_user_without_session(self):
        async with SessionGate(FakeIdentity()) as gate:
            with pytest.raises(AuthRequired):
                gate.require_user()

    def test_follows_identity_events(self):
        identity = FakeIdentity()
        gate = SessionGate(identity)
        seen = []
        gate.subscribe(seen.append)

        session = make_session()
        identity.emit(SIGNED_IN, session)
        identity.emit(SIGNED_OUT, None)

        assert seen == [session.user, None]
        assert gate.user is None

    @pytest.mark.asyncio
    async def test_unsubscribes_on_exit(self):
        identity = FakeIdentity()
        async with SessionGate(identity) as gate:
            assert len(identity.listeners) == 1
        assert len(identity.listeners) == 0
        assert gate.closed is True
        identity.emit(SIGNED_IN, make_session())
        assert gate.user is None

    def test_subscription_unsubscribe_is_idempotent(self):
        gate = SessionGate(FakeIdentity())
        subscription = gate.subscribe(lambda user: None)
        subscription.unsubscribe()
        subscription.unsubscribe()
        assert subscription.active is False


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestNotificationBus:
    def test_keeps_latest_four(self):
        bus = NotificationBus(display_seconds=None)
        for i in range(6):
            bus.success(f"m{i}")
        assert [n.message for n in bus.items] == ["m2", "m3", "m4", "m5"]

    def test_expires_after_display_time(self):
        clock = FakeClock()
        bus = NotificationBus(clock=clock)
        bus.error("first")
        clock.now = 2.0
        bus.success("second")
        clock.now = 3.5
        assert [n.message for n in bus.items] == ["second"]

    def test_listeners_and_variants(self):
        bus = NotificationBus()
        seen = []
        bus.subscribe(lambda n: seen.append((n.variant, n.message)))
        bus.error("bad")
        assert seen == [("error", "bad")]
        with pytest.raises(ValueError):
            bus.notify("x", "warning")

    def test_dismiss(self):
        bus = NotificationBus(display_seconds=None)
        item = bus.success("a")
        bus.dismiss(item.id)
        assert bus.items == []
