"""
Unit Tests - Visitor Sessions
"""
from backoffice.analytics.sessions import SessionTracker


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestSessionTracker:
    """Tests for SessionTracker"""

    def test_same_client_keeps_session(self):
        clock = FakeClock()
        sessions = SessionTracker(expiry_minutes=30, clock=clock)

        first = sessions.get_session_id("1.2.3.4|firefox")
        clock.now += 29 * 60
        second = sessions.get_session_id("1.2.3.4|firefox")

        assert first == second

    def test_activity_extends_session(self):
        clock = FakeClock()
        sessions = SessionTracker(expiry_minutes=30, clock=clock)

        first = sessions.get_session_id("client")
        clock.now += 20 * 60
        sessions.get_session_id("client")
        clock.now += 20 * 60

        assert sessions.get_session_id("client") == first

    def test_expired_session_replaced(self):
        clock = FakeClock()
        sessions = SessionTracker(expiry_minutes=30, clock=clock)

        first = sessions.get_session_id("client")
        clock.now += 30 * 60

        assert sessions.get_session_id("client") != first

    def test_clients_isolated(self):
        sessions = SessionTracker(expiry_minutes=30, clock=FakeClock())
        assert sessions.get_session_id("a") != sessions.get_session_id("b")

    def test_purge_expired(self):
        clock = FakeClock()
        sessions = SessionTracker(expiry_minutes=1, clock=clock)
        sessions.get_session_id("a")
        sessions.get_session_id("b")
        clock.now += 61

        assert sessions.purge_expired() == 2
        assert len(sessions) == 0

    def test_lookups_drop_expired_clients(self):
        """Idle clients are forgotten without an explicit purge"""
        clock = FakeClock()
        sessions = SessionTracker(expiry_minutes=30, clock=clock)

        for n in range(1000):
            sessions.get_session_id(f"client-{n}")
            clock.now += 3600

        assert len(sessions) == 1
