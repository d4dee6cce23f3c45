"""
Unit Tests - Read Time Tracker
"""
import asyncio

import pytest

from backoffice.analytics.read_time import ReadTimeTracker


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def drive(tracker, clock, seconds):
    for _ in range(seconds):
        clock.advance(1)
        tracker.tick()


@pytest.fixture
def submitted():
    return []


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(submitted, clock):
    async def submit(minutes):
        submitted.append(minutes)

    return ReadTimeTracker(submit, away_after=30, clock=clock)


class TestAccumulation:
    """Tests for tick accounting"""

    def test_present_reader_accumulates(self, tracker, clock):
        drive(tracker, clock, 20)
        assert tracker.seconds == 20

    def test_away_reader_stops_accumulating(self, tracker, clock):
        drive(tracker, clock, 45)
        assert tracker.seconds == 30
        assert tracker.is_away()

    def test_interaction_resumes_counting(self, tracker, clock):
        drive(tracker, clock, 45)
        tracker.record_interaction()
        drive(tracker, clock, 10)
        assert tracker.seconds == 40

    def test_minutes_rounded(self, tracker, clock):
        for _ in range(9):
            drive(tracker, clock, 10)
            tracker.record_interaction()
        assert tracker.seconds == 90
        assert tracker.minutes == 1.5

    def test_away_threshold_from_config(self, test_settings):
        async def submit(minutes):
            return None

        assert ReadTimeTracker(submit).away_after == test_settings.analytics.away_after_seconds


class TestSubmission:
    """Tests for the send-once guard"""

    async def test_sent_once(self, tracker, clock, submitted):
        drive(tracker, clock, 12)

        assert await tracker.send() is True
        assert await tracker.send() is False
        assert submitted == [0.2]

    async def test_failed_submit_can_retry(self, clock):
        calls = []

        async def flaky(minutes):
            calls.append(minutes)
            if len(calls) == 1:
                raise ConnectionError("offline")

        tracker = ReadTimeTracker(flaky, clock=clock)

        with pytest.raises(ConnectionError):
            await tracker.send()
        assert tracker.sent is False
        assert await tracker.send() is True
        assert len(calls) == 2

    async def test_background_ticks_then_finish(self, submitted):
        async def submit(minutes):
            submitted.append(minutes)

        tracker = ReadTimeTracker(submit, tick_seconds=0.01, away_after=30)
        tracker.start()
        tracker.start()
        assert tracker.running

        await asyncio.sleep(0.1)
        assert await tracker.finish() is True

        assert not tracker.running
        assert tracker.seconds > 0
        assert len(submitted) == 1
