"""Tests for click analytics."""

from datetime import date, datetime, timezone

import pytest
from brandlink.analytics import (
    ClickRecorder,
    build_daily_series,
    detect_device_type,
    normalize_days,
    truncate_text,
    window_start,
)
from brandlink.database.models import DeviceType, LinkAnalytics


class TestDetectDeviceType:
    """Test user agent classification."""
    
    def test_bots(self):
        assert detect_device_type("Googlebot/2.1 (+http://www.google.com/bot.html)") == DeviceType.BOT
        assert detect_device_type("facebookexternalhit/1.1") == DeviceType.BOT
        assert detect_device_type("Slackbot-LinkExpanding 1.0") == DeviceType.BOT
    
    def test_bot_wins_over_mobile(self):
        """Test a mobile crawler still counts as a bot."""
        agent = "Mozilla/5.0 (Linux; Android 6.0.1; Nexus 5X) Mobile (compatible; Googlebot/2.1)"
        assert detect_device_type(agent) == DeviceType.BOT
    
    def test_mobile(self):
        agent = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15"
        assert detect_device_type(agent) == DeviceType.MOBILE
        assert detect_device_type("Mozilla/5.0 (Linux; Android 14)") == DeviceType.MOBILE
    
    def test_desktop(self):
        agent = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
        assert detect_device_type(agent) == DeviceType.DESKTOP
    
    def test_missing_agent(self):
        assert detect_device_type(None) == DeviceType.DESKTOP
        assert detect_device_type("") == DeviceType.DESKTOP


class TestHelpers:
    """Test text and window helpers."""
    
    def test_truncate_text(self):
        assert truncate_text(None) is None
        assert truncate_text("") is None
        assert truncate_text("short") == "short"
        assert len(truncate_text("x" * 600)) == 500
    
    def test_normalize_days(self):
        """Test default, cap and garbage handling."""
        assert normalize_days(None) == 14
        assert normalize_days("7") == 7
        assert normalize_days("0") == 14
        assert normalize_days("-3") == 14
        assert normalize_days("abc") == 14
        assert normalize_days("365") == 90
        assert normalize_days("30", default=7, maximum=20) == 20
    
    def test_window_start(self):
        start = window_start(7, today=date(2024, 3, 10))
        assert start == datetime(2024, 3, 4, tzinfo=timezone.utc)


class TestBuildDailySeries:
    """Test daily bucketing."""
    
    def _event(self, device, created_at):
        return LinkAnalytics(link_id="l1", team_id="t1", device=device, created_at=created_at)
    
    def test_empty_window(self):
        """Test every day of the window is present, oldest first."""
        report = build_daily_series([], 3, today=date(2024, 3, 10))
        
        assert report["days"] == 3
        assert [day["date"] for day in report["series"]] == ["2024-03-08", "2024-03-09", "2024-03-10"]
        assert report["totals"] == {"desktop": 0, "mobile": 0, "bot": 0, "total": 0}
    
    def test_buckets_by_device(self):
        """Test counts per day and device, ignoring events outside the window."""
        events = [
            self._event(DeviceType.DESKTOP, datetime(2024, 3, 10, 9, tzinfo=timezone.utc)),
            self._event(DeviceType.MOBILE, datetime(2024, 3, 10, 23, tzinfo=timezone.utc)),
            self._event(DeviceType.BOT, datetime(2024, 3, 9, 1, tzinfo=timezone.utc)),
            self._event(DeviceType.DESKTOP, datetime(2024, 3, 1, tzinfo=timezone.utc)),
        ]
        
        report = build_daily_series(events, 2, today=date(2024, 3, 10))
        
        assert report["series"] == [
            {"date": "2024-03-09", "desktop": 0, "mobile": 0, "bot": 1},
            {"date": "2024-03-10", "desktop": 1, "mobile": 1, "bot": 0},
        ]
        assert report["totals"] == {"desktop": 1, "mobile": 1, "bot": 1, "total": 3}


class FailingDB:
    async def insert_analytics(self, event):
        raise ConnectionError("write failed")


class RecordingDB:
    def __init__(self):
        self.events = []
    
    async def insert_analytics(self, event):
        self.events.append(event)


@pytest.mark.asyncio
class TestClickRecorder:
    """Test click recording."""
    
    async def test_records_event(self, logger):
        db = RecordingDB()
        recorder = ClickRecorder(db, logger=logger)
        
        await recorder.record("l1", "t1", user_agent="Googlebot/2.1", referrer="https://news.example.com")
        
        assert len(db.events) == 1
        event = db.events[0]
        assert event.device == DeviceType.BOT
        assert event.link_id == "l1"
        assert event.team_id == "t1"
        assert event.referrer == "https://news.example.com"
    
    async def test_truncates_headers(self, logger):
        db = RecordingDB()
        recorder = ClickRecorder(db, logger=logger)
        
        await recorder.record("l1", "t1", user_agent="a" * 800, referrer="")
        
        assert len(db.events[0].user_agent) == 500
        assert db.events[0].referrer is None
    
    async def test_failure_is_swallowed(self, logger):
        """Test storage errors never reach the caller."""
        recorder = ClickRecorder(FailingDB(), logger=logger)
        
        await recorder.record("l1", "t1", user_agent="Mozilla/5.0")
