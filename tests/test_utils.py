"""
Utility function tests
"""
import pytest
from datetime import datetime, timedelta

from utils.text_utils import format_elapsed, get_random_string, time_ago


class TestTextUtils:

    def test_get_random_string_length(self):
        result = get_random_string(10)
        assert len(result) == 10

    def test_get_random_string_characters(self):
        result = get_random_string(20)
        assert result.isalpha()

    @pytest.mark.parametrize("seconds,expected", [
        (0, "0:00"),
        (59, "0:59"),
        (61, "1:01"),
        (3599, "59:59"),
        (3600, "1:00:00"),
        (3725, "1:02:05"),
        (-5, "0:00"),
    ])
    def test_format_elapsed(self, seconds, expected):
        assert format_elapsed(seconds) == expected


class TestTimeAgo:

    now = datetime(2024, 5, 10, 12, 0)

    @pytest.mark.parametrize("delta,expected", [
        (timedelta(seconds=30), "just now"),
        (timedelta(minutes=5), "5 min ago"),
        (timedelta(hours=3), "3 hours ago"),
        (timedelta(days=2), "2 days ago"),
        (timedelta(days=15), "2 weeks ago"),
    ])
    def test_time_ago(self, delta, expected):
        assert time_ago(self.now - delta, self.now) == expected
