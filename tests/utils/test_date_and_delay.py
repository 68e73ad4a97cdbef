"""日付変換・待機ユーティリティのテスト"""

from unittest.mock import patch

import pytest

from keiba_batch.utils.date_utils import is_iso_date, to_compact_date, to_iso_date
from keiba_batch.utils.delay import backoff_delay, random_delay


class TestDateUtils:
    """日付変換のテスト"""

    @pytest.mark.parametrize("value", ["20250719", "2025-07-19", " 2025-07-19 "])
    def test_to_iso_date(self, value):
        """YYYYMMDDをYYYY-MM-DDに変換する"""
        assert to_iso_date(value) == "2025-07-19"

    def test_to_compact_date(self):
        """YYYY-MM-DDをYYYYMMDDに変換する"""
        assert to_compact_date("2025-07-19") == "20250719"

    @pytest.mark.parametrize("value", ["2025/07/19", "250719", "20251332", ""])
    def test_invalid_date_raises(self, value):
        """不正な日付はエラー"""
        with pytest.raises(ValueError):
            to_iso_date(value)

    @pytest.mark.parametrize(
        "value, expected",
        [("2025-07-19", True), ("2025-02-30", False), ("20250719", False), (None, False)],
    )
    def test_is_iso_date(self, value, expected):
        """YYYY-MM-DD形式かどうかを判定する"""
        assert is_iso_date(value) is expected


class TestBackoffDelay:
    """指数バックオフのテスト"""

    def test_doubles_per_attempt(self):
        """試行ごとに倍になる"""
        assert [backoff_delay(i) for i in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_capped_at_maximum(self):
        """上限で頭打ちになる"""
        assert backoff_delay(4) == 10.0
        assert backoff_delay(10) == 10.0

    def test_custom_base_and_cap(self):
        """基準値と上限を指定できる"""
        assert backoff_delay(3, base=0.5, maximum=3.0) == 3.0


class TestRandomDelay:
    @patch("keiba_batch.utils.delay.time.sleep")
    def test_sleeps_within_range(self, mock_sleep):
        """範囲内の時間だけ待機する"""
        seconds = random_delay(1.0, 3.0)

        assert 1.0 <= seconds <= 3.0
        mock_sleep.assert_called_once_with(seconds)

    @patch("keiba_batch.utils.delay.time.sleep")
    def test_zero_does_not_sleep(self, mock_sleep):
        """0秒なら待機しない"""
        random_delay(0, 0)

        mock_sleep.assert_not_called()
