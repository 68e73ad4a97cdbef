"""BaseScraper の取得・リトライのテスト"""

from unittest.mock import Mock, patch

import pytest
import requests

from keiba_batch.scrapers.base import BaseScraper


def make_response(status_code, text=""):
    response = Mock(status_code=status_code, text=text)
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    return response


class TestBaseScraperFetch:
    """HTTPエラー時のリトライとバックオフのテスト"""

    def setup_method(self):
        """各テスト前にグローバルタイマーをリセット"""
        BaseScraper._global_last_request_time = None

    @patch("keiba_batch.scrapers.base.requests.Session.get")
    @patch("keiba_batch.scrapers.base.time.sleep")
    def test_retry_on_503_with_backoff(self, mock_sleep, mock_get):
        """503エラー時にバックオフしてリトライする"""
        mock_get.side_effect = [make_response(503), make_response(503), make_response(200, "<html>ok</html>")]

        result = BaseScraper(delay=0).fetch("https://race.netkeiba.com/top/race_list_sub.html")

        assert result == "<html>ok</html>"
        assert mock_get.call_count == 3
        backoff_calls = [c.args[0] for c in mock_sleep.call_args_list if c.args[0] >= 5]
        assert backoff_calls == [5, 10]

    @patch("keiba_batch.scrapers.base.requests.Session.get")
    @patch("keiba_batch.scrapers.base.time.sleep")
    def test_raises_http_error_after_max_retries(self, mock_sleep, mock_get):
        """リトライ上限に達したらHTTPErrorを送出する"""
        mock_get.return_value = make_response(429)

        with pytest.raises(requests.HTTPError):
            BaseScraper(delay=0).fetch("https://example.com/page")

        assert mock_get.call_count == 4

    @patch("keiba_batch.scrapers.base.requests.Session.get")
    @patch("keiba_batch.scrapers.base.time.sleep")
    def test_no_retry_on_404(self, mock_sleep, mock_get):
        """404エラーはリトライしない"""
        mock_get.return_value = make_response(404)

        with pytest.raises(requests.HTTPError):
            BaseScraper(delay=0).fetch("https://example.com/missing")

        assert mock_get.call_count == 1

    @patch("keiba_batch.scrapers.base.requests.Session.get")
    @patch("keiba_batch.scrapers.base.time.sleep")
    def test_netkeiba_uses_euc_jp(self, mock_sleep, mock_get):
        """netkeibaのページはEUC-JPでデコードする"""
        response = make_response(200, "<html></html>")
        mock_get.return_value = response

        BaseScraper(delay=0).fetch("https://race.netkeiba.com/race/shutuba.html?race_id=202502010701")

        assert response.encoding == "EUC-JP"

    @patch("keiba_batch.scrapers.base.time.time", return_value=100.5)
    @patch("keiba_batch.scrapers.base.time.sleep")
    def test_rate_limit(self, mock_sleep, mock_time):
        """連続リクエストの間隔を空ける"""
        BaseScraper._global_last_request_time = 100.0

        BaseScraper(delay=2.0)._apply_delay()

        mock_sleep.assert_called_once_with(1.5)
