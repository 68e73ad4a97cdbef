"""HTTP fetching shared by the netkeiba scrapers and the collaborator protocol."""

import time
from typing import Any, Protocol

import requests
from bs4 import BeautifulSoup

RawResult = dict[str, Any]


class ScraperCollaborator(Protocol):
    """External scraper used by the stage controller.

    scrape() returns raw result dicts for one (date, trackCode) unit. It may
    raise; callers wrap it in SafeScraper.
    """

    def scrape(self, date: str, track_code: str, **options: Any) -> list[RawResult]:
        ...


class BaseScraper:
    """Base class for netkeiba scrapers.

    Requests from every instance share one rate limiter so that consecutive
    requests are at least ``delay`` seconds apart. 403/429/503 responses are
    retried with backoff (5s, 10s, 30s).

    Attributes:
        DEFAULT_USER_AGENT: User-Agent sent with every request.
        RETRYABLE_STATUS_CODES: HTTP statuses that are retried.
        BACKOFF_DELAYS: Wait time before each retry.
        delay: Minimum interval between requests in seconds.
    """

    DEFAULT_USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    RETRYABLE_STATUS_CODES = frozenset({403, 429, 503})
    BACKOFF_DELAYS = (5, 10, 30)
    TIMEOUT = 10

    # 全インスタンス共有のレートリミッタ
    _global_last_request_time: float | None = None

    def __init__(self, delay: float = 1.0) -> None:
        self.delay = delay
        self.session = requests.Session()

    def fetch(self, url: str) -> str:
        """URLのHTMLを取得する

        Raises:
            requests.HTTPError: リトライ不可のエラー、またはリトライ上限に達した場合
        """
        headers = {
            "User-Agent": self.DEFAULT_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "ja,en-US;q=0.9,en;q=0.8",
            "Referer": "https://race.netkeiba.com/",
        }

        for attempt in range(len(self.BACKOFF_DELAYS) + 1):
            self._apply_delay()
            try:
                response = self.session.get(url, headers=headers, timeout=self.TIMEOUT)
            finally:
                BaseScraper._global_last_request_time = time.time()

            # netkeiba は EUC-JP
            if "netkeiba.com" in url:
                response.encoding = "EUC-JP"

            if (
                response.status_code in self.RETRYABLE_STATUS_CODES
                and attempt < len(self.BACKOFF_DELAYS)
            ):
                time.sleep(self.BACKOFF_DELAYS[attempt])
                continue

            response.raise_for_status()
            return response.text

        raise requests.HTTPError(f"Max retries exceeded: {url}")

    def _apply_delay(self) -> None:
        if BaseScraper._global_last_request_time is None:
            return
        elapsed = time.time() - BaseScraper._global_last_request_time
        if elapsed < self.delay:
            time.sleep(self.delay - elapsed)

    def get_soup(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")
