"""Collaborator wrapper that turns scraper failures into empty results."""

import logging
from typing import Any

from keiba_batch.scrapers.base import RawResult, ScraperCollaborator


class SafeScraper:
    """スクレイパーの例外を捕捉し、空リストとして扱うラッパー

    1ユニットの失敗で他のユニットが止まらないようにする。
    """

    def __init__(
        self, inner: ScraperCollaborator, name: str = "", logger: logging.Logger | None = None
    ) -> None:
        self.inner = inner
        self.name = name or type(inner).__name__
        self.logger = logger or logging.getLogger(__name__)

    def scrape(self, date: str, track_code: str, **options: Any) -> list[RawResult]:
        try:
            results = self.inner.scrape(date, track_code, **options)
        except Exception:
            self.logger.exception(
                "スクレイピングに失敗しました: %s date=%s track=%s", self.name, date, track_code
            )
            return []

        if not isinstance(results, list):
            self.logger.error("スクレイピング結果がリストではありません: %s", self.name)
            return []
        return [result for result in results if isinstance(result, dict)]
