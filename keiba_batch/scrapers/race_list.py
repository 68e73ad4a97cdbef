"""Race list scraper (race.netkeiba.com/top/race_list_sub.html).

The race list page supports both past and future dates. Race IDs have the
form YYYYPPNNRRXX where PP is the JRA track code and XX the race number.
"""

import re

from keiba_batch.constants import JRA_COURSE_CODES
from keiba_batch.scrapers.base import BaseScraper
from keiba_batch.utils.date_utils import to_compact_date

RACE_ID_PATTERN = re.compile(r"race_id=(\d{12})")


def track_code_of(race_id: str) -> str:
    return race_id[4:6]


def race_number_of(race_id: str) -> int:
    return int(race_id[10:12])


class RaceListScraper(BaseScraper):
    """指定日のレースID一覧を取得するスクレイパー

    Example:
        >>> scraper = RaceListScraper()
        >>> scraper.fetch_race_ids("2025-07-19", track_code="02")[0]
        '202502010701'
    """

    BASE_URL = "https://race.netkeiba.com/top/race_list_sub.html"

    def parse(self, html: str) -> list[str]:
        """HTMLからレースIDを出現順・重複なしで抽出する"""
        return list(dict.fromkeys(RACE_ID_PATTERN.findall(html)))

    def fetch_race_ids(self, date: str, track_code: str | None = None) -> list[str]:
        """指定日のJRAレースIDを取得する

        Args:
            date: 対象日（YYYY-MM-DD または YYYYMMDD）
            track_code: 指定した場合はその競馬場のレースのみ
        """
        html = self.fetch(self._build_url(date))
        race_ids = [
            race_id for race_id in self.parse(html) if track_code_of(race_id) in JRA_COURSE_CODES
        ]
        if track_code:
            race_ids = [race_id for race_id in race_ids if track_code_of(race_id) == track_code]
        return race_ids

    def resolve_track_codes(self, date: str) -> list[str]:
        """指定日に開催のあるJRA競馬場コードを昇順で返す"""
        return sorted({track_code_of(race_id) for race_id in self.fetch_race_ids(date)})

    def _build_url(self, date: str) -> str:
        return f"{self.BASE_URL}?kaisai_date={to_compact_date(date)}"
