"""Race result scraper (db.netkeiba.com/race/<race_id>/).

Produces raw race-results, one dict per race: the top three finishers and
the payouts of each bet type.
"""

import logging
import re
from typing import Any

import requests
from bs4 import BeautifulSoup

from keiba_batch.scrapers.base import BaseScraper, RawResult
from keiba_batch.scrapers.race_list import RaceListScraper, race_number_of
from keiba_batch.utils.date_utils import to_compact_date

logger = logging.getLogger(__name__)

# 払戻テーブルの th クラス -> 券種
PAYOUT_CLASSES: dict[str, str] = {
    "tan": "win",
    "fuku": "place",
    "waku": "bracket_quinella",
    "uren": "quinella",
    "wide": "quinella_place",
    "utan": "exacta",
    "sanfuku": "trio",
    "santan": "trifecta",
}

FINISH_KEYS = ("first_place", "second_place", "third_place")


def _digits(text: str) -> int | None:
    text = (text or "").replace(",", "")
    match = re.search(r"\d+", text)
    return int(match.group()) if match else None


def _br_separated(td) -> list[str]:
    """<br> 区切りの値をリストにする"""
    return [text.strip() for text in td.stripped_strings if text.strip()]


class RaceResultScraper(BaseScraper):
    """レース結果（上位3頭・払戻金）を取得するスクレイパー"""

    BASE_URL = "https://db.netkeiba.com"

    def __init__(self, delay: float = 1.0, race_list: RaceListScraper | None = None) -> None:
        super().__init__(delay=delay)
        self.race_list = race_list or RaceListScraper(delay=delay)

    def scrape(self, date: str, track_code: str, **options: Any) -> list[RawResult]:
        results: list[RawResult] = []
        for race_id in self.race_list.fetch_race_ids(date, track_code=track_code):
            try:
                html = self.fetch(self._build_url(race_id))
            except requests.RequestException as e:
                logger.warning("レース結果の取得に失敗: race_id=%s (%s)", race_id, e)
                continue
            result = self.parse(self.get_soup(html), race_id, date, track_code)
            if result is not None:
                results.append(result)
        return results

    def _build_url(self, race_id: str) -> str:
        return f"{self.BASE_URL}/race/{race_id}/"

    def parse(
        self, soup: BeautifulSoup, race_id: str, date: str, track_code: str
    ) -> RawResult | None:
        """結果ページを解析する（3着まで揃わない場合は None）"""
        finishers = self._parse_finishers(soup)
        if len(finishers) < len(FINISH_KEYS):
            logger.debug("着順が確定していません: race_id=%s", race_id)
            return None

        result: RawResult = {
            "date": to_compact_date(date),
            "trackCode": track_code,
            "raceNumber": race_number_of(race_id),
            "netkeiba_race_id": int(race_id),
        }
        for key, finisher in zip(FINISH_KEYS, finishers):
            result[key] = finisher
        result.update(self._parse_payouts(soup))
        return result

    def _parse_finishers(self, soup: BeautifulSoup) -> list[dict[str, Any]]:
        """race_table_01 から1-3着の馬を着順に取得する

        列: 0 着順, 2 馬番, 3 馬名, 13 人気
        """
        table = soup.find("table", class_="race_table_01")
        if not table:
            return []

        finishers: dict[int, dict[str, Any]] = {}
        for row in table.find_all("tr"):
            cells = row.find_all("td")
            if len(cells) < 4:
                continue
            position = _digits(cells[0].get_text(strip=True))
            if position not in (1, 2, 3) or position in finishers:
                continue
            finishers[position] = {
                "horse_number": _digits(cells[2].get_text(strip=True)),
                "horse_name": cells[3].get_text(strip=True),
                "popularity": _digits(cells[13].get_text(strip=True)) if len(cells) > 13 else None,
            }
        return [finishers[position] for position in sorted(finishers)]

    def _parse_payouts(self, soup: BeautifulSoup) -> dict[str, Any]:
        payouts: dict[str, Any] = {}
        for table in soup.find_all("table", class_="pay_table_01"):
            for row in table.find_all("tr"):
                th = row.find("th")
                tds = row.find_all("td")
                if not th or len(tds) < 2:
                    continue
                bet_type = next(
                    (PAYOUT_CLASSES[cls] for cls in th.get("class", []) if cls in PAYOUT_CLASSES),
                    None,
                )
                if bet_type is None:
                    continue

                combinations = _br_separated(tds[0])
                amounts = [_digits(value) for value in _br_separated(tds[1])]
                popularity = [_digits(value) for value in _br_separated(tds[2])] if len(tds) > 2 else []
                payouts[bet_type] = self._payout_entry(bet_type, combinations, amounts, popularity)
        return payouts

    def _payout_entry(
        self,
        bet_type: str,
        combinations: list[str],
        amounts: list[int | None],
        popularity: list[int | None],
    ) -> dict[str, Any]:
        if bet_type == "place":
            return {
                "horses": [
                    {
                        "horse_number": _digits(combination),
                        "payout": amount or 0,
                        "popularity": popularity[i] if i < len(popularity) else None,
                    }
                    for i, (combination, amount) in enumerate(zip(combinations, amounts))
                ]
            }
        if bet_type == "quinella_place":
            return {"combinations": combinations, "payouts": amounts, "popularity": popularity}
        return {
            "combination": combinations[0] if combinations else "",
            "horse_number": _digits(combinations[0]) if combinations else None,
            "payout": amounts[0] if amounts else None,
            "popularity": popularity[0] if popularity else None,
        }
