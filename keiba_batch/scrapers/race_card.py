"""Race card scraper (race.netkeiba.com/race/shutuba.html).

Produces raw race-info results, one dict per race::

    {date, trackCode, raceNumber, netkeiba_race_id, race_name, start_time,
     course_type, distance, weather, track_condition, horses: [...]}
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


def _to_int(text: str) -> int | None:
    match = re.search(r"\d+", text or "")
    return int(match.group()) if match else None


def _to_float(text: str) -> float | None:
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


class RaceCardScraper(BaseScraper):
    """出馬表からレース情報を取得するスクレイパー"""

    BASE_URL = "https://race.netkeiba.com"

    def __init__(self, delay: float = 1.0, race_list: RaceListScraper | None = None) -> None:
        super().__init__(delay=delay)
        self.race_list = race_list or RaceListScraper(delay=delay)

    def scrape(self, date: str, track_code: str, **options: Any) -> list[RawResult]:
        """指定日・競馬場の全レースの出馬表を取得する

        1レースの取得に失敗しても残りのレースは続行する。
        """
        results: list[RawResult] = []
        for race_id in self.race_list.fetch_race_ids(date, track_code=track_code):
            try:
                html = self.fetch(self._build_url(race_id))
            except requests.RequestException as e:
                logger.warning("出馬表の取得に失敗: race_id=%s (%s)", race_id, e)
                continue
            race = self.parse(self.get_soup(html), race_id, date, track_code)
            if race["horses"]:
                results.append(race)
        return results

    def _build_url(self, race_id: str) -> str:
        return f"{self.BASE_URL}/race/shutuba.html?race_id={race_id}"

    def parse(self, soup: BeautifulSoup, race_id: str, date: str, track_code: str) -> RawResult:
        race: RawResult = {
            "date": to_compact_date(date),
            "trackCode": track_code,
            "raceNumber": race_number_of(race_id),
            "netkeiba_race_id": int(race_id),
            "race_name": "",
            "start_time": "",
            "course_type": "",
            "distance": None,
            "weather": None,
            "track_condition": None,
        }

        race_name_elem = soup.find("h1", class_="RaceName")
        if race_name_elem:
            race["race_name"] = race_name_elem.get_text(strip=True)

        race_data = soup.find("div", class_="RaceData01")
        if race_data:
            self._parse_race_data(race_data.get_text(" ", strip=True), race)

        race["horses"] = self._parse_horses(soup)
        return race

    def _parse_race_data(self, text: str, race: RawResult) -> None:
        """RaceData01 のテキストを解析する

        例: "09:55発走 / ダ1200m (右) / 天候:晴 / 馬場:良"
        """
        time_match = re.search(r"(\d{1,2}:\d{2})発走", text)
        if time_match:
            race["start_time"] = time_match.group(1).zfill(5)

        course_match = re.search(r"(芝|ダート|ダ|障)(\d+)m", text)
        if course_match:
            race["course_type"] = {"ダ": "ダート", "障": "障害"}.get(
                course_match.group(1), course_match.group(1)
            )
            race["distance"] = int(course_match.group(2))

        weather_match = re.search(r"天候\s*:\s*(\S+)", text)
        if weather_match:
            race["weather"] = weather_match.group(1)

        condition_match = re.search(r"馬場\s*:\s*(\S+)", text)
        if condition_match:
            race["track_condition"] = condition_match.group(1)

    def _parse_horses(self, soup: BeautifulSoup) -> list[dict[str, Any]]:
        table = soup.find("table", class_="Shutuba_Table")
        if not table:
            return []

        horses = []
        for row in table.find_all("tr", class_="HorseList"):
            horse = self._parse_horse_row(row)
            if horse:
                horses.append(horse)
        return horses

    def _parse_horse_row(self, row) -> dict[str, Any] | None:
        umaban_cell = row.find("td", class_=lambda x: x and x.startswith("Umaban"))
        horse_info = row.find("td", class_="HorseInfo")
        if not umaban_cell or not horse_info:
            return None

        horse_number = _to_int(umaban_cell.get_text(strip=True))
        horse_link = horse_info.find("a")
        horse_name = (horse_link or horse_info).get_text(strip=True)
        if horse_number is None or not horse_name:
            return None

        gender = ""
        age = None
        barei_cell = row.find("td", class_="Barei")
        if barei_cell:
            barei_text = barei_cell.get_text(strip=True)
            if barei_text:
                gender = barei_text[0]
                age = _to_int(barei_text)

        jockey_cell = row.find("td", class_="Jockey")
        trainer_cell = row.find("td", class_="Trainer")
        weight_cell = row.find("td", class_="Weight")
        odds_cell = row.find("td", class_="Popular")
        ninki_cell = row.find("td", class_="Popular_Ninki")

        trainer_name = ""
        if trainer_cell:
            trainer_link = trainer_cell.find("a")
            trainer_name = (trainer_link or trainer_cell).get_text(strip=True)

        return {
            "horse_number": horse_number,
            "horse_name": horse_name,
            "jockey_name": jockey_cell.get_text(strip=True) if jockey_cell else "",
            "trainer_name": trainer_name,
            "weight": _to_int(weight_cell.get_text(strip=True)) if weight_cell else None,
            "gender": gender,
            "age": age,
            "popularity": _to_int(ninki_cell.get_text(strip=True)) if ninki_cell else None,
            "win_odds": _to_float(odds_cell.get_text(strip=True)) if odds_cell else None,
        }
