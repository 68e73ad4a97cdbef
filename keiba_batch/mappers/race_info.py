"""レース情報のマッパー"""

from typing import Any

from keiba_batch.mappers.common import RawResult, group_to_requests, remove_duplicates


def map_horse(horse: dict[str, Any]) -> dict[str, Any]:
    return {
        "horse_number": horse.get("horse_number"),
        "horse_name": horse.get("horse_name", ""),
        "jockey_name": horse.get("jockey_name", ""),
        "trainer_name": horse.get("trainer_name", ""),
        "weight": horse.get("weight") or None,
        "gender": horse.get("gender") or "",
        "age": horse.get("age") or 0,
        "popularity": horse.get("popularity") or None,
        "win_odds": horse.get("win_odds") or None,
    }


def map_race(race: RawResult) -> dict[str, Any]:
    return {
        "raceNumber": race.get("raceNumber"),
        "race_name": race.get("race_name", ""),
        "start_time": race.get("start_time", ""),
        "course_type": race.get("course_type", ""),
        "distance": race.get("distance"),
        "weather": race.get("weather") or None,
        "track_condition": race.get("track_condition") or None,
        "horses": [map_horse(horse) for horse in race.get("horses") or []],
    }


def map_race_info(results: list[RawResult]) -> list[dict[str, Any]]:
    """レース情報のスクレイピング結果をリクエストボディに変換する"""
    return group_to_requests(remove_duplicates(results), "races", map_race)
