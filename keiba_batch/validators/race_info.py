"""レース情報の検証"""

from typing import Any

from keiba_batch.constants import MAX_HORSE_NUMBER
from keiba_batch.models.intermediate import ValidationResult
from keiba_batch.validators.common import (
    check_entry_count,
    check_horse_number,
    check_race_number,
    is_int,
    is_number,
    iter_request_bodies,
)

MIN_AGE = 2
MAX_AGE = 10
MIN_WEIGHT = 400
MAX_WEIGHT = 600

_REQUIRED_HORSE_TEXT = ("horse_name", "jockey_name", "trainer_name", "gender")


def _validate_horse(horse: Any, path: str, result: ValidationResult) -> int | None:
    """1頭分を検証し、有効な馬番を返す"""
    if not isinstance(horse, dict):
        result.add_error(f"{path}: オブジェクトではありません")
        return None

    horse_number = horse.get("horse_number")
    valid_number = check_horse_number(horse_number, f"{path}.horse_number", result)

    for key in _REQUIRED_HORSE_TEXT:
        value = horse.get(key)
        if not value or not isinstance(value, str):
            result.add_error(f"{path}: {key}が必須です")

    age = horse.get("age")
    if not is_int(age) or not MIN_AGE <= age <= MAX_AGE:
        result.add_error(f"{path}: ageが正しくありません ({MIN_AGE}-{MAX_AGE})")

    weight = horse.get("weight")
    if weight is not None and (not is_number(weight) or not MIN_WEIGHT <= weight <= MAX_WEIGHT):
        result.add_warning(f"{path}: weightが異常値です ({weight}kg)")

    popularity = horse.get("popularity")
    if popularity is not None and (
        not is_int(popularity) or not 1 <= popularity <= MAX_HORSE_NUMBER
    ):
        result.add_warning(f"{path}: popularityが異常値です ({popularity})")

    win_odds = horse.get("win_odds")
    if win_odds is not None and (not is_number(win_odds) or win_odds < 1.0):
        result.add_warning(f"{path}: win_oddsが異常値です ({win_odds})")

    return horse_number if valid_number else None


def _validate_race(race: Any, path: str, result: ValidationResult) -> None:
    if not isinstance(race, dict):
        result.add_error(f"{path}: オブジェクトではありません")
        return

    check_race_number(race.get("raceNumber"), path, result)

    race_name = race.get("race_name")
    if not race_name or not isinstance(race_name, str):
        result.add_error(f"{path}: race_nameが必須です")

    distance = race.get("distance")
    if distance is not None and (not is_int(distance) or distance <= 0):
        result.add_warning(f"{path}: distanceが異常値です ({distance})")

    horses = race.get("horses")
    if not isinstance(horses, list):
        result.add_error(f"{path}: horsesが配列ではありません")
        return

    seen: set[int] = set()
    for k, horse in enumerate(horses):
        horse_number = _validate_horse(horse, f"{path}.horses[{k}]", result)
        if horse_number is None:
            continue
        if horse_number in seen:
            result.add_error(f"{path}: 馬番{horse_number}が重複しています")
        seen.add(horse_number)

    if not horses:
        result.add_error(f"{path}: 馬データが空です")
    elif len(horses) > MAX_HORSE_NUMBER:
        result.add_warning(f"{path}: 馬数が多すぎます ({len(horses)}頭)")


def validate_race_info(data: Any) -> ValidationResult:
    """レース情報のリクエストボディ一覧を検証する"""
    result = ValidationResult()
    for prefix, races in iter_request_bodies(data, "races", result):
        for j, race in enumerate(races):
            _validate_race(race, f"{prefix}.races[{j}]", result)
        check_entry_count(races, prefix, "レースデータ", result)
    return result
