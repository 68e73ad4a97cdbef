"""レース結果の検証"""

from typing import Any

from keiba_batch.models.intermediate import ValidationResult
from keiba_batch.validators.common import (
    check_entry_count,
    check_horse_number,
    check_race_number,
    is_int,
    iter_request_bodies,
)

FINISH_KEYS = ("first", "second", "third")
PAYOUT_KEYS = ("win", "quinella", "trio", "trifecta")
PLACE_PAYOUT_COUNT = 3


def _validate_finish(finish: Any, path: str, result: ValidationResult) -> None:
    if not isinstance(finish, dict):
        result.add_error(f"{path}: finishがオブジェクトではありません")
        return

    seen: set[int] = set()
    for key in FINISH_KEYS:
        place = finish.get(key)
        place_path = f"{path}.finish.{key}"
        if not isinstance(place, dict):
            result.add_error(f"{place_path}: 着順データがありません")
            continue
        horse_number = place.get("horse_number")
        if check_horse_number(horse_number, f"{place_path}.horse_number", result):
            if horse_number in seen:
                result.add_error(f"{path}.finish: 馬番{horse_number}が重複しています")
            seen.add(horse_number)
        if not place.get("horse_name"):
            result.add_warning(f"{place_path}: horse_nameが空です")


def _validate_payouts(payouts: Any, path: str, result: ValidationResult) -> None:
    if not isinstance(payouts, dict):
        result.add_error(f"{path}: payoutsがオブジェクトではありません")
        return

    for key in PAYOUT_KEYS:
        value = payouts.get(key)
        if value is None:
            result.add_warning(f"{path}.payouts: {key}がありません")
        elif not is_int(value) or value < 0:
            result.add_error(f"{path}.payouts: {key}が正しくありません ({value})")

    place = payouts.get("place")
    if not isinstance(place, list):
        result.add_error(f"{path}.payouts: placeが配列ではありません")
        return
    if len(place) != PLACE_PAYOUT_COUNT:
        result.add_error(
            f"{path}.payouts: placeの長さが正しくありません ({PLACE_PAYOUT_COUNT}固定, 実際: {len(place)})"
        )
    for i, value in enumerate(place):
        if not is_int(value) or value < 0:
            result.add_error(f"{path}.payouts.place[{i}]: 払戻金が正しくありません ({value})")


def validate_race_results(data: Any) -> ValidationResult:
    """レース結果のリクエストボディ一覧を検証する"""
    result = ValidationResult()
    for prefix, results in iter_request_bodies(data, "results", result):
        for j, entry in enumerate(results):
            path = f"{prefix}.results[{j}]"
            if not isinstance(entry, dict):
                result.add_error(f"{path}: オブジェクトではありません")
                continue
            check_race_number(entry.get("raceNumber"), path, result)
            _validate_finish(entry.get("finish"), path, result)
            _validate_payouts(entry.get("payouts"), path, result)
        check_entry_count(results, prefix, "レース結果データ", result)
    return result
