"""レース結果のマッパー"""

from typing import Any

from keiba_batch.mappers.common import (
    RawResult,
    group_to_requests,
    race_number_key,
    remove_duplicates,
)
from keiba_batch.utils.rank_array import normalize

PLACE_PAYOUT_COUNT = 3


def _finish(place: dict[str, Any] | None) -> dict[str, Any]:
    place = place or {}
    return {
        "horse_number": place.get("horse_number"),
        "horse_name": place.get("horse_name", ""),
        "popularity": place.get("popularity"),
    }


def _payout(result: RawResult, key: str) -> Any:
    return (result.get(key) or {}).get("payout")


def map_race_result(result: RawResult) -> dict[str, Any]:
    place_horses = list((result.get("place") or {}).get("horses") or [])
    place_payouts = normalize(
        [(horse or {}).get("payout") or 0 for horse in place_horses], PLACE_PAYOUT_COUNT
    )
    return {
        "raceNumber": result.get("raceNumber"),
        "finish": {
            "first": _finish(result.get("first_place")),
            "second": _finish(result.get("second_place")),
            "third": _finish(result.get("third_place")),
        },
        "payouts": {
            "win": _payout(result, "win"),
            "place": place_payouts,
            "quinella": _payout(result, "quinella"),
            "trio": _payout(result, "trio"),
            "trifecta": _payout(result, "trifecta"),
        },
    }


def map_race_results(results: list[RawResult]) -> list[dict[str, Any]]:
    """レース結果のスクレイピング結果をリクエストボディに変換する

    レース結果は netkeiba のレースIDを持たないことがあるため、
    (date, trackCode, raceNumber) で重複を除去する。
    """
    unique = remove_duplicates(results, key=race_number_key)
    return group_to_requests(unique, "results", map_race_result)
