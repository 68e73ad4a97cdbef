"""AI指数のマッパー"""

from typing import Any

from keiba_batch.config.field_specs import get_field_spec
from keiba_batch.constants import ApiType
from keiba_batch.mappers.common import RawResult, group_to_requests, remove_duplicates
from keiba_batch.utils.rank_array import normalize, to_horse_numbers


def map_ai_prediction(result: RawResult) -> dict[str, Any]:
    length = get_field_spec(ApiType.AI_INDEX, "ai_ranks").max_length
    return {
        "raceNumber": result.get("raceNumber"),
        "ai_ranks": normalize(to_horse_numbers(result.get("ai_index_ranks")), length),
    }


def map_ai_index(results: list[RawResult]) -> list[dict[str, Any]]:
    """AI指数のスクレイピング結果をリクエストボディに変換する"""
    return group_to_requests(remove_duplicates(results), "ai_predictions", map_ai_prediction)
