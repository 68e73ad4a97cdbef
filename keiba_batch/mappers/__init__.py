"""スクレイピング結果 -> APIリクエストボディの変換"""

from typing import Any, Callable

from keiba_batch.constants import ApiType
from keiba_batch.mappers.ai_index import map_ai_index
from keiba_batch.mappers.index_images import map_index_images
from keiba_batch.mappers.predictions import map_predictions
from keiba_batch.mappers.race_info import map_race_info
from keiba_batch.mappers.race_results import map_race_results

Mapper = Callable[[list[dict[str, Any]]], list[dict[str, Any]]]

MAPPERS: dict[ApiType, Mapper] = {
    ApiType.RACE_INFO: map_race_info,
    ApiType.PREDICTIONS: map_predictions,
    ApiType.AI_INDEX: map_ai_index,
    ApiType.INDEX_IMAGES: map_index_images,
    ApiType.RACE_RESULTS: map_race_results,
}


def map_results(api: ApiType, results: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """API種別に応じたマッパーで変換する"""
    return MAPPERS[api](results)


__all__ = ["MAPPERS", "Mapper", "map_results"]
