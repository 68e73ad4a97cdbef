"""指数画像のマッパー"""

from typing import Any

from keiba_batch.config.field_specs import get_field_spec
from keiba_batch.constants import ApiType
from keiba_batch.mappers.common import RawResult, group_to_requests, remove_duplicates
from keiba_batch.utils.rank_array import normalize, to_horse_numbers

DEFAULT_INDEX_EXPECTATION = "F"


def map_index_image(result: RawResult) -> dict[str, Any]:
    length = get_field_spec(ApiType.INDEX_IMAGES, "index_ranks").max_length
    return {
        "raceNumber": result.get("raceNumber"),
        "url": result.get("image_url") or "",
        "index_ranks": normalize(to_horse_numbers(result.get("index_image_ranks")), length),
        "index_expectation": result.get("index_expectation") or DEFAULT_INDEX_EXPECTATION,
    }


def map_index_images(results: list[RawResult]) -> list[dict[str, Any]]:
    """指数画像のスクレイピング結果をリクエストボディに変換する"""
    return group_to_requests(remove_duplicates(results), "images", map_index_image)
