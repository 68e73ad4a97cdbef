"""指数画像の検証"""

from typing import Any

from keiba_batch.config.field_specs import FIELD_SPECS
from keiba_batch.constants import ApiType
from keiba_batch.models.intermediate import ValidationResult
from keiba_batch.validators.common import (
    check_entry_count,
    check_race_number,
    check_rank_array,
    iter_request_bodies,
)

INDEX_EXPECTATIONS = frozenset("SABCDEF")


def validate_index_images(data: Any) -> ValidationResult:
    """指数画像のリクエストボディ一覧を検証する"""
    result = ValidationResult()
    for prefix, images in iter_request_bodies(data, "images", result):
        for j, image in enumerate(images):
            path = f"{prefix}.images[{j}]"
            if not isinstance(image, dict):
                result.add_error(f"{path}: オブジェクトではありません")
                continue
            check_race_number(image.get("raceNumber"), path, result)
            for spec in FIELD_SPECS[ApiType.INDEX_IMAGES]:
                check_rank_array(image, spec, path, result)

            url = image.get("url")
            if not isinstance(url, str):
                result.add_error(f"{path}: urlが文字列ではありません")
            elif not url:
                result.add_warning(f"{path}: urlが空です")

            expectation = image.get("index_expectation")
            if expectation not in INDEX_EXPECTATIONS:
                result.add_warning(f"{path}: index_expectationが不明です ({expectation})")
        check_entry_count(images, prefix, "指数画像データ", result)
    return result
