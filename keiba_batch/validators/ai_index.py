"""AI指数の検証"""

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


def validate_ai_index(data: Any) -> ValidationResult:
    """AI指数のリクエストボディ一覧を検証する"""
    result = ValidationResult()
    for prefix, entries in iter_request_bodies(data, "ai_predictions", result):
        for j, entry in enumerate(entries):
            path = f"{prefix}.ai_predictions[{j}]"
            if not isinstance(entry, dict):
                result.add_error(f"{path}: オブジェクトではありません")
                continue
            check_race_number(entry.get("raceNumber"), path, result)
            for spec in FIELD_SPECS[ApiType.AI_INDEX]:
                check_rank_array(entry, spec, path, result)
        check_entry_count(entries, prefix, "AI指数データ", result)
    return result
