"""予想情報の検証"""

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


def _validate_prediction(prediction: Any, path: str, result: ValidationResult) -> None:
    if not isinstance(prediction, dict):
        result.add_error(f"{path}: オブジェクトではありません")
        return

    check_race_number(prediction.get("raceNumber"), path, result)

    for spec in FIELD_SPECS[ApiType.PREDICTIONS]:
        check_rank_array(prediction, spec, path, result)

    popularity_risk = prediction.get("popularity_risk")
    if popularity_risk is not None and not isinstance(popularity_risk, str):
        result.add_error(f"{path}: popularity_riskが文字列またはnullではありません")

    cp_ranks = prediction.get("cp_ranks")
    if isinstance(cp_ranks, list) and cp_ranks and all(rank in (None, 0) for rank in cp_ranks):
        result.add_warning(f"{path}: cp_ranksにデータがありません")


def validate_predictions(data: Any) -> ValidationResult:
    """予想情報のリクエストボディ一覧を検証する"""
    result = ValidationResult()
    for prefix, predictions in iter_request_bodies(data, "predictions", result):
        for j, prediction in enumerate(predictions):
            _validate_prediction(prediction, f"{prefix}.predictions[{j}]", result)
        check_entry_count(predictions, prefix, "予想データ", result)
    return result
