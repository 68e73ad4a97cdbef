"""予想情報のマッパー

固定長のランク配列は宣言された長さに揃える。

* 元データに意味のある値がある: normalize（不足は0埋め、超過は切り詰め）
* 値はあるが全て 0 / None: 全0配列
* 元データがそのフィールドを持たない（未計算）: 全 None 配列
"""

from typing import Any

from keiba_batch.config.field_specs import get_field_spec
from keiba_batch.constants import ApiType
from keiba_batch.mappers.common import RawResult, group_to_requests, remove_duplicates
from keiba_batch.utils.rank_array import (
    clamp_length,
    has_meaningful_data,
    normalize,
    normalize_or_null,
)

# APIフィールド名 -> スクレイピング結果のキー
_RANK_SOURCES: dict[str, str] = {
    "jravan_prediction_ranks": "jravan_prediction_ranks",
    "cp_ranks": "cp_ranks",
    "time_ranks": "time_ranks",
    "last_3f_ranks": "last_3f_ranks",
    "horse_trait_ranks": "horse_trait_ranks",
    "time_index_max_ranks": "time_index_max",
    "time_index_avg_ranks": "time_index_average",
    "time_index_distance_ranks": "time_index_distance",
}

_UMAX_FIELDS = (
    "umax_ranks",
    "umax_sp_values",
    "umax_ag_values",
    "umax_sa_values",
    "umax_ki_values",
)


def _length(name: str) -> int:
    return get_field_spec(ApiType.PREDICTIONS, name).max_length


def _win_prediction_ranks(prediction: RawResult) -> list[Any]:
    spec = get_field_spec(ApiType.PREDICTIONS, "win_prediction_ranks")
    raw = prediction.get("win_prediction_ranks")
    if not raw:
        raw = prediction.get("deviation_ranks")
    return clamp_length(raw, spec.min_length, spec.max_length)


def map_prediction(prediction: RawResult) -> dict[str, Any]:
    """1レース分の予想をAPI形式に変換する"""
    entry: dict[str, Any] = {
        "raceNumber": prediction.get("raceNumber"),
        "win_prediction_ranks": _win_prediction_ranks(prediction),
    }

    for field_name, source_key in _RANK_SOURCES.items():
        entry[field_name] = normalize_or_null(prediction.get(source_key), _length(field_name))

    entry["data_analysis_ranks"] = normalize(
        prediction.get("data_analysis_ranks"), _length("data_analysis_ranks")
    )
    entry["deviation_ranks"] = list(prediction.get("deviation_ranks") or [])
    entry["rapid_rise_ranks"] = list(prediction.get("rapid_rise_ranks") or [])
    entry["personal_best_ranks"] = list(prediction.get("personal_best_ranks") or [])[
        : _length("personal_best_ranks")
    ]

    popularity_risk = prediction.get("popularity_risk")
    entry["popularity_risk"] = str(popularity_risk) if popularity_risk else None

    for field_name in _UMAX_FIELDS:
        raw = prediction.get(field_name)
        if has_meaningful_data(raw):
            entry[field_name] = normalize(raw, _length(field_name))

    return entry


def map_predictions(results: list[RawResult]) -> list[dict[str, Any]]:
    """予想のスクレイピング結果をリクエストボディに変換する"""
    return group_to_requests(remove_duplicates(results), "predictions", map_prediction)
