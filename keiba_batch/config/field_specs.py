"""ランク配列フィールドの長さ定義

APIが受け付ける各配列フィールドの長さ。min_length == max_length のものは固定長。
"""

from dataclasses import dataclass

from keiba_batch.constants import ApiType


@dataclass(frozen=True)
class FieldSpec:
    """配列フィールドの宣言

    Attributes:
        name: フィールド名
        min_length: 最小長
        max_length: 最大長
        horse_numbers: 要素が馬番かどうか（Falseなら指数値などの数値）
        optional: 省略可能なフィールドかどうか
    """

    name: str
    min_length: int
    max_length: int
    horse_numbers: bool = True
    optional: bool = False

    @property
    def is_fixed(self) -> bool:
        return self.min_length == self.max_length


FIELD_SPECS: dict[ApiType, tuple[FieldSpec, ...]] = {
    ApiType.PREDICTIONS: (
        FieldSpec("win_prediction_ranks", 3, 8),
        FieldSpec("jravan_prediction_ranks", 6, 6),
        FieldSpec("cp_ranks", 4, 4),
        FieldSpec("data_analysis_ranks", 3, 3),
        FieldSpec("time_ranks", 3, 3),
        FieldSpec("last_3f_ranks", 3, 3),
        FieldSpec("horse_trait_ranks", 3, 3),
        FieldSpec("time_index_max_ranks", 5, 5),
        FieldSpec("time_index_avg_ranks", 5, 5),
        FieldSpec("time_index_distance_ranks", 5, 5),
        FieldSpec("deviation_ranks", 0, 18),
        FieldSpec("rapid_rise_ranks", 0, 18),
        FieldSpec("personal_best_ranks", 0, 3),
        # UMAX予想（任意）
        FieldSpec("umax_ranks", 5, 5, optional=True),
        FieldSpec("umax_sp_values", 5, 5, horse_numbers=False, optional=True),
        FieldSpec("umax_ag_values", 5, 5, horse_numbers=False, optional=True),
        FieldSpec("umax_sa_values", 5, 5, horse_numbers=False, optional=True),
        FieldSpec("umax_ki_values", 5, 5, horse_numbers=False, optional=True),
    ),
    ApiType.AI_INDEX: (FieldSpec("ai_ranks", 5, 5),),
    ApiType.INDEX_IMAGES: (FieldSpec("index_ranks", 8, 8),),
}


def get_field_spec(api: ApiType, name: str) -> FieldSpec:
    """APIとフィールド名から宣言を取得する

    Raises:
        KeyError: 宣言されていないフィールドの場合
    """
    for spec in FIELD_SPECS.get(api, ()):
        if spec.name == name:
            return spec
    raise KeyError(f"{api.value}.{name}")
