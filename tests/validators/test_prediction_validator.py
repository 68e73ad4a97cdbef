"""予想情報バリデーターのテスト"""

import pytest

from keiba_batch.validators.predictions import validate_predictions


def make_entry(**overrides) -> dict:
    entry = {
        "raceNumber": 1,
        "win_prediction_ranks": [5, 3, 8],
        "jravan_prediction_ranks": [None] * 6,
        "cp_ranks": [3, 7, 0, 0],
        "data_analysis_ranks": [5, 3, 1],
        "time_ranks": [None] * 3,
        "last_3f_ranks": [None] * 3,
        "horse_trait_ranks": [None] * 3,
        "time_index_max_ranks": [1, 2, 3, 4, 5],
        "time_index_avg_ranks": [0] * 5,
        "time_index_distance_ranks": [None] * 5,
        "deviation_ranks": [5, 3, 8],
        "rapid_rise_ranks": [2],
        "personal_best_ranks": [1, 4, 6],
        "popularity_risk": "2",
    }
    entry.update(overrides)
    return entry


def make_body(*entries) -> list[dict]:
    return [{"date": "2025-07-19", "trackCode": "02", "predictions": list(entries)}]


class TestValidatePredictions:
    """予想情報の検証"""

    def test_valid_predictions(self):
        """正常な予想データ"""
        result = validate_predictions(make_body(make_entry(), make_entry(raceNumber=2)))

        assert result.errors == []

    @pytest.mark.parametrize("cp_ranks", [[3, 7], [1, 2, 3, 4, 5]])
    def test_fixed_length_mismatch_is_error(self, cp_ranks):
        """固定長フィールドの長さが違えばエラー"""
        result = validate_predictions(make_body(make_entry(cp_ranks=cp_ranks)))

        assert any("cp_ranksの長さが正しくありません (4固定" in error for error in result.errors)

    def test_variable_length_out_of_range(self):
        """可変長フィールドの長さが範囲外ならエラー"""
        result = validate_predictions(make_body(make_entry(personal_best_ranks=[1, 2, 3, 4])))

        assert any("personal_best_ranksの長さが正しくありません (0-3" in error for error in result.errors)

    def test_not_list_is_error(self):
        """配列でなければエラー"""
        result = validate_predictions(make_body(make_entry(time_ranks=None)))

        assert any("time_ranksが配列ではありません" in error for error in result.errors)

    def test_missing_required_field(self):
        """必須フィールドがなければエラー"""
        entry = make_entry()
        del entry["data_analysis_ranks"]

        result = validate_predictions(make_body(entry))

        assert any("data_analysis_ranksが必須です" in error for error in result.errors)

    def test_umax_is_optional(self):
        """UMAXフィールドは省略可能"""
        result = validate_predictions(make_body(make_entry()))

        assert not any("umax" in error for error in result.errors)

    def test_umax_values_are_numbers(self):
        """UMAXの値配列は数値"""
        entry = make_entry(umax_ranks=[4, 2, 7, 0, 0], umax_sp_values=[71.5, 68.0, "x", 0, 0])

        result = validate_predictions(make_body(entry))

        assert any("umax_sp_values[2]: 数値ではありません" in error for error in result.errors)

    def test_rank_horse_number_out_of_range(self):
        """ランク配列の馬番が範囲外ならエラー"""
        result = validate_predictions(make_body(make_entry(cp_ranks=[3, 19, 0, 0])))

        assert any("cp_ranks[1]: 馬番が範囲外です" in error for error in result.errors)

    def test_popularity_risk_string_or_null(self):
        """popularity_riskは文字列かnull"""
        result = validate_predictions(make_body(make_entry(popularity_risk=2)))

        assert any("popularity_riskが文字列またはnullではありません" in error for error in result.errors)

    def test_duplicate_race_number_is_error(self):
        """同じレース番号があればエラー"""
        result = validate_predictions(make_body(make_entry(), make_entry()))

        assert any("1Rが重複しています" in error for error in result.errors)

    def test_empty_cp_ranks_warns(self):
        """cp_ranksにデータがなければ警告"""
        result = validate_predictions(make_body(make_entry(cp_ranks=[0, 0, 0, 0])))

        assert result.is_valid
        assert any("cp_ranksにデータがありません" in warning for warning in result.warnings)

    def test_deterministic(self):
        """同じ入力なら同じ結果を返す"""
        body = make_body(make_entry(cp_ranks=[1]), make_entry(raceNumber=20))

        assert validate_predictions(body) == validate_predictions(body)
