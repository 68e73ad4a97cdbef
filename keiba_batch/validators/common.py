"""検証の共通ルール

メッセージは監査用に人が読む前提のため日本語で統一する。
検証関数は ValidationResult に追記するだけで、ログ出力などの副作用を持たない。
"""

import re
from typing import Any, Iterator

from keiba_batch.config.field_specs import FieldSpec
from keiba_batch.constants import (
    MAX_HORSE_NUMBER,
    MAX_RACE_NUMBER,
    MIN_HORSE_NUMBER,
    MIN_RACE_NUMBER,
    NO_DATA_HORSE_NUMBER,
    TRACK_CODE_PATTERN,
)
from keiba_batch.models.intermediate import ValidationResult
from keiba_batch.utils.date_utils import is_iso_date

_TRACK_CODE_RE = re.compile(TRACK_CODE_PATTERN)


def is_number(value: Any) -> bool:
    """bool を除く int / float なら True"""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_valid_track_code(value: Any) -> bool:
    return isinstance(value, str) and bool(_TRACK_CODE_RE.match(value))


def check_date(value: Any, prefix: str, result: ValidationResult) -> None:
    if not value:
        result.add_error(f"{prefix}: dateが必須です")
    elif not is_iso_date(value):
        result.add_error(f"{prefix}: dateの形式が正しくありません (YYYY-MM-DD)")


def check_track_code(value: Any, prefix: str, result: ValidationResult) -> None:
    if not value:
        result.add_error(f"{prefix}: trackCodeが必須です")
    elif not is_valid_track_code(value):
        result.add_error(f"{prefix}: trackCodeが正しくありません (01-10)")


def check_race_number(value: Any, path: str, result: ValidationResult) -> bool:
    if not is_int(value) or not MIN_RACE_NUMBER <= value <= MAX_RACE_NUMBER:
        result.add_error(
            f"{path}: raceNumberが正しくありません ({MIN_RACE_NUMBER}-{MAX_RACE_NUMBER})"
        )
        return False
    return True


def check_horse_number(
    value: Any,
    path: str,
    result: ValidationResult,
    allow_empty: bool = False,
) -> bool:
    """馬番が 1-18 の範囲内か検証する

    allow_empty が True の場合、None（未計算）と 0（データなし）も許容する。
    """
    if allow_empty and (value is None or (is_int(value) and value == NO_DATA_HORSE_NUMBER)):
        return True
    if not is_int(value) or not MIN_HORSE_NUMBER <= value <= MAX_HORSE_NUMBER:
        result.add_error(
            f"{path}: 馬番が範囲外です ({value}, {MIN_HORSE_NUMBER}-{MAX_HORSE_NUMBER})"
        )
        return False
    return True


def check_rank_array(
    entry: dict[str, Any],
    spec: FieldSpec,
    path: str,
    result: ValidationResult,
) -> None:
    """配列フィールドの型・長さ・要素を検証する

    任意フィールド（spec.optional）は存在しない場合のみ検証を省略する。
    """
    if spec.name not in entry:
        if not spec.optional:
            result.add_error(f"{path}: {spec.name}が必須です")
        return

    value = entry[spec.name]
    if not isinstance(value, list):
        result.add_error(f"{path}: {spec.name}が配列ではありません")
        return

    if spec.is_fixed and len(value) != spec.max_length:
        result.add_error(
            f"{path}: {spec.name}の長さが正しくありません ({spec.max_length}固定, 実際: {len(value)})"
        )
    elif not spec.min_length <= len(value) <= spec.max_length:
        result.add_error(
            f"{path}: {spec.name}の長さが正しくありません "
            f"({spec.min_length}-{spec.max_length}, 実際: {len(value)})"
        )

    for i, item in enumerate(value):
        item_path = f"{path}.{spec.name}[{i}]"
        if spec.horse_numbers:
            check_horse_number(item, item_path, result, allow_empty=True)
        elif item is not None and not is_number(item):
            result.add_error(f"{item_path}: 数値ではありません ({item})")


def check_unique_race_numbers(
    entries: list[Any], prefix: str, entry_key: str, result: ValidationResult
) -> None:
    seen: set[int] = set()
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        race_number = entry.get("raceNumber")
        if not is_int(race_number):
            continue
        if race_number in seen:
            result.add_error(f"{prefix}.{entry_key}: {race_number}Rが重複しています")
        seen.add(race_number)


def check_entry_count(
    entries: list[Any], prefix: str, label: str, result: ValidationResult
) -> None:
    if not entries:
        result.add_warning(f"{prefix}: {label}が空です")
    elif len(entries) > MAX_RACE_NUMBER:
        result.add_warning(f"{prefix}: {label}が多すぎます ({len(entries)}レース)")


def iter_request_bodies(
    data: Any, entry_key: str, result: ValidationResult
) -> Iterator[tuple[str, list[Any]]]:
    """リクエストボディを順に検証し、(prefix, 明細リスト) を返す

    date / trackCode を検証し、明細リストが配列でないボディは読み飛ばす。
    """
    if not isinstance(data, list):
        result.add_error("データが配列ではありません")
        return
    if not data:
        result.add_warning("データが空です")
        return

    for i, item in enumerate(data):
        prefix = f"データ[{i}]"
        if not isinstance(item, dict):
            result.add_error(f"{prefix}: オブジェクトではありません")
            continue

        check_date(item.get("date"), prefix, result)
        check_track_code(item.get("trackCode"), prefix, result)

        entries = item.get(entry_key)
        if not isinstance(entries, list):
            result.add_error(f"{prefix}: {entry_key}が配列ではありません")
            continue

        check_unique_race_numbers(entries, prefix, entry_key, result)
        yield prefix, entries
