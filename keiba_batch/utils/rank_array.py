"""Rank/Array Normalizer.

Ranking lists scraped from external sources have irregular lengths. Every
ranking field sent to the backend has a declared length, so lists are padded
with NO_DATA_HORSE_NUMBER or truncated to fit.

Two states are kept distinct:

* ``None`` for the whole field, or an all-``None`` array: the value was not
  computed for this source.
* An all-sentinel array: the source was consulted and produced no signal.
"""

from typing import Any, Sequence

from keiba_batch.constants import NO_DATA_HORSE_NUMBER


def normalize(
    raw: Sequence[Any] | None,
    target_length: int,
    sentinel: Any = NO_DATA_HORSE_NUMBER,
) -> list[Any]:
    """リストを固定長に揃える

    target_length 以上なら先頭 target_length 件に切り詰め、
    短ければ sentinel で埋める。要素の並び替えは行わない。

    Args:
        raw: 元のリスト（None は空リスト扱い）
        target_length: 目標の長さ
        sentinel: 埋め値

    Returns:
        長さ target_length のリスト

    Raises:
        ValueError: target_length が負の場合
    """
    if target_length < 0:
        raise ValueError(f"target_length must be >= 0: {target_length}")

    values = list(raw or [])
    if len(values) >= target_length:
        return values[:target_length]
    return values + [sentinel] * (target_length - len(values))


def has_meaningful_data(raw: Sequence[Any] | None) -> bool:
    """None・sentinel・0 以外の要素が1つでもあれば True"""
    if not raw:
        return False
    return any(value is not None and value != NO_DATA_HORSE_NUMBER and value != 0 for value in raw)


def null_rank_array(target_length: int) -> list[None]:
    """未計算を表す全 None の配列"""
    return [None] * target_length


def normalize_or_null(raw: Sequence[Any] | None, target_length: int) -> list[Any]:
    """意味のあるデータがあれば normalize、なければ全 sentinel 配列

    raw が None（未計算）の場合は全 None 配列を返す。
    """
    if raw is None:
        return null_rank_array(target_length)
    if not has_meaningful_data(raw):
        return [NO_DATA_HORSE_NUMBER] * target_length
    return normalize(raw, target_length)


def clamp_length(
    raw: Sequence[Any] | None,
    min_length: int,
    max_length: int,
    sentinel: Any = NO_DATA_HORSE_NUMBER,
) -> list[Any]:
    """可変長フィールドを [min_length, max_length] に収める"""
    values = list(raw or [])[:max_length]
    if len(values) < min_length:
        values = normalize(values, min_length, sentinel)
    return values


def to_horse_numbers(raw: Sequence[Any] | None) -> list[int | None]:
    """馬番リストを整数化する（変換できない要素は None）"""
    result: list[int | None] = []
    for value in raw or []:
        if value is None or value == "":
            result.append(None)
            continue
        try:
            result.append(int(value))
        except (TypeError, ValueError):
            result.append(None)
    return result
