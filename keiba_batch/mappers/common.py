"""マッパー共通処理

スクレイピング結果（dict）を (date, trackCode) ごとにまとめ、
APIリクエストボディ {date, trackCode, <entries>: [...]} に変換する。
"""

from typing import Any, Callable, Iterable

from keiba_batch.utils.date_utils import to_iso_date

RawResult = dict[str, Any]
EntryMapper = Callable[[RawResult], dict[str, Any]]


def format_date_for_api(value: str) -> str:
    """YYYYMMDD を YYYY-MM-DD に変換する（変換できない値はそのまま返す）"""
    try:
        return to_iso_date(str(value))
    except ValueError:
        return str(value)


def race_key(result: RawResult) -> tuple[str, str, Any, Any]:
    """重複判定キー (date, trackCode, raceNumber, externalRaceId)"""
    return (
        format_date_for_api(result.get("date", "")),
        str(result.get("trackCode", "")),
        result.get("raceNumber"),
        result.get("netkeiba_race_id"),
    )


def race_number_key(result: RawResult) -> tuple[str, str, Any]:
    """重複判定キー (date, trackCode, raceNumber)"""
    return race_key(result)[:3]


def remove_duplicates(
    results: Iterable[RawResult],
    key: Callable[[RawResult], tuple] = race_key,
) -> list[RawResult]:
    """キーが重複する結果を除去する（最初に出現したものを残す）"""
    seen: set[tuple] = set()
    unique: list[RawResult] = []
    for result in results:
        result_key = key(result)
        if result_key in seen:
            continue
        seen.add(result_key)
        unique.append(result)
    return unique


def group_to_requests(
    results: Iterable[RawResult],
    entry_key: str,
    map_entry: EntryMapper,
) -> list[dict[str, Any]]:
    """(date, trackCode) ごとにリクエストボディを作る

    グループの順序は最初の出現順。
    """
    groups: dict[tuple[str, str], dict[str, Any]] = {}
    for result in results:
        date = format_date_for_api(result.get("date", ""))
        track_code = str(result.get("trackCode", ""))
        group = groups.get((date, track_code))
        if group is None:
            group = {"date": date, "trackCode": track_code, entry_key: []}
            groups[(date, track_code)] = group
        group[entry_key].append(map_entry(result))
    return list(groups.values())
