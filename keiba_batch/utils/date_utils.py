"""日付変換ユーティリティ"""

import re
from datetime import datetime

_COMPACT_DATE = re.compile(r"^\d{8}$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_iso_date(value: str) -> str:
    """YYYYMMDD または YYYY-MM-DD を YYYY-MM-DD に変換する

    Raises:
        ValueError: 形式が不正、または存在しない日付の場合
    """
    value = value.strip()
    if _COMPACT_DATE.match(value):
        parsed = datetime.strptime(value, "%Y%m%d")
    elif _ISO_DATE.match(value):
        parsed = datetime.strptime(value, "%Y-%m-%d")
    else:
        raise ValueError(f"日付形式が不正です: {value}")
    return parsed.strftime("%Y-%m-%d")


def to_compact_date(value: str) -> str:
    """YYYY-MM-DD または YYYYMMDD を YYYYMMDD に変換する"""
    return to_iso_date(value).replace("-", "")


def is_iso_date(value: object) -> bool:
    """YYYY-MM-DD 形式かつ実在する日付なら True"""
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True
