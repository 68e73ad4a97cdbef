"""Constants for keiba batch ingestion pipeline."""

from enum import Enum

# JRA（中央競馬）競馬場コード
# レースIDの5-6文字目（YYYYPPNNRRXX形式のPP部分）
JRA_COURSE_CODES: dict[str, str] = {
    "01": "札幌",
    "02": "函館",
    "03": "福島",
    "04": "新潟",
    "05": "東京",
    "06": "中山",
    "07": "中京",
    "08": "京都",
    "09": "阪神",
    "10": "小倉",
}

TRACK_CODE_PATTERN = r"^(0[1-9]|10)$"

# 馬番・レース番号の有効範囲
MIN_HORSE_NUMBER = 1
MAX_HORSE_NUMBER = 18
MIN_RACE_NUMBER = 1
MAX_RACE_NUMBER = 12

# データなしを表す馬番（有効な馬番 1-18 と重ならない）
NO_DATA_HORSE_NUMBER = 0

# 中間ファイルのフォーマットバージョン（破壊的変更時のみ更新）
INTERMEDIATE_FORMAT_VERSION = "1.0.0"


class ApiType(str, Enum):
    """送信先APIの種別"""

    RACE_INFO = "race-info"
    PREDICTIONS = "predictions"
    AI_INDEX = "ai-index"
    INDEX_IMAGES = "index-images"
    RACE_RESULTS = "race-results"


class StageType(str, Enum):
    """実行段階"""

    SCRAPE = "scrape"
    VALIDATE = "validate"
    SEND = "send"
    ALL = "all"


class FileStatus(str, Enum):
    """中間ファイルのステータス"""

    PENDING = "pending"
    VALIDATED = "validated"
    SENT = "sent"
    FAILED = "failed"


# APIごとの明細リストのキー（送信ボディ {date, trackCode, <key>: [...]}）
ENTRY_LIST_KEYS: dict[ApiType, str] = {
    ApiType.RACE_INFO: "races",
    ApiType.PREDICTIONS: "predictions",
    ApiType.AI_INDEX: "ai_predictions",
    ApiType.INDEX_IMAGES: "images",
    ApiType.RACE_RESULTS: "results",
}


def get_track_name(track_code: str) -> str:
    """競馬場コードから競馬場名を取得する（不明なコードは「不明」）"""
    return JRA_COURSE_CODES.get(track_code, "不明")
