"""環境変数ベースの実行設定"""

import os
from dataclasses import dataclass
from pathlib import Path


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number: {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer: {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """パイプラインの実行設定（イミュータブル）

    Attributes:
        api_base_url: 送信先バックエンドのベースURL
        api_key: X-API-KEY ヘッダーに付与するキー
        api_timeout: 1リクエストあたりのタイムアウト（秒）
        api_retries: 初回以降の最大リトライ回数
        intermediate_dir: 中間ファイルの保存ディレクトリ
        debug_dir: リクエスト/レスポンスのミラー保存先
        debug_mirror: ミラー保存を行うかどうか
        delay_min: ネットワーク処理間のランダム待機の下限（秒）
        delay_max: ネットワーク処理間のランダム待機の上限（秒）
        export_dir: 外部ツールが出力した生データJSONの置き場所
        store_backend: 中間ストアの種類（"file" または "sqlite"）
        db_path: sqliteストアのDBファイルパス
    """

    api_base_url: str = "http://localhost:80"
    api_key: str = ""
    api_timeout: float = 30.0
    api_retries: int = 3
    intermediate_dir: Path = Path("intermediate")
    debug_dir: Path = Path("debug/api-logs")
    debug_mirror: bool = False
    delay_min: float = 1.0
    delay_max: float = 3.0
    export_dir: Path = Path("exports")
    store_backend: str = "file"
    db_path: Path = Path("intermediate/stage_records.db")

    @classmethod
    def from_env(cls) -> "Settings":
        """環境変数から設定を作成する

        Raises:
            ValueError: 数値項目が不正な場合、またはストア種別が不明な場合
        """
        store_backend = os.environ.get("KEIBA_BATCH_STORE", "file").strip().lower()
        if store_backend not in ("file", "sqlite"):
            raise ValueError(f"KEIBA_BATCH_STORE must be 'file' or 'sqlite': {store_backend!r}")

        delay_min = _env_float("KEIBA_BATCH_DELAY_MIN", 1.0)
        delay_max = _env_float("KEIBA_BATCH_DELAY_MAX", 3.0)
        if delay_min > delay_max:
            raise ValueError("KEIBA_BATCH_DELAY_MIN must not exceed KEIBA_BATCH_DELAY_MAX")

        return cls(
            api_base_url=os.environ.get("LARAVEL_API_BASE_URL", "http://localhost:80"),
            api_key=os.environ.get("LARAVEL_API_KEY", ""),
            api_timeout=_env_float("KEIBA_BATCH_API_TIMEOUT", 30.0),
            api_retries=_env_int("KEIBA_BATCH_API_RETRIES", 3),
            intermediate_dir=Path(os.environ.get("KEIBA_BATCH_INTERMEDIATE_DIR", "intermediate")),
            debug_dir=Path(os.environ.get("KEIBA_BATCH_DEBUG_DIR", "debug/api-logs")),
            debug_mirror=_env_bool("KEIBA_BATCH_DEBUG_MIRROR", False),
            delay_min=delay_min,
            delay_max=delay_max,
            export_dir=Path(os.environ.get("KEIBA_BATCH_EXPORT_DIR", "exports")),
            store_backend=store_backend,
            db_path=Path(os.environ.get("KEIBA_BATCH_DB", "intermediate/stage_records.db")),
        )

    @property
    def delay_range(self) -> tuple[float, float]:
        return (self.delay_min, self.delay_max)
