"""Intermediate State Store"""

from keiba_batch.config.settings import Settings
from keiba_batch.db import get_engine
from keiba_batch.store.base import IntermediateStore
from keiba_batch.store.file_store import FileIntermediateStore
from keiba_batch.store.sqlite_store import SqliteIntermediateStore


def create_store(settings: Settings, backend: str | None = None) -> IntermediateStore:
    """設定に応じたストアを作成する

    Args:
        settings: 設定
        backend: "file" または "sqlite"（省略時は settings.store_backend）

    Raises:
        ValueError: 未対応のバックエンドの場合
    """
    backend = backend or settings.store_backend
    if backend == "file":
        return FileIntermediateStore(settings.intermediate_dir)
    if backend == "sqlite":
        return SqliteIntermediateStore(get_engine(settings.db_path))
    raise ValueError(f"未対応のストア: {backend}")


__all__ = [
    "FileIntermediateStore",
    "IntermediateStore",
    "SqliteIntermediateStore",
    "create_store",
]
