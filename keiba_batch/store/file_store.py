"""JSON file implementation of the Intermediate State Store.

Layout::

    <root>/<api>/<YYYY-MM-DD>/<trackCode>_<api>_<YYYYMMDD>_<epoch_ms>.json

Files are created with exclusive mode so two writers never share a file; a
name collision bumps the timestamp. Status updates rewrite the file through a
temporary file and os.replace().
"""

import json
import logging
import os
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from keiba_batch.constants import ApiType, FileStatus
from keiba_batch.exceptions import (
    IntermediateFileNotFoundError,
    SentRecordImmutableError,
    StoreError,
)
from keiba_batch.models.intermediate import (
    IntermediateFile,
    IntermediateFileInfo,
    IntermediateFileMetadata,
)

MAX_CREATE_ATTEMPTS = 1000


def _check_path_component(name: str, value: str) -> None:
    if not value or "/" in value or "\\" in value or ".." in value:
        raise StoreError(f"{name}にパスとして使えない値が含まれています: {value!r}")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FileIntermediateStore:
    """中間ファイルをJSONとしてディレクトリに保存するストア

    Attributes:
        root: 中間ファイルのルートディレクトリ
    """

    def __init__(self, root: str | Path = "intermediate", logger: logging.Logger | None = None) -> None:
        self.root = Path(root)
        self.logger = logger or logging.getLogger(__name__)

    def _directory(self, api: ApiType, date: str) -> Path:
        return self.root / api.value / date

    def _file_name(self, api: ApiType, date: str, track_code: str, timestamp_ms: int) -> str:
        return f"{track_code}_{api.value}_{date.replace('-', '')}_{timestamp_ms}.json"

    def save(
        self, api: ApiType, date: str, track_code: str, data: list[dict[str, Any]]
    ) -> str:
        """新しい中間ファイルを pending で作成する

        Returns:
            作成したファイルのパス

        Raises:
            StoreError: date / track_code がパス区切りや .. を含む場合
        """
        _check_path_component("date", date)
        _check_path_component("track_code", track_code)
        intermediate_file = IntermediateFile(
            metadata=IntermediateFileMetadata(
                api=api,
                date=date,
                track_code=track_code,
                created_at=_now_iso(),
                data_count=len(data),
                status=FileStatus.PENDING,
            ),
            data=list(data),
        )
        content = json.dumps(intermediate_file.to_dict(), ensure_ascii=False, indent=2)

        directory = self._directory(api, date)
        directory.mkdir(parents=True, exist_ok=True)

        timestamp_ms = int(time.time() * 1000)
        for _ in range(MAX_CREATE_ATTEMPTS):
            path = directory / self._file_name(api, date, track_code, timestamp_ms)
            try:
                with open(path, "x", encoding="utf-8") as f:
                    f.write(content)
            except FileExistsError:
                timestamp_ms += 1
                continue
            self.logger.debug("中間ファイル保存: %s (%d件)", path, len(data))
            return str(path)

        raise StoreError(f"中間ファイルを作成できませんでした: {directory}")

    def load(self, ref: str) -> IntermediateFile:
        """中間ファイルを読み込む

        Raises:
            IntermediateFileNotFoundError: ファイルが存在しない場合
            StoreError: JSONとして読めない、または形式が不正な場合
        """
        path = Path(ref)
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError as e:
            raise IntermediateFileNotFoundError(f"中間ファイルが存在しません: {ref}") from e
        except json.JSONDecodeError as e:
            raise StoreError(f"中間ファイルのJSONが不正です: {ref}: {e}") from e

        try:
            return IntermediateFile.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"中間ファイルの形式が不正です: {ref}: {e}") from e

    def update_status(
        self, ref: str, status: FileStatus, errors: list[str] | None = None
    ) -> None:
        """ステータスを更新する

        failed 以外に遷移する場合は errors を消去する。

        Raises:
            SentRecordImmutableError: 送信済みファイルを更新しようとした場合
        """
        intermediate_file = self.load(ref)
        metadata = intermediate_file.metadata
        if metadata.status == FileStatus.SENT:
            raise SentRecordImmutableError(f"送信済みの中間ファイルは変更できません: {ref}")

        metadata.status = status
        if errors is not None:
            metadata.errors = list(errors)
        elif status != FileStatus.FAILED:
            metadata.errors = None

        path = Path(ref)
        tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(intermediate_file.to_dict(), f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
        self.logger.debug("中間ファイルステータス更新: %s - %s", status.value, ref)

    def find(
        self,
        api: ApiType,
        date: str,
        track_code: str | None = None,
        status: FileStatus | None = None,
    ) -> list[IntermediateFileInfo]:
        """条件に合う中間ファイルを createdAt 順に返す

        読めないファイルは警告を出して読み飛ばす。
        """
        directory = self._directory(api, date)
        if not directory.is_dir():
            self.logger.debug("中間ファイル検索: ディレクトリが存在しません - %s", directory)
            return []

        found: list[IntermediateFileInfo] = []
        for path in sorted(directory.glob("*.json")):
            try:
                intermediate_file = self.load(str(path))
            except StoreError as e:
                self.logger.warning("中間ファイル読み込みスキップ: %s (%s)", path, e)
                continue

            metadata = intermediate_file.metadata
            if track_code and metadata.track_code != track_code:
                continue
            if status and metadata.status != status:
                continue
            found.append(IntermediateFileInfo(ref=str(path), metadata=metadata))

        return sorted(found, key=lambda info: info.metadata.created_at)

    def cleanup_old_files(self, days_to_keep: int = 7) -> int:
        """更新日時が days_to_keep 日より古いファイルを削除する

        エラーはログに出すだけで例外は送出しない。
        """
        cutoff = (datetime.now() - timedelta(days=days_to_keep)).timestamp()
        removed = 0
        if not self.root.is_dir():
            return removed

        for path in self.root.glob("*/*/*.json"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
                    self.logger.info("古い中間ファイルを削除: %s", path)
            except OSError as e:
                self.logger.error("中間ファイルクリーンアップエラー: %s (%s)", path, e)
        return removed
