"""SQLite implementation of the Intermediate State Store.

Each record is a StageRecord row keyed by (api, date, track_code, attempt).
References have the form ``<api>/<date>/<trackCode>/<attempt>``. Status
transitions run inside a single transaction.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import Engine, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from keiba_batch.constants import INTERMEDIATE_FORMAT_VERSION, ApiType, FileStatus
from keiba_batch.db import get_session, init_db
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
from keiba_batch.models.stage_record import StageRecord

MAX_CREATE_ATTEMPTS = 5


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_ref(ref: str) -> tuple[str, str, str, int]:
    """参照文字列を (api, date, track_code, attempt) に分解する

    Raises:
        IntermediateFileNotFoundError: 形式が不正な場合
    """
    parts = ref.split("/")
    if len(parts) != 4 or not parts[3].isdigit():
        raise IntermediateFileNotFoundError(f"参照の形式が不正です: {ref}")
    api, date, track_code, attempt = parts
    return api, date, track_code, int(attempt)


def _to_metadata(record: StageRecord) -> IntermediateFileMetadata:
    return IntermediateFileMetadata(
        api=ApiType(record.api),
        date=record.date,
        track_code=record.track_code,
        created_at=record.created_at,
        data_count=record.data_count,
        status=FileStatus(record.status),
        errors=json.loads(record.errors) if record.errors is not None else None,
        version=record.version,
    )


class SqliteIntermediateStore:
    """SQLAlchemy経由でSQLiteに中間データを保存するストア"""

    def __init__(self, engine: Engine, logger: logging.Logger | None = None) -> None:
        self.engine = engine
        self.logger = logger or logging.getLogger(__name__)
        init_db(engine)

    def _get_record(self, session, ref: str) -> StageRecord:
        api, date, track_code, attempt = parse_ref(ref)
        record = (
            session.query(StageRecord)
            .filter(StageRecord.api == api)
            .filter(StageRecord.date == date)
            .filter(StageRecord.track_code == track_code)
            .filter(StageRecord.attempt == attempt)
            .one_or_none()
        )
        if record is None:
            raise IntermediateFileNotFoundError(f"中間データが存在しません: {ref}")
        return record

    def save(
        self, api: ApiType, date: str, track_code: str, data: list[dict[str, Any]]
    ) -> str:
        """新しい試行番号で pending のレコードを作成する"""
        payload = json.dumps(list(data), ensure_ascii=False)

        for _ in range(MAX_CREATE_ATTEMPTS):
            try:
                with get_session(self.engine) as session:
                    last_attempt = (
                        session.query(func.max(StageRecord.attempt))
                        .filter(StageRecord.api == api.value)
                        .filter(StageRecord.date == date)
                        .filter(StageRecord.track_code == track_code)
                        .scalar()
                    )
                    record = StageRecord(
                        api=api.value,
                        date=date,
                        track_code=track_code,
                        attempt=(last_attempt or 0) + 1,
                        created_at=_now_iso(),
                        data_count=len(data),
                        status=FileStatus.PENDING.value,
                        errors=None,
                        version=INTERMEDIATE_FORMAT_VERSION,
                        payload=payload,
                    )
                    session.add(record)
                    session.flush()
                    ref = record.key
            except IntegrityError:
                # 別プロセスが同じ試行番号を先に確保した
                continue
            self.logger.debug("中間データ保存: %s (%d件)", ref, len(data))
            return ref

        raise StoreError(f"中間データを作成できませんでした: {api.value}/{date}/{track_code}")

    def load(self, ref: str) -> IntermediateFile:
        with get_session(self.engine) as session:
            record = self._get_record(session, ref)
            return IntermediateFile(metadata=_to_metadata(record), data=json.loads(record.payload))

    def update_status(
        self, ref: str, status: FileStatus, errors: list[str] | None = None
    ) -> None:
        """ステータスを1トランザクションで更新する

        Raises:
            SentRecordImmutableError: 送信済みレコードを更新しようとした場合
        """
        with get_session(self.engine) as session:
            record = self._get_record(session, ref)
            if record.status == FileStatus.SENT.value:
                raise SentRecordImmutableError(f"送信済みの中間データは変更できません: {ref}")

            record.status = status.value
            if errors is not None:
                record.errors = json.dumps(list(errors), ensure_ascii=False)
            elif status != FileStatus.FAILED:
                record.errors = None
        self.logger.debug("中間データステータス更新: %s - %s", status.value, ref)

    def find(
        self,
        api: ApiType,
        date: str,
        track_code: str | None = None,
        status: FileStatus | None = None,
    ) -> list[IntermediateFileInfo]:
        with get_session(self.engine) as session:
            query = (
                session.query(StageRecord)
                .filter(StageRecord.api == api.value)
                .filter(StageRecord.date == date)
            )
            if track_code:
                query = query.filter(StageRecord.track_code == track_code)
            if status:
                query = query.filter(StageRecord.status == status.value)
            records = query.order_by(StageRecord.created_at, StageRecord.attempt).all()
            return [IntermediateFileInfo(ref=record.key, metadata=_to_metadata(record)) for record in records]

    def cleanup_old_files(self, days_to_keep: int = 7) -> int:
        """更新日時が古いレコードを削除する（エラーはログのみ）"""
        cutoff = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=days_to_keep)
        try:
            with get_session(self.engine) as session:
                removed = (
                    session.query(StageRecord)
                    .filter(StageRecord.updated_at < cutoff)
                    .delete(synchronize_session=False)
                )
        except SQLAlchemyError as e:
            self.logger.error("中間データクリーンアップエラー: %s", e)
            return 0
        if removed:
            self.logger.info("古い中間データを削除: %d件", removed)
        return removed
