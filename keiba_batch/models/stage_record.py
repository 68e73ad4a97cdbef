"""StageRecordモデル定義"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from keiba_batch.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StageRecord(Base):
    """中間ファイル1件分のレコード（sqliteストア用）

    キーは api + date + track_code + attempt。

    Attributes:
        id: 連番（主キー）
        api: API種別
        date: 対象日（YYYY-MM-DD）
        track_code: 競馬場コード
        attempt: 同一キー内の試行番号（1始まり）
        created_at: 作成日時（ISO 8601文字列、ファイル版と同じ表現）
        data_count: データ件数
        status: ステータス
        errors: エラー（JSON配列文字列、なければNone）
        version: フォーマットバージョン
        payload: データ本体（JSON配列文字列）
        updated_at: 更新日時
    """

    __tablename__ = "stage_records"
    __table_args__ = (
        UniqueConstraint("api", "date", "track_code", "attempt", name="uq_stage_record_key"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    api: Mapped[str] = mapped_column(String, nullable=False, index=True)
    date: Mapped[str] = mapped_column(String, nullable=False, index=True)
    track_code: Mapped[str] = mapped_column(String, nullable=False)
    attempt: Mapped[int] = mapped_column(nullable=False)
    created_at: Mapped[str] = mapped_column(String, nullable=False)
    data_count: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False)
    errors: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[str] = mapped_column(String, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow
    )

    @property
    def key(self) -> str:
        return f"{self.api}/{self.date}/{self.track_code}/{self.attempt}"

    def __repr__(self) -> str:
        return f"<StageRecord(key={self.key!r}, status={self.status!r})>"
