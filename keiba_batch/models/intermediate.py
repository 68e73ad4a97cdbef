"""中間ファイル関連のDTO

中間ファイルは (api, date, trackCode) ごとの段階出力のスナップショット。
JSON形式は監査ツールが読むため、キー名・構造を変えないこと。
"""

from dataclasses import dataclass, field
from typing import Any

from keiba_batch.constants import INTERMEDIATE_FORMAT_VERSION, ApiType, FileStatus


@dataclass
class IntermediateFileMetadata:
    """中間ファイルのメタデータ

    Attributes:
        api: API種別
        date: 対象日（YYYY-MM-DD）
        track_code: 競馬場コード（01-10）
        created_at: 作成日時（ISO 8601）
        data_count: データ件数（len(data) と一致すること）
        status: ステータス
        errors: 検証・送信エラー（失敗時のみ）
        version: フォーマットバージョン
    """

    api: ApiType
    date: str
    track_code: str
    created_at: str
    data_count: int
    status: FileStatus = FileStatus.PENDING
    errors: list[str] | None = None
    version: str = INTERMEDIATE_FORMAT_VERSION

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "api": self.api.value,
            "date": self.date,
            "trackCode": self.track_code,
            "createdAt": self.created_at,
            "dataCount": self.data_count,
            "status": self.status.value,
        }
        if self.errors is not None:
            data["errors"] = list(self.errors)
        data["version"] = self.version
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IntermediateFileMetadata":
        """JSONのメタデータから作成する

        Raises:
            KeyError: 必須キーがない場合
            ValueError: api / status が不正な場合
        """
        errors = data.get("errors")
        return cls(
            api=ApiType(data["api"]),
            date=data["date"],
            track_code=data["trackCode"],
            created_at=data["createdAt"],
            data_count=data["dataCount"],
            status=FileStatus(data["status"]),
            errors=list(errors) if errors is not None else None,
            version=data.get("version", ""),
        )


@dataclass
class IntermediateFile:
    """中間ファイル本体（メタデータ + 送信データのリスト）"""

    metadata: IntermediateFileMetadata
    data: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"metadata": self.metadata.to_dict(), "data": self.data}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IntermediateFile":
        return cls(
            metadata=IntermediateFileMetadata.from_dict(data["metadata"]),
            data=list(data.get("data") or []),
        )


@dataclass(frozen=True)
class IntermediateFileInfo:
    """検索結果（参照 + メタデータ）"""

    ref: str
    metadata: IntermediateFileMetadata


@dataclass
class ValidationResult:
    """検証結果

    永続化はされず、失敗時は errors がメタデータに畳み込まれる。
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """2つの結果を順序を保って結合した新しい結果を返す"""
        return ValidationResult(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )
