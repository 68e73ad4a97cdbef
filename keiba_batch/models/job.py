"""Batch job DTOs for the external work queue.

This module provides immutable data transfer objects for batch jobs pulled
from the remote queue, together with the tagged job outcome
(JobSuccess | JobFailure).
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from keiba_batch.constants import ApiType
from keiba_batch.exceptions import UnsupportedJobTypeError


class JobType(str, Enum):
    """バッチジョブの種類"""

    RACE_INFO = "race_info"
    RACE_RESULT = "race_result"
    PREDICTION = "prediction"
    INDEX = "index"
    AI_INDEX = "ai_index"


class JobStatus(str, Enum):
    """バッチジョブのステータス"""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    @property
    def rank(self) -> int:
        """遷移順序（queued < processing < completed / failed）"""
        return _STATUS_RANKS[self]


_STATUS_RANKS = {
    JobStatus.QUEUED: 0,
    JobStatus.PROCESSING: 1,
    JobStatus.COMPLETED: 2,
    JobStatus.FAILED: 2,
}


# ジョブタイプから送信先APIへの対応
JOB_API_TYPES: dict[JobType, ApiType] = {
    JobType.RACE_INFO: ApiType.RACE_INFO,
    JobType.RACE_RESULT: ApiType.RACE_RESULTS,
    JobType.PREDICTION: ApiType.PREDICTIONS,
    JobType.INDEX: ApiType.INDEX_IMAGES,
    JobType.AI_INDEX: ApiType.AI_INDEX,
}


@dataclass(frozen=True)
class JobSuccess:
    """ジョブ成功時の結果"""

    payload: dict[str, Any]


@dataclass(frozen=True)
class JobFailure:
    """ジョブ失敗時の結果"""

    message: str


JobOutcome = Union[JobSuccess, JobFailure]


@dataclass(frozen=True)
class JobParameters:
    """Type-specific job parameters.

    Attributes:
        date: Target date as sent by the queue (YYYY-MM-DD or YYYYMMDD).
        track_codes: Track codes to process. Empty means "resolve from schedule".
        sources: Prediction data sources (Prediction jobs only).
        image_urls: Index image URLs (Index jobs only).
        url: Note article URL (AiIndex jobs only).
    """

    date: str
    track_codes: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    image_urls: tuple[str, ...] = ()
    url: str | None = None

    @classmethod
    def from_dict(cls, job_type: JobType, raw: dict[str, Any] | None) -> "JobParameters":
        """キューの parameters オブジェクトからジョブタイプ別に変換する

        Index / AiIndex は単一の track_code を持つため、1要素のタプルにする。
        """
        raw = raw or {}
        date = str(raw.get("date") or "")

        if job_type == JobType.RACE_INFO:
            return cls(date=date, track_codes=tuple(raw.get("track_codes") or ()))
        if job_type == JobType.RACE_RESULT:
            return cls(date=date, track_codes=tuple(raw.get("track_codes") or ()))
        if job_type == JobType.PREDICTION:
            return cls(
                date=date,
                track_codes=tuple(raw.get("track_codes") or ()),
                sources=tuple(raw.get("sources") or ()),
            )

        track_code = raw.get("track_code") or ""
        track_codes = (track_code,) if track_code else ()
        if job_type == JobType.INDEX:
            return cls(
                date=date,
                track_codes=track_codes,
                image_urls=tuple(raw.get("image_urls") or ()),
            )
        return cls(date=date, track_codes=track_codes, url=raw.get("url") or None)

    def scraper_options(self) -> dict[str, Any]:
        """スクレイパーに渡す追加オプション（空の項目は含めない）"""
        options: dict[str, Any] = {}
        if self.sources:
            options["sources"] = list(self.sources)
        if self.image_urls:
            options["image_urls"] = list(self.image_urls)
        if self.url:
            options["url"] = self.url
        return options


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class BatchJob:
    """Represents a single unit of work pulled from the remote queue.

    Mutated only through with_status(), which returns a new instance and
    advances updated_at.

    Attributes:
        id: Opaque unique identifier.
        type: Job type.
        status: Current status.
        parameters: Type-specific parameters.
        outcome: Set only on terminal status (JobSuccess or JobFailure).
        created_at: Creation timestamp (ISO 8601).
        updated_at: Last status transition timestamp (ISO 8601).
    """

    id: str
    type: JobType
    status: JobStatus = JobStatus.QUEUED
    parameters: JobParameters = field(default_factory=lambda: JobParameters(date=""))
    outcome: JobOutcome | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def api_type(self) -> ApiType:
        return JOB_API_TYPES[self.type]

    def with_status(self, status: JobStatus, outcome: JobOutcome | None = None) -> "BatchJob":
        """ステータスを遷移させた新しいジョブを返す

        Raises:
            ValueError: 遷移が後戻りする場合、終了ステータスから遷移する場合、
                終了ステータスで outcome がない場合、または非終了ステータスで outcome がある場合
        """
        if self.status.is_terminal:
            raise ValueError(f"job {self.id} is already {self.status.value}; use retry() to requeue")
        if status.rank < self.status.rank:
            raise ValueError(f"cannot move job {self.id} from {self.status.value} to {status.value}")
        if status.is_terminal and outcome is None:
            raise ValueError(f"terminal status {status.value} requires an outcome")
        if not status.is_terminal and outcome is not None:
            raise ValueError(f"status {status.value} must not carry an outcome")
        if status == JobStatus.COMPLETED and not isinstance(outcome, JobSuccess):
            raise ValueError("completed jobs must carry JobSuccess")
        if status == JobStatus.FAILED and not isinstance(outcome, JobFailure):
            raise ValueError("failed jobs must carry JobFailure")
        return replace(self, status=status, outcome=outcome, updated_at=_now_iso())

    def retry(self) -> "BatchJob":
        """失敗したジョブを手動で再実行するため queued に戻す

        Raises:
            ValueError: failed 以外のジョブの場合
        """
        if self.status != JobStatus.FAILED:
            raise ValueError(f"only failed jobs can be retried: {self.id} is {self.status.value}")
        return replace(self, status=JobStatus.QUEUED, outcome=None, updated_at=_now_iso())

    @classmethod
    def from_queue(cls, raw: dict[str, Any]) -> "BatchJob":
        """キューのジョブJSONから BatchJob を作成する

        Raises:
            UnsupportedJobTypeError: 未対応のジョブタイプの場合
            ValueError: id がない場合
        """
        job_id = raw.get("id")
        if job_id is None or job_id == "":
            raise ValueError("job id is required")
        try:
            job_type = JobType(raw.get("type"))
        except ValueError:
            raise UnsupportedJobTypeError(f"unsupported job type: {raw.get('type')!r}") from None
        created_at = str(raw.get("created_at") or "")
        return cls(
            id=str(job_id),
            type=job_type,
            status=JobStatus.QUEUED,
            parameters=JobParameters.from_dict(job_type, raw.get("parameters")),
            created_at=created_at,
            updated_at=str(raw.get("updated_at") or created_at),
        )
