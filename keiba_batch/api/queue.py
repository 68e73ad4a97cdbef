"""Work-queue protocol client.

    GET  /api/batch-register/queued-jobs      -> {success, data: {jobs: [...]}}
    PUT  /api/batch-register/status/{id}      <- {status, result, error}

Fetch failures yield an empty batch and status-update failures are logged
only, so the dispatcher loop keeps running when the queue is unreachable.
"""

import logging
from typing import Any

from keiba_batch.api.client import ApiClient
from keiba_batch.exceptions import ApiError, UnsupportedJobTypeError
from keiba_batch.models.job import BatchJob, JobFailure, JobOutcome, JobStatus, JobSuccess, JobType

QUEUED_JOBS_ENDPOINT = "/api/batch-register/queued-jobs"
STATUS_ENDPOINT = "/api/batch-register/status/{job_id}"


def order_jobs(jobs: list[BatchJob]) -> list[BatchJob]:
    """RaceInfo ジョブを先頭に移す（その他の相対順序は維持）"""
    return sorted(jobs, key=lambda job: 0 if job.type == JobType.RACE_INFO else 1)


class JobQueueClient:
    """バッチジョブキューのクライアント"""

    def __init__(self, client: ApiClient, logger: logging.Logger | None = None) -> None:
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    def fetch_pending_jobs(self) -> list[BatchJob]:
        """キュー内のジョブを取得する

        通信エラー時は空リストを返す。解釈できないジョブは警告を出して読み飛ばす。
        """
        try:
            response = self.client.get(QUEUED_JOBS_ENDPOINT)
        except ApiError as e:
            self.logger.error("ジョブ取得に失敗しました: %s", e)
            return []

        data = response.get("data") or {}
        raw_jobs = (data.get("jobs") or []) if isinstance(data, dict) else None
        if not isinstance(raw_jobs, list):
            self.logger.error("ジョブ一覧の形式が不正です: %r", response.get("data"))
            return []

        jobs: list[BatchJob] = []
        for raw in raw_jobs:
            try:
                jobs.append(BatchJob.from_queue(raw))
            except (UnsupportedJobTypeError, ValueError, TypeError, AttributeError) as e:
                job_id = raw.get("id") if isinstance(raw, dict) else None
                self.logger.warning("未対応のジョブをスキップ: id=%s (%s)", job_id, e)

        self.logger.info("キューから%d件のジョブを取得しました", len(jobs))
        return jobs

    def update_job_status(
        self,
        job_id: str,
        status: JobStatus,
        outcome: JobOutcome | None = None,
    ) -> bool:
        """ジョブのステータスを更新する（失敗してもログのみ）

        Returns:
            更新できたかどうか
        """
        body: dict[str, Any] = {"status": status.value, "result": None, "error": None}
        if isinstance(outcome, JobSuccess):
            body["result"] = outcome.payload
        elif isinstance(outcome, JobFailure):
            body["error"] = outcome.message

        try:
            self.client.put(STATUS_ENDPOINT.format(job_id=job_id), body)
        except ApiError as e:
            self.logger.error("ジョブステータス更新に失敗しました: id=%s status=%s (%s)", job_id, status.value, e)
            return False

        self.logger.debug("ジョブステータス更新: id=%s status=%s", job_id, status.value)
        return True
