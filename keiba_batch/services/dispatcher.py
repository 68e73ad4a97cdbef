"""Job Dispatcher.

Polls the work queue, orders the batch (RaceInfo first, other jobs in queue
order) and runs each job through its handler. One job's failure never stops
the jobs after it.
"""

import logging
from dataclasses import dataclass, field

from keiba_batch.api.queue import JobQueueClient, order_jobs
from keiba_batch.exceptions import UnsupportedJobTypeError
from keiba_batch.models.job import BatchJob, JobFailure, JobOutcome, JobStatus, JobSuccess, JobType
from keiba_batch.services.job_handlers import JobHandlerFunc


@dataclass
class DispatchSummary:
    """1回のポーリングの結果"""

    completed: list[BatchJob] = field(default_factory=list)
    failed: list[BatchJob] = field(default_factory=list)
    skipped: list[BatchJob] = field(default_factory=list)

    @property
    def processed(self) -> list[BatchJob]:
        return self.completed + self.failed


class JobDispatcher:
    """キューのジョブを順に処理するディスパッチャー"""

    def __init__(
        self,
        queue: JobQueueClient,
        handlers: dict[JobType, JobHandlerFunc],
        logger: logging.Logger | None = None,
    ) -> None:
        self.queue = queue
        self.handlers = dict(handlers)
        self.logger = logger or logging.getLogger(__name__)

    def fetch_pending_jobs(self) -> list[BatchJob]:
        return self.queue.fetch_pending_jobs()

    def dispatch(self, job: BatchJob) -> JobOutcome:
        """1ジョブを実行し、キューのステータスを更新する

        ハンドラーの例外やハンドラー未登録は JobFailure に変換し、送出しない。
        """
        handler = self.handlers.get(job.type)
        self.queue.update_job_status(job.id, JobStatus.PROCESSING)
        self.logger.info("ジョブ開始: id=%s type=%s", job.id, job.type.value)

        try:
            if handler is None:
                raise UnsupportedJobTypeError(f"ハンドラーが登録されていません: type={job.type.value}")
            payload = handler(job)
        except Exception as e:
            outcome: JobOutcome = JobFailure(message=str(e) or type(e).__name__)
            self.logger.error("ジョブ失敗: id=%s type=%s (%s)", job.id, job.type.value, outcome.message)
            self.queue.update_job_status(job.id, JobStatus.FAILED, outcome)
            return outcome

        outcome = JobSuccess(payload=payload)
        self.logger.info("ジョブ完了: id=%s type=%s", job.id, job.type.value)
        self.queue.update_job_status(job.id, JobStatus.COMPLETED, outcome)
        return outcome

    def run_once(self) -> DispatchSummary:
        """キューを1回ポーリングし、取得した全ジョブを処理する"""
        summary = DispatchSummary()
        jobs = order_jobs(self.fetch_pending_jobs())
        if not jobs:
            self.logger.info("処理対象のジョブはありません")
            return summary

        for job in jobs:
            if job.type not in self.handlers:
                self.logger.warning("ハンドラーのないジョブをスキップ: id=%s type=%s", job.id, job.type.value)
                summary.skipped.append(job)
                continue

            processing = job.with_status(JobStatus.PROCESSING)
            outcome = self.dispatch(processing)
            if isinstance(outcome, JobSuccess):
                summary.completed.append(processing.with_status(JobStatus.COMPLETED, outcome))
            else:
                summary.failed.append(processing.with_status(JobStatus.FAILED, outcome))

        self.logger.info(
            "ディスパッチ完了: completed=%d failed=%d skipped=%d",
            len(summary.completed),
            len(summary.failed),
            len(summary.skipped),
        )
        return summary
