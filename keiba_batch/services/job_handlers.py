"""Type-specific batch job handlers.

A handler turns a BatchJob into one run_stage() call over the job's date
and track codes and returns the job result payload. It raises when the run
left any intermediate file failed.
"""

import logging
import re
from typing import Any, Callable

from keiba_batch.constants import TRACK_CODE_PATTERN, StageType
from keiba_batch.exceptions import JobError, StageFailedError
from keiba_batch.models.job import BatchJob, JobType
from keiba_batch.services.stage_controller import StageController
from keiba_batch.utils.date_utils import to_iso_date

TrackResolver = Callable[[str], list[str]]
JobHandlerFunc = Callable[[BatchJob], dict[str, Any]]

_TRACK_CODE_RE = re.compile(TRACK_CODE_PATTERN)


class StageJobHandler:
    """ジョブを StageController の全段階実行に変換するハンドラー

    Attributes:
        controller: StageController
        resolve_track_codes: 競馬場コード未指定時に開催場を求める関数
        requires_track_code: True の場合、競馬場コード未指定はエラー
    """

    def __init__(
        self,
        controller: StageController,
        resolve_track_codes: TrackResolver | None = None,
        requires_track_code: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.controller = controller
        self.resolve_track_codes = resolve_track_codes
        self.requires_track_code = requires_track_code
        self.logger = logger or logging.getLogger(__name__)

    def __call__(self, job: BatchJob) -> dict[str, Any]:
        """ジョブを実行して result を返す

        Raises:
            JobError: パラメータが不足または不正な場合
            StageFailedError: 失敗した中間ファイルがある場合
        """
        params = job.parameters
        if not params.date:
            raise JobError(f"dateが指定されていません: job={job.id}")
        date = to_iso_date(params.date)

        track_codes = list(params.track_codes)
        invalid = [
            str(code)
            for code in track_codes
            if not (isinstance(code, str) and _TRACK_CODE_RE.fullmatch(code))
        ]
        if invalid:
            raise JobError(f"不正な競馬場コードです: job={job.id} track_code={','.join(invalid)}")
        if not track_codes:
            if self.requires_track_code:
                raise JobError(f"track_codeが指定されていません: job={job.id}")
            track_codes = self._resolve(date)

        if not track_codes:
            self.logger.warning("開催がないため処理をスキップ: job=%s date=%s", job.id, date)

        report = self.controller.run_stage(
            job.api_type,
            date,
            track_codes,
            StageType.ALL,
            scrape_options=params.scraper_options(),
        )
        if report.failed:
            raise StageFailedError(
                f"{len(report.failed)}件の中間ファイルが失敗しました: {', '.join(report.failed)}",
                failed=report.failed,
            )
        return report.to_payload()

    def _resolve(self, date: str) -> list[str]:
        if self.resolve_track_codes is None:
            return []
        track_codes = self.resolve_track_codes(date)
        self.logger.info("開催場を解決: %s -> %s", date, ",".join(track_codes) or "-")
        return track_codes


def build_job_handlers(
    controller: StageController,
    resolve_track_codes: TrackResolver | None = None,
    logger: logging.Logger | None = None,
) -> dict[JobType, JobHandlerFunc]:
    """ジョブタイプごとのハンドラーを作成する

    Index / AiIndex は単一の競馬場を対象とするため競馬場コード必須。
    """
    def handler(requires_track_code: bool = False) -> StageJobHandler:
        return StageJobHandler(
            controller,
            resolve_track_codes=resolve_track_codes,
            requires_track_code=requires_track_code,
            logger=logger,
        )

    return {
        JobType.RACE_INFO: handler(),
        JobType.RACE_RESULT: handler(),
        JobType.PREDICTION: handler(),
        JobType.INDEX: handler(requires_track_code=True),
        JobType.AI_INDEX: handler(requires_track_code=True),
    }
