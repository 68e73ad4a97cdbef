"""ジョブハンドラーとディスパッチャーのテスト"""

from unittest.mock import Mock

import pytest

from keiba_batch.api.queue import JobQueueClient
from keiba_batch.constants import ApiType, StageType
from keiba_batch.exceptions import JobError, StageFailedError
from keiba_batch.models.job import BatchJob, JobFailure, JobStatus, JobSuccess, JobType
from keiba_batch.services.dispatcher import JobDispatcher
from keiba_batch.services.job_handlers import StageJobHandler, build_job_handlers
from keiba_batch.services.stage_controller import StageController, StageRunReport


def make_job(job_id, job_type, **parameters):
    parameters.setdefault("date", "2025-07-19")
    return BatchJob.from_queue({"id": job_id, "type": job_type.value, "parameters": parameters})


def make_report(api=ApiType.PREDICTIONS, failed=()):
    return StageRunReport(
        api=api,
        date="2025-07-19",
        stage=StageType.ALL,
        track_codes=["02"],
        created=["a"],
        validated=["a"],
        sent=[] if failed else ["a"],
        failed=list(failed),
    )


class TestStageJobHandler:
    """ハンドラーのテスト"""

    def test_runs_all_stages(self):
        """ジョブの日付と競馬場で全段階を実行する"""
        controller = Mock(spec=StageController)
        controller.run_stage.return_value = make_report()
        job = make_job("1", JobType.PREDICTION, date="20250719", track_codes=["02"], sources=["cp"])

        payload = StageJobHandler(controller)(job)

        controller.run_stage.assert_called_once_with(
            ApiType.PREDICTIONS, "2025-07-19", ["02"], StageType.ALL, scrape_options={"sources": ["cp"]}
        )
        assert payload["sent"] == 1

    def test_resolves_tracks_when_missing(self):
        """競馬場未指定なら開催場を解決する"""
        controller = Mock(spec=StageController)
        controller.run_stage.return_value = make_report(ApiType.RACE_INFO)
        resolver = Mock(return_value=["02", "05"])

        StageJobHandler(controller, resolve_track_codes=resolver)(make_job("1", JobType.RACE_INFO))

        resolver.assert_called_once_with("2025-07-19")
        assert controller.run_stage.call_args.args[2] == ["02", "05"]

    def test_track_code_required(self):
        """競馬場必須のジョブで未指定ならJobError"""
        controller = Mock(spec=StageController)
        handlers = build_job_handlers(controller)

        with pytest.raises(JobError, match="track_code"):
            handlers[JobType.AI_INDEX](make_job("1", JobType.AI_INDEX, url="https://note.com/x"))
        controller.run_stage.assert_not_called()

    @pytest.mark.parametrize("track_code", ["../../../escaped", "13", "2", "02/../05", 5])
    def test_invalid_track_code_raises(self, track_code):
        """キューの競馬場コードが不正ならスクレイプせずにJobError"""
        controller = Mock(spec=StageController)
        handlers = build_job_handlers(controller)

        with pytest.raises(JobError, match="不正な競馬場コード"):
            handlers[JobType.AI_INDEX](make_job("1", JobType.AI_INDEX, track_code=track_code))
        controller.run_stage.assert_not_called()

    def test_invalid_track_code_in_list_raises(self):
        """track_codesに不正な値が1つでもあればJobError"""
        controller = Mock(spec=StageController)

        with pytest.raises(JobError, match="escaped"):
            StageJobHandler(controller)(make_job("1", JobType.RACE_INFO, track_codes=["02", "../escaped"]))
        controller.run_stage.assert_not_called()

    def test_missing_date_raises(self):
        """日付がなければJobError"""
        controller = Mock(spec=StageController)

        with pytest.raises(JobError, match="date"):
            StageJobHandler(controller)(make_job("1", JobType.RACE_RESULT, date=""))

    def test_failed_files_raise(self):
        """失敗した中間ファイルがあればStageFailedError"""
        controller = Mock(spec=StageController)
        controller.run_stage.return_value = make_report(failed=["ref-1"])

        with pytest.raises(StageFailedError) as exc_info:
            StageJobHandler(controller)(make_job("1", JobType.PREDICTION, track_codes=["02"]))

        assert exc_info.value.failed == ["ref-1"]

    def test_index_job_options(self):
        """Indexジョブのパラメータをスクレイパーに渡す"""
        controller = Mock(spec=StageController)
        controller.run_stage.return_value = make_report(ApiType.INDEX_IMAGES)
        handlers = build_job_handlers(controller)

        handlers[JobType.INDEX](make_job("1", JobType.INDEX, track_code="05", image_urls=["u1", "u2"]))

        args = controller.run_stage.call_args
        assert args.args[:3] == (ApiType.INDEX_IMAGES, "2025-07-19", ["05"])
        assert args.kwargs["scrape_options"] == {"image_urls": ["u1", "u2"]}


class TestJobDispatcher:
    """ディスパッチャーのテスト"""

    def make_dispatcher(self, jobs, handlers):
        queue = Mock(spec=JobQueueClient)
        queue.fetch_pending_jobs.return_value = jobs
        return JobDispatcher(queue, handlers), queue

    def test_race_info_runs_first(self):
        """RaceInfoジョブを先に処理する"""
        order = []

        def handler(job):
            order.append(job.id)
            return {"ok": True}

        jobs = [make_job("a", JobType.PREDICTION), make_job("b", JobType.RACE_INFO), make_job("c", JobType.INDEX)]
        dispatcher, _ = self.make_dispatcher(
            jobs, {JobType.PREDICTION: handler, JobType.RACE_INFO: handler, JobType.INDEX: handler}
        )

        summary = dispatcher.run_once()

        assert order == ["b", "a", "c"]
        assert [job.id for job in summary.completed] == ["b", "a", "c"]

    def test_failure_does_not_stop_later_jobs(self):
        """1件失敗しても後続ジョブを処理する"""
        def failing(job):
            raise StageFailedError("1件の中間ファイルが失敗しました: x", failed=["x"])

        jobs = [make_job("1", JobType.RACE_INFO), make_job("2", JobType.PREDICTION)]
        dispatcher, queue = self.make_dispatcher(
            jobs, {JobType.RACE_INFO: failing, JobType.PREDICTION: lambda job: {"sent": 1}}
        )

        summary = dispatcher.run_once()

        assert [job.id for job in summary.failed] == ["1"]
        assert [job.id for job in summary.completed] == ["2"]
        assert summary.failed[0].status == JobStatus.FAILED
        assert summary.failed[0].outcome == JobFailure("1件の中間ファイルが失敗しました: x")
        assert summary.completed[0].outcome == JobSuccess({"sent": 1})
        statuses = [(c.args[0], c.args[1]) for c in queue.update_job_status.call_args_list]
        assert statuses == [
            ("1", JobStatus.PROCESSING),
            ("1", JobStatus.FAILED),
            ("2", JobStatus.PROCESSING),
            ("2", JobStatus.COMPLETED),
        ]

    def test_skips_job_without_handler(self):
        """ハンドラーがないジョブはスキップする"""
        jobs = [make_job("1", JobType.AI_INDEX)]
        dispatcher, queue = self.make_dispatcher(jobs, {})

        summary = dispatcher.run_once()

        assert [job.id for job in summary.skipped] == ["1"]
        queue.update_job_status.assert_not_called()

    def test_dispatch_without_handler_returns_failure(self):
        """ハンドラーがないジョブを直接dispatchするとJobFailureを返す"""
        dispatcher, queue = self.make_dispatcher([], {})

        outcome = dispatcher.dispatch(make_job("z", JobType.INDEX, track_code="05"))

        assert isinstance(outcome, JobFailure)
        assert "ハンドラーが登録されていません" in outcome.message
        assert queue.update_job_status.call_args.args[:2] == ("z", JobStatus.FAILED)

    def test_no_jobs_does_nothing(self):
        """ジョブがなければ何もしない"""
        dispatcher, queue = self.make_dispatcher([], {})

        summary = dispatcher.run_once()

        assert summary.processed == []
        queue.update_job_status.assert_not_called()

    def test_exception_without_message(self):
        """メッセージのない例外は例外名を記録する"""
        def failing(job):
            raise RuntimeError()

        dispatcher, _ = self.make_dispatcher([], {JobType.RACE_INFO: failing})

        outcome = dispatcher.dispatch(make_job("1", JobType.RACE_INFO))

        assert outcome == JobFailure("RuntimeError")
