"""StageController のテスト"""

from unittest.mock import Mock

import pytest

from keiba_batch.api.client import ApiClient
from keiba_batch.constants import ApiType, FileStatus, StageType
from keiba_batch.exceptions import ApiRequestError, ScraperNotConfiguredError
from keiba_batch.services.stage_controller import SEND_FAILED_MESSAGE, StageController
from keiba_batch.store.file_store import FileIntermediateStore

OK = {"success": True, "saved_count": 1}


class FakeScraper:
    """固定の生データを返すスクレイパー"""

    def __init__(self, results):
        self.results = results
        self.calls = []

    def scrape(self, date, track_code, **options):
        self.calls.append((date, track_code, options))
        return [dict(result) for result in self.results if result["trackCode"] == track_code]


def ai_raw(race_number, track_code="02", ranks=(3, 1, 4)):
    return {
        "date": "20250719",
        "trackCode": track_code,
        "raceNumber": race_number,
        "netkeiba_race_id": f"2025{track_code}0107{race_number:02d}",
        "ai_index_ranks": list(ranks),
    }


def prediction_raw(race_number, cp_ranks):
    return {
        "date": "20250719",
        "trackCode": "02",
        "raceNumber": race_number,
        "netkeiba_race_id": f"2025020107{race_number:02d}",
        "cp_ranks": cp_ranks,
        "deviation_ranks": [5, 3, 8],
        "rapid_rise_ranks": [2],
        "personal_best_ranks": [1, 4, 6],
        "popularity_risk": 2,
        "data_analysis_ranks": [5, 3, 1],
        "time_index_max": [1, 2, 3, 4, 5],
    }


@pytest.fixture
def store(tmp_path):
    return FileIntermediateStore(tmp_path)


@pytest.fixture
def client():
    client = Mock(spec=ApiClient)
    client.post.return_value = OK
    return client


def make_controller(store, client, scrapers=None, dry_run=False):
    return StageController(
        store,
        client=client,
        scrapers=scrapers or {},
        dry_run=dry_run,
        sleep=lambda low, high: None,
    )


class TestRunAll:
    """全段階実行"""

    def test_valid_data_becomes_sent(self, store, client):
        """正常データは全段階を経て送信済みになる"""
        scraper = FakeScraper([prediction_raw(1, [3, 7]), prediction_raw(1, [3, 7]), prediction_raw(2, [1, 2, 3, 4, 5, 6])])
        controller = make_controller(store, client, {ApiType.PREDICTIONS: scraper})

        report = controller.run_stage(ApiType.PREDICTIONS, "20250719", ["02"])

        assert report.success
        assert len(report.created) == 1
        assert report.sent == report.created
        intermediate_file = store.load(report.created[0])
        assert intermediate_file.metadata.status == FileStatus.SENT
        predictions = intermediate_file.data[0]["predictions"]
        assert [p["raceNumber"] for p in predictions] == [1, 2]
        assert [p["cp_ranks"] for p in predictions] == [[3, 7, 0, 0], [1, 2, 3, 4]]
        client.post.assert_called_once_with("/api/v1/predictions", intermediate_file.data[0])

    def test_invalid_track_code_is_not_sent(self, store, client):
        """競馬場コード13の中間ファイルは検証で失敗し送信されない"""
        scraper = FakeScraper([ai_raw(1, track_code="13")])
        controller = make_controller(store, client, {ApiType.AI_INDEX: scraper})

        report = controller.run_stage(ApiType.AI_INDEX, "2025-07-19", ["13"])

        assert not report.success
        assert report.failed == report.created
        metadata = store.load(report.created[0]).metadata
        assert metadata.status == FileStatus.FAILED
        assert any("trackCodeが正しくありません (01-10)" in error for error in metadata.errors)
        client.post.assert_not_called()

    def test_one_file_per_track(self, store, client):
        """競馬場ごとに中間ファイルを作る"""
        scraper = FakeScraper([ai_raw(1, "02"), ai_raw(1, "05")])
        controller = make_controller(store, client, {ApiType.AI_INDEX: scraper})

        report = controller.run_stage(ApiType.AI_INDEX, "2025-07-19", ["02", "05"])

        assert [store.load(ref).metadata.track_code for ref in report.created] == ["02", "05"]
        assert len(report.sent) == 2
        assert [c[1] for c in scraper.calls] == ["02", "05"]

    def test_no_file_without_data(self, store, client):
        """データがなければ中間ファイルを作らない"""
        controller = make_controller(store, client, {ApiType.AI_INDEX: FakeScraper([])})

        report = controller.run_stage(ApiType.AI_INDEX, "2025-07-19", ["02"])

        assert report.created == []
        assert report.success

    def test_scraper_exception_is_empty_result(self, store, client):
        """スクレイパーの例外は空結果として扱う"""
        scraper = Mock()
        scraper.scrape.side_effect = RuntimeError("parse error")
        controller = make_controller(store, client, {ApiType.AI_INDEX: scraper})

        report = controller.run_stage(ApiType.AI_INDEX, "2025-07-19", ["02"])

        assert report.created == []

    def test_scraper_not_configured(self, store, client):
        """スクレイパー未登録ならScraperNotConfiguredError"""
        controller = make_controller(store, client)

        with pytest.raises(ScraperNotConfiguredError):
            controller.run_stage(ApiType.RACE_INFO, "2025-07-19", ["02"])

    def test_passes_options_to_scraper(self, store, client):
        """スクレイパーにオプションを渡す"""
        scraper = FakeScraper([])
        controller = make_controller(store, client, {ApiType.INDEX_IMAGES: scraper})

        controller.run_stage(ApiType.INDEX_IMAGES, "2025-07-19", ["02"], scrape_options={"image_urls": ["u"]})

        assert scraper.calls == [("2025-07-19", "02", {"image_urls": ["u"]})]


class TestSend:
    """送信段階"""

    def save_validated(self, store, count):
        bodies = [
            {"date": "2025-07-19", "trackCode": "02", "ai_predictions": [{"raceNumber": i + 1, "ai_ranks": [1, 2, 3, 0, 0]}]}
            for i in range(count)
        ]
        ref = store.save(ApiType.AI_INDEX, "2025-07-19", "02", bodies)
        store.update_status(ref, FileStatus.VALIDATED)
        return ref

    def test_partial_send_failure_fails_file(self, store, client):
        """一部の送信が失敗したらファイル全体をfailedにする"""
        ref = self.save_validated(store, 3)
        client.post.side_effect = [OK, ApiRequestError("/api/v1/ai-index", 4, "Duplicate"), OK]

        assert make_controller(store, client).send(ref) is False

        metadata = store.load(ref).metadata
        assert client.post.call_count == 3
        assert metadata.status == FileStatus.FAILED
        assert metadata.errors == [f"{SEND_FAILED_MESSAGE} (1/3件)"]

    def test_sends_only_validated(self, store, client):
        """validated以外のファイルは送信しない"""
        ref = store.save(ApiType.AI_INDEX, "2025-07-19", "02", [])

        assert make_controller(store, client).send(ref) is False
        client.post.assert_not_called()

    def test_does_not_resend_sent(self, store, client):
        """送信済みのファイルは再送しない"""
        ref = self.save_validated(store, 1)
        controller = make_controller(store, client)

        assert controller.send(ref) is True
        assert controller.send(ref) is False
        assert client.post.call_count == 1

    def test_dry_run_keeps_status(self, store, client):
        """ドライランではステータスを変更しない"""
        ref = self.save_validated(store, 2)
        controller = make_controller(store, client, dry_run=True)

        report = controller.run_stage(ApiType.AI_INDEX, "2025-07-19", ["02"], StageType.SEND)

        assert report.sent == [ref]
        assert store.load(ref).metadata.status == FileStatus.VALIDATED
        client.post.assert_not_called()


class TestValidateStage:
    """検証段階"""

    def test_revalidates_pending_and_failed(self, store, client):
        """pendingとfailedのファイルを再検証する"""
        body = {"date": "2025-07-19", "trackCode": "02", "ai_predictions": [{"raceNumber": 1, "ai_ranks": [1, 2, 3, 0, 0]}]}
        pending = store.save(ApiType.AI_INDEX, "2025-07-19", "02", [body])
        failed = store.save(ApiType.AI_INDEX, "2025-07-19", "02", [body])
        store.update_status(failed, FileStatus.FAILED, [f"{SEND_FAILED_MESSAGE} (1/1件)"])
        sent = store.save(ApiType.AI_INDEX, "2025-07-19", "02", [body])
        store.update_status(sent, FileStatus.SENT)

        report = make_controller(store, client).run_stage(ApiType.AI_INDEX, "2025-07-19", ["02"], StageType.VALIDATE)

        assert set(report.validated) == {pending, failed}
        assert store.load(failed).metadata.errors is None
        assert store.load(sent).metadata.status == FileStatus.SENT
        client.post.assert_not_called()

    def test_validating_sent_file_keeps_status(self, store, client):
        """送信済みファイルを検証してもステータスは変わらない"""
        ref = store.save(ApiType.AI_INDEX, "2025-07-19", "13", [])
        store.update_status(ref, FileStatus.SENT)

        result = make_controller(store, client).validate(ref)

        assert not result.is_valid
        assert store.load(ref).metadata.status == FileStatus.SENT

    def test_explicit_file(self, store, client):
        """ファイルを指定して検証する"""
        ref = store.save(ApiType.AI_INDEX, "2025-07-19", "02", [{"date": "2025-07-19", "trackCode": "02", "ai_predictions": [{"raceNumber": 1, "ai_ranks": [1]}]}])

        report = make_controller(store, client).run_stage(
            ApiType.AI_INDEX, "2025-07-19", [], StageType.ALL, file_ref=ref
        )

        assert report.failed == [ref]
        assert report.created == []
        assert any("ai_ranksの長さ" in error for error in store.load(ref).metadata.errors)

    def test_missing_file_counts_as_failed(self, store, client, tmp_path):
        """存在しないファイルは失敗として数える"""
        missing = str(tmp_path / "missing.json")

        report = make_controller(store, client).run_stage(
            ApiType.AI_INDEX, "2025-07-19", [], StageType.VALIDATE, file_ref=missing
        )

        assert report.failed == [missing]


class TestReport:
    def test_payload(self, store, client):
        """ジョブ結果のpayloadに変換する"""
        controller = make_controller(store, client, {ApiType.AI_INDEX: FakeScraper([ai_raw(1)])})

        report = controller.run_stage(ApiType.AI_INDEX, "2025-07-19", ["02"])

        assert report.to_payload() == {
            "api": "ai-index",
            "date": "2025-07-19",
            "track_codes": ["02"],
            "created": 1,
            "validated": 1,
            "sent": 1,
            "failed": 0,
        }
