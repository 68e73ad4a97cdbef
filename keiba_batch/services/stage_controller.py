"""Stage Controller.

Drives one (api, date, trackCode) unit through the pipeline::

    scrape -> transform -> persist(pending) -> validate
        -> persist(validated) -> send -> persist(sent)
        |  persist(failed, errors)

Stages can also be run on their own against records already in the store,
so a run that stopped half way can be resumed from validate or send.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from keiba_batch.api.client import ApiClient
from keiba_batch.api.endpoints import SubmissionEndpoint
from keiba_batch.constants import ApiType, FileStatus, StageType
from keiba_batch.exceptions import ApiError, ScraperNotConfiguredError, StoreError
from keiba_batch.mappers import map_results
from keiba_batch.models.intermediate import ValidationResult
from keiba_batch.scrapers.base import RawResult, ScraperCollaborator
from keiba_batch.scrapers.safe import SafeScraper
from keiba_batch.store.base import IntermediateStore
from keiba_batch.utils.date_utils import to_iso_date
from keiba_batch.utils.delay import random_delay
from keiba_batch.validators import validate_file

SEND_FAILED_MESSAGE = "API送信に失敗しました"


@dataclass
class StageRunReport:
    """run_stage の実行結果

    Attributes:
        api: API種別
        date: 対象日（YYYY-MM-DD）
        stage: 実行した段階
        track_codes: 対象の競馬場コード
        created: 作成した中間ファイル参照
        validated: 検証に通った参照
        sent: 送信済みになった参照
        failed: 失敗した参照
    """

    api: ApiType
    date: str
    stage: StageType
    track_codes: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    validated: list[str] = field(default_factory=list)
    sent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed

    def to_payload(self) -> dict[str, Any]:
        """ジョブの result に格納する形式"""
        return {
            "api": self.api.value,
            "date": self.date,
            "track_codes": list(self.track_codes),
            "created": len(self.created),
            "validated": len(self.validated),
            "sent": len(self.sent),
            "failed": len(self.failed),
        }


class StageController:
    """1ユニット（api, date, trackCode）単位で段階処理を行うコントローラー

    Attributes:
        store: 中間ストア
        client: APIクライアント（送信しない場合は None でもよい）
        scrapers: API種別ごとのスクレイパー
        delay_range: ネットワーク処理間のランダム待機（秒）
        dry_run: True の場合は送信せずログのみ
    """

    def __init__(
        self,
        store: IntermediateStore,
        client: ApiClient | None = None,
        scrapers: dict[ApiType, ScraperCollaborator] | None = None,
        delay_range: tuple[float, float] = (1.0, 3.0),
        dry_run: bool = False,
        logger: logging.Logger | None = None,
        sleep: Callable[[float, float], Any] = random_delay,
    ) -> None:
        self.store = store
        self.client = client
        self.scrapers = dict(scrapers or {})
        self.delay_range = delay_range
        self.dry_run = dry_run
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep

    def _pause(self) -> None:
        self._sleep(*self.delay_range)

    # --- stages -----------------------------------------------------------

    def scrape(self, api: ApiType, date: str, track_code: str, **options: Any) -> list[RawResult]:
        """スクレイパーで生データを取得する（失敗時は空リスト）

        Raises:
            ScraperNotConfiguredError: API種別にスクレイパーが登録されていない場合
        """
        scraper = self.scrapers.get(api)
        if scraper is None:
            raise ScraperNotConfiguredError(f"スクレイパーが登録されていません: {api.value}")
        if not isinstance(scraper, SafeScraper):
            scraper = SafeScraper(scraper, logger=self.logger)

        results = scraper.scrape(date, track_code, **options)
        self.logger.info("スクレイピング完了: %s %s %s (%d件)", api.value, date, track_code, len(results))
        return results

    def transform(self, api: ApiType, results: list[RawResult]) -> list[dict[str, Any]]:
        """生データをAPIリクエストボディに変換する（重複除去を含む）"""
        return map_results(api, results)

    def persist(self, api: ApiType, date: str, track_code: str, data: list[dict[str, Any]]) -> str:
        """pending の中間ファイルを新規作成する"""
        ref = self.store.save(api, date, track_code, data)
        self.logger.info("中間ファイル作成: %s (%d件)", ref, len(data))
        return ref

    def validate(self, ref: str) -> ValidationResult:
        """中間ファイルを検証し、ステータスを validated / failed に更新する

        送信済みファイルは検証結果を返すだけでステータスは変更しない。
        """
        intermediate_file = self.store.load(ref)
        result = validate_file(intermediate_file)

        for warning in result.warnings:
            self.logger.warning("検証警告: %s: %s", ref, warning)

        if intermediate_file.metadata.status == FileStatus.SENT:
            self.logger.warning("送信済みのため検証結果を反映しません: %s", ref)
            return result

        if result.is_valid:
            self.store.update_status(ref, FileStatus.VALIDATED)
            self.logger.info("検証成功: %s", ref)
        else:
            self.store.update_status(ref, FileStatus.FAILED, result.errors)
            self.logger.error("検証失敗: %s (%d件のエラー)", ref, len(result.errors))
            for error in result.errors:
                self.logger.debug("検証エラー: %s: %s", ref, error)
        return result

    def send(self, ref: str, dry_run: bool | None = None) -> bool:
        """validated の中間ファイルを送信する

        全件が受け付けられた場合のみ sent にする。1件でも失敗すれば failed。
        validated 以外のファイルは送信しない。
        """
        dry_run = self.dry_run if dry_run is None else dry_run
        intermediate_file = self.store.load(ref)
        metadata = intermediate_file.metadata

        if metadata.status != FileStatus.VALIDATED:
            self.logger.warning("validated ではないため送信しません: %s (%s)", ref, metadata.status.value)
            return False

        if dry_run:
            self.logger.info("[DRY RUN] 送信対象: %s (%d件)", ref, len(intermediate_file.data))
            self.logger.debug(
                "[DRY RUN] 送信予定データ: %s",
                json.dumps(intermediate_file.data, ensure_ascii=False),
            )
            return True

        if self.client is None:
            raise ApiError("APIクライアントが設定されていません")

        endpoint = SubmissionEndpoint(metadata.api, self.client, logger=self.logger)
        failures = 0
        for i, body in enumerate(intermediate_file.data):
            if i > 0:
                self._pause()
            try:
                endpoint.send(body)
            except ApiError as e:
                failures += 1
                self.logger.error("送信失敗: %s データ[%d]: %s", ref, i, e)

        total = len(intermediate_file.data)
        if failures:
            self.store.update_status(
                ref, FileStatus.FAILED, [f"{SEND_FAILED_MESSAGE} ({failures}/{total}件)"]
            )
            return False

        self.store.update_status(ref, FileStatus.SENT)
        self.logger.info("送信完了: %s (%d件)", ref, total)
        return True

    # --- entry point ------------------------------------------------------

    def run_stage(
        self,
        api: ApiType,
        date: str,
        track_codes: list[str],
        stage: StageType = StageType.ALL,
        file_ref: str | None = None,
        scrape_options: dict[str, Any] | None = None,
    ) -> StageRunReport:
        """指定した段階を実行する

        Args:
            api: API種別
            date: 対象日（YYYY-MM-DD または YYYYMMDD）
            track_codes: 対象の競馬場コード
            stage: scrape / validate / send / all
            file_ref: validate / send の対象を1ファイルに限定する場合の参照
            scrape_options: スクレイパーに渡す追加オプション
        """
        date = to_iso_date(date)
        report = StageRunReport(api=api, date=date, stage=stage, track_codes=list(track_codes))
        self.logger.info(
            "段階実行開始: %s %s [%s] stage=%s", api.value, date, ",".join(track_codes), stage.value
        )

        if stage in (StageType.SCRAPE, StageType.ALL) and file_ref is None:
            self._run_scrape(api, date, track_codes, scrape_options or {}, report)

        if stage == StageType.VALIDATE:
            targets = [file_ref] if file_ref else self._find_refs(
                api, date, track_codes, (FileStatus.PENDING, FileStatus.FAILED)
            )
            self._run_validate(targets, report)
        elif stage == StageType.SEND:
            targets = [file_ref] if file_ref else self._find_refs(
                api, date, track_codes, (FileStatus.VALIDATED,)
            )
            self._run_send(targets, report)
        elif stage == StageType.ALL:
            targets = [file_ref] if file_ref else list(report.created)
            self._run_validate(targets, report)
            self._run_send(list(report.validated), report)

        self.logger.info(
            "段階実行完了: %s %s created=%d validated=%d sent=%d failed=%d",
            api.value,
            date,
            len(report.created),
            len(report.validated),
            len(report.sent),
            len(report.failed),
        )
        return report

    def _run_scrape(
        self,
        api: ApiType,
        date: str,
        track_codes: list[str],
        options: dict[str, Any],
        report: StageRunReport,
    ) -> None:
        for i, track_code in enumerate(track_codes):
            if i > 0:
                self._pause()

            results = self.scrape(api, date, track_code, **options)
            bodies = self.transform(api, results)
            if not bodies:
                self.logger.warning("データがありません: %s %s %s", api.value, date, track_code)
                continue

            groups: dict[tuple[str, str], list[dict[str, Any]]] = {}
            for body in bodies:
                key = (body.get("date") or date, body.get("trackCode") or track_code)
                groups.setdefault(key, []).append(body)

            for (body_date, body_track), data in groups.items():
                report.created.append(self.persist(api, body_date, body_track, data))

    def _run_validate(self, refs: list[str], report: StageRunReport) -> None:
        for ref in refs:
            try:
                result = self.validate(ref)
            except StoreError as e:
                self.logger.error("検証できませんでした: %s (%s)", ref, e)
                report.failed.append(ref)
                continue
            if result.is_valid:
                report.validated.append(ref)
            else:
                report.failed.append(ref)

    def _run_send(self, refs: list[str], report: StageRunReport) -> None:
        for i, ref in enumerate(refs):
            if i > 0:
                self._pause()
            try:
                sent = self.send(ref)
            except StoreError as e:
                self.logger.error("送信できませんでした: %s (%s)", ref, e)
                report.failed.append(ref)
                continue
            if sent:
                report.sent.append(ref)
            else:
                report.failed.append(ref)

    def _find_refs(
        self,
        api: ApiType,
        date: str,
        track_codes: list[str],
        statuses: tuple[FileStatus, ...],
    ) -> list[str]:
        infos = []
        for track_code in track_codes or [None]:
            for status in statuses:
                infos.extend(self.store.find(api, date, track_code=track_code, status=status))
        infos.sort(key=lambda info: info.metadata.created_at)
        return [info.ref for info in infos]
