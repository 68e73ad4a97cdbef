"""CLIから使うコンポーネントの組み立て"""

from dataclasses import dataclass

from keiba_batch.api.client import ApiClient
from keiba_batch.api.queue import JobQueueClient
from keiba_batch.config.settings import Settings
from keiba_batch.scrapers import RaceListScraper, build_scrapers
from keiba_batch.services.dispatcher import JobDispatcher
from keiba_batch.services.job_handlers import build_job_handlers
from keiba_batch.services.stage_controller import StageController
from keiba_batch.store import IntermediateStore, create_store


@dataclass
class CliContext:
    """click の ctx.obj に格納するコンテキスト"""

    settings: Settings
    verbose: bool = False
    quiet: bool = False

    def store(self, backend: str | None = None) -> IntermediateStore:
        return create_store(self.settings, backend)

    def controller(self, backend: str | None = None, dry_run: bool = False) -> StageController:
        return StageController(
            store=self.store(backend),
            client=ApiClient.from_settings(self.settings),
            scrapers=build_scrapers(self.settings),
            delay_range=self.settings.delay_range,
            dry_run=dry_run,
        )

    def dispatcher(self, backend: str | None = None, dry_run: bool = False) -> JobDispatcher:
        controller = self.controller(backend, dry_run)
        race_list = RaceListScraper(delay=self.settings.delay_min)
        handlers = build_job_handlers(controller, resolve_track_codes=race_list.resolve_track_codes)
        return JobDispatcher(JobQueueClient(ApiClient.from_settings(self.settings)), handlers)
