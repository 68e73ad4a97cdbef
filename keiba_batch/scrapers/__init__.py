"""スクレイパー（外部データ取得の協調オブジェクト）"""

from keiba_batch.config.settings import Settings
from keiba_batch.constants import ApiType
from keiba_batch.scrapers.base import BaseScraper, RawResult, ScraperCollaborator
from keiba_batch.scrapers.exported import ExportedResultsScraper
from keiba_batch.scrapers.race_card import RaceCardScraper
from keiba_batch.scrapers.race_list import RaceListScraper
from keiba_batch.scrapers.race_results import RaceResultScraper
from keiba_batch.scrapers.safe import SafeScraper


def build_scrapers(settings: Settings) -> dict[ApiType, ScraperCollaborator]:
    """API種別ごとのデフォルトのスクレイパーを作成する"""
    race_list = RaceListScraper(delay=settings.delay_min)
    scrapers: dict[ApiType, ScraperCollaborator] = {
        ApiType.RACE_INFO: RaceCardScraper(delay=settings.delay_min, race_list=race_list),
        ApiType.RACE_RESULTS: RaceResultScraper(delay=settings.delay_min, race_list=race_list),
    }
    for api in (ApiType.PREDICTIONS, ApiType.AI_INDEX, ApiType.INDEX_IMAGES):
        scrapers[api] = ExportedResultsScraper(api, settings.export_dir)
    return {api: SafeScraper(scraper) for api, scraper in scrapers.items()}


__all__ = [
    "BaseScraper",
    "ExportedResultsScraper",
    "RaceCardScraper",
    "RaceListScraper",
    "RaceResultScraper",
    "RawResult",
    "SafeScraper",
    "ScraperCollaborator",
    "build_scrapers",
]
