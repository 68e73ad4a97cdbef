"""Reader for raw results exported by external tooling.

Predictions, AI indices and index images come from OCR runs and logged-in
sites outside this package. Those tools write one JSON file per unit::

    <export_dir>/<api>/<YYYYMMDD>/<trackCode>.json

holding either a list of raw results or ``{"results": [...]}``.
"""

import json
import logging
from pathlib import Path
from typing import Any

from keiba_batch.constants import ApiType
from keiba_batch.scrapers.base import RawResult
from keiba_batch.utils.date_utils import to_compact_date


class ExportedResultsScraper:
    """エクスポート済みの生データJSONを読み込むスクレイパー

    Attributes:
        api: 対象API種別
        export_dir: エクスポートのルートディレクトリ
    """

    def __init__(
        self, api: ApiType, export_dir: str | Path, logger: logging.Logger | None = None
    ) -> None:
        self.api = api
        self.export_dir = Path(export_dir)
        self.logger = logger or logging.getLogger(__name__)

    def path_for(self, date: str, track_code: str) -> Path:
        return self.export_dir / self.api.value / to_compact_date(date) / f"{track_code}.json"

    def scrape(self, date: str, track_code: str, **options: Any) -> list[RawResult]:
        """エクスポートファイルを読み込む（ファイルがなければ空リスト）

        options に image_urls があれば、image_url を持たない結果に順に割り当てる。

        Raises:
            ValueError: JSONの形式が不正な場合
        """
        path = self.path_for(date, track_code)
        if not path.exists():
            self.logger.info("エクスポートファイルがありません: %s", path)
            return []

        with open(path, encoding="utf-8") as f:
            raw = json.load(f)

        if isinstance(raw, dict):
            raw = raw.get("results")
        if not isinstance(raw, list):
            raise ValueError(f"エクスポートファイルの形式が不正です: {path}")

        compact_date = to_compact_date(date)
        image_urls = list(options.get("image_urls") or [])
        results: list[RawResult] = []
        for i, item in enumerate(raw):
            if not isinstance(item, dict):
                continue
            result = dict(item)
            result.setdefault("date", compact_date)
            result.setdefault("trackCode", track_code)
            if not result.get("image_url") and i < len(image_urls):
                result["image_url"] = image_urls[i]
            if options.get("url"):
                result.setdefault("source_url", options["url"])
            results.append(result)

        self.logger.debug("エクスポートファイル読み込み: %s (%d件)", path, len(results))
        return results
