"""データ送信エンドポイント"""

import logging
from typing import Any

from keiba_batch.api.client import ApiClient
from keiba_batch.constants import ENTRY_LIST_KEYS, ApiType

SUBMIT_ENDPOINTS: dict[ApiType, str] = {
    ApiType.RACE_INFO: "/api/v1/race-info",
    ApiType.PREDICTIONS: "/api/v1/predictions",
    ApiType.AI_INDEX: "/api/v1/ai-index",
    ApiType.INDEX_IMAGES: "/api/v1/index-images",
    ApiType.RACE_RESULTS: "/api/v1/race-results",
}


class SubmissionEndpoint:
    """APIごとの送信エンドポイント

    Attributes:
        api: API種別
        client: ApiClient
    """

    def __init__(self, api: ApiType, client: ApiClient, logger: logging.Logger | None = None) -> None:
        self.api = api
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    @property
    def path(self) -> str:
        return SUBMIT_ENDPOINTS[self.api]

    def send(self, body: dict[str, Any]) -> dict[str, Any]:
        """1リクエストボディを送信する

        Raises:
            ApiRequestError: 送信に失敗した場合
        """
        entries = body.get(ENTRY_LIST_KEYS[self.api]) or []
        self.logger.info(
            "Sending %s for %s, track %s (%d entries)",
            self.api.value,
            body.get("date"),
            body.get("trackCode"),
            len(entries),
        )
        response = self.client.post(self.path, body)
        self.logger.info("%s sent: %s records saved", self.api.value, response.get("saved_count"))
        return response
