"""Retrying API client for the backend REST service.

Every call is bounded by a timeout and a finite retry budget. A call fails
when the transport fails, the HTTP status is an error, the body is not JSON,
or the body's ``success`` flag is not true. Failed attempts are retried with
exponential backoff min(base * 2^attempt, max); when the budget is spent an
ApiRequestError carrying the last server-reported detail is raised.
"""

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any

import requests

from keiba_batch.config.settings import Settings
from keiba_batch.exceptions import ApiRequestError
from keiba_batch.utils.delay import backoff_delay

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 3
BACKOFF_BASE = 1.0
BACKOFF_MAX = 10.0


class _AttemptFailed(Exception):
    """1回の試行の失敗（detail はサーバーが返したエラー詳細）"""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


def error_detail(body: Any) -> str:
    """レスポンスボディからエラー詳細を取り出す

    {"success": false, "error": {"message": ..., "details": ...}} 形式を想定する。
    """
    if not isinstance(body, dict):
        return str(body)
    error = body.get("error")
    if isinstance(error, dict):
        message = str(error.get("message") or "unknown error")
        details = error.get("details")
        if details:
            return f"{message} ({json.dumps(details, ensure_ascii=False)})"
        return message
    if error:
        return str(error)
    return body.get("message") or "success flag is false"


class ApiClient:
    """バックエンドAPIクライアント（リトライ・指数バックオフ付き）

    Attributes:
        base_url: ベースURL
        timeout: 1リクエストあたりのタイムアウト（秒）
        retries: 初回以降の最大リトライ回数
        debug_dir: リクエスト/レスポンスのミラー保存先（None なら保存しない）
        session: requests.Session
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        debug_dir: str | Path | None = None,
        backoff_base: float = BACKOFF_BASE,
        backoff_max: float = BACKOFF_MAX,
        logger: logging.Logger | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.debug_dir = Path(debug_dir) if debug_dir else None
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.logger = logger or logging.getLogger(__name__)
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "X-API-KEY": api_key,
            }
        )

    @classmethod
    def from_settings(cls, settings: Settings, logger: logging.Logger | None = None) -> "ApiClient":
        return cls(
            base_url=settings.api_base_url,
            api_key=settings.api_key,
            timeout=settings.api_timeout,
            retries=settings.api_retries,
            debug_dir=settings.debug_dir if settings.debug_mirror else None,
            logger=logger,
        )

    def post(self, endpoint: str, body: dict[str, Any], retries: int | None = None) -> dict[str, Any]:
        """POSTリクエストを送信する

        Raises:
            ApiRequestError: リトライ上限に達した場合
        """
        return self._request("POST", endpoint, body, retries)

    def get(self, endpoint: str, retries: int | None = None) -> dict[str, Any]:
        """GETリクエストを送信する

        Raises:
            ApiRequestError: リトライ上限に達した場合
        """
        return self._request("GET", endpoint, None, retries)

    def put(self, endpoint: str, body: dict[str, Any], retries: int | None = None) -> dict[str, Any]:
        """PUTリクエストを送信する

        Raises:
            ApiRequestError: リトライ上限に達した場合
        """
        return self._request("PUT", endpoint, body, retries)

    def _request(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None,
        retries: int | None,
    ) -> dict[str, Any]:
        max_retries = self.retries if retries is None else retries
        track_code = body.get("trackCode") if isinstance(body, dict) else None
        url = f"{self.base_url}{endpoint}"

        if body is not None:
            self._mirror("request", endpoint, body, track_code)

        detail = ""
        for attempt in range(max_retries + 1):
            self.logger.debug(
                "API %s %s (attempt %d/%d)", method, endpoint, attempt + 1, max_retries + 1
            )
            try:
                return self._attempt(method, url, endpoint, body, track_code)
            except _AttemptFailed as e:
                detail = e.detail
                self.logger.warning(
                    "API request failed (attempt %d/%d): %s %s: %s",
                    attempt + 1,
                    max_retries + 1,
                    method,
                    endpoint,
                    detail,
                )

            if attempt < max_retries:
                time.sleep(backoff_delay(attempt, self.backoff_base, self.backoff_max))

        self.logger.error("API request to %s failed after %d attempts: %s", endpoint, max_retries + 1, detail)
        raise ApiRequestError(endpoint, max_retries + 1, detail)

    def _attempt(
        self,
        method: str,
        url: str,
        endpoint: str,
        body: dict[str, Any] | None,
        track_code: str | None,
    ) -> dict[str, Any]:
        try:
            response = self.session.request(method, url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise _AttemptFailed(str(e)) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        self._mirror(
            "response",
            endpoint,
            {"status": response.status_code, "data": payload},
            track_code,
        )

        if response.status_code >= 400:
            detail = error_detail(payload) if payload is not None else response.reason
            raise _AttemptFailed(f"HTTP {response.status_code}: {detail}")
        if not isinstance(payload, dict):
            raise _AttemptFailed("response body is not a JSON object")
        if not payload.get("success"):
            raise _AttemptFailed(error_detail(payload))
        return payload

    def _mirror(self, kind: str, endpoint: str, data: Any, track_code: str | None) -> None:
        """リクエスト/レスポンスをデバッグ用に保存する（失敗しても処理は続行）"""
        if self.debug_dir is None:
            return

        timestamp = datetime.now().isoformat().replace(":", "-").replace(".", "-")
        track_part = f"_{track_code}" if track_code else ""
        file_name = f"{kind}_{endpoint.replace('/', '_')}{track_part}_{timestamp}.json"
        path = self.debug_dir / file_name
        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except (OSError, TypeError) as e:
            self.logger.warning("Failed to save debug log %s: %s", path, e)
            return
        self.logger.debug("Debug log saved: %s", path)
