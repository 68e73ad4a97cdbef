"""パイプライン共通の例外定義"""


class KeibaBatchError(Exception):
    """keiba_batch の全例外の基底クラス"""


class ApiError(KeibaBatchError):
    """外部API通信に関するエラー"""


class ApiRequestError(ApiError):
    """リトライ上限に達したAPIリクエストエラー

    Attributes:
        endpoint: リクエスト先エンドポイント
        attempts: 実行した試行回数
        detail: 最後にサーバーが返したエラー詳細（なければ例外メッセージ）
    """

    def __init__(self, endpoint: str, attempts: int, detail: str):
        self.endpoint = endpoint
        self.attempts = attempts
        self.detail = detail
        super().__init__(
            f"API request to {endpoint} failed after {attempts} attempts: {detail}"
        )


class StoreError(KeibaBatchError):
    """中間ファイルストアのエラー"""


class IntermediateFileNotFoundError(StoreError):
    """指定された中間ファイルが存在しない"""


class SentRecordImmutableError(StoreError):
    """送信済み（sent）の中間ファイルを変更しようとした"""


class JobError(KeibaBatchError):
    """バッチジョブ処理のエラー"""


class UnsupportedJobTypeError(JobError):
    """未対応のジョブタイプ"""


class StageFailedError(JobError):
    """段階実行で失敗したキーがある

    Attributes:
        failed: 失敗した中間ファイル参照のリスト
    """

    def __init__(self, message: str, failed: list[str] | None = None):
        self.failed = list(failed or [])
        super().__init__(message)


class ScraperNotConfiguredError(KeibaBatchError):
    """APIに対応するスクレイパーが登録されていない"""
