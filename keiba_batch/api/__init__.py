"""バックエンドAPI通信"""

from keiba_batch.api.client import ApiClient
from keiba_batch.api.endpoints import SUBMIT_ENDPOINTS, SubmissionEndpoint
from keiba_batch.api.queue import JobQueueClient, order_jobs

__all__ = [
    "ApiClient",
    "JobQueueClient",
    "SUBMIT_ENDPOINTS",
    "SubmissionEndpoint",
    "order_jobs",
]
