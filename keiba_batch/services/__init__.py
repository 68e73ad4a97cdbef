"""パイプラインのサービス層"""

from keiba_batch.services.dispatcher import DispatchSummary, JobDispatcher
from keiba_batch.services.job_handlers import StageJobHandler, build_job_handlers
from keiba_batch.services.stage_controller import StageController, StageRunReport

__all__ = [
    "DispatchSummary",
    "JobDispatcher",
    "StageController",
    "StageJobHandler",
    "StageRunReport",
    "build_job_handlers",
]
