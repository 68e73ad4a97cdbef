"""データモデル"""

from keiba_batch.models.base import Base
from keiba_batch.models.intermediate import (
    IntermediateFile,
    IntermediateFileInfo,
    IntermediateFileMetadata,
    ValidationResult,
)
from keiba_batch.models.job import (
    JOB_API_TYPES,
    BatchJob,
    JobFailure,
    JobOutcome,
    JobParameters,
    JobStatus,
    JobSuccess,
    JobType,
)
from keiba_batch.models.stage_record import StageRecord

__all__ = [
    "Base",
    "BatchJob",
    "IntermediateFile",
    "IntermediateFileInfo",
    "IntermediateFileMetadata",
    "JOB_API_TYPES",
    "JobFailure",
    "JobOutcome",
    "JobParameters",
    "JobStatus",
    "JobSuccess",
    "JobType",
    "StageRecord",
    "ValidationResult",
]
