"""Validators for intermediate file payloads.

Every validator is a pure function of its input: the same data always yields
the same ValidationResult, and nothing is logged or written.
"""

from typing import Any, Callable

from keiba_batch.constants import ApiType
from keiba_batch.models.intermediate import IntermediateFile, ValidationResult
from keiba_batch.validators.ai_index import validate_ai_index
from keiba_batch.validators.index_images import validate_index_images
from keiba_batch.validators.intermediate import validate_intermediate_file
from keiba_batch.validators.predictions import validate_predictions
from keiba_batch.validators.race_info import validate_race_info
from keiba_batch.validators.race_results import validate_race_results

Validator = Callable[[Any], ValidationResult]

VALIDATORS: dict[ApiType, Validator] = {
    ApiType.RACE_INFO: validate_race_info,
    ApiType.PREDICTIONS: validate_predictions,
    ApiType.AI_INDEX: validate_ai_index,
    ApiType.INDEX_IMAGES: validate_index_images,
    ApiType.RACE_RESULTS: validate_race_results,
}


def validate(api: ApiType, data: Any) -> ValidationResult:
    """API種別に応じて送信データを検証する"""
    return VALIDATORS[api](data)


def validate_file(intermediate_file: IntermediateFile) -> ValidationResult:
    """メタデータ検証とデータ検証を順に行い、結果を結合する"""
    metadata_result = validate_intermediate_file(intermediate_file)
    api = intermediate_file.metadata.api
    return metadata_result.merge(validate(api, intermediate_file.data))


__all__ = [
    "VALIDATORS",
    "Validator",
    "validate",
    "validate_file",
    "validate_intermediate_file",
]
