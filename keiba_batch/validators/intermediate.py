"""中間ファイル自体（メタデータ）の検証"""

from keiba_batch.constants import INTERMEDIATE_FORMAT_VERSION, ApiType
from keiba_batch.models.intermediate import IntermediateFile, ValidationResult
from keiba_batch.validators.common import check_date, check_track_code


def validate_intermediate_file(
    intermediate_file: IntermediateFile,
    expected_api: ApiType | None = None,
) -> ValidationResult:
    """メタデータの整合性を検証する

    dataCount と実データ件数の不一致はエラー、バージョン違いと空データは警告。
    """
    result = ValidationResult()
    metadata = intermediate_file.metadata

    if expected_api is not None and metadata.api != expected_api:
        result.add_error(
            f"メタデータ: apiが一致しません (期待: {expected_api.value}, 実際: {metadata.api.value})"
        )

    check_date(metadata.date, "メタデータ", result)
    check_track_code(metadata.track_code, "メタデータ", result)

    if not metadata.created_at:
        result.add_error("メタデータ: createdAtが必須です")

    if not isinstance(intermediate_file.data, list):
        result.add_error("データが配列ではありません")
        return result

    if metadata.data_count != len(intermediate_file.data):
        result.add_error(
            f"メタデータ: dataCountが一致しません "
            f"(メタデータ: {metadata.data_count}, 実際: {len(intermediate_file.data)})"
        )

    for i, item in enumerate(intermediate_file.data):
        if not isinstance(item, dict):
            continue
        if item.get("date") != metadata.date or item.get("trackCode") != metadata.track_code:
            result.add_error(f"データ[{i}]: date/trackCodeがメタデータと一致しません")

    if metadata.version != INTERMEDIATE_FORMAT_VERSION:
        result.add_warning(
            f"メタデータ: バージョンが異なります "
            f"(期待: {INTERMEDIATE_FORMAT_VERSION}, 実際: {metadata.version})"
        )

    if not intermediate_file.data:
        result.add_warning("データが空です")

    return result
