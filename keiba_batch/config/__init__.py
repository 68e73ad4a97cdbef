"""設定モジュール"""

from keiba_batch.config.field_specs import FIELD_SPECS, FieldSpec, get_field_spec
from keiba_batch.config.settings import Settings

__all__ = ["FIELD_SPECS", "FieldSpec", "Settings", "get_field_spec"]
