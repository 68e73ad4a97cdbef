"""CLIオプションの解析"""

import logging
import re

import click

from keiba_batch.constants import TRACK_CODE_PATTERN, ApiType
from keiba_batch.utils.date_utils import to_iso_date

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRACK_CODE_RE = re.compile(TRACK_CODE_PATTERN)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """ログ出力を設定する（--verbose: DEBUG, --quiet: WARNING, 既定: INFO）"""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def parse_date_option(ctx, param, value: str | None) -> str | None:
    """YYYYMMDD / YYYY-MM-DD を YYYY-MM-DD に変換する"""
    if value is None:
        return None
    try:
        return to_iso_date(value)
    except ValueError:
        raise click.BadParameter(f"日付形式が不正です: {value}（YYYYMMDD または YYYY-MM-DD）")


def parse_track_codes(value: str | None) -> list[str]:
    """カンマ区切りの競馬場コードを検証してリストにする

    "1" のような1桁の指定は "01" に補完する。
    """
    if not value:
        return []
    codes = []
    for part in value.split(","):
        code = part.strip()
        if not code:
            continue
        if code.isdigit() and len(code) == 1:
            code = code.zfill(2)
        if not _TRACK_CODE_RE.match(code):
            raise click.BadParameter(f"競馬場コードが不正です: {part}（01-10）")
        if code not in codes:
            codes.append(code)
    return codes


def track_codes_option(ctx, param, value: str | None) -> list[str]:
    return parse_track_codes(value)


API_CHOICE = click.Choice([api.value for api in ApiType])
