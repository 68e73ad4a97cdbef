"""段階実行コマンド"""

import click

from keiba_batch.constants import ApiType, StageType
from keiba_batch.cli.utils.options import API_CHOICE, parse_date_option, track_codes_option


@click.command()
@click.option("--api", "api_name", required=True, type=API_CHOICE, help="API種別")
@click.option("--date", required=True, callback=parse_date_option, help="対象日（YYYYMMDD または YYYY-MM-DD）")
@click.option("--tracks", callback=track_codes_option, help="競馬場コード（カンマ区切り、例: 01,02）")
@click.option(
    "--stage",
    type=click.Choice([stage.value for stage in StageType]),
    default=StageType.ALL.value,
    show_default=True,
    help="実行段階",
)
@click.option("--file", "file_ref", default=None, help="validate / send の対象中間ファイル")
@click.option("--dry-run", is_flag=True, default=False, help="送信せずに内容を表示")
@click.option("--store", "store_backend", type=click.Choice(["file", "sqlite"]), default=None, help="中間ストア")
@click.pass_obj
def run(obj, api_name: str, date: str, tracks: list[str], stage: str, file_ref: str | None, dry_run: bool, store_backend: str | None):
    """指定した段階（scrape / validate / send / all）を実行する"""
    api = ApiType(api_name)
    stage_type = StageType(stage)

    if stage_type in (StageType.SCRAPE, StageType.ALL) and not tracks and not file_ref:
        raise click.UsageError("scrape / all では --tracks を指定してください")

    controller = obj.controller(store_backend, dry_run=dry_run)
    report = controller.run_stage(api, date, tracks, stage_type, file_ref=file_ref)

    click.echo(f"{api.value} {report.date} stage={stage_type.value}")
    click.echo(
        f"  作成: {len(report.created)}  検証OK: {len(report.validated)}  "
        f"送信: {len(report.sent)}  失敗: {len(report.failed)}"
    )
    for ref in report.failed:
        click.echo(f"  失敗: {ref}")

    if not report.success:
        raise SystemExit(1)
