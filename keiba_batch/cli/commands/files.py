"""中間ファイル操作コマンド"""

import json

import click

from keiba_batch.cli.utils.options import API_CHOICE, parse_date_option
from keiba_batch.constants import ApiType, FileStatus, get_track_name
from keiba_batch.exceptions import StoreError

STORE_CHOICE = click.Choice(["file", "sqlite"])


@click.group()
def files():
    """中間ファイルの一覧・表示・クリーンアップ"""
    pass


@files.command("list")
@click.option("--api", "api_name", required=True, type=API_CHOICE, help="API種別")
@click.option("--date", required=True, callback=parse_date_option, help="対象日")
@click.option("--track", default=None, help="競馬場コード")
@click.option("--status", type=click.Choice([status.value for status in FileStatus]), default=None, help="ステータス")
@click.option("--store", "store_backend", type=STORE_CHOICE, default=None, help="中間ストア")
@click.pass_obj
def list_files(obj, api_name: str, date: str, track: str | None, status: str | None, store_backend: str | None):
    """条件に合う中間ファイルを作成順に表示する"""
    store = obj.store(store_backend)
    infos = store.find(
        ApiType(api_name),
        date,
        track_code=track,
        status=FileStatus(status) if status else None,
    )
    if not infos:
        click.echo("中間ファイルがありません")
        return

    for info in infos:
        metadata = info.metadata
        click.echo(
            f"{metadata.created_at}  {metadata.track_code}({get_track_name(metadata.track_code)})  "
            f"{metadata.status.value:<9}  {metadata.data_count}件  {info.ref}"
        )


@files.command("show")
@click.argument("ref")
@click.option("--store", "store_backend", type=STORE_CHOICE, default=None, help="中間ストア")
@click.pass_obj
def show_file(obj, ref: str, store_backend: str | None):
    """中間ファイルの内容をJSONで表示する"""
    try:
        intermediate_file = obj.store(store_backend).load(ref)
    except StoreError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(intermediate_file.to_dict(), ensure_ascii=False, indent=2))


@files.command("cleanup")
@click.option("--days", default=7, show_default=True, type=click.IntRange(min=0), help="保持日数")
@click.option("--store", "store_backend", type=STORE_CHOICE, default=None, help="中間ストア")
@click.pass_obj
def cleanup_files(obj, days: int, store_backend: str | None):
    """保持日数を過ぎた中間ファイルを削除する"""
    removed = obj.store(store_backend).cleanup_old_files(days_to_keep=days)
    click.echo(f"{removed}件の中間ファイルを削除しました")
