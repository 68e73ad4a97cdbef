"""ジョブキュー処理コマンド"""

import click


@click.command()
@click.option("--dry-run", is_flag=True, default=False, help="送信せずに内容を表示")
@click.option("--store", "store_backend", type=click.Choice(["file", "sqlite"]), default=None, help="中間ストア")
@click.pass_obj
def dispatch(obj, dry_run: bool, store_backend: str | None):
    """キューを1回ポーリングし、取得したジョブをすべて処理する"""
    dispatcher = obj.dispatcher(store_backend, dry_run=dry_run)
    summary = dispatcher.run_once()

    click.echo(
        f"完了: {len(summary.completed)}  失敗: {len(summary.failed)}  スキップ: {len(summary.skipped)}"
    )
    for job in summary.failed:
        click.echo(f"  失敗: {job.id} ({job.type.value}) {job.outcome.message}")
