"""Click CLIメインモジュール"""

import click
from dotenv import load_dotenv

from keiba_batch.cli.context import CliContext
from keiba_batch.cli.utils.options import configure_logging
from keiba_batch.config.settings import Settings


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="詳細ログを出力")
@click.option("--quiet", "-q", is_flag=True, default=False, help="警告以上のみ出力")
@click.pass_context
def main(ctx, verbose: bool, quiet: bool):
    """競馬データのバッチ取り込みCLI"""
    if ctx.obj is not None:
        return

    load_dotenv()
    configure_logging(verbose=verbose, quiet=quiet)
    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise click.ClickException(str(e))
    ctx.obj = CliContext(settings=settings, verbose=verbose, quiet=quiet)


# コマンドの登録
from keiba_batch.cli.commands.dispatch import dispatch
from keiba_batch.cli.commands.files import files
from keiba_batch.cli.commands.run import run

main.add_command(run)
main.add_command(dispatch)
main.add_command(files)


__all__ = ["main"]
