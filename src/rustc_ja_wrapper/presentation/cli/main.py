# src/rustc_ja_wrapper/presentation/cli/main.py
"""
包装器命令：`rustc-ja-wrapper [OPTIONS] COMPILER [ARGS...]`

从第一个位置参数开始的所有内容都原样转发给真实编译器，
因此 `rustc-ja-wrapper rustc --version` 中的 `--version` 属于 rustc。
"""
from __future__ import annotations

import sys
from typing import List, Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from rustc_ja_wrapper import __version__
from rustc_ja_wrapper.application.relay import RelayStats
from rustc_ja_wrapper.application.wrapper import run as run_wrapper
from rustc_ja_wrapper.bootstrap import bootstrap
from rustc_ja_wrapper.exceptions import WrapperError
from rustc_ja_wrapper.infrastructure.launcher import build_invocation

from ._shared_options import (
    LOG_LEVEL_OPTION,
    NO_BUILTIN_OPTION,
    TABLE_OPTION,
    config_overrides,
)

app = typer.Typer(
    name="rustc-ja-wrapper",
    help="把 rustc 的英文诊断信息翻译为日文的编译器包装器。",
    add_completion=False,
)

err_console = Console(stderr=True)
logger = structlog.get_logger("rustc_ja_wrapper.cli")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"rustc-ja-wrapper version: {__version__}")
        raise typer.Exit()


def _print_coverage(stats: RelayStats) -> None:
    err_console.print(
        f"[dim]rustc-ja-wrapper: 已翻译 {stats.translated} 行，"
        f"未翻译 {stats.untranslated} 行，原样透传 {stats.passthrough} 段。[/dim]"
    )


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
    }
)
def main(
    command: Optional[List[str]] = typer.Argument(
        None,
        help="真实编译器及其参数（可省略，此时使用 RUSTC / RUSTC_JA_COMPILER）。",
        show_default=False,
    ),
    table: TABLE_OPTION = None,
    no_builtin: NO_BUILTIN_OPTION = False,
    log_level: LOG_LEVEL_OPTION = None,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="显示包装器版本并退出。",
    ),
) -> None:
    """
    运行真实编译器，透传 stdout，翻译 stderr，并以编译器的退出码退出。
    """
    try:
        config, translation_table = bootstrap(
            **config_overrides(table, no_builtin, log_level)
        )
        invocation = build_invocation(
            list(command or []),
            fallback_compiler=config.compiler,
            marker_variables=config.marker_variables,
        )
        result = run_wrapper(
            invocation,
            translation_table,
            config,
            stdout=sys.stdout.buffer,
            stderr=sys.stderr.buffer,
        )
    except WrapperError as e:
        logger.debug("包装器自身出错", error_type=type(e).__name__, exit_code=e.exit_code)
        err_console.print(f"[bold red]rustc-ja-wrapper: {escape(str(e))}[/bold red]", highlight=False)
        raise typer.Exit(code=e.exit_code) from e

    if config.relay.coverage_report:
        _print_coverage(result.stats)
    raise typer.Exit(code=result.exit_code)


def run() -> None:
    """控制台脚本入口。"""
    app()
