# src/rustc_ja_wrapper/presentation/cli/tools.py
"""
配套工具命令 `rustc-ja`：

- `table check`：加载并校验翻译表（占位符一致性 + 自匹配检查）；
- `table show` ：以表格形式列出规则（按实际生效顺序）；
- `filter`     ：从 stdin 读取已捕获的构建输出，翻译后写到 stdout。
"""
from __future__ import annotations

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from rustc_ja_wrapper import __version__
from rustc_ja_wrapper.application.relay import LineTranslator
from rustc_ja_wrapper.bootstrap import create_app_config, create_table
from rustc_ja_wrapper.domain.matcher import find_self_matches
from rustc_ja_wrapper.exceptions import WrapperError
from rustc_ja_wrapper.observability.logging_config import setup_logging_from_config

from ._shared_options import (
    LOG_LEVEL_OPTION,
    NO_BUILTIN_OPTION,
    TABLE_OPTION,
    config_overrides,
)

app = typer.Typer(
    name="rustc-ja",
    help="🦀 rustc-ja-wrapper 的翻译表工具。",
    add_completion=False,
    no_args_is_help=True,
)
table_app = typer.Typer(help="翻译表的检查与查看。", no_args_is_help=True)
app.add_typer(table_app, name="table")

console = Console()
err_console = Console(stderr=True)


def _load(table, no_builtin, log_level):
    try:
        config = create_app_config(**config_overrides(table, no_builtin, log_level))
        setup_logging_from_config(config, service="rustc-ja")
        return create_table(config)
    except WrapperError as e:
        err_console.print(f"[bold red]❌ {escape(str(e))}[/bold red]", highlight=False)
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", help="显示版本并退出。", is_eager=True
    ),
) -> None:
    if version:
        console.print(f"rustc-ja-wrapper version: {__version__}")
        raise typer.Exit()


@table_app.command("check")
def check_table(
    table: TABLE_OPTION = None,
    no_builtin: NO_BUILTIN_OPTION = False,
    log_level: LOG_LEVEL_OPTION = None,
) -> None:
    """加载翻译表并检查是否存在会匹配自身译文的规则。"""
    translation_table = _load(table, no_builtin, log_level)
    offenders = find_self_matches(translation_table)
    if offenders:
        report = Table(title="会匹配自身译文的规则", show_lines=False)
        report.add_column("pattern", style="yellow", overflow="fold")
        report.add_column("replacement", overflow="fold")
        for rule in offenders:
            report.add_row(Text(rule.pattern), Text(rule.replacement))
        console.print(report)
        console.print(f"[bold red]❌ 发现 {len(offenders)} 条自匹配规则。[/bold red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✅ 翻译表有效，共 {len(translation_table)} 条规则。[/green]")


@table_app.command("show")
def show_table(
    table: TABLE_OPTION = None,
    no_builtin: NO_BUILTIN_OPTION = False,
    grep: Optional[str] = typer.Option(
        None, "--grep", "-g", help="只显示 pattern 中包含该文本的规则。"
    ),
) -> None:
    """按生效顺序列出翻译规则。"""
    translation_table = _load(table, no_builtin, None)
    listing = Table(show_header=True, header_style="bold")
    listing.add_column("#", justify="right", style="dim")
    listing.add_column("pattern", overflow="fold")
    listing.add_column("replacement", overflow="fold")
    shown = 0
    for index, rule in enumerate(translation_table):
        if grep and grep not in rule.pattern:
            continue
        listing.add_row(str(index), Text(rule.pattern), Text(rule.replacement))
        shown += 1
    console.print(listing)
    console.print(f"[dim]{shown} / {len(translation_table)} 条规则[/dim]")


@app.command("filter")
def filter_stream(
    table: TABLE_OPTION = None,
    no_builtin: NO_BUILTIN_OPTION = False,
    json_mode: bool = typer.Option(
        False, "--json", help="输入为 --error-format=json 的诊断行。"
    ),
    log_level: LOG_LEVEL_OPTION = None,
) -> None:
    """翻译 stdin 中的诊断文本并写到 stdout，例如 `cargo build 2>&1 | rustc-ja filter`。"""
    translation_table = _load(table, no_builtin, log_level)
    translator = LineTranslator(translation_table, json_mode=json_mode)
    out = sys.stdout.buffer
    for raw in sys.stdin.buffer:
        out.write(translator(raw))
        out.flush()
