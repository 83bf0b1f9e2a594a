# src/rustc_ja_wrapper/presentation/cli/_shared_options.py
"""
CLI 共享参数定义库

使用 typing.Annotated 和 Typer 为包装器与工具命令中可复用的选项
提供单一事实来源，保证帮助文本与短名称一致。
"""
from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

# --- 翻译表相关选项 ---
TABLE_OPTION = Annotated[
    Optional[Path],
    typer.Option(
        "--table",
        "-t",
        help="额外的翻译表 (JSON)，其规则优先于内置规则。",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]

NO_BUILTIN_OPTION = Annotated[
    bool, typer.Option("--no-builtin", help="不加载内置翻译表。")
]

# --- 通用选项 ---
LOG_LEVEL_OPTION = Annotated[
    Optional[str],
    typer.Option(
        "--log-level",
        help="日志级别 (DEBUG/INFO/WARNING/ERROR)，默认取 RUSTC_JA_LOGGING__LEVEL。",
        case_sensitive=False,
    ),
]


def config_overrides(
    table: Optional[Path], no_builtin: bool, log_level: Optional[str]
) -> dict:
    """把命令行选项转换为 WrapperConfig 的嵌套覆盖值，只包含显式给出的项。"""
    overrides: dict = {}
    table_overrides: dict = {}
    if table is not None:
        table_overrides["extra_path"] = table
    if no_builtin:
        table_overrides["include_builtin"] = False
    if table_overrides:
        overrides["table"] = table_overrides
    if log_level:
        overrides["logging"] = {"level": log_level.upper()}
    return overrides
