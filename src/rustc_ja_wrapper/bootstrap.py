# src/rustc_ja_wrapper/bootstrap.py
"""
应用引导：加载配置、初始化日志、构造翻译表。

包装器每次编译调用都会被执行一次，所以这里只做确定性的、一次性的初始化，
没有需要在退出时清理的资源。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
from dotenv import load_dotenv
from pydantic import ValidationError

from rustc_ja_wrapper.config import WrapperConfig
from rustc_ja_wrapper.domain import table as table_module
from rustc_ja_wrapper.domain.table import TranslationTable
from rustc_ja_wrapper.exceptions import ConfigurationError
from rustc_ja_wrapper.observability.logging_config import setup_logging_from_config

logger = structlog.get_logger("rustc_ja_wrapper.bootstrap")


def _load_dotenv_file(cwd: Path | None = None) -> Path | None:
    """加载工作目录下的 .env（不覆盖已存在的环境变量）。"""
    env_path = (cwd or Path.cwd()) / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(env_path, override=False)
    return env_path


def create_app_config(**overrides: Any) -> WrapperConfig:
    """
    加载、验证并返回应用配置对象。

    `overrides` 用于命令行选项，优先级高于环境变量。
    """
    _load_dotenv_file()
    try:
        config = WrapperConfig(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"配置无效:\n{e}") from e
    return config


def create_table(config: WrapperConfig) -> TranslationTable:
    """按配置构造本次运行的翻译表。"""
    return table_module.load(
        extra_path=config.table.extra_path,
        include_builtin=config.table.include_builtin,
        sort_longest_first=config.table.sort_longest_first,
    )


def bootstrap(**overrides: Any) -> tuple[WrapperConfig, TranslationTable]:
    """一步完成配置加载、日志初始化与翻译表构造。"""
    config = create_app_config(**overrides)
    setup_logging_from_config(config, service="rustc-ja-wrapper")
    table = create_table(config)
    logger.debug(
        "引导完成",
        rules=len(table),
        extra_table=str(config.table.extra_path) if config.table.extra_path else None,
    )
    return config, table
