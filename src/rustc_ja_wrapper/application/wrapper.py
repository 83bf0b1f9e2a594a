# src/rustc_ja_wrapper/application/wrapper.py
"""
包装器的主流程：启动编译器 → 中继输出 → 等待退出 → 返回相同的退出码。
"""

from __future__ import annotations

import asyncio
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, NamedTuple, Optional

import structlog

from rustc_ja_wrapper.application.relay import RelayStats, relay
from rustc_ja_wrapper.config import WrapperConfig
from rustc_ja_wrapper.domain.json_diagnostics import wants_json_diagnostics
from rustc_ja_wrapper.domain.table import TranslationTable
from rustc_ja_wrapper.exceptions import ConfigurationError
from rustc_ja_wrapper.infrastructure.launcher import (
    CompilerInvocation,
    exit_code_for,
    forward_signals,
    spawn,
)

logger = structlog.get_logger(__name__)


class WrapperResult(NamedTuple):
    exit_code: int
    stats: RelayStats


def _open_tee(path: Optional[Path]) -> Optional[BinaryIO]:
    """以追加模式打开原始 stderr 的调试日志。"""
    if path is None:
        return None
    try:
        return path.open("ab")
    except OSError as e:
        raise ConfigurationError(f"无法打开调试日志 {path}: {e.strerror or e}") from e


async def run_compiler(
    invocation: CompilerInvocation,
    table: TranslationTable,
    config: WrapperConfig,
    *,
    stdout: BinaryIO,
    stderr: BinaryIO,
) -> WrapperResult:
    """
    运行一次真实编译器并中继其输出。

    调试日志在启动子进程之前打开。

    Raises:
        ConfigurationError: 调试日志无法打开。
        LaunchError: 子进程无法启动（此时没有可以透传的退出码）。
    """
    json_mode = wants_json_diagnostics(invocation.args)

    with ExitStack() as stack:
        tee = _open_tee(config.relay.debug_log_path)
        if tee is not None:
            stack.enter_context(tee)

        process = await spawn(invocation, limit=config.relay.stream_limit)
        try:
            stack.enter_context(forward_signals(process))
            stats = await relay(
                process.stdout,
                process.stderr,
                stdout,
                stderr,
                table,
                json_mode=json_mode,
                chunk_size=config.relay.chunk_size,
                tee=tee,
            )
            returncode = await process.wait()
        except BaseException:
            if process.returncode is None:
                logger.warning("中继异常终止，正在结束编译器子进程", pid=process.pid)
                process.kill()
                await process.wait()
            raise

    exit_code = exit_code_for(returncode)
    logger.debug(
        "编译器已退出",
        returncode=returncode,
        exit_code=exit_code,
        json_mode=json_mode,
        translated=stats.translated,
        untranslated=stats.untranslated,
    )
    return WrapperResult(exit_code, stats)


def run(
    invocation: CompilerInvocation,
    table: TranslationTable,
    config: WrapperConfig,
    *,
    stdout: BinaryIO,
    stderr: BinaryIO,
) -> WrapperResult:
    """同步入口，供命令行使用。"""
    return asyncio.run(
        run_compiler(invocation, table, config, stdout=stdout, stderr=stderr)
    )
