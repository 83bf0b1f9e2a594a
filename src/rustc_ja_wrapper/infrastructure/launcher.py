# src/rustc_ja_wrapper/infrastructure/launcher.py
"""
进程启动器：解析真实编译器、构造子进程环境、创建子进程并转发信号。

调用约定与构建工具的 compiler-wrapper 变量（如 cargo 的 RUSTC_WRAPPER）一致：
`包装器路径 真实编译器路径 原始参数...`。
"""

from __future__ import annotations

import asyncio
import os
import shutil
import signal
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Optional

import structlog

from rustc_ja_wrapper.exceptions import (
    CompilerNotExecutableError,
    CompilerNotFoundError,
    LaunchError,
    UsageError,
)

logger = structlog.get_logger(__name__)

FORWARDED_SIGNALS = tuple(
    getattr(signal, name)
    for name in ("SIGINT", "SIGTERM", "SIGHUP")
    if hasattr(signal, name)
)


@dataclass(frozen=True)
class CompilerInvocation:
    """一次真实编译器调用所需的全部信息。"""

    program: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)


def resolve_compiler(command: str, env: Mapping[str, str]) -> str:
    """
    解析编译器的可执行文件路径。

    含路径分隔符的命令按路径检查，否则在子进程环境的 PATH 中查找。

    Raises:
        CompilerNotFoundError: 找不到可执行文件。
        CompilerNotExecutableError: 文件存在但不可执行。
    """
    separators = [os.sep] + ([os.altsep] if os.altsep else [])
    if any(sep in command for sep in separators):
        if not os.path.exists(command):
            raise CompilerNotFoundError(f"找不到真实编译器: {command}")
        if os.path.isdir(command) or not os.access(command, os.X_OK):
            raise CompilerNotExecutableError(f"真实编译器不可执行: {command}")
        return command

    resolved = shutil.which(command, path=env.get("PATH"))
    if resolved is None:
        raise CompilerNotFoundError(f"在 PATH 中找不到真实编译器: {command}")
    return resolved


def build_child_env(
    environ: Mapping[str, str], marker_variables: list[str]
) -> dict[str, str]:
    """复制当前环境，并移除包装器注入标记，防止子进程递归调用包装器。"""
    markers = set(marker_variables)
    env = {key: value for key, value in environ.items() if key not in markers}
    stripped = sorted(markers & set(environ))
    if stripped:
        logger.debug("已清除包装器注入变量", variables=stripped)
    return env


def build_invocation(
    argv: list[str],
    *,
    fallback_compiler: Optional[str],
    marker_variables: list[str],
    environ: Optional[Mapping[str, str]] = None,
) -> CompilerInvocation:
    """
    从包装器收到的参数构造编译器调用。

    `argv[0]` 是真实编译器，其余参数原样转发；没有参数时使用 `fallback_compiler`。
    """
    environ = os.environ if environ is None else environ
    if argv:
        command, args = argv[0], list(argv[1:])
    elif fallback_compiler:
        command, args = fallback_compiler, []
    else:
        raise UsageError(
            "缺少真实编译器。用法: rustc-ja-wrapper <compiler> [args...]，"
            "或设置 RUSTC / RUSTC_JA_COMPILER。"
        )

    env = build_child_env(environ, marker_variables)
    program = resolve_compiler(command, env)
    return CompilerInvocation(program=program, args=args, env=env)


async def spawn(
    invocation: CompilerInvocation, *, limit: int = 64 * 1024
) -> asyncio.subprocess.Process:
    """
    启动子进程。stdin 继承自包装器，stdout/stderr 通过管道交给流中继。

    Raises:
        LaunchError: 系统拒绝创建进程。
    """
    try:
        process = await asyncio.create_subprocess_exec(
            invocation.program,
            *invocation.args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=invocation.env,
            limit=limit,
        )
    except FileNotFoundError as e:
        raise CompilerNotFoundError(f"找不到真实编译器: {invocation.program} ({e})") from e
    except PermissionError as e:
        raise CompilerNotExecutableError(
            f"无权执行真实编译器: {invocation.program} ({e})"
        ) from e
    except OSError as e:
        raise LaunchError(f"无法启动真实编译器: {invocation.program} ({e})") from e

    logger.debug(
        "编译器子进程已启动",
        pid=process.pid,
        program=invocation.program,
        argc=len(invocation.args),
    )
    return process


def _send_signal(process: asyncio.subprocess.Process, signum: int) -> None:
    if process.returncode is not None:
        return
    try:
        process.send_signal(signum)
    except ProcessLookupError:
        # 子进程刚好已经退出
        return
    logger.info("已向编译器转发信号", pid=process.pid, signal=signum)


@contextmanager
def forward_signals(process: asyncio.subprocess.Process) -> Iterator[None]:
    """
    在上下文期间，把包装器收到的终止类信号转发给子进程，避免留下孤儿进程。
    平台不支持事件循环信号处理器时（如 Windows）不做任何事。
    """
    loop = asyncio.get_running_loop()
    installed = []
    for signum in FORWARDED_SIGNALS:
        try:
            loop.add_signal_handler(signum, _send_signal, process, signum)
        except (NotImplementedError, RuntimeError, ValueError):
            continue
        installed.append(signum)
    try:
        yield
    finally:
        for signum in installed:
            loop.remove_signal_handler(signum)


def exit_code_for(returncode: int) -> int:
    """子进程退出码原样返回；被信号 N 终止时（returncode 为 -N）返回 128 + N。"""
    if returncode < 0:
        return 128 + (-returncode)
    return returncode
