# src/rustc_ja_wrapper/observability/logging_config.py
"""
包装器的日志系统：structlog ⇄ 标准 logging，console 格式由 Rich 渲染。

包装器的 stderr 同时承载编译器诊断，日志必须一眼能和诊断区分开，
也不能打乱诊断的版面：

- console：每条记录一行，以 `[rustc-ja-wrapper]` 前缀开头；
- json   ：一行一个 JSON 对象（ISO-8601 UTC 时间戳），便于 CI 收集；
- 默认级别 WARNING，正常编译时不输出任何日志；
- `log_file` 可把日志整体移出 stderr。
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, Optional

import structlog
from rich.console import Console
from rich.text import Text
from structlog.typing import Processor

if TYPE_CHECKING:
    from rustc_ja_wrapper.config import WrapperConfig

APP_LOGGER_NAME = "rustc_ja_wrapper"
DEFAULT_SERVICE = "rustc-ja-wrapper"

_LEVEL_STYLES = {
    "debug": "cyan",
    "info": "green",
    "warning": "yellow",
    "error": "bold red",
    "critical": "bold magenta",
}

# 由 ProcessorFormatter 注入、不应出现在输出中的字段
_INTERNAL_KEYS = ("_record", "_from_structlog", "timestamp", "logger")


def _one_line(value: str) -> str:
    return value.replace("\r", "\\r").replace("\n", "\\n")


class WrapperLineRenderer:
    """
    structlog 处理器：把一条记录渲染为一行带前缀的文本。

    `exception` 字段（format_exc_info 的结果）保留原有换行，附在该行之后。
    """

    def __init__(self, *, prefix: str = DEFAULT_SERVICE, colors: bool = True) -> None:
        self._prefix = prefix
        self._console = Console(
            stderr=True,
            color_system="auto" if colors else None,
            highlight=False,
            soft_wrap=True,
        )

    def __call__(
        self, logger: Any, name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event = _one_line(str(event_dict.pop("event", "")).strip())
        level = str(event_dict.pop("level", "info")).lower()
        exception = event_dict.pop("exception", None)
        event_dict.pop("service", None)
        for key in _INTERNAL_KEYS:
            event_dict.pop(key, None)

        line = Text()
        line.append(f"[{self._prefix}] ", style="dim")
        line.append(f"{level.upper():<8}", style=_LEVEL_STYLES.get(level, "dim"))
        line.append(" ")
        line.append(event)
        for key, value in sorted(event_dict.items()):
            line.append(f" {key}=", style="dim")
            line.append(_one_line(repr(value) if not isinstance(value, str) else value))

        with self._console.capture() as capture:
            self._console.print(line)
        rendered = capture.get().rstrip("\n")
        if exception:
            rendered = f"{rendered}\n{exception}"
        return rendered


def _build_handler(log_file: Optional[Path]) -> logging.Handler:
    if log_file is None:
        return logging.StreamHandler()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(log_file, encoding="utf-8")


def setup_logging(
    *,
    log_level: str = "WARNING",
    log_format: Literal["json", "console"] = "console",
    log_file: Optional[Path] = None,
    root_level: Optional[str] = None,
    service: str = DEFAULT_SERVICE,
) -> None:
    """
    配置全局日志。

    Args:
        log_level: `rustc_ja_wrapper` logger 的级别。
        log_format: 'console' 或 'json'。
        log_file: 日志文件；为 None 时写入 stderr。
        root_level: 根 logger（第三方库）的级别，默认 WARNING。
        service: console 前缀，同时作为 json 记录的 `service` 字段。
    """
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        timestamper,
    ]

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = WrapperLineRenderer(prefix=service, colors=log_file is None)

    handler = _build_handler(log_file)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((root_level or "WARNING").upper())

    logging.getLogger(APP_LOGGER_NAME).setLevel(log_level.upper())
    # asyncio 在子进程管道关闭时会输出噪声
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service)

    structlog.get_logger(f"{APP_LOGGER_NAME}.logging_config").debug(
        "日志系统已配置完成。",
        log_format=log_format,
        log_file=str(log_file) if log_file else None,
    )


def setup_logging_from_config(
    cfg: "WrapperConfig", *, service: str = DEFAULT_SERVICE
) -> None:
    """根据 WrapperConfig 初始化日志系统。"""
    setup_logging(
        log_level=cfg.logging.level,
        log_format=cfg.logging.format,
        log_file=cfg.logging.file,
        service=service,
    )
