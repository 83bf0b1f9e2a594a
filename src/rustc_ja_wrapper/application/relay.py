# src/rustc_ja_wrapper/application/relay.py
"""
流中继：把编译器子进程的输出接到包装器自身的输出上。

- stdout：按块原样透传，不做任何切分或改写；
- stderr：按行读取，逐行翻译后立即写出，保持行内顺序与原始换行风格；
- 两个方向各由一个任务并发排空，不等待子进程结束即可看到输出；
- 单行长度受 StreamReader 的 limit 约束，超长的行按原样分段透传，不会无限缓冲。
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

import structlog

from rustc_ja_wrapper.domain.json_diagnostics import translate_json_line
from rustc_ja_wrapper.domain.matcher import MatchResult, translate
from rustc_ja_wrapper.domain.table import TranslationTable

logger = structlog.get_logger(__name__)

CRLF = b"\r\n"
LF = b"\n"


@dataclass
class RelayStats:
    """一次运行中 stderr 行的翻译统计。"""

    translated: int = 0
    untranslated: int = 0
    passthrough: int = 0
    """未参与匹配而原样透传的片段（非 UTF-8 或超长行）"""

    @property
    def total(self) -> int:
        return self.translated + self.untranslated + self.passthrough


def split_terminator(raw: bytes) -> tuple[bytes, bytes]:
    """把一行拆为正文与行尾（`\\r\\n`、`\\n` 或空）。"""
    if raw.endswith(CRLF):
        return raw[:-2], CRLF
    if raw.endswith(LF):
        return raw[:-1], LF
    return raw, b""


class LineTranslator:
    """
    stderr 的逐行翻译器。

    翻译表只读；统计信息只由 stderr 任务写入，因此无需加锁。
    """

    def __init__(self, table: TranslationTable, *, json_mode: bool = False):
        self.table = table
        self.json_mode = json_mode
        self.stats = RelayStats()
        self._translate: Callable[[str, TranslationTable], MatchResult] = (
            translate_json_line if json_mode else translate
        )

    def __call__(self, raw: bytes) -> bytes:
        body, terminator = split_terminator(raw)
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            self.stats.passthrough += 1
            return raw

        result = self._translate(text, self.table)
        if not result.matched:
            self.stats.untranslated += 1
            if text.strip():
                logger.debug("未翻译的诊断行", line=text)
            return raw

        self.stats.translated += 1
        return result.text.encode("utf-8") + terminator

    def passthrough(self, raw: bytes) -> bytes:
        self.stats.passthrough += 1
        return raw


class OutputSink:
    """
    包装器自身的输出流。每次写入后立即 flush；
    下游管道断开时记录一次警告，之后的数据被丢弃，但读取端仍会继续排空子进程。
    """

    def __init__(self, stream: BinaryIO, name: str):
        self._stream = stream
        self._name = name
        self.broken = False

    def write(self, data: bytes) -> None:
        if self.broken or not data:
            return
        try:
            self._stream.write(data)
            self._stream.flush()
        except (BrokenPipeError, ConnectionResetError) as e:
            self.broken = True
            logger.warning("输出管道已断开，后续内容将被丢弃", stream=self._name, error=str(e))


async def _read_line(reader: asyncio.StreamReader) -> tuple[bytes, bool]:
    """
    读取一行。

    Returns:
        (数据, 是否为完整的行)。超出 limit 的行返回已缓冲的片段并标记为不完整；
        EOF 时返回空字节串。
    """
    try:
        return await reader.readuntil(LF), True
    except asyncio.IncompleteReadError as e:
        # EOF 前最后一行没有换行符
        return e.partial, True
    except asyncio.LimitOverrunError as e:
        return await reader.read(e.consumed), False


async def pump_stdout(
    reader: asyncio.StreamReader, sink: OutputSink, *, chunk_size: int = 8192
) -> None:
    """原样透传 stdout。"""
    while True:
        chunk = await reader.read(chunk_size)
        if not chunk:
            break
        sink.write(chunk)


async def pump_stderr(
    reader: asyncio.StreamReader,
    sink: OutputSink,
    translator: LineTranslator,
    *,
    tee: Optional[BinaryIO] = None,
) -> None:
    """逐行翻译 stderr。超长行的所有片段（包括其结尾片段）都原样透传。"""
    inside_oversized_line = False
    while True:
        data, complete = await _read_line(reader)
        if not data:
            break
        if tee is not None:
            tee.write(data)
            tee.flush()

        if not complete:
            if not inside_oversized_line:
                logger.info("诊断行超过缓冲上限，按原样透传", limit_hit_bytes=len(data))
            inside_oversized_line = True
            sink.write(translator.passthrough(data))
            continue
        if inside_oversized_line:
            inside_oversized_line = False
            sink.write(translator.passthrough(data))
            continue

        sink.write(translator(data))


async def relay(
    child_stdout: asyncio.StreamReader,
    child_stderr: asyncio.StreamReader,
    out_stdout: BinaryIO,
    out_stderr: BinaryIO,
    table: TranslationTable,
    *,
    json_mode: bool = False,
    chunk_size: int = 8192,
    tee: Optional[BinaryIO] = None,
) -> RelayStats:
    """
    并发排空子进程的 stdout 与 stderr，直到两者都到达 EOF。

    Returns:
        stderr 的翻译统计。
    """
    translator = LineTranslator(table, json_mode=json_mode)
    await asyncio.gather(
        pump_stdout(child_stdout, OutputSink(out_stdout, "stdout"), chunk_size=chunk_size),
        pump_stderr(child_stderr, OutputSink(out_stderr, "stderr"), translator, tee=tee),
    )
    return translator.stats
