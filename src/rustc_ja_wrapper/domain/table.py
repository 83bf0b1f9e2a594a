# src/rustc_ja_wrapper/domain/table.py
"""
翻译表：有序、只读的规则集合。

- 表在进程启动时构造一次，之后只读，可以在 stdout/stderr 两个任务之间无锁共享；
- 顺序即优先级：靠前的规则先匹配；
- 允许重复的 pattern，按「先列出者胜出」处理，这是明确的决胜策略而不是偶然行为。
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from importlib import resources
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from rustc_ja_wrapper.domain.matcher import compile_pattern
from rustc_ja_wrapper.domain.rules import Rule
from rustc_ja_wrapper.exceptions import RuleDefinitionError, TableLoadError

logger = structlog.get_logger(__name__)

BUILTIN_TABLE_RESOURCE = "translate.json"


class TableEntry(BaseModel):
    """翻译表 JSON 文件中的一条记录（`en` 为英文 pattern，`ja` 为译文）。"""

    model_config = ConfigDict(extra="forbid")

    en: str
    ja: str


_ENTRIES = TypeAdapter(list[TableEntry])


class TranslationTable:
    """有序的规则序列，同时持有每条规则预编译好的正则。"""

    def __init__(self, rules: Iterable[Rule]):
        self._rules: tuple[Rule, ...] = tuple(rules)
        self._patterns: tuple[re.Pattern[str], ...] = tuple(
            compile_pattern(rule) for rule in self._rules
        )

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def patterns(self) -> tuple[re.Pattern[str], ...]:
        return self._patterns

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"TranslationTable({len(self._rules)} rules)"

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "TranslationTable":
        """从 (pattern, replacement) 二元组构造，主要供测试和嵌入方使用。"""
        return cls(Rule(pattern=p, replacement=r) for p, r in pairs)


def parse_entries(raw: str | bytes, *, source: str) -> list[Rule]:
    """
    解析 JSON 格式的翻译表文本并逐条构造规则。

    Raises:
        TableLoadError: JSON 无法解析或条目结构不符合要求。
        RuleDefinitionError: 某条规则的占位符不合法（错误信息中包含来源）。
    """
    try:
        entries = _ENTRIES.validate_python(json.loads(raw))
    except json.JSONDecodeError as e:
        raise TableLoadError(f"翻译表不是合法的 JSON: {source} ({e})") from e
    except ValidationError as e:
        raise TableLoadError(f"翻译表条目格式错误: {source}\n{e}") from e

    rules: list[Rule] = []
    for index, entry in enumerate(entries):
        try:
            rules.append(Rule(pattern=entry.en, replacement=entry.ja))
        except RuleDefinitionError as e:
            logger.error(
                "翻译表中存在非法规则",
                source=source,
                index=index,
                pattern=e.pattern,
                reason=e.reason,
            )
            raise RuleDefinitionError(e.pattern, f"{e.reason} (位于 {source}#{index})") from e
    return rules


def read_builtin_rules() -> list[Rule]:
    """读取随包发布的内置翻译表。"""
    resource = resources.files("rustc_ja_wrapper").joinpath(
        "assets", BUILTIN_TABLE_RESOURCE
    )
    return parse_entries(resource.read_bytes(), source=f"<builtin:{BUILTIN_TABLE_RESOURCE}>")


def read_rules_file(path: Path) -> list[Rule]:
    """读取用户提供的翻译表文件（与内置表同格式）。"""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise TableLoadError(f"无法读取翻译表文件: {path} ({e})") from e
    return parse_entries(raw, source=str(path))


def load(
    *,
    extra_path: Path | None = None,
    include_builtin: bool = True,
    sort_longest_first: bool = True,
) -> TranslationTable:
    """
    构造本次运行使用的翻译表。

    顺序规则：
    1. 用户表（若配置）的规则排在最前面，保持文件中的顺序，使其可以覆盖内置规则；
    2. 内置表按英文 pattern 长度从长到短稳定排序，更具体的措辞先于较短的前缀，
       长度相同的规则（包括重复 pattern）保持列出顺序。

    构造过程不依赖环境，除非调用方显式传入了上述参数。
    """
    rules: list[Rule] = []
    if extra_path is not None:
        extra = read_rules_file(extra_path)
        logger.debug("已加载用户翻译表", path=str(extra_path), rules=len(extra))
        rules.extend(extra)

    if include_builtin:
        builtin = read_builtin_rules()
        if sort_longest_first:
            builtin.sort(key=lambda rule: len(rule.pattern), reverse=True)
        rules.extend(builtin)

    table = TranslationTable(rules)
    logger.debug("翻译表构造完成", rules=len(table))
    return table
