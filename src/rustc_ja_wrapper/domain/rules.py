# src/rustc_ja_wrapper/domain/rules.py
"""
定义翻译规则 (Rule) 的领域模型。

一条规则由 pattern（英文诊断片段）和 replacement（日文译文）组成，
两者都被解析为「字面量片段 / 占位符」交替出现的显式序列，
这样加载期校验才有具体的结构可以检查，匹配期也不必再做字符串拼接。

占位符写作 `{$name}`（与 rustc 的 Fluent 消息源一致）或 `{name}`。
"""

from __future__ import annotations

import re
from collections import Counter
from functools import cached_property
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, model_validator

from rustc_ja_wrapper.exceptions import RuleDefinitionError

RE_PLACEHOLDER = re.compile(r"\{\$?([A-Za-z_][A-Za-z0-9_]*)\}")

# 被反引号包围的占位符允许包含空白（例如 `&'static str`），其余占位符不允许
QUOTE_CHAR = "`"


class LiteralSegment(BaseModel):
    """模板中的固定文本片段。"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["literal"] = "literal"
    text: str


class SlotSegment(BaseModel):
    """模板中的占位符，代表需要原样保留的可变内容（标识符、数字、路径）。"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["slot"] = "slot"
    name: str


Segment = Union[LiteralSegment, SlotSegment]


def parse_template(template: str) -> tuple[Segment, ...]:
    """
    把模板字符串拆分为字面量与占位符交替的片段序列。

    空字面量不会出现在结果中，因此两个相邻的 SlotSegment 表示
    模板中两个占位符之间没有任何固定文本。
    """
    segments: list[Segment] = []
    last = 0
    for match in RE_PLACEHOLDER.finditer(template):
        if match.start() > last:
            segments.append(LiteralSegment(text=template[last : match.start()]))
        segments.append(SlotSegment(name=match.group(1)))
        last = match.end()
    if last < len(template):
        segments.append(LiteralSegment(text=template[last:]))
    return tuple(segments)


def _slot_names(segments: tuple[Segment, ...]) -> list[str]:
    return [s.name for s in segments if isinstance(s, SlotSegment)]


class Rule(BaseModel):
    """
    一条不可变的翻译规则。

    校验在构造时完成（而非匹配时），不合法的规则会抛出 `RuleDefinitionError`：
    - pattern 为空或只有空白；
    - 同一个 pattern 中占位符重名；
    - pattern 中两个占位符直接相邻（边界不确定）；
    - replacement 的占位符集合与 pattern 不一致（缺失、多余或重复）。

    replacement 中占位符的顺序可以与 pattern 不同，代入时按名称对应。
    """

    model_config = ConfigDict(frozen=True)

    pattern: str
    replacement: str

    @model_validator(mode="after")
    def _check_slots(self) -> "Rule":
        if not self.pattern.strip():
            raise RuleDefinitionError(self.pattern, "pattern 不能为空")

        pattern_segments = parse_template(self.pattern)
        names = _slot_names(pattern_segments)

        duplicated = [n for n, c in Counter(names).items() if c > 1]
        if duplicated:
            raise RuleDefinitionError(
                self.pattern, f"占位符在 pattern 中重复出现: {', '.join(duplicated)}"
            )

        for left, right in zip(pattern_segments, pattern_segments[1:]):
            if isinstance(left, SlotSegment) and isinstance(right, SlotSegment):
                raise RuleDefinitionError(
                    self.pattern,
                    f"占位符 {left.name!r} 与 {right.name!r} 之间缺少固定文本",
                )

        replacement_names = _slot_names(parse_template(self.replacement))
        if Counter(names) != Counter(replacement_names):
            raise RuleDefinitionError(
                self.pattern,
                f"占位符不一致: pattern={names}, replacement={replacement_names}",
            )
        return self

    @cached_property
    def pattern_segments(self) -> tuple[Segment, ...]:
        return parse_template(self.pattern)

    @cached_property
    def replacement_segments(self) -> tuple[Segment, ...]:
        return parse_template(self.replacement)

    @property
    def slot_names(self) -> list[str]:
        return _slot_names(self.pattern_segments)

    @property
    def is_literal(self) -> bool:
        """没有占位符的规则按纯子串匹配。"""
        return not self.slot_names

    def render(self, captures: dict[str, str]) -> str:
        """把捕获到的占位符内容代入 replacement 模板。"""
        parts = []
        for segment in self.replacement_segments:
            if isinstance(segment, SlotSegment):
                parts.append(captures[segment.name])
            else:
                parts.append(segment.text)
        return "".join(parts)
