# src/rustc_ja_wrapper/domain/matcher.py
"""
匹配/替换引擎：把一行诊断文本按翻译表改写。

算法要点：
1. 每条规则的 pattern 被编译为正则：字面量片段转义，占位符变为受限通配；
2. 按表顺序依次尝试规则，每条规则认领所有与已认领区间不重叠的匹配；
3. 最后对原始行从左到右一次性拼接，译文不会被再次扫描。

已知且接受的局限：匹配完全基于文本，不区分「编译器的叙述」和
「诊断中回显的源码片段」。如果源码里恰好出现与某条 pattern 相同的文字，
它同样会被翻译。
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NamedTuple

from rustc_ja_wrapper.domain.rules import (
    QUOTE_CHAR,
    LiteralSegment,
    Rule,
    SlotSegment,
)

if TYPE_CHECKING:
    from rustc_ja_wrapper.domain.table import TranslationTable

# 占位符的三种字符类（非贪婪，尽量短地匹配到下一个字面量片段）
SLOT_QUOTED = r"[^`\n]+?"
SLOT_BARE = r"\S+?"
# 末尾的占位符后面没有字面量可以作为边界，因此取最长的非空白串
SLOT_TRAILING = r"\S+"


class MatchResult(NamedTuple):
    """一行诊断的翻译结果。"""

    text: str
    matched: bool


def compile_pattern(rule: Rule) -> re.Pattern[str]:
    """
    把规则的 pattern 编译为正则表达式，每个占位符对应一个同名的命名分组。
    """
    segments = rule.pattern_segments
    parts: list[str] = []
    for index, segment in enumerate(segments):
        if isinstance(segment, LiteralSegment):
            parts.append(re.escape(segment.text))
            continue

        before = segments[index - 1] if index > 0 else None
        after = segments[index + 1] if index + 1 < len(segments) else None
        quoted = (
            isinstance(before, LiteralSegment)
            and before.text.endswith(QUOTE_CHAR)
            and isinstance(after, LiteralSegment)
            and after.text.startswith(QUOTE_CHAR)
        )
        if quoted:
            slot_re = SLOT_QUOTED
        elif after is None:
            slot_re = SLOT_TRAILING
        else:
            slot_re = SLOT_BARE
        parts.append(f"(?P<{segment.name}>{slot_re})")
    return re.compile("".join(parts))


def find_spans(
    line: str, rules: tuple[Rule, ...], patterns: tuple[re.Pattern[str], ...]
) -> list[tuple[int, int, Rule, dict[str, str]]]:
    """
    按优先级为一行文本选出所有不重叠的匹配区间。

    表中靠前的规则先认领区间；区间一旦被认领，后面的规则不再考虑它。
    返回值按起始位置排序。
    """
    claimed: list[tuple[int, int, Rule, dict[str, str]]] = []
    for rule, regex in zip(rules, patterns):
        pos = 0
        while pos <= len(line):
            m = regex.search(line, pos)
            if m is None:
                break
            start, end = m.span()
            if end == start:
                # 零宽匹配不可能出现（pattern 非空），这里仅防止死循环
                pos = start + 1
                continue
            if any(start < c_end and c_start < end for c_start, c_end, _, _ in claimed):
                pos = start + 1
                continue
            claimed.append((start, end, rule, m.groupdict()))
            pos = end
    claimed.sort(key=lambda item: item[0])
    return claimed


def translate(line: str, table: TranslationTable) -> MatchResult:
    """
    翻译一行诊断文本（不含行尾换行符）。

    没有任何规则匹配时原样返回，`matched` 为 False；这不是错误。
    """
    spans = find_spans(line, table.rules, table.patterns)
    if not spans:
        return MatchResult(line, False)

    out: list[str] = []
    cursor = 0
    for start, end, rule, captures in spans:
        out.append(line[cursor:start])
        out.append(rule.render(captures))
        cursor = end
    out.append(line[cursor:])
    return MatchResult("".join(out), True)


def find_self_matches(table: TranslationTable) -> list[Rule]:
    """
    找出 pattern 能匹配自身译文的规则。

    占位符以名称本身作为示例值代入后再检查，用来防止译文被再次翻译的自匹配循环。
    """
    offenders = []
    for rule, regex in zip(table.rules, table.patterns):
        sample = rule.render({name: name for name in rule.slot_names})
        if regex.search(sample):
            offenders.append(rule)
    return offenders
