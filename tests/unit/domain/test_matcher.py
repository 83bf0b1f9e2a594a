# tests/unit/domain/test_matcher.py
"""
测试匹配/替换引擎的核心性质：
1. 不匹配时的恒等性；
2. 字面量规则只替换匹配的子串；
3. 占位符捕获与代入；
4. 表顺序决定优先级；
5. 同一行内多个不重叠匹配的单次从左到右处理。
"""

import pytest

from rustc_ja_wrapper.domain.matcher import (
    MatchResult,
    compile_pattern,
    find_self_matches,
    translate,
)
from rustc_ja_wrapper.domain.rules import Rule
from rustc_ja_wrapper.domain.table import TranslationTable


@pytest.mark.parametrize(
    "line",
    [
        "",
        "not found",
        "  --> src/main.rs:4:20",
        "   |",
        "4  |     let s2 = s1;",
        "   |              ^^ some label the table does not know",
    ],
)
def test_non_matching_lines_are_returned_unchanged(sample_table, line):
    result = translate(line, sample_table)
    assert result == MatchResult(line, False)


def test_literal_rule_replaces_only_the_matched_substring(sample_table):
    line = "error[E0382]: borrow of moved value: `s1`"
    result = translate(line, sample_table)
    assert result.matched is True
    assert result.text == "error[E0382]: 移動された値の借用: `s1`"


def test_slot_capture_is_copied_into_replacement(sample_table):
    """测试占位符内容（含反引号）被原样搬运到译文中。"""
    result = translate("variable `b` is never used", sample_table)
    assert result == MatchResult("変数が使われていません: `b`", True)


def test_backtick_quoted_slots_may_contain_spaces(sample_table):
    line = (
        "move occurs because `s` has type `&'static str`, "
        "which does not implement the `Copy` trait"
    )
    result = translate(line, sample_table)
    assert result.text == "`&'static str` 型の `s` は `Copy` トレイトを実装していないので、移動します"


def test_trailing_slot_takes_whole_word_and_keeps_rest(sample_table):
    assert translate("error: foo", sample_table).text == "エラー: foo"
    assert translate("error: foo bar", sample_table).text == "エラー: foo bar"


def test_bare_slot_does_not_cross_whitespace():
    table = TranslationTable.from_pairs([("take {$n} args", "{$n} 個の引数")])
    assert translate("take 2 args", table).text == "2 個の引数"
    assert translate("take two or three args", table).matched is False


def test_earlier_rule_wins_for_identical_patterns():
    table = TranslationTable.from_pairs(
        [
            ("mismatched types", "型が一致しません"),
            ("mismatched types", "型の不一致"),
        ]
    )
    assert translate("error[E0308]: mismatched types", table).text == "error[E0308]: 型が一致しません"


def test_earlier_rule_wins_for_overlapping_spans():
    table = TranslationTable.from_pairs(
        [
            ("mutable borrow occurs here", "可変借用はここで発生します"),
            ("first mutable borrow occurs here", "最初の可変借用はここで発生します"),
        ]
    )
    # 前面的规则先认领区间，后面更长的规则与其重叠，不再被考虑
    assert translate("first mutable borrow occurs here", table).text == "first 可変借用はここで発生します"


def test_multiple_non_overlapping_matches_in_one_line():
    table = TranslationTable.from_pairs(
        [
            ("value moved here", "ここで値を移動"),
            ("value used here after move", "移動後の値をここで使用"),
        ]
    )
    line = "value moved here | value used here after move | value moved here"
    assert translate(line, table).text == "ここで値を移動 | 移動後の値をここで使用 | ここで値を移動"


def test_replacement_output_is_not_rescanned():
    """测试译文不会被后续规则再次匹配（单次处理）。"""
    table = TranslationTable.from_pairs([("a", "b"), ("b", "c")])
    assert translate("a", table).text == "b"
    assert translate("ab", table).text == "bc"


def test_lower_priority_rule_can_use_unclaimed_earlier_span():
    table = TranslationTable.from_pairs(
        [
            ("unused variable: `{$name}`", "未使用の変数: `{$name}`"),
            ("warning", "警告"),
        ]
    )
    assert translate("warning: unused variable: `x`", table).text == "警告: 未使用の変数: `x`"


def test_quoted_source_excerpt_is_translated_too(sample_table):
    """
    已知局限：诊断中回显的源码片段如果恰好等于某条 pattern，同样会被翻译。
    这是稳定、可复现的行为。
    """
    line = '3 |     println!("borrow of moved value");'
    result = translate(line, sample_table)
    assert result.text == '3 |     println!("移動された値の借用");'
    assert translate(line, sample_table) == result


def test_compile_pattern_uses_named_groups():
    rule = Rule(pattern="unused import: `{$name}`", replacement="未使用のインポート: `{$name}`")
    regex = compile_pattern(rule)
    m = regex.search("warning: unused import: `std::fmt`")
    assert m is not None
    assert m.group("name") == "std::fmt"


def test_compile_pattern_escapes_regex_metacharacters():
    rule = Rule(pattern="expected `;`, found `{$found}` (x+y)*", replacement="`{$found}`")
    assert compile_pattern(rule).search("expected `;`, found `}` (x+y)*") is not None
    assert compile_pattern(rule).search("expected `;`, found `}` (xxy)") is None


def test_find_self_matches_reports_rules_matching_their_own_output():
    table = TranslationTable.from_pairs(
        [
            ("note", "note: 注意"),
            ("hello", "こんにちは"),
        ]
    )
    offenders = find_self_matches(table)
    assert [rule.pattern for rule in offenders] == ["note"]


def test_sample_table_has_no_self_matches(sample_table):
    assert find_self_matches(sample_table) == []
