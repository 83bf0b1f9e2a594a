# src/rustc_ja_wrapper/domain/__init__.py
"""
诊断改写引擎的纯领域逻辑：规则、翻译表与匹配算法。
本包不做任何进程或流 I/O。
"""
from .json_diagnostics import translate_json_line, wants_json_diagnostics
from .matcher import MatchResult, find_self_matches, translate
from .rules import LiteralSegment, Rule, SlotSegment, parse_template
from .table import TranslationTable, load

__all__ = [
    "Rule", "LiteralSegment", "SlotSegment", "parse_template",
    "TranslationTable", "load",
    "MatchResult", "translate", "find_self_matches",
    "translate_json_line", "wants_json_diagnostics",
]
