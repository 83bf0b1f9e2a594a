# src/rustc_ja_wrapper/domain/json_diagnostics.py
"""
处理 `--error-format=json` 模式下的诊断行。

rustc 在该模式下每行输出一个 JSON 对象，格式参见
<https://doc.rust-lang.org/rustc/json.html>。只翻译 `$message_type` 为
`diagnostic` 的对象中的以下字段（值为 null 时跳过）：

- `message`
- `spans[].label`
- `children[].message`
- `children[].spans[].label`

`rendered` 字段中出现的上述原文，会被替换为对应的译文。
"""

from __future__ import annotations

import json
from typing import Any

from rustc_ja_wrapper.domain.matcher import MatchResult, translate
from rustc_ja_wrapper.domain.table import TranslationTable

ERROR_FORMAT_FLAG = "--error-format"


def wants_json_diagnostics(args: list[str]) -> bool:
    """判断编译器参数是否要求 JSON 诊断输出。"""
    for index, arg in enumerate(args):
        if arg == f"{ERROR_FORMAT_FLAG}=json":
            return True
        if arg == ERROR_FORMAT_FLAG and index + 1 < len(args) and args[index + 1] == "json":
            return True
    return False


def _translate_field(
    obj: dict[str, Any],
    key: str,
    table: TranslationTable,
    replaced: list[tuple[str, str]],
) -> None:
    value = obj.get(key)
    if not isinstance(value, str):
        return
    translated = translate(value, table).text
    if translated != value:
        obj[key] = translated
        replaced.append((value, translated))


def _translate_spans(
    obj: dict[str, Any], table: TranslationTable, replaced: list[tuple[str, str]]
) -> None:
    spans = obj.get("spans")
    if not isinstance(spans, list):
        return
    for span in spans:
        if isinstance(span, dict):
            _translate_field(span, "label", table, replaced)


def translate_diagnostic(diagnostic: dict[str, Any], table: TranslationTable) -> bool:
    """
    就地翻译一个 diagnostic 对象。

    Returns:
        是否有任何字段被改写。
    """
    replaced: list[tuple[str, str]] = []

    _translate_field(diagnostic, "message", table, replaced)
    _translate_spans(diagnostic, table, replaced)

    children = diagnostic.get("children")
    if isinstance(children, list):
        for child in children:
            if isinstance(child, dict):
                _translate_field(child, "message", table, replaced)
                _translate_spans(child, table, replaced)

    rendered = diagnostic.get("rendered")
    if isinstance(rendered, str):
        for original, translated in replaced:
            if original:
                rendered = rendered.replace(original, translated)
        diagnostic["rendered"] = rendered

    return bool(replaced)


def translate_json_line(line: str, table: TranslationTable) -> MatchResult:
    """
    翻译一行 JSON 诊断输出。

    不是 JSON、不是对象或不是 diagnostic 的行原样返回，不做任何重新序列化。
    """
    try:
        payload = json.loads(line)
    except ValueError:
        return MatchResult(line, False)

    if not isinstance(payload, dict) or payload.get("$message_type") != "diagnostic":
        return MatchResult(line, False)

    if not translate_diagnostic(payload, table):
        return MatchResult(line, False)

    return MatchResult(
        json.dumps(payload, ensure_ascii=False, separators=(",", ":")), True
    )
