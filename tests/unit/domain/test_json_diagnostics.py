# tests/unit/domain/test_json_diagnostics.py
"""
测试 `--error-format=json` 模式下诊断对象的翻译。
"""

import json

import pytest

from rustc_ja_wrapper.domain.json_diagnostics import (
    translate_diagnostic,
    translate_json_line,
    wants_json_diagnostics,
)
from rustc_ja_wrapper.domain.table import TranslationTable


@pytest.fixture
def borrow_table() -> TranslationTable:
    return TranslationTable.from_pairs(
        [
            ("borrow of moved value", "移動された値の借用"),
            ("value moved here", "ここで値を移動"),
            ("value borrowed here after move", "移動後の値をここで借用"),
            (
                "consider cloning the value if the performance cost is acceptable",
                "複製コストが許容できるなら、クローンすることを検討してください",
            ),
        ]
    )


def _diagnostic() -> dict:
    return {
        "$message_type": "diagnostic",
        "message": "borrow of moved value: `s1`",
        "code": {"code": "E0382", "explanation": None},
        "level": "error",
        "spans": [
            {"label": "value moved here"},
            {"label": "value borrowed here after move"},
            {"label": None},
        ],
        "children": [
            {
                "message": "consider cloning the value if the performance cost is acceptable",
                "spans": [{"label": "hello"}],
            },
        ],
        "rendered": (
            "borrow of moved value: `s1`\nvalue moved here\n"
            "value borrowed here after move\n"
            "consider cloning the value if the performance cost is acceptable"
        ),
    }


@pytest.mark.parametrize(
    "args, expected",
    [
        (["--error-format=json", "main.rs"], True),
        (["--error-format", "json", "main.rs"], True),
        (["--error-format=human", "main.rs"], False),
        (["--error-format"], False),
        (["main.rs"], False),
    ],
)
def test_wants_json_diagnostics(args, expected):
    assert wants_json_diagnostics(args) is expected


def test_translate_diagnostic_rewrites_all_message_fields(borrow_table):
    diagnostic = _diagnostic()
    assert translate_diagnostic(diagnostic, borrow_table) is True

    assert diagnostic["message"] == "移動された値の借用: `s1`"
    assert [s["label"] for s in diagnostic["spans"]] == [
        "ここで値を移動",
        "移動後の値をここで借用",
        None,
    ]
    assert diagnostic["children"][0]["message"] == (
        "複製コストが許容できるなら、クローンすることを検討してください"
    )
    assert diagnostic["children"][0]["spans"][0]["label"] == "hello"
    assert diagnostic["rendered"] == (
        "移動された値の借用: `s1`\nここで値を移動\n"
        "移動後の値をここで借用\n"
        "複製コストが許容できるなら、クローンすることを検討してください"
    )
    assert diagnostic["code"] == {"code": "E0382", "explanation": None}


def test_translate_json_line_emits_compact_unescaped_json(borrow_table):
    line = json.dumps(_diagnostic())
    result = translate_json_line(line, borrow_table)
    assert result.matched is True
    assert "移動された値の借用" in result.text
    assert "\\u" not in result.text
    assert ", " not in result.text.split('"rendered"')[0]
    decoded = json.loads(result.text)
    assert list(decoded) == list(_diagnostic())


@pytest.mark.parametrize(
    "line",
    [
        "not json at all",
        "",
        "[1, 2, 3]",
        '{"$message_type": "artifact", "artifact": "libfoo.rlib", "emit": "link"}',
        '{"$message_type": "diagnostic", "message": "unknown wording", "spans": [], "children": []}',
    ],
)
def test_non_diagnostic_or_untranslated_lines_pass_through_verbatim(borrow_table, line):
    result = translate_json_line(line, borrow_table)
    assert result.text == line
    assert result.matched is False
