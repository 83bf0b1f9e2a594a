# tests/unit/cli/test_rustc_ja_tools.py
"""
`rustc-ja` 工具命令的单元测试。
"""

import json

import pytest
from typer.testing import CliRunner

from rustc_ja_wrapper import __version__
from rustc_ja_wrapper.presentation.cli.tools import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def extra_table(tmp_path):
    path = tmp_path / "extra.json"
    path.write_text(
        json.dumps(
            [
                {"en": "warning", "ja": "warning（警告）"},
                {"en": "unused variable: `{$name}`", "ja": "未使用の変数: `{$name}`"},
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return path


def test_version(runner: CliRunner):
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_table_check_accepts_builtin_table(runner: CliRunner):
    result = runner.invoke(app, ["table", "check"])
    assert result.exit_code == 0, result.output
    assert "翻译表有效" in result.output


def test_table_check_reports_self_matching_rules(runner: CliRunner, extra_table):
    result = runner.invoke(app, ["table", "check", "--table", str(extra_table), "--no-builtin"])
    assert result.exit_code == 1
    assert "会匹配自身译文的规则" in result.output
    assert "发现 1 条自匹配规则" in result.output


def test_table_check_rejects_invalid_table(runner: CliRunner, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([{"en": "a {$x}", "ja": "b {$y}"}]), encoding="utf-8")
    result = runner.invoke(app, ["table", "check", "--table", str(bad)])
    assert result.exit_code == 1
    assert "占位符不一致" in result.output


def test_table_show_with_grep(runner: CliRunner, extra_table):
    result = runner.invoke(
        app, ["table", "show", "--table", str(extra_table), "--no-builtin", "--grep", "unused"]
    )
    assert result.exit_code == 0, result.output
    assert "未使用の変数" in result.output
    assert "警告" not in result.output
    assert "1 / 2" in result.output


def test_filter_translates_stdin(runner: CliRunner):
    captured = (
        "warning: unused variable: `x`\n"
        " --> src/main.rs:2:9\n"
        "error: aborting due to 1 previous error\n"
    )
    result = runner.invoke(app, ["filter"], input=captured)
    assert result.exit_code == 0, result.output
    assert result.output == (
        "warning: 未使用の変数: `x`\n"
        " --> src/main.rs:2:9\n"
        "error: 1 個のエラーにより中断しました\n"
    )


def test_filter_json_mode(runner: CliRunner):
    line = json.dumps(
        {
            "$message_type": "diagnostic",
            "message": "mismatched types",
            "spans": [],
            "children": [],
            "rendered": "error[E0308]: mismatched types\n",
        }
    )
    result = runner.invoke(app, ["filter", "--json"], input=line + "\n")
    assert result.exit_code == 0, result.output
    decoded = json.loads(result.output)
    assert decoded["message"] == "型が一致しません"
    assert decoded["rendered"] == "error[E0308]: 型が一致しません\n"
