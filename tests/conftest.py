# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

from __future__ import annotations

import sys
import textwrap
from collections.abc import Generator
from typing import Any

import pytest
from pytest_mock import MockerFixture
from rich.console import Console

from rustc_ja_wrapper.config import WrapperConfig
from rustc_ja_wrapper.domain.table import TranslationTable


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """清除会影响配置的环境变量，并在空目录中运行（避免读到仓库里的 .env）。"""
    import os

    for key in list(os.environ):
        if key.startswith("RUSTC_JA_") or key in ("RUSTC", "RUSTC_WRAPPER"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def sample_table() -> TranslationTable:
    """一个小而有代表性的翻译表。"""
    return TranslationTable.from_pairs(
        [
            ("hello", "こんにちは"),
            ("error: {$name}", "エラー: {$name}"),
            ("borrow of moved value", "移動された値の借用"),
            (
                "move occurs because `{$name}` has type `{$ty}`, which does not implement the `Copy` trait",
                "`{$ty}` 型の `{$name}` は `Copy` トレイトを実装していないので、移動します",
            ),
            ("variable {NAME} is never used", "変数が使われていません: {NAME}"),
        ]
    )


@pytest.fixture
def config() -> WrapperConfig:
    return WrapperConfig()


def python_compiler(script: str) -> list[str]:
    """返回一个用当前解释器扮演「编译器」的命令行。"""
    return [sys.executable, "-c", textwrap.dedent(script)]


@pytest.fixture
def fake_compiler():
    return python_compiler
