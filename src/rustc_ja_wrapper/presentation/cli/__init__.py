# src/rustc_ja_wrapper/presentation/cli/__init__.py
"""
rustc-ja-wrapper 的命令行入口。

- `rustc_ja_wrapper.presentation.cli.main:app`：作为编译器包装器使用；
- `rustc_ja_wrapper.presentation.cli.tools:app`：翻译表检查与管道过滤工具。
"""
from .main import app

__all__ = ["app"]
