# src/rustc_ja_wrapper/__init__.py
"""
rustc-ja-wrapper：透明代理 rustc 调用，把 stderr 中已知的英文诊断改写为日文。

除翻译后的措辞外，行为与直接调用编译器完全一致：相同的退出码、
逐字节相同的 stdout，以及未被翻译部分逐行相同的 stderr。
"""

__version__ = "0.3.0"
