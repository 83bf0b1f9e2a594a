# src/rustc_ja_wrapper/application/__init__.py
from .relay import LineTranslator, RelayStats, relay
from .wrapper import WrapperResult, run, run_compiler

__all__ = ["LineTranslator", "RelayStats", "relay", "WrapperResult", "run", "run_compiler"]
