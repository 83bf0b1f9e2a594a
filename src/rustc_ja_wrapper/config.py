# src/rustc_ja_wrapper/config.py
"""
rustc-ja-wrapper 配置（Pydantic v2）

所有配置都来自环境变量（前缀 `RUSTC_JA_`，嵌套以 `__` 分隔），例如：
- RUSTC_JA_LOGGING__LEVEL=DEBUG
- RUSTC_JA_TABLE__EXTRA_PATH=./my-table.json
- RUSTC_JA_RELAY__COVERAGE_REPORT=true

真实编译器也可以通过构建工具设置的 `RUSTC` 变量提供。
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ===================== 子模型 =====================


class LoggingSettings(BaseModel):
    # 包装器的 stderr 承载编译器诊断，默认只输出警告以上的日志
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="WARNING")
    format: Literal["console", "json"] = Field(default="console")
    file: Optional[Path] = Field(
        default=None, description="日志写入的文件；为空时写入 stderr"
    )


class TableSettings(BaseModel):
    extra_path: Optional[Path] = Field(
        default=None, description="用户翻译表（JSON），其规则优先于内置规则"
    )
    include_builtin: bool = Field(default=True)
    sort_longest_first: bool = Field(default=True)

    @field_validator("extra_path")
    @classmethod
    def _validate_extra_path(cls, v: Optional[Path]) -> Optional[Path]:
        if v is not None and not v.is_file():
            raise ValueError(f"翻译表文件不存在: {v}")
        return v


class RelaySettings(BaseModel):
    stream_limit: int = Field(
        default=64 * 1024, ge=1024, description="单行诊断的最大缓冲字节数"
    )
    chunk_size: int = Field(default=8192, ge=1)
    debug_log_path: Optional[Path] = Field(
        default=None, description="原始 stderr 的追加式调试日志"
    )
    coverage_report: bool = Field(
        default=False, description="运行结束时报告已翻译/未翻译的行数"
    )


# ===================== 顶层配置 =====================
class WrapperConfig(BaseSettings):
    """
    rustc-ja-wrapper 核心配置模型。
    """

    compiler: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("RUSTC_JA_COMPILER", "RUSTC"),
        description="命令行未给出编译器时使用的真实编译器",
    )
    marker_variables: list[str] = Field(
        default_factory=lambda: ["RUSTC_WRAPPER", "RUSTC_WORKSPACE_WRAPPER"],
        description="启动子进程前需要清除的包装器注入变量",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    table: TableSettings = Field(default_factory=TableSettings)
    relay: RelaySettings = Field(default_factory=RelaySettings)

    @field_validator("compiler")
    @classmethod
    def _blank_compiler_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v

    # --- Pydantic v2 设置 ---
    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_prefix="RUSTC_JA_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        env_file_encoding="utf-8",
    )
