# src/rustc_ja_wrapper/exceptions.py
"""
本模块定义了 rustc-ja-wrapper 中所有自定义的、语义化的异常类型。

包装器只在自身出错时才引入新的退出码；编译器本身的失败永远透传，
因此这里的每个启动类异常都携带一个与编译器退出码区分开的 `exit_code`。
"""


class WrapperError(Exception):
    """
    所有 rustc-ja-wrapper 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """

    exit_code: int = 1


class ConfigurationError(WrapperError):
    """
    表示在加载、解析或验证配置时发生的错误。
    例如，环境变量的值格式不正确，或配置的翻译表路径不存在。
    """


class TableLoadError(WrapperError):
    """
    表示翻译表无法读取或解析（文件缺失、JSON 格式错误、条目缺少字段）。
    """


class RuleDefinitionError(TableLoadError):
    """
    表示某条规则在构造时就不合法，例如 pattern 与 replacement 的占位符不一致。
    在加载期拒绝，而不是留到匹配期不可预测地失败。
    """

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"非法规则 {pattern!r}: {reason}")


class UsageError(WrapperError):
    """命令行调用方式不正确（例如没有提供真实编译器）。"""

    exit_code = 2


class LaunchError(WrapperError):
    """
    表示真实编译器无法启动。此时不存在可以透传的子进程退出码，
    因此使用独立的退出码。
    """

    exit_code = 126


class CompilerNotFoundError(LaunchError):
    """在 PATH 或给定路径上找不到真实编译器。"""

    exit_code = 127


class CompilerNotExecutableError(LaunchError):
    """找到了编译器，但没有执行权限或系统拒绝创建进程。"""

    exit_code = 126
