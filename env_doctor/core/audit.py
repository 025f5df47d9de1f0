"""
环境变量使用审计

对比代码中实际使用的环境变量与示例文件、环境文件中的定义。
"""

from dataclasses import dataclass, field

from env_doctor.core.parser import EnvMapping
from env_doctor.core.scanner.models import UsageRecord


@dataclass
class AuditResult:
    """
    审计结果

    Attributes:
        usages: key -> 使用记录
        used_keys: 代码中使用的变量（按首次发现顺序）
        missing_in_example: 代码中使用但示例文件未定义
        missing_in_env: 代码中使用但环境文件未定义
        unused_in_example: 示例文件定义但代码未使用
        unused_in_env: 环境文件定义但代码未使用
        example_count: 示例文件定义的变量数
        env_count: 环境文件定义的变量数
    """
    usages: dict[str, list[UsageRecord]] = field(default_factory=dict)
    used_keys: list[str] = field(default_factory=list)
    missing_in_example: list[str] = field(default_factory=list)
    missing_in_env: list[str] = field(default_factory=list)
    unused_in_example: list[str] = field(default_factory=list)
    unused_in_env: list[str] = field(default_factory=list)
    example_count: int = 0
    env_count: int = 0

    @property
    def has_missing(self) -> bool:
        return bool(self.missing_in_example or self.missing_in_env)


def audit_usage(
    usages: dict[str, list[UsageRecord]],
    example_vars: EnvMapping,
    env_vars: EnvMapping,
) -> AuditResult:
    """计算使用与定义之间的差异"""
    used = list(usages)
    return AuditResult(
        usages=usages,
        used_keys=used,
        missing_in_example=[key for key in used if key not in example_vars],
        missing_in_env=[key for key in used if key not in env_vars],
        unused_in_example=[key for key in example_vars if key not in usages],
        unused_in_env=[key for key in env_vars if key not in usages],
        example_count=len(example_vars),
        env_count=len(env_vars),
    )
