"""
Scanner 模块 - 扫描源代码提取环境变量引用

- models.py: 数据类定义
- patterns.py: 正则表达式模式与映射表
- core.py: 主扫描函数
"""

from env_doctor.core.scanner.models import (
    AccessKind,
    UsageRecord,
    ScanResult,
)
from env_doctor.core.scanner.patterns import (
    ENV_CALL_PATTERN,
    CONFIG_CALL_PATTERN,
    CONFIG_KEY_TO_ENV_VAR,
    ENV_RELATED_CONFIG_KEYS,
    ENV_RELATED_CONFIG_PREFIXES,
    is_env_related_config,
    config_key_to_env_var,
)
from env_doctor.core.scanner.core import (
    ScanOptions,
    find_line_number,
    extract_env_calls,
    extract_config_calls,
    extract_usages,
    scan_project,
)

__all__ = [
    # Models
    "AccessKind",
    "UsageRecord",
    "ScanResult",
    # Patterns
    "ENV_CALL_PATTERN",
    "CONFIG_CALL_PATTERN",
    "CONFIG_KEY_TO_ENV_VAR",
    "ENV_RELATED_CONFIG_KEYS",
    "ENV_RELATED_CONFIG_PREFIXES",
    "is_env_related_config",
    "config_key_to_env_var",
    # Core
    "ScanOptions",
    "find_line_number",
    "extract_env_calls",
    "extract_config_calls",
    "extract_usages",
    "scan_project",
]
