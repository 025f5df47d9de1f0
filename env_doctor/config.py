"""
项目配置

从 pyproject.toml 的 [tool.env-doctor] 表读取配置，缺省时使用默认值。

示例：

    [tool.env-doctor]
    example-file = ".env.example"
    env-file = ".env"
    file-patterns = ["*.env", "*.env.*"]
    exclude-directories = ["vendor", "node_modules", ".git", "storage", "bootstrap/cache"]
    source-patterns = ["*.php"]
"""

import logging
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from env_doctor.errors import ConfigError
from env_doctor.filters import (
    DEFAULT_ENV_FILE_PATTERNS,
    DEFAULT_EXCLUDE_DIRECTORIES,
    DEFAULT_SOURCE_PATTERNS,
)

logger = logging.getLogger(__name__)

PYPROJECT_NAME = "pyproject.toml"
TOOL_TABLE = "env-doctor"


@dataclass
class DoctorConfig:
    """
    env-doctor 配置

    Attributes:
        example_file: 默认示例文件路径
        env_file: 默认环境文件路径
        file_patterns: compare --all 查找环境文件的模式
        exclude_directories: 遍历时跳过的目录
        source_patterns: audit 扫描的源文件模式
    """
    example_file: str = ".env.example"
    env_file: str = ".env"
    file_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_ENV_FILE_PATTERNS))
    exclude_directories: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRECTORIES))
    source_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_PATTERNS))


def _check_type(name: str, value: Any, expected: type) -> Any:
    if expected is str:
        if not isinstance(value, str) or not value:
            raise ConfigError(f"[tool.{TOOL_TABLE}] {name} must be a non-empty string")
        return value
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"[tool.{TOOL_TABLE}] {name} must be a list of strings")
    return list(value)


def config_from_table(table: dict[str, Any]) -> DoctorConfig:
    """
    从 [tool.env-doctor] 表构建配置

    Raises:
        ConfigError: 值类型错误
    """
    known = {f.name.replace("_", "-"): f for f in fields(DoctorConfig)}
    values: dict[str, Any] = {}
    for raw_name, value in table.items():
        config_field = known.get(raw_name) or known.get(raw_name.replace("_", "-"))
        if config_field is None:
            logger.warning(f"Unknown option in [tool.{TOOL_TABLE}]: {raw_name}")
            continue
        expected = str if config_field.type in (str, "str") else list
        values[config_field.name] = _check_type(raw_name, value, expected)
    return DoctorConfig(**values)


def load_config(project_root: Path) -> DoctorConfig:
    """
    加载项目配置

    Args:
        project_root: 项目根目录

    Returns:
        DoctorConfig（没有配置时为默认值）
    """
    pyproject_path = project_root / PYPROJECT_NAME
    if not pyproject_path.is_file():
        return DoctorConfig()

    try:
        content = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Failed to read {pyproject_path}: {e}")
        return DoctorConfig()

    table = content.get("tool", {}).get(TOOL_TABLE)
    if not isinstance(table, dict):
        return DoctorConfig()
    return config_from_table(table)
