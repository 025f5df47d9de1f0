"""
错误类型定义
"""

from pathlib import Path


class EnvDoctorError(Exception):
    """env-doctor 所有错误的基类"""


class EnvFileNotFoundError(EnvDoctorError, FileNotFoundError):
    """环境文件不存在（前置条件失败，命令直接中止）"""

    def __init__(self, path: Path | str, label: str = "File"):
        super().__init__(f"{label} not found: {path}")
        self.path = path
        self.label = label

    def __str__(self) -> str:
        return f"{self.label} not found: {self.path}"


class ConfigError(EnvDoctorError):
    """配置值非法"""
