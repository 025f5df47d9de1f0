"""
CLI Layer - 命令行接口层

提供命令行入口。
"""

from env_doctor.cli.app import app, audit, compare, fix, lint_command, security, version

__all__ = [
    "app",
    "compare",
    "audit",
    "fix",
    "lint_command",
    "security",
    "version",
]
