"""
报告器基类 - 定义报告器接口
"""

from dataclasses import dataclass
from typing import Protocol

from env_doctor.core.models import DiffResult, Issue, SecurityFinding


@dataclass(frozen=True)
class ComparedFile:
    """一次 compare 的输入与结果"""
    source: str
    target: str
    source_count: int
    target_count: int
    diff: DiffResult


class Reporter(Protocol):
    """报告器协议（lint 与 security 支持全部输出格式）"""

    def report_lint(self, issues: list[Issue], target: str) -> None:
        """生成 Lint 报告"""
        ...

    def report_security(self, findings: list[SecurityFinding], target: str) -> None:
        """生成安全扫描报告"""
        ...
