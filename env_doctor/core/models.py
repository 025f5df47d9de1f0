"""
数据模型定义

解析、比较、检查与安全扫描共用的数据类。
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Literal, Optional


Severity = Literal["error", "warning", "info"]
RuleCategory = Literal["syntax", "format", "convention", "security"]

# 不对应具体行号的问题使用的行标记
FILE_LEVEL = "file"
GIT_LEVEL = "git"

SEVERITIES: tuple[str, ...] = ("error", "warning", "info")


@dataclass(frozen=True)
class RawLine:
    """
    源文件中的一行

    Attributes:
        number: 行号 (1-based)
        text: 原始内容（未去除空白）
    """
    number: int
    text: str

    @property
    def stripped(self) -> str:
        return self.text.strip()

    @property
    def is_blank_or_comment(self) -> bool:
        stripped = self.stripped
        return not stripped or stripped.startswith("#")


@dataclass(frozen=True)
class Issue:
    """
    Lint 问题

    Attributes:
        severity: 严重程度 (error, warning, info)
        line: 行号，或 FILE_LEVEL 表示整个文件
        message: 问题描述
        line_content: 原始行内容（文件级问题为简短说明）
        rule: 规则类别 (syntax, format, convention, security)
        code: 问题代码 (如 DUPLICATE_KEY)
        fixable: 是否可自动修复
    """
    severity: Severity
    line: int | str
    message: str
    line_content: str
    rule: RuleCategory
    code: str
    fixable: bool = False

    @property
    def is_file_level(self) -> bool:
        return not isinstance(self.line, int)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RiskLevel(Enum):
    """安全风险等级，可比较大小"""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return RISK_RANKS[self.value]

    @classmethod
    def parse(cls, value: "str | RiskLevel | None") -> "RiskLevel":
        """宽松解析风险等级，未知值视为 NONE"""
        if isinstance(value, RiskLevel):
            return value
        if not value:
            return cls.NONE
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.NONE

    @classmethod
    def from_severity(cls, severity: str) -> "RiskLevel":
        """error→high, warning→medium, info→low"""
        return SEVERITY_TO_RISK.get(severity, cls.NONE)


RISK_RANKS: dict[str, int] = {
    "critical": 4,
    "high": 3,
    "medium": 2,
    "low": 1,
    "none": 0,
}

SEVERITY_TO_RISK: dict[str, RiskLevel] = {
    "error": RiskLevel.HIGH,
    "warning": RiskLevel.MEDIUM,
    "info": RiskLevel.LOW,
}


@dataclass(frozen=True)
class SecurityFinding:
    """
    安全扫描结果

    Attributes:
        key: 相关的键（文件级/Git 级问题为空）
        value: 相关的值
        risk: 风险等级
        classification: 问题类型 (error, warning, info)
        code: 问题代码 (如 WEAK_PASSWORD)
        message: 问题描述
        recommendation: 修复建议
        line: 行号，或 FILE_LEVEL / GIT_LEVEL
        line_content: 原始行内容或简短说明
        fixable: 是否可自动修复
    """
    key: str
    value: str
    risk: RiskLevel
    classification: Severity
    code: str
    message: str
    recommendation: str
    line: int | str
    line_content: str = ""
    fixable: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["risk"] = self.risk.value
        return data


@dataclass(frozen=True)
class DiffResult:
    """
    两个环境映射的差异

    Attributes:
        missing_in_target: 源中有、目标中没有的键（按源的顺序）
        extra_in_target: 目标中有、源中没有的键（按目标的顺序）
        changed_values: 两边都有但值不同的键 -> (源值, 目标值)
    """
    missing_in_target: tuple[str, ...] = ()
    extra_in_target: tuple[str, ...] = ()
    changed_values: dict[str, tuple[str, str]] = field(default_factory=dict)

    @property
    def has_key_drift(self) -> bool:
        return bool(self.missing_in_target or self.extra_in_target)

    @property
    def is_clean(self) -> bool:
        return not self.has_key_drift and not self.changed_values

    def to_dict(self) -> dict[str, Any]:
        return {
            "missing_in_target": list(self.missing_in_target),
            "extra_in_target": list(self.extra_in_target),
            "changed_values": {
                key: {"source": source, "target": target}
                for key, (source, target) in self.changed_values.items()
            },
        }


def count_by_severity(items: list, attr: str = "severity") -> dict[str, int]:
    """按严重程度统计数量"""
    counts = {severity: 0 for severity in SEVERITIES}
    for item in items:
        value: Optional[str] = getattr(item, attr, None)
        if value in counts:
            counts[value] += 1
    return counts
