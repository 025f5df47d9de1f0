"""
Core Layer - 核心层

包含环境文件解析、比较、使用扫描、Lint、安全扫描和修复。
"""

from env_doctor.core.models import (
    FILE_LEVEL,
    GIT_LEVEL,
    Issue,
    RawLine,
    RiskLevel,
    SecurityFinding,
    DiffResult,
    count_by_severity,
)
from env_doctor.core.parser import (
    EnvMapping,
    iter_raw_lines,
    split_assignment,
    parse_env,
    parse_env_file,
    read_env_file,
    write_env_file,
)
from env_doctor.core.differ import diff_env
from env_doctor.core.audit import AuditResult, audit_usage
from env_doctor.core.scanner import (
    ScanOptions,
    ScanResult,
    UsageRecord,
    extract_usages,
    scan_project,
)
from env_doctor.core.linter import (
    LintOptions,
    parse_rules,
    lint,
    apply_lint_fixes,
)
from env_doctor.core.security import (
    SecurityOptions,
    scan,
    check_git_tracking,
    filter_by_minimum_risk,
    apply_security_fixes,
)
from env_doctor.core.fixer import (
    FixOptions,
    FixResult,
    fix_env_content,
    backup_file,
)

__all__ = [
    # models
    "FILE_LEVEL",
    "GIT_LEVEL",
    "Issue",
    "RawLine",
    "RiskLevel",
    "SecurityFinding",
    "DiffResult",
    "count_by_severity",
    # parser
    "EnvMapping",
    "iter_raw_lines",
    "split_assignment",
    "parse_env",
    "parse_env_file",
    "read_env_file",
    "write_env_file",
    # differ / audit
    "diff_env",
    "AuditResult",
    "audit_usage",
    # scanner
    "ScanOptions",
    "ScanResult",
    "UsageRecord",
    "extract_usages",
    "scan_project",
    # linter
    "LintOptions",
    "parse_rules",
    "lint",
    "apply_lint_fixes",
    # security
    "SecurityOptions",
    "scan",
    "check_git_tracking",
    "filter_by_minimum_risk",
    "apply_security_fixes",
    # fixer
    "FixOptions",
    "FixResult",
    "fix_env_content",
    "backup_file",
]
