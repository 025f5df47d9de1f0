"""
环境文件安全扫描

基于关键字和模式的启发式检查（不做熵分析）：
1. 敏感键：按固定表做不区分大小写的子串匹配，每个命中的关键字各产生一条结果
2. 弱值：弱密码、过短的 API key、可预测的用户名
3. strict 模式：示例值、空的敏感键、生产环境中的本地地址、文件权限提醒
4. 文件级：注释中的敏感赋值、注释中疑似密钥前缀
5. 可选的 Git 检查：文件是否被跟踪、是否在 .gitignore 中
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from env_doctor.core import vcs
from env_doctor.core.models import (
    FILE_LEVEL,
    GIT_LEVEL,
    RawLine,
    RiskLevel,
    SecurityFinding,
)
from env_doctor.core.parser import iter_raw_lines, split_assignment

logger = logging.getLogger(__name__)


# ============================================================
# 配置常量
# ============================================================

# 敏感关键字 -> 问题类型（按顺序匹配，全部命中的都会报告）
SENSITIVE_KEYS: tuple[tuple[str, str], ...] = (
    ("password", "error"),
    ("secret", "error"),
    ("private_key", "error"),
    ("api_secret", "error"),
    ("jwt_secret", "error"),
    ("encryption_key", "error"),
    ("master_key", "error"),
    ("app_key", "error"),

    ("key", "warning"),
    ("token", "warning"),
    ("api_key", "warning"),
    ("access_token", "warning"),
    ("refresh_token", "warning"),
    ("session_secret", "warning"),
    ("cipher_key", "warning"),
    ("database_password", "warning"),

    ("username", "info"),
    ("email", "info"),
    ("host", "info"),
    ("port", "info"),
    ("database", "info"),
)

WEAK_PASSWORDS: frozenset[str] = frozenset({
    "password", "123456", "admin", "root", "test", "secret", "changeme", "default",
})

EXAMPLE_VALUES: frozenset[str] = frozenset({
    "secret", "password", "key", "token", "example", "test",
})

LOCAL_ADDRESSES: frozenset[str] = frozenset({"localhost", "127.0.0.1", "0.0.0.0"})

MIN_API_KEY_LENGTH = 32

PREDICTABLE_USERNAME = re.compile(r"^(admin|user|test|demo|guest)$", re.IGNORECASE)
COMMENTED_SECRET = re.compile(r"#\s*(password|secret|key|token)\s*=\s*\S+", re.IGNORECASE)
COMMENTED_SECRET_LINE = re.compile(r"^#\s*(password|secret|key|token)\s*=", re.IGNORECASE)
SECRET_PREFIX_IN_COMMENT = re.compile(r"#.*(sk-|pk_|ghp_|gho_|ghu_|ghs_|ghr_)", re.IGNORECASE)

REMOVED_PREFIX = "# REMOVED: "


@dataclass(frozen=True)
class SecurityOptions:
    """
    安全扫描选项

    Attributes:
        strict: 启用严格检查
    """
    strict: bool = False


# ============================================================
# 分类函数
# ============================================================

def match_sensitive_keywords(key: str) -> list[tuple[str, str]]:
    """返回 key 命中的所有 (关键字, 问题类型)，按表中顺序"""
    lowered = key.lower()
    return [(keyword, severity) for keyword, severity in SENSITIVE_KEYS if keyword in lowered]


def is_sensitive_key(key: str) -> bool:
    return bool(match_sensitive_keywords(key))


def get_recommendation(key: str, value: str) -> str:
    """根据键名给出建议"""
    lowered = key.lower()
    if "password" in lowered:
        return "Use a strong, unique password with at least 12 characters"
    if "api_key" in lowered:
        return "Use a long, random API key (32+ characters)"
    if "secret" in lowered:
        return "Use a cryptographically secure random value"
    return "Ensure this value is secure and not committed to version control"


def _finding(
    raw: RawLine,
    key: str,
    value: str,
    classification: str,
    risk: RiskLevel,
    code: str,
    message: str,
    recommendation: str,
) -> SecurityFinding:
    return SecurityFinding(
        key=key,
        value=value,
        risk=risk,
        classification=classification,
        code=code,
        message=message,
        recommendation=recommendation,
        line=raw.number,
        line_content=raw.text.rstrip("\r"),
    )


def check_weak_values(raw: RawLine, key: str, value: str) -> list[SecurityFinding]:
    """弱值检查，与键是否敏感无关"""
    findings: list[SecurityFinding] = []

    if value.lower() in WEAK_PASSWORDS:
        findings.append(_finding(
            raw, key, value, "error", RiskLevel.HIGH, "WEAK_PASSWORD",
            f"Weak password detected: {value}",
            "Use a strong, unique password",
        ))

    if "api_key" in key.lower() and len(value) < MIN_API_KEY_LENGTH:
        findings.append(_finding(
            raw, key, value, "warning", RiskLevel.MEDIUM, "SHORT_API_KEY",
            f"Short API key detected (length: {len(value)})",
            f"Use API keys with at least {MIN_API_KEY_LENGTH} characters",
        ))

    if PREDICTABLE_USERNAME.match(value):
        findings.append(_finding(
            raw, key, value, "warning", RiskLevel.MEDIUM, "PREDICTABLE_USERNAME",
            f"Predictable username detected: {value}",
            "Use unique, non-predictable usernames",
        ))

    return findings


def _check_strict(raw: RawLine, key: str, value: str) -> list[SecurityFinding]:
    findings: list[SecurityFinding] = []
    lowered_value = value.lower()

    if lowered_value in EXAMPLE_VALUES:
        findings.append(_finding(
            raw, key, value, "warning", RiskLevel.MEDIUM, "DEFAULT_VALUE",
            f"Default/example value detected: {value}",
            "Replace with actual secure value",
        ))

    if value == "" and is_sensitive_key(key):
        findings.append(_finding(
            raw, key, value, "warning", RiskLevel.MEDIUM, "EMPTY_SENSITIVE_KEY",
            f"Empty sensitive key: {key}",
            "Set a secure value or remove if not needed",
        ))

    lowered_key = key.lower()
    if lowered_value in LOCAL_ADDRESSES and ("host" in lowered_key or "url" in lowered_key):
        findings.append(_finding(
            raw, key, value, "warning", RiskLevel.MEDIUM, "LOCAL_VALUE",
            f"Local development value in production: {value}",
            "Use production host/URL values",
        ))

    return findings


def scan_line(raw: RawLine, options: SecurityOptions) -> list[SecurityFinding]:
    """扫描单行"""
    if raw.is_blank_or_comment:
        return []
    parts = split_assignment(raw.text)
    if parts is None:
        return []
    key, value = parts

    findings: list[SecurityFinding] = [
        _finding(
            raw, key, value, severity, RiskLevel.from_severity(severity), "SENSITIVE_KEY",
            f"Sensitive key detected: {key}",
            get_recommendation(key, value),
        )
        for _keyword, severity in match_sensitive_keywords(key)
    ]
    findings.extend(check_weak_values(raw, key, value))
    if options.strict:
        findings.extend(_check_strict(raw, key, value))
    return findings


def _file_finding(
    classification: str,
    risk: RiskLevel,
    code: str,
    message: str,
    line_content: str,
    recommendation: str,
    fixable: bool = False,
    line: str = FILE_LEVEL,
) -> SecurityFinding:
    return SecurityFinding(
        key="",
        value="",
        risk=risk,
        classification=classification,
        code=code,
        message=message,
        recommendation=recommendation,
        line=line,
        line_content=line_content,
        fixable=fixable,
    )


def scan_file(content: str, options: SecurityOptions) -> list[SecurityFinding]:
    """文件级检查"""
    findings: list[SecurityFinding] = []

    if options.strict:
        findings.append(_file_finding(
            "info", RiskLevel.LOW, "FILE_PERMISSIONS",
            "Ensure .env file has restricted permissions (600 or 400)",
            "File permission check",
            "Set file permissions to 600 (owner read/write only)",
        ))

    if COMMENTED_SECRET.search(content):
        findings.append(_file_finding(
            "warning", RiskLevel.MEDIUM, "COMMENTED_SECRET",
            "Commented sensitive data detected",
            "Commented sensitive values",
            "Remove commented sensitive data",
            fixable=True,
        ))

    if SECRET_PREFIX_IN_COMMENT.search(content):
        findings.append(_file_finding(
            "error", RiskLevel.HIGH, "SECRET_IN_COMMENT",
            "Potential secret key pattern detected in comments",
            "Secret key in comment",
            "Remove any secret keys from comments",
        ))

    return findings


def scan(content: str, options: Optional[SecurityOptions] = None) -> list[SecurityFinding]:
    """
    扫描环境文件文本

    Returns:
        结果列表：先按行从上到下，再追加文件级结果
    """
    options = options or SecurityOptions()
    findings: list[SecurityFinding] = []
    for raw in iter_raw_lines(content):
        findings.extend(scan_line(raw, options))
    findings.extend(scan_file(content, options))
    return findings


def check_git_tracking(
    file_path: str,
    repo_root: Path,
    git_config: Optional[vcs.GitConfig] = None,
) -> list[SecurityFinding]:
    """
    检查文件在 Git 中的状态

    没有 .git 目录时返回空列表；git 无法执行时跳过跟踪检查。
    """
    findings: list[SecurityFinding] = []
    if not vcs.has_repository(repo_root):
        logger.debug(f"No git repository at {repo_root}, skipping git checks")
        return findings

    tracked = vcs.is_tracked(file_path, repo_root, git_config)
    if tracked:
        findings.append(_file_finding(
            "error", RiskLevel.CRITICAL, "GIT_TRACKED",
            f"Environment file is tracked by Git: {file_path}",
            "File is committed to version control",
            f"Remove from Git tracking: git rm --cached {file_path}",
            line=GIT_LEVEL,
        ))
    elif tracked is False:
        findings.append(_file_finding(
            "info", RiskLevel.NONE, "GIT_UNTRACKED",
            "Environment file is not tracked by Git (good)",
            "File is properly ignored",
            "Continue to keep this file out of version control",
            line=GIT_LEVEL,
        ))

    gitignore = vcs.read_gitignore(repo_root)
    if gitignore is not None and not vcs.is_mentioned_in_gitignore(gitignore, file_path):
        findings.append(_file_finding(
            "warning", RiskLevel.MEDIUM, "NOT_GITIGNORED",
            "Environment file not in .gitignore",
            "File may be accidentally committed",
            f"Add {file_path} to .gitignore",
            fixable=True,
            line=GIT_LEVEL,
        ))

    return findings


def filter_by_minimum_risk(
    findings: Iterable[SecurityFinding],
    minimum: "str | RiskLevel | None",
) -> list[SecurityFinding]:
    """保留风险等级不低于 minimum 的结果"""
    threshold = RiskLevel.parse(minimum).rank
    return [finding for finding in findings if finding.risk.rank >= threshold]


def apply_security_fixes(content: str, findings: Iterable[SecurityFinding]) -> str:
    """
    对可修复的结果执行一次修复

    目前只处理注释中的敏感赋值：在该行前加 "# REMOVED: "。
    .gitignore 的修复由调用方通过 vcs.add_to_gitignore 完成。
    """
    codes = {finding.code for finding in findings if finding.fixable}
    if "COMMENTED_SECRET" not in codes:
        return content

    fixed_lines: list[str] = []
    for raw in iter_raw_lines(content):
        line = raw.text
        if COMMENTED_SECRET_LINE.match(line.strip()):
            line = REMOVED_PREFIX + line
        fixed_lines.append(line)
    return "\n".join(fixed_lines)
