"""
环境文件 Lint

逐行检查语法、格式与命名约定，再对整个文件做一次检查：

行级检查（仅针对非空、非注释行，按顺序执行）：
1. syntax: 缺少 =（其余行级检查跳过；只按第一个 = 切分，值里的 = 不算错）
2. syntax: 键为空
3. format: = 两侧有空格
4. format: 含空格的值没有加引号
5. format: 值为空
6. convention: 键不是大写
7. convention: 键用了 kebab-case
8. security: 敏感键（仅 strict 模式）

文件级检查：
- syntax: 重复的键（定位到重复出现的那一行）
- format: 行尾空白
- format: 混用 CRLF 和 LF
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from env_doctor.core.fixer import format_line, needs_quotes, uppercase_key
from env_doctor.core.models import FILE_LEVEL, Issue, RawLine
from env_doctor.core.parser import iter_raw_lines, split_assignment


RULE_CATEGORIES: tuple[str, ...] = ("syntax", "format", "security", "convention")
DEFAULT_RULES: frozenset[str] = frozenset({"syntax", "format", "convention"})

# strict 模式下视为敏感的键名片段
LINT_SENSITIVE_KEYWORDS: tuple[str, ...] = ("password", "secret", "key", "token", "api_key")

SPACES_AROUND_EQUALS = re.compile(r"\s+=\s+")
TRAILING_WHITESPACE = re.compile(r"[ \t]+\r?$", re.MULTILINE)
BARE_LF = re.compile(r"(?<!\r)\n")


def parse_rules(rules: Optional[str]) -> frozenset[str]:
    """
    解析逗号分隔的规则类别

    空值返回默认规则集，未知的类别名直接丢弃。
    """
    if not rules or not rules.strip():
        return DEFAULT_RULES
    requested = {rule.strip().lower() for rule in rules.split(",")}
    return frozenset(rule for rule in RULE_CATEGORIES if rule in requested)


@dataclass(frozen=True)
class LintOptions:
    """
    Lint 选项

    Attributes:
        strict: 启用严格模式（敏感键检查）
        ignore_empty_values: 不报告空值警告
        enabled_rules: 启用的规则类别
    """
    strict: bool = False
    ignore_empty_values: bool = False
    enabled_rules: frozenset[str] = field(default_factory=lambda: DEFAULT_RULES)

    def enabled(self, rule: str) -> bool:
        return rule in self.enabled_rules


def _issue(
    raw: RawLine,
    severity: str,
    rule: str,
    code: str,
    message: str,
    fixable: bool = False,
) -> Issue:
    return Issue(
        severity=severity,
        line=raw.number,
        message=message,
        line_content=raw.text.rstrip("\r"),
        rule=rule,
        code=code,
        fixable=fixable,
    )


def lint_line(raw: RawLine, options: LintOptions) -> list[Issue]:
    """检查单行"""
    issues: list[Issue] = []
    trimmed = raw.stripped
    if not trimmed or trimmed.startswith("#"):
        return issues

    parts = split_assignment(trimmed)
    if parts is None:
        if options.enabled("syntax"):
            issues.append(_issue(raw, "error", "syntax", "MISSING_EQUALS", "Missing equals sign (=)"))
        # 没有 = 的行无法取得键值，其余检查没有意义
        return issues

    key, value = parts

    if options.enabled("syntax") and not key:
        issues.append(_issue(raw, "error", "syntax", "EMPTY_KEY", "Empty key"))

    if options.enabled("format"):
        if SPACES_AROUND_EQUALS.search(raw.text):
            issues.append(_issue(
                raw, "warning", "format", "SPACES_AROUND_EQUALS",
                "Spaces around equals sign (recommended: no spaces)", fixable=True,
            ))

        if needs_quotes(value):
            issues.append(_issue(
                raw, "warning", "format", "UNQUOTED_SPACES",
                "Value with spaces should be quoted", fixable=True,
            ))

        if not options.ignore_empty_values and value == "":
            issues.append(_issue(
                raw, "warning", "format", "EMPTY_VALUE",
                "Empty value (consider adding a default or comment)",
            ))

    if options.enabled("convention"):
        if key != key.upper():
            issues.append(_issue(
                raw, "info", "convention", "KEY_NOT_UPPERCASE",
                "Key should be uppercase (Laravel convention)", fixable=True,
            ))

        if "-" in key and "_" not in key:
            issues.append(_issue(
                raw, "info", "convention", "KEBAB_CASE_KEY",
                "Consider using snake_case instead of kebab-case for keys",
            ))

    if options.strict and options.enabled("security"):
        lowered = key.lower()
        if value != "" and any(keyword in lowered for keyword in LINT_SENSITIVE_KEYWORDS):
            issues.append(_issue(
                raw, "warning", "security", "SENSITIVE_KEY",
                "Sensitive key detected - ensure this is not committed to version control",
            ))

    return issues


def lint_file(content: str, options: LintOptions) -> list[Issue]:
    """文件级检查"""
    issues: list[Issue] = []

    if options.enabled("syntax"):
        first_seen: dict[str, int] = {}
        for raw in iter_raw_lines(content):
            if raw.is_blank_or_comment:
                continue
            parts = split_assignment(raw.text)
            if parts is None:
                continue
            key = parts[0]
            if key in first_seen:
                issues.append(_issue(
                    raw, "error", "syntax", "DUPLICATE_KEY",
                    f"Duplicate key: {key} (first defined on line {first_seen[key]})",
                ))
            else:
                first_seen[key] = raw.number

    if options.enabled("format"):
        if TRAILING_WHITESPACE.search(content):
            issues.append(Issue(
                severity="warning",
                line=FILE_LEVEL,
                message="File contains trailing whitespace",
                line_content="Trailing whitespace detected",
                rule="format",
                code="TRAILING_WHITESPACE",
                fixable=True,
            ))

        if "\r\n" in content and BARE_LF.search(content):
            issues.append(Issue(
                severity="warning",
                line=FILE_LEVEL,
                message="Mixed line endings detected (CRLF and LF)",
                line_content="Inconsistent line endings",
                rule="format",
                code="MIXED_LINE_ENDINGS",
                fixable=True,
            ))

    return issues


def lint(content: str, options: Optional[LintOptions] = None) -> list[Issue]:
    """
    检查环境文件文本

    Args:
        content: 文件原始文本
        options: Lint 选项

    Returns:
        问题列表：先按行从上到下，再追加文件级问题
    """
    options = options or LintOptions()
    issues: list[Issue] = []
    for raw in iter_raw_lines(content):
        issues.extend(lint_line(raw, options))
    issues.extend(lint_file(content, options))
    return issues


def apply_lint_fixes(content: str, issues: list[Issue]) -> str:
    """
    对可修复的问题执行一次修复

    行级：format 类去空格、加引号；convention 类键转大写。
    文件级：去除行尾空白、统一为 LF。
    """
    fixable_by_line: dict[int, list[Issue]] = {}
    file_codes: set[str] = set()
    for issue in issues:
        if not issue.fixable:
            continue
        if issue.is_file_level:
            file_codes.add(issue.code)
        else:
            fixable_by_line.setdefault(issue.line, []).append(issue)

    fixed_lines: list[str] = []
    for raw in iter_raw_lines(content):
        line_issues = fixable_by_line.get(raw.number, [])
        if not line_issues:
            fixed_lines.append(raw.text)
            continue

        eol = "\r" if raw.text.endswith("\r") else ""
        line = raw.text[:-1] if eol else raw.text
        for issue in line_issues:
            if issue.rule == "format":
                line = format_line(line)
            elif issue.rule == "convention":
                line = uppercase_key(line)
        fixed_lines.append(line + eol)

    fixed = "\n".join(fixed_lines)

    if "MIXED_LINE_ENDINGS" in file_codes:
        fixed = fixed.replace("\r\n", "\n")
    if "TRAILING_WHITESPACE" in file_codes:
        fixed = TRAILING_WHITESPACE.sub(lambda m: "\r" if m.group(0).endswith("\r") else "", fixed)

    return fixed
