"""
环境文件修复

包含两部分：
1. 单行变换（去除 = 两侧空格、给含空格的值加引号、键转大写），
   lint --fix 与 fix 命令共用
2. fix 命令：补齐缺失变量、删除多余变量、修复格式

所有修复都是单次遍历，不会反复执行直到收敛。
"""

import logging
import re
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from env_doctor.core.parser import EnvMapping, iter_raw_lines, split_assignment

logger = logging.getLogger(__name__)

# 确认回调：传入提示语，返回是否执行
ConfirmCallback = Callable[[str], bool]

ASSIGNMENT_PATTERN = re.compile(r"^([^=]+)=(.*)$")
QUOTED_VALUE_PATTERN = re.compile(r"""^(["']).*\1$""")

BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


# ============================================================
# 单行变换
# ============================================================

def is_quoted(value: str) -> bool:
    """值是否被一对相同的引号完整包裹"""
    return len(value) >= 2 and QUOTED_VALUE_PATTERN.match(value) is not None


def needs_quotes(value: str) -> bool:
    return " " in value and not is_quoted(value)


def collapse_spacing(line: str) -> str:
    """KEY = value -> KEY=value"""
    match = ASSIGNMENT_PATTERN.match(line)
    if not match:
        return line
    return f"{match.group(1).strip()}={match.group(2).strip()}"


def quote_value(line: str) -> str:
    """KEY=a b -> KEY="a b" """
    match = ASSIGNMENT_PATTERN.match(line)
    if not match:
        return line
    key, value = match.group(1), match.group(2)
    if needs_quotes(value):
        return f'{key}="{value}"'
    return line


def uppercase_key(line: str) -> str:
    """key=value -> KEY=value"""
    match = ASSIGNMENT_PATTERN.match(line)
    if not match:
        return line
    return f"{match.group(1).strip().upper()}={match.group(2)}"


def format_line(line: str) -> str:
    """格式修复：先去空格，再加引号"""
    return quote_value(collapse_spacing(line))


# ============================================================
# fix 命令
# ============================================================

@dataclass(frozen=True)
class FixOptions:
    """
    fix 命令选项

    Attributes:
        format: 修复格式问题（空格、引号）
        add_missing: 从示例文件补齐缺失变量
        remove_unused: 删除示例文件中没有的变量
        interactive: 每项修改前询问确认
        dry_run: 只计算修改，不写文件
        backup: 写文件前创建备份
    """
    format: bool = False
    add_missing: bool = False
    remove_unused: bool = False
    interactive: bool = False
    dry_run: bool = False
    backup: bool = False

    def with_defaults(self) -> "FixOptions":
        """三个修复动作都没指定时，默认修复格式并补齐缺失变量"""
        if self.format or self.add_missing or self.remove_unused:
            return self
        return FixOptions(
            format=True,
            add_missing=True,
            remove_unused=False,
            interactive=self.interactive,
            dry_run=self.dry_run,
            backup=self.backup,
        )


@dataclass
class FixResult:
    """
    修复结果

    Attributes:
        content: 修复后的文本
        original: 原始文本
        changes: 已执行的修改说明
        missing: 示例文件中有、环境文件中没有的变量
        unused: 环境文件中有、示例文件中没有的变量
    """
    content: str
    original: str
    changes: list[str] = field(default_factory=list)
    missing: dict[str, str] = field(default_factory=dict)
    unused: dict[str, str] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return self.content != self.original


def _confirmed(confirm: Optional[ConfirmCallback], prompt: str) -> bool:
    return confirm is None or confirm(prompt)


def add_missing_variables(
    content: str,
    missing: EnvMapping,
    confirm: Optional[ConfirmCallback] = None,
) -> tuple[str, list[str]]:
    """把缺失变量以 KEY=value 追加到文件末尾"""
    changes: list[str] = []
    added: list[str] = []
    for key, value in missing.items():
        if not _confirmed(confirm, f"Add missing variable: {key} = {value}?"):
            continue
        added.append(f"{key}={value}")
        changes.append(f"Added missing variable: {key}")

    if not added:
        return content, changes

    # 追加的行沿用文件已有的 CRLF
    newline = "\r\n" if "\r\n" in content else "\n"
    if content and not content.endswith("\n"):
        content += newline
    return content + newline.join(added) + newline, changes


def remove_unused_variables(
    content: str,
    unused: EnvMapping,
    confirm: Optional[ConfirmCallback] = None,
) -> tuple[str, list[str]]:
    """删除键在 unused 中的赋值行，空行和注释保留"""
    changes: list[str] = []
    kept: list[str] = []
    for raw in iter_raw_lines(content):
        parts = None if raw.is_blank_or_comment else split_assignment(raw.text)
        if parts is not None and parts[0] in unused:
            key = parts[0]
            if _confirmed(confirm, f"Remove unused variable: {key}?"):
                changes.append(f"Removed unused variable: {key}")
                continue
        kept.append(raw.text)
    return "\n".join(kept), changes


def fix_formatting(content: str) -> tuple[str, list[str]]:
    """修复每个赋值行的空格和引号"""
    changes: list[str] = []
    fixed_lines: list[str] = []
    for raw in iter_raw_lines(content):
        if raw.is_blank_or_comment or "=" not in raw.text:
            fixed_lines.append(raw.text)
            continue

        # CRLF 文件按 \n 切分后行尾残留 \r，修复时保留
        eol = "\r" if raw.text.endswith("\r") else ""
        line = raw.text[:-1] if eol else raw.text

        spaced = collapse_spacing(line)
        if spaced != line:
            changes.append(f"Fixed spacing: {line} → {spaced}")

        quoted = quote_value(spaced)
        if quoted != spaced:
            changes.append(f"Added quotes: {spaced} → {quoted}")

        fixed_lines.append(quoted + eol)
    return "\n".join(fixed_lines), changes


def fix_env_content(
    content: str,
    example_vars: EnvMapping,
    env_vars: EnvMapping,
    options: FixOptions,
    confirm: Optional[ConfirmCallback] = None,
) -> FixResult:
    """
    按选项依次执行：补齐缺失 -> 删除多余 -> 修复格式

    Args:
        content: 环境文件原始文本
        example_vars: 示例文件解析结果
        env_vars: 环境文件解析结果
        options: 修复选项（应已调用 with_defaults）
        confirm: interactive 模式下的确认回调

    Returns:
        FixResult
    """
    if not options.interactive:
        confirm = None

    result = FixResult(
        content=content,
        original=content,
        missing={k: v for k, v in example_vars.items() if k not in env_vars},
        unused={k: v for k, v in env_vars.items() if k not in example_vars},
    )

    if options.add_missing and result.missing:
        result.content, changes = add_missing_variables(result.content, result.missing, confirm)
        result.changes.extend(changes)

    if options.remove_unused and result.unused:
        result.content, changes = remove_unused_variables(result.content, result.unused, confirm)
        result.changes.extend(changes)

    if options.format:
        result.content, changes = fix_formatting(result.content)
        result.changes.extend(changes)

    return result


def backup_file(path: Path, now: Optional[datetime] = None) -> Path:
    """复制 path 到 <path>.backup.<时间戳>"""
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    backup_path = path.with_name(f"{path.name}.backup.{stamp}")
    shutil.copy2(path, backup_path)
    logger.debug(f"Backup created: {backup_path}")
    return backup_path
