"""
核心扫描函数

在源代码中查找 env() / config() 调用，提取被引用的环境变量。
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from env_doctor.core.scanner.models import ScanResult, UsageRecord
from env_doctor.core.scanner.patterns import (
    CONFIG_CALL_PATTERN,
    ENV_CALL_PATTERN,
    config_key_to_env_var,
    is_env_related_config,
)
from env_doctor.filters import find_files

logger = logging.getLogger(__name__)

# 进度回调类型：(相对路径, 已扫描数, 总数)
ProgressCallback = Callable[[str, int, int], None]


@dataclass(frozen=True)
class ScanOptions:
    """
    扫描选项

    Attributes:
        check_config: 是否同时提取 config() 调用
    """
    check_config: bool = False


def find_line_number(content: str, search: str) -> int:
    """
    返回第一个包含 search 的行号 (1-based)，找不到返回 0

    注意：这是简单的子串查找，与正则匹配位置无关。同样的子串如果更早出现在
    无关的位置，会返回那个更早的行号。
    """
    for line_num, line in enumerate(content.split("\n"), 1):
        if search in line:
            return line_num
    return 0


def _matched_text(match) -> str:
    # 匹配可能跨行，只取第一行用于行号查找
    return match.group(0).split("\n", 1)[0]


def extract_env_calls(content: str, file_path: str) -> list[UsageRecord]:
    """从代码中提取 env('KEY') 调用"""
    return [
        UsageRecord(
            key=match.group(1),
            access_kind="env()",
            file=file_path,
            line=find_line_number(content, _matched_text(match)),
        )
        for match in ENV_CALL_PATTERN.finditer(content)
    ]


def extract_config_calls(content: str, file_path: str) -> list[UsageRecord]:
    """
    从代码中提取 config('a.b.c') 调用

    只保留与环境相关且在映射表中的配置路径，并翻译为环境变量名。
    """
    records: list[UsageRecord] = []
    for match in CONFIG_CALL_PATTERN.finditer(content):
        config_key = match.group(1)
        if not is_env_related_config(config_key):
            continue
        env_var = config_key_to_env_var(config_key)
        if env_var is None:
            continue
        records.append(UsageRecord(
            key=env_var,
            access_kind="config()",
            file=file_path,
            line=find_line_number(content, _matched_text(match)),
        ))
    return records


def extract_usages(
    file_contents: Iterable[tuple[str, str]],
    options: Optional[ScanOptions] = None,
) -> dict[str, list[UsageRecord]]:
    """
    从 (路径, 文本) 序列中提取所有使用记录，按 key 分组

    顺序：文件顺序，文件内先 env() 后 config()，各自按匹配顺序。
    """
    options = options or ScanOptions()
    result = ScanResult()
    for file_path, content in file_contents:
        _collect(result, file_path, content, options)
    return result.usages


def _collect(result: ScanResult, file_path: str, content: str, options: ScanOptions) -> None:
    for record in extract_env_calls(content, file_path):
        result.add(record)
    if options.check_config:
        for record in extract_config_calls(content, file_path):
            result.add(record)
    result.files_scanned += 1


def scan_project(
    root: Path,
    source_patterns: list[str],
    exclude_directories: list[str],
    options: Optional[ScanOptions] = None,
    on_file: Optional[ProgressCallback] = None,
) -> ScanResult:
    """扫描项目源文件"""
    options = options or ScanOptions()
    result = ScanResult()
    root = root.resolve()

    files = find_files(root, source_patterns, exclude_directories)
    total = len(files)
    logger.debug(f"Scanning {total} source files under {root}")

    for index, path in enumerate(files, 1):
        rel_path = path.relative_to(root).as_posix()
        try:
            content = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.warning(f"Failed to read {rel_path}: {e}")
            continue

        _collect(result, rel_path, content, options)
        if on_file:
            on_file(rel_path, index, total)

    return result
