"""
环境文件解析器

将 .env 文本解析为有序的 key -> value 映射。

规则：
1. 去掉首尾空白后为空的行跳过
2. 以 # 开头的注释行跳过
3. 不含 = 的行视为格式错误，静默跳过（由 linter 报告）
4. 只按第一个 = 切分，值中可以再包含 =
5. 值一律是字符串，不去引号、不做类型转换
6. 重复的键后出现的覆盖先出现的
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

from env_doctor.core.models import RawLine
from env_doctor.errors import EnvFileNotFoundError

logger = logging.getLogger(__name__)

EnvMapping = dict[str, str]


def iter_raw_lines(content: str) -> Iterator[RawLine]:
    """按 \\n 切分文本，逐行产出带行号的 RawLine"""
    for number, text in enumerate(content.split("\n"), 1):
        yield RawLine(number=number, text=text)


def split_assignment(line: str) -> Optional[tuple[str, str]]:
    """
    按第一个 = 切分一行，返回去除空白后的 (key, value)

    不含 = 时返回 None。key 可能为空字符串，由调用方决定如何处理。
    """
    stripped = line.strip()
    if "=" not in stripped:
        return None
    key, value = stripped.split("=", 1)
    return key.strip(), value.strip()


def parse_env(content: str) -> EnvMapping:
    """解析 .env 文本内容"""
    env_vars: EnvMapping = {}
    for raw in iter_raw_lines(content):
        if raw.is_blank_or_comment:
            continue
        parts = split_assignment(raw.text)
        if parts is None:
            continue
        key, value = parts
        if key:
            env_vars[key] = value
    return env_vars


def read_env_file(path: Path | str, label: str = "File") -> str:
    """
    读取环境文件内容（保留原始换行符，CRLF 不会被转换为 LF）

    Args:
        path: 文件路径
        label: 错误信息中使用的文件描述 (如 "Example file")

    Raises:
        EnvFileNotFoundError: 文件不存在
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise EnvFileNotFoundError(path, label)
    with open(file_path, encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


def write_env_file(path: Path | str, content: str) -> None:
    """原样写回环境文件，不做换行符转换"""
    Path(path).write_text(content, encoding="utf-8", newline="")


def parse_env_file(path: Path | str, label: str = "File") -> EnvMapping:
    """读取并解析环境文件"""
    env_vars = parse_env(read_env_file(path, label))
    logger.debug(f"Parsed {len(env_vars)} keys from {path}")
    return env_vars
