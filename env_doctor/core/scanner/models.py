"""
数据模型定义

扫描器使用的数据类。
"""

import json
from dataclasses import dataclass, field, asdict
from typing import Literal

AccessKind = Literal["env()", "config()"]


@dataclass(frozen=True)
class UsageRecord:
    """
    环境变量使用记录

    Attributes:
        key: 环境变量名称
        access_kind: 访问方式 (env() 直接读取, config() 通过配置读取)
        file: 源文件相对路径
        line: 行号 (1-based，找不到时为 0)
    """
    key: str
    access_kind: AccessKind
    file: str
    line: int

    def describe(self) -> str:
        return f"{self.access_kind} in {self.file}:{self.line}"


@dataclass
class ScanResult:
    """
    扫描结果

    Attributes:
        usages: key -> 所有使用记录（按文件扫描顺序、文件内匹配顺序）
        files_scanned: 已扫描的文件数
    """
    usages: dict[str, list[UsageRecord]] = field(default_factory=dict)
    files_scanned: int = 0

    def add(self, record: UsageRecord) -> None:
        self.usages.setdefault(record.key, []).append(record)

    def to_json(self) -> str:
        """序列化为 JSON 字符串"""
        data = {
            "files_scanned": self.files_scanned,
            "usages": {
                key: [asdict(record) for record in records]
                for key, records in self.usages.items()
            },
        }
        return json.dumps(data, ensure_ascii=False, indent=2)
