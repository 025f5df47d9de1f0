"""
JSON 报告器 - 输出 JSON 格式报告
"""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

from env_doctor.core.audit import AuditResult
from env_doctor.core.models import Issue, RiskLevel, SecurityFinding, count_by_severity
from env_doctor.reporters.base import ComparedFile

EXPORT_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


def count_by_risk(findings: list[SecurityFinding]) -> dict[str, int]:
    counts = {level.value: 0 for level in sorted(RiskLevel, key=lambda r: r.rank, reverse=True)}
    for finding in findings:
        counts[finding.risk.value] += 1
    return counts


class JsonReporter:
    """JSON 报告器"""

    def __init__(self, output: TextIO | None = None):
        self.output = output or sys.stdout

    def _write(self, data: dict[str, Any]) -> None:
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
        print(json_str, file=self.output)

    def report_lint(self, issues: list[Issue], target: str) -> None:
        """生成 JSON 格式 Lint 报告"""
        counts = count_by_severity(issues)
        self._write({
            "target": target,
            "issues": [issue.to_dict() for issue in issues],
            "summary": {
                "total_issues": len(issues),
                "errors": counts["error"],
                "warnings": counts["warning"],
                "info": counts["info"],
                "passed": not issues,
            },
        })

    def report_security(self, findings: list[SecurityFinding], target: str) -> None:
        """生成 JSON 格式安全报告"""
        self._write({
            "target": target,
            "findings": [finding.to_dict() for finding in findings],
            "summary": {
                "total_issues": len(findings),
                **count_by_risk(findings),
                "passed": not findings,
            },
        })

    def report_compare(self, compared: list[ComparedFile]) -> None:
        """生成 JSON 格式比较报告"""
        self._write({
            "comparisons": [
                {
                    "source": item.source,
                    "target": item.target,
                    **item.diff.to_dict(),
                    "summary": {
                        "source_keys": item.source_count,
                        "target_keys": item.target_count,
                        "missing": len(item.diff.missing_in_target),
                        "extra": len(item.diff.extra_in_target),
                        "different": len(item.diff.changed_values),
                    },
                }
                for item in compared
            ],
        })

    def report_audit(self, result: AuditResult, example_path: str, env_path: str) -> None:
        """生成 JSON 格式审计报告"""
        self._write({
            "example_file": example_path,
            "env_file": env_path,
            "used": {
                key: [record.describe() for record in records]
                for key, records in result.usages.items()
            },
            "missing_in_example": result.missing_in_example,
            "missing_in_env": result.missing_in_env,
            "unused_in_example": result.unused_in_example,
            "unused_in_env": result.unused_in_env,
        })


def export_findings(
    findings: list[SecurityFinding],
    file_scanned: str,
    directory: Path,
    now: datetime | None = None,
) -> Path:
    """把安全扫描结果写入 security-scan-<时间戳>.json"""
    now = now or datetime.now().astimezone()
    export_path = directory / f"security-scan-{now.strftime(EXPORT_TIMESTAMP_FORMAT)}.json"
    data = {
        "scan_date": now.isoformat(),
        "file_scanned": file_scanned,
        "total_issues": len(findings),
        "issues": [finding.to_dict() for finding in findings],
    }
    export_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return export_path
