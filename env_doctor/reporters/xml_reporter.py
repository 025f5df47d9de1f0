"""
XML 报告器 - 输出扁平的 <issue> 列表
"""

import sys
import xml.etree.ElementTree as ET
from typing import TextIO

from env_doctor.core.models import Issue, SecurityFinding

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _child(parent: ET.Element, tag: str, text: str) -> None:
    ET.SubElement(parent, tag).text = text


class XmlReporter:
    """XML 报告器"""

    def __init__(self, output: TextIO | None = None):
        self.output = output or sys.stdout

    def _write(self, root: ET.Element) -> None:
        ET.indent(root, space="  ")
        print(XML_DECLARATION, file=self.output)
        print(ET.tostring(root, encoding="unicode"), file=self.output)

    def report_lint(self, issues: list[Issue], target: str) -> None:
        """生成 XML 格式 Lint 报告"""
        root = ET.Element("lint-results", {"file": target})
        for issue in issues:
            element = ET.SubElement(root, "issue", {
                "type": issue.severity,
                "line": str(issue.line),
                "rule": issue.rule,
                "code": issue.code,
                "fixable": _bool(issue.fixable),
            })
            _child(element, "message", issue.message)
            _child(element, "content", issue.line_content)
        self._write(root)

    def report_security(self, findings: list[SecurityFinding], target: str) -> None:
        """生成 XML 格式安全报告"""
        root = ET.Element("security-scan-results", {"file": target})
        for finding in findings:
            element = ET.SubElement(root, "issue", {
                "type": finding.classification,
                "risk": finding.risk.value,
                "line": str(finding.line),
                "code": finding.code,
                "fixable": _bool(finding.fixable),
            })
            _child(element, "message", finding.message)
            _child(element, "content", finding.line_content)
            _child(element, "recommendation", finding.recommendation)
        self._write(root)
