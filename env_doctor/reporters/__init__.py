"""
Reporters Layer - 报告层

包含 Rich 终端报告器、JSON 报告器和 XML 报告器。
"""

from env_doctor.reporters.base import ComparedFile, Reporter
from env_doctor.reporters.rich_reporter import RichReporter
from env_doctor.reporters.json_reporter import JsonReporter, export_findings
from env_doctor.reporters.xml_reporter import XmlReporter

__all__ = [
    "ComparedFile",
    "Reporter",
    "RichReporter",
    "JsonReporter",
    "XmlReporter",
    "export_findings",
]
