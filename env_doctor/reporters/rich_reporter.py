"""
Rich 终端报告器 - 使用 Rich 库输出彩色终端格式
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from env_doctor.core.audit import AuditResult
from env_doctor.core.models import (
    FILE_LEVEL,
    GIT_LEVEL,
    Issue,
    SecurityFinding,
    count_by_severity,
)
from env_doctor.reporters.base import ComparedFile
from env_doctor.reporters.json_reporter import count_by_risk


SEVERITY_STYLES = {
    "error": "red",
    "warning": "yellow",
    "info": "cyan",
}

RISK_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "cyan",
    "none": "green",
}


def _location(line: int | str) -> str:
    if line == FILE_LEVEL:
        return "FILE"
    if line == GIT_LEVEL:
        return "GIT"
    return f"Line {line}"


class RichReporter:
    """Rich 终端报告器"""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    # ------------------------------------------------------------
    # lint
    # ------------------------------------------------------------

    def report_lint(self, issues: list[Issue], target: str) -> None:
        """生成 Rich 格式 Lint 报告"""
        if not issues:
            self.console.print("[green]✅ No issues found! Your environment file is clean.[/green]")
            return

        counts = count_by_severity(issues)
        self.console.print(f"Found {len(issues)} issues:")
        self.console.print(f"  Errors: [red]{counts['error']}[/red]")
        self.console.print(f"  Warnings: [yellow]{counts['warning']}[/yellow]")
        self.console.print(f"  Info: [cyan]{counts['info']}[/cyan]")
        self.console.print()

        for issue in issues:
            style = SEVERITY_STYLES.get(issue.severity, "white")
            fixable = " \\[FIXABLE]" if issue.fixable else ""
            self.console.print(
                f"[{style}]\\[{issue.severity.upper()}][/{style}]{fixable} "
                f"{_location(issue.line)}: {escape(issue.message)}"
            )
            if not issue.is_file_level:
                self.console.print(f"  [dim]{escape(issue.line_content)}[/dim]")
            self.console.print()

    # ------------------------------------------------------------
    # security
    # ------------------------------------------------------------

    def report_security(self, findings: list[SecurityFinding], target: str) -> None:
        """生成 Rich 格式安全报告"""
        if not findings:
            self.console.print("[green]✅ No security issues found! Your environment file is secure.[/green]")
            return

        counts = count_by_risk(findings)
        table = Table(title="🔍 Security Scan Results", show_header=True, header_style="bold cyan", box=None)
        table.add_column("Risk", width=10)
        table.add_column("Count", justify="right", width=6)
        for risk in ("critical", "high", "medium", "low"):
            table.add_row(f"[{RISK_STYLES[risk]}]{risk.capitalize()}[/{RISK_STYLES[risk]}]", str(counts[risk]))
        self.console.print(table)
        self.console.print()

        for finding in findings:
            style = RISK_STYLES.get(finding.risk.value, "white")
            fixable = " \\[FIXABLE]" if finding.fixable else ""
            self.console.print(
                f"[{style}]\\[{finding.risk.value.upper()}][/{style}]{fixable} "
                f"{finding.classification.upper()} - {_location(finding.line)}: {escape(finding.message)}"
            )
            if isinstance(finding.line, int):
                self.console.print(f"  [dim]{escape(finding.line_content)}[/dim]")
            self.console.print(f"  💡 Recommendation: {escape(finding.recommendation)}")
            self.console.print()

    # ------------------------------------------------------------
    # compare
    # ------------------------------------------------------------

    def report_compare(self, compared: list[ComparedFile]) -> None:
        """生成 Rich 格式比较报告"""
        for index, item in enumerate(compared):
            if len(compared) > 1:
                if index:
                    self.console.print()
                self.console.rule(f"File: {escape(item.target)}")
            self._print_diff(item)

    def _print_key_list(self, title: str, keys: list[str] | tuple[str, ...]) -> None:
        self.console.print(f"[yellow]{escape(title)}[/yellow]")
        for key in keys:
            self.console.print(f"  - {escape(key)}")
        self.console.print()

    def _print_diff(self, item: ComparedFile) -> None:
        diff = item.diff
        source, target = item.source, item.target

        if diff.missing_in_target:
            self._print_key_list(f"Missing in {target} (present in {source}):", diff.missing_in_target)

        if diff.extra_in_target:
            self._print_key_list(f"Extra in {target} (not in {source}):", diff.extra_in_target)

        if diff.changed_values:
            self.console.print(f"[yellow]Different values between {escape(source)} and {escape(target)}:[/yellow]")
            for key, (source_value, target_value) in diff.changed_values.items():
                self.console.print(f"  {escape(key)}:")
                self.console.print(f"    {escape(source)}: {escape(source_value)}")
                self.console.print(f"    {escape(target)}: {escape(target_value)}")
            self.console.print()

        summary = (
            f"Total keys in {escape(source)}: {item.source_count}\n"
            f"Total keys in {escape(target)}: {item.target_count}\n"
            f"Missing keys: {len(diff.missing_in_target)}\n"
            f"Extra keys: {len(diff.extra_in_target)}\n"
            f"Different values: {len(diff.changed_values)}"
        )
        color = "yellow" if diff.has_key_drift else "green"
        self.console.print(Panel(summary, title="[bold]Summary[/bold]", border_style=color))

    # ------------------------------------------------------------
    # audit
    # ------------------------------------------------------------

    def report_audit(
        self,
        result: AuditResult,
        example_path: str,
        env_path: str,
        detailed: bool = False,
    ) -> None:
        """生成 Rich 格式审计报告"""
        self.console.print()
        self.console.rule("Environment Variable Usage Analysis")

        sections = [
            (f"Environment variables used in code but missing in {example_path}:", result.missing_in_example, "yellow", True),
            (f"Environment variables used in code but missing in {env_path}:", result.missing_in_env, "yellow", True),
            (f"Environment variables defined in {example_path} but not used in code:", result.unused_in_example, "cyan", False),
            (f"Environment variables defined in {env_path} but not used in code:", result.unused_in_env, "cyan", False),
        ]
        for title, keys, style, show_usages in sections:
            if not keys:
                continue
            self.console.print(f"[{style}]{escape(title)}[/{style}]")
            for key in keys:
                self.console.print(f"  - {escape(key)}")
                if detailed and show_usages:
                    for record in result.usages.get(key, []):
                        self.console.print(f"    [dim]{escape(record.describe())}[/dim]")
            self.console.print()

        summary = (
            f"Total environment variables used in code: {len(result.used_keys)}\n"
            f"Total variables defined in {escape(example_path)}: {result.example_count}\n"
            f"Total variables defined in {escape(env_path)}: {result.env_count}\n"
            f"Missing in {escape(example_path)}: {len(result.missing_in_example)}\n"
            f"Missing in {escape(env_path)}: {len(result.missing_in_env)}\n"
            f"Unused in {escape(example_path)}: {len(result.unused_in_example)}\n"
            f"Unused in {escape(env_path)}: {len(result.unused_in_env)}"
        )
        color = "yellow" if result.has_missing else "green"
        self.console.print(Panel(summary, title="[bold]Summary[/bold]", border_style=color))
