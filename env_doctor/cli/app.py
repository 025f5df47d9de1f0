"""
CLI 入口模块 - 使用 Typer 构建命令行界面

命令：
- compare: 比较示例文件与环境文件
- audit: 审计代码中的环境变量使用
- fix: 自动修复缺失变量与格式问题
- lint: 检查语法、格式和命名约定
- security: 扫描敏感数据与安全隐患
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, Progress, TextColumn

from env_doctor.config import DoctorConfig, load_config
from env_doctor.core import (
    FixOptions,
    LintOptions,
    ScanOptions,
    SecurityOptions,
    apply_lint_fixes,
    apply_security_fixes,
    audit_usage,
    backup_file,
    check_git_tracking,
    diff_env,
    filter_by_minimum_risk,
    fix_env_content,
    lint,
    parse_env,
    parse_env_file,
    parse_rules,
    read_env_file,
    scan,
    scan_project,
    write_env_file,
)
from env_doctor.core.vcs import add_to_gitignore
from env_doctor.errors import EnvDoctorError
from env_doctor.filters import find_files
from env_doctor.reporters import (
    ComparedFile,
    JsonReporter,
    Reporter,
    RichReporter,
    XmlReporter,
    export_findings,
)

# 创建 Typer 应用实例
app = typer.Typer(
    name="env-doctor",
    help="env-doctor: Diagnostics for .env files (compare, audit, lint, security, fix).",
    add_completion=False,
)

# Rich Console 用于输出
console = Console()

logger = logging.getLogger("env_doctor")

OUTPUT_FORMATS = ("text", "json", "xml")


@dataclass
class AppState:
    """全局选项"""
    root: Path
    config: DoctorConfig
    verbose: bool = False

    def resolve(self, path: str) -> Path:
        """相对路径按项目根目录解析"""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.root / candidate

    def display(self, path: Path) -> str:
        """用于输出的路径（尽量显示为相对路径）"""
        try:
            return path.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return str(path)


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def _state(ctx: typer.Context) -> AppState:
    return ctx.obj


def _check_format(format: str, allowed: tuple[str, ...]) -> str:
    format = format.lower()
    if format not in allowed:
        _fail(f"Unknown format '{format}', expected one of: {', '.join(allowed)}")
    return format


def _get_reporter(format: str) -> Reporter:
    if format == "json":
        return JsonReporter()
    if format == "xml":
        return XmlReporter()
    return RichReporter(console)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    root: str = typer.Option(
        ".",
        "--root",
        "-r",
        help="Project root (config, file discovery and git checks)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """Diagnose environment files."""
    _setup_logging(verbose)
    root_path = Path(root)
    if not root_path.is_dir():
        _fail(f"Path is not a directory: {root}")
    try:
        config = load_config(root_path)
    except EnvDoctorError as e:
        _fail(str(e))
    ctx.obj = AppState(root=root_path, config=config, verbose=verbose)


# ============================================================
# compare
# ============================================================

@app.command()
def compare(
    ctx: typer.Context,
    example: Optional[str] = typer.Option(None, "--example", help="Path to the example env file (default: .env.example)"),
    env: Optional[str] = typer.Option(None, "--env", help="Path to the main env file (default: .env)"),
    all_files: bool = typer.Option(False, "--all", help="Compare all env files in the project"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: text (default) or json"),
) -> None:
    """
    Compare environment files and show differences.

    Examples:
        env-doctor compare
        env-doctor compare --example .env.example --env .env.staging
        env-doctor compare --all --format json
    """
    state = _state(ctx)
    format = _check_format(format, ("text", "json"))
    example_path = state.resolve(example or state.config.example_file)

    try:
        example_vars = parse_env_file(example_path, "Example file")
        if all_files:
            targets = [
                path for path in find_files(state.root, state.config.file_patterns, state.config.exclude_directories)
                if path.resolve() != example_path.resolve()
            ]
        else:
            targets = [state.resolve(env or state.config.env_file)]
            read_env_file(targets[0], "Environment file")
    except EnvDoctorError as e:
        _fail(str(e))

    example_label = state.display(example_path)
    if format == "text":
        if all_files:
            console.print(f"[green]Comparing all environment files with {escape(example_label)}[/green]")
        else:
            console.print(f"[green]Comparing {escape(example_label)} with {escape(state.display(targets[0]))}[/green]")
        console.print()

    if not targets:
        if format == "text":
            console.print("[yellow]No environment files found to compare.[/yellow]")
        else:
            JsonReporter().report_compare([])
        raise typer.Exit(0)

    compared: list[ComparedFile] = []
    for target in targets:
        env_vars = parse_env(read_env_file(target))
        compared.append(ComparedFile(
            source=example_label,
            target=state.display(target),
            source_count=len(example_vars),
            target_count=len(env_vars),
            diff=diff_env(example_vars, env_vars),
        ))

    if format == "json":
        JsonReporter().report_compare(compared)
    else:
        RichReporter(console).report_compare(compared)

    if any(item.diff.has_key_drift for item in compared):
        raise typer.Exit(1)
    raise typer.Exit(0)


# ============================================================
# audit
# ============================================================

@app.command()
def audit(
    ctx: typer.Context,
    example: Optional[str] = typer.Option(None, "--example", help="Path to the example env file (default: .env.example)"),
    env: Optional[str] = typer.Option(None, "--env", help="Path to the main env file (default: .env)"),
    config: bool = typer.Option(False, "--config", help="Also check config() calls for environment usage"),
    detailed: bool = typer.Option(False, "--detailed", help="Show detailed file locations for each usage"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: text (default) or json"),
) -> None:
    """
    Audit the project for environment variable usage and validate against env files.

    Examples:
        env-doctor audit
        env-doctor audit --config --detailed
    """
    state = _state(ctx)
    format = _check_format(format, ("text", "json"))
    example_path = state.resolve(example or state.config.example_file)
    env_path = state.resolve(env or state.config.env_file)

    try:
        example_vars = parse_env_file(example_path, "Example file")
    except EnvDoctorError as e:
        _fail(str(e))
    env_vars = parse_env_file(env_path) if env_path.is_file() else {}

    options = ScanOptions(check_config=config)
    if format == "text":
        console.print("[green]Auditing environment variable usage in the project...[/green]")
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Scanning project files", total=None)

            def on_file(rel_path: str, index: int, total: int) -> None:
                progress.update(task, completed=index, total=total)
                logger.debug(f"Scanned {rel_path}")

            scan_result = scan_project(
                state.root,
                state.config.source_patterns,
                state.config.exclude_directories,
                options,
                on_file=on_file,
            )
        console.print(f"[dim]Scanned {scan_result.files_scanned} files[/dim]")
    else:
        scan_result = scan_project(
            state.root,
            state.config.source_patterns,
            state.config.exclude_directories,
            options,
        )

    result = audit_usage(scan_result.usages, example_vars, env_vars)
    example_label = state.display(example_path)
    env_label = state.display(env_path)

    if format == "json":
        JsonReporter().report_audit(result, example_label, env_label)
    else:
        RichReporter(console).report_audit(result, example_label, env_label, detailed=detailed)

    raise typer.Exit(1 if result.has_missing else 0)


# ============================================================
# fix
# ============================================================

@app.command()
def fix(
    ctx: typer.Context,
    example: Optional[str] = typer.Option(None, "--example", help="Path to the example env file (default: .env.example)"),
    env: Optional[str] = typer.Option(None, "--env", help="Path to the main env file (default: .env)"),
    backup: bool = typer.Option(False, "--backup", help="Create backup before making changes"),
    interactive: bool = typer.Option(False, "--interactive", help="Ask for confirmation before each change"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be changed without making changes"),
    format: bool = typer.Option(False, "--format", help="Fix formatting issues (spacing, quotes)"),
    add_missing: bool = typer.Option(False, "--add-missing", help="Add missing variables from example file"),
    remove_unused: bool = typer.Option(False, "--remove-unused", help="Remove variables not in example file"),
) -> None:
    """
    Fix missing environment variables and common formatting issues.

    Without --format/--add-missing/--remove-unused, formatting is fixed and
    missing variables are added.
    """
    state = _state(ctx)
    options = FixOptions(
        format=format,
        add_missing=add_missing,
        remove_unused=remove_unused,
        interactive=interactive,
        dry_run=dry_run,
        backup=backup,
    ).with_defaults()
    example_path = state.resolve(example or state.config.example_file)
    env_path = state.resolve(env or state.config.env_file)

    try:
        example_vars = parse_env_file(example_path, "Example file")
        content = read_env_file(env_path, "Environment file")
    except EnvDoctorError as e:
        _fail(str(e))

    console.print(f"[green]Fixing environment file: {escape(state.display(env_path))}[/green]")
    console.print()

    result = fix_env_content(
        content,
        example_vars,
        parse_env(content),
        options,
        confirm=lambda prompt: typer.confirm(prompt, default=True),
    )

    if options.add_missing:
        if result.missing:
            console.print(f"Found {len(result.missing)} missing variables:")
            for key in result.missing:
                console.print(f"  - {escape(key)}")
        else:
            console.print("No missing variables found.")
    if options.remove_unused:
        if result.unused:
            console.print(f"Found {len(result.unused)} unused variables:")
            for key in result.unused:
                console.print(f"  - {escape(key)}")
        else:
            console.print("No unused variables found.")

    if result.changes:
        console.print()
        console.print("[green]Changes Summary:[/green]")
        for change in result.changes:
            console.print(f"  - {escape(change)}")
    else:
        console.print("[green]No changes needed.[/green]")

    if dry_run:
        console.print("[yellow]Dry run completed. No changes were made.[/yellow]")
        raise typer.Exit(0)

    if result.changed:
        if backup:
            backup_path = backup_file(env_path)
            console.print(f"[green]Backup created: {escape(state.display(backup_path))}[/green]")
        write_env_file(env_path, result.content)
        console.print("[green]Environment file updated successfully![/green]")
    raise typer.Exit(0)


# ============================================================
# lint
# ============================================================

@app.command(name="lint")
def lint_command(
    ctx: typer.Context,
    file: Optional[str] = typer.Option(None, "--file", help="Path to the env file to lint (default: .env)"),
    strict: bool = typer.Option(False, "--strict", help="Enable strict mode for additional checks"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: text, json or xml"),
    fix: bool = typer.Option(False, "--fix", help="Auto-fix simple formatting issues"),
    ignore_empty: bool = typer.Option(False, "--ignore-empty", help="Ignore empty value warnings"),
    rules: Optional[str] = typer.Option(
        None,
        "--rules",
        help="Comma-separated list of rules to check (syntax,format,security,convention)",
    ),
) -> None:
    """
    Lint environment files for syntax errors and best practices.

    Examples:
        env-doctor lint
        env-doctor lint --file .env.production --strict --rules syntax,format,security
        env-doctor lint --format xml
    """
    state = _state(ctx)
    format = _check_format(format, OUTPUT_FORMATS)
    file_path = state.resolve(file or state.config.env_file)

    try:
        content = read_env_file(file_path)
    except EnvDoctorError as e:
        _fail(str(e))

    label = state.display(file_path)
    if format == "text":
        console.print(f"[green]Linting environment file: {escape(label)}[/green]")
        console.print()

    options = LintOptions(
        strict=strict,
        ignore_empty_values=ignore_empty,
        enabled_rules=parse_rules(rules),
    )
    issues = lint(content, options)

    if fix and issues:
        fixed = apply_lint_fixes(content, issues)
        if fixed != content:
            write_env_file(file_path, fixed)
            if format == "text":
                console.print("[green]Auto-fixed issues and updated file.[/green]")

    _get_reporter(format).report_lint(issues, label)
    raise typer.Exit(1 if issues else 0)


# ============================================================
# security
# ============================================================

@app.command()
def security(
    ctx: typer.Context,
    file: Optional[str] = typer.Option(None, "--file", help="Path to the env file to scan (default: .env)"),
    strict: bool = typer.Option(False, "--strict", help="Enable strict security checks"),
    check_git: bool = typer.Option(False, "--check-git", help="Check if the file is committed to git"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: text, json or xml"),
    risk_level: Optional[str] = typer.Option(
        None,
        "--risk-level",
        help="Minimum risk level to report (critical,high,medium,low)",
    ),
    export: bool = typer.Option(False, "--export", help="Export findings to a JSON file"),
    fix: bool = typer.Option(False, "--fix", help="Auto-fix simple security issues where possible"),
) -> None:
    """
    Scan environment files for security issues and sensitive data exposure.

    Examples:
        env-doctor security
        env-doctor security --strict --check-git --risk-level high
    """
    state = _state(ctx)
    format = _check_format(format, OUTPUT_FORMATS)
    file_path = state.resolve(file or state.config.env_file)

    try:
        content = read_env_file(file_path)
    except EnvDoctorError as e:
        _fail(str(e))

    label = state.display(file_path)
    if format == "text":
        console.print(f"[green]🔒 Security scanning environment file: {escape(label)}[/green]")
        console.print()

    findings = scan(content, SecurityOptions(strict=strict))
    if check_git:
        findings.extend(check_git_tracking(label, state.root))
    if risk_level:
        findings = filter_by_minimum_risk(findings, risk_level)

    if fix and findings:
        fixed = apply_security_fixes(content, findings)
        if fixed != content:
            write_env_file(file_path, fixed)
            if format == "text":
                console.print("[green]Auto-fixed security issues and updated file.[/green]")
        if any(f.code == "NOT_GITIGNORED" for f in findings):
            add_to_gitignore(state.root, label)
            if format == "text":
                console.print(f"[green]Added {escape(label)} to .gitignore[/green]")

    if export and findings:
        export_path = export_findings(findings, label, state.root)
        if format == "text":
            console.print(f"[green]Security findings exported to: {escape(state.display(export_path))}[/green]")

    _get_reporter(format).report_security(findings, label)
    raise typer.Exit(1 if findings else 0)


@app.command()
def version() -> None:
    """Show the version of env-doctor."""
    from env_doctor import __version__
    console.print(f"[bold]env-doctor[/bold] v{__version__}")


if __name__ == "__main__":
    app()
