import json

from typer.testing import CliRunner

from env_doctor import __version__
from env_doctor.cli import app


runner = CliRunner()

EXAMPLE = "APP_NAME=Laravel\nAPP_ENV=local\nDB_HOST=127.0.0.1\n"


def write(root, name, text):
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def invoke(root, *args):
    return runner.invoke(app, ["--root", str(root), *args])


# ------------------------------------------------------------
# compare
# ------------------------------------------------------------

def test_compare_reports_missing_and_extra(tmp_path):
    write(tmp_path, ".env.example", EXAMPLE)
    write(tmp_path, ".env", "APP_NAME=Laravel\nAPP_ENV=production\nEXTRA=1\n")

    result = invoke(tmp_path, "compare")
    assert result.exit_code == 1
    assert "DB_HOST" in result.output
    assert "EXTRA" in result.output


def test_compare_value_drift_only_passes(tmp_path):
    write(tmp_path, ".env.example", EXAMPLE)
    write(tmp_path, ".env", EXAMPLE.replace("local", "production"))

    result = invoke(tmp_path, "compare", "--format", "json")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["comparisons"][0]["changed_values"] == {
        "APP_ENV": {"source": "local", "target": "production"},
    }


def test_compare_all_env_files(tmp_path):
    write(tmp_path, ".env.example", EXAMPLE)
    write(tmp_path, ".env", EXAMPLE)
    write(tmp_path, ".env.staging", "APP_NAME=Laravel\n")
    write(tmp_path, "vendor/pkg/.env", "IGNORED=1\n")

    result = invoke(tmp_path, "compare", "--all", "--format", "json")
    assert result.exit_code == 1
    comparisons = json.loads(result.output)["comparisons"]
    assert [c["target"] for c in comparisons] == [".env", ".env.staging"]
    assert comparisons[1]["missing_in_target"] == ["APP_ENV", "DB_HOST"]


def test_compare_missing_example_file(tmp_path):
    write(tmp_path, ".env", EXAMPLE)
    result = invoke(tmp_path, "compare")
    assert result.exit_code == 1
    assert "Example file not found" in result.output


def test_compare_missing_env_file(tmp_path):
    write(tmp_path, ".env.example", EXAMPLE)
    result = invoke(tmp_path, "compare", "--env", ".env.production")
    assert result.exit_code == 1
    assert "Environment file not found" in result.output


# ------------------------------------------------------------
# audit
# ------------------------------------------------------------

def test_audit_finds_missing_variables(tmp_path):
    write(tmp_path, ".env.example", "APP_NAME=\nDB_HOST=\nUNUSED=\n")
    write(tmp_path, ".env", "APP_NAME=demo\n")
    write(tmp_path, "app/Service.php", "<?php\n$name = env('APP_NAME');\n$host = env('DB_HOST');\n")
    write(tmp_path, "vendor/lib/Other.php", "<?php env('VENDOR_ONLY');\n")

    result = invoke(tmp_path, "audit", "--format", "json")
    assert result.exit_code == 1
    data = json.loads(result.output)
    assert sorted(data["used"]) == ["APP_NAME", "DB_HOST"]
    assert data["missing_in_example"] == []
    assert data["missing_in_env"] == ["DB_HOST"]
    assert data["unused_in_example"] == ["UNUSED"]


def test_audit_with_config_calls(tmp_path):
    write(tmp_path, ".env.example", "APP_NAME=\n")
    write(tmp_path, ".env", "APP_NAME=demo\n")
    write(tmp_path, "app/Http/Kernel.php", "<?php\nconfig('app.name');\nconfig('queue.default');\n")

    result = invoke(tmp_path, "audit", "--config", "--format", "json")
    data = json.loads(result.output)
    assert data["used"]["QUEUE_CONNECTION"] == ["config() in app/Http/Kernel.php:3"]
    assert data["missing_in_env"] == ["QUEUE_CONNECTION"]
    assert result.exit_code == 1


def test_audit_text_output_without_env_file(tmp_path):
    write(tmp_path, ".env.example", "APP_NAME=\n")
    write(tmp_path, "app/a.php", "<?php env('APP_NAME');\n")

    result = invoke(tmp_path, "audit", "--detailed")
    assert "Scanned 1 files" in result.output
    assert "env() in app/a.php:1" in result.output
    assert result.exit_code == 1


# ------------------------------------------------------------
# fix
# ------------------------------------------------------------

def test_fix_adds_missing_and_formats(tmp_path):
    write(tmp_path, ".env.example", EXAMPLE)
    env = write(tmp_path, ".env", "APP_NAME = My App\n")

    result = invoke(tmp_path, "fix")
    assert result.exit_code == 0
    assert "Environment file updated successfully!" in result.output
    assert env.read_text(encoding="utf-8") == 'APP_NAME="My App"\nAPP_ENV=local\nDB_HOST=127.0.0.1\n'


def test_fix_keeps_crlf(tmp_path):
    write(tmp_path, ".env.example", EXAMPLE)
    env = tmp_path / ".env"
    env.write_bytes(b"APP_NAME = Laravel\r\nAPP_ENV=local\r\n")

    result = invoke(tmp_path, "fix")
    assert result.exit_code == 0
    assert env.read_bytes() == b"APP_NAME=Laravel\r\nAPP_ENV=local\r\nDB_HOST=127.0.0.1\r\n"


def test_fix_dry_run_leaves_file(tmp_path):
    write(tmp_path, ".env.example", EXAMPLE)
    env = write(tmp_path, ".env", "APP_NAME=demo\n")

    result = invoke(tmp_path, "fix", "--dry-run")
    assert result.exit_code == 0
    assert "Dry run completed" in result.output
    assert "Added missing variable: APP_ENV" in result.output
    assert env.read_text(encoding="utf-8") == "APP_NAME=demo\n"


def test_fix_remove_unused_with_backup(tmp_path):
    write(tmp_path, ".env.example", EXAMPLE)
    env = write(tmp_path, ".env", EXAMPLE + "OLD=1\n")

    result = invoke(tmp_path, "fix", "--remove-unused", "--backup")
    assert result.exit_code == 0
    assert env.read_text(encoding="utf-8") == EXAMPLE
    backups = list(tmp_path.glob(".env.backup.*"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == EXAMPLE + "OLD=1\n"


def test_fix_interactive_declined(tmp_path):
    write(tmp_path, ".env.example", EXAMPLE)
    env = write(tmp_path, ".env", "APP_NAME=demo\n")

    result = runner.invoke(
        app,
        ["--root", str(tmp_path), "fix", "--add-missing", "--interactive"],
        input="n\nn\n",
    )
    assert result.exit_code == 0
    assert env.read_text(encoding="utf-8") == "APP_NAME=demo\n"


# ------------------------------------------------------------
# lint
# ------------------------------------------------------------

def test_lint_clean_file(tmp_path):
    write(tmp_path, ".env", EXAMPLE)
    result = invoke(tmp_path, "lint")
    assert result.exit_code == 0
    assert "No issues found!" in result.output


def test_lint_json(tmp_path):
    write(tmp_path, ".env", "FOO=1\nFOO=2\n")
    result = invoke(tmp_path, "lint", "--format", "json")
    assert result.exit_code == 1
    data = json.loads(result.output)
    assert [i["code"] for i in data["issues"]] == ["DUPLICATE_KEY"]
    assert data["summary"]["errors"] == 1


def test_lint_xml_strict_rules(tmp_path):
    write(tmp_path, ".env", "API_TOKEN=abc\n")
    result = invoke(tmp_path, "lint", "--format", "xml", "--strict", "--rules", "security")
    assert result.exit_code == 1
    assert result.output.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert 'code="SENSITIVE_KEY"' in result.output


def test_lint_fix_rewrites_file(tmp_path):
    env = write(tmp_path, ".env", "app_name = My App\n")
    result = invoke(tmp_path, "lint", "--fix")
    assert result.exit_code == 1
    assert "Auto-fixed issues and updated file." in result.output
    assert env.read_text(encoding="utf-8") == 'APP_NAME="My App"\n'


def test_lint_detects_mixed_line_endings(tmp_path):
    (tmp_path / ".env").write_bytes(b"A=1\r\nB=2\nC=3\n")
    result = invoke(tmp_path, "lint", "--format", "json")
    assert result.exit_code == 1
    assert [i["code"] for i in json.loads(result.output)["issues"]] == ["MIXED_LINE_ENDINGS"]


def test_lint_fix_keeps_crlf(tmp_path):
    env = tmp_path / ".env"
    env.write_bytes(b"app_name=Laravel\r\nAPP_ENV=local\r\n")
    result = invoke(tmp_path, "lint", "--fix")
    assert result.exit_code == 1
    assert env.read_bytes() == b"APP_NAME=Laravel\r\nAPP_ENV=local\r\n"


def test_lint_missing_file(tmp_path):
    result = invoke(tmp_path, "lint", "--file", ".env.missing")
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_lint_unknown_format(tmp_path):
    write(tmp_path, ".env", EXAMPLE)
    result = invoke(tmp_path, "lint", "--format", "yaml")
    assert result.exit_code == 1
    assert "Unknown format" in result.output


# ------------------------------------------------------------
# security
# ------------------------------------------------------------

def test_security_json(tmp_path):
    write(tmp_path, ".env", "DB_PASSWORD=password\n")
    result = invoke(tmp_path, "security", "--format", "json")
    assert result.exit_code == 1
    data = json.loads(result.output)
    assert [f["code"] for f in data["findings"]] == ["SENSITIVE_KEY", "WEAK_PASSWORD"]


def test_security_risk_level_filter(tmp_path):
    write(tmp_path, ".env", "MAIL_HOST=smtp.example.org\n")
    result = invoke(tmp_path, "security", "--risk-level", "high")
    assert result.exit_code == 0
    assert "No security issues found!" in result.output


def test_security_export(tmp_path):
    write(tmp_path, ".env", "DB_PASSWORD=password\n")
    result = invoke(tmp_path, "security", "--export")
    assert result.exit_code == 1
    exports = list(tmp_path.glob("security-scan-*.json"))
    assert len(exports) == 1
    assert json.loads(exports[0].read_text(encoding="utf-8"))["total_issues"] == 2


def test_security_fix_comments_and_gitignore(tmp_path, monkeypatch):
    from env_doctor.core import vcs

    (tmp_path / ".git").mkdir()
    write(tmp_path, ".gitignore", "vendor/\n")
    env = write(tmp_path, ".env", "# secret=abc123\nAPP_NAME=Laravel\n")
    monkeypatch.setattr(vcs, "is_tracked", lambda *args, **kwargs: False)

    result = invoke(tmp_path, "security", "--check-git", "--fix")
    assert result.exit_code == 1
    assert env.read_text(encoding="utf-8") == "# REMOVED: # secret=abc123\nAPP_NAME=Laravel\n"
    assert (tmp_path / ".gitignore").read_text(encoding="utf-8") == "vendor/\n.env\n"


def test_security_check_git_without_repository(tmp_path):
    write(tmp_path, ".env", "APP_NAME=Laravel\n")
    result = invoke(tmp_path, "security", "--check-git")
    assert result.exit_code == 0


# ------------------------------------------------------------
# misc
# ------------------------------------------------------------

def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_root_must_exist(tmp_path):
    result = invoke(tmp_path / "missing", "lint")
    assert result.exit_code == 1
    assert "Path is not a directory" in result.output


def test_config_from_pyproject(tmp_path):
    write(tmp_path, "pyproject.toml", '[tool.env-doctor]\nexample-file = ".env.dist"\n')
    write(tmp_path, ".env.dist", "APP_NAME=\n")
    write(tmp_path, ".env", "APP_NAME=x\n")

    result = invoke(tmp_path, "compare", "--format", "json")
    assert result.exit_code == 0
    assert json.loads(result.output)["comparisons"][0]["source"] == ".env.dist"
