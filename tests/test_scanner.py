import json

from env_doctor.core.scanner import (
    ScanOptions,
    config_key_to_env_var,
    extract_config_calls,
    extract_env_calls,
    extract_usages,
    find_line_number,
    is_env_related_config,
    scan_project,
)


PHP_SOURCE = """<?php

return [
    'name' => env('APP_NAME', 'Laravel'),
    'host' => env("DB_HOST"),
    'debug' => config('app.debug'),
];
"""


def test_extract_env_calls():
    records = extract_env_calls(PHP_SOURCE, "config/app.php")
    assert [(r.key, r.line) for r in records] == [("APP_NAME", 4), ("DB_HOST", 5)]
    assert all(r.access_kind == "env()" for r in records)
    assert records[0].describe() == "env() in config/app.php:4"


def test_line_lookup_uses_first_matching_line():
    content = "// see env('APP_KEY')\n$key = env('APP_KEY');\n"
    records = extract_env_calls(content, "a.php")
    assert [r.line for r in records] == [1, 1]


def test_find_line_number_not_found():
    assert find_line_number("a\nb", "zzz") == 0


def test_config_key_mapping():
    assert is_env_related_config("app.name")
    assert is_env_related_config("database.connections.pgsql.host")
    assert not is_env_related_config("services.stripe.key")
    assert config_key_to_env_var("database.connections.mysql.host") == "DB_HOST"
    assert config_key_to_env_var("filesystems.default") is None


def test_extract_config_calls_discards_unmapped_paths():
    content = "\n".join([
        "config('app.name');",
        "config('database.connections.pgsql.host');",
        "config('services.stripe.key');",
        "config('filesystems.default');",
        "config('queue.default');",
    ])
    records = extract_config_calls(content, "x.php")
    assert [(r.key, r.line, r.access_kind) for r in records] == [
        ("APP_NAME", 1, "config()"),
        ("QUEUE_CONNECTION", 5, "config()"),
    ]


def test_extract_usages_groups_by_key():
    files = [
        ("a.php", "env('APP_NAME'); config('app.name');"),
        ("b.php", "env('APP_NAME');"),
    ]
    usages = extract_usages(files, ScanOptions(check_config=True))
    assert list(usages) == ["APP_NAME"]
    assert [(r.file, r.access_kind) for r in usages["APP_NAME"]] == [
        ("a.php", "env()"),
        ("a.php", "config()"),
        ("b.php", "env()"),
    ]


def test_config_calls_ignored_by_default():
    usages = extract_usages([("a.php", "config('app.name');")])
    assert usages == {}


def test_scan_project_skips_excluded_directories(tmp_path):
    (tmp_path / "app").mkdir()
    (tmp_path / "app" / "Service.php").write_text("<?php env('MAIL_HOST');\n", encoding="utf-8")
    (tmp_path / "vendor" / "pkg").mkdir(parents=True)
    (tmp_path / "vendor" / "pkg" / "Lib.php").write_text("<?php env('VENDOR_ONLY');\n", encoding="utf-8")
    (tmp_path / "bootstrap" / "cache").mkdir(parents=True)
    (tmp_path / "bootstrap" / "cache" / "config.php").write_text("<?php env('CACHED');\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("env('NOT_PHP')", encoding="utf-8")

    seen = []
    result = scan_project(
        tmp_path,
        ["*.php"],
        ["vendor", "bootstrap/cache"],
        on_file=lambda path, index, total: seen.append((path, index, total)),
    )

    assert result.files_scanned == 1
    assert list(result.usages) == ["MAIL_HOST"]
    assert result.usages["MAIL_HOST"][0].file == "app/Service.php"
    assert seen == [("app/Service.php", 1, 1)]

    data = json.loads(result.to_json())
    assert data["files_scanned"] == 1
    assert data["usages"]["MAIL_HOST"][0]["line"] == 1
