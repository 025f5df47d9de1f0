from env_doctor.core import vcs
from env_doctor.core.models import FILE_LEVEL, GIT_LEVEL, RiskLevel, SecurityFinding
from env_doctor.core.security import (
    SecurityOptions,
    apply_security_fixes,
    check_git_tracking,
    filter_by_minimum_risk,
    match_sensitive_keywords,
    scan,
)


def codes(findings):
    return [finding.code for finding in findings]


def make_finding(risk: RiskLevel) -> SecurityFinding:
    return SecurityFinding(
        key="K",
        value="v",
        risk=risk,
        classification="info",
        code="TEST",
        message="m",
        recommendation="r",
        line=1,
    )


def test_password_key_with_weak_value_gives_two_findings():
    findings = scan("DB_PASSWORD=password")
    assert codes(findings) == ["SENSITIVE_KEY", "WEAK_PASSWORD"]
    assert findings[0].risk == RiskLevel.HIGH
    assert findings[0].recommendation == "Use a strong, unique password with at least 12 characters"
    assert findings[1].risk == RiskLevel.HIGH
    assert findings[1].line == 1


def test_every_matching_keyword_is_reported_in_table_order():
    assert [kw for kw, _ in match_sensitive_keywords("STRIPE_API_KEY")] == ["key", "api_key"]

    findings = scan("STRIPE_API_KEY=abc")
    assert codes(findings) == ["SENSITIVE_KEY", "SENSITIVE_KEY", "SHORT_API_KEY"]
    assert [f.risk for f in findings] == [RiskLevel.MEDIUM] * 3
    assert findings[2].message == "Short API key detected (length: 3)"


def test_info_keyword_maps_to_low_risk():
    findings = scan("MAIL_HOST=smtp.example.org")
    assert len(findings) == 1
    assert findings[0].classification == "info"
    assert findings[0].risk == RiskLevel.LOW


def test_predictable_username():
    findings = scan("GUEST_NAME=Guest")
    assert codes(findings) == ["PREDICTABLE_USERNAME"]


def test_long_api_key_is_not_short():
    findings = scan("API_KEY=" + "x" * 32)
    assert "SHORT_API_KEY" not in codes(findings)


def test_strict_checks():
    findings = scan("DB_HOST=localhost\nDB_PASSWORD=\nAPP_ENV=example", SecurityOptions(strict=True))
    assert codes(findings) == [
        "SENSITIVE_KEY",        # host
        "LOCAL_VALUE",
        "SENSITIVE_KEY",        # password
        "EMPTY_SENSITIVE_KEY",
        "DEFAULT_VALUE",
        "FILE_PERMISSIONS",
    ]
    assert findings[-1].line == FILE_LEVEL


def test_strict_checks_are_off_by_default():
    assert codes(scan("DB_HOST=localhost")) == ["SENSITIVE_KEY"]


def test_commented_secret_is_fixable():
    content = "# password=hunter2\nAPP_NAME=Laravel"
    findings = scan(content)
    assert codes(findings) == ["COMMENTED_SECRET"]
    assert findings[0].fixable
    assert findings[0].risk == RiskLevel.MEDIUM

    fixed = apply_security_fixes(content, findings)
    assert fixed == "# REMOVED: # password=hunter2\nAPP_NAME=Laravel"


def test_secret_prefix_in_comment():
    findings = scan("# old stripe sk-live123\nAPP_NAME=Laravel")
    assert codes(findings) == ["SECRET_IN_COMMENT"]
    assert findings[0].risk == RiskLevel.HIGH
    assert not findings[0].fixable


def test_apply_fixes_without_fixable_findings():
    content = "DB_PASSWORD=password"
    assert apply_security_fixes(content, scan(content)) == content


def test_filter_by_minimum_risk():
    findings = [make_finding(level) for level in RiskLevel]
    kept = filter_by_minimum_risk(findings, "high")
    assert sorted(f.risk.value for f in kept) == ["critical", "high"]

    assert filter_by_minimum_risk(findings, "CRITICAL")[0].risk == RiskLevel.CRITICAL
    assert len(filter_by_minimum_risk(findings, None)) == len(findings)
    assert len(filter_by_minimum_risk(findings, "bogus")) == len(findings)


def test_git_checks_without_repository(tmp_path):
    assert check_git_tracking(".env", tmp_path) == []


def test_git_tracked_and_not_ignored(tmp_path, monkeypatch):
    (tmp_path / ".git").mkdir()
    (tmp_path / ".gitignore").write_text("vendor/\n", encoding="utf-8")
    monkeypatch.setattr(vcs, "is_tracked", lambda *args, **kwargs: True)

    findings = check_git_tracking(".env", tmp_path)
    assert codes(findings) == ["GIT_TRACKED", "NOT_GITIGNORED"]
    assert findings[0].risk == RiskLevel.CRITICAL
    assert findings[0].line == GIT_LEVEL
    assert findings[1].fixable


def test_git_untracked_and_ignored(tmp_path, monkeypatch):
    (tmp_path / ".git").mkdir()
    (tmp_path / ".gitignore").write_text(".env\n", encoding="utf-8")
    monkeypatch.setattr(vcs, "is_tracked", lambda *args, **kwargs: False)

    findings = check_git_tracking(".env", tmp_path)
    assert codes(findings) == ["GIT_UNTRACKED"]
    assert findings[0].risk == RiskLevel.NONE


def test_git_unavailable_skips_tracking(tmp_path, monkeypatch):
    (tmp_path / ".git").mkdir()
    monkeypatch.setattr(vcs, "is_tracked", lambda *args, **kwargs: None)
    assert check_git_tracking(".env", tmp_path) == []
