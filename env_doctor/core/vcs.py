"""
Git 辅助函数（供安全扫描使用）

只向 git 询问三件事：是否存在仓库、文件是否被跟踪、.gitignore 是否提到该文件。
git 不可用时这些问题一律视为“没有结论”。

注意：导入本模块时会设置环境变量 GIT_PYTHON_REFRESH=quiet（已有值则不覆盖），
这样缺少 git 可执行文件时 GitPython 的导入不会失败。
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

# 缺少 git 时不能让导入失败，由 is_tracked 返回 None
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo  # noqa: E402
from git.exc import GitCommandNotFound  # noqa: E402

logger = logging.getLogger(__name__)

GITIGNORE_NAME = ".gitignore"
ENV_WILDCARD = "*.env"


@dataclass
class GitConfig:
    """
    Git 调用配置

    Attributes:
        timeout: git ls-files 超时秒数，超时后进程被终止
    """
    timeout: int = 30


def has_repository(repo_root: Path) -> bool:
    """检查 repo_root 下是否有 .git 目录"""
    return (repo_root / ".git").is_dir()


def is_tracked(file_path: str, repo_root: Path, config: GitConfig | None = None) -> bool | None:
    """
    询问 git 文件是否被跟踪

    Returns:
        True/False；git 无法回答时返回 None
    """
    config = config or GitConfig()
    try:
        repo = Repo(repo_root)
        output = repo.git.ls_files("--", file_path, kill_after_timeout=config.timeout)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        logger.debug(f"Not a usable git repository: {e}")
        return None
    except GitCommandNotFound:
        logger.debug("git executable not found, skipping tracking check")
        return None
    except GitCommandError as e:
        logger.warning(f"git ls-files failed: {e}")
        return None

    return bool(output.strip())


def read_gitignore(repo_root: Path) -> str | None:
    """读取 .gitignore 内容，文件不存在时返回 None"""
    path = repo_root / GITIGNORE_NAME
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8", errors="ignore")


def is_mentioned_in_gitignore(gitignore: str, file_path: str) -> bool:
    """简单子串判断：包含该路径或 *.env 通配即视为已忽略"""
    return file_path in gitignore or ENV_WILDCARD in gitignore


def add_to_gitignore(repo_root: Path, file_path: str) -> Path:
    """把 file_path 追加到 .gitignore，文件不存在时创建"""
    path = repo_root / GITIGNORE_NAME
    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{prefix}{file_path}\n")
    return path
