"""
环境映射比较
"""

from env_doctor.core.models import DiffResult
from env_doctor.core.parser import EnvMapping


def diff_env(source: EnvMapping, target: EnvMapping) -> DiffResult:
    """
    比较两个环境映射（非对称）

    Args:
        source: 参照映射（通常来自 .env.example）
        target: 被检查的映射（通常来自 .env）

    Returns:
        DiffResult: missing 为 source 有 target 无，extra 为 target 有 source 无，
        changed 为两边都有但值不完全相等
    """
    missing = tuple(key for key in source if key not in target)
    extra = tuple(key for key in target if key not in source)
    changed = {
        key: (value, target[key])
        for key, value in source.items()
        if key in target and target[key] != value
    }
    return DiffResult(
        missing_in_target=missing,
        extra_in_target=extra,
        changed_values=changed,
    )
