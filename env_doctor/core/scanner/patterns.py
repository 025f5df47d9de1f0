"""
正则表达式模式与静态映射表

env() / config() 调用的提取模式，以及配置路径到环境变量名的映射。
"""

import re

# env('KEY') / env("KEY", default)
ENV_CALL_PATTERN = re.compile(r"""env\s*\(\s*['"]([^'"]+)['"]\s*(?:,\s*[^)]*)?\)""")

# config('database.connections.mysql.host')
CONFIG_CALL_PATTERN = re.compile(r"""config\s*\(\s*['"]([^'"]+)['"]\s*\)""")

# 明确与环境相关的配置路径
ENV_RELATED_CONFIG_KEYS: frozenset[str] = frozenset({
    "app.name", "app.env", "app.debug", "app.url",
    "database.connections.mysql.host", "database.connections.mysql.database",
    "database.connections.mysql.username", "database.connections.mysql.password",
    "mail.mailers.smtp.host", "mail.mailers.smtp.port",
    "cache.default", "session.driver", "queue.default",
    "broadcasting.default", "filesystems.default",
})

# 以这些前缀开头的配置路径也视为与环境相关
ENV_RELATED_CONFIG_PREFIXES: tuple[str, ...] = (
    "database.",
    "mail.",
    "cache.",
    "session.",
    "queue.",
    "broadcasting.",
)

# 配置路径 -> 环境变量名（不在表中的路径直接丢弃）
CONFIG_KEY_TO_ENV_VAR: tuple[tuple[str, str], ...] = (
    ("app.name", "APP_NAME"),
    ("app.env", "APP_ENV"),
    ("app.debug", "APP_DEBUG"),
    ("app.url", "APP_URL"),
    ("database.connections.mysql.host", "DB_HOST"),
    ("database.connections.mysql.database", "DB_DATABASE"),
    ("database.connections.mysql.username", "DB_USERNAME"),
    ("database.connections.mysql.password", "DB_PASSWORD"),
    ("mail.mailers.smtp.host", "MAIL_HOST"),
    ("mail.mailers.smtp.port", "MAIL_PORT"),
    ("cache.default", "CACHE_DRIVER"),
    ("session.driver", "SESSION_DRIVER"),
    ("queue.default", "QUEUE_CONNECTION"),
)

_CONFIG_LOOKUP: dict[str, str] = dict(CONFIG_KEY_TO_ENV_VAR)


def is_env_related_config(config_key: str) -> bool:
    """判断配置路径是否与环境变量相关"""
    return config_key in ENV_RELATED_CONFIG_KEYS or config_key.startswith(ENV_RELATED_CONFIG_PREFIXES)


def config_key_to_env_var(config_key: str) -> str | None:
    """将配置路径翻译为环境变量名，没有映射时返回 None"""
    return _CONFIG_LOOKUP.get(config_key)
