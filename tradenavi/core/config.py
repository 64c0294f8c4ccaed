from __future__ import annotations

import os

from dotenv import load_dotenv


def get_db_path() -> str:
    """
    返回 SQLite DB 路径。

    Returns:
        数据库文件路径；默认 `data/tradenavi.db`（可由 `DB_PATH` 覆盖）。
    """
    return os.getenv("DB_PATH", "data/tradenavi.db")


def enable_sql_debug() -> bool:
    """
    是否启用 SQL 打印（开发期可打开）。

    Returns:
        True/False（由 `ENABLE_SQL_DEBUG=1` 控制）。
    """
    return os.getenv("ENABLE_SQL_DEBUG", "0") == "1"


def get_http_timeout() -> float:
    """返回外部 HTTP 请求超时秒数（`HTTP_TIMEOUT`，默认 5）。"""
    return float(os.getenv("HTTP_TIMEOUT", "5"))


def get_log_level() -> str:
    """返回日志级别（`LOG_LEVEL`，默认 INFO）。"""
    return os.getenv("LOG_LEVEL", "INFO").upper()


TIMEZONE = "Asia/Tokyo"


def load_env() -> None:
    """加载项目根目录的 .env（已存在的环境变量不覆盖）。CLI 入口调用。"""
    load_dotenv(override=False)
