"""
统一输出入口。

- CLI / Flow 的进度信息统一走 `log()`，写到 `tradenavi` logger；
- 其余模块用 `logging.getLogger(__name__)` 记录调试信息，同属 `tradenavi` 层级；
- 首次调用时挂上 stdout handler（级别由 LOG_LEVEL 控制），之后复用。
"""

from __future__ import annotations

import logging
import sys

from tradenavi.core.config import get_log_level

_ROOT_LOGGER = "tradenavi"

logger = logging.getLogger(_ROOT_LOGGER)


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    初始化 `tradenavi` logger（幂等）。

    Args:
        level: 日志级别名，None 时读取 LOG_LEVEL。

    Returns:
        已配置的 logger。
    """
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level or get_log_level())
    return logger


def log(message: str) -> None:
    """输出一条进度信息（INFO）。"""
    if not logger.handlers:
        setup_logging()
    logger.info(message)
