"""
Flow 参数自动注入。

tradenavi/core/container.py 用 @register 登记工厂（trade_repo / invoice_repo /
discord_service），Flow 用 @dependency 声明关键字参数：
调用方未传或传入 None 的参数由工厂补齐，显式传入的仓储/客户端原样使用。

示例：
    @dependency
    def load_trades_for_user(
        *,
        user_id: str,
        trade_repo: TradeRepository | None = None,
    ) -> list[TradeRecord]:
        return trade_repo.list_for_user(user_id)

    load_trades_for_user(user_id="u-buyer")                           # 使用 DB_PATH 的仓储
    load_trades_for_user(user_id="u-buyer", trade_repo=memory_repo)   # 测试替身
"""

from __future__ import annotations

import inspect
import logging
from functools import wraps
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

# 注册名（= Flow 参数名） -> 工厂函数
_REGISTRY: dict[str, Callable[[], Any]] = {}

T = TypeVar("T")


def register(name: str) -> Callable[[Callable[[], T]], Callable[[], T]]:
    """登记工厂；name 必须与 Flow 的参数名一致。"""

    def decorator(factory_func: Callable[[], T]) -> Callable[[], T]:
        _REGISTRY[name] = factory_func
        return factory_func

    return decorator


def dependency(func: Callable[..., T]) -> Callable[..., T]:
    """
    为 Flow 补齐已登记的依赖参数。

    Args:
        func: 以关键字参数接收仓储/客户端的 Flow 函数。

    Returns:
        包装后的函数；仅参数值为 None 时调用工厂。
    """
    sig = inspect.signature(func)

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        bound_args = sig.bind_partial(*args, **kwargs)
        for param_name in sig.parameters:
            if param_name in _REGISTRY and bound_args.arguments.get(param_name) is None:
                logger.debug("%s: 注入 %s", func.__name__, param_name)
                kwargs[param_name] = _REGISTRY[param_name]()
        return func(*args, **kwargs)

    return wrapper


def get_registered_deps() -> dict[str, Callable[[], Any]]:
    """当前登记的依赖（副本）。"""
    return _REGISTRY.copy()
