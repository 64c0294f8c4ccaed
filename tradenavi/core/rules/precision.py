"""
金额/税率精度工具函数。

统一精度规则：
- 金额：日元整数，不保留小数；
- 消费税：向下取整（floor），不四舍五入，保证请求书合计可复现；
- 非数值/NaN/无穷大/超出范围的数值一律按 0 处理，不抛异常。
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation

_ZERO = Decimal("0")

# 金额数量级上限（10^18 円未満，SQLite INTEGER 可容纳）；乘积与合计不会溢出 Decimal 上下文
MAX_AMOUNT_EXPONENT = 17


def within_range(value: Decimal) -> bool:
    """有限且数量级不超过 MAX_AMOUNT_EXPONENT。"""
    return value.is_finite() and (value.is_zero() or value.adjusted() <= MAX_AMOUNT_EXPONENT)


def to_decimal(value: object) -> Decimal:
    """
    宽松地把任意输入转换为 Decimal。

    Args:
        value: int / str / Decimal / float / None 等。

    Returns:
        有限 Decimal；None、bool、无法解析、NaN、无穷大、超出范围均返回 0。
    """
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return _ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return _ZERO
    if not within_range(result):
        return _ZERO
    return result


def floor_yen(amount: Decimal) -> int:
    """
    将金额向下取整为日元整数。

    Args:
        amount: 金额（Decimal）。

    Returns:
        floor(amount) 的 int 值。
    """
    return int(amount.to_integral_value(rounding=ROUND_FLOOR))


def to_rate(value: object, default: Decimal) -> Decimal:
    """
    解析税率；None 或无效值回退到 default。

    说明：float 先经 str() 再转 Decimal，0.1 得到 Decimal("0.1") 而非二进制近似值。
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if within_range(value) else default
    try:
        rate = Decimal(str(value).strip())
    except InvalidOperation:
        return default
    return rate if within_range(rate) else default


def format_yen(amount: int) -> str:
    """格式化为 ￥1,408,000 形式。"""
    if amount < 0:
        return f"-￥{-amount:,}"
    return f"￥{amount:,}"
