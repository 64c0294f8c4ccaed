"""
旧版交易 JSON 导入。

流程：
1. 读取 JSON（顶层为数组，或 {"trades": [...]}）
2. 逐条规范化为 TradeRecord（pydantic 边界，见 tradenavi.data.normalize）
3. 补建缺失的待办历史与状态
4. 去重：仓储中已存在 / 同一文件内重复的 ID 记为跳过
5. mode=apply 时写入仓储；dry_run 只统计
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal

from pydantic import ValidationError

from tradenavi.core.dependency import dependency
from tradenavi.core.log import log
from tradenavi.core.protocols import TradeRepository
from tradenavi.core.rules.todo import derive_trade_status, ensure_trade_todos
from tradenavi.data.normalize import normalize_trade

logger = logging.getLogger(__name__)

ImportMode = Literal["dry_run", "apply"]


@dataclass(slots=True, frozen=True)
class ImportFailure:
    """
    单条失败记录。

    - index: 在源文件中的位置（0 起）
    - trade_id: 可识别时的交易 ID
    - error_type: validation（结构无法解析）/ incomplete（业务字段不全）
    """

    index: int
    trade_id: str | None
    error_type: str
    message: str


@dataclass(slots=True)
class ImportResult:
    """导入结果汇总（只存统计，不存输入参数）。"""

    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[ImportFailure] = field(default_factory=list)

    @property
    def error_summary(self) -> dict[str, int]:
        """按 error_type 计数。"""
        summary: dict[str, int] = {}
        for err in self.errors:
            summary[err.error_type] = summary.get(err.error_type, 0) + 1
        return summary


def _load_payloads(json_path: str) -> list[Any]:
    path = Path(json_path)
    if not path.exists():
        raise FileNotFoundError(json_path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("trades")
    if not isinstance(data, list):
        raise ValueError("JSON 顶层必须是数组或包含 trades 数组的对象")
    return data


def _short_error(err: ValidationError) -> str:
    first = err.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg', '')}" if loc else str(first.get("msg", ""))


@dependency
def import_trades_from_json(
    *,
    json_path: str,
    mode: ImportMode = "dry_run",
    trade_repo: TradeRepository | None = None,
) -> ImportResult:
    """
    从旧版 JSON 导入交易。

    Args:
        json_path: JSON 文件路径。
        mode: dry_run=只校验 / apply=实际写入。
        trade_repo: 交易仓储（可选，自动注入）。

    Returns:
        ImportResult。单条失败不会中断整体导入。

    Raises:
        FileNotFoundError: 文件不存在。
        ValueError: 顶层结构不是交易数组。
    """
    payloads = _load_payloads(json_path)
    result = ImportResult(total=len(payloads))
    seen: set[str] = set()

    for index, payload in enumerate(payloads):
        if not isinstance(payload, dict):
            result.failed += 1
            result.errors.append(ImportFailure(index, None, "validation", "记录不是对象"))
            continue
        raw_id = str(payload["id"]) if payload.get("id") is not None else None

        try:
            record = normalize_trade(payload)
        except ValidationError as err:
            result.failed += 1
            result.errors.append(ImportFailure(index, raw_id, "validation", _short_error(err)))
            continue
        except ValueError as err:
            result.failed += 1
            result.errors.append(ImportFailure(index, raw_id, "incomplete", str(err)))
            continue

        if record.id in seen or trade_repo.find_by_id(record.id) is not None:
            logger.debug("[Import] 跳过重复交易 id=%s", record.id)
            result.skipped += 1
            continue
        seen.add(record.id)

        record = replace(record, todos=ensure_trade_todos(record))
        if record.status is None:
            record = replace(record, status=derive_trade_status(record))

        if mode == "apply":
            trade_repo.add(record)
        result.succeeded += 1

    log(
        f"[Import] {mode}: total={result.total} succeeded={result.succeeded} "
        f"skipped={result.skipped} failed={result.failed}"
    )
    return result
