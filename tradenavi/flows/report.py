"""待办日报：汇总用户当前需要处理的交易并发送到 Discord。"""

from __future__ import annotations

from tradenavi.core.dependency import dependency
from tradenavi.core.log import log
from tradenavi.core.protocols import ReportProtocol, TradeRepository
from tradenavi.core.rules.precision import format_yen
from tradenavi.core.rules.trade_rows import TradeRow, build_trade_row

_SECTION_ORDER = ("approval", "payment", "confirmation")


def _format_row(row: TradeRow) -> str:
    date_text = row.contract_date.isoformat() if row.contract_date else "-"
    return (
        f"- [{row.navi_id or row.id}] {row.partner or '-'} / {row.maker} {row.item_name} "
        f"×{row.quantity} {format_yen(row.amount)}（成約日 {date_text}）"
    )


@dependency
def make_todo_report(
    *,
    user_id: str,
    trade_repo: TradeRepository | None = None,
) -> str:
    """
    生成待办日报文本。

    口径：
    - 「対応が必要」只列出查看者本人是负责方的进行中交易；
    - 「相手方の対応待ち」列出进行中但由对方处理的交易；
    - 完了 / キャンセル只计数，不逐条列出。

    Args:
        user_id: 报告对象用户。
        trade_repo: 交易仓储（可选，自动注入）。

    Returns:
        多行文本（Markdown 友好）。
    """
    rows = [build_trade_row(trade, user_id) for trade in trade_repo.list_for_user(user_id)]
    active = [row for row in rows if row.bucket in ("approval", "in_progress")]
    mine = [row for row in active if row.actionable]
    waiting = [row for row in active if not row.actionable]
    completed = sum(1 for row in rows if row.bucket == "completed")
    canceled = sum(1 for row in rows if row.bucket == "canceled")

    lines = [f"**取引ナビ ToDo レポート**（{user_id}）", ""]
    lines.append(f"対応が必要：{len(mine)} 件")
    for section in _SECTION_ORDER:
        section_rows = [row for row in mine if row.section == section]
        if not section_rows:
            continue
        lines.append(f"■ {section_rows[0].title}（{len(section_rows)} 件）")
        lines.extend(_format_row(row) for row in section_rows)

    lines.append("")
    lines.append(f"相手方の対応待ち：{len(waiting)} 件")
    lines.extend(_format_row(row) for row in waiting)

    lines.append("")
    lines.append(f"完了：{completed} 件 / キャンセル：{canceled} 件")
    return "\n".join(lines)


@dependency
def send_todo_report(
    *,
    user_id: str,
    trade_repo: TradeRepository | None = None,
    discord_service: ReportProtocol | None = None,
) -> bool:
    """
    生成并发送待办日报。

    Returns:
        是否发送成功（未配置 Webhook 时为 False）。
    """
    text = make_todo_report(user_id=user_id, trade_repo=trade_repo)
    ok = discord_service.send(text)
    log(f"[Report] {user_id}: {'已发送' if ok else '发送失败或未配置'}")
    return ok
