"""
取引ナビ交易 CLI。

用法：
    python -m tradenavi.cli.trade list --user u-buyer --status in_progress --sort amount --desc
    python -m tradenavi.cli.trade show --id T-001 --user u-buyer
    python -m tradenavi.cli.trade advance --id T-001 --kind application_sent --user u-buyer
    python -m tradenavi.cli.trade cancel --id T-001 --user u-seller
"""

from __future__ import annotations

import argparse
import sys
from datetime import date

from rich.console import Console
from rich.table import Table

from tradenavi.core.config import load_env
from tradenavi.core.log import log
from tradenavi.core.models import VALID_CATEGORIES
from tradenavi.core.rules.precision import format_yen
from tradenavi.core.rules.todo import CHECKPOINTS
from tradenavi.core.rules.totals import calculate_trade_totals, resolve_trade_total
from tradenavi.core.rules.trade_rows import SORTABLE_KEYS, RowFilter, TradeRow
from tradenavi.flows.trade import advance_trade, cancel_trade, get_trade, list_trade_rows, present_trade

console = Console()


def _parse_args() -> argparse.Namespace:
    """解析命令行参数。"""
    parser = argparse.ArgumentParser(
        prog="python -m tradenavi.cli.trade",
        description="取引ナビ：交易一览与待办操作",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="子命令")

    # ========== list 子命令 ==========
    list_parser = subparsers.add_parser("list", help="交易一览")
    list_parser.add_argument("--user", required=True, help="查看者用户 ID")
    list_parser.add_argument(
        "--status",
        choices=["all", "in_progress", "completed"],
        default="all",
        help="页签筛选（默认 all）",
    )
    list_parser.add_argument(
        "--category",
        action="append",
        choices=sorted(VALID_CATEGORIES),
        help="机种类别（可重复，默认全部）",
    )
    list_parser.add_argument("--handler", default="", help="担当者")
    list_parser.add_argument(
        "--date-target",
        choices=["contract", "shipment", "document"],
        default="contract",
        help="日期范围作用的列",
    )
    list_parser.add_argument("--from", dest="date_from", help="起始日（YYYY-MM-DD）")
    list_parser.add_argument("--to", dest="date_to", help="结束日（YYYY-MM-DD）")
    list_parser.add_argument("--keyword", default="", help="取引先 / 机种名关键字")
    list_parser.add_argument("--sort", choices=SORTABLE_KEYS, help="排序列")
    list_parser.add_argument("--desc", action="store_true", help="降序")

    # ========== show 子命令 ==========
    show_parser = subparsers.add_parser("show", help="查看交易详情与当前待办")
    show_parser.add_argument("--id", required=True, help="交易 ID")
    show_parser.add_argument("--user", required=True, help="查看者用户 ID")

    # ========== advance 子命令 ==========
    advance_parser = subparsers.add_parser("advance", help="完成当前待办（承認 / 入金完了 / 確認完了）")
    advance_parser.add_argument("--id", required=True, help="交易 ID")
    advance_parser.add_argument("--kind", required=True, choices=CHECKPOINTS, help="要完成的待办")
    advance_parser.add_argument("--user", required=True, help="操作者用户 ID")

    # ========== cancel 子命令 ==========
    cancel_parser = subparsers.add_parser("cancel", help="取消交易")
    cancel_parser.add_argument("--id", required=True, help="交易 ID")
    cancel_parser.add_argument("--user", required=True, help="操作者用户 ID")

    return parser.parse_args()


def _render_rows(rows: list[TradeRow]) -> None:
    table = Table(title=f"取引一覧（{len(rows)} 件）")
    table.add_column("状態")
    table.add_column("成約日")
    table.add_column("取引先")
    table.add_column("メーカー")
    table.add_column("機種名")
    table.add_column("台数", justify="right")
    table.add_column("金額", justify="right")
    table.add_column("発送日")
    table.add_column("入金")
    table.add_column("担当")
    for row in rows:
        status = f"[bold]{row.title}[/bold]" if row.actionable else row.title
        table.add_row(
            status,
            row.contract_date.isoformat() if row.contract_date else "-",
            row.partner or "-",
            row.maker,
            row.item_name,
            str(row.quantity),
            format_yen(row.amount),
            row.shipment_date.isoformat() if row.shipment_date else "-",
            "済" if row.payment_completed else "未",
            row.handler or "-",
        )
    console.print(table)


def _do_list(args: argparse.Namespace) -> int:
    """执行 list 命令。

    Returns:
        退出码：0=成功；4=参数错误；5=其他失败。
    """
    try:
        row_filter = RowFilter(
            categories=frozenset(args.category) if args.category else frozenset(VALID_CATEGORIES),
            status=args.status,
            handler=args.handler,
            date_target=args.date_target,
            date_from=date.fromisoformat(args.date_from) if args.date_from else None,
            date_to=date.fromisoformat(args.date_to) if args.date_to else None,
            keyword=args.keyword,
        )
        log(f"[Trade:list] user={args.user} status={args.status}")
        rows = list_trade_rows(
            user_id=args.user,
            row_filter=row_filter,
            sort_key=args.sort,
            direction="desc" if args.desc else "asc",
        )
        if not rows:
            log("（无交易记录）")
            return 0
        _render_rows(rows)
        return 0
    except ValueError as err:
        log(f"❌ 参数错误：{err}")
        return 4
    except Exception as err:  # noqa: BLE001
        log(f"❌ 查询交易失败：{err}")
        return 5


def _do_show(args: argparse.Namespace) -> int:
    """执行 show 命令。"""
    try:
        presentation = present_trade(trade_id=args.id, viewer_user_id=args.user)
        trade = get_trade(trade_id=args.id)
        totals = calculate_trade_totals(trade)

        log(f"[{trade.navi_id or trade.id}] {presentation.title}")
        log(f"   {presentation.description}")
        log(f"   売主: {trade.seller.company_name or '-'} / 買主: {trade.buyer_name or trade.buyer.company_name or '-'}")
        for item in trade.items:
            log(f"   • {item.maker or '-'} {item.item_name} ×{item.quantity if item.quantity is not None else '-'}")
        log(
            f"   小計 {format_yen(totals.subtotal)} / 消費税 {format_yen(totals.tax)} / "
            f"合計 {format_yen(resolve_trade_total(trade))}"
        )
        if presentation.primary_action is not None:
            log(f"   ▶ 次の操作：{presentation.primary_action.label}（--kind {presentation.todo_kind}）")
        return 0
    except ValueError as err:
        log(f"❌ 查询失败：{err}")
        return 4
    except Exception as err:  # noqa: BLE001
        log(f"❌ 查询交易失败：{err}")
        return 5


def _do_advance(args: argparse.Namespace) -> int:
    """执行 advance 命令。"""
    try:
        log(f"[Trade:advance] {args.id}: {args.kind} by {args.user}")
        trade = advance_trade(trade_id=args.id, completed_kind=args.kind, actor_user_id=args.user)
        log(f"✅ 已推进：{trade.id} → {trade.status}")
        return 0
    except ValueError as err:
        log(f"❌ 推进失败：{err}")
        return 4
    except Exception as err:  # noqa: BLE001
        log(f"❌ 推进交易失败：{err}")
        return 5


def _do_cancel(args: argparse.Namespace) -> int:
    """执行 cancel 命令。"""
    try:
        log(f"[Trade:cancel] 取消交易：ID={args.id}")
        cancel_trade(trade_id=args.id, actor_user_id=args.user)
        log(f"✅ 交易 {args.id} 已取消")
        return 0
    except ValueError as err:
        log(f"❌ 取消失败：{err}")
        return 4
    except Exception as err:  # noqa: BLE001
        log(f"❌ 取消交易失败：{err}")
        return 5


def main() -> int:
    """
    交易 CLI 入口。

    Returns:
        退出码：0=成功；4=参数错误；5=其他失败。
    """
    load_env()
    args = _parse_args()

    if args.command == "list":
        return _do_list(args)
    elif args.command == "show":
        return _do_show(args)
    elif args.command == "advance":
        return _do_advance(args)
    elif args.command == "cancel":
        return _do_cancel(args)
    else:
        log(f"❌ 未知命令：{args.command}")
        return 4


if __name__ == "__main__":
    sys.exit(main())
