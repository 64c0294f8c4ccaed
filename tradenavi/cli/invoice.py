"""销售请求书 CLI（一览 / 合计）。"""

from __future__ import annotations

import argparse
import sys

from rich.console import Console
from rich.table import Table

from tradenavi.core.config import load_env
from tradenavi.core.log import log
from tradenavi.core.rules.precision import format_yen
from tradenavi.core.rules.totals import calculate_invoice_totals, tax_rate_for_invoice
from tradenavi.flows.invoice import get_invoice_totals, list_invoices

console = Console()


def _parse_args() -> argparse.Namespace:
    """解析命令行参数。"""
    parser = argparse.ArgumentParser(
        prog="python -m tradenavi.cli.invoice",
        description="销售请求书（ホール / 業者）",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="子命令")

    list_parser = subparsers.add_parser("list", help="请求书一览")
    list_parser.add_argument("--type", choices=["hall", "vendor"], help="按类型过滤")

    totals_parser = subparsers.add_parser("totals", help="计算单张请求书合计")
    totals_parser.add_argument("--id", required=True, help="请求书 ID")

    return parser.parse_args()


def _do_list(args: argparse.Namespace) -> int:
    """执行 list 命令。"""
    try:
        invoices = list_invoices(invoice_type=args.type)
        if not invoices:
            log("（无请求书）")
            return 0
        table = Table(title=f"請求書一覧（{len(invoices)} 件）")
        table.add_column("ID")
        table.add_column("種別")
        table.add_column("発行日")
        table.add_column("宛先")
        table.add_column("合計", justify="right")
        for invoice in invoices:
            totals = calculate_invoice_totals(invoice)
            table.add_row(
                invoice.invoice_id,
                "ホール" if invoice.invoice_type == "hall" else "業者",
                invoice.issued_date.isoformat() if invoice.issued_date else "-",
                invoice.buyer_name or invoice.vendor_name or "-",
                format_yen(totals.total),
            )
        console.print(table)
        return 0
    except Exception as err:  # noqa: BLE001
        log(f"❌ 查询请求书失败：{err}")
        return 5


def _do_totals(args: argparse.Namespace) -> int:
    """执行 totals 命令。"""
    try:
        invoice, totals = get_invoice_totals(invoice_id=args.id)
        rate = tax_rate_for_invoice(invoice.invoice_type)
        log(f"請求書 {invoice.invoice_id}（{invoice.invoice_type}，税率 {rate:.0%}）")
        log(f"   小計: {format_yen(totals.subtotal)}")
        log(f"   消費税: {format_yen(totals.tax)}")
        log(f"   保険料: {format_yen(totals.insurance)}")
        log(f"   合計: {format_yen(totals.total)}")
        return 0
    except ValueError as err:
        log(f"❌ 查询失败：{err}")
        return 4
    except Exception as err:  # noqa: BLE001
        log(f"❌ 计算合计失败：{err}")
        return 5


def main() -> int:
    """
    请求书 CLI 入口。

    Returns:
        退出码：0=成功；4=参数错误；5=其他失败。
    """
    load_env()
    args = _parse_args()
    if args.command == "list":
        return _do_list(args)
    elif args.command == "totals":
        return _do_totals(args)
    log(f"❌ 未知命令：{args.command}")
    return 4


if __name__ == "__main__":
    sys.exit(main())
