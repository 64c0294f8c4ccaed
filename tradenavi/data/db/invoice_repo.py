from __future__ import annotations

import sqlite3
from datetime import date, datetime

from tradenavi.core.models import InvoiceItem, InvoiceType, SalesInvoice


class InvoiceRepo:
    """SQLite 销售请求书仓储实现（主表 + 按 position 排序的明细表）。"""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get(self, invoice_id: str) -> SalesInvoice | None:
        row = self.conn.execute(
            "SELECT * FROM sales_invoices WHERE invoice_id = ?",
            (invoice_id,),
        ).fetchone()
        if row is None:
            return None
        return self._assemble(row)

    def list_all(self, invoice_type: InvoiceType | None = None) -> list[SalesInvoice]:
        if invoice_type:
            rows = self.conn.execute(
                "SELECT * FROM sales_invoices WHERE invoice_type = ? ORDER BY created_at DESC, invoice_id",
                (invoice_type,),
            ).fetchall()
        else:
            rows = self.conn.execute(
                "SELECT * FROM sales_invoices ORDER BY created_at DESC, invoice_id"
            ).fetchall()
        return [self._assemble(r) for r in rows]

    def add(self, invoice: SalesInvoice) -> SalesInvoice:
        """
        新增请求书。

        Raises:
            ValueError: 请求书 ID 已存在。
        """
        if self.get(invoice.invoice_id) is not None:
            raise ValueError(f"请求书已存在：{invoice.invoice_id}")
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO sales_invoices (invoice_id, invoice_type, created_at, issued_date,
                    payment_due_date, vendor_name, buyer_name, staff, manager,
                    subtotal, tax, insurance, total_amount, remarks)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    invoice.invoice_id,
                    invoice.invoice_type,
                    invoice.created_at.isoformat(),
                    invoice.issued_date.isoformat() if invoice.issued_date else None,
                    invoice.payment_due_date.isoformat() if invoice.payment_due_date else None,
                    invoice.vendor_name,
                    invoice.buyer_name,
                    invoice.staff,
                    invoice.manager,
                    invoice.subtotal,
                    invoice.tax,
                    invoice.insurance,
                    invoice.total_amount,
                    invoice.remarks,
                ),
            )
            self.conn.executemany(
                """
                INSERT INTO sales_invoice_items (invoice_id, position, inventory_id, maker,
                    product_name, type, quantity, unit_price, amount, note)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        invoice.invoice_id,
                        position,
                        item.inventory_id,
                        item.maker,
                        item.product_name,
                        item.type,
                        item.quantity,
                        item.unit_price,
                        item.amount,
                        item.note,
                    )
                    for position, item in enumerate(invoice.items)
                ],
            )
        return invoice

    def _assemble(self, row: sqlite3.Row) -> SalesInvoice:
        item_rows = self.conn.execute(
            "SELECT * FROM sales_invoice_items WHERE invoice_id = ? ORDER BY position",
            (row["invoice_id"],),
        ).fetchall()
        return SalesInvoice(
            invoice_id=row["invoice_id"],
            invoice_type=row["invoice_type"],
            created_at=datetime.fromisoformat(row["created_at"]),
            issued_date=date.fromisoformat(row["issued_date"]) if row["issued_date"] else None,
            payment_due_date=(
                date.fromisoformat(row["payment_due_date"]) if row["payment_due_date"] else None
            ),
            vendor_name=row["vendor_name"],
            buyer_name=row["buyer_name"],
            staff=row["staff"],
            manager=row["manager"],
            subtotal=row["subtotal"],
            tax=row["tax"],
            insurance=row["insurance"],
            total_amount=row["total_amount"],
            remarks=row["remarks"],
            items=[
                InvoiceItem(
                    inventory_id=r["inventory_id"],
                    maker=r["maker"],
                    product_name=r["product_name"],
                    type=r["type"],
                    quantity=r["quantity"],
                    unit_price=r["unit_price"],
                    amount=r["amount"],
                    note=r["note"],
                )
                for r in item_rows
            ],
        )
