from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime
from decimal import Decimal

from tradenavi.core.models import CompanyProfile, StatementItem, TodoItem, TradeRecord

logger = logging.getLogger(__name__)

_TRADE_COLUMNS = (
    "id, navi_id, status, "
    "seller_user_id, seller_company, seller_address, seller_tel, seller_contact, "
    "buyer_user_id, buyer_company, buyer_address, buyer_tel, buyer_contact, buyer_name, "
    "category, tax_rate, insurance_fee, shipping_fee, total_amount, payment_amount, payment_method, "
    "handler_name, shipping_method, remarks, "
    "created_at, updated_at, contract_date, shipment_date, document_sent_date, payment_date, "
    "completed_at, canceled_at"
)


class TradeRepo:
    """
    SQLite 交易仓储实现。

    - trades 表存主记录，trade_items / trade_todos 按 position 保存顺序；
    - 读取时组装为规范的 TradeRecord，调用方不接触行结构；
    - save() 以"整体覆盖"方式写回明细与待办。
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def find_by_id(self, trade_id: str) -> TradeRecord | None:
        row = self.conn.execute(
            f"SELECT {_TRADE_COLUMNS} FROM trades WHERE id = ?",
            (trade_id,),
        ).fetchone()
        if row is None:
            return None
        return self._assemble(row)

    def list_all(self) -> list[TradeRecord]:
        """返回全部交易，按 created_at 降序、id 升序。"""
        rows = self.conn.execute(
            f"SELECT {_TRADE_COLUMNS} FROM trades ORDER BY created_at DESC, id"
        ).fetchall()
        return [self._assemble(r) for r in rows]

    def list_for_user(self, user_id: str) -> list[TradeRecord]:
        """返回 user_id 参与（卖方或买方）的交易。"""
        rows = self.conn.execute(
            f"""
            SELECT {_TRADE_COLUMNS} FROM trades
            WHERE seller_user_id = ? OR buyer_user_id = ?
            ORDER BY created_at DESC, id
            """,
            (user_id, user_id),
        ).fetchall()
        return [self._assemble(r) for r in rows]

    def add(self, trade: TradeRecord) -> TradeRecord:
        """
        新增交易。

        Raises:
            ValueError: 交易 ID 已存在。
        """
        if self.exists(trade.id):
            raise ValueError(f"交易已存在：{trade.id}")
        with self.conn:
            self.conn.execute(
                f"INSERT INTO trades ({_TRADE_COLUMNS}) VALUES ({', '.join('?' * 32)})",
                _trade_params(trade),
            )
            self._write_children(trade)
        logger.debug("[TradeRepo] 新增交易 id=%s items=%d", trade.id, len(trade.items))
        return trade

    def save(self, trade: TradeRecord) -> None:
        """覆盖保存主记录、明细与待办。"""
        params = _trade_params(trade)
        assignments = ", ".join(f"{col.strip()} = ?" for col in _TRADE_COLUMNS.split(",")[1:])
        with self.conn:
            cur = self.conn.execute(
                f"UPDATE trades SET {assignments} WHERE id = ?",
                (*params[1:], trade.id),
            )
            if cur.rowcount == 0:
                raise ValueError(f"交易不存在：{trade.id}")
            self.conn.execute("DELETE FROM trade_items WHERE trade_id = ?", (trade.id,))
            self.conn.execute("DELETE FROM trade_todos WHERE trade_id = ?", (trade.id,))
            self._write_children(trade)

    def exists(self, trade_id: str) -> bool:
        row = self.conn.execute("SELECT 1 FROM trades WHERE id = ?", (trade_id,)).fetchone()
        return row is not None

    def _write_children(self, trade: TradeRecord) -> None:
        self.conn.executemany(
            """
            INSERT INTO trade_items (trade_id, position, line_id, item_name, maker, category,
                                     quantity, unit_price, amount, is_taxable, note)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    trade.id,
                    position,
                    item.line_id,
                    item.item_name,
                    item.maker,
                    item.category,
                    item.quantity,
                    item.unit_price,
                    item.amount,
                    1 if item.is_taxable else 0,
                    item.note,
                )
                for position, item in enumerate(trade.items)
            ],
        )
        self.conn.executemany(
            "INSERT INTO trade_todos (trade_id, position, kind, assignee, status) VALUES (?, ?, ?, ?, ?)",
            [
                (trade.id, position, todo.kind, todo.assignee, todo.status)
                for position, todo in enumerate(trade.todos)
            ],
        )

    def _assemble(self, row: sqlite3.Row) -> TradeRecord:
        item_rows = self.conn.execute(
            "SELECT * FROM trade_items WHERE trade_id = ? ORDER BY position",
            (row["id"],),
        ).fetchall()
        todo_rows = self.conn.execute(
            "SELECT kind, assignee, status FROM trade_todos WHERE trade_id = ? ORDER BY position",
            (row["id"],),
        ).fetchall()
        return TradeRecord(
            id=row["id"],
            navi_id=row["navi_id"],
            status=row["status"],
            seller=CompanyProfile(
                user_id=row["seller_user_id"],
                company_name=row["seller_company"] or "",
                address=row["seller_address"],
                tel=row["seller_tel"],
                contact_name=row["seller_contact"],
            ),
            buyer=CompanyProfile(
                user_id=row["buyer_user_id"],
                company_name=row["buyer_company"] or "",
                address=row["buyer_address"],
                tel=row["buyer_tel"],
                contact_name=row["buyer_contact"],
            ),
            seller_user_id=row["seller_user_id"],
            buyer_user_id=row["buyer_user_id"],
            buyer_name=row["buyer_name"],
            items=[_row_to_item(r) for r in item_rows],
            todos=[TodoItem(kind=r["kind"], assignee=r["assignee"], status=r["status"]) for r in todo_rows],
            category=row["category"],
            tax_rate=Decimal(row["tax_rate"]) if row["tax_rate"] is not None else None,
            insurance_fee=row["insurance_fee"],
            shipping_fee=row["shipping_fee"],
            total_amount=row["total_amount"],
            payment_amount=row["payment_amount"],
            payment_method=row["payment_method"],
            handler_name=row["handler_name"],
            shipping_method=row["shipping_method"],
            remarks=row["remarks"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
            contract_date=_parse_date(row["contract_date"]),
            shipment_date=_parse_date(row["shipment_date"]),
            document_sent_date=_parse_date(row["document_sent_date"]),
            payment_date=_parse_date(row["payment_date"]),
            completed_at=_parse_datetime(row["completed_at"]),
            canceled_at=_parse_datetime(row["canceled_at"]),
        )


def _trade_params(trade: TradeRecord) -> tuple:
    # seller_user_id / buyer_user_id 列存放解析后的 ID，供 list_for_user 使用
    return (
        trade.id,
        trade.navi_id,
        trade.status,
        trade.seller_id,
        trade.seller.company_name,
        trade.seller.address,
        trade.seller.tel,
        trade.seller.contact_name,
        trade.buyer_id,
        trade.buyer.company_name,
        trade.buyer.address,
        trade.buyer.tel,
        trade.buyer.contact_name,
        trade.buyer_name,
        trade.category,
        format(trade.tax_rate, "f") if trade.tax_rate is not None else None,
        trade.insurance_fee,
        trade.shipping_fee,
        trade.total_amount,
        trade.payment_amount,
        trade.payment_method,
        trade.handler_name,
        trade.shipping_method,
        trade.remarks,
        _iso(trade.created_at),
        _iso(trade.updated_at),
        _iso(trade.contract_date),
        _iso(trade.shipment_date),
        _iso(trade.document_sent_date),
        _iso(trade.payment_date),
        _iso(trade.completed_at),
        _iso(trade.canceled_at),
    )


def _row_to_item(row: sqlite3.Row) -> StatementItem:
    return StatementItem(
        item_name=row["item_name"],
        maker=row["maker"],
        quantity=row["quantity"],
        unit_price=row["unit_price"],
        amount=row["amount"],
        is_taxable=bool(row["is_taxable"]),
        category=row["category"],
        line_id=row["line_id"],
        note=row["note"],
    )


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
