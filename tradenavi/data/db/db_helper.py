from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from tradenavi.core.config import enable_sql_debug, get_db_path

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 3

SCHEMA_DDL = """
CREATE TABLE IF NOT EXISTS trades (
    id TEXT PRIMARY KEY,
    navi_id INTEGER,
    status TEXT,
    seller_user_id TEXT,
    seller_company TEXT NOT NULL DEFAULT '',
    seller_address TEXT,
    seller_tel TEXT,
    seller_contact TEXT,
    buyer_user_id TEXT,
    buyer_company TEXT NOT NULL DEFAULT '',
    buyer_address TEXT,
    buyer_tel TEXT,
    buyer_contact TEXT,
    buyer_name TEXT,
    category TEXT,
    tax_rate TEXT,
    insurance_fee INTEGER,
    shipping_fee INTEGER,
    total_amount INTEGER,
    payment_amount INTEGER,
    payment_method TEXT,
    handler_name TEXT,
    shipping_method TEXT,
    remarks TEXT,
    created_at TEXT,
    updated_at TEXT,
    contract_date TEXT,
    shipment_date TEXT,
    document_sent_date TEXT,
    payment_date TEXT,
    completed_at TEXT,
    canceled_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_trades_seller ON trades(seller_user_id);
CREATE INDEX IF NOT EXISTS idx_trades_buyer ON trades(buyer_user_id);

CREATE TABLE IF NOT EXISTS trade_items (
    trade_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    line_id TEXT,
    item_name TEXT NOT NULL,
    maker TEXT,
    category TEXT,
    quantity INTEGER,
    unit_price INTEGER,
    amount INTEGER,
    is_taxable INTEGER NOT NULL DEFAULT 1,
    note TEXT,
    PRIMARY KEY (trade_id, position),
    FOREIGN KEY (trade_id) REFERENCES trades(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS trade_todos (
    trade_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    kind TEXT NOT NULL,
    assignee TEXT NOT NULL,
    status TEXT NOT NULL,
    PRIMARY KEY (trade_id, position),
    FOREIGN KEY (trade_id) REFERENCES trades(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS sales_invoices (
    invoice_id TEXT PRIMARY KEY,
    invoice_type TEXT NOT NULL,
    created_at TEXT NOT NULL,
    issued_date TEXT,
    payment_due_date TEXT,
    vendor_name TEXT,
    buyer_name TEXT,
    staff TEXT,
    manager TEXT,
    subtotal INTEGER,
    tax INTEGER,
    insurance INTEGER,
    total_amount INTEGER,
    remarks TEXT
);

CREATE TABLE IF NOT EXISTS sales_invoice_items (
    invoice_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    inventory_id TEXT,
    maker TEXT,
    product_name TEXT,
    type TEXT,
    quantity INTEGER,
    unit_price INTEGER,
    amount INTEGER,
    note TEXT,
    PRIMARY KEY (invoice_id, position),
    FOREIGN KEY (invoice_id) REFERENCES sales_invoices(invoice_id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class DbHelper:
    """
    SQLite 连接/Schema 初始化 Helper。

    职责：
    - 初始化数据库文件与表结构（如不存在则创建）；
    - 提供带 RowFactory 的连接；
    - 维护一个进程内共享连接（简单场景）。

    说明：db_path=":memory:" 时使用内存库（测试用），不创建目录。
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or get_db_path()
        self._conn: Optional[sqlite3.Connection] = None

    def get_connection(self) -> sqlite3.Connection:
        """
        获取（或创建）SQLite 连接。

        Returns:
            已初始化的 sqlite3.Connection，`row_factory` 已设置为 sqlite3.Row。
        """
        if self._conn is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            if enable_sql_debug():
                conn.set_trace_callback(logger.debug)
            self._conn = conn
        return self._conn

    def init_schema_if_needed(self) -> None:
        """
        初始化表结构与 meta.schema_version（若未设置）。

        副作用：可能创建目录/文件，执行 DDL。

        Raises:
            RuntimeError: 已有库的 schema 版本过旧。
        """
        conn = self.get_connection()
        with conn:
            conn.executescript(SCHEMA_DDL)
            row = conn.execute(
                "SELECT value FROM meta WHERE key = ?",
                ("schema_version",),
            ).fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO meta(key, value) VALUES (?, ?)",
                    ("schema_version", str(SCHEMA_VERSION)),
                )
            else:
                # 开发阶段：版本不匹配时提示重建数据库
                current_version = int(row["value"])
                if current_version < SCHEMA_VERSION:
                    raise RuntimeError(
                        f"[DbHelper] Schema 版本过旧（当前 v{current_version}，需要 v{SCHEMA_VERSION}）。"
                        f"开发阶段请删除 {self.db_path} 后重新运行。"
                    )

    def close(self) -> None:
        """关闭连接并释放引用。"""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
