"""
旧数据规范化（Pydantic 模型）。

职责：
- 接收形状不一的旧版交易 JSON（qty/quantity、itemName/machineName/productName 等别名并存）；
- 在仓储边界一次性转换为规范的 TradeRecord，下游规则不再分支判断形状；
- 数值/日期宽松解析：无法解析的值视为缺失（None），不让单个字段拖垮整行。

结构性错误（缺少 id、seller/buyer 无法识别、无明细）由 ValidationError / ValueError 报告，
交给导入流程统计为失败行。
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from tradenavi.core.models import VALID_CATEGORIES, CompanyProfile, StatementItem, TodoItem, TradeRecord
from tradenavi.core.rules.precision import floor_yen, within_range

_TODO_KINDS = {
    "application_sent",
    "application_approved",
    "payment_confirmed",
    "trade_completed",
    "trade_canceled",
}
_TRADE_STATUSES = {
    "DRAFT",
    "SENT",
    "APPROVAL_REQUIRED",
    "APPROVED",
    "PAYMENT_REQUIRED",
    "CONFIRM_REQUIRED",
    "COMPLETED",
    "CANCELED",
}


def _lenient_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        # {label, amount} 形式的附加费
        value = value.get("amount")
        if value is None:
            return None
    if isinstance(value, bool):
        return None
    try:
        dec = Decimal(str(value).strip().replace(",", ""))
    except InvalidOperation:
        return None
    return floor_yen(dec) if within_range(dec) else None


def _lenient_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def _lenient_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


class LegacyCompany(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    user_id: str | None = Field(None, validation_alias=AliasChoices("userId", "user_id", "id"))
    company_name: str = Field("", validation_alias=AliasChoices("companyName", "company_name", "name"))
    address: str | None = None
    tel: str | None = None
    contact_name: str | None = Field(None, validation_alias=AliasChoices("contactName", "contact_name"))

    def to_profile(self) -> CompanyProfile:
        return CompanyProfile(
            user_id=self.user_id,
            company_name=self.company_name or "",
            address=self.address,
            tel=self.tel,
            contact_name=self.contact_name,
        )


class LegacyItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    item_name: str = Field(
        "",
        validation_alias=AliasChoices("itemName", "item_name", "machineName", "productName", "name"),
    )
    maker: str | None = None
    quantity: int | None = Field(None, validation_alias=AliasChoices("qty", "quantity"))
    unit_price: int | None = Field(None, validation_alias=AliasChoices("unitPrice", "unit_price", "price"))
    amount: int | None = None
    is_taxable: bool = Field(True, validation_alias=AliasChoices("isTaxable", "is_taxable"))
    category: str | None = None
    line_id: str | None = Field(None, validation_alias=AliasChoices("lineId", "line_id"))
    note: str | None = None

    @field_validator("quantity", "unit_price", "amount", mode="before")
    @classmethod
    def _parse_number(cls, value: Any) -> int | None:
        return _lenient_int(value)

    @field_validator("is_taxable", mode="before")
    @classmethod
    def _parse_taxable(cls, value: Any) -> bool:
        # 仅显式 false 视为非课税
        return value is not False and str(value).lower() != "false"

    def to_item(self) -> StatementItem:
        return StatementItem(
            item_name=self.item_name or "商品",
            maker=self.maker,
            quantity=self.quantity,
            unit_price=self.unit_price,
            amount=self.amount,
            is_taxable=self.is_taxable,
            category=self.category,
            line_id=self.line_id,
            note=self.note,
        )


class LegacyTodo(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    kind: str | None = None
    assignee: str = "buyer"
    status: str = "open"


class LegacyTradePayload(BaseModel):
    """
    旧版交易 JSON 的宽松模型。

    兼容：
    - seller/buyer 对象缺失时由 sellerUserId/buyerUserId/buyerName 补齐；
    - items 为空时由 makerName/itemName/quantity/unitPrice 合成单行明细；
    - insuranceFee 可为数值或 {label, amount}；
    - 非法的 category/status/todo kind 视为缺失。
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(validation_alias=AliasChoices("id", "tradeId", "naviTradeId"))
    navi_id: int | None = Field(None, validation_alias=AliasChoices("naviId", "navi_id"))
    status: str | None = None
    seller: LegacyCompany | None = None
    buyer: LegacyCompany | None = None
    seller_user_id: str | None = Field(None, validation_alias=AliasChoices("sellerUserId", "seller_user_id"))
    buyer_user_id: str | None = Field(None, validation_alias=AliasChoices("buyerUserId", "buyer_user_id"))
    buyer_name: str | None = Field(
        None, validation_alias=AliasChoices("buyerName", "buyer_name", "buyerCompanyName")
    )
    items: list[LegacyItem] = Field(default_factory=list)
    todos: list[LegacyTodo] = Field(default_factory=list)

    maker_name: str | None = Field(None, validation_alias=AliasChoices("makerName", "maker"))
    item_name: str | None = Field(None, validation_alias=AliasChoices("itemName", "machineName", "productName"))
    quantity: int | None = Field(None, validation_alias=AliasChoices("quantity", "qty"))
    unit_price: int | None = Field(None, validation_alias=AliasChoices("unitPrice", "unit_price"))

    created_at: datetime | None = Field(None, validation_alias=AliasChoices("createdAt", "created_at"))
    updated_at: datetime | None = Field(None, validation_alias=AliasChoices("updatedAt", "updated_at"))
    contract_date: date | None = Field(None, validation_alias=AliasChoices("contractDate", "contract_date"))
    shipment_date: date | None = Field(
        None, validation_alias=AliasChoices("shipmentDate", "shipment_date", "machineShipmentDate")
    )
    document_sent_date: date | None = Field(
        None, validation_alias=AliasChoices("documentSentDate", "document_sent_date")
    )
    payment_date: date | None = Field(None, validation_alias=AliasChoices("paymentDate", "payment_date"))
    completed_at: datetime | None = Field(None, validation_alias=AliasChoices("completedAt", "completed_at"))
    canceled_at: datetime | None = Field(None, validation_alias=AliasChoices("canceledAt", "canceled_at"))

    category: str | None = None
    tax_rate: Decimal | None = Field(None, validation_alias=AliasChoices("taxRate", "tax_rate"))
    insurance_fee: int | None = Field(
        None, validation_alias=AliasChoices("insuranceFee", "insurance", "insurance_fee")
    )
    shipping_fee: int | None = Field(None, validation_alias=AliasChoices("shippingFee", "shipping_fee"))
    total_amount: int | None = Field(None, validation_alias=AliasChoices("totalAmount", "total_amount"))
    payment_amount: int | None = Field(None, validation_alias=AliasChoices("paymentAmount", "payment_amount"))
    payment_method: str | None = Field(None, validation_alias=AliasChoices("paymentMethod", "payment_method"))
    handler_name: str | None = Field(None, validation_alias=AliasChoices("handlerName", "handler", "handler_name"))
    shipping_method: str | None = Field(
        None, validation_alias=AliasChoices("shippingMethod", "receiveMethod", "shipping_method")
    )
    remarks: str | None = Field(None, validation_alias=AliasChoices("remarks", "notes", "memo"))

    @field_validator("id", mode="before")
    @classmethod
    def _parse_id(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            raise ValueError("id 不能为空")
        return str(value).strip()

    @field_validator(
        "navi_id",
        "quantity",
        "unit_price",
        "insurance_fee",
        "shipping_fee",
        "total_amount",
        "payment_amount",
        mode="before",
    )
    @classmethod
    def _parse_number(cls, value: Any) -> int | None:
        return _lenient_int(value)

    @field_validator("contract_date", "shipment_date", "document_sent_date", "payment_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> date | None:
        return _lenient_date(value)

    @field_validator("created_at", "updated_at", "completed_at", "canceled_at", mode="before")
    @classmethod
    def _parse_datetime(cls, value: Any) -> datetime | None:
        return _lenient_datetime(value)

    @field_validator("tax_rate", mode="before")
    @classmethod
    def _parse_rate(cls, value: Any) -> Decimal | None:
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            rate = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        return rate if rate.is_finite() and rate >= 0 else None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip().upper()
        return text if text in _TRADE_STATUSES else None

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip().lower()
        return text if text in VALID_CATEGORIES else None

    def to_trade_record(self) -> TradeRecord:
        """
        转换为规范 TradeRecord。

        Raises:
            ValueError: 买卖双方无法识别、双方相同，或没有任何明细。
        """
        seller = self.seller.to_profile() if self.seller else CompanyProfile()
        buyer = self.buyer.to_profile() if self.buyer else CompanyProfile()
        if not buyer.company_name and self.buyer_name:
            buyer.company_name = self.buyer_name
        seller_id = self.seller_user_id or seller.user_id
        buyer_id = self.buyer_user_id or buyer.user_id
        if not seller_id or not buyer_id:
            raise ValueError(f"交易 {self.id} 缺少卖方或买方用户 ID")
        if seller_id == buyer_id:
            raise ValueError(f"交易 {self.id} 的卖方与买方相同：{seller_id}")

        items = [item.to_item() for item in self.items]
        if not items and (self.item_name or self.maker_name):
            items = [
                StatementItem(
                    item_name=self.item_name or "商品",
                    maker=self.maker_name,
                    quantity=self.quantity,
                    unit_price=self.unit_price,
                )
            ]
        if not items:
            raise ValueError(f"交易 {self.id} 没有明细")

        todos = [
            TodoItem(
                kind=todo.kind,
                assignee=todo.assignee if todo.assignee in ("buyer", "seller") else "buyer",
                status="done" if todo.status == "done" else "open",
            )
            for todo in self.todos
            if todo.kind in _TODO_KINDS
        ]

        return TradeRecord(
            id=self.id,
            navi_id=self.navi_id,
            status=self.status,  # type: ignore[arg-type]
            seller=seller,
            buyer=buyer,
            seller_user_id=seller_id,
            buyer_user_id=buyer_id,
            buyer_name=self.buyer_name,
            items=items,
            todos=todos,
            created_at=self.created_at,
            updated_at=self.updated_at,
            contract_date=self.contract_date,
            shipment_date=self.shipment_date,
            document_sent_date=self.document_sent_date,
            payment_date=self.payment_date,
            completed_at=self.completed_at,
            canceled_at=self.canceled_at,
            category=self.category,  # type: ignore[arg-type]
            tax_rate=self.tax_rate,
            insurance_fee=self.insurance_fee,
            shipping_fee=self.shipping_fee,
            total_amount=self.total_amount,
            payment_amount=self.payment_amount,
            payment_method=self.payment_method,
            handler_name=self.handler_name,
            shipping_method=self.shipping_method,
            remarks=self.remarks,
        )


def normalize_trade(payload: dict[str, Any]) -> TradeRecord:
    """
    单条旧数据 → TradeRecord。

    Raises:
        pydantic.ValidationError: 结构无法解析（如缺少 id）。
        ValueError: 业务上不完整（见 LegacyTradePayload.to_trade_record）。
    """
    return LegacyTradePayload.model_validate(payload).to_trade_record()
