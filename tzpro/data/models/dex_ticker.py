"""DEX ticker data model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from ..core.descriptor import FieldDescriptor, TypeDescriptor, register_type_descriptor
from ..core.enums import SemanticKind


class DexTicker(BaseModel):
    """24h statistics of a DEX liquidity pool.

    Prices and volumes arrive as decimal strings and are kept as Decimal.
    """

    pair: str = ""
    pool: str = ""
    name: str = ""
    entity: str = ""
    price_change: Decimal = Decimal("0")
    price_change_bps: Decimal = Decimal("0")
    ask_price: Decimal = Decimal("0")
    weighted_avg_price: Decimal = Decimal("0")
    last_price: Decimal = Decimal("0")
    last_qty: Decimal = Decimal("0")
    last_trade_time: datetime | None = None
    base_volume: Decimal = Decimal("0")
    quote_volume: Decimal = Decimal("0")
    open_price: Decimal = Decimal("0")
    high_price: Decimal = Decimal("0")
    low_price: Decimal = Decimal("0")
    open_time: datetime | None = None
    close_time: datetime | None = None
    num_trades: int = 0
    liquidity_usd: Decimal = Decimal("0")
    price_usd: Decimal = Decimal("0")

    model_config = ConfigDict(frozen=True)


_DECIMAL_COLUMNS = (
    "price_change",
    "price_change_bps",
    "ask_price",
    "weighted_avg_price",
    "last_price",
    "last_qty",
    "base_volume",
    "quote_volume",
    "open_price",
    "high_price",
    "low_price",
    "liquidity_usd",
    "price_usd",
)

DEX_TICKER_DESCRIPTOR = register_type_descriptor(
    TypeDescriptor.build(
        DexTicker,
        [
            FieldDescriptor("pair", SemanticKind.STRING),
            FieldDescriptor("pool", SemanticKind.STRING),
            FieldDescriptor("name", SemanticKind.STRING),
            FieldDescriptor("entity", SemanticKind.STRING),
            *(FieldDescriptor(c, SemanticKind.DECIMAL) for c in _DECIMAL_COLUMNS),
            FieldDescriptor("last_trade_time", SemanticKind.TIMESTAMP),
            FieldDescriptor("open_time", SemanticKind.TIMESTAMP),
            FieldDescriptor("close_time", SemanticKind.TIMESTAMP),
            FieldDescriptor("num_trades", SemanticKind.INT64),
        ],
        cursor_attr=None,
    )
)
