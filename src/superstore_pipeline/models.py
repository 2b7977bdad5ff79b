"""Pydantic models used for transaction and summary validation.

These models define the expected schema for cleaned transaction records and
the repeat-customer statistics produced by the summary catalogue.
"""

from __future__ import annotations

from datetime import date
from pydantic import BaseModel, ConfigDict, Field


class Transaction(BaseModel):
    """Schema for a cleaned transaction row.

    Extra columns of the export (row id, ship mode, product fields, …) are
    ignored rather than rejected.

    Attributes:
        order_id: Order identifier (several rows can share one order).
        order_date: Parsed order date.
        ship_date: Parsed ship date, if present.
        customer_id: Customer identifier.
        customer_name: Customer display name.
        region: Sales region.
        state: State of the shipping address.
        city: City of the shipping address.
        segment: Customer segment (Consumer, Corporate, Home Office).
        category: Product category.
        sub_category: Product sub-category.
        sales: Revenue of the line, non-negative.
    """
    model_config = ConfigDict(extra="ignore")
    order_id: str = Field(..., min_length=1)
    order_date: date
    ship_date: date | None = None
    customer_id: str = Field(..., min_length=1)
    customer_name: str
    region: str
    state: str
    city: str
    segment: str
    category: str
    sub_category: str
    sales: float = Field(..., ge=0)


class RepeatCustomerStats(BaseModel):
    """How many customers bought more than once."""
    model_config = ConfigDict(extra="forbid")
    total_customers: int = Field(..., ge=0)
    repeat_customers: int = Field(..., ge=0)
    repeat_rate_pct: float = Field(..., ge=0, le=100)
