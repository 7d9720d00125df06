from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class ReportTotals(BaseModel):
    total_farmers: int
    total_bags: int
    total_revenue: float
    total_cost: float
    total_profit: float
    total_transactions: int


class FarmerRef(BaseModel):
    id: int
    full_name: str
    mobile: str
    code: str


class FeedLine(BaseModel):
    feed_name: str
    bags: int
    revenue: float
    cost: float
    profit: float
    last_approved: Optional[datetime] = None
    approved_by: str = ""


class FarmerSummary(BaseModel):
    farmer: FarmerRef
    total_bags: int
    total_revenue: float
    total_cost: float
    total_profit: float
    feeds: List[FeedLine]


class Transaction(BaseModel):
    id: int
    farmer_id: int
    feed_id: int
    feed_name: Optional[str] = None
    qty_bags: int
    price: float
    profit: float
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None


class SummaryReport(BaseModel):
    summary: ReportTotals
    farmer_summary: List[FarmerSummary]
    transactions: List[Transaction]


class FeedBreakdown(BaseModel):
    feed_name: str
    total_bags: int
    total_amount: float
    transactions: int


class FarmerReportTotals(BaseModel):
    total_bags: int
    total_amount: float
    total_transactions: int


class FarmerReport(BaseModel):
    farmer: FarmerRef
    status: str
    summary: FarmerReportTotals
    feed_breakdown: List[FeedBreakdown]
    transactions: List[Transaction]


class StockLine(BaseModel):
    feed_id: int
    feed_name: str
    feed_type: str
    total_ordered: int
    total_sold: int
    remaining_stock: int
    current_price: float
    purchase_price: float
    bag_weight: float
    last_updated: Optional[datetime] = None


class StockReportTotals(BaseModel):
    total_feeds: int
    total_ordered: int
    total_sold: int
    total_remaining: int
    total_value: float


class StockReport(BaseModel):
    summary: StockReportTotals
    feed_stock_report: List[StockLine]
