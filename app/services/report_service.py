"""
Read-only aggregates over approved feed requests.

Revenue, cost and profit always come from the prices frozen on the request
at approval time, so a later stock price change never moves past totals.
"""
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.core.timezone import local_day_bounds
from app.models.farmer import Farmer
from app.models.feed_request import FeedRequest, RequestStatus
from app.models.stock import StockItem
from app.schemas.report import (
    FarmerRef,
    FarmerReport,
    FarmerReportTotals,
    FarmerSummary,
    FeedBreakdown,
    FeedLine,
    ReportTotals,
    StockLine,
    StockReport,
    StockReportTotals,
    SummaryReport,
    Transaction,
)

logger = get_logger(module="report_service")

ZERO = Decimal("0")


def _approved_query(
    db: Session,
    start_date: Optional[date],
    end_date: Optional[date],
):
    query = (
        db.query(FeedRequest)
        .options(joinedload(FeedRequest.farmer), joinedload(FeedRequest.feed))
        .filter(FeedRequest.status == RequestStatus.APPROVED.value)
    )
    start_dt, end_dt = local_day_bounds(start_date, end_date)
    if start_dt is not None:
        query = query.filter(FeedRequest.approved_at >= start_dt)
    if end_dt is not None:
        query = query.filter(FeedRequest.approved_at < end_dt)
    return query.order_by(FeedRequest.approved_at.desc(), FeedRequest.id.desc())


def _revenue(req: FeedRequest) -> Decimal:
    return (req.selling_price_at_approval or ZERO) * req.qty_bags


def _cost(req: FeedRequest) -> Decimal:
    return (req.purchase_price_at_approval or ZERO) * req.qty_bags


def _profit(req: FeedRequest) -> Decimal:
    if req.total_profit_at_approval is not None:
        return req.total_profit_at_approval
    return _revenue(req) - _cost(req)


def _farmer_ref(farmer: Farmer) -> FarmerRef:
    return FarmerRef(
        id=farmer.id,
        full_name=farmer.full_name,
        mobile=farmer.mobile,
        code=farmer.code,
    )


def _transaction(req: FeedRequest) -> Transaction:
    return Transaction(
        id=req.id,
        farmer_id=req.farmer_id,
        feed_id=req.feed_id,
        feed_name=req.feed.name if req.feed else None,
        qty_bags=req.qty_bags,
        price=float(req.price),
        profit=float(_profit(req)),
        approved_by=req.approved_by,
        approved_at=req.approved_at,
    )


def build_summary_report(
    db: Session,
    farmer_id: Optional[int] = None,
    approved_by: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> SummaryReport:
    query = _approved_query(db, start_date, end_date)
    if farmer_id is not None:
        query = query.filter(FeedRequest.farmer_id == farmer_id)
    if approved_by:
        query = query.filter(FeedRequest.approved_by == approved_by)
    requests: List[FeedRequest] = query.all()

    total_bags = 0
    total_revenue = total_cost = total_profit = ZERO
    per_farmer: Dict[int, dict] = OrderedDict()

    for req in requests:
        revenue, cost, profit = _revenue(req), _cost(req), _profit(req)
        total_bags += req.qty_bags
        total_revenue += revenue
        total_cost += cost
        total_profit += profit

        if req.farmer is None:
            continue

        entry = per_farmer.setdefault(
            req.farmer_id,
            {
                "farmer": _farmer_ref(req.farmer),
                "bags": 0,
                "revenue": ZERO,
                "cost": ZERO,
                "profit": ZERO,
                "feeds": OrderedDict(),
            },
        )
        entry["bags"] += req.qty_bags
        entry["revenue"] += revenue
        entry["cost"] += cost
        entry["profit"] += profit

        feed_name = req.feed.name if req.feed else f"#{req.feed_id}"
        line = entry["feeds"].get(feed_name)
        if line is None:
            entry["feeds"][feed_name] = {
                "bags": req.qty_bags,
                "revenue": revenue,
                "cost": cost,
                "profit": profit,
                "last_approved": req.approved_at,
                "approved_by": req.approved_by or "",
            }
            continue

        line["bags"] += req.qty_bags
        line["revenue"] += revenue
        line["cost"] += cost
        line["profit"] += profit
        if req.approved_at and (
            line["last_approved"] is None or req.approved_at > line["last_approved"]
        ):
            line["last_approved"] = req.approved_at
            line["approved_by"] = req.approved_by or ""

    farmer_summary = [
        FarmerSummary(
            farmer=entry["farmer"],
            total_bags=entry["bags"],
            total_revenue=float(entry["revenue"]),
            total_cost=float(entry["cost"]),
            total_profit=float(entry["profit"]),
            feeds=[
                FeedLine(
                    feed_name=name,
                    bags=line["bags"],
                    revenue=float(line["revenue"]),
                    cost=float(line["cost"]),
                    profit=float(line["profit"]),
                    last_approved=line["last_approved"],
                    approved_by=line["approved_by"],
                )
                for name, line in entry["feeds"].items()
            ],
        )
        for entry in per_farmer.values()
    ]
    farmer_summary.sort(key=lambda s: s.total_profit, reverse=True)

    logger.info(
        "Summary report built",
        transactions=len(requests),
        farmer_id=farmer_id,
        approved_by=approved_by,
    )

    return SummaryReport(
        summary=ReportTotals(
            total_farmers=len(farmer_summary),
            total_bags=total_bags,
            total_revenue=float(total_revenue),
            total_cost=float(total_cost),
            total_profit=float(total_profit),
            total_transactions=len(requests),
        ),
        farmer_summary=farmer_summary,
        transactions=[_transaction(r) for r in requests],
    )


def build_farmer_report(
    db: Session,
    farmer_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> FarmerReport:
    farmer = db.get(Farmer, farmer_id)
    if not farmer:
        raise NotFoundError("Farmer not found")

    requests = (
        _approved_query(db, start_date, end_date)
        .filter(FeedRequest.farmer_id == farmer_id)
        .all()
    )

    total_bags = 0
    total_amount = ZERO
    breakdown: Dict[str, dict] = OrderedDict()
    for req in requests:
        total_bags += req.qty_bags
        total_amount += req.price

        feed_name = req.feed.name if req.feed else f"#{req.feed_id}"
        item = breakdown.setdefault(feed_name, {"bags": 0, "amount": ZERO, "count": 0})
        item["bags"] += req.qty_bags
        item["amount"] += req.price
        item["count"] += 1

    return FarmerReport(
        farmer=_farmer_ref(farmer),
        status=farmer.status,
        summary=FarmerReportTotals(
            total_bags=total_bags,
            total_amount=float(total_amount),
            total_transactions=len(requests),
        ),
        feed_breakdown=[
            FeedBreakdown(
                feed_name=name,
                total_bags=item["bags"],
                total_amount=float(item["amount"]),
                transactions=item["count"],
            )
            for name, item in breakdown.items()
        ],
        transactions=[_transaction(r) for r in requests],
    )


def build_stock_report(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> StockReport:
    stock_items = db.query(StockItem).order_by(StockItem.name.asc()).all()

    sold: Dict[int, int] = {}
    for req in _approved_query(db, start_date, end_date).all():
        sold[req.feed_id] = sold.get(req.feed_id, 0) + req.qty_bags

    lines = []
    for item in stock_items:
        sold_in_period = sold.get(item.id, 0)
        # no stock-inward table: current + sold approximates what was ordered
        lines.append(
            StockLine(
                feed_id=item.id,
                feed_name=item.name,
                feed_type=item.type,
                total_ordered=item.quantity_bags + sold_in_period,
                total_sold=sold_in_period,
                remaining_stock=item.quantity_bags,
                current_price=float(item.selling_price),
                purchase_price=float(item.purchase_price),
                bag_weight=float(item.bag_weight),
                last_updated=item.last_updated,
            )
        )

    return StockReport(
        summary=StockReportTotals(
            total_feeds=len(lines),
            total_ordered=sum(line.total_ordered for line in lines),
            total_sold=sum(line.total_sold for line in lines),
            total_remaining=sum(line.remaining_stock for line in lines),
            total_value=float(
                sum((item.quantity_bags * item.selling_price for item in stock_items), ZERO)
            ),
        ),
        feed_stock_report=lines,
    )
