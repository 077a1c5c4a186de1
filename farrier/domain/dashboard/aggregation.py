"""
Revenue aggregation over service records

Pure functions; the service feeds them rows fetched in pages. Records
without a date or a parseable base cost are left out and counted.
"""

import calendar
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from ...shared.validators import parse_cost

DEFAULT_RANK_LIMIT = 5


@dataclass
class RevenueRecord:
    day: date
    base: float
    front: float
    hind: float
    location: Optional[str] = None
    base_service: Optional[str] = None
    add_ons: tuple = ()
    customer_name: Optional[str] = None

    @property
    def revenue(self) -> float:
        return self.base + self.front + self.hind

    @property
    def add_on_revenue(self) -> float:
        return self.front + self.hind


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip()[:10]).date()
    except ValueError:
        return None


def _split_names(value: Optional[str]) -> list[str]:
    return [name.strip() for name in (value or "").split(",") if name.strip()]


def to_revenue_record(shoeing) -> Optional[RevenueRecord]:
    """Normalised view of a record, or None when it cannot be counted"""
    day = _as_date(shoeing.date_of_service)
    base = parse_cost(shoeing.cost_of_service)
    if day is None or base is None:
        return None
    return RevenueRecord(
        day=day,
        base=base,
        front=parse_cost(shoeing.cost_of_front_add_ons) or 0.0,
        hind=parse_cost(shoeing.cost_of_hind_add_ons) or 0.0,
        location=(shoeing.location or "").strip() or None,
        base_service=(shoeing.base_service or "").strip() or None,
        add_ons=tuple(_split_names(shoeing.front_add_ons) + _split_names(shoeing.hind_add_ons)),
        customer_name=(shoeing.customer_name or "").strip() or None,
    )


def collect(shoeings: Iterable) -> tuple[list[RevenueRecord], int]:
    """Countable records and the number skipped"""
    records, skipped = [], 0
    for shoeing in shoeings:
        record = to_revenue_record(shoeing)
        if record is None:
            skipped += 1
        else:
            records.append(record)
    return records, skipped


def percent_change(current: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def _shift_months(day: date, months: int) -> date:
    """First day of the month `months` away from day's month"""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def window_bounds(today: date) -> dict[str, tuple[date, date, date, date]]:
    """
    (start, end, previous_start, previous_end) per window, all inclusive.
    Previous month/quarter spans match the current span, clamped to the
    end of the shorter period.
    """
    week = (today - timedelta(days=6), today, today - timedelta(days=13), today - timedelta(days=7))

    month_start = today.replace(day=1)
    prev_month_start = _shift_months(today, -1)
    prev_month_last = prev_month_start.replace(
        day=calendar.monthrange(prev_month_start.year, prev_month_start.month)[1]
    )
    prev_month_end = min(prev_month_start + timedelta(days=today.day - 1), prev_month_last)
    month = (month_start, today, prev_month_start, prev_month_end)

    quarter_start = date(today.year, 3 * ((today.month - 1) // 3) + 1, 1)
    prev_quarter_start = _shift_months(quarter_start, -3)
    elapsed = (today - quarter_start).days
    prev_quarter_end = min(prev_quarter_start + timedelta(days=elapsed), quarter_start - timedelta(days=1))
    quarter = (quarter_start, today, prev_quarter_start, prev_quarter_end)

    return {"week": week, "month": month, "quarter": quarter}


def total_between(records: Iterable[RevenueRecord], start: date, end: date) -> float:
    return sum(r.revenue for r in records if start <= r.day <= end)


def revenue_windows(records: list[RevenueRecord], today: date) -> dict:
    windows = {}
    for name, (start, end, prev_start, prev_end) in window_bounds(today).items():
        current = total_between(records, start, end)
        previous = total_between(records, prev_start, prev_end)
        windows[name] = {
            "start": start,
            "end": end,
            "current": round(current, 2),
            "previous": round(previous, 2),
            "percent_change": round(percent_change(current, previous), 2),
        }
    return windows


def in_range(records: Iterable[RevenueRecord], date_from: Optional[date], date_to: Optional[date]):
    return [
        r
        for r in records
        if (date_from is None or r.day >= date_from) and (date_to is None or r.day <= date_to)
    ]


def _rank(totals: "OrderedDict[str, list]", grand_total: float, limit: int) -> list[dict]:
    ranked = sorted(totals.items(), key=lambda item: item[1][0], reverse=True)[:limit]
    return [
        {
            "name": name,
            "revenue": round(amount, 2),
            "count": count,
            "share": round(amount / grand_total * 100, 2) if grand_total else 0.0,
        }
        for name, (amount, count) in ranked
    ]


def _accumulate(totals: dict, name: Optional[str], amount: float) -> None:
    if not name:
        return
    entry = totals.setdefault(name, [0.0, 0])
    entry[0] += amount
    entry[1] += 1


def _add_on_shares(record: RevenueRecord):
    if not record.add_ons:
        return []
    share = record.add_on_revenue / len(record.add_ons)
    return [(name, share) for name in record.add_ons]


def top_services(records: list[RevenueRecord], limit: int = DEFAULT_RANK_LIMIT) -> list[dict]:
    totals: OrderedDict = OrderedDict()
    for record in records:
        _accumulate(totals, record.base_service, record.base)
    return _rank(totals, sum(r.revenue for r in records), limit)


def top_add_ons(records: list[RevenueRecord], limit: int = DEFAULT_RANK_LIMIT) -> list[dict]:
    """Add-on revenue is split evenly across the add-ons on each record"""
    totals: OrderedDict = OrderedDict()
    for record in records:
        for name, amount in _add_on_shares(record):
            _accumulate(totals, name, amount)
    return _rank(totals, sum(r.revenue for r in records), limit)


def top_products(records: list[RevenueRecord], limit: int = DEFAULT_RANK_LIMIT) -> list[dict]:
    totals: OrderedDict = OrderedDict()
    for record in records:
        _accumulate(totals, record.base_service, record.base)
        for name, amount in _add_on_shares(record):
            _accumulate(totals, name, amount)
    return _rank(totals, sum(r.revenue for r in records), limit)


def revenue_by_location(records: list[RevenueRecord], limit: Optional[int] = None) -> list[dict]:
    totals: OrderedDict = OrderedDict()
    for record in records:
        _accumulate(totals, record.location or "Unknown", record.revenue)
    return _rank(totals, sum(r.revenue for r in records), limit or len(totals))


def top_customers(records: list[RevenueRecord], limit: int = DEFAULT_RANK_LIMIT) -> list[dict]:
    totals: OrderedDict = OrderedDict()
    for record in records:
        _accumulate(totals, record.customer_name, record.revenue)
    return _rank(totals, sum(r.revenue for r in records), limit)
