"""Dashboard schemas"""

from datetime import date

from pydantic import BaseModel


class RevenueWindow(BaseModel):
    start: date
    end: date
    current: float
    previous: float
    percent_change: float


class RevenueSummary(BaseModel):
    week: RevenueWindow
    month: RevenueWindow
    quarter: RevenueWindow
    record_count: int
    skipped: int


class RankEntry(BaseModel):
    name: str
    revenue: float
    count: int
    share: float


class Rankings(BaseModel):
    total_revenue: float
    services: list[RankEntry]
    add_ons: list[RankEntry]
    products: list[RankEntry]
    locations: list[RankEntry]
    customers: list[RankEntry]
    record_count: int
    skipped: int
