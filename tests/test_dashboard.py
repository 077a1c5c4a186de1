from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from farrier.domain.dashboard import aggregation
from farrier.domain.dashboard.service import DashboardService
from farrier.models import SHOEING_CANCELLED, SHOEING_COMPLETED

TODAY = date(2024, 5, 15)


def row(day, base="100", front=None, hind=None, **extra):
    fields = {
        "date_of_service": day,
        "cost_of_service": base,
        "cost_of_front_add_ons": front,
        "cost_of_hind_add_ons": hind,
        "location": "Oak Hill",
        "base_service": "Full Set",
        "front_add_ons": None,
        "hind_add_ons": None,
        "customer_name": None,
    }
    fields.update(extra)
    return SimpleNamespace(**fields)


def test_weekly_window_counts_only_last_seven_days():
    records, skipped = aggregation.collect(
        [row(TODAY, base="$100"), row(TODAY - timedelta(days=8), base="$50")]
    )

    windows = aggregation.revenue_windows(records, TODAY)

    assert skipped == 0
    assert windows["week"]["current"] == 100
    assert windows["week"]["previous"] == 50
    assert windows["week"]["percent_change"] == 100.0


def test_window_edges_are_inclusive():
    records, _ = aggregation.collect(
        [row(TODAY - timedelta(days=6), base="10"), row(TODAY - timedelta(days=7), base="20")]
    )
    windows = aggregation.revenue_windows(records, TODAY)
    assert windows["week"]["current"] == 10
    assert windows["week"]["previous"] == 20


def test_revenue_includes_add_on_costs():
    records, _ = aggregation.collect([row(TODAY, base="100", front="$25", hind="15.50")])
    assert aggregation.revenue_windows(records, TODAY)["month"]["current"] == 140.5


def test_records_without_date_or_base_cost_are_skipped():
    records, skipped = aggregation.collect(
        [row(None), row(TODAY, base="call for price"), row(TODAY, base=""), row(TODAY, base="80")]
    )
    assert skipped == 3
    assert [r.revenue for r in records] == [80.0]


def test_percent_change_is_zero_without_previous_revenue():
    assert aggregation.percent_change(250, 0) == 0.0
    assert aggregation.percent_change(50, 100) == -50.0


def test_previous_month_span_is_clamped():
    start, end, prev_start, prev_end = aggregation.window_bounds(date(2024, 3, 31))["month"]
    assert (start, end) == (date(2024, 3, 1), date(2024, 3, 31))
    assert (prev_start, prev_end) == (date(2024, 2, 1), date(2024, 2, 29))


def test_previous_month_wraps_year():
    _, _, prev_start, prev_end = aggregation.window_bounds(date(2024, 1, 10))["month"]
    assert (prev_start, prev_end) == (date(2023, 12, 1), date(2023, 12, 10))


def test_quarter_windows():
    start, end, prev_start, prev_end = aggregation.window_bounds(date(2024, 5, 31))["quarter"]
    assert start == date(2024, 4, 1)
    assert end == date(2024, 5, 31)
    assert prev_start == date(2024, 1, 1)
    assert prev_end == date(2024, 3, 1)

    _, _, prev_start, prev_end = aggregation.window_bounds(date(2024, 6, 30))["quarter"]
    assert (prev_start, prev_end) == (date(2024, 1, 1), date(2024, 3, 31))


def test_add_on_revenue_is_split_across_names():
    records, _ = aggregation.collect(
        [
            row(TODAY, base="100", front="30", hind="30", front_add_ons="Pads, Clips", hind_add_ons="Pads"),
            row(TODAY, base="90", base_service="Reset", front="10", front_add_ons="Clips"),
        ]
    )

    add_ons = aggregation.top_add_ons(records)

    assert add_ons[0] == {"name": "Pads", "revenue": 40.0, "count": 2, "share": 15.38}
    assert add_ons[1]["name"] == "Clips"
    assert add_ons[1]["revenue"] == 30.0


def test_rankings_are_limited_and_sorted():
    records, _ = aggregation.collect(
        [row(TODAY, base=str(10 * i), base_service=f"Service {i}") for i in range(1, 8)]
    )

    top = aggregation.top_services(records, limit=5)

    assert [entry["name"] for entry in top] == [f"Service {i}" for i in (7, 6, 5, 4, 3)]


def test_products_combine_services_and_add_ons():
    records, _ = aggregation.collect(
        [row(TODAY, base="100", front="60", front_add_ons="Pads")]
    )
    products = {entry["name"]: entry["revenue"] for entry in aggregation.top_products(records)}
    assert products == {"Full Set": 100.0, "Pads": 60.0}


def test_customers_and_locations():
    records, _ = aggregation.collect(
        [
            row(TODAY, base="100", customer_name="Acme", location="Oak Hill"),
            row(TODAY, base="50", customer_name="Acme", location="River Farm"),
            row(TODAY, base="25", location=None),
        ]
    )

    customers = aggregation.top_customers(records)
    assert customers == [{"name": "Acme", "revenue": 150.0, "count": 2, "share": 85.71}]

    locations = {entry["name"]: entry["revenue"] for entry in aggregation.revenue_by_location(records)}
    assert locations == {"Oak Hill": 100.0, "River Farm": 50.0, "Unknown": 25.0}


def test_service_excludes_cancelled_records(db, make_horse, make_shoeing):
    horse = make_horse()
    make_shoeing(horse=horse, total_cost="100", service_date=TODAY, status=SHOEING_COMPLETED)
    make_shoeing(horse=horse, total_cost="70", service_date=TODAY, status=SHOEING_CANCELLED)
    make_shoeing(horse=horse, total_cost="", service_date=TODAY)

    summary = DashboardService(db).revenue_summary(today=TODAY)

    assert summary["week"]["current"] == 100
    assert summary["record_count"] == 1
    assert summary["skipped"] == 1


@pytest.mark.asyncio
async def test_rankings_endpoint_filters_by_range(client, make_horse, make_shoeing):
    horse = make_horse()
    make_shoeing(horse=horse, total_cost="100", service_date=date(2024, 4, 1), customer_name="Acme")
    make_shoeing(horse=horse, total_cost="40", service_date=date(2024, 5, 1), customer_name="Beta")

    response = await client.get("/dashboard/rankings", params={"from": "2024-04-15", "to": "2024-05-31"})

    assert response.status_code == 200
    data = response.json()
    assert data["total_revenue"] == 40.0
    assert [c["name"] for c in data["customers"]] == ["Beta"]
    assert data["services"][0]["share"] == 100.0


@pytest.mark.asyncio
async def test_rankings_reject_inverted_range(client):
    response = await client.get("/dashboard/rankings", params={"from": "2024-06-01", "to": "2024-05-01"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_revenue_endpoint(client):
    response = await client.get("/dashboard/revenue")
    assert response.status_code == 200
    data = response.json()
    assert data["week"]["current"] == 0
    assert data["week"]["percent_change"] == 0


def test_non_finite_base_cost_is_skipped():
    records, skipped = aggregation.collect([row(TODAY, base="nan"), row(TODAY, base="1e999"), row(TODAY, base="60")])

    assert skipped == 2
    assert aggregation.revenue_windows(records, TODAY)["week"]["current"] == 60
