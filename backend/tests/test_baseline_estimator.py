"""
Tests for baseline.py (estimator) and marts.py (SQL aggregate reader).
"""

import datetime
from dataclasses import dataclass
from typing import Optional

import pytest

from app.models.marts import Cohort, DimCustomer, FactOrder, FactSpend, FactTraffic
from app.services.modeling.baseline import estimate_baseline
from app.services.modeling.marts import OrderTotals, SqlMartReader, TrafficTotals
from app.services.modeling.types import GrowthModelInput

TODAY = datetime.date(2025, 6, 30)


@dataclass
class StubMartReader:
    """In-memory MartReader returning fixed aggregates."""
    spend: float = 0.0
    orders: OrderTotals = OrderTotals(order_count=0, revenue_net=0.0, cogs=0.0)
    traffic: TrafficTotals = TrafficTotals(sessions=0.0, purchases=0.0)
    retention: Optional[float] = None
    new_customers: int = 0

    def spend_since(self, start):
        return self.spend

    def orders_since(self, start):
        return self.orders

    def traffic_since(self, start):
        return self.traffic

    def latest_cohort_retention(self):
        return self.retention

    def new_customers_since(self, start):
        return self.new_customers


# -----------------------------------------------------------------------------
# Estimator against stub aggregates
# -----------------------------------------------------------------------------

def test_empty_marts_yield_documented_defaults():
    baseline = estimate_baseline(StubMartReader(), today=TODAY)

    assert baseline == GrowthModelInput(
        monthly_budget=25000,
        target_cac=50,
        expected_cvr=0.025,
        avg_order_value=85,
        cogs_percent=0.45,
        monthly_traffic=None,
        return_rate=0.20,
        avg_orders_per_customer=1.3,
        horizon_months=6,
    )


def test_derives_every_field_from_aggregates():
    reader = StubMartReader(
        spend=90001.0,
        orders=OrderTotals(order_count=400, revenue_net=34123.45, cogs=13649.38),
        traffic=TrafficTotals(sessions=20000.0, purchases=524.0),
        retention=0.183,
        new_customers=300,
    )
    baseline = estimate_baseline(reader, today=TODAY)

    assert baseline.monthly_budget == 30000  # floor(90001 / 3)
    assert baseline.target_cac == 100.0
    assert baseline.avg_order_value == pytest.approx(85.31)
    assert baseline.cogs_percent == pytest.approx(0.4)
    assert baseline.expected_cvr == pytest.approx(0.0262)
    assert baseline.return_rate == pytest.approx(0.183)
    assert baseline.avg_orders_per_customer == pytest.approx(1.3)
    assert baseline.monthly_traffic == 20000
    assert baseline.horizon_months == 6


def test_retention_above_one_is_capped():
    baseline = estimate_baseline(StubMartReader(retention=1.7), today=TODAY)
    assert baseline.return_rate == 1.0


def test_cohort_without_retention_figure_gives_zero_return_rate():
    baseline = estimate_baseline(StubMartReader(retention=0.0), today=TODAY)
    assert baseline.return_rate == 0.0


def test_cac_defaults_when_no_new_customers():
    reader = StubMartReader(
        spend=60000.0,
        orders=OrderTotals(order_count=100, revenue_net=9000.0, cogs=4000.0),
    )
    baseline = estimate_baseline(reader, today=TODAY)

    assert baseline.monthly_budget == 20000
    assert baseline.target_cac == 50
    assert baseline.avg_orders_per_customer == 1.3


def test_orders_per_customer_has_no_minimum():
    reader = StubMartReader(
        orders=OrderTotals(order_count=10, revenue_net=900.0, cogs=400.0),
        new_customers=40,
    )
    baseline = estimate_baseline(reader, today=TODAY)
    assert baseline.avg_orders_per_customer == pytest.approx(0.3)  # 0.25 rounds half up


def test_rounding_sends_halves_up():
    reader = StubMartReader(
        spend=3000.0,
        orders=OrderTotals(order_count=8, revenue_net=81.0, cogs=5.0625),
        traffic=TrafficTotals(sessions=32.0, purchases=1.0),
        new_customers=8000,
    )
    baseline = estimate_baseline(reader, today=TODAY)

    assert baseline.monthly_budget == 1000
    assert baseline.target_cac == pytest.approx(0.13)  # 0.125
    assert baseline.avg_order_value == pytest.approx(10.13)  # 10.125
    assert baseline.cogs_percent == pytest.approx(0.063)  # 0.0625
    assert baseline.expected_cvr == pytest.approx(0.0313)  # 0.03125


def test_windows_are_passed_to_reader():
    seen = {}

    class RecordingReader(StubMartReader):
        def spend_since(self, start):
            seen["spend"] = start
            return 0.0

        def orders_since(self, start):
            seen["orders"] = start
            return self.orders

    estimate_baseline(RecordingReader(), today=TODAY, lookback_days=30, spend_lookback_days=90)

    assert seen["spend"] == datetime.date(2025, 4, 1)
    assert seen["orders"] == datetime.date(2025, 5, 31)


# -----------------------------------------------------------------------------
# SQL reader against SQLite
# -----------------------------------------------------------------------------

@pytest.fixture
def populated_db(db):
    recent = TODAY - datetime.timedelta(days=5)
    older = TODAY - datetime.timedelta(days=60)
    ancient = TODAY - datetime.timedelta(days=200)

    db.add_all([
        FactSpend(date=recent, channel="meta", spend=30000.0),
        FactSpend(date=older, channel="google_ads", spend=15000.0),
        FactSpend(date=ancient, channel="meta", spend=99999.0),  # outside 90 days
        FactOrder(order_id="o1", order_date=recent, revenue_net=120.0, cogs=48.0),
        FactOrder(order_id="o2", order_date=recent, revenue_net=80.0, cogs=32.0),
        FactOrder(order_id="o3", order_date=recent, revenue_net=100.0, cogs=40.0),
        FactOrder(order_id="o4", order_date=older, revenue_net=500.0, cogs=10.0),  # outside 30 days
        FactTraffic(date=recent, sessions=1000, purchases=30),
        FactTraffic(date=TODAY, sessions=500, purchases=15),
        FactTraffic(date=older, sessions=9999, purchases=1),
        Cohort(cohort_month=datetime.date(2025, 4, 1), cohort_size=120, d30_retention=0.25),
        Cohort(cohort_month=datetime.date(2025, 5, 1), cohort_size=90, d30_retention=0.18),
        Cohort(cohort_month=datetime.date(2025, 6, 1), cohort_size=0, d30_retention=None),
        DimCustomer(customer_id="c1", first_order_date=recent),
        DimCustomer(customer_id="c2", first_order_date=recent),
        DimCustomer(customer_id="c3", first_order_date=older),
        DimCustomer(customer_id="c4", first_order_date=None),
    ])
    db.commit()
    return db


def test_sql_reader_aggregates_within_windows(populated_db):
    reader = SqlMartReader(populated_db)
    since_30 = TODAY - datetime.timedelta(days=30)

    assert reader.spend_since(TODAY - datetime.timedelta(days=90)) == pytest.approx(45000.0)
    assert reader.orders_since(since_30) == OrderTotals(order_count=3, revenue_net=300.0, cogs=120.0)
    assert reader.traffic_since(since_30) == TrafficTotals(sessions=1500.0, purchases=45.0)
    assert reader.latest_cohort_retention() == pytest.approx(0.18)
    assert reader.new_customers_since(since_30) == 2


def test_sql_reader_on_empty_tables(db):
    reader = SqlMartReader(db)

    assert reader.spend_since(TODAY) == 0.0
    assert reader.orders_since(TODAY) == OrderTotals(order_count=0, revenue_net=0.0, cogs=0.0)
    assert reader.traffic_since(TODAY) == TrafficTotals(sessions=0.0, purchases=0.0)
    assert reader.latest_cohort_retention() is None
    assert reader.new_customers_since(TODAY) == 0


def test_baseline_from_populated_marts(populated_db):
    baseline = estimate_baseline(SqlMartReader(populated_db), today=TODAY)

    assert baseline.monthly_budget == 15000
    assert baseline.target_cac == 7500.0
    assert baseline.avg_order_value == 100.0
    assert baseline.cogs_percent == pytest.approx(0.4)
    assert baseline.expected_cvr == pytest.approx(0.03)
    assert baseline.return_rate == pytest.approx(0.18)
    assert baseline.avg_orders_per_customer == pytest.approx(1.5)
    assert baseline.monthly_traffic == 1500
