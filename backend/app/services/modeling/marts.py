"""
marts.py — Read-Only Aggregate Queries over the Historical Marts

Purpose:
- Give the baseline estimator the handful of aggregates it needs without
  tying it to SQLAlchemy:
    * total spend since a date
    * order count, net revenue and COGS since a date
    * sessions and purchases since a date
    * 30-day retention of the most recent non-empty cohort
    * number of customers whose first order falls on/after a date

`MartReader` is the interface; `SqlMartReader` implements it against the
ORM models in app.models.marts. Tests may pass any object with the same
methods.

A SQLAlchemy Session is not thread-safe, so the queries are issued one
after another on the request's session.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.marts import Cohort, DimCustomer, FactOrder, FactSpend, FactTraffic


@dataclass(frozen=True)
class OrderTotals:
    order_count: int
    revenue_net: float
    cogs: float


@dataclass(frozen=True)
class TrafficTotals:
    sessions: float
    purchases: float


class MartReader(Protocol):
    def spend_since(self, start: datetime.date) -> float: ...

    def orders_since(self, start: datetime.date) -> OrderTotals: ...

    def traffic_since(self, start: datetime.date) -> TrafficTotals: ...

    def latest_cohort_retention(self) -> Optional[float]: ...

    def new_customers_since(self, start: datetime.date) -> int: ...


class SqlMartReader:
    """MartReader backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def spend_since(self, start: datetime.date) -> float:
        total = (
            self.db.query(func.coalesce(func.sum(FactSpend.spend), 0.0))
            .filter(FactSpend.date >= start)
            .scalar()
        )
        return float(total or 0.0)

    def orders_since(self, start: datetime.date) -> OrderTotals:
        count, revenue_net, cogs = (
            self.db.query(
                func.count(FactOrder.id),
                func.coalesce(func.sum(FactOrder.revenue_net), 0.0),
                func.coalesce(func.sum(FactOrder.cogs), 0.0),
            )
            .filter(FactOrder.order_date >= start)
            .one()
        )
        return OrderTotals(
            order_count=int(count or 0),
            revenue_net=float(revenue_net or 0.0),
            cogs=float(cogs or 0.0),
        )

    def traffic_since(self, start: datetime.date) -> TrafficTotals:
        sessions, purchases = (
            self.db.query(
                func.coalesce(func.sum(FactTraffic.sessions), 0),
                func.coalesce(func.sum(FactTraffic.purchases), 0),
            )
            .filter(FactTraffic.date >= start)
            .one()
        )
        return TrafficTotals(sessions=float(sessions or 0), purchases=float(purchases or 0))

    def latest_cohort_retention(self) -> Optional[float]:
        """
        d30 retention of the newest cohort with a positive size.

        Returns None when no such cohort exists, 0.0 when it has no
        retention figure yet.
        """
        cohort = (
            self.db.query(Cohort)
            .filter(Cohort.cohort_size > 0)
            .order_by(Cohort.cohort_month.desc())
            .first()
        )
        if cohort is None:
            return None
        return float(cohort.d30_retention or 0.0)

    def new_customers_since(self, start: datetime.date) -> int:
        count = (
            self.db.query(func.count(DimCustomer.id))
            .filter(DimCustomer.first_order_date >= start)
            .scalar()
        )
        return int(count or 0)
