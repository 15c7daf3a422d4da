"""
marts.py — ORM Models for the Historical Marts (read-only)

Purpose:
- Map the aggregate tables produced by the ETL pipeline so the baseline
  estimator can query them:
    * fact_spend   — daily ad spend per channel
    * fact_order   — one row per order (net revenue, COGS)
    * fact_traffic — daily sessions / purchases
    * cohort       — acquisition-month cohorts with retention figures
    * dim_customer — one row per customer with first-order date

Important Design Rule:
- This backend never writes to these tables outside of tests and fixtures.
"""

from sqlalchemy import Column, Date, Float, Index, Integer, String

from app.core.database import Base


class FactSpend(Base):
    __tablename__ = "fact_spend"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    channel = Column(String, nullable=True)  # e.g., "meta", "google_ads"
    spend = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        Index("idx_fact_spend_date", "date"),
    )


class FactOrder(Base):
    __tablename__ = "fact_order"

    id = Column(Integer, primary_key=True)
    order_id = Column(String, nullable=True)
    order_date = Column(Date, nullable=False)
    revenue_net = Column(Float, nullable=False, default=0.0)
    cogs = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        Index("idx_fact_order_date", "order_date"),
    )


class FactTraffic(Base):
    __tablename__ = "fact_traffic"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    sessions = Column(Integer, nullable=False, default=0)
    purchases = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_fact_traffic_date", "date"),
    )


class Cohort(Base):
    __tablename__ = "cohort"

    id = Column(Integer, primary_key=True)
    cohort_month = Column(Date, nullable=False)  # first day of acquisition month
    cohort_size = Column(Integer, nullable=False, default=0)
    d30_retention = Column(Float, nullable=True)  # fraction, e.g. 0.22


class DimCustomer(Base):
    __tablename__ = "dim_customer"

    id = Column(Integer, primary_key=True)
    customer_id = Column(String, nullable=False, unique=True)
    first_order_date = Column(Date, nullable=True)

    __table_args__ = (
        Index("idx_dim_customer_first_order", "first_order_date"),
    )
