from sqlalchemy import select, func, extract
from sqlalchemy.orm import Session

from dealership.db.models import Sale, utcnow
from dealership.schemas import KPIData, MonthlySalesData
from dealership.services.inventory import count_available
from dealership.services.ledger import sale_window

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def compute_kpi(db: Session, year: int | None = None, month: int | None = None) -> KPIData:
    start, end = sale_window(year if year is not None else utcnow().year, month)

    totals = db.execute(
        select(
            func.coalesce(func.sum(Sale.sale_price), 0.0).label("revenue"),
            func.coalesce(func.sum(Sale.purchase_price), 0.0).label("expenses"),
            func.count(Sale.id).label("sold"),
        ).where(Sale.sale_date >= start, Sale.sale_date < end)
    ).one()

    revenue = float(totals.revenue)
    expenses = float(totals.expenses)
    return KPIData(
        total_revenue=revenue,
        total_expenses=expenses,
        total_profit=revenue - expenses,
        total_bikes_sold=int(totals.sold),
        # point-in-time stock, deliberately outside the date window
        total_bikes_available=count_available(db),
    )


def compute_monthly_series(db: Session, year: int | None = None) -> list[MonthlySalesData]:
    start, end = sale_window(year if year is not None else utcnow().year)

    month_col = extract("month", Sale.sale_date)
    rows = db.execute(
        select(
            month_col.label("month"),
            func.coalesce(func.sum(Sale.sale_price), 0.0).label("sales"),
            func.coalesce(func.sum(Sale.purchase_price), 0.0).label("purchases"),
            func.coalesce(func.sum(Sale.profit), 0.0).label("profit"),
        )
        .where(Sale.sale_date >= start, Sale.sale_date < end)
        .group_by(month_col)
    ).all()

    series = [MonthlySalesData(month=name) for name in MONTH_NAMES]
    for r in rows:
        entry = series[int(r.month) - 1]
        entry.sales = float(r.sales)
        entry.purchases = float(r.purchases)
        entry.profit = float(r.profit)
    return series
