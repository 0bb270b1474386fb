from __future__ import annotations

from typing import Dict, List

import anyio
import pandas as pd

from sales_insights.core.filters import TransactionFilter, parse_month
from sales_insights.database import TransactionStore
from sales_insights.utils import coerce_positive_int

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10

# Upper bounds are inclusive; the final band has no upper bound.
PRICE_BANDS: List[tuple[str, float]] = [
    ("0-100", 100),
    ("101-200", 200),
    ("201-300", 300),
    ("301-400", 400),
    ("401-500", 500),
    ("501-600", 600),
    ("601-700", 700),
    ("701-800", 800),
    ("801-900", 900),
    ("901-above", float("inf")),
]


class ReportError(RuntimeError):
    """Raised when a composite report cannot be assembled in full."""


def list_transactions(
    store: TransactionStore,
    page=DEFAULT_PAGE,
    per_page=DEFAULT_PER_PAGE,
    search: str | None = None,
    month: str | int | None = None,
) -> Dict[str, object]:
    """Return one page of matching records plus the total match count.

    Parameters
    ----------
    store:
        Open record store to query.
    page, per_page:
        1-based page number and page size. Missing, non-numeric or
        non-positive values fall back to the defaults.
    search:
        Optional case-insensitive substring matched against title,
        description and price.
    month:
        Optional month selector; an empty value disables month filtering.
    """
    page = coerce_positive_int(page, DEFAULT_PAGE)
    per_page = coerce_positive_int(per_page, DEFAULT_PER_PAGE)
    month_number = None
    if month is not None and str(month).strip():
        month_number = parse_month(month)

    tx_filter = TransactionFilter(month=month_number, search=search or None)
    records = store.fetch(tx_filter, offset=(page - 1) * per_page, limit=per_page)
    total = store.count(tx_filter)
    return {
        "records": [tx.to_dict() for tx in records],
        "total": total,
        "page": page,
        "perPage": per_page,
    }


def sales_statistics(store: TransactionStore, month) -> Dict[str, object]:
    """Total sales and in-month / out-of-month item counts for *month*."""
    month_number = parse_month(month)
    total_sales, sold, not_sold = store.month_summary(month_number)
    return {
        "totalSales": round(total_sales, 2),
        "totalSoldItems": sold,
        "totalNotSoldItems": not_sold,
    }


def bucket_prices(prices) -> List[Dict[str, object]]:
    """Count prices per fixed band, returning every band in order."""
    labels = [label for label, _ in PRICE_BANDS]
    edges = [float("-inf")] + [upper for _, upper in PRICE_BANDS]
    bands = pd.cut(pd.Series(prices, dtype="float64"), bins=edges, labels=labels, right=True)
    counts = bands.value_counts(sort=False).to_dict()
    return [{"range": label, "count": int(counts.get(label, 0))} for label in labels]


def price_range_histogram(store: TransactionStore, month) -> List[Dict[str, object]]:
    month_number = parse_month(month)
    return bucket_prices(store.prices(TransactionFilter(month=month_number)))


def category_breakdown(store: TransactionStore, month) -> List[Dict[str, object]]:
    month_number = parse_month(month)
    return store.count_by_category(TransactionFilter(month=month_number))


def _month_records(store: TransactionStore, month_number: int) -> List[Dict[str, object]]:
    return [tx.to_dict() for tx in store.fetch(TransactionFilter(month=month_number))]


async def combined_report(store: TransactionStore, month) -> Dict[str, object]:
    """Assemble every report for *month* into one payload.

    The sub-reports run concurrently in worker threads. If any of them fails
    the others are cancelled and :class:`ReportError` is raised; a partial
    payload is never returned.
    """
    month_number = parse_month(month)
    results: Dict[str, object] = {}

    async def run(key, func):
        results[key] = await anyio.to_thread.run_sync(func, store, month_number)

    try:
        async with anyio.create_task_group() as tg:
            tg.start_soon(run, "records", _month_records)
            tg.start_soon(run, "statistics", sales_statistics)
            tg.start_soon(run, "priceRanges", price_range_histogram)
            tg.start_soon(run, "categories", category_breakdown)
    except Exception as exc:
        raise ReportError(f"Combined report for month {month_number} failed") from exc

    statistics = results["statistics"]
    return {
        "records": results["records"],
        "totalSales": statistics["totalSales"],
        "totalSoldItems": statistics["totalSoldItems"],
        "totalNotSoldItems": statistics["totalNotSoldItems"],
        "priceRanges": results["priceRanges"],
        "categories": results["categories"],
    }
