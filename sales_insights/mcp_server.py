from __future__ import annotations

from pathlib import Path

import anyio
from mcp.server.fastmcp import FastMCP

from sales_insights.database import TransactionStore
from sales_insights.reports import (
    category_breakdown,
    combined_report,
    list_transactions,
    price_range_histogram,
    sales_statistics,
)

server = FastMCP(name="Sales Insights", instructions="Expose sales transaction reports as MCP tools")


def _require_db(db_path: str) -> None:
    if not Path(db_path).exists():
        raise FileNotFoundError(f"Database not found: {db_path}")


async def _run_report(db_path: str, report, *args):
    _require_db(db_path)

    def _run():
        with TransactionStore(db_path) as store:
            return report(store, *args)

    return await anyio.to_thread.run_sync(_run)


@server.tool(
    name="get_transactions", description="Search transactions page by page"
)
async def get_transactions(
    db_path: str,
    page: int = 1,
    per_page: int = 10,
    search: str | None = None,
    month: str | None = None,
) -> dict:
    """Return one page of matching transactions and the total match count.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.
    month:
        Optional month name or number; matches that month in every year.
    """
    return await _run_report(db_path, list_transactions, page, per_page, search, month)


@server.tool(name="get_statistics", description="Total sales and item counts for a month")
async def get_statistics(db_path: str, month: str) -> dict:
    return await _run_report(db_path, sales_statistics, month)


@server.tool(name="get_price_ranges", description="Item counts per price range for a month")
async def get_price_ranges(db_path: str, month: str) -> list[dict]:
    return await _run_report(db_path, price_range_histogram, month)


@server.tool(name="get_category_breakdown", description="Item counts per category for a month")
async def get_category_breakdown(db_path: str, month: str) -> list[dict]:
    return await _run_report(db_path, category_breakdown, month)


@server.tool(name="get_combined_report", description="Every report for a month in one payload")
async def get_combined_report(db_path: str, month: str) -> dict:
    _require_db(db_path)
    store = await anyio.to_thread.run_sync(TransactionStore(db_path).open)
    try:
        return await combined_report(store, month)
    finally:
        await anyio.to_thread.run_sync(store.close)


def main() -> None:
    server.run()


if __name__ == "__main__":
    main()
