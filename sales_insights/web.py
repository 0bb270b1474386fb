from __future__ import annotations

import argparse
import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

import anyio
from dotenv import load_dotenv

from sales_insights.config import load_config
from sales_insights.core.filters import ValidationError
from sales_insights.database import TransactionStore
from sales_insights.reports import (
    DEFAULT_PER_PAGE,
    category_breakdown,
    combined_report,
    list_transactions,
    price_range_histogram,
    sales_statistics,
)
from sales_insights.seed import DEFAULT_SEED_URL, fetch_seed, initialize_store
from sales_insights.utils import coerce_positive_int

logger = logging.getLogger(__name__)


def _json_response(handler: BaseHTTPRequestHandler, payload: Any, status: int = 200) -> None:
    body = json.dumps(payload).encode("utf-8")
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json")
    handler.send_header("Cache-Control", "no-store")
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


def _get_param(query: dict[str, list[str]], key: str) -> str | None:
    values = query.get(key)
    return values[0] if values else None


class SalesInsightsHandler(BaseHTTPRequestHandler):
    store: TransactionStore | None = None
    seed_url: str = DEFAULT_SEED_URL
    per_page: int = DEFAULT_PER_PAGE

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        query = parse_qs(parsed.query)
        path = parsed.path
        month = _get_param(query, "month")

        if path == "/api/transactions":
            self._run(
                "transactions",
                lambda: list_transactions(
                    self.store,
                    page=_get_param(query, "page"),
                    per_page=coerce_positive_int(
                        _get_param(query, "perPage") or _get_param(query, "pageSize"),
                        self.per_page,
                    ),
                    search=_get_param(query, "search"),
                    month=month,
                ),
            )
            return
        if path == "/api/statistics":
            self._run("statistics", lambda: sales_statistics(self.store, month))
            return
        if path == "/api/bar-chart":
            self._run("bar chart data", lambda: price_range_histogram(self.store, month))
            return
        if path == "/api/pie-chart":
            self._run("pie chart data", lambda: category_breakdown(self.store, month))
            return
        if path == "/api/combined":
            self._run("combined data", lambda: anyio.run(combined_report, self.store, month))
            return

        _json_response(self, {"message": "not found"}, status=404)

    def do_POST(self) -> None:
        path = urlparse(self.path).path
        if path != "/api/initialize":
            _json_response(self, {"message": "not found"}, status=404)
            return
        try:
            stored = initialize_store(self.store, fetch_seed(self.seed_url))
        except Exception:
            logger.exception("Error initializing database")
            _json_response(self, {"message": "Error initializing database"}, status=500)
            return
        _json_response(self, {"message": "Database initialized successfully", "stored": stored})

    def _run(self, label: str, compute) -> None:
        try:
            payload = compute()
        except ValidationError as exc:
            _json_response(self, {"message": str(exc)}, status=400)
            return
        except Exception:
            logger.exception("Error fetching %s", label)
            _json_response(self, {"message": f"Error fetching {label}"}, status=500)
            return
        _json_response(self, payload)


def make_server(
    store: TransactionStore,
    host: str = "127.0.0.1",
    port: int = 5000,
    seed_url: str = DEFAULT_SEED_URL,
    per_page: int = DEFAULT_PER_PAGE,
) -> ThreadingHTTPServer:
    handler = type(
        "SalesInsightsHandler",
        (SalesInsightsHandler,),
        {"store": store, "seed_url": seed_url, "per_page": per_page},
    )
    return ThreadingHTTPServer((host, port), handler)


def serve(store: TransactionStore, host: str, port: int, seed_url: str, per_page: int) -> None:
    """Serve the JSON API until interrupted, then release the store."""
    server = make_server(store, host, port, seed_url, per_page)
    logger.info("Sales insights API running at http://%s:%s (db: %s)", host, port, store.db_path)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
        store.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Sales insights JSON API")
    parser.add_argument("--config", dest="config_path", default=None, help="Path to config.yaml")
    parser.add_argument("--db", dest="db_path", default=None, help="Path to SQLite database")
    parser.add_argument("--host", default=None, help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (default: 5000)")
    parser.add_argument(
        "--env-file",
        dest="env_file",
        default=None,
        help="Optional .env file with SALES_INSIGHTS_* overrides",
    )
    args = parser.parse_args()

    if args.env_file:
        load_dotenv(args.env_file)

    cfg = load_config(args.config_path)
    logging.basicConfig(level=str(cfg["log_level"]).upper())
    store = TransactionStore(args.db_path or cfg["db_path"]).open()
    serve(
        store,
        args.host or cfg["host"],
        args.port or int(cfg["port"]),
        cfg["seed_url"],
        int(cfg["per_page"]),
    )


if __name__ == "__main__":
    main()
